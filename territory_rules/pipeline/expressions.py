"""A small tagged expression tree for data-driven styling.

Trees are built by :mod:`territory_rules.pipeline.style` and translated for a
renderer by :mod:`territory_rules.pipeline.maplibre`. :func:`evaluate` runs a
tree directly against one code.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

Value = Union[str, float, bool]


@dataclass(frozen=True)
class CodeRef:
    """The feature's code, upper-cased."""


@dataclass(frozen=True)
class Literal:
    value: Value


@dataclass(frozen=True)
class ExactMatch:
    """Look the code up in a table of exact codes, else fall through."""

    table: tuple[tuple[str, "Expr"], ...]
    fallback: "Expr"


@dataclass(frozen=True)
class Case:
    """Ordered conditional list; the first true condition wins."""

    branches: tuple[tuple["Expr", "Expr"], ...]
    fallback: "Expr"


@dataclass(frozen=True)
class PrefixEquals:
    prefix: str


@dataclass(frozen=True)
class LengthEquals:
    length: int


@dataclass(frozen=True)
class NextCharIn:
    """The single character at ``offset`` is one of ``letters``."""

    offset: int
    letters: str


@dataclass(frozen=True)
class AllOf:
    conditions: tuple["Expr", ...]


@dataclass(frozen=True)
class AnyOf:
    conditions: tuple["Expr", ...]


Expr = Union[CodeRef, Literal, ExactMatch, Case, PrefixEquals, LengthEquals, NextCharIn, AllOf, AnyOf]


def evaluate(expr: Expr, code: str):
    code = code.upper()
    return _evaluate(expr, code)


def _evaluate(expr: Expr, code: str):
    if isinstance(expr, Literal):
        return expr.value
    if isinstance(expr, CodeRef):
        return code
    if isinstance(expr, ExactMatch):
        for label, output in expr.table:
            if label == code:
                return _evaluate(output, code)
        return _evaluate(expr.fallback, code)
    if isinstance(expr, Case):
        for condition, output in expr.branches:
            if _evaluate(condition, code) is True:
                return _evaluate(output, code)
        return _evaluate(expr.fallback, code)
    if isinstance(expr, PrefixEquals):
        return code[: len(expr.prefix)] == expr.prefix
    if isinstance(expr, LengthEquals):
        return len(code) == expr.length
    if isinstance(expr, NextCharIn):
        next_char = code[expr.offset : expr.offset + 1]
        return next_char != "" and next_char in expr.letters
    if isinstance(expr, AllOf):
        return all(_evaluate(condition, code) is True for condition in expr.conditions)
    if isinstance(expr, AnyOf):
        return any(_evaluate(condition, code) is True for condition in expr.conditions)
    raise TypeError(f"Unsupported expression node: {type(expr).__name__}")
