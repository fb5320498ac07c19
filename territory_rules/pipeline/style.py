"""Build color and opacity expression trees from a compiled rule set.

The trees encode the same three tiers as :func:`classifier.classify`:
an exact-code table falls through to the letter-continuation case list, which
falls through to the any-continuation case list, which falls through to the
unmatched value.
"""

from __future__ import annotations

from typing import Callable

from territory_rules.common.config_loader import StyleConfig, default_style_config
from territory_rules.common.constants import LETTERS
from territory_rules.pipeline.expressions import (
    AllOf,
    AnyOf,
    Case,
    ExactMatch,
    Expr,
    LengthEquals,
    Literal,
    NextCharIn,
    PrefixEquals,
)
from territory_rules.pipeline.models import RuleSet


def letter_continuation_condition(prefix: str) -> Expr:
    return AllOf(
        (
            PrefixEquals(prefix),
            AnyOf((LengthEquals(len(prefix)), NextCharIn(len(prefix), LETTERS))),
        )
    )


def any_continuation_condition(prefix: str) -> Expr:
    return PrefixEquals(prefix)


def _tiered(rule_set: RuleSet, value_for: Callable[[str], Expr], unmatched: Expr) -> Expr:
    expr = unmatched
    if rule_set.any_rules:
        expr = Case(
            tuple((any_continuation_condition(rule.prefix), value_for(rule.territory_id)) for rule in rule_set.any_rules),
            expr,
        )
    if rule_set.letter_rules:
        expr = Case(
            tuple(
                (letter_continuation_condition(rule.prefix), value_for(rule.territory_id))
                for rule in rule_set.letter_rules
            ),
            expr,
        )
    if rule_set.exact:
        expr = ExactMatch(
            tuple((code, value_for(territory_id)) for code, territory_id in rule_set.exact.items()),
            expr,
        )
    return expr


def build_color_expression(rule_set: RuleSet, style: StyleConfig | None = None) -> Expr:
    style = style or default_style_config()

    def color_for(territory_id: str) -> Expr:
        territory = rule_set.territories.get(territory_id)
        if territory is None or not territory.color:
            return Literal(style.fallback_color)
        return Literal(territory.color)

    return _tiered(rule_set, color_for, Literal(style.unmatched_color))


def build_taken_expression(rule_set: RuleSet) -> Expr:
    def taken_for(territory_id: str) -> Expr:
        territory = rule_set.territories.get(territory_id)
        return Literal(territory is not None and territory.is_taken)

    return _tiered(rule_set, taken_for, Literal(False))


def build_opacity_expression(rule_set: RuleSet, style: StyleConfig | None = None) -> Expr:
    style = style or default_style_config()
    return Case(
        ((build_taken_expression(rule_set), Literal(style.dimmed_opacity)),),
        Literal(style.normal_opacity),
    )
