"""Translate expression trees into MapLibre style-spec expressions."""

from __future__ import annotations

from typing import Any

from territory_rules.common.config_loader import StyleConfig, default_style_config
from territory_rules.pipeline.expressions import (
    AllOf,
    AnyOf,
    Case,
    CodeRef,
    ExactMatch,
    Expr,
    LengthEquals,
    Literal,
    NextCharIn,
    PrefixEquals,
)


def code_expression(code_property: str) -> list:
    return ["upcase", ["get", code_property]]


def to_maplibre(expr: Expr, code_property: str = "name") -> Any:
    code = code_expression(code_property)

    def convert(node: Expr) -> Any:
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, CodeRef):
            return code
        if isinstance(node, ExactMatch):
            if not node.table:
                return convert(node.fallback)
            out: list = ["match", code]
            for label, output in node.table:
                out.extend([label, convert(output)])
            out.append(convert(node.fallback))
            return out
        if isinstance(node, Case):
            if not node.branches:
                return convert(node.fallback)
            out = ["case"]
            for condition, output in node.branches:
                out.extend([convert(condition), convert(output)])
            out.append(convert(node.fallback))
            return out
        if isinstance(node, PrefixEquals):
            return ["==", ["slice", code, 0, len(node.prefix)], node.prefix]
        if isinstance(node, LengthEquals):
            return ["==", ["length", code], node.length]
        if isinstance(node, NextCharIn):
            return ["in", ["slice", code, node.offset, node.offset + 1], ["literal", list(node.letters)]]
        if isinstance(node, AllOf):
            return ["all", *(convert(condition) for condition in node.conditions)]
        if isinstance(node, AnyOf):
            return ["any", *(convert(condition) for condition in node.conditions)]
        raise TypeError(f"Unsupported expression node: {type(node).__name__}")

    return convert(expr)


def paint_properties(color: Expr | None, opacity: Expr | None, style: StyleConfig | None = None) -> dict[str, Any]:
    """Fill paint for postcode layers; un-styled grey when no rules are loaded."""
    style = style or default_style_config()
    return {
        "fill-color": style.base_color if color is None else to_maplibre(color, style.code_property),
        "fill-opacity": style.normal_opacity if opacity is None else to_maplibre(opacity, style.code_property),
    }
