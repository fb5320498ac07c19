from pathlib import Path

import pytest

from territory_rules.common.config_loader import StyleConfig
from territory_rules.common.constants import DIMMED_OPACITY, NORMAL_OPACITY, UNMATCHED_COLOR
from territory_rules.pipeline.classifier import classify
from territory_rules.pipeline.compiler import load_rule_set
from territory_rules.pipeline.expressions import Case, ExactMatch, Literal, evaluate
from territory_rules.pipeline.models import RuleSet
from territory_rules.pipeline.style import (
    build_color_expression,
    build_opacity_expression,
    build_taken_expression,
)

FIXTURE = Path("tests/fixtures/territories_semicolon.csv")

CORPUS = [
    "W1", "W1A", "W1B", "W1D", "W1AB", "W12", "W", "w1c",
    "WC2", "WC2H", "WC1", "WC",
    "SW1A", "SW1", "SW1AA",
    "EC", "EC1", "EC1A", "EC12", "EC4M", "E1", "E",
    "N1", "N1C", "N1P", "N17", "N", "NW1",
    "SE22", "", "1", "Z9",
]


@pytest.fixture
def rule_set():
    return load_rule_set(FIXTURE.read_text(encoding="utf-8"))


@pytest.mark.parametrize("code", CORPUS)
def test_color_expression_agrees_with_classifier(rule_set, code):
    territory_id = classify(rule_set, code)
    expected = UNMATCHED_COLOR if territory_id is None else rule_set.territories[territory_id].color
    assert evaluate(build_color_expression(rule_set), code) == expected


@pytest.mark.parametrize("code", CORPUS)
def test_opacity_expression_agrees_with_classifier(rule_set, code):
    territory_id = classify(rule_set, code)
    taken = territory_id is not None and rule_set.territories[territory_id].is_taken
    assert evaluate(build_taken_expression(rule_set), code) is taken
    expected = DIMMED_OPACITY if taken else NORMAL_OPACITY
    assert evaluate(build_opacity_expression(rule_set), code) == expected


def test_tiers_nest_exact_then_letter_then_any(rule_set):
    expr = build_color_expression(rule_set)
    assert isinstance(expr, ExactMatch)
    assert [label for label, _ in expr.table] == ["SW1A", "W1D", "N1", "N1C"]
    letter = expr.fallback
    assert isinstance(letter, Case)
    assert len(letter.branches) == 3
    any_tier = letter.fallback
    assert isinstance(any_tier, Case)
    assert len(any_tier.branches) == 3
    assert any_tier.fallback == Literal(UNMATCHED_COLOR)


def test_missing_tiers_are_omitted():
    rule_set = load_rule_set("id,postcodes\nT1,EC1*\n")
    expr = build_color_expression(rule_set)
    assert isinstance(expr, Case)
    assert expr.fallback == Literal(UNMATCHED_COLOR)


def test_empty_rule_set_yields_default_literals():
    style = StyleConfig(unmatched_color="#123456", normal_opacity=0.5, dimmed_opacity=0.1)
    assert build_color_expression(RuleSet(), style) == Literal("#123456")
    assert evaluate(build_opacity_expression(RuleSet(), style), "W1") == 0.5


def test_style_overrides_are_used(rule_set):
    style = StyleConfig(unmatched_color="#000000", dimmed_opacity=0.1, normal_opacity=0.9)
    assert evaluate(build_color_expression(rule_set, style), "SE22") == "#000000"
    assert evaluate(build_opacity_expression(rule_set, style), "EC1A") == 0.1
    assert evaluate(build_opacity_expression(rule_set, style), "W1B") == 0.9
