from pathlib import Path

import pytest

from territory_rules.cli import parse_args, run_command
from territory_rules.pipeline.classifier import classify
from territory_rules.pipeline.compiler import load_rule_set
from territory_rules.pipeline.style import build_color_expression, build_opacity_expression

FIXTURE = Path("tests/fixtures/territories_semicolon.csv")
CODES = ["W1", "W1A", "W1D", "W12", "WC2H", "SW1A", "EC1A", "EC4", "N1", "N1P", "N17", "SE22"]


@pytest.mark.regression
def test_compiling_same_text_twice_gives_identical_results():
    text = FIXTURE.read_text(encoding="utf-8")
    first = load_rule_set(text)
    second = load_rule_set(text)

    assert first is not second
    assert [classify(first, code) for code in CODES] == [classify(second, code) for code in CODES]
    assert build_color_expression(first) == build_color_expression(second)
    assert build_opacity_expression(first) == build_opacity_expression(second)


@pytest.mark.regression
def test_paint_json_is_byte_stable_for_same_inputs(tmp_path: Path):
    outputs = []
    for name in ("first", "second"):
        out = tmp_path / name / "paint.json"
        args = parse_args(["style", str(FIXTURE), "--config-dir", "config", "--out", str(out)])
        assert run_command(args) == 0
        outputs.append(out.read_bytes())

    assert outputs[0] == outputs[1]
