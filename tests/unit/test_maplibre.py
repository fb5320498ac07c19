from territory_rules.common.config_loader import StyleConfig
from territory_rules.pipeline.compiler import load_rule_set
from territory_rules.pipeline.expressions import Case, Literal, NextCharIn
from territory_rules.pipeline.maplibre import paint_properties, to_maplibre
from territory_rules.pipeline.style import build_color_expression, build_opacity_expression

CODE_U = ["upcase", ["get", "name"]]


def test_color_expression_translates_to_match_and_case():
    rule_set = load_rule_set('id,postcodes,status\nT1,"SE22|W1+",available\nT2,EC1*,taken\n')
    color = to_maplibre(build_color_expression(rule_set))

    assert color[:4] == ["match", CODE_U, "SE22", "#4e79a7"]
    letter = color[4]
    assert letter[0] == "case"
    assert letter[1] == [
        "all",
        ["==", ["slice", CODE_U, 0, 2], "W1"],
        [
            "any",
            ["==", ["length", CODE_U], 2],
            ["in", ["slice", CODE_U, 2, 3], ["literal", list("ABCDEFGHIJKLMNOPQRSTUVWXYZ")]],
        ],
    ]
    assert letter[2] == "#4e79a7"
    assert letter[3] == ["case", ["==", ["slice", CODE_U, 0, 3], "EC1"], "#f28e2b", "#dddddd"]


def test_opacity_expression_wraps_taken_tree():
    rule_set = load_rule_set("id,postcodes,status\nT2,EC1*,taken\n")
    opacity = to_maplibre(build_opacity_expression(rule_set), code_property="district")
    code = ["upcase", ["get", "district"]]
    assert opacity == [
        "case",
        ["case", ["==", ["slice", code, 0, 3], "EC1"], True, False],
        0.28,
        0.68,
    ]


def test_empty_branches_collapse_to_fallback():
    assert to_maplibre(Case((), Literal("#dddddd"))) == "#dddddd"
    assert to_maplibre(NextCharIn(1, "AB")) == ["in", ["slice", CODE_U, 1, 2], ["literal", ["A", "B"]]]


def test_paint_properties_default_to_base_paint_without_rules():
    style = StyleConfig(base_color="#cccccc", normal_opacity=0.68)
    assert paint_properties(None, None, style) == {"fill-color": "#cccccc", "fill-opacity": 0.68}


def test_paint_properties_use_style_code_property():
    rule_set = load_rule_set("id,postcodes\nT1,N1\n")
    style = StyleConfig(code_property="pcd")
    paint = paint_properties(build_color_expression(rule_set, style), build_opacity_expression(rule_set, style), style)
    assert paint["fill-color"][1] == ["upcase", ["get", "pcd"]]
    assert paint["fill-opacity"][0] == "case"
