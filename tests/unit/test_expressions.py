import pytest

from territory_rules.pipeline.expressions import (
    AllOf,
    AnyOf,
    Case,
    CodeRef,
    ExactMatch,
    LengthEquals,
    Literal,
    NextCharIn,
    PrefixEquals,
    evaluate,
)


def test_leaf_nodes():
    assert evaluate(Literal("#fff"), "w1") == "#fff"
    assert evaluate(CodeRef(), "w1a") == "W1A"
    assert evaluate(PrefixEquals("W1"), "w1a") is True
    assert evaluate(PrefixEquals("W1"), "W") is False
    assert evaluate(LengthEquals(2), "W1") is True
    assert evaluate(NextCharIn(2, "AB"), "W1B") is True
    assert evaluate(NextCharIn(2, "AB"), "W1C") is False
    assert evaluate(NextCharIn(2, "AB"), "W1") is False


def test_exact_match_falls_through_to_fallback():
    expr = ExactMatch((("W1", Literal("a")), ("N1", Literal("b"))), Literal("z"))
    assert evaluate(expr, "n1") == "b"
    assert evaluate(expr, "E1") == "z"


def test_case_takes_first_true_branch():
    expr = Case(
        (
            (PrefixEquals("E"), Literal("first")),
            (PrefixEquals("EC"), Literal("second")),
        ),
        Literal("none"),
    )
    assert evaluate(expr, "EC1") == "first"
    assert evaluate(expr, "N1") == "none"


def test_case_condition_may_be_a_nested_boolean_tree():
    taken = ExactMatch((("W1", Literal(True)),), Literal(False))
    expr = Case(((taken, Literal(0.28)),), Literal(0.68))
    assert evaluate(expr, "W1") == 0.28
    assert evaluate(expr, "W2") == 0.68


def test_all_and_any():
    expr = AllOf((PrefixEquals("W1"), AnyOf((LengthEquals(2), NextCharIn(2, "ABC")))))
    assert evaluate(expr, "W1") is True
    assert evaluate(expr, "W1A") is True
    assert evaluate(expr, "W12") is False


def test_unknown_node_raises():
    with pytest.raises(TypeError):
        evaluate(object(), "W1")
