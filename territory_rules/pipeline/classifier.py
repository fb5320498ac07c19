"""Resolve postcode district codes to territories.

Precedence is fixed and evaluated top-down, first match wins:

1. exact codes,
2. letter-continuation prefixes (``W1+``: ``W1`` itself or ``W1`` followed by
   a letter), in declaration order,
3. any-continuation prefixes (``EC1*``), in declaration order.

There is deliberately no longest-prefix rule inside a tier; the first declared
rule owns an ambiguous code.
"""

from __future__ import annotations

from territory_rules.common.constants import LETTERS
from territory_rules.pipeline.models import PrefixRule, RuleSet, Territory


def normalise_code(code: str) -> str:
    return code.upper()


def matches_letter_continuation(prefix: str, code: str) -> bool:
    if not code.startswith(prefix):
        return False
    if len(code) == len(prefix):
        return True
    return code[len(prefix)] in LETTERS


def matches_any_continuation(prefix: str, code: str) -> bool:
    return code.startswith(prefix)


def _first_match(rules: tuple[PrefixRule, ...], code: str, matcher) -> str | None:
    for rule in rules:
        if matcher(rule.prefix, code):
            return rule.territory_id
    return None


def classify(rule_set: RuleSet, code: str) -> str | None:
    code = normalise_code(code)

    territory_id = rule_set.exact.get(code)
    if territory_id is not None:
        return territory_id

    territory_id = _first_match(rule_set.letter_rules, code, matches_letter_continuation)
    if territory_id is not None:
        return territory_id

    return _first_match(rule_set.any_rules, code, matches_any_continuation)


def owner_of(rule_set: RuleSet, code: str) -> Territory | None:
    territory_id = classify(rule_set, code)
    if territory_id is None:
        return None
    return rule_set.territories.get(territory_id)


def is_taken(rule_set: RuleSet, code: str) -> bool:
    territory = owner_of(rule_set, code)
    return territory is not None and territory.is_taken
