"""Info-panel summaries for interactive code lookups."""

from __future__ import annotations

from dataclasses import dataclass

from territory_rules.common.constants import POPUP_MAX_TOKENS
from territory_rules.pipeline.classifier import normalise_code, owner_of
from territory_rules.pipeline.models import RuleSet, Territory


@dataclass(frozen=True)
class CodeSummary:
    code: str
    territory_id: str | None
    lines: tuple[str, ...]

    @property
    def matched(self) -> bool:
        return self.territory_id is not None

    def as_text(self) -> str:
        return "\n".join(self.lines)


def format_count(value: int) -> str:
    return f"{value:,}"


def postcodes_line(tokens: tuple[str, ...], max_tokens: int = POPUP_MAX_TOKENS) -> str:
    shown = tokens[:max_tokens]
    more = len(tokens) - len(shown)
    line = f"Postcodes: {', '.join(shown)}"
    if more > 0:
        line += f" +{more} more"
    return line


def summarise_territory(territory: Territory, max_tokens: int = POPUP_MAX_TOKENS) -> tuple[str, ...]:
    metadata = territory.metadata()
    return (
        territory.title,
        f"Region: {metadata.region}",
        postcodes_line(metadata.tokens, max_tokens),
        f"Population: {format_count(metadata.population)}",
        f"Number of businesses: {format_count(metadata.business_count)}",
        f"Income: {metadata.income}",
        f"Status: {territory.status_label.lower()}",
    )


def describe_code(rule_set: RuleSet, code: str, max_tokens: int = POPUP_MAX_TOKENS) -> CodeSummary:
    normalised = normalise_code(code)
    territory = owner_of(rule_set, normalised)
    if territory is None:
        return CodeSummary(code=normalised, territory_id=None, lines=(normalised,))
    return CodeSummary(
        code=normalised,
        territory_id=territory.id,
        lines=summarise_territory(territory, max_tokens),
    )
