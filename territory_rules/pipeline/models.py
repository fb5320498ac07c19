"""Immutable data models for compiled territory rules."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class TokenKind(str, Enum):
    EXACT = "exact"
    LETTER_CONTINUATION = "letter_continuation"
    ANY_CONTINUATION = "any_continuation"


TOKEN_MARKERS = {
    "+": TokenKind.LETTER_CONTINUATION,
    "*": TokenKind.ANY_CONTINUATION,
}


class DiagnosticKind(str, Enum):
    ROW_SKIPPED = "ROW_SKIPPED"
    NUMERIC_COERCION = "NUMERIC_COERCION"
    UNREACHABLE_RULE = "UNREACHABLE_RULE"
    STATUS_UNRECOGNIZED = "STATUS_UNRECOGNIZED"
    DUPLICATE_TERRITORY = "DUPLICATE_TERRITORY"
    EMPTY_TOKEN = "EMPTY_TOKEN"


@dataclass(frozen=True)
class RawToken:
    kind: TokenKind
    code: str
    text: str

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class PrefixRule:
    prefix: str
    territory_id: str


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    row: int
    territory_id: str | None
    detail: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "row": self.row,
            "territory_id": self.territory_id,
            "detail": self.detail,
        }


@dataclass(frozen=True)
class TerritoryMetadata:
    region: str
    population: int
    business_count: int
    income: str
    status: str
    tokens: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        out = asdict(self)
        out["tokens"] = list(self.tokens)
        return out


@dataclass(frozen=True)
class Territory:
    id: str
    region: str
    population: int
    business_count: int
    income: str
    status: str
    status_label: str
    tokens: tuple[RawToken, ...]
    color: str

    @property
    def is_taken(self) -> bool:
        return self.status == "taken"

    @property
    def title(self) -> str:
        return f"Territory {self.id}"

    def metadata(self) -> TerritoryMetadata:
        return TerritoryMetadata(
            region=self.region,
            population=self.population,
            business_count=self.business_count,
            income=self.income,
            status=self.status,
            tokens=tuple(token.text for token in self.tokens),
        )


@dataclass(frozen=True)
class RuleSet:
    """Compiled, read-only rule tables shared by the classifier and style builder.

    ``exact`` maps an upper-cased code to its territory id. The two prefix
    tuples keep declaration order, which decides ties inside a tier.
    """

    territories: Mapping[str, Territory] = field(default_factory=dict)
    exact: Mapping[str, str] = field(default_factory=dict)
    letter_rules: tuple[PrefixRule, ...] = ()
    any_rules: tuple[PrefixRule, ...] = ()
    diagnostics: tuple[Diagnostic, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "territories", MappingProxyType(dict(self.territories)))
        object.__setattr__(self, "exact", MappingProxyType(dict(self.exact)))
        object.__setattr__(self, "letter_rules", tuple(self.letter_rules))
        object.__setattr__(self, "any_rules", tuple(self.any_rules))
        object.__setattr__(self, "diagnostics", tuple(self.diagnostics))

    def territory(self, territory_id: str) -> Territory | None:
        return self.territories.get(territory_id)

    def territory_metadata(self, territory_id: str) -> TerritoryMetadata | None:
        territory = self.territories.get(territory_id)
        if territory is None:
            return None
        return territory.metadata()

    def diagnostics_of(self, kind: DiagnosticKind) -> list[Diagnostic]:
        return [diagnostic for diagnostic in self.diagnostics if diagnostic.kind is kind]
