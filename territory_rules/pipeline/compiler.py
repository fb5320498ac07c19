"""Compile resolved territory records into an immutable rule set."""

from __future__ import annotations

import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Iterable, Mapping

from territory_rules.common.constants import DEFAULT_PALETTE, KNOWN_STATUSES, STATUS_AVAILABLE
from territory_rules.common.logging import get_logger, log_event
from territory_rules.pipeline.models import (
    TOKEN_MARKERS,
    Diagnostic,
    DiagnosticKind,
    PrefixRule,
    RawToken,
    RuleSet,
    Territory,
    TokenKind,
)
from territory_rules.pipeline.schema_resolver import resolve_schema

_NUMERIC_NOISE_RE = re.compile(r"[^0-9+\-.]")

_DIAGNOSTIC_LEVELS = {
    DiagnosticKind.ROW_SKIPPED: logging.DEBUG,
    DiagnosticKind.NUMERIC_COERCION: logging.INFO,
    DiagnosticKind.EMPTY_TOKEN: logging.INFO,
    DiagnosticKind.STATUS_UNRECOGNIZED: logging.WARNING,
    DiagnosticKind.UNREACHABLE_RULE: logging.WARNING,
    DiagnosticKind.DUPLICATE_TERRITORY: logging.WARNING,
}


def split_tokens(cell: str) -> list[str]:
    separator = ";" if ";" in cell and "|" not in cell else "|"
    tokens = (part.strip().upper() for part in cell.split(separator))
    return [token for token in tokens if token]


def classify_token(text: str) -> RawToken:
    token = text.strip().upper()
    kind = TOKEN_MARKERS.get(token[-1:], TokenKind.EXACT)
    code = token if kind is TokenKind.EXACT else token[:-1]
    return RawToken(kind=kind, code=code, text=token)


def parse_count(text: str) -> tuple[int, bool]:
    """Parse a loosely formatted count such as ``"£45,000"``.

    Returns ``(value, coerced)``; ``coerced`` is true when a non-empty value
    had to be replaced by zero.
    """
    cleaned = _NUMERIC_NOISE_RE.sub("", text or "")
    if not cleaned:
        return 0, bool((text or "").strip())
    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        return 0, True
    if not value.is_finite() or value < 0:
        return 0, True
    return int(value), False


def normalise_status(text: str) -> tuple[str, bool]:
    status = (text or "").strip().lower()
    if not status:
        return STATUS_AVAILABLE, False
    if status not in KNOWN_STATUSES:
        return STATUS_AVAILABLE, True
    return status, False


class _RuleSetBuilder:
    def __init__(self, palette: tuple[str, ...] | list[str], logger: logging.Logger) -> None:
        if not palette:
            raise ValueError("palette must contain at least one color")
        self.palette = tuple(palette)
        self.logger = logger
        self.territories: dict[str, Territory] = {}
        self.exact: dict[str, str] = {}
        self.letter_rules: list[PrefixRule] = []
        self.any_rules: list[PrefixRule] = []
        self.diagnostics: list[Diagnostic] = []
        self.registered = 0

    def note(self, kind: DiagnosticKind, row: int, territory_id: str | None, detail: str) -> None:
        self.diagnostics.append(Diagnostic(kind=kind, row=row, territory_id=territory_id, detail=detail))
        log_event(
            self.logger,
            detail,
            level=_DIAGNOSTIC_LEVELS[kind],
            stage="compile",
            territory=territory_id,
            row=row,
            event=kind.value,
            status="diagnostic",
        )

    def _count(self, record: Mapping[str, str], field: str, row: int, territory_id: str) -> int:
        raw = record.get(field, "")
        value, coerced = parse_count(raw)
        if coerced:
            self.note(DiagnosticKind.NUMERIC_COERCION, row, territory_id, f"{field} value {raw!r} coerced to 0")
        return value

    def _tokens(self, cell: str, row: int, territory_id: str) -> tuple[RawToken, ...]:
        tokens: list[RawToken] = []
        for text in split_tokens(cell):
            token = classify_token(text)
            if not token.code:
                self.note(DiagnosticKind.EMPTY_TOKEN, row, territory_id, f"token {text!r} has no code")
                continue
            tokens.append(token)
        return tuple(tokens)

    def add(self, record: Mapping[str, str], row: int) -> None:
        territory_id = (record.get("id") or "").strip()
        if not territory_id:
            self.note(DiagnosticKind.ROW_SKIPPED, row, None, "row has no territory id")
            return

        tokens = self._tokens(record.get("tokens", ""), row, territory_id)
        if not tokens:
            self.note(DiagnosticKind.UNREACHABLE_RULE, row, territory_id, "territory has no postcode tokens")

        status_label = (record.get("status") or "").strip()
        status, unrecognized = normalise_status(status_label)
        if unrecognized:
            self.note(
                DiagnosticKind.STATUS_UNRECOGNIZED,
                row,
                territory_id,
                f"status {status_label!r} treated as {STATUS_AVAILABLE}",
            )
        if territory_id in self.territories:
            self.note(
                DiagnosticKind.DUPLICATE_TERRITORY,
                row,
                territory_id,
                "duplicate territory id; metadata and color replaced, rules appended",
            )

        index = self.registered
        self.registered += 1
        self.territories[territory_id] = Territory(
            id=territory_id,
            region=(record.get("region") or "").strip(),
            population=self._count(record, "population", row, territory_id),
            business_count=self._count(record, "business_count", row, territory_id),
            income=(record.get("income") or "").strip(),
            status=status,
            status_label=status_label or status,
            tokens=tokens,
            color=self.palette[index % len(self.palette)],
        )

        for token in tokens:
            if token.kind is TokenKind.EXACT:
                self.exact[token.code] = territory_id
            elif token.kind is TokenKind.LETTER_CONTINUATION:
                self.letter_rules.append(PrefixRule(prefix=token.code, territory_id=territory_id))
            else:
                self.any_rules.append(PrefixRule(prefix=token.code, territory_id=territory_id))

    def build(self) -> RuleSet:
        return RuleSet(
            territories=self.territories,
            exact=self.exact,
            letter_rules=tuple(self.letter_rules),
            any_rules=tuple(self.any_rules),
            diagnostics=tuple(self.diagnostics),
        )


def compile_rule_set(
    records: Iterable[Mapping[str, str]],
    *,
    palette: tuple[str, ...] | list[str] = DEFAULT_PALETTE,
    logger: logging.Logger | None = None,
) -> RuleSet:
    logger = logger or get_logger("compiler")
    builder = _RuleSetBuilder(palette, logger)
    rows_in = 0
    for row, record in enumerate(records, start=1):
        rows_in += 1
        builder.add(record, row)
    rule_set = builder.build()
    log_event(
        logger,
        "rule set compiled",
        stage="compile",
        event="COMPILE_END",
        status="ok",
        rows_in=rows_in,
        rows_out=len(rule_set.territories),
    )
    return rule_set


def load_rule_set(
    text: str,
    *,
    palette: tuple[str, ...] | list[str] = DEFAULT_PALETTE,
    logger: logging.Logger | None = None,
) -> RuleSet:
    table = resolve_schema(text)
    return compile_rule_set(table.records, palette=palette, logger=logger)
