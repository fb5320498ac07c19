"""Delimited text parsing and tolerant header resolution for territory tables."""

from __future__ import annotations

import csv
import io
import re
from dataclasses import dataclass

from territory_rules.common.constants import CANDIDATE_DELIMITERS, HEADER_ALIASES, REQUIRED_FIELDS
from territory_rules.common.errors import SchemaInvalid, SourceError

_NON_ALNUM_RE = re.compile(r"[\W_]+", re.UNICODE)
_BOM = "\ufeff"


@dataclass(frozen=True)
class ResolvedTable:
    delimiter: str
    header: tuple[str, ...]
    columns: dict[str, int]
    records: tuple[dict[str, str], ...]


def strip_bom(text: str) -> str:
    if text.startswith(_BOM):
        return text[len(_BOM) :]
    return text


def _first_logical_line(text: str) -> str:
    """Return the first non-empty line, treating quoted line breaks as content."""
    in_quotes = False
    current: list[str] = []
    for char in text:
        if char == '"':
            in_quotes = not in_quotes
        elif char in "\r\n" and not in_quotes:
            if "".join(current).strip():
                return "".join(current)
            current = []
            continue
        current.append(char)
    return "".join(current)


def detect_delimiter(text: str) -> str:
    line = _first_logical_line(strip_bom(text))
    counts = {delimiter: 0 for delimiter in CANDIDATE_DELIMITERS}
    in_quotes = False
    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif not in_quotes and char in counts:
            counts[char] += 1

    best = ","
    for delimiter in CANDIDATE_DELIMITERS:
        # Strictly greater keeps comma on ties.
        if counts[delimiter] > counts[best]:
            best = delimiter
    return best


def read_rows(text: str, delimiter: str | None = None) -> list[list[str]]:
    text = strip_bom(text)
    if delimiter is None:
        delimiter = detect_delimiter(text)
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter, quotechar='"', doublequote=True)
    try:
        return [row for row in reader if any(cell.strip() for cell in row)]
    except csv.Error as exc:
        raise SourceError(f"Territory table is not readable CSV: {exc}") from exc


def normalise_header(name: str) -> str:
    return _NON_ALNUM_RE.sub("", name.strip().lower())


def resolve_columns(header: list[str] | tuple[str, ...]) -> dict[str, int]:
    normalised = [normalise_header(name) for name in header]
    columns: dict[str, int] = {}
    for canonical, aliases in HEADER_ALIASES.items():
        for alias in aliases:
            key = normalise_header(alias)
            if key in normalised:
                columns[canonical] = normalised.index(key)
                break
    return columns


def _record_from_row(row: list[str], columns: dict[str, int]) -> dict[str, str]:
    record = {}
    for canonical in HEADER_ALIASES:
        idx = columns.get(canonical)
        value = row[idx] if idx is not None and idx < len(row) else ""
        record[canonical] = value.strip()
    return record


def resolve_schema(text: str) -> ResolvedTable:
    delimiter = detect_delimiter(text)
    rows = read_rows(text, delimiter)
    if not rows:
        raise SchemaInvalid(REQUIRED_FIELDS, "Territory table is empty; no header row found")

    header = tuple(cell.strip() for cell in rows[0])
    columns = resolve_columns(header)
    missing = [field for field in REQUIRED_FIELDS if field not in columns]
    if missing:
        raise SchemaInvalid(missing)

    records = tuple(_record_from_row(row, columns) for row in rows[1:])
    return ResolvedTable(delimiter=delimiter, header=header, columns=columns, records=records)
