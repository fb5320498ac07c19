"""Classification CSV and paint JSON export."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from territory_rules.common.config_loader import StyleConfig, default_style_config
from territory_rules.common.fs import write_csv, write_json
from territory_rules.pipeline.classifier import classify, normalise_code
from territory_rules.pipeline.maplibre import paint_properties
from territory_rules.pipeline.models import RuleSet
from territory_rules.pipeline.style import build_color_expression, build_opacity_expression

CLASSIFICATION_HEADERS = [
    "code",
    "territory_id",
    "color",
    "taken",
    "opacity",
]


def _serialize_row(row: dict) -> dict:
    out = {}
    for key in CLASSIFICATION_HEADERS:
        value = row.get(key)
        if value is None:
            out[key] = ""
        elif isinstance(value, bool):
            out[key] = "true" if value else "false"
        else:
            out[key] = value
    return out


def classification_rows(rule_set: RuleSet, codes: Iterable[str], style: StyleConfig | None = None) -> list[dict]:
    style = style or default_style_config()
    rows = []
    for raw_code in codes:
        code = normalise_code(raw_code.strip())
        if not code:
            continue
        territory_id = classify(rule_set, code)
        territory = rule_set.territories.get(territory_id) if territory_id is not None else None
        taken = territory is not None and territory.is_taken
        rows.append(
            {
                "code": code,
                "territory_id": territory_id,
                "color": territory.color if territory is not None else style.unmatched_color,
                "taken": taken,
                "opacity": style.dimmed_opacity if taken else style.normal_opacity,
            }
        )
    return rows


def write_classification_csv(path: Path, rows: list[dict]) -> Path:
    sorted_rows = sorted(rows, key=lambda row: row["code"])
    write_csv(path, CLASSIFICATION_HEADERS, [_serialize_row(row) for row in sorted_rows])
    return path


def write_paint_json(path: Path, rule_set: RuleSet, style: StyleConfig | None = None) -> Path:
    style = style or default_style_config()
    payload = {
        "code_property": style.code_property,
        "territory_count": len(rule_set.territories),
        "paint": paint_properties(
            build_color_expression(rule_set, style),
            build_opacity_expression(rule_set, style),
            style,
        ),
    }
    write_json(path, payload)
    return path
