"""Minimal strict schemas for YAML config validation."""

from __future__ import annotations

import re

from territory_rules.common.errors import ConfigError

_HEX_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")


def _assert_mapping(obj, ctx: str) -> None:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _assert_color(value, ctx: str) -> None:
    if not isinstance(value, str) or not _HEX_COLOR_RE.match(value):
        raise ConfigError(f"{ctx} must be a #rrggbb color, got {value!r}")


def _assert_opacity(value, ctx: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0 <= value <= 1:
        raise ConfigError(f"{ctx} must be a number between 0 and 1, got {value!r}")


def validate_style_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    _assert_mapping(cfg, "style config")
    top_required = {"code_property", "palette", "colors", "opacity", "areas", "popup"}
    _assert_required_keys(cfg, top_required, "style config")
    _assert_no_unknown_keys(cfg, top_required, "style config", allow_unknown)

    if not isinstance(cfg["code_property"], str) or not cfg["code_property"]:
        raise ConfigError("code_property must be a non-empty string")

    palette = cfg["palette"]
    if not isinstance(palette, list) or not palette:
        raise ConfigError("palette must be a non-empty list")
    for idx, color in enumerate(palette):
        _assert_color(color, f"palette[{idx}]")

    _assert_mapping(cfg["colors"], "colors")
    _assert_required_keys(cfg["colors"], {"unmatched", "fallback", "base"}, "colors")
    for key in ("unmatched", "fallback", "base"):
        _assert_color(cfg["colors"][key], f"colors.{key}")

    _assert_mapping(cfg["opacity"], "opacity")
    _assert_required_keys(cfg["opacity"], {"normal", "dimmed"}, "opacity")
    _assert_opacity(cfg["opacity"]["normal"], "opacity.normal")
    _assert_opacity(cfg["opacity"]["dimmed"], "opacity.dimmed")

    _assert_mapping(cfg["areas"], "areas")
    _assert_required_keys(cfg["areas"], {"fallback"}, "areas")
    if not isinstance(cfg["areas"]["fallback"], list) or not all(
        isinstance(area, str) and area for area in cfg["areas"]["fallback"]
    ):
        raise ConfigError("areas.fallback must be a list of non-empty strings")

    _assert_mapping(cfg["popup"], "popup")
    _assert_required_keys(cfg["popup"], {"max_tokens"}, "popup")
    max_tokens = cfg["popup"]["max_tokens"]
    if isinstance(max_tokens, bool) or not isinstance(max_tokens, int) or max_tokens < 1:
        raise ConfigError("popup.max_tokens must be a positive integer")

    return cfg
