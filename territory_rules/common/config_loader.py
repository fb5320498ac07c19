"""Configuration loading and validation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from territory_rules.common.constants import (
    BASE_FILL_COLOR,
    CODE_PROPERTY,
    DEFAULT_PALETTE,
    DIMMED_OPACITY,
    FALLBACK_AREAS,
    FALLBACK_COLOR,
    NORMAL_OPACITY,
    POPUP_MAX_TOKENS,
    UNMATCHED_COLOR,
)
from territory_rules.common.errors import ConfigError
from territory_rules.common.fs import read_yaml
from territory_rules.common.schema import validate_style_config

STYLE_FILENAME = "style.yml"


@dataclass(frozen=True)
class StyleConfig:
    code_property: str = CODE_PROPERTY
    palette: tuple[str, ...] = DEFAULT_PALETTE
    unmatched_color: str = UNMATCHED_COLOR
    fallback_color: str = FALLBACK_COLOR
    base_color: str = BASE_FILL_COLOR
    normal_opacity: float = NORMAL_OPACITY
    dimmed_opacity: float = DIMMED_OPACITY
    fallback_areas: tuple[str, ...] = FALLBACK_AREAS
    popup_max_tokens: int = POPUP_MAX_TOKENS


def default_style_config() -> StyleConfig:
    return StyleConfig()


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _load_yaml_with_overlay(path: Path, overlay_path: Path | None) -> dict:
    if not path.exists():
        raise ConfigError(f"Missing config file: {path}")
    base = read_yaml(path)
    if overlay_path is None or not overlay_path.exists():
        return base
    overlay = read_yaml(overlay_path)
    if overlay is None:
        return base
    if not isinstance(overlay, dict):
        raise ConfigError(f"Overlay config must be a mapping: {overlay_path}")
    return _deep_merge(base, overlay)


def style_config_from_dict(cfg: dict) -> StyleConfig:
    return StyleConfig(
        code_property=cfg["code_property"],
        palette=tuple(cfg["palette"]),
        unmatched_color=cfg["colors"]["unmatched"],
        fallback_color=cfg["colors"]["fallback"],
        base_color=cfg["colors"]["base"],
        normal_opacity=float(cfg["opacity"]["normal"]),
        dimmed_opacity=float(cfg["opacity"]["dimmed"]),
        fallback_areas=tuple(cfg["areas"]["fallback"]),
        popup_max_tokens=int(cfg["popup"]["max_tokens"]),
    )


def load_style_config(
    config_dir: Path,
    *,
    allow_unknown: bool = False,
    overlay_config_dir: Path | None = None,
) -> StyleConfig:
    overlay_path = None
    if overlay_config_dir is not None:
        overlay_path = overlay_config_dir / STYLE_FILENAME
    cfg = _load_yaml_with_overlay(config_dir / STYLE_FILENAME, overlay_path)
    validated = validate_style_config(cfg, allow_unknown=allow_unknown)
    return style_config_from_dict(validated)
