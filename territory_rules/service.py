"""Active rule set holder used by interactive map front ends."""

from __future__ import annotations

import logging
from pathlib import Path

from territory_rules.common.config_loader import StyleConfig, default_style_config
from territory_rules.common.errors import TerritoryRulesError
from territory_rules.common.http import HttpClient
from territory_rules.common.logging import get_logger, log_event
from territory_rules.pipeline import classifier
from territory_rules.pipeline.compiler import load_rule_set
from territory_rules.pipeline.expressions import Expr
from territory_rules.pipeline.models import RuleSet, TerritoryMetadata
from territory_rules.pipeline.sources import load_area_manifest
from territory_rules.pipeline.style import build_color_expression, build_opacity_expression
from territory_rules.pipeline.summary import CodeSummary, describe_code


class TerritoryMap:
    """Owns the active :class:`RuleSet` and answers lookups against it.

    ``reload`` compiles a fresh rule set and swaps it in with a single
    assignment. Every read grabs the current reference once, so a lookup never
    sees a mix of two loads. A failed reload keeps the previous rule set.
    """

    def __init__(self, style: StyleConfig | None = None, logger: logging.Logger | None = None) -> None:
        self.style = style or default_style_config()
        self.logger = logger or get_logger("service")
        self._rule_set = RuleSet()

    @property
    def rule_set(self) -> RuleSet:
        return self._rule_set

    @property
    def loaded(self) -> bool:
        return bool(self._rule_set.territories)

    def reload(self, text: str) -> RuleSet:
        try:
            rule_set = load_rule_set(text, palette=self.style.palette, logger=self.logger)
        except TerritoryRulesError as exc:
            log_event(
                self.logger,
                str(exc),
                level=logging.ERROR,
                stage="reload",
                event="RELOAD_FAIL",
                status="error",
                error_code=exc.error_code,
            )
            raise
        self._rule_set = rule_set
        log_event(
            self.logger,
            "rule set activated",
            stage="reload",
            event="RELOAD_END",
            status="ok",
            rows_out=len(rule_set.territories),
        )
        return rule_set

    def classify(self, code: str) -> str | None:
        return classifier.classify(self._rule_set, code)

    def is_taken(self, code: str) -> bool:
        return classifier.is_taken(self._rule_set, code)

    def territory_metadata(self, territory_id: str) -> TerritoryMetadata | None:
        return self._rule_set.territory_metadata(territory_id)

    def color_expression(self) -> Expr:
        return build_color_expression(self._rule_set, self.style)

    def opacity_expression(self) -> Expr:
        return build_opacity_expression(self._rule_set, self.style)

    def describe(self, code: str) -> CodeSummary:
        return describe_code(self._rule_set, code, self.style.popup_max_tokens)

    def areas(self, location: str | Path, http_client: HttpClient | None = None) -> list[str]:
        """Postcode areas to load boundaries for, falling back to the configured list."""
        return load_area_manifest(
            location,
            http_client,
            fallback=self.style.fallback_areas,
            logger=self.logger,
        )
