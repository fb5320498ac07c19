"""Domain errors and failure typing."""


class TerritoryRulesError(Exception):
    """Base class for territory rule failures."""

    error_code = "TERRITORY_RULES_ERROR"


class ConfigError(TerritoryRulesError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class SchemaInvalid(TerritoryRulesError):
    """Raised when a territory table lacks required header fields."""

    error_code = "SCHEMA_INVALID"

    def __init__(self, missing: tuple[str, ...] | list[str], message: str | None = None) -> None:
        self.missing = tuple(missing)
        super().__init__(message or f"Territory table is missing required fields: {', '.join(self.missing)}")


class SourceError(TerritoryRulesError):
    """Raised when a territory or manifest payload cannot be read."""

    error_code = "SOURCE_ERROR"
