"""Configuration models - Pure data structures.

These are domain models for configuration. The actual loading
(I/O) is handled by the shell layer.
"""

from dataclasses import dataclass, field


# USGS summary feed: all events from the past day
DEFAULT_FEED_URL = "https://earthquake.usgs.gov/earthquakes/feed/v1.0/summary/all_day.geojson"

DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"


@dataclass
class Config:
    """Application configuration.

    This is a pure data structure - no I/O or side effects.

    Attributes:
        feed_url: USGS GeoJSON feed endpoint
        feed_timeout_seconds: Timeout for feed requests
        gemini_model: Gemini model name
        gemini_api_key: Gemini API key (None when not configured)
        gemini_timeout_seconds: Timeout for model requests
    """
    feed_url: str = DEFAULT_FEED_URL
    feed_timeout_seconds: int = 30
    gemini_model: str = DEFAULT_GEMINI_MODEL
    gemini_api_key: str | None = None
    gemini_timeout_seconds: int = 60

    @property
    def has_credential(self) -> bool:
        """True if a usable API key is configured."""
        return bool(self.gemini_api_key) and not _is_placeholder(self.gemini_api_key)


def _is_placeholder(value: str | None) -> bool:
    return bool(value) and value.startswith("${") and value.endswith("}")


@dataclass
class ValidationError:
    """A configuration validation error.

    Attributes:
        field: The field that has an error
        message: Human-readable error description
        severity: 'error' or 'warning'
    """
    field: str
    message: str
    severity: str = "error"


@dataclass
class ValidationResult:
    """Result of validating configuration.

    Attributes:
        valid: True if no errors (warnings are OK)
        errors: List of validation errors/warnings
    """
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def warnings(self) -> list[ValidationError]:
        """Get only warnings."""
        return [e for e in self.errors if e.severity == "warning"]

    @property
    def critical_errors(self) -> list[ValidationError]:
        """Get only critical errors."""
        return [e for e in self.errors if e.severity == "error"]


def validate_config(config: Config) -> ValidationResult:
    """Validate configuration for errors and warnings.

    Pure function.

    Args:
        config: Configuration to validate

    Returns:
        ValidationResult with any errors/warnings found
    """
    errors: list[ValidationError] = []

    if not config.feed_url.startswith(("http://", "https://")):
        errors.append(ValidationError(
            field="feed_url",
            message=f"Feed URL must be http(s), got '{config.feed_url}'",
        ))

    for name in ("feed_timeout_seconds", "gemini_timeout_seconds"):
        value = getattr(config, name)
        if value <= 0:
            errors.append(ValidationError(
                field=name,
                message=f"Timeout must be positive, got {value}",
            ))

    if not config.gemini_model:
        errors.append(ValidationError(
            field="gemini_model",
            message="Model name is empty",
        ))

    if _is_placeholder(config.gemini_api_key):
        errors.append(ValidationError(
            field="gemini_api_key",
            message="API key not resolved (still contains placeholder)",
            severity="warning",
        ))
    elif not config.gemini_api_key:
        errors.append(ValidationError(
            field="gemini_api_key",
            message="No API key configured, AI insights are disabled",
            severity="warning",
        ))

    has_critical = any(e.severity == "error" for e in errors)

    return ValidationResult(
        valid=not has_critical,
        errors=errors,
    )
