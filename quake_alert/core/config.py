"""Configuration models - Pure data structures.

These are domain models for configuration. The actual loading
(I/O) is handled by the shell layer.
"""

import re
from dataclasses import dataclass, field

from quake_alert.core.intensity import Intensity


DEFAULT_IMAGE_BASE_URL = (
    "https://raw.githubusercontent.com/minagishl/slack-quake-alert/main/public"
)

ENVIRONMENTS = ("development", "production")

SLACK_TOKEN_PREFIX = "xoxb-"
SLACK_CHANNEL_PATTERN = re.compile(r"^C[A-Z0-9]{10}$")


@dataclass(frozen=True)
class Config:
    """Application configuration.

    This is a pure data structure - no I/O or side effects.

    Attributes:
        slack_bot_token: Slack bot token (xoxb-...)
        slack_channel_id: Target Slack channel ID
        min_intensity: Minimum max-intensity for earthquake notifications
        environment: 'development' or 'production'; production also selects
            the production feed endpoint
        image_base_url: Base URL for accessory images
        reconnect_delay_seconds: Initial delay before reconnecting the feed
        max_reconnect_delay_seconds: Upper bound for the reconnect backoff
    """
    slack_bot_token: str = ""
    slack_channel_id: str = ""
    min_intensity: int = Intensity.THREE
    environment: str = "development"
    image_base_url: str = DEFAULT_IMAGE_BASE_URL
    reconnect_delay_seconds: float = 5.0
    max_reconnect_delay_seconds: float = 60.0

    @property
    def is_production(self) -> bool:
        """Returns True when running against the production feed."""
        return self.environment == "production"


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


def validate_slack_settings(config: Config) -> list[ValidationError]:
    """Validate the Slack token and channel ID.

    Pure function.
    """
    errors = []

    if not config.slack_bot_token:
        errors.append(ValidationError(
            field="slack_bot_token",
            message="SLACK_BOT_TOKEN is required",
        ))
    elif not config.slack_bot_token.startswith(SLACK_TOKEN_PREFIX):
        errors.append(ValidationError(
            field="slack_bot_token",
            message=f'SLACK_BOT_TOKEN must start with "{SLACK_TOKEN_PREFIX}"',
        ))

    if not config.slack_channel_id:
        errors.append(ValidationError(
            field="slack_channel_id",
            message="SLACK_CHANNEL_ID is required",
        ))
    elif not SLACK_CHANNEL_PATTERN.match(config.slack_channel_id):
        errors.append(ValidationError(
            field="slack_channel_id",
            message="SLACK_CHANNEL_ID must match format C[A-Z0-9]{10}",
        ))

    return errors


def validate_config(config: Config) -> ValidationResult:
    """Validate configuration for errors and warnings.

    Pure function.

    Args:
        config: Configuration to validate

    Returns:
        ValidationResult with any errors/warnings found
    """
    errors = validate_slack_settings(config)

    if config.environment not in ENVIRONMENTS:
        errors.append(ValidationError(
            field="environment",
            message=f"Environment must be one of {', '.join(ENVIRONMENTS)}, "
                    f"got {config.environment!r}",
        ))

    if not config.image_base_url.startswith(("http://", "https://")):
        errors.append(ValidationError(
            field="image_base_url",
            message=f"Image base URL must be an http(s) URL, got {config.image_base_url!r}",
        ))

    if config.reconnect_delay_seconds <= 0:
        errors.append(ValidationError(
            field="reconnect_delay_seconds",
            message=f"Reconnect delay must be positive, got {config.reconnect_delay_seconds}",
        ))
    elif config.max_reconnect_delay_seconds < config.reconnect_delay_seconds:
        errors.append(ValidationError(
            field="max_reconnect_delay_seconds",
            message=(
                f"max_reconnect_delay_seconds ({config.max_reconnect_delay_seconds}) "
                f"< reconnect_delay_seconds ({config.reconnect_delay_seconds})"
            ),
        ))

    if config.min_intensity <= Intensity.ONE:
        errors.append(ValidationError(
            field="min_intensity",
            message="Threshold of intensity 1 notifies on almost every report",
            severity="warning",
        ))

    has_critical = any(e.severity == "error" for e in errors)

    return ValidationResult(
        valid=not has_critical,
        errors=errors,
    )
