"""
Application settings and environment configuration.

Responsibilities:
- Load configuration from environment variables and the project .env file.
- Validate settings and provide defaults for optional ones.
- Expose typed settings (service endpoints, poll interval, inactivity
  threshold, timeouts, API bind address) for the runtime and status API.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache

from cartwatch.cartwatch_logging.logger import DEFAULT_LOG_FORMAT, DEFAULT_LOG_LEVEL, LOG_FORMATS
from cartwatch.config.env import (
    env_bool,
    env_float,
    env_int,
    env_list,
    env_str,
    load_cartwatch_env,
)
from cartwatch.core.exceptions import ConfigError

DEFAULT_CART_SERVICE_URL = "http://cartservice:7070"
DEFAULT_PRODUCT_CATALOG_SERVICE_URL = "http://productcatalogservice:3550"
DEFAULT_EMAIL_SERVICE_URL = "http://emailservice:5000"
DEFAULT_POLL_INTERVAL_SEC = 30.0
DEFAULT_INACTIVITY_THRESHOLD_SEC = 60
DEFAULT_REQUEST_TIMEOUT_SEC = 5.0
DEFAULT_DECISION_TIMEOUT_SEC = 10.0
DEFAULT_RECIPIENT_EMAIL_TEMPLATE = "{user_id}@example.com"
DEFAULT_API_HOST = "0.0.0.0"
DEFAULT_API_PORT = 8080
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    """Typed view of the environment. Build with load_settings()."""

    cart_service_url: str = DEFAULT_CART_SERVICE_URL
    product_catalog_service_url: str = DEFAULT_PRODUCT_CATALOG_SERVICE_URL
    email_service_url: str = DEFAULT_EMAIL_SERVICE_URL
    analysis_service_url: str | None = None
    candidate_user_ids: tuple[str, ...] = field(default_factory=tuple)
    poll_interval_sec: float = DEFAULT_POLL_INTERVAL_SEC
    inactivity_threshold_sec: int = DEFAULT_INACTIVITY_THRESHOLD_SEC
    request_timeout_sec: float = DEFAULT_REQUEST_TIMEOUT_SEC
    decision_timeout_sec: float = DEFAULT_DECISION_TIMEOUT_SEC
    recipient_email_template: str = DEFAULT_RECIPIENT_EMAIL_TEMPLATE
    api_host: str = DEFAULT_API_HOST
    api_port: int = DEFAULT_API_PORT
    status_api_enabled: bool = True
    log_level: str = DEFAULT_LOG_LEVEL
    log_format: str = DEFAULT_LOG_FORMAT

    def __post_init__(self) -> None:
        if self.poll_interval_sec <= 0:
            raise ConfigError("POLL_INTERVAL_SEC must be positive")
        if self.inactivity_threshold_sec < 0:
            raise ConfigError("INACTIVITY_THRESHOLD_SEC must be >= 0")
        if self.request_timeout_sec <= 0 or self.decision_timeout_sec <= 0:
            raise ConfigError("timeouts must be positive")
        if "{user_id}" not in self.recipient_email_template:
            raise ConfigError("RECIPIENT_EMAIL_TEMPLATE must contain {user_id}")
        if not (0 < self.api_port < 65536):
            raise ConfigError(f"API_PORT out of range: {self.api_port}")
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(f"LOG_LEVEL must be one of {LOG_LEVELS}, got {self.log_level!r}")
        if self.log_format not in LOG_FORMATS:
            raise ConfigError(f"LOG_FORMAT must be one of {LOG_FORMATS}, got {self.log_format!r}")

    def require_candidates(self) -> tuple[str, ...]:
        """Return candidate user ids; raise ConfigError when none are configured."""
        if not self.candidate_user_ids:
            raise ConfigError("CANDIDATE_USER_IDS env must be set (comma-separated user ids)")
        return self.candidate_user_ids


def load_settings() -> Settings:
    """Read the environment (after loading .env) into a fresh Settings."""
    load_cartwatch_env()
    return Settings(
        cart_service_url=env_str("CART_SERVICE_URL", DEFAULT_CART_SERVICE_URL),
        product_catalog_service_url=env_str(
            "PRODUCT_CATALOG_SERVICE_URL", DEFAULT_PRODUCT_CATALOG_SERVICE_URL
        ),
        email_service_url=env_str("EMAIL_SERVICE_URL", DEFAULT_EMAIL_SERVICE_URL),
        analysis_service_url=env_str("ANALYSIS_SERVICE_URL") or None,
        candidate_user_ids=tuple(env_list("CANDIDATE_USER_IDS")),
        poll_interval_sec=env_float("POLL_INTERVAL_SEC", DEFAULT_POLL_INTERVAL_SEC),
        inactivity_threshold_sec=env_int("INACTIVITY_THRESHOLD_SEC", DEFAULT_INACTIVITY_THRESHOLD_SEC),
        request_timeout_sec=env_float("REQUEST_TIMEOUT_SEC", DEFAULT_REQUEST_TIMEOUT_SEC),
        decision_timeout_sec=env_float("DECISION_TIMEOUT_SEC", DEFAULT_DECISION_TIMEOUT_SEC),
        recipient_email_template=env_str("RECIPIENT_EMAIL_TEMPLATE", DEFAULT_RECIPIENT_EMAIL_TEMPLATE),
        api_host=env_str("API_HOST", DEFAULT_API_HOST),
        api_port=env_int("API_PORT", DEFAULT_API_PORT),
        status_api_enabled=env_bool("STATUS_API_ENABLED", True),
        log_level=env_str("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
        log_format=env_str("LOG_FORMAT", DEFAULT_LOG_FORMAT).lower(),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Return the current application settings (read once per process).

    Tests should call load_settings() directly or get_settings.cache_clear().
    """
    return load_settings()
