"""Application configuration helpers."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os

DEFAULT_LOCALE = "en"
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class ErrorReportingSettings:
    """Runtime settings for error reporting and message localization."""

    default_locale: str
    log_level: str

    def safe_for_logging(self) -> dict[str, str]:
        """Return settings safe for logs."""
        return {
            "default_locale": self.default_locale,
            "log_level": self.log_level,
        }


@lru_cache(maxsize=1)
def get_settings() -> ErrorReportingSettings:
    """Load error reporting settings from the environment."""
    return ErrorReportingSettings(
        default_locale=os.getenv("SCIM_DEFAULT_LOCALE", DEFAULT_LOCALE),
        log_level=os.getenv("SCIM_LOG_LEVEL", DEFAULT_LOG_LEVEL),
    )
