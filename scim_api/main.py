"""FastAPI application entrypoint for the SCIM API."""

from __future__ import annotations

import logging

from fastapi import FastAPI

from scim_api.core.config import ErrorReportingSettings
from scim_api.core.config import get_settings
from scim_api.core.errors import ErrorHandler
from scim_api.core.errors import register_error_handlers
from scim_api.core.i18n import MessageCatalog
from scim_api.core.logging import FailureSink
from scim_api.core.logging import LoggingFailureSink
from scim_api.core.logging import configure_logging

logger = logging.getLogger(__name__)


def create_app(
    settings: ErrorReportingSettings | None = None,
    catalog: MessageCatalog | None = None,
    sink: FailureSink | None = None,
) -> FastAPI:
    """Build the application with its message catalog and failure sink wired once."""
    settings = settings or get_settings()
    catalog = catalog or MessageCatalog(default_locale=settings.default_locale)
    handler = ErrorHandler(
        catalog,
        sink or LoggingFailureSink(),
        default_locale=settings.default_locale,
        supported_locales=catalog.supported_locales,
    )
    logger.info("Configured error reporting with settings=%s", settings.safe_for_logging())

    application = FastAPI(title="SCIM API")
    register_error_handlers(application, handler)

    @application.get("/health")
    def health() -> dict[str, str]:
        """Health check stub endpoint for service readiness."""
        return {"status": "ok"}

    return application


configure_logging(get_settings().log_level)
app = create_app()
