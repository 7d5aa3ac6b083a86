from __future__ import annotations

import logging

from fastapi import FastAPI

from apiconv.core.conventions import build_conventions, install
from apiconv.core.logging import configure_logging
from apiconv.core.request_id import RequestIdMiddleware
from apiconv.core.request_logging import RequestLoggingMiddleware
from apiconv.routes import health
from apiconv.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build an app with the conventions installed.

    Run with: `uvicorn apiconv.main:create_app --factory`
    """

    settings = settings or get_settings()

    configure_logging(level=settings.log_level)

    app = FastAPI(title=settings.app_name, version="1.0.0")

    install(app, build_conventions(settings))

    # Added last = outermost, so the request id is set before anything logs.
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIdMiddleware, header_name=settings.request_id_header)

    app.include_router(health.router)

    logger.info("%s started (env=%s)", settings.app_name, settings.environment)
    return app
