"""FastAPI application factory for Monte-Log.

Creates the application with:
- Blog routers (/posts, /categories, /visitor, /auth)
- Health probes and Prometheus metrics
- Lifecycle management for the application context (database, cache, scheduler)
- Consistent JSON error bodies
- ORJSON for fast JSON serialization
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from starlette.types import ExceptionHandler

from montelog.api.errors import (
    ApiError,
    api_exception_handler,
    domain_exception_handler,
    generic_exception_handler,
)
from montelog.api.middleware import CorrelationMiddleware
from montelog.api.routers import auth, categories, health, posts, visitors
from montelog.api.routers import metrics as metrics_router
from montelog.config import Settings
from montelog.config import settings as default_settings
from montelog.context import AppContext
from montelog.errors import MontelogError
from montelog.observability import MetricsMiddleware, configure_logging, get_metrics

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle.

    On startup the application context is built (unless one was injected),
    tables are created in dev, and the job scheduler is started when enabled.
    On shutdown a context built here is closed again.
    """
    settings: Settings = app.state.settings

    configure_logging(json_format=settings.env != "dev", level=settings.log_level)

    owned = getattr(app.state, "context", None) is None
    if owned:
        app.state.context = AppContext.build(settings)
    context: AppContext = app.state.context

    logger.info(f"Starting Monte-Log ({settings.env})")
    await context.start(
        create_tables=settings.env == "dev",
        run_scheduler=settings.enable_scheduler,
    )
    logger.info("Monte-Log startup complete")

    yield

    logger.info("Shutting down Monte-Log")
    if owned:
        await context.close()
        app.state.context = None
    elif context.scheduler.running:
        await context.scheduler.stop()
    logger.info("Monte-Log shutdown complete")


def create_app(
    settings: Settings | None = None,
    context: AppContext | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to run with; the module settings by default
        context: Prebuilt application context. The caller keeps ownership
            and must close it.
    """
    settings = settings or (context.settings if context else default_settings)

    app = FastAPI(
        title="Monte-Log",
        description="Personal blog API",
        version="0.1.0",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.context = context
    get_metrics(settings.enable_metrics)

    # CorrelationMiddleware is innermost so request ids are set for everything else
    app.add_middleware(CorrelationMiddleware)
    if settings.enable_metrics:
        app.add_middleware(MetricsMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.client_url],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ApiError, cast(ExceptionHandler, api_exception_handler))
    app.add_exception_handler(MontelogError, cast(ExceptionHandler, domain_exception_handler))
    app.add_exception_handler(Exception, cast(ExceptionHandler, generic_exception_handler))

    app.include_router(health.router)
    if settings.enable_metrics:
        app.include_router(metrics_router.router)

    app.include_router(posts.router)
    app.include_router(categories.router)
    app.include_router(visitors.router)
    app.include_router(auth.router)

    return app
