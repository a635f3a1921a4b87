"""
FastAPI Application Entry Point

This module creates and configures the FastAPI application.
It sets up all routes, middleware, and exception handlers.

Design Decisions:
- Use lifespan events for startup/shutdown
- Wait for the database on startup instead of failing on the first request
- Include comprehensive error handling
- Expose health, readiness and Prometheus metrics endpoints
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request, Response, status

from app.api import register_exception_handlers, router as api_router
from app.api.errors import error_response
from app.config import Settings, get_settings
from app.logging_config import get_logger, setup_logging
from app.metrics import RequestMetrics, route_template
from app.services import (
    AssignmentService,
    StateStore,
    create_engine,
    create_schema,
    create_session_factory,
    wait_for_database,
)
from app.services.database import ping

logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings to use instead of the environment-loaded ones

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or get_settings()
    setup_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """
        Application lifespan manager.

        Connects to the database, prepares the schema and wires the
        assignment engine; disposes the connection pool on shutdown.
        """
        logger.info(
            "Starting reviewer service",
            host=settings.host,
            port=settings.port
        )

        engine = create_engine(settings)
        try:
            await wait_for_database(engine, settings)
            if settings.database_create_schema:
                await create_schema(engine)
        except Exception as e:
            logger.error("Startup failed", error=str(e))
            await engine.dispose()
            raise

        app.state.engine = engine
        app.state.assignment_service = AssignmentService(
            StateStore(create_session_factory(engine)),
            max_reviewers=settings.max_reviewers,
        )

        yield

        # Shutdown
        logger.info("Shutting down reviewer service")
        await engine.dispose()

    app = FastAPI(
        title="PR Reviewer Service",
        description="Assigns and reassigns pull request reviewers within teams",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json"
    )

    metrics = RequestMetrics()
    app.state.metrics = metrics

    @app.middleware("http")
    async def observe_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start

        metrics.observe(
            request.method,
            route_template(request),
            response.status_code,
            duration
        )
        if settings.log_requests:
            logger.info(
                "Request handled",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration * 1000, 2)
            )
        return response

    register_exception_handlers(app)
    app.include_router(api_router)

    @app.get("/health")
    async def health_check():
        """
        Health check endpoint.

        Returns basic health status for load balancers and monitors.
        """
        return {"status": "ok"}

    @app.get("/ready")
    async def readiness_check(request: Request):
        """
        Readiness check endpoint.

        Verifies that the database answers.
        """
        try:
            await ping(request.app.state.engine)
        except Exception as e:
            logger.error("Readiness check failed", error=str(e))
            return error_response(
                status.HTTP_503_SERVICE_UNAVAILABLE,
                "UNAVAILABLE",
                "Database unavailable"
            )
        return {"status": "ready", "service": "reviewer-service"}

    @app.get("/metrics", include_in_schema=False)
    async def metrics_endpoint():
        """Prometheus scrape endpoint."""
        return Response(content=metrics.render(), media_type=metrics.content_type)

    return app
