"""
Main FastAPI application entry point.
Wires logging, request correlation, error mapping, routers and telemetry.
"""
import logging
import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Awaitable, Callable

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from app.api.dependencies import close_clients
from app.api.routers import health_router, movies_router
from app.config import get_settings
from app.config.logging import configure_logging
from app.core.exceptions import AppException, SearchFailure
from app.core.telemetry import setup_telemetry

REQUEST_ID_HEADER = "X-Request-ID"

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Log the outbound configuration on startup; close HTTP clients on shutdown."""
    settings = get_settings()
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    if not settings.catalog_configured:
        logger.warning("TMDB_ACCESS_TOKEN not set; catalog requests will be rejected")
    if not settings.ranking_configured:
        logger.warning("GEMINI_API_KEY not set; subjective searches will fail with RANKING_UNAVAILABLE")
    logger.info(
        f"Ranking: model={settings.GEMINI_MODEL}, pool={settings.AI_POOL_LIMIT}, "
        f"min_score={settings.MIN_MATCH_SCORE}, max_results={settings.MAX_RESULTS}"
    )

    yield

    logger.info("Shutting down; closing outbound clients")
    await close_clients()


async def request_id_middleware(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Adopt the caller's X-Request-ID (or mint one) and echo it back."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def search_failure_handler(request: Request, exc: SearchFailure) -> JSONResponse:
    """503 for catalog/ranking outages, with a Retry-After hint."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers={"Retry-After": str(get_settings().RETRY_AFTER_SEC)},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        f"Unhandled exception on {request.method} {request.url.path}: {exc}",
        extra={"request_id": getattr(request.state, "request_id", None)},
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
            }
        },
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    configure_logging(debug=settings.DEBUG, level=settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="""
        Movie Discovery API

        Recommends movies by filtering the TMDB catalog on objective
        constraints and ranking the survivors by subjective preferences.

        ## Features
        - Objective filtering: release years, rating, runtime, language, certification
        - Exclusion of movies the user already liked or disliked
        - Generative re-ranking for descriptions and mood sliders
        - Deterministic popularity/rating ranking otherwise
        - Cached catalog lookups, circuit breaker on the ranking service
        """,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Most specific handler wins, so SearchFailure takes precedence over AppException
    app.add_exception_handler(SearchFailure, search_failure_handler)
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.middleware("http")(request_id_middleware)

    app.include_router(health_router)
    app.include_router(movies_router)

    setup_telemetry(app)
    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)


if __name__ == "__main__":
    run()
