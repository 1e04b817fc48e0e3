"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from gello.api import router as api_router
from gello.api import shop_router
from gello.config import get_settings
from gello.db.session import close_supabase, init_supabase
from gello.exceptions import GelloError, ValidationError
from gello.middleware.csrf import CSRFMiddleware
from gello.middleware.logging import LoggingMiddleware, configure_logging
from gello.middleware.request_id import RequestIDMiddleware

logger = structlog.get_logger()
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup/shutdown events."""
    # Startup
    logger.info("Starting Gello API", version=settings.app_version, environment=settings.environment)
    await init_supabase(app)
    logger.info("Supabase clients initialized", url=settings.supabase_url)

    yield

    # Shutdown
    logger.info("Shutting down Gello API")
    await close_supabase(app)


async def gello_error_handler(request: Request, exc: GelloError) -> ORJSONResponse:
    """Render a domain error as ``{"error": code, "message": message}``."""
    content: dict = {"error": exc.code, "message": exc.message}
    if isinstance(exc, ValidationError) and exc.details:
        content["details"] = exc.details
    if exc.status_code >= 500:
        logger.error("request_error", error_code=exc.code, error=exc.message)
    return ORJSONResponse(status_code=exc.status_code, content=content)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> ORJSONResponse:
    details = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]
    return ORJSONResponse(
        status_code=400,
        content={"error": "validation_error", "message": "Invalid request", "details": details},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> ORJSONResponse:
    logger.exception("unhandled_error", error_type=type(exc).__name__)
    return ORJSONResponse(
        status_code=500,
        content={"error": "internal_error", "message": "Internal server error"},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Team task boards with story points, leaderboards and a points shop",
        openapi_url=f"{settings.api_prefix}/openapi.json",
        docs_url=f"{settings.api_prefix}/docs",
        redoc_url=f"{settings.api_prefix}/redoc",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    app.add_exception_handler(GelloError, gello_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Add middleware (order matters - last added is first executed)
    app.add_middleware(CSRFMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    # Trust proxy headers (X-Forwarded-Proto, X-Forwarded-For) from the load balancer
    app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=["*"])

    app.include_router(api_router, prefix=settings.api_prefix)
    app.include_router(shop_router)

    return app


app = create_app()
