"""FastAPI application - Copy Engine.

Replicates leader fills into follower copy orders. The HTTP surface
accepts leader fills (queued for the workers) and lets followers manage
guardrails and inspect or cancel their copy orders.
"""

import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from copy_engine import __version__
from copy_engine.config import (
    bind_request_context,
    clear_request_context,
    get_logger,
    get_settings,
    setup_logging,
)
from copy_engine.domain.shared import (
    AggregateNotFound,
    BusinessRuleViolation,
    DomainException,
    InvalidStateTransition,
)
from copy_engine.infrastructure.locks import build_follower_lock
from copy_engine.infrastructure.messaging import get_event_bus, register_default_subscribers
from copy_engine.infrastructure.persistence.sqlalchemy import create_engine, create_session_factory
from copy_engine.presentation.api import dependencies
from copy_engine.presentation.api.v1.routes import (
    copy_orders_router,
    delayed_copy_orders_router,
    guardrails_router,
    leader_trades_router,
)

settings = get_settings()

setup_logging(settings)
logger = get_logger(__name__)


# ============================================================================
# LIFESPAN EVENTS (startup/shutdown)
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the engine and session factory, wire dependencies and subscribers.

    Schema is managed by Alembic (``alembic upgrade head``).
    """
    logger.info("application.startup.started")

    engine = create_engine(settings)
    dependencies.init_dependencies(
        session_factory=create_session_factory(engine),
        locks=build_follower_lock(settings),
    )
    register_default_subscribers(get_event_bus())

    logger.info("application.startup.completed")

    yield

    logger.info("application.shutdown.started")
    await engine.dispose()
    logger.info("application.shutdown.completed")


# ============================================================================
# CREATE FASTAPI APPLICATION
# ============================================================================


app = FastAPI(
    title=settings.app_name,
    description="""
    Copy trading replication engine.

    ## Features
    - Leader fill intake, replicated asynchronously to every eligible follower
    - Four position sizing strategies chosen by follower experience
    - Risk limits and per-symbol guardrails
    - End-of-day deferred copies for followers in deferred mode
    """,
    version=__version__,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    openapi_url="/openapi.json" if settings.debug else None,
    lifespan=lifespan,
)

# ============================================================================
# MIDDLEWARE
# ============================================================================


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind a request correlation ID to all log messages."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))

        bind_request_context(
            request_id=request_id,
            path=request.url.path,
            method=request.method,
        )

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            clear_request_context()


# Last added is executed first
app.add_middleware(RequestContextMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# ERROR HANDLERS
# ============================================================================


def _domain_error(status_code: int, exc: DomainException) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": type(exc).__name__,
            "message": exc.message,
            "details": {k: str(v) for k, v in exc.context.items()} or None,
        },
    )


@app.exception_handler(AggregateNotFound)
async def not_found_handler(request: Request, exc: AggregateNotFound) -> JSONResponse:
    return _domain_error(status.HTTP_404_NOT_FOUND, exc)


@app.exception_handler(InvalidStateTransition)
async def state_transition_handler(
    request: Request, exc: InvalidStateTransition
) -> JSONResponse:
    logger.info("api.invalid_state_transition", path=request.url.path, error=str(exc))
    return _domain_error(status.HTTP_409_CONFLICT, exc)


@app.exception_handler(BusinessRuleViolation)
async def business_rule_handler(
    request: Request, exc: BusinessRuleViolation
) -> JSONResponse:
    logger.warning("api.business_rule_violation", path=request.url.path, error=str(exc))
    return _domain_error(status.HTTP_422_UNPROCESSABLE_ENTITY, exc)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.warning(
        "api.validation_error",
        path=request.url.path,
        errors=exc.errors(),
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "ValidationError",
            "message": "Request validation failed",
            "details": {"errors": jsonable_errors(exc)},
        },
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    # ctx may hold exception instances, which are not JSON serializable
    return [
        {key: value for key, value in error.items() if key != "ctx"}
        for error in exc.errors()
    ]


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "api.unhandled_exception",
        path=request.url.path,
        error=str(exc),
        error_type=type(exc).__name__,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "InternalServerError",
            "message": "An unexpected error occurred. Please try again later.",
        },
    )


# ============================================================================
# ROUTES
# ============================================================================


@app.get("/health", tags=["Health"], summary="Health check (liveness)")
async def health_check() -> dict:
    return {
        "status": "healthy",
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
    }


app.include_router(leader_trades_router, prefix="/api/v1")
app.include_router(copy_orders_router, prefix="/api/v1")
app.include_router(guardrails_router, prefix="/api/v1")
app.include_router(delayed_copy_orders_router, prefix="/api/v1")


if __name__ == "__main__":
    import uvicorn

    # Run with: python -m copy_engine.main
    uvicorn.run("copy_engine.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
