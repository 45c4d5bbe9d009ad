"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from paylevel import __version__
from paylevel.api.routes import (
    calendar_router,
    export_router,
    health_router,
    jobs_router,
    logs_router,
    payslip_router,
    state_router,
    stats_router,
    templates_router,
)
from paylevel.calculators.rate_card import RateCardError
from paylevel.calculators.reconciler import RemediationError
from paylevel.config import get_settings
from paylevel.database import create_tables, dispose_db, init_db
from paylevel.services import (
    ImportValidationError,
    InvalidDurationError,
    JobNotFoundError,
    LastJobError,
    StateMigrationError,
    StateStore,
    TemplateNotFoundError,
)

logger = logging.getLogger(__name__)

# Domain exception -> (status, code)
ERROR_CODES: dict[type[Exception], tuple[int, str]] = {
    JobNotFoundError: (status.HTTP_404_NOT_FOUND, "JOB_NOT_FOUND"),
    TemplateNotFoundError: (status.HTTP_404_NOT_FOUND, "TEMPLATE_NOT_FOUND"),
    RateCardError: (status.HTTP_404_NOT_FOUND, "RATE_CARD_NOT_FOUND"),
    LastJobError: (status.HTTP_409_CONFLICT, "LAST_JOB"),
    InvalidDurationError: (status.HTTP_422_UNPROCESSABLE_ENTITY, "INVALID_DURATION"),
    RemediationError: (status.HTTP_422_UNPROCESSABLE_ENTITY, "INVALID_REMEDIATION"),
    ImportValidationError: (status.HTTP_400_BAD_REQUEST, "INVALID_IMPORT"),
    StateMigrationError: (status.HTTP_400_BAD_REQUEST, "INVALID_STATE"),
    ValueError: (status.HTTP_422_UNPROCESSABLE_ENTITY, "INVALID_VALUE"),
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup
    owns_store = app.state.store is None
    if owns_store:
        engine, session_factory = init_db()
        await create_tables(engine)
        app.state.store = StateStore(session_factory, get_settings().state_key)
    yield
    # Shutdown
    if owns_store:
        app.state.store = None
        await dispose_db()


def create_app(store: StateStore | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        store: State store to serve; when omitted one is created at startup
            from the configured database
    """
    app = FastAPI(
        title="PayLevel API",
        description="Shift logging, earnings and payslip reconciliation",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.store = store

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    async def domain_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Map domain failures to 4xx responses."""
        for exc_type, (status_code, code) in ERROR_CODES.items():
            if isinstance(exc, exc_type):
                return JSONResponse(
                    status_code=status_code,
                    content={"detail": str(exc), "code": code},
                )
        raise exc

    for exc_type in ERROR_CODES:
        app.add_exception_handler(exc_type, domain_exception_handler)

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            },
        )

    # Include routers
    app.include_router(health_router)
    for router in (
        state_router,
        logs_router,
        jobs_router,
        stats_router,
        templates_router,
        calendar_router,
        payslip_router,
        export_router,
    ):
        app.include_router(router, prefix="/api/v1")

    return app


# Default app instance for uvicorn
app = create_app()
