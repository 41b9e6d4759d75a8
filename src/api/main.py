"""Campus Auth - FastAPI Application."""

import logging
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError
from starlette.exceptions import HTTPException

from src.api.routes import auth, health
from src.config import Settings, configure_logging, get_settings
from src.domain.services.email import ResetLinkMailer
from src.domain.services.tokens import ResetTokenService, SessionTokenService
from src.storage import database
from src.storage.users import InMemoryUserStore, StoreUnavailableError

logger = logging.getLogger(__name__)


def _error_response(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "data": None, "message": message},
        headers=headers,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error_response(status.HTTP_400_BAD_REQUEST, "Invalid request body")


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return _error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


async def store_unavailable_handler(request: Request, exc: StoreUnavailableError) -> JSONResponse:
    logger.error("User store unavailable on %s: %s", request.url.path, exc.__cause__ or exc)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Server error")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Server error")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application.

    Raises:
        ConfigurationError: if the settings cannot run safely (e.g. no
            signing secret in production)
    """
    settings = settings or get_settings()
    secret_key = settings.signing_key()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Establish the database connectivity flag, falling back to memory."""
        if settings.use_database:
            try:
                await database.init_db()
                app.state.use_database = True
            except (OperationalError, OSError) as exc:
                logger.warning("Database unavailable, using in-memory user store: %s", exc)
                app.state.use_database = False
        logger.info("User store backend: %s", "database" if app.state.use_database else "memory")
        yield
        await database.engine.dispose()

    app = FastAPI(
        title="Campus Auth",
        description="Registration, login and password reset for the campus media app",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Memory until the lifespan confirms the database is reachable
    app.state.use_database = False
    app.state.memory_store = InMemoryUserStore()
    app.state.session_tokens = SessionTokenService(
        secret_key,
        algorithm=settings.jwt_algorithm,
        ttl=timedelta(days=settings.session_token_ttl_days),
    )
    app.state.reset_tokens = ResetTokenService(
        secret_key,
        algorithm=settings.jwt_algorithm,
        ttl=timedelta(minutes=settings.reset_token_ttl_minutes),
    )
    app.state.reset_notifier = ResetLinkMailer(settings)

    # CORS configuration for frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url, "http://localhost:5173", "http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StoreUnavailableError, store_unavailable_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(health.router, tags=["health"])
    app.include_router(auth.router)
    return app


configure_logging(get_settings().log_level)
app = create_app()
