"""FastAPI application factory."""

from __future__ import annotations

import logging
import time
import uuid
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from applytrack import __version__
from applytrack.accounts.repository import AccountRepository
from applytrack.accounts.service import AuthService
from applytrack.api.ratelimit import FixedWindowRateLimiter, client_key
from applytrack.api.routes import router
from applytrack.config.settings import Settings, get_settings
from applytrack.tracker.analytics import AnalyticsService
from applytrack.tracker.errors import RateLimitedError, TrackerError, ValidationError
from applytrack.tracker.models import utc_now
from applytrack.tracker.reminders import ReminderService
from applytrack.tracker.repository import ApplicationRepository
from applytrack.tracker.service import ApplicationService
from applytrack.utils.logging import get_logger, log_event

LOGGER = get_logger("api")

SECURITY_HEADERS = {
    "x-content-type-options": "nosniff",
    "x-frame-options": "DENY",
    "referrer-policy": "no-referrer",
}


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the API application.

    Args:
        settings: Settings to use; defaults to the process-wide settings.

    Returns:
        A FastAPI app whose lifespan opens and closes the database.
    """
    settings = settings or get_settings()
    applications_repo = ApplicationRepository(settings.database_path)
    accounts_repo = AccountRepository(settings.database_path)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await applications_repo.initialize()
        await accounts_repo.initialize()
        applications = ApplicationService(applications_repo)
        app.state.applications = applications
        app.state.reminders = ReminderService(applications)
        app.state.analytics = AnalyticsService(applications_repo)
        app.state.auth = AuthService(
            accounts_repo,
            token_ttl=timedelta(hours=settings.token_ttl_hours),
            hash_rounds=settings.password_hash_rounds,
        )
        LOGGER.info("Database ready at %s", settings.database_path)
        try:
            yield
        finally:
            await applications_repo.close()
            await accounts_repo.close()

    app = FastAPI(title="ApplyTrack", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.global_limiter = FixedWindowRateLimiter(
        settings.rate_limit_max_requests, settings.rate_limit_window_seconds
    )
    app.state.auth_limiter = FixedWindowRateLimiter(
        settings.auth_rate_limit_max_requests, settings.rate_limit_window_seconds
    )

    @app.exception_handler(TrackerError)
    async def tracker_error_handler(request: Request, exc: TrackerError) -> JSONResponse:
        if exc.status_code >= 500:
            LOGGER.error("Unhandled domain error on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        error = ValidationError.from_pydantic(exc)
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.middleware("http")
    async def guard_middleware(request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit():
            if int(content_length) > settings.max_body_bytes:
                return JSONResponse(
                    status_code=413, content={"error": "Request body too large"}
                )

        if not request.app.state.global_limiter.hit(client_key(request)):
            error = RateLimitedError()
            return JSONResponse(status_code=error.status_code, content=error.to_dict())

        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response

    @app.middleware("http")
    async def observability_middleware(request: Request, call_next):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        started = time.perf_counter()

        def complete(status_code: int, **extra) -> None:
            log_event(
                LOGGER,
                "request_complete",
                request_id=request_id,
                method=request.method,
                path=request.url.path,
                status_code=status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 3),
                **extra,
            )

        try:
            response = await call_next(request)
        except Exception as exc:
            complete(500, level=logging.ERROR, exc_info=True, error=str(exc))
            return JSONResponse(
                status_code=500,
                content={"error": "Internal Server Error", "request_id": request_id},
                headers={"x-request-id": request_id},
            )

        response.headers["x-request-id"] = request_id
        complete(response.status_code)
        return response

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.get("/api/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "timestamp": utc_now().isoformat()}

    app.include_router(router, prefix="/api/v1")
    return app
