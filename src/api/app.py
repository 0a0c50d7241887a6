"""
FastAPI application: middleware, exception handlers and routers.
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api.routes import analysis, auth, coach, games, rankings
from src.core.config import settings
from src.core.exceptions import (
    GammonGuruError,
    QuotaExceededError,
    RateLimitExceededError,
)
from src.db.database import init_db

logger = logging.getLogger(__name__)

APP_NAME = "GammonGuru API"
APP_VERSION = "1.0.0"

AVAILABLE_ENDPOINTS = [
    "GET /health",
    "GET /api",
    "POST /api/auth/register",
    "POST /api/auth/login",
    "POST /api/auth/refresh",
    "GET /api/auth/me",
    "PUT /api/auth/me",
    "POST /api/auth/logout",
    "DELETE /api/auth/account",
    "GET /api/auth/check-email",
    "GET /api/auth/check-username",
    "POST /api/games",
    "GET /api/games",
    "GET /api/games/available",
    "GET /api/games/:id",
    "DELETE /api/games/:id",
    "POST /api/games/:id/join",
    "POST /api/games/:id/roll",
    "GET /api/games/:id/moves",
    "POST /api/games/:id/move",
    "POST /api/games/:id/resign",
    "GET /api/games/:id/suggestions",
    "GET /api/games/:id/evaluate",
    "POST /api/analysis",
    "POST /api/coach/chat",
    "GET /api/rankings",
    "GET /api/rankings/me",
]


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def error_response(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message, **extra})


# --- Exception handlers ---
async def handle_gammonguru_error(request: Request, exc: GammonGuruError) -> JSONResponse:
    if isinstance(exc, RateLimitExceededError):
        response = error_response(exc.status_code, exc.message, retryAfter=exc.retry_after)
        response.headers["Retry-After"] = str(exc.retry_after)
        return response
    if isinstance(exc, QuotaExceededError):
        return error_response(exc.status_code, exc.message, quotaRemaining=exc.remaining)
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return error_response(exc.status_code, exc.message)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = sorted(
        {
            ".".join(str(part) for part in error["loc"] if part not in ("body", "query", "path"))
            for error in exc.errors()
        }
        - {""}
    )
    return error_response(400, "Invalid or missing fields", fields=fields)


async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return error_response(
            404,
            "Endpoint not found",
            path=request.url.path,
            availableEndpoints=AVAILABLE_ENDPOINTS,
        )
    return error_response(exc.status_code, str(exc.detail))


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(500, "Internal server error")


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("%s %s started", APP_NAME, APP_VERSION)
    yield


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title=APP_NAME, version=APP_VERSION, lifespan=lifespan)

    # Browsers refuse credentials with a wildcard origin
    origins = settings.CORS_ORIGINS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_credentials=bool(origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "%s %s %d %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - start) * 1000,
        )
        return response

    app.add_exception_handler(GammonGuruError, handle_gammonguru_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    for module in (auth, games, analysis, coach, rankings):
        app.include_router(module.router)

    @app.get("/health")
    def health() -> dict:
        return {
            "status": "OK",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": APP_NAME,
            "version": APP_VERSION,
        }

    @app.get("/api")
    def api_info() -> dict:
        return {
            "success": True,
            "message": f"{APP_NAME} {APP_VERSION}",
            "data": {"endpoints": AVAILABLE_ENDPOINTS},
        }

    return app


app = create_app()
