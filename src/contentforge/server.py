import time
import traceback
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.exceptions import HTTPException as StarletteHTTPException

from contentforge import __version__
from contentforge.config import ForgeConfig
from contentforge.dependencies import set_config
from contentforge.errors import ForgeError
from contentforge.log_config import configure_logging, logger
from contentforge.routes import ai, health, pdf, text, upload, youtube

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "X-XSS-Protection": "0",
}


def _error_body(code: int, message: str, path: str, **extra: Any) -> dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "timestamp": datetime.now(UTC).isoformat(),
            "path": path,
            **extra,
        }
    }


def _register_error_handlers(app: FastAPI, config: ForgeConfig) -> None:
    """Render every failure as ``{"error": {code, message, timestamp, path}}``."""

    @app.exception_handler(ForgeError)
    async def handle_forge_error(request: Request, exc: ForgeError) -> JSONResponse:
        if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(
                "Error handling request path=%s error=%s details=%s", request.url.path, exc.message, exc.details
            )
        else:
            logger.warning(
                "Rejected request path=%s error=%s details=%s", request.url.path, exc.message, exc.details
            )
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.status_code, exc.message, request.url.path),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        issues = [
            {"field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"), "message": error.get("msg")}
            for error in exc.errors()
        ]
        logger.warning("Invalid request parameters path=%s issues=%s", request.url.path, issues)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body(
                status.HTTP_400_BAD_REQUEST, "Invalid request parameters", request.url.path, details=issues
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.status_code, str(exc.detail), request.url.path),
            headers=getattr(exc, "headers", None),
        )

    # slowapi's middleware calls this handler synchronously
    def handle_rate_limit(request: Request, exc: RateLimitExceeded) -> JSONResponse:
        logger.warning(
            "Rate limit exceeded path=%s client=%s limit=%s",
            request.url.path,
            get_remote_address(request),
            exc.detail,
        )
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content=_error_body(
                status.HTTP_429_TOO_MANY_REQUESTS,
                "Too many requests, please try again later",
                request.url.path,
            ),
        )

    app.add_exception_handler(RateLimitExceeded, handle_rate_limit)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error path=%s", request.url.path)
        if config.is_development:
            content = _error_body(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                str(exc) or exc.__class__.__name__,
                request.url.path,
                stack=traceback.format_exception(exc),
            )
        else:
            content = _error_body(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error", request.url.path)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


def create_app(config: ForgeConfig) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        config: Service configuration

    Returns:
        Configured FastAPI application

    """
    configure_logging(config.log_level)
    set_config(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):  # noqa: ANN001
        logger.info("Server running in %s mode on port %d", config.environment, config.port)
        yield
        logger.info("Server shutting down")

    app = FastAPI(
        title="contentforge",
        description="Captions and short-form video scripts from text, PDFs and YouTube videos",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[config.rate_limit],
        storage_uri="memory://",
    )
    app.add_middleware(SlowAPIMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if config.is_development else [config.cors_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def guard_requests(request: Request, call_next):  # noqa: ANN001, ANN202
        content_length = request.headers.get("content-length", "")
        is_json = "application/json" in request.headers.get("content-type", "")
        if is_json and content_length.isdigit() and int(content_length) > config.max_json_bytes:
            logger.warning("Rejected oversized body path=%s bytes=%s", request.url.path, content_length)
            response = JSONResponse(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                content=_error_body(
                    status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, "Request body too large", request.url.path
                ),
            )
        else:
            response = await call_next(request)
        response.headers.update(SECURITY_HEADERS)
        return response

    @app.middleware("http")
    async def log_requests(request: Request, call_next):  # noqa: ANN001, ANN202
        logger.info("%s %s - request received", request.method, request.url.path)
        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s - response sent (%.0fms) - status %d",
            request.method,
            request.url.path,
            duration_ms,
            response.status_code,
        )
        return response

    _register_error_handlers(app, config)

    app.include_router(text.router)
    app.include_router(pdf.router)
    app.include_router(youtube.router)
    app.include_router(ai.router)
    app.include_router(upload.router)
    app.include_router(health.router)

    @app.get("/health", include_in_schema=False)
    async def liveness() -> dict[str, str]:
        """Process liveness without touching the completion API."""
        return {
            "status": "ok",
            "environment": config.environment,
            "timestamp": datetime.now(UTC).isoformat(),
        }

    return app
