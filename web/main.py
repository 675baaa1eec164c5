"""FastAPI application for the Taskboard REST API"""

import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from taskboard import __version__
from taskboard.app import TaskboardApp
from taskboard.models.requests import first_error
from taskboard.storage.base import Database
from taskboard.utils.config import Settings
from taskboard.utils.exceptions import TaskboardError, UnauthenticatedError
from taskboard.utils.logger import get_logger

from .api import auth_router, router, task_router

logger = get_logger(__name__)

SECURITY_HEADERS = [
    (b"x-content-type-options", b"nosniff"),
    (b"x-frame-options", b"SAMEORIGIN"),
    (b"referrer-policy", b"no-referrer"),
    (b"cross-origin-opener-policy", b"same-origin"),
    (b"x-dns-prefetch-control", b"off"),
]

GENERIC_ERROR_MESSAGE = "Internal server error"


class SecurityHeadersASGI:
    """Raw ASGI middleware adding hardening headers to every HTTP response"""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = list(message.get("headers") or [])
                present = {k.lower() for k, _ in headers}
                headers.extend((k, v) for k, v in SECURITY_HEADERS if k not in present)
                message["headers"] = headers
            await send(message)

        await self.app(scope, receive, send_with_headers)


class RequestLogASGI:
    """
    One log line per request: method, path, status, duration.

    Sits innermost so unexpected errors become a 500 {message} response here,
    inside the CORS and security-header layers.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        started = time.perf_counter()
        status_code = 500
        response_started = False

        async def send_capturing_status(message: Message) -> None:
            nonlocal status_code, response_started
            if message["type"] == "http.response.start":
                status_code = message["status"]
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_capturing_status)
        except Exception as exc:
            if response_started:
                raise
            logger.exception("Unhandled error", path=scope.get("path"), error_type=type(exc).__name__)
            response = _message_response(500, GENERIC_ERROR_MESSAGE)
            await response(scope, receive, send_capturing_status)
        finally:
            logger.info(
                "HTTP request",
                method=scope.get("method"),
                path=scope.get("path"),
                status=status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )


def _message_response(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message}, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """Map every failure onto a {"message": ...} body"""

    @app.exception_handler(TaskboardError)
    async def taskboard_error_handler(request: Request, exc: TaskboardError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(
                "Request failed",
                path=request.url.path,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return _message_response(exc.status_code, GENERIC_ERROR_MESSAGE)
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthenticatedError) else None
        return _message_response(exc.status_code, exc.message, headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _message_response(400, first_error(list(exc.errors())).message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _message_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))

    # errors raised outside RequestLogASGI (in the CORS or header layers)
    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error", path=request.url.path, error_type=type(exc).__name__)
        return _message_response(500, GENERIC_ERROR_MESSAGE)


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    configure_logging: bool = True,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Pre-built settings; loaded from file/environment when omitted.
        database: Pre-built document store, e.g. a test database.
        configure_logging: Set to False when the caller already configured logging.
    """
    taskboard = TaskboardApp(settings, database).initialize(configure_logging=configure_logging)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        taskboard.shutdown()

    app = FastAPI(
        title="Taskboard API",
        description="Task management REST API",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.taskboard = taskboard

    register_exception_handlers(app)

    app.add_middleware(RequestLogASGI)
    app.add_middleware(SecurityHeadersASGI)
    cors_origins = taskboard.settings.web.cors_origins if taskboard.settings.is_production else ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)
    app.include_router(auth_router)
    app.include_router(task_router)
    return app
