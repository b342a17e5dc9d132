"""Main FastAPI application."""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional, Sequence

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from guruji import __version__
from guruji.api import chat, health
from guruji.core.config import Settings, get_settings
from guruji.core.exceptions import GurujiException
from guruji.core.logging import setup_logger
from guruji.core.rate_limit import RateLimitMiddleware
from guruji.core.security import SecurityHeadersMiddleware
from guruji.schemas.chat import ErrorCode
from guruji.services.completion import CompletionService
from guruji.services.relay import RelayService

logger = setup_logger(__name__)


def error_response(status_code: int, message: str, code: ErrorCode) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message, "code": code.value},
    )


def validation_message(errors: Sequence[Dict[str, Any]]) -> str:
    """Describe the first invalid field of a request body."""
    first = errors[0] if errors else {}
    loc = tuple(first.get("loc", ()))
    # ("body",) is a missing body
    if (
        first.get("type") == "json_invalid"
        or loc in ((), ("body",))
        or "messages" in loc
    ):
        return "Invalid request format. Expected messages array."
    field = ".".join(str(part) for part in loc if part != "body")
    return f"Invalid request format. Invalid value for '{field}'."


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events."""
    # Startup
    settings: Settings = app.state.settings
    logger.info(
        f"Starting {settings.APP_NAME}, version={app.version}, port={settings.PORT}, "
        f"environment={settings.ENVIRONMENT}, "
        f"api={'configured' if settings.api_configured else 'missing key'}"
    )

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.APP_NAME}")
    await app.state.completion_service.aclose()


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """Middleware turning unexpected exceptions into `SERVER_ERROR` responses."""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(f"Unhandled error on {request.url.path}: {e}", exc_info=True)
            return error_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "Internal server error",
                ErrorCode.SERVER_ERROR,
            )


def register_exception_handlers(app: FastAPI) -> None:
    """Render every failure as `{success: false, error, code}`."""

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        logger.warning(f"Invalid request to {request.url.path}: {errors}")
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            validation_message(errors),
            ErrorCode.INVALID_REQUEST,
        )

    @app.exception_handler(GurujiException)
    async def guruji_exception_handler(
        request: Request, exc: GurujiException
    ) -> JSONResponse:
        logger.error(f"{exc.code.value} on {request.url.path}: {exc.message}")
        return error_response(exc.status_code, exc.message, exc.code)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        # Unknown path or unsupported method on a known path
        if exc.status_code in (
            status.HTTP_404_NOT_FOUND,
            status.HTTP_405_METHOD_NOT_ALLOWED,
        ):
            return error_response(
                status.HTTP_404_NOT_FOUND, "Endpoint not found", ErrorCode.NOT_FOUND
            )
        code = ErrorCode.INVALID_REQUEST if exc.status_code < 500 else ErrorCode.SERVER_ERROR
        return error_response(exc.status_code, str(exc.detail), code)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal server error",
            ErrorCode.SERVER_ERROR,
        )


def create_application(
    settings: Optional[Settings] = None,
    completion_service: Optional[CompletionService] = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        settings: Settings to run with. Read from the environment if omitted.
        completion_service: Upstream client override. Built from settings if omitted.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.APP_NAME,
        description="Guruji chat relay for the DeepSeek completion API",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc" if settings.DEBUG else None,
        servers=[
            {
                "url": f"http://localhost:{settings.PORT}",
                "description": "Local Enviroment",
            }
        ],
        lifespan=lifespan,
    )

    # Services are built once and injected into handlers via app.state
    completion_service = completion_service or CompletionService(settings)
    app.state.settings = settings
    app.state.completion_service = completion_service
    app.state.relay_service = RelayService(completion_service)

    # Innermost, so unexpected errors still pass through the security headers
    app.add_middleware(UnhandledErrorMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=settings.RATE_LIMIT_MAX,
        window_minutes=settings.RATE_LIMIT_WINDOW,
        excluded_paths={"/api/health"},
    )
    app.add_middleware(SecurityHeadersMiddleware)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        response = await call_next(request)
        logger.debug(
            f"{request.method} {request.url.path} -> {response.status_code}"
        )
        return response

    register_exception_handlers(app)

    # Include API routers
    app.include_router(health.router)
    app.include_router(chat.router)

    return app
