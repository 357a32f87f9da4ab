"""
FastAPI Application
==================

Main FastAPI application exposing HTML to image conversion over HTTP.
Builds the middleware stack, exception handlers and the shared browser
manager that lives for the lifetime of the server.
"""

from contextlib import asynccontextmanager
import uuid
from typing import AsyncGenerator, Any, Dict, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog
import uvicorn

from src.api.dependencies import get_current_settings
from src.api.rate_limit import SlidingWindowRateLimiter
from src.api.routes.convert import router as convert_router
from src.api.routes.health import router as health_router
from src.api.security import BodySizeLimitMiddleware, apply_security_headers
from src.config.logging import get_logger, setup_logging
from src.config.settings import Settings, get_settings
from src.core.rendering.browser_manager import BrowserManager
from src.core.rendering.converter import HTMLImageConverter
from src.core.rendering.errors import ConversionError
from src.models.schemas import ErrorResponse

logger = get_logger(__name__)

AVAILABLE_ENDPOINTS = {
    "root": "GET /",
    "health": "GET /health",
    "convert": "POST /convert",
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings: Settings = app.state.settings
    browser_manager: BrowserManager = app.state.browser_manager

    # Startup
    logger.info("Starting FastAPI application", environment=settings.environment)

    if settings.launch_browser_on_startup:
        try:
            await browser_manager.ensure_browser()
            logger.info("Browser initialized")
        except Exception as e:
            # The next request retries the launch.
            logger.error("Failed to initialize browser on startup", error=str(e))

    try:
        yield
    finally:
        # Shutdown; in-flight conversions are not drained.
        logger.info("Shutting down FastAPI application")
        try:
            await browser_manager.close()
        except Exception as e:
            logger.error("Error closing browser", error=str(e))


def _error_content(error: ErrorResponse) -> Dict[str, Any]:
    return error.model_dump(mode="json", exclude_none=True)


def create_app(
    settings: Optional[Settings] = None,
    browser_manager: Optional[BrowserManager] = None,
) -> FastAPI:
    """
    Application factory function for creating a FastAPI app instance.

    Args:
        settings: Optional settings override (useful for testing)
        browser_manager: Optional browser manager override (useful for testing)

    Returns:
        Configured FastAPI application
    """
    if settings is None:
        settings = get_settings()
    setup_logging(settings)

    if browser_manager is None:
        browser_manager = BrowserManager(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Render arbitrary HTML into PNG or JPEG images with headless Chromium",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
    )
    app.state.settings = settings
    app.state.browser_manager = browser_manager
    app.state.converter = HTMLImageConverter(browser_manager, settings)
    app.state.rate_limiter = SlidingWindowRateLimiter(
        settings.rate_limit_max, settings.rate_limit_window_seconds
    )

    # Middleware, innermost first
    app.add_middleware(BodySizeLimitMiddleware, max_body_size=settings.max_body_size)

    @app.middleware("http")
    async def rate_limit(request: Request, call_next):  # type: ignore
        """Throttle requests per client address."""
        client_id = request.client.host if request.client else "unknown"
        decision = request.app.state.rate_limiter.hit(client_id)

        if not decision.allowed:
            logger.warning("Rate limit exceeded", client=client_id)
            error = ErrorResponse(
                error="Too many requests from this IP, please try again later.",
                request_id=getattr(request.state, "request_id", None),
            )
            response = JSONResponse(status_code=429, content=_error_content(error))
        else:
            response = await call_next(request)

        response.headers.update(decision.headers())
        return response

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):  # type: ignore
        """Add request ID to all requests."""
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        structlog.contextvars.bind_contextvars(request_id=request_id)

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            structlog.contextvars.unbind_contextvars("request_id")

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):  # type: ignore
        """Set security headers on every response."""
        response = await call_next(request)
        apply_security_headers(response.headers)
        return response

    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(ConversionError)
    async def conversion_exception_handler(
        request: Request, exc: ConversionError
    ) -> JSONResponse:
        """Report conversion failures with the status of their error class."""
        error = ErrorResponse(
            error=exc.message,
            message=exc.hint,
            details=exc.detail if settings.expose_error_details else None,
            error_code=exc.error_code,
            request_id=getattr(request.state, "request_id", None),
        )
        return JSONResponse(status_code=exc.status_code, content=_error_content(error))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Report malformed or mistyped request bodies as 400."""
        details = [
            {
                "loc": [str(part) for part in err.get("loc", ())],
                "msg": err.get("msg", ""),
                "type": err.get("type", ""),
            }
            for err in exc.errors()
        ]
        error = ErrorResponse(
            error="Invalid request body",
            message="Check the request fields and their types",
            details=details,
            error_code="VALIDATION_ERROR",
            request_id=getattr(request.state, "request_id", None),
        )
        logger.warning("Request validation failed", errors=details)
        return JSONResponse(status_code=400, content=_error_content(error))

    @app.exception_handler(StarletteHTTPException)
    async def custom_http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Structured error responses for routing errors."""
        if exc.status_code == 404:
            return JSONResponse(
                status_code=404,
                content={
                    "error": "Endpoint not found",
                    "message": "Please check the API documentation",
                    "availableEndpoints": AVAILABLE_ENDPOINTS,
                },
            )

        error = ErrorResponse(
            error=str(exc.detail),
            error_code=str(exc.status_code),
            request_id=getattr(request.state, "request_id", None),
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_content(error),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """General exception handler for unexpected errors."""
        logger.error(
            "Unhandled exception",
            exception=str(exc),
            request_id=getattr(request.state, "request_id", None),
            exc_info=exc,
        )
        error = ErrorResponse(error="Internal server error")
        return JSONResponse(status_code=500, content=_error_content(error))

    # Routes
    app.include_router(health_router)
    app.include_router(convert_router)

    @app.get("/", tags=["General"])
    async def root(current: Settings = Depends(get_current_settings)) -> Dict[str, Any]:
        """
        Root endpoint with basic API information.
        """
        return {
            "status": "ok",
            "message": f"{current.app_name} is running",
            "version": current.app_version,
            "endpoints": AVAILABLE_ENDPOINTS,
        }

    return app


app = create_app()


def run_server() -> None:
    """Run the API server with uvicorn."""
    settings = get_settings()
    logger.info("Starting server", host=settings.host, port=settings.port)
    uvicorn.run(
        "src.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        log_config=None,
        access_log=True,
    )


if __name__ == "__main__":
    run_server()
