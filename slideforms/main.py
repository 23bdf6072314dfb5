"""FastAPI application entry point.

Main application setup with middleware, routing, and error mapping.
"""

import logging

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from slideforms.api.forms import router as forms_router
from slideforms.api.schemas import ErrorResponse, HealthResponse
from slideforms.core.config import Settings, get_settings
from slideforms.core.logging_config import setup_logging
from slideforms.interfaces.errors import (
    DuplicateTitleError,
    FetchError,
    FontError,
    FormEngineError,
    StorageError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Most specific first; DuplicateTitleError is also a ValidationError.
ERROR_STATUS: list[tuple[type[FormEngineError], int, str]] = [
    (DuplicateTitleError, status.HTTP_422_UNPROCESSABLE_ENTITY, "DUPLICATE_TITLE"),
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY, "VALIDATION_ERROR"),
    (FontError, status.HTTP_400_BAD_REQUEST, "FONT_ERROR"),
    (FetchError, status.HTTP_502_BAD_GATEWAY, "FETCH_ERROR"),
    (StorageError, status.HTTP_500_INTERNAL_SERVER_ERROR, "STORAGE_ERROR"),
]


def error_response(exc: FormEngineError) -> JSONResponse:
    """Map an engine error onto its HTTP status and error code."""
    for error_class, status_code, error_code in ERROR_STATUS:
        if isinstance(exc, error_class):
            break
    else:
        status_code, error_code = status.HTTP_500_INTERNAL_SERVER_ERROR, "ENGINE_ERROR"

    extra = {"duplicates": exc.duplicates} if isinstance(exc, DuplicateTitleError) else None
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(detail=str(exc), error_code=error_code, extra=extra).model_dump(),
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings. If None, loads from environment.

    Returns:
        Configured FastAPI application instance.
    """
    try:
        settings = settings or get_settings()

        app = FastAPI(
            title="Slide Forms",
            description="Slide template to PDF form synthesis and header/footer layout",
            version="0.1.0",
            docs_url="/docs",
            redoc_url="/redoc",
        )

        # Store settings in app state
        app.state.settings = settings

        # CORS middleware
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],  # Configure appropriately for production
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        app.include_router(forms_router)
        logger.info("Registered forms router")

        # Health check endpoint
        @app.get("/health", response_model=HealthResponse, tags=["health"])
        async def health_check() -> HealthResponse:
            """Health check endpoint for load balancers and monitoring."""
            return HealthResponse(libreoffice=settings.resolve_libreoffice() is not None)

        # Exception handlers
        @app.exception_handler(FormEngineError)
        async def engine_exception_handler(request, exc: FormEngineError):
            """Translate engine errors into HTTP responses."""
            response = error_response(exc)
            if response.status_code >= 500:
                logger.error(f"{type(exc).__name__} on {request.url.path}: {exc}", exc_info=exc)
            else:
                logger.warning(f"{type(exc).__name__} on {request.url.path}: {exc}")
            return response

        @app.exception_handler(RequestValidationError)
        async def validation_exception_handler(request, exc):
            """Handle Pydantic validation errors."""
            logger.warning(f"Validation error: {exc.errors()}")
            return JSONResponse(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                content={
                    "detail": "Validation error",
                    "errors": jsonable_errors(exc.errors()),
                },
            )

        @app.exception_handler(Exception)
        async def general_exception_handler(request, exc):
            """Handle uncaught exceptions."""
            logger.error(f"Unhandled exception: {exc}", exc_info=True)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=ErrorResponse(
                    detail="Internal server error",
                    error_code="INTERNAL_ERROR",
                ).model_dump(),
            )

        logger.info("FastAPI application created successfully")
        return app

    except Exception as e:
        logger.error(f"Failed to create FastAPI app: {e}", exc_info=True)
        raise


def jsonable_errors(errors: list[dict]) -> list[dict]:
    """Drop non-serializable context from pydantic error entries."""
    return [{key: value for key, value in error.items() if key != "ctx"} for error in errors]


if __name__ == "__main__":
    import uvicorn

    setup_logging()
    settings = get_settings()
    logger.info("Starting uvicorn server on port 8000...")
    uvicorn.run(
        "slideforms.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )
