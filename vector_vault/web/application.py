from importlib import metadata

from fastapi import FastAPI, Request, status
from fastapi.responses import UJSONResponse
from loguru import logger

from vector_vault.exceptions import (
    DuplicateChunkError,
    StoreUnavailableError,
    ValidationError,
)
from vector_vault.logging_config import configure_logging
from vector_vault.web.api.router import api_router
from vector_vault.web.lifetime import register_shutdown_event, register_startup_event


def _error_handler(status_code: int):
    async def handler(request: Request, exc: Exception) -> UJSONResponse:
        return UJSONResponse(status_code=status_code, content={"detail": str(exc)})

    return handler


def get_app() -> FastAPI:
    """
    Get FastAPI application.

    This is the main constructor of an application.

    :return: application.
    """
    configure_logging()
    logger.info("Starting Vector Vault application")

    app = FastAPI(
        title="vector_vault",
        version=metadata.version("vector_vault"),
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        default_response_class=UJSONResponse,
    )

    # Adds startup and shutdown events.
    register_startup_event(app)
    register_shutdown_event(app)

    app.add_exception_handler(
        ValidationError, _error_handler(status.HTTP_400_BAD_REQUEST)
    )
    app.add_exception_handler(
        DuplicateChunkError, _error_handler(status.HTTP_409_CONFLICT)
    )
    app.add_exception_handler(
        StoreUnavailableError, _error_handler(status.HTTP_503_SERVICE_UNAVAILABLE)
    )

    # Main router for the API.
    app.include_router(router=api_router, prefix="/api")

    return app
