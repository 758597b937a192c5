from typing import Awaitable, Callable

from fastapi import FastAPI

from vector_vault.services.vector_db.lifetime import (
    init_vector_store,
    shutdown_vector_store,
)
from vector_vault.settings import settings


async def _setup_vector_store(app: FastAPI) -> None:  # pragma: no cover
    """
    Opens the vector store connections.

    The SQLAlchemy engine, the redis client and the search service
    are stored in the application's state property.

    :param app: fastAPI application.
    """
    resources = await init_vector_store(settings)
    app.state.vector_resources = resources
    app.state.vector_service = resources.service


def register_startup_event(
    app: FastAPI,
) -> Callable[[], Awaitable[None]]:  # pragma: no cover
    """
    Actions to run on application startup.

    :param app: the fastAPI application.
    :return: function that actually performs actions.
    """

    @app.on_event("startup")
    async def _startup() -> None:  # noqa: WPS430
        await _setup_vector_store(app)

    return _startup


def register_shutdown_event(
    app: FastAPI,
) -> Callable[[], Awaitable[None]]:  # pragma: no cover
    """
    Actions to run on application's shutdown.

    :param app: fastAPI application.
    :return: function that actually performs actions.
    """

    @app.on_event("shutdown")
    async def _shutdown() -> None:  # noqa: WPS430
        resources = getattr(app.state, "vector_resources", None)
        if resources is not None:
            await shutdown_vector_store(resources)

    return _shutdown
