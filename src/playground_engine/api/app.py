"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from playground_engine.api.admin import router as admin_router
from playground_engine.api.sessions import router as sessions_router
from playground_engine.app_logging import configure_logging
from playground_engine.containers import AppContainer
from playground_engine.domain.errors import (
    FailureError,
    MissingDataError,
    UnauthorizedError,
)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await app.state.container.open_resources()
        logger.info("Serving playground at %s", app.state.container.environment.host)
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(sessions_router)
    app.include_router(admin_router)

    @app.exception_handler(MissingDataError)
    async def missing_data(_request: Request, exc: MissingDataError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)}
        )

    @app.exception_handler(UnauthorizedError)
    async def unauthorized(_request: Request, exc: UnauthorizedError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN, content={"detail": exc.reason}
        )

    @app.exception_handler(FailureError)
    async def failure(_request: Request, exc: FailureError) -> JSONResponse:
        logger.error("Platform failure: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": str(exc)},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
