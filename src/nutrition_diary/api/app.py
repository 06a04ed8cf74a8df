"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from nutrition_diary.api.diary import router as diary_router
from nutrition_diary.api.foods import router as foods_router
from nutrition_diary.app_logging import configure_logging
from nutrition_diary.containers import AppContainer
from nutrition_diary.domain.diary import DiaryEntryNotFound
from nutrition_diary.domain.portions import InvalidPortionSpec
from nutrition_diary.services.sync import PersistenceFailure


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(foods_router)
    app.include_router(diary_router)

    @app.exception_handler(InvalidPortionSpec)
    async def invalid_portion(_: Request, exc: InvalidPortionSpec) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(DiaryEntryNotFound)
    async def entry_not_found(_: Request, exc: DiaryEntryNotFound) -> JSONResponse:
        return JSONResponse(
            status_code=404, content={"detail": f"Diary entry {exc.args[0]} not found"}
        )

    @app.exception_handler(PersistenceFailure)
    async def persistence_failure(
        _: Request, exc: PersistenceFailure
    ) -> JSONResponse:
        logger.warning("Backend write failed: %s", exc)
        return JSONResponse(
            status_code=502,
            content={"detail": str(exc), "pending": len(container.diary_sync.pending)},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
