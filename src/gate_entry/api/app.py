"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from gate_entry.adapters.supabase_visitor_repository import SupabaseVisitorRepository
from gate_entry.api.visitors import router as visitors_router
from gate_entry.app_logging import configure_logging
from gate_entry.containers import AppContainer
from gate_entry.domain.errors import (
    InvalidPhotoFormat,
    InvalidTransition,
    RepositoryError,
    SchemaMismatchError,
    ValidationError,
    VisitorNotFound,
)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        repository = app.state.container.visitor_repository
        if isinstance(repository, SupabaseVisitorRepository):
            try:
                missing = repository.missing_columns()
            except RepositoryError:
                logger.exception("Failed to inspect the visitors table")
            else:
                if missing:
                    logger.error(
                        "visitors table is missing columns: %s", ", ".join(missing)
                    )
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(visitors_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.exception_handler(ValidationError)
    async def validation_failed(_: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"errors": exc.result.errors, "warnings": exc.result.warnings},
        )

    @app.exception_handler(InvalidPhotoFormat)
    async def invalid_photo(_: Request, exc: InvalidPhotoFormat) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content={"errors": [str(exc)]}
        )

    @app.exception_handler(VisitorNotFound)
    async def not_found(_: Request, exc: VisitorNotFound) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND, content={"errors": [str(exc)]}
        )

    @app.exception_handler(InvalidTransition)
    async def invalid_transition(_: Request, exc: InvalidTransition) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT, content={"errors": [str(exc)]}
        )

    @app.exception_handler(SchemaMismatchError)
    async def schema_mismatch(_: Request, exc: SchemaMismatchError) -> JSONResponse:
        logger.error("Database schema does not match the application: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"errors": [str(exc)], "code": exc.reason.value},
        )

    @app.exception_handler(RepositoryError)
    async def repository_failed(_: Request, exc: RepositoryError) -> JSONResponse:
        logger.error("Visitor storage failed: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={
                "errors": ["Failed to save the visitor. Please try again."],
                "code": exc.reason.value,
            },
        )

    return app
