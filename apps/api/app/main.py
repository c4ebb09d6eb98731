"""FastAPI application entrypoint."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from app.adapters.store import DocumentNotFoundError, DocumentStore, TransactionConflictError
from app.core.logging_safety import safe_document_path
from app.errors import ApiError
from app.routes import content_entries_router, user_roles_router, users_router
from app.schemas.error import ErrorResponse, NoLeakNotFoundError

logger = logging.getLogger(__name__)


def create_app(store: DocumentStore | None = None) -> FastAPI:
    """Build the admin API. Without ``store`` one is built from settings on first use."""
    app = FastAPI(title="Tanam Admin API", version="0.1.0")
    app.state.store = store

    @app.exception_handler(ApiError)
    async def handle_api_error(_, exc: ApiError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.payload.model_dump(mode="json", exclude_none=True),
        )

    @app.exception_handler(DocumentNotFoundError)
    async def handle_document_not_found(_, exc: DocumentNotFoundError) -> JSONResponse:
        logger.info("store.document_missing path=%s", safe_document_path(exc.path))
        payload = NoLeakNotFoundError(code="RESOURCE_NOT_FOUND", message="Resource not found")
        return JSONResponse(status_code=404, content=payload.model_dump())

    @app.exception_handler(TransactionConflictError)
    async def handle_transaction_conflict(_, exc: TransactionConflictError) -> JSONResponse:
        payload = ErrorResponse(
            code="TRANSACTION_CONFLICT",
            message="Document changed concurrently; retry the request.",
            details={"attempts": exc.attempts},
        )
        return JSONResponse(status_code=409, content=payload.model_dump())

    api_prefix = "/api/v1"
    app.include_router(users_router, prefix=api_prefix)
    app.include_router(user_roles_router, prefix=api_prefix)
    app.include_router(content_entries_router, prefix=api_prefix)

    return app


app = create_app()
