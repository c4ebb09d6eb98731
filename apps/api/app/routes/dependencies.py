"""Dependency wiring for routes."""

from __future__ import annotations

import logging
from typing import Annotated
from uuid import uuid4

from fastapi import Depends, Query, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.adapters.auth import (
    AuthVerificationError,
    FirebaseTokenVerifier,
    MockTokenVerifier,
    TokenVerifier,
)
from app.adapters.store import DocumentStore, FirestoreDocumentStore, InMemoryDocumentStore
from app.core.config import Settings, get_settings
from app.core.logging_safety import safe_log_identifier
from app.domain.site import SiteScope
from app.errors import unauthorized_error
from app.schemas.auth import AuthPrincipal
from app.schemas.user import QueryOrderBy, SortOrder, UserQueryOptions
from app.services.content_entries import ContentEntryService
from app.services.users import UserService

bearer_scheme = HTTPBearer(auto_error=False, scheme_name="bearerAuth")
logger = logging.getLogger(__name__)

_LIST_LIMIT_MAX = 500


def _request_correlation_id(request: Request) -> str:
    existing = getattr(request.state, "correlation_id", None)
    if isinstance(existing, str) and existing:
        return existing

    correlation_id = request.headers.get("X-Correlation-Id")
    if correlation_id:
        request.state.correlation_id = correlation_id
        return correlation_id

    generated = f"req-{uuid4()}"
    request.state.correlation_id = generated
    return generated


def get_token_verifier(settings: Annotated[Settings, Depends(get_settings)]) -> TokenVerifier:
    """Resolve provider adapter from configuration."""
    if settings.auth_provider == "firebase":
        return FirebaseTokenVerifier(
            project_id=settings.firebase_project_id,
            audience=settings.firebase_audience,
        )
    return MockTokenVerifier()


async def get_authenticated_principal(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(bearer_scheme)],
    verifier: Annotated[TokenVerifier, Depends(get_token_verifier)],
) -> AuthPrincipal:
    """Validate bearer token and attach the signed-in identity to request context."""
    correlation_id = _request_correlation_id(request)
    safe_correlation_id = safe_log_identifier(correlation_id, prefix="cid")
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        logger.warning(
            "auth.rejected correlation_id=%s method=%s path=%s reason=invalid_or_missing_bearer",
            safe_correlation_id,
            request.method,
            request.url.path,
        )
        raise unauthorized_error("Invalid or missing bearer token")

    try:
        principal = verifier.verify_token(credentials.credentials)
    except AuthVerificationError as exc:
        logger.warning(
            "auth.rejected correlation_id=%s method=%s path=%s reason=token_verification_failed",
            safe_correlation_id,
            request.method,
            request.url.path,
        )
        raise unauthorized_error(str(exc) or "Invalid bearer token") from exc

    logger.info(
        "auth.accepted correlation_id=%s method=%s path=%s principal_id=%s role=%s",
        safe_correlation_id,
        request.method,
        request.url.path,
        safe_log_identifier(principal.user_id, prefix="pid"),
        principal.role,
    )
    request.state.auth_principal = principal
    return principal


def build_document_store(settings: Settings) -> DocumentStore:
    if settings.document_store == "memory":
        return InMemoryDocumentStore(max_attempts=settings.transaction_max_attempts)
    return FirestoreDocumentStore(
        project_id=settings.firebase_project_id,
        max_attempts=settings.transaction_max_attempts,
    )


def get_store(request: Request, settings: Annotated[Settings, Depends(get_settings)]) -> DocumentStore:
    store = request.app.state.store
    if store is None:
        store = build_document_store(settings)
        request.app.state.store = store
    return store


def get_site_scope(settings: Annotated[Settings, Depends(get_settings)]) -> SiteScope:
    return SiteScope(site_id=settings.site_id, tenant_root=settings.tenant_root)


def get_query_options(
    order_by: Annotated[str | None, Query(min_length=1)] = None,
    sort_order: Annotated[SortOrder, Query()] = "asc",
    start_after: Annotated[str | None, Query()] = None,
    limit: Annotated[int | None, Query(ge=1, le=_LIST_LIMIT_MAX)] = None,
) -> UserQueryOptions:
    return UserQueryOptions(
        order_by=QueryOrderBy(field=order_by, sort_order=sort_order) if order_by else None,
        start_after=start_after,
        limit=limit,
    )


def get_user_service(
    store: Annotated[DocumentStore, Depends(get_store)],
    scope: Annotated[SiteScope, Depends(get_site_scope)],
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
) -> UserService:
    return UserService(store, scope, principal)


def get_content_entry_service(
    store: Annotated[DocumentStore, Depends(get_store)],
    scope: Annotated[SiteScope, Depends(get_site_scope)],
) -> ContentEntryService:
    return ContentEntryService(store, scope)
