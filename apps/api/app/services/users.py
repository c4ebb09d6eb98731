"""User and user role service layer."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
import logging
from typing import Any

from pydantic import ValidationError

from app.adapters.store.base import DocumentSnapshot, DocumentStore, Subscription
from app.core.logging_safety import safe_document_path, safe_log_identifier
from app.domain.queries import apply_query_options
from app.domain.site import USER_ROLES_COLLECTION, USERS_COLLECTION, SiteScope
from app.domain.themes import ADMIN_THEMES, is_known_theme, resolve_admin_theme
from app.errors import ApiError, not_found_error, unauthorized_error
from app.schemas.auth import AuthPrincipal
from app.schemas.user import TanamUser, TanamUserRole, TanamUserRoleType, UserQueryOptions

logger = logging.getLogger(__name__)


def _map_listing(snapshots: list[DocumentSnapshot], to_record: Callable[[DocumentSnapshot], Any]) -> list[Any]:
    # One malformed document written by another client must not fail the whole listing.
    records = []
    for snapshot in snapshots:
        try:
            record = to_record(snapshot)
        except ValidationError as exc:
            logger.warning(
                "user.invalid_document_skipped path=%s errors=%s",
                safe_document_path(snapshot.path),
                exc.error_count(),
            )
            continue
        if record is not None:
            records.append(record)
    return records


class UserService:
    """Reads and writes site users and their role grants.

    ``principal`` is the signed-in identity; operations about "the current
    user" fail with 401 when it is absent.
    """

    def __init__(self, store: DocumentStore, scope: SiteScope, principal: AuthPrincipal | None = None) -> None:
        self._store = store
        self._scope = scope
        self._principal = principal

    def get_current_user(self) -> TanamUser:
        principal = self._require_principal()
        user = self._to_user(self._store.get(self._user_path(principal.user_id)))
        if user is None:
            raise not_found_error()
        return self._with_identity_photo(user, principal)

    def watch_current_user(self, callback: Callable[[TanamUser | None], None]) -> Subscription:
        principal = self._require_principal()

        def on_user(user: TanamUser | None) -> None:
            callback(self._with_identity_photo(user, principal) if user is not None else None)

        return self.watch_user(principal.user_id, on_user)

    def watch_user_theme(self, callback: Callable[[str], None]) -> Subscription:
        """Deliver the current user's resolved theme definition on every change."""
        return self.watch_current_user(lambda user: callback(self._theme_of(user)))

    def get_user(self, uid: str) -> TanamUser:
        user = self._to_user(self._store.get(self._user_path(uid)))
        if user is None:
            raise not_found_error()
        return user

    def watch_user(self, uid: str, callback: Callable[[TanamUser | None], None]) -> Subscription:
        return self._store.watch_document(
            self._user_path(uid),
            lambda snapshot: callback(self._to_user(snapshot)),
        )

    def has_role(self, role: TanamUserRoleType) -> bool:
        principal = self._require_principal()
        user = self._to_user(self._store.get(self._user_path(principal.user_id)))
        result = user is not None and role in user.roles
        logger.info(
            "user.has_role principal_id=%s role=%s result=%s",
            safe_log_identifier(principal.user_id, prefix="pid"),
            role.value,
            result,
        )
        return result

    def get_user_theme(self) -> str:
        principal = self._require_principal()
        user = self._to_user(self._store.get(self._user_path(principal.user_id)))
        theme = self._theme_of(user)
        logger.info(
            "user.theme_resolved principal_id=%s theme=%s",
            safe_log_identifier(principal.user_id, prefix="pid"),
            theme,
        )
        return theme

    def set_user_theme(self, theme: str) -> str:
        """Merge ``theme`` into the user's preferences inside a store transaction."""
        if not is_known_theme(theme):
            raise ApiError(
                status_code=422,
                code="VALIDATION_ERROR",
                message="Unknown admin theme",
                details={"theme": theme, "allowed_themes": sorted(ADMIN_THEMES)},
            )
        principal = self._require_principal()

        def merge_theme(current: dict[str, Any]) -> dict[str, Any]:
            prefs = dict(current.get("prefs") or {})
            prefs["theme"] = theme
            return {"prefs": prefs}

        self._store.update_with_conflict_retry(self._user_path(principal.user_id), merge_theme)
        logger.info(
            "user.theme_updated principal_id=%s theme=%s",
            safe_log_identifier(principal.user_id, prefix="pid"),
            theme,
        )
        return ADMIN_THEMES[theme]

    def get_users(self, options: UserQueryOptions | None = None) -> list[TanamUser]:
        snapshots = self._store.run_query(self._users_query(options))
        return _map_listing(snapshots, self._to_user)

    def watch_users(
        self,
        options: UserQueryOptions | None,
        callback: Callable[[list[TanamUser]], None],
    ) -> Subscription:
        return self._store.watch_query(
            self._users_query(options),
            lambda snapshots: callback(_map_listing(snapshots, self._to_user)),
        )

    def get_user_roles(self, options: UserQueryOptions | None = None) -> list[TanamUserRole]:
        snapshots = self._store.run_query(self._user_roles_query(options))
        return _map_listing(snapshots, self._to_user_role)

    def watch_user_roles(
        self,
        options: UserQueryOptions | None,
        callback: Callable[[list[TanamUserRole]], None],
    ) -> Subscription:
        return self._store.watch_query(
            self._user_roles_query(options),
            lambda snapshots: callback(_map_listing(snapshots, self._to_user_role)),
        )

    def invite_user(self, user_role: TanamUserRole) -> TanamUserRole:
        now = datetime.now(UTC)
        record = user_role.model_copy(
            update={
                "id": user_role.id or self._store.create_id(),
                "created_at": user_role.created_at or now,
                "updated_at": now,
            }
        )
        self._store.set(self._scope.document_path(USER_ROLES_COLLECTION, record.id), record.to_document())
        logger.info(
            "user_role.invited role_id=%s role=%s",
            safe_log_identifier(record.id, prefix="rid"),
            record.role.value,
        )
        return record

    def delete_user_role(self, role_id: str) -> None:
        self._store.delete(self._scope.document_path(USER_ROLES_COLLECTION, role_id))
        logger.info("user_role.deleted role_id=%s", safe_log_identifier(role_id, prefix="rid"))

    def get_reference(self, uid: str | None) -> DocumentSnapshot | None:
        if not uid:
            return None
        return self._store.get(self._user_path(uid))

    def _require_principal(self) -> AuthPrincipal:
        if self._principal is None:
            raise unauthorized_error("No authenticated user")
        return self._principal

    def _user_path(self, uid: str) -> str:
        return self._scope.document_path(USERS_COLLECTION, uid)

    def _users_query(self, options: UserQueryOptions | None):
        return apply_query_options(self._store.collection(self._scope.collection_path(USERS_COLLECTION)), options)

    def _user_roles_query(self, options: UserQueryOptions | None):
        return apply_query_options(
            self._store.collection(self._scope.collection_path(USER_ROLES_COLLECTION)),
            options,
        )

    @staticmethod
    def _with_identity_photo(user: TanamUser, principal: AuthPrincipal) -> TanamUser:
        if user.photo_url:
            return user
        return user.model_copy(update={"photo_url": principal.photo_url})

    @staticmethod
    def _theme_of(user: TanamUser | None) -> str:
        return resolve_admin_theme(user.prefs.theme if user is not None and user.prefs is not None else None)

    @staticmethod
    def _to_user(snapshot: DocumentSnapshot) -> TanamUser | None:
        data = snapshot.to_dict()
        if data is None:
            return None
        data.setdefault("uid", snapshot.id)
        return TanamUser.model_validate(data)

    @staticmethod
    def _to_user_role(snapshot: DocumentSnapshot) -> TanamUserRole | None:
        data = snapshot.to_dict()
        if data is None:
            return None
        data.setdefault("id", snapshot.id)
        return TanamUserRole.model_validate(data)
