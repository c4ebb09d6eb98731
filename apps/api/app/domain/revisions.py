"""Content entry revision rules."""

from app.errors import ApiError


def next_revision(stored_revision: int | None, submitted_revision: int) -> int:
    """Return the revision to persist; revisions only ever increase.

    A first write keeps the submitted revision. Later writes must not be based
    on an older revision than the stored one.
    """
    if stored_revision is None:
        return submitted_revision

    if submitted_revision < stored_revision:
        raise ApiError(
            status_code=409,
            code="REVISION_CONFLICT",
            message="Content entry was changed since it was loaded.",
            details={
                "stored_revision": stored_revision,
                "submitted_revision": submitted_revision,
            },
        )
    return stored_revision + 1
