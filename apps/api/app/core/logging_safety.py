"""Utilities for safe structured logging fields."""

from __future__ import annotations

import hashlib
from typing import Any


def safe_log_identifier(value: Any, *, prefix: str) -> str:
    """Return a deterministic non-reversible token for log correlation fields."""
    text = str(value or "").strip()
    if not text:
        return f"{prefix}-missing"

    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()[:12]
    return f"{prefix}-{digest}"


def safe_document_path(path: str) -> str:
    """Mask the document id segment of a store path, keeping collection names readable.

    ``tanam/site-1/users/abc`` becomes ``tanam/site-1/users/doc-<digest>``.
    """
    segments = [segment for segment in path.split("/") if segment]
    if len(segments) % 2 == 1:
        return "/".join(segments)
    *parents, document_id = segments
    return "/".join([*parents, safe_log_identifier(document_id, prefix="doc")])
