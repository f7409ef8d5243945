"""
Record id generation.

Ids are opaque, URL-safe, and random enough that collisions are not a
practical concern for a single-user ledger. They are never reused.
"""

from __future__ import annotations

import secrets

ID_BYTES = 16


def new_id() -> str:
    """Return a fresh URL-safe id (22 characters)."""
    return secrets.token_urlsafe(ID_BYTES)


__all__ = ["new_id", "ID_BYTES"]
