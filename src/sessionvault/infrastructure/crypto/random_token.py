"""Random token identifiers for callers that do not derive keys from a secret."""

from __future__ import annotations

from uuid import uuid4


def new_random_token() -> str:
    """Return 32 lowercase hex characters with no separators."""
    return uuid4().hex


__all__ = ["new_random_token"]
