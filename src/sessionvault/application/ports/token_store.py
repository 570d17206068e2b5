"""Port describing the token-keyed payload store."""

from __future__ import annotations

from typing import Protocol


class TokenStorePort(Protocol):
    """Owns the mapping from token key to encoded payload bytes."""

    def put(self, token_key: str, value: bytes) -> None:
        """Insert or replace the bytes stored under ``token_key``."""

    def get(self, token_key: str) -> tuple[bytes, bool]:
        """Return the stored bytes and whether the key was present."""

    def remove(self, token_key: str) -> None:
        """Delete the record, raising ``TokenNotFoundError`` when absent."""

    def replace(self, token_key: str, value: bytes) -> bool:
        """Drop any existing record and store ``value`` in one critical section.

        Returns ``True`` when a previous record was replaced.
        """


__all__ = ["TokenStorePort"]
