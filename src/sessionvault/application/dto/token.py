"""DTOs returned by the token service."""

from __future__ import annotations

from dataclasses import dataclass

from sessionvault.domain.token import TokenPayload


@dataclass(frozen=True)
class TokenIssued:
    """Result of successfully issuing a token."""

    token_key: str
    payload: TokenPayload
    encoded: bytes
    replaced: bool = False


__all__ = ["TokenIssued"]
