"""Token payload primitives and key rules shared across layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from hashlib import blake2b
from typing import TYPE_CHECKING, TypeAlias

from typing_extensions import TypeAliasType

from sessionvault.errors import InvalidKeyError

ClaimPrimitive: TypeAlias = str | int | float | bool | bytes | None

if TYPE_CHECKING:
    ClaimValue: TypeAlias = ClaimPrimitive | list["ClaimValue"] | dict[str, "ClaimValue"]
    Claims: TypeAlias = dict[str, ClaimValue]
else:
    ClaimValue = TypeAliasType(
        "ClaimValue",
        ClaimPrimitive | list["ClaimValue"] | dict[str, "ClaimValue"],
    )
    Claims = TypeAliasType("Claims", dict[str, ClaimValue])


@dataclass(frozen=True, slots=True)
class TokenPayload:
    """Claims and expiry recorded for an authenticated principal.

    ``expires_at`` is an epoch timestamp in seconds. The registry stores it
    verbatim; comparing it against the clock is left to callers.
    """

    principal: str
    claims: Claims = field(default_factory=dict)
    expires_at: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.principal, str):
            raise TypeError("principal must be a string")
        if isinstance(self.expires_at, bool) or not isinstance(self.expires_at, int):
            raise TypeError("expires_at must be an integer timestamp")

    def is_expired(self, at: int) -> bool:
        """Return ``True`` when ``at`` is at or past the recorded expiry."""
        return at >= self.expires_at


def require_token_key(
    token_key: str | None,
    *,
    error: type[InvalidKeyError] = InvalidKeyError,
) -> str:
    """Return ``token_key`` unchanged or raise ``error`` when it is blank."""
    if token_key is None or not token_key.strip():
        raise error("token key is required")
    return token_key


def fingerprint_token_key(token_key: str) -> str:
    """Short, non-reversible label for a token key, safe to log."""
    return blake2b(token_key.encode("utf-8"), digest_size=6).hexdigest()


__all__ = [
    "ClaimPrimitive",
    "ClaimValue",
    "Claims",
    "TokenPayload",
    "fingerprint_token_key",
    "require_token_key",
]
