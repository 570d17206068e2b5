"""Port describing the external token derivation primitive."""

from __future__ import annotations

from typing import Protocol


class TokenCipherPort(Protocol):
    """Turns a principal plus secret into an opaque token string and back.

    Implementations may be non-deterministic; callers must not assume two
    derivations with the same inputs produce the same token.
    """

    def derive(self, principal: str, secret: str) -> str:
        """Return an opaque token for ``principal`` or raise ``CipherError``."""

    def recover(self, token: str, secret: str) -> str:
        """Return the principal sealed inside ``token`` or raise ``CipherError``."""


__all__ = ["TokenCipherPort"]
