"""Port describing payload serialization."""

from __future__ import annotations

from typing import Protocol

from sessionvault.domain.token import TokenPayload


class PayloadCodecPort(Protocol):
    """Converts token payloads to opaque bytes and back without loss."""

    def encode(self, payload: TokenPayload) -> bytes:
        """Serialize ``payload`` or raise ``PayloadEncodeError``."""

    def decode(self, data: bytes) -> TokenPayload:
        """Parse ``data`` or raise ``PayloadDecodeError``."""


__all__ = ["PayloadCodecPort"]
