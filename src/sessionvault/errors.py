"""Error taxonomy shared across the token registry layers."""

from __future__ import annotations


class TokenRegistryError(Exception):
    """Base class for token registry failures."""


class InvalidKeyError(TokenRegistryError, ValueError):
    """Raised when a token key is empty or whitespace-only."""


class MissingKeyError(InvalidKeyError):
    """Raised when a lookup is attempted without a token key."""


class TokenNotFoundError(TokenRegistryError, LookupError):
    """Raised when no record exists for a token key."""

    def __init__(self, token_key: str) -> None:
        super().__init__(f"token key not found: {token_key}")
        self.token_key = token_key


class CipherError(TokenRegistryError):
    """Raised when the token cipher cannot derive or recover a token."""


class PayloadCodecError(TokenRegistryError):
    """Base class for payload serialization failures."""


class PayloadEncodeError(PayloadCodecError):
    """Raised when a payload holds a value the wire format cannot represent."""


class PayloadDecodeError(PayloadCodecError):
    """Raised when encoded bytes are truncated, malformed or mistyped."""


class UnsupportedSchemaVersionError(PayloadDecodeError):
    """Raised when encoded bytes declare a schema version we do not read."""

    def __init__(self, version: int, expected: int) -> None:
        super().__init__(f"unsupported payload schema version {version} (expected {expected})")
        self.version = version
        self.expected = expected


class CorruptPayloadError(PayloadDecodeError):
    """Raised when a stored record exists but its bytes fail to decode."""

    def __init__(self, token_key: str, reason: str) -> None:
        super().__init__(f"stored payload for token key {token_key} is corrupt: {reason}")
        self.token_key = token_key


__all__ = [
    "CipherError",
    "CorruptPayloadError",
    "InvalidKeyError",
    "MissingKeyError",
    "PayloadCodecError",
    "PayloadDecodeError",
    "PayloadEncodeError",
    "TokenNotFoundError",
    "TokenRegistryError",
    "UnsupportedSchemaVersionError",
]
