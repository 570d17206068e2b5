"""Token issuance, lookup and invalidation use case."""

from __future__ import annotations

import logging
from collections.abc import Callable

from sessionvault.application.dto.token import TokenIssued
from sessionvault.application.ports.payload_codec import PayloadCodecPort
from sessionvault.application.ports.token_cipher import TokenCipherPort
from sessionvault.application.ports.token_store import TokenStorePort
from sessionvault.domain.token import TokenPayload, fingerprint_token_key, require_token_key
from sessionvault.errors import (
    CipherError,
    CorruptPayloadError,
    MissingKeyError,
    PayloadDecodeError,
    TokenNotFoundError,
)

logger = logging.getLogger("sessionvault.service")


class TokenService:
    """Coordinates the codec, the cipher and the store for token lifecycles.

    A key moves from absent to active on ``generate``, stays active (with its
    payload fully replaced) on a repeated ``generate`` and returns to absent on
    ``invalidate``. Expiry is recorded but never enforced here.
    """

    def __init__(
        self,
        store: TokenStorePort,
        codec: PayloadCodecPort,
        random_token: Callable[[], str],
        *,
        cipher: TokenCipherPort | None = None,
        default_secret: str | None = None,
    ) -> None:
        self._store = store
        self._codec = codec
        self._random_token = random_token
        self._cipher = cipher
        self._default_secret = default_secret or None

    def generate(self, token_key: str, payload: TokenPayload) -> TokenIssued:
        """Store ``payload`` under ``token_key``, replacing any previous record."""
        key = require_token_key(token_key)
        encoded = self._codec.encode(payload)
        return self._store_encoded(key, payload, encoded)

    def generate_random(self, payload: TokenPayload) -> TokenIssued:
        """Store ``payload`` under a freshly generated random key."""
        return self.generate(self._random_token(), payload)

    def generate_derived(self, payload: TokenPayload, secret: str | None = None) -> TokenIssued:
        """Store ``payload`` under a key the cipher derives from its principal.

        ``secret`` falls back to the service default when omitted.
        """
        encoded = self._codec.encode(payload)
        cipher = self._require_cipher()
        key = require_token_key(cipher.derive(payload.principal, self._secret(secret)))
        return self._store_encoded(key, payload, encoded)

    def extract(self, token_key: str) -> TokenPayload:
        """Return the payload stored under ``token_key``.

        Raises:
            MissingKeyError: ``token_key`` is empty.
            TokenNotFoundError: nothing is stored under ``token_key``.
            CorruptPayloadError: a record exists but does not decode.
        """
        key = require_token_key(token_key, error=MissingKeyError)
        data, found = self._store.get(key)
        if not found:
            raise TokenNotFoundError(key)
        try:
            return self._codec.decode(data)
        except PayloadDecodeError as exc:
            logger.warning(
                "stored token payload failed to decode",
                extra={"data": {"key": fingerprint_token_key(key), "error": str(exc)}},
            )
            raise CorruptPayloadError(key, str(exc)) from exc

    def invalidate(self, token_key: str) -> None:
        """Remove the record for ``token_key`` or raise ``TokenNotFoundError``."""
        key = require_token_key(token_key)
        self._store.remove(key)
        logger.info("token invalidated", extra={"data": {"key": fingerprint_token_key(key)}})

    def recover_principal(self, token_key: str, secret: str | None = None) -> str:
        """Return the principal sealed inside a derived token key."""
        key = require_token_key(token_key)
        return self._require_cipher().recover(key, self._secret(secret))

    def _store_encoded(self, key: str, payload: TokenPayload, encoded: bytes) -> TokenIssued:
        replaced = self._store.replace(key, encoded)
        logger.info(
            "token issued",
            extra={
                "data": {
                    "key": fingerprint_token_key(key),
                    "replaced": replaced,
                    "expires_at": payload.expires_at,
                    "claims": len(payload.claims),
                }
            },
        )
        return TokenIssued(token_key=key, payload=payload, encoded=encoded, replaced=replaced)

    def _require_cipher(self) -> TokenCipherPort:
        if self._cipher is None:
            raise CipherError("no token cipher configured")
        return self._cipher

    def _secret(self, secret: str | None) -> str:
        resolved = secret if secret is not None else self._default_secret
        if not resolved:
            raise CipherError("cipher secret is required")
        return resolved


__all__ = ["TokenService"]
