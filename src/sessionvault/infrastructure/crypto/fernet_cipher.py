"""Fernet-backed implementation of the token cipher port."""

from __future__ import annotations

import base64
import logging
from threading import Lock

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from sessionvault.application.ports.token_cipher import TokenCipherPort
from sessionvault.errors import CipherError

logger = logging.getLogger("sessionvault.cipher")

DEFAULT_KDF_ITERATIONS = 390_000
_KEY_CACHE_LIMIT = 64


class FernetTokenCipher(TokenCipherPort):
    """Seals the principal with a Fernet key stretched from the caller's secret.

    Fernet embeds a timestamp and a random IV, so deriving twice with the
    same inputs yields different tokens.
    """

    def __init__(self, *, salt: bytes, iterations: int = DEFAULT_KDF_ITERATIONS) -> None:
        if not salt:
            raise ValueError("salt must not be empty")
        if iterations <= 0:
            raise ValueError("iterations must be positive")
        self._salt = salt
        self._iterations = iterations
        self._fernets: dict[str, Fernet] = {}
        self._lock = Lock()

    def derive(self, principal: str, secret: str) -> str:
        if not principal:
            raise CipherError("principal is required")
        fernet = self._fernet(secret)
        return fernet.encrypt(principal.encode("utf-8")).decode("ascii")

    def recover(self, token: str, secret: str) -> str:
        fernet = self._fernet(secret)
        try:
            plaintext = fernet.decrypt(token.encode("ascii"))
        except (InvalidToken, UnicodeEncodeError) as exc:
            raise CipherError("token was not issued with this secret") from exc
        return plaintext.decode("utf-8")

    def _fernet(self, secret: str) -> Fernet:
        if not secret or not secret.strip():
            raise CipherError("cipher secret is required")
        with self._lock:
            cached = self._fernets.get(secret)
        if cached is not None:
            return cached

        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=self._salt,
            iterations=self._iterations,
        )
        key = base64.urlsafe_b64encode(kdf.derive(secret.encode("utf-8")))
        fernet = Fernet(key)
        with self._lock:
            if len(self._fernets) >= _KEY_CACHE_LIMIT:
                self._fernets.clear()
            self._fernets[secret] = fernet
        logger.debug("derived cipher key", extra={"data": {"iterations": self._iterations}})
        return fernet


__all__ = ["DEFAULT_KDF_ITERATIONS", "FernetTokenCipher"]
