"""In-memory implementation of the token store port."""

from __future__ import annotations

import logging
from threading import Lock

from sessionvault.application.ports.token_store import TokenStorePort
from sessionvault.domain.token import fingerprint_token_key, require_token_key
from sessionvault.errors import TokenNotFoundError

logger = logging.getLogger("sessionvault.store")


class _Shard:
    __slots__ = ("lock", "records")

    def __init__(self) -> None:
        self.lock = Lock()
        self.records: dict[str, bytes] = {}


class InMemoryTokenStore(TokenStorePort):
    """Stores encoded payloads in memory for the lifetime of the process.

    Keys are spread across ``shards`` independently locked tables. Every
    operation on a key runs under that key's shard lock, so operations on
    the same key are linearizable while unrelated keys only contend when
    they hash to the same shard. ``shards=1`` is a single global lock.
    """

    def __init__(self, *, shards: int = 1) -> None:
        if shards <= 0:
            raise ValueError("shards must be positive")
        self._shards = tuple(_Shard() for _ in range(shards))

    @property
    def shard_count(self) -> int:
        return len(self._shards)

    def _shard_for(self, token_key: str) -> _Shard:
        if len(self._shards) == 1:
            return self._shards[0]
        return self._shards[hash(token_key) % len(self._shards)]

    def put(self, token_key: str, value: bytes) -> None:
        require_token_key(token_key)
        data = bytes(value)
        shard = self._shard_for(token_key)
        with shard.lock:
            shard.records[token_key] = data
        logger.debug(
            "token stored",
            extra={"data": {"key": fingerprint_token_key(token_key), "size": len(data)}},
        )

    def get(self, token_key: str) -> tuple[bytes, bool]:
        if not token_key:
            return b"", False
        shard = self._shard_for(token_key)
        with shard.lock:
            data = shard.records.get(token_key)
        if data is None:
            return b"", False
        return data, True

    def remove(self, token_key: str) -> None:
        shard = self._shard_for(token_key)
        with shard.lock:
            if shard.records.pop(token_key, None) is None:
                raise TokenNotFoundError(token_key)
        logger.debug("token removed", extra={"data": {"key": fingerprint_token_key(token_key)}})

    def replace(self, token_key: str, value: bytes) -> bool:
        require_token_key(token_key)
        data = bytes(value)
        shard = self._shard_for(token_key)
        with shard.lock:
            replaced = shard.records.pop(token_key, None) is not None
            shard.records[token_key] = data
        logger.debug(
            "token replaced" if replaced else "token stored",
            extra={"data": {"key": fingerprint_token_key(token_key), "size": len(data)}},
        )
        return replaced

    def contains(self, token_key: str) -> bool:
        _, found = self.get(token_key)
        return found

    def __len__(self) -> int:
        total = 0
        for shard in self._shards:
            with shard.lock:
                total += len(shard.records)
        return total


__all__ = ["InMemoryTokenStore"]
