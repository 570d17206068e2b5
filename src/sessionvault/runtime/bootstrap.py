"""Runtime wiring for the token registry."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sessionvault.application.token_service import TokenService
from sessionvault.config.registry import TokenRegistrySettings
from sessionvault.infrastructure.codec.payload import PayloadCodec
from sessionvault.infrastructure.crypto.fernet_cipher import FernetTokenCipher
from sessionvault.infrastructure.crypto.random_token import new_random_token
from sessionvault.infrastructure.state.token_store import InMemoryTokenStore
from sessionvault.observability.logging import configure_logging

logger = logging.getLogger("sessionvault.runtime")


@dataclass(frozen=True, slots=True)
class RegistryContext:
    """Aggregated registry components sharing one store."""

    settings: TokenRegistrySettings
    store: InMemoryTokenStore
    codec: PayloadCodec
    cipher: FernetTokenCipher
    service: TokenService


def build_registry(settings: TokenRegistrySettings | None = None) -> RegistryContext:
    """Construct a store and the service that owns it.

    Each call returns an independent store, so tests and embedders can run
    isolated registries side by side.
    """
    settings = settings or TokenRegistrySettings.load()
    store = InMemoryTokenStore(shards=settings.store_shards)
    codec = PayloadCodec()
    cipher = FernetTokenCipher(
        salt=settings.cipher_salt.encode("utf-8"),
        iterations=settings.cipher_iterations,
    )
    service = TokenService(
        store,
        codec,
        new_random_token,
        cipher=cipher,
        default_secret=settings.cipher_secret_value,
    )
    logger.info(
        "token registry ready",
        extra={"data": {"shards": store.shard_count, "schema_version": codec.version}},
    )
    return RegistryContext(
        settings=settings,
        store=store,
        codec=codec,
        cipher=cipher,
        service=service,
    )


def build_token_service(settings: TokenRegistrySettings | None = None) -> TokenService:
    return build_registry(settings).service


def bootstrap(settings: TokenRegistrySettings | None = None) -> RegistryContext:
    """Configure logging from settings and build the registry."""
    settings = settings or TokenRegistrySettings.load()
    configure_logging(level=settings.log_level)
    return build_registry(settings)


__all__ = ["RegistryContext", "bootstrap", "build_registry", "build_token_service"]
