from __future__ import annotations

import pytest

from sessionvault.application.token_service import TokenService
from sessionvault.infrastructure.codec.payload import PayloadCodec
from sessionvault.infrastructure.crypto.fernet_cipher import FernetTokenCipher
from sessionvault.infrastructure.crypto.random_token import new_random_token
from sessionvault.infrastructure.state.token_store import InMemoryTokenStore

# PBKDF2 at production strength makes the suite slow for no coverage gain.
TEST_KDF_ITERATIONS = 1_000


@pytest.fixture
def store() -> InMemoryTokenStore:
    return InMemoryTokenStore()


@pytest.fixture
def codec() -> PayloadCodec:
    return PayloadCodec()


@pytest.fixture
def cipher() -> FernetTokenCipher:
    return FernetTokenCipher(salt=b"test-salt", iterations=TEST_KDF_ITERATIONS)


@pytest.fixture
def service(store: InMemoryTokenStore, codec: PayloadCodec, cipher: FernetTokenCipher) -> TokenService:
    return TokenService(store, codec, new_random_token, cipher=cipher)
