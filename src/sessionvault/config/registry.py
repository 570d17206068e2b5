"""Token registry configuration resolved from the environment."""

from __future__ import annotations

import logging

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sessionvault.infrastructure.crypto.fernet_cipher import DEFAULT_KDF_ITERATIONS

DEFAULT_STORE_SHARDS = 1
DEFAULT_CIPHER_SALT = "sessionvault"


class TokenRegistrySettings(BaseSettings):
    """Store sizing, cipher parameters and log level for the registry."""

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
    )

    # --- Store ---
    store_shards: int = Field(default=DEFAULT_STORE_SHARDS, alias="SESSIONVAULT_STORE_SHARDS", ge=1)

    # --- Cipher ---
    cipher_secret: SecretStr = Field(
        default_factory=lambda: SecretStr(""), alias="SESSIONVAULT_CIPHER_SECRET"
    )
    cipher_salt: str = Field(
        default=DEFAULT_CIPHER_SALT, alias="SESSIONVAULT_CIPHER_SALT", min_length=1
    )
    cipher_iterations: int = Field(
        default=DEFAULT_KDF_ITERATIONS, alias="SESSIONVAULT_CIPHER_ITERATIONS", ge=1
    )

    # --- Logging ---
    log_level: str = Field(default="INFO", alias="SESSIONVAULT_LOG_LEVEL")

    @field_validator("log_level", mode="after")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        return value.strip().upper()

    @property
    def cipher_secret_value(self) -> str:
        return self.cipher_secret.get_secret_value()

    @classmethod
    def load(cls) -> TokenRegistrySettings:
        instance = cls()
        logger = logging.getLogger("sessionvault.settings")
        logger.info("token registry settings loaded: %r", instance)
        return instance


__all__ = ["DEFAULT_CIPHER_SALT", "DEFAULT_STORE_SHARDS", "TokenRegistrySettings"]
