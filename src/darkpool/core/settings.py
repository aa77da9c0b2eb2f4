"""
Central configuration for darkpool.

This module provides a single, typed configuration object that reads from
environment variables (12-factor style) using pydantic settings.

Usage:

    from darkpool.core.settings import get_settings

    settings = get_settings()
    if settings.prover.extended_outputs:
        ...

Only the service, CLI and prover backend read settings. The core
hashing/validation modules never do.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from darkpool.protocol.enums import ProverMode


class ServerSettings(BaseSettings):
    """
    HTTP service settings.
    """

    host: str = Field(
        default="0.0.0.0",
        validation_alias="DARKPOOL_HTTP_HOST",
        description="HTTP bind host for the FastAPI/Uvicorn service.",
    )
    port: int = Field(
        default=3000,
        validation_alias="DARKPOOL_HTTP_PORT",
        description="HTTP bind port for the FastAPI/Uvicorn service.",
    )
    proof_timeout_seconds: float = Field(
        default=300.0,
        validation_alias="DARKPOOL_PROOF_TIMEOUT_SECONDS",
        description="Upper bound on a single proof generation job.",
    )

    @field_validator("proof_timeout_seconds")
    @classmethod
    def _positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("DARKPOOL_PROOF_TIMEOUT_SECONDS must be positive")
        return v

    model_config = SettingsConfigDict(populate_by_name=True)


class ProverSettings(BaseSettings):
    mode: ProverMode = Field(
        default=ProverMode.LOCAL,
        validation_alias="DARKPOOL_PROVER_MODE",
        description="Execution backend. Only 'local' ships with the package.",
    )
    signing_key_file: Optional[str] = Field(
        default=None,
        validation_alias="DARKPOOL_SIGNING_KEY_FILE",
        description="PEM Ed25519 key for local attestations; ephemeral if unset.",
    )
    extended_outputs: bool = Field(
        default=True,
        validation_alias="DARKPOOL_EXTENDED_OUTPUTS",
        description="Commit nullifier, wallet and amounts next to the validity flag.",
    )

    @field_validator("mode", mode="before")
    @classmethod
    def _normalize_mode(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    model_config = SettingsConfigDict(populate_by_name=True)


class RuntimeSettings(BaseSettings):
    log_level: str = Field(
        default="INFO",
        validation_alias="DARKPOOL_LOG_LEVEL",
        description="Root log level (DEBUG/INFO/WARNING/ERROR).",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, v: str) -> str:
        v = (v or "INFO").upper()
        if v == "WARN":
            return "WARNING"
        return v

    model_config = SettingsConfigDict(populate_by_name=True)


class DarkPoolSettings(BaseSettings):
    """
    Root configuration object.

    Aggregates:
      - Server
      - Prover
      - Runtime
    """

    server: ServerSettings = Field(default_factory=ServerSettings)
    prover: ProverSettings = Field(default_factory=ProverSettings)
    runtime: RuntimeSettings = Field(default_factory=RuntimeSettings)


@lru_cache(maxsize=1)
def get_settings() -> DarkPoolSettings:
    """
    Cached accessor for DarkPoolSettings.

    Usage:
        from darkpool.core.settings import get_settings
        settings = get_settings()
    """
    return DarkPoolSettings()
