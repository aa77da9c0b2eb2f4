"""
Tests for environment-driven settings.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from darkpool.core.settings import (
    DarkPoolSettings,
    ProverSettings,
    RuntimeSettings,
    ServerSettings,
    get_settings,
)
from darkpool.protocol.enums import ProverMode


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in (
            "DARKPOOL_HTTP_HOST",
            "DARKPOOL_HTTP_PORT",
            "DARKPOOL_PROOF_TIMEOUT_SECONDS",
            "DARKPOOL_PROVER_MODE",
            "DARKPOOL_SIGNING_KEY_FILE",
            "DARKPOOL_EXTENDED_OUTPUTS",
            "DARKPOOL_LOG_LEVEL",
        ):
            monkeypatch.delenv(name, raising=False)

        settings = DarkPoolSettings()

        assert settings.server.host == "0.0.0.0"
        assert settings.server.port == 3000
        assert settings.server.proof_timeout_seconds == 300.0
        assert settings.prover.mode is ProverMode.LOCAL
        assert settings.prover.signing_key_file is None
        assert settings.prover.extended_outputs is True
        assert settings.runtime.log_level == "INFO"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("DARKPOOL_HTTP_PORT", "8080")
        monkeypatch.setenv("DARKPOOL_PROOF_TIMEOUT_SECONDS", "12.5")
        monkeypatch.setenv("DARKPOOL_EXTENDED_OUTPUTS", "false")
        monkeypatch.setenv("DARKPOOL_PROVER_MODE", " LOCAL ")
        monkeypatch.setenv("DARKPOOL_LOG_LEVEL", "warn")

        settings = get_settings()

        assert settings.server.port == 8080
        assert settings.server.proof_timeout_seconds == 12.5
        assert settings.prover.extended_outputs is False
        assert settings.prover.mode is ProverMode.LOCAL
        assert settings.runtime.log_level == "WARNING"

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_timeout_must_be_positive(self):
        with pytest.raises(PydanticValidationError):
            ServerSettings(proof_timeout_seconds=0)

    def test_unknown_prover_mode(self):
        with pytest.raises(PydanticValidationError):
            ProverSettings(mode="sp1-network")

    def test_field_names_accepted(self):
        assert RuntimeSettings(log_level="debug").log_level == "DEBUG"
