"""Tests for pydantic-settings-backed shared configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from packages.grove_shared.config import load_settings
from packages.grove_shared.config.env import nested_env_values


def test_load_settings_uses_grove_precedence_cascade(tmp_path: Path) -> None:
    """Init params should override env, env should override YAML, then defaults."""
    config_file = tmp_path / "grove.yaml"
    config_file.write_text(
        "\n".join(
            [
                "logging:",
                "  level: WARNING",
                "  service: uploader",
                "storage:",
                "  environment: staging",
                "  request_timeout_seconds: 12",
                "  default_chain_id: 5",
            ]
        ),
        encoding="utf-8",
    )

    settings = load_settings(
        cli_params={"logging": {"level": "DEBUG"}},
        environ={
            "GROVE_LOGGING__LEVEL": "ERROR",
            "GROVE_STORAGE__DEFAULT_CHAIN_ID": "232",
            "GROVE_STORAGE__STREAMING_UPLOADS": "disabled",
            "OTHER_STORAGE__ENVIRONMENT": "local",
        },
        config_path=config_file,
    )

    assert settings.logging.level == "DEBUG"
    assert settings.logging.service == "uploader"
    assert settings.storage.environment == "staging"
    assert settings.storage.request_timeout_seconds == 12.0
    assert settings.storage.default_chain_id == 232
    assert settings.storage.streaming_uploads == "disabled"


def test_load_settings_uses_model_defaults_when_sources_missing(tmp_path: Path) -> None:
    """Settings should fall back to model defaults when env and YAML are absent."""
    settings = load_settings(config_path=tmp_path / "grove.yaml", environ={})

    assert settings.logging.service == "grove"
    assert settings.logging.level == "INFO"
    assert settings.logging.json_output is True
    assert settings.storage.environment == "production"
    assert settings.storage.backend_url is None
    assert settings.storage.streaming_uploads == "auto"


def test_load_settings_rejects_invalid_values(tmp_path: Path) -> None:
    """Out-of-range overrides should fail validation."""
    with pytest.raises(ValidationError):
        load_settings(
            environ={"GROVE_STORAGE__DEFAULT_CHAIN_ID": "0"},
            config_path=tmp_path / "grove.yaml",
        )
    with pytest.raises(ValidationError):
        load_settings(
            environ={"GROVE_STORAGE__ENVIRONMENT": "moon"},
            config_path=tmp_path / "grove.yaml",
        )


def test_nested_env_values_coerces_scalars() -> None:
    """Prefixed variables should map to nested keys with scalar coercion."""
    values = nested_env_values(
        environ={
            "GROVE_LOGGING__JSON_OUTPUT": "false",
            "GROVE_STORAGE__PROPAGATION_TIMEOUT_SECONDS": "2.5",
            "GROVE_STORAGE__BACKEND_URL": "http://localhost:3011",
            "GROVE_": "ignored",
            "HOME": "/root",
        }
    )

    assert values == {
        "logging": {"json_output": False},
        "storage": {
            "propagation_timeout_seconds": 2.5,
            "backend_url": "http://localhost:3011",
        },
    }
