"""Typed configuration models for Grove client settings."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, ClassVar, Literal, Mapping

from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from .env import ENV_PREFIX, nested_env_values

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "grove" / "grove.yaml"


class LoggingSettings(BaseModel):
    """Structured logging configuration for applications embedding the SDK."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    json_output: bool = True
    service: str = "grove"
    environment: str = "dev"


class StorageSettings(BaseModel):
    """Storage backend selection and client timing overrides.

    ``environment`` picks one of the built-in environments; every other field
    overrides that environment's value when set.
    """

    environment: Literal["production", "staging", "local"] = "production"
    backend_url: str | None = None
    default_chain_id: int | None = Field(default=None, gt=0)
    request_timeout_seconds: float = Field(default=30.0, gt=0)
    propagation_timeout_seconds: float | None = Field(default=None, gt=0)
    status_polling_interval_seconds: float | None = Field(default=None, gt=0)
    streaming_uploads: Literal["auto", "enabled", "disabled"] = "auto"


class MappingEnvSettingsSource(PydanticBaseSettingsSource):
    """Settings source reading ``GROVE_*`` keys from an explicit mapping."""

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        *,
        environ: Mapping[str, str],
        prefix: str = ENV_PREFIX,
    ) -> None:
        super().__init__(settings_cls)
        self._values = nested_env_values(environ=environ, prefix=prefix)

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return the raw value for one top-level field."""
        return self._values.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return all values found in the mapping as one nested dict."""
        return dict(self._values)


class GroveSettings(BaseSettings):
    """Root runtime settings resolved from init/env/yaml/defaults sources."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_nested_delimiter="__",
        extra="ignore",
        nested_model_default_partial_update=True,
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)

    _config_path: ClassVar[Path] = DEFAULT_CONFIG_PATH
    _environ: ClassVar[Mapping[str, str] | None] = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Apply Grove precedence: init > env > yaml > model defaults."""
        environ = os.environ if cls._environ is None else cls._environ
        return (
            init_settings,
            MappingEnvSettingsSource(settings_cls, environ=environ),
            YamlConfigSettingsSource(
                settings_cls,
                yaml_file=cls._config_path,
                yaml_file_encoding="utf-8",
            ),
        )
