"""Settings loading with deterministic precedence.

The cascade is always:
1) CLI/init params
2) Environment variables
3) ~/.config/grove/grove.yaml
4) Built-in model defaults
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, ClassVar, Mapping

from .models import DEFAULT_CONFIG_PATH, GroveSettings


def load_settings(
    *,
    cli_params: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
    config_path: str | Path | None = None,
) -> GroveSettings:
    """Load Grove settings from explicit params, env, YAML and defaults."""
    resolved_path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    resolved_environ = dict(os.environ if environ is None else environ)

    class _LoadedSettings(GroveSettings):
        _config_path: ClassVar[Path] = resolved_path
        _environ: ClassVar[Mapping[str, str] | None] = resolved_environ

    return _LoadedSettings(**dict(cli_params or {}))
