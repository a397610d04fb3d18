"""Environment configuration primitives for Grove storage clients."""

from __future__ import annotations

from dataclasses import dataclass, replace

from packages.grove_shared.config import GroveSettings


@dataclass(frozen=True, slots=True)
class EnvironmentConfig:
    """Backend location and timing constants for one storage environment."""

    name: str
    backend: str
    default_chain_id: int
    propagation_timeout_seconds: float
    status_polling_interval_seconds: float
    request_timeout_seconds: float = 30.0


PRODUCTION = EnvironmentConfig(
    name="production",
    backend="https://api.grove.storage",
    default_chain_id=232,
    propagation_timeout_seconds=10.0,
    status_polling_interval_seconds=0.5,
)

STAGING = EnvironmentConfig(
    name="staging",
    backend="https://api.staging.grove.storage",
    default_chain_id=37111,
    propagation_timeout_seconds=20.0,
    status_polling_interval_seconds=0.5,
)

LOCAL = EnvironmentConfig(
    name="local",
    backend="http://localhost:3011",
    default_chain_id=37111,
    propagation_timeout_seconds=30.0,
    status_polling_interval_seconds=0.5,
)

ENVIRONMENTS: dict[str, EnvironmentConfig] = {
    env.name: env for env in (PRODUCTION, STAGING, LOCAL)
}


def environment_from_settings(settings: GroveSettings) -> EnvironmentConfig:
    """Resolve one environment from settings, applying explicit overrides."""
    storage = settings.storage
    env = ENVIRONMENTS[storage.environment]
    return replace(
        env,
        backend=(storage.backend_url or env.backend).rstrip("/"),
        default_chain_id=storage.default_chain_id or env.default_chain_id,
        propagation_timeout_seconds=(
            storage.propagation_timeout_seconds or env.propagation_timeout_seconds
        ),
        status_polling_interval_seconds=(
            storage.status_polling_interval_seconds
            or env.status_polling_interval_seconds
        ),
        request_timeout_seconds=storage.request_timeout_seconds,
    )
