"""Wire records returned by the storage backend.

Records are validated with pydantic; a missing or malformed required field is
a fatal parse failure surfaced as ``InvariantError``.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError

from packages.grove_sdk.errors import InvariantError
from packages.grove_sdk.types import Status


class ResourceRecord(BaseModel):
    """One entry of a ``link/new`` or immutable-upload response."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    storage_key: str
    uri: str
    gateway_url: str | None = None


class ChallengeRecord(BaseModel):
    """Challenge issued by ``challenge/new``."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    message: str
    secret_random: str


class SignedChallengeRecord(BaseModel):
    """Acknowledgement returned by ``challenge/sign``."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    challenge_cid: str


class StatusRecord(BaseModel):
    """One ``status/{key}`` response."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    storage_key: str
    status: Status
    progress: float = 0.0


TRecord = TypeVar("TRecord", bound=BaseModel)


def parse_record(model: type[TRecord], payload: Any) -> TRecord:
    """Validate one payload or raise ``InvariantError`` naming the problem."""
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise InvariantError(
            message=f"Invalid {model.__name__} in response: {payload!r} ({exc.error_count()} errors)"
        ) from exc
