"""Challenge/response authorization for edit and delete requests."""

from __future__ import annotations

from packages.grove_sdk.config import EnvironmentConfig
from packages.grove_sdk.errors import AuthorizationError
from packages.grove_sdk.records import (
    ChallengeRecord,
    SignedChallengeRecord,
    parse_record,
)
from packages.grove_sdk.transport import read_json, send
from packages.grove_sdk.types import Action, Authorization, Signer
from packages.grove_shared.http import AsyncHttpClient
from packages.grove_shared.logging import fields, get_logger, log_context

logger = get_logger(__name__)


class AuthorizationService:
    """Proves control of a signing key before one mutation.

    Every call runs the full protocol with a fresh challenge: request a
    challenge, sign its message, submit the signature. Any failing step aborts
    the attempt; nothing is retried or cached.
    """

    def __init__(self, *, http: AsyncHttpClient, env: EnvironmentConfig) -> None:
        self._http = http
        self._env = env

    async def authorize(
        self, action: Action, storage_key: str, signer: Signer
    ) -> Authorization:
        """Return a single-use authorization for ``action`` on ``storage_key``."""
        with log_context({fields.ACTION: action, fields.STORAGE_KEY: storage_key}):
            challenge = await self.request_challenge(action, storage_key)
            signature = await signer.sign_message(challenge.message)
            signed = await self.submit_signed_challenge(challenge, signature)
            logger.debug("Challenge accepted")
        return Authorization(
            challenge_id=signed.challenge_cid,
            secret=challenge.secret_random,
        )

    async def request_challenge(
        self, action: Action, storage_key: str
    ) -> ChallengeRecord:
        response = await send(
            self._http,
            "POST",
            f"{self._env.backend}/challenge/new",
            error_type=AuthorizationError,
            json={"storage_key": storage_key, "action": action},
        )
        return parse_record(
            ChallengeRecord, read_json(response, error_type=AuthorizationError)
        )

    async def submit_signed_challenge(
        self, challenge: ChallengeRecord, signature: str
    ) -> SignedChallengeRecord:
        response = await send(
            self._http,
            "POST",
            f"{self._env.backend}/challenge/sign",
            error_type=AuthorizationError,
            json={
                "message": challenge.message,
                "secret_random": challenge.secret_random,
                "signature": signature,
            },
        )
        return parse_record(
            SignedChallengeRecord, read_json(response, error_type=AuthorizationError)
        )
