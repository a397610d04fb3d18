"""Access-control policies attached to uploaded resources.

Each policy variant is its own frozen dataclass; ``AclPolicy`` is their
union. ``acl_to_wire`` produces the ``lens-acl.json`` document the backend
expects, renaming fields to their snake_case wire names.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, ClassVar

from packages.grove_sdk.errors import invariant, never
from packages.grove_sdk.types import File

ACL_FILE_NAME = "lens-acl.json"
EVM_NETWORK_TYPE = "evm"

# Placeholder in ``GenericAcl.params`` replaced by the recovered signer address.
RECOVERED_ADDRESS_PARAM_MARKER = "<recovered_address>"


@dataclass(frozen=True, slots=True)
class ImmutableAcl:
    """Resource can never be edited or deleted."""

    template: ClassVar[str] = "immutable"

    chain_id: int


@dataclass(frozen=True, slots=True)
class LensAccountAcl:
    """Only signers recovered to ``account`` may edit or delete."""

    template: ClassVar[str] = "lens_account"

    account: str
    chain_id: int


@dataclass(frozen=True, slots=True)
class WalletAddressAcl:
    """Only the external wallet ``address`` may edit or delete."""

    template: ClassVar[str] = "wallet_address"

    address: str
    chain_id: int


@dataclass(frozen=True, slots=True)
class GenericAcl:
    """Access decided by evaluating a contract call on ``chain_id``."""

    template: ClassVar[str] = "generic_acl"

    contract_address: str
    chain_id: int
    function_signature: str
    params: tuple[Any, ...]
    network_type: str = EVM_NETWORK_TYPE

    def __post_init__(self) -> None:
        invariant(
            self.network_type == EVM_NETWORK_TYPE,
            f"Unsupported network type: {self.network_type}",
        )


AclPolicy = ImmutableAcl | LensAccountAcl | WalletAddressAcl | GenericAcl


def immutable(chain_id: int) -> ImmutableAcl:
    """Declare a resource immutable, bound to ``chain_id``."""
    _require_chain_id(chain_id)
    return ImmutableAcl(chain_id=chain_id)


def lens_account_only(account: str, chain_id: int) -> LensAccountAcl:
    """Restrict edits and deletes to one Lens Account."""
    invariant(account, "Lens account address is required")
    _require_chain_id(chain_id)
    return LensAccountAcl(account=account, chain_id=chain_id)


def wallet_only(address: str, chain_id: int) -> WalletAddressAcl:
    """Restrict edits and deletes to one wallet address."""
    invariant(address, "Wallet address is required")
    _require_chain_id(chain_id)
    return WalletAddressAcl(address=address, chain_id=chain_id)


def generic_acl(
    chain_id: int,
    *,
    contract_address: str,
    function_signature: str,
    params: Sequence[Any],
) -> GenericAcl:
    """Restrict edits and deletes to addresses satisfying a contract call.

    Use ``RECOVERED_ADDRESS_PARAM_MARKER`` in ``params`` where the address of
    the signer attempting the mutation should be substituted.
    """
    _require_chain_id(chain_id)
    invariant(contract_address, "Generic ACL requires a contract address")
    invariant(function_signature, "Generic ACL requires a function signature")
    invariant(params is not None, "Generic ACL requires call params")
    return GenericAcl(
        contract_address=contract_address,
        chain_id=chain_id,
        function_signature=function_signature,
        params=tuple(params),
    )


def resolve_acl(policy: AclPolicy | None, default_chain_id: int) -> AclPolicy:
    """Return ``policy`` or the immutable default for ``default_chain_id``."""
    if policy is None:
        return immutable(default_chain_id)
    return policy


def acl_to_wire(policy: AclPolicy) -> dict[str, Any]:
    """Serialize one resolved policy into its wire document."""
    match policy:
        case ImmutableAcl(chain_id=chain_id):
            return {"template": ImmutableAcl.template, "chain_id": chain_id}
        case LensAccountAcl(account=account, chain_id=chain_id):
            return {
                "template": LensAccountAcl.template,
                "lens_account": account,
                "chain_id": chain_id,
            }
        case WalletAddressAcl(address=address, chain_id=chain_id):
            return {
                "template": WalletAddressAcl.template,
                "wallet_address": address,
                "chain_id": chain_id,
            }
        case GenericAcl():
            return {
                "template": GenericAcl.template,
                "contract_address": policy.contract_address,
                "chain_id": policy.chain_id,
                "network_type": policy.network_type,
                "function_sig": policy.function_signature,
                "params": list(policy.params),
            }
        case _:
            never(f"Unknown ACL template: {policy!r}")


def acl_file(policy: AclPolicy) -> File:
    """Return the ``lens-acl.json`` file for one resolved policy."""
    return File(
        name=ACL_FILE_NAME,
        content=json.dumps(acl_to_wire(policy), separators=(",", ":")).encode("utf-8"),
        content_type="application/json",
    )


def _require_chain_id(chain_id: int) -> None:
    invariant(
        isinstance(chain_id, int) and chain_id > 0,
        f"Chain ID must be a positive integer, got {chain_id!r}",
    )
