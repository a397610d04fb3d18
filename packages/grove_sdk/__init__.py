"""Public Grove storage SDK interface."""

from packages.grove_sdk.acl import (
    RECOVERED_ADDRESS_PARAM_MARKER,
    AclPolicy,
    GenericAcl,
    ImmutableAcl,
    LensAccountAcl,
    WalletAddressAcl,
    acl_to_wire,
    generic_acl,
    immutable,
    lens_account_only,
    resolve_acl,
    wallet_only,
)
from packages.grove_sdk.client import StorageClient
from packages.grove_sdk.config import (
    LOCAL,
    PRODUCTION,
    STAGING,
    EnvironmentConfig,
    environment_from_settings,
)
from packages.grove_sdk.errors import (
    AuthorizationError,
    BackendError,
    InvariantError,
    PropagationError,
    PropagationTimeoutError,
    StorageClientError,
    StorageSdkError,
)
from packages.grove_sdk.multipart import TransportCapabilities, detect_capabilities
from packages.grove_sdk.responses import FileUploadResponse, UploadFolderResponse
from packages.grove_sdk.types import (
    LENS_SCHEME,
    Authorization,
    DeleteResponse,
    File,
    Resource,
    Signer,
    Status,
    StatusResponse,
    extract_storage_key,
)

__all__ = [
    "AclPolicy",
    "Authorization",
    "AuthorizationError",
    "BackendError",
    "DeleteResponse",
    "EnvironmentConfig",
    "File",
    "FileUploadResponse",
    "GenericAcl",
    "ImmutableAcl",
    "InvariantError",
    "LENS_SCHEME",
    "LOCAL",
    "LensAccountAcl",
    "PRODUCTION",
    "PropagationError",
    "PropagationTimeoutError",
    "RECOVERED_ADDRESS_PARAM_MARKER",
    "Resource",
    "STAGING",
    "Signer",
    "Status",
    "StatusResponse",
    "StorageClient",
    "StorageClientError",
    "StorageSdkError",
    "TransportCapabilities",
    "UploadFolderResponse",
    "WalletAddressAcl",
    "acl_to_wire",
    "detect_capabilities",
    "environment_from_settings",
    "extract_storage_key",
    "generic_acl",
    "immutable",
    "lens_account_only",
    "resolve_acl",
    "wallet_only",
]
