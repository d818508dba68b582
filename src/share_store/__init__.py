"""Pluggable remote storage for backup shares."""

from share_store._auth import Credential, CredentialBroker, browser_code_prompt
from share_store._client import RemoteClient
from share_store._config import AppCredentials, BackendConfig, RegistryConfig, RetryPolicy, StoreRecord
from share_store._errors import (
    AccountLookupFailure,
    AlreadyExists,
    AuthHandshakeFailure,
    BackendUnavailable,
    DuplicateAccount,
    ErrorKind,
    InvalidShareID,
    LocalStagingFailure,
    NotFound,
    PermissionDenied,
    RemoteIOFailure,
    ShareStoreError,
    StoreNotConfigured,
    TokenExchangeFailure,
)
from share_store._models import AccountInfo, CleanReport, OpResult, RemoteEntry, Share
from share_store._registry import StoreRegistry, create_client, register_backend
from share_store._store import Store

__version__ = "0.1.0"

__all__ = [
    # Core
    "Store",
    "StoreRegistry",
    "RemoteClient",
    "register_backend",
    "create_client",
    # Auth
    "CredentialBroker",
    "Credential",
    "browser_code_prompt",
    # Models
    "Share",
    "RemoteEntry",
    "AccountInfo",
    "OpResult",
    "CleanReport",
    # Config
    "AppCredentials",
    "BackendConfig",
    "RetryPolicy",
    "StoreRecord",
    "RegistryConfig",
    # Errors
    "ErrorKind",
    "ShareStoreError",
    "AuthHandshakeFailure",
    "TokenExchangeFailure",
    "AccountLookupFailure",
    "DuplicateAccount",
    "StoreNotConfigured",
    "InvalidShareID",
    "RemoteIOFailure",
    "NotFound",
    "AlreadyExists",
    "PermissionDenied",
    "BackendUnavailable",
    "LocalStagingFailure",
    # Version
    "__version__",
]
