"""Normalized error hierarchy for share_store."""

from __future__ import annotations

import enum
from typing import Optional, Union


class ErrorKind(enum.Enum):
    """Failure classes a caller can branch on."""

    AUTH_HANDSHAKE = "auth_handshake"
    TOKEN_EXCHANGE = "token_exchange"
    ACCOUNT_LOOKUP = "account_lookup"
    DUPLICATE_ACCOUNT = "duplicate_account"
    NOT_CONFIGURED = "not_configured"
    INVALID_SHARE_ID = "invalid_share_id"
    REMOTE_IO = "remote_io"
    LOCAL_STAGING = "local_staging"


class ShareStoreError(Exception):
    """Base class for all share_store errors.

    :param message: Human-readable error description.
    :param path: The remote or local path involved in the error, if any.
    :param backend: The backend name involved, if any.
    """

    kind = ErrorKind.REMOTE_IO

    def __init__(self, message: str = "", *, path: Optional[str] = None, backend: Optional[str] = None) -> None:
        self.path = path
        self.backend = backend
        super().__init__(message)

    @property
    def message(self) -> str:
        return self.args[0] if self.args else ""

    def __str__(self) -> str:
        parts = [self.message]
        if self.path is not None:
            parts.append(f"path={self.path!r}")
        if self.backend is not None:
            parts.append(f"backend={self.backend!r}")
        return " | ".join(parts) if len(parts) > 1 else parts[0]

    def __repr__(self) -> str:
        cls = type(self).__name__
        args = [repr(self.message)]
        if self.path is not None:
            args.append(f"path={self.path!r}")
        if self.backend is not None:
            args.append(f"backend={self.backend!r}")
        return f"{cls}({', '.join(args)})"


class AuthHandshakeFailure(ShareStoreError):
    """Raised when the operator-facing authorization step fails."""

    kind = ErrorKind.AUTH_HANDSHAKE


class TokenExchangeFailure(ShareStoreError):
    """Raised when an authorization code cannot be exchanged for a token."""

    kind = ErrorKind.TOKEN_EXCHANGE


class AccountLookupFailure(ShareStoreError):
    """Raised when the authenticated account's identity cannot be fetched."""

    kind = ErrorKind.ACCOUNT_LOOKUP


class DuplicateAccount(ShareStoreError):
    """Raised when an account is already present in the registry.

    :param account_id: The conflicting account identifier.
    :param display_name: Human-readable account name.
    """

    kind = ErrorKind.DUPLICATE_ACCOUNT

    def __init__(
        self,
        message: str = "",
        *,
        account_id: Union[int, str, None] = None,
        display_name: str = "",
        backend: Optional[str] = None,
    ) -> None:
        self.account_id = account_id
        self.display_name = display_name
        super().__init__(message, backend=backend)


class StoreNotConfigured(ShareStoreError):
    """Raised when an operation needs a bound store but setup never ran."""

    kind = ErrorKind.NOT_CONFIGURED


class InvalidShareID(ShareStoreError):
    """Raised for share identifiers that cannot be used as remote object names."""

    kind = ErrorKind.INVALID_SHARE_ID


class RemoteIOFailure(ShareStoreError):
    """Raised when a remote put/delete/list/download fails.

    :param operation: The remote operation that failed.
    """

    kind = ErrorKind.REMOTE_IO

    def __init__(
        self,
        message: str = "",
        *,
        path: Optional[str] = None,
        backend: Optional[str] = None,
        operation: str = "",
    ) -> None:
        self.operation = operation
        super().__init__(message, path=path, backend=backend)

    def __str__(self) -> str:
        base = super().__str__()
        if self.operation:
            return f"{base} | operation={self.operation!r}"
        return base


class NotFound(RemoteIOFailure):
    """Raised when a remote object does not exist."""


class AlreadyExists(RemoteIOFailure):
    """Raised when a remote object exists and overwrite is not allowed."""


class PermissionDenied(RemoteIOFailure):
    """Raised when the backend rejects the credentials for an operation."""


class BackendUnavailable(RemoteIOFailure):
    """Raised when the backend cannot be reached. Safe to retry."""


class LocalStagingFailure(ShareStoreError):
    """Raised when the local restore staging area cannot be prepared."""

    kind = ErrorKind.LOCAL_STAGING
