"""Tests for the error hierarchy."""

from __future__ import annotations

import pytest

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


class TestBaseError:
    """ShareStoreError carries optional path and backend."""

    def test_default_attributes(self) -> None:
        e = ShareStoreError("boom")
        assert e.path is None
        assert e.backend is None
        assert e.message == "boom"

    def test_with_attributes(self) -> None:
        e = ShareStoreError("boom", path="a.txt", backend="s3")
        assert e.path == "a.txt"
        assert e.backend == "s3"

    def test_str_plain(self) -> None:
        assert str(ShareStoreError("boom")) == "boom"

    def test_str_with_context(self) -> None:
        assert str(ShareStoreError("boom", path="x", backend="local")) == "boom | path='x' | backend='local'"

    def test_repr(self) -> None:
        assert repr(NotFound("gone", path="x")) == "NotFound('gone', path='x')"

    def test_empty_message(self) -> None:
        assert ShareStoreError().message == ""


class TestKinds:
    """Every concrete error maps to exactly one ErrorKind."""

    @pytest.mark.parametrize(
        ("cls", "kind"),
        [
            (AuthHandshakeFailure, ErrorKind.AUTH_HANDSHAKE),
            (TokenExchangeFailure, ErrorKind.TOKEN_EXCHANGE),
            (AccountLookupFailure, ErrorKind.ACCOUNT_LOOKUP),
            (DuplicateAccount, ErrorKind.DUPLICATE_ACCOUNT),
            (StoreNotConfigured, ErrorKind.NOT_CONFIGURED),
            (InvalidShareID, ErrorKind.INVALID_SHARE_ID),
            (RemoteIOFailure, ErrorKind.REMOTE_IO),
            (NotFound, ErrorKind.REMOTE_IO),
            (AlreadyExists, ErrorKind.REMOTE_IO),
            (PermissionDenied, ErrorKind.REMOTE_IO),
            (BackendUnavailable, ErrorKind.REMOTE_IO),
            (LocalStagingFailure, ErrorKind.LOCAL_STAGING),
        ],
    )
    def test_kind(self, cls: type[ShareStoreError], kind: ErrorKind) -> None:
        assert issubclass(cls, ShareStoreError)
        assert cls.kind is kind

    @pytest.mark.parametrize("cls", [NotFound, AlreadyExists, PermissionDenied, BackendUnavailable])
    def test_remote_io_subclasses(self, cls: type[ShareStoreError]) -> None:
        assert issubclass(cls, RemoteIOFailure)


class TestRemoteIOFailure:
    def test_operation_in_str(self) -> None:
        e = RemoteIOFailure("nope", path="a", backend="dropbox", operation="put")
        assert e.operation == "put"
        assert str(e).endswith("| operation='put'")

    def test_no_operation(self) -> None:
        assert str(RemoteIOFailure("nope")) == "nope"


class TestDuplicateAccount:
    def test_attributes(self) -> None:
        e = DuplicateAccount("Account for Alice already exists.", account_id=3, display_name="Alice", backend="local")
        assert e.account_id == 3
        assert e.display_name == "Alice"
        assert e.backend == "local"
        assert e.path is None

    def test_catchable_as_base(self) -> None:
        with pytest.raises(ShareStoreError):
            raise DuplicateAccount("dup", account_id="dbid:1")
