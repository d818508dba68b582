"""Store — binds one remote account to a backend and runs the share workflows."""

from __future__ import annotations

import functools
import logging
import os
import shutil
import tempfile
import threading
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, TypeVar

from tenacity import Retrying, before_sleep_log, retry_if_exception_type, stop_after_attempt, wait_exponential

from share_store._auth import CredentialBroker
from share_store._config import AppCredentials, BackendConfig, RetryPolicy, StoreRecord
from share_store._errors import (
    BackendUnavailable,
    DuplicateAccount,
    LocalStagingFailure,
    ShareStoreError,
    StoreNotConfigured,
)
from share_store._models import CleanReport, OpResult
from share_store._path import top_level_name, validate_sid

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

    from share_store._client import RemoteClient
    from share_store._models import AccountInfo, RemoteEntry, Share
    from share_store._types import AccountID, AuthCodeProvider, ShareID

T = TypeVar("T")

log = logging.getLogger(__name__)

_CHECK_MARK = "✓"


def _default_client_factory(backend: BackendConfig) -> Callable[[], RemoteClient]:
    from share_store._registry import create_client

    return functools.partial(create_client, backend)


class Store:
    """One remote account on one backend.

    A store holds only the durable token and account id. Every operation
    builds a fresh client, re-applies the application credentials and the
    token, and discards the client afterwards. Operations on one store are
    serialized by an internal lock; distinct stores are independent.

    :param backend: Which backend to talk to and how to construct its client.
    :param app: Application key/secret applied to every client.
    :param access_token: Token from a previous setup, or ``""`` for a new store.
    :param user_id: Account id from a previous setup.
    :param retry: Retry policy for transient remote failures.
    :param client_factory: Overrides how clients are built (defaults to the
        registered factory for ``backend.type``).
    """

    def __init__(
        self,
        backend: BackendConfig,
        app: AppCredentials | None = None,
        *,
        access_token: str = "",
        user_id: AccountID | None = None,
        retry: RetryPolicy | None = None,
        client_factory: Callable[[], RemoteClient] | None = None,
    ) -> None:
        if bool(access_token) != (user_id is not None):
            raise ValueError("access_token and user_id must be given together")
        self._backend = backend
        self._app = app or AppCredentials()
        self._token = access_token
        self._user_id = user_id
        self._retry = retry or RetryPolicy()
        self._client_factory = client_factory or _default_client_factory(backend)
        self._lock = threading.RLock()

    @classmethod
    def from_record(cls, record: StoreRecord, app: AppCredentials, *, retry: RetryPolicy | None = None) -> Store:
        """Rebuild a bound store from its persisted record."""
        return cls(record.backend, app, access_token=record.access_token, user_id=record.user_id, retry=retry)

    def to_record(self) -> StoreRecord:
        """Persistable form of a bound store.

        :raises StoreNotConfigured: If setup has not completed.
        """
        if not self.is_bound:
            raise StoreNotConfigured("Store has not been set up", backend=self.name)
        return StoreRecord(
            backend=self._backend,
            access_token=self._token,
            user_id=self._user_id,  # type: ignore[arg-type]
        )

    def __repr__(self) -> str:
        return f"Store(backend={self.name!r}, user_id={self._user_id!r})"

    # region: properties

    @property
    def name(self) -> str:
        """Backend type identifier."""
        return self._backend.type

    @property
    def backend(self) -> BackendConfig:
        return self._backend

    @property
    def access_token(self) -> str:
        return self._token

    @property
    def user_id(self) -> AccountID | None:
        return self._user_id

    @property
    def is_bound(self) -> bool:
        """``True`` once setup has stored a token and account id."""
        return bool(self._token) and self._user_id is not None

    # endregion

    # region: client plumbing

    @contextmanager
    def _open_client(self, operation: str) -> Iterator[RemoteClient]:
        """Yield a fresh client carrying the app credentials and this store's token."""
        if not self.is_bound:
            raise StoreNotConfigured(f"Store must be set up before {operation}", backend=self.name)
        client = self._client_factory()
        try:
            client.set_app_credentials(self._app.key, self._app.secret)
            client.set_access_token(self._token)
            yield client
        finally:
            client.close()

    def _call(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Invoke a remote call, retrying only when the backend is unavailable."""
        policy = self._retry
        retrying = Retrying(
            retry=retry_if_exception_type(BackendUnavailable),
            stop=stop_after_attempt(policy.attempts),
            wait=wait_exponential(multiplier=policy.min_wait, min=policy.min_wait, max=policy.max_wait),
            before_sleep=before_sleep_log(log, logging.WARNING),  # type: ignore[arg-type,unused-ignore]
            reraise=True,
        )
        return retrying(func, *args, **kwargs)

    def _list_all(self, client: RemoteClient) -> list[RemoteEntry]:
        return self._call(client.list, "", recursive=True)

    # endregion

    # region: setup

    def link(self, registry: Iterable[Store], auth_code_provider: AuthCodeProvider | None = None) -> AccountInfo:
        """Run the authorization handshake and bind this store to the account.

        Same as :meth:`setup` but raises instead of returning ``False``.

        :param registry: Stores already configured; consulted for duplicates.
        :param auth_code_provider: ``(auth_url) -> code``; defaults to a browser prompt.
        :raises StoreNotConfigured: If this store is already bound.
        :raises AuthHandshakeFailure: If no authorization code could be obtained.
        :raises TokenExchangeFailure: If the code could not be exchanged.
        :raises AccountLookupFailure: If the account identity could not be fetched.
        :raises DuplicateAccount: If the account is already in ``registry``.
        """
        with self._lock:
            if self.is_bound:
                raise StoreNotConfigured(f"Store is already set up for account {self._user_id!r}", backend=self.name)
            broker = CredentialBroker(self._client_factory, self._app, auth_code_provider)
            credential = broker.authorize()
            account = credential.account
            for existing in registry:
                if existing is not self and existing.user_id == account.account_id:
                    raise DuplicateAccount(
                        f"Account for {account.display_name or account.account_id} already exists.",
                        account_id=account.account_id,
                        display_name=account.display_name,
                        backend=self.name,
                    )
            self._token = credential.access_token
            self._user_id = account.account_id
            return account

    def setup(self, registry: Iterable[Store], auth_code_provider: AuthCodeProvider | None = None) -> bool:
        """Interactively link a new account to this store.

        On failure the reason is logged, the store is left unbound and
        ``False`` is returned; the caller must not register it.
        """
        try:
            account = self.link(registry, auth_code_provider)
        except ShareStoreError as exc:
            log.error("Setup of %s store failed: %s", self.name, exc)
            return False
        log.info("Linked %s account %s %s", self.name, account.display_name or account.account_id, _CHECK_MARK)
        return True

    # endregion

    # region: single-share operations

    def upload(self, share: Share) -> OpResult:
        """Put ``share.data`` under ``share.sid``, replacing any previous content."""
        with self._lock:
            target = f"{self.name}/{share.sid}"
            log.info("Uploading %s...", target)
            try:
                sid = validate_sid(share.sid)
                with self._open_client("upload") as client:
                    self._call(client.put, sid, share.data, len(share.data), overwrite=True)
            except ShareStoreError as exc:
                log.error("Error uploading %s: %s", target, exc)
                return OpResult("upload", share.sid, exc)
            log.info("Uploaded %s %s", target, _CHECK_MARK)
            return OpResult("upload", share.sid)

    def delete(self, sid: ShareID) -> OpResult:
        """Remove the remote object named ``sid``."""
        with self._lock:
            target = f"{self.name}/{sid}"
            log.info("Deleting %s...", target)
            try:
                validate_sid(sid)
                with self._open_client("delete") as client:
                    self._call(client.delete, sid)
            except ShareStoreError as exc:
                log.error("Error deleting %s: %s", target, exc)
                return OpResult("delete", sid, exc)
            log.info("Deleted %s %s", target, _CHECK_MARK)
            return OpResult("delete", sid)

    # endregion

    # region: whole-store workflows

    def description(self) -> str:
        """Label followed by one ``- name`` line per remote entry.

        Never raises for remote failures; falls back to the label alone.
        """
        with self._lock:
            label = f"{self.name.capitalize()} Store"
            try:
                with self._open_client("description") as client:
                    label = f"{client.label} Store"
                    entries = self._list_all(client)
            except ShareStoreError as exc:
                log.error("Unable to iterate names on %s: %s", self.name, exc)
                return label
            return label + "".join(f"\n\t- {entry.name}" for entry in entries)

    def clean(self) -> CleanReport:
        """Delete everything in the remote store.

        Nothing is deleted if the listing fails. Once listing succeeded every
        top-level entry is attempted; individual failures are collected in
        the report instead of stopping the pass.
        """
        with self._lock:
            report = CleanReport()
            log.info("Cleaning %s:", self.name)
            try:
                with self._open_client("clean") as client:
                    names = dict.fromkeys(top_level_name(entry.path) for entry in self._list_all(client))
                    for name in names:
                        log.info("\t- remove %s", name)
                        try:
                            self._call(client.delete, name)
                        except ShareStoreError as exc:
                            log.error("Unable to remove %s: %s", name, exc)
                            report.failed[name] = str(exc)
                        else:
                            report.deleted.append(name)
            except ShareStoreError as exc:
                log.error("Unable to iterate names on %s: %s", self.name, exc)
                report.listed = False
                return report
            if report.failed:
                log.error(
                    "Clean of %s left %d of %d entries: %s",
                    self.name,
                    len(report.failed),
                    len(report.failed) + len(report.deleted),
                    ", ".join(sorted(report.failed)),
                )
            else:
                log.info("Cleaned %s (%d removed) %s", self.name, len(report.deleted), _CHECK_MARK)
            return report

    def _staging_path(self, restore_dir: str, path: str) -> str:
        """Local path for remote ``path`` under ``restore_dir``, parents created.

        :raises LocalStagingFailure: If the path would leave ``restore_dir``
            or its parent folders cannot be created.
        """
        parts = path.split("/")
        if ".." in parts:
            raise LocalStagingFailure(f"Remote path escapes staging dir: {path}", path=path, backend=self.name)
        target = os.path.join(restore_dir, *parts)
        try:
            os.makedirs(os.path.dirname(target), exist_ok=True)
        except OSError as exc:
            raise LocalStagingFailure(f"Cannot create {os.path.dirname(target)}: {exc}", path=path, backend=self.name) from exc
        return target

    def restore(self) -> str:
        """Download every remote file into a fresh staging directory.

        Nested remote content keeps its relative layout, so files sharing a
        base name in different folders never collide.

        :returns: The staging directory path, owned by the caller from then
            on, or ``""`` if anything failed. On failure the staging
            directory and any partial downloads are removed.
        """
        with self._lock:
            try:
                restore_dir = tempfile.mkdtemp(prefix=f"share_{self.name}_restore_")
            except OSError as exc:
                log.error("%s", LocalStagingFailure(f"Cannot create temp dir: {exc}", backend=self.name))
                return ""
            try:
                with self._open_client("restore") as client:
                    entries = self._list_all(client)
                    log.info("Downloading shares from %s...", client.label)
                    for entry in entries:
                        if entry.is_dir:
                            continue
                        target = self._staging_path(restore_dir, entry.path)
                        self._call(client.download_to_file, entry.path, target)
                        log.info("\t- got share %s", entry.path)
            except ShareStoreError as exc:
                log.error("Restore from %s failed: %s", self.name, exc)
                shutil.rmtree(restore_dir, ignore_errors=True)
                return ""
            except BaseException:
                shutil.rmtree(restore_dir, ignore_errors=True)
                raise
            log.info("Restored %s into %s %s", self.name, restore_dir, _CHECK_MARK)
            return restore_dir

    # endregion
