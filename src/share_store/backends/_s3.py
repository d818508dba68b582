"""S3-compatible object storage client using s3fs."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from share_store._client import RemoteClient
from share_store._errors import (
    AccountLookupFailure,
    AlreadyExists,
    BackendUnavailable,
    NotFound,
    PermissionDenied,
    RemoteIOFailure,
    ShareStoreError,
    TokenExchangeFailure,
)
from share_store._models import AccountInfo, RemoteEntry
from share_store._path import normalize_remote_path

if TYPE_CHECKING:
    from collections.abc import Iterator

log = logging.getLogger(__name__)

CREDENTIALS_URL = "https://console.aws.amazon.com/iam/home#/security_credentials"


class S3Client(RemoteClient):
    """S3-compatible object storage client using s3fs.

    S3 has no OAuth handshake: the "authorization code" the operator enters is
    an ``ACCESS_KEY_ID:SECRET_ACCESS_KEY`` pair, which becomes the access
    token once the bucket accepts it.

    :param bucket: Bucket name (required, non-empty).
    :param prefix: Key prefix acting as the store root inside the bucket.
    :param endpoint_url: Custom endpoint URL (e.g. for MinIO).
    :param region_name: AWS region name.
    :param timeout: Connect and read timeout in seconds.
    :param client_options: Additional options passed to s3fs.
    """

    def __init__(
        self,
        bucket: str,
        *,
        prefix: str = "",
        endpoint_url: str | None = None,
        region_name: str | None = None,
        timeout: float = 30.0,
        client_options: dict[str, Any] | None = None,
    ) -> None:
        super().__init__()
        if not bucket or not bucket.strip():
            raise ValueError("bucket must be a non-empty string")
        self._bucket = bucket
        self._prefix = normalize_remote_path(prefix)
        self._endpoint_url = endpoint_url
        self._region_name = region_name
        self._timeout = timeout
        self._client_options = client_options or {}
        self._fs_instance: Any = None

    @property
    def name(self) -> str:
        return "s3"

    @property
    def label(self) -> str:
        return "S3"

    # region: credentials

    def set_access_token(self, token: str) -> None:
        super().set_access_token(token)
        self._fs_instance = None

    def _key_pair(self, operation: str = "") -> tuple[str, str]:
        key, sep, secret = self._require_token(operation).partition(":")
        if not sep or not key or not secret:
            raise PermissionDenied(
                "Access token must have the form ACCESS_KEY_ID:SECRET_ACCESS_KEY",
                backend=self.name,
                operation=operation,
            )
        return key, secret

    # endregion

    # region: lazy filesystem

    def _fs(self, operation: str) -> Any:
        if self._fs_instance is None:
            import s3fs  # type: ignore[import-untyped]

            key, secret = self._key_pair(operation)
            opts: dict[str, Any] = dict(self._client_options)
            opts["key"] = key
            opts["secret"] = secret
            if self._endpoint_url is not None:
                opts["endpoint_url"] = self._endpoint_url
            if self._region_name is not None:
                client_kwargs: dict[str, Any] = opts.setdefault("client_kwargs", {})
                client_kwargs["region_name"] = self._region_name
            config_kwargs: dict[str, Any] = opts.setdefault("config_kwargs", {})
            config_kwargs.setdefault("connect_timeout", self._timeout)
            config_kwargs.setdefault("read_timeout", self._timeout)
            opts.setdefault("anon", False)
            log.debug("Creating S3 filesystem for bucket %s", self._bucket)
            self._fs_instance = s3fs.S3FileSystem(skip_instance_cache=True, **opts)
        return self._fs_instance

    # endregion

    # region: path helpers

    def _s3_path(self, path: str) -> str:
        parts = [p for p in (self._bucket, self._prefix, normalize_remote_path(path)) if p]
        return "/".join(parts)

    def _rel_path(self, s3_path: str) -> str:
        root = self._s3_path("")
        s3_path = s3_path.rstrip("/")
        if s3_path == root:
            return ""
        if s3_path.startswith(root + "/"):
            return s3_path[len(root) + 1 :]
        return s3_path

    # endregion

    # region: error mapping

    @contextmanager
    def _errors(self, operation: str, path: str = "") -> Iterator[None]:
        """Map s3fs/botocore exceptions to share_store errors."""
        try:
            yield
        except ShareStoreError:
            raise
        except FileNotFoundError:
            raise NotFound(f"Not found: {path}", path=path, backend=self.name, operation=operation) from None
        except PermissionError:
            raise PermissionDenied(
                f"Permission denied: {path}", path=path, backend=self.name, operation=operation
            ) from None
        except Exception as exc:
            raise self._classify_error(exc, operation, path) from None

    def _classify_error(self, exc: Exception, operation: str, path: str) -> RemoteIOFailure:
        """Classify an unknown exception into a share_store error type."""
        msg = str(exc).lower()
        kwargs: dict[str, Any] = {"path": path, "backend": self.name, "operation": operation}
        if "404" in msg or "nosuchkey" in msg or "nosuchbucket" in msg or "not found" in msg:
            return NotFound(f"Not found: {path}", **kwargs)
        if "403" in msg or "accessdenied" in msg or "access denied" in msg or "invalidaccesskeyid" in msg:
            return PermissionDenied(f"Permission denied: {path}", **kwargs)
        if any(kw in msg for kw in ("endpoint", "connect", "timeout", "timed out", "dns", "name or service")):
            return BackendUnavailable(str(exc), **kwargs)
        return RemoteIOFailure(str(exc), **kwargs)

    # endregion

    # region: auth

    def authorize_url(self) -> str:
        return self._endpoint_url or CREDENTIALS_URL

    def exchange_auth_code(self, code: str) -> None:
        self.set_access_token(code.strip())
        try:
            fs = self._fs("token")
            with self._errors("token", self._bucket):
                fs.ls(self._bucket)
        except ShareStoreError as exc:
            self.set_access_token("")
            raise TokenExchangeFailure(
                f"Bucket {self._bucket!r} rejected the key pair: {exc}", backend=self.name
            ) from exc

    def get_account_info(self) -> AccountInfo:
        try:
            key, _secret = self._key_pair("account")
        except ShareStoreError as exc:
            raise AccountLookupFailure(f"Unable to get account information: {exc}", backend=self.name) from exc
        root = self._s3_path("")
        return AccountInfo(account_id=f"{key}@{root}", display_name=f"{key} ({root})")

    # endregion

    # region: objects

    def put(self, name: str, data: bytes, size: int, *, overwrite: bool = True) -> None:
        self._check_size(data, size)
        fs = self._fs("put")
        with self._errors("put", name):
            if not overwrite and fs.exists(self._s3_path(name)):
                raise AlreadyExists(f"Object already exists: {name}", path=name, backend=self.name, operation="put")
            fs.pipe_file(self._s3_path(name), data)

    def delete(self, name: str) -> None:
        fs = self._fs("delete")
        with self._errors("delete", name):
            s3_path = self._s3_path(name)
            if not fs.exists(s3_path):
                raise NotFound(f"Not found: {name}", path=name, backend=self.name, operation="delete")
            fs.rm(s3_path, recursive=fs.isdir(s3_path))

    def list(self, path: str = "", *, recursive: bool = False) -> list[RemoteEntry]:
        fs = self._fs("list")
        with self._errors("list", path):
            found: dict[str, Any] = fs.find(
                self._s3_path(path),
                maxdepth=None if recursive else 1,
                withdirs=True,
                detail=True,
            )
        entries: list[RemoteEntry] = []
        for s3_key, info in found.items():
            rel = self._rel_path(s3_key)
            if not rel or (path and rel == normalize_remote_path(path)):
                continue
            is_dir = info.get("type") == "directory"
            entries.append(RemoteEntry(path=rel, is_dir=is_dir, size=None if is_dir else info.get("size")))
        return entries

    def download_to_file(self, name: str, local_path: str) -> None:
        fs = self._fs("download")
        with self._errors("download", name):
            s3_path = self._s3_path(name)
            if not fs.isfile(s3_path):
                raise NotFound(f"File not found: {name}", path=name, backend=self.name, operation="download")
            fs.get_file(s3_path, local_path)

    # endregion

    def close(self) -> None:
        self._fs_instance = None
