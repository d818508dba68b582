"""Local filesystem client — stdlib-only reference implementation."""

from __future__ import annotations

import errno
import hashlib
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from share_store._client import RemoteClient
from share_store._errors import (
    AccountLookupFailure,
    AlreadyExists,
    InvalidShareID,
    NotFound,
    PermissionDenied,
    RemoteIOFailure,
    TokenExchangeFailure,
)
from share_store._models import AccountInfo, RemoteEntry

if TYPE_CHECKING:
    from share_store._types import AccountID


class LocalClient(RemoteClient):
    """Client backed by a directory on the local filesystem.

    The authorization flow is simulated: any non-empty code is accepted and
    turned into a ``local-`` token. Every call rejects a missing or foreign token.

    :param root: Path to the directory acting as the remote root.
    :param account_id: Identity reported by :meth:`get_account_info`.
    :param display_name: Human-readable account name.
    """

    def __init__(self, root: str, *, account_id: AccountID = 0, display_name: str = "local disk") -> None:
        super().__init__()
        self._root = Path(root).resolve()
        self._root.mkdir(parents=True, exist_ok=True)
        self._account_id = account_id
        self._display_name = display_name

    @property
    def name(self) -> str:
        return "local"

    @property
    def label(self) -> str:
        return "Local"

    # region: auth
    def authorize_url(self) -> str:
        return self._root.as_uri()

    def _token_for(self, code: str) -> str:
        digest = hashlib.sha256(f"{self._root}:{code}".encode()).hexdigest()[:16]
        return f"local-{digest}"

    def exchange_auth_code(self, code: str) -> None:
        code = code.strip()
        if not code:
            raise TokenExchangeFailure("Empty authorization code", backend=self.name)
        self.set_access_token(self._token_for(code))

    def get_account_info(self) -> AccountInfo:
        if not self._token.startswith("local-"):
            raise AccountLookupFailure("No valid access token applied", backend=self.name)
        return AccountInfo(account_id=self._account_id, display_name=self._display_name)

    def _require_token(self, operation: str = "", path: str | None = None) -> str:
        token = super()._require_token(operation, path)
        if not token.startswith("local-"):
            raise PermissionDenied(
                "Access token was not issued by this backend", path=path, backend=self.name, operation=operation
            )
        return token

    # endregion

    # region: path safety
    def _resolve(self, path: str) -> Path:
        """Resolve a root-relative path, rejecting anything that escapes the root.

        :raises InvalidShareID: If the resolved path is outside the root.
        """
        resolved = (self._root / path.lstrip("/\\")).resolve()
        try:
            resolved.relative_to(self._root)
        except ValueError:
            raise InvalidShareID(f"Path escapes root directory: {path}", path=path, backend=self.name) from None
        return resolved

    def _key(self, full: Path) -> str:
        return full.relative_to(self._root).as_posix()

    # endregion

    def put(self, name: str, data: bytes, size: int, *, overwrite: bool = True) -> None:
        self._require_token("put", name)
        self._check_size(data, size)
        full = self._resolve(name)
        if not overwrite and full.exists():
            raise AlreadyExists(f"Object already exists: {name}", path=name, backend=self.name, operation="put")
        try:
            full.parent.mkdir(parents=True, exist_ok=True)
            full.write_bytes(data)
        except PermissionError:
            raise PermissionDenied(
                f"Permission denied: {name}", path=name, backend=self.name, operation="put"
            ) from None
        except OSError as exc:
            raise RemoteIOFailure(str(exc), path=name, backend=self.name, operation="put") from None

    def delete(self, name: str) -> None:
        self._require_token("delete", name)
        full = self._resolve(name)
        if full == self._root:
            raise InvalidShareID("Cannot delete the root", path=name, backend=self.name)
        try:
            if full.is_dir():
                shutil.rmtree(full)
            else:
                full.unlink()
        except FileNotFoundError:
            raise NotFound(f"Not found: {name}", path=name, backend=self.name, operation="delete") from None
        except PermissionError:
            raise PermissionDenied(
                f"Permission denied: {name}", path=name, backend=self.name, operation="delete"
            ) from None
        except OSError as exc:
            raise RemoteIOFailure(str(exc), path=name, backend=self.name, operation="delete") from None

    def list(self, path: str = "", *, recursive: bool = False) -> list[RemoteEntry]:
        self._require_token("list", path)
        full = self._resolve(path)
        if not full.is_dir():
            raise NotFound(f"Folder not found: {path}", path=path, backend=self.name, operation="list")
        items = full.rglob("*") if recursive else full.iterdir()
        try:
            return [
                RemoteEntry(
                    path=self._key(item),
                    is_dir=item.is_dir(),
                    size=None if item.is_dir() else item.stat().st_size,
                )
                for item in sorted(items)
            ]
        except OSError as exc:
            raise RemoteIOFailure(str(exc), path=path, backend=self.name, operation="list") from None

    def download_to_file(self, name: str, local_path: str) -> None:
        self._require_token("download", name)
        full = self._resolve(name)
        if not full.is_file():
            raise NotFound(f"File not found: {name}", path=name, backend=self.name, operation="download")
        try:
            shutil.copyfile(full, local_path)
        except OSError as exc:
            if exc.errno in (errno.EACCES, errno.EPERM):
                raise PermissionDenied(
                    f"Permission denied: {name}", path=name, backend=self.name, operation="download"
                ) from None
            raise RemoteIOFailure(str(exc), path=name, backend=self.name, operation="download") from None
