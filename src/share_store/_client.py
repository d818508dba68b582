"""RemoteClient abstract base class — the contract every backend adapter fulfils."""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING

from share_store._errors import PermissionDenied, StoreNotConfigured

if TYPE_CHECKING:
    from share_store._models import AccountInfo, RemoteEntry


class RemoteClient(abc.ABC):
    """Abstract base class for remote object-store clients.

    A client is a short-lived handle: the store creates one per operation,
    applies the app credentials and access token, and discards it. Clients
    must map backend-native exceptions to ``share_store`` errors; nothing
    from ``requests``, ``botocore`` or ``os`` may leak.
    """

    def __init__(self) -> None:
        self._app_key = ""
        self._app_secret = ""
        self._token = ""

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Unique identifier for this backend type (e.g. ``'local'``, ``'dropbox'``)."""

    @property
    def label(self) -> str:
        """Human-readable backend name used in store descriptions."""
        return self.name.capitalize()

    # region: credentials
    def set_app_credentials(self, key: str, secret: str) -> None:
        """Attach the application's client key and secret."""
        self._app_key = key
        self._app_secret = secret

    def set_access_token(self, token: str) -> None:
        """Authenticate subsequent calls with ``token``."""
        self._token = token

    @property
    def access_token(self) -> str:
        """The token currently applied, or ``""``."""
        return self._token

    def _require_app_key(self) -> str:
        if not self._app_key:
            raise StoreNotConfigured("Application key is not set", backend=self.name)
        return self._app_key

    def _require_token(self, operation: str = "", path: str | None = None) -> str:
        if not self._token:
            raise PermissionDenied("No access token applied", path=path, backend=self.name, operation=operation)
        return self._token

    # endregion

    @abc.abstractmethod
    def authorize_url(self) -> str:
        """URL the operator visits to grant access and obtain an authorization code."""

    @abc.abstractmethod
    def exchange_auth_code(self, code: str) -> None:
        """Exchange an authorization code for an access token and apply it.

        :raises TokenExchangeFailure: If the provider rejects the code.
        """

    @abc.abstractmethod
    def get_account_info(self) -> AccountInfo:
        """Identity of the account the applied token belongs to.

        :raises AccountLookupFailure: If the identity cannot be fetched.
        """

    @abc.abstractmethod
    def put(self, name: str, data: bytes, size: int, *, overwrite: bool = True) -> None:
        """Store ``data`` under ``name``.

        :param size: Exact byte length of ``data``.
        :param overwrite: If ``False``, raise if ``name`` already exists.
        :raises AlreadyExists: If the object exists and ``overwrite`` is ``False``.
        """

    @abc.abstractmethod
    def delete(self, name: str) -> None:
        """Delete an object or folder.

        :raises NotFound: If nothing exists under ``name``.
        """

    @abc.abstractmethod
    def list(self, path: str = "", *, recursive: bool = False) -> list[RemoteEntry]:
        """List entries under ``path`` in backend order.

        :param recursive: If ``True``, include entries in all subfolders.
        """

    @abc.abstractmethod
    def download_to_file(self, name: str, local_path: str) -> None:
        """Write the content of remote object ``name`` to ``local_path``.

        :raises NotFound: If the object does not exist.
        """

    @staticmethod
    def _check_size(data: bytes, size: int) -> None:
        if size != len(data):
            raise ValueError(f"size={size} does not match payload length {len(data)}")

    def close(self) -> None:  # noqa: B027
        """Release resources. Default is a no-op."""
