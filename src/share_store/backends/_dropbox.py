"""Dropbox client using the HTTP API v2 over requests."""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

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

if TYPE_CHECKING:
    from collections.abc import Iterator

log = logging.getLogger(__name__)

AUTHORIZE_URL = "https://www.dropbox.com/oauth2/authorize"
API_URL = "https://api.dropboxapi.com"
CONTENT_URL = "https://content.dropboxapi.com"

_CHUNK_SIZE = 1 << 16


class DropboxClient(RemoteClient):
    """Dropbox client for an app-folder scoped application.

    :param timeout: Per-request timeout in seconds.
    :param session: Optional ``requests.Session`` to reuse (mainly for tests).
    :param api_url: Base URL of the RPC endpoints.
    :param content_url: Base URL of the upload/download endpoints.
    """

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        session: Any = None,
        api_url: str = API_URL,
        content_url: str = CONTENT_URL,
    ) -> None:
        super().__init__()
        self._timeout = timeout
        self._session_instance = session
        self._api_url = api_url.rstrip("/")
        self._content_url = content_url.rstrip("/")

    @property
    def name(self) -> str:
        return "dropbox"

    @property
    def label(self) -> str:
        return "Dropbox"

    # region: lazy session

    @property
    def _session(self) -> Any:
        if self._session_instance is None:
            import requests

            self._session_instance = requests.Session()
        return self._session_instance

    # endregion

    # region: path helpers

    @staticmethod
    def _db_path(name: str) -> str:
        """Dropbox addresses the root as ``""`` and everything else with a leading slash."""
        name = name.strip("/")
        return f"/{name}" if name else ""

    # endregion

    # region: error mapping

    @contextmanager
    def _errors(self, operation: str, path: str = "") -> Iterator[None]:
        """Map requests exceptions to share_store errors."""
        import requests

        try:
            yield
        except ShareStoreError:
            raise
        except (requests.ConnectionError, requests.Timeout) as exc:
            raise BackendUnavailable(str(exc), path=path, backend=self.name, operation=operation) from None
        except requests.RequestException as exc:
            raise RemoteIOFailure(str(exc), path=path, backend=self.name, operation=operation) from None

    def _check(self, response: Any, operation: str, path: str = "") -> Any:
        """Raise the matching share_store error for a non-2xx response."""
        status = response.status_code
        if status < 300:
            return response
        summary = self._error_summary(response)
        message = f"{operation} failed ({status}): {summary}"
        if status == 401:
            raise PermissionDenied(message, path=path, backend=self.name, operation=operation)
        if status == 409:
            if "not_found" in summary:
                raise NotFound(message, path=path, backend=self.name, operation=operation)
            if "conflict" in summary:
                raise AlreadyExists(message, path=path, backend=self.name, operation=operation)
        if status == 429 or status >= 500:
            raise BackendUnavailable(message, path=path, backend=self.name, operation=operation)
        raise RemoteIOFailure(message, path=path, backend=self.name, operation=operation)

    @staticmethod
    def _error_summary(response: Any) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or ""
        if isinstance(body, dict):
            return str(body.get("error_summary") or body.get("error_description") or body.get("error") or body)
        return str(body)

    def _json(self, response: Any, operation: str, path: str = "") -> Any:
        """Decode a successful response body as JSON.

        :raises RemoteIOFailure: If the body is not JSON, e.g. a proxy or
            captive-portal page served with a 200 status.
        """
        try:
            return self._check(response, operation, path).json()
        except ValueError as exc:
            raise RemoteIOFailure(
                f"{operation} returned a non-JSON body", path=path, backend=self.name, operation=operation
            ) from exc

    # endregion

    # region: transport

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._token}"}

    def _rpc(self, route: str, payload: dict[str, Any] | None, operation: str, path: str = "") -> Any:
        self._require_token(operation, path)
        log.debug("POST %s%s", self._api_url, route)
        with self._errors(operation, path):
            response = self._session.post(
                f"{self._api_url}{route}",
                headers={**self._auth_headers(), "Content-Type": "application/json"},
                data=json.dumps(payload),
                timeout=self._timeout,
            )
        return self._json(response, operation, path)

    # endregion

    # region: auth

    def authorize_url(self) -> str:
        query = urlencode({"client_id": self._require_app_key(), "response_type": "code"})
        return f"{AUTHORIZE_URL}?{query}"

    def exchange_auth_code(self, code: str) -> None:
        try:
            with self._errors("token"):
                response = self._session.post(
                    f"{self._api_url}/oauth2/token",
                    data={"code": code.strip(), "grant_type": "authorization_code"},
                    auth=(self._app_key, self._app_secret),
                    timeout=self._timeout,
                )
            body = self._json(response, "token")
        except ShareStoreError as exc:
            raise TokenExchangeFailure(f"Unable to exchange authorization code: {exc}", backend=self.name) from exc
        token = body.get("access_token") if isinstance(body, dict) else None
        if not token:
            raise TokenExchangeFailure("Token endpoint returned no access_token", backend=self.name)
        self.set_access_token(str(token))

    def get_account_info(self) -> AccountInfo:
        try:
            body = self._rpc("/2/users/get_current_account", None, "account")
        except ShareStoreError as exc:
            raise AccountLookupFailure(f"Unable to get account information: {exc}", backend=self.name) from exc
        if not isinstance(body, dict) or not body.get("account_id"):
            raise AccountLookupFailure("Account response carries no account_id", backend=self.name)
        name = body.get("name") or {}
        display_name = (name.get("display_name") if isinstance(name, dict) else "") or body.get("email") or ""
        return AccountInfo(account_id=str(body["account_id"]), display_name=str(display_name))

    # endregion

    # region: objects

    def put(self, name: str, data: bytes, size: int, *, overwrite: bool = True) -> None:
        self._require_token("put", name)
        self._check_size(data, size)
        arg = {
            "path": self._db_path(name),
            "mode": "overwrite" if overwrite else "add",
            "autorename": False,
            "mute": True,
        }
        with self._errors("put", name):
            response = self._session.post(
                f"{self._content_url}/2/files/upload",
                headers={
                    **self._auth_headers(),
                    "Content-Type": "application/octet-stream",
                    "Dropbox-API-Arg": json.dumps(arg),
                },
                data=data,
                timeout=self._timeout,
            )
        self._check(response, "put", name)

    def delete(self, name: str) -> None:
        self._rpc("/2/files/delete_v2", {"path": self._db_path(name)}, "delete", name)

    def list(self, path: str = "", *, recursive: bool = False) -> list[RemoteEntry]:
        body = self._rpc(
            "/2/files/list_folder",
            {"path": self._db_path(path), "recursive": recursive},
            "list",
            path,
        )
        entries = self._to_entries(body.get("entries", []))
        while body.get("has_more"):
            body = self._rpc("/2/files/list_folder/continue", {"cursor": body["cursor"]}, "list", path)
            entries.extend(self._to_entries(body.get("entries", [])))
        return entries

    @staticmethod
    def _to_entries(raw: list[dict[str, Any]]) -> list[RemoteEntry]:
        entries: list[RemoteEntry] = []
        for item in raw:
            tag = item.get(".tag")
            if tag == "deleted":
                continue
            entries.append(
                RemoteEntry(
                    path=item.get("path_display") or item.get("path_lower", ""),
                    is_dir=tag == "folder",
                    size=item.get("size"),
                )
            )
        return entries

    def download_to_file(self, name: str, local_path: str) -> None:
        import requests

        self._require_token("download", name)
        with self._errors("download", name):
            response = self._session.post(
                f"{self._content_url}/2/files/download",
                headers={**self._auth_headers(), "Dropbox-API-Arg": json.dumps({"path": self._db_path(name)})},
                stream=True,
                timeout=self._timeout,
            )
            try:
                self._check(response, "download", name)
                with open(local_path, "wb") as fh:
                    for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                        fh.write(chunk)
            except requests.RequestException:
                raise
            except OSError as exc:
                raise RemoteIOFailure(
                    f"Cannot write {local_path}: {exc}", path=name, backend=self.name, operation="download"
                ) from None
            finally:
                response.close()

    # endregion

    def close(self) -> None:
        if self._session_instance is not None:
            self._session_instance.close()
            self._session_instance = None
