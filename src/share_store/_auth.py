"""Authorization handshake — turns an operator-entered code into a bound credential."""

from __future__ import annotations

import dataclasses
import logging
import webbrowser
from typing import TYPE_CHECKING

from share_store._errors import (
    AccountLookupFailure,
    AuthHandshakeFailure,
    ShareStoreError,
    TokenExchangeFailure,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from share_store._client import RemoteClient
    from share_store._config import AppCredentials
    from share_store._models import AccountInfo
    from share_store._types import AuthCodeProvider

log = logging.getLogger(__name__)


def browser_code_prompt(auth_url: str) -> str:
    """Open ``auth_url`` in a browser and block until the operator types the code.

    If no browser can be launched the URL is included in the prompt so it can
    be opened by hand.

    :raises AuthHandshakeFailure: If the browser errors or stdin cannot be read.
    """
    try:
        opened = webbrowser.open(auth_url)
    except webbrowser.Error as exc:
        raise AuthHandshakeFailure(f"Unable to open browser: {exc}") from exc
    prompt = "Enter Auth Code: " if opened else f"Visit {auth_url}\nEnter Auth Code: "
    try:
        code = input(prompt)
    except (EOFError, OSError) as exc:
        raise AuthHandshakeFailure(f"Unable to read authorization code: {exc!r}") from exc
    return code.strip()


@dataclasses.dataclass(frozen=True)
class Credential:
    """Result of a successful handshake.

    :param access_token: Long-lived token for the account.
    :param account: Identity the token belongs to.
    """

    access_token: str = dataclasses.field(repr=False)
    account: AccountInfo


class CredentialBroker:
    """Runs the authorization handshake for one remote account.

    Nothing here is retried: every step depends on operator input or on a
    single-use code.

    :param client_factory: Builds a fresh, unauthenticated client.
    :param app: Application key/secret applied to the client.
    :param auth_code_provider: ``(auth_url) -> code``; defaults to
        :func:`browser_code_prompt`.
    """

    def __init__(
        self,
        client_factory: Callable[[], RemoteClient],
        app: AppCredentials,
        auth_code_provider: AuthCodeProvider | None = None,
    ) -> None:
        self._client_factory = client_factory
        self._app = app
        self._provider = auth_code_provider or browser_code_prompt

    def authorize(self) -> Credential:
        """Obtain a token and the account it belongs to.

        :raises AuthHandshakeFailure: If no authorization code could be obtained.
        :raises TokenExchangeFailure: If the provider rejects the code.
        :raises AccountLookupFailure: If the account identity cannot be fetched.
        """
        client = self._client_factory()
        try:
            client.set_app_credentials(self._app.key, self._app.secret)
            code = self._request_code(client)
            self._exchange(client, code)
            account = self._lookup(client)
            log.debug("Authorized %s account %r", client.name, account.account_id)
            return Credential(access_token=client.access_token, account=account)
        finally:
            client.close()

    def _request_code(self, client: RemoteClient) -> str:
        try:
            code = self._provider(client.authorize_url())
        except AuthHandshakeFailure:
            raise
        except (ShareStoreError, OSError, EOFError, ValueError) as exc:
            raise AuthHandshakeFailure(f"Unable to get authorization code: {exc}", backend=client.name) from exc
        if not code or not code.strip():
            raise AuthHandshakeFailure("No authorization code entered", backend=client.name)
        return code.strip()

    @staticmethod
    def _exchange(client: RemoteClient, code: str) -> None:
        try:
            client.exchange_auth_code(code)
        except TokenExchangeFailure:
            raise
        except ShareStoreError as exc:
            raise TokenExchangeFailure(f"Unable to get client token: {exc}", backend=client.name) from exc
        if not client.access_token:
            raise TokenExchangeFailure("Token exchange returned an empty token", backend=client.name)

    @staticmethod
    def _lookup(client: RemoteClient) -> AccountInfo:
        try:
            return client.get_account_info()
        except AccountLookupFailure:
            raise
        except ShareStoreError as exc:
            raise AccountLookupFailure(f"Unable to get account information: {exc}", backend=client.name) from exc
