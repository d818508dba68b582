"""Registry — backend factories and the durable collection of configured stores."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from share_store._config import AppCredentials, BackendConfig, RegistryConfig
from share_store._errors import DuplicateAccount, StoreNotConfigured
from share_store._store import Store

if TYPE_CHECKING:
    from collections.abc import Iterator

    from share_store._client import RemoteClient
    from share_store._config import RetryPolicy
    from share_store._types import AccountID, AuthCodeProvider

log = logging.getLogger(__name__)

# Global client factory registry: maps type strings to client classes.
_BACKEND_FACTORIES: dict[str, type[RemoteClient]] = {}


def register_backend(type_name: str, cls: type[RemoteClient]) -> None:
    """Register a client class for a given type string.

    :param type_name: The type identifier (e.g. ``"local"``).
    :param cls: The client class to instantiate.
    """
    _BACKEND_FACTORIES[type_name] = cls


def _register_builtin_backends() -> None:
    """Register the built-in clients."""
    from share_store.backends import DropboxClient, LocalClient, S3Client

    for type_name, cls in (("local", LocalClient), ("dropbox", DropboxClient), ("s3", S3Client)):
        if type_name not in _BACKEND_FACTORIES:
            register_backend(type_name, cls)


def create_client(config: BackendConfig) -> RemoteClient:
    """Instantiate a fresh, unauthenticated client for ``config``.

    :raises ValueError: If the type is unknown or the options don't fit the client.
    """
    _register_builtin_backends()
    if config.type not in _BACKEND_FACTORIES:
        raise ValueError(
            f"Unknown backend type '{config.type}'. Registered types: {sorted(_BACKEND_FACTORIES.keys())}"
        )
    factory = _BACKEND_FACTORIES[config.type]
    try:
        return factory(**config.options)
    except TypeError as exc:
        raise ValueError(
            f"Invalid options for backend type {config.type!r}: {exc}. "
            f"Provided options: {sorted(config.options.keys())}"
        ) from exc


class StoreRegistry:
    """The set of stores an orchestrator has configured, one per remote account.

    Account ids are unique across the registry; :meth:`add` enforces it under a
    lock so concurrent setups of the same account cannot both be registered.

    :param config: Previously persisted records. Validates immediately.
    :param app: Application credentials handed to every store.
    :param retry: Retry policy handed to every store.
    :raises ValueError: If config is invalid.
    """

    def __init__(
        self,
        config: RegistryConfig | None = None,
        *,
        app: AppCredentials | None = None,
        retry: RetryPolicy | None = None,
    ) -> None:
        _register_builtin_backends()
        config = config or RegistryConfig()
        config.validate()
        self._app = app if app is not None else AppCredentials.from_env()
        self._retry = retry
        self._lock = threading.Lock()
        self._stores: list[Store] = [Store.from_record(r, self._app, retry=retry) for r in config.stores]

    def __repr__(self) -> str:
        return f"StoreRegistry(stores={[s.name for s in self._stores]!r})"

    def __iter__(self) -> Iterator[Store]:
        return iter(list(self._stores))

    def __len__(self) -> int:
        return len(self._stores)

    def find(self, user_id: AccountID) -> Store | None:
        """Return the store bound to ``user_id``, if any."""
        for store in self._stores:
            if store.user_id == user_id:
                return store
        return None

    def new_store(self, backend: BackendConfig | str, **options: object) -> Store:
        """Create an unbound store for ``backend``; call :meth:`Store.setup` next.

        :param backend: A backend config, or a type name combined with ``options``.
        :raises ValueError: If the backend type is unknown.
        """
        if isinstance(backend, str):
            backend = BackendConfig(type=backend, options=dict(options))
        if backend.type not in _BACKEND_FACTORIES:
            raise ValueError(
                f"Unknown backend type '{backend.type}'. Registered types: {sorted(_BACKEND_FACTORIES.keys())}"
            )
        return Store(backend, self._app, retry=self._retry)

    def add(self, store: Store) -> None:
        """Register a store that completed setup.

        :raises StoreNotConfigured: If the store is not bound.
        :raises DuplicateAccount: If its account is already registered.
        """
        if not store.is_bound:
            raise StoreNotConfigured("Only stores that completed setup can be registered", backend=store.name)
        with self._lock:
            if self.find(store.user_id) is not None:  # type: ignore[arg-type]
                raise DuplicateAccount(
                    f"Account {store.user_id!r} already exists.", account_id=store.user_id, backend=store.name
                )
            self._stores.append(store)

    def setup_store(
        self,
        backend: BackendConfig | str,
        auth_code_provider: AuthCodeProvider | None = None,
        **options: object,
    ) -> Store | None:
        """Create, set up and register a store in one step.

        :returns: The registered store, or ``None`` if setup failed or the
            account was registered concurrently.
        """
        store = self.new_store(backend, **options)
        if not store.setup(self, auth_code_provider):
            return None
        try:
            self.add(store)
        except DuplicateAccount as exc:
            log.error("%s", exc)
            return None
        return store

    def remove(self, store: Store) -> None:
        """Forget ``store``. The remote content is left untouched.

        :raises KeyError: If the store is not registered.
        """
        with self._lock:
            for index, candidate in enumerate(self._stores):
                if candidate is store:
                    del self._stores[index]
                    return
        raise KeyError(f"Store for account {store.user_id!r} is not registered")

    def to_config(self) -> RegistryConfig:
        """Snapshot of the registry in persistable form."""
        return RegistryConfig(stores=tuple(s.to_record() for s in self._stores))
