"""Configuration model — immutable data containers describing apps, backends and stores."""

from __future__ import annotations

import dataclasses
import os
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from share_store._types import AccountID


@dataclasses.dataclass(frozen=True)
class AppCredentials:
    """The application's client key/secret pair, shared by every store of a process.

    :param key: OAuth client ID (app key).
    :param secret: OAuth client secret (app secret).
    """

    key: str = ""
    secret: str = dataclasses.field(default="", repr=False)

    @classmethod
    def from_env(cls, prefix: str = "SHARE_STORE") -> AppCredentials:
        """Read ``<PREFIX>_APP_KEY`` and ``<PREFIX>_APP_SECRET`` from the environment."""
        return cls(
            key=os.environ.get(f"{prefix}_APP_KEY", ""),
            secret=os.environ.get(f"{prefix}_APP_SECRET", ""),
        )


@dataclasses.dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry for transient remote failures.

    :param attempts: Total attempts per remote call (1 disables retry).
    :param min_wait: Lower bound of the exponential backoff, in seconds.
    :param max_wait: Upper bound of the exponential backoff, in seconds.
    """

    attempts: int = 3
    min_wait: float = 0.5
    max_wait: float = 8.0

    def __post_init__(self) -> None:
        if self.attempts < 1:
            raise ValueError("attempts must be >= 1")
        if self.min_wait < 0 or self.max_wait < self.min_wait:
            raise ValueError("expected 0 <= min_wait <= max_wait")


@dataclasses.dataclass(frozen=True)
class BackendConfig:
    """Describes how to build a client for one backend.

    :param type: Backend type identifier (e.g. ``"local"``, ``"dropbox"``, ``"s3"``).
    :param options: Backend-specific constructor options.
    """

    type: str
    options: dict[str, object] = dataclasses.field(default_factory=dict)


@dataclasses.dataclass(frozen=True)
class StoreRecord:
    """Persisted form of a bound store.

    :param backend: Backend the store talks to.
    :param access_token: Token obtained during setup.
    :param user_id: Account identifier the token belongs to.
    """

    backend: BackendConfig
    access_token: str = dataclasses.field(repr=False)
    user_id: AccountID


@dataclasses.dataclass(frozen=True)
class RegistryConfig:
    """Top-level configuration container.

    :param stores: Records of every configured store, in registration order.
    """

    stores: tuple[StoreRecord, ...] = ()

    def validate(self) -> None:
        """Check that every record is bound and account ids are unique.

        :raises ValueError: On an empty token or a repeated account id.
        """
        seen: set[AccountID] = set()
        for index, record in enumerate(self.stores):
            if not record.access_token:
                raise ValueError(f"Store #{index} ({record.backend.type}) has an empty access token")
            if record.user_id in seen:
                raise ValueError(f"Duplicate account {record.user_id!r} (backend '{record.backend.type}')")
            seen.add(record.user_id)

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> RegistryConfig:
        """Construct from a plain dict (e.g. parsed TOML/JSON).

        :param data: Dict with a ``stores`` list.
        """
        raw_stores = data.get("stores", [])
        if not isinstance(raw_stores, list):
            msg = "Expected 'stores' to be a list"
            raise TypeError(msg)

        records: list[StoreRecord] = []
        for index, raw in enumerate(raw_stores):
            if not isinstance(raw, dict):
                msg = f"Store record #{index} must be a dict"
                raise TypeError(msg)
            backend = raw.get("backend", {})
            if not isinstance(backend, dict):
                msg = f"Backend config for store #{index} must be a dict"
                raise TypeError(msg)
            user_id = raw["user_id"]
            if not isinstance(user_id, (int, str)) or isinstance(user_id, bool):
                msg = f"user_id for store #{index} must be an int or a string"
                raise TypeError(msg)
            records.append(
                StoreRecord(
                    backend=BackendConfig(
                        type=str(backend["type"]),
                        options=dict(backend.get("options", {})),
                    ),
                    access_token=str(raw["access_token"]),
                    user_id=user_id,
                )
            )
        return cls(stores=tuple(records))

    def to_dict(self) -> dict[str, object]:
        """Inverse of :meth:`from_dict`."""
        return {
            "stores": [
                {
                    "backend": {"type": r.backend.type, "options": dict(r.backend.options)},
                    "access_token": r.access_token,
                    "user_id": r.user_id,
                }
                for r in self.stores
            ]
        }
