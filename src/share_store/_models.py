"""Immutable value objects passed between the orchestrator, stores and clients."""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING

from share_store._path import base_name, normalize_remote_path

if TYPE_CHECKING:
    from share_store._errors import ErrorKind, ShareStoreError
    from share_store._types import AccountID


@dataclasses.dataclass(frozen=True)
class Share:
    """One logical backed-up item.

    :param sid: Stable identifier, used as the remote object name.
    :param data: Opaque payload.
    """

    sid: str
    data: bytes

    def __repr__(self) -> str:
        return f"Share(sid={self.sid!r}, size={len(self.data)})"


@dataclasses.dataclass(frozen=True)
class RemoteEntry:
    """One object returned by a remote listing.

    :param path: Root-relative path (no leading slash).
    :param is_dir: ``True`` for folders.
    :param size: Size in bytes, when the backend reports it.
    """

    path: str
    is_dir: bool = False
    size: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", normalize_remote_path(self.path))

    @property
    def name(self) -> str:
        """Base name of the entry."""
        return base_name(self.path)


@dataclasses.dataclass(frozen=True)
class AccountInfo:
    """Identity of the account a token belongs to."""

    account_id: AccountID
    display_name: str = ""


@dataclasses.dataclass(frozen=True)
class OpResult:
    """Outcome of a single-object store operation.

    Truthy on success, so ``if store.upload(share): ...`` reads naturally.

    :param operation: Operation label (``"upload"``, ``"delete"``).
    :param target: The share ID the operation acted on.
    :param error: The failure, or ``None`` on success.
    """

    operation: str
    target: str
    error: ShareStoreError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> ErrorKind | None:
        return None if self.error is None else self.error.kind

    @property
    def message(self) -> str:
        return "" if self.error is None else str(self.error)

    def __bool__(self) -> bool:
        return self.ok


@dataclasses.dataclass
class CleanReport:
    """What a clean pass did.

    :param listed: ``False`` if the initial listing failed and nothing was deleted.
    :param deleted: Names removed, in the order they were deleted.
    :param failed: Names that could not be removed, mapped to the error message.
    """

    listed: bool = True
    deleted: list[str] = dataclasses.field(default_factory=list)
    failed: dict[str, str] = dataclasses.field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.listed and not self.failed
