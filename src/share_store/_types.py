"""Type aliases used throughout share_store."""

from __future__ import annotations

from collections.abc import Callable
from typing import Union

ShareID = str
AccountID = Union[int, str]  # noqa: UP007
AuthCodeProvider = Callable[[str], str]
