"""Shared test fixtures and marker registration."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from share_store._config import AppCredentials
from share_store._registry import StoreRegistry

from fakes import NO_WAIT, FlakyRemote, code

if TYPE_CHECKING:
    from collections.abc import Iterator

    from share_store._store import Store


def pytest_configure(config: object) -> None:
    """Register custom markers."""
    if isinstance(config, pytest.Config):
        config.addinivalue_line("markers", "integration: requires external services")


@pytest.fixture
def root() -> Iterator[str]:
    with tempfile.TemporaryDirectory() as tmp:
        yield str(Path(tmp) / "remote")


@pytest.fixture
def app() -> AppCredentials:
    return AppCredentials(key="app-key", secret="app-secret")


@pytest.fixture
def registry(app: AppCredentials) -> StoreRegistry:
    return StoreRegistry(app=app, retry=NO_WAIT)


@pytest.fixture
def store(registry: StoreRegistry, root: str) -> Store:
    """A local store that completed setup and is registered."""
    s = registry.new_store("local", root=root, account_id=1, display_name="Alice")
    assert s.setup(registry, code)
    registry.add(s)
    return s


@pytest.fixture
def flaky(root: str, app: AppCredentials) -> FlakyRemote:
    return FlakyRemote(root, app)
