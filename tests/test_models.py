"""Tests for value objects."""

from __future__ import annotations

import dataclasses

import pytest

from share_store._errors import ErrorKind, NotFound
from share_store._models import AccountInfo, CleanReport, OpResult, RemoteEntry, Share


class TestShare:
    def test_frozen(self) -> None:
        s = Share(sid="a", data=b"x")
        with pytest.raises(dataclasses.FrozenInstanceError):
            s.sid = "b"  # type: ignore[misc]

    def test_repr_hides_payload(self) -> None:
        assert repr(Share(sid="a", data=b"secret")) == "Share(sid='a', size=6)"


class TestRemoteEntry:
    def test_path_normalized(self) -> None:
        entry = RemoteEntry(path="/sub/deep/")
        assert entry.path == "sub/deep"
        assert entry.name == "deep"

    def test_defaults(self) -> None:
        entry = RemoteEntry(path="a")
        assert entry.is_dir is False
        assert entry.size is None

    def test_equality(self) -> None:
        assert RemoteEntry(path="/a", size=1) == RemoteEntry(path="a", size=1)


class TestAccountInfo:
    def test_string_and_int_ids(self) -> None:
        assert AccountInfo(account_id=42).display_name == ""
        assert AccountInfo(account_id="dbid:AAA", display_name="Alice").account_id == "dbid:AAA"


class TestOpResult:
    def test_success(self) -> None:
        result = OpResult("upload", "abc")
        assert result.ok
        assert bool(result) is True
        assert result.kind is None
        assert result.message == ""

    def test_failure(self) -> None:
        error = NotFound("gone", path="abc", backend="local", operation="delete")
        result = OpResult("delete", "abc", error)
        assert not result
        assert result.kind is ErrorKind.REMOTE_IO
        assert "gone" in result.message


class TestCleanReport:
    def test_defaults_ok(self) -> None:
        assert CleanReport().ok

    def test_listing_failed(self) -> None:
        assert not CleanReport(listed=False).ok

    def test_partial_failure(self) -> None:
        report = CleanReport(deleted=["a"], failed={"b": "denied"})
        assert not report.ok

    def test_independent_defaults(self) -> None:
        first, second = CleanReport(), CleanReport()
        first.deleted.append("a")
        assert second.deleted == []
