"""Tests for the configuration model."""

from __future__ import annotations

import pytest

from share_store._config import AppCredentials, BackendConfig, RegistryConfig, RetryPolicy, StoreRecord


def _record(user_id: int | str = 1, token: str = "tok", type_name: str = "local") -> StoreRecord:
    backend = BackendConfig(type=type_name, options={"root": "/tmp/r"})
    return StoreRecord(backend=backend, access_token=token, user_id=user_id)


class TestAppCredentials:
    def test_secret_not_in_repr(self) -> None:
        assert "hunter2" not in repr(AppCredentials(key="k", secret="hunter2"))

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BACKUP_APP_KEY", "k")
        monkeypatch.setenv("BACKUP_APP_SECRET", "s")
        assert AppCredentials.from_env("BACKUP") == AppCredentials(key="k", secret="s")

    def test_from_env_missing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("SHARE_STORE_APP_KEY", raising=False)
        monkeypatch.delenv("SHARE_STORE_APP_SECRET", raising=False)
        assert AppCredentials.from_env() == AppCredentials()


class TestRetryPolicy:
    def test_defaults(self) -> None:
        policy = RetryPolicy()
        assert (policy.attempts, policy.min_wait, policy.max_wait) == (3, 0.5, 8.0)

    @pytest.mark.parametrize(
        "kwargs",
        [{"attempts": 0}, {"min_wait": -1}, {"min_wait": 2, "max_wait": 1}],
    )
    def test_invalid(self, kwargs: dict[str, float]) -> None:
        with pytest.raises(ValueError):
            RetryPolicy(**kwargs)  # type: ignore[arg-type]


class TestStoreRecord:
    def test_token_not_in_repr(self) -> None:
        assert "tok" not in repr(_record(token="tok-secret"))


class TestRegistryConfig:
    def test_validate_ok(self) -> None:
        RegistryConfig(stores=(_record(1), _record("dbid:A", type_name="dropbox"))).validate()

    def test_validate_empty_token(self) -> None:
        with pytest.raises(ValueError, match="empty access token"):
            RegistryConfig(stores=(_record(token=""),)).validate()

    def test_validate_duplicate_across_backends(self) -> None:
        config = RegistryConfig(stores=(_record(7), _record(7, type_name="dropbox")))
        with pytest.raises(ValueError, match="Duplicate account 7"):
            config.validate()

    def test_round_trip(self) -> None:
        config = RegistryConfig(stores=(_record(1), _record("dbid:A", type_name="dropbox")))
        assert RegistryConfig.from_dict(config.to_dict()) == config

    def test_from_dict_empty(self) -> None:
        assert RegistryConfig.from_dict({}) == RegistryConfig()

    def test_from_dict_stores_not_list(self) -> None:
        with pytest.raises(TypeError, match="list"):
            RegistryConfig.from_dict({"stores": {}})

    def test_from_dict_record_not_dict(self) -> None:
        with pytest.raises(TypeError, match="#0"):
            RegistryConfig.from_dict({"stores": ["nope"]})

    def test_from_dict_bad_backend(self) -> None:
        with pytest.raises(TypeError, match="Backend config"):
            RegistryConfig.from_dict({"stores": [{"backend": "local", "access_token": "t", "user_id": 1}]})

    @pytest.mark.parametrize("user_id", [True, 1.5, None])
    def test_from_dict_bad_user_id(self, user_id: object) -> None:
        raw = {"stores": [{"backend": {"type": "local"}, "access_token": "t", "user_id": user_id}]}
        with pytest.raises(TypeError, match="user_id"):
            RegistryConfig.from_dict(raw)
