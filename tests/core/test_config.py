from __future__ import annotations

from pathlib import Path

import pytest

from bnpere.core.config import SyncConfig, load_sync_config_from_env

_ENV_VARS = [
    "BNPERE_MODE",
    "BNPERE_LOGIN",
    "BNPERE_PASSWORD",
    "BNPERE_API_URL",
    "BNPERE_EXPORT_PATH",
    "BNPERE_DATABASE_URL",
    "BNPERE_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_connected_mode(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BNPERE_LOGIN", "user")
    monkeypatch.setenv("BNPERE_PASSWORD", "secret")
    monkeypatch.setenv("BNPERE_API_URL", "https://provider.test")

    config = load_sync_config_from_env()

    assert config == SyncConfig(
        login="user",
        mode="connected",
        password="secret",
        api_url="https://provider.test",
        export_path=None,
        database_url="sqlite:///bnpere.db",
        log_level="INFO",
    )
    assert not config.standalone


def test_standalone_mode_needs_no_password(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BNPERE_MODE", "Standalone")
    monkeypatch.setenv("BNPERE_LOGIN", "user")
    monkeypatch.setenv("BNPERE_EXPORT_PATH", "/tmp/export.json")
    monkeypatch.setenv("BNPERE_DATABASE_URL", "sqlite:///:memory:")
    monkeypatch.setenv("BNPERE_LOG_LEVEL", "debug")

    config = load_sync_config_from_env()

    assert config.standalone
    assert config.password is None
    assert config.export_path == Path("/tmp/export.json")
    assert config.database_url == "sqlite:///:memory:"
    assert config.log_level == "DEBUG"


def test_missing_login(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BNPERE_PASSWORD", "secret")

    with pytest.raises(ValueError, match="BNPERE_LOGIN"):
        load_sync_config_from_env()


def test_export_path_argument_takes_precedence(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BNPERE_MODE", "standalone")
    monkeypatch.setenv("BNPERE_LOGIN", "user")
    monkeypatch.setenv("BNPERE_EXPORT_PATH", "/tmp/env-export.json")

    config = load_sync_config_from_env(export_path=Path("/tmp/cli-export.json"))

    assert config.export_path == Path("/tmp/cli-export.json")


def test_export_path_argument_replaces_missing_env(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("BNPERE_MODE", "standalone")
    monkeypatch.setenv("BNPERE_LOGIN", "user")

    config = load_sync_config_from_env(export_path=Path("/tmp/cli-export.json"))

    assert config.standalone
    assert config.export_path == Path("/tmp/cli-export.json")


def test_connected_mode_requires_password(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BNPERE_LOGIN", "user")
    monkeypatch.setenv("BNPERE_API_URL", "https://provider.test")

    with pytest.raises(ValueError, match="BNPERE_PASSWORD"):
        load_sync_config_from_env()


def test_standalone_mode_requires_export_path(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BNPERE_MODE", "standalone")
    monkeypatch.setenv("BNPERE_LOGIN", "user")

    with pytest.raises(ValueError, match="BNPERE_EXPORT_PATH"):
        load_sync_config_from_env()


def test_invalid_mode(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BNPERE_MODE", "cloud")
    monkeypatch.setenv("BNPERE_LOGIN", "user")

    with pytest.raises(ValueError, match="BNPERE_MODE"):
        load_sync_config_from_env()


def test_invalid_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BNPERE_LOGIN", "user")
    monkeypatch.setenv("BNPERE_LOG_LEVEL", "LOUD")

    with pytest.raises(ValueError, match="BNPERE_LOG_LEVEL"):
        load_sync_config_from_env()
