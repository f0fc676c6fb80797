from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from bnpere.adapters.store.sql import SqlDocumentStore
from bnpere.ui import cli

runner = CliRunner()

EXPORT = {
    "cards": [{"company": "BNP", "planID": "001", "name": "Plan A", "totalAmount": 1000}],
    "operations": [
        {
            "id": "op1",
            "company": "BNP",
            "card": "001",
            "dateTime": "2024-03-01T10:00:00",
            "amount": 50,
            "label": "Contribution",
            "code": "STANDARD",
        }
    ],
}


@pytest.fixture
def standalone_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    """Standalone-mode environment; returns the database URL."""
    export_path = tmp_path / "export.json"
    export_path.write_text(json.dumps(EXPORT), encoding="utf-8")
    database_url = f"sqlite:///{tmp_path / 'bnpere.db'}"

    monkeypatch.setenv("BNPERE_MODE", "standalone")
    monkeypatch.setenv("BNPERE_LOGIN", "user")
    monkeypatch.setenv("BNPERE_EXPORT_PATH", str(export_path))
    monkeypatch.setenv("BNPERE_DATABASE_URL", database_url)
    monkeypatch.delenv("BNPERE_LOG_LEVEL", raising=False)
    monkeypatch.setattr(cli, "configure_logging", lambda level: None)
    return database_url


def test_sync_succeeds(standalone_env: str) -> None:
    result = runner.invoke(cli.app, ["sync", "--date", "2024-03-01"])

    assert result.exit_code == 0, result.output
    assert "1 accounts, 1 transactions, 1 balance histories" in result.output


def test_sync_failure_exits_with_status_1(
    standalone_env: str, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("BNPERE_EXPORT_PATH", str(tmp_path / "missing.json"))

    result = runner.invoke(cli.app, ["sync", "--date", "2024-03-01"])

    assert result.exit_code == 1
    assert "(fetch)" in result.output


def test_sync_export_path_option_overrides_environment(
    standalone_env: str, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    export_path = tmp_path / "other-export.json"
    export_path.write_text(json.dumps(EXPORT), encoding="utf-8")
    monkeypatch.setenv("BNPERE_EXPORT_PATH", str(tmp_path / "missing.json"))

    result = runner.invoke(
        cli.app, ["sync", "--date", "2024-03-01", "--export-path", str(export_path)]
    )

    assert result.exit_code == 0, result.output
    assert "1 accounts, 1 transactions, 1 balance histories" in result.output


def test_sync_configuration_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("BNPERE_LOGIN", raising=False)
    monkeypatch.setenv("BNPERE_MODE", "standalone")

    result = runner.invoke(cli.app, ["sync"])

    assert result.exit_code == 2
    assert "BNPERE_LOGIN" in result.output


def test_sync_rejects_bad_date(standalone_env: str) -> None:
    result = runner.invoke(cli.app, ["sync", "--date", "01/03/2024"])

    assert result.exit_code != 0


def test_history_prints_balances(standalone_env: str) -> None:
    runner.invoke(cli.app, ["sync", "--date", "2024-03-01"])
    runner.invoke(cli.app, ["sync", "--date", "2024-03-02"])
    store = SqlDocumentStore(standalone_env)
    [account] = store.query_sync("io.cozy.bank.accounts", ["vendorId"], {})

    result = runner.invoke(
        cli.app, ["history", "--account-id", account["_id"], "--year", "2024"]
    )

    assert result.exit_code == 0, result.output
    assert json.loads(result.output[result.output.index("{") :]) == {
        "2024-03-01": 1000,
        "2024-03-02": 1000,
    }
