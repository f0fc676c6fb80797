from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest

from bnpere.adapters.source.export_file import ExportFileSource
from bnpere.adapters.source.protocol import SourceClientError


def write_export(tmp_path: Path, payload: object) -> Path:
    path = tmp_path / "export.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_fetch_reads_cards_and_operations(tmp_path: Path) -> None:
    path = write_export(
        tmp_path,
        {
            "cards": [
                {"company": "BNP", "planID": "001", "name": "Plan A", "totalAmount": 1000}
            ],
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
        },
    )
    source = ExportFileSource(path)

    token = asyncio.run(source.authenticate("user", None))
    cards, operations = asyncio.run(source.fetch("user", token))

    assert token == ""
    assert [c.plan_id for c in cards] == ["001"]
    assert [o.id for o in operations] == ["op1"]
    assert operations[0].amount == 50.0


def test_missing_sections_default_to_empty(tmp_path: Path) -> None:
    source = ExportFileSource(write_export(tmp_path, {}))

    cards, operations = asyncio.run(source.fetch("user", ""))

    assert cards == []
    assert operations == []


def test_missing_file_raises_source_error(tmp_path: Path) -> None:
    source = ExportFileSource(tmp_path / "nope.json")

    with pytest.raises(SourceClientError, match="Cannot read export file"):
        asyncio.run(source.fetch("user", ""))


def test_invalid_json_raises_source_error(tmp_path: Path) -> None:
    path = tmp_path / "export.json"
    path.write_text("{not json", encoding="utf-8")
    source = ExportFileSource(path)

    with pytest.raises(SourceClientError, match="Invalid export file"):
        asyncio.run(source.fetch("user", ""))


def test_invalid_record_raises_source_error(tmp_path: Path) -> None:
    source = ExportFileSource(
        write_export(tmp_path, {"cards": [{"company": "BNP"}], "operations": []})
    )

    with pytest.raises(SourceClientError, match="Invalid export file"):
        asyncio.run(source.fetch("user", ""))
