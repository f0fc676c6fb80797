from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from bnpere.adapters.source.protocol import SourceClientError
from bnpere.models.raw import RawCard, RawOperation


class ExportFile(BaseModel):
    cards: list[RawCard] = Field(default_factory=list)
    operations: list[RawOperation] = Field(default_factory=list)


class ExportFileSource:
    """
    Reads cards and operations from a JSON export instead of the live API.

    Used in standalone mode, where no provider session is opened. The file
    holds ``{"cards": [...], "operations": [...]}`` in the provider's format.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    async def authenticate(self, login: str, password: str | None) -> str:
        return ""

    async def fetch(
        self, login: str, token: str
    ) -> tuple[list[RawCard], list[RawOperation]]:
        try:
            content = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise SourceClientError(f"Cannot read export file {self._path}: {e}") from e

        try:
            export = ExportFile.model_validate(json.loads(content))
        except (json.JSONDecodeError, ValidationError) as e:
            raise SourceClientError(f"Invalid export file {self._path}: {e}") from e

        return export.cards, export.operations
