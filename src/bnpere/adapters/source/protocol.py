from __future__ import annotations

from typing import Protocol

from bnpere.models.raw import RawCard, RawOperation


class SourceClientError(Exception):
    """Base error for savings provider failures."""


class SourceAuthenticationError(SourceClientError):
    """The provider rejected the credentials."""


class SourceClient(Protocol):
    """Fetches cards and operations for one provider login."""

    async def authenticate(self, login: str, password: str | None) -> str:
        """Open a session and return the access token."""
        ...

    async def fetch(
        self, login: str, token: str
    ) -> tuple[list[RawCard], list[RawOperation]]:
        """Return every card and operation visible to ``login``."""
        ...
