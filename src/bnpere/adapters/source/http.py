from __future__ import annotations

import asyncio
import json
from typing import Any, cast
import urllib.error
import urllib.parse
import urllib.request

from pydantic import BaseModel, Field, ValidationError

from bnpere.adapters.source.protocol import (
    SourceAuthenticationError,
    SourceClientError,
)
from bnpere.models.raw import RawCard, RawOperation


class TokenResponse(BaseModel):
    access_token: str


class CardsResponse(BaseModel):
    cards: list[RawCard] = Field(default_factory=list)


class OperationsResponse(BaseModel):
    operations: list[RawOperation] = Field(default_factory=list)


class HttpSourceClient:
    """JSON-over-HTTPS client for the savings provider API."""

    def __init__(
        self,
        *,
        api_url: str,
        token_path: str = "/auth/token",
        cards_path: str = "/cards",
        operations_path: str = "/operations",
        timeout: float = 30.0,
    ) -> None:
        self._api_url = api_url.rstrip("/")
        self._token_path = token_path
        self._cards_path = cards_path
        self._operations_path = operations_path
        self._timeout = timeout

    async def authenticate(self, login: str, password: str | None) -> str:
        if not password:
            raise SourceAuthenticationError(f"No password configured for {login}")
        body = await asyncio.to_thread(
            self._request,
            "POST",
            self._token_path,
            payload={"login": login, "password": password},
        )
        try:
            return TokenResponse.model_validate(body).access_token
        except ValidationError as e:
            raise SourceClientError(f"Unexpected token response: {e}") from e

    async def fetch(
        self, login: str, token: str
    ) -> tuple[list[RawCard], list[RawOperation]]:
        query = {"login": login}
        cards_body, operations_body = await asyncio.gather(
            asyncio.to_thread(
                self._request, "GET", self._cards_path, token=token, query=query
            ),
            asyncio.to_thread(
                self._request, "GET", self._operations_path, token=token, query=query
            ),
        )
        try:
            cards = CardsResponse.model_validate(cards_body).cards
            operations = OperationsResponse.model_validate(operations_body).operations
        except ValidationError as e:
            raise SourceClientError(f"Unexpected provider response: {e}") from e
        return cards, operations

    def _request(
        self,
        method: str,
        path: str,
        *,
        payload: dict[str, Any] | None = None,
        token: str | None = None,
        query: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        url = self._api_url + path
        if query:
            url += "?" + urllib.parse.urlencode(query)

        headers = {"Accept": "application/json"}
        data = None
        if payload is not None:
            data = json.dumps(payload).encode("utf-8")
            headers["Content-Type"] = "application/json"
        if token:
            headers["Authorization"] = f"Bearer {token}"

        req = urllib.request.Request(  # noqa: S310
            url, data=data, headers=headers, method=method
        )
        try:
            with urllib.request.urlopen(req, timeout=self._timeout) as resp:  # noqa: S310
                body = resp.read().decode("utf-8")
        except urllib.error.HTTPError as e:
            err_body = e.read().decode("utf-8", "ignore")
            if e.code in (401, 403):
                raise SourceAuthenticationError(
                    f"Provider rejected credentials ({e.code}): {err_body}"
                ) from e
            raise SourceClientError(f"Provider API error ({e.code}): {err_body}") from e
        except urllib.error.URLError as e:
            raise SourceClientError(f"Network error calling provider API: {e}") from e

        try:
            return cast(dict[str, Any], json.loads(body))
        except json.JSONDecodeError as e:
            raise SourceClientError(
                f"Failed to parse provider response as JSON: {e}: {body}"
            ) from e
