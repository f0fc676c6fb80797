"""Raw records returned by the savings provider.

The provider speaks camelCase JSON. Models accept both the provider spelling
(``planID``, ``totalAmount``, ``dateTime``) and the Python attribute names, and
ignore fields they do not know about. Numeric identifiers are kept as strings.
"""

from __future__ import annotations

from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field


class RawBaseModel(BaseModel):
    """Shared base for provider records with a short parse alias."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        frozen=True,
        coerce_numbers_to_str=True,
    )

    @classmethod
    def parse(cls, data: Any) -> Self:
        return cls.model_validate(data)


class RawCard(RawBaseModel):
    """A savings plan held by the user at one company."""

    company: str
    plan_id: str = Field(alias="planID")
    name: str | None = None
    total_amount: float | None = Field(default=None, alias="totalAmount")


class RawOperation(RawBaseModel):
    """A movement on a savings plan."""

    id: str
    company: str
    card: str
    date_time: str = Field(alias="dateTime")  # naive local time, no offset
    amount: float
    label: str | None = None
    code: str | None = None  # e.g. "ARBITRAGE"
