from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, cast

from bnpere.models.entities import Transaction


class Categorizer(Protocol):
    """Annotates transactions with a category.

    Implementations may add keys to each transaction but must keep the
    sequence length and order.
    """

    async def categorize(self, transactions: Sequence[Transaction]) -> list[Transaction]:
        ...


class PassthroughCategorizer:
    """Categorizer that leaves transactions uncategorized."""

    async def categorize(self, transactions: Sequence[Transaction]) -> list[Transaction]:
        return [cast(Transaction, dict(txn)) for txn in transactions]
