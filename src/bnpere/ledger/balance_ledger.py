from __future__ import annotations

import asyncio
from collections.abc import Sequence
import copy
from datetime import date
from typing import cast

import loguru
from loguru import logger

from bnpere.adapters.store.protocol import DocumentStore
from bnpere.models.entities import (
    ACCOUNT_DOCTYPE,
    BALANCE_HISTORY_DOCTYPE,
    BalanceHistory,
    PersistedAccount,
)

HISTORY_VERSION = 1
ACCOUNT_ID_PATH = "relationships.account.data._id"
HISTORY_INDEX_FIELDS = ["year", ACCOUNT_ID_PATH]


class BalanceLedgerLogger:
    """Handles all logging for BalanceLedger with business logic separated."""

    def __init__(self, logger_instance: loguru.Logger = logger) -> None:
        self._logger = logger_instance

    def history_found(self, year: int, account_id: str) -> None:
        self._logger.bind(year=year, account_id=account_id).info(
            "Found a balance history for year {} and account {}", year, account_id
        )

    def history_created(self, year: int, account_id: str) -> None:
        self._logger.bind(year=year, account_id=account_id).info(
            "Balance history not found for year {} and account {}, creating a new one",
            year,
            account_id,
        )

    def duplicate_histories(
        self, year: int, account_id: str, kept_id: str | None, extra_id: str | None
    ) -> None:
        self._logger.bind(
            year=year, account_id=account_id, kept=kept_id, duplicate=extra_id
        ).warning(
            "Duplicate balance histories for year {} and account {}: keeping {}, "
            "merging missing dates from {}",
            year,
            account_id,
            kept_id,
            extra_id,
        )

    def persisting(self, count: int) -> None:
        self._logger.bind(count=count).info("Saving {} balance histories", count)


def empty_balance_history(year: int, account_id: str) -> BalanceHistory:
    return {
        "year": year,
        "balances": {},
        "metadata": {"version": HISTORY_VERSION},
        "relationships": {
            "account": {"data": {"_id": account_id, "_type": ACCOUNT_DOCTYPE}}
        },
    }


def merge_balance(
    history: BalanceHistory, day: str, balance: float | None
) -> BalanceHistory:
    """Return a copy of ``history`` with ``day`` set to ``balance``.

    Entries for other dates are kept as they are; an existing entry for
    ``day`` is overwritten.
    """
    merged = copy.deepcopy(history)
    merged["balances"][day] = balance
    return merged


class BalanceLedger:
    """Keeps one balance history document per account and calendar year."""

    def __init__(
        self,
        store: DocumentStore,
        *,
        logger_: BalanceLedgerLogger | None = None,
    ) -> None:
        self._store = store
        self._logger = logger_ or BalanceLedgerLogger()

    async def get_balance_history(self, year: int, account_id: str) -> BalanceHistory:
        """
        Find the history for (year, account), or build an empty one.

        A second matching document means the store holds duplicates. Dates
        only present in the duplicate are copied into the first document so
        no snapshot is lost when the first one is written back.
        """
        found = await self._store.query(
            BALANCE_HISTORY_DOCTYPE,
            HISTORY_INDEX_FIELDS,
            {"year": year, ACCOUNT_ID_PATH: account_id},
            limit=2,
        )

        if not found:
            self._logger.history_created(year, account_id)
            return empty_balance_history(year, account_id)

        history = cast(BalanceHistory, found[0])
        self._logger.history_found(year, account_id)

        if len(found) > 1:
            duplicate = cast(BalanceHistory, found[1])
            self._logger.duplicate_histories(
                year, account_id, history.get("_id"), duplicate.get("_id")
            )
            history["balances"] = {**duplicate["balances"], **history["balances"]}

        return history

    async def fetch_histories(
        self,
        accounts: Sequence[PersistedAccount],
        as_of: date,
    ) -> list[BalanceHistory]:
        """
        Load each account's history for ``as_of``'s year and record today's balance.

        Lookups run concurrently; nothing is written.

        Args:
            accounts: Stored accounts with their current balance
            as_of: Day the balances are recorded for

        Returns:
            One history per account, in input order, ready to persist
        """
        day = as_of.isoformat()

        async def _one(account: PersistedAccount) -> BalanceHistory:
            history = await self.get_balance_history(as_of.year, account["_id"])
            return merge_balance(history, day, account["balance"])

        return list(await asyncio.gather(*(_one(acc) for acc in accounts)))

    async def persist_histories(
        self, histories: Sequence[BalanceHistory]
    ) -> list[BalanceHistory]:
        """Write whole histories back, creating those without an ``_id``."""
        self._logger.persisting(len(histories))
        saved = await self._store.update_or_create(
            [dict(history) for history in histories],
            BALANCE_HISTORY_DOCTYPE,
            ["_id"],
        )
        return cast(list[BalanceHistory], saved)
