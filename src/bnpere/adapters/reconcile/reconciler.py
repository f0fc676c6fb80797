from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol, cast

import loguru
from loguru import logger

from bnpere.adapters.store.protocol import Document, DocumentStore
from bnpere.models.entities import (
    ACCOUNT_DOCTYPE,
    TRANSACTION_DOCTYPE,
    Account,
    PersistedAccount,
    Transaction,
)


@dataclass
class ReconcileResult:
    """Accounts and transactions as stored, each with its ``_id``."""

    accounts: list[PersistedAccount]
    transactions: list[Document]


class Reconciler(Protocol):
    async def save(
        self,
        accounts: Sequence[Account],
        transactions: Sequence[Transaction],
    ) -> ReconcileResult:
        ...


class ReconcilerLogger:
    """Handles all logging for StoreReconciler with business logic separated."""

    def __init__(self, logger_instance: loguru.Logger = logger) -> None:
        self._logger = logger_instance

    def accounts_saved(self, count: int) -> None:
        self._logger.bind(count=count).info("Saved {} accounts", count)

    def transactions_saved(self, count: int) -> None:
        self._logger.bind(count=count).info("Saved {} transactions", count)

    def orphan_transactions(self, vendor_account_ids: list[str]) -> None:
        self._logger.bind(vendor_account_ids=vendor_account_ids).warning(
            "Transactions reference unknown accounts: {}", vendor_account_ids
        )


class StoreReconciler:
    """
    Persists accounts and transactions, deduplicating on ``vendorId``.

    Accounts are upserted first so each transaction can be linked to its
    account's storage id through the ``account`` field. Re-importing the same
    operation updates the stored transaction instead of creating a new one.
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        logger_: ReconcilerLogger | None = None,
    ) -> None:
        self._store = store
        self._logger = logger_ or ReconcilerLogger()

    async def save(
        self,
        accounts: Sequence[Account],
        transactions: Sequence[Transaction],
    ) -> ReconcileResult:
        saved_accounts = cast(
            list[PersistedAccount],
            await self._store.update_or_create(
                [dict(account) for account in accounts],
                ACCOUNT_DOCTYPE,
                ["vendorId"],
            ),
        )
        self._logger.accounts_saved(len(saved_accounts))

        account_ids = {acc["vendorId"]: acc["_id"] for acc in saved_accounts}
        linked: list[Document] = []
        orphans: list[str] = []
        for txn in transactions:
            doc: Document = dict(txn)
            account_id = account_ids.get(txn["vendorAccountId"])
            if account_id is None:
                orphans.append(txn["vendorAccountId"])
            else:
                doc["account"] = account_id
            linked.append(doc)

        if orphans:
            self._logger.orphan_transactions(sorted(set(orphans)))

        saved_transactions = await self._store.update_or_create(
            linked, TRANSACTION_DOCTYPE, ["vendorId", "vendorAccountId"]
        )
        self._logger.transactions_saved(len(saved_transactions))

        return ReconcileResult(
            accounts=saved_accounts, transactions=saved_transactions
        )
