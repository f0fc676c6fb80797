"""Map provider cards and operations onto canonical accounts and transactions."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime

from bnpere.models.entities import Account, Transaction
from bnpere.models.raw import RawCard, RawOperation

CURRENCY = "EUR"
INSTITUTION_LABEL = "BNP Paribas Épargne Salariale"
ACCOUNT_TYPE = "Savings"

ARBITRAGE_CODE = "ARBITRAGE"
ARBITRAGE_MIRROR_SUFFIX = "11"
UTC_SUFFIX = ".000Z"

_ACCOUNT_ID_SEPARATOR = "999"


def account_vendor_id(company: str, plan_id: str) -> str:
    """Build the stable account identifier for a plan held at a company.

    Used both for accounts and for the account reference carried by
    transactions, so the two always agree.
    """
    return f"{company}{_ACCOUNT_ID_SEPARATOR}{plan_id}"


def format_instant(instant: datetime) -> str:
    """Render an instant as UTC ISO-8601 with milliseconds, e.g. 2024-03-01T10:00:00.000Z.

    Naive values are taken as local time.
    """
    utc = instant.astimezone(UTC)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def accounts_from(cards: Iterable[RawCard]) -> list[Account]:
    accounts: list[Account] = []
    for card in cards:
        vendor_id = account_vendor_id(card.company, card.plan_id)
        accounts.append(
            {
                "vendorId": vendor_id,
                "number": vendor_id,
                "currency": CURRENCY,
                "institutionLabel": INSTITUTION_LABEL,
                "label": card.name,
                "balance": card.total_amount,
                "type": ACCOUNT_TYPE,
            }
        )
    return accounts


def transactions_from(
    operations: Iterable[RawOperation],
    *,
    imported_at: datetime | None = None,
) -> list[Transaction]:
    """
    Build transactions from operations, preserving input order.

    An arbitrage moves money between funds of the same plan, so it is recorded
    as the original leg followed by a mirror leg with the opposite amount. The
    pair nets to zero.

    Args:
        operations: Provider operations
        imported_at: Import instant stamped on every transaction
            (defaults to now)

    Returns:
        Flat list of transactions
    """
    date_import = format_instant(imported_at or datetime.now(UTC))

    transactions: list[Transaction] = []
    for op in operations:
        date = op.date_time + UTC_SUFFIX
        txn: Transaction = {
            "vendorId": op.id,
            "vendorAccountId": account_vendor_id(op.company, op.card),
            "amount": op.amount,
            "date": date,
            "dateOperation": date,
            "dateImport": date_import,
            "currency": CURRENCY,
            "label": op.label,
            "originalBankLabel": op.label,
        }
        transactions.append(txn)

        if op.code == ARBITRAGE_CODE:
            mirror: Transaction = {
                **txn,
                "vendorId": op.id + ARBITRAGE_MIRROR_SUFFIX,
                "amount": -op.amount,
            }
            transactions.append(mirror)

    return transactions
