from __future__ import annotations

from typing import NotRequired, TypedDict

ACCOUNT_DOCTYPE = "io.cozy.bank.accounts"
TRANSACTION_DOCTYPE = "io.cozy.bank.operations"
BALANCE_HISTORY_DOCTYPE = "io.cozy.bank.balancehistories"


class Account(TypedDict):
    """Canonical bank account built from a provider card."""

    vendorId: str
    number: str
    currency: str
    institutionLabel: str
    label: str | None
    balance: float | None
    type: str


class PersistedAccount(Account):
    """Account after reconciliation, carrying its storage identifier."""

    _id: str


class Transaction(TypedDict):
    """
    Canonical bank transaction built from a provider operation.

    Field names follow the bank document schema shared with other importers,
    hence the camelCase keys.
    """

    vendorId: str
    vendorAccountId: str
    amount: float
    date: str
    dateOperation: str
    dateImport: str
    currency: str
    label: str | None
    originalBankLabel: str | None
    account: NotRequired[str]  # storage id of the owning account, once saved


class AccountRef(TypedDict):
    _id: str
    _type: str


class AccountRelationship(TypedDict):
    data: AccountRef


class BalanceHistoryRelationships(TypedDict):
    account: AccountRelationship


class BalanceHistoryMetadata(TypedDict):
    version: int


class BalanceHistory(TypedDict):
    """One balance snapshot per calendar date for an account and a year."""

    _id: NotRequired[str]
    year: int
    balances: dict[str, float | None]  # "YYYY-MM-DD" -> balance
    metadata: BalanceHistoryMetadata
    relationships: BalanceHistoryRelationships
