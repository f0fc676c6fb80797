"""Error kinds reported by a sync run."""

from __future__ import annotations

from typing import ClassVar


class SyncError(Exception):
    """Base class for failures that end a sync run."""

    kind: ClassVar[str] = "sync"


class AuthenticationFailure(SyncError):
    """The provider refused the session."""

    kind = "authentication"


class FetchFailure(SyncError):
    """Cards or operations could not be fetched or parsed."""

    kind = "fetch"


class CategorizationFailure(SyncError):
    kind = "categorization"


class ReconciliationFailure(SyncError):
    kind = "reconciliation"


class BalanceQueryFailure(SyncError):
    """A balance history lookup failed."""

    kind = "balance_query"


class BalancePersistFailure(SyncError):
    """Balance histories could not be written."""

    kind = "balance_persist"
