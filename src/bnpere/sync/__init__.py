"""Sync job package."""

from bnpere.sync.errors import (
    AuthenticationFailure,
    BalancePersistFailure,
    BalanceQueryFailure,
    CategorizationFailure,
    FetchFailure,
    ReconciliationFailure,
    SyncError,
)
from bnpere.sync.orchestrator import SyncOrchestrator, SyncResult, SyncState

__all__ = [
    # Orchestrator
    "SyncOrchestrator",
    "SyncResult",
    "SyncState",
    # Error kinds
    "SyncError",
    "AuthenticationFailure",
    "FetchFailure",
    "CategorizationFailure",
    "ReconciliationFailure",
    "BalanceQueryFailure",
    "BalancePersistFailure",
]
