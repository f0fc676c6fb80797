from __future__ import annotations

from collections.abc import Awaitable
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
import time
from typing import TypeVar

import loguru
from loguru import logger

from bnpere.adapters.categorize.categorizer import Categorizer
from bnpere.adapters.reconcile.reconciler import Reconciler
from bnpere.adapters.source.protocol import SourceAuthenticationError, SourceClient
from bnpere.ledger.balance_ledger import BalanceLedger
from bnpere.models.entities import Account, BalanceHistory, Transaction
from bnpere.normalize.normalizer import accounts_from, transactions_from
from bnpere.sync.errors import (
    AuthenticationFailure,
    BalancePersistFailure,
    BalanceQueryFailure,
    CategorizationFailure,
    FetchFailure,
    ReconciliationFailure,
    SyncError,
)

T = TypeVar("T")


class SyncState(Enum):
    START = "start"
    FETCHED = "fetched"
    NORMALIZED = "normalized"
    CATEGORIZED = "categorized"
    RECONCILED = "reconciled"
    BALANCES_MERGED = "balances_merged"
    DONE = "done"
    FAILED = "failed"


@dataclass
class SyncResult:
    """Outcome of one sync run.

    ``state`` is ``DONE`` on success. On failure it is ``FAILED`` and
    ``failed_at`` holds the last state reached before the error.
    """

    state: SyncState
    error: SyncError | None
    duration_seconds: float
    failed_at: SyncState | None = None
    accounts: list[Account] = field(default_factory=list)
    transactions: list[Transaction] = field(default_factory=list)
    histories: list[BalanceHistory] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.state is SyncState.DONE

    @property
    def error_kind(self) -> str | None:
        return self.error.kind if self.error is not None else None


class SyncOrchestratorLogger:
    """Handles all logging for SyncOrchestrator with business logic separated."""

    def __init__(self, logger_instance: loguru.Logger = logger) -> None:
        self._logger = logger_instance

    def fetched(self, card_count: int, operation_count: int) -> None:
        self._logger.bind(cards=card_count, operations=operation_count).info(
            "Successfully fetched data: {} cards, {} operations",
            card_count,
            operation_count,
        )

    def normalized(self, account_count: int, transaction_count: int) -> None:
        self._logger.bind(
            accounts=account_count, transactions=transaction_count
        ).info(
            "Parsed {} accounts and {} transactions", account_count, transaction_count
        )

    def reconciled(self, account_ids: list[str]) -> None:
        self._logger.bind(account_ids=account_ids).info(
            "Saved accounts: {}", account_ids
        )

    def balances_merged(self, count: int, day: str) -> None:
        self._logger.bind(count=count, day=day).info(
            "Merged {} balance snapshots for {}", count, day
        )

    def done(self, duration: float) -> None:
        self._logger.bind(duration=duration).info("Sync done in {:.2f}s", duration)

    def failed(self, state: SyncState, error: SyncError) -> None:
        """Log the failure with its traceback."""
        self._logger.bind(state=state.value, kind=error.kind).opt(
            exception=error
        ).error("Sync failed after {}: {}", state.value, error)


class SyncOrchestrator:
    """
    Runs one fetch → normalize → categorize → reconcile → merge → persist cycle.

    Every error ends the run in ``FAILED``. Nothing is retried and nothing is
    raised; callers inspect the returned ``SyncResult``. Work done before the
    failure (e.g. reconciled accounts) is kept.
    """

    def __init__(
        self,
        *,
        source: SourceClient,
        categorizer: Categorizer,
        reconciler: Reconciler,
        ledger: BalanceLedger,
        login: str,
        password: str | None = None,
        logger_: SyncOrchestratorLogger | None = None,
    ) -> None:
        self._source = source
        self._categorizer = categorizer
        self._reconciler = reconciler
        self._ledger = ledger
        self._login = login
        self._password = password
        self._logger = logger_ or SyncOrchestratorLogger()
        self._state = SyncState.START

    @property
    def state(self) -> SyncState:
        return self._state

    async def run(
        self,
        *,
        today: date | None = None,
        imported_at: datetime | None = None,
    ) -> SyncResult:
        """
        Run a full cycle.

        Args:
            today: Day the balances are recorded for (defaults to the local date)
            imported_at: Import instant stamped on transactions (defaults to now)

        Returns:
            SyncResult describing where the run ended
        """
        start = time.time()
        self._state = SyncState.START
        result = SyncResult(state=SyncState.START, error=None, duration_seconds=0.0)

        error: SyncError | None = None
        try:
            await self._run_stages(result, today or date.today(), imported_at)
        except SyncError as e:
            error = e
        except Exception as e:
            error = SyncError(f"Unexpected error: {e}").with_traceback(e.__traceback__)
            error.__cause__ = e

        if error is not None:
            self._logger.failed(self._state, error)
            result.failed_at = self._state
            result.error = error
            self._state = SyncState.FAILED
        else:
            self._state = SyncState.DONE
            self._logger.done(time.time() - start)

        result.state = self._state
        result.duration_seconds = time.time() - start
        return result

    async def _run_stages(
        self,
        result: SyncResult,
        today: date,
        imported_at: datetime | None,
    ) -> None:
        try:
            token = await self._source.authenticate(self._login, self._password)
        except SourceAuthenticationError as e:
            raise AuthenticationFailure(str(e)) from e
        except Exception as e:
            raise FetchFailure(f"Could not open provider session: {e}") from e

        try:
            cards, operations = await self._source.fetch(self._login, token)
        except SourceAuthenticationError as e:
            raise AuthenticationFailure(str(e)) from e
        except Exception as e:
            raise FetchFailure(str(e)) from e
        self._logger.fetched(len(cards), len(operations))
        self._state = SyncState.FETCHED

        accounts = accounts_from(cards)
        transactions = transactions_from(operations, imported_at=imported_at)
        result.accounts = accounts
        result.transactions = transactions
        self._logger.normalized(len(accounts), len(transactions))
        self._state = SyncState.NORMALIZED

        categorized = await _guard(
            self._categorizer.categorize(transactions), CategorizationFailure
        )
        result.transactions = categorized
        self._state = SyncState.CATEGORIZED

        saved = await _guard(
            self._reconciler.save(accounts, categorized), ReconciliationFailure
        )
        self._logger.reconciled([acc["_id"] for acc in saved.accounts])
        self._state = SyncState.RECONCILED

        histories = await _guard(
            self._ledger.fetch_histories(saved.accounts, today), BalanceQueryFailure
        )
        self._logger.balances_merged(len(histories), today.isoformat())
        self._state = SyncState.BALANCES_MERGED

        result.histories = await _guard(
            self._ledger.persist_histories(histories), BalancePersistFailure
        )


async def _guard(awaitable: Awaitable[T], error_type: type[SyncError]) -> T:
    """Await a collaborator call, reporting any exception as ``error_type``."""
    try:
        return await awaitable
    except SyncError:
        raise
    except Exception as e:
        raise error_type(str(e)) from e
