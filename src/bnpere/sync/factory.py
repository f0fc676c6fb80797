from __future__ import annotations

from bnpere.adapters.categorize.categorizer import PassthroughCategorizer
from bnpere.adapters.reconcile.reconciler import StoreReconciler
from bnpere.adapters.source.export_file import ExportFileSource
from bnpere.adapters.source.http import HttpSourceClient
from bnpere.adapters.source.protocol import SourceClient
from bnpere.adapters.store.protocol import DocumentStore
from bnpere.core.config import SyncConfig
from bnpere.ledger.balance_ledger import BalanceLedger
from bnpere.sync.orchestrator import SyncOrchestrator


def create_source(config: SyncConfig) -> SourceClient:
    if config.standalone:
        if config.export_path is None:
            raise ValueError("Standalone mode requires an export path")
        return ExportFileSource(config.export_path)
    if not config.api_url:
        raise ValueError("Connected mode requires an API URL")
    return HttpSourceClient(api_url=config.api_url)


def create_orchestrator(config: SyncConfig, store: DocumentStore) -> SyncOrchestrator:
    """Wire the default collaborators around ``store``."""
    return SyncOrchestrator(
        source=create_source(config),
        categorizer=PassthroughCategorizer(),
        reconciler=StoreReconciler(store),
        ledger=BalanceLedger(store),
        login=config.login,
        password=config.password,
    )
