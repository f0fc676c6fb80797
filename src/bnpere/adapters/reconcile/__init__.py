from bnpere.adapters.reconcile.reconciler import (
    ReconcileResult,
    Reconciler,
    StoreReconciler,
)

__all__ = ["ReconcileResult", "Reconciler", "StoreReconciler"]
