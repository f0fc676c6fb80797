from bnpere.ledger.balance_ledger import (
    BalanceLedger,
    empty_balance_history,
    merge_balance,
)

__all__ = ["BalanceLedger", "empty_balance_history", "merge_balance"]
