from bnpere.normalize.normalizer import (
    account_vendor_id,
    accounts_from,
    transactions_from,
)

__all__ = ["account_vendor_id", "accounts_from", "transactions_from"]
