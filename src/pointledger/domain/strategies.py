"""Balance calculation strategies used by the reconciliation service.

Each strategy computes an account's balance from one source. A strategy
returns None when its source is unavailable in this environment; storage
failures propagate and are handled by the caller.
"""

import os
from abc import ABC, abstractmethod
from typing import Optional

from pointledger.database.base import Database

ALTERNATE_SOURCES_ENV = "POINTLEDGER_ALTERNATE_SOURCES"


class BalanceStrategy(ABC):
    """One way of computing an account balance."""

    name: str = "unknown"

    def __init__(self, db: Database):
        """Initialize strategy.

        Args:
            db: Database instance
        """
        self.db = db

    @abstractmethod
    def compute(self, account_id: str) -> Optional[int]:
        """Compute the balance for an account.

        Returns:
            Balance in points, or None if this source cannot answer
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class LedgerAggregateStrategy(BalanceStrategy):
    """Aggregate query over the ledger: sum(credits) - sum(debits)."""

    name = "ledger-aggregate"

    def compute(self, account_id: str) -> Optional[int]:
        return self.db.get_ledger_balance(account_id)


class StoredFunctionStrategy(BalanceStrategy):
    """Precomputed aggregate function in the database, when deployed."""

    name = "stored-function"

    def compute(self, account_id: str) -> Optional[int]:
        return self.db.get_function_balance(account_id)


class ManualSumStrategy(BalanceStrategy):
    """Fetch every ledger row and sum in process."""

    name = "manual-sum"

    def compute(self, account_id: str) -> Optional[int]:
        transactions = self.db.list_transactions(account_id)
        return sum(txn.signed_amount for txn in transactions)


class RechargeCardStrategy(BalanceStrategy):
    """Total of recharge cards redeemed by the account.

    Redeeming a card already credits the ledger, so the card total only
    answers for accounts whose ledger holds no rows at all.
    """

    name = "recharge-cards"

    def compute(self, account_id: str) -> Optional[int]:
        if self.db.list_transactions(account_id):
            return None
        total = self.db.get_redeemed_card_total(account_id)
        return total if total > 0 else None


def alternate_sources_enabled() -> bool:
    """Read POINTLEDGER_ALTERNATE_SOURCES; anything but '0' or 'false' enables them."""
    value = os.environ.get(ALTERNATE_SOURCES_ENV, "1").strip().lower()
    return value not in ("0", "false", "no", "off")


def default_strategies(db: Database, alternate_sources: Optional[bool] = None) -> list[BalanceStrategy]:
    """Build the standard strategy list in priority order.

    Args:
        db: Database instance
        alternate_sources: Include domain sources outside the ledger. If None,
            the POINTLEDGER_ALTERNATE_SOURCES environment variable decides.

    Returns:
        Ordered list of strategies
    """
    if alternate_sources is None:
        alternate_sources = alternate_sources_enabled()

    strategies: list[BalanceStrategy] = [
        LedgerAggregateStrategy(db),
        StoredFunctionStrategy(db),
        ManualSumStrategy(db),
    ]
    if alternate_sources:
        strategies.append(RechargeCardStrategy(db))
    return strategies
