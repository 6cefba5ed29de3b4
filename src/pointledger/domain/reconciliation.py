"""Balance reconciliation domain service."""

import logging
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError

from pointledger.database.base import Database
from pointledger.domain.entities import BalanceComputation
from pointledger.domain.errors import LedgerUnavailableError, no_balance_strategy_succeeded
from pointledger.domain.strategies import BalanceStrategy, default_strategies

logger = logging.getLogger(__name__)

InvalidationListener = Callable[[str], None]


class ReconciliationService:
    """Recompute account balances from the ledger and repair the cache.

    Strategies are tried in order. The first non-zero answer wins; a zero
    answer is remembered and only returned when no later strategy produces a
    non-zero one. The result always overwrites the cached balance, so any
    earlier drift in the cache is discarded.
    """

    def __init__(
        self,
        db: Database,
        strategies: Optional[list[BalanceStrategy]] = None,
        alternate_sources: Optional[bool] = None,
    ):
        """Initialize reconciliation service.

        Args:
            db: Database instance
            strategies: Ordered strategies; defaults to default_strategies(db)
            alternate_sources: Passed to default_strategies when strategies is None
        """
        self.db = db
        if strategies is None:
            strategies = default_strategies(db, alternate_sources=alternate_sources)
        self.strategies = strategies
        self._listeners: list[InvalidationListener] = []

    def add_invalidation_listener(self, listener: InvalidationListener) -> None:
        """Register a callback notified with the account ID on forced refreshes."""
        self._listeners.append(listener)

    def compute_balance(self, account_id: str) -> BalanceComputation:
        """Compute the balance without touching the cache.

        Raises:
            LedgerUnavailableError: If no strategy produced a value
        """
        zero_method: Optional[str] = None

        for strategy in self.strategies:
            try:
                value = strategy.compute(account_id)
            except SQLAlchemyError as e:
                logger.warning(
                    "Balance strategy %s failed for account %s: %s", strategy.name, account_id, e
                )
                self.db.rollback()
                continue

            if value is None:
                logger.debug("Balance strategy %s unavailable for account %s", strategy.name, account_id)
                continue

            logger.debug("Balance strategy %s returned %d for account %s", strategy.name, value, account_id)
            if value != 0:
                if zero_method is not None:
                    logger.warning(
                        "Account %s: %s reported 0 but %s reported %d; using %d",
                        account_id,
                        zero_method,
                        strategy.name,
                        value,
                        value,
                    )
                return BalanceComputation(
                    account_id=account_id,
                    amount=value,
                    method=strategy.name,
                    low_confidence=zero_method is not None,
                )
            if zero_method is None:
                zero_method = strategy.name

        if zero_method is None:
            raise LedgerUnavailableError(no_balance_strategy_succeeded(account_id))
        return BalanceComputation(account_id=account_id, amount=0, method=zero_method)

    def recompute_balance(self, account_id: str, force_refresh: bool = False) -> BalanceComputation:
        """Recompute an account's balance and overwrite the cached value.

        Args:
            account_id: Account ID
            force_refresh: Also notify invalidation listeners

        Returns:
            The computed balance and the strategy that produced it

        Raises:
            LedgerUnavailableError: If no strategy produced a value
        """
        computation = self.compute_balance(account_id)
        self.db.upsert_cached_balance(account_id, computation.amount)
        logger.debug(
            "Cached balance for account %s set to %d via %s",
            account_id,
            computation.amount,
            computation.method,
        )

        if force_refresh:
            self._notify(account_id)
        return computation

    def heal(self, account_id: str) -> Optional[BalanceComputation]:
        """Best-effort recompute after a failed multi-step write.

        Returns:
            The computation, or None if the store is still failing
        """
        try:
            self.db.rollback()
            return self.recompute_balance(account_id)
        except (SQLAlchemyError, LedgerUnavailableError) as e:
            logger.warning("Balance repair for account %s failed: %s", account_id, e)
            return None

    def _notify(self, account_id: str) -> None:
        for listener in self._listeners:
            try:
                listener(account_id)
            except Exception:
                logger.exception("Invalidation listener %r failed for account %s", listener, account_id)
