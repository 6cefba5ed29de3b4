"""Negative points (debt) domain service."""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from pointledger.database.base import Database
from pointledger.domain.entities import NegativeEntry, PendingDebts, SettlementPayment
from pointledger.domain.errors import (
    LedgerUnavailableError,
    NotFoundError,
    ValidationError,
    category_not_found,
)
from pointledger.domain.reconciliation import ReconciliationService
from pointledger.utils.amount_parser import require_points

logger = logging.getLogger(__name__)


class DebtService:
    """Service for recording and reading negative point entries."""

    def __init__(self, db: Database, reconciliation: Optional[ReconciliationService] = None):
        """Initialize debt service.

        Args:
            db: Database instance
            reconciliation: Used to repair a stale cached balance on read
        """
        self.db = db
        self.reconciliation = reconciliation or ReconciliationService(db)

    def record_negative_entry(
        self,
        account_id: str,
        amount: int,
        reason: str,
        category_id: Optional[int] = None,
    ) -> int:
        """Record a new pending negative entry.

        Args:
            account_id: Account owing the points
            amount: Points owed
            reason: Why the points were deducted
            category_id: Optional category; decides mandatory vs optional

        Returns:
            Entry ID

        Raises:
            InvalidAmountError: If amount is not a positive integer
            ValidationError: If reason is blank
            NotFoundError: If the category doesn't exist
        """
        amount = require_points(amount)
        reason = reason.strip() if reason else ""
        if not reason:
            raise ValidationError("A reason is required for negative points")
        if category_id is not None and self.db.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))

        entry_id = self.db.create_negative_entry(
            account_id=account_id,
            amount=amount,
            reason=reason,
            category_id=category_id,
        )
        logger.info("Recorded negative entry %d of %d points for account %s", entry_id, amount, account_id)
        return entry_id

    def get_entry(self, entry_id: int) -> Optional[NegativeEntry]:
        """Get a negative entry by ID."""
        return self.db.get_negative_entry(entry_id)

    def get_pending_debts(self, account_id: str) -> PendingDebts:
        """Return an account's negative entries with pending totals.

        All entries are returned, newest first; totals only count pending
        ones. When pending debts exist and the cached balance disagrees with
        the ledger, the cache is repaired. A failed repair does not fail the
        read.
        """
        entries = self.db.list_negative_entries(account_id)
        pending = [entry for entry in entries if entry.is_pending]
        mandatory_total = sum(entry.amount for entry in pending if entry.mandatory)
        optional_total = sum(entry.amount for entry in pending if entry.optional)

        repaired = False
        if pending:
            repaired = self._repair_cache_if_stale(account_id)

        return PendingDebts(
            account_id=account_id,
            entries=entries,
            mandatory_total=mandatory_total,
            optional_total=optional_total,
            cache_repaired=repaired,
        )

    def list_payments(self, account_id: str) -> list[SettlementPayment]:
        """List settlement payments recorded for an account."""
        return self.db.list_settlement_payments(account_id)

    def _repair_cache_if_stale(self, account_id: str) -> bool:
        try:
            cached = self.db.get_cached_balance(account_id)
            ledger_balance = self.db.get_ledger_balance(account_id)
            if cached is not None and cached.amount == ledger_balance:
                return False
            logger.info(
                "Cached balance for account %s is %s, ledger says %d; repairing",
                account_id,
                cached.amount if cached is not None else "missing",
                ledger_balance,
            )
            self.reconciliation.recompute_balance(account_id)
            return True
        except (SQLAlchemyError, LedgerUnavailableError) as e:
            logger.warning("Could not repair cached balance for account %s: %s", account_id, e)
            self.db.rollback()
            return False
