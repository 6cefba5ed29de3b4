"""Mandatory negative points auto-settlement."""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from pointledger.database.base import Database
from pointledger.domain.entities import (
    EntryStatus,
    MandatorySettlementResult,
    NegativeEntry,
    PaymentType,
    TransactionSign,
)
from pointledger.domain.errors import LedgerUnavailableError
from pointledger.domain.reconciliation import ReconciliationService
from pointledger.domain.settlement import MANDATORY_PREFIX, clean_reason

logger = logging.getLogger(__name__)


class MandatorySettlementService:
    """Deduct every pending mandatory negative entry of an account.

    Mandatory deductions are compulsory, so there is no funds check and the
    balance may go negative. Each entry is flipped to paid with
    ``auto_processed`` set by a guarded update; entries another call already
    processed are skipped, which makes repeated runs no-ops.
    """

    def __init__(self, db: Database, reconciliation: Optional[ReconciliationService] = None):
        """Initialize mandatory settlement service.

        Args:
            db: Database instance
            reconciliation: Used to recompute the balance after the batch
        """
        self.db = db
        self.reconciliation = reconciliation or ReconciliationService(db)

    def settle_all_mandatory(self, account_id: str) -> MandatorySettlementResult:
        """Settle all pending mandatory entries for an account.

        Returns:
            Number of entries processed, points deducted and new balance

        Raises:
            LedgerUnavailableError: If the store fails; entries settled
                before the failure stay settled and the cache is repaired
        """
        due = [
            entry
            for entry in self.db.list_negative_entries(account_id, status=EntryStatus.PENDING)
            if entry.mandatory and not entry.auto_processed
        ]
        due.sort(key=lambda entry: (entry.created_at, entry.id))

        processed: list[int] = []
        total_deducted = 0

        for entry in due:
            try:
                with self.db.unit_of_work():
                    settled = self._settle_entry(entry)
            except SQLAlchemyError as e:
                self.reconciliation.heal(account_id)
                raise LedgerUnavailableError(
                    f"Mandatory settlement for account {account_id} stopped at entry {entry.id} "
                    f"after {len(processed)} entries: {e}"
                ) from e

            if not settled:
                logger.debug("Entry %d already processed by another request; skipping", entry.id)
                continue
            processed.append(entry.id)
            total_deducted += entry.amount

        new_balance = self.reconciliation.recompute_balance(account_id).amount
        if processed:
            logger.info(
                "Auto-settled %d mandatory entries for account %s: deducted %d, balance %d",
                len(processed),
                account_id,
                total_deducted,
                new_balance,
            )

        return MandatorySettlementResult(
            account_id=account_id,
            processed_count=len(processed),
            total_deducted=total_deducted,
            new_balance=new_balance,
            entry_ids=tuple(processed),
        )

    def _settle_entry(self, entry: NegativeEntry) -> bool:
        if not self.db.mark_entry_paid(entry.id, expected_amount=entry.amount, auto_processed=True):
            return False

        self.db.create_transaction(
            account_id=entry.account_id,
            amount=entry.amount,
            sign=TransactionSign.DEBIT,
            description=f"{MANDATORY_PREFIX}{clean_reason(entry.reason)}",
            category_id=entry.category_id,
        )
        self.db.create_settlement_payment(
            account_id=entry.account_id,
            entry_id=entry.id,
            points_paid=entry.amount,
            payment_type=PaymentType.AUTO,
            category_id=entry.category_id,
            notes="Automatic mandatory deduction",
        )
        return True
