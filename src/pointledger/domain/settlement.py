"""Negative entry settlement domain service."""

import logging
import re
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from pointledger.database.base import Database
from pointledger.domain.entities import (
    EntryStatus,
    NegativeEntry,
    PaymentType,
    SettlementResult,
    TransactionSign,
)
from pointledger.domain.errors import (
    AlreadySettledError,
    EntryNotFoundError,
    InsufficientFundsError,
    InvalidAmountError,
    LedgerUnavailableError,
    entry_changed_concurrently,
    entry_not_found,
    entry_not_pending,
    insufficient_funds,
    invalid_points,
    partial_amount_out_of_range,
    partial_payment_not_allowed,
)
from pointledger.domain.reconciliation import ReconciliationService

logger = logging.getLogger(__name__)

FULL_PAYMENT_PREFIX = "Negative points payment: "
MANDATORY_PREFIX = "Mandatory deduction: "
_PARTIAL_PREFIX = re.compile(r"^Partial payment \(\d+ of \d+\):\s*")


def clean_reason(reason: str) -> str:
    """Strip payment annotations added by earlier settlements.

    Keeps descriptions from nesting when a reduced entry is paid again.
    """
    cleaned = reason.strip()
    while True:
        stripped = _PARTIAL_PREFIX.sub("", cleaned)
        for prefix in (FULL_PAYMENT_PREFIX, MANDATORY_PREFIX):
            if stripped.startswith(prefix):
                stripped = stripped[len(prefix):]
        stripped = stripped.strip()
        if stripped == cleaned:
            return cleaned
        cleaned = stripped


def partial_payment_description(paid: int, owed: int, reason: str) -> str:
    return f"Partial payment ({paid} of {owed}): {clean_reason(reason)}"


def full_payment_description(reason: str) -> str:
    return f"{FULL_PAYMENT_PREFIX}{clean_reason(reason)}"


class SettlementService:
    """Pay off negative entries, fully or partially.

    A full payment moves the entry from pending to paid. A partial payment
    reduces the pending entry in place and records the paid portion as a new
    paid entry pointing back at it. Either way exactly one debit transaction
    is appended and the cached balance is recomputed from the ledger.
    """

    def __init__(self, db: Database, reconciliation: Optional[ReconciliationService] = None):
        """Initialize settlement service.

        Args:
            db: Database instance
            reconciliation: Balance source for the funds check and cache repair
        """
        self.db = db
        self.reconciliation = reconciliation or ReconciliationService(db)

    def settle(
        self,
        entry_id: int,
        account_id: str,
        partial_amount: Optional[int] = None,
        created_by: Optional[str] = None,
    ) -> SettlementResult:
        """Settle a negative entry.

        Args:
            entry_id: Negative entry ID
            account_id: Account that owns the entry and pays for it
            partial_amount: Points to pay now; None pays the full amount
            created_by: Actor recorded on the ledger transaction (defaults
                to the account)

        Returns:
            Settlement result with the paid and remaining amounts and the
            recomputed balance

        Raises:
            EntryNotFoundError: If the entry doesn't exist or isn't the account's
            AlreadySettledError: If the entry isn't pending, or another request
                settled or changed it first
            InvalidAmountError: If partial_amount is out of range or the entry
                is mandatory
            InsufficientFundsError: If the balance can't cover the payment
            LedgerUnavailableError: If the store fails while writing
        """
        entry = self.db.get_negative_entry(entry_id)
        if entry is None or entry.account_id != account_id:
            raise EntryNotFoundError(entry_not_found(entry_id, account_id))
        if not entry.is_pending:
            raise AlreadySettledError(entry_not_pending(entry_id, entry.status.value))

        amount_to_pay, payment_type = self._amount_to_pay(entry, partial_amount)

        balance = self._available_balance(account_id)
        if balance < amount_to_pay:
            raise InsufficientFundsError(
                insufficient_funds(balance, amount_to_pay), balance=balance, required=amount_to_pay
            )

        try:
            with self.db.unit_of_work():
                paid_slice_id = self._apply(entry, amount_to_pay, payment_type, created_by or account_id)
        except SQLAlchemyError as e:
            self.reconciliation.heal(account_id)
            raise LedgerUnavailableError(f"Settlement of entry {entry_id} failed: {e}") from e

        remaining = entry.amount - amount_to_pay
        new_balance, verified = self._balance_after(account_id, balance - amount_to_pay)
        logger.info(
            "Settled entry %d for account %s: paid %d, remaining %d, balance %d",
            entry_id,
            account_id,
            amount_to_pay,
            remaining,
            new_balance,
        )
        return SettlementResult(
            entry_id=entry_id,
            paid=amount_to_pay,
            remaining=remaining,
            new_balance=new_balance,
            payment_type=payment_type,
            paid_slice_id=paid_slice_id,
            balance_verified=verified,
        )

    def _available_balance(self, account_id: str) -> int:
        """Balance the funds check may spend.

        A low-confidence value came from a fallback source while the ledger
        said zero, so it is capped at what the ledger actually holds.
        """
        computation = self.reconciliation.recompute_balance(account_id)
        if not computation.low_confidence:
            return computation.amount

        ledger_balance = self.db.get_ledger_balance(account_id)
        if ledger_balance < computation.amount:
            logger.warning(
                "Account %s: %s reported %d but the ledger holds %d; checking funds against the ledger",
                account_id,
                computation.method,
                computation.amount,
                ledger_balance,
            )
            return ledger_balance
        return computation.amount

    def _amount_to_pay(
        self, entry: NegativeEntry, partial_amount: Optional[int]
    ) -> tuple[int, PaymentType]:
        if partial_amount is None:
            return entry.amount, PaymentType.FULL
        if isinstance(partial_amount, bool) or not isinstance(partial_amount, int):
            raise InvalidAmountError(invalid_points(partial_amount))
        if partial_amount <= 0 or partial_amount > entry.amount:
            raise InvalidAmountError(partial_amount_out_of_range(partial_amount, entry.amount))
        if partial_amount == entry.amount:
            return entry.amount, PaymentType.FULL
        if entry.mandatory:
            raise InvalidAmountError(partial_payment_not_allowed(entry.id))
        return partial_amount, PaymentType.PARTIAL

    def _apply(
        self,
        entry: NegativeEntry,
        amount: int,
        payment_type: PaymentType,
        created_by: str,
    ) -> Optional[int]:
        """Write the settlement. Must run inside a unit of work.

        The guarded transition runs first so a lost race writes nothing.
        """
        paid_slice_id = None

        if payment_type is PaymentType.FULL:
            if not self.db.mark_entry_paid(entry.id, expected_amount=entry.amount):
                raise AlreadySettledError(entry_changed_concurrently(entry.id))
            description = full_payment_description(entry.reason)
            notes = "Full payment"
        else:
            if not self.db.reduce_entry_amount(entry.id, expected_amount=entry.amount, paid_amount=amount):
                raise AlreadySettledError(entry_changed_concurrently(entry.id))
            description = partial_payment_description(amount, entry.amount, entry.reason)
            paid_slice_id = self.db.create_negative_entry(
                account_id=entry.account_id,
                amount=amount,
                reason=description,
                category_id=entry.category_id,
                status=EntryStatus.PAID,
                split_from_id=entry.id,
            )
            notes = f"Partial payment: {amount} of {entry.amount}"

        self.db.create_transaction(
            account_id=entry.account_id,
            amount=amount,
            sign=TransactionSign.DEBIT,
            description=description,
            created_by=created_by,
            category_id=entry.category_id,
        )
        self.db.create_settlement_payment(
            account_id=entry.account_id,
            entry_id=entry.id,
            points_paid=amount,
            payment_type=payment_type,
            category_id=entry.category_id,
            notes=notes,
        )
        return paid_slice_id

    def _balance_after(self, account_id: str, estimate: int) -> tuple[int, bool]:
        """Recompute the balance once the settlement has committed.

        The settlement is already durable at this point, so a failing store
        is reported through the estimate instead of an error.
        """
        computation = self.reconciliation.heal(account_id)
        if computation is None:
            logger.warning(
                "Balance for account %s not recomputed after settlement; reporting estimate %d",
                account_id,
                estimate,
            )
            return estimate, False
        return computation.amount, True
