"""Entry point used by the host application.

``PointsEngine`` wires the services to one injected database and turns
their outcomes into ``OperationResult`` values: callers check ``success``
and ``error_kind`` instead of catching exceptions.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError

from pointledger.database.base import Database
from pointledger.domain.debts import DebtService
from pointledger.domain.entities import (
    BalanceComputation,
    MandatorySettlementResult,
    PendingDebts,
    SettlementResult,
)
from pointledger.domain.errors import DomainError, ErrorKind, LedgerUnavailableError
from pointledger.domain.mandatory import MandatorySettlementService
from pointledger.domain.reconciliation import ReconciliationService
from pointledger.domain.settlement import SettlementService
from pointledger.domain.strategies import BalanceStrategy

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Structured outcome of an engine operation."""

    success: bool
    data: Optional[T] = None
    error_kind: Optional[ErrorKind] = None
    message: str = ""

    @classmethod
    def ok(cls, data: T, message: str) -> "OperationResult[T]":
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, kind: ErrorKind, message: str) -> "OperationResult[T]":
        return cls(success=False, error_kind=kind, message=message)


class PointsEngine:
    """Facade over reconciliation, settlement and debt reads."""

    def __init__(
        self,
        db: Database,
        strategies: Optional[list[BalanceStrategy]] = None,
        alternate_sources: Optional[bool] = None,
    ):
        """Initialize engine.

        Args:
            db: Database instance shared by every service
            strategies: Balance strategies, in priority order
            alternate_sources: Whether default strategies include non-ledger sources
        """
        self.db = db
        self.reconciliation = ReconciliationService(
            db, strategies=strategies, alternate_sources=alternate_sources
        )
        self.debts = DebtService(db, self.reconciliation)
        self.settlement = SettlementService(db, self.reconciliation)
        self.mandatory = MandatorySettlementService(db, self.reconciliation)

    def get_pending_debts(self, account_id: str) -> OperationResult[PendingDebts]:
        """List negative entries with mandatory and optional pending totals."""

        def message(debts: PendingDebts) -> str:
            if not debts.pending_entries:
                return "No pending negative points"
            return (
                f"{debts.mandatory_total} mandatory and {debts.optional_total} "
                "optional negative points pending"
            )

        return self._run("get_pending_debts", lambda: self.debts.get_pending_debts(account_id), message)

    def settle(
        self, entry_id: int, account_id: str, partial_amount: Optional[int] = None
    ) -> OperationResult[SettlementResult]:
        """Settle a negative entry fully or partially."""

        def message(result: SettlementResult) -> str:
            if result.remaining > 0:
                return (
                    f"Paid {result.paid} negative points, {result.remaining} remaining. "
                    f"Balance: {result.new_balance}"
                )
            return f"Paid {result.paid} negative points. Balance: {result.new_balance}"

        return self._run(
            "settle",
            lambda: self.settlement.settle(entry_id, account_id, partial_amount=partial_amount),
            message,
        )

    def settle_all_mandatory(self, account_id: str) -> OperationResult[MandatorySettlementResult]:
        """Deduct every pending mandatory negative entry."""

        def message(result: MandatorySettlementResult) -> str:
            if result.processed_count == 0:
                return "No mandatory negative points to process"
            return (
                f"Deducted {result.total_deducted} points for {result.processed_count} "
                f"mandatory entries. Balance: {result.new_balance}"
            )

        return self._run(
            "settle_all_mandatory", lambda: self.mandatory.settle_all_mandatory(account_id), message
        )

    def recompute_balance(
        self, account_id: str, force_refresh: bool = False
    ) -> OperationResult[BalanceComputation]:
        """Recompute the balance from the ledger and overwrite the cache."""

        def message(result: BalanceComputation) -> str:
            return f"Balance updated to {result.amount} points ({result.method})"

        return self._run(
            "recompute_balance",
            lambda: self.reconciliation.recompute_balance(account_id, force_refresh=force_refresh),
            message,
        )

    def _run(
        self,
        operation: str,
        action: Callable[[], T],
        message: Callable[[T], str],
    ) -> OperationResult[T]:
        try:
            data = action()
        except DomainError as e:
            # Expected outcomes, not failures
            logger.info("%s rejected (%s): %s", operation, e.kind.value, e)
            return OperationResult.fail(e.kind, str(e))
        except LedgerUnavailableError as e:
            logger.exception("%s failed", operation)
            return OperationResult.fail(ErrorKind.SYSTEM, str(e))
        except SQLAlchemyError as e:
            logger.exception("%s failed: ledger store error", operation)
            self.db.rollback()
            return OperationResult.fail(ErrorKind.SYSTEM, f"Ledger store error: {e}")
        except Exception as e:
            logger.exception("%s failed unexpectedly", operation)
            return OperationResult.fail(ErrorKind.SYSTEM, f"Unexpected error: {e}")
        return OperationResult.ok(data, message(data))
