"""Domain layer for pointledger.

Services live in their own modules (``pointledger.domain.settlement`` and
so on) and import the database layer, so only entities and errors are
exported here.
"""

from pointledger.domain.entities import (
    BalanceComputation,
    EntryStatus,
    MandatorySettlementResult,
    NegativeEntry,
    PendingDebts,
    SettlementResult,
    Transaction,
    TransactionSign,
)
from pointledger.domain.errors import DomainError, ErrorKind, LedgerUnavailableError

__all__ = [
    "BalanceComputation",
    "EntryStatus",
    "MandatorySettlementResult",
    "NegativeEntry",
    "PendingDebts",
    "SettlementResult",
    "Transaction",
    "TransactionSign",
    "DomainError",
    "ErrorKind",
    "LedgerUnavailableError",
]
