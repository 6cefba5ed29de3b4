"""Domain model entities for pointledger.

These are pure data classes representing ledger concepts, independent of the
database schema. Storage implementations convert their rows into these types
through the mapper layer.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class TransactionSign(str, Enum):
    """Direction of a ledger transaction."""

    CREDIT = "credit"
    DEBIT = "debit"


class EntryStatus(str, Enum):
    """Lifecycle status of a negative entry."""

    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not EntryStatus.PENDING


class PaymentType(str, Enum):
    """How a negative entry was settled."""

    FULL = "FULL"
    PARTIAL = "PARTIAL"
    AUTO = "AUTO"


class RechargeCardStatus(str, Enum):
    """Status of a recharge card."""

    ACTIVE = "active"
    REDEEMED = "redeemed"


@dataclass(frozen=True)
class PointCategory:
    """Point category domain entity.

    ``is_mandatory`` may be unset in stored data; an unset flag counts as
    mandatory.
    """

    id: int
    name: str
    is_mandatory: Optional[bool]
    is_positive: bool
    default_points: int
    created_at: datetime

    @property
    def mandatory(self) -> bool:
        return self.is_mandatory is not False


@dataclass(frozen=True)
class Transaction:
    """Ledger transaction domain entity. Never changes after insert."""

    id: int
    account_id: str
    amount: int
    sign: TransactionSign
    category_id: Optional[int]
    description: str
    created_by: Optional[str]
    created_at: datetime

    @property
    def signed_amount(self) -> int:
        return self.amount if self.sign is TransactionSign.CREDIT else -self.amount


@dataclass(frozen=True)
class NegativeEntry:
    """Negative points entry (a debt owed by an account)."""

    id: int
    account_id: str
    amount: int
    reason: str
    status: EntryStatus
    category_id: Optional[int]
    mandatory: bool
    auto_processed: bool
    created_at: datetime
    paid_at: Optional[datetime] = None
    split_from_id: Optional[int] = None

    @property
    def is_pending(self) -> bool:
        return self.status is EntryStatus.PENDING

    @property
    def optional(self) -> bool:
        return not self.mandatory


@dataclass(frozen=True)
class BalanceCache:
    """Cached balance for an account. Derived, never authoritative."""

    account_id: str
    amount: int
    updated_at: datetime


@dataclass(frozen=True)
class SettlementPayment:
    """Record of a single settlement of a negative entry."""

    id: int
    account_id: str
    entry_id: int
    points_paid: int
    payment_type: PaymentType
    category_id: Optional[int]
    notes: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class RechargeCard:
    """Recharge card domain entity."""

    id: int
    code: str
    points: int
    status: RechargeCardStatus
    redeemed_by: Optional[str]
    redeemed_at: Optional[datetime]
    created_at: datetime


@dataclass(frozen=True)
class BalanceComputation:
    """Outcome of a balance recomputation.

    ``low_confidence`` is set when the adopted value came from a later strategy
    after an earlier one reported zero, meaning the sources disagree.
    """

    account_id: str
    amount: int
    method: str
    low_confidence: bool = False


@dataclass(frozen=True)
class SettlementResult:
    """Outcome of settling one negative entry."""

    entry_id: int
    paid: int
    remaining: int
    new_balance: int
    payment_type: PaymentType
    paid_slice_id: Optional[int] = None
    balance_verified: bool = True


@dataclass(frozen=True)
class MandatorySettlementResult:
    """Outcome of the mandatory auto-settlement batch."""

    account_id: str
    processed_count: int
    total_deducted: int
    new_balance: int
    entry_ids: tuple[int, ...] = ()


@dataclass(frozen=True)
class PendingDebts:
    """Negative entries for an account with pending totals per kind."""

    account_id: str
    entries: list[NegativeEntry] = field(default_factory=list)
    mandatory_total: int = 0
    optional_total: int = 0
    cache_repaired: bool = False

    @property
    def pending_entries(self) -> list[NegativeEntry]:
        return [entry for entry in self.entries if entry.is_pending]
