"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Optional

# Import entities directly to avoid circular import through domain/__init__.py
from pointledger.domain.entities import (
    BalanceCache,
    EntryStatus,
    NegativeEntry,
    PaymentType,
    PointCategory,
    RechargeCard,
    SettlementPayment,
    Transaction,
    TransactionSign,
)


class Database(ABC):
    """Abstract storage port for the points ledger.

    Transactions are append-only: the port deliberately offers no way to
    update or delete them. Negative entries change only through the guarded
    conditional transitions below, which report whether a row matched.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def unit_of_work(self) -> AbstractContextManager[None]:
        """Group writes so they commit together or not at all.

        Writes issued inside the block are committed once when it exits
        normally and rolled back if it raises. Blocks may nest; only the
        outermost one commits.
        """
        pass

    @abstractmethod
    def rollback(self) -> None:
        """Discard uncommitted work after a failed statement."""
        pass

    # Category operations
    @abstractmethod
    def create_category(
        self,
        name: str,
        is_mandatory: Optional[bool] = True,
        is_positive: bool = False,
        default_points: int = 0,
    ) -> int:
        """Create a point category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[PointCategory]:
        """Get category by ID."""
        pass

    @abstractmethod
    def get_category_by_name(self, name: str) -> Optional[PointCategory]:
        """Get category by name."""
        pass

    @abstractmethod
    def list_categories(self) -> list[PointCategory]:
        """List all categories ordered by name."""
        pass

    # Ledger operations
    @abstractmethod
    def create_transaction(
        self,
        account_id: str,
        amount: int,
        sign: TransactionSign,
        description: str,
        created_by: Optional[str] = None,
        category_id: Optional[int] = None,
    ) -> int:
        """Append a transaction to the ledger. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(self, account_id: str) -> list[Transaction]:
        """List all transactions for an account, newest first."""
        pass

    @abstractmethod
    def get_ledger_balance(self, account_id: str) -> int:
        """Return sum(credits) - sum(debits) computed by the database."""
        pass

    @abstractmethod
    def get_function_balance(self, account_id: str) -> Optional[int]:
        """Return the balance from a stored aggregate function.

        Returns None when no such function exists in this environment.
        """
        pass

    # Negative entry operations
    @abstractmethod
    def create_negative_entry(
        self,
        account_id: str,
        amount: int,
        reason: str,
        category_id: Optional[int] = None,
        status: EntryStatus = EntryStatus.PENDING,
        split_from_id: Optional[int] = None,
    ) -> int:
        """Create a negative entry. Returns entry ID.

        Entries created with status ``paid`` get ``paid_at`` set to now.
        """
        pass

    @abstractmethod
    def get_negative_entry(self, entry_id: int) -> Optional[NegativeEntry]:
        """Get negative entry by ID."""
        pass

    @abstractmethod
    def list_negative_entries(
        self, account_id: str, status: Optional[EntryStatus] = None
    ) -> list[NegativeEntry]:
        """List negative entries for an account, newest first."""
        pass

    @abstractmethod
    def mark_entry_paid(
        self,
        entry_id: int,
        expected_amount: Optional[int] = None,
        auto_processed: bool = False,
    ) -> bool:
        """Atomically move a pending entry to ``paid``.

        The update only matches while the entry is still pending (and, when
        given, still owes ``expected_amount``). With ``auto_processed`` the
        entry must not already be auto-processed and the flag is set.

        Returns:
            True if the row was transitioned, False if nothing matched
        """
        pass

    @abstractmethod
    def reduce_entry_amount(self, entry_id: int, expected_amount: int, paid_amount: int) -> bool:
        """Atomically reduce a pending entry's amount by ``paid_amount``.

        Matches only while the entry is pending and owes ``expected_amount``.

        Returns:
            True if the row was updated, False if nothing matched
        """
        pass

    # Balance cache operations
    @abstractmethod
    def get_cached_balance(self, account_id: str) -> Optional[BalanceCache]:
        """Get the cached balance row for an account."""
        pass

    @abstractmethod
    def upsert_cached_balance(self, account_id: str, amount: int) -> BalanceCache:
        """Overwrite (or create) the cached balance for an account."""
        pass

    # Settlement payment operations
    @abstractmethod
    def create_settlement_payment(
        self,
        account_id: str,
        entry_id: int,
        points_paid: int,
        payment_type: PaymentType,
        category_id: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Record a settlement payment. Returns payment ID."""
        pass

    @abstractmethod
    def list_settlement_payments(self, account_id: str) -> list[SettlementPayment]:
        """List settlement payments for an account, newest first."""
        pass

    # Recharge card operations
    @abstractmethod
    def create_recharge_card(self, code: str, points: int) -> int:
        """Create an active recharge card. Returns card ID."""
        pass

    @abstractmethod
    def get_recharge_card(self, code: str) -> Optional[RechargeCard]:
        """Get recharge card by code."""
        pass

    @abstractmethod
    def mark_card_redeemed(self, code: str, account_id: str) -> bool:
        """Atomically move an active card to ``redeemed`` for an account.

        Returns:
            True if the card was redeemed, False if it was not active
        """
        pass

    @abstractmethod
    def get_redeemed_card_total(self, account_id: str) -> int:
        """Return the total points of cards redeemed by an account."""
        pass
