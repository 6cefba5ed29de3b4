"""Ledger domain service."""

import logging
from typing import Optional

from pointledger.database.base import Database
from pointledger.domain.entities import Transaction, TransactionSign
from pointledger.domain.errors import (
    ConflictError,
    NotFoundError,
    category_not_found,
    recharge_card_already_redeemed,
    recharge_card_not_found,
)
from pointledger.utils.amount_parser import require_points

logger = logging.getLogger(__name__)

RECHARGE_DESCRIPTION = "Recharge card redeemed"


class LedgerService:
    """Service for appending to the points ledger.

    The ledger is append-only. Corrections are made by appending an
    opposite transaction, never by editing an existing one.
    """

    def __init__(self, db: Database):
        """Initialize ledger service.

        Args:
            db: Database instance
        """
        self.db = db

    def credit(
        self,
        account_id: str,
        amount: int,
        description: str,
        created_by: Optional[str] = None,
        category_id: Optional[int] = None,
    ) -> int:
        """Append a credit transaction.

        Returns:
            Transaction ID

        Raises:
            InvalidAmountError: If amount is not a positive integer
            NotFoundError: If the category doesn't exist
        """
        return self._append(account_id, amount, TransactionSign.CREDIT, description, created_by, category_id)

    def debit(
        self,
        account_id: str,
        amount: int,
        description: str,
        created_by: Optional[str] = None,
        category_id: Optional[int] = None,
    ) -> int:
        """Append a debit transaction.

        Returns:
            Transaction ID

        Raises:
            InvalidAmountError: If amount is not a positive integer
            NotFoundError: If the category doesn't exist
        """
        return self._append(account_id, amount, TransactionSign.DEBIT, description, created_by, category_id)

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        return self.db.get_transaction(transaction_id)

    def list_transactions(self, account_id: str) -> list[Transaction]:
        """List an account's transactions, newest first."""
        return self.db.list_transactions(account_id)

    def redeem_recharge_card(self, code: str, account_id: str) -> int:
        """Redeem a recharge card and credit its points to the account.

        The card flip and the credit commit together.

        Args:
            code: Card code
            account_id: Account receiving the points

        Returns:
            Points credited

        Raises:
            NotFoundError: If the card doesn't exist
            ConflictError: If the card was already redeemed
        """
        card = self.db.get_recharge_card(code)
        if card is None:
            raise NotFoundError(recharge_card_not_found(code))

        with self.db.unit_of_work():
            if not self.db.mark_card_redeemed(code, account_id):
                raise ConflictError(recharge_card_already_redeemed(code))
            self.db.create_transaction(
                account_id=account_id,
                amount=card.points,
                sign=TransactionSign.CREDIT,
                description=f"{RECHARGE_DESCRIPTION}: {code}",
                created_by=account_id,
            )

        logger.info("Account %s redeemed recharge card %s for %d points", account_id, code, card.points)
        return card.points

    def _append(
        self,
        account_id: str,
        amount: int,
        sign: TransactionSign,
        description: str,
        created_by: Optional[str],
        category_id: Optional[int],
    ) -> int:
        amount = require_points(amount)
        if category_id is not None and self.db.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))

        transaction_id = self.db.create_transaction(
            account_id=account_id,
            amount=amount,
            sign=sign,
            description=description,
            created_by=created_by,
            category_id=category_id,
        )
        logger.debug("Appended %s of %d for account %s (id=%d)", sign.value, amount, account_id, transaction_id)
        return transaction_id
