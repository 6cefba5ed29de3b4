"""Tests for negative entry settlement."""

import pytest

from pointledger.domain.entities import EntryStatus, PaymentType, TransactionSign
from pointledger.domain.errors import (
    AlreadySettledError,
    EntryNotFoundError,
    ErrorKind,
    InsufficientFundsError,
    InvalidAmountError,
)
from pointledger.domain.reconciliation import ReconciliationService
from pointledger.domain.settlement import (
    SettlementService,
    clean_reason,
    full_payment_description,
    partial_payment_description,
)
from pointledger.domain.strategies import BalanceStrategy

ACCOUNT = "student-1"


def debits(temp_db, account_id=ACCOUNT):
    return [txn for txn in temp_db.list_transactions(account_id) if txn.sign is TransactionSign.DEBIT]


class TestDescriptions:
    """Tests for ledger description helpers."""

    def test_clean_reason_strips_earlier_annotations(self):
        assert clean_reason("Partial payment (10 of 30): Talking") == "Talking"
        assert clean_reason("Negative points payment: Partial payment (5 of 20): Talking") == "Talking"
        assert clean_reason("  Talking  ") == "Talking"

    def test_descriptions_do_not_nest(self):
        once = partial_payment_description(10, 30, "Talking")
        assert once == "Partial payment (10 of 30): Talking"
        assert partial_payment_description(5, 20, once) == "Partial payment (5 of 20): Talking"
        assert full_payment_description(once) == "Negative points payment: Talking"


class TestFullSettlement:
    """Tests for paying an entry in full."""

    def test_full_payment(self, temp_db, settlement_service, debt_service, funded_account):
        entry_id = debt_service.record_negative_entry(funded_account, 30, "Talking")

        result = settlement_service.settle(entry_id, funded_account)

        assert result.paid == 30
        assert result.remaining == 0
        assert result.new_balance == 70
        assert result.payment_type is PaymentType.FULL
        assert result.balance_verified is True

        entry = temp_db.get_negative_entry(entry_id)
        assert entry.status is EntryStatus.PAID
        assert entry.paid_at is not None

        [debit] = debits(temp_db)
        assert debit.amount == 30
        assert debit.description == "Negative points payment: Talking"
        assert temp_db.get_cached_balance(funded_account).amount == 70

    def test_second_settle_is_rejected(self, temp_db, settlement_service, debt_service, funded_account):
        entry_id = debt_service.record_negative_entry(funded_account, 30, "Talking")
        settlement_service.settle(entry_id, funded_account)

        with pytest.raises(AlreadySettledError):
            settlement_service.settle(entry_id, funded_account)

        assert len(debits(temp_db)) == 1
        assert temp_db.get_ledger_balance(funded_account) == 70

    def test_insufficient_funds(self, temp_db, settlement_service, debt_service, ledger_service):
        ledger_service.credit(ACCOUNT, 5, "Initial points")
        entry_id = debt_service.record_negative_entry(ACCOUNT, 10, "Late")

        with pytest.raises(InsufficientFundsError) as exc_info:
            settlement_service.settle(entry_id, ACCOUNT)

        assert exc_info.value.balance == 5
        assert exc_info.value.required == 10
        assert temp_db.get_negative_entry(entry_id).is_pending
        assert debits(temp_db) == []

    def test_exact_balance_can_be_spent(self, settlement_service, debt_service, ledger_service):
        ledger_service.credit(ACCOUNT, 10, "Initial points")
        entry_id = debt_service.record_negative_entry(ACCOUNT, 10, "Late")

        result = settlement_service.settle(entry_id, ACCOUNT)

        assert result.new_balance == 0

    def test_unknown_entry(self, settlement_service, funded_account):
        with pytest.raises(EntryNotFoundError):
            settlement_service.settle(999, funded_account)

    def test_entry_of_other_account_is_not_found(self, temp_db, settlement_service, debt_service, funded_account):
        entry_id = debt_service.record_negative_entry("someone-else", 10, "Late")

        with pytest.raises(EntryNotFoundError):
            settlement_service.settle(entry_id, funded_account)
        assert temp_db.get_negative_entry(entry_id).is_pending

    def test_cancelled_entry_is_rejected(self, temp_db, settlement_service, funded_account):
        entry_id = temp_db.create_negative_entry(
            account_id=funded_account, amount=10, reason="Late", status=EntryStatus.CANCELLED
        )

        with pytest.raises(AlreadySettledError):
            settlement_service.settle(entry_id, funded_account)


class TestPartialSettlement:
    """Tests for paying part of an optional entry."""

    def test_partial_then_full(
        self, temp_db, settlement_service, debt_service, funded_account, optional_category
    ):
        entry_id = debt_service.record_negative_entry(
            funded_account, 30, "Talking", category_id=optional_category.id
        )

        first = settlement_service.settle(entry_id, funded_account, partial_amount=10)

        assert first.paid == 10
        assert first.remaining == 20
        assert first.new_balance == 90
        assert first.payment_type is PaymentType.PARTIAL

        entry = temp_db.get_negative_entry(entry_id)
        assert entry.is_pending
        assert entry.amount == 20
        assert entry.reason == "Talking"

        paid_slice = temp_db.get_negative_entry(first.paid_slice_id)
        assert paid_slice.status is EntryStatus.PAID
        assert paid_slice.amount == 10
        assert paid_slice.split_from_id == entry_id
        assert paid_slice.reason == "Partial payment (10 of 30): Talking"
        # Split conserves the original amount
        assert entry.amount + paid_slice.amount == 30

        second = settlement_service.settle(entry_id, funded_account)

        assert second.paid == 20
        assert second.remaining == 0
        assert second.new_balance == 70
        assert temp_db.get_negative_entry(entry_id).status is EntryStatus.PAID
        assert [txn.description for txn in debits(temp_db)] == [
            "Negative points payment: Talking",
            "Partial payment (10 of 30): Talking",
        ]

    def test_partial_equal_to_amount_is_full(
        self, temp_db, settlement_service, debt_service, funded_account, optional_category
    ):
        entry_id = debt_service.record_negative_entry(
            funded_account, 30, "Talking", category_id=optional_category.id
        )

        result = settlement_service.settle(entry_id, funded_account, partial_amount=30)

        assert result.payment_type is PaymentType.FULL
        assert result.paid_slice_id is None
        assert temp_db.get_negative_entry(entry_id).status is EntryStatus.PAID

    @pytest.mark.parametrize("partial_amount", [0, -5, 31, 2.5, True])
    def test_out_of_range_partial(
        self, temp_db, settlement_service, debt_service, funded_account, optional_category, partial_amount
    ):
        entry_id = debt_service.record_negative_entry(
            funded_account, 30, "Talking", category_id=optional_category.id
        )

        with pytest.raises(InvalidAmountError):
            settlement_service.settle(entry_id, funded_account, partial_amount=partial_amount)

        assert temp_db.get_negative_entry(entry_id).amount == 30
        assert debits(temp_db) == []

    def test_mandatory_entry_cannot_be_partial(
        self, temp_db, settlement_service, debt_service, funded_account, mandatory_category
    ):
        entry_id = debt_service.record_negative_entry(
            funded_account, 30, "Homework", category_id=mandatory_category.id
        )

        with pytest.raises(InvalidAmountError):
            settlement_service.settle(entry_id, funded_account, partial_amount=10)
        assert temp_db.get_negative_entry(entry_id).amount == 30

    def test_uncategorized_entry_cannot_be_partial(self, settlement_service, debt_service, funded_account):
        entry_id = debt_service.record_negative_entry(funded_account, 30, "Late")

        with pytest.raises(InvalidAmountError):
            settlement_service.settle(entry_id, funded_account, partial_amount=10)

    def test_partial_needs_funds_for_partial_only(
        self, settlement_service, debt_service, ledger_service, optional_category
    ):
        ledger_service.credit(ACCOUNT, 15, "Initial points")
        entry_id = debt_service.record_negative_entry(
            ACCOUNT, 30, "Talking", category_id=optional_category.id
        )

        result = settlement_service.settle(entry_id, ACCOUNT, partial_amount=15)

        assert result.new_balance == 0
        assert result.remaining == 15


class TestConcurrentSettlement:
    """A request working from a stale read must not pay twice."""

    def test_stale_read_loses_race(
        self, temp_db, settlement_service, debt_service, funded_account, monkeypatch
    ):
        entry_id = debt_service.record_negative_entry(funded_account, 30, "Talking")
        stale = temp_db.get_negative_entry(entry_id)

        # Another request settles the entry first
        settlement_service.settle(entry_id, funded_account)

        monkeypatch.setattr(temp_db, "get_negative_entry", lambda _id: stale)
        with pytest.raises(AlreadySettledError):
            settlement_service.settle(entry_id, funded_account)

        monkeypatch.undo()
        assert len(debits(temp_db)) == 1
        assert len(temp_db.list_settlement_payments(funded_account)) == 1
        assert temp_db.get_ledger_balance(funded_account) == 70

    def test_stale_partial_amount_loses_race(
        self, temp_db, settlement_service, debt_service, funded_account, optional_category, monkeypatch
    ):
        entry_id = debt_service.record_negative_entry(
            funded_account, 30, "Talking", category_id=optional_category.id
        )
        stale = temp_db.get_negative_entry(entry_id)

        settlement_service.settle(entry_id, funded_account, partial_amount=10)

        monkeypatch.setattr(temp_db, "get_negative_entry", lambda _id: stale)
        with pytest.raises(AlreadySettledError):
            settlement_service.settle(entry_id, funded_account, partial_amount=10)

        monkeypatch.undo()
        assert temp_db.get_negative_entry(entry_id).amount == 20
        assert len(debits(temp_db)) == 1


class TestPaymentRecords:
    """Each settlement writes one payment record."""

    def test_payment_records(
        self, temp_db, settlement_service, debt_service, funded_account, optional_category
    ):
        entry_id = debt_service.record_negative_entry(
            funded_account, 30, "Talking", category_id=optional_category.id
        )
        settlement_service.settle(entry_id, funded_account, partial_amount=10)
        settlement_service.settle(entry_id, funded_account)

        payments = debt_service.list_payments(funded_account)

        assert [(p.payment_type, p.points_paid) for p in payments] == [
            (PaymentType.FULL, 20),
            (PaymentType.PARTIAL, 10),
        ]
        assert all(p.entry_id == entry_id for p in payments)
        assert all(p.category_id == optional_category.id for p in payments)

    def test_created_by_defaults_to_account(self, temp_db, settlement_service, debt_service, funded_account):
        entry_id = debt_service.record_negative_entry(funded_account, 10, "Late")
        settlement_service.settle(entry_id, funded_account)

        [debit] = debits(temp_db)
        assert debit.created_by == funded_account


class FixedStrategy(BalanceStrategy):
    """Strategy returning a fixed value."""

    def __init__(self, db, name, value):
        super().__init__(db)
        self.name = name
        self.value = value

    def compute(self, account_id):
        return self.value


class TestFundsCheck:
    """The funds check only spends points the ledger holds."""

    def test_spent_recharge_points_cannot_pay_again(self, temp_db, default_engine, debt_service, ledger_service, optional_category):
        temp_db.create_recharge_card("CARD-1", 100)
        ledger_service.redeem_recharge_card("CARD-1", ACCOUNT)
        debt_service.record_negative_entry(ACCOUNT, 100, "Damaged book")

        mandatory = default_engine.settle_all_mandatory(ACCOUNT)
        assert mandatory.data.new_balance == 0

        entry_id = debt_service.record_negative_entry(
            ACCOUNT, 60, "Talking", category_id=optional_category.id
        )
        result = default_engine.settle(entry_id, ACCOUNT)

        assert not result.success
        assert result.error_kind is ErrorKind.INSUFFICIENT_FUNDS
        assert temp_db.get_ledger_balance(ACCOUNT) == 0
        assert temp_db.get_negative_entry(entry_id).is_pending

    def test_recharged_account_settles_with_default_strategies(self, temp_db, default_engine, debt_service, ledger_service):
        temp_db.create_recharge_card("CARD-1", 50)
        ledger_service.redeem_recharge_card("CARD-1", ACCOUNT)
        entry_id = debt_service.record_negative_entry(ACCOUNT, 20, "Late")

        result = default_engine.settle(entry_id, ACCOUNT)

        assert result.success
        assert result.data.new_balance == 30
        assert temp_db.get_cached_balance(ACCOUNT).amount == 30

    def test_low_confidence_balance_capped_at_ledger(self, temp_db, debt_service):
        reconciliation = ReconciliationService(
            temp_db,
            strategies=[FixedStrategy(temp_db, "ledger", 0), FixedStrategy(temp_db, "fallback", 500)],
        )
        service = SettlementService(temp_db, reconciliation)
        entry_id = debt_service.record_negative_entry(ACCOUNT, 10, "Late")

        with pytest.raises(InsufficientFundsError) as exc_info:
            service.settle(entry_id, ACCOUNT)

        assert exc_info.value.balance == 0
        assert temp_db.get_negative_entry(entry_id).is_pending
        assert debits(temp_db) == []
