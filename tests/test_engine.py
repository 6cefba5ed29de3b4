"""Tests for the PointsEngine facade."""

import logging

from sqlalchemy.exc import SQLAlchemyError

from pointledger.domain.engine import PointsEngine
from pointledger.domain.errors import ErrorKind

ACCOUNT = "student-1"


def test_settle_success_message(engine, debt_service, funded_account, optional_category):
    entry_id = debt_service.record_negative_entry(
        funded_account, 30, "Talking", category_id=optional_category.id
    )

    result = engine.settle(entry_id, funded_account, partial_amount=10)

    assert result.success
    assert result.error_kind is None
    assert result.data.remaining == 20
    assert result.message == "Paid 10 negative points, 20 remaining. Balance: 90"


def test_domain_failures_are_results(engine, debt_service, ledger_service, caplog):
    ledger_service.credit(ACCOUNT, 5, "Initial points")
    entry_id = debt_service.record_negative_entry(ACCOUNT, 10, "Late")

    with caplog.at_level(logging.INFO):
        missing = engine.settle(999, ACCOUNT)
        poor = engine.settle(entry_id, ACCOUNT)
        bad_amount = engine.settle(entry_id, ACCOUNT, partial_amount=0)

    assert not missing.success
    assert missing.error_kind is ErrorKind.NOT_FOUND
    assert poor.error_kind is ErrorKind.INSUFFICIENT_FUNDS
    assert poor.message == "Insufficient points: balance is 5, 10 required"
    assert bad_amount.error_kind is ErrorKind.INVALID_AMOUNT
    assert not [r for r in caplog.records if r.levelno >= logging.ERROR]


def test_already_settled_kind(engine, debt_service, funded_account):
    entry_id = debt_service.record_negative_entry(funded_account, 10, "Late")
    assert engine.settle(entry_id, funded_account).success

    result = engine.settle(entry_id, funded_account)

    assert result.error_kind is ErrorKind.ALREADY_SETTLED


def test_store_failure_is_system_error(temp_db, engine, debt_service, funded_account, monkeypatch, caplog):
    entry_id = debt_service.record_negative_entry(funded_account, 10, "Late")

    def broken(*args, **kwargs):
        raise SQLAlchemyError("connection lost")

    monkeypatch.setattr(temp_db, "create_transaction", broken)

    result = engine.settle(entry_id, funded_account)

    assert not result.success
    assert result.error_kind is ErrorKind.SYSTEM
    assert [r for r in caplog.records if r.levelno >= logging.ERROR]

    monkeypatch.undo()
    # The failed settlement left nothing behind
    assert temp_db.get_negative_entry(entry_id).is_pending
    assert temp_db.get_ledger_balance(funded_account) == 100


def test_unexpected_error_is_system_error(temp_db, engine, funded_account, monkeypatch):
    def broken(*args, **kwargs):
        raise RuntimeError("bug")

    monkeypatch.setattr(temp_db, "list_negative_entries", broken)

    result = engine.get_pending_debts(funded_account)

    assert result.error_kind is ErrorKind.SYSTEM
    assert "bug" in result.message


def test_settle_all_mandatory_messages(engine, debt_service, funded_account):
    assert engine.settle_all_mandatory(funded_account).message == "No mandatory negative points to process"

    debt_service.record_negative_entry(funded_account, 10, "Late")
    debt_service.record_negative_entry(funded_account, 15, "No homework")

    result = engine.settle_all_mandatory(funded_account)

    assert result.success
    assert result.data.processed_count == 2
    assert result.message == "Deducted 25 points for 2 mandatory entries. Balance: 75"


def test_recompute_balance(temp_db, engine, funded_account):
    temp_db.upsert_cached_balance(funded_account, -1)

    result = engine.recompute_balance(funded_account, force_refresh=True)

    assert result.success
    assert result.data.amount == 100
    assert temp_db.get_cached_balance(funded_account).amount == 100


def test_get_pending_debts(engine, debt_service, funded_account):
    debt_service.record_negative_entry(funded_account, 10, "Late")

    result = engine.get_pending_debts(funded_account)

    assert result.success
    assert result.data.mandatory_total == 10
    assert result.message == "10 mandatory and 0 optional negative points pending"


def test_engine_shares_reconciliation(temp_db):
    engine = PointsEngine(temp_db, alternate_sources=False)

    assert engine.settlement.reconciliation is engine.reconciliation
    assert engine.mandatory.reconciliation is engine.reconciliation
    assert engine.debts.reconciliation is engine.reconciliation
