"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, including the derived fields that
have no column of their own (such as whether a negative entry is mandatory).
"""

from pointledger.domain import entities as domain
from pointledger.database.models import (
    PointCategory as ORMPointCategory,
    Transaction as ORMTransaction,
    NegativeEntry as ORMNegativeEntry,
    BalanceCache as ORMBalanceCache,
    SettlementPayment as ORMSettlementPayment,
    RechargeCard as ORMRechargeCard,
)


def category_to_domain(orm_category: ORMPointCategory) -> domain.PointCategory:
    """Convert SQLAlchemy PointCategory model to domain PointCategory entity."""
    return domain.PointCategory(
        id=orm_category.id,
        name=orm_category.name,
        is_mandatory=orm_category.is_mandatory,
        is_positive=bool(orm_category.is_positive),
        default_points=orm_category.default_points or 0,
        created_at=orm_category.created_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        account_id=orm_transaction.account_id,
        amount=orm_transaction.amount,
        sign=domain.TransactionSign(orm_transaction.sign),
        category_id=orm_transaction.category_id,
        description=orm_transaction.description or "",
        created_by=orm_transaction.created_by,
        created_at=orm_transaction.created_at,
    )


def is_mandatory(orm_entry: ORMNegativeEntry) -> bool:
    """Derive whether an entry is mandatory from its category.

    No category, or a category whose flag is unset, means mandatory.
    """
    if orm_entry.category_id is None or orm_entry.category is None:
        return True
    return orm_entry.category.is_mandatory is not False


def negative_entry_to_domain(orm_entry: ORMNegativeEntry) -> domain.NegativeEntry:
    """Convert SQLAlchemy NegativeEntry model to domain NegativeEntry entity."""
    return domain.NegativeEntry(
        id=orm_entry.id,
        account_id=orm_entry.account_id,
        amount=orm_entry.amount,
        reason=orm_entry.reason,
        status=domain.EntryStatus(orm_entry.status),
        category_id=orm_entry.category_id,
        mandatory=is_mandatory(orm_entry),
        auto_processed=bool(orm_entry.auto_processed),
        created_at=orm_entry.created_at,
        paid_at=orm_entry.paid_at,
        split_from_id=orm_entry.split_from_id,
    )


def balance_cache_to_domain(orm_cache: ORMBalanceCache) -> domain.BalanceCache:
    """Convert SQLAlchemy BalanceCache model to domain BalanceCache entity."""
    return domain.BalanceCache(
        account_id=orm_cache.account_id,
        amount=orm_cache.amount,
        updated_at=orm_cache.updated_at,
    )


def settlement_payment_to_domain(orm_payment: ORMSettlementPayment) -> domain.SettlementPayment:
    """Convert SQLAlchemy SettlementPayment model to domain SettlementPayment entity."""
    return domain.SettlementPayment(
        id=orm_payment.id,
        account_id=orm_payment.account_id,
        entry_id=orm_payment.entry_id,
        points_paid=orm_payment.points_paid,
        payment_type=domain.PaymentType(orm_payment.payment_type),
        category_id=orm_payment.category_id,
        notes=orm_payment.notes,
        created_at=orm_payment.created_at,
    )


def recharge_card_to_domain(orm_card: ORMRechargeCard) -> domain.RechargeCard:
    """Convert SQLAlchemy RechargeCard model to domain RechargeCard entity."""
    return domain.RechargeCard(
        id=orm_card.id,
        code=orm_card.code,
        points=orm_card.points,
        status=domain.RechargeCardStatus(orm_card.status),
        redeemed_by=orm_card.redeemed_by,
        redeemed_at=orm_card.redeemed_at,
        created_at=orm_card.created_at,
    )
