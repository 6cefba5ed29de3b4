"""SQLAlchemy models for pointledger database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Boolean,
    Index,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class PointCategory(Base):
    """Point category model."""

    __tablename__ = "point_categories"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    # NULL is treated as mandatory
    is_mandatory = Column(Boolean, nullable=True, default=True)
    is_positive = Column(Boolean, default=False, nullable=False)
    default_points = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    # Relationships
    negative_entries = relationship("NegativeEntry", back_populates="category")


class Transaction(Base):
    """Append-only ledger transaction model."""

    __tablename__ = "points_transactions"

    id = Column(Integer, primary_key=True)
    account_id = Column(String, nullable=False)
    amount = Column(Integer, nullable=False)
    sign = Column(String(10), nullable=False)
    category_id = Column(Integer, ForeignKey("point_categories.id"), nullable=True)
    description = Column(String, nullable=False, default="")
    created_by = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    __table_args__ = (Index("ix_points_transactions_account_sign", "account_id", "sign"),)


class NegativeEntry(Base):
    """Negative points entry model."""

    __tablename__ = "negative_points"

    id = Column(Integer, primary_key=True)
    account_id = Column(String, nullable=False, index=True)
    amount = Column(Integer, nullable=False)
    reason = Column(String, nullable=False)
    status = Column(String(16), nullable=False, default="pending")
    category_id = Column(Integer, ForeignKey("point_categories.id"), nullable=True)
    auto_processed = Column(Boolean, default=False, nullable=False)
    split_from_id = Column(Integer, ForeignKey("negative_points.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    paid_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    category = relationship("PointCategory", back_populates="negative_entries", lazy="joined")


class BalanceCache(Base):
    """Denormalized per-account balance, always overwritable."""

    __tablename__ = "balance_cache"

    id = Column(Integer, primary_key=True)
    account_id = Column(String, unique=True, nullable=False)
    amount = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)


class SettlementPayment(Base):
    """Settlement payment record model."""

    __tablename__ = "negative_point_payments"

    id = Column(Integer, primary_key=True)
    account_id = Column(String, nullable=False, index=True)
    entry_id = Column(Integer, ForeignKey("negative_points.id"), nullable=False)
    points_paid = Column(Integer, nullable=False)
    payment_type = Column(String(10), nullable=False)
    category_id = Column(Integer, ForeignKey("point_categories.id"), nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)


class RechargeCard(Base):
    """Recharge card model."""

    __tablename__ = "recharge_cards"

    id = Column(Integer, primary_key=True)
    code = Column(String, unique=True, nullable=False)
    points = Column(Integer, nullable=False)
    status = Column(String(16), nullable=False, default="active")
    redeemed_by = Column(String, nullable=True, index=True)
    redeemed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
