"""Shared domain error messages and error types."""

from enum import Enum


class ErrorKind(str, Enum):
    """Machine-checkable failure kinds surfaced to callers."""

    NOT_FOUND = "not_found"
    ALREADY_SETTLED = "already_settled"
    INVALID_AMOUNT = "invalid_amount"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    VALIDATION = "validation"
    CONFLICT = "conflict"
    SYSTEM = "system"


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling. Domain errors are expected
    control flow and are never logged as failures.
    """

    kind: ErrorKind = ErrorKind.SYSTEM


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""

    kind = ErrorKind.VALIDATION


class InvalidAmountError(ValidationError):
    """Amount is not a positive integer or violates the payment rules."""

    kind = ErrorKind.INVALID_AMOUNT


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""

    kind = ErrorKind.NOT_FOUND


class EntryNotFoundError(NotFoundError):
    """Negative entry does not exist or belongs to another account."""


class ConflictError(DomainError):
    """Entity is not in the state the operation expects."""

    kind = ErrorKind.CONFLICT


class AlreadySettledError(ConflictError):
    """Negative entry was already paid, cancelled or changed concurrently."""

    kind = ErrorKind.ALREADY_SETTLED


class InsufficientFundsError(DomainError):
    """Account balance is below the amount required."""

    kind = ErrorKind.INSUFFICIENT_FUNDS

    def __init__(self, message: str, balance: int, required: int):
        super().__init__(message)
        self.balance = balance
        self.required = required


class LedgerUnavailableError(Exception):
    """Ledger store unreachable or failed unexpectedly."""

    kind = ErrorKind.SYSTEM


def entry_not_found(entry_id: int, account_id: str) -> str:
    """Return message for a missing or foreign negative entry."""
    return f"Negative entry {entry_id} not found for account {account_id}"


def entry_not_pending(entry_id: int, status: str) -> str:
    """Return message for an entry that can no longer be settled."""
    return f"Negative entry {entry_id} is {status} and cannot be settled"


def entry_changed_concurrently(entry_id: int) -> str:
    """Return message when the guarded status transition matched no row."""
    return f"Negative entry {entry_id} was settled or changed by another request"


def invalid_points(value: object) -> str:
    """Return message for a non-positive or non-integer point amount."""
    return f"Point amount must be a positive integer, got {value!r}"


def partial_amount_out_of_range(partial_amount: int, entry_amount: int) -> str:
    """Return message for a partial amount outside (0, entry amount]."""
    return (
        f"Partial amount {partial_amount} must be greater than 0 "
        f"and at most the remaining {entry_amount} points"
    )


def partial_payment_not_allowed(entry_id: int) -> str:
    """Return message when a mandatory entry is partially paid."""
    return f"Negative entry {entry_id} is mandatory and must be paid in full"


def insufficient_funds(balance: int, required: int) -> str:
    """Return message when the balance cannot cover a payment."""
    return f"Insufficient points: balance is {balance}, {required} required"


def category_not_found(category: object) -> str:
    """Return message for a missing category."""
    return f"Category {category} not found"


def duplicate_category(name: str) -> str:
    """Return message for a duplicate category name."""
    return f"Category with name '{name}' already exists"


def recharge_card_not_found(code: str) -> str:
    """Return message for an unknown recharge card code."""
    return f"Recharge card '{code}' not found"


def recharge_card_already_redeemed(code: str) -> str:
    """Return message for a card that was already used."""
    return f"Recharge card '{code}' has already been redeemed"


def no_balance_strategy_succeeded(account_id: str) -> str:
    """Return message when every balance strategy failed."""
    return f"Could not compute balance for account {account_id}: all strategies failed"
