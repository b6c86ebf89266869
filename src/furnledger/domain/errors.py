"""Shared domain error messages and error types."""

from decimal import Decimal
from enum import Enum


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class InvalidRuleError(ValidationError):
    """Assignment rule definition that can never match anything."""


class ConcurrentModificationError(ConflictError):
    """A document changed underneath an operation more often than allowed."""


class PaymentRejection(str, Enum):
    """Reasons a payment request is refused before anything is written."""

    NOT_PAYABLE = "not_payable"
    NON_POSITIVE_AMOUNT = "non_positive_amount"
    ALREADY_PAID = "already_paid"
    EXCEEDS_BALANCE = "exceeds_balance"
    NOT_REVERSIBLE = "not_reversible"
    ALREADY_REVERSED = "already_reversed"


class PaymentValidationError(ValidationError):
    """Payment request refused; the ledger is unchanged.

    ``reason`` lets callers branch on the failure without parsing messages.
    """

    def __init__(self, reason: PaymentRejection, message: str):
        super().__init__(message)
        self.reason = reason


def not_found(entity: str, entity_id: int) -> str:
    """Return message for a missing entity by ID."""
    return f"{entity} {entity_id} not found"


def cost_center_not_found(code: str) -> str:
    """Return message for missing cost center by code."""
    return f"Cost center '{code}' not found"


def duplicate_value(entity: str, field: str, value: str) -> str:
    """Return message for a uniqueness violation."""
    return f"{entity} with {field} '{value}' already exists"


def rule_without_conditions() -> str:
    """Return message for a rule that has no match conditions."""
    return (
        "Rule must define at least one condition "
        "(partner tag, partner, product category or product)"
    )


def payment_exceeds_balance(amount: Decimal, balance: Decimal) -> str:
    """Return message when a payment is larger than the balance due."""
    return f"Payment amount ({amount:,.2f}) exceeds balance due ({balance:,.2f})"


def document_not_payable(kind: str, number: str, state: str) -> str:
    """Return message when a document does not accept payments."""
    return f"{kind.capitalize()} {number} is {state} and cannot receive payments"
