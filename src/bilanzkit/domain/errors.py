"""Shared domain error messages and error types."""

from decimal import Decimal


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """

    kind = "domain"


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""

    kind = "validation"


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""

    kind = "not_found"


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations or a lost race."""

    kind = "conflict"


class PreconditionError(DomainError):
    """Operation not allowed in the current state of the fiscal year."""

    kind = "precondition"


class MissingReferenceError(DomainError):
    """A required account neither exists nor can be created from a template."""

    kind = "missing_reference"


class ImmutableRecordError(DomainError):
    """Attempt to change a posted entry, posted balance sheet or closed year."""

    kind = "immutable"


class ClassificationError(Exception):
    """Classification tables are inconsistent.

    Loading a broken table raises it to the caller. Raised while a report is
    computed, it comes back as an internal failure.
    """


def fiscal_year_not_found(fiscal_year_id: int) -> str:
    """Return message for missing fiscal year."""
    return f"Fiscal year {fiscal_year_id} not found"


def fiscal_year_already_closed(year: int) -> str:
    """Return message for a fiscal year that is closed already."""
    return f"Fiscal year {year} is already closed"


def opening_balance_missing(year: int) -> str:
    """Return message when closing is attempted before the opening balance."""
    return f"Opening balance must be posted before closing fiscal year {year}"


def opening_balance_exists(year: int) -> str:
    """Return message for a duplicate opening balance attempt."""
    return f"Fiscal year {year} already has a posted opening balance"


def account_not_found(code: str) -> str:
    """Return message for an account code unknown to the company."""
    return f"Account {code} not found"


def account_not_provisionable(code: str) -> str:
    """Return message when an account has no template to be created from."""
    return (
        f"Account {code} does not exist and no account template {code} "
        "is available in the company's chart of accounts"
    )


def unbalanced_entry(debits: Decimal, credits: Decimal) -> str:
    """Return message for a journal entry whose sides differ."""
    return f"Debits must equal credits (Debits: {debits}, Credits: {credits})"


def unbalanced_sheet(aktiva_total: Decimal, passiva_total: Decimal) -> str:
    """Return message for a balance sheet whose sides differ."""
    difference = aktiva_total - passiva_total
    return (
        f"Balance sheet does not balance (Aktiva: {aktiva_total}, "
        f"Passiva: {passiva_total}, Difference: {difference})"
    )


def posted_entry_immutable(entry_id: int) -> str:
    """Return message for a change to a posted journal entry."""
    return f"Journal entry {entry_id} is posted and cannot be changed (GoBD)"
