"""Utility for resolving account references to accounts."""

from bilanzkit.domain.account import AccountService
from bilanzkit.domain.entities import Account
from bilanzkit.domain.errors import NotFoundError, ValidationError


def resolve_account(account_service: AccountService, company_id: int, reference: str) -> Account:
    """Resolve an account code or name to an account.

    Args:
        account_service: AccountService instance
        company_id: Company owning the account
        reference: Account code ("1200") or name ("Bank"), matched case-insensitively

    Returns:
        Account entity

    Raises:
        NotFoundError: If no account matches
        ValidationError: If a name matches more than one account
    """
    reference = str(reference).strip()
    if reference.isdigit():
        return account_service.require_account(company_id, reference)

    matches = [
        acc for acc in account_service.list_accounts(company_id) if acc.name.lower() == reference.lower()
    ]
    if not matches:
        raise NotFoundError(f"Account '{reference}' not found")
    if len(matches) > 1:
        codes = ", ".join(acc.code for acc in matches)
        raise ValidationError(f"Account name '{reference}' is ambiguous ({codes}), use the account code")
    return matches[0]
