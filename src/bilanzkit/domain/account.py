"""Account domain service."""

import logging
from typing import Optional

from bilanzkit.database.base import Database
from bilanzkit.domain.constants import is_system_account
from bilanzkit.domain.entities import Account as AccountEntity, AccountType
from bilanzkit.domain.errors import (
    ConflictError,
    MissingReferenceError,
    NotFoundError,
    ValidationError,
    account_not_found,
    account_not_provisionable,
)
from bilanzkit.domain.presentation import get_rule

logger = logging.getLogger(__name__)


def validate_account_code(code: str) -> str:
    """Return the stripped code; raise ValidationError unless it has 4-5 digits."""
    code = str(code).strip()
    if not code.isdigit() or not 4 <= len(code) <= 5:
        raise ValidationError(f"Invalid account code '{code}' (expected 4-5 digits)")
    return code


class AccountService:
    """Service for managing ledger accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(
        self,
        company_id: int,
        code: str,
        name: str,
        account_type: AccountType | str,
        presentation_rule: Optional[str] = None,
    ) -> int:
        """Create a new account.

        Args:
            company_id: Owning company
            code: SKR03 account code (4-5 digits)
            name: Account name
            account_type: asset, liability, equity, revenue or expense
            presentation_rule: Optional rule overriding the classification

        Returns:
            Account ID

        Raises:
            ValidationError: If code, type or rule are invalid
            ConflictError: If the company already has an account with this code
        """
        code = validate_account_code(code)
        try:
            account_type = AccountType(account_type)
        except ValueError:
            raise ValidationError(f"Invalid account type '{account_type}'")
        if presentation_rule and get_rule(presentation_rule) is None:
            raise ValidationError(f"Unknown presentation rule '{presentation_rule}'")

        if self.db.get_account_by_code(company_id, code) is not None:
            raise ConflictError(f"Account {code} already exists")

        return self.db.create_account(
            company_id=company_id,
            code=code,
            name=name,
            account_type=account_type,
            presentation_rule=presentation_rule or None,
            is_system_account=is_system_account(code),
        )

    def get_account(self, company_id: int, code: str) -> Optional[AccountEntity]:
        """Get account by code.

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account_by_code(company_id, code)

    def require_account(self, company_id: int, code: str) -> AccountEntity:
        """Get account by code.

        Raises:
            NotFoundError: If the account does not exist
        """
        account = self.db.get_account_by_code(company_id, code)
        if account is None:
            raise NotFoundError(account_not_found(code))
        return account

    def list_accounts(self, company_id: int) -> list[AccountEntity]:
        """List all accounts of a company, ordered by code."""
        return self.db.list_accounts(company_id)

    def find_or_provision(self, company_id: int, code: str) -> AccountEntity:
        """Return the account with the given code, creating it from a template if needed.

        Args:
            company_id: Owning company
            code: Account code

        Returns:
            Existing or newly created account

        Raises:
            MissingReferenceError: If the account does not exist and the
                company's chart of accounts has no template for it
        """
        account = self.db.get_account_by_code(company_id, code)
        if account is not None:
            return account

        company = self.db.get_company(company_id)
        if company is None:
            raise NotFoundError(f"Company {company_id} not found")
        template = None
        if company.chart_of_accounts_id is not None:
            template = self.db.get_account_template(company.chart_of_accounts_id, code)
        if template is None:
            raise MissingReferenceError(account_not_provisionable(code))

        account_id = self.db.create_account(
            company_id=company_id,
            code=template.code,
            name=template.name,
            account_type=template.account_type,
            presentation_rule=template.presentation_rule,
            is_system_account=template.is_system_account,
        )
        logger.info("Created account %s (%s) from template", template.code, template.name)
        return self.db.get_account(account_id)
