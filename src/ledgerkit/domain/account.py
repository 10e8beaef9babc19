"""Account domain service."""

from decimal import Decimal
from typing import Iterable, Optional

from ledgerkit.database.base import Database
from ledgerkit.domain.accounting import (
    AccountBalance,
    TrialBalance,
    calculate_account_balance,
    calculate_trial_balance,
    normal_balance,
)
from ledgerkit.domain.account_rules import validate_ownership
from ledgerkit.domain.chart import has_invalid_config, is_visible, sort_by_code
from ledgerkit.domain.entities import (
    Account as AccountEntity,
    AccountClass,
    AccountType,
)
from ledgerkit.domain.errors import DependencyError, ValidationError, account_delete_blocked
from ledgerkit.logging_setup import get_logger

logger = get_logger(__name__)


def validate_code(code: str) -> str:
    """Return a normalized account code.

    Raises:
        ValidationError: If the code is empty or not alphanumeric
    """
    code = code.strip()
    if not code:
        raise ValidationError("Account code cannot be empty.")
    if not code.isalnum():
        raise ValidationError(
            f"Account code '{code}' must be alphanumeric (no dots, spaces or separators)."
        )
    return code


class AccountService:
    """Service for managing the chart of accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def _check_code_free(self, owner_id: str, code: str, account_id: Optional[int] = None) -> None:
        for acc in self.db.list_accounts(owner_id):
            if acc.code == code and acc.id != account_id:
                raise ValidationError(f"Account with code '{code}' already exists")

    def create_account(
        self,
        owner_id: str,
        name: str,
        code: Optional[str] = None,
        account_type: AccountType = AccountType.NEUTRAL,
        account_class: Optional[AccountClass] = None,
        is_open: bool = True,
        is_read_only: bool = False,
        opening_balance: Decimal = Decimal("0"),
    ) -> int:
        """Create a new account.

        Args:
            owner_id: Owner identity
            name: Account name
            code: Optional hierarchical code (prefixes denote ancestors)
            account_type: credit, debit or neutral
            account_class: Optional accounting class
            is_open: Whether the account starts open
            is_read_only: Whether the account rejects new transactions
            opening_balance: Balance before any transaction

        Returns:
            Account ID

        Raises:
            ValidationError: If the name is empty or the code is invalid or taken
        """
        name = name.strip()
        if not name:
            raise ValidationError("Account name cannot be empty.")
        if code is not None:
            code = validate_code(code)
            self._check_code_free(owner_id, code)

        account_id = self.db.create_account(
            owner_id=owner_id,
            name=name,
            code=code,
            account_type=AccountType(account_type),
            account_class=AccountClass(account_class) if account_class is not None else None,
            is_open=is_open,
            is_read_only=is_read_only,
            opening_balance=opening_balance,
        )
        logger.info("Created account %s (code %s) for owner %s", account_id, code, owner_id)
        return account_id

    def get_account(self, account_id: int) -> Optional[AccountEntity]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id)

    def get_owned_account(self, owner_id: str, account_id: int) -> AccountEntity:
        """Get an account that must belong to the owner.

        Raises:
            NotFoundError: If the account is missing or belongs to someone else
        """
        return validate_ownership(self.db.get_account(account_id), account_id, owner_id)

    def list_accounts(self, owner_id: str) -> list[AccountEntity]:
        """List accounts of an owner in display order (by code)."""
        return sort_by_code(self.db.list_accounts(owner_id))

    def list_accounts_with_config(self, owner_id: str) -> list[tuple[AccountEntity, bool]]:
        """List accounts paired with their invalid-config flag.

        The flag is True for an open account under a closed ancestor.
        """
        accounts = self.list_accounts(owner_id)
        return [(acc, has_invalid_config(acc, accounts)) for acc in accounts]

    def visible_accounts(self, owner_id: str, expanded: Iterable[str]) -> list[AccountEntity]:
        """List accounts whose every ancestor code is expanded."""
        expanded_codes = set(expanded)
        return [acc for acc in self.list_accounts(owner_id) if is_visible(acc, expanded_codes)]

    def update_account(
        self,
        owner_id: str,
        account_id: int,
        name: Optional[str] = None,
        code: Optional[str] = None,
        account_type: Optional[AccountType] = None,
        account_class: Optional[AccountClass] = None,
        is_open: Optional[bool] = None,
        is_read_only: Optional[bool] = None,
        opening_balance: Optional[Decimal] = None,
        clear_code: bool = False,
    ) -> None:
        """Update account fields.

        Closing an account never closes its descendants; the resulting
        configuration is reported by list_accounts_with_config.

        Raises:
            NotFoundError: If the account is not the owner's
            ValidationError: If the new name or code is invalid
        """
        self.get_owned_account(owner_id, account_id)

        if clear_code and code is not None:
            raise ValidationError("Cannot set both code and clear_code")
        if name is not None:
            name = name.strip()
            if not name:
                raise ValidationError("Account name cannot be empty.")
        if code is not None:
            code = validate_code(code)
            self._check_code_free(owner_id, code, account_id)

        self.db.update_account(
            account_id=account_id,
            name=name,
            code=code,
            account_type=account_type,
            account_class=account_class,
            is_open=is_open,
            is_read_only=is_read_only,
            opening_balance=opening_balance,
            clear_code=clear_code,
        )

    def delete_account(self, owner_id: str, account_id: int) -> None:
        """Delete an account.

        Raises:
            NotFoundError: If the account is not the owner's
            DependencyError: If transactions still reference the account
        """
        self.get_owned_account(owner_id, account_id)

        transaction_count = self.db.get_account_transaction_count(account_id)
        if transaction_count > 0:
            raise DependencyError(account_delete_blocked(account_id, transaction_count))

        self.db.delete_account(account_id)
        logger.info("Deleted account %s", account_id)

    def get_account_balances(self, owner_id: str) -> list[AccountBalance]:
        """Compute the balance of every account of an owner.

        Drafts and split parents do not affect balances.
        """
        accounts = self.list_accounts(owner_id)
        transactions = self.db.list_transactions(owner_id)
        return [
            AccountBalance(
                account_id=acc.id,
                account_name=acc.name,
                account_class=acc.account_class,
                balance=calculate_account_balance(acc, transactions),
                normal_balance=normal_balance(acc.account_class),
            )
            for acc in accounts
        ]

    def get_trial_balance(self, owner_id: str) -> TrialBalance:
        """Compute the trial balance over every account of an owner."""
        return calculate_trial_balance(self.get_account_balances(owner_id))
