"""Auto-open propagation for accounts used by new transactions."""

from typing import Iterable

from ledgerkit.database.base import Database
from ledgerkit.domain.chart import ancestors_of
from ledgerkit.domain.entities import Account
from ledgerkit.logging_setup import get_logger

logger = get_logger(__name__)


class AccountOpener:
    """Opens closed accounts, and their closed ancestors, when a transaction uses them.

    Only ever moves accounts from closed to open. Children are never touched.
    """

    def __init__(self, db: Database):
        """Initialize account opener.

        Args:
            db: Database instance
        """
        self.db = db

    def _codes_to_open(self, account: Account) -> set[str]:
        return set(ancestors_of(account.code)) | {account.code}

    def open_account_and_ancestors(self, account_id: int, owner_id: str) -> list[int]:
        """Open an account and every closed ancestor in one batch.

        Args:
            account_id: Account used by a transaction
            owner_id: Owner of the account

        Returns:
            IDs of accounts that were opened (empty when nothing changed)
        """
        return self.open_accounts_and_ancestors([account_id], owner_id)

    def open_accounts_and_ancestors(self, account_ids: Iterable[int], owner_id: str) -> list[int]:
        """Batch form of open_account_and_ancestors, deduplicated.

        Missing accounts and accounts of other owners are ignored.
        """
        ids = set(account_ids)
        if not ids:
            return []

        owner_accounts = self.db.list_accounts(owner_id)
        by_id = {acc.id: acc for acc in owner_accounts}

        to_open: set[int] = set()
        codes: set[str] = set()
        for account_id in ids:
            account = by_id.get(account_id)
            if account is None:
                continue
            if account.code is None:
                if not account.is_open:
                    to_open.add(account.id)
                continue
            codes |= self._codes_to_open(account)

        to_open |= {
            acc.id
            for acc in owner_accounts
            if not acc.is_open and acc.code is not None and acc.code in codes
        }
        if not to_open:
            return []

        opened = self.db.open_accounts(owner_id, to_open)
        if opened:
            logger.info("Auto-opened accounts %s for owner %s", opened, owner_id)
        return opened
