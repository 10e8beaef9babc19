"""Transaction ownership checks shared by the transaction and document services."""

from ledgerkit.database.base import Database
from ledgerkit.domain.entities import Transaction
from ledgerkit.domain.errors import NotFoundError, transaction_not_found


def transaction_belongs_to(db: Database, transaction: Transaction, owner_id: str) -> bool:
    """Return True if the owner may see and modify the transaction.

    A transaction belongs to an owner when any of its account, credit or debit
    accounts does, or when it references no account and the owner created it.
    """
    account_ids = transaction.account_ids
    if not account_ids:
        return transaction.created_by == owner_id
    return any(acc.owner_id == owner_id for acc in db.get_accounts(account_ids))


def require_owned_transaction(db: Database, owner_id: str, transaction_id: int) -> Transaction:
    """Load a transaction the owner may access.

    Raises:
        NotFoundError: If the transaction is missing or belongs to someone else
    """
    transaction = db.get_transaction(transaction_id)
    if transaction is None or not transaction_belongs_to(db, transaction, owner_id):
        raise NotFoundError(transaction_not_found(transaction_id))
    return transaction
