"""Reconciliation conditions checked before a transaction may be reconciled."""

from dataclasses import dataclass
from typing import Optional

from ledgerkit.database.base import Database
from ledgerkit.domain.entities import LedgerSettings, ReconciliationCondition
from ledgerkit.domain.ownership import require_owned_transaction
from ledgerkit.domain.settings import SettingsService


@dataclass(frozen=True)
class ReconciliationStatus:
    """Per-condition state for one transaction."""

    conditions: dict[ReconciliationCondition, bool]

    @property
    def all_met(self) -> bool:
        return all(self.conditions.values())

    @property
    def unmet(self) -> list[str]:
        return [condition.value for condition, met in self.conditions.items() if not met]


class ReconciliationService:
    """Evaluates the owner's configured reconciliation conditions."""

    def __init__(self, db: Database):
        """Initialize reconciliation service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_reconciliation_status(
        self,
        owner_id: str,
        transaction_id: int,
        settings: Optional[LedgerSettings] = None,
    ) -> ReconciliationStatus:
        """Check every configured condition against an owned transaction.

        Raises:
            NotFoundError: If the transaction is not the owner's
        """
        require_owned_transaction(self.db, owner_id, transaction_id)
        if settings is None:
            settings = SettingsService(self.db).get_settings(owner_id)

        conditions: dict[ReconciliationCondition, bool] = {}
        for condition in settings.reconciliation_conditions:
            if condition == ReconciliationCondition.HAS_RECEIPT:
                conditions[condition] = bool(self.db.list_documents(transaction_id))
        return ReconciliationStatus(conditions=conditions)
