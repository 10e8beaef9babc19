"""Per-owner ledger settings service."""

from dataclasses import replace
from typing import Iterable, Optional

from ledgerkit.database.base import Database
from ledgerkit.domain.entities import LedgerSettings, ReconciliationCondition
from ledgerkit.domain.errors import ValidationError
from ledgerkit.logging_setup import get_logger

logger = get_logger(__name__)


def parse_conditions(names: Iterable[str]) -> tuple[ReconciliationCondition, ...]:
    """Convert condition names into ReconciliationCondition values.

    Raises:
        ValidationError: If a name is not a supported condition
    """
    conditions = []
    for name in names:
        name = name.strip()
        if not name:
            continue
        try:
            condition = ReconciliationCondition(name)
        except ValueError:
            supported = ", ".join(c.value for c in ReconciliationCondition)
            raise ValidationError(
                f"Unknown reconciliation condition '{name}'. Supported conditions: {supported}"
            )
        if condition not in conditions:
            conditions.append(condition)
    return tuple(conditions)


class SettingsService:
    """Service for reading and changing ledger policy switches."""

    def __init__(self, db: Database):
        """Initialize settings service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_settings(self, owner_id: str) -> LedgerSettings:
        """Get the settings of an owner, falling back to defaults.

        Args:
            owner_id: Owner identity

        Returns:
            Stored settings, or default settings if none were saved
        """
        settings = self.db.get_settings(owner_id)
        if settings is None:
            return LedgerSettings(owner_id=owner_id)
        return settings

    def update_settings(
        self,
        owner_id: str,
        double_entry_mode: Optional[bool] = None,
        auto_draft_to_pending: Optional[bool] = None,
        reconciliation_conditions: Optional[Iterable[str]] = None,
        min_required_documents: Optional[int] = None,
    ) -> LedgerSettings:
        """Change the given settings of an owner.

        Args:
            owner_id: Owner identity
            double_entry_mode: Optional new double-entry mode flag
            auto_draft_to_pending: Optional new auto-promotion flag
            reconciliation_conditions: Optional new condition names
            min_required_documents: Optional new minimum (0 means all required types)

        Returns:
            The saved settings

        Raises:
            ValidationError: If min_required_documents is negative or a
                condition name is unknown
        """
        current = self.get_settings(owner_id)
        changes = {}
        if double_entry_mode is not None:
            changes["double_entry_mode"] = double_entry_mode
        if auto_draft_to_pending is not None:
            changes["auto_draft_to_pending"] = auto_draft_to_pending
        if reconciliation_conditions is not None:
            changes["reconciliation_conditions"] = parse_conditions(reconciliation_conditions)
        if min_required_documents is not None:
            if min_required_documents < 0:
                raise ValidationError("Minimum required documents cannot be negative.")
            changes["min_required_documents"] = min_required_documents

        updated = replace(current, **changes)
        self.db.save_settings(updated)
        logger.info("Updated settings for owner %s: %s", owner_id, sorted(changes))
        return updated
