"""Idempotent import of provider records (bank feeds, payment processors)."""

import json
from pathlib import Path
from typing import Any, Iterable, Optional

from ledgerkit.database.base import Database
from ledgerkit.domain.entities import ImportResult, LedgerSettings, TransactionInput, TransactionStatus
from ledgerkit.domain.settings import SettingsService
from ledgerkit.domain.transaction import TransactionService
from ledgerkit.logging_setup import get_logger
from ledgerkit.utils.amount_parser import parse_amount
from ledgerkit.utils.date_parser import parse_date

logger = get_logger(__name__)


def _optional_int(record: dict[str, Any], key: str) -> Optional[int]:
    value = record.get(key)
    if value is None or value == "":
        return None
    return int(value)


class SyncImportService:
    """Imports provider records through the regular creation pipeline.

    Records are processed one at a time. A record whose external id was
    already imported is skipped; a record that fails validation is reported
    and the import continues.
    """

    def __init__(self, db: Database):
        """Initialize sync import service.

        Args:
            db: Database instance
        """
        self.db = db
        self.transaction_service = TransactionService(db)

    def _to_input(self, record: dict[str, Any], external_id: str) -> TransactionInput:
        date_value = record.get("date")
        if not date_value:
            raise ValueError("Missing date")
        amount_value = record.get("amount")
        if amount_value is None or amount_value == "":
            raise ValueError("Missing amount")

        status = record.get("status")
        return TransactionInput(
            date=parse_date(str(date_value)),
            amount=parse_amount(str(amount_value)),
            payee=record.get("payee"),
            notes=record.get("notes"),
            status=TransactionStatus(status) if status else None,
            account_id=_optional_int(record, "account_id"),
            credit_account_id=_optional_int(record, "credit_account_id"),
            debit_account_id=_optional_int(record, "debit_account_id"),
            external_id=external_id,
        )

    def import_records(
        self,
        owner_id: str,
        records: Iterable[dict[str, Any]],
        source: str,
        settings: Optional[LedgerSettings] = None,
    ) -> ImportResult:
        """Import provider records for an owner.

        Args:
            owner_id: Owner identity
            records: Provider records; each needs external_id, date and amount
            source: Provider name; external ids are namespaced by it
            settings: Ledger settings (read from storage when None)

        Returns:
            ImportResult with created and skipped counts and per-record errors
        """
        if settings is None:
            settings = SettingsService(self.db).get_settings(owner_id)

        created = 0
        skipped = 0
        errors = []
        for index, record in enumerate(records, start=1):
            raw_id = record.get("external_id") if isinstance(record, dict) else None
            if not raw_id:
                errors.append(f"Record {index}: Missing external_id")
                continue
            external_id = f"{source}:{raw_id}"

            if self.db.get_transaction_by_external_id(owner_id, external_id) is not None:
                skipped += 1
                continue

            try:
                data = self._to_input(record, external_id)
                self.transaction_service.create_transaction(owner_id, data, settings)
            except ValueError as e:
                logger.warning("Import from %s: record %s rejected: %s", source, raw_id, e)
                errors.append(f"Record {index} ({raw_id}): {e}")
                continue
            created += 1

        logger.info(
            "Import from %s for owner %s: %s created, %s skipped, %s errors",
            source,
            owner_id,
            created,
            skipped,
            len(errors),
        )
        return ImportResult(created=created, skipped=skipped, errors=tuple(errors))

    def import_file(self, owner_id: str, file_path: str, source: str) -> ImportResult:
        """Import a JSON file holding a list of provider records.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file is not a JSON list of objects
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"Import file not found: {file_path}")

        with open(path, "r", encoding="utf-8") as f:
            try:
                records = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Import file is not valid JSON: {e}")

        if not isinstance(records, list):
            raise ValueError("Import file must contain a JSON list of records")
        return self.import_records(owner_id, records, source)
