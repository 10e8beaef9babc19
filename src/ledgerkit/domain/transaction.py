"""Transaction domain service.

Every write runs the same pipeline: validate the entry shape, check account
ownership, read-only flags and roles, open the referenced accounts (and
their closed ancestors), then insert the row together with its status
history. Nothing is written when any step fails.
"""

from dataclasses import fields, replace
from datetime import date
from typing import Any, Optional
from uuid import uuid4

from ledgerkit.database.base import Database
from ledgerkit.domain.account_rules import resolve_referenced_accounts
from ledgerkit.domain.accounting import validate_account_operation, CREDIT, DEBIT
from ledgerkit.domain.documents import DocumentGateStatus, DocumentService
from ledgerkit.domain.entities import (
    LedgerSettings,
    SplitLine,
    SplitResult,
    SplitType,
    StatusHistoryEntry,
    Transaction as TransactionEntity,
    TransactionInput,
    TransactionStatus,
    ValidationIssue,
)
from ledgerkit.domain.entry import (
    SPLIT_TOLERANCE,
    check_split_lines,
    split_totals,
    validate_entry,
    validate_payee,
    validate_roles,
    validate_split_line,
)
from ledgerkit.domain.errors import (
    BlockedError,
    ConflictError,
    DomainError,
    NotFoundError,
    SplitImbalanceError,
    ValidationError,
    prefix_error,
)
from ledgerkit.domain.ownership import require_owned_transaction, transaction_belongs_to
from ledgerkit.domain.period import check_date_open
from ledgerkit.domain.propagation import AccountOpener
from ledgerkit.domain.reconciliation import ReconciliationService
from ledgerkit.domain.settings import SettingsService
from ledgerkit.domain.status import (
    AUTO_PROMOTION_NOTE,
    check_progression,
    next_status,
    should_auto_promote,
)
from ledgerkit.domain.tag import CustomerService, TagService
from ledgerkit.logging_setup import get_logger

logger = get_logger(__name__)

CREATED_NOTE = "Transaction created"
SPLIT_PARENT_NOTE = "Split transaction created"
SPLIT_CHILD_NOTE = "Split transaction child created"
MAX_REASON_LENGTH = 500

EDITABLE_FIELDS = frozenset(f.name for f in fields(TransactionInput)) - {"external_id"}
LOCKED_WHEN_COMPLETED = (
    "account_id",
    "credit_account_id",
    "debit_account_id",
    "amount",
    "payee_customer_id",
)
ENTRY_FIELDS = ("amount", "account_id", "credit_account_id", "debit_account_id")


def _has_payee(data: TransactionInput) -> bool:
    return bool(data.payee and data.payee.strip()) or data.payee_customer_id is not None


def _input_from_transaction(transaction: TransactionEntity) -> TransactionInput:
    return TransactionInput(
        date=transaction.date,
        amount=transaction.amount,
        payee=transaction.payee,
        payee_customer_id=transaction.payee_customer_id,
        notes=transaction.notes,
        status=transaction.status,
        account_id=transaction.account_id,
        credit_account_id=transaction.credit_account_id,
        debit_account_id=transaction.debit_account_id,
        tag_ids=transaction.tag_ids,
        external_id=transaction.external_id,
    )


def _check_completed_lock(
    existing: TransactionEntity, current: TransactionInput, changes: dict[str, Any]
) -> None:
    """Reject changes to locked fields of a completed transaction."""
    if existing.status != TransactionStatus.COMPLETED:
        return
    locked = [
        name
        for name in LOCKED_WHEN_COMPLETED
        if name in changes and changes[name] != getattr(current, name)
    ]
    if locked:
        raise ValidationError(
            "Completed transactions cannot change "
            f"{', '.join(locked)}. Uncomplete the transaction first."
        )


def _validate_reason(reason: str) -> str:
    reason = reason.strip() if reason else ""
    if not reason:
        raise ValidationError("A reason is required.")
    if len(reason) > MAX_REASON_LENGTH:
        raise ValidationError(f"Reason must be at most {MAX_REASON_LENGTH} characters.")
    return reason


class TransactionService:
    """Service for creating, editing and progressing transactions."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db
        self.opener = AccountOpener(db)

    def _settings(self, owner_id: str, settings: Optional[LedgerSettings]) -> LedgerSettings:
        if settings is not None:
            return settings
        return SettingsService(self.db).get_settings(owner_id)

    def _check_links(self, owner_id: str, data: TransactionInput) -> None:
        """Check that the customer and tags of a payload belong to the owner."""
        if data.payee_customer_id is not None:
            CustomerService(self.db).get_owned_customer(owner_id, data.payee_customer_id)
        if data.tag_ids:
            TagService(self.db).resolve_tags(owner_id, data.tag_ids)

    def _validate_posting(
        self,
        owner_id: str,
        data: TransactionInput,
        status: TransactionStatus,
        settings: LedgerSettings,
        allow_read_only: tuple[int, ...] = (),
        split_child: bool = False,
    ) -> None:
        """Run shape, payee, ownership, read-only and role checks for one row."""
        if split_child:
            validate_split_line(data, data.amount, status, settings)
        else:
            validate_entry(data, data.amount, status, settings)
        validate_payee(data.payee, data.payee_customer_id, status)
        accounts = resolve_referenced_accounts(
            self.db, owner_id, data.account_ids, allow_read_only=allow_read_only
        )
        validate_roles(data, accounts)

    def _check_group_balance(
        self, existing: TransactionEntity, merged: TransactionInput, settings: LedgerSettings
    ) -> None:
        """Recheck the balance of a split group when one child's entry changes.

        Raises:
            SplitImbalanceError: If the group no longer balances in double-entry mode
        """
        if not settings.double_entry_mode or existing.split_group_id is None:
            return
        if all(getattr(merged, name) == getattr(existing, name) for name in ENTRY_FIELDS):
            return

        lines = []
        for row in self.db.get_split_group(existing.split_group_id):
            if row.split_type != SplitType.CHILD:
                continue
            source = merged if row.id == existing.id else row
            lines.append(
                SplitLine(
                    amount=source.amount,
                    account_id=source.account_id,
                    credit_account_id=source.credit_account_id,
                    debit_account_id=source.debit_account_id,
                )
            )
        total_debits, total_credits = split_totals(lines)
        if abs(total_debits - total_credits) > SPLIT_TOLERANCE:
            raise SplitImbalanceError(total_debits, total_credits)

    def _prepare_new(
        self, owner_id: str, data: TransactionInput, settings: LedgerSettings
    ) -> TransactionInput:
        """Validate a new row and return it with its final status."""
        check_date_open(self.db, owner_id, data.date)
        status = TransactionStatus(data.status) if data.status is not None else TransactionStatus.DRAFT
        self._validate_posting(owner_id, data, status, settings)
        self._check_links(owner_id, data)

        if should_auto_promote(
            status,
            _has_payee(data),
            data.credit_account_id,
            data.debit_account_id,
            settings,
            account_id=data.account_id,
        ):
            status = TransactionStatus.PENDING
            self._validate_posting(owner_id, data, status, settings)

        if data.external_id is not None:
            if self.db.get_transaction_by_external_id(owner_id, data.external_id) is not None:
                raise ConflictError(
                    f"Transaction with external id '{data.external_id}' already exists"
                )
        return replace(data, status=status)

    def create_transaction(
        self,
        owner_id: str,
        data: TransactionInput,
        settings: Optional[LedgerSettings] = None,
    ) -> TransactionEntity:
        """Create a transaction.

        Args:
            owner_id: Caller identity
            data: Transaction payload (status defaults to draft)
            settings: Ledger settings (read from storage when None)

        Returns:
            The stored transaction

        Raises:
            ValidationError: If the entry shape, amount, payee or roles are invalid
            NotFoundError: If a referenced account, customer or tag is not the owner's
            ConflictError: If the external id was already imported
            ClosedPeriodError: If the date lies in a closed accounting period
        """
        settings = self._settings(owner_id, settings)
        try:
            prepared = self._prepare_new(owner_id, data, settings)
        except DomainError as e:
            logger.debug("Rejected transaction for owner %s: %s", owner_id, e)
            raise

        self.opener.open_accounts_and_ancestors(prepared.account_ids, owner_id)
        [transaction_id] = self.db.create_transactions(owner_id, [prepared], CREATED_NOTE)
        logger.info(
            "Created transaction %s (%s) for owner %s",
            transaction_id,
            prepared.status.value,
            owner_id,
        )
        return self.db.get_transaction(transaction_id)

    def bulk_create_transactions(
        self,
        owner_id: str,
        rows: list[TransactionInput],
        settings: Optional[LedgerSettings] = None,
    ) -> list[TransactionEntity]:
        """Create many transactions, all or nothing.

        Every row is validated before anything is written. The first invalid
        row rejects the whole batch; its error names the row number.

        Raises:
            ValidationError: If any row is invalid
            NotFoundError: If any row references another owner's data
        """
        settings = self._settings(owner_id, settings)
        prepared = []
        seen_external_ids: set[str] = set()
        for index, data in enumerate(rows, start=1):
            try:
                row = self._prepare_new(owner_id, data, settings)
                if row.external_id is not None:
                    if row.external_id in seen_external_ids:
                        raise ConflictError(
                            f"Transaction with external id '{row.external_id}' appears twice"
                        )
                    seen_external_ids.add(row.external_id)
            except DomainError as e:
                logger.debug("Rejected bulk batch for owner %s at row %s: %s", owner_id, index, e)
                raise prefix_error(e, f"Row {index}")
            prepared.append(row)

        if not prepared:
            return []

        account_ids = [account_id for row in prepared for account_id in row.account_ids]
        self.opener.open_accounts_and_ancestors(account_ids, owner_id)
        transaction_ids = self.db.create_transactions(owner_id, prepared, CREATED_NOTE)
        logger.info("Created %s transactions for owner %s", len(transaction_ids), owner_id)
        return [self.db.get_transaction(transaction_id) for transaction_id in transaction_ids]

    def create_split_transaction(
        self,
        owner_id: str,
        parent: TransactionInput,
        lines: list[SplitLine],
        settings: Optional[LedgerSettings] = None,
    ) -> SplitResult:
        """Create a split group: a non-posting parent and at least two children.

        Children inherit the parent's date, payee, customer and status
        (pending unless the parent payload says otherwise).

        Raises:
            ValidationError: If the parent carries accounts or a line is invalid
            SplitImbalanceError: If debits and credits differ in double-entry mode
            NotFoundError: If a referenced account, customer or tag is not the owner's
        """
        settings = self._settings(owner_id, settings)
        status = (
            TransactionStatus(parent.status)
            if parent.status is not None
            else TransactionStatus.PENDING
        )

        try:
            if parent.account_ids:
                raise ValidationError(
                    "The parent of a split transaction cannot reference accounts; "
                    "put the accounts on the splits."
                )
            check_date_open(self.db, owner_id, parent.date)
            validate_payee(parent.payee, parent.payee_customer_id, status)
            check_split_lines(lines, status, settings)
            account_ids = [account_id for line in lines for account_id in self._line_ids(line)]
            accounts = resolve_referenced_accounts(self.db, owner_id, account_ids)
            for index, line in enumerate(lines, start=1):
                try:
                    validate_roles(line, accounts)
                except ValidationError as e:
                    raise prefix_error(e, f"Split {index}")
            self._check_links(owner_id, parent)
        except DomainError as e:
            logger.debug("Rejected split transaction for owner %s: %s", owner_id, e)
            raise

        children = [
            TransactionInput(
                date=parent.date,
                amount=line.amount,
                payee=parent.payee,
                payee_customer_id=parent.payee_customer_id,
                notes=line.notes,
                status=status,
                account_id=line.account_id,
                credit_account_id=line.credit_account_id,
                debit_account_id=line.debit_account_id,
                tag_ids=parent.tag_ids,
            )
            for line in lines
        ]
        parent_row = replace(parent, status=status)

        self.opener.open_accounts_and_ancestors(account_ids, owner_id)
        split_group_id = uuid4().hex
        parent_id, child_ids = self.db.create_split_group(
            owner_id,
            split_group_id,
            parent_row,
            children,
            SPLIT_PARENT_NOTE,
            SPLIT_CHILD_NOTE,
        )
        logger.info(
            "Created split group %s (parent %s, %s children) for owner %s",
            split_group_id,
            parent_id,
            len(child_ids),
            owner_id,
        )
        return SplitResult(
            parent=self.db.get_transaction(parent_id),
            children=tuple(self.db.get_transaction(child_id) for child_id in child_ids),
        )

    @staticmethod
    def _line_ids(line: SplitLine) -> tuple[int, ...]:
        return tuple(
            a
            for a in (line.account_id, line.credit_account_id, line.debit_account_id)
            if a is not None
        )

    def get_transaction(self, owner_id: str, transaction_id: int) -> Optional[TransactionEntity]:
        """Get a transaction by ID.

        Returns:
            Transaction entity, or None if not found or not the owner's
        """
        transaction = self.db.get_transaction(transaction_id)
        if transaction is None or not transaction_belongs_to(self.db, transaction, owner_id):
            return None
        return transaction

    def list_transactions(
        self,
        owner_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
        status: Optional[TransactionStatus] = None,
    ) -> list[TransactionEntity]:
        """List the owner's transactions with optional filters, newest first."""
        return self.db.list_transactions(
            owner_id,
            start_date=start_date,
            end_date=end_date,
            account_id=account_id,
            status=status,
        )

    def get_split_group(self, owner_id: str, split_group_id: str) -> list[TransactionEntity]:
        """Get the rows of a split group, parent first.

        Raises:
            NotFoundError: If the group does not exist or is not the owner's
        """
        rows = self.db.get_split_group(split_group_id)
        if not rows or not transaction_belongs_to(self.db, rows[0], owner_id):
            raise NotFoundError(f"Split group {split_group_id} not found")
        return rows

    def update_transaction(
        self,
        owner_id: str,
        transaction_id: int,
        settings: Optional[LedgerSettings] = None,
        **changes: Any,
    ) -> TransactionEntity:
        """Update transaction fields.

        Only the given fields change; passing None clears a field. Setting
        status directly records one history row when the stored status
        changes, without running the progression gates.

        Args:
            owner_id: Caller identity
            transaction_id: Transaction ID to update
            settings: Ledger settings (read from storage when None)
            **changes: Field values keyed by TransactionInput field name

        Returns:
            The updated transaction

        Raises:
            NotFoundError: If the transaction is not the owner's
            ValidationError: If the transaction is reconciled, a locked field of
                a completed transaction changes, or the result is invalid
            ClosedPeriodError: If the old or new date lies in a closed period
        """
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown transaction field(s): {', '.join(sorted(unknown))}")

        existing = require_owned_transaction(self.db, owner_id, transaction_id)
        settings = self._settings(owner_id, settings)
        current = _input_from_transaction(existing)

        try:
            if existing.status == TransactionStatus.RECONCILED:
                raise ValidationError("Reconciled transactions cannot be edited.")
            _check_completed_lock(existing, current, changes)

            if "status" in changes and changes["status"] is None:
                changes["status"] = existing.status
            merged = replace(current, **changes)
            check_date_open(self.db, owner_id, existing.date)
            check_date_open(self.db, owner_id, merged.date)
            target = TransactionStatus(merged.status)

            status_note = None
            if existing.status == TransactionStatus.DRAFT and should_auto_promote(
                target,
                _has_payee(merged),
                merged.credit_account_id,
                merged.debit_account_id,
                settings,
                account_id=merged.account_id,
            ):
                target = TransactionStatus.PENDING
                status_note = AUTO_PROMOTION_NOTE

            if existing.split_type == SplitType.PARENT:
                if merged.account_ids:
                    raise ValidationError(
                        "The parent of a split transaction cannot reference accounts."
                    )
                validate_payee(merged.payee, merged.payee_customer_id, target)
            else:
                self._validate_posting(
                    owner_id,
                    merged,
                    target,
                    settings,
                    allow_read_only=existing.account_ids,
                    split_child=existing.split_type == SplitType.CHILD,
                )
                if existing.split_type == SplitType.CHILD:
                    self._check_group_balance(existing, merged, settings)
            if "payee_customer_id" in changes or "tag_ids" in changes:
                self._check_links(owner_id, merged)
        except DomainError as e:
            logger.debug("Rejected update of transaction %s: %s", transaction_id, e)
            raise

        self.db.update_transaction(
            transaction_id, replace(merged, status=target), owner_id, status_note
        )
        if target != existing.status:
            logger.info(
                "Transaction %s status %s -> %s",
                transaction_id,
                existing.status.value,
                target.value,
            )
        return self.db.get_transaction(transaction_id)

    def delete_transaction(self, owner_id: str, transaction_id: int) -> int:
        """Delete a transaction. Deleting a split parent deletes its children.

        A split child cannot be deleted on its own; the group is removed
        through its parent. Status history rows are kept.

        Returns:
            The deleted transaction ID

        Raises:
            NotFoundError: If the transaction is not the owner's
            ValidationError: If the transaction is a split child
            ClosedPeriodError: If the transaction is dated inside a closed period
        """
        existing = require_owned_transaction(self.db, owner_id, transaction_id)
        check_date_open(self.db, owner_id, existing.date)
        if existing.split_type == SplitType.CHILD:
            raise ValidationError(
                f"Transaction {transaction_id} is part of split group "
                f"{existing.split_group_id}. Delete the split parent to remove the group."
            )
        if existing.split_type == SplitType.PARENT and existing.split_group_id is not None:
            deleted = self.db.delete_split_group(existing.split_group_id)
            logger.info(
                "Deleted split group %s (%s transactions)", existing.split_group_id, len(deleted)
            )
            return transaction_id
        self.db.delete_transaction(transaction_id)
        logger.info("Deleted transaction %s", transaction_id)
        return transaction_id

    def advance_status(
        self,
        owner_id: str,
        transaction_id: int,
        current_status: TransactionStatus,
        transaction_data: Optional[TransactionInput] = None,
        settings: Optional[LedgerSettings] = None,
    ) -> TransactionEntity:
        """Advance a transaction exactly one step along the status order.

        Args:
            owner_id: Caller identity
            transaction_id: Transaction ID
            current_status: Status the caller believes is stored
            transaction_data: Payload to validate with the next status and store
                together with it (defaults to the stored fields; the external
                id is never changed)
            settings: Ledger settings (read from storage when None)

        Returns:
            The updated transaction

        Raises:
            NotFoundError: If the transaction is not the owner's
            ConflictError: If current_status does not match the stored status
            BlockedError: If the transaction is reconciled or a gate blocks the step
            ValidationError: If the payload is invalid for the next status or
                changes a locked field of a completed transaction
            ClosedPeriodError: If the old or new date lies in a closed period
            SplitImbalanceError: If a child payload unbalances its split group
        """
        existing = require_owned_transaction(self.db, owner_id, transaction_id)
        settings = self._settings(owner_id, settings)
        current_status = TransactionStatus(current_status)

        try:
            if existing.status != current_status:
                raise ConflictError(
                    f"Transaction {transaction_id} is {existing.status.value}, "
                    f"not {current_status.value}. Reload and try again."
                )

            gate = None
            unmet: list[str] = []
            if next_status(current_status) == TransactionStatus.RECONCILED:
                gate = DocumentService(self.db).get_gate_status(owner_id, transaction_id, settings)
                unmet = ReconciliationService(self.db).get_reconciliation_status(
                    owner_id, transaction_id, settings
                ).unmet

            check = check_progression(current_status, gate, settings, unmet)
            if not check.allowed:
                raise BlockedError(check.blocked_reason, check.missing)

            current = _input_from_transaction(existing)
            data = current
            if transaction_data is not None:
                data = replace(transaction_data, external_id=existing.external_id)
                check_date_open(self.db, owner_id, existing.date)
                check_date_open(self.db, owner_id, data.date)
                _check_completed_lock(
                    existing, current, {name: getattr(data, name) for name in LOCKED_WHEN_COMPLETED}
                )
                self._check_links(owner_id, data)
            if existing.split_type == SplitType.PARENT:
                if data.account_ids:
                    raise ValidationError(
                        "The parent of a split transaction cannot reference accounts."
                    )
                validate_payee(data.payee, data.payee_customer_id, check.next_status)
            else:
                self._validate_posting(
                    owner_id,
                    data,
                    check.next_status,
                    settings,
                    allow_read_only=existing.account_ids,
                    split_child=existing.split_type == SplitType.CHILD,
                )
                if existing.split_type == SplitType.CHILD:
                    self._check_group_balance(existing, data, settings)
        except DomainError as e:
            logger.debug("Rejected advance of transaction %s: %s", transaction_id, e)
            raise

        if transaction_data is not None:
            self.db.update_transaction(
                transaction_id, replace(data, status=check.next_status), owner_id
            )
        else:
            self.db.set_transaction_status(transaction_id, check.next_status, owner_id)
        logger.info(
            "Transaction %s status %s -> %s",
            transaction_id,
            current_status.value,
            check.next_status.value,
        )
        return self.db.get_transaction(transaction_id)

    def _step_back(
        self,
        owner_id: str,
        transaction_id: int,
        reason: str,
        from_status: TransactionStatus,
        to_status: TransactionStatus,
        label: str,
    ) -> TransactionEntity:
        existing = require_owned_transaction(self.db, owner_id, transaction_id)
        if existing.status != from_status:
            raise ValidationError(
                f"Only {from_status.value} transactions can be {label.lower()}; "
                f"transaction {transaction_id} is {existing.status.value}."
            )
        reason = _validate_reason(reason)
        self.db.set_transaction_status(
            transaction_id, to_status, owner_id, f"{label}: {reason}"
        )
        logger.info(
            "Transaction %s status %s -> %s (%s)",
            transaction_id,
            from_status.value,
            to_status.value,
            label.lower(),
        )
        return self.db.get_transaction(transaction_id)

    def uncomplete(self, owner_id: str, transaction_id: int, reason: str) -> TransactionEntity:
        """Move a completed transaction back to pending.

        Raises:
            NotFoundError: If the transaction is not the owner's
            ValidationError: If it is not completed or the reason is empty or too long
        """
        return self._step_back(
            owner_id,
            transaction_id,
            reason,
            TransactionStatus.COMPLETED,
            TransactionStatus.PENDING,
            "Uncompleted",
        )

    def unreconcile(self, owner_id: str, transaction_id: int, reason: str) -> TransactionEntity:
        """Move a reconciled transaction back to completed.

        Raises:
            NotFoundError: If the transaction is not the owner's
            ValidationError: If it is not reconciled or the reason is empty or too long
        """
        return self._step_back(
            owner_id,
            transaction_id,
            reason,
            TransactionStatus.RECONCILED,
            TransactionStatus.COMPLETED,
            "Unreconciled",
        )

    def get_status_history(self, owner_id: str, transaction_id: int) -> list[StatusHistoryEntry]:
        """List the status history of an owned transaction, oldest first.

        Raises:
            NotFoundError: If the transaction is not the owner's
        """
        require_owned_transaction(self.db, owner_id, transaction_id)
        return self.db.list_status_history(transaction_id)

    def get_document_gate_status(
        self,
        owner_id: str,
        transaction_id: int,
        settings: Optional[LedgerSettings] = None,
    ) -> DocumentGateStatus:
        """Compute the document requirement state of an owned transaction."""
        return DocumentService(self.db).get_gate_status(owner_id, transaction_id, settings)

    def get_validation_issues(
        self,
        owner_id: str,
        transaction_id: int,
        settings: Optional[LedgerSettings] = None,
    ) -> list[ValidationIssue]:
        """Report advisory issues for a stored transaction.

        Covers the customer link, closed accounts, account roles, missing
        required documents and unusual debits or credits for account classes.

        Raises:
            NotFoundError: If the transaction is not the owner's
        """
        transaction = require_owned_transaction(self.db, owner_id, transaction_id)
        settings = self._settings(owner_id, settings)
        accounts = {acc.id: acc for acc in self.db.get_accounts(transaction.account_ids)}
        issues: list[ValidationIssue] = []

        has_payee = bool(transaction.payee)
        has_customer = transaction.payee_customer_id is not None
        if has_payee and not has_customer:
            issues.append(
                ValidationIssue(
                    type="customer",
                    message="Customer not linked. This transaction has a payee but no associated customer record.",
                    severity="warning",
                )
            )
        elif not has_payee and not has_customer:
            issues.append(
                ValidationIssue(
                    type="customer",
                    message="No customer information. This transaction has no payee or customer data.",
                    severity="warning",
                )
            )

        for label, account_id in (
            ("Account", transaction.account_id),
            ("Credit account", transaction.credit_account_id),
            ("Debit account", transaction.debit_account_id),
        ):
            account = accounts.get(account_id) if account_id is not None else None
            if account is not None and not account.is_open:
                issues.append(
                    ValidationIssue(
                        type="account-closed",
                        message=f'{label} "{account.name}" is closed/inactive.',
                        severity="warning",
                    )
                )

        credit = accounts.get(transaction.credit_account_id) if transaction.credit_account_id else None
        debit = accounts.get(transaction.debit_account_id) if transaction.debit_account_id else None
        if credit is not None and credit.account_type.value == DEBIT:
            issues.append(
                ValidationIssue(
                    type="account",
                    message=f'Credit account "{credit.name}" is debit-only and should not be used as a credit account.',
                    severity="error",
                )
            )
        if debit is not None and debit.account_type.value == CREDIT:
            issues.append(
                ValidationIssue(
                    type="account",
                    message=f'Debit account "{debit.name}" is credit-only and should not be used as a debit account.',
                    severity="error",
                )
            )

        is_draft = transaction.status == TransactionStatus.DRAFT
        if not is_draft:
            gate = self.get_document_gate_status(owner_id, transaction_id, settings)
            if gate.required_document_types > 0 and not gate.has_all_required_documents:
                issues.append(
                    ValidationIssue(
                        type="documents",
                        message=gate.requirement_message(),
                        severity="warning",
                    )
                )

        for account, operation in ((credit, CREDIT), (debit, DEBIT)):
            if account is None:
                continue
            issue = validate_account_operation(account, operation, is_draft=is_draft)
            if issue is not None:
                issues.append(issue)

        return issues
