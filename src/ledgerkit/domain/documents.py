"""Document-requirement gate and document bookkeeping."""

from dataclasses import dataclass
from typing import Optional

from ledgerkit.database.base import Database
from ledgerkit.domain.entities import Document, DocumentType, LedgerSettings
from ledgerkit.domain.errors import NotFoundError, ValidationError
from ledgerkit.domain.ownership import require_owned_transaction
from ledgerkit.domain.settings import SettingsService
from ledgerkit.logging_setup import get_logger

logger = get_logger(__name__)


def has_all_required_documents(required: int, attached: int, min_required: int) -> bool:
    """Return True if attached required types satisfy the requirement policy.

    Args:
        required: Number of distinct required document types of the owner
        attached: Number of distinct required types among non-deleted documents
        min_required: 0 means every required type is needed, otherwise at
            least min(min_required, required) types are needed
    """
    if required == 0:
        return True
    if min_required == 0:
        return attached >= required
    return attached >= min(min_required, required)


def _plural(count: int, word: str) -> str:
    return f"{word}{'s' if count > 1 else ''}"


@dataclass(frozen=True)
class DocumentGateStatus:
    """Document requirement state of one transaction."""

    required_document_types: int
    attached_required_types: int
    min_required_documents: int
    document_count: int

    @property
    def has_all_required_documents(self) -> bool:
        return has_all_required_documents(
            self.required_document_types,
            self.attached_required_types,
            self.min_required_documents,
        )

    @property
    def needed(self) -> int:
        """Number of required types that must be attached."""
        if self.min_required_documents == 0:
            return self.required_document_types
        return min(self.min_required_documents, self.required_document_types)

    @property
    def missing_count(self) -> int:
        return max(self.needed - self.attached_required_types, 0)

    def requirement_message(self) -> str:
        """Describe why reconciliation is blocked (empty when it is not)."""
        if self.has_all_required_documents:
            return ""
        total = self.required_document_types
        if self.min_required_documents == 0:
            missing = total - self.attached_required_types
            return (
                f"Cannot reconcile. Missing {missing} required document "
                f"{_plural(missing, 'type')}. Please attach all required documents."
            )
        return (
            f"Cannot reconcile. Need at least {self.needed} of {total} required document "
            f"{_plural(total, 'type')} attached (currently {self.attached_required_types})."
        )


class DocumentService:
    """Service for document types, attached documents and the requirement gate."""

    def __init__(self, db: Database):
        """Initialize document service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_document_type(
        self,
        owner_id: str,
        name: str,
        description: Optional[str] = None,
        is_required: bool = False,
    ) -> int:
        """Create a document type.

        Returns:
            Document type ID

        Raises:
            ValidationError: If the name is empty or already used by the owner
        """
        name = name.strip()
        if not name:
            raise ValidationError("Document type name cannot be empty.")
        for existing in self.db.list_document_types(owner_id):
            if existing.name == name:
                raise ValidationError(f"Document type with name '{name}' already exists")
        return self.db.create_document_type(
            owner_id=owner_id, name=name, description=description, is_required=is_required
        )

    def list_document_types(self, owner_id: str) -> list[DocumentType]:
        """List document types of an owner."""
        return self.db.list_document_types(owner_id)

    def attach_document(
        self, owner_id: str, transaction_id: int, document_type_id: int, file_name: str
    ) -> int:
        """Record a document against an owned transaction.

        Returns:
            Document ID

        Raises:
            NotFoundError: If the transaction or document type is not the owner's
        """
        require_owned_transaction(self.db, owner_id, transaction_id)
        document_type = self.db.get_document_type(document_type_id)
        if document_type is None or document_type.owner_id != owner_id:
            raise NotFoundError(f"Document type {document_type_id} not found")

        document_id = self.db.create_document(
            transaction_id=transaction_id,
            document_type_id=document_type_id,
            file_name=file_name,
            uploaded_by=owner_id,
        )
        logger.info(
            "Attached document %s (type %s) to transaction %s",
            document_id,
            document_type_id,
            transaction_id,
        )
        return document_id

    def delete_document(self, owner_id: str, document_id: int) -> None:
        """Soft-delete a document of an owned transaction.

        Raises:
            NotFoundError: If the document is missing or not the owner's
        """
        document = self.db.get_document(document_id)
        if document is None or document.is_deleted:
            raise NotFoundError(f"Document {document_id} not found")
        try:
            require_owned_transaction(self.db, owner_id, document.transaction_id)
        except NotFoundError:
            raise NotFoundError(f"Document {document_id} not found")
        self.db.soft_delete_document(document_id)

    def list_documents(self, owner_id: str, transaction_id: int) -> list[Document]:
        """List non-deleted documents of an owned transaction."""
        require_owned_transaction(self.db, owner_id, transaction_id)
        return self.db.list_documents(transaction_id)

    def get_gate_status(
        self,
        owner_id: str,
        transaction_id: int,
        settings: Optional[LedgerSettings] = None,
    ) -> DocumentGateStatus:
        """Compute the document requirement state of an owned transaction.

        Args:
            owner_id: Owner identity
            transaction_id: Transaction ID
            settings: Ledger settings (read from storage when None)

        Raises:
            NotFoundError: If the transaction is not the owner's
        """
        require_owned_transaction(self.db, owner_id, transaction_id)
        if settings is None:
            settings = SettingsService(self.db).get_settings(owner_id)

        required_ids = {dt.id for dt in self.db.list_document_types(owner_id) if dt.is_required}
        documents = self.db.list_documents(transaction_id)
        attached_required = {doc.document_type_id for doc in documents} & required_ids

        return DocumentGateStatus(
            required_document_types=len(required_ids),
            attached_required_types=len(attached_required),
            min_required_documents=settings.min_required_documents,
            document_count=len(documents),
        )
