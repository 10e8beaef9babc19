"""Tag and customer domain services."""

from typing import Iterable

from ledgerkit.database.base import Database
from ledgerkit.domain.entities import Customer, Tag
from ledgerkit.domain.errors import NotFoundError, ValidationError


class TagService:
    """Service for managing tags."""

    def __init__(self, db: Database):
        """Initialize tag service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_tag(self, owner_id: str, name: str) -> int:
        """Create a tag.

        Raises:
            ValidationError: If the name is empty or already used by the owner
        """
        name = name.strip()
        if not name:
            raise ValidationError("Tag name cannot be empty.")
        for tag in self.db.list_tags(owner_id):
            if tag.name == name:
                raise ValidationError(f"Tag with name '{name}' already exists")
        return self.db.create_tag(owner_id, name)

    def list_tags(self, owner_id: str) -> list[Tag]:
        """List tags of an owner."""
        return self.db.list_tags(owner_id)

    def resolve_tags(self, owner_id: str, tag_ids: Iterable[int]) -> list[Tag]:
        """Load tags that must all belong to the owner.

        Raises:
            NotFoundError: If any tag is missing or belongs to someone else
        """
        ids = sorted(set(tag_ids))
        found = {tag.id: tag for tag in self.db.get_tags(ids) if tag.owner_id == owner_id}
        missing = [tag_id for tag_id in ids if tag_id not in found]
        if missing:
            raise NotFoundError(
                f"Tag(s) not found or not owned by user: {', '.join(str(t) for t in missing)}"
            )
        return [found[tag_id] for tag_id in ids]


class CustomerService:
    """Service for managing customers."""

    def __init__(self, db: Database):
        """Initialize customer service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_customer(self, owner_id: str, name: str) -> int:
        """Create a customer.

        Raises:
            ValidationError: If the name is empty
        """
        name = name.strip()
        if not name:
            raise ValidationError("Customer name cannot be empty.")
        return self.db.create_customer(owner_id, name)

    def list_customers(self, owner_id: str) -> list[Customer]:
        """List customers of an owner."""
        return self.db.list_customers(owner_id)

    def get_owned_customer(self, owner_id: str, customer_id: int) -> Customer:
        """Get a customer that must belong to the owner.

        Raises:
            NotFoundError: If the customer is missing or belongs to someone else
        """
        customer = self.db.get_customer(customer_id)
        if customer is None or customer.owner_id != owner_id:
            raise NotFoundError(f"Customer {customer_id} not found")
        return customer
