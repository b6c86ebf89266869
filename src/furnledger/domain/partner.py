"""Contact (partner) and partner tag domain service."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from furnledger.domain.entities import Contact, Tag
from furnledger.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    duplicate_value,
    not_found,
)

if TYPE_CHECKING:
    from furnledger.database.base import Database

logger = logging.getLogger(__name__)


class ContactService:
    """Service for managing contacts and the tags used by assignment rules."""

    def __init__(self, db: Database):
        """Initialize contact service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_contact(self, name: str, email: Optional[str] = None) -> int:
        """Create a contact.

        Args:
            name: Contact name
            email: Optional email address

        Returns:
            Contact ID

        Raises:
            ValidationError: If the name is empty
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Contact name must not be empty")
        return self.db.create_contact(name=name, email=email or None)

    def get_contact(self, contact_id: int) -> Optional[Contact]:
        """Get contact by ID.

        Args:
            contact_id: Contact ID

        Returns:
            Contact or None if not found
        """
        return self.db.get_contact(contact_id)

    def list_contacts(self, include_archived: bool = False) -> list[Contact]:
        return self.db.list_contacts(include_archived=include_archived)

    def create_tag(self, name: str) -> int:
        """Create a partner tag.

        Raises:
            ValidationError: If the name is empty
            ConflictError: If a tag with the name exists
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Tag name must not be empty")
        if self.db.get_tag_by_name(name) is not None:
            raise ConflictError(duplicate_value("Tag", "name", name))
        return self.db.create_tag(name)

    def get_tag(self, tag_id: int) -> Optional[Tag]:
        return self.db.get_tag(tag_id)

    def get_tag_by_name(self, name: str) -> Optional[Tag]:
        return self.db.get_tag_by_name(name)

    def list_tags(self) -> list[Tag]:
        return self.db.list_tags()

    def tag_contact(self, contact_id: int, tag_id: int) -> None:
        """Attach a tag to a contact. Already-attached tags are left alone.

        Raises:
            NotFoundError: If the contact or tag doesn't exist
        """
        self.db.add_contact_tag(contact_id, tag_id)
        logger.info("Tagged contact %s with tag %s", contact_id, tag_id)

    def untag_contact(self, contact_id: int, tag_id: int) -> None:
        """Detach a tag from a contact.

        Raises:
            NotFoundError: If the contact doesn't exist
        """
        if tag_id not in self.db.get_contact_tag_ids(contact_id):
            if self.db.get_contact(contact_id) is None:
                raise NotFoundError(not_found("Contact", contact_id))
            logger.debug("Contact %s does not carry tag %s", contact_id, tag_id)
            return
        self.db.remove_contact_tag(contact_id, tag_id)
        logger.info("Removed tag %s from contact %s", tag_id, contact_id)

    def get_contact_tag_ids(self, contact_id: int) -> set[int]:
        """Get the tag IDs of a contact.

        Args:
            contact_id: Contact ID

        Returns:
            Set of tag IDs; empty for unknown contacts
        """
        return self.db.get_contact_tag_ids(contact_id)
