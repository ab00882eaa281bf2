import logging
from typing import List
from sqlalchemy.orm import Session

from seenlist.core.auth import CurrentUser
from seenlist.core.config import get_settings
from seenlist.core.enums import AccessLevel, CollaboratorStatus
from seenlist.core.exceptions import NotFoundError, ValidationError
from seenlist.repositories.list_repository import ListRepository
from seenlist.schemas.media_list import ListDocument, ListUpdate
from seenlist.services.collaboration_service import access_level, require_editor, require_owner

logger = logging.getLogger(__name__)


class ListService:
    """List CRUD scoped to ownership, plus the per-user list overview"""

    def __init__(self, db: Session):
        self.db = db
        self.list_repository = ListRepository(db)
        self.max_retries = get_settings().LIST_WRITE_MAX_RETRIES

    def create(self, owner_id: str, name: str, description: str = "", is_public: bool = False) -> ListDocument:
        """Create an empty list owned by owner_id"""
        name = (name or "").strip()
        if not name:
            raise ValidationError("List name is required")

        document = self.list_repository.add(owner_id, name, (description or "").strip(), is_public)
        logger.info(f"List {document.id} created by user {owner_id}")
        return document.model_copy(update={"is_owner": True})

    def get(self, list_id: str, caller: CurrentUser) -> ListDocument:
        """Get a list the caller owns or collaborates on"""
        document = self.list_repository.get_or_raise(list_id)
        level = require_editor(document, caller)
        return document.model_copy(update={"is_owner": level == AccessLevel.OWNER})

    def get_shared(self, list_id: str) -> ListDocument:
        """Read-only view of a public list"""
        document = self.list_repository.get_document(list_id)
        if document is None or not document.is_public:
            raise NotFoundError()
        return document

    def update(self, list_id: str, changes: ListUpdate, caller: CurrentUser) -> ListDocument:
        """Change list settings (name, description, visibility)"""
        fields = changes.model_dump(exclude_unset=True, exclude_none=True)
        if "name" in fields:
            fields["name"] = fields["name"].strip()
            if not fields["name"]:
                raise ValidationError("List name is required")
        if "description" in fields:
            fields["description"] = fields["description"].strip()

        def apply(document: ListDocument) -> ListDocument:
            require_owner(document, caller, "change list settings")
            if all(getattr(document, key) == value for key, value in fields.items()):
                return document
            return document.model_copy(update=fields)

        document = self.list_repository.mutate(list_id, apply, self.max_retries)
        logger.info(f"List {list_id} settings updated by user {caller.id}")
        return document.model_copy(update={"is_owner": True})

    def delete(self, list_id: str, caller: CurrentUser) -> bool:
        """Delete a list. Only the owner may do this; unknown ids succeed."""
        document = self.list_repository.get_document(list_id)
        if document is None:
            return True
        require_owner(document, caller, "delete this list")
        self.list_repository.remove(list_id)
        logger.info(f"List {list_id} deleted by user {caller.id}")
        return True

    def lists_for_user(self, user_id: str, email: str) -> List[ListDocument]:
        """Owned lists and lists shared with the user, newest first"""
        owned = [
            doc.model_copy(update={"is_owner": True})
            for doc in self.list_repository.owned_by(user_id)
        ]
        shared = []
        if email:
            caller = CurrentUser(id=user_id, email=email.strip().lower())
            shared = [
                doc.model_copy(update={"is_owner": False})
                for doc in self.list_repository.for_member(caller.email, CollaboratorStatus.ACCEPTED)
                if access_level(doc, caller) == AccessLevel.COLLABORATOR
            ]
        lists = owned + shared
        lists.sort(key=lambda doc: doc.created_at, reverse=True)
        return lists
