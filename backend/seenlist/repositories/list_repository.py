import logging
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Iterator, List, Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from seenlist.core.enums import CollaboratorStatus
from seenlist.core.exceptions import NotFoundError, StaleListError, UpstreamError
from seenlist.models.media_list import ListMembership, MediaList
from seenlist.repositories.base_repository import BaseRepository
from seenlist.schemas.media_list import Collaborator, ListDocument

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 3


class ListMembershipRepository(BaseRepository[ListMembership]):
    """Repository for the collaborator email -> list index"""

    def __init__(self, db: Session):
        super().__init__(ListMembership, db)

    def replace_for_list(self, list_id: str, collaborators: List[Collaborator]) -> None:
        """Rewrite the index rows of one list. Caller commits."""
        self.db.query(ListMembership).filter(ListMembership.list_id == list_id).delete(
            synchronize_session=False
        )
        for collaborator in collaborators:
            self.db.add(ListMembership(
                list_id=list_id,
                email=collaborator.email,
                status=collaborator.status.value,
            ))

    def list_ids_for(self, email: str, status: CollaboratorStatus) -> List[str]:
        rows = (
            self.db.query(ListMembership.list_id)
            .filter(ListMembership.email == email, ListMembership.status == status.value)
            .all()
        )
        return [row[0] for row in rows]


class ListRepository(BaseRepository[MediaList]):
    """Persistence gateway for list documents.

    A list is always written back whole. Writes carry the version that was read
    and only succeed if the stored row still has it, so a concurrent writer
    surfaces as StaleListError instead of silently losing an update.
    """

    def __init__(self, db: Session):
        super().__init__(MediaList, db)
        self.memberships = ListMembershipRepository(db)

    @staticmethod
    def to_document(row: MediaList) -> ListDocument:
        return ListDocument(
            id=row.id,
            name=row.name,
            description=row.description or "",
            is_public=bool(row.is_public),
            owner_id=row.owner_id,
            items=row.items or [],
            collaborators=row.collaborators or [],
            version=row.version,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    @contextmanager
    def _guard(self, action: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as e:
            logger.error(f"Database error while trying to {action}: {str(e)}")
            self.db.rollback()
            raise UpstreamError(f"Could not {action}") from e

    def add(self, owner_id: str, name: str, description: str = "", is_public: bool = False) -> ListDocument:
        """Insert a new, empty list"""
        now = datetime.now(timezone.utc)
        with self._guard("create list"):
            row = self.create({
                "id": str(uuid.uuid4()),
                "name": name,
                "description": description,
                "is_public": is_public,
                "owner_id": owner_id,
                "items": [],
                "collaborators": [],
                "version": 1,
                "created_at": now,
                "updated_at": now,
            })
        return self.to_document(row)

    def get_document(self, list_id: str) -> Optional[ListDocument]:
        with self._guard("load list"):
            row = self.get(list_id)
        return self.to_document(row) if row else None

    def get_or_raise(self, list_id: str) -> ListDocument:
        document = self.get_document(list_id)
        if document is None:
            raise NotFoundError()
        return document

    def save(self, document: ListDocument) -> ListDocument:
        """Replace the stored document, guarded by its version"""
        values = {
            "name": document.name,
            "description": document.description,
            "is_public": document.is_public,
            "items": [item.model_dump(mode="json", by_alias=True) for item in document.items],
            "collaborators": [c.model_dump(mode="json", by_alias=True) for c in document.collaborators],
            "version": document.version + 1,
            "updated_at": datetime.now(timezone.utc),
        }
        with self._guard("update list"):
            result = self.db.execute(
                update(MediaList)
                .where(MediaList.id == document.id, MediaList.version == document.version)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                self.db.rollback()
                if not self.exists(id=document.id):
                    raise NotFoundError()
                raise StaleListError()
            self.memberships.replace_for_list(document.id, document.collaborators)
            self.db.commit()
        return self.get_or_raise(document.id)

    def mutate(
        self,
        list_id: str,
        mutation: Callable[[ListDocument], ListDocument],
        max_retries: int = DEFAULT_MAX_RETRIES,
    ) -> ListDocument:
        """Read the list, apply mutation and write it back.

        On a version conflict the list is re-read and the mutation re-applied,
        at most max_retries extra times. Errors raised by the mutation itself
        are not retried.
        """
        attempt = 0
        while True:
            document = self.get_or_raise(list_id)
            updated = mutation(document)
            if updated is document:
                return document
            try:
                return self.save(updated)
            except StaleListError:
                attempt += 1
                if attempt > max_retries:
                    logger.error(f"Giving up on list {list_id} after {attempt} conflicting writes")
                    raise
                logger.info(f"List {list_id} changed concurrently, retrying ({attempt}/{max_retries})")

    def remove(self, list_id: str) -> bool:
        """Delete a list and its index rows. Missing ids are not an error."""
        with self._guard("delete list"):
            self.db.query(ListMembership).filter(ListMembership.list_id == list_id).delete(
                synchronize_session=False
            )
            deleted = self.delete(list_id)
            self.db.commit()
        return deleted

    def scan(self, predicate: Callable[[ListDocument], bool]) -> List[ListDocument]:
        """Full-table predicate scan"""
        with self._guard("scan lists"):
            rows = self.db.query(MediaList).all()
        return [doc for doc in (self.to_document(row) for row in rows) if predicate(doc)]

    def owned_by(self, owner_id: str) -> List[ListDocument]:
        with self._guard("load owned lists"):
            rows = self.filter_by(owner_id=owner_id)
        return [self.to_document(row) for row in rows]

    def for_member(self, email: str, status: CollaboratorStatus) -> List[ListDocument]:
        """Lists holding a collaborator record with this email and status"""
        with self._guard("load shared lists"):
            rows = self.get_many(self.memberships.list_ids_for(email, status))
        return [self.to_document(row) for row in rows]
