import logging
from datetime import datetime, timezone
from typing import List, Optional
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from seenlist.core.enums import CollaboratorStatus
from seenlist.core.exceptions import UpstreamError
from seenlist.models.media_list import MediaList
from seenlist.repositories.list_repository import ListMembershipRepository
from seenlist.schemas.media_list import Collaborator

logger = logging.getLogger(__name__)

MIGRATION_INVITER_NAME = "System Migration"


def _upgrade(raw, owner_id: str, now: datetime) -> Optional[Collaborator]:
    """Legacy collaborators were bare email strings and are treated as accepted.

    Records missing their invitation metadata are attributed to the owner.
    Records that still do not validate are dropped.
    """
    if isinstance(raw, str):
        raw = {"email": raw, "status": CollaboratorStatus.ACCEPTED.value, "invitedByName": MIGRATION_INVITER_NAME}
    if not isinstance(raw, dict):
        logger.error(f"Dropping unreadable collaborator entry: {raw!r}")
        return None

    record = dict(raw)
    if not (record.get("invitedAt") or record.get("invited_at")):
        record["invitedAt"] = now
    if not (record.get("invitedBy") or record.get("invited_by")):
        record["invitedBy"] = owner_id
    try:
        collaborator = Collaborator.model_validate(record)
    except PydanticValidationError as e:
        logger.error(f"Dropping invalid collaborator entry {raw!r}: {str(e)}")
        return None
    email = collaborator.email.strip().lower()
    if not email:
        logger.error(f"Dropping collaborator entry without email: {raw!r}")
        return None
    return collaborator.model_copy(update={"email": email})


def _normalize(raw_collaborators: list, owner_id: str, now: datetime) -> List[Collaborator]:
    collaborators: List[Collaborator] = []
    for raw in raw_collaborators:
        collaborator = _upgrade(raw, owner_id, now)
        if collaborator and all(c.email != collaborator.email for c in collaborators):
            collaborators.append(collaborator)
    return collaborators


def migrate_collaborators(db: Session) -> int:
    """Convert legacy collaborator entries and rebuild the membership index.

    Returns the number of lists whose collaborators were rewritten. Safe to run
    more than once.
    """
    memberships = ListMembershipRepository(db)
    now = datetime.now(timezone.utc)
    migrated = 0
    try:
        for row in db.query(MediaList).all():
            raw_collaborators = row.collaborators or []
            collaborators = _normalize(raw_collaborators, row.owner_id, now)
            stored = [c.model_dump(mode="json", by_alias=True) for c in collaborators]

            if stored != raw_collaborators:
                row.collaborators = stored
                row.version = (row.version or 0) + 1
                row.updated_at = now
                migrated += 1
                logger.info(f"Migrated collaborators of list {row.id}")

            memberships.replace_for_list(row.id, collaborators)
        db.commit()
    except SQLAlchemyError as e:
        logger.error(f"Collaborator migration failed: {str(e)}")
        db.rollback()
        raise UpstreamError("Collaborator migration failed") from e

    logger.info(f"Migration completed. {migrated} lists updated.")
    return migrated
