import logging
from datetime import datetime, timezone
from typing import List, Optional
from sqlalchemy.orm import Session

from seenlist.core.auth import CurrentUser
from seenlist.core.config import get_settings
from seenlist.core.enums import AccessLevel, CollaboratorStatus
from seenlist.core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from seenlist.repositories.list_repository import ListRepository
from seenlist.schemas.media_list import Collaborator, ListDocument, PendingInvitation

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def find_collaborator(document: ListDocument, email: str) -> Optional[Collaborator]:
    email = normalize_email(email)
    return next((c for c in document.collaborators if c.email == email), None)


def access_level(document: ListDocument, user: CurrentUser) -> AccessLevel:
    """Effective role of user on a list"""
    if document.owner_id == user.id:
        return AccessLevel.OWNER
    collaborator = find_collaborator(document, user.email)
    if collaborator and collaborator.status == CollaboratorStatus.ACCEPTED:
        return AccessLevel.COLLABORATOR
    return AccessLevel.NONE


def require_owner(document: ListDocument, user: CurrentUser, action: str) -> None:
    if access_level(document, user) != AccessLevel.OWNER:
        raise ForbiddenError(f"Only the list owner can {action}")


def require_editor(document: ListDocument, user: CurrentUser) -> AccessLevel:
    level = access_level(document, user)
    if level == AccessLevel.NONE:
        raise ForbiddenError()
    return level


class CollaborationService:
    """Invitation lifecycle for shared lists: invite, respond, remove."""

    def __init__(self, db: Session):
        self.db = db
        self.list_repository = ListRepository(db)
        self.max_retries = get_settings().LIST_WRITE_MAX_RETRIES

    def access_level(self, list_id: str, user: CurrentUser) -> AccessLevel:
        return access_level(self.list_repository.get_or_raise(list_id), user)

    def invite(self, list_id: str, inviter: CurrentUser, invitee_email: str) -> ListDocument:
        """Invite an email to collaborate on a list.

        A pending or accepted record for the email is a conflict. A rejected
        record is turned back into a fresh pending invitation.
        """
        email = normalize_email(invitee_email)
        if not email:
            raise ValidationError("Invitee email is required")

        def apply(document: ListDocument) -> ListDocument:
            require_owner(document, inviter, "invite collaborators")
            if email == inviter.email:
                raise ValidationError("You cannot invite yourself to your own list")

            now = datetime.now(timezone.utc)
            existing = find_collaborator(document, email)
            if existing and existing.status != CollaboratorStatus.REJECTED:
                raise ConflictError("User is already a collaborator or has a pending invitation")

            invitation = Collaborator(
                email=email,
                status=CollaboratorStatus.PENDING,
                invited_at=now,
                invited_by=inviter.id,
                invited_by_name=inviter.display_name,
            )
            if existing:
                collaborators = [invitation if c.email == email else c for c in document.collaborators]
            else:
                collaborators = [*document.collaborators, invitation]
            return document.model_copy(update={"collaborators": collaborators})

        document = self.list_repository.mutate(list_id, apply, self.max_retries)
        logger.info(f"User {inviter.id} invited {email} to list {list_id}")
        return document

    def respond(self, list_id: str, respondent: CurrentUser, email: str, accept: bool) -> ListDocument:
        """Accept or reject the caller's pending invitation"""
        email = normalize_email(email)
        if email != respondent.email:
            raise ForbiddenError("You can only respond to your own invitations")

        def apply(document: ListDocument) -> ListDocument:
            invitation = find_collaborator(document, email)
            if invitation is None or invitation.status != CollaboratorStatus.PENDING:
                raise NotFoundError("No pending invitation found for this list")

            answered = invitation.model_copy(update={
                "status": CollaboratorStatus.ACCEPTED if accept else CollaboratorStatus.REJECTED,
                "responded_at": datetime.now(timezone.utc),
            })
            collaborators = [answered if c.email == email else c for c in document.collaborators]
            return document.model_copy(update={"collaborators": collaborators})

        document = self.list_repository.mutate(list_id, apply, self.max_retries)
        logger.info(f"{email} {'accepted' if accept else 'rejected'} invitation to list {list_id}")
        return document

    def remove(self, list_id: str, caller: CurrentUser, collaborator_email: str) -> ListDocument:
        """Drop a collaborator record whatever its status. Missing emails are a no-op."""
        email = normalize_email(collaborator_email)

        def apply(document: ListDocument) -> ListDocument:
            require_owner(document, caller, "remove collaborators")
            if find_collaborator(document, email) is None:
                return document
            collaborators = [c for c in document.collaborators if c.email != email]
            return document.model_copy(update={"collaborators": collaborators})

        document = self.list_repository.mutate(list_id, apply, self.max_retries)
        logger.info(f"Collaborator {email} removed from list {list_id}")
        return document

    def list_pending_invitations(self, email: str) -> List[PendingInvitation]:
        email = normalize_email(email)
        invitations = []
        for document in self.list_repository.for_member(email, CollaboratorStatus.PENDING):
            invitation = find_collaborator(document, email)
            if invitation is None or invitation.status != CollaboratorStatus.PENDING:
                continue
            invitations.append(PendingInvitation(
                list_id=document.id,
                list_name=document.name,
                invited_by=invitation.invited_by,
                invited_by_name=invitation.invited_by_name or "Unknown user",
                invited_at=invitation.invited_at,
                status=invitation.status,
                item_count=len(document.items),
            ))
        invitations.sort(key=lambda i: i.invited_at, reverse=True)
        return invitations
