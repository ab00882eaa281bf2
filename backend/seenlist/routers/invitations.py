from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from seenlist.core.auth import CurrentUser, get_current_user
from seenlist.core.exceptions import UnauthorizedError, ValidationError
from seenlist.core.enums import CollaboratorStatus
from seenlist.db import get_db
from seenlist.routers.common import handle_exception
from seenlist.schemas.media_list import InvitationReply, InvitationReplyResult, PendingInvitation
from seenlist.services.collaboration_service import CollaborationService, normalize_email

router = APIRouter(prefix="/invitations", tags=["invitations"])


@router.get("", response_model=List[PendingInvitation])
def get_pending_invitations(
    email: Optional[str] = Query(None, description="Email of the invited user"),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Pending invitations addressed to the authenticated user"""
    try:
        if not normalize_email(email):
            raise ValidationError("Email is required")
        if normalize_email(email) != current_user.email:
            raise UnauthorizedError()
        return CollaborationService(db).list_pending_invitations(current_user.email)
    except Exception as e:
        raise handle_exception(e)


@router.post("", response_model=InvitationReplyResult)
def respond_to_invitation(
    reply: InvitationReply,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Accept or reject an invitation"""
    try:
        if normalize_email(reply.email) != current_user.email:
            raise UnauthorizedError()
        CollaborationService(db).respond(reply.list_id, current_user, reply.email, reply.accept)
        return InvitationReplyResult(
            success=True,
            status=CollaboratorStatus.ACCEPTED if reply.accept else CollaboratorStatus.REJECTED,
        )
    except Exception as e:
        raise handle_exception(e)
