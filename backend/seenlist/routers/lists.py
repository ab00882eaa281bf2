from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from seenlist.core.auth import CurrentUser, get_current_user
from seenlist.core.enums import ItemSort, MediaType, WatchedFilter
from seenlist.db import get_db
from seenlist.routers.common import handle_exception
from seenlist.schemas.media_list import (
    DeleteResult, InviteRequest, ListCreate, ListDocument, ListStats, ListUpdate,
    MediaItem, SeasonsUpdate, WatchedUpdate,
)
from seenlist.services.collaboration_service import CollaborationService
from seenlist.services.list_service import ListService
from seenlist.services.media_collection_service import MediaCollectionService

router = APIRouter(prefix="/lists", tags=["lists"])
shared_router = APIRouter(prefix="/shared-lists", tags=["lists"])


# Lists
@router.get("", response_model=List[ListDocument])
def get_my_lists(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Lists the user owns or collaborates on, newest first."""
    try:
        return ListService(db).lists_for_user(current_user.id, current_user.email)
    except Exception as e:
        raise handle_exception(e)


@router.post("", response_model=ListDocument, status_code=status.HTTP_201_CREATED)
def create_list(
    list_data: ListCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return ListService(db).create(
            owner_id=current_user.id,
            name=list_data.name,
            description=list_data.description,
            is_public=list_data.is_public,
        )
    except Exception as e:
        raise handle_exception(e)


@router.get("/{list_id}", response_model=ListDocument)
def get_list(
    list_id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return ListService(db).get(list_id, current_user)
    except Exception as e:
        raise handle_exception(e)


@router.put("/{list_id}", response_model=ListDocument)
def update_list(
    list_id: str,
    changes: ListUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return ListService(db).update(list_id, changes, current_user)
    except Exception as e:
        raise handle_exception(e)


@router.delete("/{list_id}", response_model=DeleteResult)
def delete_list(
    list_id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        ListService(db).delete(list_id, current_user)
        return DeleteResult(success=True)
    except Exception as e:
        raise handle_exception(e)


@shared_router.get("/{list_id}", response_model=ListDocument)
def get_shared_list(list_id: str, db: Session = Depends(get_db)):
    """Public, read-only view of a list."""
    try:
        return ListService(db).get_shared(list_id)
    except Exception as e:
        raise handle_exception(e)


# Collaborators
@router.post("/{list_id}/collaborators", response_model=ListDocument)
def invite_collaborator(
    list_id: str,
    invite: InviteRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return CollaborationService(db).invite(list_id, current_user, invite.invitee_email)
    except Exception as e:
        raise handle_exception(e)


@router.delete("/{list_id}/collaborators/{email}", response_model=ListDocument)
def remove_collaborator(
    list_id: str,
    email: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return CollaborationService(db).remove(list_id, current_user, email)
    except Exception as e:
        raise handle_exception(e)


# Items
@router.get("/{list_id}/items", response_model=List[MediaItem])
def get_items(
    list_id: str,
    watched: WatchedFilter = Query(WatchedFilter.ALL, alias="status"),
    media_type: Optional[MediaType] = Query(None, alias="type"),
    sort: Optional[ItemSort] = Query(None),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return MediaCollectionService(db).list_items(list_id, current_user, watched, media_type, sort)
    except Exception as e:
        raise handle_exception(e)


@router.post("/{list_id}/items", response_model=ListDocument, status_code=status.HTTP_201_CREATED)
def add_item(
    list_id: str,
    item: MediaItem,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return MediaCollectionService(db).add_item(list_id, item, current_user)
    except Exception as e:
        raise handle_exception(e)


@router.delete("/{list_id}/items/{item_id}", response_model=ListDocument)
def remove_item(
    list_id: str,
    item_id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return MediaCollectionService(db).remove_item(list_id, item_id, current_user)
    except Exception as e:
        raise handle_exception(e)


@router.put("/{list_id}/items/{item_id}/watched", response_model=ListDocument)
def set_item_watched(
    list_id: str,
    item_id: str,
    body: WatchedUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return MediaCollectionService(db).set_watched(list_id, item_id, body.watched, current_user)
    except Exception as e:
        raise handle_exception(e)


@router.put("/{list_id}/items/{item_id}/seasons", response_model=ListDocument)
def set_item_seasons(
    list_id: str,
    item_id: str,
    body: SeasonsUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return MediaCollectionService(db).set_seasons(list_id, item_id, body.seasons, current_user)
    except Exception as e:
        raise handle_exception(e)


@router.put("/{list_id}/items/{item_id}/seasons/{season_id}/watched", response_model=ListDocument)
def set_season_watched(
    list_id: str,
    item_id: str,
    season_id: int,
    body: WatchedUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return MediaCollectionService(db).set_season_watched(list_id, item_id, season_id, body.watched, current_user)
    except Exception as e:
        raise handle_exception(e)


@router.put(
    "/{list_id}/items/{item_id}/seasons/{season_id}/episodes/{episode_id}/watched",
    response_model=ListDocument,
)
def set_episode_watched(
    list_id: str,
    item_id: str,
    season_id: int,
    episode_id: int,
    body: WatchedUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return MediaCollectionService(db).set_episode_watched(
            list_id, item_id, season_id, episode_id, body.watched, current_user
        )
    except Exception as e:
        raise handle_exception(e)


# Analytics
@router.get("/{list_id}/stats", response_model=ListStats)
def get_list_stats(
    list_id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return MediaCollectionService(db).stats(list_id, current_user)
    except Exception as e:
        raise handle_exception(e)


@router.get("/{list_id}/random", response_model=MediaItem)
def pick_random_item(
    list_id: str,
    media_type: Optional[MediaType] = Query(None, alias="type"),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Random unwatched item, optionally only movies or only series."""
    try:
        return MediaCollectionService(db).pick_random(list_id, current_user, media_type)
    except Exception as e:
        raise handle_exception(e)
