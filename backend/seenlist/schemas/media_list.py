from pydantic import BaseModel, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List
from datetime import datetime
from seenlist.core.enums import CollaboratorStatus, MediaType


class CamelModel(BaseModel):
    """Document parts stored and served with camelCase keys"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class Episode(BaseModel):
    id: int
    name: Optional[str] = None
    overview: Optional[str] = None
    episode_number: Optional[int] = None
    air_date: Optional[str] = None
    still_path: Optional[str] = None
    watched: bool = False
    watched_at: Optional[datetime] = Field(default=None, alias="watchedAt")

    class Config:
        populate_by_name = True


class Season(BaseModel):
    id: int
    name: Optional[str] = None
    overview: Optional[str] = None
    poster_path: Optional[str] = None
    air_date: Optional[str] = None
    episodes: List[Episode] = []


class MediaItem(CamelModel):
    id: str = Field(..., min_length=1, description="Provider-qualified id, e.g. movie-603 or tv-1399")
    type: MediaType
    title: str = ""
    overview: Optional[str] = None
    image: Optional[str] = None
    backdrop: Optional[str] = None
    year: Optional[str] = None
    vote_average: Optional[float] = None
    genres: List[str] = []
    runtime: Optional[int] = None
    watched: bool = False
    watched_at: Optional[datetime] = None
    added_at: Optional[datetime] = None
    added_by: Optional[str] = None
    seasons: Optional[List[Season]] = None
    number_of_seasons: Optional[int] = Field(default=None, alias="number_of_seasons")
    watch_progress: Optional[float] = None


class Collaborator(CamelModel):
    email: str
    status: CollaboratorStatus
    invited_at: datetime
    responded_at: Optional[datetime] = None
    invited_by: str
    invited_by_name: Optional[str] = None


class ListDocument(BaseModel):
    """A list with its items and collaborators, read and written as a whole"""
    id: str
    name: str
    description: Optional[str] = ""
    is_public: bool = False
    owner_id: str
    items: List[MediaItem] = []
    collaborators: List[Collaborator] = []
    version: int = 1
    created_at: datetime
    updated_at: datetime
    is_owner: Optional[bool] = Field(default=None, alias="isOwner")

    class Config:
        from_attributes = True
        populate_by_name = True


class ListCreate(BaseModel):
    name: str
    description: Optional[str] = ""
    is_public: bool = False


class ListUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    is_public: Optional[bool] = None


class InviteRequest(CamelModel):
    invitee_email: EmailStr


class InvitationReply(CamelModel):
    list_id: str
    email: EmailStr
    accept: bool


class InvitationReplyResult(BaseModel):
    success: bool
    status: CollaboratorStatus


class PendingInvitation(CamelModel):
    list_id: str
    list_name: str
    invited_by: str
    invited_by_name: str
    invited_at: datetime
    status: CollaboratorStatus = CollaboratorStatus.PENDING
    item_count: int = 0


class WatchedUpdate(BaseModel):
    watched: bool


class SeasonsUpdate(BaseModel):
    seasons: List[Season]

    @field_validator("seasons")
    @classmethod
    def unique_season_ids(cls, seasons: List[Season]) -> List[Season]:
        ids = [s.id for s in seasons]
        if len(ids) != len(set(ids)):
            raise ValueError("Season ids must be unique")
        return seasons


class GenreCount(BaseModel):
    name: str
    count: int
    percentage: float


class YearCount(BaseModel):
    year: str
    count: int
    percentage: float


class ListStats(CamelModel):
    total_items: int
    movie_count: int
    series_count: int
    watched_count: int
    unwatched_count: int
    average_rating: float
    genres: List[GenreCount] = []
    years: List[YearCount] = []


class DeleteResult(BaseModel):
    success: bool = True


class MigrationResult(BaseModel):
    success: bool
    message: str
    migrated: int
