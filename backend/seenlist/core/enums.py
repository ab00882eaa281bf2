import enum


class CollaboratorStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class MediaType(str, enum.Enum):
    MOVIE = "movie"
    SERIES = "series"


class AccessLevel(str, enum.Enum):
    OWNER = "owner"
    COLLABORATOR = "collaborator"
    NONE = "none"


class WatchedFilter(str, enum.Enum):
    ALL = "all"
    WATCHED = "watched"
    UNWATCHED = "unwatched"


class ItemSort(str, enum.Enum):
    """Sort orders offered by the list view"""
    UNWATCHED_ADDED = "unwatched-added"
    UNWATCHED_ALPHA = "unwatched-alpha"
    UNWATCHED_YEAR = "unwatched-year"
