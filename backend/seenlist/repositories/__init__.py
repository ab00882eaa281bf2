from .base_repository import BaseRepository
from .list_repository import ListRepository, ListMembershipRepository

__all__ = [
    "BaseRepository",
    "ListRepository",
    "ListMembershipRepository"
]
