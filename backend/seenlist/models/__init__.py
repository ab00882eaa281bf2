from seenlist.db import Base
from .media_list import MediaList, ListMembership

__all__ = ['MediaList', 'ListMembership']
