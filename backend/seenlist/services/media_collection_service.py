import logging
import random
from collections import Counter
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple
from sqlalchemy.orm import Session

from seenlist.core.auth import CurrentUser
from seenlist.core.config import get_settings
from seenlist.core.enums import ItemSort, MediaType, WatchedFilter
from seenlist.core.exceptions import ConflictError, NotFoundError, ValidationError
from seenlist.repositories.list_repository import ListRepository
from seenlist.schemas.media_list import (
    Episode, GenreCount, ListDocument, ListStats, MediaItem, Season, YearCount,
)
from seenlist.services.collaboration_service import require_editor

logger = logging.getLogger(__name__)


def _year(item: MediaItem) -> int:
    try:
        return int((item.year or "0")[:4])
    except ValueError:
        return 0


def _added(item: MediaItem) -> float:
    return item.added_at.timestamp() if item.added_at else 0.0


SORT_KEYS = {
    ItemSort.UNWATCHED_ADDED: lambda item: (item.watched, -_added(item)),
    ItemSort.UNWATCHED_ALPHA: lambda item: (item.watched, item.title.casefold()),
    ItemSort.UNWATCHED_YEAR: lambda item: (item.watched, -_year(item)),
}


def watch_progress(seasons: List[Season]) -> float:
    """Percentage of watched episodes across all seasons"""
    episodes = [episode for season in seasons for episode in season.episodes]
    if not episodes:
        return 0.0
    watched = sum(1 for episode in episodes if episode.watched)
    return 100.0 * watched / len(episodes)


def with_progress(item: MediaItem, seasons: List[Season], now: datetime) -> MediaItem:
    """Copy of item with new seasons and recomputed progress.

    Reaching 100% marks the series watched. Dropping below 100% leaves the
    series flag alone.
    """
    progress = watch_progress(seasons)
    update = {"seasons": seasons, "watch_progress": progress}
    if progress == 100.0 and not item.watched:
        update["watched"] = True
        update["watched_at"] = item.watched_at or now
    return item.model_copy(update=update)


def _mark_episode(episode: Episode, watched: bool, now: datetime) -> Episode:
    if watched:
        return episode.model_copy(update={"watched": True, "watched_at": episode.watched_at or now})
    return episode.model_copy(update={"watched": False, "watched_at": None})


def filter_items(
    items: List[MediaItem],
    status: WatchedFilter = WatchedFilter.ALL,
    media_type: Optional[MediaType] = None,
    sort: Optional[ItemSort] = None,
) -> List[MediaItem]:
    if status == WatchedFilter.WATCHED:
        items = [item for item in items if item.watched]
    elif status == WatchedFilter.UNWATCHED:
        items = [item for item in items if not item.watched]
    if media_type:
        items = [item for item in items if item.type == media_type]
    if sort:
        items = sorted(items, key=SORT_KEYS[sort])
    return list(items)


def compute_stats(items: List[MediaItem]) -> ListStats:
    total = len(items)
    watched = sum(1 for item in items if item.watched)
    rated = [item.vote_average for item in items if item.vote_average]

    genre_counts = Counter(genre for item in items for genre in item.genres)
    year_counts = Counter(item.year for item in items if item.year)

    genres = [
        GenreCount(name=name, count=count, percentage=100.0 * count / total)
        for name, count in genre_counts.most_common()
    ]
    years = sorted(
        (YearCount(year=year, count=count, percentage=100.0 * count / total) for year, count in year_counts.items()),
        key=lambda y: int(y.year[:4]) if y.year[:4].isdigit() else 0,
        reverse=True,
    )
    return ListStats(
        total_items=total,
        movie_count=sum(1 for item in items if item.type == MediaType.MOVIE),
        series_count=sum(1 for item in items if item.type == MediaType.SERIES),
        watched_count=watched,
        unwatched_count=total - watched,
        average_rating=sum(rated) / len(rated) if rated else 0.0,
        genres=genres,
        years=years,
    )


class MediaCollectionService:
    """Edits the items of a list: adding, removing and tracking what was watched.

    Every edit reads the whole list, builds new item objects and writes the
    list back; nothing is changed in place.
    """

    def __init__(self, db: Session, rng: Optional[random.Random] = None):
        self.db = db
        self.list_repository = ListRepository(db)
        self.max_retries = get_settings().LIST_WRITE_MAX_RETRIES
        self.rng = rng or random.Random()

    def _edit_item(self, list_id: str, item_id: str, caller: CurrentUser, edit) -> ListDocument:
        def apply(document: ListDocument) -> ListDocument:
            require_editor(document, caller)
            item = next((i for i in document.items if i.id == item_id), None)
            if item is None:
                raise NotFoundError("Item not found in the list")
            edited = edit(item, datetime.now(timezone.utc))
            if edited is item:
                return document
            items = [edited if i.id == item_id else i for i in document.items]
            return document.model_copy(update={"items": items})

        return self.list_repository.mutate(list_id, apply, self.max_retries)

    def add_item(self, list_id: str, item: MediaItem, adder: CurrentUser) -> ListDocument:
        def apply(document: ListDocument) -> ListDocument:
            require_editor(document, adder)
            if any(existing.id == item.id for existing in document.items):
                raise ConflictError("Item already exists in the list")
            now = datetime.now(timezone.utc)
            added = item.model_copy(update={
                "added_by": adder.id,
                "added_at": now,
                "watched": False,
                "watched_at": None,
            })
            if added.type == MediaType.SERIES and added.seasons:
                # New items start unwatched, episodes included
                seasons = [
                    s.model_copy(update={"episodes": [_mark_episode(e, False, now) for e in s.episodes]})
                    for s in added.seasons
                ]
                added = with_progress(added, seasons, now)
            return document.model_copy(update={"items": [*document.items, added]})

        document = self.list_repository.mutate(list_id, apply, self.max_retries)
        logger.info(f"Item {item.id} added to list {list_id} by user {adder.id}")
        return document

    def remove_item(self, list_id: str, item_id: str, caller: CurrentUser) -> ListDocument:
        def apply(document: ListDocument) -> ListDocument:
            require_editor(document, caller)
            items = [i for i in document.items if i.id != item_id]
            if len(items) == len(document.items):
                return document
            return document.model_copy(update={"items": items})

        document = self.list_repository.mutate(list_id, apply, self.max_retries)
        logger.info(f"Item {item_id} removed from list {list_id}")
        return document

    def set_watched(self, list_id: str, item_id: str, watched: bool, caller: CurrentUser) -> ListDocument:
        def edit(item: MediaItem, now: datetime) -> MediaItem:
            if item.watched == watched:
                return item
            return item.model_copy(update={"watched": watched, "watched_at": now if watched else None})

        return self._edit_item(list_id, item_id, caller, edit)

    def set_episode_watched(
        self, list_id: str, item_id: str, season_id: int, episode_id: int, watched: bool, caller: CurrentUser
    ) -> ListDocument:
        def edit(item: MediaItem, now: datetime) -> MediaItem:
            season = self._find_season(item, season_id)
            if not any(e.id == episode_id for e in season.episodes):
                raise NotFoundError("Episode not found")
            episodes = [
                _mark_episode(e, watched, now) if e.id == episode_id and e.watched != watched else e
                for e in season.episodes
            ]
            return with_progress(item, self._replace_season(item, season, episodes), now)

        return self._edit_item(list_id, item_id, caller, edit)

    def set_season_watched(
        self, list_id: str, item_id: str, season_id: int, watched: bool, caller: CurrentUser
    ) -> ListDocument:
        def edit(item: MediaItem, now: datetime) -> MediaItem:
            season = self._find_season(item, season_id)
            episodes = [_mark_episode(e, watched, now) for e in season.episodes]
            return with_progress(item, self._replace_season(item, season, episodes), now)

        return self._edit_item(list_id, item_id, caller, edit)

    def set_seasons(self, list_id: str, item_id: str, seasons: List[Season], caller: CurrentUser) -> ListDocument:
        """Attach a fresh season/episode tree, keeping what was already watched"""

        def edit(item: MediaItem, now: datetime) -> MediaItem:
            if item.type != MediaType.SERIES:
                raise ValidationError("Only series have seasons")
            known: Dict[Tuple[int, int], Episode] = {
                (season.id, episode.id): episode
                for season in item.seasons or []
                for episode in season.episodes
            }
            merged = []
            for season in seasons:
                episodes = []
                for episode in season.episodes:
                    previous = known.get((season.id, episode.id))
                    episodes.append(episode.model_copy(update={
                        "watched": previous.watched if previous else False,
                        "watched_at": previous.watched_at if previous else None,
                    }))
                merged.append(season.model_copy(update={"episodes": episodes}))
            updated = with_progress(item, merged, now)
            return updated.model_copy(update={"number_of_seasons": len(merged)})

        return self._edit_item(list_id, item_id, caller, edit)

    def list_items(
        self,
        list_id: str,
        caller: CurrentUser,
        status: WatchedFilter = WatchedFilter.ALL,
        media_type: Optional[MediaType] = None,
        sort: Optional[ItemSort] = None,
    ) -> List[MediaItem]:
        document = self.list_repository.get_or_raise(list_id)
        require_editor(document, caller)
        return filter_items(document.items, status, media_type, sort)

    def stats(self, list_id: str, caller: CurrentUser) -> ListStats:
        document = self.list_repository.get_or_raise(list_id)
        require_editor(document, caller)
        return compute_stats(document.items)

    def pick_random(self, list_id: str, caller: CurrentUser, media_type: Optional[MediaType] = None) -> MediaItem:
        """Pick something unwatched to watch next"""
        candidates = self.list_items(list_id, caller, WatchedFilter.UNWATCHED, media_type)
        if not candidates:
            raise NotFoundError("No unwatched items to pick from")
        return self.rng.choice(candidates)

    @staticmethod
    def _find_season(item: MediaItem, season_id: int) -> Season:
        season = next((s for s in item.seasons or [] if s.id == season_id), None)
        if season is None:
            raise NotFoundError("Season not found")
        return season

    @staticmethod
    def _replace_season(item: MediaItem, season: Season, episodes: List[Episode]) -> List[Season]:
        return [
            s.model_copy(update={"episodes": episodes}) if s.id == season.id else s
            for s in item.seasons or []
        ]
