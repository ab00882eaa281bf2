from seenlist.core.enums import MediaType
from seenlist.schemas.media_list import Episode, MediaItem, Season


def make_movie(item_id="movie-603", title="The Matrix", year="1999", genres=None, vote_average=8.2):
    return MediaItem(
        id=item_id,
        type=MediaType.MOVIE,
        title=title,
        year=year,
        genres=genres if genres is not None else ["Action", "Science Fiction"],
        vote_average=vote_average,
    )


def make_series(item_id="tv-1399", title="Game of Thrones", seasons=2, episodes=3):
    return MediaItem(
        id=item_id,
        type=MediaType.SERIES,
        title=title,
        year="2011",
        genres=["Drama"],
        seasons=[
            Season(
                id=season,
                name=f"Season {season}",
                episodes=[
                    Episode(id=season * 100 + number, name=f"Episode {number}", episode_number=number)
                    for number in range(1, episodes + 1)
                ],
            )
            for season in range(1, seasons + 1)
        ],
    )
