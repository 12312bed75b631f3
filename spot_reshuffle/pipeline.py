"""
Reshuffle pipeline for spot-reshuffle.

A run merges the tracks of all sources, removes duplicates, shuffles them
and rewrites the target playlist with the result:

    1. Validate options (no Spotify request before this succeeds)
    2. Collect track URIs from source playlists and Liked Songs
    3. Deduplicate and re-validate
    4. Shuffle
    5. Find or create the target playlist and clear it
    6. Append the shuffled tracks in batches
    7. Log a summary

A run with no valid track left after step 3 stops successfully without
touching the target playlist.

Usage:
    from spot_reshuffle.pipeline import ReshuffleOptions, run_reshuffle

    options = ReshuffleOptions(
        target_playlist_name="Reshuffle",
        source_playlists=("37i9dQZF1DXcBWIGoYBM5M",),
        include_liked=True
    )
    result = run_reshuffle(options)
"""

from dataclasses import dataclass

from spot_reshuffle.core.config import DEFAULT_MARKET, MAX_ITEMS_PER_REQUEST, MAX_SEARCH_LIMIT
from spot_reshuffle.core.exceptions import ConfigError
from spot_reshuffle.core.logger import get_logger
from spot_reshuffle.playlist import BatchWriter, TargetReconciler
from spot_reshuffle.spotify.client import SpotifyClient
from spot_reshuffle.spotify.fetcher import SourceAggregator
from spot_reshuffle.spotify.models import SourceSet
from spot_reshuffle.tracks import dedupe_unordered, filter_valid_track_uris, shuffle_tracks
from spot_reshuffle.utils import extract_playlist_id

logger = get_logger(__name__)


@dataclass(frozen=True)
class ReshuffleOptions:
    """
    Everything a run needs to know, passed explicitly to run_reshuffle().

    Attributes:
        target_playlist_name: Exact name of the playlist to overwrite or create.
        source_playlists: Playlist IDs, URIs or URLs to read.
        include_liked: Whether Liked Songs are read too.
        market: Country code for track relinking, or None.
        batch_size: Tracks per add/remove request (1-100).
        search_limit: Search results inspected when looking for the target (1-50).
    """
    target_playlist_name: str
    source_playlists: tuple[str, ...] = ()
    include_liked: bool = False
    market: str | None = DEFAULT_MARKET
    batch_size: int = MAX_ITEMS_PER_REQUEST
    search_limit: int = MAX_SEARCH_LIMIT

    @property
    def sources(self) -> SourceSet:
        return SourceSet(playlists=self.source_playlists, include_liked=self.include_liked)

    def validate(self) -> None:
        """
        Reject unusable options.

        Raises:
            ConfigError: If no source is selected, the target name is blank,
                         a source is not a playlist reference, or a size is
                         out of range.
        """
        if self.sources.is_empty:
            raise ConfigError(
                "You must provide at least one source playlist, or include Liked Songs",
                details={"field": "source_playlists"}
            )

        if not self.target_playlist_name or not self.target_playlist_name.strip():
            raise ConfigError(
                "Target playlist name cannot be empty",
                details={"field": "target_playlist_name"}
            )

        for reference in self.source_playlists:
            try:
                extract_playlist_id(reference)
            except ValueError as e:
                raise ConfigError(
                    f"Invalid source playlist: {reference}",
                    details={"source_playlist": reference}
                ) from e

        if not 1 <= self.batch_size <= MAX_ITEMS_PER_REQUEST:
            raise ConfigError(
                f"Batch size must be between 1 and {MAX_ITEMS_PER_REQUEST}",
                details={"field": "batch_size", "value": self.batch_size}
            )

        if not 1 <= self.search_limit <= MAX_SEARCH_LIMIT:
            raise ConfigError(
                f"Search limit must be between 1 and {MAX_SEARCH_LIMIT}",
                details={"field": "search_limit", "value": self.search_limit}
            )


@dataclass(frozen=True)
class RunResult:
    """
    Counts reported at the end of a run. Not persisted.

    Attributes:
        retrieved: Valid track URIs read from all sources, duplicates included.
        rejected_from_playlists: Invalid URIs ignored in source playlists.
        rejected_from_liked: Invalid URIs ignored in Liked Songs.
        unique: Distinct valid tracks after deduplication.
        removed_from_target: Tracks removed while clearing the target.
        written: Tracks added to the target.
        playlist_id: Target playlist ID, None if the target was not touched.
        playlist_url: Public link of the target playlist, if known.
        created: True if the target playlist was created by this run.
    """
    retrieved: int = 0
    rejected_from_playlists: int = 0
    rejected_from_liked: int = 0
    unique: int = 0
    removed_from_target: int = 0
    written: int = 0
    playlist_id: str | None = None
    playlist_url: str | None = None
    created: bool = False

    @property
    def duplicates_removed(self) -> int:
        return self.retrieved - self.unique


def run_reshuffle(options: ReshuffleOptions, client: SpotifyClient | None = None) -> RunResult:
    """
    Run one reshuffle.

    Args:
        options: Run options. Validated before any request is made.
        client: Spotify client, defaults to the SpotifyClient singleton.

    Returns:
        RunResult with the counts of the run.

    Raises:
        ConfigError: If the options are invalid.
        SpotifyError: If any Spotify request fails. The target playlist may
                      be left cleared or partially written.
        InvalidTrackUriError: If a track fails the strict parse while writing.
    """
    options.validate()
    client = client or SpotifyClient()

    logger.info("Starting Spotify Reshuffle...")

    aggregation = SourceAggregator(client).collect(options.sources, market=options.market)
    logger.info(f"Total tracks retrieved: {aggregation.retrieved}")

    unique_tracks = dedupe_unordered(aggregation.tracks)
    logger.info(f"After deduplication: {len(unique_tracks)} unique tracks")

    valid_tracks = filter_valid_track_uris(unique_tracks)
    if len(valid_tracks) != len(unique_tracks):
        logger.warning(
            f"{len(unique_tracks) - len(valid_tracks)} invalid URIs removed during final validation"
        )

    counts = dict(
        retrieved=aggregation.retrieved,
        rejected_from_playlists=aggregation.rejected_from_playlists,
        rejected_from_liked=aggregation.rejected_from_liked,
        unique=len(valid_tracks),
    )

    if not valid_tracks:
        logger.warning("No valid tracks found!")
        return RunResult(**counts)

    tracks_to_add = shuffle_tracks(valid_tracks)
    logger.info(f"Tracks shuffled: {len(tracks_to_add)} tracks ready")

    reconciler = TargetReconciler(client, search_limit=options.search_limit, remove_batch_size=options.batch_size)
    target = reconciler.reconcile(options.target_playlist_name)

    logger.info("Adding tracks to playlist...")
    written = BatchWriter(client, batch_size=options.batch_size).write(target.playlist.id, tracks_to_add)

    logger.info(f"Playlist updated successfully: {target.playlist.url or 'N/A'}")
    logger.info(f"{written} tracks added!")

    return RunResult(
        **counts,
        removed_from_target=target.removed,
        written=written,
        playlist_id=target.playlist.id,
        playlist_url=target.playlist.url,
        created=target.created
    )
