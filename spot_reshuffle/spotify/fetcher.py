"""
Track fetcher for spot-reshuffle.

This module gathers track URIs from every configured source: source
playlists first, in the order given, then the user's Liked Songs.

Workflow:
    1. Normalise each playlist reference (ID, URI or URL) to an ID
    2. Fetch playlist metadata (for its name in the logs)
    3. Walk every page of the playlist items
    4. Extract and validate the track URI of each item
    5. Repeat steps 3-4 for Liked Songs when requested

Item handling:
    - Items without a playable track (unavailable, local file, episode)
      are skipped silently
    - Items with an invalid URI are counted as rejected and logged,
      the run continues
    - Any SpotifyError propagates: a partial aggregation is never returned
"""

from typing import Any, Iterable

from spot_reshuffle.core.exceptions import ConfigError
from spot_reshuffle.core.logger import get_logger
from spot_reshuffle.spotify.client import SpotifyClient
from spot_reshuffle.spotify.models import AggregationResult, SourceSet, track_uri_from_item
from spot_reshuffle.tracks import is_valid_track_uri
from spot_reshuffle.utils import extract_playlist_id

logger = get_logger(__name__)


class SourceAggregator:
    """
    Collects track URIs from source playlists and Liked Songs.

    Example:
        aggregator = SourceAggregator()
        result = aggregator.collect(SourceSet(playlists=("abc",), include_liked=True))
        print(result.retrieved, result.rejected)
    """

    def __init__(self, client: SpotifyClient | None = None) -> None:
        self._client = client or SpotifyClient()

    def collect(self, sources: SourceSet, market: str | None = None) -> AggregationResult:
        """
        Read every source to completion.

        Args:
            sources: Playlists to read and whether to include Liked Songs.
            market: Country code passed to Spotify for track relinking.

        Returns:
            AggregationResult with valid URIs in encounter order (duplicates
            kept) and reject counts per source family.

        Raises:
            ConfigError: If a playlist reference is not a playlist.
            SpotifyError: If any source cannot be read.
        """
        tracks: list[str] = []
        rejected_from_playlists = 0
        rejected_from_liked = 0

        if sources.playlists:
            logger.info(f"Retrieving tracks from {len(sources.playlists)} playlists...")
            for number, reference in enumerate(sources.playlists, start=1):
                playlist_id = _playlist_id(reference)
                playlist_data = self._client.playlist(playlist_id)
                logger.info(
                    f"   Processing playlist {number}: "
                    f"'{playlist_data.get('name', playlist_id)}'"
                )
                items = self._client.iter_playlist_items(playlist_id, market=market)
                valid, rejected = self._extract(items, source="playlist")
                tracks.extend(valid)
                rejected_from_playlists += rejected

            if rejected_from_playlists:
                logger.warning(f"{rejected_from_playlists} invalid tracks ignored from playlists")

        if sources.include_liked:
            logger.info("Retrieving Liked Songs...")
            items = self._client.iter_saved_tracks(market=market)
            valid, rejected_from_liked = self._extract(items, source="Liked Songs")
            tracks.extend(valid)

            if rejected_from_liked:
                logger.warning(f"{rejected_from_liked} invalid tracks ignored from Liked Songs")

        return AggregationResult(
            tracks=tuple(tracks),
            rejected_from_playlists=rejected_from_playlists,
            rejected_from_liked=rejected_from_liked
        )

    @staticmethod
    def _extract(items: Iterable[dict[str, Any]], source: str) -> tuple[list[str], int]:
        """Drain an item stream, returning (valid URIs, rejected count)."""
        valid: list[str] = []
        rejected = 0
        skipped = 0

        for item in items:
            uri = track_uri_from_item(item)
            if uri is None:
                skipped += 1
                continue
            if is_valid_track_uri(uri):
                valid.append(uri)
            else:
                rejected += 1
                logger.warning(f"Invalid URI ignored ({source}): {uri}")

        if skipped:
            logger.debug(f"Skipped {skipped} unavailable items ({source})")

        return valid, rejected


def _playlist_id(reference: str) -> str:
    try:
        return extract_playlist_id(reference)
    except ValueError as e:
        raise ConfigError(
            f"Invalid source playlist: {reference}",
            details={"source_playlist": reference}
        ) from e
