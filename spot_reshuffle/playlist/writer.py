"""
Batched playlist writes for spot-reshuffle.

Spotify accepts at most 100 tracks per "add items" request, so the shuffled
track list is split into consecutive batches that are sent one after the
other. Sending them in order keeps the playlist in the shuffled order.

Failure semantics:
    - A failed request raises and no further batch is sent. Batches already
      sent stay in the playlist (no rollback).
    - Each batch is strictly re-parsed right before it is sent. A URI that
      does not parse aborts the write phase with InvalidTrackUriError; the
      track is never silently skipped.
"""

from typing import Sequence

from spot_reshuffle.core.config import MAX_ITEMS_PER_REQUEST
from spot_reshuffle.core.logger import get_logger
from spot_reshuffle.spotify.client import SpotifyClient
from spot_reshuffle.tracks import parse_track_uri
from spot_reshuffle.utils import chunked

logger = get_logger(__name__)


class BatchWriter:
    """
    Appends tracks to a playlist in sequential batches.

    Example:
        written = BatchWriter(batch_size=100).write(playlist_id, shuffled_uris)
    """

    def __init__(
        self,
        client: SpotifyClient | None = None,
        batch_size: int = MAX_ITEMS_PER_REQUEST
    ) -> None:
        if not 1 <= batch_size <= MAX_ITEMS_PER_REQUEST:
            raise ValueError(
                f"batch_size must be between 1 and {MAX_ITEMS_PER_REQUEST}, got {batch_size}"
            )
        self._client = client or SpotifyClient()
        self._batch_size = batch_size

    def write(self, playlist_id: str, uris: Sequence[str]) -> int:
        """
        Append all URIs to the playlist, in order.

        Args:
            playlist_id: Target playlist ID.
            uris: Track URIs in the order they should appear.

        Returns:
            Number of tracks written.

        Raises:
            InvalidTrackUriError: If a URI of the next batch fails the strict parse.
            SpotifyError: If a request fails.
        """
        written = 0

        for number, batch in enumerate(chunked(uris, self._batch_size), start=1):
            logger.info(f"   Adding batch {number}: {len(batch)} tracks")
            track_uris = [parse_track_uri(uri) for uri in batch]
            self._client.add_items(playlist_id, track_uris)
            written += len(track_uris)

        return written
