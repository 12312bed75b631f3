"""
Target playlist reconciliation for spot-reshuffle.

Before new tracks are written, the target playlist is located (or created)
and emptied, so the run always ends with exactly the new tracks in it.

States:
    SEARCHING -> FOUND -> READY      existing playlist, cleared
    SEARCHING -> NOT_FOUND -> READY  new playlist, nothing to clear

Lookup rules:
    - Only one search page is inspected (search_limit results). A playlist
      with the right name further down the results is not seen, and a
      second playlist with the same name gets created.
    - A candidate matches when its name equals the target name exactly
      (case-sensitive, no trimming) AND it is owned by the current user.
    - The first match in search order wins.

Clearing:
    Every track of the found playlist is removed with "remove all
    occurrences" requests of at most 100 tracks each, one after the other.
    Nothing is sent for an empty playlist. A failed request stops the run;
    batches already removed stay removed.
"""

from dataclasses import dataclass
from enum import Enum

from spot_reshuffle.core.config import MAX_ITEMS_PER_REQUEST, MAX_SEARCH_LIMIT
from spot_reshuffle.core.logger import get_logger
from spot_reshuffle.spotify.client import SpotifyClient
from spot_reshuffle.spotify.models import SearchResultKind, TrackCollection, track_uri_from_item
from spot_reshuffle.tracks import dedupe_preserving_order
from spot_reshuffle.utils import chunked

logger = get_logger(__name__)


DEFAULT_DESCRIPTION = "Automatically generated shuffled playlist"


class TargetState(str, Enum):
    """Where the reconciler is in its lookup."""
    SEARCHING = "searching"
    FOUND = "found"
    NOT_FOUND = "not_found"
    READY = "ready"


@dataclass(frozen=True)
class ReconciledTarget:
    """
    An empty playlist owned by the current user, ready to receive tracks.

    Attributes:
        playlist: The target playlist.
        created: True if the playlist was created by this run.
        removed: Number of distinct tracks removed while clearing it.
    """
    playlist: TrackCollection
    created: bool
    removed: int = 0


class TargetReconciler:
    """
    Finds or creates the target playlist and empties it.

    Example:
        target = TargetReconciler().reconcile("Reshuffle")
        print(target.playlist.id, target.created)
    """

    def __init__(
        self,
        client: SpotifyClient | None = None,
        search_limit: int = MAX_SEARCH_LIMIT,
        remove_batch_size: int = MAX_ITEMS_PER_REQUEST,
        description: str = DEFAULT_DESCRIPTION
    ) -> None:
        self._client = client or SpotifyClient()
        self._search_limit = search_limit
        self._remove_batch_size = remove_batch_size
        self._description = description
        self.state = TargetState.SEARCHING

    def reconcile(self, name: str) -> ReconciledTarget:
        """
        Locate or create the playlist called `name` and make sure it is empty.

        Args:
            name: Exact target playlist name.

        Returns:
            ReconciledTarget for the playlist to write into.

        Raises:
            SpotifyError: If any request fails.
        """
        self._transition(TargetState.SEARCHING)
        user_id = self._client.current_user_id()
        match = self._find_owned_playlist(name, user_id)

        if match is not None:
            self._transition(TargetState.FOUND)
            playlist = TrackCollection.from_spotify_api(self._client.playlist(match.id))
            if playlist.total_tracks is not None:
                logger.info(f"Found existing playlist: '{playlist.name}' ({playlist.total_tracks} tracks)")
            else:
                logger.info(f"Found existing playlist: '{playlist.name}'")
            logger.info("Clearing existing tracks...")
            removed = self.clear(playlist.id)
            self._transition(TargetState.READY)
            return ReconciledTarget(playlist=playlist, created=False, removed=removed)

        self._transition(TargetState.NOT_FOUND)
        created = self._client.create_playlist(
            user_id,
            name,
            public=False,
            collaborative=False,
            description=self._description
        )
        playlist = TrackCollection.from_spotify_api(created)
        logger.info(f"Created new playlist: '{playlist.name}'")
        self._transition(TargetState.READY)
        return ReconciledTarget(playlist=playlist, created=True)

    def clear(self, playlist_id: str) -> int:
        """
        Remove every track currently in the playlist.

        Items are read without a market so the URIs are the ones stored in
        the playlist, not relinked alternatives.

        Returns:
            Number of distinct track URIs submitted for removal.
        """
        uris = dedupe_preserving_order(
            uri
            for uri in map(track_uri_from_item, self._client.iter_playlist_items(playlist_id))
            if uri is not None
        )
        if not uris:
            logger.debug(f"Playlist {playlist_id} is already empty")
            return 0

        for number, batch in enumerate(chunked(uris, self._remove_batch_size), start=1):
            logger.info(f"   Clearing batch {number}: {len(batch)} tracks")
            self._client.remove_all_occurrences(playlist_id, batch)

        return len(uris)

    def _find_owned_playlist(self, name: str, user_id: str) -> TrackCollection | None:
        result = self._client.search_playlists(name, limit=self._search_limit, offset=0)
        if result.kind is not SearchResultKind.PLAYLISTS:
            return None

        for candidate in result.playlists:
            if candidate.name == name and candidate.owner_id == user_id:
                return candidate
        return None

    def _transition(self, state: TargetState) -> None:
        logger.debug(f"Target playlist: {self.state.value} -> {state.value}")
        self.state = state
