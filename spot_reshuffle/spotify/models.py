"""
Data models for Spotify entities.

This module defines immutable dataclasses representing the Spotify objects
a reshuffle run works with. Raw API dictionaries are converted at the
boundary so the rest of the code never indexes into JSON.

Design Decisions:
    - All dataclasses are frozen (immutable) to prevent accidental modification
    - Collections are tuples for the same reason
    - Track identifiers stay plain strings ("spotify:track:<id>")

Usage:
    from spot_reshuffle.spotify.models import TrackCollection, SourceSet

    playlist = TrackCollection.from_spotify_api(playlist_data)
    sources = SourceSet(playlists=("37i9dQZF1DXcBWIGoYBM5M",), include_liked=True)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class TrackCollection:
    """
    A Spotify playlist, without its items.

    Attributes:
        id: Spotify playlist ID.
        name: Display name, compared exactly when looking for the target.
        owner_id: Spotify user ID of the owner.
        url: Public open.spotify.com link, if Spotify returned one.
        total_tracks: Item count reported by Spotify, if known.
    """
    id: str
    name: str
    owner_id: str | None
    url: str | None = None
    total_tracks: int | None = None

    @classmethod
    def from_spotify_api(cls, data: dict[str, Any]) -> "TrackCollection":
        """
        Create a TrackCollection from a playlist object (full or simplified).

        Example:
            TrackCollection.from_spotify_api({
                "id": "abc", "name": "Reshuffle",
                "owner": {"id": "me"},
                "external_urls": {"spotify": "https://open.spotify.com/playlist/abc"},
                "tracks": {"total": 12},
            })
        """
        owner = data.get("owner") or {}
        tracks = data.get("tracks") or {}
        return cls(
            id=data["id"],
            name=data.get("name") or "",
            owner_id=owner.get("id"),
            url=(data.get("external_urls") or {}).get("spotify"),
            total_tracks=tracks.get("total"),
        )


@dataclass(frozen=True)
class SourceSet:
    """
    The sources a run reads tracks from.

    Attributes:
        playlists: Playlist IDs, URIs or URLs, read in order.
        include_liked: Whether the user's Liked Songs are read too.
    """
    playlists: tuple[str, ...] = ()
    include_liked: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.playlists and not self.include_liked


class SearchResultKind(str, Enum):
    """Which kind of results a search response carried."""
    PLAYLISTS = "playlists"
    OTHER = "other"


@dataclass(frozen=True)
class SearchResult:
    """
    Tagged search response.

    Only the PLAYLISTS case carries candidates. Any other response shape is
    OTHER with no candidates, which callers treat as "nothing found".
    """
    kind: SearchResultKind
    playlists: tuple[TrackCollection, ...] = ()

    @classmethod
    def from_spotify_api(cls, data: dict[str, Any] | None) -> "SearchResult":
        """
        Build a SearchResult from a spotipy search() response.

        Spotify may return null entries inside the items array; they are dropped.
        """
        page = (data or {}).get("playlists")
        if not isinstance(page, dict):
            return cls(kind=SearchResultKind.OTHER)

        playlists = tuple(
            TrackCollection.from_spotify_api(item)
            for item in page.get("items") or []
            if item and item.get("id")
        )
        return cls(kind=SearchResultKind.PLAYLISTS, playlists=playlists)


@dataclass(frozen=True)
class AggregationResult:
    """
    Tracks gathered from all sources, before deduplication.

    Attributes:
        tracks: Valid track URIs in the order they were read.
        rejected_from_playlists: Invalid URIs seen in source playlists.
        rejected_from_liked: Invalid URIs seen in Liked Songs.
    """
    tracks: tuple[str, ...] = ()
    rejected_from_playlists: int = 0
    rejected_from_liked: int = 0

    @property
    def retrieved(self) -> int:
        return len(self.tracks)

    @property
    def rejected(self) -> int:
        return self.rejected_from_playlists + self.rejected_from_liked


def track_uri_from_item(item: dict[str, Any] | None) -> str | None:
    """
    Extract the track URI from a playlist item or saved-track item.

    Returns None for items that carry no playable track: removed or
    unavailable tracks (track is null), podcast episodes and local files
    (no Spotify id).
    """
    if not item:
        return None

    track = item.get("track")
    if not isinstance(track, dict):
        return None

    if track.get("type", "track") != "track" or track.get("is_local", False):
        return None

    track_id = track.get("id")
    if not track_id:
        return None

    return track.get("uri") or f"spotify:track:{track_id}"
