"""
Spotify integration module for spot-reshuffle.

This module provides all functionality for reading from Spotify:
    - SpotifyClient: Singleton API client (spotipy wrapper)
    - TrackCollection, SourceSet, SearchResult: Data models
    - SourceAggregator: Gathers track URIs from playlists and Liked Songs

Usage:
    from spot_reshuffle.spotify import SpotifyClient, SourceAggregator, SourceSet

    SpotifyClient.init(client_id, client_secret, redirect_uri)
    result = SourceAggregator().collect(SourceSet(playlists=(playlist_id,)))
"""

from spot_reshuffle.spotify.client import SpotifyClient
from spot_reshuffle.spotify.fetcher import SourceAggregator
from spot_reshuffle.spotify.models import (
    AggregationResult,
    SearchResult,
    SearchResultKind,
    SourceSet,
    TrackCollection,
    track_uri_from_item,
)

__all__ = [
    # Client
    "SpotifyClient",
    # Models
    "TrackCollection",
    "SourceSet",
    "SearchResult",
    "SearchResultKind",
    "AggregationResult",
    "track_uri_from_item",
    # Fetcher
    "SourceAggregator",
]
