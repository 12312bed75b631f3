"""Test configuration and fixtures"""

import pytest
from unittest.mock import Mock

from spot_reshuffle.spotify.client import SpotifyClient
from spot_reshuffle.spotify.models import SearchResult, SearchResultKind, TrackCollection

USER_ID = "me"


def track_item(uri):
    """Playlist/saved-track item wrapping a track with the given URI"""
    track_id = uri.split(":")[-1] if uri else ""
    return {'track': {'id': track_id, 'uri': uri, 'type': 'track', 'is_local': False}}


def playlist_data(playlist_id, name, owner_id=USER_ID):
    """Minimal playlist object as returned by the Web API"""
    return {
        'id': playlist_id,
        'name': name,
        'owner': {'id': owner_id, 'display_name': owner_id},
        'external_urls': {'spotify': f"https://open.spotify.com/playlist/{playlist_id}"},
        'tracks': {'total': 0},
    }


def search_result(*playlists):
    """PLAYLISTS search result built from playlist objects"""
    return SearchResult(
        kind=SearchResultKind.PLAYLISTS,
        playlists=tuple(TrackCollection.from_spotify_api(p) for p in playlists)
    )


@pytest.fixture
def mock_client():
    """SpotifyClient stand-in with an empty account"""
    client = Mock(spec=SpotifyClient)
    client.current_user_id.return_value = USER_ID
    client.playlist.side_effect = lambda playlist_id: playlist_data(playlist_id, f"Playlist {playlist_id}")
    client.iter_playlist_items.side_effect = lambda playlist_id, market=None: iter([])
    client.iter_saved_tracks.side_effect = lambda market=None: iter([])
    client.search_playlists.return_value = search_result()
    client.create_playlist.side_effect = (
        lambda user_id, name, **kwargs: playlist_data("new_playlist", name, owner_id=user_id)
    )
    return client


@pytest.fixture
def reset_spotify_client():
    """Make sure every test starts and ends without a SpotifyClient singleton"""
    SpotifyClient.reset()
    yield
    SpotifyClient.reset()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove Spotify credentials from the environment and disable .env loading"""
    for name in ("SPOTIPY_CLIENT_ID", "SPOTIPY_CLIENT_SECRET", "SPOTIPY_REDIRECT_URI"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("spot_reshuffle.core.config.load_dotenv", lambda *args, **kwargs: False)
    return monkeypatch


@pytest.fixture
def aggregation_example():
    """Mixed valid/invalid/duplicate track URIs"""
    return [
        "spotify:track:valid1",
        "invalid:track:123",
        "spotify:track:valid2",
        "spotify:track:valid1",
        "",
        "spotify:track:valid3",
        "spotify:album:123",
        "spotify:track:valid2",
    ]


@pytest.fixture
def make_item():
    return track_item


@pytest.fixture
def make_playlist():
    return playlist_data


@pytest.fixture
def make_search_result():
    return search_result
