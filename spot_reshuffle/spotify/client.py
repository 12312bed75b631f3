"""
Spotify API client singleton for spot-reshuffle.

This module provides a singleton wrapper around the spotipy library,
ensuring that only one authenticated Spotify client exists throughout
a run.

Singleton Pattern:
    SpotifyClient must be initialized once with init(); subsequent calls to
    SpotifyClient() return the same instance. Calling init() twice raises
    an error.

Authentication:
    A reshuffle reads Liked Songs and writes playlists, so the OAuth
    authorization code flow is always used (no client-credentials mode).
    The token is cached on disk by spotipy and reused on later runs.

Error Handling:
    Every spotipy or network failure is converted into SpotifyError.
    spotipy is given a plain requests session without retries: a failed
    request fails the run.

Pagination:
    iter_playlist_items() and iter_saved_tracks() are generators. Each call
    starts a new walk from offset 0 and stops after the last page.

Usage:
    from spot_reshuffle.spotify.client import SpotifyClient

    SpotifyClient.init(client_id, client_secret, redirect_uri)

    client = SpotifyClient()
    for item in client.iter_playlist_items("37i9dQZF1DXcBWIGoYBM5M"):
        ...
"""

from pathlib import Path
from typing import Any, Callable, Iterator

import requests
import spotipy
from spotipy.cache_handler import CacheFileHandler
from spotipy.oauth2 import SpotifyOAuth, SpotifyOauthError

from spot_reshuffle.core.config import DEFAULT_REDIRECT_URI, MAX_ITEMS_PER_REQUEST, MAX_SEARCH_LIMIT
from spot_reshuffle.core.exceptions import SpotifyError
from spot_reshuffle.core.logger import get_logger
from spot_reshuffle.spotify.models import SearchResult
from spot_reshuffle.utils import ensure_directory

logger = get_logger(__name__)


# Read Liked Songs and private sources, write the private target
SCOPES = (
    "user-library-read",
    "playlist-read-private",
    "playlist-modify-private",
    "playlist-modify-public",
)

PLAYLIST_PAGE_SIZE = 100
SAVED_TRACKS_PAGE_SIZE = 50


class SpotifyClientMeta(type):
    """
    Metaclass implementing the singleton pattern for SpotifyClient.

    This metaclass ensures:
    1. SpotifyClient cannot be instantiated before init() is called
    2. init() can only be called once
    3. After init(), SpotifyClient() always returns the same instance

    Attributes:
        _instance: The singleton SpotifyClient instance, or None.
        _initialized: Flag indicating whether init() has been called.
    """

    _instance: "SpotifyClient | None" = None
    _initialized: bool = False

    def __call__(cls) -> "SpotifyClient":
        """
        Get the SpotifyClient singleton instance.

        Raises:
            SpotifyError: If init() has not been called yet.
        """
        if cls._instance is None:
            raise SpotifyError(
                "SpotifyClient not initialized. Call SpotifyClient.init("
                "client_id, client_secret, redirect_uri) first.",
                is_auth_error=True
            )
        return cls._instance

    def init(
        cls,
        client_id: str,
        client_secret: str,
        redirect_uri: str = DEFAULT_REDIRECT_URI,
        cache_path: Path | None = None,
        open_browser: bool = True
    ) -> "SpotifyClient":
        """
        Initialize the SpotifyClient singleton.

        Args:
            client_id: Spotify application client ID from Developer Dashboard.
            client_secret: Spotify application client secret.
            redirect_uri: Redirect URI registered for the application.
            cache_path: File where the OAuth token is cached. Its parent
                        directory is created if needed. None uses spotipy's
                        default location.
            open_browser: Open the authorization page automatically on first run.

        Returns:
            The initialized SpotifyClient singleton instance.

        Raises:
            SpotifyError: If init() has already been called.
            SpotifyError: If authentication fails (invalid credentials,
                          denied authorization, network error).

        Behavior:
            1. Build SpotifyOAuth with the reshuffle scopes
            2. Create spotipy.Spotify over a plain requests session (no retries)
            3. Verify the token by fetching the current user
            4. Store the instance as singleton
        """
        if cls._initialized:
            raise SpotifyError(
                "SpotifyClient.init() has already been called. "
                "Use SpotifyClient() to get the existing instance.",
                is_auth_error=True
            )

        cache_handler = None
        if cache_path is not None:
            ensure_directory(cache_path.parent)
            cache_handler = CacheFileHandler(cache_path=str(cache_path))

        try:
            auth_manager = SpotifyOAuth(
                client_id=client_id,
                client_secret=client_secret,
                redirect_uri=redirect_uri,
                scope=" ".join(SCOPES),
                cache_handler=cache_handler,
                open_browser=open_browser
            )
            spotify_instance = spotipy.Spotify(
                auth_manager=auth_manager,
                # A plain session has no urllib3 Retry adapter, so every
                # HTTP status reaches _request unchanged
                requests_session=requests.Session()
            )
            user = spotify_instance.current_user()
        except (spotipy.SpotifyException, SpotifyOauthError) as e:
            raise SpotifyError(
                f"Spotify authentication failed: {e}",
                details={"original_error": str(e)},
                is_auth_error=True
            ) from e
        except requests.RequestException as e:
            raise SpotifyError(
                f"Failed to reach Spotify during authentication: {e}",
                details={"original_error": str(e)},
                is_auth_error=True
            ) from e

        logger.debug(f"Authenticated as {(user or {}).get('id')}")

        instance = super().__call__(spotify_instance)
        cls._instance = instance
        cls._initialized = True
        return instance

    def is_initialized(cls) -> bool:
        """Check if the SpotifyClient has been initialized."""
        return cls._initialized

    def reset(cls) -> None:
        """
        Reset the singleton state (for testing only).

        Clears the singleton instance, allowing init() to be called again.
        """
        cls._instance = None
        cls._initialized = False


class SpotifyClient(metaclass=SpotifyClientMeta):
    """
    Singleton Spotify API client.

    Wraps spotipy.Spotify and exposes exactly the operations a reshuffle
    needs: reading playlists and Liked Songs, searching playlists by name,
    creating a playlist and adding/removing items in batches of at most 100.

    Attributes:
        _spotify: The underlying spotipy.Spotify instance.

    Example:
        client = SpotifyClient()
        user_id = client.current_user_id()
        result = client.search_playlists("Reshuffle")
    """

    def __init__(self, spotify_instance: spotipy.Spotify) -> None:
        """
        Note:
            Called by the metaclass init(). Do not call directly.
        """
        self._spotify = spotify_instance

    # =========================================================================
    # User
    # =========================================================================

    def current_user(self) -> dict[str, Any]:
        """Get the authenticated user's profile."""
        result = self._request("fetching current user", {}, self._spotify.current_user)
        if not result or not result.get("id"):
            raise SpotifyError("Spotify returned no current user", is_auth_error=True)
        return result

    def current_user_id(self) -> str:
        """Get the authenticated user's Spotify ID."""
        return self.current_user()["id"]

    # =========================================================================
    # Playlist reads
    # =========================================================================

    def playlist(self, playlist_id: str) -> dict[str, Any]:
        """
        Get playlist metadata from Spotify.

        Returns:
            Playlist object limited to id, name, owner, external_urls and
            track total. Items are fetched with iter_playlist_items().

        Raises:
            SpotifyError: If playlist not found, private, or network error.
        """
        details = {"playlist_id": playlist_id}
        result = self._request(
            f"fetching playlist {playlist_id}",
            details,
            self._spotify.playlist,
            playlist_id,
            fields="id,name,owner(id,display_name),external_urls,tracks(total),uri"
        )
        if result is None:
            raise SpotifyError(f"Playlist not found: {playlist_id}", details=details)
        return result

    def iter_playlist_items(
        self,
        playlist_id: str,
        market: str | None = None
    ) -> Iterator[dict[str, Any]]:
        """
        Yield every item of a playlist, page by page.

        Items are raw playlist track objects; their "track" may be None for
        tracks that are no longer available.

        Raises:
            SpotifyError: If any page cannot be fetched.
        """
        details = {"playlist_id": playlist_id}
        offset = 0

        while True:
            page = self._request(
                f"fetching items of playlist {playlist_id}",
                {**details, "offset": offset},
                self._spotify.playlist_items,
                playlist_id,
                limit=PLAYLIST_PAGE_SIZE,
                offset=offset,
                market=market,
                additional_types=("track",)
            )
            if page is None:
                raise SpotifyError(
                    f"Failed to fetch playlist items: {playlist_id}",
                    details={**details, "offset": offset}
                )

            items = page.get("items") or []
            yield from items

            if page.get("next") is None or not items:
                break
            offset += PLAYLIST_PAGE_SIZE

    def iter_saved_tracks(self, market: str | None = None) -> Iterator[dict[str, Any]]:
        """
        Yield every item of the user's Liked Songs, page by page.

        Raises:
            SpotifyError: If any page cannot be fetched.
        """
        offset = 0

        while True:
            page = self._request(
                "fetching saved tracks",
                {"offset": offset},
                self._spotify.current_user_saved_tracks,
                limit=SAVED_TRACKS_PAGE_SIZE,
                offset=offset,
                market=market
            )
            if page is None:
                raise SpotifyError("Failed to fetch saved tracks", details={"offset": offset})

            items = page.get("items") or []
            yield from items

            if page.get("next") is None or not items:
                break
            offset += SAVED_TRACKS_PAGE_SIZE

    def search_playlists(
        self,
        name: str,
        limit: int = MAX_SEARCH_LIMIT,
        offset: int = 0
    ) -> SearchResult:
        """
        Search playlists by name.

        Only one page is requested: the caller decides how many results
        are worth inspecting.

        Returns:
            SearchResult tagged PLAYLISTS with the candidates, or OTHER
            when the response carried no playlist section.
        """
        data = self._request(
            f"searching playlists named {name!r}",
            {"query": name},
            self._spotify.search,
            q=name,
            type="playlist",
            limit=min(limit, MAX_SEARCH_LIMIT),
            offset=offset
        )
        return SearchResult.from_spotify_api(data)

    # =========================================================================
    # Playlist writes
    # =========================================================================

    def create_playlist(
        self,
        user_id: str,
        name: str,
        public: bool = False,
        collaborative: bool = False,
        description: str = ""
    ) -> dict[str, Any]:
        """
        Create a playlist owned by user_id.

        Returns:
            The created playlist object.
        """
        result = self._request(
            f"creating playlist {name!r}",
            {"user_id": user_id, "name": name},
            self._spotify.user_playlist_create,
            user_id,
            name,
            public=public,
            collaborative=collaborative,
            description=description
        )
        if not result or not result.get("id"):
            raise SpotifyError(
                f"Spotify did not return the created playlist: {name}",
                details={"user_id": user_id, "name": name}
            )
        return result

    def remove_all_occurrences(self, playlist_id: str, uris: list[str]) -> None:
        """
        Remove every occurrence of the given tracks from a playlist.

        Raises:
            ValueError: If more than 100 URIs are given.
            SpotifyError: If the request fails.
        """
        _check_batch(uris)
        self._request(
            f"removing {len(uris)} tracks from playlist {playlist_id}",
            {"playlist_id": playlist_id, "batch_size": len(uris)},
            self._spotify.playlist_remove_all_occurrences_of_items,
            playlist_id,
            uris
        )

    def add_items(self, playlist_id: str, uris: list[str]) -> None:
        """
        Append tracks to the end of a playlist.

        Raises:
            ValueError: If more than 100 URIs are given.
            SpotifyError: If the request fails.
        """
        _check_batch(uris)
        self._request(
            f"adding {len(uris)} tracks to playlist {playlist_id}",
            {"playlist_id": playlist_id, "batch_size": len(uris)},
            self._spotify.playlist_add_items,
            playlist_id,
            uris
        )

    # =========================================================================
    # Private Helper Methods
    # =========================================================================

    def _request(
        self,
        description: str,
        details: dict[str, Any],
        func: Callable[..., Any],
        *args: Any,
        **kwargs: Any
    ) -> Any:
        """
        Call a spotipy method, converting failures into SpotifyError.

        HTTP 429 sets is_rate_limit, HTTP 401/403 and OAuth failures set
        is_auth_error.
        """
        try:
            return func(*args, **kwargs)
        except spotipy.SpotifyException as e:
            status = e.http_status
            if status == 429:
                raise SpotifyError(
                    f"Rate limited while {description}",
                    details={**details, "http_status": 429},
                    is_rate_limit=True
                ) from e
            if status in (401, 403):
                raise SpotifyError(
                    f"Not authorized while {description}: {e.msg}",
                    details={**details, "http_status": status},
                    is_auth_error=True
                ) from e
            if status == 404:
                raise SpotifyError(
                    f"Not found while {description}",
                    details={**details, "http_status": 404}
                ) from e
            raise SpotifyError(
                f"Failed {description}: {e}",
                details={**details, "http_status": status, "original_error": str(e)}
            ) from e
        except SpotifyOauthError as e:
            raise SpotifyError(
                f"Authentication failed while {description}: {e}",
                details={**details, "original_error": str(e)},
                is_auth_error=True
            ) from e
        except requests.RequestException as e:
            raise SpotifyError(
                f"Network error while {description}: {e}",
                details={**details, "original_error": str(e)}
            ) from e


def _check_batch(uris: list[str]) -> None:
    if len(uris) > MAX_ITEMS_PER_REQUEST:
        raise ValueError(
            f"At most {MAX_ITEMS_PER_REQUEST} items per request, got {len(uris)}"
        )
