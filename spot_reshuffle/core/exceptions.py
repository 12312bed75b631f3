"""
Exception classes for spot-reshuffle.

This module defines all custom exceptions used throughout the application.
Each exception carries a human-readable message plus an optional details
dictionary for logging.

Exception Hierarchy:
    SpotReshuffleError (base)
        ConfigError - Configuration file, credentials or option issues
        SpotifyError - Spotify API issues (always fatal to a run)
        InvalidTrackUriError - Track URI rejected by the strict parser
"""


class SpotReshuffleError(Exception):
    """
    Base exception for all spot-reshuffle errors.

    All custom exceptions in this project inherit from this class,
    allowing callers to catch all spot-reshuffle errors with a single
    except clause if desired.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (e.g., playlist id, URI).
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description that will be shown to the user.
            details: Optional dictionary containing additional context about the error.
                     Common keys include:
                     - 'playlist_id': Spotify playlist ID involved in the error
                     - 'http_status': HTTP status returned by the Web API
                     - 'original_error': The underlying exception if wrapping another error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(SpotReshuffleError):
    """
    Raised when the run is misconfigured.

    This is a CRITICAL error and is always raised before any request
    is sent to Spotify.

    Common causes:
        - config.yaml has invalid YAML syntax or wrong field types
        - Spotify credentials missing from both config.yaml and environment
        - No source selected (no playlists and Liked Songs not included)
        - Empty target playlist name
        - Batch size outside 1-100

    Example:
        raise ConfigError(
            "Target playlist name cannot be empty",
            details={'field': 'reshuffle.target_playlist'}
        )
    """
    pass


class SpotifyError(SpotReshuffleError):
    """
    Raised when there's an issue with the Spotify API.

    A reshuffle run never retries: every SpotifyError unwinds the whole run.
    The flags only refine the message shown to the user.

    Common causes:
        - Invalid or expired credentials
        - Rate limiting
        - Playlist not found or private
        - Network connectivity issues

    Attributes:
        is_auth_error: True if this is an authentication/authorization error.
        is_rate_limit: True if Spotify answered with HTTP 429.

    Example:
        raise SpotifyError(
            "Failed to fetch playlist: playlist is private",
            details={'playlist_id': playlist_id, 'http_status': 403},
            is_auth_error=True
        )
    """

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        is_auth_error: bool = False,
        is_rate_limit: bool = False
    ) -> None:
        super().__init__(message, details)
        self.is_auth_error = is_auth_error
        self.is_rate_limit = is_rate_limit


class InvalidTrackUriError(SpotReshuffleError):
    """
    Raised when a track URI cannot be converted to Spotify's strict track id form.

    This happens in the write phase, right before a batch is submitted,
    and aborts the whole write phase instead of skipping the track.

    Attributes:
        uri: The offending track URI.
    """

    def __init__(self, uri: str) -> None:
        super().__init__(
            f"Invalid Spotify track URI: {uri!r}",
            details={"uri": uri}
        )
        self.uri = uri
