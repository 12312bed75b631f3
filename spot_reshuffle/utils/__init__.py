"""
Utility functions for spot-reshuffle.

This module provides small helpers used across the application:
    - Spotify ID extraction from URLs and URIs
    - Fixed-size chunking for batched API calls
    - Directory creation

Usage:
    from spot_reshuffle.utils import chunked, extract_playlist_id
"""

from pathlib import Path
from typing import Iterator, Sequence, TypeVar


T = TypeVar("T")


def ensure_directory(path: Path) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Path to the directory.

    Returns:
        The same path (for chaining).

    Raises:
        OSError: If directory cannot be created (permissions, etc.)
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def chunked(items: Sequence[T], size: int) -> Iterator[list[T]]:
    """
    Split a sequence into consecutive chunks of at most `size` items.

    Args:
        items: The sequence to split. Not modified.
        size: Maximum chunk length, must be positive.

    Yields:
        Lists of items, in order. Only the last chunk may be shorter.

    Raises:
        ValueError: If size is not positive.

    Example:
        [len(c) for c in chunked(list(range(250)), 100)]
        # Returns: [100, 100, 50]
    """
    if size < 1:
        raise ValueError(f"Chunk size must be positive, got {size}")
    for start in range(0, len(items), size):
        yield list(items[start:start + size])


def extract_playlist_id(url_or_id: str) -> str:
    """
    Extract a playlist ID from a playlist URL, URI or bare ID.

    Raises:
        ValueError: If the value is a URL/URI of something other than a
                    playlist, or if no ID is left after extraction.

    Examples:
        extract_playlist_id("https://open.spotify.com/playlist/37i9dQZF1DXcBWIGoYBM5M")
        # Returns: "37i9dQZF1DXcBWIGoYBM5M"
    """
    value = url_or_id.strip()

    if value.startswith("spotify:"):
        segments = value.split(":")
    elif "spotify.com" in value:
        segments = value.split("?")[0].rstrip("/").split("/")
    else:
        segments = None

    # The ID is the segment right after "playlist"
    if segments is not None:
        if len(segments) < 2 or segments[-2] != "playlist":
            raise ValueError(f"Not a playlist URL: {url_or_id}")
        value = segments[-1]

    if not value:
        raise ValueError(f"Empty playlist ID in: {url_or_id!r}")
    return value
