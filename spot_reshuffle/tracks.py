"""
Track URI validation, deduplication and shuffling.

These are the pure building blocks of a reshuffle run. Nothing in this
module talks to Spotify.

Track URI format:
    spotify:track:<id>

    A URI is valid when it splits on ':' into exactly three parts, the first
    two being the literal "spotify" and "track" (case-sensitive), and the
    third is non-empty once surrounding whitespace is stripped. Whitespace
    inside a non-empty id is tolerated here; the stricter parse_track_uri()
    used right before writing rejects it.

Usage:
    from spot_reshuffle.tracks import validate_and_deduplicate_tracks, shuffle_tracks

    unique = validate_and_deduplicate_tracks(uris)
    ordered = shuffle_tracks(unique)
"""

import random
import re
from typing import Hashable, Iterable, TypeVar

from spot_reshuffle.core.exceptions import InvalidTrackUriError


H = TypeVar("H", bound=Hashable)

URI_NAMESPACE = "spotify"
TRACK_KIND = "track"

# Spotify ids are base62 strings
_TRACK_ID_PATTERN = re.compile(r"[A-Za-z0-9]+")


def is_valid_track_uri(uri: str) -> bool:
    """
    Check whether a string is a well-formed Spotify track URI.

    Examples:
        is_valid_track_uri("spotify:track:4iV5W9uYEdYUVa79Axb7Rh")  # True
        is_valid_track_uri("spotify:track: ")                       # False
        is_valid_track_uri("SPOTIFY:TRACK:abc")                     # False
        is_valid_track_uri("spotify:track:abc:extra")               # False
    """
    parts = uri.split(":")
    return (
        len(parts) == 3
        and parts[0] == URI_NAMESPACE
        and parts[1] == TRACK_KIND
        and bool(parts[2].strip())
    )


def filter_valid_track_uris(uris: Iterable[str]) -> list[str]:
    """Keep only valid track URIs, preserving order and duplicates."""
    return [uri for uri in uris if is_valid_track_uri(uri)]


def dedupe_preserving_order(items: Iterable[H]) -> list[H]:
    """
    Remove duplicates, keeping the first occurrence of each value in order.

    Example:
        dedupe_preserving_order(["a", "b", "a", "c", "b"])  # ["a", "b", "c"]
    """
    seen: set[H] = set()
    unique: list[H] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            unique.append(item)
    return unique


def dedupe_unordered(items: Iterable[H]) -> list[H]:
    """
    Remove duplicates through a set.

    The output order is unspecified. Use dedupe_preserving_order() when
    the order matters.
    """
    return list(set(items))


def validate_and_deduplicate_tracks(uris: Iterable[str]) -> list[str]:
    """Filter out invalid track URIs, then remove duplicates (order unspecified)."""
    return dedupe_unordered(filter_valid_track_uris(uris))


def shuffle_tracks(items: Iterable[H], rng: random.Random | None = None) -> list[H]:
    """
    Return a uniformly shuffled copy of the items.

    Args:
        items: Items to shuffle. Never modified.
        rng: Random source. Defaults to a SystemRandom seeded from OS entropy,
             so every run produces a different order.
    """
    shuffled = list(items)
    (rng or random.SystemRandom()).shuffle(shuffled)
    return shuffled


def parse_track_uri(uri: str) -> str:
    """
    Strictly parse a track URI into its canonical form.

    On top of is_valid_track_uri(), the id must be a plain alphanumeric
    Spotify id with no surrounding or embedded whitespace.

    Returns:
        The canonical "spotify:track:<id>" string.

    Raises:
        InvalidTrackUriError: If the URI cannot be parsed.
    """
    if not is_valid_track_uri(uri):
        raise InvalidTrackUriError(uri)

    track_id = uri.split(":")[2]
    if not _TRACK_ID_PATTERN.fullmatch(track_id):
        raise InvalidTrackUriError(uri)

    return f"{URI_NAMESPACE}:{TRACK_KIND}:{track_id}"
