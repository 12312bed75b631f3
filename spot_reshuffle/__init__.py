"""
spot-reshuffle: Rebuild a Spotify playlist as a shuffled merge of other sources.

The tracks of one or more source playlists (and optionally the user's Liked
Songs) are merged, deduplicated and shuffled, then written into a target
playlist owned by the user. The target is found by exact name among the
user's playlists, or created when missing, and is emptied before writing.

Architecture:
    core/       - Configuration, logging, exceptions
    spotify/    - Spotify API client, models and source aggregation
    playlist/   - Target playlist lookup/clearing and batched writes
    utils/      - Small helpers (ID extraction, chunking)
    tracks.py   - Track URI validation, deduplication and shuffling
    pipeline.py - The end-to-end run
    cli.py      - Command-line interface

Usage:
    Command Line:
        spot-reshuffle -t "Reshuffle" -s 37i9dQZF1DXcBWIGoYBM5M --include-liked

    Python API:
        from spot_reshuffle.core import load_config, setup_logging
        from spot_reshuffle.spotify import SpotifyClient
        from spot_reshuffle.pipeline import ReshuffleOptions, run_reshuffle

        config = load_config()
        setup_logging(config.logging.directory)
        SpotifyClient.init(config.spotify.client_id, config.spotify.client_secret)

        run_reshuffle(ReshuffleOptions(
            target_playlist_name="Reshuffle",
            source_playlists=("37i9dQZF1DXcBWIGoYBM5M",)
        ))

Dependencies:
    - spotipy: Spotify API client and OAuth
    - click / rich-click: CLI and its colors
    - pyyaml: Configuration file parsing
    - python-dotenv: Credentials from .env
    - tqdm: Progress-bar aware console logging
    - requests: Transport errors raised by spotipy
"""

__version__ = "0.1.0"
__author__ = "spot-reshuffle"
__license__ = "MIT"

# Convenience imports for common usage
from spot_reshuffle.core import (
    Config,
    ConfigError,
    InvalidTrackUriError,
    SpotifyError,
    SpotReshuffleError,
    get_logger,
    load_config,
    setup_logging,
)
from spot_reshuffle.pipeline import ReshuffleOptions, RunResult, run_reshuffle
from spot_reshuffle.spotify import SpotifyClient

__all__ = [
    # Version
    "__version__",
    # Core
    "Config",
    "load_config",
    "setup_logging",
    "get_logger",
    # Exceptions
    "SpotReshuffleError",
    "ConfigError",
    "SpotifyError",
    "InvalidTrackUriError",
    # Pipeline
    "ReshuffleOptions",
    "RunResult",
    "run_reshuffle",
    "SpotifyClient",
]
