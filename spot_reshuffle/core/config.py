"""
Configuration management for spot-reshuffle.

This module handles loading, validating, and providing access to the
application configuration stored in config.yaml and in the environment.

The configuration contains:
    - Spotify API credentials (client_id, client_secret, redirect_uri)
    - Optional token cache location
    - Default reshuffle settings (target playlist, sources, market, batch size)
    - Optional log directory

Configuration File Location:
    config.yaml is looked up in the current working directory unless an
    explicit path is given. Unlike credentials, the file itself is optional:
    every reshuffle setting can also be given on the command line.

Environment:
    A .env file is loaded with python-dotenv. SPOTIPY_CLIENT_ID,
    SPOTIPY_CLIENT_SECRET and SPOTIPY_REDIRECT_URI override the values
    from config.yaml.

Example config.yaml:
    spotify:
      client_id: "your_client_id_here"
      client_secret: "your_client_secret_here"
      redirect_uri: "http://127.0.0.1:8888/callback"
      cache_path: "~/.cache/spot-reshuffle/token"

    reshuffle:
      target_playlist: "Reshuffle"
      source_playlists:
        - "37i9dQZF1DXcBWIGoYBM5M"
      include_liked: true
      market: "US"
      batch_size: 100
      search_limit: 50

    logging:
      directory: "~/.cache/spot-reshuffle/logs"
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from spot_reshuffle.core.exceptions import ConfigError


# Default configuration file name (looked up in current working directory)
CONFIG_FILENAME = "config.yaml"

# Environment variables understood by spotipy itself
ENV_CLIENT_ID = "SPOTIPY_CLIENT_ID"
ENV_CLIENT_SECRET = "SPOTIPY_CLIENT_SECRET"
ENV_REDIRECT_URI = "SPOTIPY_REDIRECT_URI"

DEFAULT_REDIRECT_URI = "http://127.0.0.1:8888/callback"
DEFAULT_MARKET = "US"

# Spotify Web API limits
MAX_ITEMS_PER_REQUEST = 100
MAX_SEARCH_LIMIT = 50


@dataclass(frozen=True)
class SpotifyConfig:
    """
    Spotify API credentials configuration.

    Attributes:
        client_id: The Spotify application client ID.
        client_secret: The Spotify application client secret.
        redirect_uri: OAuth redirect URI registered for the application.
        cache_path: Where the OAuth token is cached between runs.
                    None lets spotipy use its default (.cache in CWD).
    """
    client_id: str
    client_secret: str
    redirect_uri: str = DEFAULT_REDIRECT_URI
    cache_path: Path | None = None


@dataclass(frozen=True)
class ReshuffleConfig:
    """
    Default reshuffle settings.

    Attributes:
        target_playlist: Name of the playlist to create or overwrite.
        source_playlists: Playlist IDs, URIs or URLs to read tracks from.
        include_liked: Whether the user's Liked Songs are a source.
        market: ISO 3166-1 country code used for track relinking, or None.
        batch_size: Tracks per add/remove request (1-100).
        search_limit: How many search results are inspected when looking
                      for an existing target playlist (1-50).
    """
    target_playlist: str | None = None
    source_playlists: tuple[str, ...] = ()
    include_liked: bool = False
    market: str | None = DEFAULT_MARKET
    batch_size: int = MAX_ITEMS_PER_REQUEST
    search_limit: int = MAX_SEARCH_LIMIT


@dataclass(frozen=True)
class LoggingConfig:
    """
    Logging configuration.

    Attributes:
        directory: Directory for per-run log files. None disables file logging.
    """
    directory: Path | None = None


@dataclass(frozen=True)
class Config:
    """
    Complete application configuration.

    Created by load_config() and treated as immutable.

    Example:
        config = load_config()
        print(f"Target: {config.reshuffle.target_playlist}")
    """
    spotify: SpotifyConfig
    reshuffle: ReshuffleConfig
    logging: LoggingConfig


def load_config(config_path: Path | None = None, require_credentials: bool = True) -> Config:
    """
    Load and validate configuration from config.yaml and the environment.

    Args:
        config_path: Optional explicit path to config file.
                     If None, looks for config.yaml in current working directory,
                     and silently continues without it when absent.
        require_credentials: Raise if client_id or client_secret are missing.
                             When False the missing values are left empty and
                             check_credentials() must be called before use.

    Returns:
        Config: A frozen dataclass containing all configuration values.

    Raises:
        ConfigError: If an explicit config file is missing, the YAML is invalid,
                     a field has the wrong type or range, or (with require_credentials)
                     Spotify credentials are found neither in the file nor in
                     the environment.
    """
    load_dotenv()

    explicit = config_path is not None
    if config_path is None:
        config_path = Path.cwd() / CONFIG_FILENAME

    raw_config: dict[str, Any] = {}
    if config_path.exists():
        raw_config = _read_config_file(config_path)
    elif explicit:
        raise ConfigError(
            f"Configuration file not found: {config_path}",
            details={"file_path": str(config_path)}
        )

    _validate_config(raw_config)

    spotify = _parse_spotify_config(raw_config.get("spotify") or {})
    if require_credentials:
        check_credentials(spotify)

    return Config(
        spotify=spotify,
        reshuffle=_parse_reshuffle_config(raw_config.get("reshuffle") or {}),
        logging=_parse_logging_config(raw_config.get("logging") or {})
    )


def _read_config_file(config_path: Path) -> dict[str, Any]:
    """Read and parse the YAML file, returning its top-level mapping."""
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            content = f.read()
    except OSError as e:
        raise ConfigError(
            f"Failed to read configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    try:
        raw_config = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML syntax in configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    # An empty file parses to None
    if raw_config is None:
        return {}

    if not isinstance(raw_config, dict):
        raise ConfigError(
            "Configuration file must contain a YAML dictionary",
            details={"file_path": str(config_path)}
        )

    return raw_config


def _validate_config(raw_config: dict[str, Any]) -> None:
    """
    Validate that every known section, when present, is a dictionary.

    Raises:
        ConfigError: If a section has the wrong type.
    """
    for section in ("spotify", "reshuffle", "logging"):
        value = raw_config.get(section)
        if value is not None and not isinstance(value, dict):
            raise ConfigError(
                f"Section '{section}' must be a dictionary",
                details={"section": section}
            )


def check_credentials(spotify: SpotifyConfig) -> None:
    """
    Make sure the Spotify client id and secret are set.

    Raises:
        ConfigError: If client_id or client_secret is empty.
    """
    if not spotify.client_id:
        raise ConfigError(
            f"Spotify client id missing: set 'spotify.client_id' in config.yaml "
            f"or the {ENV_CLIENT_ID} environment variable",
            details={"field": "spotify.client_id"}
        )

    if not spotify.client_secret:
        raise ConfigError(
            f"Spotify client secret missing: set 'spotify.client_secret' in config.yaml "
            f"or the {ENV_CLIENT_SECRET} environment variable",
            details={"field": "spotify.client_secret"}
        )


def _parse_spotify_config(spotify_section: dict[str, Any]) -> SpotifyConfig:
    """
    Parse the Spotify section, letting the environment override it.

    Missing credentials are left empty, see check_credentials().

    Raises:
        ConfigError: If a field is not a string.
    """
    client_id = os.getenv(ENV_CLIENT_ID) or spotify_section.get("client_id") or ""
    client_secret = os.getenv(ENV_CLIENT_SECRET) or spotify_section.get("client_secret") or ""
    redirect_uri = (
        os.getenv(ENV_REDIRECT_URI)
        or spotify_section.get("redirect_uri")
        or DEFAULT_REDIRECT_URI
    )

    for field, value in (
        ("spotify.client_id", client_id),
        ("spotify.client_secret", client_secret),
        ("spotify.redirect_uri", redirect_uri),
    ):
        if not isinstance(value, str):
            raise ConfigError(
                f"'{field}' must be a string",
                details={"field": field}
            )

    return SpotifyConfig(
        client_id=client_id.strip(),
        client_secret=client_secret.strip(),
        redirect_uri=redirect_uri.strip(),
        cache_path=_parse_optional_path(spotify_section.get("cache_path"), "spotify.cache_path")
    )


def _parse_reshuffle_config(section: dict[str, Any]) -> ReshuffleConfig:
    """
    Parse the reshuffle section, applying defaults for missing fields.

    Raises:
        ConfigError: If a field has the wrong type or is out of range.
    """
    target = section.get("target_playlist")
    if target is not None and not isinstance(target, str):
        raise ConfigError(
            "'reshuffle.target_playlist' must be a string",
            details={"field": "reshuffle.target_playlist"}
        )

    raw_sources = section.get("source_playlists") or []
    if isinstance(raw_sources, str):
        raw_sources = [raw_sources]
    if not isinstance(raw_sources, list) or not all(isinstance(s, str) for s in raw_sources):
        raise ConfigError(
            "'reshuffle.source_playlists' must be a list of playlist IDs or URLs",
            details={"field": "reshuffle.source_playlists"}
        )
    sources = tuple(s.strip() for s in raw_sources if s.strip())

    include_liked = section.get("include_liked", False)
    if not isinstance(include_liked, bool):
        raise ConfigError(
            "'reshuffle.include_liked' must be true or false",
            details={"field": "reshuffle.include_liked", "value": include_liked}
        )

    market = section.get("market", DEFAULT_MARKET)
    if market is not None and (
        not isinstance(market, str) or len(market.strip()) != 2 or not market.strip().isalpha()
    ):
        raise ConfigError(
            "'reshuffle.market' must be a two-letter country code or null",
            details={"field": "reshuffle.market", "value": market}
        )

    batch_size = _parse_bounded_int(
        section.get("batch_size"), "reshuffle.batch_size", MAX_ITEMS_PER_REQUEST, MAX_ITEMS_PER_REQUEST
    )
    search_limit = _parse_bounded_int(
        section.get("search_limit"), "reshuffle.search_limit", MAX_SEARCH_LIMIT, MAX_SEARCH_LIMIT
    )

    return ReshuffleConfig(
        target_playlist=target,
        source_playlists=sources,
        include_liked=include_liked,
        market=market.strip().upper() if market else None,
        batch_size=batch_size,
        search_limit=search_limit
    )


def _parse_logging_config(section: dict[str, Any]) -> LoggingConfig:
    """Parse the logging section."""
    return LoggingConfig(
        directory=_parse_optional_path(section.get("directory"), "logging.directory")
    )


def _parse_bounded_int(value: Any, field: str, default: int, maximum: int) -> int:
    """Validate an optional integer in the range 1..maximum."""
    if value is None:
        return default
    # bool is a subclass of int
    if isinstance(value, bool) or not isinstance(value, int) or not 1 <= value <= maximum:
        raise ConfigError(
            f"'{field}' must be an integer between 1 and {maximum}",
            details={"field": field, "value": value}
        )
    return value


def _parse_optional_path(value: Any, field: str) -> Path | None:
    """Expand ~ and make absolute, or return None when unset."""
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(
            f"'{field}' must be a non-empty string path or null",
            details={"field": field}
        )
    return Path(value.strip()).expanduser().resolve()
