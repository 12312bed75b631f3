"""
Command-line interface for spot-reshuffle.

This module implements the CLI using Click. rich-click is used for the
output colors.

Command:
    spot-reshuffle -t <name> -s <playlist> [-s <playlist>...] [--include-liked]

Options:
    -t, --target-playlist <name>     Playlist to overwrite (created if missing)
    -s, --source-playlists <ids>     Source playlists, comma separated and/or repeated
    --include-liked                  Add the user's Liked Songs to the sources
    --market <CC>                    Country code for track relinking
    --batch-size <n>                 Tracks per add/remove request (1-100)
    --cache-path <file>              Where the OAuth token is cached
    --config <file>                  Configuration file (default: ./config.yaml)
    -v, --verbose                    Debug output on the console

Usage:
    # Merge two playlists into "Reshuffle"
    spot-reshuffle -t "Reshuffle" -s 37i9dQZF1DXcBWIGoYBM5M,37i9dQZF1DX0XUsuxWHRQd

    # Liked Songs only
    spot-reshuffle -t "Liked Shuffle" --include-liked

Configuration:
    Defaults come from config.yaml (optional) and credentials from the
    environment or a .env file (SPOTIPY_CLIENT_ID, SPOTIPY_CLIENT_SECRET,
    SPOTIPY_REDIRECT_URI). Command-line options override the file.

Exit codes:
    0   success (including "no valid tracks found")
    1   configuration error or unexpected error
    2   usage error
    3   Spotify error
    4   other spot-reshuffle error
    130 interrupted
"""

import sys
from pathlib import Path
from typing import Optional

import rich_click as click

# Configure rich-click for better help formatting
click.rich_click.USE_RICH_MARKUP = True
click.rich_click.STYLE_ERRORS_SUGGESTION = "magenta italic"
click.rich_click.ERRORS_SUGGESTION = ""
click.rich_click.MAX_WIDTH = 100
click.rich_click.OPTION_GROUPS = {
    "cli": [
        {
            "name": "Playlists",
            "options": ["--target-playlist", "--source-playlists", "--include-liked"],
        },
        {
            "name": "Spotify Options",
            "options": ["--market", "--batch-size", "--cache-path"],
        },
        {
            "name": "Info",
            "options": ["--config", "--verbose", "--version", "--help"],
        },
    ],
}

from spot_reshuffle import __version__
from spot_reshuffle.core import (
    Config,
    ConfigError,
    SpotifyError,
    SpotReshuffleError,
    check_credentials,
    get_logger,
    load_config,
    setup_logging,
    shutdown_logging,
)
from spot_reshuffle.pipeline import ReshuffleOptions, RunResult, run_reshuffle
from spot_reshuffle.spotify import SpotifyClient

logger = get_logger(__name__)


def _validate_market(ctx: click.Context, param: click.Parameter, value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    market = value.strip().upper()
    if len(market) != 2 or not market.isalpha():
        raise click.BadParameter("must be a two-letter country code, e.g. US")
    return market


@click.command()
@click.option(
    "-t", "--target-playlist",
    type=str,
    default=None,
    metavar="<name>",
    help="Name of the playlist to overwrite (created if missing)"
)
@click.option(
    "-s", "--source-playlists",
    type=str,
    multiple=True,
    metavar="<id[,id...]>",
    help="Source playlist IDs, URIs or URLs"
)
@click.option(
    "--include-liked",
    is_flag=True,
    help="Include the user's Liked Songs"
)
@click.option(
    "--market",
    type=str,
    default=None,
    callback=_validate_market,
    metavar="<CC>",
    help="Country code for track relinking (default: US)"
)
@click.option(
    "--batch-size",
    type=click.IntRange(1, 100),
    default=None,
    metavar="<1-100>",
    help="Tracks per add/remove request"
)
@click.option(
    "--cache-path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    metavar="<file>",
    help="OAuth token cache file"
)
@click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    metavar="<config.yaml>",
    help="Configuration file"
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Show debug output"
)
@click.option(
    "--version",
    is_flag=True,
    help="Show version and exit."
)
@click.pass_context
def cli(
    ctx: click.Context,
    target_playlist: Optional[str],
    source_playlists: tuple[str, ...],
    include_liked: bool,
    market: Optional[str],
    batch_size: Optional[int],
    cache_path: Optional[Path],
    config_path: Optional[Path],
    verbose: bool,
    version: bool
) -> None:
    """
    spot-reshuffle: Merge, deduplicate and shuffle Spotify playlists.

    Reads every track of the source playlists (and optionally your Liked
    Songs), removes duplicates, shuffles them and writes the result into
    the target playlist, replacing its previous content.

    \b
    EXAMPLES:
        spot-reshuffle -t "Reshuffle" -s 37i9dQZF1DXcBWIGoYBM5M
        spot-reshuffle -t "Reshuffle" -s id1,id2 -s id3 --include-liked
        spot-reshuffle -t "Liked Shuffle" --include-liked --market IT
    """
    if version:
        click.echo(f"spot-reshuffle {__version__}")
        ctx.exit(0)

    try:
        # Credentials are checked after the usage checks below
        config = load_config(config_path, require_credentials=False)
    except ConfigError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        sys.exit(1)

    options = _build_options(
        config,
        target_playlist=target_playlist,
        source_playlists=source_playlists,
        include_liked=include_liked,
        market=market,
        batch_size=batch_size
    )

    _run(config, options, cache_path=cache_path or config.spotify.cache_path, verbose=verbose)


def split_source_playlists(values: tuple[str, ...]) -> tuple[str, ...]:
    """
    Flatten repeated and comma separated -s values.

    Example:
        split_source_playlists(("a,b", " c ", "")) -> ("a", "b", "c")
    """
    return tuple(
        part.strip()
        for value in values
        for part in value.split(",")
        if part.strip()
    )


def _build_options(
    config: Config,
    target_playlist: Optional[str],
    source_playlists: tuple[str, ...],
    include_liked: bool,
    market: Optional[str],
    batch_size: Optional[int]
) -> ReshuffleOptions:
    """
    Merge command-line options over the reshuffle section of the config.

    Raises:
        click.UsageError: If no source is selected or the target name is empty.
    """
    defaults = config.reshuffle

    sources = split_source_playlists(source_playlists) or defaults.source_playlists
    liked = include_liked or defaults.include_liked
    name = target_playlist if target_playlist is not None else defaults.target_playlist

    if not sources and not liked:
        raise click.UsageError(
            "You must provide at least one source playlist (-s) or use --include-liked"
        )
    if not name or not name.strip():
        raise click.UsageError("Target playlist name (-t) cannot be empty")

    return ReshuffleOptions(
        target_playlist_name=name,
        source_playlists=sources,
        include_liked=liked,
        market=market or defaults.market,
        batch_size=batch_size or defaults.batch_size,
        search_limit=defaults.search_limit
    )


def _run(config: Config, options: ReshuffleOptions, cache_path: Optional[Path], verbose: bool) -> None:
    """
    Execute a reshuffle run and map failures to exit codes.

    Raises:
        SystemExit: On fatal errors (with appropriate exit code).
    """
    try:
        log_file = setup_logging(config.logging.directory, verbose=verbose)
        logger.info("spot-reshuffle starting")
        if log_file is not None:
            logger.debug(f"Logging to {log_file}")

        # Fail on bad options before opening the browser for authorization
        options.validate()
        check_credentials(config.spotify)

        SpotifyClient.init(
            client_id=config.spotify.client_id,
            client_secret=config.spotify.client_secret,
            redirect_uri=config.spotify.redirect_uri,
            cache_path=cache_path
        )

        result = run_reshuffle(options)
        _print_summary(result)

        logger.info("spot-reshuffle completed successfully")

    except ConfigError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        sys.exit(1)

    except SpotifyError as e:
        click.echo(f"Spotify error: {e.message}", err=True)
        if e.is_auth_error:
            click.echo(
                "Check SPOTIPY_CLIENT_ID, SPOTIPY_CLIENT_SECRET and SPOTIPY_REDIRECT_URI "
                "(or the spotify section of config.yaml)",
                err=True
            )
        elif e.is_rate_limit:
            click.echo("Spotify rate limit reached, try again later", err=True)
        logger.error(f"Spotify error: {e.message}", exc_info=True)
        sys.exit(3)

    except SpotReshuffleError as e:
        click.echo(f"Error: {e.message}", err=True)
        logger.error(f"Error: {e.message}", exc_info=True)
        sys.exit(4)

    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        logger.info("Interrupted by user")
        sys.exit(130)

    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        logger.exception("Unexpected error")
        sys.exit(1)

    finally:
        shutdown_logging()


def _print_summary(result: RunResult) -> None:
    """Log the run statistics."""
    logger.info("=" * 60)
    logger.info("RESHUFFLE SUMMARY")
    logger.info("=" * 60)
    logger.info(f"Tracks retrieved:    {result.retrieved}")
    if result.rejected_from_playlists or result.rejected_from_liked:
        logger.info(f"Invalid skipped:     {result.rejected_from_playlists + result.rejected_from_liked}")
    logger.info(f"Duplicates removed:  {result.duplicates_removed}")
    logger.info(f"Unique tracks:       {result.unique}")
    if result.playlist_id is not None:
        logger.info(f"Removed from target: {result.removed_from_target}")
        logger.info(f"Tracks written:      {result.written}")
        logger.info(f"Playlist created:    {'yes' if result.created else 'no'}")
    logger.info("=" * 60)


def main() -> None:
    """
    Entry point for the CLI.

    This function is called when running `spot-reshuffle` from the command line.
    """
    cli()


if __name__ == "__main__":
    main()
