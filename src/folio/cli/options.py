# ABOUTME: Shared Click options for Folio CLI commands.
# ABOUTME: Provides reusable decorators for the database, owner, image bounds, and HTTP timeout.

import getpass
from pathlib import Path

import click

from folio.db.connection import DEFAULT_DB_PATH
from folio.media.normalizer import DEFAULT_MAX_HEIGHT, DEFAULT_MAX_WIDTH, DEFAULT_QUALITY
from folio.metadata.http import DEFAULT_TIMEOUT


def _default_owner() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "local"


db_option = click.option(
    "--db",
    "db_path",
    type=click.Path(path_type=Path),
    default=None,
    help=f"Path to library database (default: {DEFAULT_DB_PATH})",
)

owner_option = click.option(
    "--owner",
    "owner_id",
    envvar="FOLIO_OWNER",
    default=_default_owner,
    show_default="current user",
    help="Owner key recorded on new books and checked on changes (env: FOLIO_OWNER).",
)

timeout_option = click.option(
    "--timeout",
    type=click.FloatRange(min=1.0),
    default=DEFAULT_TIMEOUT,
    show_default=True,
    help="Seconds before an Open Library request is abandoned.",
)


def image_options(func):  # type: ignore[no-untyped-def]
    """Attach --max-width, --max-height and --quality to a command."""
    func = click.option(
        "--quality",
        type=click.IntRange(1, 100),
        default=DEFAULT_QUALITY,
        show_default=True,
        help="JPEG/WebP encoding quality.",
    )(func)
    func = click.option(
        "--max-height",
        type=click.IntRange(min=1),
        default=DEFAULT_MAX_HEIGHT,
        show_default=True,
        help="Photos taller than this are scaled down.",
    )(func)
    func = click.option(
        "--max-width",
        type=click.IntRange(min=1),
        default=DEFAULT_MAX_WIDTH,
        show_default=True,
        help="Photos wider than this are scaled down.",
    )(func)
    return func
