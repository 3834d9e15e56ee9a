# ABOUTME: CLI package for Folio, built on Click.
# ABOUTME: Defines the root command group, configures logging, and registers subcommands.

import logging

import click
from rich.logging import RichHandler

from folio.cli.commands import (
    add_cmd,
    genres_cmd,
    info_cmd,
    isbn_cmd,
    ls_cmd,
    photo_cmd,
    rm_cmd,
    update_cmd,
)


@click.group()
@click.version_option(package_name="folio")
@click.option("-v", "--verbose", count=True, help="Show log output (-vv for debug).")
def cli(verbose: int) -> None:
    """Folio - catalog books by ISBN or by hand, with cover photos."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG if verbose > 1 else logging.INFO,
            format="%(message)s",
            datefmt="[%X]",
            handlers=[RichHandler(rich_tracebacks=False, show_path=False)],
        )


cli.add_command(add_cmd.add)
cli.add_command(isbn_cmd.add_isbn)
cli.add_command(isbn_cmd.lookup)
cli.add_command(update_cmd.update)
cli.add_command(rm_cmd.rm)
cli.add_command(ls_cmd.ls)
cli.add_command(info_cmd.info)
cli.add_command(photo_cmd.photo)
cli.add_command(genres_cmd.genres)
