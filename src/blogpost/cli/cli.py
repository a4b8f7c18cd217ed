"""CLI entrypoint: Typer app definition, logging setup and command registration"""

import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from blogpost.cli.commands import (
    build_cmd, collection_app, header_delete_cmd, header_fetch_cmd,
    header_list_cmd, header_remove_cmd, header_set_cmd, new_cmd, show_cmd,
)
from blogpost.config import load_config
from blogpost.core import collections


app = typer.Typer(name="blog", no_args_is_help=True, add_completion=False, help="A CLI blog post manager")


def configure_logging(level: str) -> None:
    """Route log records to stderr through rich."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output")] = False,
    ):
    """Manage blog posts stored as <root>/YYYY/MM/<slug>/ directories."""
    if verbose:
        configure_logging("DEBUG")
        return
    try:
        configure_logging(load_config().log_level)
    except ValueError:
        # Config errors are reported by the command itself.
        configure_logging("WARNING")


app.command(name="new")(new_cmd)
app.command(name="show")(show_cmd)
app.command(name="build")(build_cmd)

app.add_typer(collection_app(collections.tags, "Manage tags of a post"), name="tag")
app.add_typer(collection_app(collections.keywords, "Manage keywords of a post"), name="keyword")

header_app = typer.Typer(name="header", no_args_is_help=True, help="Manage header images of a post")
header_app.command(name="list")(header_list_cmd)
header_app.command(name="set")(header_set_cmd)
header_app.command(name="remove")(header_remove_cmd)
header_app.command(name="delete")(header_delete_cmd)
header_app.command(name="fetch")(header_fetch_cmd)
app.add_typer(header_app, name="header")
