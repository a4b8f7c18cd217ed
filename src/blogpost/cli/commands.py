"""CLI command implementations"""

from pathlib import Path
from typing import Annotated, Optional

import typer

from blogpost.config import Settings, load_config
from blogpost.core import header
from blogpost.core.collections import CollectionEditor
from blogpost.core.export import build_post
from blogpost.core.models import Post
from blogpost.crud import posts
from blogpost.errors import BlogError
from blogpost.fetch.pexels import PexelsClient


RootOpt = Annotated[Optional[str], typer.Option("--root", help="Posts root directory (or set BLOG_ROOT_DIR)")]
PostArg = Annotated[str, typer.Argument(help="Post path, slug, or title")]


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _report(e: BlogError) -> None:
    """Print a core error as '<Kind>: <message>' and exit 1."""
    _fail(f"{e.kind}: {e}")


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))


def _load(root: Optional[str], identifier: str) -> Post:
    settings = _settings(overrides={"root_dir": root})
    try:
        return posts.load(Path(settings.root_dir), identifier)
    except BlogError as e:
        _report(e)


def new_cmd(
    title: Annotated[str, typer.Argument(help="Title of the new post")],
    root: RootOpt = None,
    ):
    """Create a new post directory with content.md, metadata.toml and images/."""
    settings = _settings(overrides={"root_dir": root})
    try:
        post = posts.create(Path(settings.root_dir), title)
    except BlogError as e:
        _report(e)
    typer.echo(f"Created post '{post.metadata.title}' at {post.path}")


def show_cmd(post: PostArg, root: RootOpt = None):
    """Print a post's metadata."""
    p = _load(root, post)
    meta = p.metadata
    typer.echo(f"title:        {meta.title}")
    typer.echo(f"slug:         {p.slug}")
    typer.echo(f"path:         {p.path}")
    typer.echo(f"created_at:   {meta.created_at.isoformat()}")
    typer.echo(f"updated_at:   {meta.updated_at.isoformat()}")
    typer.echo(f"tags:         {', '.join(meta.tags) or '-'}")
    typer.echo(f"keywords:     {', '.join(meta.keywords) or '-'}")
    typer.echo(f"header_image: {meta.header_image or '-'}")


def build_cmd(
    post: PostArg,
    root: RootOpt = None,
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory inside the post")] = None,
    ):
    """Render content.md to <post>/dist/index.html and copy images."""
    settings = _settings(overrides={"root_dir": root, "output_dir": out})
    try:
        p = posts.load(Path(settings.root_dir), post)
        index = build_post(p, settings.output_dir, settings.parser_config)
    except BlogError as e:
        _report(e)
    except OSError as e:
        _fail("Build failed", e)
    typer.echo(f"Built {index}")


# --- tags / keywords ---

def collection_app(editor: CollectionEditor, help_text: str) -> typer.Typer:
    """Build an add/remove/list sub-app for one metadata collection."""
    sub = typer.Typer(name=editor.name, no_args_is_help=True, help=help_text)
    plural = f"{editor.name}s"

    def _apply(post: str, root: Optional[str], values: list[str], op) -> None:
        p = _load(root, post)
        before = editor.list(p)
        try:
            for value in values:
                op(p, value)
        except BlogError as e:
            _report(e)
        if editor.list(p) == before:
            typer.echo(f"No {plural} changed on {p.slug}")
            return
        try:
            posts.save(p)
        except BlogError as e:
            _report(e)
        typer.echo(f"{plural.capitalize()} of {p.slug}: {', '.join(editor.list(p)) or '-'}")

    @sub.command("add")
    def add_cmd(
        post: PostArg,
        values: Annotated[list[str], typer.Argument(help=f"{plural.capitalize()} to add")],
        root: RootOpt = None,
        ):
        """Attach values to the post; values already present are left alone."""
        _apply(post, root, values, editor.add)

    @sub.command("remove")
    def remove_cmd(
        post: PostArg,
        values: Annotated[list[str], typer.Argument(help=f"{plural.capitalize()} to remove")],
        root: RootOpt = None,
        ):
        """Detach values from the post; every value must be present."""
        _apply(post, root, values, editor.remove)

    @sub.command("list")
    def list_cmd(post: PostArg, root: RootOpt = None):
        """List values in insertion order."""
        p = _load(root, post)
        values = editor.list(p)
        if not values:
            typer.echo(f"This post has no {plural}")
            return
        for value in values:
            typer.echo(f"* {value}")

    return sub


# --- header images ---

def _credit_line(p: Post, name: str) -> str:
    credit = header.read_credit(p, name)
    if not credit or not credit.get("photographer"):
        return ""
    source = f" on {credit['source']}" if credit.get("source") else ""
    return f"  (photo by {credit['photographer']}{source})"


def header_list_cmd(post: PostArg, root: RootOpt = None):
    """List files in the post's images/ directory; the active header is starred."""
    p = _load(root, post)
    names = header.list_images(p)
    if not names:
        typer.echo("This post has no images")
        return
    for name in names:
        mark = "*" if name == p.metadata.header_image else " "
        typer.echo(f"{mark} {name}{_credit_line(p, name)}")


def header_set_cmd(
    post: PostArg,
    filename: Annotated[str, typer.Argument(help="Image filename inside images/")],
    root: RootOpt = None,
    ):
    """Make an existing image the header image."""
    p = _load(root, post)
    try:
        header.set_header(p, filename)
    except BlogError as e:
        _report(e)
    typer.echo(f"Header image of {p.slug} set to {filename}")


def header_remove_cmd(post: PostArg, root: RootOpt = None):
    """Unset the header image (the file is kept)."""
    p = _load(root, post)
    try:
        header.remove_header(p)
    except BlogError as e:
        _report(e)
    typer.echo(f"Header image of {p.slug} cleared")


def header_delete_cmd(
    post: PostArg,
    filename: Annotated[str, typer.Argument(help="Image filename inside images/")],
    root: RootOpt = None,
    ):
    """Delete an image file, unsetting it first if it is the header."""
    p = _load(root, post)
    try:
        header.delete_image(p, filename)
    except BlogError as e:
        _report(e)
    except OSError as e:
        _fail(f"Could not delete {filename}", e)
    typer.echo(f"Deleted {filename} from {p.slug}")


def header_fetch_cmd(post: PostArg, root: RootOpt = None):
    """Fetch a header image from Pexels using the post's keywords."""
    settings = _settings(overrides={"root_dir": root})
    if not settings.pexels_api_key:
        _fail("No Pexels API key configured; set PEXELS_API_KEY or BLOG_PEXELS_API_KEY")
    p = _load(root, post)
    try:
        with PexelsClient(settings.pexels_api_key, settings.pexels_url, settings.fetch_timeout) as client:
            header.fetch_header(p, client)
    except BlogError as e:
        _report(e)
    except OSError as e:
        _fail("Could not store the fetched image", e)
    typer.echo(f"Header image of {p.slug} set to {p.metadata.header_image}{_credit_line(p, p.metadata.header_image)}")
