"""Post repository: create, load, and save posts under a root directory"""

import logging
from datetime import date
from pathlib import Path

from blogpost.core.models import Metadata, Post
from blogpost.core.paths import CONTENT_FILE, IMAGES_DIR, find_post, resolve_path
from blogpost.core.utils.slug import slugify
from blogpost.crud import metadata as store
from blogpost.errors import (
    ContentWriteFailed, DirectoryCreateFailed, InvalidTitle, MetadataCorrupt,
    MetadataWriteFailed, PostAlreadyExists, StoreIOError,
)


logger = logging.getLogger(__name__)


def default_content(title: str) -> str:
    return f"# {title}\n"


def create(root: Path, title: str, today: date | None = None) -> Post:
    """Scaffold a new post: directory, images/, content.md, metadata.toml.

    Never overwrites: raises PostAlreadyExists if the directory exists.
    A failure partway leaves the partial directory in place and raises the
    error naming the failed step (DirectoryCreateFailed, ContentWriteFailed,
    MetadataWriteFailed).
    """
    root = Path(root)
    slug = slugify(title)
    created_at = today or date.today()
    path = resolve_path(root, created_at, slug)
    if path.exists():
        raise PostAlreadyExists(path)

    logger.info("Creating post %r at %s", title, path)
    try:
        path.mkdir(parents=True)
        (path / IMAGES_DIR).mkdir()
    except FileExistsError as e:
        raise PostAlreadyExists(path) from e
    except OSError as e:
        raise DirectoryCreateFailed(path, str(e)) from e

    try:
        (path / CONTENT_FILE).write_text(default_content(title), encoding="utf-8")
    except OSError as e:
        raise ContentWriteFailed(path, str(e)) from e

    metadata = Metadata(title=title, created_at=created_at, updated_at=created_at)
    try:
        store.save(path, metadata)
    except StoreIOError as e:
        raise MetadataWriteFailed(path, e.reason) from e

    return Post(root=root, metadata=metadata)


def load(root: Path, identifier: str) -> Post:
    """Resolve identifier under root and load the post's metadata.

    The located directory is made absolute first, and the post takes its
    root from that location, three levels up. The recomputed post path must match
    the directory the metadata was read from, else MetadataCorrupt.
    """
    path = find_post(Path(root), identifier).resolve()
    metadata = store.load(path)

    post_root = path.parent.parent.parent
    post = Post(root=post_root, metadata=metadata)
    try:
        expected = post.path
    except InvalidTitle as e:
        raise MetadataCorrupt(path, str(e)) from e
    if expected.resolve() != path.resolve():
        raise MetadataCorrupt(
            path, f"title/created_at place this post at {expected}, not {path}"
        )

    header = metadata.header_image
    if header and not (post.images_dir / header).is_file():
        logger.warning("Header image %r of %s is missing from %s", header, post.slug, post.images_dir)
    logger.debug("Loaded post %s from %s", post.slug, path)
    return post


def save(post: Post, today: date | None = None) -> None:
    """Stamp updated_at and persist the post's metadata."""
    store.touch_updated(post.metadata, today)
    store.save(post.path, post.metadata)
    logger.info("Saved post %s", post.slug)
