"""Header image management: images/ listing, active header selection, fetching"""

import logging
import os
import tempfile
import tomllib
from pathlib import Path
from typing import Optional

import tomli_w

from blogpost.core.models import Post
from blogpost.crud import posts
from blogpost.crud.metadata import atomic_write_text
from blogpost.errors import FetchFailed, ImageNotFound, NoKeywords
from blogpost.fetch.base import ImageFetcher, ImageNotAvailable, TransientFetchError


logger = logging.getLogger(__name__)

CREDIT_SUFFIX = ".credit.toml"


def _is_credit(name: str) -> bool:
    return name.endswith(CREDIT_SUFFIX)


def credit_path(post: Post, filename: str) -> Path:
    """Path of the attribution file kept next to an image."""
    return post.images_dir / f"{filename}{CREDIT_SUFFIX}"


def list_images(post: Post) -> list[str]:
    """Return sorted filenames present in images/, whether active or not.

    Hidden files and attribution files are not images.
    """
    if not post.images_dir.is_dir():
        return []
    return sorted(
        p.name for p in post.images_dir.iterdir()
        if p.is_file() and not p.name.startswith(".") and not _is_credit(p.name)
    )


def _image_path(post: Post, filename: str) -> Path:
    """Path of filename in images/; raises ImageNotFound unless it is an image there."""
    if not filename or Path(filename).name != filename or filename in (".", "..") or _is_credit(filename):
        raise ImageNotFound(filename, post.images_dir)
    path = post.images_dir / filename
    if not path.is_file():
        raise ImageNotFound(filename, post.images_dir)
    return path


def read_credit(post: Post, filename: str) -> Optional[dict]:
    """Attribution recorded for filename, or None if there is none or it is unreadable."""
    path = credit_path(post, filename)
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
        logger.warning("Ignoring unreadable credit file %s: %s", path, e)
        return None


def _save_header(post: Post, filename: Optional[str]) -> None:
    """Point header_image at filename and persist.

    On failure the in-memory header_image and updated_at are restored, so the
    post still matches what is on disk.
    """
    meta = post.metadata
    before = (meta.header_image, meta.updated_at)
    meta.header_image = filename
    try:
        posts.save(post)
    except Exception:
        meta.header_image, meta.updated_at = before
        raise


def set_header(post: Post, filename: str) -> Post:
    """Make filename the active header image and persist."""
    _image_path(post, filename)
    _save_header(post, filename)
    logger.info("Header image of %s set to %s", post.slug, filename)
    return post


def remove_header(post: Post) -> Post:
    """Clear the active header image; the file itself is kept."""
    if post.metadata.header_image is None:
        return post
    _save_header(post, None)
    logger.info("Header image of %s cleared", post.slug)
    return post


def delete_image(post: Post, filename: str) -> Post:
    """Delete an image and its credit file, clearing the header reference first.

    The cleared metadata is saved before the unlink, so an interruption can
    leave an unreferenced file but never a header naming a missing one.
    """
    path = _image_path(post, filename)
    if post.metadata.header_image == filename:
        _save_header(post, None)
        logger.info("Header image of %s cleared", post.slug)
    path.unlink()
    credit_path(post, filename).unlink(missing_ok=True)
    logger.info("Deleted image %s", path)
    return post


def unique_filename(directory: Path, name: str) -> str:
    """Return name, or name with -1, -2, ... before the suffix, that is free in directory."""
    candidate = Path(name)
    stem, suffix = candidate.stem, candidate.suffix
    n = 0
    while (directory / candidate.name).exists():
        n += 1
        candidate = Path(f"{stem}-{n}{suffix}")
    return candidate.name


def _write_new_image(directory: Path, name: str, content: bytes) -> Path:
    """Write content under a free name in directory via temp file + rename."""
    fd, temp_path = tempfile.mkstemp(dir=directory, prefix=".fetch.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(content)
        target = directory / unique_filename(directory, name)
        os.replace(temp_path, target)
    except BaseException:
        try:
            os.unlink(temp_path)
        except FileNotFoundError:
            pass
        raise
    return target


def fetch_header(post: Post, fetcher: ImageFetcher) -> Post:
    """Fetch an image matching the post's keywords and make it the header.

    Raises NoKeywords when there is nothing to search by, FetchFailed when the
    fetcher finds nothing or errors; in both cases nothing on disk changes.
    Provider attribution, when given, is stored in <image>.credit.toml.
    """
    keywords = post.metadata.keywords
    if not keywords:
        raise NoKeywords(post.slug)
    query = ", ".join(keywords)

    try:
        image = fetcher.search_and_fetch(query)
    except ImageNotAvailable as e:
        raise FetchFailed(query, str(e) or "no image found", transient=False) from e
    except TransientFetchError as e:
        raise FetchFailed(query, str(e) or "transient error") from e

    name = Path(image.suggested_name).name.lstrip(".") or "header.jpg"
    if _is_credit(name):
        name = "header.jpg"
    post.images_dir.mkdir(exist_ok=True)
    target = _write_new_image(post.images_dir, name, image.content)
    credit = credit_path(post, target.name)
    logger.info("Saved fetched image to %s", target)

    try:
        if image.attribution:
            atomic_write_text(credit, tomli_w.dumps(image.attribution))
        _save_header(post, target.name)
    except Exception:
        target.unlink(missing_ok=True)
        credit.unlink(missing_ok=True)
        raise
    return post
