"""Post directory layout: path derivation and identifier lookup"""

import glob
import logging
from datetime import date
from pathlib import Path

from blogpost.core.utils.slug import slugify
from blogpost.errors import AmbiguousIdentifier, InvalidTitle, PostNotFound


logger = logging.getLogger(__name__)

METADATA_FILE = "metadata.toml"
CONTENT_FILE = "content.md"
IMAGES_DIR = "images"


def resolve_path(root: Path, created_at: date, slug: str) -> Path:
    """Return root/YYYY/MM/slug for a post. Pure; touches no files."""
    return Path(root) / f"{created_at.year:04d}" / f"{created_at.month:02d}" / slug


def _is_post_dir(path: Path, explicit: bool) -> bool:
    """A directory holding metadata.toml, or any directory named by an explicit path."""
    return path.is_dir() and (explicit or (path / METADATA_FILE).is_file())


def _looks_like_path(identifier: str) -> bool:
    p = Path(identifier)
    return p.is_absolute() or len(p.parts) > 1 or identifier in (".", "..")


def find_post(root: Path, identifier: str) -> Path:
    """Locate a post directory from a path or a slug/title.

    A path (absolute, relative to the working directory, or relative to root)
    is accepted when it holds a metadata.toml, or whenever it is spelled as a
    path (absolute, ".", or with a separator) so a missing metadata file is
    reported by the loader. Anything else is slugified and matched against
    root/YYYY/MM/<slug>.
    Raises PostNotFound on no match, AmbiguousIdentifier on several.
    """
    root = Path(root)
    explicit = _looks_like_path(identifier)
    for candidate in (Path(identifier), root / identifier):
        if _is_post_dir(candidate, explicit):
            logger.debug("Resolved %r as a post path: %s", identifier, candidate)
            return candidate

    try:
        slug = slugify(identifier)
    except InvalidTitle as e:
        raise PostNotFound(identifier, root) from e

    pattern = str(Path(glob.escape(str(root))) / "[0-9][0-9][0-9][0-9]" / "[0-9][0-9]" / slug)
    matches = sorted(Path(p) for p in glob.glob(pattern) if Path(p).is_dir())

    if not matches:
        raise PostNotFound(identifier, root)
    if len(matches) > 1:
        raise AmbiguousIdentifier(identifier, matches)
    logger.debug("Resolved %r as slug %r: %s", identifier, slug, matches[0])
    return matches[0]
