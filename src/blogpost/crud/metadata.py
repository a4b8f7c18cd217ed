"""Metadata persistence: metadata.toml load, atomic save, updated_at stamping"""

import logging
import os
import tempfile
import tomllib
from datetime import date
from pathlib import Path
from typing import Any

import tomli_w
from pydantic import ValidationError

from blogpost.core.models import Metadata
from blogpost.core.paths import METADATA_FILE
from blogpost.errors import MetadataCorrupt, MetadataMissing, StoreIOError


logger = logging.getLogger(__name__)


def _format_errors(e: ValidationError) -> str:
    """Flatten pydantic errors into 'field: message' pairs."""
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
        for err in e.errors()
    )


def load(path: Path) -> Metadata:
    """Read and validate path/metadata.toml.

    Raises MetadataMissing if the file is absent, MetadataCorrupt if it is not
    valid TOML or fails schema validation.
    """
    meta_path = Path(path) / METADATA_FILE
    try:
        raw = meta_path.read_bytes()
    except FileNotFoundError as e:
        raise MetadataMissing(meta_path) from e
    except OSError as e:
        raise MetadataCorrupt(meta_path, f"unreadable: {e}") from e

    try:
        data = tomllib.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
        raise MetadataCorrupt(meta_path, str(e)) from e

    try:
        return Metadata.model_validate(data)
    except ValidationError as e:
        raise MetadataCorrupt(meta_path, _format_errors(e)) from e


def dump(metadata: Metadata) -> str:
    """Serialize metadata to TOML in field order; unset header_image is omitted."""
    data: dict[str, Any] = metadata.model_dump(exclude_none=True)
    return tomli_w.dumps(data)


def atomic_write_text(target: Path, content: str) -> None:
    """Write via a temp file in the same directory, then rename over target."""
    fd, temp_path = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_path, target)
    except BaseException:
        try:
            os.unlink(temp_path)
        except FileNotFoundError:
            pass
        raise


def save(path: Path, metadata: Metadata) -> None:
    """Atomically write metadata to path/metadata.toml.

    Raises StoreIOError on failure; an existing file is left untouched.
    """
    meta_path = Path(path) / METADATA_FILE
    content = dump(metadata)
    try:
        atomic_write_text(meta_path, content)
    except OSError as e:
        raise StoreIOError(meta_path, str(e)) from e
    logger.debug("Saved metadata to %s", meta_path)


def touch_updated(metadata: Metadata, today: date | None = None) -> Metadata:
    """Stamp updated_at with today's date (or the given one) and return metadata."""
    metadata.updated_at = today or date.today()
    return metadata
