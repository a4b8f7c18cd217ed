"""Post and metadata models"""

from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from blogpost.core.paths import CONTENT_FILE, IMAGES_DIR, resolve_path
from blogpost.core.utils.slug import slugify


class Metadata(BaseModel):
    """Persisted post metadata; field order is the on-disk key order."""
    model_config = ConfigDict(extra="allow")

    title:        str = Field(..., min_length=1)
    created_at:   date
    updated_at:   Optional[date] = Field(default=None, description="Defaults to created_at")
    tags:         list[str] = Field(default_factory=list)
    keywords:     list[str] = Field(default_factory=list)
    header_image: Optional[str] = Field(default=None, description="Filename inside images/")

    @field_validator("tags", "keywords")
    @classmethod
    def _dedupe(cls, values: list[str]) -> list[str]:
        """Collapse duplicates, keeping first-seen order."""
        return list(dict.fromkeys(values))

    @model_validator(mode="after")
    def _default_updated_at(self) -> "Metadata":
        if self.updated_at is None:
            self.updated_at = self.created_at
        return self


@dataclass
class Post:
    """A blog post: a metadata document positioned under a root directory.

    The directory is never stored; it is recomputed from
    (root, created_at, slug) as root/YYYY/MM/slug.
    """
    root:     Path
    metadata: Metadata

    @property
    def slug(self) -> str:
        return slugify(self.metadata.title)

    @property
    def path(self) -> Path:
        return resolve_path(self.root, self.metadata.created_at, self.slug)

    @property
    def images_dir(self) -> Path:
        return self.path / IMAGES_DIR

    @property
    def content_path(self) -> Path:
        return self.path / CONTENT_FILE
