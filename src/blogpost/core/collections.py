"""Tag and keyword editing over named string collections in post metadata"""

import logging
from dataclasses import dataclass
from typing import Callable

from blogpost.core.models import Metadata, Post
from blogpost.errors import InvalidValue, ValueNotFound


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CollectionEditor:
    """Add/remove/list over one ordered, deduplicated string list of Metadata.

    Edits are in memory only; the caller persists the post afterwards.
    """
    name:    str
    get_all: Callable[[Metadata], list[str]]
    set_all: Callable[[Metadata, list[str]], None]

    def normalize(self, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise InvalidValue(self.name, value)
        return stripped

    def add(self, post: Post, value: str) -> Post:
        """Append value unless already present (adding twice is a no-op)."""
        value = self.normalize(value)
        values = self.get_all(post.metadata)
        if value in values:
            logger.debug("%s %r already on %s", self.name, value, post.slug)
            return post
        logger.info("Adding %s %r to %s", self.name, value, post.slug)
        self.set_all(post.metadata, [*values, value])
        return post

    def remove(self, post: Post, value: str) -> Post:
        """Remove value; raises ValueNotFound if it is not present."""
        value = self.normalize(value)
        values = self.get_all(post.metadata)
        if value not in values:
            raise ValueNotFound(self.name, value)
        logger.info("Removing %s %r from %s", self.name, value, post.slug)
        self.set_all(post.metadata, [v for v in values if v != value])
        return post

    def list(self, post: Post) -> list[str]:
        """Return a copy of the values in insertion order."""
        return list(self.get_all(post.metadata))


def _setter(field: str) -> Callable[[Metadata, list[str]], None]:
    def set_all(metadata: Metadata, values: list[str]) -> None:
        setattr(metadata, field, values)
    return set_all


tags = CollectionEditor("tag", lambda m: m.tags, _setter("tags"))
keywords = CollectionEditor("keyword", lambda m: m.keywords, _setter("keywords"))
