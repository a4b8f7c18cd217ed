"""Typed errors raised by the core and reported by the command layer"""

from pathlib import Path


class BlogError(Exception):
    """Base exception for every failure the core reports to the command layer."""
    kind: str = "BlogError"

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if "kind" not in cls.__dict__:
            cls.kind = cls.__name__


# --- slug / path resolution ---

class InvalidTitle(BlogError):
    """Raised when a title slugifies to an empty string."""

    def __init__(self, title: str) -> None:
        self.title = title
        super().__init__(f"title {title!r} has no characters usable in a slug")


class PostNotFound(BlogError):
    """Raised when an identifier matches no post under the root."""

    def __init__(self, identifier: str, root: Path) -> None:
        self.identifier = identifier
        self.root = root
        super().__init__(f"no post matching {identifier!r} under {root}")


class AmbiguousIdentifier(BlogError):
    """Raised when a slug matches posts in more than one month."""

    def __init__(self, identifier: str, candidates: list[Path]) -> None:
        self.identifier = identifier
        self.candidates = candidates
        listing = ", ".join(str(c) for c in candidates)
        super().__init__(f"{identifier!r} matches {len(candidates)} posts: {listing}")


# --- metadata store ---

class MetadataMissing(BlogError):
    """Raised when a post directory has no metadata.toml."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"metadata file not found: {path}")


class MetadataCorrupt(BlogError):
    """Raised when metadata.toml cannot be parsed or fails validation."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"invalid metadata in {path}: {reason}")


class StoreIOError(BlogError):
    """Raised when writing or renaming the metadata file fails."""
    kind = "IOError"

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"could not write {path}: {reason}")


# --- post creation ---

class PostAlreadyExists(BlogError):
    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"post directory already exists: {path}")


class PartialCreateError(BlogError):
    """Post creation stopped partway; the directory is left for manual cleanup."""
    kind = "PartialCreateError"
    step = ""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{self.step} failed for {path}: {reason} (partial post left in place)")


class DirectoryCreateFailed(PartialCreateError):
    step = "creating post directory"


class ContentWriteFailed(PartialCreateError):
    step = "writing content.md"


class MetadataWriteFailed(PartialCreateError):
    step = "writing metadata.toml"


class ContentMissing(BlogError):
    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"content file not found: {path}")


# --- collection editors ---

class InvalidValue(BlogError):
    def __init__(self, collection: str, value: str) -> None:
        self.collection = collection
        self.value = value
        super().__init__(f"{collection} value {value!r} is empty after trimming")


class ValueNotFound(BlogError):
    def __init__(self, collection: str, value: str) -> None:
        self.collection = collection
        self.value = value
        super().__init__(f"{collection} {value!r} is not attached to this post")


# --- header images ---

class ImageNotFound(BlogError):
    def __init__(self, filename: str, images_dir: Path) -> None:
        self.filename = filename
        self.images_dir = images_dir
        super().__init__(f"image {filename!r} not found in {images_dir}")


class NoKeywords(BlogError):
    def __init__(self, slug: str) -> None:
        self.slug = slug
        super().__init__(f"post {slug!r} has no keywords to search images with")


class FetchFailed(BlogError):
    """Raised when the image fetcher reports no result or a transient error."""

    def __init__(self, query: str, reason: str, transient: bool = True) -> None:
        self.query = query
        self.reason = reason
        self.transient = transient
        super().__init__(f"fetching an image for {query!r} failed: {reason}")
