"""Abstractions for header image fetch providers"""

from dataclasses import dataclass
from typing import Optional, Protocol


class ImageNotAvailable(Exception):
    """The provider answered, but has no image for the query."""


class TransientFetchError(Exception):
    """The provider could not be reached or returned an error response."""


@dataclass
class FetchedImage:
    """Downloaded image bytes plus the provider's suggested filename.

    attribution holds credit fields (photographer, source page) when the
    provider supplies them.
    """
    content:        bytes
    suggested_name: str
    attribution:    Optional[dict[str, str]] = None


class ImageFetcher(Protocol):
    """Protocol for providers that search and download one image by query."""

    def search_and_fetch(self, query: str) -> FetchedImage:
        """Return an image for query or raise ImageNotAvailable / TransientFetchError."""
