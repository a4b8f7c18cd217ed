"""Pexels implementation of the image fetch abstraction"""

import logging
from urllib.parse import urlparse

import httpx

from blogpost.fetch.base import FetchedImage, ImageNotAvailable, TransientFetchError


logger = logging.getLogger(__name__)

DEFAULT_URL = "https://api.pexels.com/v1"
DEFAULT_NAME = "header.jpg"
ATTRIBUTION_FIELDS = ("photographer", "photographer_url", "url", "alt")


class PexelsClient:
    """Search Pexels for a photo and download its landscape rendition."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_URL,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
        ) -> None:
        self._api_key = api_key
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    def __enter__(self) -> "PexelsClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _get(self, url: str, **kwargs) -> httpx.Response:
        try:
            response = self._client.get(url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransientFetchError(f"{e.response.status_code} from {e.request.url}") from e
        except httpx.HTTPError as e:
            raise TransientFetchError(str(e) or type(e).__name__) from e
        return response

    def search_and_fetch(self, query: str) -> FetchedImage:
        """Download the first Pexels search result for query."""
        logger.info("Searching Pexels for %r", query)
        response = self._get(
            "/search",
            params={"query": query, "per_page": 1},
            headers={"Authorization": self._api_key},
        )
        try:
            data = response.json()
        except ValueError as e:
            raise TransientFetchError(f"malformed search response: {e}") from e
        photos = data.get("photos") if isinstance(data, dict) else None
        if not photos:
            raise ImageNotAvailable(f"no Pexels photo matches {query!r}")

        photo = photos[0] if isinstance(photos[0], dict) else {}
        src = photo.get("src") or {}
        image_url = src.get("landscape") or src.get("original")
        if not image_url:
            raise ImageNotAvailable("Pexels photo has no downloadable rendition")

        # The API key is only sent to the search endpoint, not the image host
        logger.info("Fetching image: %s", image_url)
        image = self._get(image_url)
        return FetchedImage(
            content=image.content,
            suggested_name=suggested_name(image_url),
            attribution=attribution(photo),
        )


def attribution(photo: dict) -> dict[str, str] | None:
    """Credit fields of a Pexels photo record, or None when it has none."""
    credit = {key: str(photo[key]) for key in ATTRIBUTION_FIELDS if photo.get(key)}
    if not credit:
        return None
    credit["source"] = "Pexels"
    return credit


def suggested_name(url: str) -> str:
    """Last path segment of url, or a default when it has none."""
    name = urlparse(url).path.rsplit("/", 1)[-1]
    return name or DEFAULT_NAME
