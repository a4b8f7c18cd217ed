"""Root test configuration: isolated working directory, root tree, and fake fetchers"""

from datetime import date

import pytest

from blogpost.crud import posts
from blogpost.fetch.base import FetchedImage, ImageNotAvailable, TransientFetchError


_ENV_VARS = [
    "PEXELS_API_KEY", "BLOG_ROOT_DIR", "BLOG_PEXELS_API_KEY", "BLOG_PEXELS_URL",
    "BLOG_FETCH_TIMEOUT", "BLOG_OUTPUT_DIR", "BLOG_PARSER_CONFIG", "BLOG_LOG_LEVEL",
]

CREATED = date(2024, 3, 5)


@pytest.fixture(autouse=True)
def isolate(tmp_path, monkeypatch):
    """Run each test from a clean tmp directory with no blog env vars set."""
    monkeypatch.chdir(tmp_path)
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(name="root")
def root_fixture(tmp_path):
    """Empty posts root directory."""
    r = tmp_path / "blog"
    r.mkdir()
    return r


@pytest.fixture(name="post")
def post_fixture(root):
    """A freshly created post dated 2024-03-05."""
    return posts.create(root, "Hello, World!", today=CREATED)


class FakeFetcher:
    """Records queries and returns a fixed image, or raises the configured error."""

    def __init__(self, content: bytes = b"\xff\xd8jpeg", name: str = "img.jpg", error: Exception = None, attribution: dict = None):
        self.content = content
        self.attribution = attribution
        self.name = name
        self.error = error
        self.queries: list[str] = []

    def search_and_fetch(self, query: str) -> FetchedImage:
        self.queries.append(query)
        if self.error:
            raise self.error
        return FetchedImage(content=self.content, suggested_name=self.name, attribution=self.attribution)


@pytest.fixture(name="fetcher")
def fetcher_fixture():
    return FakeFetcher()


@pytest.fixture(name="failing_fetcher")
def failing_fetcher_fixture():
    return FakeFetcher(error=TransientFetchError("503 from upstream"))


@pytest.fixture(name="empty_fetcher")
def empty_fetcher_fixture():
    return FakeFetcher(error=ImageNotAvailable("no results"))


@pytest.fixture(name="make_fetcher")
def make_fetcher_fixture():
    """Factory for fetchers with custom bytes, name, error, or attribution."""
    return FakeFetcher
