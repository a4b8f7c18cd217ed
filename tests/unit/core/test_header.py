"""Unit tests for core/header.py"""

from datetime import date

import pytest

from blogpost.core import header
from blogpost.crud import metadata as store
from blogpost.crud import posts
from blogpost.errors import FetchFailed, ImageNotFound, NoKeywords, StoreIOError


def _add_image(post, name: str, data: bytes = b"img") -> None:
    (post.images_dir / name).write_bytes(data)


# --- list_images ---

def test_list_images_sorted(post):
    for name in ("b.png", "a.jpg"):
        _add_image(post, name)
    assert header.list_images(post) == ["a.jpg", "b.png"]


def test_list_images_independent_of_header(post):
    """Listing reflects files on disk, not the metadata reference."""
    _add_image(post, "a.jpg")
    header.set_header(post, "a.jpg")
    _add_image(post, "b.jpg")
    assert header.list_images(post) == ["a.jpg", "b.jpg"]


def test_list_images_skips_dirs_and_dotfiles(post):
    _add_image(post, "a.jpg")
    _add_image(post, ".fetch.123.tmp")
    (post.images_dir / "nested").mkdir()
    assert header.list_images(post) == ["a.jpg"]


def test_list_images_without_directory(post):
    post.images_dir.rmdir()
    assert header.list_images(post) == []


# --- set_header ---

def test_set_header_persists(root, post):
    _add_image(post, "a.jpg")
    header.set_header(post, "a.jpg")
    assert posts.load(root, "hello-world").metadata.header_image == "a.jpg"


@pytest.mark.parametrize("name", ["missing.jpg", "../metadata.toml", "", "nested"])
def test_set_header_rejects_unknown(post, name):
    """Names that are not files directly in images/ raise ImageNotFound."""
    (post.images_dir / "nested").mkdir()
    with pytest.raises(ImageNotFound):
        header.set_header(post, name)
    assert post.metadata.header_image is None


# --- remove_header ---

def test_remove_header_keeps_file(root, post):
    _add_image(post, "a.jpg")
    header.set_header(post, "a.jpg")
    header.remove_header(post)
    assert posts.load(root, "hello-world").metadata.header_image is None
    assert (post.images_dir / "a.jpg").exists()


def test_remove_header_idempotent(root, post):
    """Clearing an unset header is a no-op and does not rewrite metadata."""
    before = (post.path / "metadata.toml").read_text()
    header.remove_header(post)
    header.remove_header(post)
    assert post.metadata.header_image is None
    assert (post.path / "metadata.toml").read_text() == before


# --- delete_image ---

def test_delete_active_header_clears_reference(root, post):
    """Deleting the header image leaves no dangling reference."""
    _add_image(post, "a.jpg")
    header.set_header(post, "a.jpg")
    header.delete_image(post, "a.jpg")
    assert post.metadata.header_image is None
    assert posts.load(root, "hello-world").metadata.header_image is None
    assert not (post.images_dir / "a.jpg").exists()


def test_delete_other_image_keeps_header(root, post):
    _add_image(post, "a.jpg")
    _add_image(post, "b.jpg")
    header.set_header(post, "a.jpg")
    header.delete_image(post, "b.jpg")
    assert posts.load(root, "hello-world").metadata.header_image == "a.jpg"
    assert header.list_images(post) == ["a.jpg"]


def test_delete_missing_image(post):
    with pytest.raises(ImageNotFound):
        header.delete_image(post, "nope.jpg")


def test_delete_keeps_file_when_metadata_save_fails(post, monkeypatch):
    """If clearing the reference cannot be saved, the file is not deleted."""
    _add_image(post, "a.jpg")
    header.set_header(post, "a.jpg")

    def _boom(path, metadata):
        raise StoreIOError(path, "disk full")
    monkeypatch.setattr(store, "save", _boom)

    with pytest.raises(StoreIOError):
        header.delete_image(post, "a.jpg")
    assert (post.images_dir / "a.jpg").exists()


# --- fetch_header ---

def test_fetch_header_collision_safe_name(root, post, fetcher):
    """An existing img.jpg makes the fetched file img-1.jpg, which becomes the header."""
    post.metadata.keywords = ["ocean", "sunset"]
    _add_image(post, "img.jpg", b"old")

    header.fetch_header(post, fetcher)

    assert fetcher.queries == ["ocean, sunset"]
    assert post.metadata.header_image == "img-1.jpg"
    assert (post.images_dir / "img-1.jpg").read_bytes() == fetcher.content
    assert (post.images_dir / "img.jpg").read_bytes() == b"old"
    assert posts.load(root, "hello-world").metadata.header_image == "img-1.jpg"


def test_fetch_header_counts_past_existing_suffixes(post, fetcher):
    post.metadata.keywords = ["ocean"]
    _add_image(post, "img.jpg")
    _add_image(post, "img-1.jpg")
    header.fetch_header(post, fetcher)
    assert post.metadata.header_image == "img-2.jpg"


def test_fetch_header_uses_suggested_name(post, fetcher):
    post.metadata.keywords = ["ocean"]
    header.fetch_header(post, fetcher)
    assert post.metadata.header_image == "img.jpg"
    assert header.list_images(post) == ["img.jpg"]


def test_fetch_header_sanitizes_suggested_name(post, make_fetcher):
    """Directory parts and leading dots in the suggested name are dropped."""
    post.metadata.keywords = ["ocean"]
    header.fetch_header(post, make_fetcher(name="../../.evil.png"))
    assert post.metadata.header_image == "evil.png"
    assert (post.images_dir / "evil.png").exists()


def test_fetch_header_no_keywords(post, fetcher):
    with pytest.raises(NoKeywords):
        header.fetch_header(post, fetcher)
    assert fetcher.queries == []


def test_fetch_header_transient_error_changes_nothing(root, post, failing_fetcher):
    """A transient fetch error raises FetchFailed with no file or metadata change."""
    post.metadata.keywords = ["ocean"]
    posts.save(post)
    before = (post.path / "metadata.toml").read_text()

    with pytest.raises(FetchFailed) as exc_info:
        header.fetch_header(post, failing_fetcher)
    assert exc_info.value.transient
    assert list(post.images_dir.iterdir()) == []
    assert post.metadata.header_image is None
    assert (post.path / "metadata.toml").read_text() == before


def test_fetch_header_not_found(post, empty_fetcher):
    post.metadata.keywords = ["ocean"]
    with pytest.raises(FetchFailed) as exc_info:
        header.fetch_header(post, empty_fetcher)
    assert not exc_info.value.transient
    assert list(post.images_dir.iterdir()) == []


def test_fetch_header_removes_image_when_save_fails(post, fetcher, monkeypatch):
    """If the new header cannot be persisted, the downloaded file is removed."""
    post.metadata.keywords = ["ocean"]
    _add_image(post, "old.jpg")
    header.set_header(post, "old.jpg")

    def _boom(path, metadata):
        raise StoreIOError(path, "disk full")
    monkeypatch.setattr(store, "save", _boom)

    with pytest.raises(StoreIOError):
        header.fetch_header(post, fetcher)
    assert header.list_images(post) == ["old.jpg"]
    assert post.metadata.header_image == "old.jpg"


def _failing_save(monkeypatch):
    def _boom(path, metadata):
        raise StoreIOError(path, "disk full")
    monkeypatch.setattr(store, "save", _boom)


def test_set_header_save_failure_restores_metadata(post, monkeypatch):
    """A failed save leaves header_image and updated_at as they were."""
    _add_image(post, "a.jpg")
    before = post.metadata.model_dump()
    _failing_save(monkeypatch)

    with pytest.raises(StoreIOError):
        header.set_header(post, "a.jpg")
    assert post.metadata.model_dump() == before


def test_remove_header_save_failure_restores_metadata(post, monkeypatch):
    _add_image(post, "a.jpg")
    header.set_header(post, "a.jpg")
    before = post.metadata.model_dump()
    _failing_save(monkeypatch)

    with pytest.raises(StoreIOError):
        header.remove_header(post)
    assert post.metadata.model_dump() == before


def test_fetch_header_save_failure_restores_updated_at(post, fetcher, monkeypatch):
    post.metadata.keywords = ["ocean"]
    posts.save(post, today=date(2024, 3, 6))
    _failing_save(monkeypatch)

    with pytest.raises(StoreIOError):
        header.fetch_header(post, fetcher)
    assert post.metadata.updated_at == date(2024, 3, 6)
    assert post.metadata.header_image is None


# --- attribution ---

CREDIT = {"photographer": "Ana Lee", "photographer_url": "https://www.pexels.com/@ana", "source": "Pexels"}


def test_fetch_header_writes_credit_file(post, make_fetcher):
    """Provider attribution is stored next to the image and kept out of the listing."""
    post.metadata.keywords = ["ocean"]
    header.fetch_header(post, make_fetcher(attribution=CREDIT))

    assert (post.images_dir / "img.jpg.credit.toml").is_file()
    assert header.read_credit(post, "img.jpg") == CREDIT
    assert header.list_images(post) == ["img.jpg"]


def test_fetch_header_without_attribution_writes_no_credit(post, fetcher):
    post.metadata.keywords = ["ocean"]
    header.fetch_header(post, fetcher)
    assert header.read_credit(post, "img.jpg") is None
    assert not (post.images_dir / "img.jpg.credit.toml").exists()


def test_credit_file_is_not_an_image(post, make_fetcher):
    post.metadata.keywords = ["ocean"]
    header.fetch_header(post, make_fetcher(attribution=CREDIT))
    with pytest.raises(ImageNotFound):
        header.set_header(post, "img.jpg.credit.toml")


def test_delete_image_removes_credit(post, make_fetcher):
    post.metadata.keywords = ["ocean"]
    header.fetch_header(post, make_fetcher(attribution=CREDIT))
    header.delete_image(post, "img.jpg")
    assert list(post.images_dir.iterdir()) == []


def test_fetch_header_save_failure_removes_credit(post, make_fetcher, monkeypatch):
    post.metadata.keywords = ["ocean"]
    _failing_save(monkeypatch)
    with pytest.raises(StoreIOError):
        header.fetch_header(post, make_fetcher(attribution=CREDIT))
    assert list(post.images_dir.iterdir()) == []
