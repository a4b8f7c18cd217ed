"""Static build: render content.md to dist/index.html and copy images"""

import logging
import shutil
from pathlib import Path

from markdown_it import MarkdownIt

from blogpost.core.models import Post
from blogpost.crud import posts
from blogpost.errors import ContentMissing


logger = logging.getLogger(__name__)


def _make_parser(preset: str) -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name."""
    return MarkdownIt(preset, options_update={"linkify": False})


def render_html(markdown: str, parser_config: str = "gfm-like") -> str:
    """Render a markdown body to an HTML fragment."""
    return _make_parser(parser_config).render(markdown)


def build_post(post: Post, output_dir: str = "dist", parser_config: str = "gfm-like") -> Path:
    """Write <post>/<output_dir>/index.html plus a copy of images/.

    Stamps updated_at and saves the metadata first. Returns the index.html path.
    """
    if not post.content_path.is_file():
        raise ContentMissing(post.content_path)

    posts.save(post)

    out = post.path / output_dir
    out.mkdir(parents=True, exist_ok=True)
    index = out / "index.html"
    html = render_html(post.content_path.read_text(encoding="utf-8"), parser_config)
    index.write_text(html, encoding="utf-8")
    logger.info("Built %s", index)

    if post.images_dir.is_dir():
        shutil.copytree(post.images_dir, out / "images", dirs_exist_ok=True)
        logger.debug("Copied %s to %s", post.images_dir, out / "images")
    return index
