"""Slug generation for post identifiers"""

import re
import unicodedata

from blogpost.errors import InvalidTitle


_NON_WORD_RE = re.compile(r"[\W_]+")


def _fold(char: str) -> str:
    """Drop accents from Latin letters (é -> e); leave other scripts unchanged."""
    base = "".join(c for c in unicodedata.normalize("NFKD", char) if not unicodedata.combining(c))
    return base if base.isascii() else char


def slugify(title: str) -> str:
    """Convert a title to a lowercase, hyphen-separated, filesystem-safe slug.

    Letters and digits of any script are kept; every other run of characters
    becomes a single hyphen.
    Raises InvalidTitle if nothing usable remains.
    """
    text = "".join(_fold(c) for c in unicodedata.normalize("NFC", title))
    slug = _NON_WORD_RE.sub("-", text.lower()).strip("-")
    if not slug:
        raise InvalidTitle(title)
    return slug
