"""
Small, focused text cleaning utilities.
"""

import re
from typing import Callable

from bs4 import BeautifulSoup


_ZERO_WIDTH = re.compile("[\u200b\u200c\u200d\u2060\ufeff]")
_NON_BREAKING_SPACES = re.compile("[\u00a0\u202f]")
_LINE_SEPARATORS = re.compile("[\u2028\u2029]")
_MARKUP_HINT = re.compile(r"<[A-Za-z/!][^>]*>")


def normalize_whitespace(value: str) -> str:
    """Collapse unusual whitespace into single ASCII spaces.

    Example:
        >>> normalize_whitespace("a\\u00a0b\\u200bb")
        'a bb'
    """

    clean = _NON_BREAKING_SPACES.sub(" ", value)
    clean = _ZERO_WIDTH.sub("", clean)
    clean = _LINE_SEPARATORS.sub(" ", clean)
    clean = re.sub(r"\s+", " ", clean)
    return clean.strip()


def strip_markup(value: str) -> str:
    """Drop HTML tags that leak in from rich-text editors.

    Plain strings are returned untouched so that literal '<' and '&' survive.

    Example:
        >>> strip_markup("<b>Led</b> a team")
        'Led a team'
    """

    if not _MARKUP_HINT.search(value):
        return value
    soup = BeautifulSoup(value, "html.parser")
    return soup.get_text(" ")


def strip_bullet_glyph(value: str) -> str:
    """Remove a leading bullet glyph pasted along with the text.

    Example:
        >>> strip_bullet_glyph("• Shipped v2")
        'Shipped v2'
    """

    return re.sub(r"^[•▪●‣\-*]\s+", "", value)


def clean_text(value: str) -> str:
    """Run all targeted cleaners in a stable order."""

    cleaners: tuple[Callable[[str], str], ...] = (
        strip_markup,
        normalize_whitespace,
        strip_bullet_glyph,
    )
    result = value
    for cleaner in cleaners:
        result = cleaner(result)
    return result
