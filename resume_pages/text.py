"""
Text helpers for hyphenation and paragraph markup.
"""

from __future__ import annotations

import html as htmllib
import re
from functools import lru_cache

from pyphen import Pyphen

SOFT_HYPHEN = "\u00ad"

WORD_RE = re.compile(r"[A-Za-z]{8,}")


@lru_cache(maxsize=4)
def hyphenator_for(lang: str = "en_US") -> Pyphen:
    """Return a shared Pyphen dictionary for ``lang``."""

    return Pyphen(lang=lang)


def hyphenate_text(text: str, dic: Pyphen) -> str:
    """Insert soft hyphens into long words of plain text.

    Example:
        >>> dic = Pyphen(lang='en_US')
        >>> hyphenate_text('ok', dic)
        'ok'
    """

    def repl(match: re.Match[str]) -> str:
        return dic.inserted(match.group(0), hyphen=SOFT_HYPHEN)

    return WORD_RE.sub(repl, text)


def paragraph_markup(text: str, dic: Pyphen | None = None) -> str:
    """Return ReportLab-safe paragraph markup for plain text.

    Args:
        text: Plain text (already cleaned).
        dic: Optional hyphenation dictionary.
    Returns:
        Escaped text with soft hyphens in long words.

    Example:
        >>> paragraph_markup('R&D <team>')
        'R&amp;D &lt;team&gt;'
    """

    escaped = htmllib.escape(text, quote=False)
    if dic is None:
        return escaped
    return hyphenate_text(escaped, dic)
