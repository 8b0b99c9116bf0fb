"""Canonicalize raw caption/transcript tokens for matching.

normalize() is total and idempotent: any input (including None or non-str
values coming from loose JSON) yields a string, and feeding the output back
in returns it unchanged. Empty output simply matches nothing downstream.
"""

import re
import unicodedata
from functools import lru_cache

# Curly quotes, backticks and acute accents used as apostrophes in captions
_APOSTROPHE_VARIANTS = str.maketrans({
    "\u2019": "'",
    "\u2018": "'",
    "\u02bc": "'",
    "\u0060": "'",
    "\u00b4": "'",
})

# Auto-captions escape sound cues as \[Music\]
_ESCAPED_BRACKET_RE = re.compile(r"\\[\[\]]")

# Apostrophes only survive between two word characters (T'au, Ka'tah)
_LOOSE_APOSTROPHE_RE = re.compile(r"(?<!\w)'|'(?!\w)")

_PUNCTUATION_RE = re.compile(r"[^\w\s']|_")
_WHITESPACE_RE = re.compile(r"\s+")


def _strip_diacritics(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


@lru_cache(maxsize=16384)
def _normalize(raw: str) -> str:
    text = _strip_diacritics(raw).lower()
    # lower() can reintroduce combining marks (e.g. dotted capital I)
    text = _strip_diacritics(text)
    text = text.translate(_APOSTROPHE_VARIANTS)
    text = _ESCAPED_BRACKET_RE.sub(" ", text)
    text = _PUNCTUATION_RE.sub(" ", text)
    text = _LOOSE_APOSTROPHE_RE.sub(" ", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def normalize(raw: object) -> str:
    """Trim, lowercase, strip diacritics/brackets/punctuation, collapse spaces.

    Apostrophes inside names are preserved ("T'au" -> "t'au"); matching a
    token without the apostrophe is the fuzzy scorer's job, not ours.
    """
    if not isinstance(raw, str):
        return ""
    return _normalize(raw)


def strip_apostrophes(text: str) -> str:
    """Drop apostrophes from an already-normalized string."""
    return text.replace("'", "")
