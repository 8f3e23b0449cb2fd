"""String and structural canonicalization helpers.

Invariants:
- Every helper is total: any input (including ``None`` and ``""``) yields a string.
- Canonical query forms are order-independent once tokens are sorted.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Any

CACHE_KEY_VERSION = "v2"

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")
_NON_TITLE_RE = re.compile(r"[^a-z0-9\s]")
_ARTICLE_RE = re.compile(r"\b(the|a|an)\b")
_WHITESPACE_RE = re.compile(r"\s+")
_YEAR_RE = re.compile(r"^\d{4}$")

_TYPE_ALIASES = {
    "tv": "series",
    "series": "series",
    "show": "series",
    "movie": "movie",
    "film": "movie",
    "anime": "anime",
}


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def normalize_loose(value: Any) -> str:
    """Lowercase and drop everything that is not ``[a-z0-9]``."""
    return _NON_ALNUM_RE.sub("", _text(value).lower())


def normalize_title(value: Any) -> str:
    """Lowercase, drop punctuation, keep single spaces for tokenization."""
    cleaned = _NON_TITLE_RE.sub("", _text(value).lower())
    return _WHITESPACE_RE.sub(" ", cleaned).strip()


def strip_accents(value: Any) -> str:
    decomposed = unicodedata.normalize("NFKD", _text(value))
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def normalize_title_tokens(value: Any) -> str:
    """Aggressive semantic normalization used for cache identity.

    Lowercases, strips diacritics, turns every character outside ``[a-z0-9 ]``
    into a separator, removes the standalone articles "the", "a" and "an", and
    collapses whitespace.
    """
    folded = strip_accents(_text(value).lower())
    cleaned = _NON_TITLE_RE.sub(" ", folded)
    cleaned = _ARTICLE_RE.sub(" ", cleaned)
    return _WHITESPACE_RE.sub(" ", cleaned).strip()


def canonicalize_query(value: Any) -> str:
    """Order-independent canonical query ("the dark knight" == "knight dark")."""
    tokens = [token for token in normalize_title_tokens(value).split(" ") if token]
    return " ".join(sorted(tokens))


def normalize_type(value: Any) -> str:
    lowered = _text(value).lower()
    return _TYPE_ALIASES.get(lowered, lowered)


def normalize_year(value: Any) -> str:
    """Return a 4-digit year string, or ``""`` when the input is not one."""
    if value is None or value is False:
        return ""
    candidate = _text(value).strip()
    return candidate if _YEAR_RE.match(candidate) else ""


def _utf16_units(value: str):
    for char in value:
        code = ord(char)
        if code > 0xFFFF:
            code -= 0x10000
            yield 0xD800 + (code >> 10)
            yield 0xDC00 + (code & 0x3FF)
        else:
            yield code


def hash_string(value: Any) -> str:
    """Fast deterministic 32-bit string hash rendered as hex (not cryptographic)."""
    result = 0
    for unit in _utf16_units(_text(value)):
        result = ((result << 5) - result + unit) & 0xFFFFFFFF
    if result >= 0x80000000:
        result -= 0x100000000
    return format(abs(result), "x")


def build_cache_key(media_type: Any, query: Any, year: Any = None) -> str:
    """Build a versioned, pipe-delimited cache key for external lookups."""
    normalized_type = normalize_type(media_type)
    canonical = canonicalize_query(query)
    normalized_year = normalize_year(year)
    semantic_key = f"{normalized_type}|{canonical}|{normalized_year}"
    return "|".join(
        [CACHE_KEY_VERSION, normalized_type, canonical, normalized_year, hash_string(semantic_key)]
    )
