from __future__ import annotations

import re
import unicodedata

_NON_WORD_RE = re.compile(r"[\W_]+")
_WS_RE = re.compile(r"\s+")


def normalize(text: str | None) -> str:
    """
    Folds text into the form every comparison in the search engine uses:
    lowercase, no diacritics, words separated by single spaces.

    >>> normalize("  Kit Lissage Brésilien (500ml)! ")
    'kit lissage bresilien 500ml'
    """
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFD", str(text).lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    spaced = _NON_WORD_RE.sub(" ", stripped)
    return _WS_RE.sub(" ", spaced).strip()


def tokenize(text: str | None) -> list[str]:
    normalized = normalize(text)
    return normalized.split(" ") if normalized else []
