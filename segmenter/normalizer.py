"""
segmenter/normalizer.py — normalizacja tekstu przed klasyfikacją.

Forma kanoniczna:
  - końce linii \\r\\n i \\r → \\n
  - tabulatory → spacja
  - wielokrotne spacje → jedna
  - brak białych znaków na początku i końcu całego tekstu

Offsety spanów liczone są względem tekstu PO normalizacji.
"""

from __future__ import annotations

import re

_CRLF_RE         = re.compile(r"\r\n?")
_MULTI_SPACE_RE  = re.compile(r" {2,}")

# Łamanie wyrazu z myślnikiem na końcu linii ("reco-\ngnised").
_HYPHEN_BREAK_RE = re.compile(r"(\w)-\n(\w)")


def normalize_whitespace(text: str) -> str:
    text = _CRLF_RE.sub("\n", text)
    text = text.replace("\t", " ")
    text = _MULTI_SPACE_RE.sub(" ", text)
    return text.strip()


def dehyphenate(text: str) -> str:
    """Scala wyrazy przełamane myślnikiem na granicy linii."""
    return _HYPHEN_BREAK_RE.sub(r"\1\2", text)


def truncate_text(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[: max(0, max_length - 3)] + "..."
