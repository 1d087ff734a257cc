"""
segmenter/role_patterns.py — uporządkowana tabela reguł ról spanów.

Każda RoleRule zawiera:
  - role      : rola przypisywana przy dopasowaniu
  - predicate : funkcja (tekst → bool)
  - name      : krótka nazwa reguły (diagnostyka, testy)

Reguły są testowane w kolejności ROLE_RULES; pierwsza pasująca wygrywa,
domyślnie "para". Sygnały strukturalne (heading, list) są sprawdzane przed
sygnałami treści (code, table), więc "1. Revenue" to heading, nie list.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable

from data_model.documents import SpanRole

# Linie krótsze niż to nie są klasyfikowane (za mało sygnału).
MIN_CLASSIFY_LENGTH = 5

# Nagłówki dłuższe niż to są odrzucane (gęsta proza).
MAX_HEADING_LENGTH = 200

# Figure: tylko krótkie wzmianki.
MAX_FIGURE_LENGTH = 100


@dataclass(frozen=True, slots=True)
class RoleRule:
    role: SpanRole
    predicate: Callable[[str], bool]
    name: str


def _any_match(*patterns: re.Pattern[str]) -> Callable[[str], bool]:
    def _test(text: str) -> bool:
        return any(p.search(text) for p in patterns)
    return _test


# ---------------------------------------------------------------------------
# heading: numerowane / rozdziały / wersaliki / tytuł bez kropki końcowej
# ---------------------------------------------------------------------------

_HEADING_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^\d+\.?\s+[A-Z]"),
    re.compile(r"^[A-Z][A-Z\s]{5,}$"),
    re.compile(r"^\d+\.\d+\.?\s+"),
    re.compile(r"^(Chapter|Section|Part)\s+\d+", re.IGNORECASE),
    re.compile(r"^[A-Z][^.!?]*[^.!?]$"),
)


def is_heading(text: str) -> bool:
    if len(text) > MAX_HEADING_LENGTH:
        return False
    return any(p.search(text) for p in _HEADING_PATTERNS)


# ---------------------------------------------------------------------------
# list: punktory, numeracja, litery
# ---------------------------------------------------------------------------

is_list = _any_match(
    re.compile(r"^\s*[-•*]\s+"),
    re.compile(r"^\s*\d+\.\s+"),
    re.compile(r"^\s*\([a-z]\)\s+"),
    re.compile(r"^\s*[a-z]\)\s+"),
)


# ---------------------------------------------------------------------------
# code: słowa kluczowe, gęstość nawiasów, prefiks identyfikator:/identyfikator=
# ---------------------------------------------------------------------------

is_code = _any_match(
    re.compile(r"^\s*(function|class|def|var|let|const|import|export)\b"),
    re.compile(r"[{}();].*[{}();]"),
    re.compile(r"^\s*[A-Za-z_$][A-Za-z0-9_$]*\s*[:=]"),
)


# ---------------------------------------------------------------------------
# quote: cudzysłów na początku lub w treści
# ---------------------------------------------------------------------------

_QUOTE_CHARS = ('"', "“", "”")


def is_quote(text: str) -> bool:
    return text.startswith(_QUOTE_CHARS) or any(q in text for q in _QUOTE_CHARS)


# ---------------------------------------------------------------------------
# table: kolumny rozdzielone tabulatorem, "|" albo ≥ 3 spacjami (≥ 3 pola)
# ---------------------------------------------------------------------------

_WIDE_GAP_RE = re.compile(r"\s{3,}")


def is_table(text: str) -> bool:
    if len(text.split("\t")) > 2:
        return True
    if len(text.split("|")) > 2:
        return True
    return bool(_WIDE_GAP_RE.search(text)) and len(_WIDE_GAP_RE.split(text)) > 2


# ---------------------------------------------------------------------------
# caption / figure
# ---------------------------------------------------------------------------

is_caption = _any_match(
    re.compile(r"^(Figure|Table|Chart|Diagram)\s+\d+", re.IGNORECASE),
    re.compile(r"^Caption:", re.IGNORECASE),
)


def is_figure(text: str) -> bool:
    return "Figure" in text and len(text) < MAX_FIGURE_LENGTH


ROLE_RULES: list[RoleRule] = [
    RoleRule(SpanRole.HEADING, is_heading, "heading"),
    RoleRule(SpanRole.LIST,    is_list,    "list"),
    RoleRule(SpanRole.CODE,    is_code,    "code"),
    RoleRule(SpanRole.QUOTE,   is_quote,   "quote"),
    RoleRule(SpanRole.TABLE,   is_table,   "table"),
    RoleRule(SpanRole.CAPTION, is_caption, "caption"),
    RoleRule(SpanRole.FIGURE,  is_figure,  "figure"),
]
