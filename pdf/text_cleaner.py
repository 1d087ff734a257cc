"""
pdf/text_cleaner.py — oczyszczanie tekstu stron PDF przed klasyfikacją.

Co usuwamy:
  - Nagłówki/stopki stron (linie na krawędzi strony, powtarzające się)
  - Numery stron (izolowana liczba na górze/dole strony)
  - Artefakty łamania wyrazów z myślnikiem ("recog-\\nnised" → "recognised")

Co zachowujemy:
  - Podział na linie (klasyfikator działa liniami)
  - Markery list (•, -, *, cyfra z kropką na początku linii)

Format wyjściowy: plain text z \\n, strony sklejone w kolejności.
"""

from __future__ import annotations

import re
from collections import defaultdict

from segmenter.normalizer import dehyphenate

# Ile niepustych linii z góry i z dołu strony traktujemy jako "krawędź".
_EDGE_LINES = 2

# Minimalna liczba stron, na których linia musi się powtarzać,
# żeby uznać ją za nagłówek/stopkę.
_REPEAT_MIN_PAGES = 2

# Samotny numer strony (opcjonalnie "Page 3", "- 3 -", "3 / 40").
_PAGE_NUMBER_RE = re.compile(
    r"^\s*(?:page\s+)?[-–]?\s*\d{1,4}\s*[-–]?(?:\s*/\s*\d{1,4})?\s*$",
    re.IGNORECASE,
)

# Nadmiarowe spacje w środku linii (nie na początku, tam to marker wcięcia).
_MULTI_SPACE_RE = re.compile(r"(?<=\S) {2,}")


def _edge_lines(page_text: str) -> list[str]:
    lines = [ln.strip() for ln in page_text.splitlines() if ln.strip()]
    if len(lines) <= 2 * _EDGE_LINES:
        return lines
    return lines[:_EDGE_LINES] + lines[-_EDGE_LINES:]


def collect_repeated_lines(pages: list[str]) -> set[str]:
    """
    Zbiera linie z krawędzi stron, które powtarzają się na co najmniej
    _REPEAT_MIN_PAGES stronach → nagłówki/stopki do usunięcia.
    Dokument jednostronicowy nie ma czego porównać → zbiór pusty.
    """
    line_page_count: dict[str, int] = defaultdict(int)
    for page_text in pages:
        for line in set(_edge_lines(page_text)):
            if not _PAGE_NUMBER_RE.match(line):
                line_page_count[line] += 1
    return {t for t, c in line_page_count.items() if c >= _REPEAT_MIN_PAGES}


def clean_page_text(page_text: str, repeated_lines: set[str]) -> str:
    """Oczyszcza tekst pojedynczej strony (zwraca "" dla pustej strony)."""
    edges = set(_edge_lines(page_text))
    kept: list[str] = []
    for line in page_text.splitlines():
        stripped = line.strip()
        if stripped in repeated_lines:
            continue
        if stripped in edges and _PAGE_NUMBER_RE.match(stripped):
            continue
        kept.append(_MULTI_SPACE_RE.sub(" ", line.rstrip()))
    return dehyphenate("\n".join(kept)).strip()


def clean_pages(pages: list[str]) -> list[str]:
    repeated = collect_repeated_lines(pages)
    return [clean_page_text(p, repeated) for p in pages]
