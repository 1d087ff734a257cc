"""
segmenter/classifier.py — podział tekstu na sklasyfikowane spany.

Architektura:
  znormalizowany tekst → linie (formaty płaskie) lub akapity (formaty porcjowane)
  → classify_text_role() → ParsedBlock (rola, offsety, strona)
  → merge_paragraphs() → lista Span (z sumą kontrolną)

Numer strony dla formatów płaskich (tekst wyciągnięty z PDF) jest przybliżony:
indeks linii / ceil(linie / liczba_stron). Brak weryfikacji względem faktycznych
znaków podziału strony — numer traktujemy jako orientacyjny.
"""

from __future__ import annotations

import math
import re

from data_model.documents import ParsedBlock, Span, SpanRole, new_id
from segmenter.role_patterns import MIN_CLASSIFY_LENGTH, ROLE_RULES, RoleRule

# Maksymalna przerwa (znaki) między spanami "para", które są scalane.
MERGE_GAP_CHARS = 50

# Akapity krótsze niż to są pomijane w formatach porcjowanych (EPUB).
MIN_PARAGRAPH_LENGTH = 10

_PARAGRAPH_BREAK_RE = re.compile(r"\n\s*\n")


def classify_text_role(text: str, rules: list[RoleRule] = ROLE_RULES) -> SpanRole:
    """Zwraca rolę pierwszej pasującej reguły; domyślnie PARA."""
    if len(text) < MIN_CLASSIFY_LENGTH:
        return SpanRole.PARA
    for rule in rules:
        if rule.predicate(text):
            return rule.role
    return SpanRole.PARA


def extract_blocks_from_text(text: str, page_count: int | None) -> list[ParsedBlock]:
    """
    Formaty płaskie: jeden blok na niepustą linię.

    Args:
        text:       tekst po normalize_whitespace()
        page_count: liczba stron dokumentu; None → strona nieznana (None)
    """
    lines: list[tuple[int, str]] = []   # (offset początku linii, linia)
    offset = 0
    for line in text.split("\n"):
        if line.strip():
            lines.append((offset, line))
        offset += len(line) + 1

    lines_per_page = math.ceil(len(lines) / page_count) if page_count and lines else 0

    blocks: list[ParsedBlock] = []
    for i, (line_offset, line) in enumerate(lines):
        stripped = line.strip()
        start = line_offset + (len(line) - len(line.lstrip()))
        page = i // lines_per_page + 1 if lines_per_page else None
        blocks.append(ParsedBlock(
            id=new_id(),
            role=classify_text_role(stripped),
            text=stripped,
            page=page,
            start=start,
            end=start + len(stripped),
        ))
    return blocks


def extract_blocks_from_paragraphs(
    text: str,
    page: int | None,
    base_offset: int = 0,
) -> list[ParsedBlock]:
    """
    Formaty porcjowane: jeden blok na akapit (rozdzielony pustą linią),
    jeden numer strony na całą porcję (np. rozdział EPUB).
    Offsety są przesunięte o base_offset (pozycja porcji w całym dokumencie).
    """
    blocks: list[ParsedBlock] = []
    pos = 0
    for paragraph in _PARAGRAPH_BREAK_RE.split(text):
        found = text.find(paragraph, pos)
        local_start = found if found >= 0 else pos
        pos = local_start + len(paragraph)

        stripped = paragraph.strip()
        if len(stripped) < MIN_PARAGRAPH_LENGTH:
            continue
        start = base_offset + local_start + (len(paragraph) - len(paragraph.lstrip()))
        blocks.append(ParsedBlock(
            id=new_id(),
            role=classify_text_role(stripped),
            text=stripped,
            page=page,
            start=start,
            end=start + len(stripped),
        ))
    return blocks


def merge_paragraphs(blocks: list[ParsedBlock], document_id: str) -> list[Span]:
    """
    Scala sąsiednie bloki PARA z tej samej strony, oddzielone przerwą
    < MERGE_GAP_CHARS (tekst łączony pojedynczą spacją, koniec przesuwany).
    Odtwarza akapity połamane na linie przy ekstrakcji tekstu.

    Wejściowe bloki nie są modyfikowane. Suma kontrolna liczona po scaleniu.
    """
    merged: list[ParsedBlock] = []
    current: ParsedBlock | None = None

    for block in blocks:
        if (
            current is not None
            and block.role == SpanRole.PARA
            and current.role == SpanRole.PARA
            and block.page == current.page
            and block.start - current.end < MERGE_GAP_CHARS
        ):
            current.text = f"{current.text} {block.text}"
            current.end = block.end
            continue
        if current is not None:
            merged.append(current)
        current = ParsedBlock(
            id=block.id,
            role=block.role,
            text=block.text,
            page=block.page,
            start=block.start,
            end=block.end,
        )

    if current is not None:
        merged.append(current)

    return [Span.from_block(b, document_id) for b in merged]


def extract_spans_from_text(
    text: str,
    page_count: int | None,
    document_id: str,
) -> list[Span]:
    """Tekst płaski → scalone spany (klasyfikacja liniami)."""
    return merge_paragraphs(extract_blocks_from_text(text, page_count), document_id)
