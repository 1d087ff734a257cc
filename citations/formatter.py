"""
citations/formatter.py — czytelne cytowania z listy (span_id, title, page).

  [("IFRS 15 Summary", 12), (…, 13), (…, 14), (…, 16)]
  → '"IFRS 15 Summary" p.12–14, p.16'

Grupy w kolejności pierwszego wystąpienia tytułu, strony w grupie
posortowane i bez duplikatów, ciągłe serie zwinięte do zakresów.
Cytowanie bez numeru strony (page=None) należy do grupy, ale nie daje
zakresu; grupa bez stron renderuje się jako sam tytuł w cudzysłowie.
"""

from __future__ import annotations

from dataclasses import dataclass, field

RANGE_DASH      = "–"   # półpauza
RANGE_SEPARATOR = ", "
GROUP_SEPARATOR = "; "


@dataclass(frozen=True, slots=True)
class SpanCitation:
    span_id: str
    title: str
    page: int | None


@dataclass(slots=True)
class CitationGroup:
    title: str
    pages: list[int] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class PageRange:
    start: int
    end: int


def group_spans_by_title(citations: list[SpanCitation]) -> list[CitationGroup]:
    grouped: dict[str, set[int]] = {}
    for c in citations:
        pages = grouped.setdefault(c.title, set())
        if c.page is not None:
            pages.add(c.page)
    return [CitationGroup(title, sorted(pages)) for title, pages in grouped.items()]


def collapse_page_ranges(pages: list[int]) -> list[PageRange]:
    """Zwija posortowane, unikalne strony w maksymalne ciągłe zakresy."""
    ranges: list[PageRange] = []
    if not pages:
        return ranges

    start = end = pages[0]
    for page in pages[1:]:
        if page == end + 1:
            end = page
        else:
            ranges.append(PageRange(start, end))
            start = end = page
    ranges.append(PageRange(start, end))
    return ranges


def expand_page_ranges(ranges: list[PageRange]) -> list[int]:
    """Odwrotność collapse_page_ranges."""
    return [p for r in ranges for p in range(r.start, r.end + 1)]


def format_page_ranges(ranges: list[PageRange]) -> str:
    return RANGE_SEPARATOR.join(
        f"p.{r.start}" if r.start == r.end else f"p.{r.start}{RANGE_DASH}{r.end}"
        for r in ranges
    )


def format_citation_group(group: CitationGroup) -> str:
    pages = format_page_ranges(collapse_page_ranges(group.pages))
    return f'"{group.title}" {pages}' if pages else f'"{group.title}"'


def format_citations(citations: list[SpanCitation]) -> str:
    return GROUP_SEPARATOR.join(format_citation_group(g) for g in group_spans_by_title(citations))
