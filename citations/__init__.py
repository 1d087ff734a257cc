"""citations — formatowanie cytowań spanów (tytuł + zakresy stron)."""

from .formatter import (
    SpanCitation,
    CitationGroup,
    PageRange,
    group_spans_by_title,
    collapse_page_ranges,
    expand_page_ranges,
    format_page_ranges,
    format_citation_group,
    format_citations,
)

__all__ = [
    "SpanCitation",
    "CitationGroup",
    "PageRange",
    "group_spans_by_title",
    "collapse_page_ranges",
    "expand_page_ranges",
    "format_page_ranges",
    "format_citation_group",
    "format_citations",
]
