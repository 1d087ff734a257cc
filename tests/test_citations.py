"""
Testy formatowania cytowań: grupowanie po tytule i zwijanie stron w zakresy.
"""

import pytest

from citations import (
    CitationGroup,
    PageRange,
    SpanCitation,
    collapse_page_ranges,
    expand_page_ranges,
    format_citation_group,
    format_citations,
    format_page_ranges,
    group_spans_by_title,
)


def _cite(title, page, span_id=None):
    return SpanCitation(span_id=span_id or f"{title}-{page}", title=title, page=page)


class TestCollapsePageRanges:
    """Maksymalne ciągłe zakresy stron."""

    def test_canonical_example(self):
        ranges = collapse_page_ranges([12, 13, 14, 16])
        assert ranges == [PageRange(12, 14), PageRange(16, 16)]
        assert format_page_ranges(ranges) == "p.12–14, p.16"

    def test_empty(self):
        assert collapse_page_ranges([]) == []
        assert format_page_ranges([]) == ""

    @pytest.mark.parametrize("pages", [
        [1],
        [1, 2, 3],
        [1, 3, 5],
        [2, 3, 7, 8, 9, 20],
        list(range(1, 50)) + [60],
    ])
    def test_expand_reproduces_input(self, pages):
        ranges = collapse_page_ranges(pages)
        assert expand_page_ranges(ranges) == pages
        assert all(r.start <= r.end for r in ranges)
        assert all(a.end + 1 < b.start for a, b in zip(ranges, ranges[1:]))


class TestFormatCitations:
    """Grupy w kolejności pierwszego wystąpienia tytułu."""

    def test_canonical_fixture(self):
        citations = [_cite("IFRS 15 Summary", p) for p in (12, 13, 14, 16)]
        assert format_citations(citations) == '"IFRS 15 Summary" p.12–14, p.16'

    def test_grouping_order(self):
        citations = [_cite("A", 12), _cite("B", 5), _cite("A", 14)]
        assert format_citations(citations) == '"A" p.12, p.14; "B" p.5'

    def test_pages_sorted_and_deduplicated(self):
        citations = [_cite("A", 14, "x"), _cite("A", 12, "y"), _cite("A", 14, "z"), _cite("A", 13, "w")]
        [group] = group_spans_by_title(citations)
        assert group == CitationGroup("A", [12, 13, 14])
        assert format_citation_group(group) == '"A" p.12–14'

    def test_missing_pages(self):
        """Cytowanie bez strony należy do grupy, ale nie daje zakresu."""
        citations = [_cite("Web page", None), _cite("A", None), _cite("A", 3)]
        assert format_citations(citations) == '"Web page"; "A" p.3'

    def test_empty(self):
        assert format_citations([]) == ""
