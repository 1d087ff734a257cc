"""html_parser/parser.py — parsowanie strony HTML do sklasyfikowanych spanów."""

from __future__ import annotations

import requests
from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PageElement, PreformattedString

from data_model.documents import ParsedBlock, ParseResult, SpanRole, new_id
from segmenter.classifier import classify_text_role, merge_paragraphs
from segmenter.normalizer import normalize_whitespace

# Tagi z rolą wynikającą wprost ze struktury dokumentu
_HEADING_TAGS = {"h1", "h2", "h3", "h4", "h5", "h6"}
_NATIVE_ROLE: dict[str, SpanRole] = {
    "li":         SpanRole.LIST,
    "pre":        SpanRole.CODE,
    "blockquote": SpanRole.QUOTE,
    "tr":         SpanRole.TABLE,
    "caption":    SpanRole.CAPTION,
    "figcaption": SpanRole.CAPTION,
    "figure":     SpanRole.FIGURE,
} | {tag: SpanRole.HEADING for tag in _HEADING_TAGS}

# Tagi blokowe (determinują granice bloków treści)
_BLOCK_TAGS: set[str] = {
    "div", "p", "article", "section", "main", "aside", "nav",
    "header", "footer", "blockquote", "pre",
    "li", "ul", "ol", "dl", "dt", "dd",
    "td", "th", "tr", "table", "thead", "tbody", "caption",
    "figure", "figcaption",
    "form", "fieldset", "details", "summary",
} | _HEADING_TAGS

# Tagi zawierające szum (nie treść)
_NOISE_TAGS = {"script", "style", "noscript", "template"}

# Separator między blokami w tekście dokumentu (offsety spanów)
_BLOCK_SEPARATOR = "\n\n"


def _block_text(el: Tag) -> str:
    if el.name == "tr":
        cells = [c.get_text(" ", strip=True) for c in el.find_all(["td", "th"], recursive=False)]
        return " | ".join(c for c in cells if c)
    if el.name == "pre":
        return el.get_text()
    return el.get_text(" ", strip=True)


def _is_inline(node: PageElement) -> bool:
    """Tekst lub element bez żadnego bloku w środku (komentarze, doctype itp. odpadają)."""
    if isinstance(node, Tag):
        return (
            node.name not in _BLOCK_TAGS
            and node.name not in _NOISE_TAGS
            and node.find(_BLOCK_TAGS) is None
        )
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def extract_blocks(body: Tag) -> list[tuple[SpanRole | None, str]]:
    """
    Przechodzi drzewo DOM i zwraca spłaszczoną listę bloków:
      (rola_strukturalna | None, tekst)

    Reguła unikania duplikowania treści:
    - Nagłówek, wiersz tabeli, <pre>: emituje cały swój tekst, bez rekurencji.
    - Blok liściasty (brak blokowych dzieci): emituje cały swój tekst.
    - Blok kontenerowy (ma blokowe dzieci): rekuruje w dzieci; ciągi tekstu
      i elementów inline między blokowymi dziećmi to osobne bloki.
    None jako rola → klasyfikacja heurystyczna (classify_text_role).
    Drzewo bez żadnego tagu blokowego nie daje bloków.
    """
    blocks: list[tuple[SpanRole | None, str]] = []

    def walk_children(el: Tag) -> None:
        run: list[str] = []

        def flush() -> None:
            text = " ".join("".join(run).split())
            if text:
                blocks.append((None, text))
            run.clear()

        for child in el.children:
            if _is_inline(child):
                run.append(child.get_text() if isinstance(child, Tag) else str(child))
            elif isinstance(child, Tag):
                flush()
                walk(child)
        flush()

    def walk(el: Tag) -> None:
        name = el.name
        if name in _NOISE_TAGS:
            return
        if name in _HEADING_TAGS or name in ("tr", "pre"):
            text = _block_text(el)
            if text.strip():
                blocks.append((_NATIVE_ROLE[name], text))
            return
        if name in _BLOCK_TAGS:
            has_block_child = any(
                isinstance(c, Tag) and c.name in _BLOCK_TAGS
                for c in el.children
            )
            if not has_block_child:
                text = _block_text(el)
                if text:
                    blocks.append((_NATIVE_ROLE.get(name), text))
                return
        # kontener lub element nieblokowy z blokami w środku (body, html, span itp.)
        walk_children(el)

    if body.find(_BLOCK_TAGS) is None:
        return blocks
    walk_children(body)
    return blocks


def blocks_to_parsed(
    blocks: list[tuple[SpanRole | None, str]],
    page: int | None,
    base_offset: int = 0,
) -> tuple[list[ParsedBlock], str]:
    """
    Buduje ParsedBlock z offsetami w tekście powstałym przez sklejenie bloków
    separatorem _BLOCK_SEPARATOR. Zwraca (bloki, sklejony tekst).
    """
    parsed: list[ParsedBlock] = []
    parts: list[str] = []
    offset = base_offset
    for role, raw in blocks:
        text = raw if role == SpanRole.CODE else normalize_whitespace(raw)
        if not text.strip():
            continue
        if parts:
            offset += len(_BLOCK_SEPARATOR)
        parsed.append(ParsedBlock(
            id=new_id(),
            role=role or classify_text_role(text),
            text=text,
            page=page,
            start=offset,
            end=offset + len(text),
        ))
        parts.append(text)
        offset += len(text)
    return parsed, _BLOCK_SEPARATOR.join(parts)


def soup_body(markup: str) -> Tag:
    soup = BeautifulSoup(markup, "html.parser")
    for tag in soup.find_all(_NOISE_TAGS):
        tag.decompose()
    return soup.find("body") or soup  # type: ignore[return-value]


def parse_html(markup: str, doc_id: str) -> ParseResult:
    """Parsuje HTML do spanów; cały dokument to jedna strona (page=1)."""
    blocks = extract_blocks(soup_body(markup))
    parsed, _ = blocks_to_parsed(blocks, page=1)
    return ParseResult(spans=merge_paragraphs(parsed, doc_id), page_count=1)


def fetch_html(url: str) -> str:
    """Pobiera stronę HTML (requests.HTTPError przy statusie błędu)."""
    headers = {
        "User-Agent": (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/120.0.0.0 Safari/537.36"
        )
    }
    resp = requests.get(url, timeout=30, headers=headers)
    resp.raise_for_status()
    resp.encoding = resp.apparent_encoding or "utf-8"
    return resp.text
