"""
epub_parser/parser.py — ekstrakcja spanów z dokumentów EPUB.

EPUB to archiwum ZIP z dokumentami XHTML:
  META-INF/container.xml → ścieżka pakietu OPF
  OPF <manifest> (id → href) + <spine> (kolejność czytania)
  → każdy rozdział XHTML parsowany jak HTML (html_parser.extract_blocks),
    rozdział bez znaczników blokowych dzielony na akapity

Numer strony = licznik rozdziałów (jeden "numer strony" na rozdział),
offsety liczone w tekście całej książki (rozdziały sklejone separatorem).
"""

from __future__ import annotations

import io
import posixpath
import sys
import zipfile

from bs4 import BeautifulSoup

from data_model.documents import ParsedBlock, ParseResult
from html_parser.parser import blocks_to_parsed, extract_blocks, soup_body
from segmenter.classifier import extract_blocks_from_paragraphs, merge_paragraphs
from segmenter.normalizer import normalize_whitespace

_CONTAINER_PATH = "META-INF/container.xml"
_XHTML_TYPES = {"application/xhtml+xml", "text/html"}


def parse_epub_bytes(data: bytes, doc_id: str) -> ParseResult:
    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except zipfile.BadZipFile as exc:
        raise ValueError(f"Niepoprawny plik EPUB: {exc}") from exc

    with archive:
        blocks: list[ParsedBlock] = []
        offset = 0
        page = 0
        for name in _spine_documents(archive):
            try:
                markup = archive.read(name).decode("utf-8", errors="replace")
            except KeyError:
                print(f"[warn] Brak rozdziału w archiwum EPUB: {name}", file=sys.stderr)
                continue

            body = soup_body(markup)
            chapter_blocks = extract_blocks(body)
            if chapter_blocks:
                parsed, chapter_text = blocks_to_parsed(chapter_blocks, page=page + 1, base_offset=offset + bool(blocks))
            else:
                # Rozdział bez znaczników blokowych: akapity rozdzielone pustą linią
                chapter_text = normalize_whitespace(body.get_text("\n"))
                parsed = extract_blocks_from_paragraphs(chapter_text, page + 1, offset + bool(blocks))
            if not parsed:
                continue
            page += 1
            if blocks:
                offset += 1
            blocks.extend(parsed)
            offset += len(chapter_text)

    return ParseResult(spans=merge_paragraphs(blocks, doc_id), page_count=page)


def _spine_documents(archive: zipfile.ZipFile) -> list[str]:
    """Zwraca ścieżki dokumentów XHTML w kolejności spine."""
    try:
        container = BeautifulSoup(archive.read(_CONTAINER_PATH), "html.parser")
    except KeyError as exc:
        raise ValueError("Niepoprawny plik EPUB: brak META-INF/container.xml") from exc

    rootfile = container.find("rootfile")
    opf_path = rootfile.get("full-path") if rootfile else None
    if not opf_path:
        raise ValueError("Niepoprawny plik EPUB: brak ścieżki pakietu OPF")

    try:
        opf = BeautifulSoup(archive.read(opf_path), "html.parser")
    except KeyError as exc:
        raise ValueError(f"Niepoprawny plik EPUB: brak pakietu OPF {opf_path}") from exc
    base = posixpath.dirname(opf_path)

    manifest: dict[str, tuple[str, str]] = {}
    for item in opf.find_all("item"):
        item_id, href = item.get("id"), item.get("href")
        if item_id and href:
            manifest[item_id] = (href, item.get("media-type", ""))

    documents: list[str] = []
    for ref in opf.find_all("itemref"):
        entry = manifest.get(ref.get("idref", ""))
        if entry is None:
            continue
        href, media_type = entry
        if media_type and media_type not in _XHTML_TYPES:
            continue
        documents.append(posixpath.normpath(posixpath.join(base, href)))
    return documents
