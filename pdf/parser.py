"""
pdf/parser.py — ekstrakcja spanów z dokumentów PDF.

Architektura:
  pdf → fitz.open() → tekst stron (PyMuPDF "text")
  → clean_pages() → usunięte nagłówki/stopki, numery stron, łamania wyrazów
  → normalize_whitespace() → extract_spans_from_text() (linie + strona przybliżona)
  → ParseResult

Kluczowe funkcje publiczne:
  parse_pdf_bytes(data, doc_id)  -> ParseResult
"""

from __future__ import annotations

import fitz  # PyMuPDF

from data_model.documents import ParseResult
from pdf.text_cleaner import clean_pages
from segmenter.classifier import extract_spans_from_text
from segmenter.normalizer import normalize_whitespace


def parse_pdf_bytes(data: bytes, doc_id: str) -> ParseResult:
    """
    Parsuje zawartość pliku PDF i zwraca spany w kolejności dokumentu.

    Args:
        data:   Bajty pliku PDF.
        doc_id: Identyfikator dokumentu (document_id spanów).
    """
    doc = fitz.open(stream=data, filetype="pdf")
    try:
        return _parse_document(doc, doc_id)
    finally:
        doc.close()


def _parse_document(doc: fitz.Document, doc_id: str) -> ParseResult:
    # Krok 1: surowy tekst każdej strony
    pages = [page.get_text("text") for page in doc]

    # Krok 2: nagłówki/stopki, numery stron, łamania wyrazów
    cleaned = clean_pages(pages)

    # Krok 3: jeden tekst dokumentu → spany (strona przybliżona z indeksu linii)
    text = normalize_whitespace("\n".join(p for p in cleaned if p))
    page_count = doc.page_count or None
    return ParseResult(
        spans=extract_spans_from_text(text, page_count, doc_id),
        page_count=page_count,
    )
