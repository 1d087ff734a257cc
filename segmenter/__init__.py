"""
segmenter — normalizacja, klasyfikacja i scalanie spanów dokumentu.

Publiczne API:
  normalize_whitespace(text)                          -> str
  classify_text_role(text)                            -> SpanRole
  extract_spans_from_text(text, page_count, doc_id)   -> list[Span]
  merge_paragraphs(blocks, doc_id)                    -> list[Span]
  parse_text(text, doc_id)                            -> ParseResult
  parse_document(data, doc_type, doc_id)              -> ParseResult
"""

from data_model.documents import DocumentType, ParseResult

from .normalizer import normalize_whitespace, dehyphenate, truncate_text
from .role_patterns import ROLE_RULES, RoleRule
from .classifier import (
    classify_text_role,
    extract_blocks_from_text,
    extract_blocks_from_paragraphs,
    extract_spans_from_text,
    merge_paragraphs,
)


def parse_text(text: str, document_id: str) -> ParseResult:
    """Tekst / Markdown: klasyfikacja liniami, bez numerów stron."""
    normalized = normalize_whitespace(text)
    return ParseResult(
        spans=extract_spans_from_text(normalized, None, document_id),
        page_count=None,
    )


def parse_document(data: bytes, doc_type: DocumentType, document_id: str) -> ParseResult:
    """Wybiera parser według typu dokumentu."""
    match doc_type:
        case DocumentType.PDF:
            from pdf.parser import parse_pdf_bytes
            return parse_pdf_bytes(data, document_id)
        case DocumentType.EPUB:
            from epub_parser.parser import parse_epub_bytes
            return parse_epub_bytes(data, document_id)
        case DocumentType.HTML:
            from html_parser.parser import parse_html
            return parse_html(data.decode("utf-8", errors="replace"), document_id)
        case DocumentType.MD | DocumentType.TXT:
            return parse_text(data.decode("utf-8", errors="replace"), document_id)
    raise ValueError(f"Nieobsługiwany typ dokumentu: {doc_type}")


__all__ = [
    "normalize_whitespace",
    "dehyphenate",
    "truncate_text",
    "ROLE_RULES",
    "RoleRule",
    "classify_text_role",
    "extract_blocks_from_text",
    "extract_blocks_from_paragraphs",
    "extract_spans_from_text",
    "merge_paragraphs",
    "parse_text",
    "parse_document",
]
