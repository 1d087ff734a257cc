"""
data_model/documents.py — model dokumentu i spanów (sklasyfikowanych fragmentów tekstu).

Span to atomowa, cytowalna jednostka dokumentu: fragment znormalizowanego
tekstu z offsetami znakowymi, rolą semantyczną i sumą kontrolną.
Spany powstają raz przy ingestii i nigdy nie są modyfikowane.
Kolejność według `start` jest kolejnością dokumentu (ważna dla okien i scalania).
"""

from __future__ import annotations

import hashlib
import pathlib
import uuid
from dataclasses import asdict, dataclass, field
from enum import StrEnum
from typing import Any


class SpanRole(StrEnum):
    """Rola semantyczna spanu."""
    HEADING = "heading"
    PARA    = "para"
    LIST    = "list"
    TABLE   = "table"
    CODE    = "code"
    QUOTE   = "quote"
    FIGURE  = "figure"
    CAPTION = "caption"


class DocumentType(StrEnum):
    PDF  = "pdf"
    EPUB = "epub"
    HTML = "html"
    MD   = "md"
    TXT  = "txt"


_EXTENSION_TYPES: dict[str, DocumentType] = {
    ".pdf":      DocumentType.PDF,
    ".epub":     DocumentType.EPUB,
    ".html":     DocumentType.HTML,
    ".htm":      DocumentType.HTML,
    ".md":       DocumentType.MD,
    ".markdown": DocumentType.MD,
    ".txt":      DocumentType.TXT,
}


def detect_document_type(path: str | pathlib.Path) -> DocumentType:
    """Rozpoznaje typ dokumentu po rozszerzeniu pliku (lub URL)."""
    suffix = pathlib.PurePosixPath(str(path).split("?", 1)[0]).suffix.lower()
    try:
        return _EXTENSION_TYPES[suffix]
    except KeyError:
        raise ValueError(f"Nieobsługiwany typ dokumentu: {suffix or str(path)!r}") from None


def new_id() -> str:
    """Nowy unikalny identyfikator (spany, jednostki, dokumenty)."""
    return uuid.uuid4().hex


def span_checksum(text: str, start: int, end: int) -> str:
    return hashlib.sha256(f"{text}:{start}:{end}".encode("utf-8")).hexdigest()


def document_checksum(content: bytes) -> str:
    return hashlib.sha256(content).hexdigest()


@dataclass(slots=True)
class ParsedBlock:
    """Blok przed scaleniem akapitów — mutowalny, bez sumy kontrolnej."""
    id: str
    role: SpanRole
    text: str
    page: int | None
    start: int
    end: int


@dataclass(frozen=True, slots=True)
class Span:
    id: str
    document_id: str
    page: int | None     # 1-based; None gdy format nie ma stron
    start: int           # offset znakowy w znormalizowanym tekście
    end: int
    role: SpanRole
    text: str
    checksum: str

    @classmethod
    def from_block(cls, block: ParsedBlock, document_id: str) -> Span:
        return cls(
            id=block.id,
            document_id=document_id,
            page=block.page,
            start=block.start,
            end=block.end,
            role=block.role,
            text=block.text,
            checksum=span_checksum(block.text, block.start, block.end),
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["role"] = str(self.role)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Span:
        return cls(
            id=data["id"],
            document_id=data.get("document_id") or data.get("documentId", ""),
            page=data.get("page"),
            start=int(data["start"]),
            end=int(data["end"]),
            role=SpanRole(data["role"]),
            text=data["text"],
            checksum=data.get("checksum")
            or span_checksum(data["text"], int(data["start"]), int(data["end"])),
        )


@dataclass(slots=True)
class Document:
    id: str
    uri: str
    title: str
    type: DocumentType
    checksum: str
    authors: list[str] = field(default_factory=list)
    page_count: int | None = None


@dataclass(slots=True)
class ParseResult:
    spans: list[Span]
    page_count: int | None = None

