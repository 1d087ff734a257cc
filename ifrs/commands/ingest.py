"""Komenda: ifrs ingest — parsowanie dokumentu do sklasyfikowanych spanów."""

from __future__ import annotations

import argparse
from collections import Counter
from dataclasses import replace
from pathlib import Path

from rich.console import Console
from rich.table import Table
from rich import box

from data_model.documents import (
    Document,
    DocumentType,
    ParseResult,
    Span,
    detect_document_type,
    document_checksum,
    new_id,
)
from extraction.drafts import spans_path, write_spans
from ifrs._db import get_connection
from ifrs._settings import load_settings
from segmenter import parse_document, truncate_text

console = Console()

_PREVIEW_ROWS = 40


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


# ---------------------------------------------------------------------------
# Wczytanie źródła
# ---------------------------------------------------------------------------

def _read_source(source: str) -> tuple[bytes, DocumentType]:
    if _is_url(source):
        from html_parser.parser import fetch_html
        return fetch_html(source).encode("utf-8"), DocumentType.HTML

    path = Path(source)
    if not path.exists():
        console.print(f"[red]Plik nie istnieje:[/red] {path}")
        raise SystemExit(1)
    return path.read_bytes(), detect_document_type(path)


# ---------------------------------------------------------------------------
# Zapis do bazy danych
# ---------------------------------------------------------------------------

def _write_db(document: Document, spans: list[Span]) -> str:
    """Zapisuje dokument i spany; zwraca id dokumentu w bazie."""
    from storage import delete_spans, insert_document, insert_spans

    try:
        conn = get_connection()
    except Exception as e:
        console.print(f"[red]Błąd połączenia z bazą:[/red] {e}")
        raise SystemExit(1)

    try:
        doc_id = insert_document(conn, document)
        if doc_id != document.id:
            console.print(f"[dim]Dokument już w bazie — ponowny ingest jako {doc_id}[/dim]")
            spans = [replace(s, document_id=doc_id) for s in spans]
        removed = delete_spans(conn, doc_id)
        n = insert_spans(conn, spans)
        conn.commit()
    except Exception as e:
        conn.rollback()
        console.print(f"[red]Błąd zapisu do bazy:[/red] {e}")
        raise SystemExit(1)
    finally:
        conn.close()

    console.print(f"[green]DB:[/green] {n} spanów (usunięto {removed} starych) dla doc_id='{doc_id}'")
    return doc_id


# ---------------------------------------------------------------------------
# Wyświetlanie w terminalu
# ---------------------------------------------------------------------------

def _show_table(spans: list[Span]) -> None:
    table = Table(
        box=box.SIMPLE_HEAD,
        show_header=True,
        header_style="bold white",
        row_styles=["", "dim"],
        expand=False,
    )
    table.add_column("#",      justify="right", no_wrap=True, style="dim")
    table.add_column("ROLA",   no_wrap=True, style="bold cyan")
    table.add_column("STRONA", justify="center", no_wrap=True)
    table.add_column("OFFSET", justify="right", no_wrap=True)
    table.add_column("TEKST",  no_wrap=False, max_width=70)

    for i, span in enumerate(spans[:_PREVIEW_ROWS], 1):
        table.add_row(
            str(i),
            str(span.role),
            "-" if span.page is None else str(span.page),
            f"{span.start}–{span.end}",
            truncate_text(span.text, 120),
        )

    console.print()
    console.print(table)
    if len(spans) > _PREVIEW_ROWS:
        console.print(f"  [dim]… i {len(spans) - _PREVIEW_ROWS} kolejnych[/dim]")

    roles = Counter(str(s.role) for s in spans)
    console.print("  " + ", ".join(f"{role}: {n}" for role, n in roles.most_common()) + "\n")


# ---------------------------------------------------------------------------
# Główna logika komendy
# ---------------------------------------------------------------------------

def run(args: argparse.Namespace) -> None:
    try:
        settings = load_settings()
    except ValueError as e:
        console.print(f"[red]Błąd konfiguracji:[/red] {e}")
        raise SystemExit(1)

    data, doc_type = _read_source(args.source)
    doc_id: str = args.doc_id or new_id()

    console.print(f"Parsowanie [bold]{args.source}[/bold] ({doc_type}, doc_id=[cyan]{doc_id}[/cyan]) …")
    try:
        result: ParseResult = parse_document(data, doc_type, doc_id)
    except Exception as e:
        console.print(f"[red]Błąd parsowania:[/red] {e}")
        raise SystemExit(1)

    spans = result.spans
    if not spans:
        console.print("[yellow]Nie znaleziono żadnych spanów.[/yellow]")
        raise SystemExit(1)
    console.print(f"Znaleziono [bold]{len(spans)}[/bold] spanów.")

    if args.out in ("db", "both"):
        document = Document(
            id=doc_id,
            uri=args.source if _is_url(args.source) else str(Path(args.source).resolve()),
            title=args.title or (args.source if _is_url(args.source) else Path(args.source).stem),
            type=doc_type,
            checksum=document_checksum(data),
            authors=list(args.author or []),
            page_count=result.page_count,
        )
        stored_id = _write_db(document, spans)
        if stored_id != doc_id:
            doc_id = stored_id
            spans = [replace(s, document_id=doc_id) for s in spans]

    if args.out in ("json", "both"):
        path = spans_path(settings.data_dir, doc_id)
        n = write_spans(path, spans)
        console.print(f"[green]JSONL:[/green] {path}  ({n} spanów)")

    if args.show:
        _show_table(spans)


# ---------------------------------------------------------------------------
# Rejestracja parsera
# ---------------------------------------------------------------------------

def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "ingest",
        help="Parsuje dokument (PDF/EPUB/HTML/MD/TXT lub URL) na spany.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Parsuje dokument na sklasyfikowane spany (heading/para/list/...) i zapisuje wynik.

Przykłady:
  ifrs ingest ifrs15.pdf --show
  ifrs ingest ifrs15.pdf --doc-id ifrs15 --out both --title "IFRS 15 Summary"
  ifrs ingest https://example.com/glossary.html --out json
        """,
    )
    p.add_argument("source", metavar="PLIK|URL", help="Ścieżka do pliku lub adres strony HTML.")
    p.add_argument("--doc-id", metavar="ID", default=None,
                   help="Identyfikator dokumentu (domyślnie: nowy losowy).")
    p.add_argument("--title", default=None, help="Tytuł dokumentu (do cytowań).")
    p.add_argument("--author", action="append", metavar="AUTOR", help="Autor (można powtórzyć).")
    p.add_argument(
        "--out",
        choices=["json", "db", "both"],
        default="json",
        help="Gdzie zapisać spany (domyślnie: json → derived/<doc_id>/spans.jsonl).",
    )
    p.add_argument("--show", action="store_true", help="Wyświetl tabelę spanów.")
    p.set_defaults(func=run)
