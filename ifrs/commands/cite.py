"""Komenda: ifrs cite — czytelne cytowanie listy spanów."""

from __future__ import annotations

import argparse

from rich.console import Console

from citations import format_citations
from ifrs._db import get_connection

console = Console()


def run(args: argparse.Namespace) -> None:
    from storage import get_span_citations

    try:
        conn = get_connection()
    except Exception as e:
        console.print(f"[red]Błąd połączenia z bazą:[/red] {e}")
        raise SystemExit(1)

    try:
        citations = get_span_citations(conn, args.span_ids)
    finally:
        conn.close()

    missing = set(args.span_ids) - {c.span_id for c in citations}
    for span_id in sorted(missing):
        console.print(f"[yellow]Nieznany span:[/yellow] {span_id}")
    if not citations:
        raise SystemExit(1)

    print(format_citations(citations))


def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "cite",
        help="Formatuje cytowanie dla podanych span_ids.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Grupuje spany według tytułu dokumentu i zwija strony w zakresy.

Przykład:
  ifrs cite 3f2a... 9b1c... 77de...
  → "IFRS 15 Summary" p.12–14, p.16
        """,
    )
    p.add_argument("span_ids", nargs="+", metavar="SPAN_ID", help="Identyfikatory spanów.")
    p.set_defaults(func=run)
