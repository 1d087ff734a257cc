"""Wspólne pomocnicze dla komend: źródło spanów, etykiety jednostek."""

from __future__ import annotations

import argparse

from rich.console import Console

from data_model.documents import Span
from data_model.units import Claim, Definition, Formula, FunctionDoc, Unit, UnitType
from extraction.drafts import read_spans, spans_path
from ifrs._db import get_connection
from ifrs._settings import Settings

ALL_TYPES = [t.value for t in UnitType]


def load_spans(document_id: str, source: str, settings: Settings, console: Console) -> list[Span]:
    """
    Spany dokumentu z bazy (source="db") albo z derived/<doc_id>/spans.jsonl.
    Brak spanów to błąd całego dokumentu → SystemExit(1).
    """
    if source == "db":
        from storage import get_spans
        try:
            conn = get_connection()
        except Exception as e:
            console.print(f"[red]Błąd połączenia z bazą:[/red] {e}")
            raise SystemExit(1)
        try:
            spans = get_spans(conn, document_id)
        finally:
            conn.close()
    else:
        path = spans_path(settings.data_dir, document_id)
        if not path.exists():
            console.print(f"[red]Brak pliku spanów:[/red] {path} (uruchom najpierw: ifrs ingest)")
            raise SystemExit(1)
        spans = read_spans(path)

    if not spans:
        console.print(f"[red]Brak spanów dla dokumentu[/red] '{document_id}'.")
        raise SystemExit(1)
    return spans


def selected_types(args: argparse.Namespace) -> list[UnitType]:
    return [UnitType(t) for t in (args.type or ALL_TYPES)]


def unit_label(unit: Unit) -> str:
    match unit:
        case FunctionDoc():
            return unit.name
        case Definition():
            return unit.term
        case Formula():
            return unit.name
        case Claim():
            return f"{unit.subject} {unit.predicate} {unit.object}"
    return unit.id


def add_type_argument(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--type",
        action="append",
        choices=ALL_TYPES,
        metavar="TYP",
        help=f"Typ jednostek (można powtórzyć; domyślnie wszystkie: {', '.join(ALL_TYPES)}).",
    )


def add_source_argument(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--source",
        choices=["json", "db"],
        default="json",
        help="Skąd wczytać spany: derived/<doc_id>/spans.jsonl (json) lub baza (db). Domyślnie: json.",
    )
