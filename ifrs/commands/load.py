"""Komenda: ifrs load — deduplikacja, walidacja i zapis jednostek do bazy."""

from __future__ import annotations

import argparse

from rich.console import Console

from data_model.units import Unit, UnitType
from dedup import DedupSession
from extraction.drafts import draft_path, read_drafts
from ifrs._common import add_type_argument, load_spans, selected_types
from ifrs._db import get_connection
from ifrs._settings import Settings, load_settings
from validator import UnitValidator, validate_batch

console = Console()


def _deduplicate(session: DedupSession, unit_type: UnitType, units: list[Unit]) -> list[Unit]:
    match unit_type:
        case UnitType.DEFINITIONS:
            session.add_definitions(units)
            return session.definitions
        case UnitType.FUNCTIONS:
            session.add_functions(units)
            return session.functions
        case UnitType.FORMULAS:
            session.add_formulas(units)
            return session.formulas
    return units


def _prepare(
    args: argparse.Namespace,
    settings: Settings,
    known_ids: set[str],
) -> dict[UnitType, list[Unit]]:
    """Wczytuje drafty, deduplikuje i waliduje; zwraca jednostki do zapisu."""
    session = DedupSession(args.doc_id, formula_threshold=settings.thresholds[UnitType.FORMULAS])
    validator = UnitValidator(settings.thresholds, settings.max_quote_chars)

    ready: dict[UnitType, list[Unit]] = {}
    failed = 0
    for unit_type in selected_types(args):
        path = draft_path(settings.data_dir, args.doc_id, unit_type)
        if not path.exists():
            console.print(f"[dim]Pomijam {unit_type} (brak {path})[/dim]")
            continue

        drafts = read_drafts(path, unit_type)
        units = _deduplicate(session, unit_type, drafts)
        reports = validate_batch(validator, unit_type, units, known_ids)
        valid = [u for u, r in reports if r.valid]
        failed += len(units) - len(valid)
        console.print(
            f"  {unit_type}: {len(drafts)} draftów → {len(units)} po deduplikacji "
            f"→ [green]{len(valid)}[/green] poprawnych"
        )
        if unit_type == UnitType.FORMULAS and session.rejected_formulas:
            console.print(
                f"    [yellow]{session.rejected_formulas} wzorów odrzuconych przez bramki jakości[/yellow]"
            )
        ready[unit_type] = valid

    if failed and args.strict:
        console.print(f"[red]{failed} jednostek nie przeszło walidacji — przerwano (--strict).[/red]")
        raise SystemExit(1)
    return ready


def run(args: argparse.Namespace) -> None:
    from storage import insert_units

    try:
        settings = load_settings()
    except ValueError as e:
        console.print(f"[red]Błąd konfiguracji:[/red] {e}")
        raise SystemExit(1)

    console.print(f"Ładowanie jednostek dokumentu [cyan]{args.doc_id}[/cyan]")
    known_ids = {s.id for s in load_spans(args.doc_id, "db", settings, console)}
    ready = _prepare(args, settings, known_ids)

    try:
        conn = get_connection()
    except Exception as e:
        console.print(f"[red]Błąd połączenia z bazą:[/red] {e}")
        raise SystemExit(1)

    total = 0
    try:
        for unit_type, units in ready.items():
            n = insert_units(conn, unit_type, units)
            console.print(f"  [green]✓[/green] {unit_type}: zapisano {n}")
            total += n
        conn.commit()
    except Exception as e:
        conn.rollback()
        console.print(f"[red]Błąd zapisu do bazy:[/red] {e}")
        raise SystemExit(1)
    finally:
        conn.close()

    console.print(f"[green]Gotowe.[/green] Łącznie zapisano {total} jednostek.")


def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "load",
        help="Deduplikuje, waliduje i zapisuje drafty jednostek do bazy.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Wczytuje drafty z derived/<doc_id>/<typ>.jsonl, deduplikuje (definicje,
procedury, wzory), waliduje względem spanów dokumentu w bazie i zapisuje.

Domyślnie niepoprawne jednostki są pomijane; --strict przerywa cały zapis.

Przykłady:
  ifrs load ifrs15
  ifrs load ifrs15 --type definitions --strict
        """,
    )
    p.add_argument("doc_id", metavar="DOC_ID", help="Identyfikator dokumentu (spany muszą być w bazie).")
    add_type_argument(p)
    p.add_argument("--strict", action="store_true", help="Przerwij, gdy którakolwiek jednostka jest niepoprawna.")
    p.set_defaults(func=run)
