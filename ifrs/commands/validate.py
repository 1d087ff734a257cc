"""Komenda: ifrs validate — walidacja draftów jednostek przed zapisem."""

from __future__ import annotations

import argparse

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich import box

from extraction.drafts import draft_path, read_drafts
from ifrs._common import (
    add_source_argument,
    add_type_argument,
    load_spans,
    selected_types,
    unit_label,
)
from ifrs._settings import load_settings
from segmenter import truncate_text
from validator import UnitValidator, validate_batch

console = Console()


def run(args: argparse.Namespace) -> None:
    try:
        settings = load_settings()
    except ValueError as e:
        console.print(f"[red]Błąd konfiguracji:[/red] {e}")
        raise SystemExit(1)

    known_ids = {s.id for s in load_spans(args.doc_id, args.source, settings, console)}
    validator = UnitValidator(settings.thresholds, settings.max_quote_chars)

    table = Table(box=box.SIMPLE_HEAD, header_style="bold white", expand=False)
    table.add_column("TYP",       style="bold cyan", no_wrap=True)
    table.add_column("JEDNOSTKA", max_width=40)
    table.add_column("KOD",       style="red", no_wrap=True)
    table.add_column("POLE",      no_wrap=True)
    table.add_column("KOMUNIKAT", max_width=60)

    total = invalid = 0
    for unit_type in selected_types(args):
        path = draft_path(settings.data_dir, args.doc_id, unit_type)
        if not path.exists():
            console.print(f"[dim]Pomijam {unit_type} (brak {path})[/dim]")
            continue

        for unit, report in validate_batch(validator, unit_type, read_drafts(path, unit_type), known_ids):
            total += 1
            if report.valid:
                continue
            invalid += 1
            for e in report.errors:
                table.add_row(
                    str(unit_type), escape(truncate_text(unit_label(unit), 60)),
                    str(e.code), e.field, escape(e.message),
                )

    if invalid:
        console.print(table)
    style = "red" if invalid else "green"
    console.print(f"[{style}]Poprawne: {total - invalid}/{total}[/{style}]")

    if invalid and args.strict:
        raise SystemExit(1)


def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "validate",
        help="Waliduje drafty jednostek (kroki, pola, progi, span_ids, cytaty).",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Sprawdza drafty z derived/<doc_id>/<typ>.jsonl regułami walidacji:
numeracja kroków, pola wymagane, progi confidence, istnienie span_ids,
limit długości cytatów.

Tryb --strict kończy się kodem 1, gdy którakolwiek jednostka jest niepoprawna.

Przykłady:
  ifrs validate ifrs15
  ifrs validate ifrs15 --type functions --strict
        """,
    )
    p.add_argument("doc_id", metavar="DOC_ID", help="Identyfikator dokumentu.")
    add_type_argument(p)
    add_source_argument(p)
    p.add_argument("--strict", action="store_true", help="Kod wyjścia 1 przy błędach walidacji.")
    p.set_defaults(func=run)
