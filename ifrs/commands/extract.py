"""Komenda: ifrs extract — ekstrakcja jednostek ze spanów dokumentu (Gemini)."""

from __future__ import annotations

import argparse

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich import box

from data_model.results import ExtractionResult
from data_model.units import UnitType
from extraction import draft_path, extract_units, gemini_caller, write_drafts
from ifrs._common import add_source_argument, add_type_argument, load_spans, selected_types
from ifrs._settings import load_settings

console = Console()


def _summary(results: dict[UnitType, ExtractionResult]) -> Table:
    table = Table(box=box.SIMPLE_HEAD, header_style="bold white", expand=False)
    table.add_column("TYP",         style="bold cyan", no_wrap=True)
    table.add_column("OKNA",        justify="right")
    table.add_column("JEDNOSTKI",   justify="right", style="green")
    table.add_column("ODFILTROWANE", justify="right", style="dim")
    table.add_column("BŁĘDY",       justify="right", style="red")
    table.add_column("TOKENY",      justify="right")
    for unit_type, r in results.items():
        table.add_row(
            str(unit_type), str(r.windows), str(len(r.units)),
            str(r.filtered), str(len(r.errors)), str(r.token_count),
        )
    return table


def run(args: argparse.Namespace) -> None:
    try:
        settings = load_settings()
    except ValueError as e:
        console.print(f"[red]Błąd konfiguracji:[/red] {e}")
        raise SystemExit(1)

    spans = load_spans(args.doc_id, args.source, settings, console)
    call_model = gemini_caller(model=args.model or settings.model, api_key=settings.api_key)

    results: dict[UnitType, ExtractionResult] = {}
    for unit_type in selected_types(args):
        console.print(f"\n[bold]Ekstrakcja: {unit_type}[/bold] ({len(spans)} spanów)")
        result = extract_units(
            spans,
            unit_type,
            call_model,
            document_id=args.doc_id,
            threshold=settings.thresholds[unit_type],
            window_size=args.window_size,
        )
        path = draft_path(settings.data_dir, args.doc_id, unit_type)
        n = write_drafts(path, result.units)
        console.print(f"  [green]Zapisano[/green] {n} draftów → {path}")
        results[unit_type] = result

    console.print()
    console.print(_summary(results))

    errors = [(t, e) for t, r in results.items() for e in r.errors]
    if errors:
        console.print("[yellow]Błędy okien:[/yellow]")
        for unit_type, message in errors:
            console.print(f"  [dim]{unit_type}[/dim] {escape(message)}")


def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "extract",
        help="Ekstrahuje jednostki (functions/claims/definitions/formulas) do draftów JSONL.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Dzieli spany dokumentu na okna, wysyła każde okno do Gemini i zapisuje
drafty jednostek do derived/<doc_id>/<typ>.jsonl.

Błąd pojedynczego okna nie przerywa ekstrakcji — trafia do podsumowania.

Przykłady:
  ifrs extract ifrs15
  ifrs extract ifrs15 --type definitions --type formulas
  ifrs extract ifrs15 --source db --model gemini-2.5-pro
        """,
    )
    p.add_argument("doc_id", metavar="DOC_ID", help="Identyfikator dokumentu.")
    add_type_argument(p)
    add_source_argument(p)
    p.add_argument("--window-size", type=int, default=None, metavar="N",
                   help="Rozmiar okna w spanach (domyślnie 5/8/6/6 wg typu).")
    p.add_argument("--model", default=None, help="Model Gemini (domyślnie GEMINI_MODEL).")
    p.set_defaults(func=run)
