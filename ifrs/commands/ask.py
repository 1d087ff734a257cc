"""Komenda: ifrs ask — wyszukiwanie jednostek w bazie z cytowaniem źródeł."""

from __future__ import annotations

import argparse

import psycopg2
from rich.console import Console
from rich.markup import escape

from citations import SpanCitation, format_citations
from data_model.units import Claim, Definition, Formula, FunctionDoc, Unit, UnitType
from ifrs._common import ALL_TYPES, unit_label
from ifrs._db import get_connection

console = Console()

DEFAULT_TYPES = [UnitType.FUNCTIONS, UnitType.CLAIMS]
MAX_STEPS_SHOWN = 3

_LABELS = {
    UnitType.FUNCTIONS:   "PROCEDURA",
    UnitType.CLAIMS:      "TWIERDZENIE",
    UnitType.DEFINITIONS: "DEFINICJA",
    UnitType.FORMULAS:    "WZÓR",
}


# ---------------------------------------------------------------------------
# Formatowanie wyników
# ---------------------------------------------------------------------------

def collect_span_ids(results: list[tuple[UnitType, Unit]]) -> list[str]:
    """Wszystkie span_ids wyników (bez duplikatów) na jedno zapytanie o cytowania."""
    return list(dict.fromkeys(sid for _, unit in results for sid in unit.span_ids))


def _details(unit: Unit) -> list[str]:
    match unit:
        case FunctionDoc():
            lines = [f"Cel: {unit.purpose}"]
            if unit.inputs:
                lines.append("Wejścia: " + ", ".join(f"{i.name}:{i.type}" for i in unit.inputs))
            steps = sorted(unit.steps, key=lambda s: s.n)
            lines += [f"  {s.n}. {s.text}" for s in steps[:MAX_STEPS_SHOWN]]
            if len(steps) > MAX_STEPS_SHOWN:
                lines.append(f"  ... (jeszcze {len(steps) - MAX_STEPS_SHOWN} kroków)")
            return lines
        case Claim():
            return [f"Kontekst: {unit.qualifiers}"] if unit.qualifiers else []
        case Definition():
            lines = [f"Definicja: {unit.definition}"]
            if unit.aliases:
                lines.append("Aliasy: " + ", ".join(unit.aliases))
            return lines
        case Formula():
            return [f"Wzór: {unit.expression}"]
    return []


def citation_line(unit: Unit, citation_map: dict[str, SpanCitation]) -> str:
    """
    Cytowanie jednostki ze wstępnie pobranej mapy span_id → SpanCitation.
    Gdy żaden span nie został rozwiązany, wypisywane są same identyfikatory.
    """
    found = [citation_map[sid] for sid in unit.span_ids if sid in citation_map]
    if found:
        return f"Źródła: {format_citations(found)}"
    shown = ", ".join(unit.span_ids[:3])
    return f"Źródła: spany {shown}{'...' if len(unit.span_ids) > 3 else ''}"


def describe_result(
    unit_type: UnitType,
    unit: Unit,
    citation_map: dict[str, SpanCitation] | None = None,
) -> list[str]:
    """Linie opisu jednego wyniku; citation_map=None wyłącza cytowania."""
    lines = [f"{_LABELS[unit_type]}: {unit_label(unit)} (conf {unit.confidence:.2f})"]
    lines += _details(unit)
    if citation_map is not None and unit.span_ids:
        lines.append(citation_line(unit, citation_map))
    return lines


# ---------------------------------------------------------------------------
# Komenda
# ---------------------------------------------------------------------------

def run(args: argparse.Namespace) -> None:
    from storage import get_span_citations, search_units

    unit_types = [UnitType(t) for t in (args.type or DEFAULT_TYPES)]
    if args.topk < 1:
        console.print("[red]--topk musi być ≥ 1.[/red]")
        raise SystemExit(1)

    console.print(f"Szukam: [cyan]{escape(args.query)}[/cyan] ({', '.join(unit_types)}, top {args.topk})")

    try:
        conn = get_connection()
    except Exception as e:
        console.print(f"[red]Błąd połączenia z bazą:[/red] {e}")
        raise SystemExit(1)

    results: list[tuple[UnitType, Unit]] = []
    citation_map: dict[str, SpanCitation] | None = None
    try:
        for unit_type in unit_types:
            try:
                found = search_units(conn, unit_type, args.query, args.topk)
            except psycopg2.Error as e:
                conn.rollback()
                console.print(f"  [yellow]Błąd wyszukiwania {unit_type}:[/yellow] {e}")
                continue
            console.print(f"  {unit_type}: {len(found)}")
            results += [(unit_type, u) for u in found]

        if not args.no_cite:
            span_ids = collect_span_ids(results)
            citations = get_span_citations(conn, span_ids) if span_ids else []
            citation_map = {c.span_id: c for c in citations}
    finally:
        conn.close()

    if not results:
        console.print(f"[yellow]Brak wyników dla[/yellow] '{escape(args.query)}'.")
        return

    console.print()
    for rank, (unit_type, unit) in enumerate(results, 1):
        header, *rest = describe_result(unit_type, unit, citation_map)
        console.print(f"[bold]{rank}.[/bold] {escape(header)}")
        for line in rest:
            console.print(f"   {escape(line)}", highlight=False)
        console.print()


def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "ask",
        help="Wyszukuje jednostki w bazie i wypisuje je z cytowaniami.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Wyszukiwanie tekstowe (ILIKE) w zapisanych jednostkach, najwyższe confidence
najpierw. Cytowania wszystkich wyników są pobierane jednym zapytaniem.

Przykłady:
  ifrs ask "revenue"
  ifrs ask "contract asset" --type definitions --topk 3
  ifrs ask "margin" --type formulas --no-cite
        """,
    )
    p.add_argument("query", metavar="QUERY", help="Szukany tekst.")
    p.add_argument(
        "--type",
        action="append",
        choices=ALL_TYPES,
        metavar="TYP",
        help="Typ jednostek (można powtórzyć; domyślnie: functions, claims).",
    )
    p.add_argument("--topk", type=int, default=5, help="Maks. liczba wyników na typ (domyślnie: 5).")
    p.add_argument("--no-cite", action="store_true", help="Nie pobieraj cytowań.")
    p.set_defaults(func=run)
