"""
ifrs — narzędzie CLI: dokumenty → spany → jednostki z cytowaniami.

Użycie:
  ifrs <komenda> [opcje]

Komendy:
  apply-schema  Aplikuje db/schema.sql do bazy danych (idempotentne).
  ingest        Parsuje dokument (PDF/EPUB/HTML/MD/TXT lub URL) na spany.
  extract       Ekstrahuje jednostki ze spanów do draftów JSONL (Gemini).
  validate      Waliduje drafty jednostek.
  load          Deduplikuje, waliduje i zapisuje jednostki do bazy.
  cite          Formatuje cytowanie dla podanych span_ids.
  ask           Wyszukuje jednostki w bazie i wypisuje je z cytowaniami.
"""

from __future__ import annotations

import argparse
import sys

# Windows: terminal może używać cp1252, wymuszamy UTF-8, żeby polskie znaki
# w tekstach pomocy argparse były wypisywane poprawnie.
if hasattr(sys.stdout, "reconfigure"):
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")
if hasattr(sys.stderr, "reconfigure"):
    sys.stderr.reconfigure(encoding="utf-8", errors="replace")

from ifrs.commands import apply_schema as cmd_apply_schema
from ifrs.commands import ingest as cmd_ingest
from ifrs.commands import extract as cmd_extract
from ifrs.commands import validate as cmd_validate
from ifrs.commands import load as cmd_load
from ifrs.commands import cite as cmd_cite
from ifrs.commands import ask as cmd_ask


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ifrs",
        description="ifrs — ekstrakcja jednostek wiedzy z dokumentów z cytowaniem źródeł.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version", action="version", version="ifrs 0.1.0"
    )

    subparsers = parser.add_subparsers(
        title="komendy",
        metavar="<komenda>",
        dest="command",
    )
    subparsers.required = True

    cmd_apply_schema.add_parser(subparsers)
    cmd_ingest.add_parser(subparsers)
    cmd_extract.add_parser(subparsers)
    cmd_validate.add_parser(subparsers)
    cmd_load.add_parser(subparsers)
    cmd_cite.add_parser(subparsers)
    cmd_ask.add_parser(subparsers)

    return parser


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
