"""
extraction/drafts.py — pliki draftów JSONL (jeden plik na typ jednostki).

Układ katalogów:
  <root>/derived/<document_id>/functions.jsonl
  <root>/derived/<document_id>/claims.jsonl
  <root>/derived/<document_id>/definitions.jsonl
  <root>/derived/<document_id>/formulas.jsonl
  <root>/derived/<document_id>/spans.jsonl       (spany z ingestii)

Jedna linia = jeden obiekt JSON jednostki (to_dict()).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable

from data_model.documents import Span
from data_model.units import Unit, UnitType, unit_from_dict

DERIVED_DIR = "derived"


def draft_path(root: str | Path, document_id: str, unit_type: UnitType) -> Path:
    return Path(root) / DERIVED_DIR / document_id / f"{unit_type}.jsonl"


def write_drafts(path: str | Path, units: Iterable[Unit]) -> int:
    """Zapisuje jednostki jako JSONL (nadpisuje plik). Zwraca liczbę linii."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with path.open("w", encoding="utf-8") as f:
        for unit in units:
            f.write(json.dumps(unit.to_dict(), ensure_ascii=False) + "\n")
            count += 1
    return count


def read_drafts(path: str | Path, unit_type: UnitType) -> list[Unit]:
    """
    Wczytuje jednostki z pliku JSONL; puste linie są pomijane.

    Raises:
        FileNotFoundError: brak pliku.
        ValueError:        linia nie jest poprawnym JSON (z numerem linii).
    """
    units: list[Unit] = []
    with Path(path).open(encoding="utf-8") as f:
        for lineno, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue
            try:
                data = json.loads(line)
            except json.JSONDecodeError as exc:
                raise ValueError(f"{path}:{lineno}: niepoprawny JSON ({exc.msg})") from exc
            units.append(unit_from_dict(unit_type, data))
    return units


# ---------------------------------------------------------------------------
# Spany dokumentu (wynik ingestii bez bazy danych)
# ---------------------------------------------------------------------------

def spans_path(root: str | Path, document_id: str) -> Path:
    return Path(root) / DERIVED_DIR / document_id / "spans.jsonl"


def write_spans(path: str | Path, spans: Iterable[Span]) -> int:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with path.open("w", encoding="utf-8") as f:
        for span in spans:
            f.write(json.dumps(span.to_dict(), ensure_ascii=False) + "\n")
            count += 1
    return count


def read_spans(path: str | Path) -> list[Span]:
    """Spany z pliku JSONL, posortowane w kolejności dokumentu."""
    with Path(path).open(encoding="utf-8") as f:
        spans = [Span.from_dict(json.loads(line)) for line in f if line.strip()]
    return sorted(spans, key=lambda s: s.start)
