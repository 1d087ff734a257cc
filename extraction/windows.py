"""
extraction/windows.py — wybór okien spanów dla wywołań modelu.

Okno = ciągły lub zakotwiczony podzbiór spanów, kontekst jednego wywołania.
Polityka zależy od typu jednostki:

  functions   — kotwice na nagłówkach; sekcja = od nagłówka do następnego
                (wyłącznie); sekcje dłuższe od okna dzielone na pod-okna
                z krokiem floor(0.8 * size); bez nagłówków → stałe porcje
  claims      — tylko spany para/list; krok floor(0.7 * size)
  definitions — kotwice na kandydatach (nagłówek lub fraza definicyjna)
  formulas    — kotwice na kandydatach (nagłówek lub fraza " = ", ratio, ...)

Kandydat → okno od jednego spanu przed kandydatem, łącznie `size` spanów.
Brak kandydatów → stałe, rozłączne porcje po `size` spanów.
"""

from __future__ import annotations

import math
from typing import Callable

from data_model.documents import Span, SpanRole
from data_model.units import UnitType

type Window = list[Span]

DEFAULT_WINDOW_SIZES: dict[UnitType, int] = {
    UnitType.FUNCTIONS:   5,
    UnitType.CLAIMS:      8,
    UnitType.DEFINITIONS: 6,
    UnitType.FORMULAS:    6,
}

FUNCTION_STRIDE = 0.8   # 20% nakładania
CLAIM_STRIDE    = 0.7   # 30% nakładania

DEFINITION_CUES: tuple[str, ...] = (
    " is ", " are ", " means ", " refers to ", " defined as ",
)
FORMULA_CUES: tuple[str, ...] = (
    " = ", " equals ", " calculated as ", " formula ", " ratio ",
    " margin ", " return ", "calculate", "compute",
)

_CLAIM_ROLES = {SpanRole.PARA, SpanRole.LIST}


def _stride(window_size: int, factor: float) -> int:
    return max(1, math.floor(window_size * factor))


def _check_size(window_size: int) -> None:
    if window_size < 1:
        raise ValueError(f"Rozmiar okna musi być >= 1, podano {window_size}")


def fixed_windows(spans: list[Span], window_size: int) -> list[Window]:
    """Stałe, rozłączne porcje — pokrywają wejście bez pominięć."""
    _check_size(window_size)
    return [spans[i:i + window_size] for i in range(0, len(spans), window_size)]


def sliding_windows(spans: list[Span], window_size: int, stride: int) -> list[Window]:
    """
    Okna nakładające się: start co `stride`, długość `window_size`.
    Ostatnie okno kończy się na końcu wejścia; nie ma okien leżących
    w całości wewnątrz poprzedniego.
    """
    _check_size(window_size)
    windows: list[Window] = []
    for i in range(0, len(spans), stride):
        windows.append(spans[i:i + window_size])
        if i + window_size >= len(spans):
            break
    return windows


def function_windows(spans: list[Span], window_size: int = 5) -> list[Window]:
    _check_size(window_size)
    heading_idx = [i for i, s in enumerate(spans) if s.role == SpanRole.HEADING]
    if not heading_idx:
        return fixed_windows(spans, window_size)

    windows: list[Window] = []
    bounds = heading_idx + [len(spans)]
    for start, end in zip(bounds, bounds[1:]):
        section = spans[start:end]
        if len(section) <= window_size:
            windows.append(section)
        else:
            windows.extend(sliding_windows(section, window_size, _stride(window_size, FUNCTION_STRIDE)))
    return windows


def claim_windows(spans: list[Span], window_size: int = 8) -> list[Window]:
    factual = [s for s in spans if s.role in _CLAIM_ROLES]
    return sliding_windows(factual, window_size, _stride(window_size, CLAIM_STRIDE))


def _has_cue(span: Span, cues: tuple[str, ...]) -> bool:
    text = span.text.lower()
    return any(cue in text for cue in cues)


def is_definition_candidate(span: Span) -> bool:
    return span.role == SpanRole.HEADING or _has_cue(span, DEFINITION_CUES)


def is_formula_candidate(span: Span) -> bool:
    return span.role == SpanRole.HEADING or _has_cue(span, FORMULA_CUES)


def candidate_windows(
    spans: list[Span],
    window_size: int,
    is_candidate: Callable[[Span], bool],
) -> list[Window]:
    _check_size(window_size)
    candidates = [i for i, s in enumerate(spans) if is_candidate(s)]
    if not candidates:
        return fixed_windows(spans, window_size)

    windows: list[Window] = []
    for idx in candidates:
        start = max(0, idx - 1)
        end = min(len(spans), idx + window_size - 1)
        windows.append(spans[start:end])
    return windows


def definition_windows(spans: list[Span], window_size: int = 6) -> list[Window]:
    return candidate_windows(spans, window_size, is_definition_candidate)


def formula_windows(spans: list[Span], window_size: int = 6) -> list[Window]:
    return candidate_windows(spans, window_size, is_formula_candidate)


_BUILDERS: dict[UnitType, Callable[[list[Span], int], list[Window]]] = {
    UnitType.FUNCTIONS:   function_windows,
    UnitType.CLAIMS:      claim_windows,
    UnitType.DEFINITIONS: definition_windows,
    UnitType.FORMULAS:    formula_windows,
}


def build_windows(
    spans: list[Span],
    unit_type: UnitType,
    window_size: int | None = None,
) -> list[Window]:
    """Okna dla danego typu jednostki; spany muszą być w kolejności dokumentu."""
    size = window_size or DEFAULT_WINDOW_SIZES[unit_type]
    return [w for w in _BUILDERS[unit_type](spans, size) if w]
