"""
extraction/orchestrator.py — pętla okien ekstrakcji jednostek.

Architektura (jedno okno):
  spany okna → build_context_prompt() → call_with_backoff(call_model)
  → parse_json_response() (jsonschema) → bramki jakości → stempel id/documentId
  → WindowOk | WindowError

Przebieg dokumentu:
  build_windows() → process_window() po kolei, w kolejności dokumentu
  → ExtractionResult (units, errors, token_count, filtered, windows)

Błąd okna (parsowanie, schemat, wyczerpane ponowienia, inny błąd API) to
wartość WindowError — przebieg leci dalej. Draft poniżej progu confidence
albo niespełniający bramki jakości jest odrzucany po cichu (licznik filtered).

Publiczne API:
  process_window(window, index, unit_type, call_model, document_id, threshold) -> WindowOutcome
  extract_units(spans, unit_type, call_model, ...)                           -> ExtractionResult
  passes_quality_gates(unit_type, draft, threshold)                          -> bool
"""

from __future__ import annotations

import random
import time
from typing import Any, Callable

from rich.console import Console
from rich.markup import escape

from data_model.documents import Span, new_id
from data_model.results import ExtractionResult, WindowError, WindowOk, WindowOutcome
from data_model.units import Unit, UnitType, unit_from_dict
from extraction.model_client import ModelCall
from extraction.prompts import SYSTEM_PROMPTS, build_context_prompt
from extraction.response_parser import parse_json_response
from extraction.retry import DEFAULT_RETRIES, call_with_backoff
from extraction.schemas import RESPONSE_SCHEMAS
from extraction.windows import Window, build_windows

_console = Console(stderr=True)

DEFAULT_THRESHOLDS: dict[UnitType, float] = {
    UnitType.FUNCTIONS:   0.75,
    UnitType.CLAIMS:      0.8,
    UnitType.DEFINITIONS: 0.85,
    UnitType.FORMULAS:    0.75,
}

# Przerwa między oknami: (bazowa [s], maks. losowy dodatek [s])
WINDOW_DELAYS: dict[UnitType, tuple[float, float]] = {
    UnitType.FUNCTIONS:   (2.0, 1.0),
    UnitType.CLAIMS:      (1.0, 0.0),
    UnitType.DEFINITIONS: (1.0, 0.0),
    UnitType.FORMULAS:    (2.0, 1.0),
}

MAX_SPAN_IDS         = 3
MAX_PURPOSE_CHARS    = 400
MAX_TERM_CHARS       = 120
MAX_DEFINITION_CHARS = 400


# ---------------------------------------------------------------------------
# Bramki jakości
# ---------------------------------------------------------------------------

def passes_quality_gates(unit_type: UnitType, draft: dict[str, Any], threshold: float) -> bool:
    """True gdy draft przechodzi próg confidence i limity kształtu swojego typu."""
    if draft.get("confidence", 0.0) < threshold:
        return False

    n_spans = len(draft.get("span_ids") or [])
    if n_spans < 1:
        return False

    match unit_type:
        case UnitType.CLAIMS:
            return True
        case UnitType.FUNCTIONS:
            return n_spans <= MAX_SPAN_IDS and len(draft.get("purpose", "")) <= MAX_PURPOSE_CHARS
        case UnitType.DEFINITIONS:
            return (
                n_spans <= MAX_SPAN_IDS
                and len(draft.get("term", "")) <= MAX_TERM_CHARS
                and len(draft.get("definition", "")) <= MAX_DEFINITION_CHARS
            )
        case UnitType.FORMULAS:
            return n_spans <= MAX_SPAN_IDS
    return False


# ---------------------------------------------------------------------------
# Jedno okno
# ---------------------------------------------------------------------------

def process_window(
    window: Window,
    index: int,
    unit_type: UnitType,
    call_model: ModelCall,
    document_id: str,
    threshold: float,
    *,
    max_retries: int = DEFAULT_RETRIES,
    sleep: Callable[[float], None] = time.sleep,
    rand: Callable[[], float] = random.random,
) -> WindowOutcome:
    """Przetwarza jedno okno; nigdy nie rzuca wyjątku za granicę okna."""
    try:
        response = call_with_backoff(
            call_model,
            SYSTEM_PROMPTS[unit_type],
            build_context_prompt(window),
            max_retries=max_retries,
            sleep=sleep,
            rand=rand,
        )
        drafts = parse_json_response(response.content, RESPONSE_SCHEMAS[unit_type])
    except Exception as e:
        return WindowError(index=index, message=str(e) or type(e).__name__)

    kept: list[Unit] = []
    for draft in drafts:
        if not passes_quality_gates(unit_type, draft, threshold):
            continue
        unit = unit_from_dict(unit_type, draft)
        unit.id = new_id()
        unit.document_id = document_id
        kept.append(unit)

    return WindowOk(
        index=index,
        drafts=kept,
        tokens=response.total_tokens,
        filtered=len(drafts) - len(kept),
    )


# ---------------------------------------------------------------------------
# Cały dokument
# ---------------------------------------------------------------------------

def extract_units(
    spans: list[Span],
    unit_type: UnitType,
    call_model: ModelCall,
    *,
    document_id: str | None = None,
    threshold: float | None = None,
    window_size: int | None = None,
    max_retries: int = DEFAULT_RETRIES,
    sleep: Callable[[float], None] = time.sleep,
    rand: Callable[[], float] = random.random,
    console: Console | None = None,
) -> ExtractionResult[Unit]:
    """
    Ekstrahuje jednostki danego typu ze spanów dokumentu.

    Args:
        spans:       Spany dokumentu w kolejności `start`.
        unit_type:   Typ jednostek (functions / claims / definitions / formulas).
        call_model:  (system_prompt, user_prompt) -> ModelResponse.
        document_id: Domyślnie document_id pierwszego spanu.
        threshold:   Próg confidence; domyślnie DEFAULT_THRESHOLDS[unit_type].
        window_size: Rozmiar okna; domyślnie 5/8/6/6 wg typu.
        sleep, rand: Wstrzykiwane na potrzeby testów (przerwy i jitter).
    """
    out = console or _console
    result: ExtractionResult[Unit] = ExtractionResult()
    if not spans:
        return result

    doc_id = document_id or spans[0].document_id
    limit = DEFAULT_THRESHOLDS[unit_type] if threshold is None else threshold
    base_delay, max_jitter = WINDOW_DELAYS[unit_type]

    windows = build_windows(spans, unit_type, window_size)
    for i, window in enumerate(windows):
        if i > 0:
            sleep(base_delay + rand() * max_jitter)

        out.print(f"  Okno {i + 1}/{len(windows)} ({len(window)} spanów)")
        outcome = process_window(
            window, i, unit_type, call_model, doc_id, limit,
            max_retries=max_retries, sleep=sleep, rand=rand,
        )
        result.add(outcome)

        if isinstance(outcome, WindowError):
            out.print(f"    [yellow]Błąd okna:[/yellow] {escape(str(outcome))}")
        else:
            out.print(
                f"    [green]{len(outcome.drafts)}[/green] jednostek "
                f"([dim]{outcome.filtered} odfiltrowanych[/dim])"
            )

    return result
