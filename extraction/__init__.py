"""
extraction — okna spanów, wywołania modelu i drafty jednostek.

Publiczne API:
  build_windows(spans, unit_type, window_size)        -> list[Window]
  build_context_prompt(spans)                         -> str
  parse_json_response(text, schema)                   -> list[dict]
  call_gemini(system_prompt, user_prompt, model, key) -> ModelResponse
  gemini_caller(model, api_key)                       -> ModelCall
  backoff_delay(attempt, base, jitter, rand)          -> float
  call_with_backoff(fn, *args, max_retries, sleep)    -> T
  extract_units(spans, unit_type, call_model, ...)    -> ExtractionResult
  write_drafts(path, units) / read_drafts(path, unit_type)
"""

from .windows import (
    Window,
    build_windows,
    function_windows,
    claim_windows,
    definition_windows,
    formula_windows,
    fixed_windows,
    DEFAULT_WINDOW_SIZES,
)
from .prompts import SYSTEM_PROMPTS, build_context_prompt
from .schemas import RESPONSE_SCHEMAS
from .response_parser import ResponseFormatError, parse_json_response, extract_json_fragment, iter_json_fragments
from .model_client import (
    DEFAULT_MODEL,
    ModelCall,
    ModelResponse,
    RateLimitError,
    call_gemini,
    gemini_caller,
)
from .retry import backoff_delay, call_with_backoff
from .orchestrator import (
    DEFAULT_THRESHOLDS,
    extract_units,
    passes_quality_gates,
    process_window,
)
from .drafts import draft_path, read_drafts, write_drafts, spans_path, read_spans, write_spans

__all__ = [
    "Window",
    "build_windows",
    "function_windows",
    "claim_windows",
    "definition_windows",
    "formula_windows",
    "fixed_windows",
    "DEFAULT_WINDOW_SIZES",
    "SYSTEM_PROMPTS",
    "build_context_prompt",
    "RESPONSE_SCHEMAS",
    "ResponseFormatError",
    "parse_json_response",
    "extract_json_fragment",
    "iter_json_fragments",
    "DEFAULT_MODEL",
    "ModelCall",
    "ModelResponse",
    "RateLimitError",
    "call_gemini",
    "gemini_caller",
    "backoff_delay",
    "call_with_backoff",
    "DEFAULT_THRESHOLDS",
    "extract_units",
    "passes_quality_gates",
    "process_window",
    "draft_path",
    "read_drafts",
    "write_drafts",
    "spans_path",
    "read_spans",
    "write_spans",
]
