"""
extraction/model_client.py — pojedyncze wywołanie Gemini API.

Zmienna środowiskowa:
  GEMINI_API_KEY   klucz API (wymagany, gdy nie podano api_key)

Opcjonalnie plik .env w katalogu głównym projektu:
  GEMINI_API_KEY=AIza...

Klient NIE ponawia wywołań — polityka ponowień żyje w extraction.retry.
Błąd 429 jest zgłaszany jako RateLimitError (z sugerowanym czasem
oczekiwania, jeśli API go podało); wyczerpany dzienny limit → RuntimeError.

Publiczne API:
  call_gemini(system_prompt, user_prompt, model, api_key) -> ModelResponse
"""

from __future__ import annotations

import functools
import os
import pathlib
import re
from dataclasses import dataclass
from typing import Callable

from dotenv import load_dotenv
from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types

load_dotenv(pathlib.Path(__file__).resolve().parent.parent / ".env")

DEFAULT_MODEL = "gemini-2.5-flash"
_ENV_KEY      = "GEMINI_API_KEY"
_MAX_OUTPUT_TOKENS = 4000

# Wzorzec do wyciągnięcia liczby sekund z komunikatu API (np. "retry in 18.8s")
_RETRY_DELAY_RE = re.compile(r"retry[^\d]*(\d+(?:\.\d+)?)\s*s", re.IGNORECASE)


@dataclass(slots=True)
class ModelResponse:
    content: str
    total_tokens: int = 0


class RateLimitError(Exception):
    """HTTP 429 — błąd przejściowy, do ponowienia z backoffem."""

    def __init__(self, message: str, retry_after: float | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


# Sygnatura klienta modelu widziana przez orkiestrator:
#   (system_prompt, user_prompt) -> ModelResponse
type ModelCall = Callable[[str, str], ModelResponse]


@functools.lru_cache(maxsize=4)
def _get_client(api_key: str) -> genai.Client:
    """Zwraca (i cache'uje) klienta Gemini dla danego klucza API."""
    return genai.Client(api_key=api_key)


def _parse_retry_delay(error: Exception) -> float | None:
    """Wyciąga sugerowany czas oczekiwania z błędu 429, jeśli jest dostępny."""
    m = _RETRY_DELAY_RE.search(str(error))
    if m:
        return float(m.group(1))
    delay = getattr(error, "retry_delay", None)
    if delay is not None:
        return float(delay)
    return None


def _is_daily_quota(error: Exception) -> bool:
    """Zwraca True gdy to wyczerpany dzienny limit (retry nie pomoże)."""
    return "PerDay" in str(error)


def call_gemini(
    system_prompt: str,
    user_prompt: str,
    model: str = DEFAULT_MODEL,
    api_key: str | None = None,
) -> ModelResponse:
    """
    Wysyła (prompt systemowy, prompt użytkownika) do Gemini.

    Raises:
        ValueError:     Brak klucza API.
        RateLimitError: 429 (ponawialny).
        RuntimeError:   Dzienny limit wyczerpany albo pusta odpowiedź.
        google.genai.errors.APIError: Inny błąd API.
    """
    key = api_key or os.getenv(_ENV_KEY)
    if not key:
        raise ValueError(
            f"Brak klucza Gemini API. "
            f"Ustaw zmienną środowiskową {_ENV_KEY} lub przekaż api_key."
        )

    client = _get_client(key)
    try:
        response = client.models.generate_content(
            model=model,
            contents=user_prompt,
            config=genai_types.GenerateContentConfig(
                system_instruction=system_prompt,
                max_output_tokens=_MAX_OUTPUT_TOKENS,
            ),
        )
    except genai_errors.ClientError as exc:
        if exc.code != 429:
            raise
        if _is_daily_quota(exc):
            raise RuntimeError(
                f"Dzienny limit zapytań dla modelu {model} wyczerpany. "
                f"Szczegóły API: {exc}"
            ) from exc
        raise RateLimitError(str(exc), retry_after=_parse_retry_delay(exc)) from exc

    text = response.text
    if text is None:
        raise RuntimeError("Gemini zwrócił pustą odpowiedź tekstową.")

    usage = response.usage_metadata
    tokens = (usage.total_token_count or 0) if usage is not None else 0
    return ModelResponse(content=text, total_tokens=tokens)


def gemini_caller(model: str = DEFAULT_MODEL, api_key: str | None = None) -> ModelCall:
    """Wiąże model i klucz → callable (system_prompt, user_prompt) -> ModelResponse."""
    return functools.partial(call_gemini, model=model, api_key=api_key)
