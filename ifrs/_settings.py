"""
Konfiguracja przez zmienne środowiskowe (opcjonalnie plik .env w katalogu głównym).

  IFRS_CONFIDENCE_FUNC     próg confidence dla procedur      (0.75)
  IFRS_CONFIDENCE_CLAIM    próg dla twierdzeń                (0.8)
  IFRS_CONFIDENCE_DEF      próg dla definicji                (0.85)
  IFRS_CONFIDENCE_FORMULA  próg dla wzorów                   (0.75)
  IFRS_MAX_QUOTE_CHARS     maks. długość cytatu w jednostce  (300)
  IFRS_DATA_DIR            katalog z derived/<doc_id>/...    (.)
  GEMINI_MODEL             model Gemini                      (gemini-2.5-flash)
  GEMINI_API_KEY           klucz API Gemini
"""

from __future__ import annotations

import os
import pathlib
from dataclasses import dataclass, field
from typing import Mapping

from dotenv import load_dotenv

from data_model.units import UnitType
from extraction.model_client import DEFAULT_MODEL
from extraction.orchestrator import DEFAULT_THRESHOLDS
from validator.unit_validator import DEFAULT_MAX_QUOTE_CHARS

ROOT = pathlib.Path(__file__).resolve().parent.parent

_THRESHOLD_ENV: dict[UnitType, str] = {
    UnitType.FUNCTIONS:   "IFRS_CONFIDENCE_FUNC",
    UnitType.CLAIMS:      "IFRS_CONFIDENCE_CLAIM",
    UnitType.DEFINITIONS: "IFRS_CONFIDENCE_DEF",
    UnitType.FORMULAS:    "IFRS_CONFIDENCE_FORMULA",
}


@dataclass(slots=True)
class Settings:
    thresholds: dict[UnitType, float] = field(default_factory=lambda: dict(DEFAULT_THRESHOLDS))
    max_quote_chars: int = DEFAULT_MAX_QUOTE_CHARS
    data_dir: pathlib.Path = pathlib.Path(".")
    model: str = DEFAULT_MODEL
    api_key: str | None = None


def _float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name}: oczekiwano liczby, otrzymano {raw!r}") from None
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name}: próg musi być w przedziale [0, 1], otrzymano {value}")
    return value


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name}: oczekiwano liczby całkowitej, otrzymano {raw!r}") from None
    if value < 1:
        raise ValueError(f"{name}: wartość musi być >= 1, otrzymano {value}")
    return value


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """
    Buduje Settings ze zmiennych środowiskowych.

    Args:
        env: Słownik zmiennych; None → os.environ (po wczytaniu .env).

    Raises:
        ValueError: Niepoprawna wartość zmiennej.
    """
    if env is None:
        load_dotenv(ROOT / ".env")
        env = os.environ

    return Settings(
        thresholds={
            t: _float(env, name, DEFAULT_THRESHOLDS[t])
            for t, name in _THRESHOLD_ENV.items()
        },
        max_quote_chars=_int(env, "IFRS_MAX_QUOTE_CHARS", DEFAULT_MAX_QUOTE_CHARS),
        data_dir=pathlib.Path(env.get("IFRS_DATA_DIR") or "."),
        model=env.get("GEMINI_MODEL") or DEFAULT_MODEL,
        api_key=env.get("GEMINI_API_KEY") or None,
    )
