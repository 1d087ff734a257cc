"""
validator/types.py — kody błędów i struktury raportu walidacji.

ValidationError — pojedynczy błąd: kod, pole jednostki, komunikat,
    opcjonalnie wartość, która spowodowała błąd.
ValidationReport — wynik walidacji jednej jednostki: valid, errors.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Stałe kody błędów walidatora jednostek."""

    # Pola wymagane i limity długości
    FIELD_REQUIRED       = "E_FIELD_REQUIRED"
    FIELD_TOO_LONG       = "E_FIELD_TOO_LONG"

    # Kroki procedury
    STEPS_EMPTY          = "E_STEPS_EMPTY"
    STEP_NUMBERING       = "E_STEP_NUMBERING"
    STEP_TEXT_EMPTY      = "E_STEP_TEXT_EMPTY"

    # Cytowania
    SPAN_IDS_EMPTY       = "E_SPAN_IDS_EMPTY"
    SPAN_ID_UNKNOWN      = "E_SPAN_ID_UNKNOWN"

    # Jakość
    CONFIDENCE_LOW       = "E_CONFIDENCE_LOW"
    EXCESSIVE_QUOTE      = "E_EXCESSIVE_QUOTE"


@dataclass(slots=True)
class ValidationError:
    """
    Pojedynczy błąd walidacji.

    - code:    stały identyfikator klasy błędu (ErrorCode)
    - field:   pole jednostki, np. "steps", "steps[2].text", "aliases[0]"
    - message: czytelny opis błędu
    - value:   opcjonalnie wartość, której dotyczy błąd
    """

    code: ErrorCode
    field: str
    message: str
    value: Any = None


@dataclass(slots=True)
class ValidationReport:
    """Wynik walidacji jednostki; valid == (brak błędów)."""

    errors: list[ValidationError] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def extend(self, other: ValidationReport) -> ValidationReport:
        return ValidationReport(self.errors + other.errors)
