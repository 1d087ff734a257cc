"""
data_model/results.py — wyniki przebiegu ekstrakcji.

Każde okno kończy się wartością WindowOk albo WindowError (bez wyjątków
przekraczających granicę okna); orkiestrator składa je w ExtractionResult.
Częściowy sukces jest normalny: błąd jednego okna nie przerywa dokumentu.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(slots=True)
class WindowOk(Generic[T]):
    index: int              # 0-based indeks okna
    drafts: list[T]         # drafty, które przeszły progi jakości
    tokens: int = 0
    filtered: int = 0       # drafty odrzucone po cichu (próg / bramka jakości)


@dataclass(slots=True)
class WindowError:
    index: int
    message: str

    def __str__(self) -> str:
        return f"Okno {self.index + 1}: {self.message}"


type WindowOutcome = WindowOk | WindowError


@dataclass(slots=True)
class ExtractionResult(Generic[T]):
    units: list[T] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    token_count: int = 0
    filtered: int = 0
    windows: int = 0

    def add(self, outcome: WindowOutcome) -> None:
        """Dokłada wynik okna do agregatu (append-only)."""
        self.windows += 1
        if isinstance(outcome, WindowError):
            self.errors.append(str(outcome))
            return
        self.units.extend(outcome.drafts)
        self.token_count += outcome.tokens
        self.filtered += outcome.filtered
