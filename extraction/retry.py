"""
extraction/retry.py — wykładniczy backoff z jitterem dla wywołań modelu.

Harmonogram jest czystą funkcją (backoff_delay), a pętla ponowień
(call_with_backoff) przyjmuje sleep/rand z zewnątrz — testy nie czekają
i nie wywołują sieci.

  próba 0 → base * 1 * (1 ± jitter)
  próba 1 → base * 2 * (1 ± jitter)
  próba 2 → base * 4 * (1 ± jitter)
"""

from __future__ import annotations

import random
import sys
import time
from typing import Callable, TypeVar

from extraction.model_client import RateLimitError

T = TypeVar("T")

DEFAULT_RETRIES   = 3
DEFAULT_BASE_SECS = 2.0
DEFAULT_JITTER    = 0.5


def backoff_delay(
    attempt: int,
    base: float = DEFAULT_BASE_SECS,
    jitter: float = DEFAULT_JITTER,
    rand: Callable[[], float] = random.random,
) -> float:
    """
    Opóźnienie (sekundy) przed ponowieniem po `attempt`-tej porażce (od 0).

    rand() ∈ [0, 1) mapowane na współczynnik [1 - jitter, 1 + jitter).
    """
    if attempt < 0:
        raise ValueError(f"attempt musi być >= 0, podano {attempt}")
    factor = 1.0 + jitter * (2.0 * rand() - 1.0)
    return base * (2 ** attempt) * factor


def call_with_backoff(
    fn: Callable[..., T],
    *args,
    max_retries: int = DEFAULT_RETRIES,
    base: float = DEFAULT_BASE_SECS,
    jitter: float = DEFAULT_JITTER,
    sleep: Callable[[float], None] = time.sleep,
    rand: Callable[[], float] = random.random,
    **kwargs,
) -> T:
    """
    Wywołuje fn(*args, **kwargs); przy RateLimitError czeka i ponawia.

    max_retries = liczba ponowień po pierwszym wywołaniu (łącznie max_retries + 1
    prób). Sugerowany przez API czas oczekiwania (retry_after) jest dolnym
    ograniczeniem opóźnienia. Inne wyjątki propagują się od razu.

    Raises:
        RuntimeError: limit ponowień wyczerpany.
    """
    attempt = 0
    while True:
        try:
            return fn(*args, **kwargs)
        except RateLimitError as exc:
            if attempt >= max_retries:
                raise RuntimeError(
                    f"Rate-limit po {max_retries} ponowieniach. Spróbuj później."
                ) from exc
            delay = backoff_delay(attempt, base, jitter, rand)
            if exc.retry_after is not None:
                delay = max(delay, exc.retry_after)
            print(
                f"[warn] 429 rate-limit, czekam {delay:.1f}s "
                f"(ponowienie {attempt + 1}/{max_retries})...",
                file=sys.stderr,
            )
            sleep(delay)
            attempt += 1
