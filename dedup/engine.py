"""
dedup/engine.py — deduplikacja jednostek w obrębie jednego dokumentu.

DedupSession to krótko żyjący obiekt tworzony na jeden przebieg dokumentu;
sam posiada mapy "widzianych" kluczy (żadnego stanu globalnego), więc
równoległe dokumenty nie wpływają na siebie.

Polityka kolizji kluczy:
  definitions — wyższe confidence wygrywa; remis → scalenie
                (suma span_ids, aliases, aliases_norm bez duplikatów)
  functions   — wyższe confidence (ściśle) zastępuje; remis → pierwszy zostaje
  formulas    — bramki jakości (confidence ≥ próg, 1–3 span_ids), potem
                pierwszy widziany wygrywa niezależnie od confidence

Kolejność wyniku = kolejność pierwszego wystąpienia klucza.
Deduplikacja jest idempotentna: ponowny przebieg na wyniku nic nie zmienia.
"""

from __future__ import annotations

from dataclasses import replace

from data_model.units import Definition, Formula, FunctionDoc
from dedup.enrichment import enrich_definition, enrich_formula
from dedup.keys import definition_key, formula_key, function_key, unique

DEFAULT_FORMULA_THRESHOLD = 0.75
MAX_FORMULA_SPAN_IDS      = 3


def merge_definitions(existing: Definition, incoming: Definition) -> Definition:
    """Scalenie dwóch definicji o tym samym kluczu i równym confidence."""
    return replace(
        existing,
        span_ids=unique(existing.span_ids + incoming.span_ids),
        aliases=unique(existing.aliases + incoming.aliases),
        aliases_norm=unique(existing.aliases_norm + incoming.aliases_norm),
        tags=unique(existing.tags + incoming.tags),
    )


class DedupSession:
    """Stan deduplikacji jednego dokumentu."""

    def __init__(
        self,
        document_id: str,
        formula_threshold: float = DEFAULT_FORMULA_THRESHOLD,
    ) -> None:
        self.document_id = document_id
        self.formula_threshold = formula_threshold
        self._definitions: dict[str, Definition] = {}
        self._functions: dict[str, FunctionDoc] = {}
        self._formulas: dict[str, Formula] = {}
        self.rejected_formulas = 0

    # ------------------------------------------------------------------
    # Definicje
    # ------------------------------------------------------------------

    def add_definitions(self, definitions: list[Definition]) -> None:
        for raw in definitions:
            definition = enrich_definition(raw, self.document_id)
            key = definition_key(self.document_id, definition)
            existing = self._definitions.get(key)
            if existing is None or definition.confidence > existing.confidence:
                self._definitions[key] = definition
            elif definition.confidence == existing.confidence:
                self._definitions[key] = merge_definitions(existing, definition)

    # ------------------------------------------------------------------
    # Funkcje
    # ------------------------------------------------------------------

    def add_functions(self, functions: list[FunctionDoc]) -> None:
        for raw in functions:
            function = replace(raw, document_id=self.document_id)
            key = function_key(self.document_id, function)
            existing = self._functions.get(key)
            if existing is None or function.confidence > existing.confidence:
                self._functions[key] = function

    # ------------------------------------------------------------------
    # Wzory
    # ------------------------------------------------------------------

    def _formula_passes(self, formula: Formula) -> bool:
        return (
            formula.confidence >= self.formula_threshold
            and 1 <= len(formula.span_ids) <= MAX_FORMULA_SPAN_IDS
        )

    def add_formulas(self, formulas: list[Formula]) -> None:
        for raw in formulas:
            if not self._formula_passes(raw):
                self.rejected_formulas += 1
                continue
            key = formula_key(self.document_id, raw)
            if key in self._formulas:
                continue
            self._formulas[key] = enrich_formula(raw, self.document_id)

    # ------------------------------------------------------------------
    # Wyniki
    # ------------------------------------------------------------------

    @property
    def definitions(self) -> list[Definition]:
        return list(self._definitions.values())

    @property
    def functions(self) -> list[FunctionDoc]:
        return list(self._functions.values())

    @property
    def formulas(self) -> list[Formula]:
        return list(self._formulas.values())


# ---------------------------------------------------------------------------
# Skróty: jeden przebieg = jedna nowa sesja
# ---------------------------------------------------------------------------

def deduplicate_definitions(definitions: list[Definition], document_id: str) -> list[Definition]:
    session = DedupSession(document_id)
    session.add_definitions(definitions)
    return session.definitions


def deduplicate_functions(functions: list[FunctionDoc], document_id: str) -> list[FunctionDoc]:
    session = DedupSession(document_id)
    session.add_functions(functions)
    return session.functions


def deduplicate_formulas(
    formulas: list[Formula],
    document_id: str,
    threshold: float = DEFAULT_FORMULA_THRESHOLD,
) -> list[Formula]:
    session = DedupSession(document_id, formula_threshold=threshold)
    session.add_formulas(formulas)
    return session.formulas
