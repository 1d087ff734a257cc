"""
dedup/enrichment.py — wzbogacanie jednostek przed deduplikacją.

Reguły tagowania (dopasowanie podciągów w tekście małymi literami):
  financial-metrics — profit, margin, ratio, return, revenue, income, asset
  profitability     — margin, profitability, profitable

Funkcje zwracają NOWE obiekty (dataclasses.replace); wejście nie jest
modyfikowane. Wzbogacanie jest idempotentne.
"""

from __future__ import annotations

from dataclasses import replace

from data_model.units import Definition, Formula
from dedup.keys import normalize_aliases, slugify, unique

TAG_RULES: list[tuple[str, tuple[str, ...]]] = [
    ("financial-metrics", ("profit", "margin", "ratio", "return", "revenue", "income", "asset")),
    ("profitability",     ("margin", "profitability", "profitable")),
]


def auto_tags(texts: list[str], tags: list[str]) -> list[str]:
    """Dokłada tagi z TAG_RULES, gdy któryś tekst zawiera słowo kluczowe."""
    haystack = " ".join(texts).lower()
    result = unique(list(tags))
    for tag, keywords in TAG_RULES:
        if tag not in result and any(k in haystack for k in keywords):
            result.append(tag)
    return result


def enrich_definition(definition: Definition, document_id: str | None = None) -> Definition:
    return replace(
        definition,
        document_id=document_id or definition.document_id,
        term_slug=slugify(definition.term),
        aliases_norm=normalize_aliases(definition.aliases),
        tags=auto_tags([definition.term, definition.definition], definition.tags),
    )


def enrich_formula(formula: Formula, document_id: str | None = None) -> Formula:
    return replace(
        formula,
        document_id=document_id or formula.document_id,
        tags=auto_tags([formula.name, formula.expression], formula.tags),
    )
