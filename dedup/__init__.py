"""
dedup — kanoniczne klucze, wzbogacanie i deduplikacja jednostek dokumentu.

Publiczne API:
  DedupSession(document_id, formula_threshold)
  deduplicate_definitions(definitions, document_id)        -> list[Definition]
  deduplicate_functions(functions, document_id)            -> list[FunctionDoc]
  deduplicate_formulas(formulas, document_id, threshold)   -> list[Formula]
  slugify(term) / normalize_alias(alias) / normalize_aliases(aliases)
  steps_hash(steps) / expression_hash(expression)
  auto_tags(texts, tags) / enrich_definition(d) / enrich_formula(f)
"""

from .keys import (
    slugify,
    normalize_alias,
    normalize_aliases,
    steps_hash,
    expression_hash,
    definition_key,
    function_key,
    formula_key,
)
from .enrichment import auto_tags, enrich_definition, enrich_formula
from .engine import (
    DedupSession,
    merge_definitions,
    deduplicate_definitions,
    deduplicate_functions,
    deduplicate_formulas,
)

__all__ = [
    "slugify",
    "normalize_alias",
    "normalize_aliases",
    "steps_hash",
    "expression_hash",
    "definition_key",
    "function_key",
    "formula_key",
    "auto_tags",
    "enrich_definition",
    "enrich_formula",
    "DedupSession",
    "merge_definitions",
    "deduplicate_definitions",
    "deduplicate_functions",
    "deduplicate_formulas",
]
