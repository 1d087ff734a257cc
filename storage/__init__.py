"""
storage — zapis dokumentów, spanów i jednostek w PostgreSQL (psycopg2).

Publiczne API: patrz storage/repository.py.
"""

from .repository import (
    insert_document,
    insert_spans,
    delete_spans,
    get_spans,
    insert_functions,
    insert_claims,
    insert_definitions,
    insert_formulas,
    insert_units,
    get_span_citations,
    search_units,
)

__all__ = [
    "insert_document",
    "insert_spans",
    "delete_spans",
    "get_spans",
    "insert_functions",
    "insert_claims",
    "insert_definitions",
    "insert_formulas",
    "insert_units",
    "get_span_citations",
    "search_units",
]
