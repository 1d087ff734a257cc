"""
data_model — struktury danych potoku ekstrakcji jednostek.

Moduły:
  documents — Span, ParsedBlock, Document, ParseResult, SpanRole, DocumentType
  units     — FunctionDoc, Claim, Definition, Formula (+ typy składowe), UnitType
  results   — ExtractionResult, WindowOk, WindowError
"""

from .documents import (
    SpanRole,
    DocumentType,
    ParsedBlock,
    Span,
    Document,
    ParseResult,
    detect_document_type,
    new_id,
    span_checksum,
    document_checksum,
)
from .units import (
    UnitType,
    FunctionInput,
    FunctionOutput,
    FunctionStep,
    FunctionExample,
    FunctionDoc,
    Claim,
    Definition,
    FormulaVariable,
    Formula,
    Unit,
    UNIT_CLASSES,
    unit_from_dict,
)
from .results import (
    ExtractionResult,
    WindowOk,
    WindowError,
    WindowOutcome,
)

__all__ = [
    # documents
    "SpanRole",
    "DocumentType",
    "ParsedBlock",
    "Span",
    "Document",
    "ParseResult",
    "detect_document_type",
    "new_id",
    "span_checksum",
    "document_checksum",
    # units
    "UnitType",
    "FunctionInput",
    "FunctionOutput",
    "FunctionStep",
    "FunctionExample",
    "FunctionDoc",
    "Claim",
    "Definition",
    "FormulaVariable",
    "Formula",
    "Unit",
    "UNIT_CLASSES",
    "unit_from_dict",
    # results
    "ExtractionResult",
    "WindowOk",
    "WindowError",
    "WindowOutcome",
]
