"""
extraction/schemas.py — JSON Schema (Draft 2020-12) odpowiedzi modelu.

Schemat sprawdza kształt i typy draftów oraz zakres confidence [0, 1].
Limity długości pól i liczby span_ids to bramki jakości orkiestratora
(draft odrzucony po cichu), nie błąd schematu (błąd całego okna).
"""

from __future__ import annotations

from typing import Any

from data_model.units import UnitType

_STR_LIST  = {"type": "array", "items": {"type": "string"}}
_CONFIDENCE = {"type": "number", "minimum": 0, "maximum": 1}

_FUNCTION_ITEM: dict[str, Any] = {
    "type": "object",
    "required": ["name", "purpose", "steps", "span_ids", "confidence"],
    "properties": {
        "name":    {"type": "string"},
        "purpose": {"type": "string"},
        "inputs": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "type"],
                "properties": {
                    "name":        {"type": "string"},
                    "type":        {"type": "string"},
                    "required":    {"type": "boolean"},
                    "description": {"type": "string"},
                },
            },
        },
        "preconditions": _STR_LIST,
        "steps": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["n", "text"],
                "properties": {
                    "n":    {"type": "integer", "minimum": 1},
                    "text": {"type": "string"},
                },
            },
        },
        "outputs": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "type"],
                "properties": {
                    "name":        {"type": "string"},
                    "type":        {"type": "string"},
                    "description": {"type": "string"},
                },
            },
        },
        "failure_modes": _STR_LIST,
        "examples": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["input", "output"],
                "properties": {"notes": {"type": "string"}},
            },
        },
        "tags":       _STR_LIST,
        "span_ids":   _STR_LIST,
        "confidence": _CONFIDENCE,
    },
}

_CLAIM_ITEM: dict[str, Any] = {
    "type": "object",
    "required": ["subject", "predicate", "object", "span_ids", "confidence"],
    "properties": {
        "subject":    {"type": "string"},
        "predicate":  {"type": "string"},
        "object":     {"type": "string"},
        "qualifiers": {"type": "object"},
        "span_ids":   _STR_LIST,
        "confidence": _CONFIDENCE,
    },
}

_DEFINITION_ITEM: dict[str, Any] = {
    "type": "object",
    "required": ["term", "definition", "span_ids", "confidence"],
    "properties": {
        "term":         {"type": "string"},
        "definition":   {"type": "string"},
        "aliases":      _STR_LIST,
        "span_ids":     _STR_LIST,
        "confidence":   _CONFIDENCE,
        "term_slug":    {"type": "string"},
        "aliases_norm": _STR_LIST,
        "tags":         _STR_LIST,
    },
}

_FORMULA_ITEM: dict[str, Any] = {
    "type": "object",
    "required": ["name", "expression", "span_ids", "confidence"],
    "properties": {
        "name":       {"type": "string"},
        "expression": {"type": "string"},
        "variables": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "description"],
                "properties": {
                    "name":        {"type": "string"},
                    "description": {"type": "string"},
                    "source":      {"type": "string"},
                },
            },
        },
        "notes":      _STR_LIST,
        "tags":       _STR_LIST,
        "span_ids":   _STR_LIST,
        "confidence": _CONFIDENCE,
    },
}


def _array_of(item: dict[str, Any]) -> dict[str, Any]:
    return {
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "type": "array",
        "items": item,
    }


RESPONSE_SCHEMAS: dict[UnitType, dict[str, Any]] = {
    UnitType.FUNCTIONS:   _array_of(_FUNCTION_ITEM),
    UnitType.CLAIMS:      _array_of(_CLAIM_ITEM),
    UnitType.DEFINITIONS: _array_of(_DEFINITION_ITEM),
    UnitType.FORMULAS:    _array_of(_FORMULA_ITEM),
}
