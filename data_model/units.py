"""
data_model/units.py — struktury jednostek wyekstrahowanych przez model.

Jednostka (unit) to ustrukturyzowany rekord wyprowadzony z jednego lub kilku
spanów: procedura (FunctionDoc), twierdzenie (Claim), definicja (Definition)
albo wzór (Formula). Każda jednostka cytuje źródło przez `span_ids`.

Serializacja (to_dict / from_dict) używa kluczy formatu plików JSONL:
  id, documentId, ..., span_ids, confidence
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class UnitType(StrEnum):
    FUNCTIONS   = "functions"
    CLAIMS      = "claims"
    DEFINITIONS = "definitions"
    FORMULAS    = "formulas"


def _opt(data: dict[str, Any], **optional: Any) -> dict[str, Any]:
    """Dokłada do słownika tylko pola opcjonalne różne od None."""
    data.update({k: v for k, v in optional.items() if v is not None})
    return data


# ---------------------------------------------------------------------------
# FunctionDoc
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class FunctionInput:
    name: str
    type: str
    required: bool | None = None
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _opt({"name": self.name, "type": self.type},
                    required=self.required, description=self.description)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FunctionInput:
        return cls(
            name=data.get("name", ""),
            type=data.get("type", ""),
            required=data.get("required"),
            description=data.get("description"),
        )


@dataclass(slots=True)
class FunctionOutput:
    name: str
    type: str
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _opt({"name": self.name, "type": self.type}, description=self.description)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FunctionOutput:
        return cls(
            name=data.get("name", ""),
            type=data.get("type", ""),
            description=data.get("description"),
        )


@dataclass(slots=True)
class FunctionStep:
    n: int
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"n": self.n, "text": self.text}


@dataclass(slots=True)
class FunctionExample:
    input: Any
    output: Any
    notes: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _opt({"input": self.input, "output": self.output}, notes=self.notes)


@dataclass(slots=True)
class FunctionDoc:
    """
    Procedura krok po kroku.

    - purpose:  ≤ 400 znaków
    - steps:    numeracja n = 1..N bez luk i powtórzeń (kolejność wejścia dowolna)
    - span_ids: 1–3 identyfikatory spanów źródłowych
    """
    name: str
    purpose: str
    steps: list[FunctionStep]
    span_ids: list[str]
    confidence: float
    inputs: list[FunctionInput] = field(default_factory=list)
    preconditions: list[str] = field(default_factory=list)
    outputs: list[FunctionOutput] = field(default_factory=list)
    failure_modes: list[str] = field(default_factory=list)
    examples: list[FunctionExample] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    id: str = ""
    document_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id":            self.id,
            "documentId":    self.document_id,
            "name":          self.name,
            "purpose":       self.purpose,
            "inputs":        [i.to_dict() for i in self.inputs],
            "preconditions": list(self.preconditions),
            "steps":         [s.to_dict() for s in self.steps],
            "outputs":       [o.to_dict() for o in self.outputs],
            "failure_modes": list(self.failure_modes),
            "examples":      [e.to_dict() for e in self.examples],
            "tags":          list(self.tags),
            "span_ids":      list(self.span_ids),
            "confidence":    self.confidence,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FunctionDoc:
        return cls(
            id=data.get("id", ""),
            document_id=data.get("documentId", ""),
            name=data.get("name", ""),
            purpose=data.get("purpose", ""),
            inputs=[FunctionInput.from_dict(i) for i in data.get("inputs") or []],
            preconditions=list(data.get("preconditions") or []),
            steps=[FunctionStep(n=s.get("n"), text=s.get("text", ""))
                   for s in data.get("steps") or []],
            outputs=[FunctionOutput.from_dict(o) for o in data.get("outputs") or []],
            failure_modes=list(data.get("failure_modes") or []),
            examples=[FunctionExample(e.get("input"), e.get("output"), e.get("notes"))
                      for e in data.get("examples") or []],
            tags=list(data.get("tags") or []),
            span_ids=list(data.get("span_ids") or []),
            confidence=float(data.get("confidence", 0.0)),
        )


# ---------------------------------------------------------------------------
# Claim
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class Claim:
    """Atomowe twierdzenie: subject – predicate – object (+ kwalifikatory)."""
    subject: str
    predicate: str
    object: str
    span_ids: list[str]
    confidence: float
    qualifiers: dict[str, Any] = field(default_factory=dict)
    id: str = ""
    document_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id":         self.id,
            "documentId": self.document_id,
            "subject":    self.subject,
            "predicate":  self.predicate,
            "object":     self.object,
            "qualifiers": dict(self.qualifiers),
            "span_ids":   list(self.span_ids),
            "confidence": self.confidence,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Claim:
        return cls(
            id=data.get("id", ""),
            document_id=data.get("documentId", ""),
            subject=data.get("subject", ""),
            predicate=data.get("predicate", ""),
            object=data.get("object", ""),
            qualifiers=dict(data.get("qualifiers") or {}),
            span_ids=list(data.get("span_ids") or []),
            confidence=float(data.get("confidence", 0.0)),
        )


# ---------------------------------------------------------------------------
# Definition
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class Definition:
    """
    Definicja terminu.

    - term:         ≤ 120 znaków
    - definition:   ≤ 400 znaków
    - term_slug:    klucz kanoniczny (slugify(term)), uzupełniany przy wzbogacaniu
    - aliases_norm: znormalizowane aliasy (małe litery, bez interpunkcji)
    """
    term: str
    definition: str
    span_ids: list[str]
    confidence: float
    aliases: list[str] = field(default_factory=list)
    term_slug: str = ""
    aliases_norm: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    id: str = ""
    document_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id":           self.id,
            "documentId":   self.document_id,
            "term":         self.term,
            "definition":   self.definition,
            "aliases":      list(self.aliases),
            "span_ids":     list(self.span_ids),
            "confidence":   self.confidence,
            "term_slug":    self.term_slug,
            "aliases_norm": list(self.aliases_norm),
            "tags":         list(self.tags),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Definition:
        return cls(
            id=data.get("id", ""),
            document_id=data.get("documentId", ""),
            term=data.get("term", ""),
            definition=data.get("definition", ""),
            aliases=list(data.get("aliases") or []),
            span_ids=list(data.get("span_ids") or []),
            confidence=float(data.get("confidence", 0.0)),
            term_slug=data.get("term_slug") or "",
            aliases_norm=list(data.get("aliases_norm") or []),
            tags=list(data.get("tags") or []),
        )


# ---------------------------------------------------------------------------
# Formula
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class FormulaVariable:
    name: str
    description: str
    source: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _opt({"name": self.name, "description": self.description}, source=self.source)


@dataclass(slots=True)
class Formula:
    name: str
    expression: str
    span_ids: list[str]
    confidence: float
    variables: list[FormulaVariable] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    id: str = ""
    document_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id":         self.id,
            "documentId": self.document_id,
            "name":       self.name,
            "expression": self.expression,
            "variables":  [v.to_dict() for v in self.variables],
            "notes":      list(self.notes),
            "tags":       list(self.tags),
            "span_ids":   list(self.span_ids),
            "confidence": self.confidence,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Formula:
        return cls(
            id=data.get("id", ""),
            document_id=data.get("documentId", ""),
            name=data.get("name", ""),
            expression=data.get("expression", ""),
            variables=[FormulaVariable(v.get("name", ""), v.get("description", ""), v.get("source"))
                       for v in data.get("variables") or []],
            notes=list(data.get("notes") or []),
            tags=list(data.get("tags") or []),
            span_ids=list(data.get("span_ids") or []),
            confidence=float(data.get("confidence", 0.0)),
        )


type Unit = FunctionDoc | Claim | Definition | Formula

UNIT_CLASSES: dict[UnitType, type] = {
    UnitType.FUNCTIONS:   FunctionDoc,
    UnitType.CLAIMS:      Claim,
    UnitType.DEFINITIONS: Definition,
    UnitType.FORMULAS:    Formula,
}


def unit_from_dict(unit_type: UnitType, data: dict[str, Any]) -> Unit:
    return UNIT_CLASSES[unit_type].from_dict(data)
