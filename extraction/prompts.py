"""
extraction/prompts.py — prompty systemowe ekstraktorów i kontekst okna.

Prompt systemowy opisuje kształt JSON jednostki; prompt użytkownika to
kontekst okna w formacie JSONL (jeden span na linię: id, role, page, text).
Model cytuje źródła przez span_ids z kontekstu.
"""

from __future__ import annotations

import json

from data_model.documents import Span
from data_model.units import UnitType

FUNCTION_SYSTEM_PROMPT = """\
You are extracting PROCEDURES as structured JSON.

Rules:
- Output ONLY a JSON array of objects matching this shape:
  { "name": string, "purpose": string,
    "inputs": [{"name": string, "type": string, "required": boolean, "description"?: string}],
    "preconditions": string[], "steps": [{"n": number, "text": string}],
    "outputs": [{"name": string, "type": string, "description"?: string}],
    "failure_modes": string[], "examples": [{"input": any, "output": any, "notes"?: string}],
    "tags": string[], "span_ids": string[], "confidence": number }
- Every field MUST be supported by at least one span_id from the provided context.
- Prefer imperative sentences for steps. Number steps starting at 1, contiguous.
- If uncertain, omit the procedure or set confidence < 0.6.
- Do NOT invent parameters or results not evidenced by spans.
- Purpose should be <= 400 characters. Cite 1 to 3 span_ids."""

CLAIM_SYSTEM_PROMPT = """\
Extract atomic CLAIMS as JSON matching:
{ "subject": string, "predicate": string, "object": string,
  "qualifiers": object, "span_ids": string[], "confidence": number }

Rules:
- Subject, predicate, object should be concise and factual.
- Include qualifiers like time, scope, units if present.
- Cite span_ids for each claim.
- Output ONLY a valid JSON array."""

DEFINITION_SYSTEM_PROMPT = """\
Extract DEFINITIONS as JSON matching:
{ "term": string, "definition": string, "aliases": string[], "span_ids": string[], "confidence": number }

Rules:
- Use glossary/italicized terms or "X is ..." sentences.
- Prefer canonical phrasing close to the source; do not copy long passages verbatim.
- Term should be <= 120 characters, definition <= 400 characters.
- Cite 1 to 3 span_ids.
- Output ONLY a valid JSON array."""

FORMULA_SYSTEM_PROMPT = """\
Extract FORMULAS (calculations, ratios, measurement rules) as JSON matching:
{ "name": string, "expression": string,
  "variables": [{"name": string, "description": string, "source"?: string}],
  "notes": string[], "tags": string[], "span_ids": string[], "confidence": number }

Rules:
- The expression must be stated or directly implied by the spans (e.g. "Gross margin = (Revenue - COGS) / Revenue").
- Describe every variable used in the expression.
- Put conditions, exceptions and units into notes.
- Cite 1 to 3 span_ids.
- Output ONLY a valid JSON array."""

SYSTEM_PROMPTS: dict[UnitType, str] = {
    UnitType.FUNCTIONS:   FUNCTION_SYSTEM_PROMPT,
    UnitType.CLAIMS:      CLAIM_SYSTEM_PROMPT,
    UnitType.DEFINITIONS: DEFINITION_SYSTEM_PROMPT,
    UnitType.FORMULAS:    FORMULA_SYSTEM_PROMPT,
}

_CONTEXT_HEADER = "Context (JSONL of spans: {id, role, page, text}):"


def build_context_prompt(spans: list[Span]) -> str:
    lines = [
        json.dumps(
            {"id": s.id, "role": str(s.role), "page": s.page, "text": s.text},
            ensure_ascii=False,
        )
        for s in spans
    ]
    return "\n".join([_CONTEXT_HEADER, *lines])
