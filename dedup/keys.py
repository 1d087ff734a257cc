"""
dedup/keys.py — klucze kanoniczne jednostek.

  definicja → "<documentId>:<slugify(term)>"
  funkcja   → "<documentId>:<name>:<steps_hash(steps)>"
  wzór      → "<documentId>:<expression_hash(expression)>"

Hash = sha256 w hex, obcięty do 16 znaków (przestrzeń kluczy ograniczona
do jednego dokumentu).
"""

from __future__ import annotations

import hashlib
import json
import re

from data_model.units import Definition, Formula, FunctionDoc, FunctionStep

HASH_CHARS = 16

_SLUG_STRIP_RE  = re.compile(r"[^\w\s-]")
_ALIAS_STRIP_RE = re.compile(r"[^\w\s]")
_WS_RE          = re.compile(r"\s+")


def _short_hash(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:HASH_CHARS]


def slugify(term: str) -> str:
    """'Contract Asset (IFRS 15)' → 'contract-asset-ifrs-15'."""
    cleaned = _SLUG_STRIP_RE.sub("", term.lower()).strip()
    return _WS_RE.sub("-", cleaned)


def normalize_alias(alias: str) -> str:
    """Małe litery, bez interpunkcji, pojedyncze spacje."""
    return _WS_RE.sub(" ", _ALIAS_STRIP_RE.sub("", alias.lower())).strip()


def unique(items: list[str]) -> list[str]:
    """Usuwa duplikaty, zachowując kolejność pierwszego wystąpienia."""
    return list(dict.fromkeys(items))


def normalize_aliases(aliases: list[str]) -> list[str]:
    return unique([n for n in (normalize_alias(a) for a in aliases) if n])


def steps_hash(steps: list[FunctionStep]) -> str:
    payload = json.dumps(
        [s.to_dict() for s in steps],
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return _short_hash(payload)


def expression_hash(expression: str) -> str:
    return _short_hash(_WS_RE.sub("", expression.lower()))


def definition_key(document_id: str, definition: Definition) -> str:
    return f"{document_id}:{definition.term_slug or slugify(definition.term)}"


def function_key(document_id: str, function: FunctionDoc) -> str:
    return f"{document_id}:{function.name}:{steps_hash(function.steps)}"


def formula_key(document_id: str, formula: Formula) -> str:
    return f"{document_id}:{expression_hash(formula.expression)}"
