"""
extraction/response_parser.py — parsowanie odpowiedzi modelu do listy draftów.

Model bywa "gadatliwy": owija JSON w ```json ... ```, poprzedza go zdaniem
("Here is the JSON array...") albo dopisuje komentarz na końcu. Dlatego:

  1. szukamy zbalansowanych fragmentów [...] lub {...}
     (pomijając nawiasy wewnątrz stringów JSON),
  2. pierwszy fragment, który przechodzi json.loads, wygrywa
     (np. "[s1]" w zdaniu przed tablicą jest pomijany),
  3. pojedynczy obiekt → lista jednoelementowa,
  4. walidacja jsonschema (Draft 2020-12).

Każda porażka → ResponseFormatError (błąd okna, nie całego przebiegu).
"""

from __future__ import annotations

import json
from typing import Any, Iterator

import jsonschema

_OPENERS = {"[": "]", "{": "}"}
_PREVIEW_CHARS = 200


class ResponseFormatError(ValueError):
    """Odpowiedź modelu nie zawiera poprawnego JSON zgodnego ze schematem."""


def iter_json_fragments(text: str) -> Iterator[str]:
    """
    Kolejne zbalansowane fragmenty [...] / {...}. Po każdym fragmencie
    skanowanie wznawia się od następnego nawiasu otwierającego, więc
    fragment zagnieżdżony też jest kandydatem.
    """
    for start, ch in enumerate(text):
        if ch in _OPENERS:
            end = _balanced_end(text, start)
            if end is not None:
                yield text[start:end + 1]


def extract_json_fragment(text: str) -> str | None:
    """Zwraca pierwszy zbalansowany fragment [...] / {...} albo None."""
    return next(iter_json_fragments(text), None)


def _balanced_end(text: str, start: int) -> int | None:
    stack: list[str] = []
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in _OPENERS:
            stack.append(_OPENERS[ch])
        elif ch in "]}":
            if not stack or stack.pop() != ch:
                return None
            if not stack:
                return i
    return None


def _preview(text: str) -> str:
    flat = " ".join(text.split())
    return flat if len(flat) <= _PREVIEW_CHARS else flat[:_PREVIEW_CHARS] + "..."


def parse_json_response(text: str, schema: dict[str, Any]) -> list[dict[str, Any]]:
    """
    Parsuje tekst odpowiedzi modelu do listy słowników zgodnych ze schematem.

    Raises:
        ResponseFormatError: brak JSON, błąd składni albo naruszenie schematu.
    """
    first_error: json.JSONDecodeError | None = None
    for fragment in iter_json_fragments(text):
        try:
            data = json.loads(fragment)
            break
        except json.JSONDecodeError as exc:
            # np. "[s1]" cytowany w prozie przed właściwą tablicą
            first_error = first_error or exc
    else:
        if first_error is not None:
            raise ResponseFormatError(
                f"Niepoprawny JSON w odpowiedzi modelu: {first_error}"
            ) from first_error
        raise ResponseFormatError(f"Brak JSON w odpowiedzi modelu: {_preview(text)}")

    if isinstance(data, dict):
        data = [data]

    validator = jsonschema.Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(data), key=lambda e: list(e.absolute_path))
    if errors:
        first = errors[0]
        path = "/" + "/".join(str(p) for p in first.absolute_path)
        raise ResponseFormatError(
            f"Odpowiedź niezgodna ze schematem ({len(errors)} błędów), {path}: {first.message}"
        )
    return data
