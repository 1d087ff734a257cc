"""
storage/repository.py — wąski interfejs zapisu/odczytu w PostgreSQL (psycopg2).

Wszystkie funkcje przyjmują otwarte połączenie (bez auto-commit);
commit/rollback należy do wywołującego (komendy CLI).

Publiczne API:
  insert_document(conn, document)           -> str   (id dokumentu w bazie)
  insert_spans(conn, spans)                 -> int
  delete_spans(conn, document_id)           -> int
  get_spans(conn, document_id)              -> list[Span]
  insert_functions(conn, functions)         -> int
  insert_claims(conn, claims)               -> int
  insert_definitions(conn, definitions)     -> int
  insert_formulas(conn, formulas)           -> int
  insert_units(conn, unit_type, units)      -> int
  get_span_citations(conn, span_ids)        -> list[SpanCitation]
  search_units(conn, unit_type, query, n)   -> list[Unit]
"""

from __future__ import annotations

import json
from typing import Any

from citations.formatter import SpanCitation
from data_model.documents import Document, Span, SpanRole
from data_model.units import Claim, Definition, Formula, FunctionDoc, Unit, UnitType, unit_from_dict


def _jsonb(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Dokumenty i spany
# ---------------------------------------------------------------------------

def insert_document(conn, document: Document) -> str:
    """
    Wstawia dokument (UNIQUE na uri). Ponowny ingest tego samego uri
    aktualizuje metadane i zwraca istniejące id.
    """
    with conn.cursor() as cur:
        cur.execute(
            """
            INSERT INTO documents (id, uri, title, authors, type, checksum, page_count)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            ON CONFLICT (uri) DO UPDATE SET
                title      = EXCLUDED.title,
                authors    = EXCLUDED.authors,
                checksum   = EXCLUDED.checksum,
                page_count = EXCLUDED.page_count
            RETURNING id
            """,
            (
                document.id, document.uri, document.title, list(document.authors),
                str(document.type), document.checksum, document.page_count,
            ),
        )
        row = cur.fetchone()
    return row[0] if row else document.id


def insert_spans(conn, spans: list[Span]) -> int:
    if not spans:
        return 0

    inserted = 0
    with conn.cursor() as cur:
        for s in spans:
            cur.execute(
                """
                INSERT INTO spans (id, document_id, page, start_offset, end_offset, role, text, checksum)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                ON CONFLICT (id) DO NOTHING
                """,
                (s.id, s.document_id, s.page, s.start, s.end, str(s.role), s.text, s.checksum),
            )
            inserted += cur.rowcount
    return inserted


def delete_spans(conn, document_id: str) -> int:
    """Usuwa spany dokumentu (ponowny ingest tworzy je od nowa)."""
    with conn.cursor() as cur:
        cur.execute("DELETE FROM spans WHERE document_id = %s", (document_id,))
        return cur.rowcount


def get_spans(conn, document_id: str) -> list[Span]:
    """Spany dokumentu w kolejności dokumentu (start_offset)."""
    with conn.cursor() as cur:
        cur.execute(
            """
            SELECT id, document_id, page, start_offset, end_offset, role, text, checksum
            FROM spans
            WHERE document_id = %s
            ORDER BY start_offset, id
            """,
            (document_id,),
        )
        rows = cur.fetchall()

    return [
        Span(
            id=r[0], document_id=r[1], page=r[2], start=r[3], end=r[4],
            role=SpanRole(r[5]), text=r[6], checksum=r[7],
        )
        for r in rows
    ]


# ---------------------------------------------------------------------------
# Jednostki
# ---------------------------------------------------------------------------

def insert_functions(conn, functions: list[FunctionDoc]) -> int:
    inserted = 0
    with conn.cursor() as cur:
        for f in functions:
            d = f.to_dict()
            cur.execute(
                """
                INSERT INTO functions (
                    id, document_id, name, purpose,
                    inputs, preconditions, steps, outputs, failure_modes, examples,
                    tags, span_ids, confidence
                )
                VALUES (%s, %s, %s, %s,
                        %s::jsonb, %s::jsonb, %s::jsonb, %s::jsonb, %s::jsonb, %s::jsonb,
                        %s, %s, %s)
                ON CONFLICT (id) DO NOTHING
                """,
                (
                    f.id, f.document_id, f.name, f.purpose,
                    _jsonb(d["inputs"]), _jsonb(d["preconditions"]), _jsonb(d["steps"]),
                    _jsonb(d["outputs"]), _jsonb(d["failure_modes"]), _jsonb(d["examples"]),
                    list(f.tags), list(f.span_ids), f.confidence,
                ),
            )
            inserted += cur.rowcount
    return inserted


def insert_claims(conn, claims: list[Claim]) -> int:
    inserted = 0
    with conn.cursor() as cur:
        for c in claims:
            cur.execute(
                """
                INSERT INTO claims (id, document_id, subject, predicate, object, qualifiers, span_ids, confidence)
                VALUES (%s, %s, %s, %s, %s, %s::jsonb, %s, %s)
                ON CONFLICT (id) DO NOTHING
                """,
                (
                    c.id, c.document_id, c.subject, c.predicate, c.object,
                    _jsonb(c.qualifiers), list(c.span_ids), c.confidence,
                ),
            )
            inserted += cur.rowcount
    return inserted


def insert_definitions(conn, definitions: list[Definition]) -> int:
    inserted = 0
    with conn.cursor() as cur:
        for d in definitions:
            cur.execute(
                """
                INSERT INTO definitions (
                    id, document_id, term, definition, aliases,
                    term_slug, aliases_norm, tags, span_ids, confidence
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                ON CONFLICT (id) DO NOTHING
                """,
                (
                    d.id, d.document_id, d.term, d.definition, list(d.aliases),
                    d.term_slug, list(d.aliases_norm), list(d.tags),
                    list(d.span_ids), d.confidence,
                ),
            )
            inserted += cur.rowcount
    return inserted


def insert_formulas(conn, formulas: list[Formula]) -> int:
    inserted = 0
    with conn.cursor() as cur:
        for f in formulas:
            cur.execute(
                """
                INSERT INTO formulas (id, document_id, name, expression, variables, notes, tags, span_ids, confidence)
                VALUES (%s, %s, %s, %s, %s::jsonb, %s::jsonb, %s, %s, %s)
                ON CONFLICT (id) DO NOTHING
                """,
                (
                    f.id, f.document_id, f.name, f.expression,
                    _jsonb([v.to_dict() for v in f.variables]), _jsonb(list(f.notes)),
                    list(f.tags), list(f.span_ids), f.confidence,
                ),
            )
            inserted += cur.rowcount
    return inserted


_INSERTERS = {
    UnitType.FUNCTIONS:   insert_functions,
    UnitType.CLAIMS:      insert_claims,
    UnitType.DEFINITIONS: insert_definitions,
    UnitType.FORMULAS:    insert_formulas,
}


def insert_units(conn, unit_type: UnitType, units: list[Unit]) -> int:
    if not units:
        return 0
    return _INSERTERS[unit_type](conn, units)


# ---------------------------------------------------------------------------
# Cytowania
# ---------------------------------------------------------------------------

def get_span_citations(conn, span_ids: list[str]) -> list[SpanCitation]:
    """
    Rozwiązuje span_ids → (span_id, tytuł dokumentu, strona).

    Kolejność wyniku = kolejność span_ids na wejściu (decyduje o kolejności
    grup w sformatowanym cytowaniu); nieznane id są pomijane.
    Dokument bez tytułu jest cytowany przez uri.
    """
    if not span_ids:
        return []

    with conn.cursor() as cur:
        cur.execute(
            """
            SELECT s.id, COALESCE(NULLIF(d.title, ''), d.uri), s.page
            FROM spans s
            JOIN documents d ON d.id = s.document_id
            WHERE s.id = ANY(%s)
            """,
            (list(span_ids),),
        )
        rows = {r[0]: SpanCitation(span_id=r[0], title=r[1], page=r[2]) for r in cur.fetchall()}

    return [rows[sid] for sid in dict.fromkeys(span_ids) if sid in rows]


# ---------------------------------------------------------------------------
# Wyszukiwanie tekstowe
# ---------------------------------------------------------------------------

_COLUMNS: dict[UnitType, tuple[str, ...]] = {
    UnitType.FUNCTIONS: (
        "id", "document_id", "name", "purpose", "inputs", "preconditions", "steps",
        "outputs", "failure_modes", "examples", "tags", "span_ids", "confidence",
    ),
    UnitType.CLAIMS: (
        "id", "document_id", "subject", "predicate", "object", "qualifiers", "span_ids", "confidence",
    ),
    UnitType.DEFINITIONS: (
        "id", "document_id", "term", "definition", "aliases",
        "term_slug", "aliases_norm", "tags", "span_ids", "confidence",
    ),
    UnitType.FORMULAS: (
        "id", "document_id", "name", "expression", "variables", "notes", "tags", "span_ids", "confidence",
    ),
}

# Kolumny przeszukiwane przez ILIKE
_SEARCH_FIELDS: dict[UnitType, tuple[str, ...]] = {
    UnitType.FUNCTIONS:   ("name", "purpose"),
    UnitType.CLAIMS:      ("subject", "predicate", "object"),
    UnitType.DEFINITIONS: ("term", "definition"),
    UnitType.FORMULAS:    ("name", "expression"),
}


def like_pattern(query: str) -> str:
    """Wzorzec ILIKE dla podciągu; %, _ i \\ z zapytania dopasowują się dosłownie."""
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def search_units(conn, unit_type: UnitType, query: str, limit: int = 5) -> list[Unit]:
    """
    Wyszukiwanie podciągu (ILIKE) w polach tekstowych jednostek danego typu,
    najwyższe confidence najpierw. Kolumny JSONB psycopg2 zwraca jako
    obiekty Pythona, więc wiersz trafia wprost do unit_from_dict.
    """
    unit_type = UnitType(unit_type)
    columns = _COLUMNS[unit_type]
    fields = _SEARCH_FIELDS[unit_type]
    pattern = like_pattern(query.strip())

    with conn.cursor() as cur:
        cur.execute(
            f"""
            SELECT {", ".join(columns)}
            FROM {unit_type}
            WHERE {" OR ".join(f"{f} ILIKE %s" for f in fields)}
            ORDER BY confidence DESC, id
            LIMIT %s
            """,
            (*[pattern] * len(fields), limit),
        )
        rows = cur.fetchall()

    units: list[Unit] = []
    for row in rows:
        data = dict(zip(columns, row))
        data["documentId"] = data.pop("document_id")
        units.append(unit_from_dict(unit_type, data))
    return units
