"""
Testy warstwy zapisu na atrapie połączenia psycopg2 (bez bazy danych).
"""

import json

from data_model.documents import Document, DocumentType, SpanRole
from data_model.units import Claim, Definition, Formula, FunctionDoc, FunctionStep, UnitType
from storage import (
    delete_spans,
    get_span_citations,
    get_spans,
    insert_document,
    insert_spans,
    insert_units,
    search_units,
)
from storage.repository import like_pattern


class TestDocumentsAndSpans:

    def test_insert_document_returns_existing_id(self, fake_connection):
        conn = fake_connection(rows=[("existing-id",)])
        doc = Document(id="new-id", uri="file:///a.pdf", title="A", type=DocumentType.PDF, checksum="c")
        assert insert_document(conn, doc) == "existing-id"
        sql, params = conn.executed[0]
        assert "ON CONFLICT (uri)" in sql
        assert params[4] == "pdf"

    def test_insert_spans_counts_rows(self, fake_connection, make_spans):
        conn = fake_connection()
        assert insert_spans(conn, make_spans([SpanRole.HEADING, SpanRole.PARA])) == 2
        assert len(conn.executed) == 2
        assert conn.executed[0][1][5] == "heading"
        assert insert_spans(conn, []) == 0

    def test_delete_spans(self, fake_connection):
        conn = fake_connection(rowcount=7)
        assert delete_spans(conn, "doc-1") == 7
        assert conn.executed[0][1] == ("doc-1",)

    def test_get_spans(self, fake_connection):
        rows = [("s1", "doc-1", 2, 0, 10, "para", "revenue is.", "abc")]
        [span] = get_spans(fake_connection(rows=rows), "doc-1")
        assert span.role == SpanRole.PARA
        assert (span.page, span.start, span.end, span.checksum) == (2, 0, 10, "abc")


class TestUnits:

    def test_function_json_columns(self, fake_connection):
        conn = fake_connection()
        fn = FunctionDoc(
            name="Recognise revenue", purpose="Five steps.",
            steps=[FunctionStep(1, "Identyfikacja umowy")],
            span_ids=["s1"], confidence=0.9, id="u1", document_id="doc-1",
        )
        assert insert_units(conn, UnitType.FUNCTIONS, [fn]) == 1
        sql, params = conn.executed[0]
        assert "INSERT INTO functions" in sql
        assert json.loads(params[6]) == [{"n": 1, "text": "Identyfikacja umowy"}]
        assert "Identyfikacja umowy" in params[6]
        assert params[11] == ["s1"]

    def test_each_type_targets_its_table(self, fake_connection):
        units = {
            UnitType.CLAIMS: Claim("a", "b", "c", ["s1"], 0.9, qualifiers={"period": "2024"}),
            UnitType.DEFINITIONS: Definition("Asset", "A resource.", ["s1"], 0.9, term_slug="asset"),
            UnitType.FORMULAS: Formula("ROA", "a / b", ["s1"], 0.9, notes=["annual"]),
        }
        for unit_type, unit in units.items():
            conn = fake_connection()
            insert_units(conn, unit_type, [unit])
            assert f"INSERT INTO {unit_type}" in conn.executed[0][0]

    def test_empty_batch_skips_database(self, fake_connection):
        conn = fake_connection()
        assert insert_units(conn, UnitType.CLAIMS, []) == 0
        assert conn.executed == []

    def test_duplicate_ids_not_counted(self, fake_connection):
        conn = fake_connection(rowcount=0)
        claim = Claim("a", "b", "c", ["s1"], 0.9, id="u1")
        assert insert_units(conn, UnitType.CLAIMS, [claim]) == 0


class TestSpanCitations:

    def test_order_follows_input_and_unknown_dropped(self, fake_connection):
        rows = [("s2", "B", 5), ("s1", "A", 12)]
        conn = fake_connection(rows=rows)
        citations = get_span_citations(conn, ["s1", "missing", "s2", "s1"])
        assert [(c.span_id, c.title, c.page) for c in citations] == [("s1", "A", 12), ("s2", "B", 5)]
        assert conn.executed[0][1] == (["s1", "missing", "s2", "s1"],)

    def test_empty_input(self, fake_connection):
        conn = fake_connection()
        assert get_span_citations(conn, []) == []
        assert conn.executed == []


class TestSearchUnits:
    """Wyszukiwanie ILIKE po polach tekstowych, najwyższe confidence najpierw."""

    def test_query_shape(self, fake_connection):
        conn = fake_connection()
        assert search_units(conn, UnitType.DEFINITIONS, " asset ", 3) == []
        sql, params = conn.executed[0]
        assert "FROM definitions" in sql
        assert "WHERE term ILIKE %s OR definition ILIKE %s" in sql
        assert "ORDER BY confidence DESC, id LIMIT %s" in sql
        assert params == ("%asset%", "%asset%", 3)

    def test_claim_fields(self, fake_connection):
        conn = fake_connection()
        search_units(conn, UnitType.CLAIMS, "revenue")
        sql, params = conn.executed[0]
        assert "subject ILIKE %s OR predicate ILIKE %s OR object ILIKE %s" in sql
        assert params == ("%revenue%",) * 3 + (5,)

    def test_rows_become_units(self, fake_connection):
        rows = [(
            "u1", "doc-1", "Contract asset", "A right to consideration.", ["CA"],
            "contract-asset", ["ca"], [], ["s1", "s2"], 0.9,
        )]
        [unit] = search_units(fake_connection(rows=rows), UnitType.DEFINITIONS, "contract")
        assert isinstance(unit, Definition)
        assert (unit.id, unit.document_id, unit.term) == ("u1", "doc-1", "Contract asset")
        assert unit.span_ids == ["s1", "s2"]
        assert unit.aliases == ["CA"]

    def test_jsonb_columns(self, fake_connection):
        rows = [(
            "f1", "doc-1", "Recognise revenue", "Five steps.",
            [{"name": "contract", "type": "Contract"}], [],
            [{"n": 2, "text": "second"}, {"n": 1, "text": "first"}],
            [], [], [], ["revenue"], ["s1"], 0.8,
        )]
        [fn] = search_units(fake_connection(rows=rows), UnitType.FUNCTIONS, "revenue")
        assert isinstance(fn, FunctionDoc)
        assert [s.n for s in fn.steps] == [2, 1]
        assert fn.inputs[0].type == "Contract"
        assert fn.confidence == 0.8

    def test_wildcards_escaped(self):
        assert like_pattern("10%_x") == "%10\\%\\_x%"
        assert like_pattern("a\\b") == "%a\\\\b%"
