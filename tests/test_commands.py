"""
Testy komend CLI bez bazy danych i bez sieci: parsowanie argumentów,
podział schematu SQL, ingest → extract → validate na plikach JSONL,
load i ask na atrapie połączenia z bazą.
"""

import argparse
import functools
import json

import pytest

from citations import SpanCitation
from data_model.units import Claim, Definition, Formula, FunctionDoc, UnitType
from extraction import extract_units
from extraction.drafts import draft_path, read_drafts, read_spans, spans_path, write_drafts
from ifrs._common import unit_label
from ifrs.commands import apply_schema, ask, cite, extract, ingest, load, validate

DOCUMENT = """\
1. Revenue
revenue is recognised when control of goods transfers to the customer.
a contract asset is a right to consideration in exchange for goods.
2. Gross margin
gross margin = revenue - cost of sales.
"""


def _parser():
    parser = argparse.ArgumentParser(prog="ifrs")
    subparsers = parser.add_subparsers(dest="command", required=True)
    for module in (apply_schema, ingest, extract, validate, load, cite, ask):
        module.add_parser(subparsers)
    return parser


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    for name in ("IFRS_CONFIDENCE_FUNC", "IFRS_CONFIDENCE_CLAIM", "IFRS_CONFIDENCE_DEF",
                 "IFRS_CONFIDENCE_FORMULA", "IFRS_MAX_QUOTE_CHARS"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("IFRS_DATA_DIR", str(tmp_path))
    return tmp_path


@pytest.fixture
def ingested(data_dir):
    source = data_dir / "notes.txt"
    source.write_text(DOCUMENT, encoding="utf-8")
    ingest.run(_parser().parse_args(["ingest", str(source), "--doc-id", "notes", "--show"]))
    return read_spans(spans_path(data_dir, "notes"))


class TestArgumentParsing:

    def test_commands_registered(self):
        args = _parser().parse_args(["extract", "doc-1", "--type", "claims", "--type", "formulas",
                                     "--window-size", "4"])
        assert args.func is extract.run
        assert args.type == ["claims", "formulas"]
        assert args.window_size == 4
        assert args.source == "json"

    def test_defaults(self):
        args = _parser().parse_args(["ingest", "book.epub"])
        assert args.out == "json"
        assert args.doc_id is None
        assert _parser().parse_args(["cite", "a", "b"]).span_ids == ["a", "b"]

    def test_invalid_type_rejected(self):
        with pytest.raises(SystemExit):
            _parser().parse_args(["validate", "doc-1", "--type", "rules"])


class TestSplitStatements:

    def test_statements_and_comments(self):
        sql = "-- tabela\nCREATE TABLE a (\n  id TEXT\n);\n\nCREATE INDEX i ON a (id);\nSELECT 1"
        assert apply_schema.split_statements(sql) == [
            "CREATE TABLE a (\n  id TEXT\n);",
            "CREATE INDEX i ON a (id);",
            "SELECT 1",
        ]

    def test_bundled_schema(self):
        stmts = apply_schema.split_statements(apply_schema.SCHEMA_PATH.read_text(encoding="utf-8"))
        tables = [s for s in stmts if s.startswith("CREATE TABLE")]
        assert len(tables) == 6
        assert all("IF NOT EXISTS" in s for s in stmts)


class TestPipeline:
    """ingest (json) → extract (atrapa modelu) → validate."""

    def test_ingest_writes_spans(self, ingested):
        assert [s.role for s in ingested][:2] == ["heading", "para"]
        assert all(s.document_id == "notes" for s in ingested)

    def test_missing_source(self, data_dir):
        with pytest.raises(SystemExit):
            ingest.run(_parser().parse_args(["ingest", str(data_dir / "missing.txt")]))

    def test_extract_and_validate(self, ingested, data_dir, monkeypatch, fake_model):
        heading = ingested[0].id
        reply = json.dumps([{
            "term": "Contract asset", "definition": "A right to consideration.",
            "span_ids": [heading], "confidence": 0.9,
        }])
        model = fake_model([reply] * 10)
        monkeypatch.setattr(extract, "gemini_caller", lambda **kwargs: model)
        monkeypatch.setattr(extract, "extract_units", functools.partial(extract_units, sleep=lambda s: None))

        extract.run(_parser().parse_args(["extract", "notes", "--type", "definitions"]))
        drafts = read_drafts(draft_path(data_dir, "notes", UnitType.DEFINITIONS), UnitType.DEFINITIONS)
        assert drafts
        assert {unit_label(d) for d in drafts} == {"Contract asset"}

        validate.run(_parser().parse_args(["validate", "notes", "--type", "definitions", "--strict"]))

    def test_validate_strict_fails_on_unknown_span(self, ingested, data_dir):
        path = draft_path(data_dir, "notes", UnitType.CLAIMS)
        path.write_text(json.dumps({
            "subject": "Revenue", "predicate": "is", "object": "recognised",
            "span_ids": ["nope"], "confidence": 0.9,
        }) + "\n", encoding="utf-8")

        args = _parser().parse_args(["validate", "notes", "--type", "claims"])
        validate.run(args)

        args.strict = True
        with pytest.raises(SystemExit):
            validate.run(args)

    def test_extract_without_spans(self, data_dir):
        with pytest.raises(SystemExit):
            extract.run(_parser().parse_args(["extract", "unknown-doc"]))


SPAN_ROWS = [
    ("s1", "notes", 1, 0, 40, "para", "a contract asset is a right to consideration.", "c1"),
    ("s2", "notes", 2, 50, 90, "para", "revenue is recognised when control transfers.", "c2"),
]


@pytest.fixture
def database(monkeypatch, fake_connection):
    """Spany dokumentu 'notes' w bazie; zwraca połączenie używane do zapisu."""
    from ifrs import _common

    monkeypatch.setattr(_common, "get_connection", lambda: fake_connection(rows=SPAN_ROWS))
    writer = fake_connection()
    monkeypatch.setattr(load, "get_connection", lambda: writer)
    return writer


def _inserts(conn, table):
    return [params for sql, params in conn.executed if sql.startswith(f"INSERT INTO {table}")]


class TestLoad:
    """Deduplikacja → walidacja względem spanów w bazie → zapis albo przerwanie."""

    def test_duplicate_definitions_merged(self, data_dir, database):
        write_drafts(draft_path(data_dir, "notes", UnitType.DEFINITIONS), [
            Definition("Contract asset", "A right to consideration.", ["s1"], 0.9, id="d1"),
            Definition("contract asset", "A right to consideration.", ["s2"], 0.9, id="d2"),
        ])
        load.run(_parser().parse_args(["load", "notes", "--type", "definitions"]))

        [params] = _inserts(database, "definitions")
        assert params[0] == "d1"
        assert params[1] == "notes"
        assert params[8] == ["s1", "s2"]
        assert database.commits == 1 and database.closed

    def test_lenient_drops_unknown_span(self, data_dir, database):
        write_drafts(draft_path(data_dir, "notes", UnitType.CLAIMS), [
            Claim("Revenue", "is recognised", "over time", ["s2"], 0.9, id="c1"),
            Claim("Revenue", "is measured", "at fair value", ["nope"], 0.9, id="c2"),
        ])
        load.run(_parser().parse_args(["load", "notes", "--type", "claims"]))

        assert [p[0] for p in _inserts(database, "claims")] == ["c1"]
        assert database.commits == 1

    def test_strict_aborts_before_insert(self, data_dir, database):
        write_drafts(draft_path(data_dir, "notes", UnitType.CLAIMS), [
            Claim("Revenue", "is recognised", "over time", ["s2"], 0.9, id="c1"),
            Claim("Revenue", "is measured", "at fair value", ["nope"], 0.9, id="c2"),
        ])
        with pytest.raises(SystemExit) as exc:
            load.run(_parser().parse_args(["load", "notes", "--type", "claims", "--strict"]))

        assert exc.value.code == 1
        assert database.executed == []
        assert database.commits == 0

    def test_rejected_formulas_reported(self, data_dir, database, capsys):
        write_drafts(draft_path(data_dir, "notes", UnitType.FORMULAS), [
            Formula("Gross margin", "revenue - cost of sales", ["s2"], 0.9, id="f1"),
            Formula("Net margin", "profit / revenue", ["s2"], 0.4, id="f2"),
        ])
        load.run(_parser().parse_args(["load", "notes", "--type", "formulas"]))

        assert [p[0] for p in _inserts(database, "formulas")] == ["f1"]
        assert "1 wzorów odrzuconych" in capsys.readouterr().out

    def test_missing_drafts_skipped(self, data_dir, database):
        load.run(_parser().parse_args(["load", "notes"]))
        assert database.executed == []
        assert database.commits == 1


def _function_row(fid, name, span_ids, confidence=0.9):
    steps = [{"n": n, "text": f"step {n}"} for n in range(1, 6)]
    return (fid, "notes", name, "Apply the model.", [], [], steps, [], [], [], [], span_ids, confidence)


def _claim_row(cid, span_ids):
    return (cid, "notes", "Revenue", "is recognised", "over time", {}, span_ids, 0.85)


class TestAsk:
    """Wyszukiwanie w bazie + jedno zapytanie o cytowania dla wszystkich wyników."""

    CITATIONS = [("s1", "IFRS 15", 3), ("s2", "IFRS 15", 4), ("s9", "IFRS 16", 7)]

    def _connect(self, monkeypatch, conn):
        monkeypatch.setattr(ask, "get_connection", lambda: conn)

    def test_results_with_citations(self, monkeypatch, fake_connection, capsys):
        conn = fake_connection(results=[
            [_function_row("f1", "Recognise revenue", ["s1", "s2"])],
            [_claim_row("c1", ["s9"])],
            self.CITATIONS,
        ])
        self._connect(monkeypatch, conn)

        ask.run(_parser().parse_args(["ask", "revenue"]))

        sqls = [sql for sql, _ in conn.executed]
        assert "FROM functions" in sqls[0]
        assert "FROM claims" in sqls[1]
        assert conn.executed[2][1] == (["s1", "s2", "s9"],)
        assert conn.closed

        out = capsys.readouterr().out
        assert "PROCEDURA: Recognise revenue" in out
        assert '"IFRS 15" p.3–4' in out
        assert '"IFRS 16" p.7' in out

    def test_no_cite_skips_lookup(self, monkeypatch, fake_connection, capsys):
        conn = fake_connection(results=[[_function_row("f1", "Recognise revenue", ["s1"])], []])
        self._connect(monkeypatch, conn)

        ask.run(_parser().parse_args(["ask", "revenue", "--no-cite"]))

        assert len(conn.executed) == 2
        assert "Źródła" not in capsys.readouterr().out

    def test_types_and_topk(self, monkeypatch, fake_connection):
        conn = fake_connection()
        self._connect(monkeypatch, conn)

        ask.run(_parser().parse_args(["ask", "asset", "--type", "definitions", "--topk", "2"]))

        [(sql, params)] = conn.executed
        assert "FROM definitions" in sql
        assert params[-1] == 2

    def test_no_results(self, monkeypatch, fake_connection, capsys):
        self._connect(monkeypatch, fake_connection())
        ask.run(_parser().parse_args(["ask", "nothing"]))
        assert "Brak wyników" in capsys.readouterr().out

    def test_invalid_topk(self):
        with pytest.raises(SystemExit):
            ask.run(_parser().parse_args(["ask", "revenue", "--topk", "0"]))


class TestDescribeResult:

    def test_function_steps_truncated(self):
        fn = FunctionDoc.from_dict({
            "name": "Recognise revenue", "purpose": "Apply the model.",
            "steps": [{"n": n, "text": f"step {n}"} for n in (3, 1, 2, 5, 4)],
            "span_ids": ["s1"], "confidence": 0.9,
        })
        lines = ask.describe_result(UnitType.FUNCTIONS, fn)
        assert lines[0] == "PROCEDURA: Recognise revenue (conf 0.90)"
        assert lines[2:] == ["  1. step 1", "  2. step 2", "  3. step 3", "  ... (jeszcze 2 kroków)"]

    def test_citation_fallback_to_span_ids(self):
        claim = Claim("Revenue", "is", "recognised", ["s1", "s2", "s3", "s4"], 0.9)
        lines = ask.describe_result(UnitType.CLAIMS, claim, citation_map={})
        assert lines[-1] == "Źródła: spany s1, s2, s3..."

    def test_partial_citations(self):
        claim = Claim("Revenue", "is", "recognised", ["s1", "s2"], 0.9)
        citation_map = {"s2": SpanCitation("s2", "IFRS 15", 12)}
        assert ask.citation_line(claim, citation_map) == 'Źródła: "IFRS 15" p.12'

    def test_collect_span_ids_unique(self):
        units = [
            (UnitType.CLAIMS, Claim("a", "b", "c", ["s1", "s2"], 0.9)),
            (UnitType.CLAIMS, Claim("d", "e", "f", ["s2", "s3"], 0.9)),
        ]
        assert ask.collect_span_ids(units) == ["s1", "s2", "s3"]
