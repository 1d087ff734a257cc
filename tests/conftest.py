"""Wspólne fixtures: fabryka spanów, atrapa klienta modelu i połączenia z bazą."""

import pytest

from data_model.documents import Span, SpanRole, span_checksum
from extraction.model_client import ModelResponse


def _span(i, role=SpanRole.PARA, text=None, page=1, document_id="doc-1"):
    text = text or f"plain paragraph number {i}."
    start = i * 100
    end = start + len(text)
    return Span(
        id=f"s{i}",
        document_id=document_id,
        page=page,
        start=start,
        end=end,
        role=SpanRole(role),
        text=text,
        checksum=span_checksum(text, start, end),
    )


@pytest.fixture
def make_span():
    """Pojedynczy span o id s<i> i offsecie i*100."""
    return _span


@pytest.fixture
def make_spans():
    """Lista spanów z podanych ról (id s0, s1, ...)."""
    def _make(roles, **kwargs):
        return [_span(i, role, **kwargs) for i, role in enumerate(roles)]
    return _make


class FakeModel:
    """Model zwracający zaplanowane odpowiedzi po kolei (str lub wyjątek)."""

    def __init__(self, replies, tokens=10):
        self.replies = list(replies)
        self.tokens = tokens
        self.calls = []

    def __call__(self, system_prompt, user_prompt):
        self.calls.append((system_prompt, user_prompt))
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return ModelResponse(content=reply, total_tokens=self.tokens)


@pytest.fixture
def fake_model():
    return FakeModel


@pytest.fixture
def sleeps():
    """Rejestrator przerw: przekazuj sleeps.append zamiast time.sleep."""
    return []


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn
        self.rowcount = 0
        self.rows = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, sql, params=None):
        self.conn.executed.append((" ".join(sql.split()), params))
        self.rowcount = self.conn.rowcount
        self.rows = self.conn.results.pop(0) if self.conn.results else self.conn.rows

    def fetchone(self):
        return self.rows[0] if self.rows else None

    def fetchall(self):
        return list(self.rows)


class FakeConnection:
    """
    Atrapa połączenia psycopg2: zapisuje wykonane zapytania.
    rows zwraca każde zapytanie; results to wiersze kolejnych zapytań (po kolei).
    """

    def __init__(self, rows=None, rowcount=1, results=None):
        self.rows = rows or []
        self.results = list(results or [])
        self.rowcount = rowcount
        self.executed = []
        self.commits = 0
        self.rollbacks = 0
        self.closed = False

    def cursor(self):
        return FakeCursor(self)

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1

    def close(self):
        self.closed = True


@pytest.fixture
def fake_connection():
    return FakeConnection
