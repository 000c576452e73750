"""Test helper functions."""

from io import BytesIO
from types import SimpleNamespace
from typing import Any, Dict, List, Optional


class FakeQuery:
    """In-memory stand-in for a Supabase table query builder.

    Supports the filters the repositories use. Filters on embedded
    resources (``units.property_id``) are ignored, so seed those tables
    with already-scoped rows.
    """

    def __init__(self, rows: List[Dict[str, Any]], log: List[tuple]):
        self.rows = [dict(row) for row in rows]
        self.log = log

    def select(self, *args, **kwargs):
        return self

    def eq(self, column: str, value: Any):
        self.log.append(("eq", column, value))
        if "." not in column:
            self.rows = [row for row in self.rows if row.get(column) == value]
        return self

    def in_(self, column: str, values: List[Any]):
        self.log.append(("in", column, tuple(values)))
        self.rows = [row for row in self.rows if row.get(column) in values]
        return self

    def lte(self, column: str, value: Any):
        self.rows = [row for row in self.rows if str(row.get(column)) <= str(value)]
        return self

    def gte(self, column: str, value: Any):
        self.rows = [row for row in self.rows if str(row.get(column)) >= str(value)]
        return self

    def or_(self, expression: str):
        self.log.append(("or", expression))
        clauses = [clause.split(".", 2) for clause in expression.split(",")]

        def matches(row):
            for column, _op, value in clauses:
                expected = True if value == "true" else value
                if row.get(column) == expected:
                    return True
            return False

        self.rows = [row for row in self.rows if matches(row)]
        return self

    def order(self, column: str, **kwargs):
        self.rows.sort(key=lambda row: row.get(column) or "")
        return self

    def limit(self, count: int):
        self.rows = self.rows[:count]
        return self

    def execute(self):
        return SimpleNamespace(data=self.rows)


class FakeSupabaseClient:
    """Supabase client double backed by ``{table_name: [rows]}``."""

    def __init__(self, tables: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self.tables = tables or {}
        self.queries: List[tuple] = []

    def table(self, name: str) -> FakeQuery:
        self.queries.append(("table", name))
        return FakeQuery(self.tables.get(name, []), self.queries)


class FailingSupabaseClient:
    """Supabase client double whose every query blows up."""

    def table(self, name: str):
        raise ConnectionError("connection refused")


class MockSocket:
    """Socket double feeding one raw HTTP request to a handler."""

    def __init__(self, request_line: str, headers: Optional[Dict[str, str]] = None):
        lines = [request_line] + [f"{key}: {value}" for key, value in (headers or {}).items()]
        self.raw = ("\r\n".join(lines) + "\r\n\r\n").encode("utf-8")

    def makefile(self, *args, **kwargs):
        return BytesIO(self.raw)

    def sendall(self, data):
        pass

    def close(self):
        pass
