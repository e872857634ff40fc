"""Execution of queries against an SQLite connection."""

from __future__ import annotations

import sqlite3

from amadeus.query import Query
from amadeus.result import Result
from amadeus.row import Row


class StatementError(Exception):
    """Raised when a query cannot be prepared, bound or executed."""


_SQLITE_ERRORS = (sqlite3.Error, sqlite3.Warning)


class Stmt:
    """Runs single SQL statements on a connection."""

    __slots__ = ("_db",)

    def __init__(self, db: sqlite3.Connection) -> None:
        self._db = db

    def _run(self, query: Query) -> sqlite3.Cursor:
        if not query.valid():
            raise StatementError(
                "The number of placeholders and arguments does not match "
                f"({query.cmd.count('?')}, {len(query.values)})."
            )
        params = [value.data for value in query.values]
        try:
            return self._db.execute(query.cmd, params)
        except _SQLITE_ERRORS as exc:
            raise StatementError(f"SQLite Error: {exc}") from exc

    def exec(self, query: Query) -> None:
        """Execute a statement that returns no rows.

        Raises :class:`StatementError` when the query is invalid, fails, or
        produces rows.
        """
        cursor = self._run(query)
        try:
            if cursor.fetchone() is not None:
                raise StatementError(
                    "SQLite Error: statement returned rows where none were expected."
                )
        except _SQLITE_ERRORS as exc:
            raise StatementError(f"SQLite Error: {exc}") from exc
        finally:
            cursor.close()

    def exec_with_result(self, query: Query) -> Result:
        """Execute a statement and collect every returned row.

        Raises :class:`StatementError` when the query is invalid or fails.
        """
        cursor = self._run(query)
        result = Result()
        try:
            if cursor.description is None:
                return result
            names = [column[0] for column in cursor.description]
            for record in cursor:
                row = Row()
                for name, item in zip(names, record):
                    row.add(name, item)
                if len(row):
                    result.add(row)
        except _SQLITE_ERRORS as exc:
            raise StatementError(f"SQLite Error: {exc}") from exc
        finally:
            cursor.close()
        return result