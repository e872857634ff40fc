"""A connection to an SQLite database with query helpers."""

from __future__ import annotations

import logging
import os
import sqlite3
from collections.abc import Callable
from pathlib import Path
from typing import Any, ClassVar

from amadeus.query import Query
from amadeus.result import Result
from amadeus.stmt import Stmt

_log = logging.getLogger(__name__)


class DatabaseError(Exception):
    """Raised when a database cannot be opened, created or closed."""


class Database:
    """One SQLite database connection; :meth:`instance` gives a shared one."""

    INVALID_ROWID: ClassVar[int] = -1
    IN_MEMORY: ClassVar[str] = ":memory:"
    HEADER: ClassVar[bytes] = b"SQLite format 3\x00"

    _shared: ClassVar[Database | None] = None

    def __init__(self) -> None:
        self._db: sqlite3.Connection | None = None

    @classmethod
    def instance(cls) -> Database:
        """Return the process-wide shared database object."""
        if cls._shared is None:
            cls._shared = cls()
        return cls._shared

    @staticmethod
    def version() -> str:
        """Return the version of the SQLite library in use."""
        return sqlite3.sqlite_version

    @property
    def is_open(self) -> bool:
        """True while a database is open."""
        return self._db is not None

    def __enter__(self) -> Database:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the database if one is open."""
        if self._db is None:
            return
        try:
            self._db.close()
        except sqlite3.Error as exc:
            raise DatabaseError(f"SQLite Error: {exc}") from exc
        self._db = None

    def open(
        self,
        path: str | os.PathLike[str],
        expected_success: bool = False,
        read_only: bool = False,
    ) -> bool:
        """Open an existing database file.

        Returns True on success. When the file cannot be opened, returns
        False, or raises :class:`DatabaseError` if ``expected_success`` is
        set. Opening while a database is open, or opening the in-memory
        database, always raises :class:`DatabaseError`.
        """
        if self._db is not None:
            raise DatabaseError("Database is already opened.")
        if os.fspath(path) == self.IN_MEMORY:
            raise DatabaseError("Database in memory can't be opened (use create).")

        mode = "ro" if read_only else "rw"
        uri = f"{Path(path).resolve().as_uri()}?mode={mode}"
        try:
            self._db = sqlite3.connect(uri, uri=True, isolation_level=None)
        except sqlite3.Error as exc:
            self._db = None
            if expected_success:
                raise DatabaseError(f"SQLite Error: {exc}") from exc
            return False
        _log.info("database opened: %s", os.fspath(path))
        return True

    def create(
        self,
        path: str | os.PathLike[str],
        fn: Callable[[Database], Any],
        overwrite: bool = False,
    ) -> None:
        """Create a database and run ``fn`` on it to set it up.

        An existing file is removed first when ``overwrite`` is set. If
        ``fn`` returns False the database is closed and
        :class:`DatabaseError` is raised.
        """
        if self._db is not None:
            raise DatabaseError("Database is already opened.")
        if fn is None or not callable(fn):
            raise DatabaseError(
                "Operations to be performed on created database were not specified."
            )

        target = os.fspath(path)
        if target != self.IN_MEMORY and overwrite and os.path.exists(target):
            try:
                os.remove(target)
            except OSError as exc:
                raise DatabaseError(f"Database file could not be deleted: {exc}") from exc

        try:
            self._db = sqlite3.connect(target, isolation_level=None)
        except sqlite3.Error as exc:
            self._db = None
            raise DatabaseError(f"SQLite Error: {exc}") from exc

        try:
            outcome = fn(self)
        except BaseException:
            self.close()
            raise
        if outcome is False:
            self.close()
            raise DatabaseError("Operations on the created database failed.")
        _log.info("The database created successfully: %s", target)

    def _connection(self) -> sqlite3.Connection:
        if self._db is None:
            raise DatabaseError("Database is not opened.")
        return self._db

    @staticmethod
    def _query(query: Query | str, args: tuple[Any, ...]) -> Query:
        if isinstance(query, Query):
            if args:
                raise TypeError("Arguments cannot be given together with a Query.")
            return query
        return Query(query, *args)

    def exec(self, query: Query | str, *args: Any) -> None:
        """Execute a statement that returns no rows."""
        Stmt(self._connection()).exec(self._query(query, args))

    def insert(self, query: Query | str, *args: Any) -> int:
        """Execute an insert and return the rowid of the inserted row."""
        db = self._connection()
        Stmt(db).exec(self._query(query, args))
        (rowid,) = db.execute("SELECT last_insert_rowid()").fetchone()
        return rowid

    def update(self, query: Query | str, *args: Any) -> None:
        """Execute an update statement."""
        Stmt(self._connection()).exec(self._query(query, args))

    def select(self, query: Query | str, *args: Any) -> Result:
        """Execute a query and return its rows."""
        return Stmt(self._connection()).exec_with_result(self._query(query, args))