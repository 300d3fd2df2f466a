"""Database connections.

A Connection owns one `sqlite3.Connection` opened in autocommit mode: no
transaction is started or committed behind the caller's back, so `begin()`,
`commit()` and `rollback()` are the only transaction boundaries.

One logical caller per connection. With `check_same_thread` enabled (the
default) use from another thread is rejected by the sqlite3 module and
surfaces as the operation's error with code SQLITE_MISUSE.
"""

import contextlib
import logging
import sqlite3
import sys
import time
import weakref
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from pathlib import Path
from typing import IO

from . import codes, config, sqltext, values
from .errors import ExecError, OpenError, PrepareError, SQLiteError
from .statement import Statement

logger = logging.getLogger(__name__)

MEMORY = ":memory:"

RowCallback = Callable[[list[str | None], list[str | None]], bool]


def _decode_text(data: bytes) -> str:
    # Invalid UTF-8 decodes to U+FFFD instead of failing the row.
    return data.decode("utf-8", errors="replace")


class Connection:
    def __init__(self, db: sqlite3.Connection, path: str):
        self._db = db
        self._path = path
        self._closed = False
        self._statements: weakref.WeakSet[Statement] = weakref.WeakSet()

    @classmethod
    def open(cls, path: str | Path, options: config.OpenOptions | None = None) -> "Connection":
        """Open a database file, or a private in-memory database for ":memory:"."""
        if options is None:
            options = config.open_options()
        path = str(path)
        start = time.perf_counter()

        try:
            db = sqlite3.connect(
                path,
                timeout=options.timeout,
                check_same_thread=options.check_same_thread,
                isolation_level=None,
            )
        except sqlite3.Error as e:
            raise OpenError.from_exception(e) from e
        db.text_factory = _decode_text

        try:
            if options.foreign_keys:
                db.execute("PRAGMA foreign_keys = ON")
            if options.journal_mode:
                db.execute(f"PRAGMA journal_mode = {options.journal_mode.upper()}").fetchall()
            db.execute("PRAGMA schema_version").fetchone()
        except sqlite3.Error as e:
            db.close()
            raise OpenError.from_exception(e) from e

        elapsed = time.perf_counter() - start
        if elapsed > 0.1:
            logger.warning(f"Opening {path} took {elapsed:.3f}s (possible lock contention)")
        logger.debug(f"Opened {path}")
        return cls(db, path)

    @classmethod
    def open_in_memory(cls, options: config.OpenOptions | None = None) -> "Connection":
        return cls.open(MEMORY, options)

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<Connection {state} {self._path!r}>"

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def path(self) -> str:
        return self._path

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def handle(self) -> sqlite3.Connection:
        """The underlying sqlite3 connection."""
        return self._db

    @property
    def in_transaction(self) -> bool:
        return not self._closed and self._db.in_transaction

    def close(self) -> None:
        """Finalize open statements, then close the database. Later calls are no-ops."""
        if self._closed:
            return
        for statement in list(self._statements):
            statement.close()
        self._closed = True
        self._db.close()
        logger.debug(f"Closed {self._path}")

    def _forget(self, statement: Statement) -> None:
        self._statements.discard(statement)

    def prepare(self, sql: str) -> Statement:
        """Compile the first statement in sql. The rest is kept as `Statement.tail`."""
        first, tail = sqltext.split_first(sql)
        if not first:
            raise PrepareError.misuse("no SQL statement to prepare")
        parameters = sqltext.scan_parameters(first)

        # EXPLAIN compiles the statement without running it.
        text = parameters.sql
        probe = text if sqltext.leading_keyword(text) == "EXPLAIN" else f"EXPLAIN {text}"
        try:
            self._db.execute(probe, parameters.arguments([None] * parameters.count)).close()
        except sqlite3.Error as e:
            raise PrepareError.from_exception(e) from e

        statement = Statement(self, first, tail, parameters)
        self._statements.add(statement)
        logger.debug(f"Prepared {first!r}")
        return statement

    def _run(self, sql: str, callback: RowCallback | None = None) -> bool:
        for text in sqltext.split_statements(sql):
            parameters = sqltext.scan_parameters(text)
            try:
                arguments = parameters.arguments([None] * parameters.count)
                cursor = self._db.execute(parameters.sql, arguments)
            except sqlite3.Error as e:
                raise ExecError.from_exception(e) from e

            with contextlib.closing(cursor):
                try:
                    if callback is None:
                        cursor.fetchall()
                        continue
                    names = [d[0] for d in cursor.description or ()]
                    for row in cursor:
                        data = [values.as_text(self._db, v) for v in row]
                        if not callback(data, list(names)):
                            logger.debug(
                                f"Row callback stopped {text!r} (code {codes.SQLITE_ABORT})"
                            )
                            return False
                except sqlite3.Error as e:
                    raise ExecError.from_exception(e) from e
        return True

    def execute(self, sql: str) -> None:
        """Run every statement in sql to completion, discarding rows."""
        self._run(sql)

    def execute_with_callback(self, sql: str, callback: RowCallback) -> bool:
        """Run sql, calling callback(values, names) for each row.

        Values are the row's columns as text (None for NULL). A falsy return
        from the callback stops the run. Returns True if the run completed,
        False if the callback stopped it.
        """
        return self._run(sql, callback)

    def execute_with_parameters(self, sql: str, rows: Iterable[Sequence | Mapping]) -> int:
        """Prepare sql once and run it for each parameter row.

        rows may be a lazy iterable. Produced rows are discarded, so this is
        meant for DML. Returns the number of rows executed.
        """
        count = 0
        with self.prepare(sql) as statement:
            for params in rows:
                statement.bind_all(params)
                statement.step()
                statement.reset()
                count += 1
        return count

    def execute_batched(
        self, sql: str, commit_every: int, rows: Iterable[Sequence | Mapping]
    ) -> int:
        """Like execute_with_parameters, grouping rows into transactions.

        commit_every < 1 wraps the whole run in one transaction, 1 adds no
        transaction, and n > 1 commits after every n rows plus once at the end.
        On failure the open transaction is rolled back; committed groups stay.
        """
        if commit_every == 1:
            return self.execute_with_parameters(sql, rows)

        self.begin()
        try:
            if commit_every < 1:
                count = self.execute_with_parameters(sql, rows)
            else:
                count = 0
                with self.prepare(sql) as statement:
                    for params in rows:
                        statement.bind_all(params)
                        statement.step()
                        statement.reset()
                        count += 1
                        if count % commit_every == 0:
                            self.commit()
                            logger.debug(f"Committed batch ending at row {count}")
                            self.begin()
            self.commit()
        except BaseException:
            self._unwind()
            raise
        logger.debug(f"Committed {count} rows")
        return count

    def _unwind(self) -> None:
        if not self.in_transaction:
            return
        try:
            self.rollback()
        except SQLiteError as e:
            logger.error(f"Rollback after failed batch failed: {e}")

    def begin(self) -> None:
        self._run("BEGIN TRANSACTION")

    def commit(self) -> None:
        self._run("COMMIT TRANSACTION")

    def rollback(self) -> None:
        self._run("ROLLBACK TRANSACTION")

    @contextlib.contextmanager
    def transaction(self) -> Iterator["Connection"]:
        """Begin; commit on success, roll back if the block raises."""
        self.begin()
        try:
            yield self
            self.commit()
        except BaseException:
            self._unwind()
            raise

    def dump(self, sql: str, file: IO[str] | None = None) -> None:
        """Print each row as `name: value` lines followed by a blank line."""
        out = file if file is not None else sys.stdout

        def show(data: list[str | None], names: list[str | None]) -> bool:
            for i, value in enumerate(data):
                name = names[i] if i < len(names) and names[i] is not None else str(i)
                print(f"{name}: {value if value is not None else 'NULL'}", file=out)
            print("", file=out)
            return True

        self._run(sql, show)


def open(path: str | Path, options: config.OpenOptions | None = None) -> Connection:
    return Connection.open(path, options)


def open_in_memory(options: config.OpenOptions | None = None) -> Connection:
    return Connection.open_in_memory(options)
