"""Prepared statements.

A Statement is created by `Connection.prepare()` and lives through
`bind -> step -> reset` cycles until `close()`. The row view (`column_*`,
`row()`) is valid only until the next `step()`, `reset()` or `close()`.

Caller obligations, not checked here:

- step again after `False` or after a StepError only once `reset()` has run
- keep one logical caller per connection; statements of the same connection
  must not be stepped concurrently from several threads
"""

import contextlib
import logging
import sqlite3
from collections.abc import Iterator, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from . import codes, values
from .errors import BindError, ResetError, SQLiteError, StepError
from .sqltext import Parameters

if TYPE_CHECKING:
    from .connection import Connection

logger = logging.getLogger(__name__)

READY = "ready"
ROW = "row"
DONE = "done"
FAILED = "failed"
CLOSED = "closed"


class Statement:
    def __init__(self, connection: "Connection", sql: str, tail: str, parameters: Parameters):
        self._connection = connection
        self._sql = sql
        self._tail = tail
        self._parameters = parameters
        self._values: list[Any] = [None] * parameters.count
        self._cursor: sqlite3.Cursor | None = None
        self._row: tuple | None = None
        self._state = READY

    def __repr__(self) -> str:
        return f"<Statement {self._state} {self._sql!r}>"

    def __enter__(self) -> "Statement":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def sql(self) -> str:
        return self._sql

    @property
    def tail(self) -> str:
        """SQL left over after the first statement."""
        return self._tail

    @property
    def state(self) -> str:
        return self._state

    @property
    def closed(self) -> bool:
        return self._state == CLOSED

    @property
    def parameter_count(self) -> int:
        return self._parameters.count

    def parameter_index(self, name: str) -> int:
        return self._parameters.index(name)

    def parameter_name(self, index: int) -> str | None:
        return self._parameters.name(index)

    @property
    def bindings(self) -> dict[int, Any]:
        """Bound non-NULL values by 1-based index."""
        return {i + 1: v for i, v in enumerate(self._values) if v is not None}

    def _check_open(self, error: type[SQLiteError]) -> None:
        if self._state == CLOSED:
            raise error.misuse("statement is finalized")

    # binding

    def bind(self, key: int | str, value) -> None:
        """Bind value to a 1-based index or a parameter name."""
        if isinstance(key, str):
            self.bind_name(key, value)
        else:
            self.bind_index(key, value)

    def bind_index(self, index: int, value) -> None:
        self._check_open(BindError)
        if self._state != READY:
            raise BindError.misuse("cannot bind while the statement is running; reset() first")
        if not 1 <= index <= self._parameters.count:
            raise BindError(codes.SQLITE_RANGE, codes.errstr(codes.SQLITE_RANGE))
        try:
            self._values[index - 1] = values.own(value)
        except (TypeError, OverflowError) as e:
            raise BindError(codes.SQLITE_MISMATCH, str(e)) from e

    def bind_name(self, name: str, value) -> None:
        """Bind by parameter name. Names the statement does not use are ignored."""
        self._check_open(BindError)
        index = self._parameters.index(name)
        if index <= 0:
            logger.debug(f"No parameter named {name!r} in {self._sql!r}")
            return
        self.bind_index(index, value)

    def bind_all(self, params: Sequence | Mapping) -> None:
        """Clear every binding, then bind params by position or by name."""
        self.clear_bindings()
        if isinstance(params, Mapping):
            for name, value in params.items():
                self.bind_name(name, value)
        else:
            for i, value in enumerate(params):
                self.bind_index(i + 1, value)

    def clear_bindings(self) -> None:
        self._check_open(BindError)
        self._values = [None] * self._parameters.count

    # execution

    def step(self) -> bool:
        """Advance to the next row. True if a row is available, False when done."""
        self._check_open(StepError)
        if self._cursor is None:
            db = self._connection.handle
            try:
                cursor = db.cursor()
                cursor.execute(self._parameters.sql, self._parameters.arguments(self._values))
            except sqlite3.Error as e:
                self._state = FAILED
                raise StepError.from_exception(e) from e
            self._cursor = cursor
        try:
            self._row = self._cursor.fetchone()
        except sqlite3.Error as e:
            self._row = None
            self._state = FAILED
            raise StepError.from_exception(e) from e
        self._state = ROW if self._row is not None else DONE
        return self._row is not None

    def reset(self) -> None:
        """Rewind to the start of the result set, keeping the bindings."""
        self._check_open(ResetError)
        cursor, self._cursor = self._cursor, None
        self._row = None
        self._state = READY
        if cursor is not None:
            try:
                cursor.close()
            except sqlite3.Error as e:
                raise ResetError.from_exception(e) from e

    def close(self) -> None:
        """Finalize the statement. Later calls are no-ops."""
        if self._state == CLOSED:
            return
        cursor, self._cursor = self._cursor, None
        self._row = None
        self._state = CLOSED
        self._connection._forget(self)
        if cursor is not None:
            # A closed connection has already released the cursor.
            with contextlib.suppress(sqlite3.ProgrammingError):
                cursor.close()

    def rows(self) -> Iterator[tuple]:
        """Step until done, yielding each row's native values."""
        while self.step():
            yield self.row()

    # columns

    def column_count(self) -> int:
        if self._cursor is None or self._cursor.description is None:
            return 0
        return len(self._cursor.description)

    def column_name(self, index: int) -> str | None:
        if not 0 <= index < self.column_count():
            return None
        return self._cursor.description[index][0]

    def column_value(self, index: int):
        """Native value of a column in the current row, None if out of range."""
        if self._row is None or not 0 <= index < len(self._row):
            return None
        return self._row[index]

    def column_string(self, index: int) -> str | None:
        return values.as_text(self._connection.handle, self.column_value(index))

    def column_int(self, index: int) -> int:
        return values.as_int(self._connection.handle, self.column_value(index))

    def column_double(self, index: int) -> float:
        return values.as_float(self._connection.handle, self.column_value(index))

    def column_blob(self, index: int) -> bytes | None:
        return values.as_blob(self._connection.handle, self.column_value(index))

    def row(self) -> tuple:
        return tuple(self._row) if self._row is not None else ()

    def __getitem__(self, index: int) -> str | None:
        return self.column_string(index)
