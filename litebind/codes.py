"""SQLite primary result codes."""

import sqlite3

SQLITE_OK = 0
SQLITE_ERROR = 1
SQLITE_INTERNAL = 2
SQLITE_PERM = 3
SQLITE_ABORT = 4
SQLITE_BUSY = 5
SQLITE_LOCKED = 6
SQLITE_NOMEM = 7
SQLITE_READONLY = 8
SQLITE_INTERRUPT = 9
SQLITE_IOERR = 10
SQLITE_CORRUPT = 11
SQLITE_NOTFOUND = 12
SQLITE_FULL = 13
SQLITE_CANTOPEN = 14
SQLITE_PROTOCOL = 15
SQLITE_EMPTY = 16
SQLITE_SCHEMA = 17
SQLITE_TOOBIG = 18
SQLITE_CONSTRAINT = 19
SQLITE_MISMATCH = 20
SQLITE_MISUSE = 21
SQLITE_NOLFS = 22
SQLITE_AUTH = 23
SQLITE_FORMAT = 24
SQLITE_RANGE = 25
SQLITE_NOTADB = 26
SQLITE_NOTICE = 27
SQLITE_WARNING = 28
SQLITE_ROW = 100
SQLITE_DONE = 101

_MESSAGES = {
    SQLITE_OK: "not an error",
    SQLITE_ERROR: "SQL logic error",
    SQLITE_ABORT: "query aborted",
    SQLITE_BUSY: "database is locked",
    SQLITE_LOCKED: "database table is locked",
    SQLITE_NOMEM: "out of memory",
    SQLITE_READONLY: "attempt to write a readonly database",
    SQLITE_IOERR: "disk I/O error",
    SQLITE_CORRUPT: "database disk image is malformed",
    SQLITE_CANTOPEN: "unable to open database file",
    SQLITE_CONSTRAINT: "constraint failed",
    SQLITE_MISMATCH: "datatype mismatch",
    SQLITE_MISUSE: "bad parameter or other API misuse",
    SQLITE_RANGE: "column index out of range",
    SQLITE_NOTADB: "file is not a database",
    SQLITE_ROW: "another row available",
    SQLITE_DONE: "no more rows available",
}


def primary(code: int) -> int:
    """Strip the extended bits from a result code."""
    return code & 0xFF


def errstr(code: int) -> str:
    return _MESSAGES.get(primary(code), "unknown error")


def from_exception(exc: sqlite3.Error) -> int:
    """Primary result code carried by a sqlite3 exception.

    Errors raised by the sqlite3 module itself (closed handles, wrong
    thread, binding count) carry no engine code.
    """
    code = getattr(exc, "sqlite_errorcode", None)
    if code is not None:
        return primary(code)
    if isinstance(exc, (sqlite3.ProgrammingError, sqlite3.InterfaceError)):
        return SQLITE_MISUSE
    return SQLITE_ERROR
