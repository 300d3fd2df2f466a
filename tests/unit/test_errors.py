import sqlite3

from litebind import codes
from litebind.errors import ExecError, OpenError, SQLiteError


def test_error_carries_code_and_message():
    err = OpenError(14, "unable to open database file")
    assert isinstance(err, SQLiteError)
    assert err.code == 14
    assert err.message == "unable to open database file"
    assert str(err) == "unable to open database file (code 14)"


def test_from_engine_exception_uses_primary_code():
    conn = sqlite3.connect(":memory:")
    conn.execute("CREATE TABLE t (x PRIMARY KEY)")
    conn.execute("INSERT INTO t VALUES (1)")
    try:
        conn.execute("INSERT INTO t VALUES (1)")
    except sqlite3.IntegrityError as e:
        err = ExecError.from_exception(e)
    finally:
        conn.close()

    assert err.code == codes.SQLITE_CONSTRAINT
    assert "UNIQUE" in err.message


def test_module_errors_map_to_misuse():
    conn = sqlite3.connect(":memory:")
    conn.close()
    try:
        conn.execute("SELECT 1")
    except sqlite3.ProgrammingError as e:
        err = ExecError.from_exception(e)

    assert err.code == codes.SQLITE_MISUSE
    assert "closed" in err.message


def test_errstr():
    assert codes.errstr(codes.SQLITE_RANGE) == "column index out of range"
    assert codes.errstr(1555) == "constraint failed"
    assert codes.errstr(999) == "unknown error"
