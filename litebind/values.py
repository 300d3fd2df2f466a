"""Column coercion.

A value read in the storage class the accessor asks for is returned as is.
Anything else is converted by the engine through `CAST`, so the result
follows SQLite's own conversion rules. NULL reads as None for text and
blobs and as zero for numbers.
"""

import sqlite3

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def _cast(db: sqlite3.Connection, value, affinity: str):
    return db.execute(f"SELECT CAST(? AS {affinity})", (value,)).fetchone()[0]


def as_text(db: sqlite3.Connection, value) -> str | None:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, int):
        return str(value)
    return _cast(db, value, "TEXT")


def as_int(db: sqlite3.Connection, value) -> int:
    if value is None:
        return 0
    if isinstance(value, int):
        return value
    return _cast(db, value, "INTEGER")


def as_float(db: sqlite3.Connection, value) -> float:
    if value is None:
        return 0.0
    if isinstance(value, float):
        return value
    return _cast(db, value, "REAL")


def as_blob(db: sqlite3.Connection, value) -> bytes | None:
    if value is None or isinstance(value, bytes):
        return value
    return as_text(db, value).encode("utf-8")


def own(value):
    """Return an independent copy of a parameter value, or raise TypeError.

    str and bytes are immutable and kept as they are; bytearray and
    memoryview are copied so later writes to the caller's buffer do not
    reach the binding.
    """
    if value is None or isinstance(value, (str, bytes, float)):
        return value
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, int):
        if not INT64_MIN <= value <= INT64_MAX:
            raise OverflowError(f"integer {value} does not fit in 64 bits")
        return int(value)
    raise TypeError(f"unsupported parameter type: {type(value).__name__}")
