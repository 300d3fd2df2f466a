import sqlite3

from . import codes


class SQLiteError(Exception):
    """Base exception for engine failures: a result code plus the engine's text."""

    def __init__(self, code: int, message: str):
        super().__init__(f"{message} (code {code})")
        self.code = code
        self.message = message

    @classmethod
    def from_exception(cls, exc: sqlite3.Error) -> "SQLiteError":
        message = str(exc) or codes.errstr(codes.from_exception(exc))
        return cls(codes.from_exception(exc), message)

    @classmethod
    def misuse(cls, message: str) -> "SQLiteError":
        return cls(codes.SQLITE_MISUSE, message)


class OpenError(SQLiteError):
    """Raised when a database cannot be opened."""

    pass


class PrepareError(SQLiteError):
    """Raised when a statement fails to compile."""

    pass


class ExecError(SQLiteError):
    """Raised when one-shot execution fails."""

    pass


class BindError(SQLiteError):
    """Raised when a parameter cannot be bound."""

    pass


class StepError(SQLiteError):
    """Raised when stepping a statement fails."""

    pass


class ResetError(SQLiteError):
    """Raised when a statement cannot be reset."""

    pass
