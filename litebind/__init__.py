"""Thin SQLite binding: connections, prepared statements, typed errors."""

from litebind.config import OpenOptions
from litebind.connection import MEMORY, Connection, open, open_in_memory
from litebind.errors import (
    BindError,
    ExecError,
    OpenError,
    PrepareError,
    ResetError,
    SQLiteError,
    StepError,
)
from litebind.statement import Statement

__all__ = [
    "open",
    "open_in_memory",
    "Connection",
    "Statement",
    "OpenOptions",
    "MEMORY",
    "SQLiteError",
    "OpenError",
    "PrepareError",
    "ExecError",
    "BindError",
    "StepError",
    "ResetError",
]
