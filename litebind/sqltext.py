"""SQL text helpers: statement splitting and parameter scanning.

Statement boundaries come from the engine (`sqlite3.complete_statement`), so
semicolons inside literals, comments and trigger bodies are handled the way
SQLite handles them. Parameters are numbered the way SQLite numbers them:

- `?` takes the next index after the largest one seen so far
- `?NNN` takes index NNN
- `:name`, `@name` and `$name` take the next index on first use and reuse it
  afterwards
"""

import sqlite3
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

NAMED_PREFIXES = ":@$"


def _is_id_char(c: str) -> bool:
    return c.isalnum() or c in "_$" or ord(c) > 0x7F


def _skip_quoted(sql: str, i: int, quote: str) -> int:
    """Return the index just past the literal opened at i."""
    j = i + 1
    while True:
        j = sql.find(quote, j)
        if j < 0:
            return len(sql)
        if sql.startswith(quote, j + 1):
            j += 2
            continue
        return j + 1


def _skip_dollar_suffix(sql: str, j: int) -> int:
    # TCL-style $name::part(...) variables.
    n = len(sql)
    while True:
        if sql.startswith("::", j):
            j += 2
            while j < n and _is_id_char(sql[j]):
                j += 1
        elif j < n and sql[j] == "(":
            end = sql.find(")", j)
            return n if end < 0 else end + 1
        else:
            return j


def _spans(sql: str) -> Iterator[tuple[str, int, int]]:
    i, n = 0, len(sql)
    while i < n:
        c = sql[i]
        if c.isspace():
            i += 1
        elif sql.startswith("--", i):
            end = sql.find("\n", i)
            i = n if end < 0 else end + 1
        elif sql.startswith("/*", i):
            end = sql.find("*/", i + 2)
            i = n if end < 0 else end + 2
        elif c in "'\"`":
            j = _skip_quoted(sql, i, c)
            yield "literal", i, j
            i = j
        elif c == "[":
            end = sql.find("]", i + 1)
            j = n if end < 0 else end + 1
            yield "literal", i, j
            i = j
        elif c == "?":
            j = i + 1
            while j < n and sql[j].isdigit():
                j += 1
            yield "param", i, j
            i = j
        elif c in NAMED_PREFIXES:
            j = i + 1
            while j < n and _is_id_char(sql[j]):
                j += 1
            if c == "$" and j > i + 1:
                j = _skip_dollar_suffix(sql, j)
            if j == i + 1:
                yield "word", i, i + 1
                i += 1
            else:
                yield "param", i, j
                i = j
        elif c == ";":
            yield ";", i, i + 1
            i += 1
        elif _is_id_char(c):
            j = i + 1
            while j < n and _is_id_char(sql[j]):
                j += 1
            yield "word", i, j
            i = j
        else:
            yield "word", i, i + 1
            i += 1


def tokens(sql: str) -> Iterator[tuple[str, str]]:
    """Yield (kind, text) pairs; kind is 'literal', 'param', ';' or 'word'.

    Whitespace and comments are dropped.
    """
    for kind, start, end in _spans(sql):
        yield kind, sql[start:end]


def is_blank(sql: str) -> bool:
    """True when sql holds nothing but whitespace, comments and semicolons."""
    return all(kind == ";" for kind, _ in tokens(sql))


def leading_keyword(sql: str) -> str:
    for kind, text in tokens(sql):
        if kind == "word":
            return text.upper()
        if kind != ";":
            return ""
    return ""


def split_first(sql: str) -> tuple[str, str]:
    """Split off the first complete statement.

    Returns (statement, tail). The statement is "" when sql holds no
    statement at all.
    """
    start = 0
    pos = sql.find(";")
    while pos >= 0:
        chunk = sql[start : pos + 1]
        if sqlite3.complete_statement(chunk):
            if not is_blank(chunk):
                return chunk.strip(), sql[pos + 1 :]
            start = pos + 1
        pos = sql.find(";", pos + 1)
    rest = sql[start:]
    if is_blank(rest):
        return "", ""
    return rest.strip(), ""


def split_statements(sql: str) -> list[str]:
    statements = []
    statement, tail = split_first(sql)
    while statement:
        statements.append(statement)
        statement, tail = split_first(tail)
    return statements


@dataclass(frozen=True)
class Parameters:
    """Parameter map of a single statement.

    `sql` is the text to hand to sqlite3 together with `arguments()`. It is
    the scanned statement itself, or a copy with every named marker replaced
    by its `?NNN` form when the statement cannot be bound by name.
    """

    count: int = 0
    names: dict[str, int] = field(default_factory=dict)
    anonymous: bool = False
    sql: str = ""

    def index(self, name: str) -> int:
        """Index for name, or 0 when the statement has no such parameter.

        A bare name (no prefix) matches `:name`, `@name` or `$name`.
        """
        if name in self.names:
            return self.names[name]
        if name and name[0] not in NAMED_PREFIXES + "?":
            for prefix in NAMED_PREFIXES:
                if prefix + name in self.names:
                    return self.names[prefix + name]
        return 0

    def name(self, index: int) -> str | None:
        for name, i in self.names.items():
            if i == index:
                return name
        return None

    @property
    def named_only(self) -> bool:
        if self.count == 0 or self.anonymous:
            return False
        named = {i for n, i in self.names.items() if n[0] in NAMED_PREFIXES}
        return len(named) == self.count

    @property
    def by_name(self) -> bool:
        """True when sqlite3 can bind every parameter from a mapping.

        sqlite3 looks names up without their prefix, so `:a` and `@a` would
        share one key.
        """
        if not self.named_only:
            return False
        keys = {n[1:] for n in self.names}
        return len(keys) == len(self.names)

    def arguments(self, values: Sequence) -> tuple | list | dict:
        """Shape values (index 1 at position 0) for `sqlite3.Cursor.execute`.

        Statements whose named parameters all have distinct bare names get a
        mapping keyed by the bare name. Everything else binds by position
        against `sql`, where named markers have been renumbered. sqlite3
        warns from Python 3.12 on when a named marker receives a sequence,
        so a sequence is only ever paired with `?` and `?NNN` markers.
        """
        if self.count == 0:
            return ()
        if self.by_name:
            return {n[1:]: values[i - 1] for n, i in self.names.items()}
        return list(values)


def _renumber(sql: str, names: dict[str, int]) -> str:
    parts = []
    last = 0
    for kind, start, end in _spans(sql):
        if kind == "param" and sql[start] in NAMED_PREFIXES:
            parts.append(sql[last:start])
            parts.append(f"?{names[sql[start:end]]}")
            last = end
    parts.append(sql[last:])
    return "".join(parts)


def scan_parameters(sql: str) -> Parameters:
    count = 0
    names: dict[str, int] = {}
    anonymous = False
    for kind, text in tokens(sql):
        if kind != "param":
            continue
        if text == "?":
            count += 1
            anonymous = True
        elif text[0] == "?":
            index = int(text[1:])
            count = max(count, index)
            names.setdefault(text, index)
        elif text not in names:
            count += 1
            names[text] = count
    parameters = Parameters(count=count, names=names, anonymous=anonymous, sql=sql)
    if not parameters.by_name and any(n[0] in NAMED_PREFIXES for n in names):
        parameters = Parameters(
            count=count, names=names, anonymous=anonymous, sql=_renumber(sql, names)
        )
    return parameters
