import pytest

import litebind
from litebind import config, paths


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keep tests away from the user's ~/.litebind/config.yaml."""
    home = tmp_path / ".litebind"
    monkeypatch.setattr(paths, "dot_litebind", lambda: home)
    config.clear_cache()
    yield home
    config.clear_cache()


@pytest.fixture
def db():
    """Fresh in-memory database, closed after the test."""
    conn = litebind.open_in_memory()
    yield conn
    conn.close()


@pytest.fixture
def foo_db(db):
    """In-memory database with the two-row foo table."""
    db.execute("CREATE TABLE foo (bar INTEGER, baz TEXT)")
    db.execute_with_parameters(
        "INSERT INTO foo (bar, baz) VALUES (?, ?)", [["1", "frotz"], ["2", "nozzl"]]
    )
    return db


@pytest.fixture
def count_rows():
    def count(conn, table: str) -> int:
        with conn.prepare(f"SELECT COUNT(*) FROM {table}") as stm:
            stm.step()
            return stm.column_int(0)

    return count
