"""Tests for litebind.sqltext splitting and parameter scanning."""

from litebind import sqltext


def test_split_statements_basic():
    sql = "CREATE TABLE a (x); INSERT INTO a VALUES (1);INSERT INTO a VALUES (2)"
    assert sqltext.split_statements(sql) == [
        "CREATE TABLE a (x);",
        "INSERT INTO a VALUES (1);",
        "INSERT INTO a VALUES (2)",
    ]


def test_split_ignores_semicolons_in_literals_and_comments():
    sql = "INSERT INTO a VALUES ('x;y'); -- trailing; comment\nSELECT \"c;d\" /* ; */ FROM a;"
    statements = sqltext.split_statements(sql)
    assert len(statements) == 2
    assert statements[0] == "INSERT INTO a VALUES ('x;y');"
    assert statements[1].endswith('SELECT "c;d" /* ; */ FROM a;')


def test_split_keeps_trigger_body_together():
    sql = (
        "CREATE TRIGGER t AFTER INSERT ON a BEGIN "
        "INSERT INTO b VALUES (1); INSERT INTO b VALUES (2); END; SELECT 1;"
    )
    statements = sqltext.split_statements(sql)
    assert len(statements) == 2
    assert statements[0].endswith("END;")
    assert statements[1] == "SELECT 1;"


def test_split_skips_empty_statements():
    assert sqltext.split_statements(" ; ;; -- nothing\n") == []
    assert sqltext.split_statements("") == []


def test_split_first_returns_tail():
    first, tail = sqltext.split_first("SELECT 1; SELECT 2;")
    assert first == "SELECT 1;"
    assert tail == " SELECT 2;"


def test_is_blank():
    assert sqltext.is_blank("  /* c */ -- d\n ;")
    assert not sqltext.is_blank("SELECT 1")


def test_leading_keyword():
    assert sqltext.leading_keyword("  -- c\n explain select 1") == "EXPLAIN"
    assert sqltext.leading_keyword("'x'") == ""


def test_scan_anonymous_parameters():
    params = sqltext.scan_parameters("INSERT INTO foo VALUES (?, ?)")
    assert params.count == 2
    assert params.anonymous
    assert params.name(1) is None


def test_scan_numbered_parameters():
    params = sqltext.scan_parameters("SELECT ?3, ?1")
    assert params.count == 3
    assert params.index("?3") == 3
    assert params.name(1) == "?1"


def test_scan_anonymous_after_numbered_takes_next_index():
    params = sqltext.scan_parameters("SELECT ?5, ?")
    assert params.count == 6


def test_scan_named_parameters_reuse_index():
    params = sqltext.scan_parameters("SELECT :a, @b, :a, $c")
    assert params.count == 3
    assert params.index(":a") == 1
    assert params.index("@b") == 2
    assert params.index("$c") == 3
    assert params.named_only


def test_named_lookup_accepts_bare_names():
    params = sqltext.scan_parameters("SELECT :first, @second")
    assert params.index("first") == 1
    assert params.index("second") == 2
    assert params.index("third") == 0
    assert params.index(":second") == 0


def test_scan_ignores_markers_in_literals_and_comments():
    params = sqltext.scan_parameters("SELECT '?', \":x\" -- ?\n, /* @y */ ?")
    assert params.count == 1


def test_dollar_parameter_with_suffix():
    params = sqltext.scan_parameters("SELECT $var::part(1)")
    assert params.count == 1
    assert params.index("$var::part(1)") == 1


def test_identifier_with_dollar_is_not_a_parameter():
    params = sqltext.scan_parameters("SELECT a$b FROM t")
    assert params.count == 0


def test_arguments_shape():
    assert sqltext.scan_parameters("SELECT 1").arguments([]) == ()
    assert sqltext.scan_parameters("SELECT ?, ?").arguments(["a", None]) == ["a", None]
    assert sqltext.scan_parameters("SELECT :a, @b").arguments(["x", "y"]) == {"a": "x", "b": "y"}
    assert sqltext.scan_parameters("SELECT :a, @a").arguments(["x", "y"]) == ["x", "y"]


def test_named_markers_keep_their_text_when_bound_by_name():
    sql = "SELECT :a, @b"
    assert sqltext.scan_parameters(sql).sql == sql


def test_colliding_bare_names_are_renumbered():
    params = sqltext.scan_parameters("SELECT :a, @a, ':a', :a")
    assert not params.by_name
    assert params.sql == "SELECT ?1, ?2, ':a', ?1"


def test_mixed_markers_are_renumbered():
    params = sqltext.scan_parameters("SELECT $v::x(1), ?, ?7 -- :c\n")
    assert params.count == 7
    assert params.sql == "SELECT ?1, ?, ?7 -- :c\n"
