from __future__ import annotations

from src.grouphome_admin.grouphome_admin.database.bootstrap import (
    SCHEMA_PATH,
    SEED_PATH,
    _strip_create_db_and_use,
    iter_sql_statements,
)


def test_splitter_ignores_semicolons_in_quotes_and_comments():
    sql = """
    -- comment; with a semicolon
    INSERT INTO t (a) VALUES ('x;y');
    INSERT INTO t (a) VALUES ("it's; fine");
    SELECT 1
    """

    assert list(iter_sql_statements(sql)) == [
        "INSERT INTO t (a) VALUES ('x;y')",
        "INSERT INTO t (a) VALUES (\"it's; fine\")",
        "SELECT 1",
    ]


def test_create_database_and_use_are_dropped():
    sql = "CREATE DATABASE IF NOT EXISTS other;\nUSE other;\nCREATE TABLE x (id INT);\n"

    assert list(iter_sql_statements(_strip_create_db_and_use(sql))) == ["CREATE TABLE x (id INT)"]


def test_schema_declares_every_table():
    statements = list(iter_sql_statements(_strip_create_db_and_use(SCHEMA_PATH.read_text(encoding="utf-8"))))
    created = {s.split("EXISTS", 1)[1].split("(", 1)[0].strip() for s in statements if "CREATE TABLE" in s}

    assert created == {
        "departments",
        "roles",
        "users",
        "department_histories",
        "group_homes",
        "expansions",
        "residents",
        "disability_histories",
        "shift_preferences",
        "usage_records",
        "attendance_reports",
    }


def test_seed_file_parses():
    statements = list(iter_sql_statements(SEED_PATH.read_text(encoding="utf-8")))

    assert statements and all(s.upper().startswith("INSERT") for s in statements)
