"""Tests for database initialization and connection management."""
from everest_speak.db import init_db, get_connection, get_state, set_state


def test_init_db_creates_tables(tmp_db):
    init_db(tmp_db)
    conn = get_connection(tmp_db)
    cursor = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
    )
    tables = {row[0] for row in cursor.fetchall()}
    expected = {
        "branches", "users", "daily_logs", "mission_logs",
        "test_results", "local_state",
    }
    assert expected.issubset(tables)
    conn.close()


def test_init_db_is_idempotent(tmp_db):
    init_db(tmp_db)
    init_db(tmp_db)  # should not raise
    conn = get_connection(tmp_db)
    cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
    assert len(cursor.fetchall()) > 0
    conn.close()


def test_init_db_creates_parent_directory(tmp_path):
    db_path = str(tmp_path / "nested" / "dir" / "everest.db")
    init_db(db_path)
    assert (tmp_path / "nested" / "dir" / "everest.db").exists()


def test_get_connection_returns_row_factory(tmp_db):
    init_db(tmp_db)
    conn = get_connection(tmp_db)
    conn.execute("INSERT INTO local_state (key, value) VALUES ('test', 'val')")
    row = conn.execute("SELECT key, value FROM local_state WHERE key='test'").fetchone()
    assert row["key"] == "test"
    conn.close()


def test_state_round_trip_and_overwrite(tmp_db):
    init_db(tmp_db)
    assert get_state(tmp_db, "missing") is None
    assert get_state(tmp_db, "missing", "fallback") == "fallback"
    set_state(tmp_db, "k", "one")
    set_state(tmp_db, "k", "two")
    assert get_state(tmp_db, "k") == "two"
