"""
Tests for the SQLite adapter and schema (ecopulse.db).
"""
import pytest

from ecopulse.db import StorageError, connect, create_schema


def test_connect_creates_parent_directory(tmp_path):
    path = tmp_path / "nested" / "dir" / "eco.db"
    db = connect(path)
    try:
        create_schema(db)
        assert path.exists()
    finally:
        db.close()


def test_create_schema_is_idempotent(db):
    create_schema(db)
    row = db.execute("SELECT COUNT(*) AS n FROM activity").fetchone()
    assert row["n"] == 0


def test_reset_db_recreates_table(db):
    db.execute(
        "INSERT INTO activity(activity_id, name, category, carbon_impact, created_at) VALUES(?,?,?,?,?)",
        ("x", "Flight", "Transport", 12.5, "2025-01-15T10:00:00.000000+00:00"),
    )
    db.commit()

    create_schema(db, reset_db=True)

    assert db.execute("SELECT COUNT(*) AS n FROM activity").fetchone()["n"] == 0


@pytest.mark.parametrize(
    "name, category, impact",
    [
        ("   ", "Food", 1.0),
        ("Rocket", "Space", 1.0),
        ("Lunch", "Food", 0.0),
    ],
)
def test_schema_constraints_raise_storage_error(db, name, category, impact):
    with pytest.raises(StorageError):
        db.execute(
            "INSERT INTO activity(activity_id, name, category, carbon_impact, created_at) VALUES(?,?,?,?,?)",
            ("x", name, category, impact, "2025-01-15T10:00:00.000000+00:00"),
        )


def test_invalid_sql_is_wrapped(db):
    with pytest.raises(StorageError):
        db.execute("SELECT * FROM no_such_table")
