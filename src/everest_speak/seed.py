"""Seed the database with the restaurant branches."""
import json
from pathlib import Path
from everest_speak.db import get_connection

CONTENT_DIR = Path(__file__).parent / "content"


def is_seeded(db_path: str) -> bool:
    """Check whether the database has already been seeded with branches."""
    conn = get_connection(db_path)
    count = conn.execute("SELECT COUNT(*) FROM branches").fetchone()[0]
    conn.close()
    return count > 0


def seed_branches(db_path: str) -> None:
    """Insert all branches from branches.json."""
    data = json.loads((CONTENT_DIR / "branches.json").read_text(encoding="utf-8"))
    conn = get_connection(db_path)
    for branch in data["branches"]:
        conn.execute(
            "INSERT OR IGNORE INTO branches (id, name) VALUES (?, ?)",
            (branch["id"], branch["name"]),
        )
    conn.commit()
    conn.close()


def list_branches(db_path: str) -> list:
    conn = get_connection(db_path)
    rows = conn.execute("SELECT * FROM branches ORDER BY id").fetchall()
    conn.close()
    return rows


def seed_all(db_path: str) -> None:
    if is_seeded(db_path):
        return
    seed_branches(db_path)
