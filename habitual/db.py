import sqlite3
from contextlib import contextmanager
from pathlib import Path

from . import config

__all__ = ["get_db", "init", "read_value", "write_value", "delete_value"]

_SCHEMA = """
CREATE TABLE IF NOT EXISTS store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
)
"""


@contextmanager
def get_db(db_path: Path | None = None):
    db_path = db_path if db_path else config.DB_PATH
    conn = sqlite3.connect(db_path)
    conn.execute("PRAGMA journal_mode=WAL")
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init(db_path: Path | None = None) -> None:
    db_path = db_path if db_path else config.DB_PATH
    db_path.parent.mkdir(parents=True, exist_ok=True)
    with get_db(db_path) as conn:
        conn.execute(_SCHEMA)


def read_value(key: str, db_path: Path | None = None) -> str | None:
    with get_db(db_path) as conn:
        row = conn.execute("SELECT value FROM store WHERE key = ?", (key,)).fetchone()
    return row[0] if row else None


def write_value(key: str, value: str, db_path: Path | None = None) -> None:
    with get_db(db_path) as conn:
        conn.execute(
            "INSERT INTO store (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = CURRENT_TIMESTAMP",
            (key, value),
        )


def delete_value(key: str, db_path: Path | None = None) -> None:
    with get_db(db_path) as conn:
        conn.execute("DELETE FROM store WHERE key = ?", (key,))
