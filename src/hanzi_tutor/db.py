"""SQLite-backed key-value persistence for progress maps."""
import json
import sqlite3
from pathlib import Path

from loguru import logger

DEFAULT_DB_PATH = str(Path.home() / ".hanzi_tutor" / "progress.db")

SCHEMA = """
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


class PersistenceError(Exception):
    """A read or write against the progress database failed."""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating the store table if it doesn't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()


class KeyValueStore:
    """Durable mapping of string keys to JSON objects of primitive values.

    Each ``set`` replaces the whole mapping stored under a key inside a single
    transaction, so a failed write never leaves a half-updated mapping behind.
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH):
        self.db_path = db_path
        try:
            init_db(db_path)
        except (sqlite3.Error, OSError) as e:
            raise PersistenceError(f"cannot open store at {db_path}: {e}") from e
        logger.info(f"KeyValueStore initialized at {db_path}")

    def get(self, key: str) -> dict:
        """Return the mapping stored under key, or an empty dict if absent."""
        try:
            conn = get_connection(self.db_path)
            try:
                row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(f"failed to read {key!r}: {e}") from e
        if row is None:
            return {}
        try:
            value = json.loads(row["value"])
        except json.JSONDecodeError as e:
            raise PersistenceError(f"corrupt value under {key!r}: {e}") from e
        if not isinstance(value, dict):
            raise PersistenceError(f"value under {key!r} is not a mapping")
        return value

    def set(self, key: str, mapping: dict) -> None:
        self.set_many({key: mapping})

    def set_many(self, mappings: dict[str, dict]) -> None:
        """Replace several mappings in one transaction; all are written or none."""
        rows = [(key, json.dumps(m, ensure_ascii=False, sort_keys=True)) for key, m in mappings.items()]
        try:
            conn = get_connection(self.db_path)
            try:
                with conn:
                    for key, payload in rows:
                        conn.execute(
                            "INSERT INTO kv_store (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=?",
                            (key, payload, payload),
                        )
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(f"failed to write {list(mappings)}: {e}") from e

    def delete(self, key: str) -> None:
        try:
            conn = get_connection(self.db_path)
            try:
                with conn:
                    conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(f"failed to delete {key!r}: {e}") from e

    def keys(self) -> list[str]:
        try:
            conn = get_connection(self.db_path)
            try:
                rows = conn.execute("SELECT key FROM kv_store ORDER BY key").fetchall()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(f"failed to list keys: {e}") from e
        return [r["key"] for r in rows]
