"""
Key/value stores for per-session UI state, plus engine initialisation.

Stores expose get(key) -> str | None, set(key, value) and remove(key).
"""

import sys
from typing import Dict, Optional

from sqlalchemy import create_engine, text

from portal_access.config import SESSION_STORE_URI

TABLE_NAME = "portal_kv_store"


def init_engine(uri: Optional[str] = None):
    """Create a SQLAlchemy engine and verify the connection."""
    engine = create_engine(uri or SESSION_STORE_URI, echo=False, future=True)
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as e:
        print("ERROR: could not connect to session store:", e, file=sys.stderr)
        sys.exit(1)
    print("[init] Connected to session store.")
    return engine


class MemoryStore:
    """Process-local store; the default for tests and the console."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class SqlKeyValueStore:
    """Store backed by a single two-column table. Last write wins."""

    def __init__(self, engine):
        self.engine = engine
        with self.engine.begin() as conn:
            conn.execute(text(
                f"CREATE TABLE IF NOT EXISTS {TABLE_NAME} ("
                " store_key VARCHAR(255) PRIMARY KEY,"
                " store_value TEXT NOT NULL)"
            ))

    def get(self, key: str) -> Optional[str]:
        sql = text(f"SELECT store_value FROM {TABLE_NAME} WHERE store_key = :k")
        with self.engine.connect() as conn:
            row = conn.execute(sql, {"k": key}).mappings().first()
        return row["store_value"] if row else None

    def set(self, key: str, value: str) -> None:
        with self.engine.begin() as conn:
            conn.execute(text(f"DELETE FROM {TABLE_NAME} WHERE store_key = :k"), {"k": key})
            conn.execute(
                text(f"INSERT INTO {TABLE_NAME} (store_key, store_value) VALUES (:k, :v)"),
                {"k": key, "v": str(value)},
            )

    def remove(self, key: str) -> None:
        with self.engine.begin() as conn:
            conn.execute(text(f"DELETE FROM {TABLE_NAME} WHERE store_key = :k"), {"k": key})
