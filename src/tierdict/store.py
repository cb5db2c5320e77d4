from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import settings


_CURRENT_DICTIONARY = "current_dictionary"


class DictionaryStore:
    """SQLite-backed blob store for named dictionaries.

    - dictionaries: 辞書名 → `{name, words, lastUpdated, ...}` の JSON 文字列
    - app_state: 現在選択中の辞書名などの小さな状態

    一覧は作成順（created_at, rowid）で返す。中身の検証は上位（DictionaryService）の責務。
    """

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        self._ensure_dirs()
        self._init_db()

    # --- low-level helpers ---
    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=10.0, isolation_level=None, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        with conn:
            conn.execute("pragma journal_mode=WAL;")
        return conn

    def _ensure_dirs(self) -> None:
        p = Path(self.db_path)
        if p.parent and not p.parent.exists():
            p.parent.mkdir(parents=True, exist_ok=True)

    def _init_db(self) -> None:
        conn = self._connect()
        try:
            with conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS dictionaries (
                        name TEXT PRIMARY KEY,
                        data TEXT NOT NULL,
                        created_at TEXT NOT NULL,
                        updated_at TEXT NOT NULL
                    );
                    """
                )
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS app_state (
                        key TEXT PRIMARY KEY,
                        value TEXT
                    );
                    """
                )
        finally:
            conn.close()

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()

    # --- dictionaries ---
    def get_dictionary(self, name: str) -> Optional[Dict[str, Any]]:
        """Return the stored blob for ``name`` or None."""
        conn = self._connect()
        try:
            row = conn.execute("SELECT data FROM dictionaries WHERE name = ?;", (name,)).fetchone()
            if row is None:
                return None
            return json.loads(row["data"])
        finally:
            conn.close()

    def save_dictionary(self, name: str, data: Dict[str, Any]) -> None:
        """Insert or replace the blob. 既存行の created_at は保持する。"""
        now = self._now()
        payload = json.dumps(data, ensure_ascii=False)
        conn = self._connect()
        try:
            with conn:
                conn.execute(
                    """
                    INSERT INTO dictionaries(name, data, created_at, updated_at)
                    VALUES (?, ?, ?, ?)
                    ON CONFLICT(name) DO UPDATE SET data = excluded.data, updated_at = excluded.updated_at;
                    """,
                    (name, payload, now, now),
                )
        finally:
            conn.close()

    def delete_dictionary(self, name: str) -> bool:
        conn = self._connect()
        try:
            with conn:
                cur = conn.execute("DELETE FROM dictionaries WHERE name = ?;", (name,))
                return cur.rowcount > 0
        finally:
            conn.close()

    def list_names(self) -> List[str]:
        conn = self._connect()
        try:
            rows = conn.execute("SELECT name FROM dictionaries ORDER BY created_at ASC, rowid ASC;").fetchall()
            return [row["name"] for row in rows]
        finally:
            conn.close()

    # --- app state ---
    def get_current(self) -> Optional[str]:
        conn = self._connect()
        try:
            row = conn.execute("SELECT value FROM app_state WHERE key = ?;", (_CURRENT_DICTIONARY,)).fetchone()
            return None if row is None else row["value"]
        finally:
            conn.close()

    def set_current(self, name: Optional[str]) -> None:
        conn = self._connect()
        try:
            with conn:
                conn.execute(
                    "INSERT OR REPLACE INTO app_state(key, value) VALUES (?, ?);",
                    (_CURRENT_DICTIONARY, name),
                )
        finally:
            conn.close()


# module-level singleton store (wired to settings)
store = DictionaryStore(db_path=settings.db_path)
