from __future__ import annotations

import json
import logging
import os
import sqlite3
import threading
from datetime import datetime, timezone
from typing import Any

from app.core.errors import UpstreamServiceError

logger = logging.getLogger(__name__)

STORAGE_ERROR_MESSAGE = "Profile storage is temporarily unavailable."


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ProfileStore:
    """sqlite-backed document store: one JSON document per user id.

    Writes replace or merge whole top-level fields; there is no optimistic
    concurrency check, the last write wins.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    def _get_connection(self) -> sqlite3.Connection:
        if self._conn is not None:
            return self._conn

        directory = os.path.dirname(self.db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        conn = sqlite3.connect(
            self.db_path,
            check_same_thread=False,
            timeout=5,
            isolation_level=None,
        )
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA synchronous=NORMAL;")
        conn.execute("PRAGMA busy_timeout=5000;")
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS user_profiles (
                user_id TEXT PRIMARY KEY,
                document_json TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );
            """
        )
        self._conn = conn
        return conn

    def _read(self, conn: sqlite3.Connection, user_id: str) -> dict[str, Any] | None:
        cur = conn.execute("SELECT document_json FROM user_profiles WHERE user_id = ?", (user_id,))
        row = cur.fetchone()
        if not row:
            return None
        return json.loads(row[0]) if row[0] else {}

    def _write(self, conn: sqlite3.Connection, user_id: str, document: dict[str, Any]) -> None:
        conn.execute(
            """
            INSERT INTO user_profiles (user_id, document_json, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                document_json = excluded.document_json,
                updated_at = excluded.updated_at
            """,
            (user_id, json.dumps(document, ensure_ascii=False), _utc_now().isoformat()),
        )

    def get(self, user_id: str) -> dict[str, Any] | None:
        try:
            with self._lock:
                return self._read(self._get_connection(), user_id)
        except sqlite3.Error as exc:
            logger.error("profile_store_read_failed user_id=%s: %s", user_id, exc)
            raise UpstreamServiceError(STORAGE_ERROR_MESSAGE) from exc

    def create(self, user_id: str, document: dict[str, Any]) -> dict[str, Any]:
        """Insert ``document`` unless one exists already; returns the stored document."""
        try:
            with self._lock:
                conn = self._get_connection()
                existing = self._read(conn, user_id)
                if existing is not None:
                    return existing
                self._write(conn, user_id, document)
                return document
        except sqlite3.Error as exc:
            logger.error("profile_store_create_failed user_id=%s: %s", user_id, exc)
            raise UpstreamServiceError(STORAGE_ERROR_MESSAGE) from exc

    def update(self, user_id: str, fields: dict[str, Any]) -> bool:
        """Merge top-level ``fields`` into the stored document. False when it does not exist."""
        try:
            with self._lock:
                conn = self._get_connection()
                document = self._read(conn, user_id)
                if document is None:
                    return False
                document.update(fields)
                self._write(conn, user_id, document)
                return True
        except sqlite3.Error as exc:
            logger.error("profile_store_write_failed user_id=%s: %s", user_id, exc)
            raise UpstreamServiceError(STORAGE_ERROR_MESSAGE) from exc

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
