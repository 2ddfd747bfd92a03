from __future__ import annotations

import sqlite3
from typing import Optional

from domain.repositories import SessionRepository


class SqliteSessionRepository(SessionRepository):
    """
    SQLite-backed implementation of `SessionRepository`.

    Stores which username each (provider, provider_user_id) pair is logged
    in as, in a `sessions` table.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._ensure_table()

    def _get_connection(self) -> sqlite3.Connection:
        return sqlite3.connect(self._db_path)

    def _ensure_table(self) -> None:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS sessions (
                    provider TEXT NOT NULL,
                    provider_user_id TEXT NOT NULL,
                    username TEXT NOT NULL,
                    PRIMARY KEY (provider, provider_user_id)
                )
                """
            )
            conn.commit()

    def find_username(
        self,
        provider: str,
        provider_user_id: str,
    ) -> Optional[str]:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                SELECT username
                FROM sessions
                WHERE provider = ? AND provider_user_id = ?
                """,
                (provider, provider_user_id),
            )
            row = cur.fetchone()
            if not row:
                return None
            return str(row[0])

    def set_session(
        self,
        provider: str,
        provider_user_id: str,
        username: str,
    ) -> None:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                INSERT INTO sessions (provider, provider_user_id, username)
                VALUES (?, ?, ?)
                ON CONFLICT (provider, provider_user_id)
                DO UPDATE SET username = excluded.username
                """,
                (provider, provider_user_id, username),
            )
            conn.commit()

    def clear_session(
        self,
        provider: str,
        provider_user_id: str,
    ) -> None:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                DELETE FROM sessions
                WHERE provider = ? AND provider_user_id = ?
                """,
                (provider, provider_user_id),
            )
            conn.commit()
