from __future__ import annotations

from typing import Optional

import psycopg2

from domain.repositories import SessionRepository


class PostgresSessionRepository(SessionRepository):
    """
    Postgres-backed implementation of `SessionRepository`.

    It uses a dedicated `sessions` table to map external identities
    (provider + provider_user_id) to the username they are logged in as.
    """

    def __init__(self, db_params: dict) -> None:
        self._db_params = db_params
        self._ensure_table()

    def _get_connection(self):
        return psycopg2.connect(**self._db_params)

    def _ensure_table(self) -> None:
        with self._get_connection() as conn:
            with conn.cursor() as cur:
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
            with conn.cursor() as cur:
                cur.execute(
                    """
                    SELECT username
                    FROM sessions
                    WHERE provider = %s AND provider_user_id = %s
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
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO sessions (provider, provider_user_id, username)
                    VALUES (%s, %s, %s)
                    ON CONFLICT (provider, provider_user_id)
                    DO UPDATE SET username = EXCLUDED.username
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
            with conn.cursor() as cur:
                cur.execute(
                    """
                    DELETE FROM sessions
                    WHERE provider = %s AND provider_user_id = %s
                    """,
                    (provider, provider_user_id),
                )
                conn.commit()
