from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

import psycopg2

from domain.models import Account, Coins, GameResult
from domain.repositories import AccountRepository

_ACCOUNT_COLUMNS = (
    "username, balance, total_winnings, total_losses, games_played, last_activity"
)


def _to_coins(value) -> Coins:
    """NUMERIC columns come back as Decimal; map them to int or float."""

    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return value


class PostgresAccountRepository(AccountRepository):
    """
    Postgres-backed implementation of `AccountRepository`.

    Uses an `accounts` table keyed by username and an append-only
    `game_results` table for history. Timestamps are TIMESTAMPTZ, so
    psycopg2 hands back aware datetimes.
    """

    def __init__(self, db_params: dict) -> None:
        self._db_params = db_params
        self._ensure_tables()

    def _get_connection(self):
        return psycopg2.connect(**self._db_params)

    def _ensure_tables(self) -> None:
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    CREATE TABLE IF NOT EXISTS accounts (
                        username TEXT PRIMARY KEY,
                        balance NUMERIC NOT NULL DEFAULT 0,
                        total_winnings NUMERIC NOT NULL DEFAULT 0,
                        total_losses NUMERIC NOT NULL DEFAULT 0,
                        games_played INTEGER NOT NULL DEFAULT 0,
                        last_activity TIMESTAMPTZ
                    )
                    """
                )
                cur.execute(
                    """
                    CREATE TABLE IF NOT EXISTS game_results (
                        id SERIAL PRIMARY KEY,
                        username TEXT NOT NULL REFERENCES accounts (username),
                        game TEXT NOT NULL,
                        wagered NUMERIC NOT NULL,
                        net_delta NUMERIC NOT NULL,
                        timestamp TIMESTAMPTZ NOT NULL
                    )
                    """
                )
                conn.commit()

    @staticmethod
    def _load_history(cur, username: str) -> List[GameResult]:
        cur.execute(
            """
            SELECT game, wagered, net_delta, timestamp
            FROM game_results
            WHERE username = %s
            ORDER BY id
            """,
            (username,),
        )
        return [
            GameResult(
                game=row[0],
                wagered=_to_coins(row[1]),
                net_delta=_to_coins(row[2]),
                timestamp=row[3],
            )
            for row in cur.fetchall()
        ]

    @staticmethod
    def _to_domain(row: tuple, history: List[GameResult]) -> Account:
        return Account(
            username=row[0],
            balance=_to_coins(row[1]),
            total_winnings=_to_coins(row[2]),
            total_losses=_to_coins(row[3]),
            games_played=int(row[4]),
            last_activity=row[5],
            history=history,
        )

    def get_by_username(self, username: str) -> Optional[Account]:
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE username = %s",
                    (username,),
                )
                row = cur.fetchone()
                if not row:
                    return None
                return self._to_domain(row, self._load_history(cur, username))

    def get_all_accounts(self) -> List[Account]:
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(f"SELECT {_ACCOUNT_COLUMNS} FROM accounts ORDER BY username")
                rows = cur.fetchall()
                return [
                    self._to_domain(row, self._load_history(cur, row[0]))
                    for row in rows
                ]

    def add_account(self, account: Account) -> None:
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    INSERT INTO accounts ({_ACCOUNT_COLUMNS})
                    VALUES (%s, %s, %s, %s, %s, %s)
                    """,
                    (
                        account.username,
                        account.balance,
                        account.total_winnings,
                        account.total_losses,
                        account.games_played,
                        account.last_activity,
                    ),
                )
                self._append_history(cur, account)
                conn.commit()

    def save_account(self, account: Account) -> None:
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                # Row lock so two writers for one account append history in turn.
                cur.execute(
                    "SELECT 1 FROM accounts WHERE username = %s FOR UPDATE",
                    (account.username,),
                )
                cur.execute(
                    """
                    UPDATE accounts
                    SET balance = %s,
                        total_winnings = %s,
                        total_losses = %s,
                        games_played = %s,
                        last_activity = %s
                    WHERE username = %s
                    """,
                    (
                        account.balance,
                        account.total_winnings,
                        account.total_losses,
                        account.games_played,
                        account.last_activity,
                        account.username,
                    ),
                )
                self._append_history(cur, account)
                conn.commit()

    @staticmethod
    def _append_history(cur, account: Account) -> None:
        cur.execute(
            "SELECT COUNT(*) FROM game_results WHERE username = %s",
            (account.username,),
        )
        stored = cur.fetchone()[0]
        for result in account.history[stored:]:
            cur.execute(
                """
                INSERT INTO game_results (username, game, wagered, net_delta, timestamp)
                VALUES (%s, %s, %s, %s, %s)
                """,
                (
                    account.username,
                    result.game,
                    result.wagered,
                    result.net_delta,
                    result.timestamp,
                ),
            )
