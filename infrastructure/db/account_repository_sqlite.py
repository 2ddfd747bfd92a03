from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import List, Optional

from domain.models import Account, GameResult
from domain.repositories import AccountRepository

_ACCOUNT_COLUMNS = (
    "username, balance, total_winnings, total_losses, games_played, last_activity"
)


def _parse_time(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _format_time(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class SqliteAccountRepository(AccountRepository):
    """
    SQLite-backed implementation of `AccountRepository`.

    Owns the `accounts` table and the append-only `game_results` table
    holding each account's history. Amounts use NUMERIC affinity so whole
    coins come back as ints and fractional slot payouts as floats.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._ensure_tables()

    def _get_connection(self) -> sqlite3.Connection:
        return sqlite3.connect(self._db_path)

    def _ensure_tables(self) -> None:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS accounts (
                    username TEXT PRIMARY KEY,
                    balance NUMERIC NOT NULL DEFAULT 0,
                    total_winnings NUMERIC NOT NULL DEFAULT 0,
                    total_losses NUMERIC NOT NULL DEFAULT 0,
                    games_played INTEGER NOT NULL DEFAULT 0,
                    last_activity TEXT
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS game_results (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    username TEXT NOT NULL REFERENCES accounts (username),
                    game TEXT NOT NULL,
                    wagered NUMERIC NOT NULL,
                    net_delta NUMERIC NOT NULL,
                    timestamp TEXT NOT NULL
                )
                """
            )
            conn.commit()

    def _load_history(self, cur: sqlite3.Cursor, username: str) -> List[GameResult]:
        cur.execute(
            """
            SELECT game, wagered, net_delta, timestamp
            FROM game_results
            WHERE username = ?
            ORDER BY id
            """,
            (username,),
        )
        return [
            GameResult(
                game=row[0],
                wagered=row[1],
                net_delta=row[2],
                timestamp=datetime.fromisoformat(row[3]),
            )
            for row in cur.fetchall()
        ]

    @staticmethod
    def _to_domain(row: tuple, history: List[GameResult]) -> Account:
        return Account(
            username=row[0],
            balance=row[1],
            total_winnings=row[2],
            total_losses=row[3],
            games_played=int(row[4]),
            last_activity=_parse_time(row[5]),
            history=history,
        )

    def get_by_username(self, username: str) -> Optional[Account]:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE username = ?",
                (username,),
            )
            row = cur.fetchone()
            if not row:
                return None
            return self._to_domain(row, self._load_history(cur, username))

    def get_all_accounts(self) -> List[Account]:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(f"SELECT {_ACCOUNT_COLUMNS} FROM accounts ORDER BY username")
            rows = cur.fetchall()
            return [self._to_domain(row, self._load_history(cur, row[0])) for row in rows]

    def add_account(self, account: Account) -> None:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                f"""
                INSERT INTO accounts ({_ACCOUNT_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    account.username,
                    account.balance,
                    account.total_winnings,
                    account.total_losses,
                    account.games_played,
                    _format_time(account.last_activity),
                ),
            )
            self._append_history(cur, account)
            conn.commit()

    def save_account(self, account: Account) -> None:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                UPDATE accounts
                SET balance = ?,
                    total_winnings = ?,
                    total_losses = ?,
                    games_played = ?,
                    last_activity = ?
                WHERE username = ?
                """,
                (
                    account.balance,
                    account.total_winnings,
                    account.total_losses,
                    account.games_played,
                    _format_time(account.last_activity),
                    account.username,
                ),
            )
            self._append_history(cur, account)
            conn.commit()

    @staticmethod
    def _append_history(cur: sqlite3.Cursor, account: Account) -> None:
        cur.execute(
            "SELECT COUNT(*) FROM game_results WHERE username = ?",
            (account.username,),
        )
        stored = cur.fetchone()[0]
        cur.executemany(
            """
            INSERT INTO game_results (username, game, wagered, net_delta, timestamp)
            VALUES (?, ?, ?, ?, ?)
            """,
            [
                (
                    account.username,
                    result.game,
                    result.wagered,
                    result.net_delta,
                    result.timestamp.isoformat(),
                )
                for result in account.history[stored:]
            ],
        )
