"""Configuration loaded from the environment (and a `.env` file, if present)."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


@dataclass
class Settings:
    discord_token: Optional[str] = None
    telegram_token: Optional[str] = None
    db_path: str = "casino.db"
    postgres_dsn: Optional[str] = None
    starting_balance: int = 1000
    rng_seed: Optional[int] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables.

        Expected variables:
            DISCORD_TOKEN: Discord bot token
            TELEGRAM_TOKEN: Telegram bot token
            DB_PATH: SQLite database file (default casino.db)
            POSTGRES_DSN: optional libpq connection string; when set,
                accounts and sessions live in Postgres instead of SQLite
            STARTING_BALANCE: coins granted to a new account (default 1000)
            RNG_SEED: optional integer for a replayable random sequence
            LOG_LEVEL: logging level name (default INFO)
        """

        load_dotenv()

        seed = os.environ.get("RNG_SEED")
        return cls(
            discord_token=os.environ.get("DISCORD_TOKEN"),
            telegram_token=os.environ.get("TELEGRAM_TOKEN"),
            db_path=os.environ.get("DB_PATH", "casino.db"),
            postgres_dsn=os.environ.get("POSTGRES_DSN") or None,
            starting_balance=int(os.environ.get("STARTING_BALANCE", "1000")),
            rng_seed=int(seed) if seed else None,
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        )
