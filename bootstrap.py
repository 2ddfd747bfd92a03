from __future__ import annotations

import logging
from typing import Tuple

from application.ledger import Ledger
from application.tables import CasinoTables
from domain.repositories import AccountRepository, SessionRepository
from infrastructure.random_source import StdlibRandomSource
from settings import Settings

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_repositories(settings: Settings) -> Tuple[AccountRepository, SessionRepository]:
    if settings.postgres_dsn:
        from infrastructure.db.account_repository_postgres import PostgresAccountRepository
        from infrastructure.db.session_repository_postgres import PostgresSessionRepository

        db_params = {"dsn": settings.postgres_dsn}
        logger.info("Using Postgres account storage")
        return PostgresAccountRepository(db_params), PostgresSessionRepository(db_params)

    from infrastructure.db.account_repository_sqlite import SqliteAccountRepository
    from infrastructure.db.session_repository_sqlite import SqliteSessionRepository

    logger.info("Using SQLite account storage at %s", settings.db_path)
    return SqliteAccountRepository(settings.db_path), SqliteSessionRepository(settings.db_path)


def build_tables(settings: Settings, account_repo: AccountRepository) -> CasinoTables:
    if settings.rng_seed is not None:
        logger.warning("RNG_SEED is set; game outcomes are replayable")
    rng = StdlibRandomSource(settings.rng_seed)
    return CasinoTables(Ledger(account_repo), rng)
