from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from domain import ledger as ledger_rules
from domain.errors import AccountNotFoundError, InsufficientFundsError
from domain.models import Account, Coins
from domain.repositories import AccountRepository

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Ledger:
    """
    The only component allowed to change an account's balance.

    Each call loads the account, computes the new state and saves it while
    holding that account's lock, so a balance check and the debit that
    follows it cannot interleave with another request for the same player.
    Different accounts never wait on each other.
    """

    def __init__(
        self,
        account_repo: AccountRepository,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._account_repo = account_repo
        self._clock = clock or _utc_now
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, username: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(username)
            if lock is None:
                lock = self._locks[username] = threading.Lock()
            return lock

    def _load(self, username: str) -> Account:
        account = self._account_repo.get_by_username(username)
        if account is None:
            raise AccountNotFoundError(username)
        return account

    def get_account(self, username: str) -> Account:
        return self._load(username)

    def charge(self, username: str, stake: Coins) -> Account:
        """Take `stake` from the balance, failing if it is not covered."""

        with self._lock_for(username):
            account = self._load(username)
            try:
                updated = ledger_rules.charge(account, stake)
            except InsufficientFundsError:
                logger.info(
                    "Rejected stake of %s for %s (balance %s)",
                    stake,
                    username,
                    account.balance,
                )
                raise
            self._account_repo.save_account(updated)
            return updated

    def settle(
        self,
        username: str,
        net_delta: Coins,
        game_tag: str,
        charged: Coins = 0,
    ) -> Account:
        """
        Record a finished round.

        `charged` is the stake previously taken with `charge` for this
        round; the balance ends at its pre-round value plus `net_delta`.
        """

        with self._lock_for(username):
            account = self._load(username)
            updated = ledger_rules.apply(
                account,
                net_delta,
                game_tag,
                charged=charged,
                now=self._clock(),
            )
            self._account_repo.save_account(updated)

        logger.info(
            "Settled %s round for %s: net %+g, balance %g",
            game_tag,
            username,
            net_delta,
            updated.balance,
        )
        if updated.balance < 0:
            logger.warning("Account %s settled to a negative balance", username)
        return updated
