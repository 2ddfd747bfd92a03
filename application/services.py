from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import List, Optional

from domain.models import Account, Coins, GameResult
from domain.repositories import AccountRepository, SessionRepository

logger = logging.getLogger(__name__)

DEFAULT_STARTING_BALANCE = 1000
RECENT_GAMES = 10
LEADERBOARD_KEYS = ("balance", "win_rate", "total_winnings")


@dataclass
class ExternalContext:
    """
    Information about the caller from a particular channel (Telegram, Discord).

    The application layer never depends on concrete SDK types; it only sees
    this small context object.
    """

    provider: str
    provider_user_id: str
    display_name: str = ""


@dataclass
class OperationResult:
    """Generic result type for simple operations."""

    success: bool
    error_message: Optional[str] = None


@dataclass
class LoginResult:
    success: bool
    error_message: Optional[str] = None
    account: Optional[Account] = None
    created: bool = False


@dataclass
class PlayerStats:
    username: str
    balance: Coins
    games_played: int
    total_winnings: Coins
    total_losses: Coins
    win_rate: float
    recent_games: List[GameResult] = field(default_factory=list)


@dataclass
class LeaderboardEntry:
    username: str
    balance: Coins
    total_winnings: Coins
    games_played: int
    win_rate: float


def win_rate(account: Account) -> float:
    """Share of coins won against coins won plus lost, as a percentage."""

    if account.total_winnings <= 0:
        return 0.0
    rate = account.total_winnings / (account.total_winnings + account.total_losses)
    return round(rate * 100, 1)


def login(
    external_ctx: ExternalContext,
    username: str,
    account_repo: AccountRepository,
    session_repo: SessionRepository,
    starting_balance: int = DEFAULT_STARTING_BALANCE,
    now: Optional[datetime] = None,
) -> LoginResult:
    """
    Log the caller in as `username`.

    - An unknown username gets a fresh account with `starting_balance`.
    - A known one has its activity time refreshed.
    - The caller's external identity is bound to the username so later
      commands on the same channel act on this account.
    """

    username = (username or "").strip()
    if not username:
        return LoginResult(success=False, error_message="Please enter a username.")

    now = now or datetime.now(timezone.utc)
    account = account_repo.get_by_username(username)
    created = account is None

    if created:
        account = Account(
            username=username,
            balance=starting_balance,
            last_activity=now,
        )
        account_repo.add_account(account)
        logger.info(
            "Created account %s with %s coins for %s user %s",
            username,
            starting_balance,
            external_ctx.provider,
            external_ctx.display_name or external_ctx.provider_user_id,
        )
    else:
        account = replace(account, last_activity=now)
        account_repo.save_account(account)

    session_repo.set_session(
        external_ctx.provider,
        external_ctx.provider_user_id,
        username,
    )
    return LoginResult(success=True, account=account, created=created)


def logout(
    external_ctx: ExternalContext,
    session_repo: SessionRepository,
) -> OperationResult:
    """Forget the caller's binding. The account itself is kept."""

    session_repo.clear_session(external_ctx.provider, external_ctx.provider_user_id)
    return OperationResult(success=True)


def current_username(
    external_ctx: ExternalContext,
    session_repo: SessionRepository,
) -> Optional[str]:
    return session_repo.find_username(
        external_ctx.provider,
        external_ctx.provider_user_id,
    )


def get_player_stats(
    username: str,
    account_repo: AccountRepository,
    recent: int = RECENT_GAMES,
) -> Optional[PlayerStats]:
    account = account_repo.get_by_username(username)
    if account is None:
        return None

    recent_games = list(reversed(account.history[-recent:])) if recent > 0 else []
    return PlayerStats(
        username=account.username,
        balance=account.balance,
        games_played=account.games_played,
        total_winnings=account.total_winnings,
        total_losses=account.total_losses,
        win_rate=win_rate(account),
        recent_games=recent_games,
    )


def get_leaderboard(
    account_repo: AccountRepository,
    sort_by: str = "balance",
    descending: bool = True,
) -> List[LeaderboardEntry]:
    if sort_by not in LEADERBOARD_KEYS:
        raise ValueError(
            f"Cannot sort leaderboard by {sort_by!r}; "
            f"choose one of {', '.join(LEADERBOARD_KEYS)}."
        )

    entries = [
        LeaderboardEntry(
            username=account.username,
            balance=account.balance,
            total_winnings=account.total_winnings,
            games_played=account.games_played,
            win_rate=win_rate(account),
        )
        for account in account_repo.get_all_accounts()
    ]
    entries.sort(key=lambda entry: getattr(entry, sort_by), reverse=descending)
    return entries
