from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional

from .errors import InsufficientFundsError, InvalidBetError
from .models import Account, Coins, GameResult


def _now() -> datetime:
    return datetime.now(timezone.utc)


def validate_amount(amount) -> int:
    # bool is an int subclass but never a wager.
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise InvalidBetError("Bet amount must be a positive whole number.")
    return amount


def charge(account: Account, stake: int) -> Account:
    """
    Take a stake out of the balance before the outcome is known.

    Counters and history are left alone; the round is only recorded when
    it is settled with `apply`.
    """

    validate_amount(stake)
    if stake > account.balance:
        raise InsufficientFundsError(stake, account.balance)
    return replace(account, balance=account.balance - stake, history=list(account.history))


def apply(
    account: Account,
    net_delta: Coins,
    game_tag: str,
    charged: Coins = 0,
    now: Optional[datetime] = None,
) -> Account:
    """
    Settle one round and return the updated copy of `account`.

    `charged` is whatever `charge` already removed for this round; it is
    put back before `net_delta` lands, so the balance ends at the
    pre-round balance plus `net_delta`. A negative result is not rejected.
    """

    now = now or _now()

    total_winnings = account.total_winnings
    total_losses = account.total_losses
    if net_delta > 0:
        total_winnings += net_delta
    elif net_delta < 0:
        total_losses += -net_delta

    entry = GameResult(
        game=game_tag,
        wagered=abs(net_delta),
        net_delta=net_delta,
        timestamp=now,
    )

    return replace(
        account,
        balance=account.balance + charged + net_delta,
        total_winnings=total_winnings,
        total_losses=total_losses,
        games_played=account.games_played + 1,
        last_activity=now,
        history=[*account.history, entry],
    )
