from __future__ import annotations

from typing import Dict, Sequence, Tuple

from .models import Coins

SYMBOLS: Tuple[str, ...] = ("🍒", "🍋", "🍊", "🍇", "⭐", "💎", "🔔", "💰")

# Paid per 10 coins staked.
PAYTABLE: Dict[Tuple[str, str, str], int] = {
    ("💰", "💰", "💰"): 100,
    ("💎", "💎", "💎"): 75,
    ("⭐", "⭐", "⭐"): 50,
    ("🔔", "🔔", "🔔"): 30,
    ("🍇", "🍇", "🍇"): 20,
    ("🍊", "🍊", "🍊"): 15,
    ("🍋", "🍋", "🍋"): 10,
    ("🍒", "🍒", "🍒"): 5,
}
PAYTABLE_UNIT = 10
PAIR_MULTIPLIER = 0.5


def exact(amount: Coins) -> Coins:
    """Return whole-coin floats as ints; fractional amounts pass through."""

    if isinstance(amount, float) and amount.is_integer():
        return int(amount)
    return amount


def evaluate(reels: Sequence[str], bet: int) -> Coins:
    """
    Winnings for one spin.

    A paytable triple is checked before the pair rule so that three of a
    kind is never also paid as a pair.
    """

    first, second, third = reels
    payout = PAYTABLE.get((first, second, third))
    if payout is not None:
        return exact(payout * bet / PAYTABLE_UNIT)

    if first == second or second == third or first == third:
        return exact(bet * PAIR_MULTIPLIER)

    return 0
