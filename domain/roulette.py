from __future__ import annotations

from typing import Dict, Iterable, Union

from .errors import InvalidBetError
from .ledger import validate_amount
from .models import Bet, BetType, Coins

POCKETS = 37  # 0..36, single zero
RED_NUMBERS = frozenset(
    {1, 3, 5, 7, 9, 12, 14, 16, 18, 19, 21, 23, 25, 27, 30, 32, 34, 36}
)

PAYOUTS: Dict[BetType, int] = {
    BetType.NUMBER: 35,
    BetType.RED: 2,
    BetType.BLACK: 2,
    BetType.ODD: 2,
    BetType.EVEN: 2,
    BetType.LOW: 2,
    BetType.HIGH: 2,
}

LABELS: Dict[BetType, str] = {
    BetType.RED: "red",
    BetType.BLACK: "black",
    BetType.ODD: "odd",
    BetType.EVEN: "even",
    BetType.LOW: "1-18",
    BetType.HIGH: "19-36",
}


def make_bet(
    bet_type: Union[BetType, str],
    value: Union[int, str, None],
    amount: int,
) -> Bet:
    """
    Build a bet with the payout multiplier of its type.

    `value` is only read for NUMBER bets; every other type gets its fixed
    label.
    """

    try:
        bet_type = BetType(bet_type)
    except ValueError:
        raise InvalidBetError(f"Unknown bet type: {bet_type}") from None

    amount = validate_amount(amount)

    if bet_type is BetType.NUMBER:
        try:
            number = int(value)
        except (TypeError, ValueError):
            raise InvalidBetError(f"Not a roulette number: {value!r}") from None
        if not 0 <= number < POCKETS:
            raise InvalidBetError("Roulette numbers run from 0 to 36.")
        return Bet(bet_type, number, amount, PAYOUTS[bet_type])

    return Bet(bet_type, LABELS[bet_type], amount, PAYOUTS[bet_type])


def bet_wins(bet: Bet, outcome: int) -> bool:
    """Zero only ever pays an exact bet on zero."""

    if bet.type is BetType.NUMBER:
        return bet.value == outcome
    if outcome == 0:
        return False
    if bet.type is BetType.RED:
        return outcome in RED_NUMBERS
    if bet.type is BetType.BLACK:
        return outcome not in RED_NUMBERS
    if bet.type is BetType.ODD:
        return outcome % 2 == 1
    if bet.type is BetType.EVEN:
        return outcome % 2 == 0
    if bet.type is BetType.LOW:
        return 1 <= outcome <= 18
    if bet.type is BetType.HIGH:
        return 19 <= outcome <= 36
    return False


def total_winnings(bets: Iterable[Bet], outcome: int) -> Coins:
    return sum(bet.amount * bet.payout_multiplier for bet in bets if bet_wins(bet, outcome))


def pocket_color(number: int) -> str:
    if number == 0:
        return "green"
    return "red" if number in RED_NUMBERS else "black"
