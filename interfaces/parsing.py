from __future__ import annotations

from typing import Optional, Sequence, Tuple, Union

from domain.models import BetType

_SORT_ALIASES = {
    "balance": "balance",
    "winrate": "win_rate",
    "win_rate": "win_rate",
    "winnings": "total_winnings",
    "total_winnings": "total_winnings",
}


def parse_amount(text: str) -> int:
    try:
        return int(text)
    except ValueError:
        raise ValueError("Amount must be a number.") from None


def parse_bet_args(args: Sequence[str]) -> Tuple[BetType, Union[int, str, None], int]:
    """
    Parse the words after a bet command.

    Accepted forms:
      <type> <amount>            red 10, odd 25, low 5
      number <n> <amount>        number 17 10
      <n> <amount>               17 10
    """

    if len(args) < 2:
        raise ValueError("Usage: bet <red|black|odd|even|low|high> <amount> or bet <number> <amount>")

    kind = args[0].lower()
    if kind == "number":
        if len(args) < 3:
            raise ValueError("Usage: bet number <0-36> <amount>")
        return BetType.NUMBER, args[1], parse_amount(args[2])

    if kind.isdigit():
        return BetType.NUMBER, int(kind), parse_amount(args[1])

    try:
        bet_type = BetType(kind)
    except ValueError:
        raise ValueError(f"Unknown bet type: {kind}") from None
    return bet_type, None, parse_amount(args[1])


def parse_sort_key(text: Optional[str]) -> str:
    if not text:
        return "balance"
    try:
        return _SORT_ALIASES[text.lower()]
    except KeyError:
        raise ValueError("Sort by balance, winrate or winnings.") from None
