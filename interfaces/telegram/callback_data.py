from __future__ import annotations

BLACKJACK_ACTIONS = ("hit", "stand", "new")
SORT_KEYS = ("balance", "win_rate", "total_winnings")


def encode_blackjack_action(action: str) -> str:
    """
    Encode a blackjack button press.

    Format: bj:{action}
    """

    if action not in BLACKJACK_ACTIONS:
        raise ValueError(f"Unknown blackjack action: {action}")
    return f"bj:{action}"


def parse_blackjack_action(data: str) -> str:
    parts = data.split(":")
    if len(parts) != 2 or parts[0] != "bj" or parts[1] not in BLACKJACK_ACTIONS:
        raise ValueError(f"Invalid blackjack callback data: {data}")
    return parts[1]


def encode_leaderboard_sort(sort_by: str) -> str:
    """
    Encode a leaderboard re-sort button.

    Format: lb:{sort_key}
    """

    if sort_by not in SORT_KEYS:
        raise ValueError(f"Unknown leaderboard sort key: {sort_by}")
    return f"lb:{sort_by}"


def parse_leaderboard_sort(data: str) -> str:
    parts = data.split(":")
    if len(parts) != 2 or parts[0] != "lb" or parts[1] not in SORT_KEYS:
        raise ValueError(f"Invalid leaderboard callback data: {data}")
    return parts[1]
