from __future__ import annotations

from application.ledger import Ledger
from domain.ledger import validate_amount
from domain.models import SlotSpin
from domain.rng import RandomSource, randbelow
from domain.slots import SYMBOLS, evaluate

GAME_TAG = "slots"


class SlotEngine:
    """Three independent reels over the eight-symbol strip."""

    def __init__(self, ledger: Ledger, username: str, rng: RandomSource) -> None:
        self._ledger = ledger
        self._username = username
        self._rng = rng

    def spin(self, bet: int) -> SlotSpin:
        validate_amount(bet)
        self._ledger.charge(self._username, bet)

        reels = tuple(SYMBOLS[randbelow(self._rng, len(SYMBOLS))] for _ in range(3))
        win = evaluate(reels, bet)
        net_delta = win - bet
        self._ledger.settle(self._username, net_delta, GAME_TAG, charged=bet)

        return SlotSpin(reels=reels, bet=bet, win=win, net_delta=net_delta)
