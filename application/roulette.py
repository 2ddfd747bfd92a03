from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import List, Optional, Sequence, Union

from application.ledger import Ledger
from domain.errors import InsufficientFundsError, InvalidStateError, NoBetsError
from domain.models import Bet, BetType, RouletteSpin
from domain.rng import RandomSource, randbelow
from domain.roulette import POCKETS, make_bet, total_winnings

logger = logging.getLogger(__name__)

GAME_TAG = "roulette"


class WheelState(str, Enum):
    OPEN = "open"
    SPINNING = "spinning"


class RouletteEngine:
    """
    Bet slip plus single-spin resolver for one player.

    Each bet is checked against the balance when it is placed, but nothing
    is reserved until the spin, where the whole slip must be covered.
    """

    def __init__(self, ledger: Ledger, username: str, rng: RandomSource) -> None:
        self._ledger = ledger
        self._username = username
        self._rng = rng
        self._bets: List[Bet] = []
        self._state = WheelState.OPEN
        self._lock = threading.Lock()

    @property
    def state(self) -> WheelState:
        return self._state

    @property
    def bets(self) -> List[Bet]:
        with self._lock:
            return list(self._bets)

    def _require_open(self, action: str) -> None:
        if self._state is not WheelState.OPEN:
            raise InvalidStateError(f"Cannot {action} while the wheel is spinning.")

    def place_bet(
        self,
        bet_type: Union[BetType, str],
        value: Union[int, str, None],
        amount: int,
    ) -> List[Bet]:
        with self._lock:
            self._require_open("place a bet")
            bet = make_bet(bet_type, value, amount)

            balance = self._ledger.get_account(self._username).balance
            if bet.amount > balance:
                raise InsufficientFundsError(bet.amount, balance)

            self._bets.append(bet)
            return list(self._bets)

    def clear_bets(self) -> List[Bet]:
        with self._lock:
            self._require_open("clear bets")
            self._bets = []
            return []

    def spin(self, bets: Optional[Sequence[Bet]] = None) -> RouletteSpin:
        """
        Spin with `bets`, or with the placed bets when none are given.

        The slip is cleared once the spin resolves, win or lose. The engine
        lock is held from reading the slip to clearing it, so two spins
        arriving together resolve one after the other.
        """

        with self._lock:
            self._require_open("spin")
            slip = tuple(self._bets if bets is None else bets)
            if not slip:
                raise NoBetsError()

            staked = sum(bet.amount for bet in slip)
            self._ledger.charge(self._username, staked)

            self._state = WheelState.SPINNING
            try:
                outcome = randbelow(self._rng, POCKETS)
                total_win = total_winnings(slip, outcome)
                net_delta = total_win - staked
                self._ledger.settle(self._username, net_delta, GAME_TAG, charged=staked)
            finally:
                self._bets = []
                self._state = WheelState.OPEN

        logger.debug("Roulette landed on %s for %s", outcome, self._username)
        return RouletteSpin(
            outcome=outcome,
            bets=slip,
            total_staked=staked,
            total_win=total_win,
            net_delta=net_delta,
        )
