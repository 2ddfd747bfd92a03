from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional

from application.ledger import Ledger
from domain.blackjack import BLACKJACK, compare_hands, credited_amount, play_dealer
from domain.cards import Deck, hand_value
from domain.errors import EmptyDeckError, InvalidStateError
from domain.ledger import validate_amount
from domain.models import Card, Coins, Outcome, Phase, RoundState
from domain.rng import RandomSource

logger = logging.getLogger(__name__)

GAME_TAG = "blackjack"


class BlackjackEngine:
    """
    One player's blackjack table.

    Phases run BETTING -> PLAYING -> FINISHED, and `new_round` brings a
    finished table back to BETTING. The bet is charged when the cards are
    dealt; a started round always ends in a settlement unless the deck runs
    dry, in which case the round is aborted and the stake is not returned.

    Every action holds the table lock from the phase check to the phase
    change, so a repeated button press cannot settle the same round twice.
    """

    def __init__(
        self,
        ledger: Ledger,
        username: str,
        rng: RandomSource,
        deck_factory: Callable[[RandomSource], Deck] = Deck.create,
    ) -> None:
        self._ledger = ledger
        self._username = username
        self._rng = rng
        self._deck_factory = deck_factory
        self._lock = threading.Lock()
        self._reset()

    def _reset(self) -> None:
        self._phase = Phase.BETTING
        self._deck: Optional[Deck] = None
        self._player: List[Card] = []
        self._dealer: List[Card] = []
        self._bet = 0
        self._outcome: Optional[Outcome] = None
        self._credited: Coins = 0
        self._net_delta: Coins = 0

    @property
    def phase(self) -> Phase:
        return self._phase

    def _require(self, phase: Phase, action: str) -> None:
        if self._phase is not phase:
            raise InvalidStateError(
                f"Cannot {action} while the round is {self._phase.value}."
            )

    def start_round(self, bet: int) -> RoundState:
        with self._lock:
            self._require(Phase.BETTING, "deal")
            validate_amount(bet)
            self._ledger.charge(self._username, bet)

            self._bet = bet
            self._deck = self._deck_factory(self._rng)
            self._phase = Phase.PLAYING
            try:
                for _ in range(2):
                    self._player.append(self._deck.draw())
                    self._dealer.append(self._deck.draw())
            except EmptyDeckError:
                self._abort()
                raise

            if hand_value(self._player) == BLACKJACK:
                if hand_value(self._dealer) == BLACKJACK:
                    self._finish(Outcome.PUSH)
                else:
                    self._finish(Outcome.BLACKJACK)

            return self._snapshot()

    def hit(self) -> RoundState:
        with self._lock:
            self._require(Phase.PLAYING, "hit")
            try:
                self._player.append(self._deck.draw())
            except EmptyDeckError:
                self._abort()
                raise

            if hand_value(self._player) > BLACKJACK:
                self._finish(Outcome.BUST)
            return self._snapshot()

    def stand(self) -> RoundState:
        with self._lock:
            self._require(Phase.PLAYING, "stand")
            try:
                play_dealer(self._dealer, self._deck)
            except EmptyDeckError:
                self._abort()
                raise

            self._finish(compare_hands(hand_value(self._player), hand_value(self._dealer)))
            return self._snapshot()

    def new_round(self) -> RoundState:
        with self._lock:
            if self._phase is Phase.PLAYING:
                raise InvalidStateError("Finish the current round before starting a new one.")
            self._reset()
            return self._snapshot()

    def _finish(self, outcome: Outcome) -> None:
        credited = credited_amount(outcome, self._bet)
        net_delta = credited - self._bet
        self._ledger.settle(self._username, net_delta, GAME_TAG, charged=self._bet)

        self._outcome = outcome
        self._credited = credited
        self._net_delta = net_delta
        self._phase = Phase.FINISHED
        self._deck = None

    def _abort(self) -> None:
        logger.exception(
            "Deck exhausted during %s's blackjack round; aborting without settlement",
            self._username,
        )
        self._phase = Phase.FINISHED
        self._deck = None

    def state(self) -> RoundState:
        with self._lock:
            return self._snapshot()

    def _snapshot(self) -> RoundState:
        hide_hole_card = self._phase is Phase.PLAYING
        if hide_hole_card:
            dealer_hand = tuple(self._dealer[:1])
            hidden_cards = len(self._dealer) - len(dealer_hand)
            dealer_value = None
        else:
            dealer_hand = tuple(self._dealer)
            hidden_cards = 0
            dealer_value = hand_value(self._dealer) if self._dealer else None

        return RoundState(
            phase=self._phase,
            bet=self._bet,
            player_hand=tuple(self._player),
            dealer_hand=dealer_hand,
            hidden_cards=hidden_cards,
            player_value=hand_value(self._player) if self._player else None,
            dealer_value=dealer_value,
            outcome=self._outcome,
            credited=self._credited,
            net_delta=self._net_delta,
        )
