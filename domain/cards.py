from __future__ import annotations

from typing import Iterable, List, Sequence

from .errors import EmptyDeckError
from .models import RANKS, SUITS, Card
from .rng import RandomSource, randbelow


def shuffle(cards: List[Card], rng: RandomSource) -> None:
    """Fisher-Yates shuffle in place."""

    for i in range(len(cards) - 1, 0, -1):
        j = randbelow(rng, i + 1)
        cards[i], cards[j] = cards[j], cards[i]


class Deck:
    """
    An ordered pile of cards consumed from the end.

    A deck lives for one round only; a new one is built and shuffled
    for every deal. A deck built directly from a list keeps that order
    and draws the last card first.
    """

    def __init__(self, cards: Iterable[Card]) -> None:
        self._cards = list(cards)

    @classmethod
    def create(cls, rng: RandomSource) -> "Deck":
        cards = [Card(suit=suit, rank=rank) for suit in SUITS for rank in RANKS]
        shuffle(cards, rng)
        return cls(cards)

    def draw(self) -> Card:
        if not self._cards:
            raise EmptyDeckError()
        return self._cards.pop()

    def __len__(self) -> int:
        return len(self._cards)


def hand_value(hand: Sequence[Card]) -> int:
    """
    Best blackjack total for `hand`.

    Every ace starts at 11 and is knocked down to 1, one at a time, for as
    long as the total is over 21.
    """

    total = 0
    soft_aces = 0
    for card in hand:
        total += card.value
        if card.is_ace:
            soft_aces += 1

    while total > 21 and soft_aces > 0:
        total -= 10
        soft_aces -= 1

    return total
