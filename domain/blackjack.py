from __future__ import annotations

from typing import List

from .cards import Deck, hand_value
from .models import Card, Coins, Outcome

BLACKJACK = 21
DEALER_STANDS_ON = 17


def play_dealer(hand: List[Card], deck: Deck) -> List[Card]:
    """
    Draw for the dealer until the hand is worth at least 17.

    Soft 17 stands like any other 17.
    """

    while hand_value(hand) < DEALER_STANDS_ON:
        hand.append(deck.draw())
    return hand


def compare_hands(player_value: int, dealer_value: int) -> Outcome:
    if dealer_value > BLACKJACK or player_value > dealer_value:
        return Outcome.WIN
    if player_value < dealer_value:
        return Outcome.LOSE
    return Outcome.PUSH


def credited_amount(outcome: Outcome, bet: int) -> Coins:
    """
    Coins returned to the player at settlement.

    The bet was already taken at the deal, so a loss credits nothing and
    a push gives the bet back.
    """

    if outcome is Outcome.BLACKJACK:
        return bet * 5 // 2
    if outcome is Outcome.WIN:
        return bet * 2
    if outcome is Outcome.PUSH:
        return bet
    return 0
