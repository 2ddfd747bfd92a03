from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple, Union

# Slot payouts scale with bet / 10 and are carried unrounded, so a balance
# can hold a fractional amount.
Coins = Union[int, float]

SUITS = ("♠", "♥", "♦", "♣")
RANKS = ("A", "2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K")
FACE_RANKS = ("J", "Q", "K")


@dataclass(frozen=True)
class Card:
    """A single playing card. Aces count 11 here; hand evaluation softens them."""

    suit: str
    rank: str

    @property
    def value(self) -> int:
        if self.rank == "A":
            return 11
        if self.rank in FACE_RANKS:
            return 10
        return int(self.rank)

    @property
    def is_ace(self) -> bool:
        return self.rank == "A"

    def __str__(self) -> str:
        return f"{self.rank}{self.suit}"


@dataclass(frozen=True)
class GameResult:
    """One settled round as recorded in an account's history."""

    game: str
    wagered: Coins
    net_delta: Coins
    timestamp: datetime


@dataclass
class Account:
    """
    A player's coin account.

    The engine never writes these fields directly; every change goes
    through the ledger so that balance, counters and history stay in step.
    """

    username: str
    balance: Coins = 0
    total_winnings: Coins = 0
    total_losses: Coins = 0
    games_played: int = 0
    last_activity: Optional[datetime] = None
    history: List[GameResult] = field(default_factory=list)


class BetType(str, Enum):
    NUMBER = "number"
    RED = "red"
    BLACK = "black"
    ODD = "odd"
    EVEN = "even"
    LOW = "low"
    HIGH = "high"


@dataclass(frozen=True)
class Bet:
    """A roulette bet. `value` is the number for NUMBER bets, a label otherwise."""

    type: BetType
    value: Union[int, str]
    amount: int
    payout_multiplier: int


class Phase(str, Enum):
    BETTING = "betting"
    PLAYING = "playing"
    FINISHED = "finished"


class Outcome(str, Enum):
    BLACKJACK = "blackjack"
    WIN = "win"
    PUSH = "push"
    LOSE = "lose"
    BUST = "bust"


@dataclass(frozen=True)
class RoundState:
    """
    Snapshot of a blackjack round as the presentation layer may see it.

    While the round is in play only the dealer's first card is exposed;
    `hidden_cards` tells the renderer how many face-down cards to draw.
    """

    phase: Phase
    bet: int
    player_hand: Tuple[Card, ...]
    dealer_hand: Tuple[Card, ...]
    hidden_cards: int
    player_value: Optional[int]
    dealer_value: Optional[int]
    outcome: Optional[Outcome] = None
    credited: Coins = 0
    net_delta: Coins = 0


@dataclass(frozen=True)
class RouletteSpin:
    """Result of one roulette spin."""

    outcome: int
    bets: Tuple[Bet, ...]
    total_staked: int
    total_win: Coins
    net_delta: Coins


@dataclass(frozen=True)
class SlotSpin:
    """Result of one slot machine spin."""

    reels: Tuple[str, str, str]
    bet: int
    win: Coins
    net_delta: Coins
