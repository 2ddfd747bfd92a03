from __future__ import annotations

import threading
from typing import Dict

from application.blackjack import BlackjackEngine
from application.ledger import Ledger
from application.roulette import RouletteEngine
from application.slots import SlotEngine
from domain.models import Phase
from domain.rng import RandomSource


class CasinoTables:
    """
    Keeps one engine of each game per username.

    Interface adapters hold a single instance and look players' tables up
    here, so a blackjack hand or a roulette slip survives between commands.
    """

    def __init__(self, ledger: Ledger, rng: RandomSource) -> None:
        self._ledger = ledger
        self._rng = rng
        self._blackjack: Dict[str, BlackjackEngine] = {}
        self._roulette: Dict[str, RouletteEngine] = {}
        self._slots: Dict[str, SlotEngine] = {}
        self._guard = threading.Lock()

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    def blackjack(self, username: str) -> BlackjackEngine:
        with self._guard:
            engine = self._blackjack.get(username)
            if engine is None:
                engine = BlackjackEngine(self._ledger, username, self._rng)
                self._blackjack[username] = engine
            return engine

    def roulette(self, username: str) -> RouletteEngine:
        with self._guard:
            engine = self._roulette.get(username)
            if engine is None:
                engine = RouletteEngine(self._ledger, username, self._rng)
                self._roulette[username] = engine
            return engine

    def slots(self, username: str) -> SlotEngine:
        with self._guard:
            engine = self._slots.get(username)
            if engine is None:
                engine = SlotEngine(self._ledger, username, self._rng)
                self._slots[username] = engine
            return engine

    def forget(self, username: str) -> None:
        """Drop a player's idle tables (on logout). A live blackjack hand is kept."""

        with self._guard:
            engine = self._blackjack.get(username)
            if engine is not None and engine.phase is not Phase.PLAYING:
                del self._blackjack[username]
            self._roulette.pop(username, None)
            self._slots.pop(username, None)
