import unittest

from application.ledger import Ledger
from application.slots import SlotEngine
from domain.errors import InsufficientFundsError
from domain.slots import PAYTABLE, SYMBOLS, evaluate
from fakes import InMemoryAccountRepository, ScriptedRandomSource, make_account, reel


class EvaluateTests(unittest.TestCase):
    def test_jackpot_scales_with_bet(self):
        self.assertEqual(evaluate(("💰", "💰", "💰"), 20), 200)
        self.assertEqual(evaluate(("🍒", "🍒", "🍒"), 10), 5)

    def test_fractional_payout_is_not_rounded(self):
        self.assertEqual(evaluate(("🍒", "🍒", "🍒"), 15), 7.5)
        self.assertEqual(evaluate(("🍒", "🍒", "🔔"), 5), 2.5)

    def test_pair_in_any_position(self):
        self.assertEqual(evaluate(("🍒", "🍒", "🔔"), 20), 10)
        self.assertEqual(evaluate(("🔔", "🍒", "🍒"), 20), 10)
        self.assertEqual(evaluate(("🍒", "🔔", "🍒"), 20), 10)

    def test_no_match(self):
        self.assertEqual(evaluate(("🍒", "🍋", "🔔"), 20), 0)

    def test_every_symbol_has_a_triple(self):
        self.assertEqual(len(SYMBOLS), 8)
        self.assertEqual(set(PAYTABLE), {(s, s, s) for s in SYMBOLS})

    def test_whole_amounts_are_ints(self):
        self.assertIsInstance(evaluate(("⭐", "⭐", "⭐"), 10), int)


class SlotEngineTests(unittest.TestCase):
    def setUp(self) -> None:
        self.repo = InMemoryAccountRepository()
        self.repo.add_account(make_account("alice", 100))
        self.ledger = Ledger(self.repo)

    def engine(self, *symbols: str) -> SlotEngine:
        rng = ScriptedRandomSource([reel(s) for s in symbols])
        return SlotEngine(self.ledger, "alice", rng)

    def test_jackpot_spin(self):
        spin = self.engine("💰", "💰", "💰").spin(20)

        self.assertEqual(spin.reels, ("💰", "💰", "💰"))
        self.assertEqual(spin.win, 200)
        self.assertEqual(spin.net_delta, 180)
        account = self.repo.get_by_username("alice")
        self.assertEqual(account.balance, 280)
        self.assertEqual(account.total_winnings, 180)
        self.assertEqual(account.history[-1].game, "slots")

    def test_pair_returns_half_the_bet(self):
        spin = self.engine("🍒", "🍒", "🔔").spin(20)
        self.assertEqual(spin.win, 10)
        self.assertEqual(spin.net_delta, -10)
        self.assertEqual(self.repo.get_by_username("alice").balance, 90)

    def test_losing_spin(self):
        spin = self.engine("🍒", "🍋", "🔔").spin(20)
        self.assertEqual(spin.net_delta, -20)
        self.assertEqual(self.repo.get_by_username("alice").total_losses, 20)

    def test_bet_above_balance_is_rejected_before_spinning(self):
        rng = ScriptedRandomSource([])
        with self.assertRaises(InsufficientFundsError):
            SlotEngine(self.ledger, "alice", rng).spin(150)
        self.assertEqual(rng.calls, 0)
        self.assertEqual(self.repo.get_by_username("alice").balance, 100)


if __name__ == "__main__":
    unittest.main()
