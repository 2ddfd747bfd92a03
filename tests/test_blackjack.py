import threading
import unittest

from application.blackjack import BlackjackEngine
from application.ledger import Ledger
from domain.cards import hand_value
from domain.errors import EmptyDeckError, InsufficientFundsError, InvalidBetError, InvalidStateError
from domain.models import Outcome, Phase
from fakes import InMemoryAccountRepository, SlowAccountRepository, make_account, stacked_deck
from infrastructure.random_source import StdlibRandomSource


class BlackjackEngineTests(unittest.TestCase):
    def setUp(self) -> None:
        self.repo = InMemoryAccountRepository()
        self.repo.add_account(make_account("alice", 1000))
        self.ledger = Ledger(self.repo)

    def engine(self, *ranks: str) -> BlackjackEngine:
        # Cards are dealt player, dealer, player, dealer, then hits.
        return BlackjackEngine(
            self.ledger,
            "alice",
            StdlibRandomSource(seed=1),
            deck_factory=stacked_deck(*ranks),
        )

    def account(self):
        return self.repo.get_by_username("alice")

    def test_natural_blackjack_pays_three_to_two(self):
        table = self.engine("A", "9", "K", "7")
        state = table.start_round(20)

        self.assertEqual(state.phase, Phase.FINISHED)
        self.assertEqual(state.outcome, Outcome.BLACKJACK)
        self.assertEqual(state.credited, 50)
        self.assertEqual(state.net_delta, 30)
        account = self.account()
        self.assertEqual(account.balance, 1030)
        self.assertEqual(account.games_played, 1)
        self.assertEqual(account.history[-1].net_delta, 30)

    def test_blackjack_payout_is_floored(self):
        state = self.engine("A", "9", "K", "7").start_round(15)
        self.assertEqual(state.credited, 37)
        self.assertEqual(self.account().balance, 1022)

    def test_both_naturals_push(self):
        state = self.engine("A", "A", "K", "Q").start_round(20)

        self.assertEqual(state.outcome, Outcome.PUSH)
        account = self.account()
        self.assertEqual(account.balance, 1000)
        self.assertEqual(account.games_played, 1)
        self.assertEqual(account.total_winnings, 0)
        self.assertEqual(account.total_losses, 0)

    def test_bet_is_charged_at_the_deal_and_hole_card_hidden(self):
        state = self.engine("10", "9", "7", "8").start_round(20)

        self.assertEqual(state.phase, Phase.PLAYING)
        self.assertEqual(self.account().balance, 980)
        self.assertEqual(self.account().games_played, 0)
        self.assertEqual(len(state.dealer_hand), 1)
        self.assertEqual(state.hidden_cards, 1)
        self.assertIsNone(state.dealer_value)
        self.assertEqual(state.player_value, 17)

    def test_hit_to_bust_settles_as_loss(self):
        table = self.engine("10", "9", "6", "8", "K")
        table.start_round(20)
        state = table.hit()

        self.assertEqual(state.outcome, Outcome.BUST)
        self.assertEqual(state.phase, Phase.FINISHED)
        self.assertEqual(state.hidden_cards, 0)
        account = self.account()
        self.assertEqual(account.balance, 980)
        self.assertEqual(account.total_losses, 20)
        self.assertEqual(account.history[-1].net_delta, -20)

    def test_hit_below_21_keeps_playing(self):
        table = self.engine("5", "9", "6", "8", "4")
        table.start_round(20)
        state = table.hit()

        self.assertEqual(state.phase, Phase.PLAYING)
        self.assertEqual(state.player_value, 15)
        self.assertEqual(len(state.player_hand), 3)

    def test_dealer_draws_until_seventeen_then_stops(self):
        table = self.engine("10", "6", "9", "5", "3", "4", "K")
        table.start_round(20)
        state = table.stand()

        self.assertEqual(len(state.dealer_hand), 4)
        self.assertEqual(state.dealer_value, 18)
        self.assertEqual(state.outcome, Outcome.WIN)
        self.assertEqual(state.credited, 40)
        self.assertEqual(self.account().balance, 1020)

    def test_dealer_bust_is_a_win(self):
        table = self.engine("10", "10", "8", "6", "K")
        table.start_round(20)
        state = table.stand()

        self.assertEqual(state.dealer_value, 26)
        self.assertEqual(state.outcome, Outcome.WIN)

    def test_lower_hand_loses(self):
        table = self.engine("10", "10", "7", "9")
        table.start_round(20)
        state = table.stand()

        self.assertEqual(state.outcome, Outcome.LOSE)
        self.assertEqual(state.credited, 0)
        self.assertEqual(self.account().balance, 980)

    def test_equal_hands_push(self):
        table = self.engine("10", "10", "8", "8")
        table.start_round(20)
        state = table.stand()

        self.assertEqual(state.outcome, Outcome.PUSH)
        self.assertEqual(self.account().balance, 1000)

    def test_dealer_stands_on_soft_seventeen(self):
        table = self.engine("10", "A", "9", "6", "5")
        table.start_round(20)
        state = table.stand()

        self.assertEqual(len(state.dealer_hand), 2)
        self.assertEqual(state.dealer_value, 17)
        self.assertEqual(state.outcome, Outcome.WIN)

    def test_insufficient_funds_leaves_everything_untouched(self):
        table = self.engine("10", "9", "7", "8")
        with self.assertRaises(InsufficientFundsError):
            table.start_round(2000)

        self.assertEqual(table.phase, Phase.BETTING)
        self.assertEqual(self.account().balance, 1000)
        self.assertEqual(self.repo.saves, 0)

    def test_rejects_non_positive_bet(self):
        table = self.engine("10", "9", "7", "8")
        with self.assertRaises(InvalidBetError):
            table.start_round(0)
        self.assertEqual(table.phase, Phase.BETTING)

    def test_actions_outside_playing_phase_fail(self):
        table = self.engine("A", "9", "K", "7")
        with self.assertRaises(InvalidStateError):
            table.hit()
        with self.assertRaises(InvalidStateError):
            table.stand()

        table.start_round(20)  # natural, round is over
        with self.assertRaises(InvalidStateError):
            table.hit()
        self.assertEqual(self.account().games_played, 1)

    def test_cannot_deal_twice_or_abandon_a_live_round(self):
        table = self.engine("10", "9", "7", "8")
        table.start_round(20)
        with self.assertRaises(InvalidStateError):
            table.start_round(20)
        with self.assertRaises(InvalidStateError):
            table.new_round()
        self.assertEqual(self.account().balance, 980)

    def test_new_round_resets_to_betting(self):
        table = self.engine("A", "9", "K", "7")
        table.start_round(20)
        state = table.new_round()

        self.assertEqual(state.phase, Phase.BETTING)
        self.assertEqual(state.player_hand, ())
        self.assertEqual(state.dealer_hand, ())
        self.assertIsNone(state.outcome)

    def test_empty_deck_aborts_round_without_settlement(self):
        table = self.engine("10", "9", "7")
        with self.assertLogs("application.blackjack", level="ERROR"):
            with self.assertRaises(EmptyDeckError):
                table.start_round(20)

        self.assertEqual(table.phase, Phase.FINISHED)
        self.assertIsNone(table.state().outcome)
        account = self.account()
        self.assertEqual(account.balance, 980)
        self.assertEqual(account.games_played, 0)
        self.assertEqual(account.history, [])

    def test_simultaneous_stands_settle_the_round_once(self):
        repo = SlowAccountRepository()
        repo.add_account(make_account("alice", 1000))
        table = BlackjackEngine(
            Ledger(repo),
            "alice",
            StdlibRandomSource(seed=1),
            deck_factory=stacked_deck("10", "10", "9", "8"),
        )
        table.start_round(100)

        errors = []

        def press_stand():
            try:
                table.stand()
            except InvalidStateError as exc:
                errors.append(exc)

        threads = [threading.Thread(target=press_stand) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(errors), 1)
        self.assertEqual(table.state().outcome, Outcome.WIN)
        account = repo.get_by_username("alice")
        self.assertEqual(account.balance, 1100)
        self.assertEqual(account.games_played, 1)
        self.assertEqual(len(account.history), 1)


class DealerPolicyTests(unittest.TestCase):
    def test_dealer_stops_at_first_total_of_seventeen_or_more(self):
        repo = InMemoryAccountRepository()
        repo.add_account(make_account("bob", 100_000))
        table = BlackjackEngine(Ledger(repo), "bob", StdlibRandomSource(seed=2024))

        for _ in range(200):
            state = table.start_round(10)
            if state.phase is Phase.PLAYING:
                state = table.stand()
                dealer = list(state.dealer_hand)
                self.assertGreaterEqual(hand_value(dealer), 17)
                if len(dealer) > 2:
                    self.assertLess(hand_value(dealer[:-1]), 17)
            table.new_round()

        self.assertEqual(repo.get_by_username("bob").games_played, 200)


if __name__ == "__main__":
    unittest.main()
