import unittest
from datetime import datetime, timezone

from application.ledger import Ledger
from application.services import (
    ExternalContext,
    current_username,
    get_leaderboard,
    get_player_stats,
    login,
    logout,
    win_rate,
)
from application.tables import CasinoTables
from domain.models import Account, Phase
from fakes import (
    InMemoryAccountRepository,
    InMemorySessionRepository,
    ScriptedRandomSource,
    make_account,
    pocket,
)

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class ApplicationServicesTests(unittest.TestCase):
    def setUp(self) -> None:
        self.account_repo = InMemoryAccountRepository()
        self.session_repo = InMemorySessionRepository()
        self.ctx = ExternalContext(
            provider="telegram",
            provider_user_id="12345",
            display_name="John Doe",
        )

    def test_login_creates_account_with_starting_balance(self):
        result = login(self.ctx, "  john ", self.account_repo, self.session_repo, now=NOW)
        self.assertTrue(result.success)
        self.assertTrue(result.created)

        account = self.account_repo.get_by_username("john")
        self.assertIsNotNone(account)
        self.assertEqual(account.balance, 1000)
        self.assertEqual(account.last_activity, NOW)
        self.assertEqual(current_username(self.ctx, self.session_repo), "john")

    def test_login_logs_new_account_with_display_name(self):
        with self.assertLogs("application.services", level="INFO") as logs:
            login(self.ctx, "john", self.account_repo, self.session_repo, now=NOW)

        self.assertIn("for telegram user John Doe", logs.output[0])

    def test_login_existing_account_keeps_balance(self):
        self.account_repo.add_account(make_account("john", 250))
        result = login(
            self.ctx, "john", self.account_repo, self.session_repo,
            starting_balance=5000, now=NOW,
        )
        self.assertTrue(result.success)
        self.assertFalse(result.created)
        account = self.account_repo.get_by_username("john")
        self.assertEqual(account.balance, 250)
        self.assertEqual(account.last_activity, NOW)

    def test_login_requires_username(self):
        result = login(self.ctx, "   ", self.account_repo, self.session_repo)
        self.assertFalse(result.success)
        self.assertEqual(result.error_message, "Please enter a username.")
        self.assertEqual(self.account_repo.accounts, {})

    def test_logout_keeps_account(self):
        login(self.ctx, "john", self.account_repo, self.session_repo)
        result = logout(self.ctx, self.session_repo)
        self.assertTrue(result.success)
        self.assertIsNone(current_username(self.ctx, self.session_repo))
        self.assertIsNotNone(self.account_repo.get_by_username("john"))

    def test_stats_show_ten_most_recent_games_newest_first(self):
        self.account_repo.add_account(make_account("john", 1000))
        ledger = Ledger(self.account_repo)
        for delta in range(1, 13):
            ledger.settle("john", delta, "slots")

        stats = get_player_stats("john", self.account_repo)
        self.assertEqual(stats.games_played, 12)
        self.assertEqual(len(stats.recent_games), 10)
        self.assertEqual(stats.recent_games[0].net_delta, 12)
        self.assertEqual(stats.recent_games[-1].net_delta, 3)
        self.assertEqual(stats.win_rate, 100.0)

    def test_stats_for_unknown_user(self):
        self.assertIsNone(get_player_stats("ghost", self.account_repo))

    def test_win_rate(self):
        self.assertEqual(win_rate(Account("a", total_winnings=0, total_losses=50)), 0.0)
        self.assertEqual(win_rate(Account("b", total_winnings=30, total_losses=70)), 30.0)
        self.assertEqual(win_rate(Account("c", total_winnings=1, total_losses=2)), 33.3)

    def test_leaderboard_sorting(self):
        self.account_repo.add_account(Account("ann", balance=500, total_winnings=10, total_losses=90))
        self.account_repo.add_account(Account("ben", balance=900, total_winnings=5, total_losses=0))
        self.account_repo.add_account(Account("cat", balance=100, total_winnings=400, total_losses=400))

        by_balance = [e.username for e in get_leaderboard(self.account_repo)]
        self.assertEqual(by_balance, ["ben", "ann", "cat"])

        by_rate = [e.username for e in get_leaderboard(self.account_repo, sort_by="win_rate")]
        self.assertEqual(by_rate, ["ben", "cat", "ann"])

        by_winnings = get_leaderboard(
            self.account_repo, sort_by="total_winnings", descending=False
        )
        self.assertEqual([e.username for e in by_winnings], ["ben", "ann", "cat"])

    def test_leaderboard_rejects_unknown_key(self):
        with self.assertRaises(ValueError):
            get_leaderboard(self.account_repo, sort_by="luck")


class CasinoTablesTests(unittest.TestCase):
    def setUp(self) -> None:
        self.repo = InMemoryAccountRepository()
        self.repo.add_account(make_account("alice", 100))
        self.tables = CasinoTables(Ledger(self.repo), ScriptedRandomSource([pocket(3)]))

    def test_same_engine_per_player(self):
        self.assertIs(self.tables.roulette("alice"), self.tables.roulette("alice"))
        self.assertIsNot(self.tables.roulette("alice"), self.tables.roulette("bob"))
        self.assertIs(self.tables.slots("alice"), self.tables.slots("alice"))

    def test_forget_drops_idle_tables(self):
        wheel = self.tables.roulette("alice")
        wheel.place_bet("odd", None, 5)
        table = self.tables.blackjack("alice")
        self.assertEqual(table.phase, Phase.BETTING)

        self.tables.forget("alice")
        self.assertIsNot(self.tables.roulette("alice"), wheel)
        self.assertIsNot(self.tables.blackjack("alice"), table)


if __name__ == "__main__":
    unittest.main()
