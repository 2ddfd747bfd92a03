from __future__ import annotations

from typing import Iterable, List, Sequence

from application.services import LeaderboardEntry, PlayerStats
from domain.models import (
    Bet,
    Card,
    Coins,
    Outcome,
    Phase,
    RouletteSpin,
    RoundState,
    SlotSpin,
)
from domain.roulette import pocket_color

HIDDEN_CARD = "🂠"
CHIP_VALUES = (5, 10, 25, 50, 100)
DEFAULT_SLOT_BET = 10

_OUTCOME_TEXT = {
    Outcome.BLACKJACK: "Blackjack!",
    Outcome.WIN: "You win!",
    Outcome.PUSH: "Push! Your bet is returned.",
    Outcome.LOSE: "Dealer wins.",
    Outcome.BUST: "Bust!",
}


def coins(amount: Coins) -> str:
    return f"{amount:g}"


def render_cards(cards: Sequence[Card], hidden: int = 0) -> str:
    shown = [str(card) for card in cards] + [HIDDEN_CARD] * hidden
    return " ".join(shown) if shown else "-"


def render_round(state: RoundState) -> str:
    if state.phase is Phase.BETTING:
        return "Place your bet to deal a new hand."

    dealer_value = "?" if state.dealer_value is None else str(state.dealer_value)
    lines = [
        f"Bet: {state.bet}",
        f"Dealer: {render_cards(state.dealer_hand, state.hidden_cards)} ({dealer_value})",
        f"You:    {render_cards(state.player_hand)} ({state.player_value})",
    ]
    if state.phase is Phase.FINISHED:
        if state.outcome is None:
            lines.append("Round aborted.")
        else:
            lines.append(_OUTCOME_TEXT[state.outcome])
            if state.credited:
                lines.append(f"Paid {coins(state.credited)} coins (net {state.net_delta:+g}).")
    return "\n".join(lines)


def render_bet(bet: Bet) -> str:
    return f"{bet.amount} on {bet.value} (pays {bet.payout_multiplier}x)"


def render_bets(bets: Iterable[Bet]) -> str:
    bets = list(bets)
    if not bets:
        return "No bets placed."
    lines = [render_bet(bet) for bet in bets]
    lines.append(f"Total: {sum(bet.amount for bet in bets)} coins")
    return "\n".join(lines)


def render_roulette(spin: RouletteSpin) -> str:
    header = f"The ball lands on {spin.outcome} ({pocket_color(spin.outcome)})."
    if spin.total_win > 0:
        return f"{header}\nWinner! You won {coins(spin.total_win)} coins."
    return f"{header}\nBetter luck next time!"


def render_slots(spin: SlotSpin) -> str:
    reels = " | ".join(spin.reels)
    if spin.win > 0:
        return f"[ {reels} ]\nYou won {coins(spin.win)} coins!"
    return f"[ {reels} ]\nNo win this time."


def render_stats(stats: PlayerStats) -> str:
    lines = [
        f"{stats.username}",
        f"Balance: {coins(stats.balance)}",
        f"Games played: {stats.games_played}",
        f"Total winnings: {coins(stats.total_winnings)}",
        f"Total losses: {coins(stats.total_losses)}",
        f"Win rate: {stats.win_rate:.1f}%",
    ]
    if stats.recent_games:
        lines.append("Recent games:")
        lines.extend(
            f"  {result.timestamp:%Y-%m-%d} {result.game}: {result.net_delta:+g}"
            for result in stats.recent_games
        )
    return "\n".join(lines)


def render_leaderboard(entries: Sequence[LeaderboardEntry]) -> str:
    if not entries:
        return "No players yet."
    lines: List[str] = []
    for rank, entry in enumerate(entries, start=1):
        lines.append(
            f"{rank}. {entry.username}: {coins(entry.balance)} coins, "
            f"won {coins(entry.total_winnings)}, "
            f"{entry.games_played} games, {entry.win_rate:.1f}%"
        )
    return "\n".join(lines)
