from __future__ import annotations

import logging
from typing import Optional

import discord
from discord.ext import commands

from application.services import (
    ExternalContext,
    current_username,
    get_leaderboard,
    get_player_stats,
    login,
    logout,
)
from application.tables import CasinoTables
from domain.errors import CasinoError
from domain.models import Phase
from domain.repositories import AccountRepository, SessionRepository
from interfaces.parsing import parse_bet_args, parse_sort_key
from interfaces.text import (
    CHIP_VALUES,
    DEFAULT_SLOT_BET,
    coins,
    render_bets,
    render_leaderboard,
    render_roulette,
    render_round,
    render_slots,
    render_stats,
)

logger = logging.getLogger(__name__)

HELP_TEXT = (
    "!login <username>              - log in (new names start with fresh coins)\n"
    "!logout                        - log out\n"
    "!balance                       - show your balance\n"
    "!stats                         - your statistics and recent games\n"
    "!leaderboard [balance|winrate|winnings]\n"
    "!deal <bet>                    - blackjack: deal a hand\n"
    "!hit / !stand / !newhand       - blackjack actions\n"
    "!bet <type> [number] <amount>  - roulette: add a bet (red, black, odd, even, low, high, number)\n"
    "!bets / !clearbets             - roulette: show or clear your bets\n"
    "!spin                          - roulette: spin the wheel\n"
    f"!slots [bet]                   - slot machine (default bet {DEFAULT_SLOT_BET})\n"
)


def _build_external_context(user: discord.abc.User) -> ExternalContext:
    """Create an `ExternalContext` from a Discord user."""

    return ExternalContext(
        provider="discord",
        provider_user_id=str(user.id),
        display_name=user.display_name or user.name,
    )


def create_discord_bot(
    account_repo: AccountRepository,
    session_repo: SessionRepository,
    tables: CasinoTables,
    starting_balance: int,
) -> commands.Bot:
    """
    Configure and return a Discord bot exposing the three games, the
    player's statistics and the leaderboard.
    """

    intents = discord.Intents.default()
    intents.message_content = True

    # Disable the default help command so we can provide our own `!help`.
    bot = commands.Bot(command_prefix="!", intents=intents, help_command=None)

    async def _require_player(ctx: commands.Context) -> Optional[str]:
        username = current_username(_build_external_context(ctx.author), session_repo)
        if username is None:
            await ctx.send("Please !login <username> first.")
        return username

    @bot.event
    async def on_ready():
        logger.info("Discord bot logged in as %s (id=%s)", bot.user, bot.user.id)

    @bot.event
    async def on_command_error(ctx: commands.Context, error: commands.CommandError):
        original = getattr(error, "original", error)
        if isinstance(original, (CasinoError, ValueError)):
            await ctx.send(str(original))
        elif isinstance(error, (commands.MissingRequiredArgument, commands.BadArgument)):
            await ctx.send(f"{error}\nType !help to see available commands.")
        elif isinstance(error, commands.CommandNotFound):
            return
        else:
            logger.error("Command %s failed", ctx.command, exc_info=original)
            await ctx.send("Something went wrong.")

    @bot.command(name="help")
    async def help_cmd(ctx: commands.Context):
        await ctx.send(HELP_TEXT)

    @bot.command(name="login")
    async def login_cmd(ctx: commands.Context, username: str = ""):
        result = login(
            _build_external_context(ctx.author),
            username,
            account_repo,
            session_repo,
            starting_balance=starting_balance,
        )
        if not result.success:
            await ctx.send(result.error_message or "Login failed.")
            return
        await ctx.send(
            f"Welcome {result.account.username}! "
            f"You have {coins(result.account.balance)} coins."
        )

    @bot.command(name="logout")
    async def logout_cmd(ctx: commands.Context):
        external_ctx = _build_external_context(ctx.author)
        username = current_username(external_ctx, session_repo)
        logout(external_ctx, session_repo)
        if username is not None:
            tables.forget(username)
        await ctx.send("Logged out.")

    @bot.command(name="balance")
    async def balance_cmd(ctx: commands.Context):
        username = await _require_player(ctx)
        if username is None:
            return
        account = tables.ledger.get_account(username)
        await ctx.send(f"{username}: {coins(account.balance)} coins")

    @bot.command(name="stats")
    async def stats_cmd(ctx: commands.Context):
        username = await _require_player(ctx)
        if username is None:
            return
        stats = get_player_stats(username, account_repo)
        if stats is None:
            await ctx.send("No such account.")
            return
        await ctx.send(render_stats(stats))

    @bot.command(name="leaderboard")
    async def leaderboard_cmd(ctx: commands.Context, sort_by: Optional[str] = None):
        entries = get_leaderboard(account_repo, sort_by=parse_sort_key(sort_by))
        await ctx.send(render_leaderboard(entries))

    @bot.command(name="deal")
    async def deal_cmd(ctx: commands.Context, bet: int):
        username = await _require_player(ctx)
        if username is None:
            return
        table = tables.blackjack(username)
        if table.phase is Phase.FINISHED:
            table.new_round()
        await ctx.send(render_round(table.start_round(bet)))

    @bot.command(name="hit")
    async def hit_cmd(ctx: commands.Context):
        username = await _require_player(ctx)
        if username is None:
            return
        await ctx.send(render_round(tables.blackjack(username).hit()))

    @bot.command(name="stand")
    async def stand_cmd(ctx: commands.Context):
        username = await _require_player(ctx)
        if username is None:
            return
        await ctx.send(render_round(tables.blackjack(username).stand()))

    @bot.command(name="newhand")
    async def newhand_cmd(ctx: commands.Context):
        username = await _require_player(ctx)
        if username is None:
            return
        await ctx.send(render_round(tables.blackjack(username).new_round()))

    @bot.command(name="bet")
    async def bet_cmd(ctx: commands.Context, *args: str):
        username = await _require_player(ctx)
        if username is None:
            return
        bet_type, value, amount = parse_bet_args(args)
        if amount not in CHIP_VALUES:
            await ctx.send(f"Chips come in {', '.join(map(str, CHIP_VALUES))}.")
            return
        bets = tables.roulette(username).place_bet(bet_type, value, amount)
        await ctx.send(render_bets(bets))

    @bot.command(name="bets")
    async def bets_cmd(ctx: commands.Context):
        username = await _require_player(ctx)
        if username is None:
            return
        await ctx.send(render_bets(tables.roulette(username).bets))

    @bot.command(name="clearbets")
    async def clearbets_cmd(ctx: commands.Context):
        username = await _require_player(ctx)
        if username is None:
            return
        tables.roulette(username).clear_bets()
        await ctx.send("Bets cleared.")

    @bot.command(name="spin")
    async def spin_cmd(ctx: commands.Context):
        username = await _require_player(ctx)
        if username is None:
            return
        await ctx.send(render_roulette(tables.roulette(username).spin()))

    @bot.command(name="slots")
    async def slots_cmd(ctx: commands.Context, bet: int = DEFAULT_SLOT_BET):
        username = await _require_player(ctx)
        if username is None:
            return
        await ctx.send(render_slots(tables.slots(username).spin(bet)))

    return bot
