from __future__ import annotations

import logging
from typing import Optional

import telebot
from telebot.types import InlineKeyboardButton, InlineKeyboardMarkup

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
from domain.models import Phase, RoundState
from domain.repositories import AccountRepository, SessionRepository
from interfaces.parsing import parse_amount, parse_bet_args, parse_sort_key
from interfaces.telegram.callback_data import (
    SORT_KEYS,
    encode_blackjack_action,
    encode_leaderboard_sort,
    parse_blackjack_action,
    parse_leaderboard_sort,
)
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
    "/login <username>             - log in (new names start with fresh coins)\n"
    "/logout                       - log out\n"
    "/balance                      - show your balance\n"
    "/stats                        - your statistics and recent games\n"
    "/leaderboard [balance|winrate|winnings]\n"
    "/blackjack <bet>              - deal a blackjack hand\n"
    "/bet <type> [number] <amount> - roulette: add a bet\n"
    "/bets, /clearbets             - roulette: show or clear your bets\n"
    "/spin                         - roulette: spin the wheel\n"
    f"/slots [bet]                  - slot machine (default bet {DEFAULT_SLOT_BET})\n"
)


def _build_external_context(from_user) -> ExternalContext:
    """Extract a channel-agnostic context object from a Telegram user."""

    name = " ".join(part for part in (from_user.first_name, from_user.last_name) if part)
    return ExternalContext(
        provider="telegram",
        provider_user_id=str(from_user.id),
        display_name=name,
    )


def _blackjack_markup(state: RoundState) -> Optional[InlineKeyboardMarkup]:
    markup = InlineKeyboardMarkup(row_width=2)
    if state.phase is Phase.PLAYING:
        markup.add(
            InlineKeyboardButton("Hit", callback_data=encode_blackjack_action("hit")),
            InlineKeyboardButton("Stand", callback_data=encode_blackjack_action("stand")),
        )
        return markup
    if state.phase is Phase.FINISHED:
        markup.add(
            InlineKeyboardButton("New hand", callback_data=encode_blackjack_action("new"))
        )
        return markup
    return None


def _leaderboard_markup() -> InlineKeyboardMarkup:
    labels = {"balance": "Balance", "win_rate": "Win rate", "total_winnings": "Winnings"}
    markup = InlineKeyboardMarkup(row_width=3)
    markup.add(
        *[
            InlineKeyboardButton(labels[key], callback_data=encode_leaderboard_sort(key))
            for key in SORT_KEYS
        ]
    )
    return markup


def create_telegram_bot(
    bot_token: str,
    account_repo: AccountRepository,
    session_repo: SessionRepository,
    tables: CasinoTables,
    starting_balance: int,
) -> telebot.TeleBot:
    """
    Configure and return a TeleBot instance wired to the application layer.

    This module contains only Telegram-specific concerns: parsing Telegram
    messages/callbacks and mapping them to/from the game engines.
    """

    bot = telebot.TeleBot(bot_token)

    def _player(message) -> Optional[str]:
        username = current_username(_build_external_context(message.from_user), session_repo)
        if username is None:
            bot.send_message(message.chat.id, "Please /login <username> first.")
        return username

    def _reply_errors(handler):
        """Report engine and input errors back to the chat."""

        def wrapper(message):
            try:
                handler(message)
            except (CasinoError, ValueError) as exc:
                bot.send_message(message.chat.id, str(exc))

        wrapper.__name__ = handler.__name__
        return wrapper

    @bot.message_handler(commands=["start", "help"])
    def handle_help(message):
        bot.send_message(
            message.chat.id,
            "Welcome to the casino!\n" + HELP_TEXT,
        )

    @bot.message_handler(commands=["login"])
    def handle_login(message):
        parts = message.text.split(maxsplit=1)
        username = parts[1] if len(parts) > 1 else ""
        result = login(
            _build_external_context(message.from_user),
            username,
            account_repo,
            session_repo,
            starting_balance=starting_balance,
        )
        if not result.success:
            bot.send_message(message.chat.id, result.error_message)
            return
        logger.info(
            "Telegram user %s logged in as %s", message.from_user.id, result.account.username
        )
        bot.send_message(
            message.chat.id,
            f"Welcome {result.account.username}! "
            f"You have {coins(result.account.balance)} coins.",
        )

    @bot.message_handler(commands=["logout"])
    def handle_logout(message):
        external_ctx = _build_external_context(message.from_user)
        username = current_username(external_ctx, session_repo)
        logout(external_ctx, session_repo)
        if username is not None:
            tables.forget(username)
        bot.send_message(message.chat.id, "Logged out.")

    @bot.message_handler(commands=["balance"])
    @_reply_errors
    def handle_balance(message):
        username = _player(message)
        if username is None:
            return
        account = tables.ledger.get_account(username)
        bot.send_message(message.chat.id, f"{username}: {coins(account.balance)} coins")

    @bot.message_handler(commands=["stats"])
    def handle_stats(message):
        username = _player(message)
        if username is None:
            return
        stats = get_player_stats(username, account_repo)
        if stats is None:
            bot.send_message(message.chat.id, "No such account.")
            return
        bot.send_message(message.chat.id, render_stats(stats))

    @bot.message_handler(commands=["leaderboard"])
    @_reply_errors
    def handle_leaderboard(message):
        parts = message.text.split()
        sort_by = parse_sort_key(parts[1] if len(parts) > 1 else None)
        entries = get_leaderboard(account_repo, sort_by=sort_by)
        bot.send_message(
            message.chat.id,
            render_leaderboard(entries),
            reply_markup=_leaderboard_markup(),
        )

    @bot.message_handler(commands=["blackjack"])
    @_reply_errors
    def handle_blackjack(message):
        username = _player(message)
        if username is None:
            return
        parts = message.text.split()
        if len(parts) < 2:
            bot.send_message(message.chat.id, "Please enter your bet.")
            return
        bet = parse_amount(parts[1])

        table = tables.blackjack(username)
        if table.phase is Phase.FINISHED:
            table.new_round()
        state = table.start_round(bet)
        bot.send_message(
            message.chat.id,
            render_round(state),
            reply_markup=_blackjack_markup(state),
        )

    @bot.message_handler(commands=["bet"])
    @_reply_errors
    def handle_bet(message):
        username = _player(message)
        if username is None:
            return
        bet_type, value, amount = parse_bet_args(message.text.split()[1:])
        if amount not in CHIP_VALUES:
            bot.send_message(
                message.chat.id,
                f"Chips come in {', '.join(map(str, CHIP_VALUES))}.",
            )
            return
        bets = tables.roulette(username).place_bet(bet_type, value, amount)
        bot.send_message(message.chat.id, render_bets(bets))

    @bot.message_handler(commands=["bets"])
    def handle_bets(message):
        username = _player(message)
        if username is None:
            return
        bot.send_message(message.chat.id, render_bets(tables.roulette(username).bets))

    @bot.message_handler(commands=["clearbets"])
    @_reply_errors
    def handle_clear_bets(message):
        username = _player(message)
        if username is None:
            return
        tables.roulette(username).clear_bets()
        bot.send_message(message.chat.id, "Bets cleared.")

    @bot.message_handler(commands=["spin"])
    @_reply_errors
    def handle_spin(message):
        username = _player(message)
        if username is None:
            return
        spin = tables.roulette(username).spin()
        bot.send_message(message.chat.id, render_roulette(spin))

    @bot.message_handler(commands=["slots"])
    @_reply_errors
    def handle_slots(message):
        username = _player(message)
        if username is None:
            return
        parts = message.text.split()
        bet = parse_amount(parts[1]) if len(parts) > 1 else DEFAULT_SLOT_BET
        spin = tables.slots(username).spin(bet)
        bot.send_message(message.chat.id, render_slots(spin))

    @bot.callback_query_handler(func=lambda call: call.data.startswith("bj:"))
    def handle_blackjack_action(call):
        """
        Handle the Hit / Stand / New hand buttons under a blackjack hand.
        """

        try:
            action = parse_blackjack_action(call.data)
        except ValueError:
            logger.warning("Ignoring malformed callback data %r", call.data)
            bot.answer_callback_query(call.id, "Invalid action.")
            return

        username = current_username(_build_external_context(call.from_user), session_repo)
        if username is None:
            bot.answer_callback_query(call.id, "Please /login first.")
            return

        table = tables.blackjack(username)
        try:
            if action == "hit":
                state = table.hit()
            elif action == "stand":
                state = table.stand()
            else:
                state = table.new_round()
        except CasinoError as exc:
            bot.answer_callback_query(call.id, str(exc))
            return

        bot.answer_callback_query(call.id)
        bot.edit_message_text(
            render_round(state),
            call.message.chat.id,
            call.message.id,
            reply_markup=_blackjack_markup(state),
        )

    @bot.callback_query_handler(func=lambda call: call.data.startswith("lb:"))
    def handle_leaderboard_sort(call):
        try:
            sort_by = parse_leaderboard_sort(call.data)
        except ValueError:
            bot.answer_callback_query(call.id, "Invalid selection.")
            return

        entries = get_leaderboard(account_repo, sort_by=sort_by)
        bot.answer_callback_query(call.id)
        bot.edit_message_text(
            render_leaderboard(entries),
            call.message.chat.id,
            call.message.id,
            reply_markup=_leaderboard_markup(),
        )

    return bot
