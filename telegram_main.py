from bootstrap import build_repositories, build_tables, configure_logging
from interfaces.telegram.handlers import create_telegram_bot
from settings import Settings


def main() -> None:
    settings = Settings.from_env()
    if not settings.telegram_token:
        raise RuntimeError("TELEGRAM_TOKEN environment variable is not set.")

    configure_logging(settings)
    account_repo, session_repo = build_repositories(settings)
    tables = build_tables(settings, account_repo)

    bot = create_telegram_bot(
        settings.telegram_token,
        account_repo,
        session_repo,
        tables,
        starting_balance=settings.starting_balance,
    )
    bot.infinity_polling()


if __name__ == "__main__":
    main()
