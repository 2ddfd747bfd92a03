from bootstrap import build_repositories, build_tables, configure_logging
from interfaces.discord.handlers import create_discord_bot
from settings import Settings


def main() -> None:
    settings = Settings.from_env()
    if not settings.discord_token:
        raise RuntimeError("DISCORD_TOKEN environment variable is not set.")

    configure_logging(settings)
    account_repo, session_repo = build_repositories(settings)
    tables = build_tables(settings, account_repo)

    bot = create_discord_bot(
        account_repo,
        session_repo,
        tables,
        starting_balance=settings.starting_balance,
    )
    # discord.py installs its own log handler unless told otherwise.
    bot.run(settings.discord_token, log_handler=None)


if __name__ == "__main__":
    main()
