from __future__ import annotations

from typing import List, Optional, Protocol

from .models import Account


class AccountRepository(Protocol):
    """
    Abstraction over account persistence.

    Implementations are responsible for:
    - Mapping between stored rows and the `Account` domain model,
      including its game history.
    - Hiding any SQL / driver details from the application layer.
    """

    def get_by_username(self, username: str) -> Optional[Account]:
        """Return the account with the given username, or None if not found."""

        ...

    def get_all_accounts(self) -> List[Account]:
        """Return every known account (used by the leaderboard)."""

        ...

    def add_account(self, account: Account) -> None:
        """Persist a new account."""

        ...

    def save_account(self, account: Account) -> None:
        """
        Store the account's balance, counters and activity time.

        History is append-only: entries already stored are left as they
        are and only the new tail of `account.history` is written.
        """

        ...


class SessionRepository(Protocol):
    """
    Maps external identities (Telegram/Discord) to the username they are
    logged in as.

    The application layer works with usernames only and leaves
    provider-specific identifiers to this abstraction.
    """

    def find_username(
        self,
        provider: str,
        provider_user_id: str,
    ) -> Optional[str]:
        ...

    def set_session(
        self,
        provider: str,
        provider_user_id: str,
        username: str,
    ) -> None:
        """Bind an external identity to a username, replacing any old binding."""

        ...

    def clear_session(
        self,
        provider: str,
        provider_user_id: str,
    ) -> None:
        """Remove any binding for the given external identity (logout)."""

        ...
