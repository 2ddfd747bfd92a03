from __future__ import annotations


class CasinoError(Exception):
    """Base class for every error raised by the wagering engine."""


class InsufficientFundsError(CasinoError):
    def __init__(self, required, available) -> None:
        super().__init__(
            f"Insufficient funds: {required} coins needed, {available} available."
        )
        self.required = required
        self.available = available


class InvalidStateError(CasinoError):
    """An action was invoked outside the phase in which it is legal."""


class NoBetsError(CasinoError):
    def __init__(self) -> None:
        super().__init__("Please place at least one bet before spinning.")


class EmptyDeckError(CasinoError):
    def __init__(self) -> None:
        super().__init__("Cannot draw from an empty deck.")


class InvalidBetError(CasinoError, ValueError):
    """Malformed wager: non-positive amount, unknown bet type, bad number."""


class AccountNotFoundError(CasinoError, LookupError):
    def __init__(self, username: str) -> None:
        super().__init__(f"No account named {username!r}.")
        self.username = username
