"""Exception hierarchy raised by the adapter."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .exchanges.models import CancelAllResult


class ExchangeError(Exception):
    """Base class for all adapter errors."""


class ArgumentsRequired(ExchangeError, ValueError):
    """A required argument (symbol, id, since, limit) was not supplied."""


class NotSupported(ExchangeError):
    """A side, type, limit, timeframe or API class is not recognized."""


class AuthenticationError(ExchangeError):
    """A private endpoint was called without credentials."""


class InvalidAddress(ExchangeError):
    """A deposit or withdrawal address is malformed or unresolved."""


class NetworkError(ExchangeError):
    """The transport failed or the exchange answered with an HTTP error."""

    def __init__(self, message: str, status: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status = status
        self.body = body


class BadResponse(ExchangeError):
    """The exchange answered with a payload that cannot be used."""


class MarketNotFound(ExchangeError, KeyError):
    """The symbol is not present in the loaded markets."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class CancelAllOrdersError(ExchangeError):
    """A cancel call failed part way through a cancel-all sequence.

    The ``result`` attribute tells which orders were canceled, which one
    failed and which were never attempted.
    """

    def __init__(self, message: str, result: "CancelAllResult"):
        super().__init__(message)
        self.result = result
