"""
Error types raised by the trading ledger and snapshot layer.
The engine catches these and reports them as failed results.
"""

from decimal import Decimal


class TradingError(Exception):
    """Base class for all recoverable simulator errors."""


class UnknownSymbol(TradingError):
    """Symbol is not listed in the market."""

    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"Invalid stock symbol: {symbol}")


class InsufficientFunds(TradingError):
    """Cash balance does not cover a withdrawal."""

    def __init__(self, needed: Decimal, available: Decimal):
        self.needed = needed
        self.available = available
        super().__init__(
            f"Insufficient funds. Need ${needed:,.2f}, but only have ${available:,.2f}."
        )


class InsufficientHoldings(TradingError):
    """Portfolio holds fewer shares than a sell requests."""

    def __init__(self, symbol: str, held: int, requested: int):
        self.symbol = symbol
        self.held = held
        self.requested = requested
        super().__init__(
            f"Insufficient holdings. You only own {held} shares of {symbol}, "
            f"cannot sell {requested}."
        )


class InvalidQuantity(TradingError):
    """Quantity is not a positive integer, or a fill would overdraw a holding."""


class CorruptSnapshot(TradingError):
    """Snapshot file exists but cannot be parsed."""


class SnapshotIOError(TradingError):
    """Snapshot file cannot be read or written."""
