"""
Portfolio accounting.
Tracks per-symbol quantity and weighted-average cost basis, and values
holdings against market prices.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from .exceptions import InvalidQuantity
from ..utils.money import ZERO, to_money, weighted_average


@dataclass(frozen=True)
class ProfitLoss:
    """Unrealized gain per share against the average cost basis."""
    gain: Decimal
    percent: Decimal

    def __str__(self) -> str:
        return f"${self.gain:.2f} ({self.percent:.2f}%)"


class Portfolio:
    """Holdings and average cost basis for a single trader."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._holdings: Dict[str, int] = {}
        self._cost_basis: Dict[str, Decimal] = {}

    @property
    def holdings(self) -> Mapping[str, int]:
        return MappingProxyType(self._holdings)

    @property
    def cost_basis_map(self) -> Mapping[str, Decimal]:
        return MappingProxyType(self._cost_basis)

    def quantity(self, symbol: str) -> int:
        return self._holdings.get(symbol, 0)

    def cost_basis(self, symbol: str) -> Optional[Decimal]:
        return self._cost_basis.get(symbol)

    def is_empty(self) -> bool:
        return not self._holdings

    def apply_fill(self, symbol: str, signed_quantity: int, price: Decimal):
        """
        Apply a buy (positive quantity) or sell (negative quantity) fill.

        A buy recomputes the weighted-average cost basis; a sell keeps the
        basis. A holding that reaches zero is removed together with its basis.

        Args:
            symbol: Stock symbol
            signed_quantity: Shares bought (> 0) or sold (< 0)
            price: Execution price per share

        Raises:
            InvalidQuantity: If signed_quantity is zero or the resulting
                quantity would be negative. Nothing is changed in that case.
        """
        if isinstance(signed_quantity, bool) or not isinstance(signed_quantity, int):
            raise InvalidQuantity(f"Fill quantity must be an integer, got {signed_quantity!r}")
        if signed_quantity == 0:
            raise InvalidQuantity(f"Fill quantity for {symbol} must be non-zero")

        old_quantity = self.quantity(symbol)
        new_quantity = old_quantity + signed_quantity
        if new_quantity < 0:
            raise InvalidQuantity(
                f"Fill of {signed_quantity} {symbol} would leave {new_quantity} shares"
            )

        if new_quantity == 0:
            del self._holdings[symbol]
            self._cost_basis.pop(symbol, None)
            return

        if signed_quantity > 0:
            old_basis = self._cost_basis.get(symbol, ZERO)
            new_basis = weighted_average(old_basis, old_quantity, price, signed_quantity)
            self._cost_basis[symbol] = new_basis
        self._holdings[symbol] = new_quantity

    def restore(self, symbol: str, quantity: int, basis: Decimal):
        """Install a persisted holding verbatim, bypassing fill accounting."""
        if quantity < 0:
            raise InvalidQuantity(f"Cannot restore negative holding of {symbol}: {quantity}")
        if quantity == 0:
            self.remove(symbol)
            return
        self._holdings[symbol] = quantity
        self._cost_basis[symbol] = basis

    def remove(self, symbol: str):
        self._holdings.pop(symbol, None)
        self._cost_basis.pop(symbol, None)

    def market_value(self, prices: Mapping[str, Decimal]) -> Decimal:
        """Total value of holdings, rounded once at the end. Unpriced symbols count as 0."""
        total = Decimal(0)
        for symbol, quantity in self._holdings.items():
            price = prices.get(symbol)
            if price is None:
                self.logger.debug(f"No market price for {symbol}, excluded from value")
                continue
            total += price * quantity
        return to_money(total)

    def profit_loss(self, symbol: str, current_price: Decimal) -> Optional[ProfitLoss]:
        """Unrealized P/L per share, or None when unavailable."""
        basis = self._cost_basis.get(symbol)
        if basis is None:
            return None
        if basis == 0:
            self.logger.debug(f"Zero cost basis for {symbol}, P/L undefined")
            return None
        gain = current_price - basis
        return ProfitLoss(gain=to_money(gain), percent=to_money(gain / basis * 100))
