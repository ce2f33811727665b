"""
Market instruments.
Stock holds a mutable price; Market is the catalog of tradable stocks.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Dict, Iterable, Iterator, List, Optional

from ..utils.money import MIN_PRICE, NumericInput, to_decimal, to_money

# Source of per-tick price changes: symbol -> fractional change (0.01 = +1%)
FluctuationSource = Callable[[str], float]


@dataclass
class PriceChange:
    """Result of one price update during a market tick."""
    symbol: str
    old_price: Decimal
    new_price: Decimal
    change_fraction: Decimal

    @property
    def change_percent(self) -> Decimal:
        return to_money(self.change_fraction * 100)


class Stock:
    """Listed stock with an immutable identity and a current price."""

    def __init__(self, symbol: str, name: str, initial_price: NumericInput):
        self._symbol = symbol
        self._name = name
        self.current_price = to_money(initial_price)

    @property
    def symbol(self) -> str:
        return self._symbol

    @property
    def name(self) -> str:
        return self._name

    def update_price(self, change_fraction: NumericInput) -> Decimal:
        """Apply a fractional change, round to the cent and floor at 0.01."""
        new_price = to_money(self.current_price * (1 + to_decimal(change_fraction)))
        self.current_price = max(new_price, MIN_PRICE)
        return self.current_price

    def set_price(self, price: Decimal):
        """Install a previously persisted price verbatim."""
        self.current_price = price

    def to_dict(self) -> Dict[str, object]:
        return {'symbol': self.symbol, 'name': self.name, 'price': self.current_price}

    def __repr__(self) -> str:
        return f"Stock({self.symbol!r}, {self.name!r}, {self.current_price})"

    def __str__(self) -> str:
        return f"{self.symbol} ({self.name}): ${self.current_price:.2f}"


class Market:
    """Symbol -> Stock catalog. Prices change only through tick() or set_price()."""

    def __init__(self, stocks: Optional[Iterable[Stock]] = None):
        self.logger = logging.getLogger(__name__)
        self._stocks: Dict[str, Stock] = {}
        for stock in stocks or []:
            self.add_stock(stock)

    @classmethod
    def from_catalog(cls, catalog: List[Dict[str, object]]) -> 'Market':
        """Build a market from config entries of {symbol, name, price}."""
        return cls(
            Stock(entry['symbol'], entry['name'], entry['price'])
            for entry in catalog
        )

    def add_stock(self, stock: Stock):
        if stock.symbol in self._stocks:
            raise ValueError(f"Duplicate symbol in market catalog: {stock.symbol}")
        self._stocks[stock.symbol] = stock

    def get(self, symbol: str) -> Optional[Stock]:
        return self._stocks.get(symbol)

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._stocks

    def __iter__(self) -> Iterator[Stock]:
        return iter(self._stocks.values())

    def __len__(self) -> int:
        return len(self._stocks)

    @property
    def symbols(self) -> List[str]:
        return list(self._stocks)

    def prices(self) -> Dict[str, Decimal]:
        """Current price of every listed symbol."""
        return {symbol: stock.current_price for symbol, stock in self._stocks.items()}

    def listing(self) -> List[Dict[str, object]]:
        return [stock.to_dict() for stock in self._stocks.values()]

    def tick(self, source: FluctuationSource) -> List[PriceChange]:
        """Apply one independent draw from the source to every stock."""
        changes = []
        for stock in self._stocks.values():
            fraction = to_decimal(source(stock.symbol))
            old_price = stock.current_price
            new_price = stock.update_price(fraction)
            changes.append(PriceChange(stock.symbol, old_price, new_price, fraction))
            self.logger.debug(f"{stock.symbol}: {old_price} -> {new_price} ({fraction})")
        return changes

    def set_price(self, symbol: str, price: Decimal) -> bool:
        """Overwrite a listed symbol's price. Unknown symbols are ignored."""
        stock = self._stocks.get(symbol)
        if stock is None:
            self.logger.warning(f"Ignoring price for unlisted symbol {symbol}")
            return False
        stock.set_price(price)
        return True
