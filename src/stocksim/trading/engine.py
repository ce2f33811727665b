"""
Trading Engine.
Owns the market and the trader, executes buys and sells against current
prices, values the portfolio, and saves/restores session snapshots.
"""

import logging
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from .exceptions import (
    CorruptSnapshot,
    InvalidQuantity,
    SnapshotIOError,
    TradingError,
    UnknownSymbol,
    InsufficientHoldings,
)
from .portfolio import ProfitLoss
from .stock import FluctuationSource, Market, PriceChange, Stock
from .trader import Trader
from ..data.fluctuation import RandomFluctuation
from ..data.snapshot import HoldingRecord, Snapshot, SnapshotStore
from ..utils.config import default_engine_config
from ..utils.logger import TradeLogger
from ..utils.money import MAX_QUANTITY, ZERO, calculate_amount, to_money


class OrderSide(Enum):
    BUY = "buy"
    SELL = "sell"


class SnapshotStatus(Enum):
    SAVED = "saved"
    LOADED = "loaded"
    FRESH_START = "fresh_start"
    CORRUPT = "corrupt"
    IO_ERROR = "io_error"


@dataclass
class Fill:
    """Executed trade."""
    side: OrderSide
    symbol: str
    quantity: int
    price: Decimal
    amount: Decimal
    realized_pnl: Optional[Decimal] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['side'] = self.side.value
        return data


@dataclass
class TradeResult:
    """Outcome of a buy or sell request."""
    success: bool
    message: str
    fill: Optional[Fill] = None
    error: Optional[TradingError] = None


@dataclass
class SnapshotResult:
    """Outcome of a save or load request."""
    status: SnapshotStatus
    message: str
    error: Optional[TradingError] = None

    @property
    def success(self) -> bool:
        return self.status in (SnapshotStatus.SAVED, SnapshotStatus.LOADED,
                               SnapshotStatus.FRESH_START)


@dataclass
class HoldingRow:
    """One line of the portfolio report."""
    symbol: str
    quantity: int
    price: Optional[Decimal]
    value: Optional[Decimal]
    profit_loss: Optional[ProfitLoss]


@dataclass
class PortfolioReport:
    """Cash, holdings and total market value for the trader."""
    username: str
    cash: Decimal
    rows: List[HoldingRow]
    total_value: Decimal
    realized_pnl: Decimal

    @property
    def account_value(self) -> Decimal:
        return to_money(self.cash + self.total_value)


class TradingEngine:
    """Single-trader trading engine over an in-memory market."""

    def __init__(self, config: Optional[Dict[str, Any]] = None,
                 fluctuation_source: Optional[FluctuationSource] = None):
        self.config = config or default_engine_config()
        self.logger = logging.getLogger(__name__)
        self.trade_logger = TradeLogger()

        trader_config = self.config.get('trader', {})
        market_config = self.config.get('market', {})
        persistence_config = self.config.get('persistence', {})
        defaults = default_engine_config()

        self.market = Market.from_catalog(
            market_config.get('catalog', defaults['market']['catalog'])
        )
        self.trader = Trader(
            trader_config.get('user_id', defaults['trader']['user_id']),
            trader_config.get('username', defaults['trader']['username']),
            trader_config.get('initial_cash', defaults['trader']['initial_cash']),
        )
        self.store = SnapshotStore(
            persistence_config.get('snapshot_path', defaults['persistence']['snapshot_path'])
        )
        self.fluctuation_source = fluctuation_source or RandomFluctuation(
            self.config.get('fluctuation', {})
        )

        self.fills: List[Fill] = []

    @property
    def portfolio(self):
        return self.trader.portfolio

    def display_market(self) -> List[Dict[str, Any]]:
        """Symbol, name and current price of every listed stock."""
        return self.market.listing()

    def tick(self, source: Optional[FluctuationSource] = None) -> List[PriceChange]:
        """Move every price by one draw from the fluctuation source."""
        changes = self.market.tick(source or self.fluctuation_source)
        self.logger.info(
            "Market tick: " + ", ".join(f"{c.symbol} {c.new_price}" for c in changes)
        )
        return changes

    # Trading

    def buy(self, symbol: str, quantity: int) -> TradeResult:
        """Buy shares at the current market price."""
        try:
            fill = self._execute_buy(symbol, quantity)
        except TradingError as e:
            return self._rejected(OrderSide.BUY, symbol, quantity, e)
        return self._filled(fill)

    def sell(self, symbol: str, quantity: int) -> TradeResult:
        """Sell held shares at the current market price."""
        try:
            fill = self._execute_sell(symbol, quantity)
        except TradingError as e:
            return self._rejected(OrderSide.SELL, symbol, quantity, e)
        return self._filled(fill)

    def _validate_order(self, symbol: str, quantity: int) -> Stock:
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise InvalidQuantity(f"Quantity must be a positive integer, got {quantity!r}")
        if quantity > MAX_QUANTITY:
            raise InvalidQuantity(f"Quantity exceeds the maximum order size of {MAX_QUANTITY:,}")
        stock = self.market.get(symbol)
        if stock is None:
            raise UnknownSymbol(symbol)
        return stock

    def _execute_buy(self, symbol: str, quantity: int) -> Fill:
        stock = self._validate_order(symbol, quantity)
        price = stock.current_price
        cost = calculate_amount(price, quantity)

        # Withdraw first: a funds failure leaves the portfolio untouched
        self.trader.withdraw(cost)
        try:
            self.portfolio.apply_fill(symbol, quantity, price)
        except InvalidQuantity:
            self.trader.deposit(cost)
            self.logger.exception(f"Buy fill failed for {symbol} after withdrawal, refunded")
            raise

        return Fill(OrderSide.BUY, symbol, quantity, price, cost)

    def _execute_sell(self, symbol: str, quantity: int) -> Fill:
        stock = self._validate_order(symbol, quantity)
        held = self.portfolio.quantity(symbol)
        if held < quantity:
            raise InsufficientHoldings(symbol, held, quantity)

        price = stock.current_price
        proceeds = calculate_amount(price, quantity)
        basis = self.portfolio.cost_basis(symbol)
        realized = None
        if basis is not None:
            realized = to_money((price - basis) * quantity)

        self.portfolio.apply_fill(symbol, -quantity, price)
        self.trader.deposit(proceeds)

        return Fill(OrderSide.SELL, symbol, quantity, price, proceeds, realized)

    def _filled(self, fill: Fill) -> TradeResult:
        self.fills.append(fill)
        self.trade_logger.log_fill(fill.to_dict())
        verb = "Bought" if fill.side == OrderSide.BUY else "Sold"
        message = (
            f"{verb} {fill.quantity} shares of {fill.symbol} at ${fill.price:,.2f} "
            f"for a total of ${fill.amount:,.2f}."
        )
        return TradeResult(success=True, message=message, fill=fill)

    def _rejected(self, side: OrderSide, symbol: str, quantity: Any,
                  error: TradingError) -> TradeResult:
        self.trade_logger.log_rejection(side.value, symbol, quantity, str(error))
        return TradeResult(success=False, message=str(error), error=error)

    # Valuation

    def realized_pnl(self) -> Decimal:
        """Realized gain of all sells in this session."""
        return to_money(sum(
            (f.realized_pnl for f in self.fills if f.realized_pnl is not None), ZERO
        ))

    def portfolio_report(self) -> PortfolioReport:
        """Per-holding value and unrealized P/L plus total holdings value."""
        prices = self.market.prices()
        rows = []
        for symbol, quantity in sorted(self.portfolio.holdings.items()):
            price = prices.get(symbol)
            if price is None:
                rows.append(HoldingRow(symbol, quantity, None, None, None))
                continue
            rows.append(HoldingRow(
                symbol=symbol,
                quantity=quantity,
                price=price,
                value=calculate_amount(price, quantity),
                profit_loss=self.portfolio.profit_loss(symbol, price),
            ))
        return PortfolioReport(
            username=self.trader.username,
            cash=self.trader.cash_balance,
            rows=rows,
            total_value=self.portfolio.market_value(prices),
            realized_pnl=self.realized_pnl(),
        )

    # Persistence

    def snapshot(self) -> Snapshot:
        """Current trader and market state in persisted form."""
        holdings = [
            HoldingRecord(symbol, quantity, self.portfolio.cost_basis(symbol))
            for symbol, quantity in self.portfolio.holdings.items()
        ]
        return Snapshot(
            cash=self.trader.cash_balance,
            holdings=holdings,
            prices=self.market.prices(),
        )

    def save(self) -> SnapshotResult:
        """Write the snapshot. Failures are reported, in-memory state is kept."""
        try:
            self.store.write(self.snapshot())
        except SnapshotIOError as e:
            self.logger.error(f"Error saving data: {e}")
            return SnapshotResult(SnapshotStatus.IO_ERROR, str(e), e)
        message = f"Data saved successfully to {self.store.path}"
        self.logger.info(message)
        return SnapshotResult(SnapshotStatus.SAVED, message)

    def load(self) -> SnapshotResult:
        """
        Overlay a saved snapshot onto the current state.

        The file is fully parsed before anything is applied, so a corrupt
        snapshot leaves the engine unchanged. Cash is overwritten, saved holdings
        are installed over the portfolio, and saved prices are applied only to symbols
        already listed in the market.
        """
        try:
            snapshot = self.store.read()
        except (CorruptSnapshot, SnapshotIOError) as e:
            self.logger.error(f"Error loading data: {e}")
            status = (SnapshotStatus.CORRUPT if isinstance(e, CorruptSnapshot)
                      else SnapshotStatus.IO_ERROR)
            return SnapshotResult(status, str(e), e)

        if snapshot is None:
            message = "No saved data found. Starting fresh."
            self.logger.info(message)
            return SnapshotResult(SnapshotStatus.FRESH_START, message)

        self._apply_snapshot(snapshot)
        message = f"Data loaded successfully from {self.store.path}"
        self.logger.info(message)
        return SnapshotResult(SnapshotStatus.LOADED, message)

    def _apply_snapshot(self, snapshot: Snapshot):
        self.trader.set_cash_balance(snapshot.cash)

        for record in snapshot.holdings:
            self.portfolio.restore(record.symbol, record.quantity, record.cost_basis)
            if record.symbol not in self.market:
                self.logger.warning(f"Restored holding {record.symbol} is not listed in the market")

        for symbol, price in snapshot.prices.items():
            self.market.set_price(symbol, price)
