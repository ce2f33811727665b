"""Trading engine, ledger and market modules."""
from .engine import (TradingEngine, TradeResult, SnapshotResult, SnapshotStatus,
                     PortfolioReport, HoldingRow, Fill, OrderSide)
from .exceptions import (TradingError, UnknownSymbol, InsufficientFunds,
                         InsufficientHoldings, InvalidQuantity, CorruptSnapshot,
                         SnapshotIOError)
from .portfolio import Portfolio, ProfitLoss
from .stock import Stock, Market, PriceChange
from .trader import Trader

__all__ = ['TradingEngine', 'TradeResult', 'SnapshotResult', 'SnapshotStatus',
           'PortfolioReport', 'HoldingRow', 'Fill', 'OrderSide',
           'TradingError', 'UnknownSymbol', 'InsufficientFunds', 'InsufficientHoldings',
           'InvalidQuantity', 'CorruptSnapshot', 'SnapshotIOError',
           'Portfolio', 'ProfitLoss', 'Stock', 'Market', 'PriceChange', 'Trader']
