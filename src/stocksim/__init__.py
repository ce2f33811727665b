"""Single-trader stock market simulator with a persistent ledger."""
from .trading.engine import TradingEngine

__version__ = "1.0.0"

__all__ = ['TradingEngine', '__version__']
