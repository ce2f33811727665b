"""Utility modules."""
from .config import Config, default_engine_config
from .logger import setup_logging, TradeLogger
from .money import to_money, to_decimal

__all__ = ['Config', 'default_engine_config', 'setup_logging', 'TradeLogger',
           'to_money', 'to_decimal']
