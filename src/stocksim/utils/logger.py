"""
Logging Utilities for the Stock Simulator.
Colored console and rotating file logging, plus a trade logger.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Dict, Any

LEVEL_COLORS = {
    logging.DEBUG: '\033[36m',
    logging.INFO: '\033[32m',
    logging.WARNING: '\033[33m',
    logging.ERROR: '\033[31m',
    logging.CRITICAL: '\033[35m',
}
RESET = '\033[0m'


class ColoredFormatter(logging.Formatter):
    """Console formatter that colors the level name."""

    def format(self, record: logging.LogRecord) -> str:
        color = LEVEL_COLORS.get(record.levelno)
        if color is None:
            return super().format(record)

        plain = record.levelname
        record.levelname = f"{color}{plain}{RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = plain


def setup_logging(config: Dict[str, Any]) -> logging.Logger:
    """
    Setup logging for the simulator.

    Args:
        config: Logging configuration dictionary

    Returns:
        Configured root logger
    """
    log_level = config.get('level', 'INFO')
    log_format = config.get('format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    log_file = config.get('file', 'logs/stocksim.log')
    max_bytes = config.get('max_bytes', 10485760)  # 10MB
    backup_count = config.get('backup_count', 5)
    console_level = config.get('console_level', 'WARNING')

    logger = logging.getLogger()
    logger.setLevel(getattr(logging, log_level.upper()))

    logger.handlers.clear()

    # Console output is for problems only; the CLI prints its own results
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(getattr(logging, console_level.upper()))
    console_handler.setFormatter(ColoredFormatter(log_format))
    logger.addHandler(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(log_format))
        logger.addHandler(file_handler)

    logger.info(f"Logging initialized. Level: {log_level}, File: {log_file}")

    return logger


class TradeLogger:
    """Writes one line per fill or rejection to the ``trades`` logger."""

    def __init__(self):
        self.logger = logging.getLogger("trades")
        self.trade_count = 0

    def log_fill(self, fill: Dict[str, Any]):
        """Log an executed buy or sell."""
        self.trade_count += 1
        message = (
            f"TRADE #{self.trade_count}: {fill['side'].upper()} "
            f"{fill['quantity']} {fill['symbol']} "
            f"@ ${fill['price']:.2f} = ${fill['amount']:.2f}"
        )
        if fill.get('realized_pnl') is not None:
            message += f" (realized ${fill['realized_pnl']:.2f})"
        self.logger.info(message)

    def log_rejection(self, side: str, symbol: str, quantity: Any, reason: str):
        """Log a rejected trade."""
        self.logger.warning(f"REJECTED: {side.upper()} {quantity} {symbol}: {reason}")
