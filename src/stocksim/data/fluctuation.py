"""
Simulated market fluctuation.
Draws an independent uniform price change for each symbol on every tick.
"""

import logging
from typing import Any, Dict, Optional

import numpy as np


class RandomFluctuation:
    """Uniform random price changes in [-max_change, +max_change)."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        config = config or {}
        self.logger = logging.getLogger(__name__)
        self.max_change = float(config.get('max_change', 0.02))
        if self.max_change < 0:
            raise ValueError(f"max_change must be non-negative, got {self.max_change}")
        self.seed = config.get('seed')
        self.rng = np.random.default_rng(self.seed)
        self.logger.debug(f"Fluctuation source ready: +/-{self.max_change:.2%}, seed={self.seed}")

    def __call__(self, symbol: str) -> float:
        change = float(self.rng.uniform(-self.max_change, self.max_change))
        return round(change, 6)


class FixedFluctuation:
    """Deterministic per-symbol changes, for replaying a known market move."""

    def __init__(self, changes: Dict[str, float], default: float = 0.0):
        self.changes = dict(changes)
        self.default = default

    def __call__(self, symbol: str) -> float:
        return self.changes.get(symbol, self.default)
