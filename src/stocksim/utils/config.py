"""
Configuration Management.
Loads the simulator YAML configuration with built-in defaults.
"""

import copy
import os
import yaml
import logging
from pathlib import Path
from typing import Dict, Any, List

CONFIG_FILENAME = "simulator_config.yaml"
SNAPSHOT_PATH_ENV = "STOCKSIM_SNAPSHOT_PATH"

DEFAULT_CATALOG: List[Dict[str, Any]] = [
    {'symbol': 'AAPL', 'name': 'Apple Inc.', 'price': '170.50'},
    {'symbol': 'GOOG', 'name': 'Alphabet Inc.', 'price': '1500.75'},
    {'symbol': 'MSFT', 'name': 'Microsoft Corp.', 'price': '300.20'},
]

DEFAULT_TRADER: Dict[str, Any] = {
    'user_id': 101,
    'username': 'CodAlpha Trader',
    'initial_cash': '10000.00',
}


def default_engine_config() -> Dict[str, Any]:
    """Engine configuration used when no config file is present."""
    return {
        'trader': dict(DEFAULT_TRADER),
        'market': {'catalog': copy.deepcopy(DEFAULT_CATALOG)},
        'persistence': {'snapshot_path': 'simulator_save.txt'},
        'fluctuation': {'max_change': 0.02, 'seed': None},
    }


class Config:
    """Main configuration class."""

    def __init__(self, config_dir: str = "config"):
        self.config_dir = Path(config_dir)
        self.logger = logging.getLogger(__name__)

        raw = self._load_yaml(CONFIG_FILENAME)

        self.trader = self._load_trader_config(raw)
        self.market = self._load_market_config(raw)
        self.persistence = self._load_persistence_config(raw)
        self.fluctuation = self._load_fluctuation_config(raw)
        self.logging = self._load_logging_config(raw)

        self._load_env_variables()

    def _load_yaml(self, filename: str) -> Dict[str, Any]:
        """Load YAML configuration file."""
        filepath = self.config_dir / filename

        if not filepath.exists():
            self.logger.warning(f"Config file not found: {filepath}. Using defaults.")
            return {}

        try:
            with open(filepath, 'r') as f:
                config = yaml.safe_load(f)
                return config or {}
        except (OSError, yaml.YAMLError) as e:
            self.logger.error(f"Error loading config from {filepath}: {e}")
            return {}

    def _load_trader_config(self, raw: Dict[str, Any]) -> Dict[str, Any]:
        """Load trader identity and starting cash."""
        trader = dict(DEFAULT_TRADER)
        trader.update(raw.get('trader') or {})
        return trader

    def _load_market_config(self, raw: Dict[str, Any]) -> Dict[str, Any]:
        """Load the seed market catalog."""
        market = raw.get('market') or {}
        catalog = market.get('catalog') or copy.deepcopy(DEFAULT_CATALOG)
        for entry in catalog:
            missing = {'symbol', 'name', 'price'} - set(entry)
            if missing:
                raise ValueError(f"Catalog entry {entry} is missing {sorted(missing)}")
        return {'catalog': catalog}

    def _load_persistence_config(self, raw: Dict[str, Any]) -> Dict[str, Any]:
        """Load snapshot persistence settings."""
        persistence = {'snapshot_path': 'simulator_save.txt'}
        persistence.update(raw.get('persistence') or {})
        return persistence

    def _load_fluctuation_config(self, raw: Dict[str, Any]) -> Dict[str, Any]:
        """Load market tick settings."""
        fluctuation = {'max_change': 0.02, 'seed': None}
        fluctuation.update(raw.get('fluctuation') or {})
        return fluctuation

    def _load_logging_config(self, raw: Dict[str, Any]) -> Dict[str, Any]:
        """Load logging configuration."""
        logging_config = {
            'level': 'INFO',
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            'file': 'logs/stocksim.log',
            'max_bytes': 10485760,
            'backup_count': 5
        }
        logging_config.update(raw.get('logging') or {})
        return logging_config

    def _load_env_variables(self):
        """Apply environment overrides."""
        snapshot_path = os.getenv(SNAPSHOT_PATH_ENV)
        if snapshot_path:
            self.persistence['snapshot_path'] = snapshot_path

    def engine_config(self) -> Dict[str, Any]:
        """Sections consumed by the trading engine."""
        return {
            'trader': self.trader,
            'market': self.market,
            'persistence': self.persistence,
            'fluctuation': self.fluctuation,
        }
