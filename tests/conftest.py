"""Shared fixtures for simulator tests."""

import logging
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))
sys.path.insert(0, str(ROOT / "src"))

from stocksim.data.fluctuation import FixedFluctuation
from stocksim.trading.engine import TradingEngine
from stocksim.utils.config import default_engine_config


@pytest.fixture
def engine_config(tmp_path):
    """Default catalog and trader with the snapshot inside tmp_path."""
    config = default_engine_config()
    config['persistence']['snapshot_path'] = str(tmp_path / "simulator_save.txt")
    config['fluctuation']['seed'] = 42
    return config


@pytest.fixture
def engine(engine_config):
    return TradingEngine(engine_config)


@pytest.fixture
def flat_market():
    """Fluctuation source that leaves every price unchanged."""
    return FixedFluctuation({})


@pytest.fixture(autouse=True)
def restore_root_logging():
    """The CLI installs its own handlers on the root logger; undo that after each test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
