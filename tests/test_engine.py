"""
Tests for the trading engine: buy/sell rules, valuation and invariants.
"""

import logging
from decimal import Decimal

import pytest

from stocksim.data.fluctuation import FixedFluctuation, RandomFluctuation
from stocksim.trading.engine import OrderSide, TradingEngine
from stocksim.trading.exceptions import (
    InsufficientFunds,
    InsufficientHoldings,
    InvalidQuantity,
    UnknownSymbol,
)


def state_of(engine):
    return (
        engine.trader.cash_balance,
        dict(engine.portfolio.holdings),
        dict(engine.portfolio.cost_basis_map),
        engine.market.prices(),
    )


class TestBuy:
    """Test buy execution."""

    def test_buy_scenario(self, engine):
        result = engine.buy('AAPL', 5)

        assert result.success
        assert engine.trader.cash_balance == Decimal('9147.50')
        assert engine.portfolio.quantity('AAPL') == 5
        assert engine.portfolio.cost_basis('AAPL') == Decimal('170.50')
        assert result.fill.side == OrderSide.BUY
        assert result.fill.amount == Decimal('852.50')
        assert "Bought 5 shares of AAPL" in result.message

    def test_buy_at_new_price_averages_basis(self, engine):
        engine.buy('AAPL', 5)
        engine.market.set_price('AAPL', Decimal('180.00'))

        result = engine.buy('AAPL', 1)

        assert result.success
        assert engine.portfolio.quantity('AAPL') == 6
        assert engine.portfolio.cost_basis('AAPL') == Decimal('172.08')
        assert engine.trader.cash_balance == Decimal('8967.50')

    def test_insufficient_funds(self, engine_config):
        engine_config['trader']['initial_cash'] = '100'
        engine_config['market']['catalog'] = [
            {'symbol': 'CHEAP', 'name': 'Cheap Co.', 'price': '50.00'}
        ]
        engine = TradingEngine(engine_config)
        before = state_of(engine)

        result = engine.buy('CHEAP', 1000)

        assert not result.success
        assert isinstance(result.error, InsufficientFunds)
        assert result.error.needed == Decimal('50000.00')
        assert result.error.available == Decimal('100.00')
        assert state_of(engine) == before
        assert engine.fills == []

    def test_unknown_symbol(self, engine):
        before = state_of(engine)
        result = engine.buy('TSLA', 1)
        assert not result.success
        assert isinstance(result.error, UnknownSymbol)
        assert state_of(engine) == before

    @pytest.mark.parametrize('quantity', [0, -3, 1.5, True, '2'])
    def test_invalid_quantity(self, engine, quantity):
        before = state_of(engine)
        result = engine.buy('AAPL', quantity)
        assert not result.success
        assert isinstance(result.error, InvalidQuantity)
        assert state_of(engine) == before

    def test_oversized_quantity(self, engine):
        before = state_of(engine)

        result = engine.buy('AAPL', 10 ** 30)

        assert not result.success
        assert isinstance(result.error, InvalidQuantity)
        assert "maximum order size" in result.message
        assert state_of(engine) == before

    def test_largest_order_is_checked_against_cash(self, engine):
        result = engine.buy('AAPL', 10 ** 9)
        assert isinstance(result.error, InsufficientFunds)
        assert result.error.needed == Decimal('170500000000.00')

    def test_buy_spending_entire_balance(self, engine_config):
        engine_config['trader']['initial_cash'] = '852.50'
        engine = TradingEngine(engine_config)
        assert engine.buy('AAPL', 5).success
        assert engine.trader.cash_balance == Decimal('0.00')
        assert not engine.buy('AAPL', 1).success


class TestSell:
    """Test sell execution."""

    def test_sell_more_than_held(self, engine):
        engine.buy('AAPL', 6)
        before = state_of(engine)

        result = engine.sell('AAPL', 10)

        assert not result.success
        assert isinstance(result.error, InsufficientHoldings)
        assert result.error.held == 6
        assert result.error.requested == 10
        assert state_of(engine) == before

    def test_sell_unheld_symbol(self, engine):
        result = engine.sell('MSFT', 1)
        assert isinstance(result.error, InsufficientHoldings)

    def test_sell_oversized_quantity(self, engine):
        engine.buy('AAPL', 1)
        before = state_of(engine)
        result = engine.sell('AAPL', 10 ** 30)
        assert isinstance(result.error, InvalidQuantity)
        assert state_of(engine) == before
        assert result.error.held == 0

    def test_sell_unknown_symbol(self, engine):
        result = engine.sell('TSLA', 1)
        assert isinstance(result.error, UnknownSymbol)

    def test_sell_deposits_proceeds_and_keeps_basis(self, engine):
        engine.buy('AAPL', 5)
        engine.market.set_price('AAPL', Decimal('200.00'))

        result = engine.sell('AAPL', 2)

        assert result.success
        assert result.fill.amount == Decimal('400.00')
        assert result.fill.realized_pnl == Decimal('59.00')
        assert engine.trader.cash_balance == Decimal('9547.50')
        assert engine.portfolio.quantity('AAPL') == 3
        assert engine.portfolio.cost_basis('AAPL') == Decimal('170.50')

    def test_sell_everything_drops_record(self, engine):
        engine.buy('AAPL', 5)
        assert engine.sell('AAPL', 5).success
        assert 'AAPL' not in engine.portfolio.holdings
        assert engine.portfolio.profit_loss('AAPL', Decimal('170.50')) is None

    def test_buy_then_sell_restores_cash(self, engine):
        start = engine.trader.cash_balance
        engine.buy('GOOG', 3)
        engine.sell('GOOG', 3)
        assert engine.trader.cash_balance == start
        assert engine.portfolio.is_empty()


class TestInvariants:
    """Random trade sequences never produce negative cash or holdings."""

    def test_random_sequence(self, engine):
        import numpy as np

        rng = np.random.default_rng(2024)
        symbols = engine.market.symbols + ['NOPE']
        for step in range(400):
            symbol = symbols[rng.integers(len(symbols))]
            quantity = int(rng.integers(-2, 12))
            if rng.random() < 0.5:
                engine.buy(symbol, quantity)
            else:
                engine.sell(symbol, quantity)
            if step % 25 == 0:
                engine.tick(RandomFluctuation({'max_change': 0.2, 'seed': step}))

            assert engine.trader.cash_balance >= 0
            assert all(q > 0 for q in engine.portfolio.holdings.values())
            assert set(engine.portfolio.holdings) == set(engine.portfolio.cost_basis_map)


class TestTickAndReport:
    """Test market ticks and portfolio reporting."""

    def test_tick_uses_injected_source(self, engine):
        changes = engine.tick(FixedFluctuation({'AAPL': 0.02}, default=-0.01))
        prices = engine.market.prices()
        assert prices['AAPL'] == Decimal('173.91')
        assert prices['GOOG'] == Decimal('1485.74')
        assert prices['MSFT'] == Decimal('297.20')
        assert len(changes) == 3

    def test_tick_uses_default_source(self, engine_config):
        engine = TradingEngine(engine_config, fluctuation_source=FixedFluctuation({}, 0.5))
        engine.tick()
        assert engine.market.prices()['MSFT'] == Decimal('450.30')

    def test_display_market(self, engine):
        listing = engine.display_market()
        assert {row['symbol'] for row in listing} == {'AAPL', 'GOOG', 'MSFT'}
        assert all(set(row) == {'symbol', 'name', 'price'} for row in listing)

    def test_portfolio_report(self, engine):
        engine.buy('AAPL', 5)
        engine.buy('GOOG', 1)
        engine.market.set_price('AAPL', Decimal('180.00'))
        engine.sell('AAPL', 2)

        report = engine.portfolio_report()

        assert report.username == 'CodAlpha Trader'
        assert report.cash == Decimal('8006.75')
        assert [row.symbol for row in report.rows] == ['AAPL', 'GOOG']
        aapl = report.rows[0]
        assert aapl.quantity == 3
        assert aapl.value == Decimal('540.00')
        assert aapl.profit_loss.gain == Decimal('9.50')
        assert report.total_value == Decimal('2040.75')
        assert report.realized_pnl == Decimal('19.00')
        assert report.account_value == Decimal('10047.50')

    def test_report_row_for_unlisted_holding(self, engine):
        engine.portfolio.restore('GONE', 4, Decimal('10.00'))
        report = engine.portfolio_report()
        row = report.rows[0]
        assert row.symbol == 'GONE'
        assert row.price is None and row.value is None and row.profit_loss is None
        assert report.total_value == Decimal('0.00')


class TestTradeLog:
    """Test the per-trade log lines."""

    def test_fills_and_rejections_are_logged(self, engine, caplog):
        with caplog.at_level(logging.INFO, logger="trades"):
            engine.buy('AAPL', 5)
            engine.sell('AAPL', 2)
            engine.sell('AAPL', 10)

        records = [r for r in caplog.records if r.name == "trades"]
        messages = [r.getMessage() for r in records]
        assert messages[0] == "TRADE #1: BUY 5 AAPL @ $170.50 = $852.50"
        assert messages[1] == "TRADE #2: SELL 2 AAPL @ $170.50 = $341.00 (realized $0.00)"
        assert messages[2].startswith("REJECTED: SELL 10 AAPL: Insufficient")
        assert records[2].levelno == logging.WARNING
