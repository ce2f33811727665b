#!/usr/bin/env python3
"""
Main application entry point for the Stock Simulator.
"""

import sys
from pathlib import Path

import click

# Add src to path
sys.path.append(str(Path(__file__).parent / "src"))

from stocksim.analytics.reporting import ReportGenerator
from stocksim.trading.engine import TradingEngine, TradeResult
from stocksim.utils.config import Config
from stocksim.utils.logger import setup_logging


class SimulatorSession:
    """Engine plus reporting for one CLI invocation."""

    def __init__(self, config_dir: str = "config", snapshot_path: str = None):
        self.config = Config(config_dir)
        if snapshot_path:
            self.config.persistence['snapshot_path'] = snapshot_path
        self.logger = setup_logging(self.config.logging)
        self.engine = TradingEngine(self.config.engine_config())
        self.reports = ReportGenerator()

    def restore(self):
        result = self.engine.load()
        click.echo(f"[{result.message}]", err=not result.success)

    def persist(self) -> bool:
        result = self.engine.save()
        click.echo(f"[{result.message}]", err=not result.success)
        return result.success

    def report_trade(self, result: TradeResult):
        if result.success:
            click.echo(f"SUCCESS: {result.message}")
        else:
            click.echo(f"FAILURE: {result.message}", err=True)


@click.group()
@click.option("--config", "-c", default="config", help="Configuration directory path")
@click.option("--snapshot", "-f", default=None, help="Snapshot file (overrides config)")
@click.pass_context
def cli(ctx, config, snapshot):
    """Stock Simulator CLI."""
    session = SimulatorSession(config, snapshot)
    session.restore()
    ctx.obj = session


@cli.command()
@click.pass_obj
def market(session):
    """Show current market prices."""
    click.echo(session.reports.market_table(session.engine.display_market()))


@cli.command()
@click.option("--ticks", "-n", default=1, type=click.IntRange(min=1), help="Number of market ticks")
@click.pass_obj
def tick(session, ticks):
    """Simulate market fluctuation and save the new prices."""
    for _ in range(ticks):
        changes = session.engine.tick()
        click.echo(session.reports.tick_table(changes))
    session.persist()


@cli.command(context_settings={"ignore_unknown_options": True})
@click.argument("symbol")
@click.argument("quantity", type=int)
@click.pass_obj
def buy(session, symbol, quantity):
    """Buy QUANTITY shares of SYMBOL at the current price."""
    result = session.engine.buy(symbol.upper(), quantity)
    session.report_trade(result)
    if not result.success:
        sys.exit(1)
    session.persist()


@cli.command(context_settings={"ignore_unknown_options": True})
@click.argument("symbol")
@click.argument("quantity", type=int)
@click.pass_obj
def sell(session, symbol, quantity):
    """Sell QUANTITY shares of SYMBOL at the current price."""
    result = session.engine.sell(symbol.upper(), quantity)
    session.report_trade(result)
    if not result.success:
        sys.exit(1)
    session.persist()


@cli.command()
@click.pass_obj
def portfolio(session):
    """Show cash, holdings and P/L."""
    click.echo(session.reports.portfolio_table(session.engine.portfolio_report()))


@cli.command(name="session")
@click.pass_obj
def run_session(session):
    """Run the scripted demo session and save the result."""
    engine = session.engine
    click.echo(str(engine.trader))
    click.echo(session.reports.market_table(engine.display_market()))

    click.echo("\n--- Trading Session 1 ---")
    session.report_trade(engine.buy("AAPL", 5))
    session.report_trade(engine.buy("GOOG", 1))
    click.echo(session.reports.portfolio_table(engine.portfolio_report()))

    click.echo(session.reports.tick_table(engine.tick()))

    click.echo("\n--- Trading Session 2 ---")
    session.report_trade(engine.sell("AAPL", 2))
    click.echo(session.reports.portfolio_table(engine.portfolio_report()))

    session.persist()
    click.echo("\nSimulation complete. Rerun to see persistence in action.")


if __name__ == "__main__":
    cli()
