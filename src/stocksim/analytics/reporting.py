"""Report Generation Module."""
import logging
from typing import Any, Dict, List

import pandas as pd

from ..trading.engine import PortfolioReport
from ..trading.stock import PriceChange

UNAVAILABLE = "N/A"


def _money(value) -> str:
    if value is None:
        return UNAVAILABLE
    return f"${value:,.2f}"


class ReportGenerator:
    """Renders engine outputs as plain-text tables."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def market_frame(self, listing: List[Dict[str, Any]]) -> pd.DataFrame:
        frame = pd.DataFrame(listing, columns=['symbol', 'name', 'price'])
        frame['price'] = frame['price'].map(_money)
        return frame.rename(columns={'symbol': 'Symbol', 'name': 'Name', 'price': 'Price'})

    def market_table(self, listing: List[Dict[str, Any]]) -> str:
        return "--- Current Market Prices ---\n" + self.market_frame(listing).to_string(index=False)

    def tick_table(self, changes: List[PriceChange]) -> str:
        frame = pd.DataFrame({
            'Symbol': [c.symbol for c in changes],
            'New Price': [_money(c.new_price) for c in changes],
            'Change': [f"{c.change_percent:.2f}%" for c in changes],
        })
        return "--- Market Fluctuation Simulated ---\n" + frame.to_string(index=False)

    def portfolio_frame(self, report: PortfolioReport) -> pd.DataFrame:
        return pd.DataFrame({
            'Sym': [row.symbol for row in report.rows],
            'Qty': [row.quantity for row in report.rows],
            'Price': [_money(row.price) for row in report.rows],
            'Value': [_money(row.value) for row in report.rows],
            'P/L vs Cost Basis': [
                str(row.profit_loss) if row.profit_loss is not None else UNAVAILABLE
                for row in report.rows
            ],
        })

    def portfolio_table(self, report: PortfolioReport) -> str:
        lines = [
            f"--- Portfolio Performance for {report.username} ---",
            f"Cash Balance: {_money(report.cash)}",
        ]
        if not report.rows:
            lines.append("No stocks currently held.")
        else:
            lines.append(self.portfolio_frame(report).to_string(index=False))
            lines.append(f"TOTAL Holdings Market Value: {_money(report.total_value)}")
        lines.append(f"Realized P/L this session: {_money(report.realized_pnl)}")
        return "\n".join(lines)
