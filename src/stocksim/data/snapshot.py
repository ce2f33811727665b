"""
Snapshot persistence.

A snapshot is three newline-separated text lines:

    <cash>
    <SYMBOL:QTY:BASIS>,<SYMBOL:QTY:BASIS>,...[,]
    <SYMBOL:PRICE>,<SYMBOL:PRICE>,...[,]

An empty holdings or prices line means no entries. A trailing comma after the
last entry is accepted. Entries with the wrong number of fields are skipped;
any unparsable, negative or out-of-range number makes the whole snapshot
corrupt. Cash, cost basis and prices are rounded to the cent on decode.
"""

import logging
import os
import re
import tempfile
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..trading.exceptions import CorruptSnapshot, SnapshotIOError
from ..utils.money import MAX_AMOUNT, MAX_QUANTITY, to_money

logger = logging.getLogger(__name__)

ENTRY_SEPARATOR = ','
FIELD_SEPARATOR = ':'
INTEGER_PATTERN = re.compile(r'[+-]?[0-9]+')


@dataclass
class HoldingRecord:
    """Persisted portfolio entry."""
    symbol: str
    quantity: int
    cost_basis: Decimal


@dataclass
class Snapshot:
    """Persisted trader and market state."""
    cash: Decimal
    holdings: List[HoldingRecord] = field(default_factory=list)
    prices: Dict[str, Decimal] = field(default_factory=dict)


def encode_snapshot(snapshot: Snapshot) -> str:
    """Serialize a snapshot to its three-line text form."""
    holdings_line = ENTRY_SEPARATOR.join(
        f"{h.symbol}{FIELD_SEPARATOR}{h.quantity}{FIELD_SEPARATOR}{h.cost_basis}"
        for h in snapshot.holdings
        if h.quantity > 0
    )
    prices_line = ENTRY_SEPARATOR.join(
        f"{symbol}{FIELD_SEPARATOR}{price}" for symbol, price in snapshot.prices.items()
    )
    return f"{snapshot.cash}\n{holdings_line}\n{prices_line}\n"


def _parse_decimal(text: str, what: str, line_no: int) -> Decimal:
    try:
        value = to_money(text)
    except ValueError:
        raise CorruptSnapshot(f"Line {line_no}: invalid {what} {text!r}") from None
    if value < 0:
        raise CorruptSnapshot(f"Line {line_no}: negative {what} {text!r}")
    if value > MAX_AMOUNT:
        raise CorruptSnapshot(f"Line {line_no}: {what} out of range {text!r}")
    return value


def _parse_quantity(text: str, line_no: int) -> int:
    text = text.strip()
    if not INTEGER_PATTERN.fullmatch(text):
        raise CorruptSnapshot(f"Line {line_no}: invalid quantity {text!r}")
    quantity = int(text)
    if quantity < 0:
        raise CorruptSnapshot(f"Line {line_no}: negative quantity {text!r}")
    if quantity > MAX_QUANTITY:
        raise CorruptSnapshot(f"Line {line_no}: quantity out of range {text!r}")
    return quantity


def _split_entries(line: str, expected_fields: int, line_no: int) -> List[List[str]]:
    entries = []
    for raw in line.split(ENTRY_SEPARATOR):
        if not raw.strip():
            continue
        parts = [part.strip() for part in raw.split(FIELD_SEPARATOR)]
        if len(parts) != expected_fields:
            logger.warning(f"Line {line_no}: skipping malformed entry {raw!r}")
            continue
        entries.append(parts)
    return entries


def decode_snapshot(text: str) -> Snapshot:
    """
    Parse the three-line snapshot format.

    Raises:
        CorruptSnapshot: If the cash line is missing or any numeric field
            fails to parse, is negative or is out of range.
    """
    lines = text.splitlines()
    if not lines or not lines[0].strip():
        raise CorruptSnapshot("Line 1: missing cash balance")

    cash = _parse_decimal(lines[0], 'cash balance', 1)

    holdings = []
    if len(lines) > 1:
        for symbol, quantity, basis in _split_entries(lines[1], 3, 2):
            record = HoldingRecord(
                symbol=symbol,
                quantity=_parse_quantity(quantity, 2),
                cost_basis=_parse_decimal(basis, 'cost basis', 2),
            )
            if record.quantity == 0:
                logger.warning(f"Line 2: skipping empty holding {symbol}")
                continue
            holdings.append(record)

    prices = {}
    if len(lines) > 2:
        for symbol, price in _split_entries(lines[2], 2, 3):
            prices[symbol] = _parse_decimal(price, 'price', 3)

    return Snapshot(cash=cash, holdings=holdings, prices=prices)


class SnapshotStore:
    """Reads and writes a snapshot file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def read(self) -> Optional[Snapshot]:
        """
        Load the snapshot.

        Returns:
            The decoded snapshot, or None if no snapshot file exists.

        Raises:
            CorruptSnapshot: If the file cannot be parsed.
            SnapshotIOError: If the file exists but cannot be read.
        """
        if not self.path.exists():
            return None
        try:
            text = self.path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            raise SnapshotIOError(f"Error reading {self.path}: {e}") from e
        return decode_snapshot(text)

    def write(self, snapshot: Snapshot):
        """
        Write the snapshot atomically.

        The content goes to a temporary file in the destination directory
        which then replaces the target, so a crash never leaves a truncated file.

        Raises:
            SnapshotIOError: If the destination cannot be written.
        """
        payload = encode_snapshot(snapshot)
        directory = self.path.parent
        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=directory, prefix=f".{self.path.name}.", suffix='.tmp'
            )
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(payload)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise SnapshotIOError(f"Error saving {self.path}: {e}") from e
