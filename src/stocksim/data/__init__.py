"""Snapshot persistence and simulated market data."""
from .fluctuation import RandomFluctuation, FixedFluctuation
from .snapshot import Snapshot, HoldingRecord, SnapshotStore, encode_snapshot, decode_snapshot

__all__ = ['RandomFluctuation', 'FixedFluctuation', 'Snapshot', 'HoldingRecord',
           'SnapshotStore', 'encode_snapshot', 'decode_snapshot']
