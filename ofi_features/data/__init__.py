"""
Data module for OFI feature construction.

Snapshot records supplied by the feed parser, and pairing of
consecutive snapshots.
"""

from .snapshot import (
    Snapshot,
    SnapshotPair,
    consecutive_pairs,
)

__all__ = [
    "Snapshot",
    "SnapshotPair",
    "consecutive_pairs",
]
