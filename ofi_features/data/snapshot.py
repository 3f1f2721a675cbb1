"""
Order Book Snapshots
====================

A snapshot is the displayed state of the top ``depth`` levels of a limit
order book at one point in time:

    BIDS (highest first)           ASKS (lowest first)
    Price    |  Size               Price    |  Size
    ─────────┼───────              ─────────┼───────
    100.02   |  500   <-- level 0  100.03   |  300   <-- level 0
    100.01   |  1200               100.04   |  800
    100.00   |  2500               100.05   |  1500

OFI is a FLOW measure: every feature is computed from a pair of
consecutive snapshots, never from a single one. Pairing is positional;
the caller guarantees that ``current`` immediately follows ``previous``
in the stream. No gap filling or resampling happens here.

Snapshots are immutable. Sequences passed in are copied into tuples.
"""

from dataclasses import dataclass
from numbers import Integral
from typing import Any, Dict, Iterable, Iterator, Tuple, Union

from ..errors import ContractViolation


Number = Union[int, float]


@dataclass(frozen=True)
class Snapshot:
    """
    Top-of-book state at one timestamp.

    ``timestamp`` is opaque to the library; it is only carried through to
    outputs and log records.
    """
    timestamp: Any
    bid_px: Tuple[float, ...]
    ask_px: Tuple[float, ...]
    bid_sz: Tuple[Number, ...]
    ask_sz: Tuple[Number, ...]

    def __post_init__(self):
        for name in ("bid_px", "ask_px", "bid_sz", "ask_sz"):
            object.__setattr__(self, name, tuple(getattr(self, name)))

        depth = len(self.bid_px)
        if depth < 1:
            raise ContractViolation("snapshot depth must be >= 1")
        lengths = {len(self.ask_px), len(self.bid_sz), len(self.ask_sz)}
        if lengths != {depth}:
            raise ContractViolation(
                f"snapshot {self.timestamp!r}: price/size sequences differ in length "
                f"(bid_px={depth}, ask_px={len(self.ask_px)}, "
                f"bid_sz={len(self.bid_sz)}, ask_sz={len(self.ask_sz)})"
            )

    @classmethod
    def from_levels(
        cls,
        timestamp: Any,
        levels: Iterable[Tuple[float, Number, float, Number]],
    ) -> "Snapshot":
        """
        Build a snapshot from per-level ``(bid_px, bid_sz, ask_px, ask_sz)``
        rows, best level first.
        """
        rows = list(levels)
        return cls(
            timestamp=timestamp,
            bid_px=[row[0] for row in rows],
            bid_sz=[row[1] for row in rows],
            ask_px=[row[2] for row in rows],
            ask_sz=[row[3] for row in rows],
        )

    @property
    def depth(self) -> int:
        return len(self.bid_px)

    @property
    def best_bid_price(self) -> float:
        return self.bid_px[0]

    @property
    def best_ask_price(self) -> float:
        return self.ask_px[0]

    @property
    def mid_price(self) -> float:
        """Mid-point between best bid and best ask."""
        return (self.bid_px[0] + self.ask_px[0]) / 2

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "bid_px": list(self.bid_px),
            "ask_px": list(self.ask_px),
            "bid_sz": list(self.bid_sz),
            "ask_sz": list(self.ask_sz),
        }


@dataclass(frozen=True)
class SnapshotPair:
    """
    Two consecutive snapshots of the same depth.
    """
    previous: Snapshot
    current: Snapshot

    def __post_init__(self):
        if self.previous.depth != self.current.depth:
            raise ContractViolation(
                f"snapshot depths differ: previous={self.previous.depth}, "
                f"current={self.current.depth}"
            )

    @property
    def depth(self) -> int:
        return self.current.depth

    @property
    def timestamp(self) -> Any:
        """Timestamp of the later snapshot, which labels the pair."""
        return self.current.timestamp

    def check_level(self, level: int) -> int:
        """Validate a requested depth ``level`` against the pair depth."""
        if isinstance(level, bool) or not isinstance(level, Integral):
            raise ContractViolation(f"level must be an integer, got {level!r}")
        level = int(level)
        if not 1 <= level <= self.depth:
            raise ContractViolation(
                f"level must be in [1, {self.depth}], got {level}"
            )
        return level


def consecutive_pairs(snapshots: Iterable[Snapshot]) -> Iterator[SnapshotPair]:
    """
    Yield a SnapshotPair for every adjacent pair in stream order.

    n snapshots produce n - 1 pairs; fewer than two produce none.
    """
    previous = None
    for current in snapshots:
        if previous is not None:
            yield SnapshotPair(previous=previous, current=current)
        previous = current

