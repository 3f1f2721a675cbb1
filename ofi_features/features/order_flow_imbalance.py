"""
Order Flow Imbalance (OFI) Features
===================================

Order Flow Imbalance measures the net buying vs selling pressure implied
by changes in the displayed order book between two snapshots.

THEORETICAL BACKGROUND:
=======================

OFI captures the CHANGE in order book state, not the level. For each book
level m, the bid and ask contributions between snapshots t-1 and t are
(Cont, Kukanov, Stoikov 2014; Cont, Cucuringu, Zhang 2023):

    Bid contribution e^B_m:
    - bid price UP:        +q^B_m(t)
    - bid price unchanged:  q^B_m(t) - q^B_m(t-1)
    - bid price DOWN:      -q^B_m(t)

    Ask contribution e^A_m:
    - ask price UP:        -q^A_m(t)
    - ask price unchanged:  q^A_m(t) - q^A_m(t-1)
    - ask price DOWN:      +q^A_m(t)

    OFI_m = e^B_m - e^A_m

NOTE: the "price DOWN" bid branch (and the "price UP" ask branch) uses the
size CURRENTLY displayed at the worse price, not the size that was removed
from the old price. Downstream feature values depend on this exact rule.

FEATURES:
- Raw OFI: the per-level vector above, index 0 = best level
- Best-level OFI: raw OFI at level 0 only
- Deeper-level OFI: raw OFI vector scaled by ONE average depth scalar
  shared by every level

INTUITION:
- Positive OFI: more buying pressure than selling -> price likely to rise
- Negative OFI: more selling pressure than buying -> price likely to fall
"""

from numbers import Integral
from typing import Tuple

import numpy as np

from ..data.snapshot import SnapshotPair
from ..errors import ContractViolation
from ..infra.logging import get_logger, LogCategory


logger = get_logger()


def _side_arrays(pair: SnapshotPair, level: int):
    prev, curr = pair.previous, pair.current
    return (
        np.asarray(prev.bid_px[:level], dtype=float),
        np.asarray(curr.bid_px[:level], dtype=float),
        np.asarray(prev.bid_sz[:level], dtype=float),
        np.asarray(curr.bid_sz[:level], dtype=float),
        np.asarray(prev.ask_px[:level], dtype=float),
        np.asarray(curr.ask_px[:level], dtype=float),
        np.asarray(prev.ask_sz[:level], dtype=float),
        np.asarray(curr.ask_sz[:level], dtype=float),
    )


def level_deltas(pair: SnapshotPair, level: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Signed bid and ask contributions for levels ``0..level-1``.

    Returns:
        (bid_contrib, ask_contrib), each a float array of length ``level``
    """
    level = pair.check_level(level)
    (prev_bid_px, bid_px, prev_bid_sz, bid_sz,
     prev_ask_px, ask_px, prev_ask_sz, ask_sz) = _side_arrays(pair, level)

    bid = np.where(
        bid_px > prev_bid_px, bid_sz,
        np.where(bid_px == prev_bid_px, bid_sz - prev_bid_sz, -bid_sz)
    )
    ask = np.where(
        ask_px > prev_ask_px, -ask_sz,
        np.where(ask_px == prev_ask_px, ask_sz - prev_ask_sz, ask_sz)
    )
    return bid, ask


def level_delta(pair: SnapshotPair, index: int) -> Tuple[float, float]:
    """Bid and ask contribution at a single level ``index`` (0 = best)."""
    if isinstance(index, bool) or not isinstance(index, Integral) or not 0 <= index < pair.depth:
        raise ContractViolation(
            f"level index must be in [0, {pair.depth}), got {index!r}"
        )
    index = int(index)
    bid, ask = level_deltas(pair, index + 1)
    return float(bid[index]), float(ask[index])


def raw_ofi(pair: SnapshotPair, level: int) -> np.ndarray:
    """
    Raw multi-level OFI: ``bid_contrib - ask_contrib`` per level.

    Column order is stable (index 0 = best level); PCA training and depth
    normalization both rely on it.
    """
    bid, ask = level_deltas(pair, level)
    return bid - ask


class BestLevelOFI:
    """
    OFI at the best bid/ask only.

    Stateless; one scalar per snapshot pair.
    """

    def compute(self, pair: SnapshotPair) -> float:
        value = float(raw_ofi(pair, 1)[0])
        logger.log_feature("best_level_ofi", pair.timestamp, value)
        return value


class DeeperLevelOFI:
    """
    Multi-level OFI normalized by average displayed depth.

    A single normalizer is shared by all levels:

        depth_i   = (q^B_i(t) + q^A_i(t) + q^B_i(t-1) + q^A_i(t-1)) / 4
        avg_depth = mean(depth_0 .. depth_{level-1})
        ofi_i     = raw_ofi_i / avg_depth

    Zero average depth is not clamped: entries come back as +/-inf (or nan
    for a zero numerator) and a warning is logged.
    """

    def average_depth(self, pair: SnapshotPair, level: int) -> float:
        level = pair.check_level(level)
        prev, curr = pair.previous, pair.current
        depth = (
            np.asarray(curr.bid_sz[:level], dtype=float)
            + np.asarray(curr.ask_sz[:level], dtype=float)
            + np.asarray(prev.bid_sz[:level], dtype=float)
            + np.asarray(prev.ask_sz[:level], dtype=float)
        ) / 4
        return float(depth.sum() / level)

    def compute(self, pair: SnapshotPair, level: int) -> np.ndarray:
        ofi = raw_ofi(pair, level)
        avg_depth = self.average_depth(pair, level)

        if avg_depth == 0:
            logger.warning(
                f"Zero average depth at {pair.timestamp!r}; deeper-level OFI is non-finite",
                category=LogCategory.FEATURE,
                book_level=level,
            )

        with np.errstate(divide="ignore", invalid="ignore"):
            normalized = ofi / avg_depth

        logger.log_feature("deeper_level_ofi", pair.timestamp, normalized.tolist())
        return normalized
