"""
Shared fixtures for OFI feature tests.
"""

import numpy as np
import pytest

from ofi_features import OFIConfig, Snapshot, configure_logging


def make_snapshot(timestamp, bids, asks):
    """
    Build a snapshot from ``[(price, size), ...]`` per side, best first.
    """
    return Snapshot(
        timestamp=timestamp,
        bid_px=[px for px, _ in bids],
        bid_sz=[sz for _, sz in bids],
        ask_px=[px for px, _ in asks],
        ask_sz=[sz for _, sz in asks],
    )


def make_stream(n, depth, seed=7, tick=0.01):
    """
    Random-walk book stream with integer sizes and prices on a tick grid,
    so unchanged, improved and worsened price branches all occur.
    """
    rng = np.random.default_rng(seed)
    best_bid_ticks = 10000
    snapshots = []
    for t in range(n):
        best_bid_ticks += int(rng.integers(-1, 2))
        spread_ticks = int(rng.integers(1, 3))
        bid_px = [round((best_bid_ticks - i) * tick, 2) for i in range(depth)]
        ask_px = [round((best_bid_ticks + spread_ticks + i) * tick, 2) for i in range(depth)]
        bid_sz = [int(s) for s in rng.integers(1, 200, size=depth)]
        ask_sz = [int(s) for s in rng.integers(1, 200, size=depth)]
        snapshots.append(Snapshot(t, bid_px, ask_px, bid_sz, ask_sz))
    return snapshots


@pytest.fixture
def snapshot_factory():
    return make_snapshot


@pytest.fixture
def book_stream():
    return make_stream(60, depth=3)


@pytest.fixture
def deep_stream():
    return make_stream(400, depth=10, seed=11)


@pytest.fixture(autouse=True)
def console_logging_at_info():
    """Pipelines apply their config to the shared logger; reset it per test."""
    yield
    configure_logging(OFIConfig(log_level="INFO", structured_logs=False))
