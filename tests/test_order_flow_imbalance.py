"""
Tests for level deltas, raw OFI, best-level and deeper-level OFI.
"""

import logging

import numpy as np
import pytest

from ofi_features import (
    BestLevelOFI,
    ContractViolation,
    DeeperLevelOFI,
    Snapshot,
    SnapshotPair,
    consecutive_pairs,
    level_delta,
    level_deltas,
    raw_ofi,
)


def best_pair(prev, curr):
    """prev/curr are (bid_px, bid_sz, ask_px, ask_sz)."""
    return SnapshotPair(
        Snapshot.from_levels(0, [prev]),
        Snapshot.from_levels(1, [curr]),
    )


class TestLevelDelta:
    """The per-level bid/ask branch table."""

    def test_bid_size_change_at_same_price(self):
        pair = best_pair((100.0, 10, 101.0, 5), (100.0, 15, 101.0, 5))
        assert level_delta(pair, 0) == (5.0, 0.0)

    def test_bid_price_improved_counts_current_size(self):
        pair = best_pair((100.0, 10, 101.0, 5), (100.5, 3, 101.0, 8))
        bid, ask = level_delta(pair, 0)
        assert bid == 3.0
        assert ask == 3.0

    def test_bid_price_worsened_uses_current_size(self):
        pair = best_pair((100.0, 10, 101.0, 5), (99.5, 6, 101.0, 5))
        bid, _ = level_delta(pair, 0)
        assert bid == -6.0

    def test_ask_price_improved_is_positive_contribution(self):
        pair = best_pair((100.0, 10, 101.0, 5), (100.0, 10, 100.9, 7))
        _, ask = level_delta(pair, 0)
        assert ask == 7.0
        assert raw_ofi(pair, 1)[0] == -7.0

    def test_ask_price_receded_is_negative_contribution(self):
        pair = best_pair((100.0, 10, 101.0, 5), (100.0, 10, 101.2, 4))
        _, ask = level_delta(pair, 0)
        assert ask == -4.0
        assert raw_ofi(pair, 1)[0] == 4.0

    def test_ask_size_change_at_same_price(self):
        pair = best_pair((100.0, 10, 101.0, 5), (100.0, 10, 101.0, 9))
        assert level_delta(pair, 0) == (0.0, 4.0)

    @pytest.mark.parametrize("index", [-1, 1, 2])
    def test_index_out_of_range(self, index):
        pair = best_pair((100.0, 10, 101.0, 5), (100.0, 10, 101.0, 5))
        with pytest.raises(ContractViolation):
            level_delta(pair, index)

    def test_vectorized_matches_single_level(self, book_stream):
        for pair in consecutive_pairs(book_stream):
            bid, ask = level_deltas(pair, 3)
            for i in range(3):
                assert (bid[i], ask[i]) == level_delta(pair, i)


class TestRawOFI:
    """Raw multi-level OFI vector."""

    def test_unchanged_book_gives_zero(self, book_stream):
        snap = book_stream[0]
        pair = SnapshotPair(snap, snap)
        np.testing.assert_array_equal(raw_ofi(pair, 3), np.zeros(3))

    def test_unchanged_level_is_zero_while_others_move(self, snapshot_factory):
        prev = snapshot_factory(0, [(100.0, 10), (99.0, 20)], [(101.0, 5), (102.0, 15)])
        curr = snapshot_factory(1, [(100.0, 10), (99.0, 25)], [(101.0, 5), (102.0, 15)])
        ofi = raw_ofi(SnapshotPair(prev, curr), 2)
        assert ofi[0] == 0.0
        assert ofi[1] == 5.0

    def test_length_and_order(self, snapshot_factory):
        prev = snapshot_factory(0, [(100.0, 10), (99.0, 20), (98.0, 30)],
                                [(101.0, 5), (102.0, 15), (103.0, 25)])
        curr = snapshot_factory(1, [(100.0, 11), (99.0, 22), (98.0, 33)],
                                [(101.0, 5), (102.0, 15), (103.0, 25)])
        pair = SnapshotPair(prev, curr)
        np.testing.assert_array_equal(raw_ofi(pair, 3), [1.0, 2.0, 3.0])
        np.testing.assert_array_equal(raw_ofi(pair, 2), [1.0, 2.0])

    @pytest.mark.parametrize("level", [0, 4])
    def test_level_out_of_range(self, book_stream, level):
        pair = SnapshotPair(book_stream[0], book_stream[1])
        with pytest.raises(ContractViolation):
            raw_ofi(pair, level)

    def test_fractional_sizes(self):
        pair = best_pair((100.0, 1.25, 101.0, 0.5), (100.0, 2.0, 101.0, 0.25))
        assert raw_ofi(pair, 1)[0] == pytest.approx(0.75 + 0.25)

    def test_numpy_integer_level(self, book_stream):
        pair = SnapshotPair(book_stream[0], book_stream[1])
        np.testing.assert_array_equal(raw_ofi(pair, np.int64(2)), raw_ofi(pair, 2))
        assert level_delta(pair, np.int32(1)) == level_delta(pair, 1)


class TestBestLevelOFI:
    """Best-level OFI scalar."""

    def test_size_increase_at_best_bid(self):
        pair = best_pair((100.0, 10, 101.0, 5), (100.0, 15, 101.0, 5))
        assert BestLevelOFI().compute(pair) == 5.0

    def test_price_improvement_scenario(self):
        pair = best_pair((100.0, 10, 101.0, 5), (100.5, 12, 101.0, 5))
        assert BestLevelOFI().compute(pair) == 12.0

    def test_returns_python_float(self):
        pair = best_pair((100.0, 10, 101.0, 5), (100.0, 15, 101.0, 5))
        assert isinstance(BestLevelOFI().compute(pair), float)

    def test_matches_level_zero_of_raw_vector(self, deep_stream):
        calc = BestLevelOFI()
        for pair in consecutive_pairs(deep_stream[:50]):
            assert calc.compute(pair) == raw_ofi(pair, 10)[0]


class TestDeeperLevelOFI:
    """Multi-level OFI with a single depth normalizer."""

    def test_worked_example(self, snapshot_factory):
        prev = snapshot_factory(0, [(100.0, 10), (99.0, 20)], [(101.0, 5), (102.0, 15)])
        curr = snapshot_factory(1, [(100.0, 15), (99.0, 20)], [(101.0, 5), (102.0, 10)])
        pair = SnapshotPair(prev, curr)

        calc = DeeperLevelOFI()
        # depth_0 = 8.75, depth_1 = 16.25
        assert calc.average_depth(pair, 2) == pytest.approx(12.5)
        np.testing.assert_allclose(calc.compute(pair, 2), [0.4, 0.4])

    def test_single_shared_normalizer(self, book_stream):
        calc = DeeperLevelOFI()
        for pair in consecutive_pairs(book_stream):
            normalized = calc.compute(pair, 3)
            np.testing.assert_allclose(
                normalized * calc.average_depth(pair, 3), raw_ofi(pair, 3)
            )

    def test_scale_covariance(self, book_stream):
        def doubled(snap):
            return Snapshot(
                snap.timestamp, snap.bid_px, snap.ask_px,
                [2 * s for s in snap.bid_sz], [2 * s for s in snap.ask_sz],
            )

        calc = DeeperLevelOFI()
        for pair in consecutive_pairs(book_stream):
            scaled = SnapshotPair(doubled(pair.previous), doubled(pair.current))
            np.testing.assert_allclose(raw_ofi(scaled, 3), 2 * raw_ofi(pair, 3))
            np.testing.assert_allclose(calc.compute(scaled, 3), calc.compute(pair, 3))

    def test_zero_depth_is_not_clamped(self, caplog):
        pair = best_pair((100.0, 0, 101.0, 0), (100.5, 0, 101.0, 0))
        with caplog.at_level(logging.WARNING, logger="ofi_features"):
            result = DeeperLevelOFI().compute(pair, 1)
        assert not np.isfinite(result[0])
        assert "Zero average depth" in caplog.text

    def test_level_out_of_range(self, book_stream):
        pair = SnapshotPair(book_stream[0], book_stream[1])
        with pytest.raises(ContractViolation):
            DeeperLevelOFI().compute(pair, 5)

    def test_numpy_integer_level(self, book_stream):
        pair = SnapshotPair(book_stream[0], book_stream[1])
        calc = DeeperLevelOFI()
        np.testing.assert_array_equal(calc.compute(pair, np.int64(3)), calc.compute(pair, 3))

    def test_zero_depth_warning_carries_book_level(self, caplog):
        pair = best_pair((100.0, 0, 101.0, 0), (100.0, 0, 101.0, 0))
        with caplog.at_level(logging.WARNING, logger="ofi_features"):
            DeeperLevelOFI().compute(pair, 1)
        record = next(r for r in caplog.records if "Zero average depth" in r.getMessage())
        assert record.levelno == logging.WARNING
        assert record.extra_data == {"book_level": 1}
