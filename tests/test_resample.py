"""Tests for the max-pooling block resampler."""

import math

import pytest

from practice_tracks.resample import block_count, resample_levels_max


class TestDegenerateInputs:
    def test_empty_levels(self):
        assert resample_levels_max([], 5, 10) == []

    def test_zero_old_block(self):
        assert resample_levels_max([1, 2], 0, 10) == []

    def test_zero_new_block(self):
        assert resample_levels_max([1, 2], 5, 0) == []

    def test_negative_block(self):
        assert resample_levels_max([1, 2], -5, 10) == []

    def test_non_positive_duration_falls_back_to_old_span(self):
        assert resample_levels_max([1, 2], 5, 5, 0) == [1, 2]
        assert resample_levels_max([1, 2], 5, 5, -3) == [1, 2]


class TestIdentity:
    def test_same_block_same_span(self):
        levels = [0, 1, 2, 3, 2, 1]
        assert resample_levels_max(levels, 5, 5, 30) == levels

    def test_same_block_no_duration(self):
        levels = [3, 0, 1]
        assert resample_levels_max(levels, 4, 4) == levels

    def test_longer_duration_zero_extends(self):
        assert resample_levels_max([1, 3, 0], 5, 5, 20) == [1, 3, 0, 0]

    def test_shorter_duration_truncates(self):
        assert resample_levels_max([1, 3, 2, 2], 5, 5, 9) == [1, 3]

    def test_partial_last_block_kept(self):
        # 12s over 5s blocks -> 0-5, 5-10, 10-12
        assert resample_levels_max([1, 3, 2], 5, 5, 12) == [1, 3, 2]


class TestCoarsening:
    def test_block_5_to_10_over_12s(self):
        # block 0 covers old 0-1 -> max(1, 3); block 1 covers 10-12 -> old 2
        assert resample_levels_max([1, 3, 0], 5, 10, 12) == [3, 0]

    @pytest.mark.parametrize("k", [1, 2, 3, 4])
    def test_integer_factor_takes_group_max(self, k):
        levels = [0, 1, 2, 1, 0, 0, 2, 1, 1, 3, 0]
        out = resample_levels_max(levels, 2, 2 * k)
        expected = [max(levels[i : i + k]) for i in range(0, len(levels), k)]
        assert out == expected

    def test_boundary_touching_block_excluded(self):
        # New block [0, 10) ends exactly where old block 2 begins.
        assert resample_levels_max([0, 0, 3], 5, 10, 15) == [0, 3]

    def test_non_multiple_sizes_take_all_overlaps(self):
        # old 3s blocks: [0,3) [3,6) [6,9) [9,12); new 4s: [0,4) [4,8) [8,12)
        assert resample_levels_max([2, 0, 1, 0], 3, 4) == [2, 1, 1]


class TestRefining:
    def test_coarse_value_replicated(self):
        assert resample_levels_max([2, 1], 10, 5, 20) == [2, 2, 1, 1]

    def test_refine_with_uneven_tail(self):
        # 17s at 10s -> [0,10) [10,17); at 3s, [9,12) straddles both
        assert resample_levels_max([1, 3], 10, 3, 17) == [1, 1, 1, 3, 3, 3]


class TestCeiling:
    def test_ceiling_wins_regardless_of_position(self):
        for pos in range(4):
            levels = [1, 1, 1, 1]
            levels[pos] = 3
            assert resample_levels_max(levels, 1, 4) == [3]

    def test_ceiling_with_trailing_values(self):
        assert resample_levels_max([3, 0, 2, 1], 1, 4) == [3]

    def test_custom_ceiling_still_returns_true_max(self):
        # Short-circuit only at the bound itself; below it the scan continues.
        assert resample_levels_max([2, 5, 4], 1, 3, ceiling=5) == [5]
        assert resample_levels_max([2, 4, 5], 1, 3, ceiling=5) == [5]

    def test_values_above_ceiling_are_not_cut_short(self):
        assert resample_levels_max([5, 7], 1, 2) == [7]
        assert resample_levels_max([3, 7, 1], 1, 3) == [7]


class TestLength:
    @pytest.mark.parametrize(
        "n,old,new,duration",
        [
            (3, 5, 10, 12),
            (10, 1, 3, None),
            (7, 4, 4, 100),
            (1, 30, 7, None),
            (4, 2, 100, None),
            (5, 5, 2, 1),
        ],
    )
    def test_length_invariant(self, n, old, new, duration):
        effective = duration if duration else n * old
        out = resample_levels_max([1] * n, old, new, duration)
        assert len(out) == max(1, math.ceil(effective / new))

    def test_new_block_larger_than_duration_gives_one_block(self):
        assert resample_levels_max([0, 2, 1], 5, 60) == [2]


class TestMissingValues:
    def test_none_counts_as_zero(self):
        assert resample_levels_max([None, 2, None], 5, 5) == [0, 2, 0]

    def test_input_not_mutated(self):
        levels = [1, 2, 3]
        resample_levels_max(levels, 1, 2)
        assert levels == [1, 2, 3]


def test_block_count():
    assert block_count(12, 5) == 3
    assert block_count(10, 5) == 2
    assert block_count(1, 5) == 1
