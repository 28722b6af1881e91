import numpy as np
import pytest
from charon.continuous import analyze, bucket_of, subindex
from charon.entropy import h
from charon.features import Numeric


def _numeric(values, labels):
    return Numeric(np.asarray(values, dtype=float), np.asarray(labels))


def test_analyze_finds_threshold_between_classes():
    cond, splits = analyze(2, _numeric([1.0, 2.0, 3.0, 4.0], [0, 0, 1, 1]))
    assert cond == pytest.approx(0.0)
    assert splits == [2.5]


def test_analyze_unsorted_values():
    cond, splits = analyze(2, _numeric([4.0, 1.0, 3.0, 2.0], [1, 0, 1, 0]))
    assert cond == pytest.approx(0.0)
    assert splits == [2.5]


def test_analyze_never_separates_equal_values():
    cond, splits = analyze(2, _numeric([1.0, 1.0, 2.0, 2.0], [0, 1, 0, 1]))
    # the only candidate sits between 1 and 2 and carries no information
    assert splits == [1.5]
    assert cond == pytest.approx(1.0)


def test_analyze_single_distinct_value_reports_parent_entropy():
    cond, splits = analyze(2, _numeric([1.0, 1.0, 1.0], [0, 1, 0]))
    assert splits == []
    assert cond == pytest.approx(h([2, 1]))


def test_analyze_ignores_missing_values_when_searching():
    cond, splits = analyze(2, _numeric([np.nan, 1.0, np.nan], [0, 1, 1]))
    assert splits == []
    assert cond == pytest.approx(h([1, 2]))

    cond, splits = analyze(2, _numeric([1.0, 2.0, np.nan, 3.0, 4.0], [0, 0, 1, 1, 1]))
    assert splits == [2.5]
    assert cond == pytest.approx(0.0)


def test_analyze_refines_into_multiple_buckets():
    values = np.arange(1.0, 13.0)
    labels = [0] * 4 + [1] * 4 + [2] * 4
    cond, splits = analyze(3, _numeric(values, labels))
    assert splits == [4.5, 8.5]
    assert cond == pytest.approx(0.0)


def test_analyze_respects_max_splits():
    values = np.arange(1.0, 13.0)
    labels = [0] * 4 + [1] * 4 + [2] * 4
    cond, splits = analyze(3, _numeric(values, labels), max_splits=1)
    assert splits == [4.5]
    assert cond == pytest.approx(8 / 12)


def test_subindex_buckets_scenario():
    feature = _numeric([1.0, 2.0, 3.0, 4.0], [0, 0, 1, 1])
    buckets = subindex(feature, np.array([0, 1, 2, 3]), [2.5])
    assert sorted(buckets) == [0, 1]
    assert buckets[0].tolist() == [0, 1]
    assert buckets[1].tolist() == [2, 3]


def test_subindex_keeps_empty_buckets():
    feature = _numeric([1.0, 2.0, 3.0, 4.0], [0, 0, 1, 1])
    buckets = subindex(feature, np.array([0, 1]), [2.5, 3.5])
    assert len(buckets) == 3
    assert buckets[0].tolist() == [0, 1]
    assert buckets[1].size == 0
    assert buckets[2].size == 0


def test_subindex_preserves_filter_order_and_drops_missing():
    feature = _numeric([1.0, 2.0, 3.0, 4.0], [0, 0, 1, 1])
    buckets = subindex(feature, np.array([3, 0, 2, 1]), [2.5])
    assert buckets[0].tolist() == [0, 1]
    assert buckets[1].tolist() == [3, 2]

    feature = _numeric([1.0, np.nan, 3.0], [0, 1, 1])
    buckets = subindex(feature, np.array([0, 1, 2]), [2.0])
    assert buckets[0].tolist() == [0]
    assert buckets[1].tolist() == [2]


def test_bucket_of():
    assert bucket_of(2.0, [2.5]) == 0
    assert bucket_of(2.5, [2.5]) == 0
    assert bucket_of(3.0, [2.5]) == 1
    assert bucket_of(5.0, [1.0, 2.0, 3.0]) == 3


def test_threshold_between_adjacent_floats_separates_them():
    below = np.nextafter(1.0, 0.0)
    feature = _numeric([below, 1.0], [0, 1])
    cond, splits = analyze(2, feature)
    assert splits == [below]
    assert cond == pytest.approx(0.0)
    buckets = subindex(feature, np.array([0, 1]), splits)
    assert buckets[0].tolist() == [0]
    assert buckets[1].tolist() == [1]
