import math

import numpy as np
import pytest

from kinstats.bus.messages import RawFrame
from kinstats.errors import InvalidFrame, NoValidSamples
from kinstats.stats.engine import FrameStatisticsEngine, compute_statistics, is_over_threshold, median_code

from conftest import SENTINEL, frame_with_invalid


def random_frame(rng, width=64, height=48, invalid_fraction=0.3):
    depth = rng.integers(0, SENTINEL, size=(height, width), dtype=np.uint16)
    depth[rng.random((height, width)) < invalid_fraction] = SENTINEL
    return RawFrame(depth=depth)


class TestSmallDomainScenario:
    """Ten pixels, codes 0-2 valid, 3 is the sentinel."""

    @pytest.fixture
    def record(self):
        frame = np.array([0, 0, 1, 1, 1, 2, 3, 3, 0, 1], dtype=np.uint16)
        return compute_statistics(frame, domain_size=4, sentinel_code=3)

    def test_counts(self, record):
        assert record.invalid_count == 2
        assert record.valid_count == 8
        assert list(record.fine_histogram) == [3, 4, 1, 0]
        assert record.total == 6

    def test_mean_and_median(self, record):
        assert record.mean == pytest.approx(0.75)
        assert record.mean_code == 1
        assert record.median == 1

    def test_extremes(self, record):
        assert (record.min_code, record.min_index) == (0, 0)
        assert (record.max_code, record.max_index) == (2, 5)

    def test_coarse_histogram(self, record):
        # bucket = code * 32 // 4
        assert record.coarse_histogram[0] == 3
        assert record.coarse_histogram[8] == 4
        assert record.coarse_histogram[16] == 1
        assert record.coarse_histogram.sum() == 8

    def test_not_over_threshold(self, record):
        assert record.invalid_percent == 20
        assert not record.over_threshold


class TestInvariants:
    @pytest.mark.parametrize("invalid_fraction", [0.0, 0.1, 0.5, 0.95])
    def test_histogram_sums(self, rng, invalid_fraction):
        frame = random_frame(rng, invalid_fraction=invalid_fraction)
        record = compute_statistics(frame)
        assert record.fine_histogram.sum() + record.invalid_count == record.total_pixels
        assert record.coarse_histogram.sum() == record.fine_histogram.sum()
        assert record.fine_histogram[SENTINEL] == 0

    def test_coarse_bucket_mapping(self, rng):
        frame = random_frame(rng)
        record = compute_statistics(frame)
        codes = np.arange(2048)
        expected = np.bincount(codes * 32 // 2048, weights=record.fine_histogram, minlength=32)
        np.testing.assert_array_equal(record.coarse_histogram, expected.astype(int))

    @pytest.mark.parametrize("seed", range(5))
    def test_median_crosses_half(self, seed):
        rng = np.random.default_rng(seed)
        frame = random_frame(rng, width=7 + seed, height=5, invalid_fraction=0.2 * seed / 4)
        record = compute_statistics(frame)
        half = math.ceil(record.valid_count / 2)
        cumulative = np.cumsum(record.fine_histogram)
        assert cumulative[record.median] >= half
        if record.median > 0:
            assert cumulative[record.median - 1] < half

    @pytest.mark.parametrize("seed", range(5))
    def test_mean_between_extremes(self, seed):
        rng = np.random.default_rng(100 + seed)
        record = compute_statistics(random_frame(rng))
        assert record.min_code <= record.mean <= record.max_code
        assert record.min_code <= record.median <= record.max_code

    def test_frame_not_mutated(self, rng):
        frame = random_frame(rng)
        before = frame.depth.copy()
        compute_statistics(frame)
        np.testing.assert_array_equal(frame.depth, before)

    def test_deterministic(self, rng):
        frame = random_frame(rng)
        a = compute_statistics(frame)
        b = compute_statistics(frame)
        assert (a.median, a.mean, a.min_index, a.max_index) == (b.median, b.mean, b.min_index, b.max_index)
        np.testing.assert_array_equal(a.fine_histogram, b.fine_histogram)

    def test_histograms_read_only(self, rng):
        record = compute_statistics(random_frame(rng))
        with pytest.raises(ValueError):
            record.fine_histogram[0] = 1


class TestExtremes:
    def test_first_occurrence_wins(self):
        record = compute_statistics(np.array([5, 1, 1, 9, 9, 4], dtype=np.uint16))
        assert (record.min_code, record.min_index) == (1, 1)
        assert (record.max_code, record.max_index) == (9, 3)

    def test_sentinel_never_max(self):
        record = compute_statistics(np.array([SENTINEL, 10, 20, SENTINEL], dtype=np.uint16))
        assert (record.max_code, record.max_index) == (20, 2)
        assert (record.min_code, record.min_index) == (10, 1)

    def test_pixel_coordinates(self):
        depth = np.full((3, 4), 500, dtype=np.uint16)
        depth[1, 2] = 100
        depth[2, 3] = 900
        engine = FrameStatisticsEngine(width=4, height=3)
        record = engine.compute(RawFrame(depth=depth))
        assert record.min_index == 6
        assert record.min_xy == (2, 1)
        assert record.max_xy == (3, 2)


class TestMedian:
    def test_tie_breaks_low(self):
        assert compute_statistics(np.array([1, 1, 2, 2], dtype=np.uint16)).median == 1

    def test_odd_count(self):
        assert compute_statistics(np.array([3, 1, 2], dtype=np.uint16)).median == 2

    def test_single_valid_pixel(self):
        record = compute_statistics(np.array([SENTINEL, SENTINEL, 42], dtype=np.uint16))
        assert record.median == 42
        assert record.mean == 42.0
        assert record.valid_count == 1

    def test_median_code_helper(self):
        fine = np.array([0, 2, 0, 3, 1])
        assert median_code(fine, 6) == 3


class TestThreshold:
    def test_exactly_35_percent_not_flagged(self):
        engine = FrameStatisticsEngine(width=10, height=10)
        assert not engine.compute(frame_with_invalid(10, 10, 35)).over_threshold

    def test_36_percent_flagged(self):
        engine = FrameStatisticsEngine(width=10, height=10)
        assert engine.compute(frame_with_invalid(10, 10, 36)).over_threshold

    def test_floor_percentage(self):
        # 71 / 200 = 35.5%, which floors to 35 and is not flagged
        assert not is_over_threshold(71, 200, 35)
        assert is_over_threshold(72, 200, 35)

    def test_custom_threshold(self):
        engine = FrameStatisticsEngine(width=10, height=10, degradation_threshold_percent=10)
        assert engine.compute(frame_with_invalid(10, 10, 11)).over_threshold


class TestErrors:
    def test_all_sentinel(self):
        engine = FrameStatisticsEngine(width=4, height=2)
        with pytest.raises(NoValidSamples) as excinfo:
            engine.compute(frame_with_invalid(4, 2, 8))
        assert excinfo.value.invalid_count == 8
        assert excinfo.value.total_pixels == 8
        assert excinfo.value.over_threshold
        assert excinfo.value.invalid_percent == 100

    def test_wrong_length(self):
        engine = FrameStatisticsEngine(width=4, height=2)
        with pytest.raises(InvalidFrame):
            engine.compute(np.zeros(7, dtype=np.uint16))

    def test_wrong_shape(self):
        engine = FrameStatisticsEngine(width=4, height=2)
        with pytest.raises(InvalidFrame):
            engine.compute(np.zeros((4, 2), dtype=np.uint16))

    def test_code_above_domain(self):
        with pytest.raises(InvalidFrame):
            compute_statistics(np.array([0, 1, 4], dtype=np.uint16), domain_size=4, sentinel_code=3)

    def test_negative_code(self):
        with pytest.raises(InvalidFrame):
            compute_statistics(np.array([0, -1, 2], dtype=np.int16), domain_size=4, sentinel_code=3)

    def test_three_dimensional_frame(self):
        engine = FrameStatisticsEngine(width=4, height=2)
        with pytest.raises(InvalidFrame):
            engine.compute(np.zeros((2, 2, 2), dtype=np.uint16))

    def test_empty_frame(self):
        with pytest.raises(InvalidFrame):
            compute_statistics(np.zeros(0, dtype=np.uint16))

    def test_float_samples_rejected(self):
        with pytest.raises(InvalidFrame):
            compute_statistics(np.array([0.0, 1.0, 2.0]), domain_size=4, sentinel_code=3)

    def test_bad_configuration(self):
        with pytest.raises(ValueError):
            FrameStatisticsEngine(width=4, height=2, domain_size=4, sentinel_code=4)
        with pytest.raises(ValueError):
            FrameStatisticsEngine(width=0, height=2)


def test_from_config():
    from omegaconf import OmegaConf

    cfg = OmegaConf.create({"stats": {"domain_size": 1024, "sentinel_code": 1023,
                                      "degradation_threshold_percent": 20, "coarse_buckets": 16}})
    engine = FrameStatisticsEngine.from_config(cfg, width=8, height=6)
    assert engine.domain_size == 1024
    assert engine.sentinel_code == 1023
    assert engine.threshold_percent == 20
    assert engine.coarse_buckets == 16
    assert engine.total_pixels == 48
