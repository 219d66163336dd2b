import math

import numpy as np
import pytest
from omegaconf import OmegaConf

from kinstats.stats.calibration import CalibrationTable


def is_non_decreasing(values: np.ndarray) -> bool:
    # Elementwise comparison so that inf >= inf holds
    return bool(np.all(values[1:] >= values[:-1]))


def test_covers_domain(calibration):
    assert len(calibration) == 2048
    assert len(CalibrationTable.build(domain_size=4)) == 4


def test_default_curve_monotonic(calibration):
    assert is_non_decreasing(calibration.values)


@pytest.mark.parametrize("k,c,d", [
    (0.1236, 2842.5, 1.1863),
    (1.0, 1000.0, -0.5),
    (0.5, 5000.0, 0.0),
    (2.0, 900.0, -2.0),
])
def test_monotonic_for_any_constants(k, c, d):
    table = CalibrationTable.build(domain_size=2048, k=k, c=c, d=d)
    assert is_non_decreasing(table.values)
    finite = table.values[np.isfinite(table.values)]
    assert np.all(np.diff(finite) > 0)


def test_matches_curve_below_pole(calibration):
    for code in (0, 300, 500, 1000):
        assert calibration[code] == pytest.approx(0.1236 * math.tan(code / 2842.5 + 1.1863))


def test_codes_past_pole_are_infinite(calibration):
    pole = math.ceil((math.pi / 2 - 1.1863) * 2842.5)
    assert math.isfinite(calibration[pole - 1])
    assert calibration[pole] == math.inf
    assert calibration[2046] == math.inf


def test_read_only(calibration):
    with pytest.raises(ValueError):
        calibration.values[0] = 0.0


@pytest.mark.parametrize("k,c", [(0.0, 2842.5), (-1.0, 2842.5), (0.1236, 0.0)])
def test_rejects_non_monotonic_constants(k, c):
    with pytest.raises(ValueError):
        CalibrationTable.build(k=k, c=c)


def test_from_config():
    cfg = OmegaConf.create({"stats": {"domain_size": 1024},
                            "calibration": {"k": 1.0, "c": 1000.0, "d": 0.0}})
    table = CalibrationTable.from_config(cfg)
    assert len(table) == 1024
    assert table.distance(0) == 0.0
    assert table.distance(500) == pytest.approx(math.tan(0.5))
