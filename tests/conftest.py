import numpy as np
import pytest
from omegaconf import OmegaConf

from kinstats.bus.messages import RawFrame
from kinstats.stats.calibration import CalibrationTable

SENTINEL = 2047


@pytest.fixture(scope="session")
def calibration():
    return CalibrationTable.build()


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def mock_hw_cfg():
    return OmegaConf.create({
        "sensor": {"type": "mock", "width": 20, "height": 10, "seed": 3,
                   "shadow_period": 10, "max_shadow": 0.6, "fps": 0},
        "indicator": {"type": "mock"},
    })


def frame_with_invalid(width: int, height: int, invalid: int, code: int = 700, frame_id: int = 0) -> RawFrame:
    """Uniform frame whose first `invalid` pixels are the sentinel."""
    depth = np.full(width * height, code, dtype=np.uint16)
    depth[:invalid] = SENTINEL
    return RawFrame(depth=depth.reshape(height, width), timestamp=0.0, frame_id=frame_id)
