import pytest

from kinstats.config import load_config


def test_defaults():
    cfg = load_config()
    assert cfg.stats.domain_size == 2048
    assert cfg.stats.sentinel_code == 2047
    assert cfg.stats.degradation_threshold_percent == 35
    assert cfg.stats.coarse_buckets == 32
    assert cfg.display_mode == "verbose"
    assert cfg.hardware.sensor.type == "kinect"
    assert cfg.hardware.sensor.tilt_degrees == -5


def test_hardware_override():
    cfg = load_config(hardware_override="mock")
    assert cfg.hardware.sensor.type == "mock"
    assert cfg.hardware.indicator.type == "mock"


def test_unknown_hardware_profile():
    with pytest.raises(ValueError):
        load_config(hardware_override="toaster")


def test_cli_overrides_win(tmp_path):
    extra = tmp_path / "extra.yaml"
    extra.write_text("stats:\n  degradation_threshold_percent: 10\ndisplay_mode: median\n")
    cfg = load_config(
        config_path=str(extra),
        hardware_override="mock",
        cli_overrides=["stats.degradation_threshold_percent=20", "hardware.sensor.width=32"],
    )
    assert cfg.stats.degradation_threshold_percent == 20
    assert cfg.display_mode == "median"
    assert cfg.hardware.sensor.width == 32


def test_configs_ship_inside_package():
    import kinstats
    from pathlib import Path

    from kinstats.config import CONFIGS_DIR

    assert CONFIGS_DIR.parent == Path(kinstats.__file__).resolve().parent
    assert (CONFIGS_DIR / "default.yaml").exists()
    assert (CONFIGS_DIR / "hardware" / "mock.yaml").exists()
