"""Hardware factory functions."""

from omegaconf import DictConfig

from kinstats.hardware.base import DepthSensor, Indicator, NullIndicator


def create_sensor(cfg: DictConfig) -> DepthSensor:
    """Create a depth sensor based on the hardware config."""
    sensor_type = cfg.sensor.type
    if sensor_type == "kinect":
        from kinstats.hardware.kinect import KinectDepthSensor
        return KinectDepthSensor(cfg.sensor)
    elif sensor_type == "mock":
        from kinstats.hardware.mock import MockDepthSensor
        return MockDepthSensor(cfg.sensor)
    elif sensor_type == "replay":
        from kinstats.hardware.replay import ReplayDepthSensor
        return ReplayDepthSensor(cfg.sensor)
    else:
        raise ValueError(f"Unknown sensor type: {sensor_type}")


def create_indicator(cfg: DictConfig, sensor: DepthSensor) -> Indicator:
    """Create a status indicator based on the hardware config.

    The Kinect LED lives on the same device handle as the depth stream, so it
    needs the sensor it belongs to.
    """
    ind_type = cfg.get("indicator", {}).get("type", "none")
    if ind_type == "kinect":
        from kinstats.hardware.kinect import KinectDepthSensor, KinectLed
        if not isinstance(sensor, KinectDepthSensor):
            raise ValueError("Kinect indicator requires a kinect sensor")
        return KinectLed(sensor)
    elif ind_type == "mock":
        from kinstats.hardware.mock import MockIndicator
        return MockIndicator()
    elif ind_type == "none":
        return NullIndicator()
    else:
        raise ValueError(f"Unknown indicator type: {ind_type}")
