"""Configuration loader using OmegaConf."""

from __future__ import annotations

from pathlib import Path
from omegaconf import OmegaConf, DictConfig

# Shipped inside the package so a regular (non-editable) install finds them
CONFIGS_DIR = Path(__file__).resolve().parent / "configs"


def load_config(
    config_path: str | None = None,
    hardware_override: str | None = None,
    cli_overrides: list[str] | None = None,
    configs_dir: Path | None = None,
) -> DictConfig:
    """Load and merge configuration.

    Priority (highest wins): CLI overrides > extra config file > hardware override > default.yaml
    """
    configs_dir = Path(configs_dir) if configs_dir is not None else CONFIGS_DIR
    base = OmegaConf.load(configs_dir / "default.yaml")

    # default.yaml names the hardware sub-config by path
    ref = base.get("hardware")
    if isinstance(ref, str):
        sub_path = configs_dir / ref
        if not sub_path.exists():
            raise ValueError(f"Hardware config not found: {sub_path}")
        base.hardware = OmegaConf.load(sub_path)

    # --hardware mock selects configs/hardware/mock.yaml
    if hardware_override:
        hw_path = configs_dir / "hardware" / f"{hardware_override}.yaml"
        if not hw_path.exists():
            raise ValueError(f"Unknown hardware profile: {hardware_override}")
        base.hardware = OmegaConf.merge(base.hardware, OmegaConf.load(hw_path))

    if config_path:
        base = OmegaConf.merge(base, OmegaConf.load(config_path))

    # Dot-notation overrides, e.g. stats.degradation_threshold_percent=20
    if cli_overrides:
        base = OmegaConf.merge(base, OmegaConf.from_dotlist(cli_overrides))

    return base
