"""Configuration dataclasses and utilities for depth refinement."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional


@dataclass
class IOConfig:
    depth_path: Path
    guide_path: Path
    output_root: Path
    depth_scale: float = 1.0
    guide_grayscale: bool = False


@dataclass
class BilateralConfig:
    sigma: float = 2.0
    kernel_size: int = 4
    workers: int = 1
    band_rows: Optional[int] = None


@dataclass
class MedianConfig:
    enabled: bool = False
    window_size: int = 3


@dataclass
class OutputConfig:
    name: str = "depth_filtered"
    save_png: bool = True


@dataclass
class LoggingConfig:
    level: str = "INFO"
    log_dir: Optional[Path] = None


@dataclass
class RefineConfig:
    io: IOConfig
    bilateral: BilateralConfig = field(default_factory=BilateralConfig)
    median: MedianConfig = field(default_factory=MedianConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @staticmethod
    def from_dict(config: Dict[str, Any], base_dir: Optional[Path] = None) -> "RefineConfig":
        """Build a RefineConfig from nested dictionaries."""
        io_cfg = dict(config.get("io") or {})
        logging_cfg = dict(config.get("logging") or {})

        def resolve_relative_to_base(value: Optional[str]) -> Optional[Path]:
            if value is None:
                return None
            path = Path(value)
            if path.is_absolute() or base_dir is None:
                return path
            return base_dir / path

        for key in ("depth_path", "guide_path", "output_root"):
            if key not in io_cfg:
                raise ValueError(f"Missing required config key io.{key}")
            io_cfg[key] = resolve_relative_to_base(io_cfg[key])
        if "log_dir" in logging_cfg:
            logging_cfg["log_dir"] = resolve_relative_to_base(logging_cfg.get("log_dir"))

        return RefineConfig(
            io=IOConfig(**io_cfg),
            bilateral=BilateralConfig(**(config.get("bilateral") or {})),
            median=MedianConfig(**(config.get("median") or {})),
            output=OutputConfig(**(config.get("output") or {})),
            logging=LoggingConfig(**logging_cfg),
        )


def load_yaml_dict(path: Path) -> Dict[str, Any]:
    """Read a YAML file into a dictionary (empty files give ``{}``)."""
    import yaml

    with Path(path).open("r", encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


def load_yaml_config(path: Path) -> RefineConfig:
    """Load a YAML configuration file into a RefineConfig."""
    path = Path(path)
    return RefineConfig.from_dict(load_yaml_dict(path), base_dir=path.parent)
