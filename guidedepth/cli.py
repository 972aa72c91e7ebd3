"""Command-line entry point for guided depth refinement."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Dict, Iterable, Optional

from guidedepth.config import RefineConfig, load_yaml_dict
from guidedepth.pipeline import DepthRefiner
from guidedepth.utils import logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Denoise and upsample a depth map with a joint bilateral filter guided by an image."
    )
    parser.add_argument("--config", type=Path, default=None, help="Path to YAML config.")
    parser.add_argument("--depth", type=Path, help="Input depth map (.npy or 16-bit PNG/TIFF).")
    parser.add_argument("--guide", type=Path, help="Guide image (color or grayscale).")
    parser.add_argument("--output", type=Path, help="Output directory.")
    parser.add_argument("--sigma", type=float, help="Spatial Gaussian sigma in guide pixels.")
    parser.add_argument("--kernel-size", type=int, help="Half-width of the filter window.")
    parser.add_argument("--workers", type=int, help="Threads used for row bands.")
    parser.add_argument(
        "--median-window",
        type=int,
        help="Enable a median pre-filter with this window size.",
    )
    parser.add_argument("--depth-scale", type=float, help="Multiplier applied to stored depth values.")
    parser.add_argument("--grayscale", action="store_true", help="Load the guide as a single channel.")
    parser.add_argument("--no-png", action="store_true", help="Skip the 16-bit PNG preview.")
    parser.add_argument("--log-level", type=str, help="Console log level (DEBUG, INFO, ...).")
    return parser


def _build_config(args: argparse.Namespace, parser: argparse.ArgumentParser) -> RefineConfig:
    raw: Dict[str, dict] = {}
    base_dir: Optional[Path] = None
    if args.config is not None:
        raw = dict(load_yaml_dict(args.config))
        base_dir = args.config.parent

    io_cfg = dict(raw.get("io") or {})
    for key, value in (("depth_path", args.depth), ("guide_path", args.guide), ("output_root", args.output)):
        if value is not None:
            io_cfg[key] = value.resolve()
    missing = [key for key in ("depth_path", "guide_path", "output_root") if key not in io_cfg]
    if missing:
        parser.error("missing input/output paths (use --depth, --guide, --output or --config): " + ", ".join(missing))
    raw["io"] = io_cfg

    config = RefineConfig.from_dict(raw, base_dir=base_dir)

    if args.depth_scale is not None:
        config.io.depth_scale = args.depth_scale
    if args.grayscale:
        config.io.guide_grayscale = True
    if args.sigma is not None:
        config.bilateral.sigma = args.sigma
    if args.kernel_size is not None:
        config.bilateral.kernel_size = args.kernel_size
    if args.workers is not None:
        config.bilateral.workers = args.workers
    if args.median_window is not None:
        config.median.enabled = True
        config.median.window_size = args.median_window
    if args.no_png:
        config.output.save_png = False
    if args.log_level is not None:
        config.logging.level = args.log_level
    return config


def main(argv: Optional[Iterable[str]] = None) -> Dict[str, object]:
    parser = build_parser()
    args = parser.parse_args(argv)
    config = _build_config(args, parser)

    logger.configure(config.logging.level, config.logging.log_dir)
    log = logger.get_logger("cli")
    try:
        return DepthRefiner(config).run()
    except Exception:
        log.exception("depth refinement failed")
        raise


if __name__ == "__main__":  # pragma: no cover
    main()
