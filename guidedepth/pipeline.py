"""Refinement of one depth map against its guide image."""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass
from typing import Dict, Optional

import numpy as np

from guidedepth.config import RefineConfig
from guidedepth.filters.bilateral import bilateral_filter_depth
from guidedepth.filters.median import median_filter
from guidedepth.io import load_depth, load_guide, save_depth
from guidedepth.utils.fs import ensure_dir, save_json
from guidedepth.utils.img import valid_fraction
from guidedepth.utils.logger import get_logger

log = get_logger("pipeline")


@dataclass
class RefineStats:
    depth_size: tuple
    guide_size: tuple
    guide_channels: int
    valid_in: float
    valid_out: float
    elapsed_ms: float


class DepthRefiner:
    """Runs the optional median pre-filter and the guided bilateral filter."""

    def __init__(self, config: RefineConfig) -> None:
        self.config = config
        self.last_stats: Optional[RefineStats] = None

    def refine(self, depth: np.ndarray, guide: np.ndarray) -> np.ndarray:
        median_cfg = self.config.median
        bilateral_cfg = self.config.bilateral

        tic = time.perf_counter()
        working = depth
        if median_cfg.enabled:
            working = median_filter(working, median_cfg.window_size)
        refined = bilateral_filter_depth(
            working,
            guide,
            sigma=bilateral_cfg.sigma,
            kernel_size=bilateral_cfg.kernel_size,
            workers=bilateral_cfg.workers,
            band_rows=bilateral_cfg.band_rows,
        )
        elapsed_ms = (time.perf_counter() - tic) * 1000.0

        self.last_stats = RefineStats(
            depth_size=(int(depth.shape[1]), int(depth.shape[0])),
            guide_size=(int(guide.shape[1]), int(guide.shape[0])),
            guide_channels=int(guide.shape[2]) if guide.ndim == 3 else 1,
            valid_in=valid_fraction(np.asarray(depth)),
            valid_out=valid_fraction(refined),
            elapsed_ms=elapsed_ms,
        )
        return refined

    def run(self) -> Dict[str, object]:
        io_cfg = self.config.io
        ensure_dir(io_cfg.output_root)

        depth = load_depth(io_cfg.depth_path, depth_scale=io_cfg.depth_scale)
        guide = load_guide(io_cfg.guide_path, grayscale=io_cfg.guide_grayscale)
        log.info(
            f"refining {io_cfg.depth_path.name} ({depth.shape[1]}x{depth.shape[0]}) "
            f"with guide {io_cfg.guide_path.name} ({guide.shape[1]}x{guide.shape[0]})"
        )

        refined = self.refine(depth, guide)
        written = save_depth(
            refined,
            io_cfg.output_root / self.config.output.name,
            save_png=self.config.output.save_png,
        )

        stats = self.last_stats
        metadata: Dict[str, object] = {
            "inputs": {"depth": str(io_cfg.depth_path), "guide": str(io_cfg.guide_path)},
            "outputs": {kind: path.name for kind, path in written.items()},
            "bilateral": asdict(self.config.bilateral),
            "median": asdict(self.config.median),
            "stats": asdict(stats),
        }
        save_json(metadata, io_cfg.output_root / "metadata.json")
        log.info(
            f"valid pixels {stats.valid_in:.3f} -> {stats.valid_out:.3f} "
            f"in {stats.elapsed_ms:.1f} ms, wrote {written['npy']}"
        )
        return metadata
