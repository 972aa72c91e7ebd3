"""Reading and writing depth maps and guide images."""

from __future__ import annotations

import math
from pathlib import Path
from typing import Dict

import cv2
import numpy as np
from PIL import Image

from guidedepth.utils.fs import ensure_dir
from guidedepth.utils.img import INVALID_DEPTH, as_depth_map, is_valid

_INT_RANGES = {
    np.dtype(np.uint8): 255.0,
    np.dtype(np.uint16): 65535.0,
}


def load_depth(path: Path, depth_scale: float = 1.0) -> np.ndarray:
    """Load a depth map from ``.npy`` or a single-channel image file.

    Integer image values are multiplied by ``depth_scale`` (e.g. 0.001 for
    millimetre PNGs). Non-finite values become the invalid-depth sentinel.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Depth map not found: {path}")
    if path.suffix.lower() == ".npy":
        raw = np.load(path, allow_pickle=False)
    else:
        with Image.open(path) as image:
            raw = np.asarray(image)
    if raw.ndim == 3 and raw.shape[2] > 1:
        raise ValueError(f"Depth map must be single-channel, got shape {raw.shape} from {path}")

    depth = as_depth_map(raw, str(path)).astype(np.float32) * np.float32(depth_scale)
    depth[~np.isfinite(depth)] = INVALID_DEPTH
    return depth


def load_guide(path: Path, grayscale: bool = False) -> np.ndarray:
    """Load a guide image as HxWxC float32 RGB (or HxWx1 gray) in [0, 1]."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Guide image not found: {path}")
    flags = cv2.IMREAD_GRAYSCALE if grayscale else cv2.IMREAD_UNCHANGED
    image = cv2.imread(str(path), flags)
    if image is None:
        raise ValueError(f"Failed to read guide image: {path}")

    if image.ndim == 3:
        if image.shape[2] == 4:
            image = cv2.cvtColor(image, cv2.COLOR_BGRA2RGB)
        elif image.shape[2] == 3:
            image = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
    else:
        image = image[:, :, None]

    scale = _INT_RANGES.get(image.dtype, 1.0)
    return image.astype(np.float32) / np.float32(scale)


def depth_to_uint16(depth: np.ndarray) -> np.ndarray:
    """Stretch valid depths to [1, 65535] for previews; the sentinel stays 0."""
    valid = is_valid(depth) & np.isfinite(depth)
    out = np.zeros(depth.shape, dtype=np.uint16)
    if not valid.any():
        return out
    values = depth[valid]
    lo, hi = float(values.min()), float(values.max())
    if math.isclose(lo, hi):
        scaled = np.ones_like(values, dtype=np.float32)
    else:
        scaled = (values - lo) / (hi - lo)
    out[valid] = (1.0 + scaled * 65534.0 + 0.5).astype(np.uint16)
    return out


def save_depth(depth: np.ndarray, stem: Path, save_png: bool = True) -> Dict[str, Path]:
    """Write ``<stem>.npy`` and, optionally, a 16-bit ``<stem>.png`` preview."""
    stem = Path(stem)
    ensure_dir(stem.parent)
    written = {"npy": stem.with_suffix(".npy")}
    np.save(written["npy"], depth.astype(np.float32), allow_pickle=False)
    if save_png:
        written["png"] = stem.with_suffix(".png")
        Image.fromarray(depth_to_uint16(depth)).save(written["png"])
    return written
