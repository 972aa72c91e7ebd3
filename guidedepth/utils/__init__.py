"""Utility helpers for guidedepth."""

from .fs import ensure_dir, save_json
from .img import INVALID_DEPTH, is_valid
from .mathfn import clamp, gaussian, gaussian_2d

__all__ = [
    "INVALID_DEPTH",
    "clamp",
    "ensure_dir",
    "gaussian",
    "gaussian_2d",
    "is_valid",
    "save_json",
]
