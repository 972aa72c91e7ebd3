"""Filesystem helpers."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Union

PathLike = Union[str, Path]


def ensure_dir(path: PathLike) -> Path:
    """Create ``path`` if missing and return it as :class:`Path`."""
    directory = Path(path)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def save_json(data: Dict[str, Any], path: PathLike) -> None:
    """Write sorted, indented JSON next to ``path`` and move it into place."""
    target = Path(path)
    ensure_dir(target.parent)
    tmp_path = target.with_suffix(target.suffix + ".tmp")
    with tmp_path.open("w", encoding="utf-8") as fh:
        json.dump(data, fh, indent=2, sort_keys=True)
    os.replace(tmp_path, target)
