"""Error types raised by guidedepth."""

from __future__ import annotations


class InvalidArgument(ValueError):
    """Raised when a filter receives a missing grid or an out-of-range parameter."""
