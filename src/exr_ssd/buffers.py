from __future__ import annotations

import logging

import numpy as np

from exr_ssd.errors import AllocationError


logger = logging.getLogger(__name__)

PLANES = 3


def allocate_planes(height: int, width: int, what: str, dtype: type = np.float32) -> np.ndarray:
    """Zero-filled ``(3, height, width)`` buffer indexed ``(channel, row, col)``."""
    try:
        planes = np.zeros((PLANES, height, width), dtype=dtype)
    except (MemoryError, ValueError) as exc:
        raise AllocationError(f"allocation error for {what} ({PLANES}x{height}x{width}); not enough memory?") from exc
    logger.debug("allocated %s buffer %dx%dx%d", what, PLANES, height, width)
    return planes
