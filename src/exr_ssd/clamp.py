from __future__ import annotations

import numpy as np


SAMPLE_MIN = 0.0
SAMPLE_MAX = 65535.0


def clamp_range(dense: np.ndarray) -> np.ndarray:
    """Limit every sample to the sensor's 16-bit range; returns a new array."""
    return np.clip(np.asarray(dense), SAMPLE_MIN, SAMPLE_MAX)
