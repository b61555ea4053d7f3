from __future__ import annotations

import numpy as np

from exr_ssd.errors import DimensionMismatchError
from exr_ssd.geometry import CHANNEL_NAMES, EMPTY, SensorGeometry, photosite_sites


def build_cfa_mask(width: int, height: int, cfa_width: int, cfa_height: int) -> np.ndarray:
    """Channel tag of every working-buffer pixel: 0 empty, 1 red, 2 green, 3 blue."""
    geometry = SensorGeometry(cfa_width=cfa_width, cfa_height=cfa_height)
    if (width, height) != (geometry.width, geometry.height):
        raise DimensionMismatchError(
            f"working buffer {width}x{height} does not match sensor {geometry} "
            f"(expected {geometry.width}x{geometry.height})"
        )

    mask = np.full((height, width), EMPTY, dtype=np.uint8)
    sites = photosite_sites(geometry)
    mask[sites.y, sites.x0] = sites.channel
    mask[sites.y, sites.x1] = sites.channel
    return mask


def channel_counts(mask: np.ndarray) -> dict[str, int]:
    return {name: int(np.count_nonzero(mask == tag)) for tag, name in CHANNEL_NAMES.items()}
