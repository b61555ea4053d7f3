from __future__ import annotations

import logging

import numpy as np

from exr_ssd.buffers import allocate_planes
from exr_ssd.errors import DimensionMismatchError
from exr_ssd.geometry import STEP


logger = logging.getLogger(__name__)


def rotated_size(cfa_width: int, height: int) -> tuple[int, int]:
    """``(rot_width, rot_height)`` of the axis-aligned output, inflated by sqrt(2)."""
    return int(cfa_width / STEP), int((height - cfa_width) / STEP)


def bilinear_weights(fr: np.ndarray, fc: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Stencil weights for the pixel, its east, south and south-east neighbours."""
    return (
        (1.0 - fr) * (1.0 - fc),
        (1.0 - fr) * fc,
        fr * (1.0 - fc),
        fr * fc,
    )


def source_coordinates(rot_width: int, rot_height: int, cfa_width: int) -> tuple[np.ndarray, np.ndarray]:
    """Continuous ``(r, c)`` in the working buffer for every output pixel."""
    row, col = np.mgrid[0:rot_height, 0:rot_width].astype(np.float64)
    r = cfa_width + (row - col) * STEP
    c = (row + col) * STEP
    return r, c


def derotate(clamped: np.ndarray, cfa_width: int, height: int, width: int) -> np.ndarray:
    """Resample the 45-degree working grid onto an axis-aligned image.

    Reverse mapping: each output pixel looks up its source position and
    blends the 2x2 neighbourhood there. Output pixels whose stencil would
    leave the source buffer are left at zero.
    """

    planes = np.asarray(clamped)
    if planes.shape != (3, height, width):
        raise DimensionMismatchError(f"derotate expects a 3x{height}x{width} buffer, got {planes.shape}")

    rot_width, rot_height = rotated_size(cfa_width, height)
    rotated = allocate_planes(rot_height, rot_width, "rotated")

    r, c = source_coordinates(rot_width, rot_height, cfa_width)
    ur = np.floor(r)
    uc = np.floor(c)
    # leave margins in the source image for the stencil
    inside = (r >= 0.0) & (c >= 0.0) & (ur <= height - 2) & (uc <= width - 2)
    skipped = int(inside.size - np.count_nonzero(inside))
    logger.debug("derotating to %dx%d, %d edge pixels skipped", rot_width, rot_height, skipped)
    if not inside.any():
        return rotated

    fr = (r - ur)[inside]
    fc = (c - uc)[inside]
    ur_i = ur[inside].astype(np.intp)
    uc_i = uc[inside].astype(np.intp)
    w_pix, w_e, w_s, w_se = bilinear_weights(fr, fc)

    for i in range(planes.shape[0]):
        src = planes[i]
        rotated[i][inside] = (
            w_pix * src[ur_i, uc_i]
            + w_e * src[ur_i, uc_i + 1]
            + w_s * src[ur_i + 1, uc_i]
            + w_se * src[ur_i + 1, uc_i + 1]
        )

    return rotated
