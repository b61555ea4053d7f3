from __future__ import annotations

import logging
from typing import Protocol

import numpy as np
from scipy.ndimage import convolve

from exr_ssd.buffers import allocate_planes
from exr_ssd.errors import DimensionMismatchError, ParameterRangeError
from exr_ssd.geometry import BLUE, GREEN, RED


logger = logging.getLogger(__name__)

# Separable 3x3 tent; the diagonal neighbours carry half the weight of the
# axial ones.
_TENT = np.array(
    [
        [1.0, 2.0, 1.0],
        [2.0, 4.0, 2.0],
        [1.0, 2.0, 1.0],
    ],
    dtype=np.float32,
)


class Demosaicker(Protocol):
    def __call__(
        self,
        working: np.ndarray,
        mask: np.ndarray,
        width: int,
        height: int,
        cfa_width: int,
        cfa_height: int,
    ) -> np.ndarray:
        ...


def _tent_filter(image: np.ndarray) -> np.ndarray:
    return convolve(image, _TENT, mode="constant", cval=0.0)


def fill_sparse(values: np.ndarray, known: np.ndarray, passes: int) -> np.ndarray:
    """Grow known samples into holes by repeated normalized tent filtering.

    Known samples are never changed. Holes that no pass reaches stay 0.
    """

    known = np.array(known, dtype=bool)
    filled = np.where(known, values, 0.0).astype(np.float32)

    for _ in range(passes):
        num = _tent_filter(filled)
        den = _tent_filter(known.astype(np.float32))
        grow = ~known & (den > 0.0)
        if not grow.any():
            break
        filled[grow] = num[grow] / den[grow]
        known |= grow

    return filled


class MaskedInterpolator:
    """Reference demosaicker for the sparse EXR working buffer.

    Green is interpolated from green sites alone. Red and blue blend a
    direct interpolation with a color-difference one (``interp(C - G) + G``);
    ``beta`` is the weight of the color-difference term.
    """

    def __init__(self, beta: float = 0.5, passes: int = 4) -> None:
        if not 0.0 <= beta <= 1.0:
            raise ParameterRangeError(f"beta must be in range [0, 1], got {beta}")
        if passes < 1:
            raise ParameterRangeError(f"passes must be at least 1, got {passes}")
        self.beta = float(beta)
        self.passes = int(passes)

    def __call__(
        self,
        working: np.ndarray,
        mask: np.ndarray,
        width: int,
        height: int,
        cfa_width: int,
        cfa_height: int,
    ) -> np.ndarray:
        if working.shape != (3, height, width) or mask.shape != (height, width):
            raise DimensionMismatchError(
                f"demosaic input {working.shape} / mask {mask.shape} does not match {width}x{height}"
            )
        logger.debug(
            "interpolating %dx%d buffer for %dx%d sensor (beta=%.3f passes=%d)",
            width,
            height,
            cfa_width,
            cfa_height,
            self.beta,
            self.passes,
        )

        dense = allocate_planes(height, width, "dense")
        green = fill_sparse(working[GREEN - 1], mask == GREEN, self.passes)
        dense[GREEN - 1] = green

        for tag in (RED, BLUE):
            known = mask == tag
            raw = working[tag - 1]
            direct = fill_sparse(raw, known, self.passes)
            difference = fill_sparse(raw - green, known, self.passes) + green
            plane = self.beta * difference + (1.0 - self.beta) * direct
            plane[known] = raw[known]
            dense[tag - 1] = plane

        return dense
