from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

from exr_ssd.clamp import SAMPLE_MAX
from exr_ssd.errors import RasterIOError

from .reader import _tifffile


logger = logging.getLogger(__name__)


def _interleave(planes: np.ndarray) -> np.ndarray:
    arr = np.asarray(planes)
    if arr.ndim != 3 or arr.shape[0] != 3:
        raise ValueError(f"expected 3xHxW planes, got {arr.shape}")
    return np.ascontiguousarray(np.moveaxis(arr, 0, -1))


def write_rgb_tiff(
    path: Path,
    planes: np.ndarray,
    float32: bool = False,
    description: str | None = None,
) -> None:
    """Write stacked R, G, B planes as an RGB TIFF.

    Samples are rounded to uint16 unless ``float32`` is set; callers pass
    data already clamped to [0, 65535].
    """

    rgb = _interleave(planes)
    if float32:
        rgb = rgb.astype(np.float32)
    else:
        rgb = np.rint(np.clip(rgb, 0.0, SAMPLE_MAX)).astype(np.uint16)

    tifffile = _tifffile()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tifffile.imwrite(str(path), rgb, photometric="rgb", description=description, metadata=None)
    except Exception as exc:
        raise RasterIOError(f"error while writing to {path}: {exc}") from exc
    logger.info("wrote %s (%dx%d)", path, rgb.shape[1], rgb.shape[0])


def write_stage_tiff(path: Path, planes: np.ndarray) -> None:
    write_rgb_tiff(path, planes, float32=True, description=path.stem)


def write_mask_tiff(path: Path, mask: np.ndarray) -> None:
    tifffile = _tifffile()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tifffile.imwrite(str(path), np.asarray(mask, dtype=np.uint8), photometric="minisblack", metadata=None)
    except Exception as exc:
        raise RasterIOError(f"error while writing to {path}: {exc}") from exc
