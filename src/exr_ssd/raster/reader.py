from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

from exr_ssd.errors import RasterIOError

from .types import RawFrame


logger = logging.getLogger(__name__)


def _tifffile():
    try:
        import tifffile  # type: ignore
    except Exception as exc:  # pragma: no cover - dependency is declared
        raise RuntimeError("tifffile is required for TIFF input. Install with: pip install tifffile") from exc
    return tifffile


def read_gray16(path: Path) -> RawFrame:
    """Read a 16-bit grayscale TIFF as float32 samples.

    Only the first page is used. The page's ImageDescription tag, when
    present, is carried on the returned frame.
    """

    tifffile = _tifffile()
    try:
        with tifffile.TiffFile(str(path)) as tif:
            page = tif.pages[0]
            data = page.asarray()
            description = page.description or None
    except Exception as exc:
        raise RasterIOError(f"error while reading from {path}: {exc}") from exc

    if data.ndim != 2:
        raise RasterIOError(f"error while reading from {path}: expected grayscale, got shape {data.shape}")
    if data.dtype != np.uint16:
        raise RasterIOError(f"error while reading from {path}: expected 16-bit samples, got {data.dtype}")

    frame = RawFrame(samples=data.astype(np.float32), path=path, description=description)
    logger.info("read %s (%s)", path, frame.size_text)
    return frame
