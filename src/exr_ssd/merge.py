from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from exr_ssd.buffers import allocate_planes
from exr_ssd.errors import DimensionMismatchError, UsageError
from exr_ssd.geometry import SensorGeometry, SiteMap, photosite_sites
from exr_ssd.raster.types import RawFrame


logger = logging.getLogger(__name__)

RAW_FRAME_COUNT = 2
COLOR_PLANE_COUNT = 3


def _sizes_text(frames: Sequence[RawFrame]) -> str:
    return ", ".join(f.size_text for f in frames)


def raw_geometry(frames: Sequence[RawFrame]) -> SensorGeometry:
    """Sensor geometry of a set of raw frames, which must all be the same size."""
    if not frames:
        raise UsageError(f"expected {RAW_FRAME_COUNT} raw frames or {COLOR_PLANE_COUNT} color planes, got 0")
    first = frames[0]
    if any(f.samples.shape != first.samples.shape for f in frames[1:]):
        raise DimensionMismatchError(f"Input frames must have identical size. Got {_sizes_text(frames)}")
    return SensorGeometry(cfa_width=first.width, cfa_height=first.height)


def _check_color_planes(planes: Sequence[RawFrame], geometry: SensorGeometry) -> None:
    first = planes[0]
    if any(p.samples.shape != first.samples.shape for p in planes[1:]):
        raise DimensionMismatchError(f"Input color planes must have identical size. Got {_sizes_text(planes)}")
    if first.width != geometry.width or first.height != geometry.height:
        raise DimensionMismatchError(
            f"Stated image geometry ({geometry}) does not fit input color planes ({first.size_text}); "
            f"expected {geometry.width}x{geometry.height}"
        )


def _scatter_raw(working: np.ndarray, sites: SiteMap, frames: Sequence[RawFrame]) -> None:
    # Raw samples are channel-agnostic here; every plane gets a copy and the
    # mask decides later which channel each site holds.
    for frame, x in zip(frames, (sites.x0, sites.x1)):
        working[:, sites.y, x] = frame.samples.reshape(-1)


def _scatter_planes(working: np.ndarray, sites: SiteMap, planes: Sequence[RawFrame]) -> None:
    source = np.stack([p.samples for p in planes])
    plane = sites.channel.astype(np.int64) - 1
    for x in (sites.x0, sites.x1):
        working[plane, sites.y, x] = source[plane, sites.y, x]


def merge_frames(frames: Sequence[RawFrame], geometry: SensorGeometry | None = None) -> np.ndarray:
    """Place input samples onto the square diagonal working buffer.

    Two frames are raw EXR captures; frame 1 is shifted one pixel to the
    right of frame 0. Three frames are pre-merged R, G, B planes of the
    working-buffer size and ``geometry`` must state the sensor size.

    Returns a ``(3, width, width)`` float32 buffer, zero away from photosites.
    """

    if len(frames) == RAW_FRAME_COUNT:
        stated = geometry
        geometry = raw_geometry(frames)
        if stated is not None and stated != geometry:
            raise DimensionMismatchError(f"Stated image geometry ({stated}) does not fit input frames ({geometry})")
        scatter = _scatter_raw
    elif len(frames) == COLOR_PLANE_COUNT:
        if geometry is None:
            raise UsageError("merging color planes requires the sensor geometry (WxH)")
        _check_color_planes(frames, geometry)
        scatter = _scatter_planes
    else:
        raise UsageError(f"expected {RAW_FRAME_COUNT} raw frames or {COLOR_PLANE_COUNT} color planes, got {len(frames)}")

    working = allocate_planes(geometry.height, geometry.width, "working")
    sites = photosite_sites(geometry)
    scatter(working, sites, frames)
    logger.debug(
        "merged %d inputs onto %dx%d %s working buffer",
        len(frames),
        geometry.width,
        geometry.height,
        geometry.orientation,
    )
    return working
