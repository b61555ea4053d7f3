from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
import logging
from pathlib import Path
import time
from typing import Iterator, Sequence

import numpy as np

from exr_ssd import __version__
from exr_ssd.clamp import clamp_range
from exr_ssd.config import RunConfig
from exr_ssd.demosaic import Demosaicker, MaskedInterpolator
from exr_ssd.derotate import derotate
from exr_ssd.errors import DimensionMismatchError
from exr_ssd.geometry import SensorGeometry
from exr_ssd.mask import build_cfa_mask, channel_counts
from exr_ssd.merge import merge_frames, raw_geometry
from exr_ssd.raster import RawFrame, read_gray16, write_mask_tiff, write_rgb_tiff, write_stage_tiff


logger = logging.getLogger(__name__)


@contextmanager
def _timed(what: str) -> Iterator[None]:
    start = time.perf_counter()
    yield
    logger.info("%6.3f seconds to %s", time.perf_counter() - start, what)


@dataclass
class Reconstruction:
    geometry: SensorGeometry
    rotated: np.ndarray
    stages: dict[str, np.ndarray] = field(default_factory=dict)

    @property
    def size_text(self) -> str:
        return f"{self.rotated.shape[2]}x{self.rotated.shape[1]}"


def read_inputs(paths: Sequence[Path]) -> list[RawFrame]:
    frames = []
    with _timed("read input"):
        for n, path in enumerate(paths):
            logger.info("input file %d: %s", n, path)
            frames.append(read_gray16(path))
    return frames


def reconstruct(
    frames: Sequence[RawFrame],
    geometry: SensorGeometry | None = None,
    demosaicker: Demosaicker | None = None,
    keep_stages: bool = False,
) -> Reconstruction:
    """Merge, demosaic, clamp and derotate one capture held in memory.

    ``geometry`` is required for three pre-merged color planes and taken
    from the frames otherwise. With ``keep_stages`` the merged, mask, dense
    and clamped buffers are kept on the result for later dumping.
    """

    if geometry is None:
        geometry = raw_geometry(frames)
    demosaicker = demosaicker or MaskedInterpolator()
    width, height = geometry.width, geometry.height
    logger.info(
        "sensor %s (%s), working buffer %dx%d",
        geometry,
        geometry.orientation,
        width,
        height,
    )

    with _timed("merge input frames"):
        working = merge_frames(frames, geometry)

    with _timed("compute CFA mask"):
        mask = build_cfa_mask(width, height, geometry.cfa_width, geometry.cfa_height)
    logger.debug("mask sites: %s", channel_counts(mask))

    with _timed("complete debayering"):
        dense = demosaicker(working, mask, width, height, *geometry.demosaic_dims())
    if dense.shape != working.shape:
        raise DimensionMismatchError(f"demosaicker returned {dense.shape}, expected {working.shape}")

    with _timed("clamp to sample range"):
        clamped = clamp_range(dense)

    with _timed("rotate"):
        rotated = derotate(clamped, geometry.cfa_width, height, width)

    result = Reconstruction(geometry=geometry, rotated=rotated)
    if keep_stages:
        result.stages.update(
            {
                "input-merged": working,
                "cfa-mask": mask,
                "dense": dense,
                "result": clamped,
            }
        )
    return result


def write_stage_dumps(result: Reconstruction, dump_dir: Path) -> None:
    for name, buffer in result.stages.items():
        path = dump_dir / f"{name}.tiff"
        if buffer.ndim == 2:
            write_mask_tiff(path, buffer)
        else:
            write_stage_tiff(path, buffer)
    logger.info("stage dumps written to %s", dump_dir)


def _description(result: Reconstruction, frames: Sequence[RawFrame]) -> str:
    parts = [f"exr-ssd {__version__}", f"sensor {result.geometry} {result.geometry.orientation}"]
    sources = [f.description for f in frames if f.description]
    if sources:
        parts.append(sources[0])
    return "; ".join(parts)


def run(config: RunConfig, demosaicker: Demosaicker | None = None) -> Path:
    if config.merged_cfa:
        logger.info("geometry: %s", config.geometry)
    frames = read_inputs(config.inputs)

    if demosaicker is None:
        demosaicker = MaskedInterpolator(beta=config.demosaic.beta, passes=config.demosaic.passes)
    result = reconstruct(
        frames,
        geometry=config.geometry,
        demosaicker=demosaicker,
        keep_stages=config.output.dump_stages_dir is not None,
    )

    logger.info("writing output to %s (%s)", config.output_path, result.size_text)
    with _timed("write output"):
        write_rgb_tiff(
            config.output_path,
            result.rotated,
            float32=config.output.float32,
            description=_description(result, frames),
        )
    if config.output.dump_stages_dir is not None:
        write_stage_dumps(result, config.output.dump_stages_dir)
    return config.output_path
