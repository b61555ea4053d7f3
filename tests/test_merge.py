from __future__ import annotations

import numpy as np
import pytest

from exr_ssd.errors import DimensionMismatchError, UsageError
from exr_ssd.geometry import SensorGeometry, photosite_sites
from exr_ssd.merge import merge_frames, raw_geometry
from exr_ssd.raster import RawFrame


def _random_frame(rng: np.random.Generator, height: int, width: int) -> RawFrame:
    return RawFrame(samples=rng.integers(1, 65536, size=(height, width)).astype(np.float32))


def _populated(geometry: SensorGeometry) -> np.ndarray:
    sites = photosite_sites(geometry)
    out = np.zeros((geometry.height, geometry.width), dtype=bool)
    out[sites.y, sites.x0] = True
    out[sites.y, sites.x1] = True
    return out


@pytest.mark.parametrize("shape", [(4, 6), (6, 4), (5, 5), (3, 8)])
def test_raw_merge_copies_samples_exactly(shape: tuple[int, int]) -> None:
    rng = np.random.default_rng(7)
    f0 = _random_frame(rng, *shape)
    f1 = _random_frame(rng, *shape)
    geometry = raw_geometry([f0, f1])

    working = merge_frames([f0, f1])

    assert working.shape == (3, geometry.width, geometry.width)
    sites = photosite_sites(geometry)
    for plane in working:
        assert np.array_equal(plane[sites.y, sites.x0], f0.samples.reshape(-1))
        assert np.array_equal(plane[sites.y, sites.x1], f1.samples.reshape(-1))

    populated = _populated(geometry)
    assert np.all(working[:, ~populated] == 0.0)
    assert np.count_nonzero(working[0]) == 2 * f0.width * f0.height


def test_raw_merge_constant_frames_landscape() -> None:
    f0 = RawFrame(samples=np.full((4, 6), 100.0))
    f1 = RawFrame(samples=np.full((4, 6), 200.0))

    working = merge_frames([f0, f1])

    assert set(np.unique(working).tolist()) == {0.0, 100.0, 200.0}
    # site (5, 0) is the first photosite; frame 1 sits one pixel to its right
    assert working[0, 5, 0] == 100.0
    assert working[0, 5, 1] == 200.0
    assert working[2, 6, 1] == 100.0
    assert working[2, 6, 2] == 200.0
    assert working[1, 0, 0] == 0.0
    assert np.count_nonzero(working[1] == 100.0) == 24
    assert np.count_nonzero(working[1] == 200.0) == 24


def test_mismatched_frames_raise() -> None:
    f0 = RawFrame(samples=np.zeros((4, 4)))
    f1 = RawFrame(samples=np.zeros((4, 5)))
    with pytest.raises(DimensionMismatchError, match="4x4, 5x4"):
        merge_frames([f0, f1])


def test_stated_geometry_must_match_raw_frames() -> None:
    f = RawFrame(samples=np.zeros((4, 6)))
    with pytest.raises(DimensionMismatchError):
        merge_frames([f, f], SensorGeometry(4, 6))


def test_wrong_arity_raises() -> None:
    f = RawFrame(samples=np.zeros((4, 6)))
    with pytest.raises(UsageError):
        merge_frames([f])
    with pytest.raises(UsageError):
        merge_frames([f, f, f, f], SensorGeometry(6, 4))
    with pytest.raises(UsageError):
        merge_frames([])
    with pytest.raises(UsageError):
        raw_geometry([])


@pytest.mark.parametrize("cfa", [(6, 4), (4, 6)])
def test_color_plane_merge_selects_channel_per_site(cfa: tuple[int, int]) -> None:
    geometry = SensorGeometry(*cfa)
    rng = np.random.default_rng(3)
    planes = [_random_frame(rng, geometry.height, geometry.width) for _ in range(3)]

    working = merge_frames(planes, geometry)

    sites = photosite_sites(geometry)
    for y, x0, tag in zip(sites.y, sites.x0, sites.channel):
        p = int(tag) - 1
        for x in (x0, x0 + 1):
            assert working[p, y, x] == planes[p].samples[y, x]
            others = [q for q in range(3) if q != p]
            assert np.all(working[others, y, x] == 0.0)

    assert np.all(working[:, ~_populated(geometry)] == 0.0)


def test_color_plane_merge_checks_sizes() -> None:
    geometry = SensorGeometry(6, 4)
    good = RawFrame(samples=np.zeros((10, 10)))
    small = RawFrame(samples=np.zeros((9, 9)))

    with pytest.raises(DimensionMismatchError, match="identical size"):
        merge_frames([good, good, small], geometry)
    with pytest.raises(DimensionMismatchError, match="does not fit"):
        merge_frames([small, small, small], geometry)
    with pytest.raises(UsageError):
        merge_frames([good, good, good])
