from __future__ import annotations

from dataclasses import dataclass
import math

import numpy as np

from exr_ssd.errors import ParameterRangeError


# The EXR photosite grid is the output raster rotated by 45 degrees. One
# photosite step along a row or column of the output projects onto the
# working-buffer axes as sqrt(0.5) pixels in each direction.
STEP = math.sqrt(0.5)

# Off-green diagonals alternate red and blue pairs with a period of four
# working-buffer pixels measured along x + y - 1; phases 0 and 1 are red.
RB_PARITY_PERIOD = 4
RED_PHASES = (0, 1)

# ChannelMask tags. Plane index of a tag is ``tag - 1``.
EMPTY = 0
RED = 1
GREEN = 2
BLUE = 3
CHANNEL_NAMES = {RED: "red", GREEN: "green", BLUE: "blue"}

LANDSCAPE = "landscape"
PORTRAIT = "portrait"


@dataclass(frozen=True)
class SensorGeometry:
    cfa_width: int
    cfa_height: int

    def __post_init__(self) -> None:
        if self.cfa_width <= 0 or self.cfa_height <= 0:
            raise ParameterRangeError(
                f"sensor geometry must be positive, got {self.cfa_width}x{self.cfa_height}"
            )

    @property
    def width(self) -> int:
        return self.cfa_width + self.cfa_height

    @property
    def height(self) -> int:
        return self.cfa_width + self.cfa_height

    @property
    def landscape(self) -> bool:
        return self.cfa_width > self.cfa_height

    @property
    def orientation(self) -> str:
        return LANDSCAPE if self.landscape else PORTRAIT

    @property
    def rot_width(self) -> int:
        return int(self.cfa_width / STEP)

    @property
    def rot_height(self) -> int:
        return int((self.height - self.cfa_width) / STEP)

    def demosaic_dims(self) -> tuple[int, int]:
        """CFA dimensions in landscape order, as the demosaicking stage expects them."""
        if self.landscape:
            return self.cfa_width, self.cfa_height
        return self.cfa_height, self.cfa_width

    def __str__(self) -> str:
        return f"{self.cfa_width}x{self.cfa_height}"


@dataclass(frozen=True)
class SiteMap:
    """Working-buffer position of every photosite, in linear sensor order.

    ``y`` and ``x0`` locate the first pixel of each site pair; the second
    pixel is at ``x0 + 1``. ``channel`` holds the mask tag of the pair.
    """

    y: np.ndarray
    x0: np.ndarray
    channel: np.ndarray

    @property
    def x1(self) -> np.ndarray:
        return self.x0 + 1

    def __len__(self) -> int:
        return int(self.y.shape[0])


def site_channels(y: np.ndarray, x0: np.ndarray) -> np.ndarray:
    phase = (x0 + y - 1) % RB_PARITY_PERIOD
    red_or_blue = np.where(np.isin(phase, RED_PHASES), RED, BLUE)
    return np.where(y % 2 == 0, GREEN, red_or_blue).astype(np.uint8)


def photosite_sites(geometry: SensorGeometry) -> SiteMap:
    """Map linear photosite indices onto the diagonal working-buffer grid.

    Landscape sensors run their rows along the falling diagonal:

        B........G
        ..........
        G........R

    Portrait sensors are the same layout turned 270 degrees:

        G.....R
        .......
        B.....G
    """

    count = geometry.cfa_width * geometry.cfa_height
    index = np.arange(count, dtype=np.int64)
    col = index % geometry.cfa_width
    row = index // geometry.cfa_width

    if geometry.landscape:
        x0 = col + row
        y = (geometry.cfa_width - col - 1) + row
    else:
        x0 = geometry.cfa_height - 1 + col - row
        y = col + row

    return SiteMap(y=y, x0=x0, channel=site_channels(y, x0))
