from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import numpy as np


@dataclass(frozen=True)
class RawFrame:
    """One capture pass of the sensor, or one pre-merged color plane."""

    samples: np.ndarray
    path: Path | None = None
    description: str | None = None

    def __post_init__(self) -> None:
        samples = np.array(self.samples, dtype=np.float32, copy=True)
        if samples.ndim != 2:
            raise ValueError(f"expected a 2D sample array, got shape {samples.shape}")
        samples.setflags(write=False)
        object.__setattr__(self, "samples", samples)

    @property
    def width(self) -> int:
        return int(self.samples.shape[1])

    @property
    def height(self) -> int:
        return int(self.samples.shape[0])

    @property
    def size_text(self) -> str:
        return f"{self.width}x{self.height}"
