from .reader import read_gray16
from .types import RawFrame
from .writer import write_mask_tiff, write_rgb_tiff, write_stage_tiff

__all__ = [
    "RawFrame",
    "read_gray16",
    "write_mask_tiff",
    "write_rgb_tiff",
    "write_stage_tiff",
]
