"""Merge, demosaic and derotate EXR-style diagonal sensor captures."""

__version__ = "0.3.0"
