from __future__ import annotations


class ExrSsdError(RuntimeError):
    pass


class UsageError(ExrSsdError):
    pass


class ParameterRangeError(ExrSsdError):
    pass


class RasterIOError(ExrSsdError, OSError):
    pass


class DimensionMismatchError(ExrSsdError):
    pass


class AllocationError(ExrSsdError, MemoryError):
    pass
