from __future__ import annotations

import logging
from pathlib import Path
import sys

from exr_ssd.errors import ParameterRangeError


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# third-party loggers that report every unknown TIFF tag at WARNING
_NOISY_LOGGERS = ("tifffile",)


def resolve_level(level: str) -> int:
    name = str(level).strip().upper()
    if name not in LEVELS:
        raise ParameterRangeError(f"log level must be one of {', '.join(LEVELS)}, got {level!r}")
    return getattr(logging, name)


def configure_logging(level: str, log_file: Path | None = None) -> None:
    """Send run diagnostics to stderr, and to ``log_file`` when one is given."""
    resolved = resolve_level(level)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(level=resolved, format=LOG_FORMAT, handlers=handlers, force=True)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if resolved <= logging.DEBUG else logging.ERROR)
