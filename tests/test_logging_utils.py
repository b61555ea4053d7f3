from __future__ import annotations

import logging
from pathlib import Path

import pytest

from exr_ssd.errors import ParameterRangeError
from exr_ssd.utils.logging_utils import configure_logging, resolve_level


def test_resolve_level_accepts_names_in_any_case() -> None:
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level(" Warning ") == logging.WARNING
    with pytest.raises(ParameterRangeError):
        resolve_level("VERBOSE")


def test_configure_logging_writes_log_file(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "run.log"

    configure_logging("INFO", log_file)
    logging.getLogger("exr_ssd.test").info("merged 2 inputs")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert "merged 2 inputs" in log_file.read_text(encoding="utf-8")
    assert logging.getLogger("tifffile").level == logging.ERROR
