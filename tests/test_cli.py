from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
import tifffile

from exr_ssd.cli import main, parse_command
from exr_ssd.errors import ParameterRangeError, UsageError


def test_parse_raw_frames() -> None:
    cfg = parse_command(["a.tiff", "b.tiff", "out.tiff"])
    assert cfg.merged_cfa is False
    assert cfg.geometry is None
    assert [p.name for p in cfg.inputs] == ["a.tiff", "b.tiff"]
    assert cfg.output_path.name == "out.tiff"
    assert cfg.demosaic.beta == 0.5


def test_parse_merged_planes() -> None:
    cfg = parse_command(["-m", "6x4", "r.tiff", "g.tiff", "b.tiff", "out.tiff", "--beta", "0.25"])
    assert cfg.merged_cfa is True
    assert (cfg.geometry.cfa_width, cfg.geometry.cfa_height) == (6, 4)
    assert [p.name for p in cfg.inputs] == ["r.tiff", "g.tiff", "b.tiff"]
    assert cfg.demosaic.beta == 0.25


@pytest.mark.parametrize(
    "argv, message",
    [
        (["a.tiff", "out.tiff"], "Not enough arguments"),
        (["a.tiff", "b.tiff", "c.tiff", "out.tiff"], "Extra arguments"),
        (["-m", "6x4", "r.tiff", "g.tiff", "out.tiff"], "Not enough arguments"),
        (["-m", "six-by-four", "r.tiff", "g.tiff", "b.tiff", "out.tiff"], "geometry"),
        (["--bogus", "a.tiff", "b.tiff", "out.tiff"], "unrecognized"),
    ],
)
def test_parse_usage_errors(argv: list[str], message: str) -> None:
    with pytest.raises(UsageError, match=message):
        parse_command(argv)


def test_parse_parameter_range() -> None:
    with pytest.raises(ParameterRangeError):
        parse_command(["a.tiff", "b.tiff", "out.tiff", "--beta", "1.5"])
    with pytest.raises(ParameterRangeError):
        parse_command(["a.tiff", "b.tiff", "out.tiff", "--passes", "0"])


def test_flags_override_config_file(tmp_path: Path) -> None:
    cfg_file = tmp_path / "ssd.yaml"
    cfg_file.write_text("demosaic:\n  beta: 0.9\n  passes: 2\nlog_level: WARNING\n", encoding="utf-8")

    cfg = parse_command(["--config", str(cfg_file), "--passes", "5", "--float32", "a.tiff", "b.tiff", "o.tiff"])

    assert cfg.demosaic.beta == 0.9
    assert cfg.demosaic.passes == 5
    assert cfg.output.float32 is True
    assert cfg.log_level == "WARNING"


def test_main_exit_codes(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["a.tiff"]) == 2
    assert "Not enough arguments" in capsys.readouterr().err

    assert main(["a.tiff", "b.tiff", "o.tiff", "--beta", "-1"]) == 1

    missing = main([str(tmp_path / "nope_0.tiff"), str(tmp_path / "nope_1.tiff"), str(tmp_path / "o.tiff")])
    assert missing == 1
    assert "nope_0.tiff" in capsys.readouterr().err
    assert not (tmp_path / "o.tiff").exists()


def test_main_processes_frames(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    for n in range(2):
        tifffile.imwrite(str(tmp_path / f"f{n}.tiff"), np.full((4, 6), 500 + n, dtype=np.uint16))
    out = tmp_path / "out.tiff"

    code = main([str(tmp_path / "f0.tiff"), str(tmp_path / "f1.tiff"), str(out), "--log-level", "WARNING"])

    assert code == 0
    assert capsys.readouterr().out.strip() == str(out.resolve())
    assert tifffile.imread(str(out)).shape == (5, 8, 3)


def test_bad_log_level_is_a_parameter_error() -> None:
    with pytest.raises(ParameterRangeError, match="log level"):
        parse_command(["a.tiff", "b.tiff", "o.tiff", "--log-level", "LOUD"])


def test_unusable_log_file_reports_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    log_dir = tmp_path / "logs"
    log_dir.mkdir()
    out = tmp_path / "o.tiff"

    code = main(["a.tiff", "b.tiff", str(out), "--log-file", str(log_dir)])

    assert code == 1
    assert "error:" in capsys.readouterr().err
    assert not out.exists()
