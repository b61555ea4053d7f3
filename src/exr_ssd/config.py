from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
import re
from typing import Any

from exr_ssd.errors import ParameterRangeError, UsageError
from exr_ssd.geometry import SensorGeometry


_GEOMETRY_RE = re.compile(r"^\s*(\d+)\s*[xX]\s*(\d+)\s*$")


@dataclass(frozen=True)
class DemosaicConfig:
    beta: float = 0.5
    passes: int = 4

    def __post_init__(self) -> None:
        if not 0.0 <= self.beta <= 1.0:
            raise ParameterRangeError(f"demosaic.beta must be in range [0, 1], got {self.beta}")
        if self.passes < 1:
            raise ParameterRangeError(f"demosaic.passes must be at least 1, got {self.passes}")


@dataclass(frozen=True)
class OutputConfig:
    float32: bool = False
    dump_stages_dir: Path | None = None


@dataclass(frozen=True)
class FileConfig:
    """Settings read from a YAML file; command-line flags override them."""

    demosaic: DemosaicConfig = field(default_factory=DemosaicConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    log_level: str = "INFO"
    log_file: Path | None = None


@dataclass(frozen=True)
class RunConfig:
    merged_cfa: bool
    inputs: tuple[Path, ...]
    output_path: Path
    geometry: SensorGeometry | None = None
    demosaic: DemosaicConfig = field(default_factory=DemosaicConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    log_level: str = "INFO"
    log_file: Path | None = None


def parse_geometry(text: str) -> SensorGeometry:
    m = _GEOMETRY_RE.match(text)
    if not m:
        raise UsageError(f"error parsing image geometry '{text}'; expected WxH")
    return SensorGeometry(cfa_width=int(m.group(1)), cfa_height=int(m.group(2)))


def _expand_path(value: str | None, base: Path) -> Path | None:
    if value in (None, ""):
        return None
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = (base / path).resolve()
    return path


def _section(raw: dict[str, Any], key: str) -> dict[str, Any]:
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        raise ValueError(f"config section '{key}' must be a mapping")
    return value


def load_config_file(path: str | Path) -> FileConfig:
    try:
        import yaml  # type: ignore
    except Exception as exc:
        raise RuntimeError("PyYAML is required for config loading. Install with: pip install PyYAML") from exc

    cfg_path = Path(path).expanduser().resolve()
    with cfg_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"config file {cfg_path} must contain a mapping")

    base = cfg_path.parent
    demosaic_raw = _section(raw, "demosaic")
    output_raw = _section(raw, "output")

    demosaic = DemosaicConfig(
        beta=float(demosaic_raw.get("beta", 0.5)),
        passes=int(demosaic_raw.get("passes", 4)),
    )
    output = OutputConfig(
        float32=bool(output_raw.get("float32", False)),
        dump_stages_dir=_expand_path(output_raw.get("dump_stages_dir"), base),
    )
    return FileConfig(
        demosaic=demosaic,
        output=output,
        log_level=str(raw.get("log_level", "INFO")),
        log_file=_expand_path(raw.get("log_file"), base),
    )
