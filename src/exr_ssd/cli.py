from __future__ import annotations

import argparse
from dataclasses import replace
import logging
from pathlib import Path
import sys
from typing import Sequence

from exr_ssd import __version__
from exr_ssd.config import FileConfig, RunConfig, load_config_file, parse_geometry
from exr_ssd.errors import ExrSsdError, UsageError
from exr_ssd.utils.logging_utils import configure_logging, resolve_level


logger = logging.getLogger(__name__)

USAGE = "exr-ssd [options] [-m WxH r.tiff g.tiff b.tiff | bayer_0.tiff bayer_1.tiff] output.tiff"

DESCRIPTION = """\
Self-similarity-driven debayering of Fujifilm EXR captures.

Input: two raw Bayer frames extracted from an HR EXR image
(dcraw -v -w -d -s all -4 -T <source.RAF>), or, with -m, the sensor
geometry followed by the three color planes of a merged HR Bayer array.

The frames are rotated 45 degrees and interleaved into the EXR matrix,
demosaicked, clamped to the 16-bit range and rotated back to their
photographic orientation.
"""


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise UsageError(message)


def _build_parser() -> argparse.ArgumentParser:
    parser = _Parser(
        prog="exr-ssd",
        usage=USAGE,
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("files", nargs="+", help="Input TIFF files followed by the output TIFF")
    parser.add_argument("-m", "--merged", action="store_true", help="Input is a merged HR Bayer array")
    parser.add_argument("--config", default=None, help="Optional YAML config with demosaic/output/log settings")
    parser.add_argument("--beta", type=float, default=None, help="Channel-correlation weight in [0, 1]")
    parser.add_argument("--passes", type=int, default=None, help="Interpolation passes into empty sites")
    parser.add_argument("--float32", action="store_true", help="Write float32 samples instead of uint16")
    parser.add_argument("--dump-stages", default=None, help="Directory for intermediate stage TIFFs")
    parser.add_argument("--log-level", default=None, help="Logging level (default: INFO)")
    parser.add_argument("--log-file", default=None, help="Optional log file")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _as_path(value: str) -> Path:
    return Path(value).expanduser().resolve()


def _check_arity(files: Sequence[str], merged: bool) -> None:
    expected = 5 if merged else 3
    if len(files) < expected:
        raise UsageError("Not enough arguments")
    if len(files) > expected:
        raise UsageError("Extra arguments")


def parse_command(argv: Sequence[str] | None = None) -> RunConfig:
    """Validate the command line into a RunConfig, without side effects."""
    args = _build_parser().parse_args(argv)
    _check_arity(args.files, args.merged)

    file_cfg = load_config_file(args.config) if args.config else FileConfig()

    geometry = None
    files = list(args.files)
    if args.merged:
        geometry = parse_geometry(files.pop(0))
    *inputs, output = files

    demosaic = file_cfg.demosaic
    if args.beta is not None or args.passes is not None:
        demosaic = replace(
            demosaic,
            beta=demosaic.beta if args.beta is None else args.beta,
            passes=demosaic.passes if args.passes is None else args.passes,
        )

    output_cfg = file_cfg.output
    if args.float32:
        output_cfg = replace(output_cfg, float32=True)
    if args.dump_stages:
        output_cfg = replace(output_cfg, dump_stages_dir=_as_path(args.dump_stages))

    log_level = args.log_level or file_cfg.log_level
    resolve_level(log_level)

    return RunConfig(
        merged_cfa=bool(args.merged),
        inputs=tuple(_as_path(p) for p in inputs),
        output_path=_as_path(output),
        geometry=geometry,
        demosaic=demosaic,
        output=output_cfg,
        log_level=log_level,
        log_file=_as_path(args.log_file) if args.log_file else file_cfg.log_file,
    )


def main(argv: list[str] | None = None) -> int:
    try:
        config = parse_command(argv)
    except UsageError as exc:
        print(f"usage: {USAGE}", file=sys.stderr)
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except Exception as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    from exr_ssd.pipeline import run

    try:
        configure_logging(config.log_level, config.log_file)
        out_path = run(config)
    except ExrSsdError as exc:
        logger.error("%s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except Exception as exc:
        logger.exception("fatal error")
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(str(out_path))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
