"""CLI entry point: `xylo generate art.xylo -o art.png` or `python -m xylo ...`."""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

from .utils.config import DEFAULT_CANVAS_SIZE, DEFAULT_MAX_DEPTH, DEFAULT_OUTPUT_SUFFIX


def _seed(text: str):
    """Integers stay integers, anything else is a string seed."""
    try:
        return int(text)
    except ValueError:
        return text


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-v", "--verbose", action="count", default=0, help="-v for progress, -vv for debug output")

    parser = argparse.ArgumentParser(prog="xylo", description="Generate images from xylo (.xylo) programs.")
    commands = parser.add_subparsers(dest="command", required=True)

    generate = commands.add_parser("generate", parents=[common], help="render a program to PNG")
    generate.add_argument("file", type=Path, help="path to .xylo source file")
    generate.add_argument("-o", "--output", type=Path, help="output PNG (default: FILE with .png suffix)")
    generate.add_argument("--width", type=int, default=DEFAULT_CANVAS_SIZE)
    generate.add_argument("--height", type=int, default=DEFAULT_CANVAS_SIZE)
    generate.add_argument("--seed", type=_seed, help="integer or string seed (default: derived from the clock)")
    generate.add_argument("--max-depth", type=int, default=DEFAULT_MAX_DEPTH, help="recursion ceiling")

    check = commands.add_parser("check", parents=[common], help="parse and validate a program without running it")
    check.add_argument("file", type=Path, help="path to .xylo source file")
    return parser


def _read(path: Path) -> Optional[str]:
    from .utils.io_utils import read_source_file

    if not path.exists():
        sys.stderr.write(f"xylo: error: file not found: {path}\n")
        return None
    if not path.is_file():
        sys.stderr.write(f"xylo: error: not a file: {path}\n")
        return None
    try:
        return read_source_file(path)
    except (OSError, UnicodeDecodeError) as e:
        sys.stderr.write(f"xylo: error: could not read file: {e}\n")
        return None


def main(argv: Optional[List[str]] = None) -> int:
    from .compiler.driver import XyloCompiler
    from .runtime.runtime import XyloRuntime
    from .utils.config import GenerationConfig
    from .utils.io_utils import write_png

    args = _build_parser().parse_args(argv)
    level = logging.DEBUG if args.verbose > 1 else logging.INFO if args.verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    source = _read(args.file)
    if source is None:
        return 1

    compiler = XyloCompiler()
    result = compiler.compile(source, str(args.file), check_names=args.command == "check")
    if not result.success:
        sys.stderr.write(result.reporter.format_all_errors() + "\n")
        return 1
    if args.command == "check":
        program = result.program
        sys.stderr.write(f"xylo: {args.file}: {len(program.table)} definitions ok\n")
        return 0

    seed = args.seed
    if seed is None:
        seed = time.time_ns() % (2 ** 32)
        sys.stderr.write(f"xylo: seed {seed}\n")
    config = GenerationConfig(seed=seed, width=args.width, height=args.height, max_depth=args.max_depth)
    exec_result = XyloRuntime(config).execute(result)
    if exec_result.error is not None:
        sys.stderr.write(f"{exec_result.error}\n")
        return 1

    output = args.output or args.file.with_suffix(DEFAULT_OUTPUT_SUFFIX)
    try:
        write_png(output, exec_result.value)
    except OSError as e:
        sys.stderr.write(f"xylo: error: could not write {output}: {e}\n")
        return 1
    logging.getLogger("xylo.cli").info("wrote %s", output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
