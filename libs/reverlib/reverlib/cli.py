"""reverc -- command-line compiler for ReverHTTP ``.rever`` files.

Usage:
  reverc [options] FILE...     compile and merge FILEs into one IR document
  reverc [options]             compile the files matched by ``include`` in .reverc.yml
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

from reverlib import __version__
from reverlib.compiler import compile_files
from reverlib.config import FORMATS, ReverConfig, load_config
from reverlib.errors import CompileError, ConfigError
from reverlib.ir import nodes as ir
from reverlib.ir import to_json, to_yaml

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reverc",
        description="Compile ReverHTTP route files into a JSON or YAML IR document.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("files", nargs="*", metavar="FILE", help="ReverHTTP source file (.rever)")
    parser.add_argument("-o", "--output", default=None, help="Output file path (default: stdout)")
    parser.add_argument("--format", choices=FORMATS, default=None, help="Output format (default: json)")
    indent = parser.add_mutually_exclusive_group()
    indent.add_argument("--indent", type=int, default=None, help="JSON indent width (default: 2)")
    indent.add_argument("--compact", action="store_true", help="Emit single-line JSON")
    parser.add_argument("--config", default=None, help="Config file path (default: ./.reverc.yml)")
    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="Log progress (-vv for debug output)"
    )
    return parser


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _apply_overrides(config: ReverConfig, args: argparse.Namespace) -> ReverConfig:
    if args.output is not None:
        config.output = args.output
    if args.format is not None:
        config.format = args.format
    if args.compact:
        config.indent = 0
    elif args.indent is not None:
        config.indent = args.indent
    return config


def render(root: ir.Root, config: ReverConfig) -> str:
    """Serialize *root* in the configured format."""
    if config.format == "yaml":
        return to_yaml(root)
    return to_json(root, indent=config.indent)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        config = _apply_overrides(load_config(args.config), args)
    except ConfigError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    # include patterns are relative to the directory holding the config file.
    config_dir = os.path.dirname(args.config) if args.config else "."
    files = args.files or config.source_files(config_dir or ".")
    if not files:
        parser.print_usage(sys.stderr)
        print("error: no input files", file=sys.stderr)
        return 2

    try:
        root = compile_files(files)
    except CompileError as e:
        for diagnostic in e.diagnostics:
            print(diagnostic, file=sys.stderr)
        return 1
    except OSError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    text = render(root, config)
    if config.output:
        try:
            directory = os.path.dirname(config.output)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(config.output, "w", encoding="utf-8") as f:
                f.write(text)
        except OSError as e:
            print(f"error writing output: {e}", file=sys.stderr)
            return 2
        logger.info("wrote %s", config.output)
    else:
        sys.stdout.write(text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
