"""
tailsort: sorts utility classes in front-end source files.

Usage:
  tailsort <command> [options]

Commands:
  format   Sort classes in files or stdin (check, write or verify mode).
  check    Exit with status 1 when any class list is out of order.
  config   Create, validate or show the configuration file.
"""

from __future__ import annotations

import argparse
import logging

from . import __version__
from .commands import config as cmd_config
from .commands import format as cmd_format


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tailsort",
        description="Sort utility classes into a canonical order.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version", action="version", version=f"tailsort {__version__}"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="count",
        default=0,
        help="Log progress (-v) or debug details (-vv) to stderr.",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        metavar="<command>",
        dest="command",
    )
    subparsers.required = True

    cmd_format.add_parser(subparsers)
    cmd_config.add_parser(subparsers)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level, format="%(asctime)s [%(name)s] %(levelname)s: %(message)s")

    args.func(args)


if __name__ == "__main__":
    main()
