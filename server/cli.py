#!/usr/bin/env python3
"""Convert an ANSI art file from 256/RGB colors to the 16-color palette."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from ansi_parser import ERROR_POLICIES, MalformedEscapeError
from downsample import string_to_ansi16

logger = logging.getLogger("ansi16")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="ansi16",
        description="Downsample 256-color and true-color ANSI text to 16 colors",
    )
    parser.add_argument("path", help="ANSI file to read, or - for stdin")
    parser.add_argument("-o", "--output", default="", help="Write to this file instead of stdout")
    parser.add_argument(
        "--errors",
        choices=ERROR_POLICIES,
        default="strict",
        help="strict: fail on a malformed color sequence; skip: drop it and continue",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log skipped escape sequences")
    return parser.parse_args(argv)


def read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    level = "DEBUG" if args.verbose else os.environ.get("ANSI16_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        content = read_input(args.path)
    except (OSError, UnicodeDecodeError) as exc:
        print(f"error: failed to read {args.path}: {exc}", file=sys.stderr)
        return 2

    try:
        output = string_to_ansi16(content, errors=args.errors)
    except MalformedEscapeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    logger.debug("Converted %d characters into %d", len(content), len(output))

    if args.output:
        Path(args.output).write_text(output + "\n", encoding="utf-8")
    else:
        print(output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
