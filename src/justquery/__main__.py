#!/usr/bin/env python3
"""Command-line interface for justquery."""

from __future__ import annotations

import argparse
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

from .constants import Options
from .parser import load
from .selector import SelectorError


def _get_version() -> str:
    try:
        return version("justquery")
    except PackageNotFoundError:  # pragma: no cover
        return "dev"


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="justquery",
        description="Select elements from an HTML document and print their HTML or text.",
        epilog=(
            "Examples:\n"
            "  justquery page.html\n"
            "  cat page.html | justquery -\n"
            "  justquery page.html --selector 'div.content p' --format text\n"
            "  justquery page.html --selector 'a[rel~=nofollow]' --first\n"
            "\n"
            "If you don't have the 'justquery' command available, use:\n"
            "  python -m justquery ...\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "path",
        nargs="?",
        help="HTML file to parse, or '-' to read from stdin",
    )
    parser.add_argument(
        "--selector",
        help="Selector for choosing elements below the root element (defaults to the root element)",
    )
    parser.add_argument(
        "--format",
        choices=["html", "text"],
        default="html",
        help="Output format (default: html)",
    )
    parser.add_argument(
        "--first",
        action="store_true",
        help="Only output the first matching element",
    )
    parser.add_argument(
        "--no-pretty",
        action="store_true",
        help="HTML-only: print the markup without reformatting it",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"justquery {_get_version()}",
    )

    args = parser.parse_args(argv)

    if not args.path:
        parser.print_help(sys.stderr)
        raise SystemExit(1)

    return args


def _read_html(path: str) -> str | bytes:
    if path == "-":
        return sys.stdin.read()

    return Path(path).read_bytes()


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    options = Options.SKIP_PRETTY_PRINT if args.no_pretty else Options.NONE
    root = load(_read_html(args.path), options)

    try:
        selected = root.select(args.selector) if args.selector else root
    except SelectorError as e:
        print(str(e), file=sys.stderr)
        raise SystemExit(2) from e

    if not selected:
        raise SystemExit(1)

    if args.first:
        selected = selected.element(0)

    if args.format == "html":
        outputs = [element.get_html() for element in selected]
    else:
        outputs = [element.text() for element in selected]
    sys.stdout.write("\n".join(outputs))
    sys.stdout.write("\n")


if __name__ == "__main__":
    main()
