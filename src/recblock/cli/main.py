"""Command-line entry point: ``recblock --analyze FILE`` prints record layouts."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .. import __version__
from ..exceptions import SchemaError
from .analyze import analyze_file

_EPILOG = """
Examples:
  recblock --analyze records.py         Show record layouts
  recblock --version                    Show version
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="recblock",
        description="recblock: Declarative Binary Record Codec",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=_EPILOG,
    )
    parser.add_argument(
        "--analyze",
        metavar="FILE",
        type=Path,
        help="Import FILE and show the field offsets and widths of every Record it defines",
    )
    parser.add_argument("--version", action="version", version=f"recblock {__version__}")
    return parser


def _run_analyze(file_path: Path) -> int:
    """Print the layouts declared in file_path; returns the exit code."""
    if not file_path.is_file():
        print(f"Error: File not found: {file_path}", file=sys.stderr)
        return 1

    try:
        analyze_file(file_path)
    except SchemaError as e:
        # Raised while the module's Record classes are being compiled
        print(f"Error: invalid record definition in {file_path}: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error analyzing file: {e}", file=sys.stderr)
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run the recblock CLI.

    Args:
        argv: Arguments to parse (defaults to sys.argv)

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.analyze is not None:
        return _run_analyze(args.analyze)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
