from __future__ import annotations

import argparse
import asyncio
import logging
from collections.abc import Iterable
from pathlib import Path

from copywriter import __version__
from copywriter.exceptions import CopywriterError
from copywriter.models import RunConfig, RunTotals
from copywriter.runner import run

EXAMPLES = """\
examples:
  Update copyright year for the .csproj file in the current directory:
    %(prog)s

  Preview changes, but don't write them:
    %(prog)s --dry-run

  Update copyright year in the current directory and 2 levels of subdirectories:
    %(prog)s --max-depth 2

  Update all projects with a copyright owner of Ben Hutchison:
    %(prog)s -d 3 --include-name "Ben Hutchison" ~/Documents/Projects
"""


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="copywriter",
        description=(
            "Update copyright years in project sources. "
            "Handles .NET SDK-style .csproj files and .NET AssemblyInfo.cs files."
        ),
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "parent_directory",
        metavar="parentDirectory",
        nargs="?",
        default=".",
        help="Directory in which to look for project files. Defaults to current working directory.",
    )
    parser.add_argument(
        "-n",
        "--dry-run",
        action="store_true",
        help="Preview but don't write changes to any files.",
    )
    parser.add_argument(
        "-d",
        "--max-depth",
        type=_non_negative_int,
        default=0,
        metavar="N",
        help=(
            "Levels of recursion for subdirectories. "
            "Defaults to only using parentDirectory and not its subdirectories."
        ),
    )
    parser.add_argument(
        "-y",
        "--year",
        type=int,
        default=None,
        metavar="Y",
        help="New year to set. Defaults to current year.",
    )
    parser.add_argument(
        "--exclude-dir",
        action="append",
        default=[],
        metavar="D",
        help="Subdirectories to ignore. Can be passed multiple times.",
    )
    parser.add_argument(
        "--exclude-name",
        action="append",
        default=[],
        metavar="N",
        help=(
            "If this name appears in the copyright line, don't update the year. "
            "Can be passed multiple times."
        ),
    )
    parser.add_argument(
        "--include-name",
        action="append",
        default=[],
        metavar="N",
        help=(
            "Only update the year if the copyright line contains one of these strings. "
            "Can be passed multiple times."
        ),
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Iterable[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(name)s: %(message)s",
    )

    root = Path(args.parent_directory).resolve()
    if not root.is_dir():
        raise SystemExit(f"Path does not exist or is not a directory: {root}")

    config = RunConfig(
        root=root,
        dry_run=args.dry_run,
        max_depth=args.max_depth,
        year=args.year,
        exclude_dirs=frozenset(args.exclude_dir),
        exclude_names=frozenset(args.exclude_name),
        include_names=frozenset(args.include_name),
    )
    logging.getLogger(__name__).debug("Running with %s", config)

    try:
        totals = asyncio.run(run(config))
    except KeyboardInterrupt:
        return 0
    except (CopywriterError, OSError) as exc:
        raise SystemExit(str(exc)) from exc

    print(format_summary(totals, config.dry_run))
    return 0


def format_summary(totals: RunTotals, dry_run: bool) -> str:
    verb = "Would have made" if dry_run else "Made"
    return f"{verb} {totals.replacements:,} replacements in {totals.files_changed:,} files."


if __name__ == "__main__":
    raise SystemExit(main())
