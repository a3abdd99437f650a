#!/usr/bin/env python3
"""
Flatten a directory tree into a single annotated text file.
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, TextIO

from rich.console import Console
from rich.logging import RichHandler

from flatten.combiner import calculate_directory_size, combine_files
from flatten.filters import FilterSet


log = logging.getLogger(__name__)

SIZE_LIMIT = 10 * 1024 * 1024  # 10 MiB
DEFAULT_OUTPUT_PREFIX = "flatten"


def default_output_name(directory: Path, now: Optional[datetime] = None) -> str:
    """Timestamped output file name derived from the directory's base name."""
    now = now or datetime.now()
    stem = directory.name or "root"
    return f"{DEFAULT_OUTPUT_PREFIX}-{stem}-{now.strftime('%Y-%m-%d_%H-%M-%S')}.txt"


def confirm_size(size: int, stdin: Optional[TextIO] = None) -> bool:
    """Ask before writing a large output; only 'y' continues."""
    print(f"Warning: The directory size is {size} bytes. Do you want to continue? (y/n)")
    answer = (stdin or sys.stdin).readline()
    return answer.strip().lower() == 'y'


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='flatten',
        description='Concatenate all files in a directory into a single annotated file.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  %(prog)s /path/to/project -o combined.txt
  %(prog)s . --exclude build --exclude docs/generated --include docs/generated/index.md
  %(prog)s . --allow-hidden
        '''
    )

    parser.add_argument(
        'directory',
        type=str,
        nargs='?',
        default='.',
        help='Directory to flatten (default: current directory)'
    )

    parser.add_argument(
        '-o', '--output',
        type=str,
        default=None,
        help='Output file name (default: flatten-<directory>-<timestamp>.txt)'
    )

    parser.add_argument(
        '-e', '--exclude',
        action='append',
        default=[],
        help='File or directory to exclude (repeatable)'
    )

    parser.add_argument(
        '--include',
        action='append',
        default=[],
        help='File or directory to include, overriding any exclusion (repeatable)'
    )

    parser.add_argument(
        '--allow-hidden',
        action='store_true',
        help='Include hidden files and directories'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Log every filtering decision'
    )

    return parser


def main(argv: Optional[list[str]] = None, stdin: Optional[TextIO] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    directory = Path(args.directory).resolve()

    if not directory.is_dir():
        log.error(f"Error: '{directory}' is not a valid directory")
        return 1

    output_file = Path(args.output or default_output_name(directory)).resolve()

    print(f"Processing directory: {directory}")
    print(f"Output file: {output_file}")

    if args.exclude:
        print(f"Excluding: {', '.join(args.exclude)}")
    if args.include:
        print(f"Including: {', '.join(args.include)}")

    filter_set = FilterSet.build(directory, excludes=args.exclude, includes=args.include)

    try:
        directory_size = calculate_directory_size(
            directory, filter_set, args.allow_hidden, output_file
        )
        if directory_size > SIZE_LIMIT and not confirm_size(directory_size, stdin):
            print("Aborted, no output written.")
            return 0

        file_count = combine_files(directory, output_file, filter_set, args.allow_hidden)
    except (OSError, ValueError) as e:
        log.error(f"Error: {e}")
        return 1

    print(f"Combined {file_count} files into {output_file}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
