"""
Concatenate all admitted files under a directory into a single file.
"""

import logging
from pathlib import Path
from typing import Optional

from flatten.filters import FilterSet
from flatten.languages import language_for
from flatten.walker import walk


log = logging.getLogger(__name__)

NON_UTF8_PLACEHOLDER = "<non-UTF-8 data>"
FENCE = "```"


def decode_content(data: bytes, placeholder: str = NON_UTF8_PLACEHOLDER) -> str:
    """Decode file bytes as UTF-8, or return the placeholder for anything else."""
    try:
        return data.decode('utf-8')
    except UnicodeDecodeError:
        return placeholder


def format_block(rel_path: str, data: bytes) -> str:
    """Render one file as a header line plus a fenced, language-tagged block."""
    content = decode_content(data)
    # Ensure there's a newline before the closing fence
    if content and not content.endswith('\n'):
        content += '\n'
    return f"## {rel_path}\n{FENCE}{language_for(rel_path)}\n{content}{FENCE}\n\n"


def calculate_directory_size(
    directory: Path,
    filter_set: FilterSet,
    allow_hidden: bool = False,
    output_file: Optional[Path] = None,
) -> int:
    """Sum the sizes, in bytes, of every file a combine run would write."""
    return sum(entry.size for entry in walk(directory, filter_set, allow_hidden, output_file))


def combine_files(
    directory: Path,
    output_file: Path,
    filter_set: FilterSet,
    allow_hidden: bool = False,
) -> int:
    """
    Combine all admitted files into a single output file.

    The first read or write error propagates and leaves the output truncated.

    Returns:
        Number of files written
    """
    file_count = 0

    with open(output_file, 'w', encoding='utf-8', newline='') as out:
        for entry in walk(directory, filter_set, allow_hidden, output_file):
            log.debug(f"Reading {entry.rel_path}")
            with open(entry.path, 'rb') as f:
                data = f.read()
            out.write(format_block(entry.rel_path, data))
            file_count += 1

    return file_count
