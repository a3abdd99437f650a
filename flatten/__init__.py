"""Concatenate a directory tree into one annotated text document."""

from flatten.combiner import calculate_directory_size, combine_files, format_block
from flatten.filters import FilterSet, normalize_path
from flatten.ignore import IgnoreOracle
from flatten.walker import Entry, EntryKind, walk

__all__ = [
    "Entry",
    "EntryKind",
    "FilterSet",
    "IgnoreOracle",
    "calculate_directory_size",
    "combine_files",
    "format_block",
    "normalize_path",
    "walk",
]
