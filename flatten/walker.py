"""
Directory traversal for flatten.

walk() is a lazy generator over the admitted files under a root. Directories
rejected by the hidden/ignore/filter checks are pruned before os.walk
descends into them. Symbolic links are never followed.
"""

import enum
import logging
import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

from flatten.filters import FilterSet
from flatten.ignore import IgnoreOracle


log = logging.getLogger(__name__)


class EntryKind(enum.Enum):
    FILE = "file"
    DIRECTORY = "directory"
    OTHER = "other"


@dataclass(frozen=True)
class Entry:
    """A filesystem node visited during a walk."""
    path: Path
    rel_path: str
    kind: EntryKind
    size: int


def classify(path: Path) -> tuple[EntryKind, os.stat_result]:
    """Stat a path without following links and tag it with its kind."""
    st = os.lstat(path)
    if stat.S_ISREG(st.st_mode):
        return EntryKind.FILE, st
    if stat.S_ISDIR(st.st_mode):
        return EntryKind.DIRECTORY, st
    return EntryKind.OTHER, st


def _raise(error: OSError):
    raise error


class Walker:
    """Applies the admission checks to each node of one traversal."""

    def __init__(
        self,
        root: Path,
        filter_set: FilterSet,
        oracle,
        output_file: Optional[Path] = None,
    ):
        self.root = root
        self.filter_set = filter_set
        self.oracle = oracle
        self.output_file = Path(output_file).resolve() if output_file else None
        # Directories entered only to reach an include-listed path below them
        self._transit: set[Path] = set()

    def visit(self, path: Path) -> Optional[Entry]:
        """
        Classify one node and decide whether it survives.

        Returns the Entry for an admitted file or a directory to descend into,
        None for anything pruned or skipped.
        """
        kind, st = classify(path)
        rel = path.relative_to(self.root).as_posix()

        if kind is EntryKind.OTHER:
            log.debug(f"Skipping non-regular file: {rel}")
            return None

        is_dir = kind is EntryKind.DIRECTORY
        ancestor = is_dir and self.filter_set.is_include_ancestor(rel)
        explicit = self.filter_set.is_explicit_include(rel)

        verdict = self.filter_set.match(rel, is_dir)
        if explicit:
            blocked = False
        elif verdict is True:
            # Inside an included directory ignore files no longer apply
            blocked = self.oracle.prune_hidden(path)
        else:
            blocked = self.oracle.should_prune(path, is_dir)

        if verdict is False:
            log.debug(f"Excluded by filter: {rel}")
            blocked = True
        elif verdict is not True and path.parent in self._transit:
            blocked = True

        if blocked:
            if not ancestor:
                return None
            log.debug(f"Descending towards include: {rel}")
            self._transit.add(path)

        if kind is EntryKind.FILE and self.output_file is not None and path == self.output_file:
            log.debug(f"Skipping output file: {rel}")
            return None

        return Entry(path=path, rel_path=rel, kind=kind, size=st.st_size)

    def __iter__(self) -> Iterator[Entry]:
        for dirpath, dirs, filenames in os.walk(self.root, onerror=_raise):
            current = Path(dirpath)

            # Modifying dirs in-place prevents os.walk from descending
            # (symlinked directories come back as OTHER and are dropped here)
            kept = []
            for name in sorted(dirs):
                entry = self.visit(current / name)
                if entry is not None and entry.kind is EntryKind.DIRECTORY:
                    kept.append(name)
            dirs[:] = kept

            for name in sorted(filenames):
                entry = self.visit(current / name)
                if entry is not None and entry.kind is EntryKind.FILE:
                    yield entry


def walk(
    root: Path,
    filter_set: FilterSet,
    allow_hidden: bool = False,
    output_file: Optional[Path] = None,
    oracle=None,
) -> Iterator[Entry]:
    """
    Yield every admitted file under root, in a deterministic order.

    Args:
        root: Directory to traverse
        filter_set: Include/exclude rules for this run
        allow_hidden: Admit dot files and descend into dot directories
        output_file: Never yielded, even if it lies inside root
        oracle: Object with should_prune(path, is_dir) and prune_hidden(path);
            defaults to an IgnoreOracle reading .gitignore/.ignore files

    Raises:
        OSError: A directory could not be listed or a node could not be stat'ed
        ValueError: An ignore file holds a pattern that cannot be compiled
    """
    root = Path(root).resolve()
    if not root.is_dir():
        raise ValueError(f"'{root}' is not a valid directory")
    if oracle is None:
        oracle = IgnoreOracle(root, allow_hidden=allow_hidden)

    yield from Walker(root, filter_set, oracle, output_file)
