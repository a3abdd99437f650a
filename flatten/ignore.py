"""
Ignore-file and hidden-file policy.

Ignore files are read from every directory between the traversal root and the
path being checked. The nearest directory whose rules match decides, so a
deeper ignore file can re-include what a parent excluded. A repository
checkout is not required.
"""

import logging
from pathlib import Path
from typing import Optional

import pathspec


log = logging.getLogger(__name__)

# Later names take precedence within one directory
IGNORE_FILENAMES: tuple[str, ...] = (".gitignore", ".ignore")


def is_hidden(path: Path) -> bool:
    """Check if a file or directory name starts with a dot."""
    return path.name.startswith(".")


class IgnoreOracle:
    """Decides whether a path is pruned by hidden-file policy or ignore files."""

    def __init__(
        self,
        root: Path,
        allow_hidden: bool = False,
        ignore_filenames: tuple[str, ...] = IGNORE_FILENAMES,
    ):
        self.root = Path(root).resolve()
        self.allow_hidden = allow_hidden
        self.ignore_filenames = ignore_filenames
        self._specs: dict[Path, Optional[pathspec.GitIgnoreSpec]] = {}

    def _spec_for(self, directory: Path) -> Optional[pathspec.GitIgnoreSpec]:
        """Load (and cache) the combined ignore rules of one directory."""
        if directory in self._specs:
            return self._specs[directory]

        lines = []
        for name in self.ignore_filenames:
            ignore_file = directory / name
            if ignore_file.is_file():
                with open(ignore_file, 'r', encoding='utf-8', errors='replace') as f:
                    lines.extend(f.read().splitlines())
                log.debug(f"Loaded ignore rules from {ignore_file}")

        try:
            spec = pathspec.GitIgnoreSpec.from_lines(lines) if lines else None
        except ValueError as e:
            raise ValueError(f"Invalid ignore rules in {directory}: {e}") from e
        self._specs[directory] = spec
        return spec

    def is_ignored(self, path: Path, is_dir: bool = False) -> bool:
        """Check ignore files from the nearest directory up to the root."""
        path = Path(path)
        try:
            path.relative_to(self.root)
        except ValueError:
            return False

        directory = path.parent
        while True:
            spec = self._spec_for(directory)
            if spec is not None:
                rel = path.relative_to(directory).as_posix()
                result = spec.check_file(rel + "/" if is_dir else rel)
                if result.include is not None:
                    return result.include
            if directory == self.root:
                return False
            directory = directory.parent

    def prune_hidden(self, path: Path) -> bool:
        """Hidden-name check alone, for paths an include rule already admits."""
        path = Path(path)
        if not self.allow_hidden and is_hidden(path):
            log.debug(f"Skipping hidden path: {path}")
            return True
        return False

    def should_prune(self, path: Path, is_dir: bool = False) -> bool:
        path = Path(path)
        if self.prune_hidden(path):
            return True
        if self.is_ignored(path, is_dir):
            log.debug(f"Skipping ignored path: {path}")
            return True
        return False
