"""
Include/exclude rules for a flatten run.

User-supplied paths are canonicalized against the traversal root and turned
into anchored gitignore-style patterns. A FilterSet evaluates its rules in
order and the last matching rule wins, so includes (always appended last)
take priority over any exclude that matches the same path.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

import pathspec


log = logging.getLogger(__name__)

NEGATION = "!"

# The tool's own output family, see cli.DEFAULT_OUTPUT_PREFIX
DEFAULT_EXCLUDES: tuple[str, ...] = ("!flatten-*.txt",)

_GLOB_SPECIAL = re.compile(r"([\\*?\[\]])")


def _escape(rel_path: str) -> str:
    return _GLOB_SPECIAL.sub(r"\\\1", rel_path)


def normalize_path(root: Path, raw: str | Path, exclude: bool = False) -> Optional[str]:
    """
    Turn a user-supplied path into a root-relative pattern.

    Args:
        root: Canonical traversal root
        raw: Absolute path, or a path relative to root
        exclude: Prefix the pattern with the negation marker

    Returns:
        The pattern, or None when the path does not exist or cannot be resolved
    """
    candidate = Path(raw)
    if not candidate.is_absolute():
        candidate = root / candidate

    try:
        resolved = candidate.resolve(strict=True)
    except (OSError, RuntimeError) as e:
        log.debug(f"Dropping filter path {raw}: {e}")
        return None

    try:
        rel = resolved.relative_to(root).as_posix()
    except ValueError:
        # Outside the root, keep the canonical path as-is (FilterSet never matches it)
        pattern = _escape(resolved.as_posix())
    else:
        pattern = "**" if rel == "." else "/" + _escape(rel)

    return NEGATION + pattern if exclude else pattern


def _rel_key(root: Path, raw: str | Path) -> Optional[str]:
    """Root-relative POSIX form of a raw path, None if missing or outside root."""
    candidate = Path(raw)
    if not candidate.is_absolute():
        candidate = root / candidate
    try:
        rel = candidate.resolve(strict=True).relative_to(root).as_posix()
    except (OSError, RuntimeError, ValueError):
        return None
    return "" if rel == "." else rel


@dataclass(frozen=True)
class Rule:
    """One pattern of a FilterSet."""
    pattern: str
    exclude: bool
    spec: Optional[pathspec.PathSpec] = field(compare=False, repr=False)

    @classmethod
    def parse(cls, line: str, outside_root: bool = False) -> "Rule":
        """Compile a pattern line; rules for paths outside the root never match."""
        exclude = line.startswith(NEGATION)
        body = line[len(NEGATION):] if exclude else line
        return cls(
            pattern=line,
            exclude=exclude,
            spec=None if outside_root else pathspec.GitIgnoreSpec.from_lines([body]),
        )

    def matches(self, rel_path: str, is_dir: bool = False) -> bool:
        if self.spec is None:
            return False
        return self.spec.match_file(rel_path + "/" if is_dir else rel_path)


@dataclass(frozen=True)
class FilterSet:
    """Ordered include/exclude rules; later rules override earlier ones."""
    rules: tuple[Rule, ...] = ()
    include_paths: frozenset[str] = frozenset()
    include_ancestors: frozenset[str] = frozenset()

    @classmethod
    def build(
        cls,
        root: Path,
        excludes: Iterable[str | Path] = (),
        includes: Iterable[str | Path] = (),
        default_excludes: Iterable[str] = DEFAULT_EXCLUDES,
    ) -> "FilterSet":
        """
        Build the rule list for one run.

        Order is fixed: default excludes, user excludes, user includes.
        Paths that do not exist are silently dropped.
        """
        root = Path(root).resolve()
        excludes = list(excludes)
        includes = list(includes)

        rules = [Rule.parse(line) for line in default_excludes]
        for raws, exclude in ((excludes, True), (includes, False)):
            for raw in raws:
                line = normalize_path(root, raw, exclude=exclude)
                if line:
                    rules.append(Rule.parse(line, outside_root=_rel_key(root, raw) is None))

        include_paths = {k for k in (_rel_key(root, i) for i in includes) if k is not None}
        ancestors = set()
        for rel in include_paths:
            parts = rel.split("/") if rel else []
            for depth in range(1, len(parts)):
                ancestors.add("/".join(parts[:depth]))

        for rule in rules:
            log.debug(f"Filter rule: {rule.pattern}")

        return cls(
            rules=tuple(rules),
            include_paths=frozenset(include_paths),
            include_ancestors=frozenset(ancestors),
        )

    @property
    def patterns(self) -> list[str]:
        return [rule.pattern for rule in self.rules]

    def match(self, rel_path: str, is_dir: bool = False) -> Optional[bool]:
        """
        Evaluate the rules against a root-relative path.

        Returns True if the last matching rule is an include, False if it is
        an exclude, and None if no rule matches.
        """
        verdict = None
        for rule in self.rules:
            if rule.matches(rel_path, is_dir):
                verdict = not rule.exclude
        return verdict

    def is_explicit_include(self, rel_path: str) -> bool:
        return rel_path in self.include_paths

    def is_include_ancestor(self, rel_path: str) -> bool:
        """Check if an include-listed path lies somewhere below rel_path."""
        return rel_path in self.include_ancestors
