"""Discovers the TypeScript sources that should be documented."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence

from .config import CONFIG_FILENAME, ConfigError, load_config
from .logging import get_logger
from .models import SourceManifest

_logger = get_logger("repo_scanner")

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    "node_modules",
    "dist",
    "build",
    "coverage",
    ".next",
    ".turbo",
    ".cache",
    ".vitepress",
}

_SOURCE_SUFFIXES = (".ts", ".tsx")
_SKIPPED_SUFFIXES = (".d.ts", ".test.ts", ".spec.ts", ".test.tsx", ".spec.tsx")


@dataclass(frozen=True)
class ExcludePattern:
    """One gitignore-style pattern (``dir/``, ``/anchored``, ``!negated``, globs)."""

    glob: str
    only_dirs: bool = False
    rooted: bool = False
    negated: bool = False

    @classmethod
    def parse(cls, raw: str) -> Optional["ExcludePattern"]:
        text = raw.strip()
        if not text or text.startswith("#"):
            return None
        negated = text.startswith("!")
        text = text.lstrip("!")
        only_dirs = text.endswith("/")
        rooted = text.startswith("/")
        glob = text.strip("/")
        if not glob:
            return None
        return cls(glob=glob, only_dirs=only_dirs, rooted=rooted or "/" in glob, negated=negated)

    def hits(self, rel_path: str, is_dir: bool) -> bool:
        if self.only_dirs and not is_dir:
            return False
        if not self.rooted:
            # unrooted patterns match any single path segment
            return any(fnmatchcase(segment, self.glob) for segment in rel_path.split("/"))
        return fnmatchcase(rel_path, self.glob) or rel_path.startswith(self.glob + "/")


class ExcludeRules:
    """Ordered patterns; the last matching pattern decides, as in ``.gitignore``."""

    def __init__(self, patterns: Iterable[ExcludePattern] = ()) -> None:
        self.patterns: List[ExcludePattern] = list(patterns)

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "ExcludeRules":
        parsed = (ExcludePattern.parse(line) for line in lines)
        return cls(pattern for pattern in parsed if pattern is not None)

    def extend(self, other: "ExcludeRules") -> None:
        self.patterns.extend(other.patterns)

    def excludes(self, rel_path: str, is_dir: bool) -> bool:
        verdict = False
        for pattern in self.patterns:
            if pattern.hits(rel_path, is_dir):
                verdict = not pattern.negated
        return verdict


def _load_rules(root: Path, extra: Sequence[str]) -> ExcludeRules:
    gitignore = root / ".gitignore"
    lines = gitignore.read_text(encoding="utf-8").splitlines() if gitignore.is_file() else []
    rules = ExcludeRules.from_lines(lines)
    rules.extend(ExcludeRules.from_lines(extra))
    try:
        rules.extend(ExcludeRules.from_lines(load_config(root / CONFIG_FILENAME).exclude_paths))
    except ConfigError as exc:
        _logger.warning("Ignoring exclude_paths from %s: %s", CONFIG_FILENAME, exc)
    return rules


def _is_source(filename: str) -> bool:
    lower = filename.lower()
    return lower.endswith(_SOURCE_SUFFIXES) and not lower.endswith(_SKIPPED_SUFFIXES)


def _walk_sources(root: Path, rules: ExcludeRules) -> Iterator[str]:
    for dirpath, dirnames, filenames in os.walk(root):
        prefix = Path(dirpath).relative_to(root).as_posix()
        prefix = "" if prefix == "." else prefix + "/"

        dirnames[:] = [
            name
            for name in sorted(dirnames)
            if name not in _EXCLUDED_DIRS and not rules.excludes(prefix + name, True)
        ]
        for filename in sorted(filenames):
            if not _is_source(filename):
                continue
            rel_path = prefix + filename
            if rules.excludes(rel_path, False):
                _logger.debug("Excluded %s", rel_path)
                continue
            yield rel_path


class RepoScanner:
    """Walks a project directory collecting documentable TypeScript files."""

    def __init__(self, exclude_paths: Sequence[str] = ()) -> None:
        self.exclude_paths = list(exclude_paths)

    def scan(self, root: str) -> SourceManifest:
        """Return the relative paths of sources under ``root`` in walk order."""
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Source path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Source path is not a directory: {root}")

        rules = _load_rules(root_path, self.exclude_paths)
        files = list(_walk_sources(root_path, rules))
        _logger.debug("Found %d TypeScript sources under %s", len(files), root_path)
        return SourceManifest(root=str(root_path), files=files)


__all__ = ["ExcludePattern", "ExcludeRules", "RepoScanner"]
