from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Callable

import pytest

from tests._fixtures.repo_builder import RepoBuilder
from tspress.analyzers.tree_sitter import SourceFile

SOURCE_PATH = "/project/src/config.ts"


@pytest.fixture
def repo_builder(tmp_path: Path) -> RepoBuilder:
    """Provide a reusable project builder rooted at the pytest tmp_path."""
    return RepoBuilder(tmp_path)


@pytest.fixture
def parse_ts() -> Callable[..., SourceFile]:
    """Parse dedented TypeScript text as if it lived at ``/project/src/config.ts``."""

    def _parse(text: str, path: str = SOURCE_PATH) -> SourceFile:
        return SourceFile.parse(textwrap.dedent(text).lstrip("\n"), path=path)

    return _parse
