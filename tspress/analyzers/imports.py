"""Rewrites ``import("path").Name`` type references into display names."""

from __future__ import annotations

import os
import re
from pathlib import Path, PurePosixPath
from typing import Optional, Union

_IMPORT_REF_RE = re.compile(r'import\(\s*["\'](?P<path>.*?)["\']\s*\)\s*\.\s*(?P<member>[\w$.]+)')
_LEADING_QUALIFIER_RE = re.compile(r'^\s*import\(\s*["\'].*?["\']\s*\)\s*\.')
_MODULE_SUFFIXES = (".ts", ".tsx", ".d.ts", "/index.ts", "/index.tsx")

PathLike = Union[str, Path]


def _normalise(path: str) -> str:
    return os.path.normcase(os.path.normpath(path)).replace("\\", "/")


def strip_module_suffix(path: PathLike) -> str:
    """Drop a TypeScript source extension, as module specifiers do."""
    text = PurePosixPath(str(path).replace("\\", "/")).as_posix()
    for suffix in (".d.ts", ".tsx", ".ts"):
        if text.endswith(suffix):
            return text[: -len(suffix)]
    return text


def format_import_reference(path: PathLike, member: str) -> str:
    """Build the ``import("<module>").Member`` reference for ``path``."""
    return f'import("{strip_module_suffix(path)}").{member}'


def strip_import_qualifier(text: str) -> str:
    """Remove a leading ``import("...").`` qualifier, leaving the member chain."""
    return _LEADING_QUALIFIER_RE.sub("", text, count=1).strip()


def refers_to(module_path: str, source_path: PathLike) -> bool:
    """True when the module specifier ``module_path`` names ``source_path``."""
    target = _normalise(str(source_path))
    candidate = _normalise(module_path)
    if candidate == target:
        return True
    return any(_normalise(module_path + suffix) == target for suffix in _MODULE_SUFFIXES)


def normalize_import_reference(
    text: str, source_path: PathLike, project_root: Optional[PathLike] = None
) -> str:
    """Shorten a cross-module type reference for display.

    Every reference back into ``source_path`` collapses to its member name. Any
    other reference keeps its module qualifier, minus the ``project_root``
    prefix. Text without a reference is only trimmed.
    """
    text = text.strip()
    if "import(" not in text:
        return text

    def collapse(match: "re.Match[str]") -> str:
        if refers_to(match.group("path"), source_path):
            return match.group("member")
        return match.group(0)

    text = _IMPORT_REF_RE.sub(collapse, text)
    if "import(" not in text or not project_root:
        return text
    root = str(project_root).replace("\\", "/").rstrip("/")
    if not root:
        return text
    return text.replace(root + "/", "").replace(root, "")


__all__ = [
    "format_import_reference",
    "normalize_import_reference",
    "refers_to",
    "strip_import_qualifier",
    "strip_module_suffix",
]
