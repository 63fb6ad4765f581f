"""Resolves an exported name to its documented type structure."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from ..logging import get_logger
from ..models import UNKNOWN_TYPE_MESSAGE, FieldEntry, TypeItem, TypeKind, TypeValue
from .imports import normalize_import_reference, strip_import_qualifier
from .tree_sitter import Declaration, DeclarationKind, SourceFile

_logger = get_logger("resolver")

DEFAULT_MAX_DEFAULT_DEPTH = 1


class TypeResolutionError(RuntimeError):
    """Base class for failures resolving an export in a source file."""

    def __init__(self, message: str, path: str, name: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path
        self.name = name


class MissingDefaultExport(TypeResolutionError):
    def __init__(self, path: str) -> None:
        super().__init__(f"{path} has no default export", path)


class MissingNamedExport(TypeResolutionError):
    def __init__(self, path: str, name: str) -> None:
        super().__init__(f"{path} does not export {name!r}", path, name)


class CyclicDefaultExport(TypeResolutionError):
    def __init__(self, path: str, name: str) -> None:
        super().__init__(
            f"{path}: default export {name!r} does not resolve to a declaration", path, name
        )


class TypeResolver:
    """Turns ``(source file, export name)`` into a :class:`TypeItem`.

    The resolver holds no per-call state, so one instance can serve many
    files concurrently as long as each ``SourceFile`` is left untouched.
    """

    def __init__(
        self,
        project_root: Optional[Union[str, Path]] = None,
        max_default_depth: int = DEFAULT_MAX_DEFAULT_DEPTH,
    ) -> None:
        self.project_root = project_root
        self.max_default_depth = max_default_depth

    def resolve(self, source: SourceFile, name: str, is_default: bool = False) -> TypeItem:
        return self._resolve(source, name, is_default, depth=0)

    def _resolve(self, source: SourceFile, name: str, is_default: bool, depth: int) -> TypeItem:
        if is_default:
            if depth >= self.max_default_depth:
                raise CyclicDefaultExport(source.path, name)
            default = source.default_export()
            if default is None:
                raise MissingDefaultExport(source.path)
            declared = normalize_import_reference(
                default.declared_type_text, source.path, self.project_root
            )
            real_name = strip_import_qualifier(declared)
            return self._resolve(source, real_name, real_name == "default", depth + 1)

        declaration = self._find(source, name, via_default=depth > 0)
        return self._describe(declaration)

    def _find(self, source: SourceFile, name: str, via_default: bool) -> Declaration:
        exported = source.exported_declarations()
        declarations = exported.get(name)
        if declarations:
            if len(declarations) > 1:
                _logger.debug(
                    "%s exports %r %d times; using the first declaration",
                    source.path,
                    name,
                    len(declarations),
                )
            return declarations[0]
        if via_default and exported.get("default"):
            return exported["default"][0]
        raise MissingNamedExport(source.path, name)

    def _describe(self, declaration: Declaration) -> TypeItem:
        if declaration.kind is DeclarationKind.INTERFACE:
            return TypeItem(TypeKind.STRUCTURAL, self._members(declaration), declaration.docs())
        if declaration.kind is DeclarationKind.ENUM:
            return TypeItem(TypeKind.ENUMERATION, self._members(declaration), declaration.docs())
        if declaration.kind is DeclarationKind.TYPE_ALIAS:
            return TypeItem(TypeKind.ALIAS, declaration.alias_value() or "", declaration.docs())
        return TypeItem(TypeKind.UNKNOWN, UNKNOWN_TYPE_MESSAGE, None)

    @staticmethod
    def _members(declaration: Declaration) -> Union[TypeValue, str]:
        fields: TypeValue = {}
        for member in declaration.members():
            if member.name in fields:
                continue
            fields[member.name] = FieldEntry(value=member.text.strip(), doc=member.doc)
        # an empty body renders as an empty value rather than an empty table
        return fields or ""


def resolve_type(
    source: SourceFile,
    export_name: str,
    is_default: bool = False,
    *,
    project_root: Optional[Union[str, Path]] = None,
) -> TypeItem:
    """Resolve ``export_name`` (or the default export) of ``source``."""
    return TypeResolver(project_root=project_root).resolve(source, export_name, is_default)


__all__ = [
    "CyclicDefaultExport",
    "MissingDefaultExport",
    "MissingNamedExport",
    "TypeResolutionError",
    "TypeResolver",
    "resolve_type",
]
