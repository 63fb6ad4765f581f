"""TypeScript declaration analysis: parsing, classification and type resolution."""

from __future__ import annotations

from .classifiers import infer_literal_type, is_primitive_array_literal
from .decompose import decompose
from .functions import FunctionCollector
from .imports import normalize_import_reference
from .resolver import (
    CyclicDefaultExport,
    MissingDefaultExport,
    MissingNamedExport,
    TypeResolutionError,
    TypeResolver,
    resolve_type,
)
from .tree_sitter import Declaration, DeclarationKind, SourceFile

__all__ = [
    "CyclicDefaultExport",
    "Declaration",
    "DeclarationKind",
    "FunctionCollector",
    "MissingDefaultExport",
    "MissingNamedExport",
    "SourceFile",
    "TypeResolutionError",
    "TypeResolver",
    "decompose",
    "infer_literal_type",
    "is_primitive_array_literal",
    "normalize_import_reference",
    "resolve_type",
]
