"""Collects signatures and docs of exported functions."""

from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple, Union

from tree_sitter import Node

from ..logging import get_logger
from ..models import DocBlock, FunctionDoc, ParamDoc
from .classifiers import infer_literal_type, is_primitive_array_literal
from .imports import format_import_reference, normalize_import_reference
from .tree_sitter import Declaration, DeclarationKind, SourceFile

_logger = get_logger("functions")

_PRIMITIVES = {
    "string",
    "number",
    "boolean",
    "undefined",
    "null",
    "symbol",
    "any",
    "unknown",
    "void",
    "never",
    "object",
    "bigint",
}
_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][\w$]*$")
_TYPE_NAME_RE = re.compile(r"\b[A-Z_$][\w$]*\b")
_SOURCE_SUFFIXES = (".ts", ".tsx", ".d.ts", "/index.ts", "/index.tsx")


class FunctionCollector:
    """Builds :class:`FunctionDoc` entries for a file's exported functions."""

    def __init__(
        self,
        project_root: Optional[Union[str, Path]] = None,
        aliases: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.project_root = project_root
        self.aliases = dict(aliases or {})

    def collect(self, source: SourceFile) -> List[FunctionDoc]:
        functions: List[FunctionDoc] = []
        seen: Set[int] = set()
        for name, declarations in source.exported_declarations().items():
            declaration = declarations[0]
            if declaration.kind is not DeclarationKind.FUNCTION:
                continue
            if id(declaration.node) in seen and name != "default":
                continue
            seen.add(id(declaration.node))
            doc = self._describe(source, name, declaration)
            if doc is not None:
                functions.append(doc)
        return functions

    def referenced_types(self, source: SourceFile, functions: Iterable[FunctionDoc]) -> List[str]:
        """Local type names used by parameters or return types, in first-use order."""
        local_types = {
            name
            for name, declarations in source.exported_declarations().items()
            if declarations[0].kind
            in {DeclarationKind.INTERFACE, DeclarationKind.ENUM, DeclarationKind.TYPE_ALIAS}
        }
        names: List[str] = []
        for function in functions:
            texts = [param.type for param in function.params]
            if function.return_type:
                texts.append(function.return_type)
            for text in texts:
                if not text or text in _PRIMITIVES or is_primitive_array_literal(text):
                    continue
                for candidate in _TYPE_NAME_RE.findall(text):
                    if candidate in local_types and candidate not in names:
                        names.append(candidate)
        return names

    def _describe(self, source: SourceFile, name: str, declaration: Declaration) -> Optional[FunctionDoc]:
        function_node = self._function_node(declaration)
        if function_node is None:
            _logger.debug("%s: no function body behind export %r", source.path, name)
            return None
        docs = declaration.docs()
        param_docs = _param_descriptions(docs)
        params = tuple(self._params(source, function_node, param_docs))
        return_type = source.annotation_text(function_node.child_by_field_name("return_type"))
        if return_type:
            return_type = self._display_type(source, return_type)
        display_name = declaration.name if name == "default" else name
        return FunctionDoc(
            name=display_name,
            params=params,
            return_type=return_type,
            docs=docs,
            is_default=name == "default",
        )

    @staticmethod
    def _function_node(declaration: Declaration) -> Optional[Node]:
        if declaration.node.type == "variable_declarator":
            return declaration.node.child_by_field_name("value")
        return declaration.node

    def _params(
        self, source: SourceFile, function_node: Node, descriptions: Dict[str, str]
    ) -> Iterable[ParamDoc]:
        parameters = function_node.child_by_field_name("parameters")
        if parameters is None:
            single = function_node.child_by_field_name("parameter")
            if single is not None:
                name = source.node_text(single)
                yield ParamDoc(name=name, type="any", doc=descriptions.get(name))
            return
        for param in parameters.named_children:
            if param.type not in {"required_parameter", "optional_parameter"}:
                continue
            pattern = param.child_by_field_name("pattern")
            if pattern is None:
                continue
            name = source.node_text(pattern)
            annotation = source.annotation_text(param.child_by_field_name("type"))
            value_node = param.child_by_field_name("value")
            default_text = source.node_text(value_node).strip() if value_node is not None else None
            if annotation:
                type_text = self._display_type(source, annotation)
            elif default_text is not None:
                type_text = _default_type(default_text)
            else:
                type_text = "any"
            has_literal, literal = _literal_default(default_text)
            yield ParamDoc(
                name=name,
                type=type_text,
                default=default_text,
                default_value=literal,
                has_literal_default=has_literal,
                optional=param.type == "optional_parameter" or default_text is not None,
                doc=descriptions.get(name.lstrip(".")),
            )

    def _display_type(self, source: SourceFile, text: str) -> str:
        """Qualify identifiers imported from local modules, then normalise for display."""
        if _IDENTIFIER_RE.match(text):
            binding = source.imports().get(text)
            if binding is not None and binding.imported not in {"*", "default"}:
                module_path = self._module_path(source.path, binding.module)
                if module_path is not None:
                    text = format_import_reference(module_path, binding.imported)
        return normalize_import_reference(text, source.path, self.project_root)

    def _module_path(self, source_path: str, specifier: str) -> Optional[str]:
        base: Optional[str] = None
        if specifier.startswith("."):
            base = os.path.join(os.path.dirname(source_path), specifier)
        else:
            for prefix, target in self.aliases.items():
                if specifier == prefix or specifier.startswith(prefix.rstrip("/") + "/"):
                    remainder = specifier[len(prefix) :].lstrip("/")
                    root = Path(self.project_root) if self.project_root else Path(".")
                    base = str(root / target / remainder)
                    break
        if base is None:
            return None
        base = os.path.normpath(base).replace("\\", "/")
        for suffix in _SOURCE_SUFFIXES:
            if os.path.exists(base + suffix):
                return base + suffix
        return base + ".ts"


def _param_descriptions(docs: Optional[DocBlock]) -> Dict[str, str]:
    descriptions: Dict[str, str] = {}
    if docs is None:
        return descriptions
    for tag in docs.tag("param"):
        text = re.sub(r"^\{[^}]*\}\s*", "", tag.text)
        name, _, rest = text.partition(" ")
        name = name.strip("[]").split("=", 1)[0]
        if name:
            descriptions[name] = rest.lstrip("- ").strip()
    return descriptions


def _default_type(text: str) -> str:
    """Display type for an unannotated parameter, taken from its default."""
    if text[:1] in {'"', "'", "`"}:
        return "string"
    # ``Color.Red`` is typed by its enum, not its member
    return infer_literal_type(text, True)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not a JSON literal")


def _literal_default(text: Optional[str]) -> Tuple[bool, Any]:
    """Decode JSON-compatible defaults so they can be re-rendered canonically.

    ``Infinity`` and ``NaN`` keep their source text.
    """
    if text is None:
        return False, None
    try:
        return True, json.loads(text, parse_constant=_reject_constant)
    except ValueError:
        return False, None


__all__ = ["FunctionCollector"]
