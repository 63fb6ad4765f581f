"""Tree-sitter backed view of a TypeScript source file.

The resolver only needs a handful of questions answered about a file: which
names it exports, what kind of declaration sits behind each name, what the
default export points at, and which comments document a declaration or one
of its members. ``SourceFile`` answers those over a read-only syntax tree.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

import tree_sitter_typescript
from tree_sitter import Language, Node, Parser

from ..logging import get_logger
from ..models import DocBlock, DocTag
from .imports import format_import_reference

_logger = get_logger("tree_sitter")

_LANGUAGES = {
    "typescript": Language(tree_sitter_typescript.language_typescript()),
    "tsx": Language(tree_sitter_typescript.language_tsx()),
}
_parsers: Dict[str, Parser] = {}

_TAG_RE = re.compile(r"^@(\w+)\s*(.*)$")
_NUMBER_RE = re.compile(r"^-?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")


class DeclarationKind(str, Enum):
    INTERFACE = "interface"
    ENUM = "enum"
    TYPE_ALIAS = "type_alias"
    CLASS = "class"
    FUNCTION = "function"
    VARIABLE = "variable"
    NAMESPACE = "namespace"
    REEXPORT = "reexport"
    EXPRESSION = "expression"


_KIND_BY_NODE = {
    "interface_declaration": DeclarationKind.INTERFACE,
    "enum_declaration": DeclarationKind.ENUM,
    "type_alias_declaration": DeclarationKind.TYPE_ALIAS,
    "class_declaration": DeclarationKind.CLASS,
    "abstract_class_declaration": DeclarationKind.CLASS,
    "function_declaration": DeclarationKind.FUNCTION,
    "generator_function_declaration": DeclarationKind.FUNCTION,
    "function_signature": DeclarationKind.FUNCTION,
    "internal_module": DeclarationKind.NAMESPACE,
    "module": DeclarationKind.NAMESPACE,
}

_FUNCTION_VALUES = {"arrow_function", "function_expression", "function", "generator_function"}


@dataclass(frozen=True)
class Member:
    """A member of an interface or enum body."""

    name: str
    text: str
    doc: Optional[DocBlock]


@dataclass
class Declaration:
    """A top-level declaration (or re-export) reachable from an export name."""

    kind: DeclarationKind
    name: str
    node: Node
    anchor: Node
    source: "SourceFile" = field(repr=False)
    module: Optional[str] = None

    @property
    def text(self) -> str:
        return self.source.node_text(self.node)

    def docs(self) -> Optional[DocBlock]:
        return self.source.leading_doc(self.anchor)

    def members(self) -> List[Member]:
        if self.kind is DeclarationKind.INTERFACE:
            return list(self.source.interface_members(self.node))
        if self.kind is DeclarationKind.ENUM:
            return list(self.source.enum_members(self.node))
        return []

    def alias_value(self) -> Optional[str]:
        """Right-hand side of a type alias, without the trailing ``;``."""
        if self.kind is not DeclarationKind.TYPE_ALIAS:
            return None
        value = self.node.child_by_field_name("value")
        if value is not None:
            return self.source.node_text(value).strip()
        _, _, rhs = self.text.partition("=")
        return rhs.strip().rstrip(";").strip()


@dataclass
class DefaultExport:
    """What ``export default`` points at."""

    name: str
    declared_type_text: str
    declaration: Optional[Declaration]


@dataclass(frozen=True)
class ImportBinding:
    module: str
    imported: str


def _get_parser(language_key: str) -> Parser:
    parser = _parsers.get(language_key)
    if parser is None:
        parser = Parser(_LANGUAGES[language_key])
        _parsers[language_key] = parser
    return parser


def _row(point) -> int:  # type: ignore[no-untyped-def]
    return point[0]


class SourceFile:
    """A parsed TypeScript file exposing exports, declarations and comments."""

    def __init__(self, path: str, text: str, tsx: Optional[bool] = None) -> None:
        self.path = path
        self.text = text
        if tsx is None:
            tsx = path.lower().endswith(".tsx")
        self._source_bytes = text.encode("utf-8")
        self._tree = _get_parser("tsx" if tsx else "typescript").parse(self._source_bytes)
        self._locals: Dict[str, List[Declaration]] = {}
        self._exports: Dict[str, List[Declaration]] = {}
        self._default: Optional[DefaultExport] = None
        self._imports: Dict[str, ImportBinding] = {}
        self._index()

    @classmethod
    def parse(cls, text: str, path: str = "module.ts") -> "SourceFile":
        return cls(path=path, text=text)

    @classmethod
    def from_path(cls, path: Path) -> "SourceFile":
        resolved = Path(path).resolve()
        return cls(path=resolved.as_posix(), text=resolved.read_text(encoding="utf-8"))

    @property
    def root(self) -> Node:
        return self._tree.root_node

    def node_text(self, node: Node) -> str:
        return self._source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")

    # exports

    def exported_declarations(self) -> Dict[str, List[Declaration]]:
        """Exported name -> declarations, in source order; the default export is keyed ``default``."""
        return {name: list(decls) for name, decls in self._exports.items()}

    def default_export(self) -> Optional[DefaultExport]:
        return self._default

    def local_declarations(self, name: str) -> List[Declaration]:
        return list(self._locals.get(name, []))

    def imports(self) -> Dict[str, ImportBinding]:
        return dict(self._imports)

    def _index(self) -> None:
        statements = list(self.root.named_children)
        for statement in statements:
            if statement.type == "import_statement":
                self._index_import(statement)
            else:
                for declaration in self._declarations_in(statement, statement):
                    self._locals.setdefault(declaration.name, []).append(declaration)
        for statement in statements:
            if statement.type == "export_statement":
                self._index_export(statement)

    def _declarations_in(self, node: Node, anchor: Node) -> Iterator[Declaration]:
        if node.type == "export_statement":
            inner = node.child_by_field_name("declaration")
            if inner is not None:
                yield from self._declarations_in(inner, anchor)
            return
        if node.type == "ambient_declaration":
            for child in node.named_children:
                yield from self._declarations_in(child, anchor)
            return
        if node.type == "expression_statement" and node.named_children:
            # namespaces parse as expression statements at the top level
            yield from self._declarations_in(node.named_children[0], anchor)
            return
        if node.type in {"lexical_declaration", "variable_declaration"}:
            for declarator in node.named_children:
                if declarator.type != "variable_declarator":
                    continue
                name_node = declarator.child_by_field_name("name")
                if name_node is None or name_node.type != "identifier":
                    continue
                value = declarator.child_by_field_name("value")
                kind = (
                    DeclarationKind.FUNCTION
                    if value is not None and value.type in _FUNCTION_VALUES
                    else DeclarationKind.VARIABLE
                )
                yield Declaration(kind, self.node_text(name_node), declarator, anchor, self)
            return
        kind = _KIND_BY_NODE.get(node.type)
        if kind is None:
            return
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return
        name = self.node_text(name_node).strip("\"'")
        yield Declaration(kind, name, node, anchor, self)

    def _index_import(self, statement: Node) -> None:
        source = statement.child_by_field_name("source")
        if source is None:
            return
        module = self.node_text(source).strip("\"'`")
        clause = next((child for child in statement.named_children if child.type == "import_clause"), None)
        if clause is None:
            return
        for child in clause.named_children:
            if child.type == "identifier":
                self._imports[self.node_text(child)] = ImportBinding(module, "default")
            elif child.type == "namespace_import":
                ident = next((c for c in child.named_children if c.type == "identifier"), None)
                if ident is not None:
                    self._imports[self.node_text(ident)] = ImportBinding(module, "*")
            elif child.type == "named_imports":
                for specifier in child.named_children:
                    if specifier.type != "import_specifier":
                        continue
                    name_node = specifier.child_by_field_name("name")
                    alias_node = specifier.child_by_field_name("alias")
                    if name_node is None:
                        continue
                    imported = self.node_text(name_node)
                    local = self.node_text(alias_node) if alias_node is not None else imported
                    self._imports[local] = ImportBinding(module, imported)

    def _index_export(self, statement: Node) -> None:
        is_default = any(child.type == "default" for child in statement.children)
        declaration_node = statement.child_by_field_name("declaration")
        if declaration_node is not None:
            declarations = list(self._declarations_in(declaration_node, statement))
            if is_default:
                if declarations:
                    self._set_default(declarations[0].name, declarations[0])
                return
            for declaration in declarations:
                self._exports.setdefault(declaration.name, []).append(declaration)
            return

        if is_default:
            value = statement.child_by_field_name("value")
            if value is None:
                return
            if value.type == "identifier":
                name = self.node_text(value)
                local = self._locals.get(name) or [self._reexport_of(name, statement)]
                self._set_default(name, local[0])
            else:
                expression = Declaration(DeclarationKind.EXPRESSION, "default", value, statement, self)
                self._default = DefaultExport("default", self.node_text(value), expression)
                self._exports["default"] = [expression]
            return

        clause = next((c for c in statement.named_children if c.type == "export_clause"), None)
        if clause is None:
            _logger.debug("Ignoring export statement in %s: %s", self.path, self.node_text(statement))
            return
        source = statement.child_by_field_name("source")
        module = self.node_text(source).strip("\"'`") if source is not None else None
        for specifier in clause.named_children:
            if specifier.type != "export_specifier":
                continue
            name_node = specifier.child_by_field_name("name")
            if name_node is None:
                continue
            alias_node = specifier.child_by_field_name("alias")
            local_name = self.node_text(name_node).strip("\"'")
            exported = self.node_text(alias_node).strip("\"'") if alias_node is not None else local_name
            if module is not None:
                targets = [
                    Declaration(DeclarationKind.REEXPORT, exported, specifier, statement, self, module=module)
                ]
            else:
                targets = self._locals.get(local_name) or [self._reexport_of(local_name, statement)]
            if exported == "default":
                self._set_default(local_name, targets[0])
            else:
                self._exports.setdefault(exported, []).extend(targets)

    def _reexport_of(self, name: str, statement: Node) -> Declaration:
        binding = self._imports.get(name)
        module = binding.module if binding is not None else None
        return Declaration(DeclarationKind.REEXPORT, name, statement, statement, self, module=module)

    def _set_default(self, name: str, declaration: Declaration) -> None:
        if declaration.kind in {
            DeclarationKind.INTERFACE,
            DeclarationKind.ENUM,
            DeclarationKind.TYPE_ALIAS,
            DeclarationKind.CLASS,
        }:
            declared = format_import_reference(self.path, name)
        else:
            declared = name
        self._default = DefaultExport(name, declared, declaration)
        self._exports["default"] = [declaration]

    # members

    def interface_members(self, node: Node) -> Iterator[Member]:
        body = node.child_by_field_name("body")
        if body is None:
            return
        for child in body.named_children:
            if child.type not in {"property_signature", "method_signature"}:
                continue
            name_node = child.child_by_field_name("name")
            if name_node is None:
                continue
            name = self.node_text(name_node).strip("\"'")
            if child.type == "property_signature":
                annotation = child.child_by_field_name("type")
                text = self._annotation_text(annotation) or "any"
            else:
                tail = self._source_bytes[name_node.end_byte : child.end_byte]
                text = tail.decode("utf-8", errors="ignore").strip()
                text = text.lstrip("?").strip().rstrip(";,").strip()
            yield Member(name, text, self.leading_doc(child))

    def enum_members(self, node: Node) -> Iterator[Member]:
        body = node.child_by_field_name("body")
        if body is None:
            return
        values: Dict[str, object] = {}
        next_value: Optional[float] = 0
        for child in body.named_children:
            if child.type == "comment":
                continue
            if child.type == "enum_assignment":
                name_node = child.child_by_field_name("name")
                value_node = child.child_by_field_name("value")
                if name_node is None:
                    continue
                name = self.node_text(name_node).strip("\"'")
                value = self._enum_constant(value_node, values) if value_node is not None else next_value
            else:
                name = self.node_text(child).strip("\"'")
                value = next_value
            values[name] = value
            next_value = value + 1 if isinstance(value, (int, float)) and not isinstance(value, bool) else None
            yield Member(name, _js_string(value), self.leading_doc(child))

    def _enum_constant(self, node: Node, previous: Dict[str, object]) -> object:
        text = self.node_text(node).strip()
        if node.type == "string" or node.type == "template_string":
            return text[1:-1]
        if _NUMBER_RE.match(text.replace("_", "")):
            number = float(text.replace("_", ""))
            return int(number) if number.is_integer() else number
        if node.type == "number":
            try:
                return int(text.replace("_", ""), 0)
            except ValueError:
                return text
        if text in previous:
            return previous[text]
        return text

    def _annotation_text(self, annotation: Optional[Node]) -> Optional[str]:
        if annotation is None:
            return None
        if annotation.named_children:
            return self.node_text(annotation.named_children[0]).strip()
        return self.node_text(annotation).lstrip(":").strip()

    def annotation_text(self, annotation: Optional[Node]) -> Optional[str]:
        """Type text of a ``: Type`` annotation node, without the colon."""
        return self._annotation_text(annotation)

    # comments

    def leading_doc(self, node: Node) -> Optional[DocBlock]:
        blocks = self._leading_comment_blocks(node)
        if not blocks:
            return None
        jsdoc = [block for block in blocks if block.startswith("/**")]
        return parse_doc_comment(jsdoc[0] if jsdoc else blocks[0])

    def _leading_comment_blocks(self, node: Node) -> List[str]:
        comments: List[Node] = []
        following = node
        current = node.prev_sibling
        while current is not None and current.type == "comment":
            if _row(current.end_point) < _row(following.start_point) - 1:
                break
            before = current.prev_sibling
            if before is not None and before.type != "comment" and _row(before.end_point) == _row(current.start_point):
                break
            if before is not None and before.type in {",", ";"}:
                previous = before.prev_sibling
                if previous is not None and _row(previous.end_point) == _row(current.start_point):
                    break
            comments.insert(0, current)
            following = current
            current = before

        blocks: List[str] = []
        line_run: List[str] = []
        for comment in comments:
            text = self.node_text(comment)
            if text.startswith("//"):
                line_run.append(text)
                continue
            if line_run:
                blocks.append("\n".join(line_run))
                line_run = []
            blocks.append(text)
        if line_run:
            blocks.append("\n".join(line_run))
        return blocks


def _js_string(value: object) -> str:
    if value is None:
        return "undefined"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def parse_doc_comment(raw: str) -> Optional[DocBlock]:
    """Turn a ``/** */``, ``/* */`` or ``//`` comment into a DocBlock."""
    text = raw.strip()
    if text.startswith("/*"):
        text = text[2:]
        if text.startswith("*"):
            text = text[1:]
        if text.endswith("*/"):
            text = text[:-2]
        lines = [re.sub(r"^\s*\*?\s?", "", line).rstrip() for line in text.splitlines()]
    else:
        lines = [re.sub(r"^\s*//+\s?", "", line).rstrip() for line in text.splitlines()]

    groups: List[Tuple[str, ...]] = []
    paragraph: List[str] = []
    tags: List[DocTag] = []
    tag_name: Optional[str] = None
    tag_lines: List[str] = []

    def close_tag() -> None:
        nonlocal tag_name, tag_lines
        if tag_name is not None:
            tags.append(DocTag(tag_name, " ".join(part for part in tag_lines if part).strip()))
        tag_name, tag_lines = None, []

    for line in lines:
        stripped = line.strip()
        tag_match = _TAG_RE.match(stripped)
        if tag_match:
            close_tag()
            tag_name, tag_lines = tag_match.group(1), [tag_match.group(2)]
            continue
        if tag_name is not None:
            if stripped:
                tag_lines.append(stripped)
            else:
                close_tag()
            continue
        if stripped:
            paragraph.append(stripped)
        elif paragraph:
            groups.append(tuple(paragraph))
            paragraph = []
    close_tag()
    if paragraph:
        groups.append(tuple(paragraph))

    if not groups and not tags:
        return None
    return DocBlock(comment=tuple(groups), tags=tuple(tags))


__all__ = [
    "Declaration",
    "DeclarationKind",
    "DefaultExport",
    "ImportBinding",
    "Member",
    "SourceFile",
    "parse_doc_comment",
]
