"""Core data models shared across tspress components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

UNKNOWN_TYPE_MESSAGE = (
    "No local type could be resolved; it may come from a third-party package."
)


@dataclass(frozen=True)
class DocTag:
    """A JSDoc-style ``@name text`` entry."""

    name: str
    text: str


@dataclass(frozen=True)
class DocBlock:
    """Snapshot of a comment attached to a declaration or field.

    ``comment`` holds paragraphs in source order, each paragraph being the
    ordered lines it was written with.
    """

    comment: Tuple[Tuple[str, ...], ...] = ()
    tags: Tuple[DocTag, ...] = ()

    @classmethod
    def single_line(cls, text: str) -> "DocBlock":
        return cls(comment=((text,),))

    @property
    def text(self) -> str:
        return "\n\n".join("\n".join(lines) for lines in self.comment)

    def tag(self, name: str) -> List[DocTag]:
        return [tag for tag in self.tags if tag.name == name]


@dataclass(frozen=True)
class FieldEntry:
    """One named member of a decomposed type."""

    value: str
    doc: Optional[DocBlock] = None


TypeValue = Dict[str, FieldEntry]


class TypeKind(str, Enum):
    STRUCTURAL = "interface"
    ENUMERATION = "enum"
    ALIAS = "type"
    UNKNOWN = "unknown"


class ShapeTag(str, Enum):
    """How a decomposed type literal should be laid out."""

    KEYED_GENERIC = "record"
    ARRAY = "array"
    OBJECT = "object"
    SCALAR = "string"


@dataclass(frozen=True)
class TypeItem:
    """Resolution result for one exported symbol."""

    kind: TypeKind
    value: Union[TypeValue, str]
    docs: Optional[DocBlock] = None


@dataclass(frozen=True)
class ParamDoc:
    """A documented function parameter."""

    name: str
    type: str
    default: Optional[str] = None
    default_value: Any = None
    has_literal_default: bool = False
    optional: bool = False
    doc: Optional[str] = None


@dataclass(frozen=True)
class FunctionDoc:
    """An exported function and its signature."""

    name: str
    params: Tuple[ParamDoc, ...]
    return_type: Optional[str]
    docs: Optional[DocBlock] = None
    is_default: bool = False


@dataclass
class ExportError:
    """Resolution failure recorded for a single export."""

    name: str
    message: str


@dataclass
class FileDoc:
    """Everything collected for one source file."""

    path: str
    types: Dict[str, TypeItem] = field(default_factory=dict)
    functions: List[FunctionDoc] = field(default_factory=list)
    errors: List[ExportError] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.types and not self.functions


CollectMap = Dict[str, FileDoc]


def doc_to_dict(doc: Optional[DocBlock]) -> Optional[Dict[str, Any]]:
    if doc is None:
        return None
    return {
        "comment": [list(lines) for lines in doc.comment],
        "tags": [{"name": tag.name, "text": tag.text} for tag in doc.tags],
    }


def type_value_to_dict(value: Union[TypeValue, str]) -> Union[Dict[str, Any], str]:
    if isinstance(value, str):
        return value
    return {
        key: {"value": entry.value, "doc": doc_to_dict(entry.doc)}
        for key, entry in value.items()
    }


def type_item_to_dict(item: TypeItem) -> Dict[str, Any]:
    return {
        "type": item.kind.value,
        "value": type_value_to_dict(item.value),
        "docs": doc_to_dict(item.docs),
    }


def function_to_dict(function: FunctionDoc) -> Dict[str, Any]:
    return {
        "name": function.name,
        "params": [
            {
                "name": param.name,
                "type": param.type,
                "default": param.default,
                "defaultValue": param.default_value if param.has_literal_default else None,
                "optional": param.optional,
                "doc": param.doc,
            }
            for param in function.params
        ],
        "returnType": function.return_type,
        "docs": doc_to_dict(function.docs),
        "default": function.is_default,
    }


def collect_map_to_dict(collect_map: CollectMap) -> Dict[str, Any]:
    """Convert a collect map into JSON-serializable plain data."""
    return {
        path: {
            "types": {name: type_item_to_dict(item) for name, item in file_doc.types.items()},
            "functions": [function_to_dict(function) for function in file_doc.functions],
            "errors": [{"name": err.name, "message": err.message} for err in file_doc.errors],
        }
        for path, file_doc in collect_map.items()
    }


@dataclass
class SourceManifest:
    """TypeScript sources discovered under a project root."""

    root: str
    files: List[str] = field(default_factory=list)
