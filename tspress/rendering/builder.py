"""Renders collected type and function docs into Markdown pages."""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Any, Dict, List, Optional

from jinja2 import Environment, FileSystemLoader

from ..analyzers.decompose import decompose
from ..config import DEFAULT_LINE_SEPARATOR
from ..models import CollectMap, DocBlock, FileDoc, FunctionDoc, ShapeTag, TypeItem, TypeKind
from ..stringify import stringify_value

_HEADERS = {
    TypeKind.STRUCTURAL: ("Property", "Type"),
    TypeKind.ENUMERATION: ("Member", "Value"),
}
_SHAPE_HEADERS = {
    ShapeTag.KEYED_GENERIC: ("Key", "Value"),
    ShapeTag.ARRAY: ("Property", "Type"),
    ShapeTag.OBJECT: ("Property", "Type"),
}


def page_name(source_path: str) -> str:
    """Markdown page path for a source path (``src/a.ts`` -> ``src/a.md``)."""
    return PurePosixPath(source_path).with_suffix(".md").as_posix()


def doc_text(doc: Optional[DocBlock]) -> str:
    if doc is None:
        return ""
    if isinstance(doc, str):
        return doc
    return doc.text


def md_cell(value: Any) -> str:
    """Escape a value for a single Markdown table cell."""
    if value is None:
        return ""
    text = str(value)
    return text.replace("|", "\\|").replace("\r", "").replace("\n", "<br>")


class DocsBuilder:
    """Turns a :class:`CollectMap` into Markdown using jinja2 templates."""

    def __init__(
        self,
        templates_dir: Path | None = None,
        line_separator: str = DEFAULT_LINE_SEPARATOR,
        title: str | None = None,
    ) -> None:
        self.line_separator = line_separator
        self.title = title or "API Reference"
        self._env = self._create_env(templates_dir)

    def render_file(self, file_doc: FileDoc) -> str:
        template = self._env.get_template("file.md.j2")
        return template.render(
            title=file_doc.path,
            functions=[self._function_view(function) for function in file_doc.functions],
            types=[self._type_view(name, item) for name, item in file_doc.types.items()],
            errors=file_doc.errors,
        ).strip() + "\n"

    def render_index(self, collect_map: CollectMap) -> str:
        pages = []
        for path, file_doc in collect_map.items():
            if file_doc.is_empty:
                continue
            names = [function.name for function in file_doc.functions] + list(file_doc.types)
            pages.append(
                {
                    "path": path,
                    "link": page_name(path),
                    "summary": ", ".join(f"`{name}`" for name in names),
                }
            )
        template = self._env.get_template("index.md.j2")
        return template.render(title=self.title, pages=pages).strip() + "\n"

    def render_all(self, collect_map: CollectMap) -> Dict[str, str]:
        """Return ``page path -> markdown`` including ``index.md``."""
        pages = {
            page_name(path): self.render_file(file_doc)
            for path, file_doc in collect_map.items()
            if not file_doc.is_empty or file_doc.errors
        }
        pages["index.md"] = self.render_index(collect_map)
        return pages

    def _type_view(self, name: str, item: TypeItem) -> Dict[str, Any]:
        view: Dict[str, Any] = {
            "name": name,
            "kind": item.kind.value,
            "docs": item.docs,
            "rows": [],
            "inline": None,
            "shape": None,
            "key_header": "Name",
            "value_header": "Type",
        }
        value = item.value
        shape: Optional[ShapeTag] = None
        if item.kind is TypeKind.ALIAS and isinstance(value, str):
            value, shape = decompose(value, self.line_separator)
        if isinstance(value, str):
            view["inline"] = value
            return view
        if shape is not None:
            view["shape"] = shape.value
            view["key_header"], view["value_header"] = _SHAPE_HEADERS.get(shape, ("Name", "Type"))
        else:
            view["key_header"], view["value_header"] = _HEADERS.get(item.kind, ("Name", "Type"))
        view["rows"] = [
            {"name": key, "value": entry.value, "doc": entry.doc} for key, entry in value.items()
        ]
        return view

    @staticmethod
    def _function_view(function: FunctionDoc) -> Dict[str, Any]:
        params: List[Dict[str, Any]] = []
        rendered: List[str] = []
        for param in function.params:
            if param.has_literal_default:
                default = stringify_value(param.default_value)
            else:
                default = param.default
            params.append(
                {
                    "name": param.name,
                    "type": param.type,
                    "default": default,
                    "optional": param.optional and param.default is None,
                    "doc": param.doc,
                }
            )
            marker = "?" if param.optional and param.default is None else ""
            piece = f"{param.name}{marker}: {param.type}"
            if default is not None:
                piece += f" = {default}"
            rendered.append(piece)
        signature = f"function {function.name}({', '.join(rendered)})"
        if function.return_type:
            signature += f": {function.return_type}"
        return {
            "name": function.name,
            "is_default": function.is_default,
            "docs": function.docs,
            "signature": signature,
            "params": params,
            "returns": function.return_type,
        }

    @staticmethod
    def _create_env(templates_dir: Path | None) -> Environment:
        directories: List[str] = []
        if templates_dir:
            directories.append(str(templates_dir))
        default_dir = str(Path(__file__).with_name("templates"))
        if default_dir not in directories:
            directories.append(default_dir)
        env = Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        env.filters["stringify"] = stringify_value
        env.filters["doc_text"] = doc_text
        env.filters["md_cell"] = md_cell
        return env


__all__ = ["DocsBuilder", "doc_text", "md_cell", "page_name"]
