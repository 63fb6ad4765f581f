"""Splits raw type-literal text into documented fields.

Three shapes are recognised: keyed generics such as ``Record<K, V>``, a
brace literal (optionally followed by ``[]``), and everything else, which is
returned untouched as an opaque scalar. Only the outermost brace level is
expanded; nested literals stay as the text of the field that holds them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple, Union

from ..logging import get_logger
from ..models import DocBlock, FieldEntry, ShapeTag, TypeValue
from .classifiers import is_keyed_generic, is_object_literal, matching_brace

_logger = get_logger("decompose")

_KEYED_GENERIC_ARGS_RE = re.compile(r"^\w+\s*<\s*([^,]+?)\s*,\s*([\s\S]+)>$")
_OPENERS = {"{": "}", "(": ")", "[": "]", "<": ">"}
_CLOSERS = {"}", ")", "]", ">"}

Decomposed = Tuple[Union[TypeValue, str], ShapeTag]


@dataclass
class _Statement:
    comment: Optional[str]
    text: str


def decompose(text: str, line_separator: str = "\n") -> Decomposed:
    """Return ``(fields, shape)`` for a type expression.

    Text that does not decompose cleanly degrades to ``(text, SCALAR)``.
    """
    text = text.strip()
    if is_keyed_generic(text):
        return _decompose_keyed_generic(text)
    if not is_object_literal(text):
        return text, ShapeTag.SCALAR

    shape = ShapeTag.ARRAY if text.endswith("[]") else ShapeTag.OBJECT
    body = text[1 : matching_brace(text, 0)]
    fields: TypeValue = {}
    for statement in _split_statements(body):
        key, sep, value = _split_field(statement.text)
        if not sep or not key or not value:
            _logger.debug("Unrecognised type member %r; keeping literal as text", statement.text)
            return text, ShapeTag.SCALAR
        if key in fields:
            continue
        fields[key] = FieldEntry(value=value, doc=_comment_doc(statement.comment, line_separator))

    if not fields:
        return text, ShapeTag.SCALAR
    return fields, shape


def _decompose_keyed_generic(text: str) -> Decomposed:
    match = _KEYED_GENERIC_ARGS_RE.match(text)
    if match is None:
        _logger.debug("Keyed generic without two arguments: %r", text)
        return text, ShapeTag.SCALAR
    key, value = match.group(1).strip(), match.group(2).strip()
    return {key: FieldEntry(value=value, doc=None)}, ShapeTag.KEYED_GENERIC


def _comment_doc(comment: Optional[str], line_separator: str) -> Optional[DocBlock]:
    if comment is None:
        return None
    pieces = []
    for piece in comment.split(line_separator):
        cleaned = piece.replace("*", "").replace("/", "").strip()
        if cleaned:
            pieces.append(cleaned)
    return DocBlock.single_line(" ".join(pieces))


def _split_field(statement: str) -> Tuple[str, str, str]:
    colon = _top_level_index(statement, ":")
    if colon == -1:
        return "", "", ""
    key = statement[:colon].strip()
    if key.startswith("readonly "):
        key = key[len("readonly ") :].strip()
    key = key.rstrip("?").strip()
    value = re.sub(r"[,;]\s*$", "", statement[colon + 1 :]).strip()
    # a leading union/intersection operator is layout only
    value = re.sub(r"^[|&]\s*", "", value)
    return key, ":", value


def _top_level_index(text: str, target: str) -> int:
    depth = 0
    for index, char in enumerate(text):
        if char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            if char == ">" and index and text[index - 1] == "=":
                continue
            depth = max(depth - 1, 0)
        elif char == target and depth == 0:
            return index
    return -1


def _split_statements(body: str) -> Iterator[_Statement]:
    comment: Optional[str] = None
    for kind, chunk in _scan(body):
        if kind == "comment":
            comment = chunk if comment is None else comment + "\n" + chunk
            continue
        if chunk.strip():
            yield _Statement(comment=comment, text=chunk.strip())
            comment = None


def _scan(body: str) -> Iterator[Tuple[str, str]]:
    """Yield ``("comment", text)`` and ``("field", text)`` chunks in order."""
    depth = 0
    current: List[str] = []
    index = 0
    length = len(body)
    # set once a member has ended on the current line; comments after it trail that member
    member_on_line = False

    def flush() -> Iterator[Tuple[str, str]]:
        chunk = "".join(current)
        current.clear()
        if chunk.strip():
            yield "field", chunk

    while index < length:
        char = body[index]
        if depth == 0 and not "".join(current).strip():
            if body.startswith("/*", index) or body.startswith("//", index):
                if body.startswith("/*", index):
                    end = body.find("*/", index + 2)
                    end = length if end == -1 else end + 2
                    trailing = member_on_line and _ends_line(body, end)
                else:
                    end = body.find("\n", index)
                    end = length if end == -1 else end
                    trailing = member_on_line
                current.clear()
                if not trailing:
                    yield "comment", body[index:end]
                index = end
                continue
            if char == "\n":
                member_on_line = False
        if char in "\"'`":
            end = _string_end(body, index)
            current.append(body[index:end])
            index = end
            continue
        if char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            if not (char == ">" and index and body[index - 1] == "="):
                depth = max(depth - 1, 0)
        elif depth == 0 and char in ",;\n":
            if char == "\n" and _continues("".join(current), body, index + 1):
                # multi-line member such as a union laid out one arm per line
                current.append(" ")
                index += 1
                while index < length and body[index] in " \t\r\n":
                    index += 1
                continue
            yield from flush()
            member_on_line = char != "\n"
            index += 1
            continue
        elif depth == 0 and body.startswith("//", index):
            # trailing comment after a member on the same line
            end = body.find("\n", index)
            index = length if end == -1 else end
            continue
        elif depth == 0 and body.startswith("/*", index):
            end = body.find("*/", index + 2)
            index = length if end == -1 else end + 2
            continue
        current.append(char)
        index += 1
    yield from flush()


def _continues(pending: str, body: str, start: int) -> bool:
    """True when a line break does not end the member being read."""
    pending = pending.rstrip()
    if not pending:
        return False
    if pending.endswith((":", "|", "&", "=>")):
        return True
    return body[start:].lstrip().startswith(("|", "&", "=>", "?", ":"))


def _ends_line(body: str, index: int) -> bool:
    newline = body.find("\n", index)
    rest = body[index:] if newline == -1 else body[index:newline]
    return not rest.strip()


def _string_end(text: str, start: int) -> int:
    quote = text[start]
    index = start + 1
    while index < len(text):
        if text[index] == "\\":
            index += 2
            continue
        if text[index] == quote:
            return index + 1
        index += 1
    return len(text)


__all__ = ["Decomposed", "decompose"]
