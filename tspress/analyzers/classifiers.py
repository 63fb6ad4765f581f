"""Heuristic predicates over raw TypeScript type and literal text."""

from __future__ import annotations

import re

_PRIMITIVE_ARRAY_RE = re.compile(r"^(?:string|number|boolean|undefined|null|symbol)\[\]$")
_CONSTRUCTOR_RE = re.compile(r"new\s+(.+?)\(")
_DECIMAL_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")
_PREFIXED_INT_RE = re.compile(r"^(?:0[xX][0-9a-fA-F]+|0[oO][0-7]+|0[bB][01]+)$")
_KEYED_GENERIC_RE = re.compile(r"^(?:Record|Map|ReadonlyMap)\s*<")


def is_primitive_array_literal(text: str) -> bool:
    """Return True when ``text`` is exactly a primitive type followed by ``[]``."""
    return bool(_PRIMITIVE_ARRAY_RE.match(text))


def is_numeric_text(text: str) -> bool:
    """Mirror JavaScript's ``!isNaN(Number(text))`` for source literals.

    Blank text counts as numeric because ``Number("")`` is ``0``.
    """
    stripped = text.strip().replace("_", "")
    if not stripped:
        return True
    if stripped in {"Infinity", "+Infinity", "-Infinity"}:
        return True
    return bool(_DECIMAL_RE.match(stripped) or _PREFIXED_INT_RE.match(stripped))


def infer_literal_type(text: str, prefer_left_of_dot: bool) -> str:
    """Best-effort display type for a literal value's source text.

    Falls back to returning ``text`` unchanged when no rule applies.
    """
    if is_numeric_text(text):
        return "number"
    if text in {"true", "false"}:
        return "boolean"
    constructed = _CONSTRUCTOR_RE.search(text)
    if constructed:
        return constructed.group(1).strip()
    if "." in text:
        segments = text.split(".")
        candidate = segments[0] if prefer_left_of_dot else segments[1]
        if not is_numeric_text(candidate):
            return candidate
    return text


def is_keyed_generic(text: str) -> bool:
    return bool(_KEYED_GENERIC_RE.match(text))


def is_object_literal(text: str) -> bool:
    """True when ``text`` is a single brace-delimited literal, optionally ``[]``-suffixed."""
    body = text[:-2].rstrip() if text.endswith("[]") else text
    if not (body.startswith("{") and body.endswith("}")):
        return False
    return matching_brace(body, 0) == len(body) - 1


def matching_brace(text: str, start: int) -> int:
    """Index of the brace closing the one at ``start``, or -1 when unbalanced.

    Braces inside string literals and comments are ignored.
    """
    depth = 0
    index = start
    length = len(text)
    while index < length:
        char = text[index]
        if char in "\"'`":
            index = _skip_string(text, index)
            continue
        if text.startswith("//", index):
            newline = text.find("\n", index)
            index = length if newline == -1 else newline
            continue
        if text.startswith("/*", index):
            end = text.find("*/", index + 2)
            index = length if end == -1 else end + 2
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
        index += 1
    return -1


def _skip_string(text: str, start: int) -> int:
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


__all__ = [
    "infer_literal_type",
    "is_keyed_generic",
    "is_numeric_text",
    "is_object_literal",
    "is_primitive_array_literal",
    "matching_brace",
]
