"""Tests for TypeResolver."""

from __future__ import annotations

import pytest

from tspress.analyzers.resolver import (
    CyclicDefaultExport,
    MissingDefaultExport,
    MissingNamedExport,
    TypeResolver,
    resolve_type,
)
from tspress.models import UNKNOWN_TYPE_MESSAGE, DocBlock, FieldEntry, TypeItem, TypeKind


def test_enum_members_with_line_comment(parse_ts) -> None:
    source = parse_ts(
        """
        export enum E {
          A = 1,
          // second value
          B = 2,
        }
        """
    )
    item = resolve_type(source, "E")
    assert item == TypeItem(
        TypeKind.ENUMERATION,
        {
            "A": FieldEntry("1", None),
            "B": FieldEntry("2", DocBlock.single_line("second value")),
        },
        None,
    )


def test_interface_with_jsdoc_member(parse_ts) -> None:
    source = parse_ts(
        """
        export interface Config {
          /** port number */
          port: number
        }
        """
    )
    item = resolve_type(source, "Config")
    assert item.kind is TypeKind.STRUCTURAL
    assert item.value == {"port": FieldEntry("number", DocBlock.single_line("port number"))}
    assert item.docs is None


def test_type_alias_keeps_raw_text(parse_ts) -> None:
    source = parse_ts("export type Pair = {a: string, b: number}\n")
    item = resolve_type(source, "Pair")
    assert item == TypeItem(TypeKind.ALIAS, "{a: string, b: number}", None)


def test_declaration_docs_are_attached(parse_ts) -> None:
    source = parse_ts(
        """
        /**
         * Connection options.
         */
        export interface Options {
          host: string;
        }
        """
    )
    assert resolve_type(source, "Options").docs == DocBlock.single_line("Connection options.")


def test_empty_interface_has_empty_value(parse_ts) -> None:
    source = parse_ts("export interface Marker {}\n")
    assert resolve_type(source, "Marker") == TypeItem(TypeKind.STRUCTURAL, "", None)


@pytest.mark.parametrize(
    "text, name",
    [
        ("export function start() {}\n", "start"),
        ("export class Service {}\n", "Service"),
        ("export const VERSION = 1;\n", "VERSION"),
        ('export { Remote } from "some-lib";\n', "Remote"),
    ],
)
def test_non_type_exports_resolve_to_unknown(parse_ts, text: str, name: str) -> None:
    item = resolve_type(parse_ts(text), name)
    assert item == TypeItem(TypeKind.UNKNOWN, UNKNOWN_TYPE_MESSAGE, None)


def test_missing_named_export(parse_ts) -> None:
    source = parse_ts("export type A = string;\n")
    with pytest.raises(MissingNamedExport) as excinfo:
        resolve_type(source, "Nope")
    assert excinfo.value.path == "/project/src/config.ts"
    assert excinfo.value.name == "Nope"


def test_local_declaration_is_not_an_export(parse_ts) -> None:
    source = parse_ts("interface Hidden { a: string }\n")
    with pytest.raises(MissingNamedExport):
        resolve_type(source, "Hidden")


def test_missing_default_export(parse_ts) -> None:
    source = parse_ts("export type A = string;\n")
    with pytest.raises(MissingDefaultExport) as excinfo:
        resolve_type(source, "", is_default=True)
    assert excinfo.value.path == "/project/src/config.ts"


def test_default_export_by_identifier(parse_ts) -> None:
    source = parse_ts(
        """
        /** App settings. */
        interface Settings {
          debug: boolean;
        }
        export default Settings;
        """
    )
    item = resolve_type(source, "Settings", is_default=True)
    assert item.kind is TypeKind.STRUCTURAL
    assert item.value == {"debug": FieldEntry("boolean", None)}
    assert item.docs == DocBlock.single_line("App settings.")


def test_default_export_declaration(parse_ts) -> None:
    source = parse_ts(
        """
        export default interface Theme {
          color: string;
        }
        """
    )
    item = resolve_type(source, "Theme", is_default=True)
    assert item == TypeItem(TypeKind.STRUCTURAL, {"color": FieldEntry("string", None)}, None)


def test_default_export_of_expression_is_unknown(parse_ts) -> None:
    source = parse_ts("export default { a: 1 };\n")
    assert resolve_type(source, "default", is_default=True).kind is TypeKind.UNKNOWN


def test_default_export_forwarded_from_other_module_is_cyclic(parse_ts) -> None:
    source = parse_ts('export { default } from "./other";\n')
    with pytest.raises(CyclicDefaultExport):
        resolve_type(source, "default", is_default=True)


def test_duplicate_exports_use_first_declaration(parse_ts) -> None:
    source = parse_ts(
        """
        export interface Merged { a: string }
        export interface Merged { b: number }
        """
    )
    assert resolve_type(source, "Merged").value == {"a": FieldEntry("string", None)}


def test_resolution_is_deterministic(parse_ts) -> None:
    source = parse_ts(
        """
        export interface Config {
          /** port number */
          port: number;
          host: string;
        }
        """
    )
    resolver = TypeResolver()
    assert resolver.resolve(source, "Config") == resolver.resolve(source, "Config")
