"""Tests for tspress.orchestrator."""

from __future__ import annotations

import json
from pathlib import Path

from tspress.analyzers.functions import FunctionCollector
from tspress.analyzers.resolver import MissingNamedExport, TypeResolver
from tspress.analyzers.tree_sitter import SourceFile
from tspress.config import load_config
from tspress.models import FieldEntry, TypeKind, collect_map_to_dict
from tspress.orchestrator import Orchestrator

PROJECT = {
    "src/types.ts": """
        /** A user. */
        export interface User {
          id: number;
          name: string;
        }
        export enum Role {
          Admin = "admin",
          Guest = "guest",
        }
        export type Id = string;
    """,
    "src/api.ts": """
        import { User } from "./types";

        export interface Options {
          retries: number;
        }

        /** Loads a user. */
        export function load(id: number, options: Options): User {
          return fetchUser(id, options);
        }

        export const VERSION = "1.0";
    """,
    "src/theme.ts": """
        export default interface Theme {
          color: string;
        }
    """,
    "src/empty.ts": """
        const internal = 1;
    """,
}


def test_collect_resolves_types_and_functions(repo_builder) -> None:
    repo_builder.write(PROJECT)

    collect_map = Orchestrator().collect(str(repo_builder.path()))

    assert sorted(collect_map) == ["src/api.ts", "src/theme.ts", "src/types.ts"]

    types = collect_map["src/types.ts"]
    assert list(types.types) == ["User", "Role", "Id"]
    assert types.types["User"].kind is TypeKind.STRUCTURAL
    assert types.types["User"].docs.text == "A user."
    assert types.types["Role"].value == {"Admin": FieldEntry("admin"), "Guest": FieldEntry("guest")}
    assert types.types["Id"].value == "string"
    assert types.functions == []

    api = collect_map["src/api.ts"]
    assert list(api.types) == ["Options"]
    [load] = api.functions
    assert load.name == "load"
    assert load.return_type == 'import("src/types").User'
    assert [param.type for param in load.params] == ["number", "Options"]
    assert "VERSION" not in api.types

    theme = collect_map["src/theme.ts"]
    assert theme.types["Theme"].value == {"color": FieldEntry("string")}


def test_collect_honours_source_dir(repo_builder) -> None:
    repo_builder.write(PROJECT)
    repo_builder.write({".tspress.yml": "source_dir: src\n", "scripts/tool.ts": "export type X = 1;\n"})

    collect_map = Orchestrator().collect(str(repo_builder.path()))

    assert sorted(collect_map) == ["api.ts", "theme.ts", "types.ts"]


def test_unreadable_files_are_skipped(repo_builder) -> None:
    repo_builder.write(PROJECT)
    (repo_builder.path() / "src" / "binary.ts").write_bytes(b"\xff\xfe\x00export")

    collect_map = Orchestrator().collect(str(repo_builder.path()))

    assert "src/binary.ts" not in collect_map
    assert "src/types.ts" in collect_map


class _FailingResolver(TypeResolver):
    def resolve(self, source, name, is_default=False):  # type: ignore[override]
        if name == "Broken":
            raise MissingNamedExport(source.path, name)
        return super().resolve(source, name, is_default)


def test_failing_export_is_recorded_without_stopping_the_file(parse_ts) -> None:
    source = parse_ts(
        """
        export interface Broken { a: string }
        export interface Fine { b: number }
        """
    )

    file_doc = Orchestrator().collect_source(
        source, "src/config.ts", _FailingResolver(), FunctionCollector()
    )

    assert list(file_doc.types) == ["Fine"]
    assert [error.name for error in file_doc.errors] == ["Broken"]
    assert "does not export 'Broken'" in file_doc.errors[0].message


def test_build_writes_pages(repo_builder) -> None:
    repo_builder.write(PROJECT)
    root = repo_builder.path()

    written = Orchestrator().build(str(root))

    out_dir = root.resolve() / "docs"
    assert sorted(path.relative_to(out_dir).as_posix() for path in written) == [
        "index.md",
        "src/api.md",
        "src/theme.md",
        "src/types.md",
    ]
    api_page = (out_dir / "src" / "api.md").read_text(encoding="utf-8")
    assert "### load" in api_page
    assert "### Options" in api_page
    index = (out_dir / "index.md").read_text(encoding="utf-8")
    assert "[src/types.ts](src/types.md)" in index


def test_build_respects_explicit_out_dir(repo_builder, tmp_path: Path) -> None:
    repo_builder.write(PROJECT)
    target = tmp_path / "site"

    written = Orchestrator(config=load_config(repo_builder.path())).build(
        str(repo_builder.path()), str(target)
    )

    assert all(path.is_relative_to(target.resolve()) for path in written)
    assert (target / "index.md").exists()


def test_collect_map_serialises_to_json(repo_builder) -> None:
    repo_builder.write(PROJECT)

    data = collect_map_to_dict(Orchestrator().collect(str(repo_builder.path())))
    payload = json.loads(json.dumps(data))

    assert payload["src/types.ts"]["types"]["Id"] == {"type": "type", "value": "string", "docs": None}
    assert payload["src/api.ts"]["functions"][0]["returnType"] == 'import("src/types").User'
