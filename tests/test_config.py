"""Tests for tspress.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from tspress.config import (
    DEFAULT_SERVICE_HOST,
    DEFAULT_SERVICE_PORT,
    ConfigError,
    TsPressConfig,
    load_config,
)


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, TsPressConfig)
    assert config.root == tmp_path.resolve()
    assert config.source_dir is None
    assert config.out_dir == tmp_path.resolve() / "docs"
    assert config.project_root is None
    assert config.effective_project_root == tmp_path.resolve()
    assert config.line_separator == "\n"
    assert config.exclude_paths == []
    assert config.aliases == {}
    assert config.templates_dir is None
    assert config.service.host == DEFAULT_SERVICE_HOST
    assert config.service.port == DEFAULT_SERVICE_PORT


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".tspress.yml"
    config_file.write_text(
        """
source_dir: src
out_dir: site/api
project_root: .
line_separator: "\\r\\n"
title: Widgets API
templates_dir: docs/templates
exclude_paths:
  - "generated/"
  - "*.stories.ts"
aliases:
  "@": src
  "~lib": src/lib
service:
  host: 0.0.0.0
  port: 9100
""",
        encoding="utf-8",
    )

    config = load_config(config_file)
    root = tmp_path.resolve()

    assert config.source_dir == root / "src"
    assert config.out_dir == root / "site/api"
    assert config.effective_project_root == root
    assert config.line_separator == "\r\n"
    assert config.title == "Widgets API"
    assert config.templates_dir == root / "docs/templates"
    assert config.exclude_paths == ["generated/", "*.stories.ts"]
    assert config.aliases == {"@": "src", "~lib": "src/lib"}
    assert config.service.host == "0.0.0.0"
    assert config.service.port == 9100


def test_load_config_accepts_directory_or_file(tmp_path: Path) -> None:
    (tmp_path / ".tspress.yml").write_text("title: Docs\n", encoding="utf-8")

    assert load_config(tmp_path).title == "Docs"
    assert load_config(tmp_path / ".tspress.yml").title == "Docs"


def test_empty_file_uses_defaults(tmp_path: Path) -> None:
    (tmp_path / ".tspress.yml").write_text("\n", encoding="utf-8")

    assert load_config(tmp_path).out_dir == tmp_path.resolve() / "docs"


@pytest.mark.parametrize(
    "content, message",
    [
        ("- a\n- b\n", "mapping at the root"),
        ('line_separator: ""\n', "line_separator"),
        ("aliases: [a, b]\n", "aliases"),
        ("service:\n  port: high\n", "service.port"),
        ("title: [unclosed\n", "Failed to parse"),
    ],
)
def test_invalid_config_raises(tmp_path: Path, content: str, message: str) -> None:
    (tmp_path / ".tspress.yml").write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError) as excinfo:
        load_config(tmp_path)
    assert message in str(excinfo.value)
