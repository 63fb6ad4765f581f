"""Pipeline orchestration: scan sources, resolve exports, render pages."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

from .analyzers.functions import FunctionCollector
from .analyzers.resolver import TypeResolutionError, TypeResolver
from .analyzers.tree_sitter import DeclarationKind, SourceFile
from .config import TsPressConfig, load_config
from .logging import get_logger
from .models import CollectMap, ExportError, FileDoc
from .rendering.builder import DocsBuilder
from .repo_scanner import RepoScanner

_logger = get_logger("orchestrator")

_TYPE_KINDS = {DeclarationKind.INTERFACE, DeclarationKind.ENUM, DeclarationKind.TYPE_ALIAS}


class Orchestrator:
    """Coordinates scanning, type resolution and Markdown rendering."""

    def __init__(
        self,
        config: TsPressConfig | None = None,
        scanner: RepoScanner | None = None,
        builder: DocsBuilder | None = None,
    ) -> None:
        self._config = config
        self._scanner = scanner
        self._builder = builder

    def collect(self, path: str) -> CollectMap:
        """Resolve every export of every source under ``path``.

        A failing export is logged and recorded on its ``FileDoc``; the rest of
        the file and the remaining files are still processed.
        """
        config = self._resolve_config(path)
        root = Path(path).expanduser().resolve()
        scanner = self._scanner or RepoScanner(exclude_paths=config.exclude_paths)
        manifest = scanner.scan(str(config.source_dir or root))
        project_root = config.effective_project_root
        resolver = TypeResolver(project_root=project_root.as_posix())
        functions = FunctionCollector(project_root=project_root.as_posix(), aliases=config.aliases)

        collect_map: CollectMap = {}
        for rel_path in manifest.files:
            file_path = Path(manifest.root) / rel_path
            try:
                source = SourceFile.from_path(file_path)
            except (OSError, UnicodeDecodeError) as exc:
                _logger.warning("Skipping %s: %s", rel_path, exc)
                continue
            file_doc = self.collect_source(source, rel_path, resolver, functions)
            if file_doc.is_empty and not file_doc.errors:
                _logger.debug("No documentable exports in %s", rel_path)
                continue
            collect_map[rel_path] = file_doc
        _logger.info("Collected %d documented file(s) from %s", len(collect_map), root)
        return collect_map

    def collect_source(
        self,
        source: SourceFile,
        rel_path: str,
        resolver: TypeResolver,
        functions: FunctionCollector,
    ) -> FileDoc:
        file_doc = FileDoc(path=rel_path)
        exported = source.exported_declarations()
        for name, declarations in exported.items():
            if name == "default" or declarations[0].kind not in _TYPE_KINDS:
                continue
            self._resolve_into(file_doc, source, resolver, name, is_default=False)

        default = source.default_export()
        if default is not None and default.declaration is not None:
            if default.declaration.kind in _TYPE_KINDS and default.name not in file_doc.types:
                self._resolve_into(file_doc, source, resolver, default.name, is_default=True)

        file_doc.functions = functions.collect(source)
        for name in functions.referenced_types(source, file_doc.functions):
            if name not in file_doc.types:
                self._resolve_into(file_doc, source, resolver, name, is_default=False)
        return file_doc

    @staticmethod
    def _resolve_into(
        file_doc: FileDoc,
        source: SourceFile,
        resolver: TypeResolver,
        name: str,
        *,
        is_default: bool,
    ) -> None:
        try:
            file_doc.types[name] = resolver.resolve(source, name, is_default)
        except TypeResolutionError as exc:
            _logger.warning("Could not resolve %s in %s: %s", name, file_doc.path, exc)
            file_doc.errors.append(ExportError(name=name, message=str(exc)))

    def build(self, path: str, out_dir: Optional[str] = None) -> List[Path]:
        """Collect ``path`` and write Markdown pages; return the written files."""
        config = self._resolve_config(path)
        collect_map = self.collect(path)
        builder = self._builder or DocsBuilder(
            templates_dir=config.templates_dir,
            line_separator=config.line_separator,
            title=config.title,
        )
        target = Path(out_dir).expanduser().resolve() if out_dir else config.out_dir
        pages: Dict[str, str] = builder.render_all(collect_map)

        written: List[Path] = []
        for page, content in pages.items():
            destination = target / page
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_text(content, encoding="utf-8")
            written.append(destination)
        _logger.info("Wrote %d page(s) to %s", len(written), target)
        return written

    def _resolve_config(self, path: str) -> TsPressConfig:
        if self._config is None:
            self._config = load_config(Path(path).expanduser())
        return self._config


__all__ = ["Orchestrator"]
