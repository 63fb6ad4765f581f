"""Configuration loading for tspress (.tspress.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".tspress.yml"
DEFAULT_OUT_DIR = "docs"
DEFAULT_LINE_SEPARATOR = "\n"
DEFAULT_SERVICE_HOST = "127.0.0.1"
DEFAULT_SERVICE_PORT = 8000


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ServiceConfig:
    """Host/port for ``tspress serve``."""

    host: str = DEFAULT_SERVICE_HOST
    port: int = DEFAULT_SERVICE_PORT


@dataclass
class TsPressConfig:
    """Represents the settings defined in .tspress.yml."""

    root: Path
    source_dir: Optional[Path] = None
    out_dir: Path = Path(DEFAULT_OUT_DIR)
    project_root: Optional[Path] = None
    line_separator: str = DEFAULT_LINE_SEPARATOR
    exclude_paths: List[str] = field(default_factory=list)
    aliases: Dict[str, str] = field(default_factory=dict)
    templates_dir: Optional[Path] = None
    title: Optional[str] = None
    service: ServiceConfig = field(default_factory=ServiceConfig)

    @property
    def effective_project_root(self) -> Path:
        return self.project_root or self.root


def load_config(config_path: Path) -> TsPressConfig:
    """Load configuration from ``config_path`` (a directory or the file itself)."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return TsPressConfig(root=root, out_dir=root / DEFAULT_OUT_DIR)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    source_dir = _as_str(data.get("source_dir"))
    out_dir = _as_str(data.get("out_dir")) or DEFAULT_OUT_DIR
    project_root = _as_str(data.get("project_root"))
    templates_dir = _as_str(data.get("templates_dir"))

    line_separator = data.get("line_separator", DEFAULT_LINE_SEPARATOR)
    if not isinstance(line_separator, str) or not line_separator:
        raise ConfigError("line_separator must be a non-empty string")

    aliases_data = data.get("aliases")
    if aliases_data is not None and not isinstance(aliases_data, dict):
        raise ConfigError("aliases must be a mapping of import prefix to directory")
    aliases = {str(key): str(value) for key, value in (aliases_data or {}).items()}

    service_data = _as_dict(data.get("service"))
    service = ServiceConfig()
    if service_data:
        service.host = _as_str(service_data.get("host")) or DEFAULT_SERVICE_HOST
        port = _as_int(service_data.get("port"))
        if service_data.get("port") is not None and port is None:
            raise ConfigError("service.port must be an integer")
        service.port = port if port is not None else DEFAULT_SERVICE_PORT

    return TsPressConfig(
        root=root,
        source_dir=root / source_dir if source_dir else None,
        out_dir=root / out_dir,
        project_root=(root / project_root).resolve() if project_root else None,
        line_separator=line_separator,
        exclude_paths=_as_str_list(data.get("exclude_paths")),
        aliases=aliases,
        templates_dir=root / templates_dir if templates_dir else None,
        title=_as_str(data.get("title")),
        service=service,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return {} if loaded is None else loaded


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = ["ConfigError", "ServiceConfig", "TsPressConfig", "load_config", "CONFIG_FILENAME"]
