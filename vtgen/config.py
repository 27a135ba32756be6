"""Configuration loading for vtgen (.vtgen.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".vtgen.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class IntegrationsConfig:
    """Forced integration switches; ``None`` means detect from dependencies."""

    serialization: Optional[bool] = None
    persistence: Optional[bool] = None


@dataclass
class VtgenConfig:
    """Represents the settings defined in .vtgen.yml."""

    root: Path
    source_root: Path
    output_dir: Path
    project_root: Optional[str] = None
    templates_dir: Optional[Path] = None
    workers: int = 1
    integrations: IntegrationsConfig = field(default_factory=IntegrationsConfig)
    exclude_paths: List[str] = field(default_factory=list)


def load_config(config_path: Path) -> VtgenConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return VtgenConfig(root=root, source_root=root, output_dir=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    source_str = _as_str(data.get("source_root"))
    source_root = (root / source_str).resolve() if source_str else root
    output_str = _as_str(data.get("output_dir"))
    output_dir = (root / output_str).resolve() if output_str else source_root

    templates_str = _as_str(data.get("templates_dir"))
    templates_dir = root / templates_str if templates_str else None

    workers = _as_int(data.get("workers"))
    if workers is None or workers < 1:
        workers = 1

    integrations = IntegrationsConfig()
    integrations_data = _as_dict(data.get("integrations"))
    if integrations_data:
        integrations.serialization = _as_bool(integrations_data.get("serialization"))
        integrations.persistence = _as_bool(integrations_data.get("persistence"))

    project_root = _as_str(data.get("project_root"))

    return VtgenConfig(
        root=root,
        source_root=source_root,
        output_dir=output_dir,
        project_root=project_root.strip() if project_root is not None else None,
        templates_dir=templates_dir,
        workers=workers,
        integrations=integrations,
        exclude_paths=_as_str_list(data.get("exclude_paths")),
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


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


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1", "on"}:
            return True
        if lowered in {"false", "no", "0", "off"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []
