"""Detects which optional integrations the hosting project references."""

from __future__ import annotations

import re
import tomllib
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set

from .logging import get_logger
from .models import CapabilityRecord

SERIALIZATION_MODULE = "pydantic"
PERSISTENCE_MODULE = "sqlalchemy"

_NAME_PATTERN = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)")
_SEPARATORS = re.compile(r"[-_.]+")

logger = get_logger("capabilities")


def detect(references: Iterable[str], project_root_name: str = "") -> CapabilityRecord:
    """Build the capability record from a set of referenced module names."""
    normalized = {normalize_name(name) for name in references if name}
    return CapabilityRecord(
        has_serialization_integration=normalize_name(SERIALIZATION_MODULE) in normalized,
        has_persistence_integration=normalize_name(PERSISTENCE_MODULE) in normalized,
        project_root_name=project_root_name,
    )


def detect_project_capabilities(
    root: Path,
    *,
    project_root: Optional[str] = None,
    serialization: Optional[bool] = None,
    persistence: Optional[bool] = None,
) -> CapabilityRecord:
    """Detect capabilities from the dependency manifests found under ``root``.

    Explicit ``serialization``/``persistence`` values override detection and
    ``project_root`` overrides the name derived from the project metadata.
    """
    references = load_python_dependencies(root)
    root_name = project_root if project_root is not None else load_project_name(root)
    record = detect(references, to_namespace(root_name))
    if serialization is not None or persistence is not None:
        record = CapabilityRecord(
            has_serialization_integration=(
                record.has_serialization_integration if serialization is None else serialization
            ),
            has_persistence_integration=(
                record.has_persistence_integration if persistence is None else persistence
            ),
            project_root_name=record.project_root_name,
        )
    logger.debug(
        "Capabilities for %s: serialization=%s persistence=%s root=%r",
        root,
        record.has_serialization_integration,
        record.has_persistence_integration,
        record.project_root_name,
    )
    return record


def normalize_name(name: str) -> str:
    """Return the PEP 503 normalized distribution name of a requirement string."""
    match = _NAME_PATTERN.match(name)
    if not match:
        return ""
    return _SEPARATORS.sub("-", match.group(1)).lower()


def to_namespace(name: str) -> str:
    """Turn a project name into a dotted Python namespace ("" when unusable)."""
    parts = [_SEPARATORS.sub("_", part.strip()).lower() for part in name.strip().split(".") if part.strip()]
    if not parts or not all(part.isidentifier() for part in parts):
        return ""
    return ".".join(parts)


def load_project_name(root: Path) -> str:
    pyproject = root / "pyproject.toml"
    if pyproject.exists():
        data = _load_toml(pyproject)
        project = data.get("project")
        if isinstance(project, dict) and isinstance(project.get("name"), str):
            return project["name"]
        poetry = _poetry_table(data)
        if isinstance(poetry.get("name"), str):
            return poetry["name"]
    return root.resolve().name


# Python dependency helpers


def load_python_dependencies(root: Path) -> List[str]:
    """Collect Python dependencies from requirements files and pyproject.toml."""
    deps: Set[str] = set()

    for requirements in sorted(root.glob("requirements*.txt")):
        deps.update(_parse_requirements(requirements))

    pyproject = root / "pyproject.toml"
    if pyproject.exists():
        deps.update(_parse_pyproject(pyproject))

    return sorted(deps)


def _parse_requirements(path: Path) -> List[str]:
    packages: List[str] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith(("#", "-")):
            continue
        name = normalize_name(stripped)
        if name:
            packages.append(name)
    return packages


def _parse_pyproject(path: Path) -> List[str]:
    data = _load_toml(path)
    dependencies: List[Any] = []

    project = data.get("project")
    if isinstance(project, dict):
        dependencies.extend(project.get("dependencies", []) or [])
        optional = project.get("optional-dependencies", {}) or {}
        for values in optional.values():
            dependencies.extend(values or [])

    poetry = _poetry_table(data)
    poetry_deps = poetry.get("dependencies", {}) or {}
    if isinstance(poetry_deps, dict):
        dependencies.extend(poetry_deps.keys())

    packages: Set[str] = set()
    for dep in dependencies:
        if not isinstance(dep, str):
            continue
        name = normalize_name(dep)
        if name and name != "python":
            packages.add(name)
    return sorted(packages)


def _load_toml(path: Path) -> Dict[str, Any]:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.warning("Ignoring unreadable %s: %s", path, exc)
        return {}


def _poetry_table(data: Dict[str, Any]) -> Dict[str, Any]:
    tool = data.get("tool")
    if not isinstance(tool, dict):
        return {}
    poetry = tool.get("poetry")
    return poetry if isinstance(poetry, dict) else {}


__all__ = [
    "PERSISTENCE_MODULE",
    "SERIALIZATION_MODULE",
    "detect",
    "detect_project_capabilities",
    "load_project_name",
    "load_python_dependencies",
    "normalize_name",
    "to_namespace",
]
