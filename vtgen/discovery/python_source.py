"""Finds ``@value_type`` declarations in Python source files."""

from __future__ import annotations

import ast
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set

from ..extractor import CAST_OPERATOR_OPTION, TYPE_OPTION
from ..logging import get_logger
from ..models import DeclarationShape, RawCandidate, SourceLocation

MARKER_NAME = "value_type"
MARKER_MODULES = ("vtgen", "vtgen.markers")

_OPTION_KEYS = {
    "type": TYPE_OPTION,
    "castoperator": CAST_OPERATOR_OPTION,
}

logger = get_logger("discovery")


def module_namespace(path: Path, root: Path) -> str:
    """Return the package a source file belongs to, relative to ``root``.

    ``shop/ids.py`` and ``shop/__init__.py`` both declare into ``shop``;
    a module directly under ``root`` declares into the global namespace.
    """
    try:
        relative = path.resolve().relative_to(root.resolve())
    except ValueError:
        return ""
    return ".".join(relative.parent.parts)


class _MarkerAliases:
    """Local names under which the marker is reachable in one module."""

    def __init__(self) -> None:
        self.names: Set[str] = {MARKER_NAME}
        self.modules: Set[str] = set()

    def collect(self, tree: ast.Module) -> None:
        for node in ast.walk(tree):
            if isinstance(node, ast.ImportFrom) and node.module in MARKER_MODULES:
                for alias in node.names:
                    if alias.name == MARKER_NAME:
                        self.names.add(alias.asname or alias.name)
                    elif f"{node.module}.{alias.name}" in MARKER_MODULES:
                        self.modules.add(alias.asname or alias.name)
            elif isinstance(node, ast.Import):
                for alias in node.names:
                    if alias.name not in MARKER_MODULES:
                        continue
                    if alias.asname:
                        self.modules.add(alias.asname)
                    else:
                        # `import vtgen.markers` binds both dotted paths
                        self.modules.add(alias.name)
                        self.modules.add(alias.name.split(".")[0])

    def matches(self, expr: ast.expr) -> bool:
        if isinstance(expr, ast.Name):
            return expr.id in self.names
        if isinstance(expr, ast.Attribute) and expr.attr == MARKER_NAME:
            return _dotted(expr.value) in self.modules
        return False


def _dotted(expr: ast.expr) -> Optional[str]:
    if isinstance(expr, ast.Name):
        return expr.id
    if isinstance(expr, ast.Attribute):
        prefix = _dotted(expr.value)
        return f"{prefix}.{expr.attr}" if prefix else None
    return None


class _DeclarationVisitor(ast.NodeVisitor):
    def __init__(self, aliases: _MarkerAliases, namespace: str, display_path: str) -> None:
        self.aliases = aliases
        self.namespace = namespace
        self.display_path = display_path
        self.candidates: List[RawCandidate] = []
        self._stack: List[ast.AST] = []

    def visit_Module(self, node: ast.Module) -> None:
        self._stack.append(node)
        self.generic_visit(node)
        self._stack.pop()

    def visit_FunctionDef(self, node: ast.FunctionDef) -> None:
        self._stack.append(node)
        self.generic_visit(node)
        self._stack.pop()

    visit_AsyncFunctionDef = visit_FunctionDef  # type: ignore[assignment]

    def visit_ClassDef(self, node: ast.ClassDef) -> None:
        marker = self._find_marker(node)
        if marker is not None:
            self.candidates.append(self._candidate(node, marker))
        self._stack.append(node)
        self.generic_visit(node)
        self._stack.pop()

    def _find_marker(self, node: ast.ClassDef) -> Optional[ast.expr]:
        for decorator in node.decorator_list:
            target = decorator.func if isinstance(decorator, ast.Call) else decorator
            if self.aliases.matches(target):
                return decorator
        return None

    def _candidate(self, node: ast.ClassDef, marker: ast.expr) -> RawCandidate:
        return RawCandidate(
            name=node.name,
            namespace=self.namespace,
            attributes=_read_attributes(marker),
            location=SourceLocation(
                path=self.display_path,
                line=node.lineno,
                column=node.col_offset + 1,
            ),
            shape=DeclarationShape(
                is_value_type=_is_value_type(node),
                is_nested=any(isinstance(parent, ast.ClassDef) for parent in self._stack),
                in_namespace=bool(self._stack) and isinstance(self._stack[-1], ast.Module),
                is_partial=_is_stub_body(node.body),
                is_readonly=any(_is_empty_slots(statement) for statement in node.body),
            ),
        )


def _read_attributes(marker: ast.expr) -> Dict[str, Any]:
    if not isinstance(marker, ast.Call):
        return {}
    attributes: Dict[str, Any] = {}
    for keyword in marker.keywords:
        if keyword.arg is None:
            continue
        key = _OPTION_KEYS.get(keyword.arg.replace("_", "").lower(), keyword.arg)
        attributes[key] = _literal(keyword.value)
    return attributes


def _literal(node: ast.expr) -> Any:
    if isinstance(node, ast.Attribute):
        return node.attr
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Constant):
        return node.value
    return None


def _is_value_type(node: ast.ClassDef) -> bool:
    if node.keywords:
        return False
    return all(isinstance(base, ast.Name) and base.id == "object" for base in node.bases)


def _is_empty_slots(statement: ast.stmt) -> bool:
    if isinstance(statement, ast.Assign):
        targets = statement.targets
        value: Optional[ast.expr] = statement.value
    elif isinstance(statement, ast.AnnAssign):
        targets = [statement.target]
        value = statement.value
    else:
        return False
    if len(targets) != 1 or not isinstance(targets[0], ast.Name) or targets[0].id != "__slots__":
        return False
    return isinstance(value, ast.Tuple) and not value.elts


def _is_stub_body(body: Sequence[ast.stmt]) -> bool:
    for index, statement in enumerate(body):
        if isinstance(statement, ast.Pass) or _is_empty_slots(statement):
            continue
        if isinstance(statement, ast.Expr) and isinstance(statement.value, ast.Constant):
            if statement.value.value is Ellipsis:
                continue
            if index == 0 and isinstance(statement.value.value, str):
                continue
        return False
    return True


class PythonSourceHost:
    """Turns Python modules into raw declaration candidates."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).expanduser().resolve()

    def discover(self, path: Path) -> List[RawCandidate]:
        display_path = self._display_path(path)
        try:
            source = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Skipping unreadable file %s: %s", display_path, exc)
            return []
        return self.discover_source(source, path=path)

    def discover_source(self, source: str, *, path: Path) -> List[RawCandidate]:
        display_path = self._display_path(path)
        try:
            tree = ast.parse(source, filename=display_path)
        except SyntaxError as exc:
            logger.warning("Skipping %s: %s", display_path, exc)
            return []

        aliases = _MarkerAliases()
        aliases.collect(tree)
        visitor = _DeclarationVisitor(aliases, module_namespace(path, self.root), display_path)
        visitor.visit(tree)
        return visitor.candidates

    def discover_all(self, paths: Iterable[Path]) -> List[RawCandidate]:
        candidates: List[RawCandidate] = []
        for path in paths:
            candidates.extend(self.discover(path))
        logger.debug("Discovered %d value type candidates", len(candidates))
        return candidates

    def _display_path(self, path: Path) -> str:
        try:
            return path.resolve().relative_to(self.root).as_posix()
        except ValueError:
            return path.as_posix()


__all__ = ["MARKER_NAME", "PythonSourceHost", "module_namespace"]
