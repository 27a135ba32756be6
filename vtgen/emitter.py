"""Renders per-declaration artifacts from the template families."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .models import (
    Artifact,
    CapabilityRecord,
    Declaration,
    OperatorVisibility,
    RepresentationKind,
)

SUFFIX_CORE = "core"
SUFFIX_JSON_CONVERTER = "jsonConverter"
SUFFIX_VALUE_CONVERTER = "valueConverter"
SUFFIX_VALUE_COMPARER = "valueComparer"
SUFFIX_REGISTRATION = "registration"

_MODULE_SUFFIXES: Dict[str, str] = {
    SUFFIX_CORE: "_core",
    SUFFIX_JSON_CONVERTER: "_json_converter",
    SUFFIX_VALUE_CONVERTER: "_value_converter",
    SUFFIX_VALUE_COMPARER: "_value_comparer",
}

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")

DEFAULT_TEMPLATES_DIR = Path(__file__).with_name("templates")


@dataclass(frozen=True)
class TemplateFamily:
    """Templates and raw-type facts for one representation kind."""

    directory: str
    raw_label: str
    context: Mapping[str, object] = field(default_factory=dict)

    def template(self, artifact: str) -> str:
        return f"{self.directory}/{artifact}.py.j2"


FAMILIES: Dict[RepresentationKind, TemplateFamily] = {
    RepresentationKind.UNIQUE_ID128: TemplateFamily(
        directory="unique_id128",
        raw_label="UUID",
    ),
    RepresentationKind.INTEGER32: TemplateFamily(
        directory="integer",
        raw_label="Int32",
        context={"bits": 32, "conversion": "int32", "column_type": "Integer"},
    ),
    RepresentationKind.INTEGER64: TemplateFamily(
        directory="integer",
        raw_label="Int64",
        context={"bits": 64, "conversion": "int64", "column_type": "BigInteger"},
    ),
}

COMPARER_TEMPLATE = "common/value_comparer.py.j2"
REGISTRATION_TEMPLATE = "registration.py.j2"


def snake_case(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def module_name(declaring_name: str, suffix: str) -> str:
    """Return the module an artifact is written to, e.g. ``order_id_core``.

    Every artifact module carries a suffix so it never shares a name with the
    module that declares the value type.
    """
    return snake_case(declaring_name) + _MODULE_SUFFIXES[suffix]


def qualified_module(namespace: str, module: str) -> str:
    return f"{namespace}.{module}" if namespace else module


class TemplateRenderer:
    """Thin wrapper around the Jinja environment used for every artifact."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        self.templates_dir = templates_dir
        self._env = self._create_env(templates_dir)

    def render(self, template_name: str, **context: object) -> str:
        template = self._env.get_template(template_name)
        return template.render(**context)

    @staticmethod
    def _create_env(templates_dir: Path | None) -> Environment:
        directories = []
        if templates_dir:
            directories.append(str(templates_dir))
        directories.append(str(DEFAULT_TEMPLATES_DIR))
        # ensure uniqueness preserving order
        ordered = list(dict.fromkeys(directories))
        return Environment(
            loader=FileSystemLoader(ordered),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )


class Emitter:
    """Produces the artifacts of one well-formed declaration.

    Validation happens upstream; the emitter never reports diagnostics.
    """

    def __init__(self, renderer: Optional[TemplateRenderer] = None) -> None:
        self.renderer = renderer or TemplateRenderer()

    def emit(self, declaration: Declaration, capabilities: CapabilityRecord) -> List[Artifact]:
        family = FAMILIES[declaration.kind]
        context = self._context(declaration, family, capabilities)

        artifacts = [self._render(declaration, SUFFIX_CORE, family.template("core"), context)]
        if capabilities.has_serialization_integration:
            artifacts.append(
                self._render(declaration, SUFFIX_JSON_CONVERTER, family.template("json_converter"), context)
            )
        if capabilities.has_persistence_integration:
            artifacts.append(
                self._render(declaration, SUFFIX_VALUE_CONVERTER, family.template("value_converter"), context)
            )
            artifacts.append(self._render(declaration, SUFFIX_VALUE_COMPARER, COMPARER_TEMPLATE, context))
        return artifacts

    def _render(
        self,
        declaration: Declaration,
        suffix: str,
        template_name: str,
        context: Mapping[str, object],
    ) -> Artifact:
        module = module_name(declaration.name, suffix)
        text = self.renderer.render(template_name, module=module, **context)
        return Artifact(
            declaring_name=declaration.name,
            suffix=suffix,
            namespace=declaration.namespace,
            module=module,
            text=text,
        )

    @staticmethod
    def _context(
        declaration: Declaration, family: TemplateFamily, capabilities: CapabilityRecord
    ) -> Dict[str, object]:
        namespace = declaration.namespace
        context: Dict[str, object] = {
            "name": declaration.name,
            "namespace": namespace,
            "raw_label": family.raw_label,
            "implicit": declaration.visibility is OperatorVisibility.IMPLICIT,
            "serialization": capabilities.has_serialization_integration,
            "core_module": qualified_module(namespace, module_name(declaration.name, SUFFIX_CORE)),
            "json_module": qualified_module(namespace, module_name(declaration.name, SUFFIX_JSON_CONVERTER)),
        }
        context.update(family.context)
        return context


__all__ = [
    "COMPARER_TEMPLATE",
    "Emitter",
    "FAMILIES",
    "REGISTRATION_TEMPLATE",
    "SUFFIX_CORE",
    "SUFFIX_JSON_CONVERTER",
    "SUFFIX_REGISTRATION",
    "SUFFIX_VALUE_COMPARER",
    "SUFFIX_VALUE_CONVERTER",
    "TemplateFamily",
    "TemplateRenderer",
    "module_name",
    "qualified_module",
    "snake_case",
]
