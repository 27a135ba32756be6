"""Core data models shared across vtgen components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, Mapping, Optional, Tuple


class RepresentationKind(IntEnum):
    """Primitive stored by a generated value type."""

    UNIQUE_ID128 = 1
    INTEGER32 = 2
    INTEGER64 = 3


class OperatorVisibility(IntEnum):
    """Whether conversions to and from the raw value need an explicit call."""

    IMPLICIT = 1
    EXPLICIT = 2


class Severity(str, Enum):
    ERROR = "error"


@dataclass(frozen=True)
class SourceLocation:
    """Position of a declaration in its source file."""

    path: str
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        return f"{self.path}:{self.line}:{self.column}"


@dataclass(frozen=True)
class DeclarationShape:
    """Structural facts about a candidate as reported by the source host."""

    is_value_type: bool = True
    is_nested: bool = False
    in_namespace: bool = True
    is_partial: bool = True
    is_readonly: bool = True


@dataclass(frozen=True)
class RawCandidate:
    """A decorated type found by a source host, before normalization."""

    name: str
    namespace: str = ""
    attributes: Mapping[str, Any] = field(default_factory=dict)
    location: SourceLocation = field(default_factory=lambda: SourceLocation(path="<unknown>"))
    shape: DeclarationShape = field(default_factory=DeclarationShape)


@dataclass(frozen=True)
class ValueTypeOptions:
    """Per-declaration configuration read from the marker arguments."""

    kind: RepresentationKind = RepresentationKind.UNIQUE_ID128
    visibility: OperatorVisibility = OperatorVisibility.EXPLICIT


@dataclass(frozen=True)
class Declaration:
    """Normalized view of a candidate used by the generation pipeline."""

    name: str
    namespace: str
    kind: RepresentationKind
    visibility: OperatorVisibility
    location: SourceLocation
    is_well_formed: bool

    @property
    def qualified_name(self) -> str:
        return f"{self.namespace}.{self.name}" if self.namespace else self.name


@dataclass(frozen=True)
class CapabilityRecord:
    """Project-wide integration flags, fixed for one generation pass."""

    has_serialization_integration: bool = False
    has_persistence_integration: bool = False
    project_root_name: str = ""


@dataclass(frozen=True)
class Artifact:
    """One generated module handed back to the host."""

    declaring_name: str
    suffix: str
    namespace: str
    module: str
    text: str

    @property
    def name(self) -> str:
        return f"{self.declaring_name}.{self.suffix}"

    @property
    def qualified_module(self) -> str:
        return f"{self.namespace}.{self.module}" if self.namespace else self.module

    @property
    def path(self) -> str:
        return self.qualified_module.replace(".", "/") + ".py"


@dataclass(frozen=True)
class Diagnostic:
    """A message reported against a declaration."""

    id: str
    title: str
    message: str
    severity: Severity
    location: SourceLocation

    def format(self) -> str:
        return f"{self.location}: {self.severity.value} {self.id}: {self.message}"


@dataclass(frozen=True)
class GenerationResult:
    """Artifacts and diagnostics produced by a single generation pass."""

    artifacts: Tuple[Artifact, ...] = ()
    diagnostics: Tuple[Diagnostic, ...] = ()

    @property
    def has_errors(self) -> bool:
        return any(item.severity is Severity.ERROR for item in self.diagnostics)

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(artifact.name for artifact in self.artifacts)

    def artifact(self, name: str) -> Optional[Artifact]:
        for artifact in self.artifacts:
            if artifact.name == name:
                return artifact
        return None

    def by_path(self) -> Dict[str, Artifact]:
        return {artifact.path: artifact for artifact in self.artifacts}
