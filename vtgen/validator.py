"""Structural validation of declarations and diagnostic reporting."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .emitter import SUFFIX_CORE, module_name, qualified_module
from .models import Declaration, Diagnostic, Severity

IMPROPER_DECLARATION_ID = "VT0001"
IMPROPER_DECLARATION_TITLE = "Value type must be a non-nested immutable stub class"
IMPROPER_DECLARATION_MESSAGE = (
    "Value type '{0}' must be a non-nested immutable stub class "
    "(decorated class whose body only declares '__slots__ = ()')"
)

CONFLICTING_DECLARATION_ID = "VT0002"
CONFLICTING_DECLARATION_TITLE = "Value type modules must be unique"
CONFLICTING_DECLARATION_MESSAGE = (
    "Value type '{0}' generates module '{1}', which is also generated for {2}"
)


@dataclass(frozen=True)
class ValidationOutcome:
    """Declarations that may be emitted and the diagnostics for the rest."""

    accepted: Tuple[Declaration, ...]
    diagnostics: Tuple[Diagnostic, ...]


def validate(declaration: Declaration) -> Optional[Diagnostic]:
    """Return the diagnostic for an ill-formed declaration, or ``None``."""
    if declaration.is_well_formed:
        return None
    return Diagnostic(
        id=IMPROPER_DECLARATION_ID,
        title=IMPROPER_DECLARATION_TITLE,
        message=IMPROPER_DECLARATION_MESSAGE.format(declaration.name),
        severity=Severity.ERROR,
        location=declaration.location,
    )


def partition(declarations: Iterable[Declaration]) -> ValidationOutcome:
    """Split declarations into emittable ones and one diagnostic per ill-formed one."""
    accepted: List[Declaration] = []
    diagnostics: List[Diagnostic] = []
    for declaration in declarations:
        diagnostic = validate(declaration)
        if diagnostic is None:
            accepted.append(declaration)
        else:
            diagnostics.append(diagnostic)
    return ValidationOutcome(accepted=tuple(accepted), diagnostics=tuple(diagnostics))


def find_conflicts(declarations: Sequence[Declaration]) -> ValidationOutcome:
    """Reject declarations whose artifacts would land on the same modules.

    Artifact modules derive from the namespace and the snake-cased name, so
    ``OrderID`` and ``OrderId`` in one package (or one name declared in two
    modules of a package) collide. Every declaration involved in a collision
    is rejected, whatever order the declarations arrive in.
    """
    groups: Dict[str, List[int]] = defaultdict(list)
    for index, declaration in enumerate(declarations):
        groups[_core_module(declaration)].append(index)

    accepted: List[Declaration] = []
    diagnostics: List[Diagnostic] = []
    for index, declaration in enumerate(declarations):
        module = _core_module(declaration)
        group = groups[module]
        if len(group) == 1:
            accepted.append(declaration)
            continue
        others = ", ".join(
            f"'{declarations[other].qualified_name}' at {declarations[other].location}"
            for other in group
            if other != index
        )
        diagnostics.append(
            Diagnostic(
                id=CONFLICTING_DECLARATION_ID,
                title=CONFLICTING_DECLARATION_TITLE,
                message=CONFLICTING_DECLARATION_MESSAGE.format(declaration.qualified_name, module, others),
                severity=Severity.ERROR,
                location=declaration.location,
            )
        )
    return ValidationOutcome(accepted=tuple(accepted), diagnostics=tuple(diagnostics))


def _core_module(declaration: Declaration) -> str:
    return qualified_module(declaration.namespace, module_name(declaration.name, SUFFIX_CORE))


__all__ = [
    "CONFLICTING_DECLARATION_ID",
    "CONFLICTING_DECLARATION_MESSAGE",
    "CONFLICTING_DECLARATION_TITLE",
    "IMPROPER_DECLARATION_ID",
    "IMPROPER_DECLARATION_MESSAGE",
    "IMPROPER_DECLARATION_TITLE",
    "ValidationOutcome",
    "find_conflicts",
    "partition",
    "validate",
]
