"""Whole-program pass producing the persistence registration artifact."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from .emitter import (
    REGISTRATION_TEMPLATE,
    SUFFIX_CORE,
    SUFFIX_REGISTRATION,
    SUFFIX_VALUE_COMPARER,
    SUFFIX_VALUE_CONVERTER,
    TemplateRenderer,
    module_name,
    qualified_module,
)
from .logging import get_logger
from .models import Artifact, CapabilityRecord, Declaration

REGISTRATION_NAME = "ValueTypeRegistration"
REGISTRATION_MODULE = "value_type_registration"

logger = get_logger("aggregator")


def should_aggregate(declarations: Sequence[Declaration], capabilities: CapabilityRecord) -> bool:
    """Registration is produced only for a non-empty, fully well-formed set with persistence."""
    if not capabilities.has_persistence_integration:
        return False
    if not declarations:
        return False
    return all(declaration.is_well_formed for declaration in declarations)


def aggregate(
    declarations: Sequence[Declaration],
    capabilities: CapabilityRecord,
    renderer: Optional[TemplateRenderer] = None,
) -> Optional[Artifact]:
    """Return the registration artifact for the collected set, or ``None``."""
    if not should_aggregate(declarations, capabilities):
        logger.debug(
            "Skipping registration (%d declarations, persistence=%s)",
            len(declarations),
            capabilities.has_persistence_integration,
        )
        return None

    ordered = sorted(declarations, key=lambda item: item.qualified_name)
    imports: List[str] = []
    entries: List[Dict[str, str]] = []
    for declaration in ordered:
        core = qualified_module(declaration.namespace, module_name(declaration.name, SUFFIX_CORE))
        converter = qualified_module(
            declaration.namespace, module_name(declaration.name, SUFFIX_VALUE_CONVERTER)
        )
        comparer = qualified_module(
            declaration.namespace, module_name(declaration.name, SUFFIX_VALUE_COMPARER)
        )
        imports.extend([core, converter, comparer])
        entries.append(
            {
                "qualified_name": declaration.qualified_name,
                "core": f"{core}.{declaration.name}",
                "converter": f"{converter}.{declaration.name}ValueConverter",
                "comparer": f"{comparer}.{declaration.name}ValueComparer",
            }
        )

    renderer = renderer or TemplateRenderer()
    text = renderer.render(
        REGISTRATION_TEMPLATE,
        namespace=capabilities.project_root_name,
        imports=sorted(set(imports)),
        entries=entries,
    )
    logger.debug("Registration covers %d value types", len(entries))
    return Artifact(
        declaring_name=REGISTRATION_NAME,
        suffix=SUFFIX_REGISTRATION,
        namespace=capabilities.project_root_name,
        module=REGISTRATION_MODULE,
        text=text,
    )


__all__ = ["REGISTRATION_MODULE", "REGISTRATION_NAME", "aggregate", "should_aggregate"]
