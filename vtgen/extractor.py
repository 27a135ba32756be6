"""Normalizes raw candidates into declarations."""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Type, TypeVar

from .models import (
    Declaration,
    DeclarationShape,
    OperatorVisibility,
    RawCandidate,
    RepresentationKind,
    ValueTypeOptions,
)

TYPE_OPTION = "Type"
CAST_OPERATOR_OPTION = "CastOperator"

DEFAULT_OPTIONS = ValueTypeOptions()

_E = TypeVar("_E", bound=IntEnum)

_KIND_ALIASES: Dict[str, RepresentationKind] = {
    "uniqueid128": RepresentationKind.UNIQUE_ID128,
    "guid": RepresentationKind.UNIQUE_ID128,
    "uuid": RepresentationKind.UNIQUE_ID128,
    "integer32": RepresentationKind.INTEGER32,
    "int32": RepresentationKind.INTEGER32,
    "integer64": RepresentationKind.INTEGER64,
    "int64": RepresentationKind.INTEGER64,
}

_VISIBILITY_ALIASES: Dict[str, OperatorVisibility] = {
    "implicit": OperatorVisibility.IMPLICIT,
    "explicit": OperatorVisibility.EXPLICIT,
}


def extract(candidate: RawCandidate) -> Declaration:
    """Return the normalized declaration for one candidate."""
    options = read_options(candidate.attributes)
    return Declaration(
        name=candidate.name,
        namespace=candidate.namespace,
        kind=options.kind,
        visibility=options.visibility,
        location=candidate.location,
        is_well_formed=is_well_formed(candidate.shape),
    )


def extract_all(candidates: Iterable[RawCandidate]) -> List[Declaration]:
    return [extract(candidate) for candidate in candidates]


def read_options(attributes: Mapping[str, Any]) -> ValueTypeOptions:
    """Read ``Type`` and ``CastOperator``, defaulting anything unrecognized."""
    normalized = {_normalize_key(key): value for key, value in attributes.items() if isinstance(key, str)}
    kind = _coerce(
        normalized.get(_normalize_key(TYPE_OPTION)),
        RepresentationKind,
        _KIND_ALIASES,
        DEFAULT_OPTIONS.kind,
    )
    visibility = _coerce(
        normalized.get(_normalize_key(CAST_OPERATOR_OPTION)),
        OperatorVisibility,
        _VISIBILITY_ALIASES,
        DEFAULT_OPTIONS.visibility,
    )
    return ValueTypeOptions(kind=kind, visibility=visibility)


def is_well_formed(shape: DeclarationShape) -> bool:
    return (
        shape.is_value_type
        and not shape.is_nested
        and shape.in_namespace
        and shape.is_partial
        and shape.is_readonly
    )


def _normalize_key(key: str) -> str:
    return key.replace("_", "").lower()


def _coerce(value: Any, enum_type: Type[_E], aliases: Mapping[str, _E], default: _E) -> _E:
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, enum_type):
        return value
    if isinstance(value, int):
        try:
            return enum_type(value)
        except ValueError:
            return default
    if isinstance(value, str):
        found: Optional[_E] = aliases.get(_normalize_key(value.rsplit(".", 1)[-1]))
        return found if found is not None else default
    return default


__all__ = [
    "CAST_OPERATOR_OPTION",
    "DEFAULT_OPTIONS",
    "TYPE_OPTION",
    "extract",
    "extract_all",
    "is_well_formed",
    "read_options",
]
