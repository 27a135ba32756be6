"""The ``value_type`` marker used in user code.

The decorator does nothing at runtime beyond recording the options it was
given; generation reads the decorator statically from source.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, TypeVar, overload

from .extractor import read_options
from .models import OperatorVisibility, RepresentationKind

_T = TypeVar("_T", bound=type)

OPTIONS_ATTRIBUTE = "__value_type_options__"


@overload
def value_type(cls: _T) -> _T: ...


@overload
def value_type(
    cls: None = None,
    *,
    type: RepresentationKind = ...,
    cast_operator: OperatorVisibility = ...,
) -> Callable[[_T], _T]: ...


def value_type(cls: Optional[type] = None, **options: Any) -> Any:
    """Mark a stub class as an opaque identifier declaration.

    Usage::

        @value_type(type=RepresentationKind.INTEGER32)
        class OrderId:
            __slots__ = ()
    """

    def mark(target: _T) -> _T:
        setattr(target, OPTIONS_ATTRIBUTE, read_options(options))
        return target

    if cls is not None:
        return mark(cls)
    return mark


__all__ = ["OPTIONS_ATTRIBUTE", "OperatorVisibility", "RepresentationKind", "value_type"]
