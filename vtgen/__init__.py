"""vtgen: generates strongly-typed opaque identifier modules."""

from .markers import value_type
from .models import OperatorVisibility, RepresentationKind

__version__ = "0.1.0"

__all__ = ["OperatorVisibility", "RepresentationKind", "__version__", "value_type"]
