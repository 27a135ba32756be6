"""Source discovery for value type declarations."""

from .python_source import PythonSourceHost, module_namespace
from .scanner import GENERATED_MARKER, SourceScanner

__all__ = ["GENERATED_MARKER", "PythonSourceHost", "SourceScanner", "module_namespace"]
