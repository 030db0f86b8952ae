"""
rb-lint - pattern-driven lint rules with autocorrection for Ruby source

This package provides:
- Traversal driver dispatching syntax nodes to rules by kind
- Diagnostic collection and all-or-nothing edit resolution
- The Performance/UseZipToWrapArrayContents rule
"""

__version__ = "0.1.0"

from .autofix import AutoFixEngine
from .engine import LinterEngine
from .exceptions import EditConflictError, LintError, RuleError
from .models import Diagnostic, DiagnosticCollector, Edit, FixResult, LintResult, Severity
from .registry import RuleRegistry

__all__ = [
    "AutoFixEngine",
    "LinterEngine",
    "EditConflictError",
    "LintError",
    "RuleError",
    "Diagnostic",
    "DiagnosticCollector",
    "Edit",
    "FixResult",
    "LintResult",
    "Severity",
    "RuleRegistry",
]
