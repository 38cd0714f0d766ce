"""
factorkb/core/exceptions.py
===========================
Custom exception hierarchy for factorkb.

All exceptions carry structured context so callers can
programmatically handle different failure modes.

Logical conflicts are normally reported as data by
``KnowledgeBase.has_conflict()``; ``LogicalConflict`` is only raised
when a caller explicitly asks for it via ``check_consistency()``.
"""

from __future__ import annotations
from typing import TYPE_CHECKING, Any, Optional, Tuple

if TYPE_CHECKING:
    from factorkb.core.types import Conflict


class FactorKBError(Exception):
    """Base exception for all factorkb errors."""

    def __init__(self, message: str, context: Optional[dict] = None):
        super().__init__(message)
        self.context = context or {}


class ConfigurationError(FactorKBError):
    """Raised immediately on structural misuse of the factor algebra,
    e.g. building an AND or OR connective with no children."""

    pass


class SymbolRegistrationError(ConfigurationError):
    """Raised when a symbol is registered twice, into a second knowledge
    base, or under a name that the knowledge base already holds."""

    def __init__(self, message: str, symbol_name: str, context: Optional[dict] = None):
        super().__init__(message, context)
        self.symbol_name = symbol_name


class AssertionFormatError(ConfigurationError):
    """Raised when an assertion file or nested-list expression is malformed."""

    def __init__(self, message: str, expression: Any = None):
        super().__init__(message, {"expression": expression})
        self.expression = expression


class UnsupportedOperation(FactorKBError):
    """Raised in strict mode when propagation would assign the null
    result of an arithmetic operator applied to incompatible operands."""

    def __init__(self, message: str, operator: str, operands: Tuple[str, ...] = ()):
        super().__init__(message, {"operator": operator, "operands": list(operands)})
        self.operator = operator
        self.operands = operands


class LogicalConflict(FactorKBError):
    """Raised by ``check_consistency()`` when a solved knowledge base
    contains an assertion that does not hold.

    Carries the ``Conflict`` report (assertion, culprit, symbol dump).
    """

    def __init__(self, message: str, conflict: "Conflict"):
        super().__init__(message, {"assertion": str(conflict.assertion)})
        self.conflict = conflict
