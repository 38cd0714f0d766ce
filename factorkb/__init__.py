"""
factorkb/__init__.py — Public API exports
"""

from factorkb.core.config import DEFAULT_CONFIG, SolverConfig
from factorkb.core.exceptions import (
    AssertionFormatError,
    ConfigurationError,
    FactorKBError,
    LogicalConflict,
    SymbolRegistrationError,
    UnsupportedOperation,
)
from factorkb.core.types import Conflict, Operator, SolveDirective, SolveStats
from factorkb.symbolic.arithmetic import Add, Equals, GreaterOrEqual, Negate
from factorkb.symbolic.factor import Factor, as_factor
from factorkb.symbolic.knowledge_base import KnowledgeBase
from factorkb.symbolic.loader import AssertionLoader
from factorkb.symbolic.logic import Agreement, And, Implication, Not, Or
from factorkb.symbolic.relations import PropertyDeclaration, SymbolRelation, WrappedSymbol
from factorkb.symbolic.symbols import (
    NULL,
    BooleanLiteral,
    NullLiteral,
    NumericLiteral,
    StringLiteral,
    Symbol,
)
from factorkb.version import __version__

__all__ = [
    "KnowledgeBase",
    "SolverConfig",
    "DEFAULT_CONFIG",
    "Factor",
    "as_factor",
    "Symbol",
    "NumericLiteral",
    "StringLiteral",
    "BooleanLiteral",
    "NullLiteral",
    "NULL",
    "And",
    "Or",
    "Not",
    "Implication",
    "Agreement",
    "Add",
    "Negate",
    "Equals",
    "GreaterOrEqual",
    "SymbolRelation",
    "WrappedSymbol",
    "PropertyDeclaration",
    "AssertionLoader",
    "Conflict",
    "Operator",
    "SolveDirective",
    "SolveStats",
    "FactorKBError",
    "ConfigurationError",
    "SymbolRegistrationError",
    "UnsupportedOperation",
    "LogicalConflict",
    "AssertionFormatError",
    "__version__",
]
