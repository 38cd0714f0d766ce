"""
factorkb/core/types.py
======================
Foundation types shared by the symbolic layer.

Kept free of factor classes so every module can import from here
without circular dependencies (factors are referenced by annotation only).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, List, Optional

if TYPE_CHECKING:
    from factorkb.symbolic.factor import Factor


# ─────────────────────────────────────────────
#  ENUMERATIONS
# ─────────────────────────────────────────────

class SolveDirective(Enum):
    """What a solved parent can tell an unsolved child during propagation.

    NO_SOLUTION:      nothing can be inferred about the child
    OTHER:            the parent resolves the child by another mechanism
    SOLVE_TRUE:       the child must hold
    SOLVE_FALSE:      the child must not hold
    SOLVE_ARITHMETIC: the child takes the value from alt_solution_for_child
    """
    NO_SOLUTION      = "no_solution"
    OTHER            = "other"
    SOLVE_TRUE       = "solve_true"
    SOLVE_FALSE      = "solve_false"
    SOLVE_ARITHMETIC = "solve_arithmetic"

    @property
    def is_fallback(self) -> bool:
        """True when the child has to infer its own value bottom-up."""
        return self in (SolveDirective.NO_SOLUTION, SolveDirective.OTHER)


class Operator(Enum):
    """Operator tags understood by ``Literal.apply``."""
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"
    XOR = "^"
    AND = "&"
    OR  = "|"
    LT  = "<"
    LE  = "<="
    GT  = ">"
    GE  = ">="
    EQ  = "="
    NE  = "!="


# ─────────────────────────────────────────────
#  RESULT TYPES
# ─────────────────────────────────────────────

@dataclass
class Conflict:
    """An assertion that does not hold after propagation.

    Attributes:
        assertion: the top-level assertion in which the conflict was found.
        culprit:   the sub-term responsible (may be the assertion itself).
        message:   human-readable description including every referenced
                   symbol's resolved value.
        symbols:   symbol name → resolved value, "unsolvable" when unknown.
    """
    assertion: "Factor"
    culprit:   Optional["Factor"]
    message:   str
    symbols:   Dict[str, str] = field(default_factory=dict)

    def summary(self) -> str:
        """One-line summary for logging / CLI output."""
        return f"Conflict in {self.assertion}: culprit {self.culprit}"

    def __str__(self) -> str:
        return self.message


@dataclass
class SolveStats:
    """Bookkeeping of a single fixpoint run."""
    passes:          int = 0
    changes:         int = 0          # sum of counts returned by solve_assertion
    transitions:     int = 0          # every unsolved → solved flip, eager ones included
    changes_per_pass: List[int] = field(default_factory=list)
    assertions:      int = 0
    query_assertions: int = 0
    queries:         int = 0

    def summary(self) -> str:
        return (
            f"SolveStats({self.passes} passes, {self.transitions} transitions, "
            f"{self.assertions} assertions, {self.query_assertions} query assertions)"
        )
