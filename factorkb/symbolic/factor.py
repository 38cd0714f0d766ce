"""
factorkb/symbolic/factor.py
===========================
The Factor contract shared by every node of an assertion tree.

A factor is a symbol, a literal value, a connective, or a relation.
Propagation is driven by one template method, ``solve_assertion``:

    1. recurse into every child (bottom-up)
    2. stop if this node is already solved
    3. ask the parent what it implies about this node (top-level
       assertions are axioms, so a missing parent means SOLVE_TRUE)
    4. on NO_SOLUTION / OTHER, fall back to inference from the children
    5. apply the resulting directive to this node

Variants customise steps 3-5 through ``directive_from``,
``infer_directive``, ``derived_value`` and the ``assert_*`` hooks.

The module also carries the small operator DSL used to build trees:

    rain >> wet            Implication
    a & b, a | b, ~a       And, Or, Not
    x + y, -x, x - y       Add, Negate
    x.equals(10)           Equals
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from fractions import Fraction
from typing import TYPE_CHECKING, Any, List, Optional, Set

from factorkb.core.exceptions import ConfigurationError
from factorkb.core.types import SolveDirective

if TYPE_CHECKING:
    from factorkb.symbolic.knowledge_base import KnowledgeBase
    from factorkb.symbolic.symbols import Symbol


class Factor(ABC):
    """Abstract node of an assertion tree.

    Solution state:
        solved:          set once propagation has decided this node
        boolean_value:   meaningful only when solved and no alternate is set
        alternate_value: a numeric/string literal the node resolves to;
                         authoritative whenever present
    """

    is_null = False
    is_literal = False

    def __init__(self) -> None:
        self.solved = False
        self.boolean_value = False
        self.alternate_value: Optional[Factor] = None
        self.is_class = False

    # ─── SOLUTION STATE ────────────────────────────────────────────

    @property
    def has_alternate(self) -> bool:
        return self.alternate_value is not None and not self.alternate_value.is_null

    @property
    def solved_true(self) -> bool:
        """Solved, and the solved value counts as true."""
        if not self.solved:
            return False
        if self.has_alternate:
            return self.alternate_value.holds()
        return self.boolean_value

    @property
    def solved_false(self) -> bool:
        return self.solved and not self.solved_true

    def solution_text(self) -> str:
        if self.has_alternate:
            return str(self.alternate_value)
        return "T" if self.boolean_value else "F"

    # ─── CONTRACT ──────────────────────────────────────────────────

    @abstractmethod
    def holds(self) -> bool:
        """Truth of this node recomputed from the live state of its children."""

    @abstractmethod
    def children(self) -> List["Factor"]:
        """Direct children, in order."""

    @abstractmethod
    def can_solve_for_child(self, kb: "KnowledgeBase", child: "Factor") -> SolveDirective:
        """What this node implies about an unsolved direct child."""

    def alt_solution_for_child(self, kb: "KnowledgeBase", child: "Factor") -> Optional["Factor"]:
        """The exact value a child must take after SOLVE_ARITHMETIC."""
        return None

    def calculate(self) -> "Factor":
        """Concrete resolved value: the alternate value, or a boolean
        literal wrapping ``holds()``. Unsolved nodes calculate to NULL."""
        from factorkb.symbolic.symbols import NULL, BooleanLiteral

        if not self.solved:
            return NULL
        if self.has_alternate:
            return self.alternate_value
        return BooleanLiteral(self.holds())

    def symbols(self) -> Set["Symbol"]:
        found: Set["Symbol"] = set()
        for child in self.children():
            found |= child.symbols()
        return found

    def simplify(self) -> "Factor":
        return self

    def has_conflict(self) -> Optional["Factor"]:
        """First sub-term whose solved state is inconsistent, or None."""
        for child in self.children():
            conflict = child.has_conflict()
            if conflict is not None:
                return conflict
        return None

    def reset_solution(self) -> None:
        self.solved = False
        self.boolean_value = False
        self.alternate_value = None
        self.is_class = False
        for child in self.children():
            child.reset_solution()

    # ─── PROPAGATION ───────────────────────────────────────────────

    def solve_assertion(self, kb: "KnowledgeBase", parent: Optional["Factor"] = None) -> int:
        """One propagation step for this subtree.

        Returns the number of nodes newly solved by this call.
        """
        changes = self.solve_children(kb)
        if self.solved:
            return changes

        directive = self.directive_from(kb, parent)
        source = parent
        if directive.is_fallback:
            directive = self.infer_directive(kb)
            source = self
        return changes + self.settle(kb, directive, source)

    def solve_children(self, kb: "KnowledgeBase") -> int:
        return sum(child.solve_assertion(kb, self) for child in self.children())

    def directive_from(self, kb: "KnowledgeBase", parent: Optional["Factor"]) -> SolveDirective:
        if parent is None:
            return SolveDirective.SOLVE_TRUE
        return parent.can_solve_for_child(kb, self)

    def infer_directive(self, kb: "KnowledgeBase") -> SolveDirective:
        """Bottom-up inference used when the parent cannot decide."""
        return SolveDirective.NO_SOLUTION

    def derived_value(self, kb: "KnowledgeBase") -> Optional["Factor"]:
        """Value computed from the children when inference yields SOLVE_ARITHMETIC."""
        return None

    def settle(self, kb: "KnowledgeBase", directive: SolveDirective, source: Optional["Factor"]) -> int:
        if directive is SolveDirective.SOLVE_TRUE:
            self.assert_true(kb)
        elif directive is SolveDirective.SOLVE_FALSE:
            self.assert_false(kb)
        elif directive is SolveDirective.SOLVE_ARITHMETIC:
            if source is self:
                value = self.derived_value(kb)
            else:
                value = source.alt_solution_for_child(kb, self)
            if not self.assign(kb, value):
                return 0
        else:
            return 0
        return 1

    def assign(self, kb: "KnowledgeBase", value: Optional["Factor"]) -> bool:
        """Solve this node to a concrete value.

        Boolean literals become a plain true/false assertion so that an
        alternate value is always a non-boolean literal. Returns False
        when there is nothing to assign.
        """
        if value is None or value.is_null:
            return False
        if value.is_literal and not value.has_alternate:
            if value.boolean_value:
                self.assert_true(kb)
            else:
                self.assert_false(kb)
        else:
            self.assert_value(kb, value)
        return True

    def assert_true(self, kb: "KnowledgeBase") -> None:
        self.boolean_value = True
        self.alternate_value = None
        self.mark_solved(kb)

    def assert_false(self, kb: "KnowledgeBase") -> None:
        self.boolean_value = False
        self.alternate_value = None
        self.mark_solved(kb)

    def assert_value(self, kb: "KnowledgeBase", value: "Factor") -> None:
        self.alternate_value = value
        self.mark_solved(kb)

    def mark_solved(self, kb: Optional["KnowledgeBase"]) -> None:
        self.solved = True
        if kb is not None:
            kb.record_transition(self)

    # ─── RENDERING ─────────────────────────────────────────────────

    def to_string(self, include_solution: bool = False, brackets: bool = True) -> str:
        if not include_solution or not self.solved or self.is_class:
            return str(self)
        text = f"({self})" if brackets else str(self)
        return f"{text}={self.solution_text()}"

    def nested_string(self) -> str:
        """Rendering as an operand: compound factors are parenthesised."""
        if self.children():
            return f"({self})"
        return str(self)

    def __str__(self) -> str:
        return "[logic]"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self})"

    # ─── OPERATOR DSL ──────────────────────────────────────────────

    def __and__(self, other: Any) -> "Factor":
        from factorkb.symbolic.logic import And
        return And(self, as_factor(other))

    def __rand__(self, other: Any) -> "Factor":
        from factorkb.symbolic.logic import And
        return And(as_factor(other), self)

    def __or__(self, other: Any) -> "Factor":
        from factorkb.symbolic.logic import Or
        return Or(self, as_factor(other))

    def __ror__(self, other: Any) -> "Factor":
        from factorkb.symbolic.logic import Or
        return Or(as_factor(other), self)

    def __invert__(self) -> "Factor":
        from factorkb.symbolic.logic import Not
        return Not(self)

    def __rshift__(self, other: Any) -> "Factor":
        return self.implies(other)

    def implies(self, other: Any) -> "Factor":
        from factorkb.symbolic.logic import Implication
        return Implication(self, as_factor(other))

    def iff(self, other: Any) -> "Factor":
        from factorkb.symbolic.logic import Agreement
        return Agreement(self, as_factor(other))

    def equals(self, other: Any) -> "Factor":
        from factorkb.symbolic.arithmetic import Equals
        return Equals(self, as_factor(other))

    def at_least(self, other: Any) -> "Factor":
        from factorkb.symbolic.arithmetic import GreaterOrEqual
        return GreaterOrEqual(self, as_factor(other))

    def __add__(self, other: Any) -> "Factor":
        from factorkb.symbolic.arithmetic import Add
        return Add(self, as_factor(other))

    def __radd__(self, other: Any) -> "Factor":
        from factorkb.symbolic.arithmetic import Add
        return Add(as_factor(other), self)

    def __neg__(self) -> "Factor":
        from factorkb.symbolic.arithmetic import Negate
        return Negate(self)

    def __sub__(self, other: Any) -> "Factor":
        from factorkb.symbolic.arithmetic import Add, Negate
        return Add(self, Negate(as_factor(other)))

    def __rsub__(self, other: Any) -> "Factor":
        from factorkb.symbolic.arithmetic import Add, Negate
        return Add(as_factor(other), Negate(self))


def as_factor(value: Any) -> Factor:
    """Coerce a Python value into a factor.

    bool → BooleanLiteral, int/float/Fraction/Decimal → NumericLiteral,
    str → StringLiteral. Symbols are never created implicitly.
    """
    from factorkb.symbolic.symbols import BooleanLiteral, NumericLiteral, StringLiteral

    if isinstance(value, Factor):
        return value
    if isinstance(value, bool):
        return BooleanLiteral(value)
    if isinstance(value, (int, float, Fraction, Decimal)):
        return NumericLiteral(value)
    if isinstance(value, str):
        return StringLiteral(value)
    raise ConfigurationError(
        f"Cannot use {type(value).__name__} value {value!r} as a factor.",
        context={"value": repr(value)},
    )


def values_equal(left: Factor, right: Factor) -> bool:
    """Value equality of two calculated results; NULL equals nothing."""
    if left.is_null or right.is_null:
        return False
    return left == right
