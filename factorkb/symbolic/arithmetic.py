"""
factorkb/symbolic/arithmetic.py
===============================
Arithmetic terms and comparisons.

``Add`` and ``Negate`` are value-producing terms. They never take a
truth value from above; they are solved either from their children
(``a + b`` once both are known) or, through ``Equals``, from a value
pushed down by the parent, after which they isolate the remaining
unknown child:

    Equals(Add(X, Y), 10), Equals(X, 4)   →   Y = 6

``Equals`` and ``GreaterOrEqual`` compare the calculated values of
their two sides.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional

from factorkb.core.exceptions import UnsupportedOperation
from factorkb.core.types import Operator, SolveDirective
from factorkb.symbolic.factor import Factor, as_factor, values_equal
from factorkb.symbolic.symbols import literal_operands

if TYPE_CHECKING:
    from factorkb.symbolic.knowledge_base import KnowledgeBase

logger = logging.getLogger(__name__)


def _checked(kb: Optional["KnowledgeBase"], result: Factor, op: Operator, *operands: Factor) -> Factor:
    """Pass ``result`` through, raising in strict mode when it is NULL."""
    if result.is_null and kb is not None and kb.config.strict_arithmetic:
        operands_text = literal_operands(*operands)
        raise UnsupportedOperation(
            f"Operator '{op.value}' is not supported for operands {', '.join(operands_text)}",
            operator=op.value,
            operands=operands_text,
        )
    if result.is_null:
        logger.debug("Operator '%s' yielded null for %s", op.value, literal_operands(*operands))
    return result


# ─────────────────────────────────────────────
#  VALUE TERMS
# ─────────────────────────────────────────────

class ArithmeticTerm(Factor):
    """Base for value-producing terms.

    A term is axiomatically true: it only ever takes a value, and only
    accepts SOLVE_ARITHMETIC from its parent.
    """

    def holds(self) -> bool:
        return True

    def compute(self) -> Factor:
        """Value obtained from the children's calculated values."""
        raise NotImplementedError

    def calculate(self) -> Factor:
        if self.solved and not self.has_alternate:
            return self.compute()
        return super().calculate()

    def directive_from(self, kb: "KnowledgeBase", parent: Optional[Factor]) -> SolveDirective:
        if parent is None:
            return SolveDirective.NO_SOLUTION
        directive = parent.can_solve_for_child(kb, self)
        if directive is SolveDirective.SOLVE_ARITHMETIC:
            return directive
        return SolveDirective.NO_SOLUTION

    def infer_directive(self, kb: "KnowledgeBase") -> SolveDirective:
        if all(child.solved for child in self.children()):
            return SolveDirective.SOLVE_ARITHMETIC
        return SolveDirective.NO_SOLUTION

    def has_conflict(self) -> Optional[Factor]:
        conflict = super().has_conflict()
        if conflict is not None:
            return conflict
        if self.has_alternate and all(child.solved for child in self.children()):
            computed = self.compute()
            if not computed.is_null and not values_equal(computed, self.alternate_value):
                return self
        return None


class Add(ArithmeticTerm):
    """``lhs + rhs``. Subtraction is written as ``Add(a, Negate(b))``."""

    def __init__(self, lhs: object, rhs: object) -> None:
        super().__init__()
        self.lhs = as_factor(lhs)
        self.rhs = as_factor(rhs)

    def children(self) -> List[Factor]:
        return [self.lhs, self.rhs]

    def compute(self) -> Factor:
        return self.lhs.calculate().apply(Operator.ADD, self.rhs.calculate())

    def derived_value(self, kb: "KnowledgeBase") -> Optional[Factor]:
        return _checked(kb, self.compute(), Operator.ADD, self.lhs.calculate(), self.rhs.calculate())

    def can_solve_for_child(self, kb: "KnowledgeBase", child: Factor) -> SolveDirective:
        if self.has_alternate and self.lhs.solved != self.rhs.solved:
            return SolveDirective.SOLVE_ARITHMETIC
        return SolveDirective.NO_SOLUTION

    def alt_solution_for_child(self, kb: "KnowledgeBase", child: Factor) -> Optional[Factor]:
        if not self.has_alternate:
            return None
        if child is self.rhs and self.lhs.solved:
            known = self.lhs.calculate()
        elif child is self.lhs and self.rhs.solved:
            known = self.rhs.calculate()
        else:
            return None
        total = self.alternate_value
        return _checked(kb, total.apply(Operator.SUB, known), Operator.SUB, total, known)

    def __str__(self) -> str:
        return f"{self.lhs.nested_string()} + {self.rhs.nested_string()}"


class Negate(ArithmeticTerm):
    """``-factor``."""

    def __init__(self, factor: object) -> None:
        super().__init__()
        self.factor = as_factor(factor)

    def children(self) -> List[Factor]:
        return [self.factor]

    def compute(self) -> Factor:
        return self.factor.calculate().apply(Operator.SUB)

    def derived_value(self, kb: "KnowledgeBase") -> Optional[Factor]:
        return _checked(kb, self.compute(), Operator.SUB, self.factor.calculate())

    def can_solve_for_child(self, kb: "KnowledgeBase", child: Factor) -> SolveDirective:
        if self.has_alternate:
            return SolveDirective.SOLVE_ARITHMETIC
        return SolveDirective.NO_SOLUTION

    def alt_solution_for_child(self, kb: "KnowledgeBase", child: Factor) -> Optional[Factor]:
        if not self.has_alternate or child is not self.factor:
            return None
        value = self.alternate_value
        return _checked(kb, value.apply(Operator.SUB), Operator.SUB, value)

    def __str__(self) -> str:
        return f"-{self.factor.nested_string()}"


# ─────────────────────────────────────────────
#  COMPARISONS
# ─────────────────────────────────────────────

class Comparison(Factor):
    """Binary predicate over the calculated values of two sides.

    While either side is unresolved the comparison falls back to its
    own asserted value.
    """

    operator = Operator.EQ
    symbol_text = "="

    def __init__(self, lhs: object, rhs: object) -> None:
        super().__init__()
        self.lhs = as_factor(lhs)
        self.rhs = as_factor(rhs)

    def children(self) -> List[Factor]:
        return [self.lhs, self.rhs]

    def compare(self) -> Optional[bool]:
        """Outcome of the comparison, or None while it cannot be decided."""
        left = self.lhs.calculate()
        right = self.rhs.calculate()
        if left.is_null or right.is_null:
            return None
        result = left.apply(self.operator, right)
        if result.is_null:
            return None
        return result.boolean_value

    def holds(self) -> bool:
        outcome = self.compare()
        if outcome is None:
            return self.solved_true
        return outcome

    def can_solve_for_child(self, kb: "KnowledgeBase", child: Factor) -> SolveDirective:
        return SolveDirective.NO_SOLUTION

    def infer_directive(self, kb: "KnowledgeBase") -> SolveDirective:
        if self.lhs.solved and self.rhs.solved:
            outcome = self.compare()
            if outcome is not None:
                return SolveDirective.SOLVE_TRUE if outcome else SolveDirective.SOLVE_FALSE
        return SolveDirective.NO_SOLUTION

    def has_conflict(self) -> Optional[Factor]:
        conflict = super().has_conflict()
        if conflict is not None:
            return conflict
        if self.solved:
            outcome = self.compare()
            if outcome is not None and outcome != self.solved_true:
                return self
        return None

    def __str__(self) -> str:
        return f"{self.lhs.nested_string()} {self.symbol_text} {self.rhs.nested_string()}"


class Equals(Comparison):
    """``lhs = rhs``. Asserted true, it copies a known side onto the unknown one."""

    operator = Operator.EQ
    symbol_text = "="

    def _other(self, child: Factor) -> Optional[Factor]:
        if child is self.lhs:
            return self.rhs
        if child is self.rhs:
            return self.lhs
        return None

    def can_solve_for_child(self, kb: "KnowledgeBase", child: Factor) -> SolveDirective:
        other = self._other(child)
        if self.solved_true and other is not None and other.solved:
            return SolveDirective.SOLVE_ARITHMETIC
        return SolveDirective.NO_SOLUTION

    def alt_solution_for_child(self, kb: "KnowledgeBase", child: Factor) -> Optional[Factor]:
        other = self._other(child)
        if not self.solved_true or other is None or not other.solved:
            return None
        value = other.calculate()
        if value.is_null:
            return None
        return value

    def assert_true(self, kb: "KnowledgeBase") -> None:
        super().assert_true(kb)
        if self.lhs.solved and not self.rhs.solved:
            self.rhs.assign(kb, self.lhs.calculate())
        elif self.rhs.solved and not self.lhs.solved:
            self.lhs.assign(kb, self.rhs.calculate())


class GreaterOrEqual(Comparison):
    """``lhs >= rhs``. Never solves either side."""

    operator = Operator.GE
    symbol_text = ">="
