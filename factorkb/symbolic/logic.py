"""
factorkb/symbolic/logic.py
==========================
Boolean connectives: And, Or, Not, Implication, Agreement.

Each connective answers two questions for the propagation template:

    can_solve_for_child: given my solved value, what must a child be?
    infer_directive:     given my children, what must I be?

Conflict checks compare solved states only: a connective reports a
conflict when the values its children were solved to contradict its own.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from factorkb.core.exceptions import ConfigurationError
from factorkb.core.types import SolveDirective
from factorkb.symbolic.factor import Factor, as_factor

if TYPE_CHECKING:
    from factorkb.symbolic.knowledge_base import KnowledgeBase


def _truth(value: bool) -> SolveDirective:
    return SolveDirective.SOLVE_TRUE if value else SolveDirective.SOLVE_FALSE


# ─────────────────────────────────────────────
#  AND / OR
# ─────────────────────────────────────────────

class _Junction(Factor):
    """Shared shape of the n-ary connectives."""

    keyword = ""

    def __init__(self, *factors: object) -> None:
        super().__init__()
        if not factors:
            raise ConfigurationError(
                f"At least one factor must be included in an {self.keyword.upper()} connective."
            )
        self.factors: List[Factor] = [as_factor(factor) for factor in factors]

    def children(self) -> List[Factor]:
        return list(self.factors)

    def simplify(self) -> Factor:
        self.factors = [factor.simplify() for factor in self.factors]
        if len(self.factors) == 1:
            return self.factors[0]
        return self

    def __str__(self) -> str:
        return f" {self.keyword} ".join(factor.nested_string() for factor in self.factors)


class And(_Junction):
    keyword = "and"

    def holds(self) -> bool:
        return all(factor.holds() for factor in self.factors)

    def can_solve_for_child(self, kb: "KnowledgeBase", child: Factor) -> SolveDirective:
        if not self.solved:
            return SolveDirective.NO_SOLUTION
        if self.solved_true:
            return SolveDirective.SOLVE_TRUE
        others = [factor for factor in self.factors if factor is not child]
        if others and all(factor.solved_true for factor in others):
            return SolveDirective.SOLVE_FALSE
        return SolveDirective.NO_SOLUTION

    def infer_directive(self, kb: "KnowledgeBase") -> SolveDirective:
        if all(factor.solved_true for factor in self.factors):
            return SolveDirective.SOLVE_TRUE
        if any(factor.solved_false for factor in self.factors):
            return SolveDirective.SOLVE_FALSE
        return SolveDirective.NO_SOLUTION

    def has_conflict(self) -> Optional[Factor]:
        conflict = super().has_conflict()
        if conflict is not None:
            return conflict
        if self.solved_true:
            for factor in self.factors:
                if factor.solved_false:
                    return factor
        elif self.solved and all(factor.solved_true for factor in self.factors):
            return self
        return None


class Or(_Junction):
    keyword = "or"

    def holds(self) -> bool:
        return any(factor.holds() for factor in self.factors)

    def can_solve_for_child(self, kb: "KnowledgeBase", child: Factor) -> SolveDirective:
        if not self.solved:
            return SolveDirective.NO_SOLUTION
        if self.solved_false:
            return SolveDirective.SOLVE_FALSE
        others = [factor for factor in self.factors if factor is not child]
        if others and all(factor.solved_false for factor in others):
            return SolveDirective.SOLVE_TRUE
        return SolveDirective.NO_SOLUTION

    def infer_directive(self, kb: "KnowledgeBase") -> SolveDirective:
        if any(factor.solved_true for factor in self.factors):
            return SolveDirective.SOLVE_TRUE
        if all(factor.solved_false for factor in self.factors):
            return SolveDirective.SOLVE_FALSE
        return SolveDirective.NO_SOLUTION

    def has_conflict(self) -> Optional[Factor]:
        conflict = super().has_conflict()
        if conflict is not None:
            return conflict
        if self.solved_false:
            for factor in self.factors:
                if factor.solved_true:
                    return factor
        elif self.solved and all(factor.solved_false for factor in self.factors):
            return self
        return None


# ─────────────────────────────────────────────
#  NOT
# ─────────────────────────────────────────────

class Not(Factor):
    def __init__(self, factor: object) -> None:
        super().__init__()
        self.factor = as_factor(factor)

    def children(self) -> List[Factor]:
        return [self.factor]

    def holds(self) -> bool:
        return not self.factor.holds()

    def can_solve_for_child(self, kb: "KnowledgeBase", child: Factor) -> SolveDirective:
        if not self.solved:
            return SolveDirective.NO_SOLUTION
        return _truth(not self.solved_true)

    def infer_directive(self, kb: "KnowledgeBase") -> SolveDirective:
        if self.factor.solved:
            return _truth(not self.factor.solved_true)
        return SolveDirective.NO_SOLUTION

    def assert_true(self, kb: "KnowledgeBase") -> None:
        super().assert_true(kb)
        if not self.factor.solved:
            self.factor.assert_false(kb)

    def assert_false(self, kb: "KnowledgeBase") -> None:
        super().assert_false(kb)
        if not self.factor.solved:
            self.factor.assert_true(kb)

    def simplify(self) -> Factor:
        self.factor = self.factor.simplify()
        if isinstance(self.factor, Not):
            return self.factor.factor
        return self

    def has_conflict(self) -> Optional[Factor]:
        conflict = super().has_conflict()
        if conflict is not None:
            return conflict
        if self.solved and self.factor.solved and self.factor.solved_true == self.solved_true:
            return self.factor
        return None

    def __str__(self) -> str:
        return f"not {self.factor.nested_string()}"


# ─────────────────────────────────────────────
#  IMPLICATION / AGREEMENT
# ─────────────────────────────────────────────

class Implication(Factor):
    """``condition → implication``."""

    def __init__(self, condition: object, implication: object) -> None:
        super().__init__()
        self.condition = as_factor(condition)
        self.implication = as_factor(implication)

    def children(self) -> List[Factor]:
        return [self.condition, self.implication]

    def holds(self) -> bool:
        return not self.condition.holds() or self.implication.holds()

    def can_solve_for_child(self, kb: "KnowledgeBase", child: Factor) -> SolveDirective:
        if not self.solved:
            return SolveDirective.NO_SOLUTION
        if self.solved_false:
            # only a true condition with a false consequent falsifies an implication
            if child is self.condition:
                return SolveDirective.SOLVE_TRUE
            if child is self.implication:
                return SolveDirective.SOLVE_FALSE
            return SolveDirective.NO_SOLUTION
        if child is self.implication and self.condition.solved_true:
            return SolveDirective.SOLVE_TRUE
        if child is self.condition and self.implication.solved_false:
            return SolveDirective.SOLVE_FALSE
        return SolveDirective.NO_SOLUTION

    def infer_directive(self, kb: "KnowledgeBase") -> SolveDirective:
        if self.condition.solved_false or self.implication.solved_true:
            return SolveDirective.SOLVE_TRUE
        if self.condition.solved_true and self.implication.solved_false:
            return SolveDirective.SOLVE_FALSE
        return SolveDirective.NO_SOLUTION

    def simplify(self) -> Factor:
        self.condition = self.condition.simplify()
        self.implication = self.implication.simplify()
        return self

    def has_conflict(self) -> Optional[Factor]:
        conflict = super().has_conflict()
        if conflict is not None:
            return conflict
        if self.solved_true and self.condition.solved_true and self.implication.solved_false:
            return self
        if self.solved_false and (self.condition.solved_false or self.implication.solved_true):
            return self
        return None

    def __str__(self) -> str:
        return f"{self.condition.nested_string()} -> {self.implication.nested_string()}"


class Agreement(Factor):
    """``p ↔ q``: both sides hold or neither does."""

    def __init__(self, p: object, q: object) -> None:
        super().__init__()
        self.p = as_factor(p)
        self.q = as_factor(q)

    def children(self) -> List[Factor]:
        return [self.p, self.q]

    def holds(self) -> bool:
        return self.p.holds() == self.q.holds()

    def _other(self, child: Factor) -> Optional[Factor]:
        if child is self.p:
            return self.q
        if child is self.q:
            return self.p
        return None

    def can_solve_for_child(self, kb: "KnowledgeBase", child: Factor) -> SolveDirective:
        other = self._other(child)
        if not self.solved or other is None or not other.solved:
            return SolveDirective.NO_SOLUTION
        if self.solved_true:
            return _truth(other.solved_true)
        return _truth(not other.solved_true)

    def infer_directive(self, kb: "KnowledgeBase") -> SolveDirective:
        if self.p.solved and self.q.solved:
            return _truth(self.p.solved_true == self.q.solved_true)
        return SolveDirective.NO_SOLUTION

    def simplify(self) -> Factor:
        self.p = self.p.simplify()
        self.q = self.q.simplify()
        return self

    def has_conflict(self) -> Optional[Factor]:
        conflict = super().has_conflict()
        if conflict is not None:
            return conflict
        if self.solved and self.p.solved and self.q.solved:
            agree = self.p.solved_true == self.q.solved_true
            if agree != self.solved_true:
                return self
        return None

    def __str__(self) -> str:
        return f"{self.p.nested_string()} <-> {self.q.nested_string()}"
