"""
factorkb/symbolic/relations.py
==============================
Classification layer: relation instances, relation assertions and
property declarations.

A relation instance is an (outer, inner) pair such as ``is(cat)``; its
inverse ``~is(cat)`` is the same pair with the inverse flag set, so no
object ever points at its own inverse. A ``SymbolRelation`` asserts that
a subject holds a relation instance, and solving it false records the
inverse instead. A subject never holds both.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Dict, List, Optional, Set, Tuple, Union

from factorkb.core.types import SolveDirective
from factorkb.symbolic.factor import Factor, as_factor, values_equal

if TYPE_CHECKING:
    from factorkb.symbolic.knowledge_base import KnowledgeBase
    from factorkb.symbolic.symbols import Symbol

logger = logging.getLogger(__name__)


class PropertyMap:
    """Key → value store with a persistent layer set by client code and a
    derived layer written during propagation. Derived values shadow
    persistent ones and are dropped on reset."""

    def __init__(self) -> None:
        self.persistent: Dict["Symbol", Factor] = {}
        self.derived: Dict["Symbol", Factor] = {}

    def get(self, prop: "Symbol") -> Optional[Factor]:
        if prop in self.derived:
            return self.derived[prop]
        return self.persistent.get(prop)

    def set(self, prop: "Symbol", value: Factor, derived: bool = False) -> None:
        target = self.derived if derived else self.persistent
        target[prop] = value

    def clear_derived(self) -> None:
        self.derived.clear()

    def items(self) -> List[Tuple["Symbol", Factor]]:
        merged = dict(self.persistent)
        merged.update(self.derived)
        return sorted(merged.items(), key=lambda item: str(item[0]))

    def __contains__(self, prop: "Symbol") -> bool:
        return prop in self.derived or prop in self.persistent

    def __len__(self) -> int:
        return len(set(self.persistent) | set(self.derived))


@dataclass(frozen=True)
class WrappedSymbol:
    """A relation instance ``outer(inner)``, optionally inverted.

    Properties of a relation instance live on the outer symbol, keyed
    by the instance, so that every subject holding ``is(cat)`` shares them.
    """
    outer:   "Symbol"
    inner:   "Symbol"
    inverse: bool = False

    def inverted(self) -> "WrappedSymbol":
        return replace(self, inverse=not self.inverse)

    @property
    def properties(self) -> PropertyMap:
        return self.outer.relation_property_map(self)

    def set_property(self, prop: "Symbol", value: object, derived: bool = False) -> None:
        self.properties.set(prop, as_factor(value), derived=derived)

    def get_property(self, prop: "Symbol") -> Optional[Factor]:
        return self.properties.get(prop)

    def __str__(self) -> str:
        prefix = "~" if self.inverse else ""
        return f"{prefix}{self.outer}({self.inner})"


class SymbolRelation(Factor):
    """Assertion that ``about`` holds ``class_(to)``, e.g. ``tom is(cat)``.

    Solving it true adds the relation to the subject; solving it false
    adds the inverse. Both also mark the subject as a solved class symbol.
    """

    def __init__(self, about: "Symbol", class_: "Symbol", to: "Symbol") -> None:
        super().__init__()
        self.about = about
        self.class_ = class_
        self.to = to
        class_.is_relational = True
        self.relation = WrappedSymbol(class_, to)

    def children(self) -> List[Factor]:
        return []

    def symbols(self) -> Set["Symbol"]:
        return {self.about, self.class_, self.to}

    def holds(self) -> bool:
        return self.relation in self.about.relations

    def inverse_holds(self) -> bool:
        return self.relation.inverted() in self.about.relations

    def can_solve_for_child(self, kb: "KnowledgeBase", child: Factor) -> SolveDirective:
        return SolveDirective.OTHER

    def infer_directive(self, kb: "KnowledgeBase") -> SolveDirective:
        if self.holds():
            return SolveDirective.SOLVE_TRUE
        if self.inverse_holds():
            return SolveDirective.SOLVE_FALSE
        return SolveDirective.NO_SOLUTION

    def _classify(self, kb: "KnowledgeBase", relation: WrappedSymbol) -> None:
        about = self.about
        if not about.solved:
            about.mark_solved(kb)
        about.is_class = True
        if relation.inverted() in about.relations:
            logger.debug("%s already holds %s; not adding %s", about, relation.inverted(), relation)
            return
        about.relations.add(relation)

    def assert_true(self, kb: "KnowledgeBase") -> None:
        self._classify(kb, self.relation)
        super().assert_true(kb)

    def assert_false(self, kb: "KnowledgeBase") -> None:
        self._classify(kb, self.relation.inverted())
        super().assert_false(kb)

    def has_conflict(self) -> Optional[Factor]:
        has_relation = self.holds()
        has_inverse = self.inverse_holds()
        if has_relation and has_inverse:
            return self.about
        if self.solved_true and not has_relation:
            return self.about
        if self.solved_false and not has_inverse:
            return self.about
        return None

    def __str__(self) -> str:
        return f"{self.about}::{self.class_}({self.to})"


class PropertyDeclaration(Factor):
    """Assertion that ``target`` has ``prop = value``.

    The target is a symbol or a relation instance (``is(cat)``), in which
    case every subject classified into that relation sees the property.
    Declared values are derived state and vanish on the next reset.
    """

    def __init__(self, target: Union["Symbol", WrappedSymbol], prop: "Symbol", value: object) -> None:
        super().__init__()
        self.target = target
        self.prop = prop
        self.value = as_factor(value)

    def children(self) -> List[Factor]:
        return []

    def symbols(self) -> Set["Symbol"]:
        found: Set["Symbol"] = {self.prop}
        if not isinstance(self.target, WrappedSymbol):
            found.add(self.target)
        return found

    def holds(self) -> bool:
        stored = self.target.get_property(self.prop)
        if stored is None:
            return False
        return stored == self.value or values_equal(stored.calculate(), self.value.calculate())

    def can_solve_for_child(self, kb: "KnowledgeBase", child: Factor) -> SolveDirective:
        return SolveDirective.NO_SOLUTION

    def assert_true(self, kb: "KnowledgeBase") -> None:
        self.target.set_property(self.prop, self.value, derived=True)
        super().assert_true(kb)

    def has_conflict(self) -> Optional[Factor]:
        if self.solved_true and not self.holds():
            return self
        return None

    def __str__(self) -> str:
        if isinstance(self.target, WrappedSymbol):
            return f"For any symbol::{self.target}, it has {self.prop} : {self.value}"
        return f"{self.target} has {self.prop} : {self.value}"
