"""
factorkb/symbolic/symbols.py
============================
Leaf factors: named symbols and literal values.

Symbols are the unknowns of a knowledge base. They are compared by the
id their knowledge base assigns on registration, carry classification
relations (``is(cat)``) and key → value properties, and reset to a blank
state on every solve.

Literals are permanently solved value factors. Numbers are held as exact
``fractions.Fraction`` values so that isolation (``c - a``) never drifts.
``NULL`` is the result of any unsupported operation: it is never solved
and is never equal to anything.
"""

from __future__ import annotations

import logging
import operator as _op
from decimal import Decimal
from fractions import Fraction
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Set, Tuple, Union

from factorkb.core.exceptions import ConfigurationError
from factorkb.core.types import Operator, SolveDirective
from factorkb.symbolic.factor import Factor, as_factor, values_equal
from factorkb.symbolic.relations import PropertyMap, SymbolRelation, WrappedSymbol

if TYPE_CHECKING:
    from factorkb.symbolic.knowledge_base import KnowledgeBase

logger = logging.getLogger(__name__)

Number = Union[int, float, Fraction, Decimal]


# ─────────────────────────────────────────────
#  SYMBOL
# ─────────────────────────────────────────────

class Symbol(Factor):
    """A named unknown.

    A symbol is solved either to a boolean, to an alternate value such as
    ``NumericLiteral(6)``, or as a class (it belongs to one or more
    relations, e.g. ``tom is(cat)``).

    Args:
        name: Display name, unique within the owning knowledge base.
        kb:   Optional knowledge base to register into right away.
    """

    def __init__(self, name: str, kb: Optional["KnowledgeBase"] = None) -> None:
        super().__init__()
        if not name:
            raise ConfigurationError("Symbol name must be a non-empty string.")
        self.name = name
        self.unique_id = -1
        self.kb: Optional["KnowledgeBase"] = None
        self.is_relational = False
        self.is_inverse = False
        self.relations: Set[WrappedSymbol] = set()
        self.property_map = PropertyMap()
        self._relation_property_maps: Dict[WrappedSymbol, PropertyMap] = {}
        if kb is not None:
            kb.register(self)

    @property
    def is_registered(self) -> bool:
        return self.unique_id >= 0

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Symbol) or not self.is_registered:
            return False
        return other.kb is self.kb and other.unique_id == self.unique_id

    def __hash__(self) -> int:
        return hash(self.name)

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"Symbol({self.name!r}, id={self.unique_id})"

    # ─── FACTOR CONTRACT ───────────────────────────────────────────

    def holds(self) -> bool:
        return (self.solved and self.boolean_value) or self.has_alternate

    def children(self) -> List[Factor]:
        return []

    def symbols(self) -> Set["Symbol"]:
        return {self}

    def can_solve_for_child(self, kb: "KnowledgeBase", child: Factor) -> SolveDirective:
        return SolveDirective.OTHER

    def reset_solution(self) -> None:
        super().reset_solution()
        self.relations.clear()
        self.property_map.clear_derived()
        for properties in self._relation_property_maps.values():
            properties.clear_derived()

    # ─── RELATIONS ─────────────────────────────────────────────────

    def relation(self, inner: "Symbol") -> WrappedSymbol:
        """The relation instance ``self(inner)``, e.g. ``is(cat)``."""
        return WrappedSymbol(self, inner)

    def relates(self, class_: "Symbol", to: "Symbol") -> SymbolRelation:
        """Assertion that this symbol holds ``class_(to)``."""
        return SymbolRelation(self, class_, to)

    def has_relation(self, relation: WrappedSymbol) -> bool:
        return relation in self.relations

    def inverse(self) -> "Symbol":
        """The ``~name`` symbol from the owning knowledge base."""
        if self.kb is None:
            raise ConfigurationError(
                f"Symbol '{self.name}' must be registered before its inverse can be derived."
            )
        return self.kb.inverse_of(self)

    def relation_property_map(self, relation: WrappedSymbol) -> PropertyMap:
        properties = self._relation_property_maps.get(relation)
        if properties is None:
            properties = PropertyMap()
            self._relation_property_maps[relation] = properties
        return properties

    # ─── PROPERTIES ────────────────────────────────────────────────

    def set_property(self, prop: "Symbol", value: object, derived: bool = False) -> None:
        """Store ``prop = value``. Derived properties are cleared on reset."""
        self.property_map.set(prop, as_factor(value), derived=derived)

    def get_property(self, prop: "Symbol") -> Optional[Factor]:
        """Look the property up on the symbol, then on every relation it holds."""
        value = self.property_map.get(prop)
        if value is not None:
            return value
        for relation in sorted(self.relations, key=str):
            value = relation.get_property(prop)
            if value is not None:
                return value
        return None

    def has_property(self, prop: "Symbol", value: object) -> bool:
        stored = self.get_property(prop)
        if stored is None:
            return False
        expected = as_factor(value)
        return stored == expected or values_equal(stored.calculate(), expected.calculate())

    # ─── RENDERING ─────────────────────────────────────────────────

    def class_string(self) -> str:
        """The symbol with its relations, e.g. ``tom [is(cat), ~is(dog)]``."""
        if not self.relations:
            return self.name
        inner = ", ".join(sorted(str(relation) for relation in self.relations))
        return f"{self.name} [{inner}]"

    def to_string_with_properties(self, brackets: bool = True) -> str:
        text = self.class_string() if self.is_class else self.to_string(True, brackets)
        items = self.property_map.items()
        if not items:
            return text
        listed = ", ".join(f"{prop}={value}" for prop, value in items)
        return f"{text} <{listed}>"


# ─────────────────────────────────────────────
#  LITERALS
# ─────────────────────────────────────────────

class Literal(Factor):
    """Base for value factors: solved from construction, compared by value,
    untouched by propagation and reset."""

    is_literal = True

    def children(self) -> List[Factor]:
        return []

    def symbols(self) -> Set[Symbol]:
        return set()

    def holds(self) -> bool:
        return True

    def calculate(self) -> Factor:
        return self

    def can_solve_for_child(self, kb: "KnowledgeBase", child: Factor) -> SolveDirective:
        return SolveDirective.NO_SOLUTION

    def solve_assertion(self, kb: "KnowledgeBase", parent: Optional[Factor] = None) -> int:
        return 0

    def reset_solution(self) -> None:
        pass

    def assert_true(self, kb: "KnowledgeBase") -> None:
        pass

    def assert_false(self, kb: "KnowledgeBase") -> None:
        pass

    def assert_value(self, kb: "KnowledgeBase", value: Factor) -> None:
        pass

    def to_string(self, include_solution: bool = False, brackets: bool = True) -> str:
        return str(self)

    def apply(self, op: Operator, *terms: Factor) -> Factor:
        """Apply ``op`` with this literal as the left operand.

        The base implementation only understands ``=`` and ``!=``;
        anything else yields NULL.
        """
        if len(terms) == 1 and op in (Operator.EQ, Operator.NE) and not terms[0].is_null:
            same = self == terms[0]
            return BooleanLiteral(same if op is Operator.EQ else not same)
        return NULL


def _to_fraction(value: Number) -> Fraction:
    if isinstance(value, float):
        # repr gives the shortest round-tripping decimal, so 0.1 → 1/10
        value = repr(value)
    try:
        return Fraction(value)
    except (ValueError, OverflowError) as exc:
        raise ConfigurationError(f"Cannot represent {value!r} as an exact number.") from exc


def _integral(fn: Callable[[int, int], int]) -> Callable[[Fraction, Fraction], Fraction]:
    def wrapper(a: Fraction, b: Fraction) -> Fraction:
        if a.denominator != 1 or b.denominator != 1:
            raise TypeError("bitwise operators need integral operands")
        return Fraction(fn(int(a), int(b)))
    return wrapper


_NUMERIC_OPS: Dict[Operator, Callable[[Fraction, Fraction], object]] = {
    Operator.ADD: _op.add,
    Operator.SUB: _op.sub,
    Operator.MUL: _op.mul,
    Operator.DIV: _op.truediv,
    Operator.MOD: _op.mod,
    Operator.XOR: _integral(_op.xor),
    Operator.AND: _integral(_op.and_),
    Operator.OR:  _integral(_op.or_),
    Operator.LT:  _op.lt,
    Operator.LE:  _op.le,
    Operator.GT:  _op.gt,
    Operator.GE:  _op.ge,
}


class NumericLiteral(Literal):
    """An exact rational number."""

    def __init__(self, value: Number) -> None:
        super().__init__()
        if isinstance(value, bool):
            value = int(value)
        self.value: Fraction = _to_fraction(value)
        self.solved = True
        self.alternate_value = self

    def apply(self, op: Operator, *terms: Factor) -> Factor:
        if not terms:
            if op is Operator.SUB:
                return NumericLiteral(-self.value)
            return NULL
        other = terms[0]
        if op is Operator.ADD and isinstance(other, StringLiteral):
            return StringLiteral(str(self) + other.text)
        if not isinstance(other, NumericLiteral):
            return super().apply(op, *terms)
        if op in (Operator.EQ, Operator.NE):
            return super().apply(op, *terms)
        try:
            result = _NUMERIC_OPS[op](self.value, other.value)
        except (ZeroDivisionError, TypeError) as exc:
            logger.debug("%s %s %s is undefined: %s", self, op.value, other, exc)
            return NULL
        if isinstance(result, bool):
            return BooleanLiteral(result)
        return NumericLiteral(result)

    def as_number(self) -> Union[int, Fraction]:
        """The value as an ``int`` when integral, else the exact Fraction."""
        if self.value.denominator == 1:
            return int(self.value)
        return self.value

    def __eq__(self, other: object) -> bool:
        return isinstance(other, NumericLiteral) and other.value == self.value

    def __hash__(self) -> int:
        return hash(("number", self.value))

    def __str__(self) -> str:
        if self.value.denominator == 1:
            return str(self.value.numerator)
        return str(float(self.value))


class StringLiteral(Literal):
    def __init__(self, text: str) -> None:
        super().__init__()
        self.text = text
        self.solved = True
        self.alternate_value = self

    def apply(self, op: Operator, *terms: Factor) -> Factor:
        if len(terms) == 1 and op is Operator.ADD:
            other = terms[0]
            if isinstance(other, StringLiteral):
                return StringLiteral(self.text + other.text)
            if isinstance(other, NumericLiteral):
                return StringLiteral(self.text + str(other))
        return super().apply(op, *terms)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, StringLiteral) and other.text == self.text

    def __hash__(self) -> int:
        return hash(("string", self.text))

    def __str__(self) -> str:
        return f'"{self.text}"'


class BooleanLiteral(Literal):
    """A fixed truth value. Holds exactly when its bit is set."""

    def __init__(self, value: bool) -> None:
        super().__init__()
        self.solved = True
        self.boolean_value = bool(value)

    def holds(self) -> bool:
        return self.boolean_value

    def __eq__(self, other: object) -> bool:
        return isinstance(other, BooleanLiteral) and other.boolean_value == self.boolean_value

    def __hash__(self) -> int:
        return hash(("boolean", self.boolean_value))

    def __str__(self) -> str:
        return "True" if self.boolean_value else "False"


class NullLiteral(Literal):
    """Result of an unsupported operation. Never solved, never equal."""

    is_null = True

    def holds(self) -> bool:
        return False

    def apply(self, op: Operator, *terms: Factor) -> Factor:
        return self

    def __eq__(self, other: object) -> bool:
        return False

    def __hash__(self) -> int:
        return id(self)

    def __str__(self) -> str:
        return "null"


NULL = NullLiteral()


def literal_operands(*factors: Factor) -> Tuple[str, ...]:
    return tuple(str(factor) for factor in factors)
