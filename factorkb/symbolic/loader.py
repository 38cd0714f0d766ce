"""
factorkb/symbolic/loader.py
===========================
Load assertion trees from JSON or nested-list config.

Expression format (one expression per assertion):

    "rain"                             symbol, fetched or created by name
    4, 2.5, true                       numeric / boolean literal
    {"str": "Tuesday"}                 string literal
    ["and", e1, e2, ...]               also "or"
    ["not", e]                         also "neg"
    ["implies", condition, consequent]
    ["iff", p, q]
    ["eq", lhs, rhs]                   also "ge", "add", "sub"
    ["is", about, category]            about is(category)
    ["rel", about, class, to]          about class(to)
    ["has", target, prop, value]       target is a symbol name or
                                       ["relation", outer, inner]

A file holds either a list of expressions or {"assertions": [...]}.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Union

from factorkb.core.exceptions import AssertionFormatError
from factorkb.symbolic.arithmetic import Add, Equals, GreaterOrEqual, Negate
from factorkb.symbolic.factor import Factor
from factorkb.symbolic.logic import Agreement, And, Implication, Not, Or
from factorkb.symbolic.relations import PropertyDeclaration, SymbolRelation, WrappedSymbol
from factorkb.symbolic.symbols import (
    BooleanLiteral,
    NumericLiteral,
    StringLiteral,
    Symbol,
)

if TYPE_CHECKING:
    from factorkb.symbolic.knowledge_base import KnowledgeBase

logger = logging.getLogger(__name__)

# operator → (min args, max args); None means unbounded
_ARITY: Dict[str, tuple] = {
    "and":     (1, None),
    "or":      (1, None),
    "not":     (1, 1),
    "neg":     (1, 1),
    "implies": (2, 2),
    "iff":     (2, 2),
    "eq":      (2, 2),
    "ge":      (2, 2),
    "add":     (2, 2),
    "sub":     (2, 2),
    "is":      (2, 2),
    "rel":     (3, 3),
    "has":     (3, 3),
}


class AssertionLoader:
    """Build factor trees from JSON-compatible data.

    Symbols are resolved against the knowledge base by name, so the
    same name always maps to the same symbol.
    """

    @classmethod
    def from_json(cls, kb: "KnowledgeBase", path: Union[str, Path]) -> List[Factor]:
        try:
            data = json.loads(Path(path).read_text())
        except json.JSONDecodeError as exc:
            raise AssertionFormatError(f"Invalid JSON in {path}: {exc}") from exc
        if isinstance(data, dict):
            if "assertions" not in data:
                raise AssertionFormatError(
                    f"Assertion file {path} must be a list or hold an 'assertions' list.", data
                )
            data = data["assertions"]
        return cls.from_list(kb, data)

    @classmethod
    def from_list(cls, kb: "KnowledgeBase", data: List[Any]) -> List[Factor]:
        if not isinstance(data, list):
            raise AssertionFormatError("Assertions must be given as a list of expressions.", data)
        factors = [cls.parse(kb, item) for item in data]
        logger.info(f"Loaded {len(factors)} assertions.")
        return factors

    @classmethod
    def parse(cls, kb: "KnowledgeBase", expression: Any) -> Factor:
        """Parse a single expression into a factor."""
        if isinstance(expression, bool):
            return BooleanLiteral(expression)
        if isinstance(expression, (int, float)):
            return NumericLiteral(expression)
        if isinstance(expression, str):
            return cls._symbol(kb, expression)
        if isinstance(expression, dict):
            if set(expression) == {"str"} and isinstance(expression["str"], str):
                return StringLiteral(expression["str"])
            raise AssertionFormatError(f"Unrecognised literal {expression!r}.", expression)
        if isinstance(expression, list) and expression and isinstance(expression[0], str):
            return cls._compound(kb, expression[0].lower(), expression[1:], expression)
        raise AssertionFormatError(f"Cannot parse expression {expression!r}.", expression)

    @classmethod
    def _symbol(cls, kb: "KnowledgeBase", name: str) -> Symbol:
        if not name:
            raise AssertionFormatError("Symbol names must be non-empty.", name)
        return kb.get_symbol(name) or kb.symbol(name)

    @classmethod
    def _compound(cls, kb: "KnowledgeBase", op: str, args: List[Any], expression: Any) -> Factor:
        if op not in _ARITY:
            raise AssertionFormatError(f"Unknown operator '{op}'.", expression)
        low, high = _ARITY[op]
        if len(args) < low or (high is not None and len(args) > high):
            raise AssertionFormatError(
                f"Operator '{op}' takes {low if low == high else f'at least {low}'} "
                f"argument(s), got {len(args)}.",
                expression,
            )

        if op == "is":
            return kb.is_a(cls._symbol_arg(kb, args[0], expression), cls._symbol_arg(kb, args[1], expression))
        if op == "rel":
            about, class_, to = (cls._symbol_arg(kb, arg, expression) for arg in args)
            return SymbolRelation(about, class_, to)
        if op == "has":
            target = cls._target(kb, args[0], expression)
            return PropertyDeclaration(target, cls._symbol_arg(kb, args[1], expression), cls.parse(kb, args[2]))

        parsed = [cls.parse(kb, arg) for arg in args]
        if op == "and":
            return And(*parsed)
        if op == "or":
            return Or(*parsed)
        if op == "not":
            return Not(parsed[0])
        if op == "neg":
            return Negate(parsed[0])
        if op == "implies":
            return Implication(*parsed)
        if op == "iff":
            return Agreement(*parsed)
        if op == "eq":
            return Equals(*parsed)
        if op == "ge":
            return GreaterOrEqual(*parsed)
        if op == "add":
            return Add(*parsed)
        return Add(parsed[0], Negate(parsed[1]))

    @classmethod
    def _symbol_arg(cls, kb: "KnowledgeBase", arg: Any, expression: Any) -> Symbol:
        if not isinstance(arg, str):
            raise AssertionFormatError(f"Expected a symbol name, got {arg!r}.", expression)
        return cls._symbol(kb, arg)

    @classmethod
    def _target(cls, kb: "KnowledgeBase", arg: Any, expression: Any) -> Union[Symbol, WrappedSymbol]:
        if isinstance(arg, list):
            if len(arg) != 3 or arg[0] != "relation":
                raise AssertionFormatError(
                    "Property targets must be a symbol name or [\"relation\", outer, inner].", expression
                )
            return WrappedSymbol(cls._symbol_arg(kb, arg[1], expression), cls._symbol_arg(kb, arg[2], expression))
        return cls._symbol_arg(kb, arg, expression)

    # ─── SERIALISATION ─────────────────────────────────────────────

    @classmethod
    def to_list(cls, factor: Factor) -> Any:
        """Inverse of ``parse``."""
        if isinstance(factor, Symbol):
            return factor.name
        if isinstance(factor, BooleanLiteral):
            return factor.boolean_value
        if isinstance(factor, NumericLiteral):
            number = factor.as_number()
            return number if isinstance(number, int) else float(number)
        if isinstance(factor, StringLiteral):
            return {"str": factor.text}
        if isinstance(factor, And):
            return ["and"] + [cls.to_list(child) for child in factor.factors]
        if isinstance(factor, Or):
            return ["or"] + [cls.to_list(child) for child in factor.factors]
        if isinstance(factor, Not):
            return ["not", cls.to_list(factor.factor)]
        if isinstance(factor, Negate):
            return ["neg", cls.to_list(factor.factor)]
        if isinstance(factor, Implication):
            return ["implies", cls.to_list(factor.condition), cls.to_list(factor.implication)]
        if isinstance(factor, Agreement):
            return ["iff", cls.to_list(factor.p), cls.to_list(factor.q)]
        if isinstance(factor, Equals):
            return ["eq", cls.to_list(factor.lhs), cls.to_list(factor.rhs)]
        if isinstance(factor, GreaterOrEqual):
            return ["ge", cls.to_list(factor.lhs), cls.to_list(factor.rhs)]
        if isinstance(factor, Add):
            return ["add", cls.to_list(factor.lhs), cls.to_list(factor.rhs)]
        if isinstance(factor, SymbolRelation):
            return ["rel", factor.about.name, factor.class_.name, factor.to.name]
        if isinstance(factor, PropertyDeclaration):
            target = factor.target
            if isinstance(target, WrappedSymbol):
                target = ["relation", target.outer.name, target.inner.name]
            else:
                target = target.name
            return ["has", target, factor.prop.name, cls.to_list(factor.value)]
        raise AssertionFormatError(f"Cannot serialise {type(factor).__name__}.", str(factor))

    @classmethod
    def to_json(cls, assertions: List[Factor], path: Union[str, Path]) -> None:
        data = {"assertions": [cls.to_list(assertion) for assertion in assertions]}
        Path(path).write_text(json.dumps(data, indent=2))
