"""
factorkb/symbolic/knowledge_base.py
===================================
The KnowledgeBase: symbol registry, assertion store and fixpoint driver.

Solving is not incremental. Every call to ``solve()``:

    1. resets every assertion, query assertion, query and symbol
    2. simplifies the assertions
    3. runs propagation passes until a full pass solves no new node
    4. simplifies again

Each node moves from unsolved to solved at most once per solve, so the
loop terminates after at most one pass per node plus a final quiet pass.
"""

from __future__ import annotations

import logging
from itertools import chain
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from factorkb.core.config import DEFAULT_CONFIG, SolverConfig
from factorkb.core.exceptions import LogicalConflict, SymbolRegistrationError
from factorkb.core.types import Conflict, SolveDirective, SolveStats
from factorkb.symbolic.factor import Factor, as_factor
from factorkb.symbolic.relations import SymbolRelation
from factorkb.symbolic.symbols import Symbol

logger = logging.getLogger(__name__)


class _QueryObserver:
    """Parent of every query factor: observes without asserting anything,
    so a query is answered purely from what the assertions force."""

    def can_solve_for_child(self, kb: "KnowledgeBase", child: Factor) -> SolveDirective:
        return SolveDirective.NO_SOLUTION

    def alt_solution_for_child(self, kb: "KnowledgeBase", child: Factor) -> Optional[Factor]:
        return None


_OBSERVER = _QueryObserver()


class KnowledgeBase:
    """
    A collection of assertions over shared symbols.

    Usage:
        kb = KnowledgeBase()
        rain, wet = kb.symbols("rain", "wet")
        kb.add(rain >> wet, rain)
        kb.solve()
        wet.solved_true   # True

        x, y = kb.symbols("x", "y")
        kb.add((x + y).equals(10), x.equals(4))
        kb.solve()
        y.alternate_value  # NumericLiteral(6)
    """

    def __init__(self, config: Optional[SolverConfig] = None) -> None:
        self.config = config or DEFAULT_CONFIG
        self.assertions: List[Factor] = []
        self.query_assertions: List[Factor] = []
        self.queries: List[Factor] = []
        self.solved = False
        self.last_stats: Optional[SolveStats] = None
        self._symbols: Dict[str, Symbol] = {}
        self._next_id = 0
        self._stats: Optional[SolveStats] = None
        self.is_ = self.symbol("is")

    # ─── SYMBOLS ───────────────────────────────────────────────────

    def next_symbol_id(self) -> int:
        symbol_id = self._next_id
        self._next_id += 1
        return symbol_id

    def register(self, symbol: Symbol) -> Symbol:
        """Assign ``symbol`` its id in this knowledge base.

        Raises:
            SymbolRegistrationError: if the symbol is already registered
                (here or elsewhere) or its name is taken.
        """
        if symbol.is_registered:
            raise SymbolRegistrationError(
                f"Symbol '{symbol.name}' is already registered (id={symbol.unique_id}).",
                symbol_name=symbol.name,
            )
        if symbol.name in self._symbols:
            raise SymbolRegistrationError(
                f"A symbol named '{symbol.name}' already exists in this knowledge base.",
                symbol_name=symbol.name,
            )
        symbol.unique_id = self.next_symbol_id()
        symbol.kb = self
        self._symbols[symbol.name] = symbol
        logger.debug("Registered symbol '%s' (id=%d)", symbol.name, symbol.unique_id)
        return symbol

    def symbol(self, name: str) -> Symbol:
        """Create and register a new symbol."""
        return self.register(Symbol(name))

    def symbols(self, *names: str) -> Tuple[Symbol, ...]:
        return tuple(self.symbol(name) for name in names)

    def get_symbol(self, name: str) -> Optional[Symbol]:
        return self._symbols.get(name)

    def registered_symbols(self) -> List[Symbol]:
        return sorted(self._symbols.values(), key=lambda symbol: symbol.unique_id)

    def inverse_of(self, symbol: Symbol) -> Symbol:
        """The ``~name`` counterpart of a symbol, created on first use."""
        if symbol.is_inverse:
            name = symbol.name[1:]
        else:
            name = f"~{symbol.name}"
        existing = self.get_symbol(name)
        if existing is not None:
            return existing
        inverse = self.symbol(name)
        inverse.is_inverse = not symbol.is_inverse
        return inverse

    def is_a(self, about: Symbol, category: Symbol) -> SymbolRelation:
        """``about is(category)``."""
        return SymbolRelation(about, self.is_, category)

    # ─── ASSERTIONS ────────────────────────────────────────────────

    def add(self, *assertions: object) -> "KnowledgeBase":
        """Add permanent assertions. Returns self for chaining."""
        for assertion in assertions:
            factor = as_factor(assertion)
            self.assertions.append(factor)
            logger.debug("Assertion added: %s", factor)
        self.solved = False
        return self

    def given(self, *assertions: object) -> "KnowledgeBase":
        """Temporary assertions that hold only for the next solve."""
        self.query_assertions = [as_factor(assertion) for assertion in assertions]
        self.solved = False
        return self

    if_ = given

    def query(self, *factors: object) -> List[Factor]:
        """Solve under the current query assertions and report what the
        assertions force on each query factor.

        Returns the query factors, with their solved state filled in.
        """
        queries = [as_factor(factor) for factor in factors]
        self.queries = queries
        self._solve(queries)
        return queries

    # ─── SOLVING ───────────────────────────────────────────────────

    def solve(self) -> SolveStats:
        """Propagate the assertions to a fixpoint."""
        return self._solve(())

    def _solve(self, queries: Sequence[Factor]) -> SolveStats:
        stats = SolveStats(
            assertions=len(self.assertions),
            query_assertions=len(self.query_assertions),
            queries=len(queries),
        )
        self._stats = stats
        self.solved = False
        temporary = bool(self.query_assertions) or bool(queries)

        for factor in chain(self.assertions, self.query_assertions, queries):
            factor.reset_solution()
        for symbol in self._symbols.values():
            symbol.reset_solution()

        if self.config.simplify_assertions:
            self._simplify_all()

        while True:
            changes = 0
            for assertion in chain(self.assertions, self.query_assertions):
                changes += assertion.solve_assertion(self, None)
            for factor in queries:
                changes += factor.solve_assertion(self, _OBSERVER)
            stats.passes += 1
            stats.changes += changes
            stats.changes_per_pass.append(changes)
            logger.debug("Pass %d: %d change(s)", stats.passes, changes)
            if changes == 0:
                break

        if self.config.simplify_assertions:
            self._simplify_all()

        self.query_assertions = []
        # a query solve leaves the base to be re-solved without its givens
        self.solved = not temporary
        self.last_stats = stats
        self._stats = None
        logger.info("Solved knowledge base: %s", stats.summary())

        if self.config.warn_on_conflict and self.solved:
            conflict = self.has_conflict()
            if conflict is not None:
                logger.warning("Knowledge base is inconsistent: %s", conflict.summary())
        return stats

    def _simplify_all(self) -> None:
        self.assertions = [assertion.simplify() for assertion in self.assertions]
        self.query_assertions = [assertion.simplify() for assertion in self.query_assertions]

    def record_transition(self, factor: Factor) -> None:
        """Called by a factor whenever it moves from unsolved to solved."""
        if self._stats is None:
            return
        self._stats.transitions += 1
        if self.config.trace_transitions:
            logger.debug("Solved %s", factor.to_string(include_solution=True))

    # ─── CONFLICTS ─────────────────────────────────────────────────

    def has_conflict(self) -> Optional[Conflict]:
        """First assertion that does not hold, or None.

        Solves first when the knowledge base has changed since the last
        solve. Reports the conflict as data and never raises.
        """
        if not self.solved:
            self.solve()
        for assertion in self.assertions:
            conflict = self._conflict_in(assertion)
            if conflict is not None:
                return conflict
        return None

    def conflicts(self) -> List[Conflict]:
        """Every conflicting assertion, one report per assertion."""
        if not self.solved:
            self.solve()
        found = []
        for assertion in self.assertions:
            conflict = self._conflict_in(assertion)
            if conflict is not None:
                found.append(conflict)
        return found

    def check_consistency(self) -> bool:
        """
        Raise LogicalConflict if any assertion does not hold.

        Returns True if the knowledge base is consistent.
        """
        conflict = self.has_conflict()
        if conflict is not None:
            raise LogicalConflict(conflict.message, conflict)
        return True

    def _conflict_in(self, assertion: Factor) -> Optional[Conflict]:
        referenced = assertion.symbols()
        all_solved = all(symbol.solved for symbol in referenced)
        for child in assertion.children():
            if child.solved:
                culprit = child.has_conflict()
                if culprit is not None:
                    return self._describe_conflict(assertion, culprit)
            elif all_solved:
                return self._describe_conflict(assertion, child)
        culprit = assertion.has_conflict()
        if culprit is not None:
            return self._describe_conflict(assertion, culprit)
        return None

    def _describe_conflict(self, assertion: Factor, culprit: Factor) -> Conflict:
        values: Dict[str, str] = {}
        parts: List[str] = []
        for symbol in _sorted_symbols(assertion.symbols()):
            if symbol.solved:
                values[symbol.name] = symbol.class_string() if symbol.is_class else symbol.solution_text()
                parts.append(symbol.to_string_with_properties(brackets=False))
            else:
                values[symbol.name] = "unsolvable"
                parts.append(f"{symbol} is unsolvable")
        where = ", ".join(parts)
        if culprit is assertion:
            subject = f"Assertion {assertion}"
        else:
            subject = f"{culprit} in assertion {assertion}"
        message = (
            f"{subject} does not hold true where {where}, "
            f"indicating a conflict with the assertions."
        )
        return Conflict(assertion=assertion, culprit=culprit, message=message, symbols=values)

    # ─── RENDERING ─────────────────────────────────────────────────

    def mentioned_symbols(self) -> Set[Symbol]:
        found: Set[Symbol] = set()
        for assertion in self.assertions:
            found |= assertion.symbols()
        return found

    def render(self, include_solution: bool = True, solved_only: bool = False) -> str:
        """Text dump of the symbols and assertions.

        Relational symbols such as ``is`` are left out of the symbol list.
        """
        entries = []
        for symbol in _sorted_symbols(self.mentioned_symbols()):
            if symbol.is_relational:
                continue
            if solved_only and not symbol.solved:
                continue
            if include_solution:
                entries.append(symbol.to_string_with_properties(brackets=False))
            else:
                entries.append(str(symbol))
        lines = [f"[SYMBOLS: {', '.join(entries)}]", "[ASSERTIONS]"]
        for assertion in self.assertions:
            if solved_only and not assertion.solved:
                continue
            lines.append(assertion.to_string(include_solution=include_solution))
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"KnowledgeBase(symbols={len(self._symbols)}, assertions={len(self.assertions)})"


def _sorted_symbols(symbols: Iterable[Symbol]) -> List[Symbol]:
    return sorted(symbols, key=lambda symbol: (symbol.unique_id, symbol.name))
