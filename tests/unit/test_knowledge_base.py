"""
tests/unit/test_knowledge_base.py
=================================
Tests for the KnowledgeBase fixpoint driver: termination, idempotence,
queries, conflict reporting, configuration and rendering.
"""
import logging

import pytest

from factorkb.core.config import SolverConfig
from factorkb.core.exceptions import LogicalConflict
from factorkb.core.types import SolveStats
from factorkb.symbolic.knowledge_base import KnowledgeBase


def _count_nodes(kb):
    seen = {}
    stack = list(kb.assertions) + list(kb.registered_symbols())
    while stack:
        node = stack.pop()
        if id(node) in seen:
            continue
        seen[id(node)] = node
        stack.extend(node.children())
    return len(seen)


def _snapshot(symbols):
    return [
        (symbol.solved, symbol.boolean_value, str(symbol.alternate_value), sorted(map(str, symbol.relations)))
        for symbol in symbols
    ]


class TestFixpoint:
    def test_solve_returns_stats(self, kb, weather):
        rain, wet, _ = weather
        kb.add(rain >> wet, rain)
        stats = kb.solve()
        assert isinstance(stats, SolveStats)
        assert stats is kb.last_stats
        assert stats.assertions == 2
        assert stats.changes_per_pass[-1] == 0
        assert stats.passes == len(stats.changes_per_pass)

    def test_transitions_bounded_by_node_count(self, kb, weather, numbers):
        rain, wet, cold = weather
        x, y, z = numbers
        kb.add(
            rain >> wet,
            wet >> cold,
            rain,
            (x + y).equals(z),
            x.equals(4),
            z.equals(10),
        )
        stats = kb.solve()
        nodes = _count_nodes(kb)
        assert stats.transitions <= nodes
        assert stats.passes <= nodes + 1
        assert y.alternate_value.as_number() == 6

    def test_solve_is_idempotent(self, kb, weather, numbers, animals):
        rain, wet, _ = weather
        x, y, _ = numbers
        tom, cat, _ = animals
        kb.add(rain >> wet, rain, (x + y).equals(10), x.equals(4), kb.is_a(tom, cat))
        kb.solve()
        first = _snapshot(kb.registered_symbols())
        kb.solve()
        assert _snapshot(kb.registered_symbols()) == first

    def test_add_marks_unsolved(self, kb, weather):
        rain, _, _ = weather
        kb.solve()
        assert kb.solved
        kb.add(rain)
        assert not kb.solved

    def test_add_is_chainable(self, kb, weather):
        rain, wet, _ = weather
        assert kb.add(rain).add(wet) is kb
        assert len(kb.assertions) == 2

    def test_python_values_are_coerced(self, kb):
        kb.add(True)
        kb.solve()
        assert kb.has_conflict() is None

    def test_simplification_can_be_disabled(self):
        kb = KnowledgeBase(config=SolverConfig(simplify_assertions=False))
        rain = kb.symbol("rain")
        kb.add(~~rain)
        kb.solve()
        assert kb.assertions[0] is not rain
        assert rain.solved_true


class TestQuery:
    def test_query_answers_from_given(self, kb, weather):
        rain, wet, _ = weather
        kb.add(rain >> wet)
        (answer,) = kb.given(rain).query(wet)
        assert answer is wet
        assert answer.solved_true

    def test_sequential_queries_are_isolated(self, kb, weather):
        rain, wet, _ = weather
        kb.add(rain >> wet)
        (first,) = kb.if_(rain).query(wet)
        assert first.solved_true
        (second,) = kb.given().query(wet)
        assert not second.solved

    def test_query_assertions_are_discarded(self, kb, weather):
        rain, _, _ = weather
        kb.given(rain).query(rain)
        assert kb.query_assertions == []
        kb.solve()
        assert not rain.solved

    def test_query_does_not_assert(self, kb, weather):
        rain, _, _ = weather
        (answer,) = kb.query(rain)
        assert not answer.solved

    def test_queries_are_kept(self, kb, weather):
        rain, wet, _ = weather
        kb.query(rain, wet)
        assert kb.queries == [rain, wet]

    def test_given_does_not_leak_into_conflicts(self, kb, weather):
        rain, wet, _ = weather
        kb.add(rain >> wet, ~wet)
        assert kb.has_conflict() is None
        kb.given(rain).query(wet)
        assert not kb.solved
        assert kb.has_conflict() is None
        assert rain.solved_false


class TestConflicts:
    def test_conflict_report(self, kb, numbers):
        x, _, _ = numbers
        kb.add(x.equals(1), x.equals(2))
        conflict = kb.has_conflict()
        assert conflict.culprit is conflict.assertion
        assert conflict.symbols == {"x": "1"}
        assert str(conflict) == conflict.message
        assert "does not hold true" in conflict.message

    def test_has_conflict_solves_first(self, kb, weather):
        rain, wet, _ = weather
        kb.add(rain, ~rain)
        assert not kb.solved
        assert kb.has_conflict() is not None
        assert kb.solved

    def test_conflict_check_is_read_only(self, kb, numbers):
        x, _, _ = numbers
        kb.add(x.equals(1), x.equals(2))
        first = kb.has_conflict()
        second = kb.has_conflict()
        assert first.message == second.message
        assert x.alternate_value.as_number() == 1

    def test_conflicts_lists_every_assertion(self, kb, numbers, weather):
        x, _, _ = numbers
        rain, _, _ = weather
        kb.add(x.equals(1), x.equals(2), rain, ~rain)
        assert len(kb.conflicts()) == 2

    def test_check_consistency_raises(self, kb, numbers):
        x, _, _ = numbers
        kb.add(x.equals(1), x.equals(2))
        with pytest.raises(LogicalConflict) as exc_info:
            kb.check_consistency()
        assert exc_info.value.conflict.assertion is kb.assertions[1]

    def test_check_consistency_passes(self, kb, weather):
        rain, wet, _ = weather
        kb.add(rain >> wet, rain)
        assert kb.check_consistency() is True

    def test_unsolved_symbols_reported(self, kb, numbers):
        x, y, _ = numbers
        kb.add(x.equals(1), x.equals(2), (x + y).at_least(0))
        conflict = kb.has_conflict()
        assert "x=1" in conflict.message


class TestConfigAndLogging:
    def test_default_config(self, kb):
        assert kb.config.strict_arithmetic is False
        assert kb.config.simplify_assertions is True

    def test_strict_preset(self):
        config = SolverConfig.strict()
        assert config.strict_arithmetic
        assert config.warn_on_conflict

    def test_trace_transitions(self, caplog):
        kb = KnowledgeBase(config=SolverConfig(trace_transitions=True))
        rain = kb.symbol("rain")
        kb.add(rain)
        with caplog.at_level(logging.DEBUG, logger="factorkb.symbolic.knowledge_base"):
            kb.solve()
        assert "Solved (rain)=T" in caplog.text

    def test_warn_on_conflict(self, caplog):
        kb = KnowledgeBase(config=SolverConfig(warn_on_conflict=True))
        x = kb.symbol("x")
        kb.add(x.equals(1), x.equals(2))
        with caplog.at_level(logging.WARNING, logger="factorkb.symbolic.knowledge_base"):
            kb.solve()
        assert "inconsistent" in caplog.text

    def test_solve_summary_logged(self, caplog, kb, weather):
        rain, _, _ = weather
        kb.add(rain)
        with caplog.at_level(logging.INFO, logger="factorkb.symbolic.knowledge_base"):
            kb.solve()
        assert "Solved knowledge base" in caplog.text


class TestRendering:
    def test_render_lists_symbols_and_assertions(self, kb, weather):
        rain, wet, _ = weather
        kb.add(rain >> wet, rain)
        kb.solve()
        lines = kb.render().splitlines()
        assert lines[0] == "[SYMBOLS: rain=T, wet=T]"
        assert lines[1] == "[ASSERTIONS]"
        assert "(rain -> wet)=T" in lines

    def test_relational_symbols_hidden(self, kb, animals):
        tom, cat, _ = animals
        kb.add(kb.is_a(tom, cat))
        kb.solve()
        header = kb.render().splitlines()[0]
        assert "tom [is(cat)]" in header
        assert "is," not in header.replace("tom [is(cat)]", "")

    def test_solved_only(self, kb, weather):
        rain, wet, _ = weather
        kb.add(rain | wet, rain)
        kb.solve()
        header = kb.render(solved_only=True).splitlines()[0]
        assert header == "[SYMBOLS: rain=T]"

    def test_without_solution(self, kb, weather):
        rain, _, _ = weather
        kb.add(rain)
        kb.solve()
        assert kb.render(include_solution=False).splitlines() == [
            "[SYMBOLS: rain]",
            "[ASSERTIONS]",
            "rain",
        ]

    def test_str_is_render(self, kb, weather):
        rain, _, _ = weather
        kb.add(rain)
        kb.solve()
        assert str(kb) == kb.render()

    def test_mentioned_symbols(self, kb, weather):
        rain, wet, cold = weather
        kb.add(rain >> wet)
        assert kb.mentioned_symbols() == {rain, wet}
