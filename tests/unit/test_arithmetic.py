"""
tests/unit/test_arithmetic.py
=============================
Tests for Add, Negate, Equals and GreaterOrEqual propagation.
"""
import pytest

from factorkb.core.exceptions import UnsupportedOperation
from factorkb.symbolic.arithmetic import Add, Equals, GreaterOrEqual, Negate
from factorkb.symbolic.symbols import NumericLiteral, StringLiteral


class TestIsolation:
    def test_solves_right_operand(self, kb, numbers):
        x, y, _ = numbers
        kb.add(Equals(Add(x, y), 10), Equals(x, 4))
        kb.solve()
        assert y.alternate_value == NumericLiteral(6)

    def test_solves_left_operand(self, kb, numbers):
        x, y, _ = numbers
        kb.add((x + y).equals(10), y.equals(4))
        kb.solve()
        assert x.alternate_value.as_number() == 6

    def test_subtraction(self, kb, numbers):
        x, y, _ = numbers
        kb.add((x - y).equals(1), x.equals(4))
        kb.solve()
        assert y.alternate_value == NumericLiteral(3)

    def test_negation(self, kb, numbers):
        x, _, _ = numbers
        kb.add(Negate(x).equals(5))
        kb.solve()
        assert x.alternate_value == NumericLiteral(-5)

    def test_fractional_result_is_exact(self, kb, numbers):
        x, y, _ = numbers
        kb.add((x + y).equals(0.3), x.equals(0.1))
        kb.solve()
        assert str(y.alternate_value) == "0.2"


class TestInference:
    def test_sum_from_known_operands(self, kb, numbers):
        x, y, z = numbers
        kb.add(z.equals(x + y), x.equals(2), y.equals(3))
        kb.solve()
        assert z.alternate_value == NumericLiteral(5)

    def test_value_copied_between_symbols(self, kb, numbers):
        x, y, _ = numbers
        kb.add(x.equals(y), y.equals(3))
        kb.solve()
        assert x.alternate_value == NumericLiteral(3)

    def test_string_concatenation(self, kb):
        first, last, full = kb.symbols("first", "last", "full")
        kb.add(full.equals(first + last), first.equals("a"), last.equals("b"))
        kb.solve()
        assert full.alternate_value == StringLiteral("ab")

    def test_boolean_value_is_not_stored_as_alternate(self, kb, weather):
        rain, _, _ = weather
        kb.add(rain.equals(True))
        kb.solve()
        assert rain.solved_true
        assert rain.alternate_value is None

    def test_unknown_operands_stay_unsolved(self, kb, numbers):
        x, y, _ = numbers
        kb.add((x + y).equals(10))
        kb.solve()
        assert not x.solved
        assert not y.solved


class TestTopLevelTerms:
    def test_top_level_sum_is_not_asserted_true(self, kb, numbers):
        x, y, _ = numbers
        total = x + y
        kb.add(total)
        kb.solve()
        assert not total.solved
        assert not total.boolean_value
        assert kb.has_conflict() is None

    def test_top_level_sum_takes_its_computed_value(self, kb, numbers):
        x, y, _ = numbers
        total = x + y
        kb.add(total, x.equals(1), y.equals(2))
        kb.solve()
        assert total.solved
        assert not total.boolean_value
        assert total.alternate_value == NumericLiteral(3)
        assert kb.has_conflict() is None

    def test_top_level_negation(self, kb, numbers):
        x, _, _ = numbers
        term = Negate(x)
        kb.add(term, x.equals(4))
        kb.solve()
        assert term.alternate_value == NumericLiteral(-4)


class TestComparisons:
    def test_greater_or_equal_never_solves_a_side(self, kb, numbers):
        x, _, _ = numbers
        kb.add(x.at_least(3))
        kb.solve()
        assert not x.solved

    def test_greater_or_equal_inferred_false(self, kb, numbers):
        x, _, _ = numbers
        kb.add(x.equals(5))
        (query,) = kb.query(GreaterOrEqual(x, 7))
        assert query.solved_false

    def test_greater_or_equal_satisfied(self, kb, numbers):
        x, _, _ = numbers
        kb.add(x.at_least(3), x.equals(5))
        assert kb.has_conflict() is None

    def test_greater_or_equal_violated(self, kb, numbers):
        x, _, _ = numbers
        kb.add(x.at_least(3), x.equals(2))
        assert kb.has_conflict() is not None

    def test_equals_inferred_from_both_sides(self, kb, numbers):
        x, y, _ = numbers
        kb.add(x.equals(1), y.equals(2))
        (query,) = kb.query(x.equals(y))
        assert query.solved_false

    def test_unresolved_equals_holds_its_own_value(self, numbers):
        x, y, _ = numbers
        assert not Equals(x, y).holds()


class TestArithmeticConflicts:
    def test_contradicting_values(self, kb, numbers):
        x, _, _ = numbers
        kb.add(x.equals(1), x.equals(2))
        conflict = kb.has_conflict()
        assert conflict is not None
        assert conflict.assertion is kb.assertions[1]
        assert "x=1" in conflict.message

    def test_sum_disagrees_with_operands(self, kb, numbers):
        x, y, _ = numbers
        total = x + y
        kb.add(total.equals(10), x.equals(4), y.equals(5))
        conflict = kb.has_conflict()
        assert conflict is not None
        assert conflict.culprit is total

    def test_unsupported_operation_reported_as_unsolvable(self, kb, numbers):
        x, y, _ = numbers
        total = x + y
        kb.add(x.equals("a"), y.equals(True), total.at_least(0))
        conflict = kb.has_conflict()
        assert conflict is not None
        assert conflict.culprit is total
        assert conflict.symbols == {"x": '"a"', "y": "T"}


class TestStrictArithmetic:
    def test_unsupported_sum_raises(self, strict_kb):
        x, y = strict_kb.symbols("x", "y")
        strict_kb.add(x.equals("a"), y.equals(True), (x + y).at_least(0))
        with pytest.raises(UnsupportedOperation) as exc_info:
            strict_kb.solve()
        assert exc_info.value.operator == "+"

    def test_unsupported_isolation_raises(self, strict_kb):
        x, y = strict_kb.symbols("x", "y")
        strict_kb.add((x + y).equals(10), x.equals("a"))
        with pytest.raises(UnsupportedOperation) as exc_info:
            strict_kb.solve()
        assert exc_info.value.operator == "-"

    def test_default_mode_degrades_silently(self, kb, numbers):
        x, y, _ = numbers
        kb.add((x + y).equals(10), x.equals("a"))
        kb.solve()
        assert not y.solved
