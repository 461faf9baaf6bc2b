"""
Expression module tests: 노드 평가, 차수, 식별자, 쿼리 수집
"""
import pytest
from zknn.plonkish.constraint_system import ADVICE, INSTANCE, Column, Selector
from zknn.plonkish.errors import ShapeError
from zknn.plonkish.expression import (
    AdviceQuery, Constant, InstanceQuery, Rotation, SelectorExpression,
    linear_combination,
)
from zknn.plonkish.field import FR, CURVE_ORDER


class StubResolver:
    """고정 값을 돌려주는 테스트용 resolver."""

    def __init__(self, advice=None, instance=None, selectors=None):
        self.advice_values = advice or {}
        self.instance_values = instance or {}
        self.selector_values = selectors or {}

    def selector(self, selector):
        return FR(self.selector_values.get(selector.index, 0))

    def advice(self, column, rotation):
        return FR(self.advice_values.get((column.index, rotation.offset), 0))

    def instance(self, column, rotation):
        return FR(self.instance_values.get((column.index, rotation.offset), 0))


@pytest.fixture
def a0():
    return Column(ADVICE, 0)


@pytest.fixture
def a1():
    return Column(ADVICE, 1)


@pytest.fixture
def s0():
    return Selector(0)


class TestRotation:
    def test_named_rotations(self):
        assert Rotation.cur().offset == 0
        assert Rotation.prev().offset == -1
        assert Rotation.next().offset == 1

    def test_equality(self):
        assert Rotation(-1) == Rotation.prev()
        assert Rotation(0) != Rotation(1)
        assert hash(Rotation(2)) == hash(Rotation(2))


class TestEvaluate:
    def test_constant(self):
        assert Constant(7).evaluate(StubResolver()) == FR(7)

    def test_sum_and_negation(self, a0, a1):
        expr = AdviceQuery(a0, Rotation.cur()) - AdviceQuery(a1, Rotation.cur())
        resolver = StubResolver(advice={(0, 0): 10, (1, 0): 3})
        assert expr.evaluate(resolver) == FR(7)

    def test_negative_result_wraps(self, a0):
        expr = Constant(0) - AdviceQuery(a0, Rotation.cur())
        resolver = StubResolver(advice={(0, 0): 1})
        assert expr.evaluate(resolver) == FR(CURVE_ORDER - 1)

    def test_rotation_is_resolved(self, a0):
        expr = AdviceQuery(a0, Rotation.prev()) * FR(3)
        resolver = StubResolver(advice={(0, -1): 5, (0, 0): 100})
        assert expr.evaluate(resolver) == FR(15)

    def test_selector_gates_expression(self, a0, s0):
        expr = SelectorExpression(s0) * (AdviceQuery(a0, Rotation.cur()) - 4)
        off = StubResolver(advice={(0, 0): 9}, selectors={0: 0})
        on = StubResolver(advice={(0, 0): 9}, selectors={0: 1})
        assert expr.evaluate(off) == FR(0)
        assert expr.evaluate(on) == FR(5)

    def test_instance_query(self):
        i0 = Column(INSTANCE, 0)
        expr = InstanceQuery(i0, Rotation.cur()) + 1
        assert expr.evaluate(StubResolver(instance={(0, 0): 41})) == FR(42)

    def test_int_on_left(self, a0):
        expr = 1 - 2 * AdviceQuery(a0, Rotation.cur())
        assert expr.evaluate(StubResolver(advice={(0, 0): 3})) == FR(CURVE_ORDER - 5)


class TestDegree:
    def test_leaf_degrees(self, a0, s0):
        assert Constant(1).degree() == 0
        assert AdviceQuery(a0, Rotation.cur()).degree() == 1
        assert SelectorExpression(s0).degree() == 1

    def test_product_adds_degree(self, a0, s0):
        expr = SelectorExpression(s0) * AdviceQuery(a0, Rotation.cur()) * AdviceQuery(a0, Rotation.prev())
        assert expr.degree() == 3

    def test_scaling_keeps_degree(self, a0):
        assert (AdviceQuery(a0, Rotation.cur()) * FR(9)).degree() == 1


class TestIdentifier:
    def test_structure(self, a0, s0):
        expr = SelectorExpression(s0) * (AdviceQuery(a0, Rotation.cur()) - AdviceQuery(a0, Rotation.prev()) * 2)
        assert expr.identifier() == "(S0*(A0@0+(-(A0@-1*2))))"

    def test_coefficients_are_part_of_identifier(self, a0):
        e1 = AdviceQuery(a0, Rotation.cur()) * 2
        e2 = AdviceQuery(a0, Rotation.cur()) * 3
        assert e1.identifier() != e2.identifier()


class TestQueries:
    def test_queried_cells_deduplicated(self, a0, a1):
        cur = Rotation.cur()
        expr = AdviceQuery(a0, cur) + AdviceQuery(a1, cur) * AdviceQuery(a0, cur)
        assert expr.queried_cells() == [(a0, cur), (a1, cur)]

    def test_queried_selectors(self, a0, s0):
        expr = SelectorExpression(s0) * AdviceQuery(a0, Rotation.cur())
        assert expr.queried_selectors() == [s0]


class TestLinearCombination:
    def test_value(self, a0, a1):
        cur = Rotation.cur()
        expr = linear_combination([AdviceQuery(a0, cur), AdviceQuery(a1, cur)], [FR(2), FR(5)])
        resolver = StubResolver(advice={(0, 0): 3, (1, 0): 4})
        assert expr.evaluate(resolver) == FR(26)

    def test_zero_coefficients_kept(self, a0, a1):
        cur = Rotation.cur()
        expr = linear_combination([AdviceQuery(a0, cur), AdviceQuery(a1, cur)], [0, 0])
        assert len(expr.queried_cells()) == 2

    def test_length_mismatch(self, a0):
        with pytest.raises(ShapeError):
            linear_combination([AdviceQuery(a0, Rotation.cur())], [FR(1), FR(2)])

    def test_empty(self):
        assert linear_combination([], []).evaluate(StubResolver()) == FR(0)
