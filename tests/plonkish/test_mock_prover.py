"""
MockProver tests: "double" 회로 (a[cur] = 2 · a[prev])로 게이트/순열 검사 확인
"""
import logging

import pytest
from zknn.plonkish.constraint_system import Circuit
from zknn.plonkish.dev import (
    CellNotAssigned, ConstraintNotSatisfied, MockProver, PermutationNotSatisfied,
)
from zknn.plonkish.errors import (
    ShapeError, SynthesisError, UnknownValueError, VerificationError,
)
from zknn.plonkish.expression import Rotation
from zknn.plonkish.field import FR
from zknn.plonkish.value import Value

K = 2


class DoubleCircuit(Circuit):
    """행 0에 x, 행 1에 2x를 할당하고 2x를 instance 슬롯 0에 바인딩한다."""

    def __init__(self, x=None, doubled=None):
        self.x = Value.unknown() if x is None else Value.known(FR(x))
        if doubled is None:
            self.doubled = self.x * FR(2)
        else:
            self.doubled = Value.known(FR(doubled))

    def without_witnesses(self):
        return DoubleCircuit()

    def configure(self, meta):
        a = meta.advice_column()
        i = meta.instance_column()
        s = meta.selector()
        meta.enable_equality(a)
        meta.enable_equality(i)
        meta.create_gate("double", lambda cells: [
            cells.query_selector(s)
            * (cells.query_advice(a, Rotation.cur()) - cells.query_advice(a, Rotation.prev()) * FR(2))
        ])
        return a, i, s

    def synthesize(self, config, layouter):
        a, i, s = config

        def assign(region):
            region.assign_advice("x", a, 0, self.x)
            s.enable(region, 1)
            return region.assign_advice("doubled", a, 1, self.doubled)

        cell = layouter.assign_region("double", assign)
        layouter.constrain_instance(cell.cell, i, 0)


class WrapCircuit(DoubleCircuit):
    """셀렉터를 행 0에 켜서 prev가 마지막 행(미할당)을 가리키게 한다."""

    def synthesize(self, config, layouter):
        a, i, s = config

        def assign(region):
            s.enable(region, 0)
            region.assign_advice("x", a, 0, self.x)

        layouter.assign_region("wrap", assign)


class DoubleSelectorCircuit(DoubleCircuit):
    """같은 행에 셀렉터를 두 번 켠다."""

    def synthesize(self, config, layouter):
        a, i, s = config

        def assign(region):
            s.enable(region, 0)
            s.enable(region, 0)
            region.assign_advice("x", a, 0, self.x)

        layouter.assign_region("twice", assign)


class TestSatisfied:
    def test_valid_witness(self):
        prover = MockProver.run(K, DoubleCircuit(3), [[6]])
        assert prover.verify() == []
        prover.assert_satisfied()

    def test_instance_padded(self):
        prover = MockProver.run(K, DoubleCircuit(3), [[FR(6)]])
        assert prover.instance[0] == [FR(6), FR(0), FR(0), FR(0)]

    def test_regions_recorded(self):
        prover = MockProver.run(K, DoubleCircuit(3), [[6]])
        assert [r.name for r in prover.regions] == ["double"]
        assert prover.selectors[0] == [False, True, False, False]

    def test_logs_result(self, caplog):
        caplog.set_level(logging.INFO, logger="zknn.plonkish.dev")
        MockProver.run(K, DoubleCircuit(3), [[6]]).verify()
        assert "all constraints satisfied" in caplog.text


class TestGateFailures:
    def test_wrong_witness(self):
        prover = MockProver.run(K, DoubleCircuit(3, 7), [[7]])
        failures = prover.verify()
        assert failures == [ConstraintNotSatisfied(("double", 0), 1, "double", [])]

    def test_failure_carries_cell_values(self):
        failure = MockProver.run(K, DoubleCircuit(3, 7), [[7]]).verify()[0]
        values = dict(failure.cell_values)
        column = failure.cell_values[0][0][0]
        assert values[(column, 0)] == FR(7)
        assert values[(column, -1)] == FR(3)

    def test_assert_satisfied_raises(self):
        prover = MockProver.run(K, DoubleCircuit(3, 7), [[7]])
        with pytest.raises(VerificationError) as exc_info:
            prover.assert_satisfied()
        assert len(exc_info.value.failures) == 1

    def test_rotation_wraps_to_unassigned_row(self):
        prover = MockProver.run(K, WrapCircuit(3), [[]])
        failures = prover.verify()
        assert len(failures) == 1
        assert isinstance(failures[0], CellNotAssigned)
        assert failures[0].row == (1 << K) - 1
        assert failures[0].region == "wrap"


class TestPermutationFailures:
    def test_instance_mismatch(self):
        prover = MockProver.run(K, DoubleCircuit(3), [[5]])
        failures = prover.verify()
        assert len(failures) == 2
        assert all(isinstance(f, PermutationNotSatisfied) for f in failures)
        assert sorted((f.column.kind, f.row) for f in failures) == [("advice", 1), ("instance", 0)]

    def test_missing_instance_value(self):
        prover = MockProver.run(K, DoubleCircuit(3), [[]])
        assert len(prover.verify()) == 2


class TestRunErrors:
    def test_unknown_values_rejected(self):
        with pytest.raises(SynthesisError) as exc_info:
            MockProver.run(K, DoubleCircuit(), [[0]])
        assert isinstance(exc_info.value.__cause__, UnknownValueError)

    def test_instance_too_long(self):
        with pytest.raises(ShapeError):
            MockProver.run(K, DoubleCircuit(3), [[6, 0, 0, 0, 0]])

    def test_instance_column_count(self):
        with pytest.raises(ShapeError):
            MockProver.run(K, DoubleCircuit(3), [])

    def test_duplicate_selector_on_row(self):
        with pytest.raises(SynthesisError):
            MockProver.run(K, DoubleSelectorCircuit(3), [[]])

    def test_circuit_too_large(self):
        with pytest.raises(SynthesisError):
            MockProver.run(0, DoubleCircuit(3), [[6]])
