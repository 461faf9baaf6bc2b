"""
Permutation tests: 순환 병합, σ 평가값, Grand Product 누적자
"""
import pytest
from zknn.plonkish.constraint_system import ADVICE, INSTANCE, Column
from zknn.plonkish.errors import PermutationError
from zknn.plonkish.field import FR, DELTA, get_roots_of_unity
from zknn.plonkish.permutation import (
    PermutationAssembly,
    build_permutation_polynomials,
    column_deltas,
    compute_accumulator,
)

N = 4
ADV = Column(ADVICE, 0)
INST = Column(INSTANCE, 0)


@pytest.fixture
def assembly():
    return PermutationAssembly([ADV, INST], N)


def _accumulate(assembly, values, beta=FR(7), gamma=FR(11)):
    domain = get_roots_of_unity(N)
    deltas = column_deltas(len(assembly.columns))
    sigma = build_permutation_polynomials(assembly.mapping, N, domain, deltas)
    return compute_accumulator(values, sigma, N, domain, deltas, beta, gamma)


class TestAssembly:
    def test_identity_has_no_cycles(self, assembly):
        assert assembly.cycles() == []

    def test_copy_creates_cycle(self, assembly):
        assembly.copy(ADV, 2, INST, 0)
        assert assembly.mapping[0][2] == (1, 0)
        assert assembly.mapping[1][0] == (0, 2)
        assert assembly.cycles() == [[(0, 2), (1, 0)]]

    def test_copy_same_cycle_is_noop(self, assembly):
        assembly.copy(ADV, 2, INST, 0)
        before = [list(column) for column in assembly.mapping]
        assembly.copy(INST, 0, ADV, 2)
        assert assembly.mapping == before

    def test_transitive_merge(self, assembly):
        assembly.copy(ADV, 0, ADV, 1)
        assembly.copy(ADV, 1, INST, 3)
        cycles = assembly.cycles()
        assert len(cycles) == 1
        assert sorted(cycles[0]) == [(0, 0), (0, 1), (1, 3)]

    def test_merge_two_cycles(self, assembly):
        assembly.copy(ADV, 0, ADV, 1)
        assembly.copy(INST, 0, INST, 1)
        assembly.copy(ADV, 1, INST, 0)
        cycles = assembly.cycles()
        assert len(cycles) == 1
        assert len(cycles[0]) == 4

    def test_unknown_column(self, assembly):
        with pytest.raises(PermutationError):
            assembly.copy(Column(ADVICE, 1), 0, INST, 0)

    @pytest.mark.parametrize("row", [-1, N])
    def test_row_out_of_range(self, assembly, row):
        with pytest.raises(PermutationError):
            assembly.copy(ADV, 0, INST, row)


class TestPermutationPolynomials:
    def test_identity_labels(self, assembly):
        domain = get_roots_of_unity(N)
        deltas = column_deltas(2)
        sigma = build_permutation_polynomials(assembly.mapping, N, domain, deltas)
        assert sigma[0] == domain
        assert sigma[1] == [DELTA * w for w in domain]

    def test_swapped_labels(self, assembly):
        assembly.copy(ADV, 2, INST, 0)
        domain = get_roots_of_unity(N)
        deltas = column_deltas(2)
        sigma = build_permutation_polynomials(assembly.mapping, N, domain, deltas)
        assert sigma[0][2] == DELTA * domain[0]
        assert sigma[1][0] == domain[2]

    def test_column_deltas(self):
        assert column_deltas(3) == [FR(1), DELTA, DELTA * DELTA]


class TestAccumulator:
    def test_starts_at_one(self, assembly):
        z = _accumulate(assembly, [[FR(0)] * N, [FR(0)] * N])
        assert z[0] == FR(1)
        assert len(z) == N + 1

    def test_satisfied_copy(self, assembly):
        assembly.copy(ADV, 2, INST, 0)
        values = [[FR(5), FR(6), FR(9), FR(8)], [FR(9), FR(0), FR(0), FR(0)]]
        assert _accumulate(assembly, values)[N] == FR(1)

    def test_violated_copy(self, assembly):
        assembly.copy(ADV, 2, INST, 0)
        values = [[FR(5), FR(6), FR(9), FR(8)], [FR(10), FR(0), FR(0), FR(0)]]
        assert _accumulate(assembly, values)[N] != FR(1)

    def test_no_constraints_always_one(self, assembly):
        values = [[FR(1), FR(2), FR(3), FR(4)], [FR(5), FR(6), FR(7), FR(8)]]
        assert _accumulate(assembly, values)[N] == FR(1)
