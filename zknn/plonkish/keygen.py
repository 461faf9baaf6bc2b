"""
회로 모양 추출 (Key Generation Pass)
=====================================

witness 값 없이 합성을 수행하여 회로의 "고정된 부분"만 기록한다.

**기록 대상**:
  - ConstraintSystem의 pinned 값 (열 수, 셀렉터 수, 게이트 표현식, 동등성 열)
  - 셀렉터 활성화 표: selectors[셀렉터][행] = bool
  - copy constraint 순열 σ와 그 평가값 S_σc(ωʳ)
  - 리전 배치 (RegionLayout)

**기록하지 않는 것**:
  advice 셀 값. Assembly 백엔드는 값을 한 번도 꺼내지 않으므로
  모든 값이 Unknown인 회로(without_witnesses)로도 같은 모양을 얻는다.

사용 예시:
    >>> shape = keygen_shape(4, circuit.without_witnesses())
    >>> shape == keygen_shape(4, circuit)   # True
"""

import copy
import logging

from zknn.plonkish.constraint_system import ConstraintSystem
from zknn.plonkish.errors import AssignmentError
from zknn.plonkish.field import get_roots_of_unity
from zknn.plonkish.layouter import Assignment, Layouter
from zknn.plonkish.permutation import (
    PermutationAssembly,
    build_permutation_polynomials,
    column_deltas,
)

logger = logging.getLogger(__name__)


class Assembly(Assignment):
    """값을 무시하고 셀렉터와 copy constraint만 기록하는 백엔드."""

    def __init__(self, k, cs):
        self.k = k
        self.n = 1 << k
        self.selectors = [[False] * self.n for _ in range(cs.num_selectors)]
        self.permutation = PermutationAssembly(cs.equality_columns, self.n)

    def usable_rows(self):
        return self.n

    def enter_region(self, name):
        pass

    def exit_region(self):
        pass

    def enable_selector(self, annotation, selector, row):
        self._check_row(annotation, row)
        for other, rows in enumerate(self.selectors):
            if rows[row]:
                raise AssignmentError(
                    f"'{annotation}': 행 {row}에 셀렉터 S{other}가 이미 활성화되어 있습니다"
                )
        self.selectors[selector.index][row] = True

    def assign_advice(self, annotation, column, row, value):
        self._check_row(annotation, row)

    def copy(self, left_column, left_row, right_column, right_row):
        self.permutation.copy(left_column, left_row, right_column, right_row)

    def checkpoint(self):
        return [list(rows) for rows in self.selectors], copy.deepcopy(self.permutation)

    def restore(self, checkpoint):
        self.selectors, self.permutation = checkpoint

    def _check_row(self, annotation, row):
        if not 0 <= row < self.n:
            raise AssignmentError(f"'{annotation}': 행 {row}이(가) 범위 [0, {self.n}) 밖입니다")


class CircuitShape:
    """witness와 무관한 회로 모양.

    속성:
        k, n: 회로 크기 (n = 2^k)
        pinned: ConstraintSystem.pinned()
        selectors: 셀렉터 활성화 표 (튜플의 튜플)
        mapping: 순열 σ (열마다 (c', r') 튜플)
        sigma: 순열 평가값 S_σc(ωʳ) (열마다 FR 리스트)
        regions: RegionLayout 튜플
    """

    def __init__(self, k, pinned, selectors, mapping, sigma, regions):
        self.k = k
        self.n = 1 << k
        self.pinned = pinned
        self.selectors = tuple(tuple(rows) for rows in selectors)
        self.mapping = tuple(tuple(column) for column in mapping)
        self.sigma = sigma
        self.regions = tuple(regions)

    def _key(self):
        return (self.k, self.pinned, self.selectors, self.mapping, self.regions)

    def __eq__(self, other):
        return isinstance(other, CircuitShape) and self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    def __repr__(self):
        return f"CircuitShape(k={self.k}, regions={[r.name for r in self.regions]})"


def keygen_shape(k, circuit):
    """회로를 witness 없이 합성하여 CircuitShape를 만든다.

    Args:
        k: 회로 크기 지수
        circuit: Circuit 구현체 (witness 값은 사용하지 않음)

    Returns:
        CircuitShape

    Raises:
        SynthesisError: 합성 실패
    """
    # ── 1단계: 제약 시스템 구성 ──
    cs = ConstraintSystem()
    config = circuit.configure(cs)

    # ── 2단계: 값 없이 합성 ──
    assembly = Assembly(k, cs)
    layouter = Layouter(cs, assembly)
    circuit.synthesize(config, layouter)

    # ── 3단계: 순열 평가값 ──
    domain = get_roots_of_unity(assembly.n)
    deltas = column_deltas(len(cs.equality_columns))
    sigma = build_permutation_polynomials(
        assembly.permutation.mapping, assembly.n, domain, deltas
    )

    shape = CircuitShape(
        k,
        cs.pinned(),
        assembly.selectors,
        assembly.permutation.mapping,
        sigma,
        layouter.regions,
    )
    logger.debug(
        "shape assembled: k=%d, %d gates, %d regions, %d copy cycles",
        k, len(cs.gates), len(shape.regions), len(assembly.permutation.cycles()),
    )
    return shape
