"""
MockProver: 증명 없이 모든 제약을 직접 검사하는 디버깅 백엔드
==============================================================

실제 증명(커밋먼트, 페어링)을 만들지 않고, 할당된 셀 값으로
게이트 항등식과 copy constraint를 하나씩 확인한다.

**검사 순서**:
  1. 게이트: 게이트의 셀렉터가 모두 활성화된 행마다 각 항등식을 평가
     - 쿼리한 advice 셀이 비어 있으면 → CellNotAssigned
     - 값이 0이 아니면 → ConstraintNotSatisfied
  2. 순열: 동등성 열의 값으로 Grand Product 누적자 z를 계산
     - z_n ≠ 1이면 값이 어긋난 순환의 셀마다 → PermutationNotSatisfied

  rotation은 행 도메인 위에서 순환한다: 행 0의 prev는 행 n-1.

사용 예시:
    >>> prover = MockProver.run(4, circuit, [public_outputs])
    >>> prover.verify()            # [] 이면 통과
    >>> prover.assert_satisfied()  # 실패 시 VerificationError
"""

import copy
import logging

from zknn.plonkish.constraint_system import ADVICE, ConstraintSystem
from zknn.plonkish.errors import AssignmentError, ShapeError, VerificationError
from zknn.plonkish.field import FR, get_roots_of_unity, to_field
from zknn.plonkish.layouter import Assignment, Layouter
from zknn.plonkish.permutation import (
    PermutationAssembly,
    build_permutation_polynomials,
    column_deltas,
    compute_accumulator,
)
from zknn.plonkish.transcript import Transcript

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────
# 검증 실패 종류
# ─────────────────────────────────────────────────────────────────────

class VerifyFailure:
    """검증 실패의 기반 클래스. 같은 종류, 같은 필드면 같은 실패로 본다."""

    def _key(self):
        raise NotImplementedError

    def __eq__(self, other):
        return type(self) is type(other) and self._key() == other._key()

    def __hash__(self):
        return hash((type(self).__name__,) + self._key())


class ConstraintNotSatisfied(VerifyFailure):
    """게이트 항등식이 0이 아닌 값으로 평가되었다.

    속성:
        constraint: (게이트 이름, 항등식 인덱스)
        row: 절대 행 번호
        region: 행이 속한 리전 이름 (없으면 None)
        cell_values: [((열, rotation offset), FR)] 항등식이 참조한 셀 값
    """

    def __init__(self, constraint, row, region, cell_values):
        self.constraint = constraint
        self.row = row
        self.region = region
        self.cell_values = list(cell_values)

    def _key(self):
        return (self.constraint, self.row, self.region)

    def __repr__(self):
        gate, index = self.constraint
        return (
            f"ConstraintNotSatisfied({gate}[{index}], row={self.row}, "
            f"region={self.region!r})"
        )


class CellNotAssigned(VerifyFailure):
    """활성화된 게이트가 할당되지 않은 advice 셀을 참조했다."""

    def __init__(self, gate, region, column, row):
        self.gate = gate
        self.region = region
        self.column = column
        self.row = row

    def _key(self):
        return (self.gate, self.region, self.column, self.row)

    def __repr__(self):
        return (
            f"CellNotAssigned(gate={self.gate!r}, region={self.region!r}, "
            f"{self.column!r}, row={self.row})"
        )


class PermutationNotSatisfied(VerifyFailure):
    """copy constraint로 묶인 셀의 값이 서로 다르다."""

    def __init__(self, column, row):
        self.column = column
        self.row = row

    def _key(self):
        return (self.column, self.row)

    def __repr__(self):
        return f"PermutationNotSatisfied({self.column!r}, row={self.row})"


# ─────────────────────────────────────────────────────────────────────
# MockProver
# ─────────────────────────────────────────────────────────────────────

class _RowResolver:
    """Expression.evaluate에 전달되는 행 하나의 값 조회기."""

    def __init__(self, prover, row):
        self.prover = prover
        self.row = row

    def _rotated(self, rotation):
        return (self.row + rotation.offset) % self.prover.n

    def selector(self, selector):
        return FR(1) if self.prover.selectors[selector.index][self.row] else FR(0)

    def advice(self, column, rotation):
        value = self.prover.advice[column.index][self._rotated(rotation)]
        return FR(0) if value is None else value

    def instance(self, column, rotation):
        return self.prover.instance[column.index][self._rotated(rotation)]


class MockProver(Assignment):
    """할당된 witness를 보관하고 모든 제약을 검사하는 백엔드.

    속성:
        k: 회로 크기 지수 (n = 2^k)
        n: 행 수
        cs: ConstraintSystem
        advice: advice[열][행] = FR 또는 None (미할당)
        instance: instance[열][행] = FR (n까지 0으로 패딩)
        selectors: selectors[셀렉터][행] = bool
        permutation: PermutationAssembly (동등성 열 대상)
        regions: 커밋된 RegionLayout 목록
    """

    def __init__(self, k, cs, instance):
        self.k = k
        self.n = 1 << k
        self.cs = cs
        self.instance = instance
        self.advice = [[None] * self.n for _ in range(cs.num_advice_columns)]
        self.selectors = [[False] * self.n for _ in range(cs.num_selectors)]
        self.permutation = PermutationAssembly(cs.equality_columns, self.n)
        self.row_regions = {}
        self.regions = ()
        self._current_region = None

    @classmethod
    def run(cls, k, circuit, instances):
        """회로를 구성하고 witness를 합성한 MockProver를 만든다.

        Args:
            k: 회로 크기 지수 (n = 2^k 행)
            circuit: Circuit 구현체
            instances: instance 열마다 공개 값 리스트 (FR 또는 정수)

        Returns:
            MockProver

        Raises:
            ShapeError: instance 열 개수가 다르거나 값이 2^k개를 넘을 때
            SynthesisError: 합성 실패 (Unknown 값 포함)
        """
        n = 1 << k
        cs = ConstraintSystem()
        config = circuit.configure(cs)

        if len(instances) != cs.num_instance_columns:
            raise ShapeError(
                f"instance 열 {cs.num_instance_columns}개가 필요하지만 "
                f"{len(instances)}개가 주어졌습니다"
            )
        padded = []
        for i, column_values in enumerate(instances):
            if len(column_values) > n:
                raise ShapeError(
                    f"instance 열 {i}의 값 {len(column_values)}개가 "
                    f"회로 행 수 {n}(k={k})를 넘습니다"
                )
            values = [to_field(v) for v in column_values]
            padded.append(values + [FR(0)] * (n - len(values)))

        prover = cls(k, cs, padded)
        layouter = Layouter(cs, prover)
        circuit.synthesize(config, layouter)
        prover.regions = layouter.regions
        logger.debug(
            "mock prover synthesized %d regions on %d rows", len(prover.regions), n
        )
        return prover

    # ── Assignment 인터페이스 ──

    def usable_rows(self):
        return self.n

    def enter_region(self, name):
        self._current_region = name

    def exit_region(self):
        self._current_region = None

    def enable_selector(self, annotation, selector, row):
        self._check_row(annotation, row)
        for other, rows in enumerate(self.selectors):
            if rows[row]:
                raise AssignmentError(
                    f"'{annotation}': 행 {row}에 셀렉터 S{other}가 이미 활성화되어 있습니다"
                )
        self.selectors[selector.index][row] = True
        self.row_regions[row] = self._current_region

    def assign_advice(self, annotation, column, row, value):
        self._check_row(annotation, row)
        try:
            assigned = to_field(value.assign())
        except TypeError as err:
            raise AssignmentError(f"'{annotation}': {err}") from err
        self.advice[column.index][row] = assigned
        self.row_regions[row] = self._current_region

    def copy(self, left_column, left_row, right_column, right_row):
        self.permutation.copy(left_column, left_row, right_column, right_row)

    def checkpoint(self):
        return (
            [list(column) for column in self.advice],
            [list(rows) for rows in self.selectors],
            copy.deepcopy(self.permutation),
            dict(self.row_regions),
        )

    def restore(self, checkpoint):
        advice, selectors, permutation, row_regions = checkpoint
        self.advice = advice
        self.selectors = selectors
        self.permutation = permutation
        self.row_regions = row_regions
        self._current_region = None

    def _check_row(self, annotation, row):
        if not 0 <= row < self.n:
            raise AssignmentError(f"'{annotation}': 행 {row}이(가) 범위 [0, {self.n}) 밖입니다")

    # ── 검증 ──

    def verify(self):
        """모든 게이트와 copy constraint를 검사한다.

        Returns:
            list[VerifyFailure]: 비어 있으면 모든 제약이 만족됨
        """
        failures = self._verify_gates() + self._verify_permutation()
        if failures:
            logger.info("mock prover found %d failures", len(failures))
            for failure in failures:
                logger.warning("%r", failure)
        else:
            logger.info("mock prover: all constraints satisfied")
        return failures

    def assert_satisfied(self):
        """verify()가 실패를 하나라도 반환하면 VerificationError를 발생시킨다."""
        failures = self.verify()
        if failures:
            raise VerificationError(failures)

    def _verify_gates(self):
        failures = []
        for gate in self.cs.gates:
            for row in range(self.n):
                if not all(self.selectors[s.index][row] for s in gate.queried_selectors):
                    continue
                region = self.row_regions.get(row)

                missing = []
                if gate.queried_selectors:
                    for column, rotation in gate.queried_cells:
                        queried_row = (row + rotation.offset) % self.n
                        if column.kind == ADVICE and self.advice[column.index][queried_row] is None:
                            missing.append(CellNotAssigned(gate.name, region, column, queried_row))
                if missing:
                    failures.extend(missing)
                    continue

                resolver = _RowResolver(self, row)
                for index, poly in enumerate(gate.polys):
                    if poly.evaluate(resolver) == FR(0):
                        continue
                    cell_values = [
                        ((column, rotation.offset), self._query(resolver, column, rotation))
                        for column, rotation in poly.queried_cells()
                    ]
                    failures.append(
                        ConstraintNotSatisfied((gate.name, index), row, region, cell_values)
                    )
        return failures

    def _query(self, resolver, column, rotation):
        if column.kind == ADVICE:
            return resolver.advice(column, rotation)
        return resolver.instance(column, rotation)

    def _column_values(self, column):
        if column.kind == ADVICE:
            return [FR(0) if v is None else v for v in self.advice[column.index]]
        return list(self.instance[column.index])

    def _verify_permutation(self):
        columns = self.permutation.columns
        if not columns:
            return []

        values = [self._column_values(column) for column in columns]

        # β, γ: 동등성 열의 모든 값을 흡수한 뒤 도출
        transcript = Transcript()
        for column_values in values:
            transcript.append_scalars(b"cell", column_values)
        beta = transcript.challenge_scalar(b"beta")
        gamma = transcript.challenge_scalar(b"gamma")

        domain = get_roots_of_unity(self.n)
        deltas = column_deltas(len(columns))
        sigma = build_permutation_polynomials(self.permutation.mapping, self.n, domain, deltas)
        z = compute_accumulator(values, sigma, self.n, domain, deltas, beta, gamma)
        if z[self.n] == FR(1):
            return []

        failures = []
        for cycle in self.permutation.cycles():
            first = values[cycle[0][0]][cycle[0][1]]
            if all(values[c][r] == first for c, r in cycle):
                continue
            for c, r in cycle:
                failures.append(PermutationNotSatisfied(columns[c], r))
        return failures
