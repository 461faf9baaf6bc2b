"""
순열 인자 (Permutation Argument)
================================

copy constraint("셀 A의 값 == 셀 B의 값")를 순열(permutation)로 인코딩하고,
Grand Product로 확인하는 모듈.

**배경**:
  게이트는 각 행 안에서만 제약을 건다. 서로 다른 위치의 셀이
  "같은 값"을 가져야 한다는 사실(예: 출력 셀 == 공개 instance 슬롯)은
  게이트로 표현할 수 없다.

  해결: 동등성 열(equality column)의 모든 셀 위치에 순열 σ를 정의한다.
  같은 값을 가져야 하는 셀들은 σ의 한 순환(cycle)에 속한다.

**위치 라벨**:
  열 c, 행 r의 셀 → δ^c · ω^r
  - ω^r: 행 도메인 H의 원소
  - δ^c: 열마다 서로 다른 코셋 식별자 (field.DELTA 참고)

**순환 병합 (copy)**:
  두 셀이 이미 같은 순환에 있으면 아무것도 하지 않는다.
  그렇지 않으면 σ(A), σ(B)를 맞바꿔 두 순환을 하나로 합친다.
  (같은 순환 안에서 맞바꾸면 순환이 둘로 쪼개지므로 aux로 소속을 추적한다)

**Grand Product (누적자 z)**:
  z₀ = 1
  z_{i+1} = z_i · ∏_c (v_c(ωⁱ) + β·δ^c·ωⁱ + γ) / (v_c(ωⁱ) + β·σ_c(ωⁱ) + γ)
  모든 copy constraint가 성립하면 z_n = 1 (분자·분모가 같은 멀티셋).

사용 예시:
    >>> assembly = PermutationAssembly([out_col, inst_col], n=16)
    >>> assembly.copy(out_col, 2, inst_col, 0)
    >>> sigma = build_permutation_polynomials(assembly.mapping, 16, domain, deltas)
"""

from zknn.plonkish.errors import PermutationError
from zknn.plonkish.field import DELTA, FR


class PermutationAssembly:
    """동등성 열들 위의 순열 σ.

    속성:
        columns: 동등성 열 리스트 (순서가 곧 열 번호 c)
        n: 행 수
        mapping: mapping[c][r] = σ(c, r) = (c', r')
        aux: aux[c][r] = (c, r)가 속한 순환의 대표 위치
        sizes: sizes[c][r] = 대표 위치 (c, r) 순환의 크기
    """

    def __init__(self, columns, n):
        self.columns = list(columns)
        self.n = n
        self.mapping = [[(c, r) for r in range(n)] for c in range(len(self.columns))]
        self.aux = [[(c, r) for r in range(n)] for c in range(len(self.columns))]
        self.sizes = [[1] * n for _ in range(len(self.columns))]

    def position(self, column, row):
        """(열, 행)을 순열 내부 좌표 (c, r)로 변환한다.

        Raises:
            PermutationError: 동등성이 활성화되지 않은 열 또는 범위 밖의 행
        """
        if column not in self.columns:
            raise PermutationError(f"동등성이 활성화되지 않은 열입니다: {column!r}")
        if not 0 <= row < self.n:
            raise PermutationError(f"행 {row}이(가) 범위 [0, {self.n}) 밖입니다")
        return self.columns.index(column), row

    def copy(self, left_column, left_row, right_column, right_row):
        """copy constraint 추가: (left_column, left_row) == (right_column, right_row)."""
        left = self.position(left_column, left_row)
        right = self.position(right_column, right_row)

        left_cycle = self.aux[left[0]][left[1]]
        right_cycle = self.aux[right[0]][right[1]]
        if left_cycle == right_cycle:
            return

        # 작은 순환을 큰 순환에 합친다
        if self._size(left_cycle) < self._size(right_cycle):
            left_cycle, right_cycle = right_cycle, left_cycle
        self.sizes[left_cycle[0]][left_cycle[1]] += self._size(right_cycle)

        cursor = right_cycle
        while True:
            self.aux[cursor[0]][cursor[1]] = left_cycle
            cursor = self.mapping[cursor[0]][cursor[1]]
            if cursor == right_cycle:
                break

        # σ(left), σ(right) 맞바꾸기 → 두 순환이 하나로
        self.mapping[left[0]][left[1]], self.mapping[right[0]][right[1]] = (
            self.mapping[right[0]][right[1]],
            self.mapping[left[0]][left[1]],
        )

    def _size(self, position):
        return self.sizes[position[0]][position[1]]

    def cycles(self):
        """길이가 2 이상인 순환 목록.

        Returns:
            list[list[(c, r)]]: 각 순환의 위치 목록 (시작 위치부터 σ를 따라감)
        """
        seen = set()
        result = []
        for c in range(len(self.columns)):
            for r in range(self.n):
                if (c, r) in seen:
                    continue
                cycle = [(c, r)]
                seen.add((c, r))
                cursor = self.mapping[c][r]
                while cursor != (c, r):
                    cycle.append(cursor)
                    seen.add(cursor)
                    cursor = self.mapping[cursor[0]][cursor[1]]
                if len(cycle) > 1:
                    result.append(cycle)
        return result


def column_deltas(num_columns):
    """열 코셋 식별자 [δ⁰, δ¹, ..., δ^(m-1)]."""
    deltas = []
    current = FR(1)
    for _ in range(num_columns):
        deltas.append(current)
        current = current * DELTA
    return deltas


def build_permutation_polynomials(mapping, n, domain, deltas):
    """순열 σ를 열마다 하나의 평가값 리스트 S_σc로 인코딩한다.

    S_σc(ωʳ) = δ^{c'} · ω^{r'}   (σ(c, r) = (c', r'))

    Args:
        mapping: PermutationAssembly.mapping
        n: 행 수
        domain: [ω⁰, ω¹, ..., ω^{n-1}]
        deltas: column_deltas(열 수)

    Returns:
        list[list[FR]]: 열마다 길이 n의 평가값 리스트
    """
    return [
        [deltas[mapped[0]] * domain[mapped[1]] for mapped in mapping[c][:n]]
        for c in range(len(mapping))
    ]


def compute_accumulator(values, sigma, n, domain, deltas, beta, gamma):
    """순열 누적자(grand product accumulator) z의 평가값을 계산한다.

    분자: "순열이 항등"이라 가정했을 때의 값
    분모: 실제 순열 σ를 적용한 값

    Args:
        values: values[c][r] = 열 c, 행 r의 셀 값 (FR)
        sigma: build_permutation_polynomials의 결과
        n: 행 수
        domain: [ω⁰, ..., ω^{n-1}]
        deltas: 열 코셋 식별자
        beta: β 챌린지 (FR)
        gamma: γ 챌린지 (FR)

    Returns:
        list[FR]: [z₀=1, z₁, ..., z_n]. 모든 copy constraint가 성립하면 z_n = 1.
    """
    z_evals = [FR(1)]

    for i in range(n):
        num = FR(1)
        den = FR(1)
        for c, column_values in enumerate(values):
            value = column_values[i]
            num = num * (value + beta * deltas[c] * domain[i] + gamma)
            den = den * (value + beta * sigma[c][i] + gamma)
        z_evals.append(z_evals[-1] * num / den)

    return z_evals
