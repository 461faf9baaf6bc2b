"""
Plonkish 기반 모듈: 유한체(Finite Field)
=========================================

회로 전체에서 사용되는 기본 대수적 도구를 정의한다.

**유한체 FR**:
  bn128(BN254) 타원곡선의 스칼라 필드 (scalar field).
  모든 가중치, witness 값, 게이트 계수는 FR 원소이다.
  - 위수(order) p ≈ 2^254, 소수체(prime field)
  - p - 1 = 2^28 × m (m은 홀수) → 최대 2^28차 단위근(root of unity)을 지원

**단위근(Roots of Unity)**:
  회로의 행(row) 도메인 H = {1, ω, ω², ..., ω^(n-1)}.
  순열 인자(permutation argument)에서 각 셀의 "위치 라벨"로 사용된다.

**DELTA**:
  홀수 위수 부분군의 생성자. 열(column)마다 서로 다른 코셋 δ^c·H를 만들어
  (열, 행) 위치를 유일한 필드 원소로 식별한다.

사용 예시:
    >>> from zknn.plonkish.field import FR, to_field
    >>> FR(3) * FR(7)   # FR(21)
    >>> to_field(-1)    # FR(p - 1)
"""

from py_ecc.fields import bn128_FQ as FQ
from py_ecc import bn128


# ─────────────────────────────────────────────────────────────────────
# 유한체(Finite Field) FR
# ─────────────────────────────────────────────────────────────────────

class FR(FQ):
    """bn128 스칼라 필드 위의 유한체 원소.

    py_ecc의 FQ 클래스를 상속하여 +, -, *, /, ** 등의 필드 연산을 제공한다.

    예시:
        >>> x = FR(3)
        >>> x * x          # FR(9)
        >>> FR(1) / FR(3)   # 3의 모듈러 역원
    """
    field_modulus = bn128.curve_order


# 곡선 위수 (필드 크기)
CURVE_ORDER = bn128.curve_order

# p - 1 = 2^TWO_ADICITY × (홀수)
TWO_ADICITY = 28

# FR*의 생성자로 쓰는 원소
MULTIPLICATIVE_GENERATOR = FR(5)

# 홀수 위수 부분군의 생성자: δ = g^(2^28)
# δ^c (c ≥ 0)는 2의 거듭제곱 위수를 갖는 H의 원소가 될 수 없으므로
# 코셋 δ^0·H, δ^1·H, ... 는 서로 겹치지 않는다.
DELTA = MULTIPLICATIVE_GENERATOR ** (1 << TWO_ADICITY)


def to_field(value):
    """정수 상수를 FR로 축소(reduce)한다.

    가중치는 회로 구성 전에 반드시 필드 원소로 변환되어야 한다.
    음수는 p - |value|로 표현된다.

    Args:
        value: FR 원소 또는 정수

    Returns:
        FR: value mod p

    Raises:
        TypeError: 정수/FR이 아닌 값 (float, bool 등)

    예시:
        >>> to_field(-1) == FR(CURVE_ORDER - 1)  # True
    """
    if isinstance(value, FR):
        return value
    if isinstance(value, bool):
        raise TypeError(f"bool은 필드 원소로 변환하지 않습니다: {value!r}")
    if isinstance(value, FQ) or isinstance(value, int):
        return FR(int(value))
    raise TypeError(f"필드 원소로 변환할 수 없는 값입니다: {value!r}")


# ─────────────────────────────────────────────────────────────────────
# 단위근 (Roots of Unity)
# ─────────────────────────────────────────────────────────────────────

def get_root_of_unity(n):
    """n차 원시 단위근(primitive n-th root of unity) ω를 반환한다.

    ω^n = 1이고, ω^k ≠ 1 (0 < k < n)인 원소 ω를 찾는다.
    ω = g^((p-1)/n) (g = 5)

    Args:
        n: 단위근의 차수 (2의 거듭제곱이어야 하며, ≤ 2^28)

    Returns:
        FR: n차 원시 단위근

    Raises:
        ValueError: n이 2의 거듭제곱이 아니거나 2^28을 초과할 때
    """
    if n < 1 or (n & (n - 1)) != 0:
        raise ValueError(f"n은 2의 거듭제곱이어야 합니다: {n}")
    if n > (1 << TWO_ADICITY):
        raise ValueError(f"n은 2^28 이하여야 합니다: {n}")
    if n == 1:
        return FR(1)

    exponent = (CURVE_ORDER - 1) // n
    return MULTIPLICATIVE_GENERATOR ** exponent


def get_roots_of_unity(n):
    """n개의 단위근 리스트 [1, ω, ω², ..., ω^(n-1)]을 반환한다.

    이 리스트가 회로의 행 도메인 H이다.

    Args:
        n: 도메인 크기 (2의 거듭제곱)

    Returns:
        list[FR]: [ω^0, ω^1, ..., ω^(n-1)]
    """
    omega = get_root_of_unity(n)
    roots = []
    current = FR(1)
    for _ in range(n):
        roots.append(current)
        current = current * omega
    return roots
