"""
회로 크기 유틸리티
==================

회로의 행 수 n은 항상 2의 거듭제곱(n = 2^k)이다.
행 도메인 H = {1, ω, ..., ω^(n-1)}가 n차 단위근으로 이루어지기 때문이다.

  | 필요한 행 수 | n  | k |
  |--------------|----|---|
  | 3            | 4  | 2 |
  | 10           | 16 | 4 |
  | 17           | 32 | 5 |
"""


def next_power_of_2(n):
    """n 이상의 가장 작은 2의 거듭제곱을 반환한다.

    예시:
        >>> next_power_of_2(3)  # 4
        >>> next_power_of_2(4)  # 4
        >>> next_power_of_2(5)  # 8
    """
    if n <= 1:
        return 1
    p = 1
    while p < n:
        p <<= 1
    return p


def minimum_k(rows):
    """rows개의 행을 담을 수 있는 가장 작은 k (2^k ≥ rows).

    Args:
        rows: 필요한 행 수 (0 이상)

    Returns:
        int: k
    """
    if rows < 0:
        raise ValueError(f"행 수는 음수일 수 없습니다: {rows}")
    return next_power_of_2(rows).bit_length() - 1
