"""
가중치 제공자 (Parameter Provider)
==================================

회로에 "구워 넣을(compile-time)" 두 가중치 행렬을 제공한다.

  | 행렬   | 크기     | 의미                         |
  |--------|----------|------------------------------|
  | W1     | 128 × 10 | W1[j][i]: 입력 i → 은닉 j    |
  | W2     | 10 × 128 | W2[j][i]: 은닉 i → 출력 j    |

가중치는 회로 모양(게이트 계수)의 일부이다. Prover와 Verifier가 모두 알며,
증명 시점에 불러오지 않는다.

제공자가 달라도(다른 모델) 회로 구조는 같고 게이트 계수만 다르다.

사용 예시:
    >>> params = IdentityParams()
    >>> params.layer1_weights()[0][0]   # FR(1)
    >>> circuit = NeuralNetwork(params, witness)
"""

import hashlib

from zknn.plonkish.errors import ShapeError
from zknn.plonkish.field import CURVE_ORDER, FR, to_field


INPUT_SIZE = 10
HIDDEN_SIZE = 128
OUTPUT_SIZE = 10


def check_matrix(matrix, rows, cols, name):
    """행렬 크기를 확인하고 모든 원소를 FR로 축소한 불변 행렬을 반환한다.

    Args:
        matrix: 행 리스트 (각 행은 정수 또는 FR의 시퀀스)
        rows, cols: 기대 크기
        name: 오류 메시지용 이름 (예: "W1")

    Returns:
        tuple[tuple[FR]]: rows × cols 불변 행렬

    Raises:
        ShapeError: 크기가 다를 때
        TypeError: 정수/FR이 아닌 원소
    """
    matrix = list(matrix)
    if len(matrix) != rows:
        raise ShapeError(f"{name}의 행 수는 {rows}이어야 합니다: {len(matrix)}")
    reduced = []
    for j, row in enumerate(matrix):
        row = list(row)
        if len(row) != cols:
            raise ShapeError(f"{name}[{j}]의 열 수는 {cols}이어야 합니다: {len(row)}")
        reduced.append(tuple(to_field(w) for w in row))
    return tuple(reduced)


class Params:
    """가중치 제공자 인터페이스."""

    def layer1_weights(self):
        """W1 (HIDDEN_SIZE × INPUT_SIZE)."""
        raise NotImplementedError

    def layer2_weights(self):
        """W2 (OUTPUT_SIZE × HIDDEN_SIZE)."""
        raise NotImplementedError


class StaticParams(Params):
    """주어진 두 행렬을 그대로 제공한다 (생성 시 크기 검사 + FR 축소)."""

    def __init__(self, w1, w2):
        self._w1 = check_matrix(w1, HIDDEN_SIZE, INPUT_SIZE, "W1")
        self._w2 = check_matrix(w2, OUTPUT_SIZE, HIDDEN_SIZE, "W2")

    def layer1_weights(self):
        return self._w1

    def layer2_weights(self):
        return self._w2


class IdentityParams(StaticParams):
    """입력을 그대로 통과시키는 가중치.

    hidden[i] = input[i]  (i < 10, 그 외 0)
    output[i] = hidden[i] (i < 10)
    """

    def __init__(self):
        w1 = [[1 if i == j else 0 for i in range(INPUT_SIZE)] for j in range(HIDDEN_SIZE)]
        w2 = [[1 if i == j else 0 for i in range(HIDDEN_SIZE)] for j in range(OUTPUT_SIZE)]
        super().__init__(w1, w2)


class SeededParams(StaticParams):
    """시드로부터 결정론적으로 생성한 가중치.

    W[layer][j][i] = SHA-256("seed:layer:j:i") mod p
    같은 시드는 항상 같은 가중치를 만든다.

    예시:
        >>> SeededParams(1234).layer1_weights() == SeededParams(1234).layer1_weights()  # True
    """

    def __init__(self, seed):
        self.seed = seed
        w1 = [
            [self._derive(1, j, i) for i in range(INPUT_SIZE)]
            for j in range(HIDDEN_SIZE)
        ]
        w2 = [
            [self._derive(2, j, i) for i in range(HIDDEN_SIZE)]
            for j in range(OUTPUT_SIZE)
        ]
        super().__init__(w1, w2)

    def _derive(self, layer, j, i):
        h = hashlib.sha256(f"{self.seed}:{layer}:{j}:{i}".encode()).digest()
        return FR(int.from_bytes(h, "big") % CURVE_ORDER)
