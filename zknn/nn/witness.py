"""
Witness: 입력 10개, 은닉 128개, 출력 10개의 값
================================================

증명 시도마다 하나씩 만든다. 길이는 생성 시점에 검사되며 이후 바뀌지 않는다.

  - Witness.from_inputs(params, inputs): 순전파로 은닉/출력 값을 계산
  - Witness.unknown(): 모든 값이 Unknown (회로 모양 추출 전용)

순전파 (필드 위의 행렬-벡터 곱, 활성화 함수 없음):
    hidden[j] = Σ_{i<10}  W1[j][i] · input[i]
    output[j] = Σ_{i<128} W2[j][i] · hidden[i]

사용 예시:
    >>> w = Witness.from_inputs(IdentityParams(), [1] + [0] * 9)
    >>> w.public_outputs()   # [FR(1), FR(0), ..., FR(0)]
"""

from zknn.nn.params import HIDDEN_SIZE, INPUT_SIZE, OUTPUT_SIZE, check_matrix
from zknn.plonkish.errors import ShapeError
from zknn.plonkish.field import FR, to_field
from zknn.plonkish.value import Value


def _as_values(values, size, name):
    values = list(values)
    if len(values) != size:
        raise ShapeError(f"{name} 값은 {size}개여야 합니다: {len(values)}")
    result = []
    for v in values:
        if isinstance(v, Value):
            result.append(v)
        else:
            result.append(Value.known(to_field(v)))
    return tuple(result)


def forward(matrix, vector):
    """행렬-벡터 곱 (Value 벡터). 입력에 Unknown이 있으면 해당 출력도 Unknown.

    Raises:
        ShapeError: 행 길이가 벡터 길이와 다를 때
    """
    result = []
    for j, row in enumerate(matrix):
        if len(row) != len(vector):
            raise ShapeError(
                f"{j}번째 행의 길이 {len(row)}가 벡터 길이 {len(vector)}와 다릅니다"
            )
        acc = Value.known(FR(0))
        for value, weight in zip(vector, row):
            acc = acc + value * weight
        result.append(acc)
    return tuple(result)


class Witness:
    """고정 길이 witness.

    속성:
        inputs: Value 10개
        hidden: Value 128개
        outputs: Value 10개
    """

    def __init__(self, inputs, hidden, outputs):
        self.inputs = _as_values(inputs, INPUT_SIZE, "입력")
        self.hidden = _as_values(hidden, HIDDEN_SIZE, "은닉")
        self.outputs = _as_values(outputs, OUTPUT_SIZE, "출력")

    @classmethod
    def unknown(cls):
        return cls(
            [Value.unknown()] * INPUT_SIZE,
            [Value.unknown()] * HIDDEN_SIZE,
            [Value.unknown()] * OUTPUT_SIZE,
        )

    @classmethod
    def from_inputs(cls, params, inputs):
        """입력과 가중치로 순전파를 수행해 witness를 만든다.

        Raises:
            ShapeError: 입력이 10개가 아니거나 가중치 행렬 크기가 층 너비와 다를 때
        """
        inputs = _as_values(inputs, INPUT_SIZE, "입력")
        w1 = check_matrix(params.layer1_weights(), HIDDEN_SIZE, INPUT_SIZE, "W1")
        w2 = check_matrix(params.layer2_weights(), OUTPUT_SIZE, HIDDEN_SIZE, "W2")
        hidden = forward(w1, inputs)
        outputs = forward(w2, hidden)
        return cls(inputs, hidden, outputs)

    def is_known(self):
        return all(v.is_known() for v in self.inputs + self.hidden + self.outputs)

    def public_outputs(self):
        """instance 열에 들어갈 공개 출력 값 (FR 10개).

        Raises:
            UnknownValueError: 출력 중 Unknown이 있을 때
        """
        return [v.assign() for v in self.outputs]

    def __repr__(self):
        state = "known" if self.is_known() else "partially unknown"
        return f"Witness({state})"
