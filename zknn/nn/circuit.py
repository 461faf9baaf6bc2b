"""
10 → 128 → 10 신경망 회로
==========================

순전파를 Plonkish 회로로 표현한다. 열 128개("node")를 세 리전이 함께 쓰고,
각 리전은 한 행을 차지한다.

**리전 배치**:
  | 행 | 리전         | 셀렉터 | node 열  | 값          |
  |----|--------------|--------|----------|-------------|
  | 0  | input_layer  | S0     | 0..9     | 입력 10개   |
  | 1  | hidden_layer | S1     | 0..127   | 은닉 128개  |
  | 2  | output_layer | S2     | 0..9     | 출력 10개   |

**게이트** (각 층은 바로 윗 행의 값을 rotation -1로 읽는다):
  hidden_layer (S1), j = 0..127:
      S1 · (node_j[cur] - Σ_{i<10}  node_i[prev] · W1[j][i]) = 0
  output_layer (S2), j = 0..9:
      S2 · (node_j[cur] - Σ_{i<128} node_i[prev] · W2[j][i]) = 0

  S0에는 게이트가 없다. 입력은 자유로운 비공개 값이다.

**공개 출력**:
  출력 셀 10개 ↔ instance 슬롯 0..9 (copy constraint).
  node 열 0..9와 instance 열은 동등성(equality)이 활성화된다.

사용 예시:
    >>> params = IdentityParams()
    >>> witness = Witness.from_inputs(params, [1] + [0] * 9)
    >>> circuit = NeuralNetwork(params, witness)
    >>> prover = MockProver.run(circuit.minimum_k(), circuit, [witness.public_outputs()])
    >>> prover.verify()   # []
"""

from zknn.nn.binder import bind_outputs
from zknn.nn.params import HIDDEN_SIZE, INPUT_SIZE, OUTPUT_SIZE, check_matrix
from zknn.nn.witness import Witness
from zknn.plonkish import utils
from zknn.plonkish.constraint_system import Circuit
from zknn.plonkish.errors import ShapeError, SynthesisError
from zknn.plonkish.expression import Rotation, linear_combination


# 세 리전이 공유하는 advice 열 수 (가장 넓은 층)
NUM_NODE_COLUMNS = max(INPUT_SIZE, HIDDEN_SIZE, OUTPUT_SIZE)

# (리전 이름, 셀렉터 인덱스, 사용하는 node 열 수)
LAYER_REGIONS = (
    ("input_layer", 0, INPUT_SIZE),
    ("hidden_layer", 1, HIDDEN_SIZE),
    ("output_layer", 2, OUTPUT_SIZE),
)


class NeuralNetworkConfig:
    """configure 결과: 회로가 사용하는 열과 셀렉터.

    속성:
        nodes: node advice 열 128개
        selectors: 층마다 셀렉터 하나 (LAYER_REGIONS 순서)
        instance: 공개 출력 instance 열
    """

    def __init__(self, nodes, selectors, instance):
        self.nodes = tuple(nodes)
        self.selectors = tuple(selectors)
        self.instance = instance


def _layer_constraints(cells, selector, nodes, weights):
    s = cells.query_selector(selector)
    previous = [cells.query_advice(nodes[i], Rotation.prev()) for i in range(len(weights[0]))]
    return [
        s * (cells.query_advice(nodes[j], Rotation.cur()) - linear_combination(previous, row))
        for j, row in enumerate(weights)
    ]


class NeuralNetwork(Circuit):
    """가중치가 고정된 신경망 회로.

    Args:
        params: 가중치 제공자 (Params)
        witness: Witness (None이면 모든 값이 Unknown)
    """

    def __init__(self, params, witness=None):
        self.params = params
        self.witness = Witness.unknown() if witness is None else witness

    def without_witnesses(self):
        return NeuralNetwork(self.params)

    @staticmethod
    def minimum_k():
        """리전 행 수와 instance 슬롯 수를 모두 담는 최소 k."""
        return utils.minimum_k(max(len(LAYER_REGIONS), OUTPUT_SIZE))

    def configure(self, meta):
        """열, 셀렉터, 게이트를 등록한다.

        Raises:
            ShapeError: 가중치 행렬 크기가 층 너비와 맞지 않을 때
        """
        try:
            w1 = check_matrix(self.params.layer1_weights(), HIDDEN_SIZE, INPUT_SIZE, "W1")
            w2 = check_matrix(self.params.layer2_weights(), OUTPUT_SIZE, HIDDEN_SIZE, "W2")
        except ShapeError as err:
            raise ShapeError(f"게이트 arity 불일치: {err.message}") from err

        nodes = [meta.advice_column() for _ in range(NUM_NODE_COLUMNS)]
        selectors = [meta.selector() for _ in LAYER_REGIONS]
        instance = meta.instance_column()

        for column in nodes[:OUTPUT_SIZE]:
            meta.enable_equality(column)
        meta.enable_equality(instance)

        meta.create_gate(
            "hidden_layer",
            lambda cells: _layer_constraints(cells, selectors[1], nodes, w1),
        )
        meta.create_gate(
            "output_layer",
            lambda cells: _layer_constraints(cells, selectors[2], nodes, w2),
        )
        return NeuralNetworkConfig(nodes, selectors, instance)

    def synthesize(self, config, layouter):
        """세 리전을 할당하고 출력을 instance 슬롯에 바인딩한다.

        Returns:
            list[AssignedCell]: 출력 셀 10개

        Raises:
            SynthesisError: 할당 거부, 리전이 인접하지 않음, 바인딩 실패
        """
        # node 0..9 = 입력
        self._assign_layer(layouter, config, 0, self.witness.inputs)
        # node 0..127 = 은닉, 윗 행(입력)에서 계산
        self._assign_layer(layouter, config, 1, self.witness.hidden)
        # node 0..9 = 출력, 윗 행(은닉)에서 계산
        outputs = self._assign_layer(layouter, config, 2, self.witness.outputs)

        layouts = layouter.regions[-len(LAYER_REGIONS):]
        for above, below in zip(layouts, layouts[1:]):
            if below.start != above.start + above.height:
                raise SynthesisError(
                    f"리전 '{below.name}'(행 {below.start})이 "
                    f"'{above.name}'(행 {above.start}) 바로 아래에 있지 않습니다",
                    region=below.name,
                )

        bind_outputs(layouter, outputs, config.instance)
        return outputs

    def _assign_layer(self, layouter, config, layer, values):
        name, selector_index, width = LAYER_REGIONS[layer]
        if len(values) != width:
            raise SynthesisError(f"값 {len(values)}개, 열 {width}개", region=name)

        def assign(region):
            config.selectors[selector_index].enable(region, 0)
            return [
                region.assign_advice(f"{name}_node_{i}", config.nodes[i], 0, value)
                for i, value in enumerate(values)
            ]

        return layouter.assign_region(name, assign)
