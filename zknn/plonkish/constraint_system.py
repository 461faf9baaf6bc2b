"""
Plonkish 제약 시스템 (Constraint System)
==========================================

회로의 "모양(shape)"을 정의한다: 열(column), 셀렉터(selector), 게이트(gate).

**열(Column)**:
  회로의 행 전체에 걸친 저장 공간.
  - advice 열: Prover가 채우는 비공개 witness 값
  - instance 열: Prover와 Verifier가 모두 아는 공개 값

**셀렉터(Selector)**:
  행마다 0 또는 1인 불리언 플래그. 게이트 다항식에 곱해져서
  셀렉터가 1인 행에서만 게이트가 실제로 제약을 건다.

**게이트(Gate)**:
  이름이 붙은 다항식 항등식 목록. 모든 행에서 0이 되어야 한다.

    | 게이트 이름 | 항등식                                  |
    |-------------|-----------------------------------------|
    | "double"    | s · (a[cur] - 2 · a[prev]) = 0          |

**동등성(Equality)**:
  copy constraint에 참여할 수 있는 열은 enable_equality로 미리 등록해야 한다.
  (순열 인자의 대상 열)

사용 예시:
    >>> meta = ConstraintSystem()
    >>> a = meta.advice_column()
    >>> s = meta.selector()
    >>> meta.create_gate("double", lambda cells: [
    ...     cells.query_selector(s)
    ...     * (cells.query_advice(a, Rotation.cur())
    ...        - cells.query_advice(a, Rotation.prev()) * FR(2))
    ... ])
"""

from zknn.plonkish.errors import ShapeError
from zknn.plonkish.expression import (
    AdviceQuery,
    Expression,
    InstanceQuery,
    SelectorExpression,
)


ADVICE = "advice"
INSTANCE = "instance"


class Column:
    """회로 열: (종류, 인덱스)."""

    __slots__ = ("kind", "index")

    def __init__(self, kind, index):
        self.kind = kind
        self.index = index

    def __eq__(self, other):
        return (
            isinstance(other, Column)
            and self.kind == other.kind
            and self.index == other.index
        )

    def __hash__(self):
        return hash((self.kind, self.index))

    def __repr__(self):
        return f"Column({self.kind}, {self.index})"


class Selector:
    """행 단위 불리언 플래그."""

    __slots__ = ("index",)

    def __init__(self, index):
        self.index = index

    def enable(self, region, offset):
        """리전의 offset 행에서 이 셀렉터를 활성화한다."""
        region.enable_selector(f"S{self.index}", self, offset)

    def __eq__(self, other):
        return isinstance(other, Selector) and self.index == other.index

    def __hash__(self):
        return hash(("selector", self.index))

    def __repr__(self):
        return f"Selector({self.index})"


class Gate:
    """이름이 붙은 다항식 항등식 목록.

    속성:
        name: 게이트 이름
        polys: Expression 리스트 (각각이 하나의 항등식)
        queried_selectors: 게이트가 참조하는 셀렉터
        queried_cells: 게이트가 참조하는 (열, rotation)
    """

    def __init__(self, name, polys):
        self.name = name
        self.polys = list(polys)
        self.queried_selectors = []
        self.queried_cells = []
        seen = set()
        for poly in self.polys:
            for selector in poly.queried_selectors():
                if selector not in self.queried_selectors:
                    self.queried_selectors.append(selector)
            for cell in poly.queried_cells():
                if cell not in seen:
                    seen.add(cell)
                    self.queried_cells.append(cell)

    def constraint_name(self, index):
        return f"{self.name}[{index}]"

    def degree(self):
        return max(poly.degree() for poly in self.polys)

    def __repr__(self):
        return f"Gate({self.name!r}, {len(self.polys)} constraints)"


class VirtualCells:
    """create_gate 콜백에 전달되는 쿼리 컨텍스트."""

    def __init__(self, meta):
        self.meta = meta

    def query_selector(self, selector):
        self.meta._check_selector(selector)
        return SelectorExpression(selector)

    def query_advice(self, column, rotation):
        self.meta._check_column(column, ADVICE)
        return AdviceQuery(column, rotation)

    def query_instance(self, column, rotation):
        self.meta._check_column(column, INSTANCE)
        return InstanceQuery(column, rotation)


class ConstraintSystem:
    """회로 모양: 열, 셀렉터, 게이트, 동등성 열.

    configure 단계에서 한 번 채워지고, 이후에는 읽기 전용으로 사용된다.
    """

    def __init__(self):
        self.advice_columns = []
        self.instance_columns = []
        self.selectors = []
        self.gates = []
        self.equality_columns = []

    @property
    def num_advice_columns(self):
        return len(self.advice_columns)

    @property
    def num_instance_columns(self):
        return len(self.instance_columns)

    @property
    def num_selectors(self):
        return len(self.selectors)

    def advice_column(self):
        """advice 열을 새로 할당한다."""
        column = Column(ADVICE, len(self.advice_columns))
        self.advice_columns.append(column)
        return column

    def instance_column(self):
        """instance 열을 새로 할당한다."""
        column = Column(INSTANCE, len(self.instance_columns))
        self.instance_columns.append(column)
        return column

    def selector(self):
        """셀렉터를 새로 할당한다."""
        selector = Selector(len(self.selectors))
        self.selectors.append(selector)
        return selector

    def enable_equality(self, column):
        """열을 순열 인자(copy constraint) 대상에 포함시킨다."""
        self._check_column(column, getattr(column, "kind", None))
        if column not in self.equality_columns:
            self.equality_columns.append(column)

    def create_gate(self, name, constraints):
        """게이트를 등록한다.

        Args:
            name: 게이트 이름
            constraints: VirtualCells → Expression 리스트 함수

        Returns:
            Gate: 등록된 게이트

        Raises:
            ShapeError: 항등식이 없거나 Expression이 아닌 값이 섞여 있을 때
        """
        polys = list(constraints(VirtualCells(self)))
        if not polys:
            raise ShapeError(f"게이트 '{name}'에 항등식이 없습니다")
        for i, poly in enumerate(polys):
            if not isinstance(poly, Expression):
                raise ShapeError(
                    f"게이트 '{name}'의 {i}번째 항등식이 Expression이 아닙니다: {poly!r}"
                )
        gate = Gate(name, polys)
        self.gates.append(gate)
        return gate

    def degree(self):
        """가장 높은 게이트 차수."""
        if not self.gates:
            return 0
        return max(gate.degree() for gate in self.gates)

    def pinned(self):
        """회로 모양을 비교 가능한 튜플로 고정한다.

        같은 가중치로 구성한 두 회로는 항상 같은 pinned 값을 가진다.
        """
        return (
            ("advice", len(self.advice_columns)),
            ("instance", len(self.instance_columns)),
            ("selectors", len(self.selectors)),
            ("equality", tuple((c.kind, c.index) for c in self.equality_columns)),
            ("gates", tuple(
                (gate.name, tuple(poly.identifier() for poly in gate.polys))
                for gate in self.gates
            )),
        )

    def _check_column(self, column, kind):
        registry = self.advice_columns if kind == ADVICE else self.instance_columns
        if (
            not isinstance(column, Column)
            or column.kind != kind
            or not 0 <= column.index < len(registry)
        ):
            raise ShapeError(f"등록되지 않은 {kind} 열입니다: {column!r}")

    def _check_selector(self, selector):
        if not isinstance(selector, Selector) or not 0 <= selector.index < len(self.selectors):
            raise ShapeError(f"등록되지 않은 셀렉터입니다: {selector!r}")


class Circuit:
    """회로 인터페이스.

    하위 클래스는 다음 세 메서드를 구현한다:
      - without_witnesses(): 같은 모양, 모든 witness 값이 Unknown인 회로
      - configure(meta): ConstraintSystem에 열/셀렉터/게이트를 등록하고 config 반환
      - synthesize(config, layouter): 리전을 할당하고 공개 입력을 바인딩
    """

    def without_witnesses(self):
        raise NotImplementedError

    def configure(self, meta):
        raise NotImplementedError

    def synthesize(self, config, layouter):
        raise NotImplementedError
