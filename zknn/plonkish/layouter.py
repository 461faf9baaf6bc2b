"""
리전 기반 레이아웃 (Layouter)
==============================

합성(synthesis) 단계에서 회로 코드는 셀 값을 직접 행 번호에 쓰지 않는다.
대신 "리전(region)" 단위로 할당을 모아서 레이아우터에 넘기고,
레이아우터가 리전의 시작 행을 정한다.

**리전**:
  연속된 행 구간. 리전 안의 위치는 상대 오프셋(offset)으로 표현한다.
  리전 하나가 사용하는 (열, 셀렉터) 레인은 다른 리전과 같은 행에서 겹치지 않는다.

**배치 규칙 (단순 순차 배치)**:
  리전이 사용하는 모든 열/셀렉터 레인이 비어 있는 첫 행에서 시작한다.

    | 리전          | 사용 열       | 시작 행 |
    |---------------|---------------|---------|
    | input_layer   | node 0..9     | 0       |
    | hidden_layer  | node 0..127   | 1       |
    | output_layer  | node 0..9     | 2       |

**원자적 커밋**:
  1. 리전 콜백을 스테이징 Region에 대해 실행 (백엔드는 아직 건드리지 않음)
  2. 배치 → 백엔드 checkpoint
  3. 스테이징된 셀렉터 활성화/셀 할당을 백엔드에 적용
  4. 백엔드가 하나라도 거부하면 checkpoint로 되돌리고 SynthesisError

**백엔드 (Assignment)**:
  MockProver(값 검사용)와 keygen의 Assembly(모양 추출용)가 이 인터페이스를 구현한다.
"""

import logging

from zknn.plonkish.constraint_system import ADVICE, INSTANCE, Column, Selector
from zknn.plonkish.errors import AssignmentError, SynthesisError
from zknn.plonkish.value import Value

logger = logging.getLogger(__name__)


class Assignment:
    """레이아우터가 사용하는 백엔드 인터페이스."""

    def usable_rows(self):
        raise NotImplementedError

    def enter_region(self, name):
        raise NotImplementedError

    def exit_region(self):
        raise NotImplementedError

    def enable_selector(self, annotation, selector, row):
        raise NotImplementedError

    def assign_advice(self, annotation, column, row, value):
        raise NotImplementedError

    def copy(self, left_column, left_row, right_column, right_row):
        raise NotImplementedError

    def checkpoint(self):
        raise NotImplementedError

    def restore(self, checkpoint):
        raise NotImplementedError


class RegionToken:
    """리전 할당 시도 하나를 식별하는 토큰 (객체 동일성으로 비교)."""

    __slots__ = ("name", "index")

    def __init__(self, name, index):
        self.name = name
        self.index = index

    def __repr__(self):
        return f"RegionToken({self.name!r}, {self.index})"


class Cell:
    """리전 안의 셀 위치: (리전 토큰, 상대 행, 열)."""

    __slots__ = ("region", "row_offset", "column")

    def __init__(self, region, row_offset, column):
        self.region = region
        self.row_offset = row_offset
        self.column = column

    def __repr__(self):
        return f"Cell({self.region.name!r}, +{self.row_offset}, {self.column!r})"


class AssignedCell:
    """할당된 셀의 핸들: 값과 위치."""

    __slots__ = ("value", "cell")

    def __init__(self, value, cell):
        self.value = value
        self.cell = cell

    def __repr__(self):
        return f"AssignedCell({self.value!r}, {self.cell!r})"


class RegionLayout:
    """커밋된 리전의 배치 정보.

    속성:
        name: 리전 이름
        start: 시작 행 (절대 행 번호)
        height: 리전이 차지하는 행 수
        columns: 사용한 열 (등장 순서)
        selectors: 활성화한 셀렉터 (등장 순서)
    """

    __slots__ = ("name", "start", "height", "columns", "selectors")

    def __init__(self, name, start, height, columns, selectors):
        self.name = name
        self.start = start
        self.height = height
        self.columns = tuple(columns)
        self.selectors = tuple(selectors)

    @property
    def row_range(self):
        return range(self.start, self.start + self.height)

    def _key(self):
        return (self.name, self.start, self.height, self.columns, self.selectors)

    def __eq__(self, other):
        return isinstance(other, RegionLayout) and self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    def __repr__(self):
        return (
            f"RegionLayout({self.name!r}, rows={self.start}..{self.start + self.height}, "
            f"{len(self.columns)} columns, selectors={list(self.selectors)})"
        )


class Region:
    """리전 콜백에 전달되는 스테이징 영역.

    이 객체에 대한 호출은 기록만 되고, 백엔드에는 리전이 배치된 뒤에 적용된다.
    """

    def __init__(self, name, token):
        self.name = name
        self.token = token
        self.ops = []
        self._cells = set()
        self._columns = []
        self._selectors = []
        self._height = 0

    def enable_selector(self, annotation, selector, offset):
        """offset 행에서 셀렉터를 활성화한다."""
        if not isinstance(selector, Selector):
            raise SynthesisError(f"셀렉터가 아닙니다: {selector!r}", region=self.name)
        self._check_offset(annotation, offset)
        self.ops.append(("selector", annotation, selector, offset))
        if selector not in self._selectors:
            self._selectors.append(selector)
        self._height = max(self._height, offset + 1)

    def assign_advice(self, annotation, column, offset, value):
        """advice 셀에 값을 할당한다.

        Args:
            annotation: 셀 이름 (예: "hidden_layer_node_3")
            column: advice 열
            offset: 리전 내 상대 행
            value: Value (Known 또는 Unknown)

        Returns:
            AssignedCell: 이후 copy constraint에 사용할 셀 핸들

        Raises:
            SynthesisError: advice 열이 아니거나, 같은 셀에 두 번 할당할 때
        """
        if not isinstance(column, Column) or column.kind != ADVICE:
            raise SynthesisError(
                f"'{annotation}': advice 열이 아닙니다: {column!r}", region=self.name
            )
        if not isinstance(value, Value):
            raise SynthesisError(
                f"'{annotation}': Value가 아닌 값입니다: {value!r}", region=self.name
            )
        self._check_offset(annotation, offset)
        if (column, offset) in self._cells:
            raise SynthesisError(
                f"'{annotation}': 셀 {column!r} +{offset}에 이미 값이 할당되었습니다",
                region=self.name,
            )
        self._cells.add((column, offset))
        self.ops.append(("advice", annotation, column, offset, value))
        if column not in self._columns:
            self._columns.append(column)
        self._height = max(self._height, offset + 1)
        return AssignedCell(value, Cell(self.token, offset, column))

    @property
    def height(self):
        return self._height

    @property
    def columns(self):
        return tuple(self._columns)

    @property
    def selectors(self):
        return tuple(self._selectors)

    def _check_offset(self, annotation, offset):
        if not isinstance(offset, int) or offset < 0:
            raise SynthesisError(
                f"'{annotation}': 잘못된 리전 오프셋입니다: {offset!r}", region=self.name
            )


class Layouter:
    """단순 순차 배치 레이아우터.

    속성:
        cs: ConstraintSystem (configure가 끝난 상태)
        backend: Assignment 구현체
    """

    def __init__(self, cs, backend):
        self.cs = cs
        self.backend = backend
        self._regions = []
        self._committed = {}
        self._lanes = {}
        self._bound = {}

    @property
    def regions(self):
        """커밋된 리전의 RegionLayout 목록 (커밋 순서)."""
        return tuple(self._regions)

    def assign_region(self, name, assignment):
        """리전을 하나 할당한다.

        Args:
            name: 리전 이름
            assignment: Region을 받아 할당을 수행하는 함수

        Returns:
            assignment의 반환값

        Raises:
            SynthesisError: 스테이징, 배치, 백엔드 적용 중 하나라도 실패했을 때
        """
        token = RegionToken(name, len(self._regions))
        region = Region(name, token)
        try:
            result = assignment(region)
        except AssignmentError as err:
            raise SynthesisError(f"리전 할당 실패: {err.message}", region=name) from err

        layout = self._place(region)

        checkpoint = self.backend.checkpoint()
        try:
            self.backend.enter_region(name)
            for op in region.ops:
                if op[0] == "selector":
                    _, annotation, selector, offset = op
                    self.backend.enable_selector(annotation, selector, layout.start + offset)
                else:
                    _, annotation, column, offset, value = op
                    self.backend.assign_advice(annotation, column, layout.start + offset, value)
            self.backend.exit_region()
        except AssignmentError as err:
            self.backend.restore(checkpoint)
            raise SynthesisError(f"백엔드가 할당을 거부했습니다: {err.message}", region=name) from err

        self._regions.append(layout)
        self._committed[token] = layout
        for lane in layout.columns + layout.selectors:
            self._lanes[lane] = layout.start + layout.height
        logger.debug(
            "region %r placed at rows %d..%d (%d cells)",
            name, layout.start, layout.start + layout.height, len(region.ops),
        )
        return result

    def constrain_instance(self, cell, instance_column, row):
        """셀 값과 instance 열의 row번째 슬롯이 같아야 한다는 copy constraint.

        Raises:
            SynthesisError: 셀 핸들이 무효이거나, instance 열이 아니거나,
                            동등성이 활성화되지 않았거나, 슬롯이 이미 바인딩되었을 때
        """
        if isinstance(cell, AssignedCell):
            cell = cell.cell
        if not isinstance(cell, Cell) or cell.region not in self._committed:
            raise SynthesisError(f"커밋되지 않은 리전의 셀입니다: {cell!r}")
        if not isinstance(instance_column, Column) or instance_column.kind != INSTANCE:
            raise SynthesisError(f"instance 열이 아닙니다: {instance_column!r}")
        if instance_column not in self.cs.equality_columns:
            raise SynthesisError(f"동등성이 활성화되지 않은 instance 열입니다: {instance_column!r}")
        if (instance_column, row) in self._bound:
            raise SynthesisError(f"instance 슬롯 {row}은(는) 이미 바인딩되었습니다")

        layout = self._committed[cell.region]
        try:
            self.backend.copy(
                cell.column, layout.start + cell.row_offset, instance_column, row
            )
        except AssignmentError as err:
            raise SynthesisError(
                f"instance 슬롯 {row} 바인딩 실패: {err.message}", region=layout.name
            ) from err
        self._bound[(instance_column, row)] = cell
        logger.debug("bound %r to instance slot %d", cell, row)

    def _place(self, region):
        lanes = region.columns + region.selectors
        start = max((self._lanes.get(lane, 0) for lane in lanes), default=0)
        if start + region.height > self.backend.usable_rows():
            raise SynthesisError(
                f"리전이 회로에 들어가지 않습니다: 행 {start}..{start + region.height}, "
                f"사용 가능 {self.backend.usable_rows()}행",
                region=region.name,
            )
        return RegionLayout(region.name, start, region.height, region.columns, region.selectors)
