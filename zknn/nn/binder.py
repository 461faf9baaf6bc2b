"""
공개 출력 바인딩 (Instance Binder)
==================================

출력 리전의 셀 10개를 instance 열의 슬롯 0..9에 순서대로 copy constraint로 묶는다.

    output_cells[i]  ==  instance[i]     (i = 0..9)

출력 값 자체는 공개되고, 입력/은닉 값은 advice 열에만 남는다.
"""

import logging

from zknn.nn.params import OUTPUT_SIZE
from zknn.plonkish.errors import SynthesisError

logger = logging.getLogger(__name__)


def bind_outputs(layouter, output_cells, instance_column):
    """출력 셀을 instance 슬롯에 순서대로 바인딩한다.

    Args:
        layouter: 출력 리전을 커밋한 Layouter
        output_cells: AssignedCell 10개 (출력 인덱스 순)
        instance_column: 동등성이 활성화된 instance 열

    Raises:
        SynthesisError: 셀이 10개가 아니거나, 슬롯이 이미 바인딩되었거나,
                        셀 핸들이 무효일 때
    """
    output_cells = list(output_cells)
    if len(output_cells) != OUTPUT_SIZE:
        raise SynthesisError(
            f"출력 셀은 {OUTPUT_SIZE}개여야 합니다: {len(output_cells)}"
        )
    for slot, cell in enumerate(output_cells):
        layouter.constrain_instance(cell.cell, instance_column, slot)
    logger.debug("bound %d output cells to instance slots", len(output_cells))
