import sys
import os
import pytest

# 프로젝트 루트를 sys.path에 추가
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from zknn.nn.params import IdentityParams, SeededParams

# ── 테스트 상수 ──
TEST_SEED = 1234
IDENTITY_INPUT = [1, 0, 0, 0, 0, 0, 0, 0, 0, 0]

@pytest.fixture(scope="session")
def identity_params():
    """hidden[i] = input[i], output[i] = hidden[i] 가중치."""
    return IdentityParams()

@pytest.fixture(scope="session")
def seeded_params():
    """시드 1234에서 생성한 결정론적 가중치."""
    return SeededParams(TEST_SEED)


@pytest.fixture
def identity_input():
    return list(IDENTITY_INPUT)
