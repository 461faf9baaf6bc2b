"""
순열 검사용 챌린지 생성기
==========================

MockProver의 Grand Product 검사에 쓰이는 β, γ를 동등성 열의 셀 값에서 도출한다.
셀 값이 하나라도 바뀌면 β, γ도 바뀌므로, 값을 맞춰서 z_n = 1을 우연히
만족시킬 수 없다.

  - 레이블은 길이를 앞에 붙여 흡수한다: b"ab"+b"c"와 b"a"+b"bc"는 다른 입력
  - 스칼라는 32바이트 빅엔디안
  - 챌린지 다이제스트는 다시 흡수된다 (β 다음의 γ는 β에 의존)

사용 예시:
    >>> t = Transcript()
    >>> t.append_scalars(b"cell", column_values)
    >>> beta = t.challenge_scalar(b"beta")
"""

import hashlib

from zknn.plonkish.field import FR, CURVE_ORDER


class Transcript:
    """SHA-256 누적 해시 위의 챌린지 생성기."""

    def __init__(self, label=b"zknn-permutation"):
        self._hasher = hashlib.sha256()
        self._absorb_label(label)

    def _absorb_label(self, label):
        self._hasher.update(len(label).to_bytes(4, "big"))
        self._hasher.update(label)

    def append_scalar(self, label, scalar):
        self._absorb_label(label)
        self._hasher.update((int(scalar) % CURVE_ORDER).to_bytes(32, "big"))

    def append_scalars(self, label, scalars):
        """스칼라 여러 개를 같은 레이블로 차례로 흡수한다."""
        for scalar in scalars:
            self.append_scalar(label, scalar)

    def challenge_scalar(self, label):
        """지금까지 흡수한 내용으로 FR 챌린지를 만든다.

        Returns:
            FR: 챌린지 스칼라 (mod 곡선 위수)
        """
        self._absorb_label(label)
        digest = self._hasher.copy().digest()
        self._hasher.update(digest)
        return FR(int.from_bytes(digest, "big") % CURVE_ORDER)
