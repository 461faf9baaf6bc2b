"""
회로 구성/합성 단계의 예외 계층.

  PlonkishError
  ├── ShapeError          (ValueError) 배열 길이, 게이트 arity 등 구성 오류
  ├── AssignmentError     백엔드의 할당 거부 (내부용)
  │   ├── PermutationError
  │   └── UnknownValueError
  ├── SynthesisError      합성 실패 (외부에 노출되는 단일 오류)
  └── VerificationError   MockProver.assert_satisfied 실패
"""


class PlonkishError(Exception):
    """모든 회로 관련 예외의 기반 클래스."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class ShapeError(PlonkishError, ValueError):
    """회로 모양(shape) 오류: 길이 불일치, 게이트 arity 불일치 등.

    프로그래머 오류로 취급하며, 가능한 한 생성 시점에 발생시킨다.
    """


class AssignmentError(PlonkishError):
    """백엔드가 셀렉터 활성화나 셀 할당을 거부했을 때."""


class PermutationError(AssignmentError):
    """copy constraint가 허용되지 않는 셀을 가리킬 때."""


class UnknownValueError(AssignmentError):
    """Unknown 값을 구체적인 필드 원소로 꺼내려 했을 때."""


class SynthesisError(PlonkishError):
    """합성(synthesis) 실패.

    백엔드 오류는 모두 이 예외 하나로 감싸서 전달된다 (원인은 __cause__).
    """

    def __init__(self, message, region=None):
        full_message = message if region is None else f"{message} [region: {region}]"
        super().__init__(full_message)
        self.region = region


class VerificationError(PlonkishError):
    """MockProver 검증에서 위반된 제약이 발견되었을 때."""

    def __init__(self, failures):
        lines = [f"{len(failures)}개의 제약이 만족되지 않았습니다:"]
        lines.extend(f"  - {failure}" for failure in failures)
        super().__init__("\n".join(lines))
        self.failures = list(failures)
