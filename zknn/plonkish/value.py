"""
Witness 값 표현: Known(FR) | Unknown
====================================

키 생성(key generation)처럼 회로 모양만 필요한 경우에는 실제 witness 없이
합성(synthesis)을 수행한다. 이때 모든 셀 값은 Unknown이다.

Value 연산은 Unknown을 그대로 전파하며, Unknown에 대해 산술 연산을
실제로 수행하지 않는다.

사용 예시:
    >>> a = Value.known(FR(3))
    >>> (a * FR(2) + FR(1)).assign()   # FR(7)
    >>> (Value.unknown() * FR(2)).is_known()  # False
"""

from zknn.plonkish.errors import UnknownValueError


class Value:
    """알 수도 있고 모를 수도 있는 witness 값."""

    __slots__ = ("_inner", "_known")

    def __init__(self, inner, known):
        self._inner = inner
        self._known = known

    @classmethod
    def known(cls, inner):
        return cls(inner, True)

    @classmethod
    def unknown(cls):
        return cls(None, False)

    def is_known(self):
        return self._known

    def map(self, fn):
        """Known이면 fn을 적용하고, Unknown이면 그대로 Unknown을 반환한다."""
        if not self._known:
            return Value.unknown()
        return Value.known(fn(self._inner))

    def zip(self, other):
        """두 값이 모두 Known일 때만 (a, b) 튜플을 담은 Known을 반환한다."""
        if not (self._known and other._known):
            return Value.unknown()
        return Value.known((self._inner, other._inner))

    def assign(self):
        """내부 값을 꺼낸다.

        Raises:
            UnknownValueError: 값이 Unknown인 경우
        """
        if not self._known:
            raise UnknownValueError("Unknown 값은 할당할 수 없습니다")
        return self._inner

    def __add__(self, other):
        if isinstance(other, Value):
            return self.zip(other).map(lambda pair: pair[0] + pair[1])
        return self.map(lambda inner: inner + other)

    def __radd__(self, other):
        return self.map(lambda inner: other + inner)

    def __mul__(self, other):
        if isinstance(other, Value):
            return self.zip(other).map(lambda pair: pair[0] * pair[1])
        return self.map(lambda inner: inner * other)

    def __rmul__(self, other):
        return self.map(lambda inner: other * inner)

    def __eq__(self, other):
        if not isinstance(other, Value):
            return NotImplemented
        if self._known != other._known:
            return False
        return not self._known or self._inner == other._inner

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    __hash__ = None

    def __repr__(self):
        if not self._known:
            return "Value(unknown)"
        return f"Value({self._inner!r})"
