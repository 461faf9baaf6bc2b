"""
게이트 다항식 표현 (Expression)
================================

Plonkish 게이트는 "행(row) 기준" 다항식 항등식의 집합이다.
각 항등식은 현재 행과 그 주변 행(rotation)의 셀 값을 참조하며,
회로의 모든 행에서 0이 되어야 한다.

    s(X) · (c(X) - Σᵢ aᵢ(ω⁻¹·X) · wᵢ) = 0

**노드 종류**:
  | 노드               | 의미                                   |
  |--------------------|----------------------------------------|
  | Constant           | 필드 상수                              |
  | SelectorExpression | 셀렉터 (행마다 0 또는 1)               |
  | AdviceQuery        | advice 열의 (현재 행 + rotation) 값    |
  | InstanceQuery      | instance 열의 (현재 행 + rotation) 값  |
  | Negated            | -e                                     |
  | Sum                | a + b                                  |
  | Product            | a · b                                  |
  | Scaled             | e · k (k는 상수)                       |

연산자 오버로딩(+, -, *)으로 표현식을 조립한다.

사용 예시:
    >>> a = AdviceQuery(column, Rotation.prev())
    >>> c = AdviceQuery(column, Rotation.cur())
    >>> s = SelectorExpression(selector)
    >>> poly = s * (c - a * FR(3))
    >>> poly.degree()   # 2
"""

from zknn.plonkish.errors import ShapeError
from zknn.plonkish.field import FR, to_field


class Rotation:
    """현재 행 기준의 상대 행 오프셋."""

    __slots__ = ("offset",)

    def __init__(self, offset):
        self.offset = int(offset)

    @classmethod
    def cur(cls):
        return cls(0)

    @classmethod
    def prev(cls):
        return cls(-1)

    @classmethod
    def next(cls):
        return cls(1)

    def __eq__(self, other):
        return isinstance(other, Rotation) and self.offset == other.offset

    def __hash__(self):
        return hash(("rotation", self.offset))

    def __repr__(self):
        return f"Rotation({self.offset})"


def _lift(value):
    """상수(int, FR)를 Constant 노드로 감싼다."""
    if isinstance(value, Expression):
        return value
    return Constant(to_field(value))


class Expression:
    """다항식 표현식 노드의 기반 클래스."""

    def children(self):
        return ()

    def evaluate(self, resolver):
        """행 하나에서 표현식 값을 계산한다.

        Args:
            resolver: selector(sel), advice(column, rotation),
                      instance(column, rotation) 메서드를 가진 객체

        Returns:
            FR: 표현식 값
        """
        raise NotImplementedError

    def degree(self):
        raise NotImplementedError

    def identifier(self):
        """구조 비교용 정규 문자열."""
        raise NotImplementedError

    def walk(self):
        """모든 하위 노드를 순회한다 (전위 순회, 비재귀)."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children()))

    def queried_selectors(self):
        """표현식이 참조하는 셀렉터 목록 (중복 제거, 등장 순서)."""
        found = []
        for node in self.walk():
            if isinstance(node, SelectorExpression) and node.selector not in found:
                found.append(node.selector)
        return found

    def queried_cells(self):
        """표현식이 참조하는 (열, rotation) 목록 (중복 제거, 등장 순서)."""
        found = []
        seen = set()
        for node in self.walk():
            if isinstance(node, (AdviceQuery, InstanceQuery)):
                key = (node.column, node.rotation)
                if key not in seen:
                    seen.add(key)
                    found.append(key)
        return found

    def __add__(self, other):
        return Sum(self, _lift(other))

    def __radd__(self, other):
        return Sum(_lift(other), self)

    def __sub__(self, other):
        return Sum(self, Negated(_lift(other)))

    def __rsub__(self, other):
        return Sum(_lift(other), Negated(self))

    def __neg__(self):
        return Negated(self)

    def __mul__(self, other):
        if isinstance(other, Expression):
            return Product(self, other)
        return Scaled(self, to_field(other))

    def __rmul__(self, other):
        return Scaled(self, to_field(other))

    def __repr__(self):
        return f"Expression({self.identifier()})"


# ─────────────────────────────────────────────────────────────────────
# 말단 노드 (leaf)
# ─────────────────────────────────────────────────────────────────────

class Constant(Expression):
    def __init__(self, value):
        self.value = to_field(value)

    def evaluate(self, resolver):
        return self.value

    def degree(self):
        return 0

    def identifier(self):
        return str(int(self.value))


class SelectorExpression(Expression):
    def __init__(self, selector):
        self.selector = selector

    def evaluate(self, resolver):
        return resolver.selector(self.selector)

    def degree(self):
        return 1

    def identifier(self):
        return f"S{self.selector.index}"


class AdviceQuery(Expression):
    def __init__(self, column, rotation):
        self.column = column
        self.rotation = rotation

    def evaluate(self, resolver):
        return resolver.advice(self.column, self.rotation)

    def degree(self):
        return 1

    def identifier(self):
        return f"A{self.column.index}@{self.rotation.offset}"


class InstanceQuery(Expression):
    def __init__(self, column, rotation):
        self.column = column
        self.rotation = rotation

    def evaluate(self, resolver):
        return resolver.instance(self.column, self.rotation)

    def degree(self):
        return 1

    def identifier(self):
        return f"I{self.column.index}@{self.rotation.offset}"


# ─────────────────────────────────────────────────────────────────────
# 내부 노드
# ─────────────────────────────────────────────────────────────────────

class Negated(Expression):
    def __init__(self, inner):
        self.inner = inner

    def children(self):
        return (self.inner,)

    def evaluate(self, resolver):
        return FR(0) - self.inner.evaluate(resolver)

    def degree(self):
        return self.inner.degree()

    def identifier(self):
        return f"(-{self.inner.identifier()})"


class Sum(Expression):
    def __init__(self, left, right):
        self.left = left
        self.right = right

    def children(self):
        return (self.left, self.right)

    def evaluate(self, resolver):
        return self.left.evaluate(resolver) + self.right.evaluate(resolver)

    def degree(self):
        return max(self.left.degree(), self.right.degree())

    def identifier(self):
        return f"({self.left.identifier()}+{self.right.identifier()})"


class Product(Expression):
    def __init__(self, left, right):
        self.left = left
        self.right = right

    def children(self):
        return (self.left, self.right)

    def evaluate(self, resolver):
        return self.left.evaluate(resolver) * self.right.evaluate(resolver)

    def degree(self):
        return self.left.degree() + self.right.degree()

    def identifier(self):
        return f"({self.left.identifier()}*{self.right.identifier()})"


class Scaled(Expression):
    def __init__(self, inner, scalar):
        self.inner = inner
        self.scalar = to_field(scalar)

    def children(self):
        return (self.inner,)

    def evaluate(self, resolver):
        return self.inner.evaluate(resolver) * self.scalar

    def degree(self):
        return self.inner.degree()

    def identifier(self):
        return f"({self.inner.identifier()}*{int(self.scalar)})"


def linear_combination(terms, coefficients):
    """선형 결합 Σᵢ termᵢ · coeffᵢ 표현식을 만든다.

    계수가 0인 항도 생략하지 않는다. 가중치가 달라도 회로 구조는
    동일하게 유지된다.

    Args:
        terms: Expression 리스트
        coefficients: FR 원소(또는 정수) 리스트, terms와 같은 길이

    Returns:
        Expression

    Raises:
        ShapeError: 길이가 다를 때
    """
    if len(terms) != len(coefficients):
        raise ShapeError(
            f"항의 수({len(terms)})와 계수의 수({len(coefficients)})가 다릅니다"
        )
    if not terms:
        return Constant(FR(0))
    result = terms[0] * coefficients[0]
    for term, coeff in zip(terms[1:], coefficients[1:]):
        result = result + term * coeff
    return result
