from __future__ import annotations

from typing import ClassVar

I32_MIN = -(2**31)
I32_MAX = 2**31 - 1
U32_MAX = 2**32 - 1


def _truncating_div(numerator: int, denominator: int) -> int:
    quotient = abs(numerator) // abs(denominator)
    return -quotient if (numerator < 0) != (denominator < 0) else quotient


class BoundedInt(int):
    """Integer newtype with a fixed range; arithmetic stays inside its own type.

    Two different ``BoundedInt`` subclasses never mix, so ``X(1) + Y(1)`` raises
    ``TypeError`` while ``X(1) + 1`` is ``X(2)``.
    """

    __slots__ = ()

    MIN: ClassVar[int] = I32_MIN
    MAX: ClassVar[int] = I32_MAX

    def __new__(cls, value: int = 0) -> "BoundedInt":
        if isinstance(value, BoundedInt) and not isinstance(value, cls):
            raise TypeError(f"cannot convert {type(value).__name__} to {cls.__name__}")
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"{cls.__name__} requires an integer, got {type(value).__name__}")
        if value < cls.MIN or value > cls.MAX:
            raise OverflowError(f"{cls.__name__} out of range: {int(value)}")
        return super().__new__(cls, value)

    def _operand(self, other: object) -> int | None:
        if isinstance(other, BoundedInt) and type(other) is not type(self):
            raise TypeError(f"cannot combine {type(self).__name__} with {type(other).__name__}")
        if isinstance(other, bool) or not isinstance(other, int):
            return None
        return int(other)

    def __add__(self, other: object):  # type: ignore[override]
        value = self._operand(other)
        if value is None:
            return NotImplemented
        return type(self)(int(self) + value)

    __radd__ = __add__

    def __sub__(self, other: object):  # type: ignore[override]
        value = self._operand(other)
        if value is None:
            return NotImplemented
        return type(self)(int(self) - value)

    def __rsub__(self, other: object):  # type: ignore[override]
        value = self._operand(other)
        if value is None:
            return NotImplemented
        return type(self)(value - int(self))

    def __mul__(self, other: object):  # type: ignore[override]
        value = self._operand(other)
        if value is None:
            return NotImplemented
        return type(self)(int(self) * value)

    __rmul__ = __mul__

    def __truediv__(self, other: object):  # type: ignore[override]
        # integer division rounding toward zero
        value = self._operand(other)
        if value is None:
            return NotImplemented
        return type(self)(_truncating_div(int(self), value))

    def __floordiv__(self, other: object):  # type: ignore[override]
        value = self._operand(other)
        if value is None:
            return NotImplemented
        return type(self)(int(self) // value)

    def __neg__(self):  # type: ignore[override]
        return type(self)(-int(self))

    def __abs__(self):  # type: ignore[override]
        return type(self)(abs(int(self)))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({int(self)})"

    def __str__(self) -> str:
        return str(int(self))
