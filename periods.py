"""
Whole-unit period amounts used for counter arithmetic and as the units of the
date_format directive registry.
"""
from typing import Self


class Period:
    # Number of months in one unit, or None when the unit is not month-based
    MONTHS: int | None = None

    def __init__(self, value: int = 1):
        if not isinstance(value, int):
            raise TypeError(f'{type(self).__name__} value must be an int')
        self._value = value

    @property
    def value(self) -> int:
        return self._value

    def in_months(self) -> int:
        """
        Return the length of this period as a number of months
        """
        if self.MONTHS is None:
            raise TypeError(f'{type(self).__name__} cannot be expressed in months')
        return self._value * self.MONTHS

    def in_quarters(self) -> int:
        """
        Return the length of this period as a number of quarters. Only years and quarters qualify; months do not
        divide evenly into quarters.
        """
        if self.MONTHS is None or self.MONTHS % 3 != 0:
            raise TypeError(f'{type(self).__name__} cannot be expressed in quarters')
        return self._value * (self.MONTHS // 3)

    def _check_same_type(self, other) -> bool:
        return type(other) is type(self)

    def __eq__(self, other) -> bool:
        if not self._check_same_type(other):
            return NotImplemented
        return self._value == other._value

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._value))

    def __lt__(self, other: Self) -> bool:
        if not self._check_same_type(other):
            return NotImplemented
        return self._value < other._value

    def __le__(self, other: Self) -> bool:
        if not self._check_same_type(other):
            return NotImplemented
        return self._value <= other._value

    def __gt__(self, other: Self) -> bool:
        if not self._check_same_type(other):
            return NotImplemented
        return self._value > other._value

    def __ge__(self, other: Self) -> bool:
        if not self._check_same_type(other):
            return NotImplemented
        return self._value >= other._value

    def __add__(self, other: Self) -> Self:
        if not self._check_same_type(other):
            return NotImplemented
        return type(self)(self._value + other._value)

    def __sub__(self, other: Self) -> Self:
        if not self._check_same_type(other):
            return NotImplemented
        return type(self)(self._value - other._value)

    def __mul__(self, other: int) -> Self:
        if not isinstance(other, int):
            return NotImplemented
        return type(self)(self._value * other)

    __rmul__ = __mul__

    def __neg__(self) -> Self:
        return type(self)(-self._value)

    def __bool__(self) -> bool:
        return self._value != 0

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self._value})'


class Years(Period):
    MONTHS = 12


class Quarters(Period):
    MONTHS = 3


class Months(Period):
    MONTHS = 1


class Days(Period):
    pass
