import calendar
import operator
from datetime import date, datetime
from typing import Callable, Self

import date_format
from date_format import DEFAULT_LOCALE, DateFormat
from period_errors import ParseError, RangeError
from periods import Days, Months, Quarters, Years

MONTH_PATTERN = 'yyyy-mm'
MONTH_FORMAT = DateFormat(MONTH_PATTERN)

# Offset of January 1970, month zero of the epoch month numbering
UNIX_EPOCH_OFFSET = 12 * (1970 - 1) + 1


def _register_quarter_format():
    # Month patterns may use the quarter field "q"
    from quarter_counter import register_quarter_format
    register_quarter_format()


class MonthCounter:
    """
    A month of the proleptic Gregorian calendar, held as a count of months: offset 1 is January of year 1, offset 0
    is December of year 0, and so on in both directions. Year and month are only worked out when asked for.
    """
    __slots__ = ('_offset',)

    @classmethod
    def _check_year(cls, year):
        if isinstance(year, bool) or not isinstance(year, int):
            raise TypeError('year must be an int')

    @classmethod
    def _check_month(cls, month):
        if isinstance(month, bool) or not isinstance(month, int):
            raise TypeError('month must be an int')
        if not 1 <= month <= 12:
            raise RangeError(f'Month: {month} out of range (1:12)')

    def __init__(self, year: int | Years, month: int | Months = 1):
        if isinstance(year, Years):
            year = year.value
        if isinstance(month, Months):
            month = month.value
        self._check_year(year)
        self._check_month(month)
        self._offset = 12 * (year - 1) + month

    @classmethod
    def from_offset(cls, offset: int) -> Self:
        if isinstance(offset, bool) or not isinstance(offset, int):
            raise TypeError('offset must be an int')
        counter = object.__new__(cls)
        counter._offset = offset
        return counter

    @classmethod
    def from_date(cls, value: date) -> Self:
        """
        Month containing a date or datetime; the day and time of day are dropped
        """
        if not isinstance(value, date):
            raise TypeError('value must be a date or datetime')
        return cls(value.year, value.month)

    @classmethod
    def from_months(cls, months: Months) -> Self:
        return cls.from_offset(months.value)

    @classmethod
    def from_epoch_month(cls, epoch_month: int) -> Self:
        """
        Convert a zero-based count of months since January 1970
        """
        if isinstance(epoch_month, bool) or not isinstance(epoch_month, int):
            raise TypeError('epoch_month must be an int')
        return cls.from_offset(epoch_month + UNIX_EPOCH_OFFSET)

    @classmethod
    def eps(cls) -> Months:
        return Months(1)

    @classmethod
    def zero(cls) -> Months:
        return Months(0)

    @property
    def offset(self) -> int:
        return self._offset

    def to_period(self) -> Months:
        return Months(self._offset)

    def to_epoch_month(self) -> int:
        return self._offset - UNIX_EPOCH_OFFSET

    # accessors

    def year_month(self) -> tuple[int, int]:
        year, month = divmod(self._offset - 1, 12)
        return year + 1, month + 1

    def year(self) -> int:
        return 1 + (self._offset - 1) // 12

    def month(self) -> int:
        return 1 + (self._offset - 1) % 12

    def quarter_of_year(self) -> int:
        return 1 + (self.month() - 1) // 3

    def date_components(self) -> dict[type, int]:
        year, month = self.year_month()
        return {Years: year, Quarters: 1 + (month - 1) // 3, Months: month}

    # truncation

    def truncate_to_year(self) -> Self:
        return type(self)(self.year(), 1)

    def truncate_to_quarter(self) -> Self:
        return type(self)(self.year(), 1 + 3 * (self.quarter_of_year() - 1))

    def truncate_to_month(self) -> Self:
        return self

    def truncate(self, unit: type) -> Self:
        if unit is Years:
            return self.truncate_to_year()
        if unit is Quarters:
            return self.truncate_to_quarter()
        if unit is Months:
            return self.truncate_to_month()
        raise TypeError(f'Cannot truncate a MonthCounter to {getattr(unit, "__name__", unit)}')

    # arithmetic

    @staticmethod
    def _months_in(amount) -> int | None:
        if isinstance(amount, int):
            return amount
        if isinstance(amount, (Months, Quarters, Years)):
            return amount.in_months()
        return None

    def add(self, amount: int | Months | Quarters | Years) -> Self:
        months = self._months_in(amount)
        if months is None:
            raise TypeError(f'Cannot add {type(amount).__name__} to MonthCounter')
        return self.from_offset(self._offset + months)

    def subtract(self, amount: int | Months | Quarters | Years) -> Self:
        months = self._months_in(amount)
        if months is None:
            raise TypeError(f'Cannot subtract {type(amount).__name__} from MonthCounter')
        return self.from_offset(self._offset - months)

    def __add__(self, other):
        months = self._months_in(other)
        if months is None:
            return NotImplemented
        return self.from_offset(self._offset + months)

    __radd__ = __add__

    def __sub__(self, other):
        if isinstance(other, MonthCounter):
            return Months(self._offset - other._offset)
        months = self._months_in(other)
        if months is not None:
            return self.from_offset(self._offset - months)
        from period_conversions import promote
        try:
            a, b = promote(self, other)
        except TypeError:
            return NotImplemented
        return a - b

    def __rsub__(self, other):
        from period_conversions import promote
        try:
            a, b = promote(other, self)
        except TypeError:
            return NotImplemented
        return a - b

    @classmethod
    def steps_between(cls, a: Self, b: Self, step: int | Months | Quarters | Years) -> int:
        """
        Number of whole steps of the given size from a to b, rounded towards minus infinity. Used to size ranges of
        counters, see period_conversions.counter_range.
        """
        months = cls._months_in(step)
        if months is None:
            raise TypeError(f'Cannot step a MonthCounter by {type(step).__name__}')
        if months == 0:
            raise ValueError('step must not be zero')
        return (b._offset - a._offset) // months

    # comparison

    def _compare(self, other, op: Callable) -> bool:
        if isinstance(other, MonthCounter):
            return op(self._offset, other._offset)
        if isinstance(other, datetime) and op in (operator.eq, operator.ne):
            # A counter hashes like a date, and a date never equals a datetime
            return NotImplemented
        from period_conversions import promote
        try:
            a, b = promote(self, other)
        except TypeError:
            return NotImplemented
        return op(a, b)

    def __eq__(self, other) -> bool:
        return self._compare(other, operator.eq)

    def __ne__(self, other) -> bool:
        return self._compare(other, operator.ne)

    def __gt__(self, other) -> bool:
        return self._compare(other, operator.gt)

    def __lt__(self, other) -> bool:
        return self._compare(other, operator.lt)

    def __ge__(self, other) -> bool:
        return self._compare(other, operator.ge)

    def __le__(self, other) -> bool:
        return self._compare(other, operator.le)

    def __hash__(self) -> int:
        # Same hash as the first day of the month, which compares equal
        year, month = self.year_month()
        try:
            return hash(date(year, month, 1))
        except (ValueError, OverflowError):
            return hash((year, month))

    # parse and format

    @classmethod
    def parse(cls, text: str, pattern: str | DateFormat = MONTH_FORMAT, locale: str = DEFAULT_LOCALE) -> Self:
        """
        Parse text such as "2021-07". Any pattern is accepted; a day field is checked against the month and then
        dropped, and a quarter field with no month field selects the first month of the quarter.
        """
        _register_quarter_format()
        components = date_format.as_format(pattern, locale).parse_components(text)
        defaults = date_format.CONVERSION_DEFAULTS
        year = components.get(Years, defaults[Years])
        if Months not in components and Quarters in components:
            month = 1 + 3 * (components[Quarters] - 1)
        else:
            month = components.get(Months, defaults[Months])
        counter = cls(year, month)
        if Days in components:
            day = components[Days]
            if not 1 <= day <= calendar.monthrange(year, month)[1]:
                raise ParseError(f'Day {day} out of range for {counter} in "{text}"')
        return counter

    @classmethod
    def tryparse(cls, text: str, pattern: str | DateFormat = MONTH_FORMAT,
                 locale: str = DEFAULT_LOCALE) -> Self | None:
        try:
            return cls.parse(text, pattern, locale)
        except (ParseError, RangeError):
            return None

    def format(self, pattern: str | DateFormat = MONTH_FORMAT, locale: str = DEFAULT_LOCALE) -> str:
        _register_quarter_format()
        return date_format.format_value(self, pattern, locale)

    def __format__(self, format_spec: str) -> str:
        if not format_spec:
            return str(self)
        return self.format(format_spec)

    def __str__(self) -> str:
        year, month = self.year_month()
        yy = f'{year:05d}' if year < 0 else f'{year:04d}'
        return f'{yy}-{month:02d}'

    def __repr__(self) -> str:
        return f'MonthCounter("{self}")'

    @classmethod
    def plot_recipe(cls) -> tuple[Callable[[Self], int], Callable[[float], str]]:
        """
        Axis value and tick label functions: counters plot at their offset, ticks are labelled "YYYY-MM"
        """
        return operator.attrgetter('offset'), lambda x: str(cls.from_offset(round(x)))
