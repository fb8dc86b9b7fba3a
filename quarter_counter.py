import logging
import operator
import threading
from datetime import date, datetime
from typing import Callable, Self

import date_format
from date_format import DEFAULT_LOCALE, DateFormat, DateLocale, DatePart
from period_errors import ParseError, RangeError, UnsupportedOperationError
from periods import Months, Quarters, Years

logger = logging.getLogger(__name__)

QUARTER_PATTERN = 'yyyy-Qq'
QUARTER_DIRECTIVE = 'q'

_registered = False
_registration_lock = threading.Lock()


def parse_quarter(part: DatePart, text: str, pos: int, locale: DateLocale) -> tuple[int, int] | None:
    # Always exactly one digit, whatever the field width
    return date_format.parse_number(text, pos, 1, 1)


def format_quarter(part: DatePart, value: int, locale: DateLocale) -> str:
    return str(value)


def register_quarter_format():
    """
    Add the quarter-of-year directive "q" to the date_format registry, with a default of quarter 1, and register
    how QuarterCounter is built from parsed fields. Call once at startup; further calls do nothing. QuarterCounter
    also calls this before it parses or formats anything.
    """
    global _registered
    with _registration_lock:
        if _registered:
            return
        date_format.register_directive(QUARTER_DIRECTIVE, Quarters, 1, parse_quarter, format_quarter)
        date_format.register_translation(QuarterCounter, (Years, Quarters))
        _registered = True
    logger.debug('Quarter format registered')


def quarter_format() -> DateFormat:
    """
    The default "yyyy-Qq" format. It can only be compiled once the "q" directive exists.
    """
    register_quarter_format()
    return date_format.compile_format(QUARTER_PATTERN)


class QuarterCounter:
    """
    A quarter of the proleptic Gregorian calendar, held as a count of quarters: offset 1 is the first quarter of
    year 1. A quarter has no single month, so month() is not supported.
    """
    __slots__ = ('_offset',)

    @classmethod
    def _check_year(cls, year):
        if isinstance(year, bool) or not isinstance(year, int):
            raise TypeError('year must be an int')

    @classmethod
    def _check_quarter(cls, quarter):
        if isinstance(quarter, bool) or not isinstance(quarter, int):
            raise TypeError('quarter must be an int')
        if not 1 <= quarter <= 4:
            raise RangeError(f'Quarter: {quarter} out of range (1:4)')

    def __init__(self, year: int | Years, quarter: int | Quarters = 1):
        if isinstance(year, Years):
            year = year.value
        if isinstance(quarter, Quarters):
            quarter = quarter.value
        self._check_year(year)
        self._check_quarter(quarter)
        self._offset = 4 * (year - 1) + quarter

    @classmethod
    def from_offset(cls, offset: int) -> Self:
        if isinstance(offset, bool) or not isinstance(offset, int):
            raise TypeError('offset must be an int')
        counter = object.__new__(cls)
        counter._offset = offset
        return counter

    @classmethod
    def from_date(cls, value: date) -> Self:
        if not isinstance(value, date):
            raise TypeError('value must be a date or datetime')
        return cls(value.year, 1 + (value.month - 1) // 3)

    @classmethod
    def from_quarters(cls, quarters: Quarters) -> Self:
        return cls.from_offset(quarters.value)

    @classmethod
    def eps(cls) -> Quarters:
        return Quarters(1)

    @classmethod
    def zero(cls) -> Quarters:
        return Quarters(0)

    @property
    def offset(self) -> int:
        return self._offset

    def to_period(self) -> Quarters:
        return Quarters(self._offset)

    # accessors

    def year_quarter(self) -> tuple[int, int]:
        year, quarter = divmod(self._offset - 1, 4)
        return year + 1, quarter + 1

    def year(self) -> int:
        return 1 + (self._offset - 1) // 4

    def quarter_of_year(self) -> int:
        return 1 + (self._offset - 1) % 4

    quarter = quarter_of_year

    def month(self) -> int:
        raise UnsupportedOperationError('A QuarterCounter has no month; convert it to a MonthCounter first')

    def date_components(self) -> dict[type, int]:
        year, quarter = self.year_quarter()
        return {Years: year, Quarters: quarter}

    # truncation

    def truncate_to_year(self) -> Self:
        return type(self)(self.year(), 1)

    def truncate_to_quarter(self) -> Self:
        return self

    def truncate(self, unit: type) -> Self:
        if unit is Years:
            return self.truncate_to_year()
        if unit is Quarters:
            return self.truncate_to_quarter()
        if unit is Months:
            raise UnsupportedOperationError('A QuarterCounter cannot be truncated to a month')
        raise TypeError(f'Cannot truncate a QuarterCounter to {getattr(unit, "__name__", unit)}')

    # arithmetic

    @staticmethod
    def _quarters_in(amount) -> int | None:
        if isinstance(amount, int):
            return amount
        if isinstance(amount, (Quarters, Years)):
            return amount.in_quarters()
        return None

    def add(self, amount: int | Quarters | Years) -> Self:
        quarters = self._quarters_in(amount)
        if quarters is None:
            raise TypeError(f'Cannot add {type(amount).__name__} to QuarterCounter')
        return self.from_offset(self._offset + quarters)

    def subtract(self, amount: int | Quarters | Years) -> Self:
        quarters = self._quarters_in(amount)
        if quarters is None:
            raise TypeError(f'Cannot subtract {type(amount).__name__} from QuarterCounter')
        return self.from_offset(self._offset - quarters)

    def __add__(self, other):
        quarters = self._quarters_in(other)
        if quarters is None:
            return NotImplemented
        return self.from_offset(self._offset + quarters)

    __radd__ = __add__

    def __sub__(self, other):
        if isinstance(other, QuarterCounter):
            return Quarters(self._offset - other._offset)
        quarters = self._quarters_in(other)
        if quarters is not None:
            return self.from_offset(self._offset - quarters)
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
    def steps_between(cls, a: Self, b: Self, step: int | Quarters | Years) -> int:
        quarters = cls._quarters_in(step)
        if quarters is None:
            raise TypeError(f'Cannot step a QuarterCounter by {type(step).__name__}')
        if quarters == 0:
            raise ValueError('step must not be zero')
        return (b._offset - a._offset) // quarters

    # comparison

    def _compare(self, other, op: Callable) -> bool:
        if isinstance(other, QuarterCounter):
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
        # Same hash as the first day of the quarter, which compares equal
        year, quarter = self.year_quarter()
        month = 1 + 3 * (quarter - 1)
        try:
            return hash(date(year, month, 1))
        except (ValueError, OverflowError):
            return hash((year, month))

    # parse and format

    @classmethod
    def parse(cls, text: str, pattern: str | DateFormat | None = None, locale: str = DEFAULT_LOCALE) -> Self:
        """
        Parse text such as "2021-Q3". A pattern with a "q" field is parsed field by field; any other pattern is
        parsed as a date and the quarter containing that date is returned, so "2021-08-15" with "yyyy-mm-dd" gives
        2021-Q3.
        """
        register_quarter_format()
        df = quarter_format() if pattern is None else date_format.as_format(pattern, locale)
        if df.has_directive(QUARTER_DIRECTIVE):
            return date_format.parse(cls, text, df)
        logger.debug(f'Format "{df.pattern}" has no quarter field; parsing "{text}" as a date')
        return cls.from_date(date_format.parse_date(text, df))

    @classmethod
    def tryparse(cls, text: str, pattern: str | DateFormat | None = None,
                 locale: str = DEFAULT_LOCALE) -> Self | None:
        try:
            return cls.parse(text, pattern, locale)
        except (ParseError, RangeError):
            return None

    def format(self, pattern: str | DateFormat | None = None, locale: str = DEFAULT_LOCALE) -> str:
        register_quarter_format()
        df = quarter_format() if pattern is None else date_format.as_format(pattern, locale)
        return df.format(self)

    def __format__(self, format_spec: str) -> str:
        if not format_spec:
            return str(self)
        return self.format(format_spec)

    def __str__(self) -> str:
        year, quarter = self.year_quarter()
        yy = f'{year:05d}' if year < 0 else f'{year:04d}'
        return f'{yy}-Q{quarter}'

    def __repr__(self) -> str:
        return f'QuarterCounter("{self}")'

    @classmethod
    def plot_recipe(cls) -> tuple[Callable[[Self], int], Callable[[float], str]]:
        return operator.attrgetter('offset'), lambda x: str(cls.from_offset(round(x)))
