"""
Conversions between MonthCounter, QuarterCounter and the standard library's date and datetime, the promotion rule
used when they are compared or subtracted, calendar adjusters and inclusive counter ranges.
"""
import calendar
from datetime import date, datetime
from typing import Iterator

from month_counter import MonthCounter
from period_errors import UnsupportedOperationError
from periods import Months, Quarters, Years
from quarter_counter import QuarterCounter

# Coarsest to finest. Mixed operands are converted to the finer of the two types.
PROMOTION_ORDER = (QuarterCounter, MonthCounter, date, datetime)


def to_quarter_counter(value) -> QuarterCounter:
    """
    Quarter containing a month counter or date. Which month of the quarter it was is lost.
    """
    if isinstance(value, QuarterCounter):
        return value
    if isinstance(value, MonthCounter):
        return QuarterCounter.from_offset((value.offset - 1) // 3 + 1)
    if isinstance(value, date):
        return QuarterCounter.from_date(value)
    raise TypeError(f'Cannot convert {type(value).__name__} to QuarterCounter')


def to_month_counter(value) -> MonthCounter:
    """
    Month counter for a quarter counter (its first month) or the month containing a date
    """
    if isinstance(value, MonthCounter):
        return value
    if isinstance(value, QuarterCounter):
        return MonthCounter.from_offset((value.offset - 1) * 3 + 1)
    if isinstance(value, date):
        return MonthCounter.from_date(value)
    raise TypeError(f'Cannot convert {type(value).__name__} to MonthCounter')


def _first_year_month(value) -> tuple[int, int]:
    return to_month_counter(value).year_month()


def to_date(value) -> date:
    """
    First day of a counter. Limited to the years datetime supports (1 to 9999).
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (MonthCounter, QuarterCounter)):
        return date(*_first_year_month(value), 1)
    raise TypeError(f'Cannot convert {type(value).__name__} to date')


def to_datetime(value) -> datetime:
    """
    Midnight on the first day of a counter
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, (MonthCounter, QuarterCounter)):
        return datetime(*_first_year_month(value), 1)
    raise TypeError(f'Cannot convert {type(value).__name__} to datetime')


_CONVERTERS = {
    QuarterCounter: to_quarter_counter,
    MonthCounter: to_month_counter,
    date: to_date,
    datetime: to_datetime,
}


def _rank(cls: type) -> int:
    # Check the finest types first since datetime is a subclass of date
    for rank in reversed(range(len(PROMOTION_ORDER))):
        if issubclass(cls, PROMOTION_ORDER[rank]):
            return rank
    raise TypeError(f'{cls.__name__} is not a date or counter type')


def promote_type(a: type, b: type) -> type:
    return PROMOTION_ORDER[max(_rank(a), _rank(b))]


def promote(a, b) -> tuple:
    """
    Convert a and b to their common type: a counter is widened to the other operand's type when that is finer,
    never narrowed. QuarterCounter with MonthCounter gives two MonthCounters; either counter with a date gives two
    dates.
    """
    target = promote_type(type(a), type(b))
    convert = _CONVERTERS[target]
    return convert(a), convert(b)


# adjusters

def first_day_of_month(counter: MonthCounter) -> date:
    if not isinstance(counter, MonthCounter):
        raise UnsupportedOperationError(f'{type(counter).__name__} has no month')
    return to_date(counter)


def last_day_of_month(counter: MonthCounter) -> date:
    if not isinstance(counter, MonthCounter):
        raise UnsupportedOperationError(f'{type(counter).__name__} has no month')
    year, month = counter.year_month()
    return date(year, month, calendar.monthrange(year, month)[1])


def first_day_of_quarter(counter: MonthCounter | QuarterCounter) -> date:
    return to_date(to_quarter_counter(counter))


def last_day_of_quarter(counter: MonthCounter | QuarterCounter) -> date:
    last_month = to_month_counter(to_quarter_counter(counter)) + 2
    return last_day_of_month(last_month)


# ranges

def counter_range(start: MonthCounter | QuarterCounter, stop: MonthCounter | QuarterCounter,
                  step: int | Months | Quarters | Years | None = None) -> Iterator:
    """
    Counters from start to stop inclusive, step apart. The step defaults to one unit of the counter type and may be
    negative; nothing is produced when stop cannot be reached from start.

    >>> [str(m) for m in counter_range(MonthCounter(2020, 11), MonthCounter(2021, 2))]
    ['2020-11', '2020-12', '2021-01', '2021-02']
    """
    if not isinstance(start, (MonthCounter, QuarterCounter)) or type(stop) is not type(start):
        raise TypeError('start and stop must be counters of the same type')
    cls = type(start)
    if step is None:
        step = cls.eps()
    count = cls.steps_between(start, stop, step)
    for i in range(count + 1):
        yield start + step * i
