class PeriodError(Exception):
    """Base class for errors raised by the month and quarter counters."""


class RangeError(PeriodError, ValueError):
    """A month or quarter is outside its valid range."""


class ParseError(PeriodError, ValueError):
    """Text does not match the pattern it is parsed with."""


class UnsupportedOperationError(PeriodError, TypeError):
    """The value has no meaningful answer for the requested attribute."""
