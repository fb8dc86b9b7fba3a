"""
A small date pattern language in the style of "yyyy-mm-dd".

A run of one repeated directive character is a single field whose width is the
length of the run ("yyyy", "mm", "q"). Any other character is a literal
delimiter, and a backslash turns the following character into a literal. Which
characters are directives is decided by the registry below, so other modules
can add directives of their own (see quarter_counter.register_quarter_format).

The registry has three tables:

CONVERSION_SPECIFIERS     directive character -> unit (a periods.Period subclass)
CONVERSION_DEFAULTS       unit -> value used when a pattern has no field for it
CONVERSION_TRANSLATIONS   type -> units passed, in order, to the type's constructor
"""
import logging
import threading
from datetime import date, datetime
from functools import lru_cache
from typing import Callable

from period_errors import ParseError, PeriodError, UnsupportedOperationError
from periods import Days, Months, Years

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = 'english'
DEFAULT_DATE_PATTERN = 'yyyy-mm-dd'


class DateLocale:
    def __init__(self, months, months_abbr):
        self.months = tuple(months)
        self.months_abbr = tuple(months_abbr)
        if len(self.months) != 12 or len(self.months_abbr) != 12:
            raise ValueError('a locale needs exactly 12 month names and 12 abbreviations')

    def __repr__(self) -> str:
        return f'DateLocale({self.months_abbr})'


LOCALES: dict[str, DateLocale] = {
    DEFAULT_LOCALE: DateLocale(
        ('January', 'February', 'March', 'April', 'May', 'June',
         'July', 'August', 'September', 'October', 'November', 'December'),
        ('Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun', 'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec'),
    ),
}


def register_locale(name: str, months, months_abbr):
    LOCALES[name] = DateLocale(months, months_abbr)
    logger.debug(f'Registered locale {name}')


def get_locale(name: str) -> DateLocale:
    try:
        return LOCALES[name]
    except KeyError:
        raise ValueError(f'Unknown locale: {name}') from None


class DatePart:
    """
    One directive field of a pattern. Fixed-width parts are those directly next to another directive, as in
    "yyyymm", where the field width is the only way to tell the fields apart.
    """
    def __init__(self, char: str, width: int, fixed: bool = False):
        self.char = char
        self.width = width
        self.fixed = fixed

    def __eq__(self, other) -> bool:
        if not isinstance(other, DatePart):
            return NotImplemented
        return (self.char, self.width, self.fixed) == (other.char, other.width, other.fixed)

    def __repr__(self) -> str:
        return f'DatePart({self.char!r}, {self.width}, fixed={self.fixed})'


class Delim:
    def __init__(self, text: str):
        self.text = text

    def __eq__(self, other) -> bool:
        if not isinstance(other, Delim):
            return NotImplemented
        return self.text == other.text

    def __repr__(self) -> str:
        return f'Delim({self.text!r})'


# Parsers take (part, text, position, locale) and return (value, new position), or None on no match.
# Formatters take (part, value, locale) and return the field text.
Parser = Callable[[DatePart, str, int, DateLocale], tuple[int, int] | None]
Formatter = Callable[[DatePart, int, DateLocale], str]


def parse_number(text: str, pos: int, min_width: int, max_width: int = 0,
                 signed: bool = False) -> tuple[int, int] | None:
    """
    Read a base 10 integer of at least min_width digits starting at pos. max_width == 0 means no upper limit.
    """
    start = pos
    if signed and pos < len(text) and text[pos] == '-':
        pos += 1
    digits_start = pos
    end = len(text) if max_width == 0 else min(len(text), digits_start + max_width)
    while pos < end and '0' <= text[pos] <= '9':
        pos += 1
    if pos - digits_start < max(min_width, 1):
        return None
    return int(text[start:pos]), pos


def parse_digits(part: DatePart, text: str, pos: int, locale: DateLocale) -> tuple[int, int] | None:
    if part.fixed:
        return parse_number(text, pos, part.width, part.width)
    return parse_number(text, pos, 1)


def parse_signed_digits(part: DatePart, text: str, pos: int, locale: DateLocale) -> tuple[int, int] | None:
    if part.fixed:
        return parse_number(text, pos, part.width, part.width, signed=True)
    return parse_number(text, pos, 1, signed=True)


def format_digits(part: DatePart, value: int, locale: DateLocale) -> str:
    # The sign does not count towards the width: -5 in "yyyy" is "-0005"
    width = part.width + 1 if value < 0 else part.width
    return f'{value:0{width}d}'


def _match_name(names, text: str, pos: int) -> tuple[int, int] | None:
    # Longest first so that "June" wins over "Jun"
    candidates = sorted(enumerate(names, start=1), key=lambda item: len(item[1]), reverse=True)
    for value, name in candidates:
        if text[pos:pos + len(name)].lower() == name.lower():
            return value, pos + len(name)
    return None


def parse_month_abbr(part: DatePart, text: str, pos: int, locale: DateLocale) -> tuple[int, int] | None:
    return _match_name(locale.months_abbr, text, pos)


def parse_month_name(part: DatePart, text: str, pos: int, locale: DateLocale) -> tuple[int, int] | None:
    return _match_name(locale.months, text, pos)


def format_month_abbr(part: DatePart, value: int, locale: DateLocale) -> str:
    return locale.months_abbr[value - 1]


def format_month_name(part: DatePart, value: int, locale: DateLocale) -> str:
    return locale.months[value - 1]


CONVERSION_SPECIFIERS: dict[str, type] = {}
CONVERSION_DEFAULTS: dict[type, int] = {}
CONVERSION_TRANSLATIONS: dict[type, tuple[type, ...]] = {}
DIRECTIVE_PARSERS: dict[str, Parser] = {}
DIRECTIVE_FORMATTERS: dict[str, Formatter] = {}

_registry_lock = threading.RLock()


def register_directive(char: str, unit: type, default: int | None = None,
                       parser: Parser = parse_digits, formatter: Formatter = format_digits):
    """
    Make char a directive for unit. Patterns compiled from strings after this call treat char as a field;
    DateFormat objects compiled earlier keep treating it as a literal.
    """
    if len(char) != 1 or not char.isalpha():
        raise ValueError(f'Directive must be a single letter, got {char!r}')
    with _registry_lock:
        CONVERSION_SPECIFIERS[char] = unit
        if default is not None:
            CONVERSION_DEFAULTS[unit] = default
        DIRECTIVE_PARSERS[char] = parser
        DIRECTIVE_FORMATTERS[char] = formatter
        compile_format.cache_clear()
    logger.debug(f'Registered directive "{char}" for {unit.__name__}')


def register_translation(cls: type, units):
    with _registry_lock:
        CONVERSION_TRANSLATIONS[cls] = tuple(units)
    logger.debug(f'Registered translation {cls.__name__} -> {", ".join(unit.__name__ for unit in units)}')


def tokenize(pattern: str) -> tuple[DatePart | Delim, ...]:
    tokens = []
    literal = []

    def flush():
        if literal:
            tokens.append(Delim(''.join(literal)))
            literal.clear()

    i = 0
    while i < len(pattern):
        char = pattern[i]
        if char == '\\' and i + 1 < len(pattern):
            literal.append(pattern[i + 1])
            i += 2
        elif char in CONVERSION_SPECIFIERS:
            flush()
            j = i
            while j < len(pattern) and pattern[j] == char:
                j += 1
            tokens.append(DatePart(char, j - i))
            i = j
        else:
            literal.append(char)
            i += 1
    flush()

    for k, token in enumerate(tokens):
        if isinstance(token, DatePart):
            before = k > 0 and isinstance(tokens[k - 1], DatePart)
            after = k + 1 < len(tokens) and isinstance(tokens[k + 1], DatePart)
            token.fixed = before or after
    return tuple(tokens)


def date_components(value) -> dict[type, int]:
    """
    Return the unit -> value mapping a value can be formatted from. Dates supply year, month and day; other types
    provide a date_components() method.
    """
    if isinstance(value, date):
        return {Years: value.year, Months: value.month, Days: value.day}
    components = getattr(value, 'date_components', None)
    if components is None:
        raise TypeError(f'Cannot format a {type(value).__name__}')
    return components()


class DateFormat:
    def __init__(self, pattern: str, locale: str = DEFAULT_LOCALE):
        self.pattern = pattern
        self.locale = locale
        self._locale = get_locale(locale)
        self.tokens = tokenize(pattern)

    @property
    def directives(self) -> tuple[str, ...]:
        return tuple(token.char for token in self.tokens if isinstance(token, DatePart))

    def has_directive(self, char: str) -> bool:
        return char in self.directives

    def parse_components(self, text: str) -> dict[type, int]:
        """
        Parse text into a unit -> value mapping holding only the units the pattern has fields for
        """
        if not isinstance(text, str):
            raise TypeError('text must be a str')
        pos = 0
        values = {}
        for token in self.tokens:
            if isinstance(token, Delim):
                if not text.startswith(token.text, pos):
                    raise ParseError(f'Expected "{token.text}" at position {pos + 1} of "{text}" '
                                     f'(format "{self.pattern}")')
                pos += len(token.text)
            else:
                parsed = DIRECTIVE_PARSERS[token.char](token, text, pos, self._locale)
                if parsed is None:
                    raise ParseError(f'Cannot read "{token.char * token.width}" at position {pos + 1} of "{text}" '
                                     f'(format "{self.pattern}")')
                value, pos = parsed
                values[CONVERSION_SPECIFIERS[token.char]] = value
        if pos != len(text):
            raise ParseError(f'Unexpected trailing text "{text[pos:]}" in "{text}" (format "{self.pattern}")')
        return values

    def tryparse_components(self, text: str) -> dict[type, int] | None:
        try:
            return self.parse_components(text)
        except ParseError:
            return None

    def format(self, value) -> str:
        components = date_components(value)
        out = []
        for token in self.tokens:
            if isinstance(token, Delim):
                out.append(token.text)
                continue
            unit = CONVERSION_SPECIFIERS[token.char]
            if unit not in components:
                raise UnsupportedOperationError(
                    f'{type(value).__name__} has no {unit.__name__.lower()} for directive "{token.char}"')
            out.append(DIRECTIVE_FORMATTERS[token.char](token, components[unit], self._locale))
        return ''.join(out)

    def __eq__(self, other) -> bool:
        if not isinstance(other, DateFormat):
            return NotImplemented
        return self.pattern == other.pattern and self.locale == other.locale

    def __hash__(self) -> int:
        return hash((self.pattern, self.locale))

    def __repr__(self) -> str:
        return f'DateFormat("{self.pattern}")'


@lru_cache(maxsize=128)
def compile_format(pattern: str, locale: str = DEFAULT_LOCALE) -> DateFormat:
    return DateFormat(pattern, locale)


def as_format(pattern: str | DateFormat, locale: str = DEFAULT_LOCALE) -> DateFormat:
    if isinstance(pattern, DateFormat):
        return pattern
    if not isinstance(pattern, str):
        raise TypeError('pattern must be a str or a DateFormat')
    return compile_format(pattern, locale)


def build(cls: type, components: dict[type, int]):
    """
    Construct cls from parsed components, filling units the pattern did not mention with their defaults
    """
    try:
        units = CONVERSION_TRANSLATIONS[cls]
    except KeyError:
        raise TypeError(f'No translation registered for {cls.__name__}') from None
    return cls(*(components.get(unit, CONVERSION_DEFAULTS[unit]) for unit in units))


def parse(cls: type, text: str, pattern: str | DateFormat, locale: str = DEFAULT_LOCALE):
    return build(cls, as_format(pattern, locale).parse_components(text))


def parse_date(text: str, pattern: str | DateFormat = DEFAULT_DATE_PATTERN, locale: str = DEFAULT_LOCALE) -> date:
    try:
        return parse(date, text, pattern, locale)
    except PeriodError:
        raise
    except (ValueError, OverflowError) as e:
        # Fields parsed but do not make a valid date, e.g. 2021-02-30 or a year too large for date
        raise ParseError(f'Invalid date "{text}": {e}') from e


def tryparse_date(text: str, pattern: str | DateFormat = DEFAULT_DATE_PATTERN,
                  locale: str = DEFAULT_LOCALE) -> date | None:
    try:
        return parse_date(text, pattern, locale)
    except ParseError:
        return None


def format_value(value, pattern: str | DateFormat, locale: str = DEFAULT_LOCALE) -> str:
    return as_format(pattern, locale).format(value)


register_directive('y', Years, 1, parse_signed_digits)
register_directive('m', Months, 1)
register_directive('u', Months, 1, parse_month_abbr, format_month_abbr)
register_directive('U', Months, 1, parse_month_name, format_month_name)
register_directive('d', Days, 1)
register_translation(date, (Years, Months, Days))
register_translation(datetime, (Years, Months, Days))
