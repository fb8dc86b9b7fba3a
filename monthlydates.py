import argparse
import logging
import os
import re
import sys

from dotenv import load_dotenv

from date_format import DEFAULT_LOCALE
from month_counter import MONTH_PATTERN, MonthCounter
from period_conversions import counter_range, to_date, to_month_counter, to_quarter_counter
from period_errors import PeriodError
from periods import Months, Quarters, Years
from quarter_counter import QUARTER_PATTERN, QuarterCounter, register_quarter_format

logger = logging.getLogger(__name__)

# Environment variables, also read from .env
MONTH_FORMAT_VARIABLE = 'MONTHLYDATES_MONTH_FORMAT'
QUARTER_FORMAT_VARIABLE = 'MONTHLYDATES_QUARTER_FORMAT'
LOCALE_VARIABLE = 'MONTHLYDATES_LOCALE'

DEFAULT_LOG_LEVEL = 'WARNING'

# Steps are written as a count and a unit: 1m, 3m, 2q, 1y, -1q
STEP_PATTERN = re.compile(r'^(-?\d+)([mqy])$', re.IGNORECASE)
STEP_UNITS = {'m': Months, 'q': Quarters, 'y': Years}


def check_step(value):
    error_format = "%s is an invalid step; use a non-zero whole number followed by m, q or y, e.g. 3m or 1q."
    match = STEP_PATTERN.match(value)
    if not match:
        raise argparse.ArgumentTypeError(error_format % value)
    count, unit = match.groups()
    if int(count) == 0:
        raise argparse.ArgumentTypeError(error_format % value)
    return STEP_UNITS[unit.lower()](int(count))


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(description='Parse, convert and list month and quarter counters.')

    parser.add_argument('--log', type=str, nargs='?', default=DEFAULT_LOG_LEVEL)
    parser.add_argument('--quarterly', action='store_true',
                        help='Read quarters (e.g. 2021-Q3) rather than months (e.g. 2021-07)')
    parser.add_argument('--pattern', type=str,
                        help=f'Input pattern. Defaults to ${MONTH_FORMAT_VARIABLE} or "{MONTH_PATTERN}" for months, '
                             f'${QUARTER_FORMAT_VARIABLE} or "{QUARTER_PATTERN}" for quarters.')
    parser.add_argument('--locale', type=str,
                        help=f'Locale for month names. Defaults to ${LOCALE_VARIABLE} or "{DEFAULT_LOCALE}".')

    subparsers = parser.add_subparsers(dest='command', required=True)

    parse_parser = subparsers.add_parser('parse', help='Parse a counter and print it')
    parse_parser.add_argument('text', type=str)
    parse_parser.add_argument('--output-pattern', type=str, help='Print using this pattern instead of canonically')

    convert_parser = subparsers.add_parser('convert', help='Convert a counter to another granularity')
    convert_parser.add_argument('text', type=str)
    convert_parser.add_argument('--to', choices=['month', 'quarter', 'date'], required=True)

    range_parser = subparsers.add_parser('range', help='List counters from start to stop, inclusive')
    range_parser.add_argument('start', type=str)
    range_parser.add_argument('stop', type=str)
    range_parser.add_argument('--step', type=check_step,
                              help='Step between counters, e.g. 1m, 2q or 1y. Defaults to one month or quarter.')

    return parser.parse_args(argv)


def read_counter(text: str, quarterly: bool, pattern: str | None, locale: str):
    if quarterly:
        pattern = pattern or os.environ.get(QUARTER_FORMAT_VARIABLE) or QUARTER_PATTERN
        return QuarterCounter.parse(text, pattern, locale)
    pattern = pattern or os.environ.get(MONTH_FORMAT_VARIABLE) or MONTH_PATTERN
    return MonthCounter.parse(text, pattern, locale)


def run(args):
    locale = args.locale or os.environ.get(LOCALE_VARIABLE) or DEFAULT_LOCALE

    if args.command == 'parse':
        counter = read_counter(args.text, args.quarterly, args.pattern, locale)
        logger.info(f'Parsed "{args.text}" as {counter!r} (offset {counter.offset})')
        print(counter.format(args.output_pattern, locale) if args.output_pattern else counter)

    elif args.command == 'convert':
        counter = read_counter(args.text, args.quarterly, args.pattern, locale)
        if args.to == 'month':
            print(to_month_counter(counter))
        elif args.to == 'quarter':
            print(to_quarter_counter(counter))
        else:
            print(to_date(counter).isoformat())

    elif args.command == 'range':
        start = read_counter(args.start, args.quarterly, args.pattern, locale)
        stop = read_counter(args.stop, args.quarterly, args.pattern, locale)
        if args.quarterly and isinstance(args.step, Months):
            logger.error('Quarter ranges cannot step by months')
            sys.exit(1)
        for counter in counter_range(start, stop, args.step):
            print(counter)


def main(argv=None):
    args = parse_arguments(argv)

    # Check that the supplied log level is valid
    log_level = getattr(logging, args.log.upper(), None)
    if not isinstance(log_level, int):
        raise ValueError('Invalid log level: %s' % args.log)

    # Basic logging setup - log to stderr with the supplied log level
    logging.basicConfig()
    logger.setLevel(level=log_level)

    # Default patterns and locale may come from a .env file
    load_dotenv(override=True)

    register_quarter_format()

    try:
        run(args)
    except PeriodError as e:
        logger.error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
