import threading
import unittest
from datetime import date, datetime
from unittest import mock

import date_format
import quarter_counter
from date_format import DateFormat
from month_counter import MonthCounter
from period_errors import ParseError, RangeError, UnsupportedOperationError
from periods import Months, Quarters, Years
from quarter_counter import QuarterCounter, quarter_format, register_quarter_format


class TestQuarterCounter(unittest.TestCase):

    def test_creation(self):
        qc = QuarterCounter(2021, 3)
        self.assertEqual(qc.offset, 8083)
        self.assertEqual(qc.year(), 2021)
        self.assertEqual(qc.quarter_of_year(), 3)
        self.assertEqual(qc.quarter(), 3)
        self.assertEqual(qc.year_quarter(), (2021, 3))

        self.assertEqual(QuarterCounter(1, 1).offset, 1)
        self.assertEqual(QuarterCounter(2021), QuarterCounter(2021, 1))
        self.assertEqual(QuarterCounter(Years(2021), Quarters(3)), qc)

        with self.assertRaises(RangeError):
            qc_bad = QuarterCounter(2021, 0)  # noqa

        with self.assertRaises(RangeError):
            qc_bad = QuarterCounter(2021, 5)  # noqa

        with self.assertRaises(TypeError):
            qc_bad = QuarterCounter('2021', 1)  # noqa

        with self.assertRaises(TypeError):
            qc_bad = QuarterCounter(2021, '1')  # noqa

        with self.assertRaises(TypeError):
            qc_bad = QuarterCounter(2021, True)  # noqa

        with self.assertRaises(TypeError):
            qc_bad = QuarterCounter.from_offset(True)  # noqa

    def test_year_and_quarter_round_trip(self):
        for year in (-3, -1, 0, 1, 2021):
            for quarter in range(1, 5):
                qc = QuarterCounter(year, quarter)
                self.assertEqual(qc.year(), year)
                self.assertEqual(qc.quarter_of_year(), quarter)

        self.assertEqual(QuarterCounter.from_offset(0).year_quarter(), (0, 4))
        self.assertEqual(QuarterCounter.from_offset(-4).year_quarter(), (-1, 4))

    def test_no_month(self):
        with self.assertRaises(UnsupportedOperationError):
            QuarterCounter(2021, 1).month()

        # Also a TypeError, like any other unsupported operation
        with self.assertRaises(TypeError):
            QuarterCounter(2021, 1).month()

    def test_from_date(self):
        self.assertEqual(QuarterCounter.from_date(date(2021, 8, 15)), QuarterCounter(2021, 3))
        self.assertEqual(QuarterCounter.from_date(date(2021, 12, 31)), QuarterCounter(2021, 4))
        self.assertEqual(QuarterCounter.from_date(datetime(2021, 1, 1, 0, 0)), QuarterCounter(2021, 1))

        with self.assertRaises(TypeError):
            QuarterCounter.from_date(MonthCounter(2021, 1))

    def test_periods(self):
        qc = QuarterCounter(2021, 3)
        self.assertEqual(qc.to_period(), Quarters(8083))
        self.assertEqual(QuarterCounter.from_quarters(Quarters(8083)), qc)
        self.assertEqual(QuarterCounter.eps(), Quarters(1))
        self.assertEqual(QuarterCounter.zero(), Quarters(0))

    def test_truncation(self):
        qc = QuarterCounter(2021, 3)
        self.assertEqual(qc.truncate_to_year(), QuarterCounter(2021, 1))
        self.assertIs(qc.truncate_to_quarter(), qc)
        self.assertEqual(qc.truncate(Years), QuarterCounter(2021, 1))

        with self.assertRaises(UnsupportedOperationError):
            qc.truncate(Months)

    def test_operators(self):
        qc1 = QuarterCounter(2021, 4)
        qc2 = QuarterCounter(2022, 1)
        self.assertTrue(qc1 < qc2)
        self.assertTrue(qc1 <= qc2)
        self.assertTrue(qc2 > qc1)
        self.assertTrue(qc2 >= qc1)
        self.assertTrue(qc1 != qc2)
        self.assertTrue(qc1 == QuarterCounter(2021, 4))
        self.assertEqual(hash(qc1), hash(QuarterCounter(2021, 4)))

        # Compared with a month counter, the quarter becomes its first month
        self.assertTrue(QuarterCounter(2021, 3) == MonthCounter(2021, 7))
        self.assertTrue(QuarterCounter(2021, 3) < MonthCounter(2021, 8))
        self.assertEqual(hash(QuarterCounter(2021, 3)), hash(MonthCounter(2021, 7)))

        self.assertTrue(QuarterCounter(2021, 3) == date(2021, 7, 1))
        self.assertTrue(QuarterCounter(2021, 3) < date(2021, 7, 2))
        self.assertTrue(datetime(2021, 6, 30, 23, 59) < QuarterCounter(2021, 3))

    def test_arithmetic(self):
        self.assertEqual(QuarterCounter(2021, 3) - Years(1), QuarterCounter(2020, 3))
        self.assertEqual(QuarterCounter(2021, 4) + 1, QuarterCounter(2022, 1))
        self.assertEqual(QuarterCounter(2021, 1) - 1, QuarterCounter(2020, 4))
        self.assertEqual(QuarterCounter(2021, 3) + Quarters(2), QuarterCounter(2022, 1))
        self.assertEqual(2 + QuarterCounter(2021, 3), QuarterCounter(2022, 1))
        self.assertEqual(QuarterCounter(2021, 3).add(Years(1)), QuarterCounter(2022, 3))
        self.assertEqual(QuarterCounter(2021, 3).subtract(Quarters(3)), QuarterCounter(2020, 4))

        self.assertEqual(QuarterCounter(2022, 1) - QuarterCounter(2021, 3), Quarters(2))

        with self.assertRaises(TypeError):
            QuarterCounter(2021, 3) + Months(1)  # noqa

        with self.assertRaises(TypeError):
            QuarterCounter(2021, 3).add(Months(3))

    def test_steps_between(self):
        a = QuarterCounter(2020, 1)
        b = QuarterCounter(2022, 1)
        self.assertEqual(QuarterCounter.steps_between(a, b, Years(1)), 2)
        self.assertEqual(QuarterCounter.steps_between(a, b, Quarters(1)), 8)
        self.assertEqual(QuarterCounter.steps_between(a, b, Quarters(3)), 2)
        self.assertEqual(QuarterCounter.steps_between(b, a, Quarters(3)), -3)

        with self.assertRaises(TypeError):
            QuarterCounter.steps_between(a, b, Months(3))

        with self.assertRaises(ValueError):
            QuarterCounter.steps_between(a, b, 0)

    def test_text(self):
        self.assertEqual(str(QuarterCounter(2021, 3)), '2021-Q3')
        self.assertEqual(repr(QuarterCounter(2021, 3)), 'QuarterCounter("2021-Q3")')
        self.assertEqual(str(QuarterCounter(-5, 2)), '-0005-Q2')
        self.assertEqual(str(QuarterCounter(42, 1)), '0042-Q1')

    def test_format(self):
        qc = QuarterCounter(2021, 3)
        self.assertEqual(qc.format(), '2021-Q3')
        self.assertEqual(qc.format('Qq yyyy'), 'Q3 2021')
        self.assertEqual(qc.format('yyyyq'), '20213')
        self.assertEqual(f'{qc}', '2021-Q3')
        self.assertEqual(f'{qc:yyyy/q}', '2021/3')

        with self.assertRaises(UnsupportedOperationError):
            qc.format('yyyy-mm')

    def test_parse(self):
        self.assertEqual(QuarterCounter.parse('2021-Q3'), QuarterCounter(2021, 3))
        self.assertEqual(str(QuarterCounter.parse('2021-Q3')), '2021-Q3')
        self.assertEqual(QuarterCounter.parse('-0005-Q2'), QuarterCounter(-5, 2))
        self.assertEqual(QuarterCounter.parse('Q3/2021', 'Qq/yyyy'), QuarterCounter(2021, 3))
        self.assertEqual(QuarterCounter.parse('20213', 'yyyyq'), QuarterCounter(2021, 3))

        # Patterns without a quarter field are read as dates
        self.assertEqual(QuarterCounter.parse('2021-08-15', 'yyyy-mm-dd'), QuarterCounter(2021, 3))
        self.assertEqual(QuarterCounter.parse('2021-08', 'yyyy-mm'), QuarterCounter(2021, 3))
        self.assertEqual(QuarterCounter.parse('Nov 2021', 'u yyyy'), QuarterCounter(2021, 4))

    def test_parse_errors(self):
        with self.assertRaises(RangeError):
            QuarterCounter.parse('2021-Q5')

        with self.assertRaises(ParseError):
            QuarterCounter.parse('2021-Q12')

        with self.assertRaises(ParseError):
            QuarterCounter.parse('2021-3')

        with self.assertRaises(ParseError):
            QuarterCounter.parse('2021-02-30', 'yyyy-mm-dd')

        self.assertIsNone(QuarterCounter.tryparse('2021-Q5'))
        self.assertIsNone(QuarterCounter.tryparse('garbage'))
        self.assertIsNone(QuarterCounter.tryparse('2021-13', 'yyyy-mm'))
        # Year too large for a date
        self.assertIsNone(QuarterCounter.tryparse('99999999999999999999-01-01', 'yyyy-mm-dd'))
        with self.assertRaises(ParseError):
            QuarterCounter.parse('99999999999999999999-01-01', 'yyyy-mm-dd')
        self.assertEqual(QuarterCounter.tryparse('2021-Q4'), QuarterCounter(2021, 4))

    def test_registration(self):
        register_quarter_format()
        register_quarter_format()
        self.assertIs(date_format.CONVERSION_SPECIFIERS['q'], Quarters)
        self.assertEqual(date_format.CONVERSION_DEFAULTS[Quarters], 1)
        self.assertEqual(date_format.CONVERSION_TRANSLATIONS[QuarterCounter], (Years, Quarters))

        self.assertEqual(quarter_format(), DateFormat('yyyy-Qq'))
        self.assertEqual(quarter_format().directives, ('y', 'q'))

        # Quarter defaults to 1 when a pattern has no field for it
        self.assertEqual(date_format.build(QuarterCounter, {Years: 2021}), QuarterCounter(2021, 1))

    def test_registration_runs_once(self):
        with mock.patch.object(quarter_counter, '_registered', False), \
                mock.patch('date_format.register_directive') as register_directive:
            threads = [threading.Thread(target=register_quarter_format) for _ in range(8)]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join()
            register_quarter_format()
        register_directive.assert_called_once()
        self.assertEqual(register_directive.call_args.args[:3], ('q', Quarters, 1))

    def test_plot_recipe(self):
        value, label = QuarterCounter.plot_recipe()
        self.assertEqual(value(QuarterCounter(2021, 3)), 8083)
        self.assertEqual(label(8083.2), '2021-Q3')


if __name__ == '__main__':
    unittest.main()
