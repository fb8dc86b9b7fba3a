"""
Matplotlib support: counters plot at their integer offset and ticks are labelled with the counter's text, e.g.

    register_plotting()
    ax.plot([MonthCounter(2021, m) for m in range(1, 13)], values)
"""
import logging
from numbers import Number

import matplotlib.units as munits
from matplotlib.ticker import FuncFormatter, MaxNLocator

from month_counter import MonthCounter
from quarter_counter import QuarterCounter

logger = logging.getLogger(__name__)


def axis_recipe(cls: type):
    """
    Return (value, label) for a counter type: value(counter) is the number plotted, label(x) the tick text
    """
    return cls.plot_recipe()


class CounterConverter(munits.ConversionInterface):
    counter_type: type = None

    @classmethod
    def convert(cls, value, unit, axis):
        to_value, _ = axis_recipe(cls.counter_type)
        if isinstance(value, cls.counter_type):
            return to_value(value)
        if isinstance(value, Number):
            return value
        return [to_value(v) if isinstance(v, cls.counter_type) else v for v in value]

    @classmethod
    def axisinfo(cls, unit, axis):
        _, label = axis_recipe(cls.counter_type)
        return munits.AxisInfo(
            majloc=MaxNLocator(integer=True),
            majfmt=FuncFormatter(lambda x, pos=None: label(x)),
        )

    @classmethod
    def default_units(cls, x, axis):
        return cls.counter_type


class MonthCounterConverter(CounterConverter):
    counter_type = MonthCounter


class QuarterCounterConverter(CounterConverter):
    counter_type = QuarterCounter


def register_plotting():
    munits.registry[MonthCounter] = MonthCounterConverter()
    munits.registry[QuarterCounter] = QuarterCounterConverter()
    logger.debug('Registered matplotlib converters for MonthCounter and QuarterCounter')
