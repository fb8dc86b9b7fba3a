"""
Bulk conversion between Arrow date/timestamp columns and month or quarter counters
"""
import pyarrow as pa
from pyarrow import compute

from month_counter import UNIX_EPOCH_OFFSET, MonthCounter
from period_conversions import to_date
from quarter_counter import QuarterCounter


def _as_temporal_array(array) -> pa.Array | pa.ChunkedArray:
    if not isinstance(array, (pa.Array, pa.ChunkedArray)):
        array = pa.array(array)
    if not (pa.types.is_date(array.type) or pa.types.is_timestamp(array.type)):
        raise TypeError(f'Expected a date or timestamp array, got {array.type}')
    return array


def month_offsets(array) -> pa.Array | pa.ChunkedArray:
    """
    MonthCounter offsets of each value in a date or timestamp array, as int64. Nulls stay null.
    """
    array = _as_temporal_array(array)
    years = compute.year(array)
    return compute.add(compute.multiply(compute.subtract(years, 1), 12), compute.month(array))


def quarter_offsets(array) -> pa.Array | pa.ChunkedArray:
    array = _as_temporal_array(array)
    years = compute.year(array)
    return compute.add(compute.multiply(compute.subtract(years, 1), 4), compute.quarter(array))


def epoch_months(array) -> pa.Array | pa.ChunkedArray:
    """
    Zero-based months since January 1970, the value an Iceberg month transform partitions a date column by.
    MonthCounter.from_epoch_month and to_epoch_month convert single values.
    """
    return compute.subtract(month_offsets(array), UNIX_EPOCH_OFFSET)


def month_counters(array) -> list[MonthCounter | None]:
    return [None if offset is None else MonthCounter.from_offset(offset)
            for offset in month_offsets(array).to_pylist()]


def quarter_counters(array) -> list[QuarterCounter | None]:
    return [None if offset is None else QuarterCounter.from_offset(offset)
            for offset in quarter_offsets(array).to_pylist()]


def to_date32(counters) -> pa.Array:
    """
    First day of each counter as a date32 array; None becomes null
    """
    return pa.array([None if counter is None else to_date(counter) for counter in counters], type=pa.date32())
