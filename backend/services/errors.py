# backend/services/errors.py

import polars as pl


class StatisticsError(Exception):
    """Base class for every failure raised by the statistics engine."""


class InvalidArgumentError(StatisticsError):
    pass


class InvalidIntervalError(StatisticsError):
    pass


class OverlapError(StatisticsError):
    pass


class EmptyIntervalSetError(StatisticsError):
    pass


class NoDataError(StatisticsError):
    """Nothing matched the filter, even after widening it."""


class AggregationError(StatisticsError):
    """
    The dataset engine refused a query (unknown column, bad dtype, ...).
    """


class DatasetError(StatisticsError):
    pass


# polars failures that mean "the query is wrong", not "the process is broken"
ENGINE_ERRORS = (
    pl.exceptions.ColumnNotFoundError,
    pl.exceptions.ComputeError,
    pl.exceptions.InvalidOperationError,
    pl.exceptions.SchemaError,
)
