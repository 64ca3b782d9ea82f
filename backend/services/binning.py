# backend/services/binning.py

import logging
from typing import List

from models.intervals import Interval, Number, SortedIntervals
from models.quantiles import Quantile
from services.errors import InvalidArgumentError
from services.statistics import to_number

logger = logging.getLogger(__name__)

MIN_BINS = 2


def check_bins(number_of_bins: int) -> None:
    if number_of_bins < MIN_BINS:
        raise InvalidArgumentError(
            f"Number of bins must be at least {MIN_BINS}, got {number_of_bins}"
        )


def build_interval_bins(
    column: str,
    start: Number,
    end: Number,
    number_of_bins: int,
    integral: bool = True,
) -> SortedIntervals:
    """
    `number_of_bins` equal-width buckets from `start`, categories "0".."N-1".

    Integer columns use a floored step, so the last bucket can stop short of
    `end` by up to N - 1.
    """
    check_bins(number_of_bins)

    if integral:
        step = (end - start) // number_of_bins
    else:
        step = (end - start) / number_of_bins
    logger.info("%s: %d buckets of width %s from %s", column, number_of_bins, step, start)

    intervals = [
        Interval(
            column=column,
            start=start + i * step,
            end=start + (i + 1) * step,
            category=str(i),
        )
        for i in range(number_of_bins)
    ]
    return SortedIntervals.from_intervals(intervals, column)


def build_quantile_bins(
    column: str,
    lowest: Number,
    quantiles: List[Quantile],
    integral: bool = True,
) -> SortedIntervals:
    """
    One bucket per quantile: [lowest, q1), [q1, q2), ..., categories "1".."N".
    """
    if not quantiles:
        return SortedIntervals(column)

    bounds = [lowest] + [to_number(q.value, integral) for q in quantiles]
    intervals = [
        Interval(
            column=column,
            start=bounds[i],
            end=bounds[i + 1],
            category=str(i + 1),
        )
        for i in range(len(quantiles))
    ]
    return SortedIntervals.from_intervals(intervals, column)
