# backend/services/bucket_aggregator.py
"""
Assign filtered rows to the buckets of a SortedIntervals set and describe
each bucket.

Rows are first restricted to [first.start, last.end] (inclusive), then each
row takes the category of the first bucket whose [start, end) holds it.
Rows that fit no bucket (the closing `end` value, gaps between buckets) get
a null category and are left out of the result, as are buckets no row
landed in.
"""

import logging
from typing import List

import polars as pl

from models.intervals import SortedIntervals
from models.stats_models import DistributionChartData, IntervalData, StatisticSearchPayload
from services.dataset import DatasetHandle
from services.errors import EmptyIntervalSetError
from services.filters import apply_filter
from services.statistics import collect, numeric_domain, rsd_expr, to_float, to_int, to_number

logger = logging.getLogger(__name__)

CATEGORY_COLUMN = "stat_category"
UNMATCHED = None


def category_expr(column: str, intervals: SortedIntervals) -> pl.Expr:
    """when/then chain in set order; unmatched rows fall through to null."""
    c = pl.col(column)
    chain = None
    for interval in intervals:
        condition = (c >= interval.start) & (c < interval.end)
        label = pl.lit(interval.category)
        chain = pl.when(condition).then(label) if chain is None else chain.when(condition).then(label)
    return chain.otherwise(pl.lit(UNMATCHED, dtype=pl.Utf8)).alias(CATEGORY_COLUMN)


def aggregate_buckets(
    dataset: DatasetHandle,
    column: str,
    intervals: SortedIntervals,
    search: StatisticSearchPayload,
) -> DistributionChartData:
    """
    Per-bucket count / min / max / mean / median / rsd, ordered like the
    interval set. Raises EmptyIntervalSetError for an empty set.
    """
    if intervals.is_empty():
        raise EmptyIntervalSetError(f"No intervals to aggregate {column} into")

    integral = numeric_domain(dataset, column)
    lowest = intervals.min().start
    highest = intervals.max().end

    c = pl.col(column)
    lf = (
        apply_filter(dataset, search)
        .filter((c >= lowest) & (c <= highest))
        .with_columns(category_expr(column, intervals))
        .group_by(CATEGORY_COLUMN)
        .agg(
            c.min().alias("min"),
            c.max().alias("max"),
            c.count().alias("count"),
            c.mean().alias("mean"),
            c.median().alias("median"),
            rsd_expr(column, integral).alias("rsd"),
        )
    )
    grouped = collect(lf)
    logger.info("%s: %d of %d buckets populated", column, grouped.height, len(intervals))

    by_category = {}
    for row in grouped.iter_rows(named=True):
        category = row[CATEGORY_COLUMN]
        if category is UNMATCHED:
            logger.debug("%s: %d rows outside every bucket", column, row["count"])
            continue
        by_category[category] = IntervalData(
            column=column,
            category=category,
            min=to_number(row["min"], integral),
            max=to_number(row["max"], integral),
            median=to_number(row["median"], integral),
            count=to_int(row["count"]),
            mean=to_float(row["mean"]),
            rsd=to_int(row["rsd"]),
        )

    data: List[IntervalData] = []
    for category in intervals.categories():
        bucket = by_category.get(category)
        if bucket is not None:
            data.append(bucket)

    return DistributionChartData(
        axis_label=column,
        data_label=CATEGORY_COLUMN,
        axis_values=intervals.values(),
        count=len(data),
        data=data,
    )
