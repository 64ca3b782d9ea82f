# backend/services/outliers.py
"""
Robust value bounds for a column under a filter.

The more rows a filter selects, the tighter the quantiles used to cut the
tails: large samples can afford to drop the extreme 0.05% / 0.5%, small
ones are left untouched.
"""

import logging
from typing import List, Tuple

import polars as pl

from models.intervals import StatInterval
from models.stats_models import StatisticSearchPayload
from services.dataset import DatasetHandle
from services.filters import apply_filter
from services.statistics import QUANTILE_METHOD, collect, numeric_domain, rsd_expr, to_float, to_int, to_number

logger = logging.getLogger(__name__)

TRIM_QUANTILES = {
    "q1": 0.0005,
    "q3": 0.03,
    "q5": 0.05,
    "q95": 0.95,
    "q97": 0.97,
    "q99": 0.995,
}

# (rows strictly above, lower quantile, upper quantile), first match wins
TRIM_TIERS: List[Tuple[int, str, str]] = [
    (1000, "q1", "q99"),
    (500, "q3", "q97"),
    (50, "q5", "q95"),
]


def compute_outlier_bounds(
    dataset: DatasetHandle,
    column: str,
    search: StatisticSearchPayload,
) -> StatInterval:
    """
    Original min/max of `column` over the filtered rows and the trimmed
    bounds picked by row count:

        count > 1000  ->  [q0.0005, q0.995]
        count > 500   ->  [q0.03,   q0.97]
        count > 50    ->  [q0.05,   q0.95]
        otherwise     ->  [min, max]
    """
    integral = numeric_domain(dataset, column)
    c = pl.col(column)

    exprs = [
        c.min().alias("min"),
        c.max().alias("max"),
        c.median().alias("median"),
        c.count().alias("count"),
        rsd_expr(column, integral).alias("rsd"),
    ]
    for alias, fraction in TRIM_QUANTILES.items():
        exprs.append(c.quantile(fraction, interpolation=QUANTILE_METHOD).alias(alias))

    row = collect(apply_filter(dataset, search).select(exprs)).row(0, named=True)

    count = to_int(row["count"])
    orig_start = to_number(row["min"], integral)
    orig_end = to_number(row["max"], integral)

    logger.info(
        "%s: count=%d rsd=%s min=%s max=%s median=%s",
        column, count, row["rsd"], row["min"], row["max"], to_float(row["median"]),
    )
    logger.debug("%s quantiles: %s", column, {k: row[k] for k in TRIM_QUANTILES})

    start, end = orig_start, orig_end
    for threshold, low, high in TRIM_TIERS:
        if count > threshold:
            start = to_number(row[low], integral)
            end = to_number(row[high], integral)
            logger.info("%s: trimming to [%s, %s] (count > %d)", column, low, high, threshold)
            break

    return StatInterval(
        column=column,
        orig_start=orig_start,
        orig_end=orig_end,
        rsd=to_int(row["rsd"]),
        count=count,
        start=start,
        end=end,
    )
