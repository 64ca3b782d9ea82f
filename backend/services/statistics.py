# backend/services/statistics.py

import logging
import math
from typing import Dict, List, Optional

import polars as pl

from models.intervals import Interval, Number
from models.quantiles import generate_quantiles
from models.stats_models import (
    DimensionData,
    Metadata,
    StatisticData,
    StatisticResponse,
    Statistics,
    StatisticSearchPayload,
)
from services.dataset import DatasetHandle
from services.errors import ENGINE_ERRORS, AggregationError
from services.filters import apply_filter

logger = logging.getLogger(__name__)

QUANTILE_METHOD = "nearest"


# ============================================================
#  SCALAR HELPERS
# ============================================================

def to_int(value) -> int:
    """Truncate toward zero; None, NaN and infinities become 0."""
    if value is None:
        return 0
    value = float(value)
    if not math.isfinite(value):
        return 0
    return int(value)


def to_float(value) -> float:
    if value is None:
        return 0.0
    value = float(value)
    return value if math.isfinite(value) else 0.0


def to_number(value, integral: bool) -> Number:
    """Scalar in the column's domain: truncated int for integer columns."""
    return to_int(value) if integral else to_float(value)


def rsd_expr(column: str, integral: bool = True) -> pl.Expr:
    """
    Relative standard deviation in percent. Integer columns divide by the
    mean truncated to int, float columns by the exact mean.
    """
    c = pl.col(column)
    mean = c.mean().cast(pl.Int64) if integral else c.mean()
    return c.std(ddof=1) * 100 / mean


def numeric_domain(dataset: DatasetHandle, column: str) -> bool:
    """
    True for integer columns, False for float ones. Raises AggregationError
    for unknown or non-numeric columns.
    """
    if not dataset.is_numeric(column):
        raise AggregationError(f"Column {column} is not numeric ({dataset.schema[column]})")
    return dataset.is_integer(column)


def collect(lf: pl.LazyFrame) -> pl.DataFrame:
    try:
        return lf.collect()
    except ENGINE_ERRORS as e:
        raise AggregationError(str(e)) from e


# ============================================================
#  OVERALL STATISTICS
# ============================================================

def compute_statistics(
    dataset: DatasetHandle,
    column: str,
    search: StatisticSearchPayload,
    interval: Optional[Interval] = None,
    bins: int = 10,
) -> Statistics:
    """
    count / min / max / mean / median / rsd of `column` over the filtered rows,
    plus `bins` evenly spaced quantiles. With an interval, rows are further
    restricted to [interval.start, interval.end], both ends inclusive.
    """
    integral = numeric_domain(dataset, column)
    quantiles = generate_quantiles(column, bins)

    lf = apply_filter(dataset, search)
    if interval is not None:
        lf = lf.filter(
            (pl.col(column) >= interval.start) & (pl.col(column) <= interval.end)
        )

    c = pl.col(column)
    exprs = [
        c.count().alias("count"),
        c.min().alias("min"),
        c.max().alias("max"),
        c.mean().alias("mean"),
        c.median().alias("median"),
        rsd_expr(column, integral).alias("rsd"),
    ]
    for q in quantiles:
        logger.debug("%s: %s", q.alias, q.quantile)
        # aliases can repeat for large bin counts, the bin ordinal cannot
        exprs.append(c.quantile(q.quantile, interpolation=QUANTILE_METHOD).alias(f"_q{q.bin}"))

    row = collect(lf.select(exprs)).row(0, named=True)

    computed = [q.model_copy(update={"value": to_float(row[f"_q{q.bin}"])}) for q in quantiles]

    return Statistics(
        count=to_int(row["count"]),
        min=to_number(row["min"], integral),
        max=to_number(row["max"], integral),
        mean=to_float(row["mean"]),
        median=to_float(row["median"]),
        rsd=to_int(row["rsd"]),
        quantiles=computed,
    )


# ============================================================
#  NAMED AGGREGATORS
# ============================================================

_QUANTILE_AGGREGATORS: Dict[str, float] = {
    "quantile_60": 0.60,
    "quantile_66": 0.66,
    "quantile_70": 0.70,
    "quantile_75": 0.75,
    "quantile_80": 0.80,
    "quantile_90": 0.90,
}


def get_aggregator(column: str, aggregator: str) -> Optional[pl.Expr]:
    c = pl.col(column)
    if aggregator == "count":
        expr = c.count()
    elif aggregator == "min":
        expr = c.min()
    elif aggregator == "max":
        expr = c.max()
    elif aggregator == "mean":
        expr = c.mean()
    elif aggregator == "median":
        expr = c.median()
    elif aggregator == "sum":
        expr = c.sum()
    elif aggregator == "avg":
        expr = c.sum() / c.count()
    elif aggregator == "std":
        expr = c.std(ddof=1)
    elif aggregator == "rsd":
        expr = c.std(ddof=1) / c.mean()
    elif aggregator in _QUANTILE_AGGREGATORS:
        expr = c.quantile(_QUANTILE_AGGREGATORS[aggregator], interpolation=QUANTILE_METHOD)
    else:
        return None
    return expr.alias(aggregator)


def to_aggregator(aggregators: List[str], column: str) -> List[pl.Expr]:
    """Expressions for the known aggregator names; unknown names are skipped."""
    exprs = []
    for name in aggregators:
        expr = get_aggregator(column, name)
        if expr is None:
            logger.info("Skipping unknown aggregator %r", name)
            continue
        exprs.append(expr)
    return exprs


# ============================================================
#  GROUPED CHART DATA
# ============================================================

def group_statistics(dataset: DatasetHandle, search: StatisticSearchPayload) -> StatisticResponse:
    """
    Group the filtered rows by `search.group` and aggregate `search.stat_column`.

    The default stat column `advert_id` only supports counting. Rows are
    ordered by `search.order` (nulls last), otherwise by ascending count.
    """
    if not search.group:
        return StatisticResponse()

    for column in search.group:
        dataset.require_column(column)

    stat_column = search.stat_column or "advert_id"
    dataset.require_column(stat_column)
    if stat_column == "advert_id" or not search.aggregators:
        names = ["count"]
    else:
        names = search.aggregators

    aggregators = to_aggregator(names, stat_column)
    if not aggregators:
        raise AggregationError(f"No supported aggregator in {names}")

    lf = apply_filter(dataset, search).group_by(search.group).agg(aggregators)

    if search.order:
        lf = lf.sort(
            [o.column for o in search.order],
            descending=[not o.asc for o in search.order],
            nulls_last=True,
        )
    elif "count" in names:
        lf = lf.sort("count", nulls_last=True)
    else:
        lf = lf.sort(search.group, nulls_last=True)

    return to_static_response(collect(lf), search.group)


def to_static_response(data: pl.DataFrame, group_by: List[str]) -> StatisticResponse:
    logger.info("Found results: %d, columns: %d", data.height, data.width)

    metadata = [Metadata(column_index=idx, column=name) for idx, name in enumerate(data.columns)]

    dimensions = []
    for idx, name in enumerate([c for c in data.columns if c in group_by]):
        values = ["" if v is None else str(v) for v in data[name].to_list()]
        dimensions.append(
            DimensionData(
                column_index=idx,
                column_name=name,
                label=name,
                data=values,
                distinct_count=len(set(values)),
            )
        )

    fields = [f for f in StatisticData.model_fields if f in data.columns]
    chart_data = [
        StatisticData(**{f: row[f] for f in fields})
        for row in data.select(fields).iter_rows(named=True)
    ] if fields else [StatisticData() for _ in range(data.height)]

    return StatisticResponse(
        metadata=metadata,
        dimensions=dimensions,
        data=chart_data,
        total_count=data.height,
    )
