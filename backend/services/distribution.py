# backend/services/distribution.py
"""
Distribution charts: trim -> bin -> aggregate.

    compute_distribution(dataset, column, search, use_trimmed, mode, bins)

1. compute_outlier_bounds picks the trimmed or the original [start, end].
2. compute_statistics describes the rows inside [start, end] and evaluates
   `bins` evenly spaced quantiles.
3. The buckets are built by fixed width (ByInterval) or from the quantile
   values (ByQuantile).
4. aggregate_buckets describes each bucket; the overall figures from step 2
   replace the envelope's count / mean / rsd / median / min / max.
"""

import logging

from models.intervals import Interval
from models.stats_models import DistributionChartData, DistributionType, StatisticSearchPayload
from services.binning import build_interval_bins, build_quantile_bins, check_bins
from services.bucket_aggregator import aggregate_buckets
from services.dataset import DatasetHandle
from services.outliers import compute_outlier_bounds
from services.statistics import compute_statistics, numeric_domain, to_number

logger = logging.getLogger(__name__)


def compute_distribution(
    dataset: DatasetHandle,
    column: str,
    search: StatisticSearchPayload,
    use_trimmed: bool = True,
    mode: DistributionType = DistributionType.BY_INTERVAL,
    number_of_bins: int = 10,
) -> DistributionChartData:
    check_bins(number_of_bins)
    integral = numeric_domain(dataset, column)

    bounds = compute_outlier_bounds(dataset, column, search)
    if use_trimmed:
        start, end = bounds.start, bounds.end
    else:
        start, end = bounds.orig_start, bounds.orig_end
    logger.info(
        "%s: bucketing [%s, %s] (%s) by %s into %d",
        column, start, end, "trimmed" if use_trimmed else "original", mode.value, number_of_bins,
    )

    overall = compute_statistics(
        dataset,
        column,
        search,
        Interval(column=column, start=start, end=end, category="all"),
        number_of_bins,
    )

    if mode == DistributionType.BY_INTERVAL:
        intervals = build_interval_bins(column, start, end, number_of_bins, integral)
    else:
        intervals = build_quantile_bins(column, overall.min, overall.quantiles, integral)

    chart = aggregate_buckets(dataset, column, intervals, search)

    return chart.model_copy(
        update={
            "count": overall.count,
            "mean": overall.mean,
            "rsd": overall.rsd,
            "median": to_number(overall.median, integral),
            "min": overall.min,
            "max": overall.max,
        }
    )
