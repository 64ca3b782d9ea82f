# backend/services/price_estimator.py
"""
Price estimate for a vehicle description, from comparable listings.

    compute_price_estimate(dataset, search)

1. An exact mileage / power in the filter is replaced by the fixed band
   holding it (MILEAGE_BANDS, POWER_BANDS).
2. If the widened filter matches nothing, the free-text search and the cc
   filter are dropped and the count is taken again.
3. The matching listings are described (count, mean, median, upper
   quantiles, max, rsd) and blend_estimate weighs those figures by how
   spread out the sample is.
"""

import logging
import math
from typing import Dict, List, Optional, Tuple

import polars as pl

from models.stats_models import PriceEstimate, StatisticSearchPayload
from services.dataset import DatasetHandle
from services.errors import NoDataError
from services.filters import apply_filter
from services.statistics import QUANTILE_METHOD, collect, numeric_domain, to_float, to_int

logger = logging.getLogger(__name__)

DEFAULT_PRICE_COLUMN = "estimated_price"

# inclusive (from, to) pairs
MILEAGE_BANDS: List[Tuple[int, int]] = [
    (0, 20000),
    (20001, 40000),
    (40001, 60000),
    (60001, 80000),
    (80001, 100000),
    (100001, 120000),
    (120001, 150000),
    (150001, 999999),
]

POWER_BANDS: List[Tuple[int, int]] = [
    (0, 90),
    (91, 130),
    (131, 150),
    (151, 200),
    (201, 252),
    (253, 303),
    (304, 358),
    (359, 404),
    (405, 454),
    (455, 9999),
]

ESTIMATE_QUANTILES: Dict[str, float] = {
    "quantile_66": 0.66,
    "quantile_75": 0.75,
    "quantile_80": 0.80,
    "quantile_85": 0.85,
}


def round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


# ============================================================
#  FILTER WIDENING
# ============================================================

def _band(value: int, bands: List[Tuple[int, int]]) -> Optional[Tuple[int, int]]:
    for low, high in bands:
        if low <= value <= high:
            return low, high
    return None


def widen_search(search: StatisticSearchPayload) -> StatisticSearchPayload:
    """
    Copy of `search` with exact mileage / power turned into band ranges.
    A value outside every band is dropped without a range.
    """
    update = {"mileage": None, "power": None}

    if search.mileage is not None:
        band = _band(search.mileage, MILEAGE_BANDS)
        if band is not None:
            update["mileage_from"], update["mileage_to"] = band

    if search.power is not None:
        band = _band(search.power, POWER_BANDS)
        if band is not None:
            update["power_from"], update["power_to"] = band

    return search.model_copy(update=update)


def count_rows(dataset: DatasetHandle, search: StatisticSearchPayload) -> int:
    return collect(apply_filter(dataset, search).select(pl.len())).item()


def resolve_search(
    dataset: DatasetHandle,
    search: StatisticSearchPayload,
) -> Tuple[StatisticSearchPayload, int]:
    """The widened filter actually used for the estimate, and its row count."""
    widened = widen_search(search)
    count = count_rows(dataset, widened)
    if count == 0:
        logger.info("No data found for the given search criteria, retrying without search and cc")
        widened = widened.model_copy(update={"search": None, "cc": None})
        count = count_rows(dataset, widened)
    return widened, count


# ============================================================
#  ESTIMATION
# ============================================================

def blend_estimate(figures: Dict[str, float]) -> float:
    """
    Weighted blend of the sample figures. `rsd` is the plain std / mean
    ratio and picks the weights:

        rsd <= 0.1   mean, median, q66, q80 scaled by (1 - rsd), max by rsd
        rsd <= 0.3   mean, median, q66, q75, q80, normalised to sum to 1
        otherwise    fixed weights, max included
    """
    rsd = figures["rsd"]
    mean = figures["mean"]
    median = figures["median"]
    q66 = figures["quantile_66"]
    q75 = figures["quantile_75"]
    q80 = figures["quantile_80"]
    top = figures["max"]

    if rsd <= 0.1:
        spread = 1.0 - rsd
        return (
            spread * 0.4 * mean
            + spread * 0.4 * median
            + spread * 0.12 * q66
            + spread * 0.1 * q80
            + rsd * top
        )

    if rsd <= 0.3:
        spread = 1.0 - rsd
        weights = [spread * 0.2, spread * 0.2, spread * 0.3, 0.15, spread * 0.3]
        values = [mean, median, q66, q75, q80]
        estimation = sum(w * v for w, v in zip(weights, values))
        total = sum(weights)
        if abs(total - 1.0) > 0.0001:
            estimation /= total
        return estimation

    return 0.2 * mean + 0.2 * median + 0.25 * q66 + 0.15 * q75 + 0.1 * q80 + 0.1 * top


def compute_price_estimate(dataset: DatasetHandle, search: StatisticSearchPayload) -> PriceEstimate:
    """
    Describe the listings comparable to `search` and blend them into one
    estimate of `search.stat_column` (default `estimated_price`).
    Raises NoDataError when even the relaxed filter matches nothing.
    """
    column = search.stat_column or DEFAULT_PRICE_COLUMN
    numeric_domain(dataset, column)

    widened, count = resolve_search(dataset, search)
    if count == 0:
        raise NoDataError("No data found for the given search criteria")

    c = pl.col(column)
    exprs = [
        c.count().alias("count"),
        c.mean().alias("mean"),
        c.median().alias("median"),
        c.max().alias("max"),
        (c.std(ddof=1) / c.mean()).alias("rsd"),
    ]
    for alias, fraction in ESTIMATE_QUANTILES.items():
        exprs.append(c.quantile(fraction, interpolation=QUANTILE_METHOD).alias(alias))

    row = collect(apply_filter(dataset, widened).select(exprs)).row(0, named=True)
    figures = {k: to_float(v) for k, v in row.items() if k != "count"}
    estimation = blend_estimate(figures)

    logger.info(
        "%s: count=%s rsd=%.4f mean=%.1f median=%.1f estimation=%.1f",
        column, row["count"], figures["rsd"], figures["mean"], figures["median"], estimation,
    )

    return PriceEstimate(
        column=column,
        count=to_int(row["count"]),
        rsd=round_half_away(figures["rsd"] * 100),
        mean=round_half_away(figures["mean"]),
        median=round_half_away(figures["median"]),
        quantile_66=round_half_away(figures["quantile_66"]),
        quantile_75=round_half_away(figures["quantile_75"]),
        quantile_80=round_half_away(figures["quantile_80"]),
        quantile_85=round_half_away(figures["quantile_85"]),
        max=round_half_away(figures["max"]),
        estimation=round_half_away(estimation),
    )
