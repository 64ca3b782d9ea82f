# backend/services/filters.py
"""
Translate a StatisticSearchPayload into a single polars predicate.
"""

import logging
from datetime import date, timedelta
from functools import reduce
from typing import Iterable, List, Optional

import polars as pl

from models.stats_models import StatisticSearchPayload
from services.dataset import DatasetHandle

logger = logging.getLogger(__name__)

SEARCH_COLUMNS = ["title", "equipment"]


# ============================================================
#  PREDICATE BUILDERS
# ============================================================

def to_like_predicate(columns: Iterable[str], value: str) -> Optional[pl.Expr]:
    """
    Case-insensitive match of `value` against any of `columns`.
    `*abc` matches the suffix, `abc*` the prefix, anything else a substring.
    """
    needle = value.lower()
    predicates = []
    for c in columns:
        text = pl.col(c).str.to_lowercase()
        if needle.startswith("*"):
            predicates.append(text.str.ends_with(needle.replace("*", "")))
        elif needle.endswith("*"):
            predicates.append(text.str.starts_with(needle.replace("*", "")))
        else:
            predicates.append(text.str.contains(needle, literal=True))

    if not predicates:
        return None
    return reduce(lambda a, b: a | b, predicates)


def _range(predicates: List[pl.Expr], column: str, exact, low, high) -> None:
    # an exact value wins over the range pair
    if exact is not None:
        predicates.append(pl.col(column) == exact)
        return
    if low is not None:
        predicates.append(pl.col(column) >= low)
    if high is not None:
        predicates.append(pl.col(column) <= high)


def _days_ago(days: int) -> date:
    return date.today() - timedelta(days=days)


def to_predicate(
    search: StatisticSearchPayload,
    available_columns: Optional[Iterable[str]] = None,
) -> pl.Expr:
    """
    AND of every populated payload field. An empty payload matches all rows.

    `available_columns` narrows the free-text search to columns the dataset
    actually has; other predicates are built regardless and fail at query
    time if their column is missing.
    """
    predicates: List[pl.Expr] = []

    if search.search:
        columns = SEARCH_COLUMNS
        if available_columns is not None:
            present = set(available_columns)
            columns = [c for c in SEARCH_COLUMNS if c in present]
        like = to_like_predicate(columns, search.search)
        if like is not None:
            predicates.append(like)

    if search.make is not None:
        predicates.append(pl.col("make") == search.make)

    if search.model is not None:
        predicates.append(pl.col("model") == search.model)

    if search.engine:
        predicates.append(pl.col("engine").is_in(search.engine))

    if search.gearbox is not None:
        predicates.append(pl.col("gearbox") == search.gearbox)

    if search.estimated_price is not None:
        predicates.append(pl.col("estimated_price") >= search.estimated_price)

    if search.price is not None:
        predicates.append(pl.col("price") >= search.price)
    _range(predicates, "price", None, search.price_from, search.price_to)

    _range(predicates, "year", search.year, search.year_from, search.year_to)
    _range(predicates, "discount", None, search.discount_from, search.discount_to)
    _range(predicates, "save_diff_in_eur", None, search.save_diff_from, search.save_diff_to)
    _range(predicates, "power", search.power, search.power_from, search.power_to)
    _range(predicates, "mileage", search.mileage, search.mileage_from, search.mileage_to)
    _range(predicates, "cc", search.cc, search.cc_from, search.cc_to)

    if search.created_on_from is not None:
        predicates.append(pl.col("created_on") >= _days_ago(search.created_on_from))
    if search.created_on_to is not None:
        predicates.append(pl.col("created_on") <= _days_ago(search.created_on_to))

    if not predicates:
        return pl.lit(True)

    logger.debug("Predicates: %d", len(predicates))
    return pl.all_horizontal(predicates)


def apply_filter(dataset: DatasetHandle, search: StatisticSearchPayload) -> pl.LazyFrame:
    return dataset.lazy().filter(to_predicate(search, dataset.columns))
