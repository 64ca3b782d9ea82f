# backend/routers/stats.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from models.intervals import Interval
from models.stats_models import PriceEstimate, Statistics, StatisticResponse, StatisticSearchPayload
from routers.distribution import dataset_dependency
from routers.errors import to_http_error
from services.dataset import DatasetHandle
from services.errors import StatisticsError
from services.price_estimator import compute_price_estimate
from services.statistics import compute_statistics, group_statistics

router = APIRouter(prefix="/stats", tags=["Stats"])


@router.post("/summary", response_model=Statistics)
def summary(
    search: StatisticSearchPayload,
    column: str = Query(..., min_length=1),
    bins: int = Query(10, ge=0, le=1000),
    start: Optional[float] = None,
    end: Optional[float] = None,
    dataset: DatasetHandle = Depends(dataset_dependency),
):
    """
    Overall statistics and `bins` quantiles of a column, optionally
    restricted to [start, end].
    """
    if (start is None) != (end is None):
        raise HTTPException(status_code=400, detail="start and end must be given together")

    interval = None
    if start is not None:
        interval = Interval(column=column, start=start, end=end, category="all")

    try:
        return compute_statistics(dataset, column, search, interval, bins)
    except StatisticsError as e:
        raise to_http_error(e)


@router.post("/chart", response_model=StatisticResponse)
def chart(search: StatisticSearchPayload, dataset: DatasetHandle = Depends(dataset_dependency)):
    """
    Grouped aggregates of `stat_column` by the payload's `group` columns.
    """
    try:
        return group_statistics(dataset, search)
    except StatisticsError as e:
        raise to_http_error(e)


@router.post("/estimate", response_model=PriceEstimate)
def estimate(search: StatisticSearchPayload, dataset: DatasetHandle = Depends(dataset_dependency)):
    """
    Estimated price for the described vehicle, from comparable listings.
    Exact mileage and power are widened to bands before matching.
    """
    try:
        return compute_price_estimate(dataset, search)
    except StatisticsError as e:
        raise to_http_error(e)
