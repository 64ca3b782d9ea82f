# backend/routers/distribution.py

from fastapi import APIRouter, Depends, Query

from models.intervals import StatInterval
from models.stats_models import DataToBinsRequest, DistributionChartData, StatisticSearchPayload
from routers.errors import to_http_error
from services.dataset import DatasetHandle
from services.distribution import compute_distribution
from services.errors import StatisticsError
from services.outliers import compute_outlier_bounds
from utils.data_store import get_dataset
from utils.settings import get_settings

router = APIRouter(prefix="/distribution", tags=["Distribution"])


def dataset_dependency() -> DatasetHandle:
    try:
        return get_dataset()
    except StatisticsError as e:
        raise to_http_error(e)


@router.post("", response_model=DistributionChartData)
def distribution(request: DataToBinsRequest, dataset: DatasetHandle = Depends(dataset_dependency)):
    """
    Bucketed distribution of one numeric column under a filter.
    """
    bins = request.number_of_bins
    if bins is None:
        bins = get_settings().default_bins

    try:
        return compute_distribution(
            dataset,
            request.column,
            request.filter,
            use_trimmed=request.all,
            mode=request.distribution_type,
            number_of_bins=bins,
        )
    except StatisticsError as e:
        raise to_http_error(e)


@router.post("/outliers", response_model=StatInterval)
def outliers(
    search: StatisticSearchPayload,
    column: str = Query(..., min_length=1),
    dataset: DatasetHandle = Depends(dataset_dependency),
):
    """
    Original and trimmed bounds of a column; the caller picks which to use.
    """
    try:
        return compute_outlier_bounds(dataset, column, search)
    except StatisticsError as e:
        raise to_http_error(e)
