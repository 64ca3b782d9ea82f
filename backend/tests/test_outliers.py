import polars as pl
import pytest

from models.stats_models import StatisticSearchPayload
from services.dataset import DatasetHandle
from services.errors import AggregationError
from services.outliers import compute_outlier_bounds

from conftest import make_frame


def test_small_sample_is_not_trimmed(twelve_prices, everything):
    stat = compute_outlier_bounds(twelve_prices, "price", everything)
    assert stat.count == 12
    assert (stat.orig_start, stat.orig_end) == (1000, 2100)
    assert (stat.start, stat.end) == (stat.orig_start, stat.orig_end)
    assert stat.rsd == 23
    assert stat.column == "price"


@pytest.mark.parametrize("n", [2, 12, 50])
def test_up_to_fifty_rows_keep_original_bounds(sized_prices, everything, n):
    stat = compute_outlier_bounds(sized_prices(n), "price", everything)
    assert stat.count == n
    assert stat.start == stat.orig_start == 0
    assert stat.end == stat.orig_end == n - 1


@pytest.mark.parametrize("n", [51, 100, 500, 501, 600, 1000, 1001, 2000])
def test_larger_samples_are_narrowed(sized_prices, everything, n):
    stat = compute_outlier_bounds(sized_prices(n), "price", everything)
    assert stat.count == n
    assert stat.orig_start == 0
    assert stat.orig_end == n - 1
    assert stat.start >= stat.orig_start
    assert stat.end < stat.orig_end
    assert stat.end - stat.start <= stat.orig_end - stat.orig_start


@pytest.mark.parametrize(
    "n, lower, upper",
    [
        (100, 0.05, 0.95),
        (500, 0.05, 0.95),
        (501, 0.03, 0.97),
        (1000, 0.03, 0.97),
        (1001, 0.0005, 0.995),
    ],
)
def test_count_tier_selects_quantiles(sized_prices, everything, n, lower, upper):
    stat = compute_outlier_bounds(sized_prices(n), "price", everything)
    # nearest-rank quantile of 0..n-1 is (n - 1) * q, give or take rounding
    assert abs(stat.start - (n - 1) * lower) <= 1
    assert abs(stat.end - (n - 1) * upper) <= 1


def test_integer_column_gives_integer_bounds(sized_prices, everything):
    stat = compute_outlier_bounds(sized_prices(600), "price", everything)
    assert isinstance(stat.start, int)
    assert isinstance(stat.end, int)


def test_float_column_keeps_float_bounds(everything):
    dataset = DatasetHandle.from_frame(make_frame([0.5, 1.25, 2.75], dtype=pl.Float64))
    stat = compute_outlier_bounds(dataset, "price", everything)
    assert stat.start == 0.5
    assert stat.end == 2.75
    assert isinstance(stat.start, float)


def test_filter_is_applied(twelve_prices):
    stat = compute_outlier_bounds(twelve_prices, "price", StatisticSearchPayload(model="320"))
    assert stat.count == 6
    assert stat.orig_start == 1000
    assert stat.orig_end == 2000


def test_nothing_selected_gives_zeros(twelve_prices):
    stat = compute_outlier_bounds(twelve_prices, "price", StatisticSearchPayload(make="Lada"))
    assert stat.count == 0
    assert (stat.orig_start, stat.orig_end, stat.start, stat.end, stat.rsd) == (0, 0, 0, 0, 0)


def test_unknown_column(twelve_prices, everything):
    with pytest.raises(AggregationError):
        compute_outlier_bounds(twelve_prices, "horsepower", everything)


def test_float_column_rsd_uses_exact_mean(everything):
    dataset = DatasetHandle.from_frame(make_frame([0.2, 0.4, 0.6, 0.8], dtype=pl.Float64))
    stat = compute_outlier_bounds(dataset, "price", everything)
    # std 0.258 over mean 0.5
    assert stat.rsd == 51


def test_text_column_is_rejected(twelve_prices, everything):
    with pytest.raises(AggregationError):
        compute_outlier_bounds(twelve_prices, "make", everything)
