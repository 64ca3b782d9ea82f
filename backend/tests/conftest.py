import sys
from datetime import date, timedelta
from pathlib import Path

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

import polars as pl
import pytest

from models.stats_models import StatisticSearchPayload
from services.dataset import DatasetHandle
from utils.data_store import clear_dataset


def make_frame(prices, *, make="BMW", dtype=pl.Int32) -> pl.DataFrame:
    """Price rows with enough of the price-view columns for the filters."""
    n = len(prices)
    makes = make if isinstance(make, list) else [make] * n
    return pl.DataFrame(
        {
            "advert_id": [f"ad-{i}" for i in range(n)],
            "title": [f"{m} listing {i}" for i, m in enumerate(makes)],
            "make": makes,
            "model": ["320" if i % 2 == 0 else "520" for i in range(n)],
            "engine": ["Petrol" if i % 3 else "Diesel" for i in range(n)],
            "gearbox": ["Manual"] * n,
            "year": [2010 + i % 10 for i in range(n)],
            "mileage": [10_000 * (i % 20) for i in range(n)],
            "created_on": [date.today() - timedelta(days=i) for i in range(n)],
            "price": pl.Series(prices, dtype=dtype),
        }
    )


@pytest.fixture
def everything():
    return StatisticSearchPayload()


@pytest.fixture
def twelve_prices():
    # 1000, 1100, ..., 2100
    return DatasetHandle.from_frame(make_frame([1000 + 100 * i for i in range(12)]))


@pytest.fixture
def thirteen_prices():
    # 1000, 1100, ..., 2200
    return DatasetHandle.from_frame(make_frame([1000 + 100 * i for i in range(13)]))


@pytest.fixture
def sized_prices():
    """Factory: a dataset of `n` consecutive prices starting at 0."""
    def build(n: int) -> DatasetHandle:
        return DatasetHandle.from_frame(make_frame(list(range(n))))
    return build


@pytest.fixture(autouse=True)
def reset_data_store():
    yield
    clear_dataset()
