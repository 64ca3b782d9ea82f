import polars as pl
import pytest

from models.stats_models import StatisticSearchPayload
from services.dataset import DatasetHandle
from services.filters import apply_filter, to_like_predicate, to_predicate

from conftest import make_frame


@pytest.fixture
def listings():
    frame = make_frame([1000 + 100 * i for i in range(12)], make=["BMW"] * 6 + ["Audi"] * 6)
    return DatasetHandle.from_frame(frame.with_columns(pl.Series("title", [
        "BMW 320d Touring", "BMW 520d", "bmw 320i", "BMW M3", "BMW X5", "BMW 118d",
        "Audi A4 Avant", "Audi A6", "Audi Q5", "Audi A3 Sportback", "Audi TT", "Audi A4",
    ])))


def _matched(dataset, **fields):
    search = StatisticSearchPayload(**fields)
    return apply_filter(dataset, search).collect()


def test_empty_payload_matches_everything(listings, everything):
    assert _matched(listings).height == 12
    assert to_predicate(everything).meta.eq(pl.lit(True))


def test_make_and_model(listings):
    assert _matched(listings, make="Audi").height == 6
    assert _matched(listings, make="Audi", model="320").height == 3


def test_engine_list(listings):
    # Diesel on every third row
    assert _matched(listings, engine=["Diesel"]).height == 4
    assert _matched(listings, engine=["Diesel", "Petrol"]).height == 12


def test_exact_year_wins_over_range(listings):
    # years 2010..2019, then 2010, 2011
    assert _matched(listings, year_from=2015).height == 5
    assert _matched(listings, year=2010, year_from=2015).height == 2


def test_price_ranges(listings):
    assert _matched(listings, price_from=1200, price_to=1400).height == 3
    assert _matched(listings, price=2000).height == 2


def test_mileage_upper_bound(listings):
    assert _matched(listings, mileage_to=20_000).height == 3


def test_created_on_is_days_ago(listings):
    # created today, yesterday, ..., eleven days ago
    assert _matched(listings, created_on_from=3).height == 4
    assert _matched(listings, created_on_to=10).height == 2


@pytest.mark.parametrize(
    "text, expected",
    [
        ("a4", 2),
        ("A4", 2),
        ("audi*", 6),
        ("*avant", 1),
        ("*d", 2),
        ("320", 2),
        ("porsche", 0),
    ],
)
def test_free_text_search(listings, text, expected):
    assert _matched(listings, search=text).height == expected


def test_free_text_skips_missing_columns(listings):
    # the frame has no `equipment` column
    predicate = to_predicate(StatisticSearchPayload(search="a6"), listings.columns)
    assert listings.lazy().filter(predicate).collect().height == 1


def test_like_predicate_without_columns():
    assert to_like_predicate([], "anything") is None


def test_camel_case_payload(listings):
    search = StatisticSearchPayload.model_validate({"yearFrom": 2018, "priceTo": 2000})
    assert search.year_from == 2018
    assert apply_filter(listings, search).collect().height == 2
