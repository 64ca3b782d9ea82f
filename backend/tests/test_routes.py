import pytest
from fastapi.testclient import TestClient

from main import app
from utils.data_store import set_dataset

client = TestClient(app)


@pytest.fixture
def loaded(twelve_prices):
    set_dataset(twelve_prices)
    return twelve_prices


def test_root():
    response = client.get("/")
    assert response.status_code == 200
    assert "running" in response.json()["message"]


# ============================================================
#  /distribution
# ============================================================

def test_distribution(loaded):
    response = client.post(
        "/distribution",
        json={"column": "price", "filter": {}, "number_of_bins": 4},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["axisLabel"] == "price"
    assert body["dataLabel"] == "stat_category"
    assert body["axisValues"] == [1000, 1275, 1550, 1825, 2100]
    assert body["count"] == 12
    assert body["mean"] == 1550
    assert [b["count"] for b in body["data"]] == [3, 3, 3, 2]


def test_distribution_by_quantile_with_filter(loaded):
    response = client.post(
        "/distribution",
        json={
            "column": "price",
            "filter": {"priceTo": 1500},
            "all": False,
            "distribution_type": "ByQuantile",
            "number_of_bins": 2,
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 6
    assert [b["category"] for b in body["data"]] == ["1", "2"]


def test_distribution_default_bins(loaded):
    response = client.post("/distribution", json={"column": "price"})

    assert response.status_code == 200
    assert len(response.json()["axisValues"]) == 11


def test_distribution_rejects_one_bin(loaded):
    response = client.post("/distribution", json={"column": "price", "number_of_bins": 1})
    assert response.status_code == 400
    assert "at least 2" in response.json()["detail"]


def test_distribution_unknown_column(loaded):
    response = client.post("/distribution", json={"column": "torque", "number_of_bins": 4})
    assert response.status_code == 400


def test_distribution_unknown_mode(loaded):
    response = client.post(
        "/distribution",
        json={"column": "price", "distribution_type": "ByMagic", "number_of_bins": 4},
    )
    assert response.status_code == 422


def test_no_dataset_loaded():
    response = client.post("/distribution", json={"column": "price", "number_of_bins": 4})
    assert response.status_code == 503


def test_outliers(loaded):
    response = client.post("/distribution/outliers", params={"column": "price"}, json={})

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 12
    assert (body["orig_start"], body["orig_end"]) == (1000, 2100)
    assert (body["start"], body["end"]) == (1000, 2100)


# ============================================================
#  /stats
# ============================================================

def test_summary(loaded):
    response = client.post(
        "/stats/summary",
        params={"column": "price", "bins": 4, "start": 1200, "end": 1500},
        json={},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 4
    assert body["mean"] == 1350
    assert len(body["quantiles"]) == 4


def test_summary_needs_both_bounds(loaded):
    response = client.post(
        "/stats/summary", params={"column": "price", "start": 1200}, json={}
    )
    assert response.status_code == 400


def test_chart(loaded):
    response = client.post("/stats/chart", json={"group": ["engine"]})

    assert response.status_code == 200
    body = response.json()
    assert body["total_count"] == 2
    assert [d["count"] for d in body["data"]] == [4, 8]


def test_chart_unknown_group(loaded):
    response = client.post("/stats/chart", json={"group": ["colour"]})
    assert response.status_code == 400


def test_estimate(loaded):
    response = client.post("/stats/estimate", json={"statColumn": "price", "mileage": 15000})

    assert response.status_code == 200
    body = response.json()
    assert body["column"] == "price"
    assert body["count"] == 3
    assert body["mean"] == 1100


def test_estimate_no_data(loaded):
    response = client.post("/stats/estimate", json={"statColumn": "price", "make": "Lada"})
    assert response.status_code == 404
