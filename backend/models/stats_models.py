# backend/models/stats_models.py

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

from models.intervals import Number
from models.quantiles import Quantile


# ============================================================
#  REQUEST PAYLOADS
# ============================================================

class DistributionType(str, Enum):
    BY_QUANTILE = "ByQuantile"
    BY_INTERVAL = "ByInterval"


class Order(BaseModel):
    column: str
    asc: bool = True


class StatisticSearchPayload(BaseModel):
    """
    Row filter sent by the frontend. Field names travel in camelCase
    (yearFrom, saveDiffTo, ...); see services/filters.py for the predicates.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    search: Optional[str] = None
    make: Optional[str] = None
    model: Optional[str] = None

    engine: Optional[List[str]] = None
    gearbox: Optional[str] = None

    year_from: Optional[int] = None
    year_to: Optional[int] = None
    year: Optional[int] = None

    power_from: Optional[int] = None
    power_to: Optional[int] = None
    power: Optional[int] = None

    mileage_from: Optional[int] = None
    mileage_to: Optional[int] = None
    mileage: Optional[int] = None

    cc_from: Optional[int] = None
    cc_to: Optional[int] = None
    cc: Optional[int] = None

    save_diff_from: Optional[int] = None
    save_diff_to: Optional[int] = None

    discount_from: Optional[int] = None
    discount_to: Optional[int] = None

    # days ago, relative to today
    created_on_from: Optional[int] = None
    created_on_to: Optional[int] = None

    estimated_price: Optional[int] = None
    price: Optional[int] = None
    price_from: Optional[int] = None
    price_to: Optional[int] = None

    group: List[str] = Field(default_factory=list)
    aggregators: List[str] = Field(default_factory=list)
    order: List[Order] = Field(default_factory=list)
    stat_column: Optional[str] = None


class DataToBinsRequest(BaseModel):
    column: str
    filter: StatisticSearchPayload = Field(default_factory=StatisticSearchPayload)
    # True: bucket the trimmed range, False: the original min..max
    all: bool = True
    distribution_type: DistributionType = DistributionType.BY_INTERVAL
    number_of_bins: Optional[int] = None


# ============================================================
#  DISTRIBUTION RESPONSES
# ============================================================

class Statistics(BaseModel):
    count: int = 0
    min: Number = 0
    max: Number = 0
    mean: float = 0.0
    median: float = 0.0
    rsd: int = 0
    quantiles: List[Quantile] = Field(default_factory=list)

    @field_serializer("mean", "median")
    def _as_int(self, value: float) -> int:
        return int(value)


class IntervalData(BaseModel):
    column: str
    category: str
    min: Number
    max: Number
    median: Number
    count: int
    mean: float
    rsd: int

    @field_serializer("mean")
    def _as_int(self, value: float) -> int:
        return int(value)


class DistributionChartData(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    axis_label: str
    data_label: str = "stat_category"
    axis_values: List[Number] = Field(default_factory=list)
    min: Number = 0
    max: Number = 0
    median: Number = 0
    count: int = 0
    mean: float = 0.0
    rsd: int = 0
    data: List[IntervalData] = Field(default_factory=list)

    @field_serializer("mean")
    def _as_int(self, value: float) -> int:
        return int(value)


# ============================================================
#  GROUPED CHART RESPONSES
# ============================================================

class Metadata(BaseModel):
    column_index: int
    column: str


class DimensionData(BaseModel):
    column_index: int
    column_name: str
    label: str
    data: List[str]
    distinct_count: int


class StatisticData(BaseModel):
    count: Optional[int] = None
    sum: Optional[float] = None
    avg: Optional[float] = None
    min: Optional[float] = None
    max: Optional[float] = None
    median: Optional[float] = None
    rsd: Optional[float] = None
    quantile: Optional[float] = None


class StatisticResponse(BaseModel):
    metadata: List[Metadata] = Field(default_factory=list)
    dimensions: List[DimensionData] = Field(default_factory=list)
    data: List[StatisticData] = Field(default_factory=list)
    total_count: int = 0


# ============================================================
#  PRICE ESTIMATION
# ============================================================

class PriceEstimate(BaseModel):
    """
    Figures of the comparable listings, rounded to whole units, and the
    blended estimate. `rsd` is in percent.
    """
    column: str
    count: int
    rsd: int
    mean: int
    median: int
    quantile_66: int
    quantile_75: int
    quantile_80: int
    quantile_85: int
    max: int
    estimation: int
