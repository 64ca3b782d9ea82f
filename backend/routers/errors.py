# backend/routers/errors.py

from fastapi import HTTPException

from services.errors import (
    AggregationError,
    DatasetError,
    EmptyIntervalSetError,
    InvalidArgumentError,
    InvalidIntervalError,
    NoDataError,
    OverlapError,
    StatisticsError,
)

STATUS_CODES = {
    InvalidArgumentError: 400,
    InvalidIntervalError: 400,
    OverlapError: 400,
    AggregationError: 400,
    EmptyIntervalSetError: 422,
    NoDataError: 404,
    DatasetError: 503,
}


def to_http_error(e: StatisticsError) -> HTTPException:
    for error_type, status_code in STATUS_CODES.items():
        if isinstance(e, error_type):
            return HTTPException(status_code=status_code, detail=str(e))
    return HTTPException(status_code=500, detail="Statistics engine failed")
