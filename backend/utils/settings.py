# backend/utils/settings.py

import os
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import BaseModel

BASE_DIR = Path(__file__).resolve().parents[1]
DEFAULT_PRICE_DATA_FILE = BASE_DIR / "resources" / "VehiclePriceView.csv"


class Settings(BaseModel):
    price_data_file: Path = DEFAULT_PRICE_DATA_FILE
    price_data_separator: str = ";"
    cors_allowed_origins: List[str] = ["*"]
    log_level: str = "INFO"
    default_bins: int = 10


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Read configuration from the environment once per process.
    Call get_settings.cache_clear() after changing the environment in tests.
    """
    return Settings(
        price_data_file=Path(os.getenv("PRICE_DATA_FILE", str(DEFAULT_PRICE_DATA_FILE))),
        price_data_separator=os.getenv("PRICE_DATA_SEPARATOR", ";"),
        cors_allowed_origins=os.getenv("CORS_ALLOWED_ORIGINS", "*").split(","),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        default_bins=int(os.getenv("DEFAULT_BINS", "10")),
    )
