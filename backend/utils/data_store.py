# backend/utils/data_store.py

from typing import Optional

from services.dataset import DatasetHandle
from services.errors import DatasetError

_DATASET: Optional[DatasetHandle] = None


def set_dataset(dataset: DatasetHandle) -> None:
    """
    Register the read-only dataset the HTTP layer serves.
    Services never read this; they take the handle as an argument.
    """
    global _DATASET
    _DATASET = dataset


def get_dataset() -> DatasetHandle:
    if _DATASET is None:
        raise DatasetError("No dataset loaded")
    return _DATASET


def clear_dataset() -> None:
    global _DATASET
    _DATASET = None
