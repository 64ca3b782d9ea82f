# backend/models/quantiles.py

from typing import List

from pydantic import BaseModel


class Quantile(BaseModel):
    column: str
    quantile: float
    value: float = 0.0
    bin: int
    alias: str


def generate_quantiles(column: str, number_of_bins: int) -> List[Quantile]:
    """
    Evenly spaced quantile definitions for `column`: bin / N for bin = 1..N,
    aliased q<percent> (q20, q40, ...). `value` is filled in later by the
    engine. N < 1 gives an empty list.
    """
    if number_of_bins < 1:
        return []

    quantiles = []
    for bin_ in range(1, number_of_bins + 1):
        fraction = bin_ / number_of_bins
        quantiles.append(
            Quantile(
                column=column,
                quantile=fraction,
                bin=bin_,
                # half-up, so 1/8 is q13 rather than q12
                alias=f"q{int(fraction * 100 + 0.5)}",
            )
        )

    return quantiles
