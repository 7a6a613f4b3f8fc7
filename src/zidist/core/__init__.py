"""Core dataclasses, error types and shared type aliases for zidist modules."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, TypeAlias

import numpy as np
import pandas as pd

ArrayLike: TypeAlias = np.ndarray | Sequence[float] | float


class DomainError(ValueError):
    """An argument violates a mathematical precondition."""


class UnsupportedFamilyError(KeyError):
    """No positive-part family is registered under the requested name."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


@dataclass(slots=True)
class DistributionSummary:
    """Headline statistics of a zero-inflated distribution."""

    positive_family: str
    encounter_probability: float
    mean: float
    variance: float
    std: float
    median: float
    modes: tuple[float, float]
    support: tuple[float, float]

    def to_frame(self) -> pd.DataFrame:
        """Return a tidy data frame of statistic/value pairs."""
        records: list[dict[str, Any]] = [
            {"statistic": "encounter_probability", "value": self.encounter_probability},
            {"statistic": "mean", "value": self.mean},
            {"statistic": "variance", "value": self.variance},
            {"statistic": "std", "value": self.std},
            {"statistic": "median", "value": self.median},
            {"statistic": "mode_zero", "value": self.modes[0]},
            {"statistic": "mode_positive", "value": self.modes[1]},
            {"statistic": "minimum", "value": self.support[0]},
            {"statistic": "maximum", "value": self.support[1]},
        ]
        return pd.DataFrame.from_records(records)


__all__ = [
    "ArrayLike",
    "DomainError",
    "UnsupportedFamilyError",
    "DistributionSummary",
]
