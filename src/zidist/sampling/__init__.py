"""Sampling utilities built on top of links and zero-inflated distributions."""

from __future__ import annotations

from typing import Any

import numpy as np
import pandas as pd

from ..core import ArrayLike
from ..distributions import PositiveFamily, ZeroInflatedDistribution, get_family
from ..links import ZeroInflatedLink
from ..rng import RandomState, resolve_rng

__all__ = [
    "simulate_observations",
    "summarise_draws",
    "compare_moments",
]


def simulate_observations(
    link: ZeroInflatedLink,
    family: str | PositiveFamily,
    p1: ArrayLike,
    p2: ArrayLike,
    dispersion: float,
    *,
    bias_correct: bool | None = None,
    random_state: RandomState = None,
) -> np.ndarray:
    """Simulate one observation per (broadcast) pair of linear predictors.

    Each element follows the distribution that
    :meth:`ZeroInflatedDistribution.from_link` would build for the same
    predictors; the positive part is evaluated with array-valued parameters
    rather than one distribution object per element.
    """
    definition = get_family(family)
    options = definition.derive_options(bias_correct)
    first, second = np.broadcast_arrays(np.asarray(p1, dtype=float), np.asarray(p2, dtype=float))
    probability = np.asarray(link.encounter_probability(first, second), dtype=float)
    rate = link.positive_rate(first, second)
    positive = definition.from_rate(rate, dispersion, **options)
    rng = resolve_rng(random_state)
    encountered = rng.random(probability.shape) < probability
    draws = positive.rvs(size=probability.shape, random_state=rng)
    return np.where(encountered, draws, 0.0)


def summarise_draws(draws: ArrayLike) -> dict[str, float]:
    """Empirical mean, variance, standard error and zero fraction of ``draws``."""
    values = np.asarray(draws, dtype=float).ravel()
    if values.size == 0:
        raise ValueError("Draws array must contain at least one observation.")
    variance = float(np.var(values, ddof=1)) if values.size > 1 else 0.0
    return {
        "n": float(values.size),
        "mean": float(np.mean(values)),
        "variance": variance,
        "std_error": float(np.sqrt(variance / values.size)),
        "zero_fraction": float(np.mean(values == 0)),
    }


def compare_moments(distribution: ZeroInflatedDistribution, draws: ArrayLike) -> pd.DataFrame:
    """Tabulate theoretical against empirical moments for a set of draws."""
    empirical = summarise_draws(draws)
    records: list[dict[str, Any]] = []
    for statistic, expected in (
        ("mean", distribution.mean()),
        ("variance", distribution.var()),
        ("zero_fraction", distribution.zero_probability),
    ):
        observed = empirical[statistic]
        records.append(
            {
                "statistic": statistic,
                "theoretical": expected,
                "empirical": observed,
                "difference": observed - expected,
            }
        )
    frame = pd.DataFrame.from_records(records)
    frame.attrs["n"] = int(empirical["n"])
    frame.attrs["std_error"] = empirical["std_error"]
    return frame
