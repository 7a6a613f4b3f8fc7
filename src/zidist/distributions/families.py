"""Built-in positive-part families and their moment-matching formulas."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

import numpy as np
from scipy import stats
from scipy.optimize import minimize_scalar

from ..core import DomainError
from .base import PositiveFamily, frozen_parameters

logger = logging.getLogger(__name__)

MODE_SEARCH_TAIL = 1e-9


def _check_positive(rate: Any, dispersion: Any) -> None:
    if not np.all(np.asarray(rate, dtype=float) > 0):
        raise DomainError("positive rate must be strictly positive.")
    if not np.all(np.asarray(dispersion, dtype=float) > 0):
        raise DomainError("dispersion must be strictly positive.")


def lognormal_parameters(
    rate: Any, dispersion: Any, *, bias_correct: bool = True
) -> dict[str, Any]:
    """Log-scale location and scale for a log-normal with the given rate.

    With ``bias_correct`` the *mean* equals ``rate``; without it the median does.
    ``dispersion`` is the standard deviation on the log scale.
    """
    _check_positive(rate, dispersion)
    bias = np.square(dispersion) / 2.0 if bias_correct else 0.0
    return {"mu": np.log(rate) - bias, "sigma": dispersion}


def build_lognormal(mu: Any, sigma: Any) -> Any:
    return stats.lognorm(s=sigma, scale=np.exp(mu))


def gamma_parameters(rate: Any, dispersion: Any) -> dict[str, Any]:
    """Shape and scale giving mean ``rate`` and standard deviation ``dispersion``."""
    # mean = shape * scale, std = sqrt(shape) * scale
    _check_positive(rate, dispersion)
    return {
        "shape": np.square(np.divide(rate, dispersion)),
        "scale": np.square(dispersion) / rate,
    }


def build_gamma(shape: Any, scale: Any) -> Any:
    return stats.gamma(a=shape, scale=scale)


def inverse_gamma_parameters(rate: Any, dispersion: Any) -> dict[str, Any]:
    """Shape and scale giving mean ``rate`` and standard deviation ``dispersion``."""
    # mean = scale / (shape - 1) for shape > 1
    # var = scale**2 / [(shape - 1)**2 (shape - 2)] for shape > 2
    # => shape = mean**2 / var + 2, scale = mean * (shape - 1)
    _check_positive(rate, dispersion)
    shape = np.square(np.divide(rate, dispersion)) + 2.0
    return {"shape": shape, "scale": np.multiply(rate, shape - 1.0)}


def build_inverse_gamma(shape: Any, scale: Any) -> Any:
    return stats.invgamma(a=shape, scale=scale)


def inverse_gaussian_parameters(rate: Any, dispersion: Any) -> dict[str, Any]:
    """Mean ``rate``; the dispersion is used directly as the shape parameter."""
    _check_positive(rate, dispersion)
    return {"mean": rate, "shape": dispersion}


def build_inverse_gaussian(mean: Any, shape: Any) -> Any:
    return stats.invgauss(mu=np.divide(mean, shape), scale=shape)


def _lognormal_mode(params: Mapping[str, Any]) -> float:
    return params["scale"] * np.exp(-np.square(params["s"]))


def _gamma_mode(params: Mapping[str, Any]) -> float:
    # density is unbounded at zero when shape < 1
    shape = params["a"]
    return (shape - 1.0) * params["scale"] if shape >= 1 else 0.0


def _inverse_gamma_mode(params: Mapping[str, Any]) -> float:
    return params["scale"] / (params["a"] + 1.0)


def _inverse_gaussian_mode(params: Mapping[str, Any]) -> float:
    shape = params["scale"]
    mean = params["mu"] * shape
    ratio = mean / shape
    return mean * (np.sqrt(1.0 + 2.25 * ratio**2) - 1.5 * ratio)


MODE_FORMULAS: dict[str, Callable[[Mapping[str, Any]], float]] = {
    "lognorm": _lognormal_mode,
    "gamma": _gamma_mode,
    "invgamma": _inverse_gamma_mode,
    "invgauss": _inverse_gaussian_mode,
}


def distribution_mode(frozen: Any) -> float:
    """Mode of a frozen continuous distribution.

    Closed forms cover the built-in families; anything else is handled by
    maximising the log-density between the extreme quantiles.
    """
    formula = MODE_FORMULAS.get(frozen.dist.name)
    if formula is not None:
        params = frozen_parameters(frozen)
        return float(params["loc"] + formula(params))

    logger.debug("No closed-form mode for %s; maximising log-density.", frozen.dist.name)
    lower, upper = frozen.ppf([MODE_SEARCH_TAIL, 1.0 - MODE_SEARCH_TAIL])
    result = minimize_scalar(
        lambda x: -frozen.logpdf(x),
        bounds=(float(lower), float(upper)),
        method="bounded",
    )
    return float(result.x)


BUILTIN_FAMILIES = [
    PositiveFamily(
        name="lognormal",
        parameters=("mu", "sigma"),
        build=build_lognormal,
        derive=lognormal_parameters,
        dispersion="log-scale standard deviation",
        bias_correction=True,
        aliases=("lognorm", "log_normal"),
        notes="Log-normal; bias correction matches the mean rather than the median.",
    ),
    PositiveFamily(
        name="gamma",
        parameters=("shape", "scale"),
        build=build_gamma,
        derive=gamma_parameters,
        notes="Gamma in shape-scale form matched on mean and standard deviation.",
    ),
    PositiveFamily(
        name="inverse_gamma",
        parameters=("shape", "scale"),
        build=build_inverse_gamma,
        derive=inverse_gamma_parameters,
        aliases=("invgamma",),
        notes="Inverse gamma matched on mean and standard deviation (shape > 2).",
    ),
    PositiveFamily(
        name="inverse_gaussian",
        parameters=("mean", "shape"),
        build=build_inverse_gaussian,
        derive=inverse_gaussian_parameters,
        dispersion="shape parameter",
        aliases=("invgauss",),
        notes="Inverse Gaussian (Wald) with the dispersion as its shape parameter.",
    ),
]

__all__ = [
    "BUILTIN_FAMILIES",
    "MODE_FORMULAS",
    "distribution_mode",
    "lognormal_parameters",
    "build_lognormal",
    "gamma_parameters",
    "build_gamma",
    "inverse_gamma_parameters",
    "build_inverse_gamma",
    "inverse_gaussian_parameters",
    "build_inverse_gaussian",
]
