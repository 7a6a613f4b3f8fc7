"""Zero-inflated (hurdle) distributions for non-negative continuous observations."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import numpy as np
from scipy import stats

from ..core import ArrayLike, DistributionSummary, DomainError
from ..links import Predictor, ZeroInflatedLink
from ..rng import RandomState, resolve_rng
from .base import (
    PositiveFamily,
    copy_frozen,
    describe_frozen,
    frozen_parameters,
    get_family,
    is_bernoulli,
    is_continuous,
)
from .families import distribution_mode

logger = logging.getLogger(__name__)


def _unwrap(values: np.ndarray) -> Any:
    return values.item() if np.ndim(values) == 0 else values


@dataclass(frozen=True, slots=True, repr=False)
class ZeroInflatedDistribution:
    """A point mass at zero mixed with a continuous positive-part distribution.

    Parameters
    ----------
    encounter:
        Frozen ``scipy.stats.bernoulli``; its success probability is the
        probability of a positive (non-zero) observation.
    positive:
        Frozen continuous scipy distribution with non-negative support,
        describing observations conditional on an encounter.

    :meth:`from_link` derives both parts from a link function, two linear
    predictors and a dispersion. The dispersion is the log-scale standard
    deviation for the log-normal, the standard deviation for the gamma and
    inverse gamma, and the shape parameter for the inverse Gaussian.

    Both parts are copied on construction, so the instance owns them and later
    changes to the caller's frozen objects have no effect. Instances are never
    mutated after construction and can be shared between readers. Every query
    reads the encounter probability captured at construction. The natural
    support formulas are used even when the encounter probability is exactly
    zero or one: ``support()`` stays ``(0, upper)``.
    """

    encounter: Any
    positive: Any
    _probability: float = field(init=False, compare=False)

    def __post_init__(self) -> None:
        if not is_bernoulli(self.encounter):
            raise TypeError("encounter must be a frozen scipy.stats.bernoulli distribution.")
        if not is_continuous(self.positive):
            raise TypeError("positive must be a frozen continuous scipy.stats distribution.")
        object.__setattr__(self, "encounter", copy_frozen(self.encounter))
        object.__setattr__(self, "positive", copy_frozen(self.positive))
        params = frozen_parameters(self.encounter)
        if params["loc"] != 0:
            raise DomainError("encounter distribution must be supported on {0, 1}.")
        probability = float(params["p"])
        if not 0.0 <= probability <= 1.0:
            raise DomainError(f"encounter probability must lie in [0, 1] (got {probability}).")
        lower, _ = self.positive.support()
        if not lower >= 0:
            raise DomainError("positive distribution must have non-negative support.")
        object.__setattr__(self, "_probability", probability)

    @classmethod
    def from_probability(cls, probability: float, positive: Any) -> ZeroInflatedDistribution:
        """Build from an encounter probability and a frozen positive distribution."""
        return cls(stats.bernoulli(probability), positive)

    @classmethod
    def from_link(
        cls,
        link: ZeroInflatedLink,
        family: str | PositiveFamily,
        p1: Predictor,
        p2: Predictor,
        dispersion: float,
        *,
        bias_correct: bool | None = None,
    ) -> ZeroInflatedDistribution:
        """Derive a distribution from a link, two linear predictors and a dispersion.

        ``family`` names a registered positive-part family (``lognormal``,
        ``gamma``, ``inverse_gamma``, ``inverse_gaussian`` or a plugin), whose
        parameters are chosen so that its mean equals the link's positive rate.
        ``bias_correct`` only applies to families that support it; for the
        log-normal it defaults to ``True`` and ``False`` matches the median
        instead of the mean.
        """
        definition = get_family(family)
        options = definition.derive_options(bias_correct)
        probability = float(link.encounter_probability(p1, p2))
        rate = link.positive_rate(p1, p2)
        positive = definition.from_rate(rate, dispersion, **options)
        logger.debug(
            "Derived %s zero-inflated distribution (p=%.6g, rate=%.6g, dispersion=%.6g)",
            definition.name,
            probability,
            rate,
            dispersion,
        )
        return cls(stats.bernoulli(probability), positive)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(p={self._probability:.6g}, "
            f"positive={describe_frozen(self.positive)})"
        )

    @property
    def encounter_probability(self) -> float:
        """Probability of a positive observation."""
        return self._probability

    @property
    def zero_probability(self) -> float:
        """Probability mass of the atom at zero."""
        return 1.0 - self._probability

    # Densities -----------------------------------------------------------

    def pdf(self, x: ArrayLike) -> Any:
        """Density at ``x``; at exactly zero this is the mass of the zero atom."""
        values = np.asarray(x, dtype=float)
        encountered = values != 0
        density = stats.bernoulli.pmf(encountered.astype(int), self._probability)
        positive = self.positive.pdf(np.where(encountered, values, 1.0))
        return _unwrap(np.where(encountered, density * positive, density))

    def logpdf(self, x: ArrayLike) -> Any:
        """Log-density at ``x``, accumulated in log space."""
        values = np.asarray(x, dtype=float)
        encountered = values != 0
        logdens = stats.bernoulli.logpmf(encountered.astype(int), self._probability)
        positive = self.positive.logpdf(np.where(encountered, values, 1.0))
        return _unwrap(np.where(encountered, logdens + positive, logdens))

    def loglikelihood(self, x: ArrayLike) -> float:
        """Total log-likelihood of the observations ``x``."""
        return float(np.sum(self.logpdf(x)))

    # Distribution functions ----------------------------------------------

    def cdf(self, x: ArrayLike) -> Any:
        """Cumulative probability; every ``x <= 0`` carries the zero-atom mass."""
        values = np.asarray(x, dtype=float)
        positive = values > 0
        cumulative = self.positive.cdf(np.where(positive, values, 0.0))
        p0 = self.zero_probability
        return _unwrap(np.where(positive, p0 + self._probability * cumulative, p0))

    def sf(self, x: ArrayLike) -> Any:
        """Survival function ``P(X > x)``."""
        values = np.asarray(x, dtype=float)
        positive = values > 0
        survival = self.positive.sf(np.where(positive, values, 0.0))
        return _unwrap(np.where(positive, self._probability * survival, self._probability))

    def ppf(self, q: ArrayLike) -> Any:
        """Quantile function; probabilities up to the zero-atom mass map to zero."""
        probs = np.asarray(q, dtype=float)
        if np.any(np.isnan(probs)) or np.any((probs < 0) | (probs > 1)):
            raise DomainError("quantile probabilities must lie in [0, 1].")
        p0 = self.zero_probability
        encountered = probs > p0
        scaled = np.divide(
            probs - p0,
            self._probability,
            out=np.zeros_like(probs),
            where=encountered,
        )
        quantiles = self.positive.ppf(np.clip(scaled, 0.0, 1.0))
        return _unwrap(np.where(encountered, quantiles, 0.0))

    quantile = ppf

    def median(self) -> float:
        return self.ppf(0.5)

    # Support -------------------------------------------------------------

    @property
    def minimum(self) -> float:
        return min(0.0, float(self.positive.support()[0]))

    @property
    def maximum(self) -> float:
        return float(self.positive.support()[1])

    def support(self) -> tuple[float, float]:
        return self.minimum, self.maximum

    def insupport(self, x: ArrayLike) -> Any:
        values = np.asarray(x, dtype=float)
        return _unwrap((self.minimum <= values) & (values <= self.maximum))

    # Moments -------------------------------------------------------------

    def mean(self) -> float:
        return self._probability * float(self.positive.mean())

    def var(self) -> float:
        """Variance by the law of total variance.

        ``p (Var + E**2) - (p E)**2`` is evaluated as ``p Var + p (1 - p) E**2``,
        which is exactly zero at ``p = 0`` and exactly ``Var`` at ``p = 1``.
        """
        p = self._probability
        mean = float(self.positive.mean())
        return p * float(self.positive.var()) + p * (1.0 - p) * mean**2

    def std(self) -> float:
        return float(np.sqrt(self.var()))

    def modes(self) -> tuple[float, float]:
        """The zero atom and the mode of the positive part."""
        return 0.0, distribution_mode(self.positive)

    # Sampling ------------------------------------------------------------

    def rvs(
        self,
        size: int | tuple[int, ...] | None = None,
        *,
        random_state: RandomState = None,
    ) -> Any:
        """Draw observations: zero with probability ``1 - p``, else a positive draw.

        Without ``random_state`` the process-wide generator from
        :func:`zidist.rng.get_default_rng` is used.
        """
        rng = resolve_rng(random_state)
        encountered = stats.bernoulli.rvs(self._probability, size=size, random_state=rng)
        draws = self.positive.rvs(size=size, random_state=rng)
        return _unwrap(np.asarray(encountered * draws, dtype=float))

    def summary(self) -> DistributionSummary:
        """Collect headline statistics into a :class:`DistributionSummary`."""
        return DistributionSummary(
            positive_family=self.positive.dist.name,
            encounter_probability=self._probability,
            mean=self.mean(),
            variance=self.var(),
            std=self.std(),
            median=self.median(),
            modes=self.modes(),
            support=self.support(),
        )


__all__ = ["ZeroInflatedDistribution"]
