"""Link functions mapping linear predictors onto the two parts of a hurdle model."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, ClassVar, TypeAlias

import numpy as np
from scipy.special import expit

from .core import DomainError

Predictor: TypeAlias = float | np.ndarray


class ZeroInflatedLink(ABC):
    """Map linear predictors to ``P(y > 0)`` and ``E[y | y > 0]``.

    Bias terms are not stored on the link because they usually depend on the
    positive-part family and its parameters (e.g. ``sigma**2 / 2`` for a
    log-normal), so ``positive_rate`` takes them per call.
    """

    name: ClassVar[str] = ""

    @abstractmethod
    def encounter_probability(self, p1: Predictor, p2: Predictor | None = None) -> Predictor:
        """Probability of a non-zero observation."""

    @abstractmethod
    def positive_rate(
        self, p1: Predictor, p2: Predictor | None = None, *, bias: Predictor = 0.0
    ) -> Predictor:
        """Expected observation given an encounter, minus ``bias``."""


@dataclass(frozen=True, slots=True)
class LogitLogLink(ZeroInflatedLink):
    """Logistic encounter probability with a log-linear positive rate.

    ``P(y > 0) = logit^-1(p1)`` and ``E[y | y > 0] = exp(p2) - bias``.
    """

    name: ClassVar[str] = "logit-log"

    def encounter_probability(self, p1: Predictor, p2: Predictor | None = None) -> Predictor:
        return expit(p1)

    def positive_rate(
        self, p1: Predictor, p2: Predictor | None = None, *, bias: Predictor = 0.0
    ) -> Predictor:
        rate_predictor = p1 if p2 is None else p2
        return np.exp(rate_predictor) - bias


@dataclass(frozen=True, slots=True)
class PoissonLink(ZeroInflatedLink):
    """The Poisson link of Thorson (2018).

    With ``n`` the log numbers-density and ``w`` the log weight-per-group,

    ``P(y > 0) = 1 - exp(-a exp(n))``

    ``E[y | y > 0] = exp(n) exp(w) / P(y > 0) - bias``

    where ``a`` is the offset (e.g. area swept). Encounter probability is a
    complementary log-log link, and the pair approximates a compound
    Poisson-gamma (Tweedie, ``1 < p < 2``) response: the number of groups is
    Poisson with mean ``exp(n)`` and each group weighs ``exp(w)`` on average.
    """

    name: ClassVar[str] = "poisson"

    # integer default keeps float32 predictors in float32
    offset: float = 1

    def __post_init__(self) -> None:
        if not self.offset > 0:
            raise DomainError(f"offset must be positive (got {self.offset!r}).")

    def encounter_probability(self, p1: Predictor, p2: Predictor | None = None) -> Predictor:
        return -np.expm1(-self.offset * np.exp(p1))

    def positive_rate(
        self, p1: Predictor, p2: Predictor | None = None, *, bias: Predictor = 0.0
    ) -> Predictor:
        if p2 is None:
            raise TypeError("PoissonLink.positive_rate requires both linear predictors.")
        return np.exp(np.add(p1, p2)) / self.encounter_probability(p1) - bias


@dataclass(frozen=True, slots=True)
class IdentityLink(ZeroInflatedLink):
    """Pass-through link: ``p1`` is the encounter probability, ``p2`` the positive rate."""

    name: ClassVar[str] = "identity"

    def encounter_probability(self, p1: Predictor, p2: Predictor | None = None) -> Predictor:
        values = np.asarray(p1, dtype=float)
        if not np.all((values > 0) & (values < 1)):
            raise DomainError("p1 must lie strictly between zero and one.")
        return p1

    def positive_rate(
        self, p1: Predictor, p2: Predictor | None = None, *, bias: Predictor = 0.0
    ) -> Predictor:
        rate = p1 if p2 is None else p2
        return np.subtract(rate, bias)


LINKS: dict[str, type[ZeroInflatedLink]] = {
    cls.name: cls for cls in (LogitLogLink, PoissonLink, IdentityLink)
}


def encounter_probability(
    link: ZeroInflatedLink, p1: Predictor, p2: Predictor | None = None
) -> Predictor:
    """Probability of encounter (non-zero observation) under ``link``.

    ``p2`` is accepted for symmetry with :func:`positive_rate`; none of the
    built-in links use it.
    """
    return link.encounter_probability(p1, p2)


def positive_rate(
    link: ZeroInflatedLink,
    p1: Predictor,
    p2: Predictor | None = None,
    *,
    bias: Predictor = 0.0,
) -> Predictor:
    """Expected positive observation conditional on an encounter.

    ``bias`` is *subtracted* from the computed rate, which is useful e.g. when
    modelling the mean rather than the median of log-normal observations.
    """
    return link.positive_rate(p1, p2, bias=bias)


def list_links() -> Iterable[str]:
    """Return the names of the available link functions."""
    return sorted(LINKS)


def get_link(name: str, **options: Any) -> ZeroInflatedLink:
    """Instantiate a link by name; ``options`` go to its constructor."""
    key = name.strip().lower().replace("_", "-")
    if key not in LINKS:
        raise KeyError(f"Unknown link '{name}'.")
    return LINKS[key](**options)


__all__ = [
    "ZeroInflatedLink",
    "LogitLogLink",
    "PoissonLink",
    "IdentityLink",
    "LINKS",
    "encounter_probability",
    "positive_rate",
    "list_links",
    "get_link",
]
