import math

import numpy as np
import pytest

from zidist.core import DomainError
from zidist.links import (
    IdentityLink,
    LogitLogLink,
    PoissonLink,
    encounter_probability,
    get_link,
    list_links,
    positive_rate,
)

P1 = 0.0
P2 = 1.0


@pytest.mark.parametrize(
    "link,p1",
    [
        (LogitLogLink(), P1),
        (PoissonLink(), P1),
        (PoissonLink(offset=2.5), -0.3),
        (IdentityLink(), 0.3),
    ],
)
def test_encounter_probability_ignores_second_predictor(link, p1: float) -> None:
    assert encounter_probability(link, p1, P2) == encounter_probability(link, p1)
    assert encounter_probability(link, p1, -7.0) == encounter_probability(link, p1)


def test_logit_log_link() -> None:
    link = LogitLogLink()
    assert encounter_probability(link, P1, P2) == 0.5
    assert positive_rate(link, P1, P2) == pytest.approx(math.e, rel=1e-15)
    # single-predictor form takes the rate predictor
    assert positive_rate(link, P2) == pytest.approx(math.e, rel=1e-15)


@pytest.mark.parametrize(
    "link,p1,p2",
    [(LogitLogLink(), P1, P2), (PoissonLink(), P1, P2), (IdentityLink(), 0.5, 3.0)],
)
def test_bias_is_subtracted_from_rate(link, p1: float, p2: float) -> None:
    raw = positive_rate(link, p1, p2)
    assert positive_rate(link, p1, p2, bias=0.25) == pytest.approx(raw - 0.25)


def test_poisson_link_defaults() -> None:
    link = PoissonLink()
    assert link.offset == 1
    assert isinstance(link.offset, int)
    assert encounter_probability(link, P1, P2) == pytest.approx(0.6321205588285577, rel=1e-15)
    assert positive_rate(link, P1, P2) == pytest.approx(4.300258535328371, rel=1e-14)


def test_poisson_link_offset_scales_density() -> None:
    link = PoissonLink(offset=2.0)
    assert encounter_probability(link, 0.0) == pytest.approx(1.0 - math.exp(-2.0))


@pytest.mark.parametrize("offset", [0, -1, -0.5, float("nan")])
def test_poisson_link_rejects_non_positive_offset(offset: float) -> None:
    with pytest.raises(DomainError):
        PoissonLink(offset)


def test_poisson_rate_requires_both_predictors() -> None:
    with pytest.raises(TypeError):
        positive_rate(PoissonLink(), P1)


def test_poisson_link_is_vectorised() -> None:
    link = PoissonLink()
    logn = np.array([-2.0, 0.0, 1.5])
    logw = np.array([0.5, 1.0, -1.0])
    probs = encounter_probability(link, logn, logw)
    rates = positive_rate(link, logn, logw)
    assert probs.shape == (3,)
    assert np.all((probs > 0) & (probs < 1))
    assert np.allclose(rates * probs, np.exp(logn + logw))


def test_identity_link() -> None:
    link = IdentityLink()
    assert encounter_probability(link, 0.5) == 0.5
    assert positive_rate(link, 1.0) == 1.0
    assert positive_rate(link, 0.5, 2.0) == 2.0


@pytest.mark.parametrize("p1", [0.0, 1.0, 1.1, -1.0])
def test_identity_link_rejects_probabilities_outside_open_interval(p1: float) -> None:
    with pytest.raises(DomainError):
        encounter_probability(IdentityLink(), p1)


def test_domain_error_is_value_error() -> None:
    with pytest.raises(ValueError):
        encounter_probability(IdentityLink(), 2.0)


def test_link_lookup() -> None:
    assert list(list_links()) == ["identity", "logit-log", "poisson"]
    assert isinstance(get_link("logit_log"), LogitLogLink)
    poisson = get_link("Poisson", offset=3.0)
    assert isinstance(poisson, PoissonLink)
    assert poisson.offset == 3.0
    with pytest.raises(KeyError):
        get_link("probit")
    with pytest.raises(TypeError):
        get_link("identity", offset=2.0)


def test_links_are_immutable() -> None:
    link = PoissonLink(2.0)
    with pytest.raises(AttributeError):
        link.offset = 3.0  # type: ignore[misc]
