"""Top-level package exports for zidist."""

from __future__ import annotations

from importlib import metadata

__version__ = "0.1.0"

try:
    __version__ = metadata.version("zidist")
except metadata.PackageNotFoundError:  # pragma: no cover - local dev fallback
    pass

from . import core as core  # noqa: F401
from . import distributions as distributions  # noqa: F401
from . import links as links  # noqa: F401
from .core import DistributionSummary, DomainError, UnsupportedFamilyError  # noqa: F401
from .distributions import PositiveFamily, ZeroInflatedDistribution  # noqa: F401
from .links import (  # noqa: F401
    IdentityLink,
    LogitLogLink,
    PoissonLink,
    ZeroInflatedLink,
    encounter_probability,
    positive_rate,
)

__all__ = [
    "__version__",
    "core",
    "distributions",
    "links",
    "DistributionSummary",
    "DomainError",
    "UnsupportedFamilyError",
    "PositiveFamily",
    "ZeroInflatedDistribution",
    "ZeroInflatedLink",
    "LogitLogLink",
    "PoissonLink",
    "IdentityLink",
    "encounter_probability",
    "positive_rate",
]
