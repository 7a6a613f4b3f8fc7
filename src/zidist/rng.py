"""Process-wide default random generator for sampling without an explicit source."""

from __future__ import annotations

import logging
import os
from typing import TypeAlias

import numpy as np

RandomState: TypeAlias = np.random.Generator | np.random.SeedSequence | int | None

SEED_ENV_VAR = "ZIDIST_SEED"

logger = logging.getLogger(__name__)

_DEFAULT_RNG: np.random.Generator | None = None


def _seed_from_environment() -> int | None:
    raw = os.environ.get(SEED_ENV_VAR, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{SEED_ENV_VAR} must be an integer seed (got {raw!r}).") from exc


def get_default_rng() -> np.random.Generator:
    """Return the process-wide generator, creating it on first use.

    The generator is seeded from ``ZIDIST_SEED`` when that environment variable
    holds an integer and from fresh OS entropy otherwise. It is not locked:
    callers sampling from several threads should pass their own generators.
    """
    global _DEFAULT_RNG
    if _DEFAULT_RNG is None:
        seed = _seed_from_environment()
        _DEFAULT_RNG = np.random.default_rng(seed)
        logger.debug("Initialised default generator (seed=%s)", seed)
    return _DEFAULT_RNG


def set_default_rng(random_state: RandomState) -> np.random.Generator:
    """Replace the process-wide generator with a generator or a fresh seeded one."""
    global _DEFAULT_RNG
    if isinstance(random_state, np.random.Generator):
        _DEFAULT_RNG = random_state
    else:
        _DEFAULT_RNG = np.random.default_rng(random_state)
    return _DEFAULT_RNG


def reset_default_rng() -> None:
    """Forget the process-wide generator; the next use re-initialises it."""
    global _DEFAULT_RNG
    _DEFAULT_RNG = None


def resolve_rng(random_state: RandomState = None) -> np.random.Generator:
    """Turn ``random_state`` into a generator, defaulting to the process-wide one."""
    if random_state is None:
        return get_default_rng()
    if isinstance(random_state, np.random.Generator):
        return random_state
    return np.random.default_rng(random_state)


__all__ = [
    "RandomState",
    "SEED_ENV_VAR",
    "get_default_rng",
    "set_default_rng",
    "reset_default_rng",
    "resolve_rng",
]
