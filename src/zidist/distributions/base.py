"""Positive-part family registry and helpers for frozen scipy distributions."""

from __future__ import annotations

import copy
import logging
import os
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from importlib import import_module, metadata
from pathlib import Path
from typing import Any

import yaml
from scipy import stats

from ..core import UnsupportedFamilyError

Builder = Callable[..., Any]
Derivation = Callable[..., dict[str, Any]]

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "zidist.families"


@dataclass(slots=True)
class PositiveFamily:
    """Describe a positive-part family and how to match it to a target rate.

    ``derive(rate, dispersion, **options)`` returns the natural parameters
    named in ``parameters``; ``build(**parameters)`` turns them into a frozen
    scipy distribution.
    """

    name: str
    parameters: tuple[str, ...]
    build: Builder
    derive: Derivation
    dispersion: str = "standard deviation"
    bias_correction: bool = False
    aliases: tuple[str, ...] = ()
    notes: str | None = None

    def derive_options(self, bias_correct: bool | None = None) -> dict[str, Any]:
        """Keyword options for :attr:`derive`, rejecting unsupported corrections."""
        if bias_correct is None:
            return {}
        if not self.bias_correction:
            raise ValueError(f"Family '{self.name}' does not support bias correction.")
        return {"bias_correct": bias_correct}

    def from_rate(self, rate: Any, dispersion: Any, **options: Any) -> Any:
        """Frozen distribution whose mean (or median) matches ``rate``."""
        return self.build(**self.derive(rate, dispersion, **options))


_REGISTRY: dict[str, PositiveFamily] = {}


def _normalise(name: str) -> str:
    return name.strip().lower().replace("-", "_")


def list_families() -> Iterable[str]:
    """Return registered family names (aliases excluded)."""
    return sorted({family.name for family in _REGISTRY.values()})


def get_family(name: str | PositiveFamily) -> PositiveFamily:
    """Retrieve a family by name or alias."""
    if isinstance(name, PositiveFamily):
        return name
    key = _normalise(name)
    if key not in _REGISTRY:
        raise UnsupportedFamilyError(f"Unsupported positive-part family '{name}'.")
    return _REGISTRY[key]


def register_family(family: PositiveFamily, *, overwrite: bool = False) -> None:
    """Register a family under its name and aliases."""
    keys = [_normalise(family.name), *(_normalise(alias) for alias in family.aliases)]
    if not overwrite:
        for key in keys:
            if key in _REGISTRY:
                raise ValueError(f"Family '{key}' already registered.")
    for key in keys:
        _REGISTRY[key] = family
    logger.debug("Registered positive family %s (keys=%s)", family.name, keys)


def clear_registry() -> None:
    """Reset the registry (primarily for testing)."""
    _REGISTRY.clear()


def _iter_families(candidate: Any) -> Iterable[PositiveFamily]:
    if isinstance(candidate, PositiveFamily):
        yield candidate
    elif isinstance(candidate, Mapping) and {"name", "build", "derive"} <= set(candidate):
        yield PositiveFamily(
            name=str(candidate["name"]),
            parameters=tuple(str(param) for param in candidate.get("parameters", [])),
            build=_load_object(candidate["build"]),
            derive=_load_object(candidate["derive"]),
            dispersion=str(candidate.get("dispersion", "standard deviation")),
            bias_correction=bool(candidate.get("bias_correction", False)),
            aliases=tuple(str(alias) for alias in candidate.get("aliases", [])),
            notes=candidate.get("notes"),
        )
    elif isinstance(candidate, Iterable) and not isinstance(candidate, str | bytes):
        for item in candidate:
            yield from _iter_families(item)
    elif callable(candidate):
        yield from _iter_families(candidate())
    else:
        raise TypeError(
            "Unsupported family definition. Expected PositiveFamily, an iterable of "
            "PositiveFamily instances, a callable returning them, or a mapping with "
            "name/build/derive keys."
        )


def _load_object(path: str) -> Any:
    module_name, _, attribute = path.partition(":")
    if not attribute:
        module_name, _, attribute = path.rpartition(".")
    if not module_name or not attribute:
        raise ValueError(f"Invalid import path '{path}'. Expected 'module:callable'.")
    module = import_module(module_name)
    try:
        return getattr(module, attribute)
    except AttributeError as exc:
        raise AttributeError(f"Module '{module_name}' has no attribute '{attribute}'.") from exc


def load_entry_points(group: str = ENTRY_POINT_GROUP) -> list[str]:
    """Discover third-party positive families via entry points."""
    loaded: list[str] = []
    try:
        candidates = metadata.entry_points().select(group=group)
    except Exception as exc:  # pragma: no cover - discovery failure
        logger.debug("Entry point discovery failed: %s", exc)
        return loaded

    for ep in candidates:
        try:
            for family in _iter_families(ep.load()):
                register_family(family, overwrite=True)
                loaded.append(family.name)
        except Exception as exc:  # pragma: no cover - plugin failure
            logger.warning("Failed to load family entry point '%s': %s", ep.name, exc)
    return loaded


def load_yaml_config(path: str | os.PathLike[str]) -> list[str]:
    """Load additional positive families from a YAML configuration file."""
    path = Path(path)
    if not path.exists():
        logger.debug("Skipping family config %s (file not found)", path)
        return []

    try:
        data = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as exc:
        logger.warning("Failed to parse family config %s: %s", path, exc)
        return []

    registered: list[str] = []
    for item in data.get("families", []):
        try:
            if "callable" in item:
                factory = _load_object(item["callable"])
                produced = factory(*item.get("args", []), **item.get("kwargs", {}))
            else:
                produced = item
            for family in _iter_families(produced):
                register_family(family, overwrite=item.get("overwrite", True))
                registered.append(family.name)
        except Exception as exc:
            logger.warning(
                "Failed to register family from %s (entry=%s): %s",
                path,
                item,
                exc,
            )
    return registered


def frozen_parameters(frozen: Any) -> dict[str, Any]:
    """Return the shape, ``loc`` and ``scale`` values of a frozen scipy distribution."""
    dist = frozen.dist
    names = [name.strip() for name in dist.shapes.split(",")] if dist.shapes else []
    values: dict[str, Any] = {"loc": 0.0}
    if isinstance(dist, stats.rv_continuous):
        names.extend(["loc", "scale"])
        values["scale"] = 1.0
    else:
        names.append("loc")
    if len(frozen.args) > len(names):
        raise TypeError(f"Too many positional parameters for '{dist.name}'.")
    values.update(zip(names, frozen.args))
    values.update(frozen.kwds)
    return values


def copy_frozen(frozen: Any) -> Any:
    """Return an independent frozen distribution with the same parameters."""
    return frozen.dist(*copy.deepcopy(frozen.args), **copy.deepcopy(dict(frozen.kwds)))


def is_bernoulli(frozen: Any) -> bool:
    return getattr(getattr(frozen, "dist", None), "name", None) == "bernoulli"


def is_continuous(frozen: Any) -> bool:
    return isinstance(getattr(frozen, "dist", None), stats.rv_continuous)


def describe_frozen(frozen: Any) -> str:
    """Compact ``name(param=value, ...)`` rendering of a frozen distribution."""
    params = ", ".join(
        f"{key}={value:.6g}" if isinstance(value, int | float) else f"{key}={value}"
        for key, value in frozen_parameters(frozen).items()
    )
    return f"{frozen.dist.name}({params})"


__all__ = [
    "PositiveFamily",
    "ENTRY_POINT_GROUP",
    "list_families",
    "get_family",
    "register_family",
    "clear_registry",
    "load_entry_points",
    "load_yaml_config",
    "frozen_parameters",
    "copy_frozen",
    "is_bernoulli",
    "is_continuous",
    "describe_frozen",
]
