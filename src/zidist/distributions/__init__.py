"""Positive-family registry and the zero-inflated distribution type."""

from __future__ import annotations

import os
from pathlib import Path

from .base import (
    ENTRY_POINT_GROUP,
    PositiveFamily,
    clear_registry,
    frozen_parameters,
    get_family,
    list_families,
    load_entry_points,
    load_yaml_config,
    register_family,
)
from .families import BUILTIN_FAMILIES, distribution_mode
from .zeroinflated import ZeroInflatedDistribution

__all__ = [
    "ENTRY_POINT_GROUP",
    "PositiveFamily",
    "ZeroInflatedDistribution",
    "BUILTIN_FAMILIES",
    "get_family",
    "list_families",
    "register_family",
    "clear_registry",
    "load_entry_points",
    "load_yaml_config",
    "frozen_parameters",
    "distribution_mode",
]

FAMILIES_ENV_VAR = "ZIDIST_FAMILIES"


def _register_builtin() -> None:
    for family in BUILTIN_FAMILIES:
        register_family(family, overwrite=True)


def _load_config_files() -> None:
    project_root = Path(__file__).resolve().parents[3]
    config_dir = project_root / "config" / "families"
    if config_dir.exists():
        for path in sorted(config_dir.glob("*.yaml")):
            load_yaml_config(path)

    env_paths = os.environ.get(FAMILIES_ENV_VAR)
    if env_paths:
        for item in env_paths.split(os.pathsep):
            load_yaml_config(item)


_register_builtin()
load_entry_points()
_load_config_files()
