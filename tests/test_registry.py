import importlib
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import numpy as np
import pytest
from scipy import stats

from zidist.core import UnsupportedFamilyError
from zidist.distributions import (
    BUILTIN_FAMILIES,
    PositiveFamily,
    ZeroInflatedDistribution,
    clear_registry,
    get_family,
    list_families,
    register_family,
)
from zidist.distributions import base as base_registry
from zidist.distributions.families import build_gamma, gamma_parameters
from zidist.links import LogitLogLink


def _reload_registry() -> None:
    """Reload the distributions module to restore built-ins after tests."""
    import zidist.distributions as dist_module

    importlib.reload(dist_module)


@pytest.fixture
def restore_registry():
    yield
    _reload_registry()


class _DummyEntryPoint:
    def __init__(self, name: str, obj: Any) -> None:
        self.name = name
        self._obj = obj

    def load(self) -> Any:
        return self._obj


def _make_entry_points(result: Iterable[_DummyEntryPoint]) -> Any:
    class _EntryPoints(list):
        def __init__(self, values: Iterable[_DummyEntryPoint]) -> None:
            super().__init__(values)

        def select(self, *, group: str) -> list[_DummyEntryPoint]:
            return list(self)

    return _EntryPoints(result)


def test_default_registry_contains_builtin_families() -> None:
    names = list(list_families())
    assert names == ["gamma", "inverse_gamma", "inverse_gaussian", "lognormal"]
    assert len(BUILTIN_FAMILIES) == 4
    assert get_family("gamma").parameters == ("shape", "scale")


@pytest.mark.parametrize(
    "alias,name",
    [
        ("LogNormal", "lognormal"),
        ("lognorm", "lognormal"),
        ("inverse-gamma", "inverse_gamma"),
        ("invgamma", "inverse_gamma"),
        ("invgauss", "inverse_gaussian"),
    ],
)
def test_aliases_resolve(alias: str, name: str) -> None:
    assert get_family(alias).name == name


def test_family_instances_pass_through() -> None:
    family = get_family("gamma")
    assert get_family(family) is family


def test_unknown_family_raises() -> None:
    with pytest.raises(UnsupportedFamilyError, match="weibull"):
        get_family("weibull")


def test_only_lognormal_supports_bias_correction() -> None:
    assert [family.name for family in BUILTIN_FAMILIES if family.bias_correction] == [
        "lognormal"
    ]
    assert get_family("lognormal").derive_options(False) == {"bias_correct": False}
    assert get_family("gamma").derive_options(None) == {}
    with pytest.raises(ValueError):
        get_family("gamma").derive_options(True)


def test_duplicate_registration_requires_overwrite(restore_registry) -> None:
    family = PositiveFamily(
        name="gamma",
        parameters=("shape", "scale"),
        build=build_gamma,
        derive=gamma_parameters,
    )
    with pytest.raises(ValueError):
        register_family(family)
    register_family(family, overwrite=True)
    assert get_family("gamma") is family


def test_custom_family_drives_derivation(restore_registry) -> None:
    def exponential_parameters(rate: float, dispersion: float) -> dict[str, float]:
        return {"scale": rate}

    register_family(
        PositiveFamily(
            name="exponential",
            parameters=("scale",),
            build=lambda scale: stats.expon(scale=scale),
            derive=exponential_parameters,
            dispersion="unused",
        )
    )
    dist = ZeroInflatedDistribution.from_link(LogitLogLink(), "exponential", 0.0, 1.0, 1.0)
    assert dist.positive.mean() == pytest.approx(np.e)
    assert dist.mean() == pytest.approx(0.5 * np.e)


def test_entry_point_registration(restore_registry, monkeypatch: pytest.MonkeyPatch) -> None:
    clear_registry()

    dummy = PositiveFamily(
        name="entrypoint_gamma",
        parameters=("shape", "scale"),
        build=build_gamma,
        derive=gamma_parameters,
        notes="Entry-point supplied family.",
    )

    monkeypatch.setattr(
        base_registry.metadata,
        "entry_points",
        lambda: _make_entry_points([_DummyEntryPoint("demo", lambda: dummy)]),
    )

    loaded = base_registry.load_entry_points()
    assert loaded == ["entrypoint_gamma"]
    assert "entrypoint_gamma" in list_families()
    assert get_family("entrypoint_gamma") is dummy


def test_yaml_registration(tmp_path: Path, restore_registry) -> None:
    clear_registry()

    config_path = tmp_path / "custom.yaml"
    config_path.write_text(
        """
metadata:
  title: demo
families:
  - name: yaml_gamma
    parameters: ["shape", "scale"]
    build: zidist.distributions.families:build_gamma
    derive: zidist.distributions.families:gamma_parameters
    aliases: ["ygamma"]
    notes: "YAML supplied family."
  - name: broken
    parameters: ["shape"]
    build: zidist.distributions.families:does_not_exist
    derive: zidist.distributions.families:gamma_parameters
""",
        encoding="utf-8",
    )

    registered = base_registry.load_yaml_config(config_path)
    assert registered == ["yaml_gamma"]
    family = get_family("ygamma")
    assert family.name == "yaml_gamma"
    assert family.notes == "YAML supplied family."
    frozen = family.from_rate(3.0, 0.5)
    assert frozen.mean() == pytest.approx(3.0)
    assert frozen.std() == pytest.approx(0.5)


def test_yaml_missing_file_is_skipped(tmp_path: Path) -> None:
    assert base_registry.load_yaml_config(tmp_path / "missing.yaml") == []
