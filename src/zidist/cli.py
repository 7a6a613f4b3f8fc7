"""Typer-based CLI entry point."""

from __future__ import annotations

import math
import numbers
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .distributions import ZeroInflatedDistribution, get_family, list_families
from .links import LINKS, get_link, list_links

app = typer.Typer(help="Zero-inflated distribution toolkit.")
console = Console()

LINK_ARGUMENT = typer.Argument(..., help="Link function (see `zidist links`).")
FAMILY_ARGUMENT = typer.Argument(..., help="Positive-part family (see `zidist families`).")
P1_OPTION = typer.Option(0.0, "--p1", help="First linear predictor.")
P2_OPTION = typer.Option(0.0, "--p2", help="Second linear predictor.")
DISPERSION_OPTION = typer.Option(
    1.0,
    "--dispersion",
    "-s",
    help="Positive-part dispersion (family specific, see `zidist families`).",
)
OFFSET_OPTION = typer.Option(
    None,
    "--offset",
    help="Offset for the Poisson link (e.g. area swept).",
    show_default=False,
)
BIAS_CORRECT_OPTION = typer.Option(
    None,
    "--bias-correct/--no-bias-correct",
    help="Match the mean (default) or the median of a log-normal positive part.",
    show_default=False,
)
VALUES_OPTION = typer.Option(
    ...,
    "--x",
    help="Observation value to evaluate (repeat for multiples).",
)
SIZE_OPTION = typer.Option(1000, "--size", "-n", help="Number of draws.")
SEED_OPTION = typer.Option(
    None,
    "--seed",
    help="Seed for the draws (defaults to the process-wide generator).",
    show_default=False,
)
OUTPUT_OPTION = typer.Option(
    None,
    "--output",
    "-o",
    help="Optional path to write the draws as CSV.",
    show_default=False,
)

VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Enable verbose output.")
VERSION_OPTION = typer.Option(False, "--version", help="Show version and exit.")


@app.callback(invoke_without_command=True)
def cli_callback(  # noqa: B008
    ctx: typer.Context,
    verbose: bool = VERBOSE_OPTION,
    version: bool = VERSION_OPTION,
) -> None:
    if verbose or version:
        console.print(f"[bold green]zidist {__version__}[/bold green]")
    if ctx.invoked_subcommand is None and not ctx.resilient_parsing:
        raise typer.Exit()


@app.command()
def links() -> None:
    """List available link functions."""
    table = Table(title="Link Functions")
    table.add_column("Name")
    table.add_column("Description", overflow="fold")
    for name in list_links():
        doc = (LINKS[name].__doc__ or "").strip().splitlines()
        table.add_row(name, doc[0] if doc else "")
    console.print(table)


@app.command()
def families() -> None:
    """List registered positive-part families."""
    table = Table(title="Positive-Part Families")
    table.add_column("Name")
    table.add_column("Parameters")
    table.add_column("Dispersion")
    table.add_column("Description", overflow="fold")
    for name in list_families():
        family = get_family(name)
        table.add_row(
            family.name,
            ", ".join(family.parameters),
            family.dispersion,
            family.notes or "",
        )
    console.print(table)


@app.command()
def describe(  # noqa: B008
    link: str = LINK_ARGUMENT,
    family: str = FAMILY_ARGUMENT,
    p1: float = P1_OPTION,
    p2: float = P2_OPTION,
    dispersion: float = DISPERSION_OPTION,
    offset: float | None = OFFSET_OPTION,
    bias_correct: bool | None = BIAS_CORRECT_OPTION,
) -> None:
    """Summarise the distribution implied by a link and linear predictors."""
    dist = _build_distribution(link, family, p1, p2, dispersion, offset, bias_correct)
    summary = dist.summary()
    table = Table(title=f"{summary.positive_family} hurdle", expand=True)
    table.add_column("Statistic", no_wrap=True)
    table.add_column("Value", justify="right", no_wrap=True)
    for record in summary.to_frame().to_dict(orient="records"):
        table.add_row(str(record["statistic"]), _format_metric(record["value"]))
    console.print(table)


@app.command()
def evaluate(  # noqa: B008
    link: str = LINK_ARGUMENT,
    family: str = FAMILY_ARGUMENT,
    values: list[float] = VALUES_OPTION,
    p1: float = P1_OPTION,
    p2: float = P2_OPTION,
    dispersion: float = DISPERSION_OPTION,
    offset: float | None = OFFSET_OPTION,
    bias_correct: bool | None = BIAS_CORRECT_OPTION,
) -> None:
    """Evaluate density, log-density and CDF at the given observations."""
    dist = _build_distribution(link, family, p1, p2, dispersion, offset, bias_correct)
    table = Table(title="Evaluation", expand=True)
    table.add_column("x", justify="right", no_wrap=True)
    table.add_column("pdf", justify="right", no_wrap=True)
    table.add_column("logpdf", justify="right", no_wrap=True)
    table.add_column("cdf", justify="right", no_wrap=True)
    for value in values:
        table.add_row(
            _format_metric(value),
            _format_metric(dist.pdf(value)),
            _format_metric(dist.logpdf(value)),
            _format_metric(dist.cdf(value)),
        )
    console.print(table)


@app.command()
def sample(  # noqa: B008
    link: str = LINK_ARGUMENT,
    family: str = FAMILY_ARGUMENT,
    p1: float = P1_OPTION,
    p2: float = P2_OPTION,
    dispersion: float = DISPERSION_OPTION,
    offset: float | None = OFFSET_OPTION,
    bias_correct: bool | None = BIAS_CORRECT_OPTION,
    size: int = SIZE_OPTION,
    seed: int | None = SEED_OPTION,
    output: Path | None = OUTPUT_OPTION,
) -> None:
    """Draw observations and compare their moments with the theoretical ones."""
    import pandas as pd

    from .sampling import compare_moments

    if size < 1:
        console.print("[red]--size must be at least 1.[/red]")
        raise typer.Exit(code=1)
    dist = _build_distribution(link, family, p1, p2, dispersion, offset, bias_correct)
    draws = dist.rvs(size=size, random_state=seed)
    comparison = compare_moments(dist, draws)

    table = Table(title=f"Monte Carlo check (n={size})", expand=True)
    for column in ("Statistic", "Theoretical", "Empirical", "Difference"):
        table.add_column(column, justify="right" if column != "Statistic" else "left")
    for record in comparison.to_dict(orient="records"):
        table.add_row(
            str(record["statistic"]),
            _format_metric(record["theoretical"]),
            _format_metric(record["empirical"]),
            _format_metric(record["difference"]),
        )
    console.print(table)

    if output is not None:
        pd.DataFrame({"value": draws}).to_csv(output, index=False)
        console.print(f"[green]Draws written[/green] {output} (rows={size})")


def _build_distribution(
    link: str,
    family: str,
    p1: float,
    p2: float,
    dispersion: float,
    offset: float | None,
    bias_correct: bool | None,
) -> ZeroInflatedDistribution:
    options: dict[str, Any] = {}
    if offset is not None:
        options["offset"] = offset
    try:
        link_function = get_link(link, **options)
        return ZeroInflatedDistribution.from_link(
            link_function,
            family,
            p1,
            p2,
            dispersion,
            bias_correct=bias_correct,
        )
    except (KeyError, TypeError, ValueError) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc


def _format_metric(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, numbers.Real):
        val = float(value)
        if math.isnan(val):
            return "-"
        if math.isinf(val):
            return "inf" if val > 0 else "-inf"
        return f"{val:.4f}"
    return str(value)


def main() -> None:  # pragma: no cover - console entry
    app()
