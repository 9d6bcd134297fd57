from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional, Union

import requests
import typer

from .config import (
    DEFAULT_INCOME,
    DEFAULT_SCRAPE_OUTPUT,
    DEFAULT_SELECTIONS,
    Settings,
    configure_logging,
)
from .data_sources import (
    DatasetError,
    NumbeoClient,
    load_dataset,
    merge_cities,
    save_dataset,
    search_locations,
)
from .model import ensure_baseline, generate_comparison_data, select_locations
from .query_state import (
    MAX_INCOME,
    generate_share_url,
    location_type_from_query,
    parse_query_params,
)
from .report import (
    factor_table,
    indicators_table,
    results_table,
    rows_to_json,
    salary_chart,
    write_chart,
)
from .schemas import LOCATION_TYPES, Dataset

app = typer.Typer(help="Compare cost of living across US states and cities.")

logger = logging.getLogger(__name__)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output."),
) -> None:
    try:
        settings = Settings.from_env()
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    configure_logging("DEBUG" if verbose else settings.log_level)
    ctx.obj = settings


@app.command()
def compare(
    ctx: typer.Context,
    locations: Optional[List[str]] = typer.Argument(
        None, help="State codes or city names (defaults to CA TX, or two cities)."
    ),
    income: float = typer.Option(
        DEFAULT_INCOME, min=0, max=MAX_INCOME, help="Annual income in the baseline location."
    ),
    base: Optional[str] = typer.Option(
        None, help="Baseline location (defaults to the first selected)."
    ),
    location_type: str = typer.Option("state", "--type", help="'state' or 'city'."),
    query: Optional[str] = typer.Option(
        None, help="Restore a comparison from a shared link or query string."
    ),
    by_factor: bool = typer.Option(
        False, help="Also show the comparable salary for each cost factor."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print rows as JSON."),
    chart: Optional[Path] = typer.Option(
        None, help="Write an HTML bar chart of comparable salaries to this path."
    ),
    dataset: Optional[Path] = typer.Option(
        None, help="Dataset JSON (env COL_DATASET_PATH, else the bundled data)."
    ),
) -> None:
    """
    Compute the salary needed in each location to match the baseline income.
    """
    settings: Settings = ctx.obj
    data = _load(dataset or settings.dataset_path)

    if query:
        location_type = location_type_from_query(query)
        params = parse_query_params(query, data.valid_identifiers(location_type))
        if params is None:
            _fail(
                "Shared link is invalid: it needs at least 2 known locations "
                "and an income between 0 and 10,000,000."
            )
        identifiers, income, base = params.locations, params.income, params.base
    else:
        _check_type(location_type)
        identifiers = locations or DEFAULT_SELECTIONS[location_type]

    selected = select_locations(data, identifiers, location_type)
    if len(selected) < 2:
        plural = "states" if location_type == "state" else "cities"
        _fail(f"Please select at least 2 {plural} to compare.")

    codes = [loc.identifier for loc in selected]
    if base is not None:
        found = data.find(base, location_type)
        base = found.identifier if found else base
    baseline_code = ensure_baseline(codes, base)
    rows = generate_comparison_data(selected, baseline_code, income)
    share_url = generate_share_url(
        codes, income, baseline_code, location_type, settings.share_base_url
    )

    if as_json:
        payload = {
            "type": location_type,
            "income": income,
            "base": baseline_code,
            "shareUrl": share_url,
            "rows": rows_to_json(rows),
        }
        typer.echo(json.dumps(payload, indent=2))
    else:
        baseline_name = next(row.name for row in rows if row.code == baseline_code)
        typer.echo(f"Data source: {data.meta.source} | Last updated: {data.meta.last_updated}")
        typer.echo(f"Baseline: {baseline_name}, income ${income:,.0f}")
        typer.echo("")
        typer.echo(results_table(rows, baseline_code))
        if by_factor:
            typer.echo("")
            typer.echo("Comparable salary by factor:")
            typer.echo(factor_table(rows, baseline_code))
        typer.echo("")
        typer.echo("Economic indicators:")
        typer.echo(indicators_table(rows, baseline_code, location_type))
        typer.echo("")
        typer.echo(f"Share: {share_url}")

    if chart is not None:
        path = write_chart(salary_chart(rows, baseline_code), chart)
        typer.echo(f"Chart written to {path}", err=as_json)


@app.command()
def share(
    ctx: typer.Context,
    locations: List[str] = typer.Argument(..., help="State codes or city names."),
    income: float = typer.Option(DEFAULT_INCOME, min=0, max=MAX_INCOME),
    base: Optional[str] = typer.Option(None, help="Baseline location, by code or name."),
    location_type: str = typer.Option("state", "--type", help="'state' or 'city'."),
    base_url: Optional[str] = typer.Option(
        None, help="Page the link points at (env COL_SHARE_BASE_URL if omitted)."
    ),
    dataset: Optional[Path] = typer.Option(
        None, help="Dataset used to resolve --base names (env COL_DATASET_PATH)."
    ),
) -> None:
    """
    Print a shareable link for a comparison.
    """
    _check_type(location_type)
    settings: Settings = ctx.obj
    codes = list(locations)
    if base is not None:
        found = _load(dataset or settings.dataset_path).find(base, location_type)
        base = found.identifier if found else base
    typer.echo(
        generate_share_url(
            codes,
            income,
            ensure_baseline(codes, base),
            location_type,
            base_url or settings.share_base_url,
        )
    )


@app.command("list")
def list_locations(
    ctx: typer.Context,
    location_type: str = typer.Option("state", "--type", help="'state' or 'city'."),
    search: Optional[str] = typer.Option(None, help="Filter by name, code or state."),
    dataset: Optional[Path] = typer.Option(None, help="Dataset JSON to read."),
) -> None:
    """
    List the locations available for comparison.
    """
    _check_type(location_type)
    settings: Settings = ctx.obj
    data = _load(dataset or settings.dataset_path)
    locations = data.locations(location_type)
    if search:
        locations = search_locations(locations, search)
    if not locations:
        typer.echo(f"No {location_type} matches '{search}'.")
        return
    for loc in locations:
        if loc.code:
            typer.echo(f"{loc.code:<4} {loc.name}  (overall {loc.indices.overall:g})")
        else:
            typer.echo(f"{loc.name}  (overall {loc.indices.overall:g})")


@app.command("scrape-cities")
def scrape_cities(
    ctx: typer.Context,
    output: Optional[Path] = typer.Option(
        None,
        help=(
            "Where to write the refreshed dataset (defaults to --dataset, then "
            f"COL_DATASET_PATH, then ./{DEFAULT_SCRAPE_OUTPUT})."
        ),
    ),
    dataset: Optional[Path] = typer.Option(None, help="Dataset to take states from."),
) -> None:
    """
    Refresh city indices from Numbeo's rankings and write a new dataset.
    """
    settings: Settings = ctx.obj
    source_path = dataset or settings.dataset_path
    data = _load(source_path)
    output = output or Path(source_path or DEFAULT_SCRAPE_OUTPUT)
    client = NumbeoClient()
    try:
        cities = client.fetch_cities()
    except requests.RequestException as exc:
        _fail(f"Fetching Numbeo rankings failed: {exc}")
    if not cities:
        _fail("No cities found in the Numbeo rankings page.")
    save_dataset(merge_cities(data, cities, NumbeoClient.SOURCE), output)
    typer.echo(f"Saved {len(cities)} cities to {output}")


def _load(path: Optional[Union[str, Path]]) -> Dataset:
    try:
        return load_dataset(path)
    except FileNotFoundError:
        _fail(f"Dataset file not found: {path}")
    except DatasetError as exc:
        _fail(str(exc))


def _check_type(location_type: str) -> None:
    if location_type not in LOCATION_TYPES:
        raise typer.BadParameter(
            f"must be one of {', '.join(LOCATION_TYPES)}", param_hint="--type"
        )


def _fail(message: str) -> None:
    logger.debug("exiting: %s", message)
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
