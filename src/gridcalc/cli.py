"""Command-line interface for gridcalc."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import click
import polars as pl
import yaml

from gridcalc import __version__
from gridcalc.config import load_config
from gridcalc.formatting import display_text
from gridcalc.formulas.evaluator import evaluate_formula
from gridcalc.formulas.references import column_letters
from gridcalc.logging.events import configure_sink
from gridcalc.models import Table, normalize_workbook
from gridcalc.workbook import resolve_workbook


@click.group()
@click.version_option(version=__version__, prog_name="gridcalc")
def main() -> None:
    """gridcalc -- evaluate spreadsheet formulas over JSON/YAML workbooks."""


# ---------------------------------------------------------------------------
# helpers
# ---------------------------------------------------------------------------


def _load_workbook_file(path: Path) -> Any:
    """Read a workbook from a ``.json``, ``.yaml`` or ``.yml`` file."""
    text = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()
    try:
        if suffix == ".json":
            return json.loads(text)
        if suffix in (".yaml", ".yml"):
            return yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise click.ClickException(f"Cannot parse {path}: {e}")
    raise click.ClickException(f"Unsupported workbook file type: {path.suffix!r}")


def _normalize(data: Any) -> list[Table]:
    try:
        return normalize_workbook(data)
    except ValueError as e:
        raise click.ClickException(str(e))


def _display_grid(table: Table) -> list[list[str]]:
    """Display strings for a table, padded to a rectangle."""
    width = max((len(row) for row in table), default=0)
    grid = []
    for row in table:
        cells = [cell.display_value or "" for cell in row]
        grid.append(cells + [""] * (width - len(cells)))
    return grid


def _write_csv(table: Table, path: Path) -> None:
    grid = _display_grid(table)
    width = len(grid[0]) if grid else 0
    frame = pl.DataFrame(
        {column_letters(c): [row[c] for row in grid] for c in range(width)},
        schema={column_letters(c): pl.Utf8 for c in range(width)},
    )
    frame.write_csv(path)


# ---------------------------------------------------------------------------
# Resolve
# ---------------------------------------------------------------------------


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Print the full result as JSON.")
@click.option("--csv-dir", "csv_dir", default=None, type=click.Path(file_okay=False), help="Write each table's display values to CSV.")
@click.option("--config", "config_path", default=None, type=click.Path(exists=True), help="Config file (default: gridcalc.yaml next to PATH).")
def resolve(path: str, as_json: bool, csv_dir: str | None, config_path: str | None) -> None:
    """Resolve every formula in the workbook at PATH."""
    workbook_path = Path(path)
    try:
        config = load_config(Path(config_path) if config_path else workbook_path.parent)
    except (ValueError, yaml.YAMLError) as e:
        raise click.ClickException(f"Invalid config: {e}")
    configure_sink(config.get("log_dir"), fsync=bool(config.get("logging_fsync", False)))

    data = _load_workbook_file(workbook_path)
    result = resolve_workbook(_normalize(data), config=config)

    if csv_dir:
        out = Path(csv_dir)
        out.mkdir(parents=True, exist_ok=True)
        for t_idx, table in enumerate(result.tables):
            _write_csv(table, out / f"table_{t_idx}.csv")

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2, default=str))
        return

    for t_idx, table in enumerate(result.tables):
        click.echo(f"Table {t_idx}")
        for row in _display_grid(table):
            click.echo("\t".join(row))
    click.echo(f"{len(result.formulas)} formula cell(s)")


# ---------------------------------------------------------------------------
# Eval
# ---------------------------------------------------------------------------


@main.command("eval")
@click.argument("formula")
@click.option("--workbook", "workbook_path", default=None, type=click.Path(exists=True, dir_okay=False), help="Workbook the formula's references point into.")
@click.option("--table", "table_id", default=0, type=int, help="Table index for bare references.")
def eval_formula(formula: str, workbook_path: str | None, table_id: int) -> None:
    """Evaluate a single FORMULA, e.g. "=SUM(1, 2, 3)"."""
    tables: list[Table] = []
    if workbook_path:
        tables = _normalize(_load_workbook_file(Path(workbook_path)))
    click.echo(display_text(evaluate_formula(formula, tables, table_id)))
