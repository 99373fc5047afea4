"""Command line interface for sample structure inference."""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, NoReturn, Optional

import rich
import rich.traceback
import typer
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .config import InferenceConfig, load_config
from .errors import StructureError
from .explain import Explanation
from .io import load_samples
from .structure import find_structure
from .timestamp import DEFAULT_CATALOG, guess_timestamp_field

rich.traceback.install(show_locals=False)

app = typer.Typer(help="Infer timestamp formats, field mappings and statistics from parsed log samples.")
console = Console()


def _resolve_path(path: Path | str) -> Path:
    """Resolve a string or path to an absolute Path."""
    resolved = Path(path).expanduser().resolve()
    if not resolved.exists():
        raise typer.BadParameter(f"Path does not exist: {resolved}")
    return resolved


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_inference_config(config_path: Optional[Path], max_samples: Optional[int]) -> InferenceConfig:
    config = load_config(_resolve_path(config_path)) if config_path is not None else InferenceConfig()
    if max_samples is not None:
        config = replace(config, max_samples=max_samples)
    return config


def _render(data: Any, output_format: str) -> str:
    if output_format == "yaml":
        return yaml.safe_dump(data, sort_keys=False)
    return json.dumps(data, indent=2)


def _fail(message: str) -> NoReturn:
    console.print(f"[red]{escape(message)}[/red]")
    raise typer.Exit(code=1)


@app.command()
def analyze(
    source: Path = typer.Argument(..., help="JSON or JSONL file of parsed sample records."),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Path to write the structure report; printed when omitted."
    ),
    output_format: str = typer.Option("json", "--format", "-f", help="Report format: json or yaml."),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Optional YAML inference configuration."),
    max_samples: Optional[int] = typer.Option(None, "--max-samples", help="Maximum number of records to read."),
    explain: bool = typer.Option(False, "--explain/--no-explain", help="Include the reasoning in the report."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log inference decisions to stderr."),
) -> None:
    """Infer the timestamp field, field mappings and field statistics of a sample batch."""

    _configure_logging(verbose)
    if output_format not in {"json", "yaml"}:
        raise typer.BadParameter("format must be 'json' or 'yaml'")

    try:
        config = _load_inference_config(config_path, max_samples)
        samples = load_samples(_resolve_path(source), max_records=config.max_samples)
        report = find_structure(samples, config)
    except (StructureError, ValueError) as error:
        _fail(str(error))

    rendered = _render(report.to_dict(include_explanation=explain), output_format)
    if output is None:
        typer.echo(rendered)
        return

    output_path = output.expanduser().resolve()
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(rendered, encoding="utf-8")
    console.print(f"Structure report written to [green]{output_path}[/green]")


@app.command()
def timestamp(
    source: Path = typer.Argument(..., help="JSON or JSONL file of parsed sample records."),
    max_samples: Optional[int] = typer.Option(1000, "--max-samples", help="Maximum number of records to read."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log inference decisions to stderr."),
) -> None:
    """Report only the timestamp field and its formats."""

    _configure_logging(verbose)
    try:
        samples = load_samples(_resolve_path(source), max_records=max_samples)
    except ValueError as error:
        _fail(str(error))

    explanation = Explanation()
    guessed = guess_timestamp_field(explanation, samples)
    if guessed is None:
        console.print("[yellow]No consistent timestamp field found[/yellow]")
        for line in explanation:
            console.print(f"  {line}", markup=False, highlight=False)
        raise typer.Exit(code=2)

    field_name, match = guessed
    console.print_json(data={"field": field_name, **match.to_dict()})


@app.command()
def formats() -> None:
    """List the timestamp formats that can be recognised, in matching order."""

    table = Table(title="Timestamp formats")
    table.add_column("#", justify="right")
    table.add_column("Grok pattern")
    table.add_column("Date formats")
    table.add_column("Zone")
    for entry in DEFAULT_CATALOG.describe():
        zone = {True: "yes", False: "no", None: "optional"}[entry["has_timezone"]]
        table.add_row(str(entry["index"]), entry["grok_pattern_name"], " | ".join(entry["date_formats"]), zone)
    console.print(table)


def main() -> None:
    """Entrypoint for `python -m logstruct` usage."""

    app()


if __name__ == "__main__":  # pragma: no cover
    main()
