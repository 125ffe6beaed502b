"""Command-line interface for license_reconciler.

Provides subcommands for normalizing and comparing license expressions,
merging partial definitions and aggregating per-tool summaries.
"""

import json
import logging
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich.console import Console

from license_reconciler.aggregator import Aggregator
from license_reconciler.config import POLICY_ENVVAR, load_policy
from license_reconciler.expression import normalize as normalize_expression
from license_reconciler.expression import satisfies as expression_satisfies
from license_reconciler.merge import merge_definitions
from license_reconciler.models import ExceptionPolicy

app = typer.Typer(
    name="license-reconciler",
    help="Reconcile license metadata reported by multiple scanning tools.",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

# Configure logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s",
)
logger = logging.getLogger("license_reconciler")


def _setup_logging(verbose: bool) -> None:
    """Configure logging level based on verbosity flag."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.getLogger("license_reconciler").setLevel(level)


def _read_json(path: Path) -> Any:
    """Read a JSON document.

    Raises:
        ValueError: If the file is not valid JSON.
    """
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e}") from e


def _emit(data: Any, output: Optional[Path]) -> None:
    """Print a JSON result or write it to the output file."""
    if output:
        output.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
        console.print(f"[green]Written:[/green] {output}")
    else:
        console.print_json(data=data)


@app.command()
def normalize(
    expression: Annotated[
        str,
        typer.Argument(help="SPDX license expression, e.g. 'mit OR apache-2.0'"),
    ],
    strict_exceptions: Annotated[
        bool,
        typer.Option(
            "--strict-exceptions",
            help="Treat a license with an unrecognized WITH exception as NOASSERTION",
        ),
    ] = False,
) -> None:
    """Print the canonical form of a license expression."""
    policy = ExceptionPolicy.UNKNOWN if strict_exceptions else ExceptionPolicy.DROP
    result = normalize_expression(expression, exception_policy=policy)
    if result is None:
        err_console.print("[red]Error:[/red] Empty license expression")
        raise typer.Exit(code=1)
    console.print(result, markup=False, highlight=False)


@app.command()
def satisfies(
    candidate: Annotated[str, typer.Argument(help="Expression to check")],
    requirement: Annotated[str, typer.Argument(help="Expression that must be met")],
) -> None:
    """Check whether a license expression satisfies a requirement.

    Exit codes:
        0 - The candidate satisfies the requirement
        1 - It does not
    """
    if expression_satisfies(candidate, requirement):
        console.print("[green]yes[/green]")
        raise typer.Exit(code=0)
    console.print("[red]no[/red]")
    raise typer.Exit(code=1)


@app.command()
def merge(
    base: Annotated[
        Path,
        typer.Argument(help="Base partial definition (JSON)", exists=True, readable=True),
    ],
    proposed: Annotated[
        Path,
        typer.Argument(help="Proposed partial definition (JSON)", exists=True, readable=True),
    ],
    override: Annotated[
        bool,
        typer.Option("--override", help="Let proposed scalar values replace base values"),
    ] = False,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Output file path"),
    ] = None,
) -> None:
    """Merge a proposed partial definition into a base definition."""
    try:
        base_data = _read_json(base)
        proposed_data = _read_json(proposed)
        merged = merge_definitions(base_data, proposed_data, override=override)
    except (ValueError, TypeError) as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    _emit(merged, output)


@app.command()
def aggregate(
    summaries: Annotated[
        Path,
        typer.Argument(
            help="Summaries JSON keyed by tool name then tool version",
            exists=True,
            readable=True,
        ),
    ],
    policy: Annotated[
        Path,
        typer.Option(
            "--policy",
            "-p",
            envvar=POLICY_ENVVAR,
            help="Aggregation policy file (TOML or JSON)",
        ),
    ],
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Output file path"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose output"),
    ] = False,
) -> None:
    """Aggregate per-tool summaries of one component into a single definition."""
    _setup_logging(verbose)

    try:
        aggregator = Aggregator(load_policy(policy))
        summaries_data = _read_json(summaries)
    except (FileNotFoundError, ValueError) as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    if not isinstance(summaries_data, dict):
        err_console.print("[red]Error:[/red] Summaries must be a JSON object")
        raise typer.Exit(code=1)

    if verbose:
        resolved = aggregator.resolve(summaries_data)
        console.print(f"[dim]Using {len(resolved)} summaries[/dim]")

    result = aggregator.process(summaries_data)
    if result is None:
        console.print("[yellow]No data available for this policy[/yellow]")
        raise typer.Exit(code=0)

    _emit(result, output)


if __name__ == "__main__":
    app()
