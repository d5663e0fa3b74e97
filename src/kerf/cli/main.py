"""kerf CLI - geometry checks for CNC cutting files.

Command-line interface for validating entity documents and reporting
their extents.

Exit codes:
    0: Success (validate: warnings at most).
    1: Validation found structural issues.
    2: The input file could not be read or parsed.
"""

from __future__ import annotations

import json
import sys
import uuid
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError

from kerf import __version__
from kerf.config import settings
from kerf.geometry.entities import collection_bounds, length_of
from kerf.geometry.records import EntityDocument, LoadedEntities, load_document
from kerf.geometry.validators import GeometryIssue, GeometryValidator
from kerf.utils.logging import (
    clear_correlation_context,
    configure_logging,
    get_logger,
    set_correlation_context,
)

app = typer.Typer(
    name="kerf",
    help="kerf: geometry validation for CNC cutting paths",
    add_completion=False,
)

EXIT_INVALID_GEOMETRY = 1
EXIT_BAD_INPUT = 2


# =============================================================================
# Commands
# =============================================================================


@app.command()
def version(
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Show version information."""
    if json_output:
        typer.echo(json.dumps({"version": __version__}))
    else:
        typer.echo(f"kerf {__version__}")


@app.command()
def validate(
    path: Annotated[
        Path,
        typer.Argument(dir_okay=False, help="JSON entity document to validate"),
    ],
    tolerance: Annotated[
        float | None,
        typer.Option(
            "--tolerance",
            "-t",
            help="Geometric tolerance (defaults to VALIDATION_TOLERANCE)",
        ),
    ] = None,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity (-v, -vv)"
        ),
    ] = 0,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Validate every entity in a document and report the issues found."""
    _configure_logging(verbose, json_output)
    logger = get_logger(__name__)
    tol = settings.VALIDATION_TOLERANCE if tolerance is None else tolerance

    set_correlation_context(batch_id=uuid.uuid4().hex[:12], source=str(path))
    try:
        loaded = _load(path, json_output)
        logger.info(
            "Loaded document",
            entity_count=len(loaded.entities),
            skipped=loaded.skipped.issue_count,
        )

        result = loaded.skipped.merge(
            GeometryValidator().validate_entities(
                loaded.entities, tol, handles=loaded.handles
            )
        )

        if json_output:
            typer.echo(
                json.dumps(
                    {
                        "passed": result.passed,
                        "is_valid": result.is_valid,
                        "entity_count": len(loaded.entities),
                        "skipped": loaded.skipped.issue_count,
                        "issues": [_issue_to_dict(i) for i in result.issues],
                    },
                    indent=2,
                )
            )
        else:
            for issue in result.issues:
                typer.echo(_format_issue(issue))
            status = "passed" if result.passed else f"{result.issue_count} issue(s)"
            typer.echo(f"{path}: {len(loaded.entities)} entities, {status}")

        raise typer.Exit(0 if result.is_valid else EXIT_INVALID_GEOMETRY)
    finally:
        clear_correlation_context()


@app.command()
def bounds(
    path: Annotated[
        Path,
        typer.Argument(dir_okay=False, help="JSON entity document"),
    ],
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Print the overall bounding box and total cut length of a document."""
    _configure_logging(0, json_output)

    loaded = _load(path, json_output)
    box = collection_bounds(loaded.entities)
    total_length = sum(length_of(entity) for entity in loaded.entities)

    if json_output:
        payload: dict[str, object] = {
            "entity_count": len(loaded.entities),
            "total_length": total_length,
            "bounding_box": None,
        }
        if box.is_valid():
            payload["bounding_box"] = {
                "min_x": box.min_x,
                "min_y": box.min_y,
                "max_x": box.max_x,
                "max_y": box.max_y,
                "width": box.width,
                "height": box.height,
            }
        typer.echo(json.dumps(payload, indent=2))
        return

    if not box.is_valid():
        typer.echo(f"{path}: no entities")
        return
    typer.echo(
        f"Bounds: ({box.min_x:.6g}, {box.min_y:.6g}) - "
        f"({box.max_x:.6g}, {box.max_y:.6g})"
    )
    typer.echo(f"Size: {box.width:.6g} x {box.height:.6g}")
    typer.echo(f"Total length: {total_length:.6g}")


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    """kerf: geometry validation for CNC cutting paths."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


# =============================================================================
# Helpers
# =============================================================================


def _configure_logging(verbose: int, json_output: bool = False) -> None:
    """Configure logging based on verbosity level.

    JSON reports own stdout, so log lines go to stderr in that mode.
    """
    if verbose == 0:
        level = "WARNING"
    elif verbose == 1:
        level = "INFO"
    else:  # verbose >= 2
        level = "DEBUG"

    configure_logging(level=level, stream=sys.stderr if json_output else None)


def _load(path: Path, json_output: bool) -> LoadedEntities:
    """Load a document, exiting with EXIT_BAD_INPUT if it is unusable."""
    try:
        document: EntityDocument = load_document(path)
    except (OSError, ValidationError) as e:
        get_logger(__name__).debug("Could not load document", path=str(path))
        message = str(e).splitlines()[0] if str(e) else type(e).__name__
        if json_output:
            typer.echo(json.dumps({"error": message}))
        else:
            typer.echo(f"Error: cannot load {path}: {message}", err=True)
        raise typer.Exit(EXIT_BAD_INPUT) from None
    return document.build()


def _issue_to_dict(issue: GeometryIssue) -> dict[str, object]:
    return issue.model_dump(mode="json", exclude_none=True)


def _format_issue(issue: GeometryIssue) -> str:
    where = issue.entity_handle or f"#{issue.entity_index}"
    if issue.related_index is not None:
        other = issue.related_handle or f"#{issue.related_index}"
        where = f"{where} / {other}"
    severity = "warning" if issue.kind.is_warning else "error"
    return f"{severity}: [{issue.kind.label}] {where}: {issue.description}"


if __name__ == "__main__":  # pragma: no cover
    app()
