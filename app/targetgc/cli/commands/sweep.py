"""Sweep command implementation.

Deletes build artifacts in a target directory that no current unit of
the workspace can reach.
"""

import json
from enum import Enum
from pathlib import Path
from typing import Annotated, Any

import typer

from targetgc.cli.display import create_plan_table, create_summary_table, print_conditions
from targetgc.core.config import RunConfig, load_user_config
from targetgc.core.pipeline import run_collection
from targetgc.errors import TargetGcError, WorkspaceContainmentError
from targetgc.models.report import SweepReport
from targetgc.store.reader import DEFAULT_JOBS
from targetgc.utils.formatting import (
    console,
    format_size,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from targetgc.workspace.resolver import CargoWorkspaceResolver

app = typer.Typer(
    help="Delete unreachable build artifacts from the target directory.",
    invoke_without_command=True,
)

EXIT_DELETION_FAILED = 1
EXIT_ERROR = 2
EXIT_CONTAINMENT = 3


class OutputFormat(str, Enum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


@app.callback(invoke_without_command=True)
def sweep(
    ctx: typer.Context,
    profile: Annotated[
        list[str] | None,
        typer.Option(
            "--profile",
            "-p",
            help="Profile or profile directory to collect (repeatable). Default: all present.",
        ),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", help="Collect a target directory outside the workspace."),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", "-n", help="Show what would be deleted."),
    ] = False,
    manifest_path: Annotated[
        Path | None,
        typer.Option("--manifest-path", help="Path to Cargo.toml."),
    ] = None,
    target_dir: Annotated[
        Path | None,
        typer.Option("--target-dir", help="Target directory to collect."),
    ] = None,
    unit_graph: Annotated[
        Path | None,
        typer.Option("--unit-graph", help="Unit-graph JSON giving the exact root units."),
    ] = None,
    jobs: Annotated[
        int | None,
        typer.Option("--jobs", "-j", min=1, help="Number of worker threads."),
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", help="User configuration file."),
    ] = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
    export_path: Annotated[
        Path | None,
        typer.Option("--export", "-e", help="Export the report to a JSON file."),
    ] = None,
) -> None:
    """Delete artifacts of units the workspace no longer builds."""
    obj = ctx.obj or {}
    verbose = bool(obj.get("verbose", False))
    quiet = bool(obj.get("quiet", False))

    try:
        user_config = load_user_config(config_path)
        resolver = CargoWorkspaceResolver(
            manifest_path, target_dir=target_dir, unit_graph=unit_graph
        )
        config = RunConfig(
            workspace_root=resolver.workspace_root(),
            target_dir=resolver.target_directory(),
            profiles=tuple(profile) if profile else user_config.profiles,
            force=force,
            dry_run=dry_run,
            jobs=jobs or user_config.jobs or DEFAULT_JOBS,
        )
        report = run_collection(config, resolver)
    except WorkspaceContainmentError as e:
        print_error(str(e))
        raise typer.Exit(code=EXIT_CONTAINMENT) from e
    except TargetGcError as e:
        print_error(str(e))
        raise typer.Exit(code=EXIT_ERROR) from e

    if export_path is not None:
        _export_report(report, export_path)

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(_report_data(report)))
    else:
        _print_report(report, verbose=verbose, quiet=quiet)

    if report.has_failures:
        raise typer.Exit(code=EXIT_DELETION_FAILED)


# === Private helper functions ===


def _report_data(report: SweepReport) -> dict[str, Any]:
    data = report.to_dict()
    data["plan"] = report.plan.to_dict()
    return data


def _print_report(report: SweepReport, *, verbose: bool, quiet: bool) -> None:
    """Display the plan and the summary of a run."""
    plan = report.plan
    for warning in plan.warnings:
        print_warning(warning)

    if not quiet:
        if plan.delete:
            title = "Would Delete (Dry Run)" if report.dry_run else "Deleted"
            console.print(create_plan_table(plan.delete, title))
        if verbose and plan.keep:
            console.print(create_plan_table(plan.keep, "Kept"))
        if verbose and plan.skipped:
            console.print(create_plan_table(plan.skipped, "Skipped"))
        console.print(create_summary_table(report))

    print_conditions(report)

    if report.has_failures:
        print_warning(f"{len(report.failed)} deletion(s) failed.")
    elif not plan.delete:
        print_success("Target directory is clean. Nothing to delete.")
    elif report.dry_run:
        print_info(f"Dry-run: {format_size(report.deleted_bytes)} would be freed.")
    else:
        print_success(f"Finished: {format_size(report.deleted_bytes)} freed.")


def _export_report(report: SweepReport, export_path: Path) -> None:
    """Export the report to a JSON file."""
    export_path = export_path.resolve()
    if export_path.is_dir():
        print_error(f"Export path is a directory: {export_path}")
        raise typer.Exit(code=EXIT_ERROR)

    try:
        export_path.parent.mkdir(parents=True, exist_ok=True)
        export_path.write_text(json.dumps(_report_data(report), indent=2))
        print_info(f"Report exported to {export_path}", stderr=True)
    except OSError as e:
        print_error(f"Failed to export: {e}")
        raise typer.Exit(code=EXIT_ERROR) from e
