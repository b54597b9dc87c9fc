"""Shared Rich display functions for sweep plans and reports."""

from rich.markup import escape
from rich.table import Table

from targetgc.models.conditions import ConditionKind
from targetgc.models.plan import Disposition, PlannedEntry
from targetgc.models.report import SweepReport
from targetgc.utils.formatting import console, create_entry_table, format_size

_DISPOSITION_STYLES: dict[Disposition, str] = {
    Disposition.KEEP: "plan.keep",
    Disposition.DELETE: "plan.delete",
    Disposition.SKIP: "plan.skip",
}


def create_plan_table(entries: tuple[PlannedEntry, ...], title: str) -> Table:
    """Create a table listing planned entries.

    Args:
        entries: Planned entries to show, in plan order.
        title: Table title.

    Returns:
        Rich Table with one row per entry.
    """
    table = create_entry_table(title)
    for planned in entries:
        style = _DISPOSITION_STYLES[planned.disposition]
        reason = planned.reason.value
        if planned.owner is not None:
            reason = f"{reason} ({planned.owner})"
        table.add_row(
            f"[{style}]{escape(planned.entry.path)}[/]",
            planned.entry.category.value,
            format_size(planned.entry.size_bytes),
            escape(reason),
        )
    return table


def create_summary_table(report: SweepReport) -> Table:
    """Create the count and byte summary of a report."""
    deleted_label = "Would delete" if report.dry_run else "Deleted"
    table = Table(
        title="Summary (Dry Run)" if report.dry_run else "Summary",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("", no_wrap=True)
    table.add_column("Entries", justify="right")
    table.add_column("Size", style="entry.size", justify="right")

    plan = report.plan
    table.add_row("[plan.keep]Kept[/]", str(len(plan.keep)), format_size(plan.keep_bytes))
    table.add_row(
        f"[plan.delete]{deleted_label}[/]",
        str(len(report.deleted)),
        format_size(report.deleted_bytes),
    )
    table.add_row("[error]Failed[/]", str(len(report.failed)), format_size(report.failed_bytes))
    table.add_row(
        "[plan.skip]Skipped[/]", str(len(plan.skipped)), format_size(plan.skipped_bytes)
    )
    return table


def print_conditions(report: SweepReport) -> None:
    """Print condition counts and every failed path."""
    counts = [(kind, report.count(kind)) for kind in ConditionKind]
    noted = [f"{n} {kind.value}" for kind, n in counts if n]
    if noted:
        console.print(f"[muted]Conditions: {', '.join(noted)}[/]")

    for result in report.failed:
        console.print(f"  [error]✗[/] {escape(result.path)}: {escape(result.error or '')}")
