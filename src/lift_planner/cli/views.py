"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of replayed programs and statistics.
"""

from rich.console import Console
from rich.table import Table

from ..core.ascii_plot import create_simple_bar_chart, create_weight_plot
from ..core.models import (
    ChartDataPoint,
    Config,
    ExerciseStats,
    ProgramDefinition,
    SlotRow,
    WorkoutRow,
)

console = Console()


def next_session_index(rows: list[WorkoutRow]) -> int:
    """
    Index of the first session that still has an unmarked slot.

    GPP slots are ignored.  Returns len(rows) once everything is marked.
    """
    for row in rows:
        if any(s.result is None for s in row.slots if not s.is_gpp):
            return row.index
    return len(rows)


def format_weight(weight: float) -> str:
    """70.0 -> '70', 72.5 -> '72.5'; 0 is shown as '-'."""
    if weight <= 0:
        return "-"
    return f"{weight:g}"


def _fmt_scheme(slot: SlotRow) -> str:
    """Sets x reps, e.g. '5x3+', '3x8-12', or the rung list of a percentage table."""
    if slot.prescriptions:
        return " / ".join(
            f"{p.percent:g}%×{p.reps}" + (f"×{p.sets}" if p.sets > 1 else "")
            for p in slot.prescriptions
        )
    if slot.complex_reps:
        return f"{slot.sets}x({slot.complex_reps})"
    reps = f"{slot.reps}-{slot.reps_max}" if slot.reps_max is not None else str(slot.reps)
    return f"{slot.sets}x{reps}" + ("+" if slot.is_amrap else "")


def _fmt_weight_cell(slot: SlotRow) -> str:
    text = format_weight(slot.weight)
    if slot.is_deload:
        return f"[red]{text} ↓[/red]"
    if slot.is_changed:
        return f"[yellow]{text}[/yellow]"
    return text


def _fmt_result_cell(slot: SlotRow) -> str:
    if slot.result == "success":
        text = "[green]✓[/green]"
    elif slot.result == "fail":
        text = "[red]✗[/red]"
    else:
        text = ""
    extras = []
    if slot.amrap_reps is not None:
        extras.append(f"{slot.amrap_reps} reps")
    if slot.rpe is not None:
        extras.append(f"@{slot.rpe:g}")
    if extras:
        text = f"{text} {' '.join(extras)}".strip()
    return text


def format_schedule_table(
    rows: list[WorkoutRow],
    next_index: int | None = None,
    title: str = "Program",
) -> Table:
    """
    Create a Rich table with one line per slot of every given session.

    Args:
        rows: Sessions to display
        next_index: Session to highlight as the next one to train
        title: Table title

    Returns:
        Rich Table object
    """
    table = Table(title=title)

    table.add_column("#", justify="right", style="dim", width=4)
    table.add_column("Day", style="cyan")
    table.add_column("Slot", style="dim")
    table.add_column("Exercise", style="bold")
    table.add_column("Tier", style="magenta")
    table.add_column("Scheme")
    table.add_column("Weight", justify="right")
    table.add_column("Result")

    for row in rows:
        marker = "→" if row.index == next_index else ""
        for n, slot in enumerate(row.slots):
            first = n == 0
            table.add_row(
                f"{marker}{row.index}" if first else "",
                row.day_name if first else "",
                slot.slot_id,
                slot.exercise_name,
                slot.tier,
                _fmt_scheme(slot),
                _fmt_weight_cell(slot),
                _fmt_result_cell(slot),
                end_section=n == len(row.slots) - 1,
            )

    return table


def print_schedule(
    rows: list[WorkoutRow],
    next_index: int | None = None,
    title: str = "Program",
) -> None:
    """Print a slice of the replayed program."""
    if not rows:
        console.print("[yellow]No sessions in range.[/yellow]")
        return

    console.print(format_schedule_table(rows, next_index=next_index, title=title))
    console.print(
        "[dim][yellow]yellow[/yellow] = progressed at least once   "
        "[red]↓[/red] = lighter than last time   + = as many reps as possible[/dim]"
    )


def format_program_list_table(programs: list[ProgramDefinition]) -> Table:
    """Table of catalog entries."""
    table = Table(title="Programs")

    table.add_column("ID", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Category", style="magenta")
    table.add_column("Days/cycle", justify="right")
    table.add_column("Workouts", justify="right")
    table.add_column("Per week", justify="right")

    for p in programs:
        table.add_row(
            p.program_id,
            p.name,
            p.category or "-",
            str(p.cycle_length),
            str(p.total_workouts),
            str(p.workouts_per_week),
        )

    return table


def format_config_table(definition: ProgramDefinition, config: Config) -> Table:
    """Table of a program's config fields and their current values."""
    table = Table(title=f"{definition.name} configuration")

    table.add_column("Key", style="cyan")
    table.add_column("Label")
    table.add_column("Group", style="dim")
    table.add_column("Value", justify="right", style="bold")

    known = set()
    for f in definition.config_fields:
        known.add(f.key)
        value = config.get(f.key)
        table.add_row(f.key, f.label, f.group or "", "-" if value is None else f"{value}")
    for key in sorted(set(config) - known):
        table.add_row(key, "", "", f"{config[key]}")

    return table


def format_stats_table(
    definition: ProgramDefinition,
    stats: dict[str, ExerciseStats],
) -> Table:
    """One line of summary statistics per exercise."""
    table = Table(title=f"{definition.name} progress")

    table.add_column("Exercise", style="bold")
    table.add_column("Marked", justify="right")
    table.add_column("✓", justify="right", style="green")
    table.add_column("✗", justify="right", style="red")
    table.add_column("Rate", justify="right")
    table.add_column("Start", justify="right")
    table.add_column("Current", justify="right")
    table.add_column("Gained", justify="right", style="bold")
    table.add_column("Stage", justify="right", style="dim")

    for ex_id, s in stats.items():
        table.add_row(
            definition.exercises[ex_id].name,
            str(s.total),
            str(s.successes),
            str(s.fails),
            f"{s.rate}%" if s.total else "-",
            format_weight(s.start_weight),
            format_weight(s.current_weight),
            f"{s.gained:+g}" if s.total else "-",
            str(s.current_stage),
        )

    return table


def print_weight_plot(points: list[ChartDataPoint], exercise_name: str) -> None:
    """Print ASCII plot of an exercise's weight over the program."""
    console.print(create_weight_plot(points, exercise_name=exercise_name))


def print_gains_chart(labels: list[str], values: list[float]) -> None:
    """Print a bar chart of weight gained per exercise."""
    console.print(create_simple_bar_chart(labels, values, title="Weight gained (kg)"))


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Args:
        message: Confirmation message

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(f"{message} [y/N]: ")
    return response.lower() in ("y", "yes")
