"""Schedule commands: show."""

from typing import Annotated, Optional

import typer

from ...core.engine import compute_program
from ...core.errors import ProgramDefinitionError
from ...io.serializers import workout_rows_to_json
from .. import views
from ..app import StorePathOption, app, get_store, load_replay_inputs


@app.command()
def show(
    start: Annotated[
        Optional[int],
        typer.Option("--from", "-f", help="First session index (default: next unmarked session)"),
    ] = None,
    count: Annotated[
        Optional[int],
        typer.Option("--count", "-n", help="Number of sessions (default: one cycle)"),
    ] = None,
    show_all: Annotated[
        bool,
        typer.Option("--all", "-a", help="Show every session of the program"),
    ] = False,
    json_out: Annotated[
        bool,
        typer.Option("--json", "-j", help="Output as JSON for machine processing"),
    ] = False,
    store_path: StorePathOption = None,
) -> None:
    """
    Replay the program from the recorded results and show the schedule.

    Every session is recomputed from session 0, so changing a config value or
    an earlier result updates everything that follows.
    """
    store = get_store(store_path)
    definition, config, results = load_replay_inputs(store)

    try:
        rows = compute_program(definition, config, results)
    except ProgramDefinitionError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    next_index = views.next_session_index(rows)

    if show_all:
        selected = rows
    else:
        first = next_index if start is None else start
        if first < 0:
            views.print_error("--from must be non-negative")
            raise typer.Exit(1)
        n = definition.cycle_length if count is None else count
        if n < 1:
            views.print_error("--count must be at least 1")
            raise typer.Exit(1)
        selected = rows[first:first + n]

    if json_out:
        print(workout_rows_to_json(selected))
        return

    views.console.print()
    views.console.print(f"[bold cyan]{definition.name}[/bold cyan]")
    if next_index < len(rows):
        views.console.print(
            f"Next session: [bold]#{next_index}[/bold] ({rows[next_index].day_name}), "
            f"{next_index} of {len(rows)} done"
        )
    else:
        views.console.print(f"[green]All {len(rows)} sessions marked.[/green]")
    views.console.print()
    views.print_schedule(selected, next_index=next_index, title=definition.name)
