"""Analysis commands: stats."""

import json
from typing import Annotated, Optional

import typer

from ...core.engine import compute_program
from ...core.errors import ProgramDefinitionError
from ...core.stats import calculate_stats, extract_chart_data
from ...io.serializers import chart_point_to_dict, exercise_stats_to_dict
from .. import views
from ..app import StorePathOption, app, get_store, load_replay_inputs


@app.command()
def stats(
    exercise_id: Annotated[
        Optional[str],
        typer.Argument(help="Exercise ID for a weight chart (default: summary of all)"),
    ] = None,
    json_out: Annotated[
        bool,
        typer.Option("--json", "-j", help="Output as JSON for machine processing"),
    ] = False,
    store_path: StorePathOption = None,
) -> None:
    """
    Show success rate and weight gained per exercise.

    With an exercise ID, also draws its weight over the whole program.
    """
    store = get_store(store_path)
    definition, config, results = load_replay_inputs(store)

    try:
        rows = compute_program(definition, config, results)
    except ProgramDefinitionError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    chart_data = extract_chart_data(definition, rows)

    if exercise_id is not None and exercise_id not in chart_data:
        valid = ", ".join(chart_data)
        views.print_error(f"Unknown exercise '{exercise_id}'. Valid IDs: {valid}")
        raise typer.Exit(1)

    selected = [exercise_id] if exercise_id is not None else list(chart_data)
    summary = {ex_id: calculate_stats(chart_data[ex_id]) for ex_id in selected}

    if json_out:
        out = {ex_id: exercise_stats_to_dict(s) for ex_id, s in summary.items()}
        if exercise_id is not None:
            out = {
                "exercise_id": exercise_id,
                "stats": out[exercise_id],
                "points": [chart_point_to_dict(p) for p in chart_data[exercise_id]],
            }
        print(json.dumps(out, indent=2))
        return

    views.console.print()
    views.console.print(views.format_stats_table(definition, summary))
    views.console.print()

    if exercise_id is not None:
        views.print_weight_plot(
            chart_data[exercise_id],
            exercise_name=definition.exercises[exercise_id].name,
        )
        return

    gained = [(definition.exercises[k].name, s.gained) for k, s in summary.items() if s.total]
    if gained:
        views.print_gains_chart([g[0] for g in gained], [g[1] for g in gained])
