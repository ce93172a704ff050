"""Program management commands: programs, init, config, set-config."""

import json
from typing import Annotated, Optional

import typer

from ...core.config import ROUNDING_CONFIG_KEY
from ...core.models import ProgramDefinition
from ...core.programs import all_programs, get_program
from ...io.serializers import ValidationError, config_to_dict, parse_assignment, parse_config_value
from .. import views
from ..app import StorePathOption, app, get_store, load_replay_inputs


def _is_unknown_key(definition: ProgramDefinition, key: str) -> bool:
    if key == ROUNDING_CONFIG_KEY or not definition.config_fields:
        return False
    return key not in {f.key for f in definition.config_fields}


@app.command()
def programs(
    json_out: Annotated[
        bool,
        typer.Option("--json", "-j", help="Output as JSON for machine processing"),
    ] = False,
) -> None:
    """
    List available programs.
    """
    catalog = all_programs()

    if json_out:
        print(json.dumps([
            {
                "program_id": p.program_id,
                "name": p.name,
                "category": p.category,
                "days": p.cycle_length,
                "total_workouts": p.total_workouts,
                "workouts_per_week": p.workouts_per_week,
                "config_keys": [f.key for f in p.config_fields],
            }
            for p in catalog
        ], indent=2))
        return

    views.console.print(views.format_program_list_table(catalog))


@app.command()
def init(
    program_id: Annotated[
        str,
        typer.Option("--program", "-P", help="Program ID (see 'programs')"),
    ] = "gzclp",
    assignments: Annotated[
        Optional[list[str]],
        typer.Option("--set", "-s", help="Config value as KEY=VALUE (repeatable)"),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Force overwrite without prompting"),
    ] = False,
    store_path: StorePathOption = None,
) -> None:
    """
    Start a program.

    Example:
        lift-planner init --program gzclp --set squat=60 --set bench=40
    """
    store = get_store(store_path)

    try:
        definition = get_program(program_id)
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    config: dict[str, float] = {}
    try:
        for text in assignments or []:
            key, value = parse_assignment(text)
            config[key] = value
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if store.exists() and not force:
        if not views.confirm_action(
            f"{store.store_path} already exists. Overwrite recorded results?"
        ):
            views.print_info("Cancelled.")
            raise typer.Exit(0)

    for key in sorted(k for k in config if _is_unknown_key(definition, k)):
        views.print_warning(f"'{key}' is not a config field of {definition.name}")
    missing = [f.key for f in definition.config_fields if f.key not in config]
    if missing:
        views.print_warning(
            f"No value for {', '.join(missing)}; those lifts start at 0. "
            "Use 'set-config' to fill them in."
        )

    store.init(definition.program_id, config)
    views.print_success(f"Started {definition.name} ({definition.total_workouts} workouts)")
    views.print_info(f"Program file: {store.store_path}")


@app.command("config")
def show_config(
    json_out: Annotated[
        bool,
        typer.Option("--json", "-j", help="Output as JSON for machine processing"),
    ] = False,
    store_path: StorePathOption = None,
) -> None:
    """
    Show the active program's configuration.
    """
    store = get_store(store_path)
    definition, config, _ = load_replay_inputs(store)

    if json_out:
        print(json.dumps(config_to_dict(config), indent=2))
        return

    views.console.print(views.format_config_table(definition, config))


@app.command("set-config")
def set_config(
    key: Annotated[str, typer.Argument(help="Config key, e.g. squat or rounding")],
    value: Annotated[str, typer.Argument(help="New value (kg)")],
    store_path: StorePathOption = None,
) -> None:
    """
    Change one configuration value (start weight, training max, rounding).

    The whole program is replayed with the new value on the next 'show'.
    """
    store = get_store(store_path)
    definition, _, _ = load_replay_inputs(store)

    try:
        parsed = parse_config_value(value, key)
        store.update_config(key, parsed)
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if _is_unknown_key(definition, key):
        views.print_warning(f"'{key}' is not a config field of {definition.name}")
    views.print_success(f"Set {key} = {parsed:g}")
