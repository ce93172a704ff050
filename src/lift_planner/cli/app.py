"""Shared Typer app object, shared option types, and store utility."""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ..core.programs import get_program
from ..io.program_store import ProgramStore, get_default_store_path
from ..io.serializers import ValidationError
from . import views

# Shared --store-path option type used across all commands
StorePathOption = Annotated[
    Optional[Path],
    typer.Option("--store-path", "-p", help="Path to program JSON file"),
]

app = typer.Typer(
    name="lift-planner",
    help="Replay barbell training programs (GZCLP, 5/3/1 PPL, ...) from recorded results.",
    no_args_is_help=False,
    invoke_without_command=True,
)


def get_store(store_path: Path | None) -> ProgramStore:
    """Get program store from path or default location."""
    if store_path is None:
        store_path = get_default_store_path()
    return ProgramStore(store_path)


def load_replay_inputs(store: ProgramStore):
    """
    Load (definition, config, results) for the active program.

    Prints an error and exits with status 1 if the store is missing,
    corrupt, or names an unknown program.
    """
    if not store.exists():
        views.print_error(f"Program file not found: {store.store_path}")
        views.print_info("Run 'init' first to choose a program.")
        raise typer.Exit(1)

    try:
        definition = get_program(store.load_program_id())
        config = store.load_config()
        results = store.load_results()
    except (FileNotFoundError, ValidationError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    return definition, config, results
