"""
CLI entry point using Typer.

Provides commands for running a training program:
- programs: List available programs
- init: Start a program with its start weights / training maxes
- show: Replay the program and show upcoming sessions
- record / clear / undo: Mark session results
- set-config / config: Edit or show the configuration
- test-weight: Carry a tested max into the next block
- stats: Success rate, weight gained and weight chart per exercise
"""

import typer

from . import views
from .app import app
from .commands import analysis, programs, results, schedule  # noqa: F401  (registers commands)


@app.callback(invoke_without_command=True)
def main_callback(ctx: typer.Context) -> None:
    """
    Barbell program replayer. Run without a command for interactive mode.
    """
    if ctx.invoked_subcommand is not None:
        return  # A sub-command was given, let it handle things

    views.console.print()
    views.console.print("[bold cyan]lift-planner[/bold cyan]: barbell program replayer")
    views.console.print()

    menu = {
        "1": ("show", "Show upcoming sessions"),
        "2": ("stats", "Progress statistics"),
        "3": ("config", "Show configuration"),
        "4": ("programs", "List programs"),
        "5": ("undo", "Undo last result"),
        "0": ("quit", "Quit"),
    }

    for key, (_, desc) in menu.items():
        views.console.print(f"  \\[{key}] {desc}")

    views.console.print()
    choice = views.console.input("Choose [1]: ").strip() or "1"

    if choice == "0":
        raise typer.Exit(0)

    chosen = menu.get(choice)
    if chosen is None:
        views.print_error(f"Unknown choice: {choice}")
        raise typer.Exit(1)

    if chosen[0] == "show":
        ctx.invoke(schedule.show)
    elif chosen[0] == "stats":
        ctx.invoke(analysis.stats)
    elif chosen[0] == "config":
        ctx.invoke(programs.show_config)
    elif chosen[0] == "programs":
        ctx.invoke(programs.programs)
    elif chosen[0] == "undo":
        ctx.invoke(results.undo)


if __name__ == "__main__":
    app()
