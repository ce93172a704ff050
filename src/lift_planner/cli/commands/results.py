"""Result commands: record, clear, undo, test-weight."""

from typing import Annotated, Optional

import typer

from ...core.models import ExerciseSlot, ProgramDefinition
from ...io.serializers import ValidationError
from .. import views
from ..app import StorePathOption, app, get_store, load_replay_inputs


def _slot_in_session(definition: ProgramDefinition, index: int, slot_id: str) -> ExerciseSlot:
    """Resolve ``slot_id`` within session ``index`` or exit with an error."""
    if not 0 <= index < definition.total_workouts:
        views.print_error(
            f"Session {index} is outside the program (0-{definition.total_workouts - 1})"
        )
        raise typer.Exit(1)
    day = definition.day_for(index)
    for slot in day.slots:
        if slot.slot_id == slot_id:
            return slot
    valid = ", ".join(s.slot_id for s in day.slots)
    views.print_error(f"No slot '{slot_id}' on {day.name}. Slots: {valid}")
    raise typer.Exit(1)


@app.command()
def record(
    index: Annotated[int, typer.Argument(help="Session index (see 'show')")],
    slot_id: Annotated[str, typer.Argument(help="Slot ID within that session")],
    result: Annotated[
        Optional[str],
        typer.Option("--result", "-r", help="success or fail"),
    ] = None,
    amrap_reps: Annotated[
        Optional[int],
        typer.Option("--amrap", "-a", help="Reps achieved on the AMRAP set"),
    ] = None,
    rpe: Annotated[
        Optional[float],
        typer.Option("--rpe", help="Rate of perceived exertion (1-10)"),
    ] = None,
    store_path: StorePathOption = None,
) -> None:
    """
    Record the outcome of one exercise in one session.

    Options that are left out keep their previously recorded value.

    Example:
        lift-planner record 0 squat-t1 --result success --amrap 7
    """
    store = get_store(store_path)
    definition, _, _ = load_replay_inputs(store)
    slot = _slot_in_session(definition, index, slot_id)

    if result is None and amrap_reps is None and rpe is None:
        views.print_error("Nothing to record: pass --result, --amrap or --rpe")
        raise typer.Exit(1)

    fields = {}
    if result is not None:
        fields["result"] = result.lower()
    if amrap_reps is not None:
        fields["amrap_reps"] = amrap_reps
    if rpe is not None:
        fields["rpe"] = rpe

    try:
        stored = store.record_result(index, slot_id, **fields)
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if slot.is_gpp or slot.is_percentage_table:
        views.print_info(f"{slot_id} does not progress; the result is kept for statistics only.")

    summary = stored.result or "no result"
    if stored.amrap_reps is not None:
        summary += f", {stored.amrap_reps} AMRAP reps"
    if stored.rpe is not None:
        summary += f", RPE {stored.rpe:g}"
    views.print_success(f"Session {index} {slot_id}: {summary}")


@app.command()
def clear(
    index: Annotated[int, typer.Argument(help="Session index")],
    slot_id: Annotated[str, typer.Argument(help="Slot ID within that session")],
    store_path: StorePathOption = None,
) -> None:
    """
    Remove the recorded outcome of one exercise in one session.
    """
    store = get_store(store_path)
    definition, _, _ = load_replay_inputs(store)
    _slot_in_session(definition, index, slot_id)

    try:
        removed = store.clear_result(index, slot_id)
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if removed:
        views.print_success(f"Cleared session {index} {slot_id}")
    else:
        views.print_warning(f"Nothing recorded for session {index} {slot_id}")


@app.command()
def undo(
    store_path: StorePathOption = None,
) -> None:
    """
    Revert the last record or clear.
    """
    store = get_store(store_path)
    load_replay_inputs(store)

    try:
        restored = store.undo()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if restored is None:
        views.print_warning("Nothing to undo")
        return

    index, slot_id = restored
    views.print_success(f"Restored session {index} {slot_id}")


@app.command("test-weight")
def test_weight(
    slot_id: Annotated[str, typer.Argument(help="Test slot ID")],
    weight: Annotated[float, typer.Argument(help="Tested max in kg")],
    store_path: StorePathOption = None,
) -> None:
    """
    Carry a tested max into the next block's training max.
    """
    store = get_store(store_path)
    definition, _, _ = load_replay_inputs(store)

    slot = definition.find_slot(slot_id)
    if slot is None:
        views.print_error(f"Unknown slot '{slot_id}' in {definition.name}")
        raise typer.Exit(1)

    try:
        key = store.apply_test_weight(slot, weight)
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(f"Set {key} = {weight:g} from {slot_id}")
