"""
Generic program engine.

Replays a ProgramDefinition against the recorded results, session by
session, and returns the prescription for every session of the program.

For each session index i in [0, total_workouts):

1. day = days[i % cycle_length]
2. snapshot every slot of the day from the current state
3. then apply each slot's progression rule using session i's result

Because of the ordering in (2)/(3) a session's prescription depends only on
results of earlier sessions.  The whole history is replayed from session 0
on every call; nothing is cached between calls and the same inputs always
produce the same rows.
"""

from .config import TIER_ROLE_MAP
from .errors import ProgramDefinitionError
from .models import (
    Config,
    ExerciseSlot,
    ProgramDefinition,
    Results,
    SlotResult,
    SlotRow,
    SlotState,
    UpdateTm,
    WorkoutRow,
)
from .prescriptions import resolve_prescriptions, rounding_step, working_set
from .rounding import round_to_nearest_half
from .rules import apply_slot_progression
from .training_max import TrainingMaxRegistry, config_to_num

_EMPTY_RESULT = SlotResult()


def resolve_role(slot: ExerciseSlot) -> str | None:
    """Explicit role, else the legacy tier mapping (t1/t2/t3)."""
    if slot.role is not None:
        return slot.role
    return TIER_ROLE_MAP.get(slot.tier)


def validate_definition(definition: ProgramDefinition) -> None:
    """
    Check a definition for authoring defects.

    Raises:
        ProgramDefinitionError: On the first defect found
    """
    if not definition.days:
        raise ProgramDefinitionError(f"Program '{definition.program_id}' has no days")
    if definition.total_workouts < 0:
        raise ProgramDefinitionError(
            f"Program '{definition.program_id}': total_workouts must be non-negative"
        )

    for day in definition.days:
        for slot in day.slots:
            where = f"Program '{definition.program_id}', day '{day.name}', slot '{slot.slot_id}'"
            if slot.exercise_id not in definition.exercises:
                raise ProgramDefinitionError(f"{where}: unknown exercise '{slot.exercise_id}'")
            if slot.prescriptions is not None:
                if not slot.prescriptions:
                    raise ProgramDefinitionError(f"{where}: empty percentage table")
                if slot.percent_of is None:
                    raise ProgramDefinitionError(f"{where}: percentage table without percent_of")
                continue
            if not slot.stages:
                raise ProgramDefinitionError(f"{where}: no stages")
            if slot.is_gpp:
                continue
            if slot.training_max_key is None and any(
                isinstance(rule, UpdateTm) for rule in _slot_rules(slot)
            ):
                raise ProgramDefinitionError(
                    f"{where}: update_tm rule requires training_max_key"
                )


def _slot_rules(slot: ExerciseSlot):
    rules = [slot.on_success, slot.on_mid_stage_fail, slot.on_final_stage_fail]
    if slot.on_final_stage_success is not None:
        rules.append(slot.on_final_stage_success)
    if slot.on_undefined is not None:
        rules.append(slot.on_undefined)
    return rules


def initial_weight(slot: ExerciseSlot, definition: ProgramDefinition, config: Config) -> float:
    """
    Starting weight of a slot.

    ``config[start_weight_key]``, scaled by ``start_weight_multiplier`` and
    lowered by ``start_weight_offset`` increments of the exercise (used by
    block-periodized programs that count back from a target weight).
    """
    base = config_to_num(config, slot.start_weight_key)
    if slot.start_weight_multiplier is not None:
        base = round_to_nearest_half(base * slot.start_weight_multiplier)
    offset = slot.start_weight_offset or 0.0
    increment = definition.weight_increments.get(slot.exercise_id, 0.0)
    return round_to_nearest_half(base - offset * increment)


def seed_slot_states(definition: ProgramDefinition, config: Config) -> dict[str, SlotState]:
    """One state per unique slot id; the first occurrence defines the seed."""
    states: dict[str, SlotState] = {}
    for slot in definition.iter_slots():
        if slot.slot_id not in states:
            states[slot.slot_id] = SlotState(weight=initial_weight(slot, definition, config))
    return states


def _percentage_row(
    slot: ExerciseSlot,
    exercise_name: str,
    role: str | None,
    result: SlotResult,
    config: Config,
) -> SlotRow:
    base = config_to_num(config, slot.percent_of)  # type: ignore[arg-type]
    resolved = resolve_prescriptions(slot.prescriptions, base, rounding_step(config))  # type: ignore[arg-type]
    work = working_set(resolved)
    return SlotRow(
        slot_id=slot.slot_id,
        exercise_id=slot.exercise_id,
        exercise_name=exercise_name,
        tier=slot.tier,
        weight=work.weight,
        stage=0,
        sets=work.sets,
        reps=work.reps,
        reps_max=None,
        is_amrap=False,
        stages_count=1,
        result=result.result,
        amrap_reps=None,
        rpe=None,
        is_changed=False,
        is_deload=False,
        role=role,  # type: ignore[arg-type]
        notes=slot.notes,
        prescriptions=resolved,
        is_gpp=slot.is_gpp,
        complex_reps=slot.complex_reps,
        propagates_to=slot.propagates_to,
        is_test_slot=slot.is_test_slot,
    )


def _gpp_row(
    slot: ExerciseSlot,
    exercise_name: str,
    role: str | None,
    result: SlotResult,
) -> SlotRow:
    stage = slot.stages[0]
    return SlotRow(
        slot_id=slot.slot_id,
        exercise_id=slot.exercise_id,
        exercise_name=exercise_name,
        tier=slot.tier,
        weight=0.0,
        stage=0,
        sets=stage.sets,
        reps=stage.reps,
        reps_max=None,
        is_amrap=False,
        stages_count=1,
        result=result.result,
        amrap_reps=None,
        rpe=None,
        is_changed=False,
        is_deload=False,
        role=role,  # type: ignore[arg-type]
        notes=slot.notes,
        prescriptions=None,
        is_gpp=True,
        complex_reps=slot.complex_reps,
        propagates_to=slot.propagates_to,
        is_test_slot=slot.is_test_slot,
    )


def _stage_row(
    slot: ExerciseSlot,
    exercise_name: str,
    role: str | None,
    result: SlotResult,
    state: SlotState,
    training_maxes: TrainingMaxRegistry,
    prev_weight_by_exercise: dict[str, float],
) -> SlotRow:
    stage = slot.stages[state.stage]

    if slot.uses_training_max:
        weight = training_maxes.weight_at(slot.training_max_key, slot.tm_percent)  # type: ignore[arg-type]
    else:
        weight = state.weight

    # Deload: lower than the last non-zero weight of the same exercise
    prev_weight = prev_weight_by_exercise.get(slot.exercise_id)
    is_deload = prev_weight is not None and 0 < weight < prev_weight
    if weight > 0:
        prev_weight_by_exercise[slot.exercise_id] = weight

    return SlotRow(
        slot_id=slot.slot_id,
        exercise_id=slot.exercise_id,
        exercise_name=exercise_name,
        tier=slot.tier,
        weight=weight,
        stage=state.stage,
        sets=stage.sets,
        reps=stage.reps,
        reps_max=stage.reps_max,
        is_amrap=stage.amrap,
        stages_count=len(slot.stages),
        result=result.result,
        amrap_reps=result.amrap_reps,
        rpe=result.rpe,
        is_changed=state.ever_changed,
        is_deload=is_deload,
        role=role,  # type: ignore[arg-type]
        notes=slot.notes,
        prescriptions=None,
        is_gpp=None,
        complex_reps=None,
        propagates_to=slot.propagates_to,
        is_test_slot=slot.is_test_slot,
    )


def compute_program(
    definition: ProgramDefinition,
    config: Config,
    results: Results,
) -> list[WorkoutRow]:
    """
    Replay a program and return one row per session.

    Args:
        definition: Program to interpret (not modified)
        config: Start weights, training maxes and rounding step, keyed by
            config key; values may be numbers or numeric strings
        results: Recorded results keyed by session index (as a string),
            then slot id

    Returns:
        List of WorkoutRow, ``len == definition.total_workouts``

    Raises:
        ProgramDefinitionError: If the definition is inconsistent
    """
    validate_definition(definition)

    slot_states = seed_slot_states(definition, config)
    training_maxes = TrainingMaxRegistry.seed(definition, config)
    prev_weight_by_exercise: dict[str, float] = {}

    rows: list[WorkoutRow] = []

    for i in range(definition.total_workouts):
        day = definition.day_for(i)
        session_results = results.get(str(i), {})

        # 1. Snapshot before progression
        slot_rows: list[SlotRow] = []
        for slot in day.slots:
            result = session_results.get(slot.slot_id, _EMPTY_RESULT)
            exercise_name = definition.exercises[slot.exercise_id].name
            role = resolve_role(slot)

            if slot.is_percentage_table:
                slot_rows.append(_percentage_row(slot, exercise_name, role, result, config))
            elif slot.is_gpp:
                slot_rows.append(_gpp_row(slot, exercise_name, role, result))
            else:
                slot_rows.append(
                    _stage_row(
                        slot,
                        exercise_name,
                        role,
                        result,
                        slot_states[slot.slot_id],
                        training_maxes,
                        prev_weight_by_exercise,
                    )
                )

        rows.append(
            WorkoutRow(
                index=i,
                day_name=day.name,
                slots=slot_rows,
                is_changed=any(r.is_changed for r in slot_rows),
            )
        )

        # 2. Progression after snapshot
        for slot in day.slots:
            if not slot.progresses:
                continue
            result = session_results.get(slot.slot_id, _EMPTY_RESULT)
            increment = definition.weight_increments.get(slot.exercise_id, 0.0)
            slot_states[slot.slot_id] = apply_slot_progression(
                slot, slot_states[slot.slot_id], result, increment, training_maxes
            )

    return rows
