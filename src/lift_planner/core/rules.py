"""
Progression rule evaluation.

A slot carries up to five rules; after each session exactly one of them is
selected from the recorded result and applied to the slot's state:

    fail       -> on_final_stage_fail at the last stage, else on_mid_stage_fail
    success    -> on_final_stage_success at the last stage (if defined),
                  else on_success
    no result  -> on_undefined (if defined), else on_success

A missing result therefore counts as an implicit pass.

``update_tm`` is the only rule that touches shared state (the training-max
registry); it is handled in :func:`apply_slot_progression`, never in
:func:`apply_rule`.
"""

from dataclasses import replace

from .errors import ProgramDefinitionError
from .models import (
    AddWeight,
    AddWeightResetStage,
    AdvanceStage,
    AdvanceStageAddWeight,
    DeloadPercent,
    ExerciseSlot,
    NoChange,
    ProgressionRule,
    SlotResult,
    SlotState,
    UpdateTm,
)
from .rounding import round_to_nearest_half
from .training_max import TrainingMaxRegistry


def apply_rule(
    rule: ProgressionRule,
    state: SlotState,
    increment: float,
    max_stage_idx: int,
) -> SlotState:
    """
    Return the state that follows ``state`` under ``rule``.

    Args:
        rule: Progression rule to apply (anything but UpdateTm)
        state: Current slot state (not modified)
        increment: Weight increment of the slot's exercise
        max_stage_idx: Index of the slot's last stage

    Returns:
        New SlotState

    Raises:
        TypeError: If ``rule`` is not a known rule type
    """
    if isinstance(rule, NoChange):
        return replace(state)
    if isinstance(rule, AddWeight):
        return replace(state, weight=state.weight + increment)
    if isinstance(rule, AdvanceStage):
        return replace(state, stage=min(state.stage + 1, max_stage_idx))
    if isinstance(rule, AdvanceStageAddWeight):
        return replace(
            state,
            stage=min(state.stage + 1, max_stage_idx),
            weight=state.weight + increment,
        )
    if isinstance(rule, DeloadPercent):
        return replace(
            state,
            weight=round_to_nearest_half(state.weight * (1 - rule.percent / 100)),
            stage=0,
        )
    if isinstance(rule, AddWeightResetStage):
        return replace(state, weight=round_to_nearest_half(state.weight + rule.amount), stage=0)
    if isinstance(rule, UpdateTm):
        raise TypeError("update_tm changes the training max, not slot state")
    raise TypeError(f"Unknown progression rule: {rule!r}")


def select_rule(slot: ExerciseSlot, state: SlotState, result: SlotResult) -> ProgressionRule:
    """Pick the rule that applies to ``slot`` given this session's result."""
    at_last_stage = state.stage >= len(slot.stages) - 1

    if result.result == "fail":
        return slot.on_final_stage_fail if at_last_stage else slot.on_mid_stage_fail

    if result.result == "success":
        if at_last_stage and slot.on_final_stage_success is not None:
            return slot.on_final_stage_success
        return slot.on_success

    if slot.on_undefined is not None:
        return slot.on_undefined
    return slot.on_success


def apply_slot_progression(
    slot: ExerciseSlot,
    state: SlotState,
    result: SlotResult,
    increment: float,
    training_maxes: TrainingMaxRegistry,
) -> SlotState:
    """
    Advance one slot after a session.

    Args:
        slot: Slot definition
        state: State the session was prescribed from
        result: Recorded result (empty when nothing was recorded)
        increment: Weight increment of the slot's exercise
        training_maxes: Registry mutated by ``update_tm``

    Returns:
        State for the slot's next occurrence

    Raises:
        ProgramDefinitionError: If an ``update_tm`` rule fires on a slot
            without a training-max key
    """
    rule = select_rule(slot, state, result)

    if isinstance(rule, UpdateTm):
        if slot.training_max_key is None:
            raise ProgramDefinitionError(
                f"Slot '{slot.slot_id}': update_tm rule requires training_max_key"
            )
        raised = training_maxes.apply_update(rule, slot.training_max_key, result.amrap_reps)
        return replace(state, ever_changed=state.ever_changed or raised)

    next_state = apply_rule(rule, state, increment, len(slot.stages) - 1)
    if result.result == "fail" and not isinstance(rule, NoChange):
        next_state.ever_changed = True
    else:
        next_state.ever_changed = state.ever_changed
    return next_state
