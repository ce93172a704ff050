"""
Replay engine tests.

Covers the properties every program relies on:
- a session depends only on earlier results (snapshot before progression)
- the same inputs always give the same rows
- slot state is keyed by slot id and carries across days and cycles
- training maxes are shared by key and only rise through update_tm
- percentage-table and GPP slots never progress
"""

import pytest

from lift_planner.core.engine import (
    compute_program,
    initial_weight,
    resolve_role,
    validate_definition,
)
from lift_planner.core.errors import ProgramDefinitionError
from lift_planner.core.models import (
    AddWeight,
    AdvanceStage,
    DeloadPercent,
    ExerciseInfo,
    ExerciseSlot,
    NoChange,
    PercentRung,
    ProgramDay,
    ProgramDefinition,
    SlotResult,
    Stage,
    UpdateTm,
)

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

LINEAR = (Stage(sets=5, reps=3, amrap=True), Stage(sets=6, reps=2), Stage(sets=10, reps=1))


def _slot(slot_id: str, exercise_id: str = "squat", **overrides) -> ExerciseSlot:
    fields = dict(
        slot_id=slot_id,
        exercise_id=exercise_id,
        tier="t1",
        stages=LINEAR,
        on_success=AddWeight(),
        on_mid_stage_fail=AdvanceStage(),
        on_final_stage_fail=DeloadPercent(percent=15),
        start_weight_key=exercise_id,
    )
    fields.update(overrides)
    return ExerciseSlot(**fields)


def _program(days, total_workouts: int = 12, increments=None) -> ProgramDefinition:
    exercise_ids = {s.exercise_id for d in days for s in d.slots}
    return ProgramDefinition(
        program_id="test",
        name="Test Program",
        days=tuple(days),
        exercises={ex: ExerciseInfo(name=ex.title()) for ex in sorted(exercise_ids)},
        total_workouts=total_workouts,
        weight_increments=increments if increments is not None else {"squat": 5.0, "bench": 2.5},
    )


def _day(name: str, *slots: ExerciseSlot) -> ProgramDay:
    return ProgramDay(name=name, slots=tuple(slots))


def _weights(rows, slot_id: str) -> list[float]:
    return [s.weight for r in rows for s in r.slots if s.slot_id == slot_id]


def _row_slot(rows, index: int, slot_id: str):
    return next(s for s in rows[index].slots if s.slot_id == slot_id)


def _r(result=None, amrap=None) -> SlotResult:
    return SlotResult(result=result, amrap_reps=amrap)


# =============================================================================
# Basic replay
# =============================================================================


class TestReplayShape:
    """Row count, day rotation and determinism."""

    def test_one_row_per_workout(self):
        program = _program([_day("A", _slot("sq")), _day("B", _slot("bp", "bench"))], 7)
        rows = compute_program(program, {"squat": 60, "bench": 40}, {})
        assert len(rows) == 7
        assert [r.index for r in rows] == list(range(7))
        assert [r.day_name for r in rows] == ["A", "B", "A", "B", "A", "B", "A"]

    def test_zero_workouts_gives_no_rows(self):
        program = _program([_day("A", _slot("sq"))], 0)
        assert compute_program(program, {"squat": 60}, {}) == []

    def test_deterministic(self):
        program = _program([_day("A", _slot("sq")), _day("B", _slot("bp", "bench"))])
        results = {"0": {"sq": _r("fail")}, "3": {"bp": _r("success")}}
        config = {"squat": 60, "bench": 40}
        assert compute_program(program, config, results) == compute_program(
            program, config, results
        )

    def test_inputs_not_mutated(self):
        program = _program([_day("A", _slot("sq"))])
        config = {"squat": 60}
        results = {"0": {"sq": _r("fail")}}
        compute_program(program, config, results)
        assert config == {"squat": 60}
        assert results == {"0": {"sq": _r("fail")}}

    def test_numeric_string_config(self):
        program = _program([_day("A", _slot("sq"))], 1)
        rows = compute_program(program, {"squat": "62.5"}, {})
        assert rows[0].slots[0].weight == 62.5

    def test_missing_config_starts_at_zero(self):
        program = _program([_day("A", _slot("sq"))], 1)
        assert compute_program(program, {}, {})[0].slots[0].weight == 0.0


class TestCausality:
    """A session's prescription depends only on earlier results."""

    def test_own_result_does_not_affect_own_row(self):
        program = _program([_day("A", _slot("sq"))], 3)
        rows = compute_program(program, {"squat": 60}, {"1": {"sq": _r("fail")}})
        row = _row_slot(rows, 1, "sq")
        assert (row.weight, row.stage, row.is_changed) == (65.0, 0, False)
        assert row.result == "fail"
        assert _row_slot(rows, 2, "sq").stage == 1

    def test_later_results_do_not_change_earlier_rows(self):
        program = _program([_day("A", _slot("sq"))], 10)
        early = compute_program(program, {"squat": 60}, {"2": {"sq": _r("fail")}})
        late = compute_program(
            program,
            {"squat": 60},
            {"2": {"sq": _r("fail")}, "7": {"sq": _r("fail")}},
        )
        assert early[:7] == late[:7]
        assert _weights(early, "sq")[:8] == _weights(late, "sq")[:8]


# =============================================================================
# Stage progression
# =============================================================================


class TestStageProgression:
    """Linear progression through stages and deload on final failure."""

    def test_implicit_pass_adds_weight(self):
        program = _program([_day("A", _slot("sq"))], 4)
        assert _weights(compute_program(program, {"squat": 60}, {}), "sq") == [60, 65, 70, 75]

    def test_fail_advances_then_deloads(self):
        program = _program([_day("A", _slot("sq"))], 5)
        results = {str(i): {"sq": _r("fail")} for i in range(3)}
        rows = compute_program(program, {"squat": 100}, results)

        stages = [_row_slot(rows, i, "sq").stage for i in range(5)]
        assert stages == [0, 1, 2, 0, 0]
        assert _weights(rows, "sq") == [100, 100, 100, 85, 90]
        assert _row_slot(rows, 1, "sq").sets == 6
        assert _row_slot(rows, 2, "sq").reps == 1

    def test_stage_never_exceeds_last(self):
        slot = _slot("sq", on_final_stage_fail=AdvanceStage())
        program = _program([_day("A", slot)], 8)
        results = {str(i): {"sq": _r("fail")} for i in range(8)}
        rows = compute_program(program, {"squat": 60}, results)
        assert max(_row_slot(rows, i, "sq").stage for i in range(8)) == 2

    def test_amrap_and_stage_count_reported(self):
        program = _program([_day("A", _slot("sq"))], 1)
        row = compute_program(program, {"squat": 60}, {})[0].slots[0]
        assert row.is_amrap is True
        assert row.stages_count == 3
        assert row.exercise_name == "Squat"

    def test_no_change_is_fixed_point(self):
        slot = _slot("sq", on_success=NoChange(), on_mid_stage_fail=NoChange(),
                     on_final_stage_fail=NoChange())
        program = _program([_day("A", slot)], 6)
        results = {"1": {"sq": _r("fail")}, "2": {"sq": _r("success")}}
        rows = compute_program(program, {"squat": 60}, results)
        assert _weights(rows, "sq") == [60] * 6
        assert all(not r.is_changed for r in rows)


class TestChangedAndDeloadFlags:
    """UI flags: sticky changed marker and lighter-than-last-time marker."""

    def test_changed_is_sticky_after_fail(self):
        program = _program([_day("A", _slot("sq"))], 4)
        rows = compute_program(program, {"squat": 60}, {"1": {"sq": _r("fail")}})
        assert [r.is_changed for r in rows] == [False, False, True, True]

    def test_deload_flag_after_final_fail(self):
        program = _program([_day("A", _slot("sq"))], 5)
        results = {str(i): {"sq": _r("fail")} for i in range(3)}
        rows = compute_program(program, {"squat": 100}, results)
        assert [_row_slot(rows, i, "sq").is_deload for i in range(5)] == [
            False, False, False, True, False,
        ]

    def test_deload_compares_across_slots_of_same_exercise(self):
        heavy = _slot("sq-heavy")
        light = _slot("sq-light", start_weight_multiplier=0.65)
        program = _program([_day("A", heavy), _day("B", light)], 2)
        rows = compute_program(program, {"squat": 100}, {})
        assert _row_slot(rows, 1, "sq-light").weight == 65.0
        assert _row_slot(rows, 1, "sq-light").is_deload is True

    def test_zero_weight_is_never_deload(self):
        unset = _slot("sq-unset", start_weight_key="missing")
        program = _program([_day("A", _slot("sq")), _day("B", unset)], 3)
        rows = compute_program(program, {"squat": 60}, {})
        assert _row_slot(rows, 1, "sq-unset").weight == 0.0
        assert _row_slot(rows, 1, "sq-unset").is_deload is False
        assert _row_slot(rows, 2, "sq").is_deload is False


# =============================================================================
# Shared slots across days and cycles
# =============================================================================


class TestSlotIdentity:
    """State is keyed by slot id, not by day position."""

    def test_shared_slot_progresses_across_days(self):
        acc = _slot("lat", "lat", stages=(Stage(sets=3, reps=15, amrap=True),),
                    on_mid_stage_fail=NoChange(), on_final_stage_fail=NoChange())
        program = _program(
            [_day("A", _slot("sq"), acc), _day("B", _slot("bp", "bench"), acc)],
            4,
            increments={"squat": 5.0, "bench": 2.5, "lat": 2.5},
        )
        rows = compute_program(program, {"squat": 60, "bench": 40, "lat": 30}, {})
        assert _weights(rows, "lat") == [30, 32.5, 35, 37.5]

    def test_lift_every_fourth_session_across_cycles(self):
        days = [
            _day("D1", _slot("sq")),
            _day("D2", _slot("bp", "bench")),
            _day("D3", _slot("bp2", "bench")),
            _day("D4", _slot("bp3", "bench")),
        ]
        program = _program(days, 24, increments={"squat": 2.5, "bench": 2.5})
        rows = compute_program(program, {"squat": 60, "bench": 40}, {})
        squat = _weights(rows, "sq")
        assert len(squat) == 6
        assert squat == [60 + 2.5 * k for k in range(6)]

    def test_first_occurrence_seeds_state(self):
        a = _slot("shared", start_weight_key="squat")
        b = _slot("shared", start_weight_key="other")
        program = _program([_day("A", a), _day("B", b)], 2)
        rows = compute_program(program, {"squat": 60, "other": 999}, {})
        assert _weights(rows, "shared") == [60, 65]


# =============================================================================
# Initial weight
# =============================================================================


class TestInitialWeight:
    """Start weight from config, multiplier and offset."""

    def test_multiplier_rounds_to_half(self):
        slot = _slot("t2", start_weight_multiplier=0.65)
        program = _program([_day("A", slot)], 1)
        # 67.5 * 0.65 = 43.875 -> 44.0
        assert initial_weight(slot, program, {"squat": 67.5}) == 44.0

    def test_offset_counts_back_increments(self):
        slot = _slot("sq", start_weight_offset=3)
        program = _program([_day("A", slot)], 1)
        assert initial_weight(slot, program, {"squat": 100}) == 85.0

    def test_offset_below_zero_clamps(self):
        slot = _slot("sq", start_weight_offset=10)
        program = _program([_day("A", slot)], 1)
        assert initial_weight(slot, program, {"squat": 20}) == 0.0


# =============================================================================
# Training max slots
# =============================================================================


def _tm_program(total: int = 8) -> ProgramDefinition:
    work = _slot(
        "sq-work",
        stages=(Stage(sets=1, reps=5),),
        on_success=NoChange(),
        on_mid_stage_fail=NoChange(),
        on_final_stage_fail=NoChange(),
        training_max_key="squat_tm",
        tm_percent=0.75,
        start_weight_key="squat_tm",
    )
    amrap = _slot(
        "sq-amrap",
        stages=(Stage(sets=1, reps=5, amrap=True),),
        on_success=UpdateTm(amount=5, min_amrap_reps=5),
        on_undefined=NoChange(),
        on_mid_stage_fail=NoChange(),
        on_final_stage_fail=NoChange(),
        training_max_key="squat_tm",
        tm_percent=0.85,
        start_weight_key="squat_tm",
    )
    bench = _slot("bp", "bench", on_success=NoChange())
    return _program([_day("Legs", work, amrap), _day("Push", bench)], total)


class TestTrainingMaxSlots:
    """Weights derived from a shared training max."""

    def test_weights_from_training_max(self):
        rows = compute_program(_tm_program(), {"squat_tm": 140, "bench": 60}, {})
        assert _row_slot(rows, 0, "sq-work").weight == 105.0
        assert _row_slot(rows, 0, "sq-amrap").weight == 119.0

    def test_amrap_below_threshold_keeps_tm(self):
        results = {"0": {"sq-amrap": _r("success", amrap=4)}}
        rows = compute_program(_tm_program(), {"squat_tm": 140, "bench": 60}, results)
        assert _row_slot(rows, 2, "sq-work").weight == 105.0
        assert rows[2].is_changed is False

    def test_amrap_at_threshold_raises_tm_for_every_slot(self):
        results = {"0": {"sq-amrap": _r("success", amrap=5)}}
        rows = compute_program(_tm_program(), {"squat_tm": 140, "bench": 60}, results)
        # TM 145: 108.75 -> 109.0, 123.25 -> 123.5
        assert _row_slot(rows, 2, "sq-work").weight == 109.0
        assert _row_slot(rows, 2, "sq-amrap").weight == 123.5
        assert _row_slot(rows, 2, "sq-amrap").is_changed is True

    def test_tm_updates_accumulate(self):
        results = {
            "0": {"sq-amrap": _r("success", amrap=8)},
            "2": {"sq-amrap": _r("success", amrap=6)},
        }
        rows = compute_program(_tm_program(), {"squat_tm": 100, "bench": 60}, results)
        assert _row_slot(rows, 4, "sq-work").weight == 82.5

    def test_unmarked_amrap_does_not_raise_tm(self):
        rows = compute_program(_tm_program(), {"squat_tm": 100, "bench": 60}, {})
        assert {_row_slot(rows, i, "sq-work").weight for i in (0, 2, 4, 6)} == {75.0}

    def test_amrap_reps_and_rpe_reported(self):
        results = {"0": {"sq-amrap": SlotResult("success", amrap_reps=7, rpe=8.5)}}
        rows = compute_program(_tm_program(), {"squat_tm": 100}, results)
        row = _row_slot(rows, 0, "sq-amrap")
        assert row.amrap_reps == 7
        assert row.rpe == 8.5


# =============================================================================
# Percentage tables and GPP
# =============================================================================


def _table_slot(**overrides) -> ExerciseSlot:
    fields = dict(
        stages=(),
        on_success=AddWeight(),
        on_mid_stage_fail=AdvanceStage(),
        on_final_stage_fail=DeloadPercent(percent=10),
        prescriptions=(
            PercentRung(percent=50, reps=5, sets=1),
            PercentRung(percent=60, reps=4, sets=1),
            PercentRung(percent=70, reps=3, sets=4),
        ),
        percent_of="squat_1rm",
        start_weight_key="squat_1rm",
    )
    fields.update(overrides)
    return _slot("sq-table", **fields)


class TestPercentageTable:
    """Percentage-of-max slots resolve rungs and never progress."""

    def test_rungs_resolved_and_last_is_working_set(self):
        program = _program([_day("A", _table_slot())], 1)
        row = compute_program(program, {"squat_1rm": 143}, {})[0].slots[0]
        # 71.5 -> 72.5, 85.8 -> 85.0, 100.1 -> 100.0
        assert [p.weight for p in row.prescriptions] == [72.5, 85.0, 100.0]
        assert row.weight == 100.0
        assert (row.sets, row.reps) == (4, 3)
        assert row.stage == 0
        assert row.stages_count == 1

    def test_rounding_config_overrides_step(self):
        program = _program([_day("A", _table_slot())], 1)
        row = compute_program(program, {"squat_1rm": 143, "rounding": 5}, {})[0].slots[0]
        assert [p.weight for p in row.prescriptions] == [70.0, 85.0, 100.0]

    def test_zero_rounding_uses_default(self):
        program = _program([_day("A", _table_slot())], 1)
        row = compute_program(program, {"squat_1rm": 143, "rounding": 0}, {})[0].slots[0]
        assert row.weight == 100.0

    def test_results_do_not_progress_table(self):
        program = _program([_day("A", _table_slot())], 4)
        results = {"0": {"sq-table": _r("fail")}, "1": {"sq-table": _r("success")}}
        rows = compute_program(program, {"squat_1rm": 143}, results)
        assert _weights(rows, "sq-table") == [100.0] * 4
        assert _row_slot(rows, 0, "sq-table").result == "fail"
        assert not any(r.is_changed for r in rows)

    def test_table_does_not_feed_deload_flag(self):
        program = _program([_day("A", _table_slot(), _slot("sq"))], 1)
        row = _row_slot(compute_program(program, {"squat_1rm": 200, "squat": 60}, {}), 0, "sq")
        assert row.is_deload is False


class TestGpp:
    """General-preparation slots show sets/reps only."""

    def test_gpp_row(self):
        gpp = _slot("plank", "plank", is_gpp=True, stages=(Stage(sets=3, reps=30),),
                    complex_reps="30s hold")
        program = _program([_day("A", gpp)], 3)
        rows = compute_program(program, {"plank": 50}, {"0": {"plank": _r("fail")}})
        first = rows[0].slots[0]
        assert first.weight == 0.0
        assert first.is_gpp is True
        assert first.complex_reps == "30s hold"
        assert (first.sets, first.reps) == (3, 30)
        assert first.result == "fail"
        assert [r.slots[0].stage for r in rows] == [0, 0, 0]


# =============================================================================
# Roles and validation
# =============================================================================


class TestRoles:
    """Explicit role wins; tiers fall back through the legacy map."""

    @pytest.mark.parametrize("tier,expected", [("t1", "primary"), ("t2", "secondary"),
                                               ("t3", "primary"), ("accessory", None)])
    def test_tier_fallback(self, tier, expected):
        assert resolve_role(_slot("x", tier=tier)) == expected

    def test_explicit_role(self):
        assert resolve_role(_slot("x", tier="t3", role="accessory")) == "accessory"

    def test_invalid_role_rejected(self):
        with pytest.raises(ValueError):
            _slot("x", role="hero")


class TestValidateDefinition:
    """Authoring defects fail loudly before any replay."""

    def test_no_days(self):
        with pytest.raises(ProgramDefinitionError):
            validate_definition(_program([], 0))

    def test_unknown_exercise(self):
        program = _program([_day("A", _slot("sq"))])
        program.exercises.pop("squat")
        with pytest.raises(ProgramDefinitionError, match="unknown exercise"):
            compute_program(program, {}, {})

    def test_stage_slot_without_stages(self):
        program = _program([_day("A", _slot("sq", stages=()))])
        with pytest.raises(ProgramDefinitionError, match="no stages"):
            compute_program(program, {}, {})

    def test_table_without_percent_of(self):
        program = _program([_day("A", _table_slot(percent_of=None))])
        with pytest.raises(ProgramDefinitionError, match="percent_of"):
            compute_program(program, {}, {})

    def test_update_tm_without_key(self):
        slot = _slot("sq", on_success=UpdateTm(amount=5, min_amrap_reps=5))
        with pytest.raises(ProgramDefinitionError, match="training_max_key"):
            compute_program(_program([_day("A", slot)]), {"squat": 60}, {})
