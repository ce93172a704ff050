"""
Data models for lift-planner.

Program definitions (days, slots, stages, progression rules) are immutable
inputs; SlotState and the replay output rows are produced by the engine.
Progression rules form a closed set of small frozen dataclasses; the engine
dispatches on their type.
"""

from dataclasses import dataclass, field
from typing import ClassVar, Literal, Union

from .config import RESULT_VALUES, ROLES, RPE_MAX, RPE_MIN

ResultValue = Literal["success", "fail"]
Role = Literal["primary", "secondary", "accessory"]


# =============================================================================
# PROGRESSION RULES
# =============================================================================


@dataclass(frozen=True)
class NoChange:
    """Leave weight and stage untouched."""

    type: ClassVar[str] = "no_change"


@dataclass(frozen=True)
class AddWeight:
    """Add the exercise's weight increment."""

    type: ClassVar[str] = "add_weight"


@dataclass(frozen=True)
class AdvanceStage:
    """Move to the next stage, capped at the last one."""

    type: ClassVar[str] = "advance_stage"


@dataclass(frozen=True)
class AdvanceStageAddWeight:
    """Advance the stage and add the weight increment."""

    type: ClassVar[str] = "advance_stage_add_weight"


@dataclass(frozen=True)
class DeloadPercent:
    """Drop the weight by ``percent`` and restart at stage 0."""

    percent: float
    type: ClassVar[str] = "deload_percent"

    def __post_init__(self) -> None:
        if not 0 <= self.percent <= 100:
            raise ValueError(f"deload percent must be within 0-100, got {self.percent}")


@dataclass(frozen=True)
class AddWeightResetStage:
    """Add a fixed ``amount`` and restart at stage 0 (double progression)."""

    amount: float
    type: ClassVar[str] = "add_weight_reset_stage"


@dataclass(frozen=True)
class UpdateTm:
    """Raise the slot's training max by ``amount`` if the AMRAP hit ``min_amrap_reps``."""

    amount: float
    min_amrap_reps: int
    type: ClassVar[str] = "update_tm"

    def __post_init__(self) -> None:
        if self.min_amrap_reps < 0:
            raise ValueError("min_amrap_reps must be non-negative")


ProgressionRule = Union[
    NoChange,
    AddWeight,
    AdvanceStage,
    AdvanceStageAddWeight,
    DeloadPercent,
    AddWeightResetStage,
    UpdateTm,
]

RULE_TYPES: dict[str, type] = {
    cls.type: cls
    for cls in (
        NoChange,
        AddWeight,
        AdvanceStage,
        AdvanceStageAddWeight,
        DeloadPercent,
        AddWeightResetStage,
        UpdateTm,
    )
}


# =============================================================================
# PROGRAM DEFINITION
# =============================================================================


@dataclass(frozen=True)
class Stage:
    """One rung of a slot's set/rep scheme (e.g. 3x10 -> 3x8 -> 3x6)."""

    sets: int
    reps: int
    reps_max: int | None = None  # Upper bound for rep-range stages
    amrap: bool = False

    def __post_init__(self) -> None:
        if self.sets < 1:
            raise ValueError("sets must be positive")
        if self.reps < 1:
            raise ValueError("reps must be positive")
        if self.reps_max is not None and self.reps_max < self.reps:
            raise ValueError("reps_max must be >= reps")


@dataclass(frozen=True)
class PercentRung:
    """One line of a percentage table: ``sets`` x ``reps`` at ``percent`` of a max."""

    percent: float
    reps: int
    sets: int

    def __post_init__(self) -> None:
        if self.percent < 0:
            raise ValueError("percent must be non-negative")
        if self.reps < 1 or self.sets < 1:
            raise ValueError("sets and reps must be positive")


@dataclass(frozen=True)
class ExerciseSlot:
    """
    One exercise assignment inside a day.

    ``slot_id`` is shared by every occurrence of the slot across days and
    cycle repeats; progression state is keyed by it.

    The weight comes from one of three sources:
    - ``start_weight_key`` (optionally scaled by ``start_weight_multiplier``
      and shifted down by ``start_weight_offset`` increments),
    - ``training_max_key`` x ``tm_percent``,
    - a percentage table (``prescriptions`` of ``percent_of``).
    """

    slot_id: str
    exercise_id: str
    tier: str
    stages: tuple[Stage, ...]
    on_success: ProgressionRule
    on_mid_stage_fail: ProgressionRule
    on_final_stage_fail: ProgressionRule
    start_weight_key: str
    on_final_stage_success: ProgressionRule | None = None
    on_undefined: ProgressionRule | None = None
    role: Role | None = None
    start_weight_multiplier: float | None = None
    start_weight_offset: float | None = None
    training_max_key: str | None = None
    tm_percent: float | None = None
    prescriptions: tuple[PercentRung, ...] | None = None
    percent_of: str | None = None
    is_gpp: bool = False
    complex_reps: str | None = None
    propagates_to: str | None = None
    is_test_slot: bool = False
    notes: str | None = None

    def __post_init__(self) -> None:
        if not self.slot_id:
            raise ValueError("slot_id must be non-empty")
        if self.role is not None and self.role not in ROLES:
            raise ValueError(f"Invalid role: {self.role!r}. Must be one of {ROLES}")
        if self.propagates_to is not None and not self.propagates_to:
            raise ValueError("propagates_to must be non-empty when set")

    @property
    def is_percentage_table(self) -> bool:
        """True when the weight comes from a percentage table."""
        return self.prescriptions is not None and self.percent_of is not None

    @property
    def uses_training_max(self) -> bool:
        """True when the displayed weight is a percentage of a training max."""
        return self.training_max_key is not None and self.tm_percent is not None

    @property
    def progresses(self) -> bool:
        """False for percentage-table and GPP slots, which never progress."""
        return self.prescriptions is None and not self.is_gpp


@dataclass(frozen=True)
class ProgramDay:
    """A named day template: an ordered list of slots."""

    name: str
    slots: tuple[ExerciseSlot, ...]


@dataclass(frozen=True)
class ExerciseInfo:
    """Catalog entry for one exercise id."""

    name: str


@dataclass(frozen=True)
class ConfigField:
    """A user-editable configuration value (start weight, training max, ...)."""

    key: str
    label: str
    type: str = "weight"
    min: float = 0.0
    step: float = 2.5
    group: str | None = None


@dataclass(frozen=True)
class ProgramDefinition:
    """
    Full declarative description of a workout program.

    ``days`` repeat every ``cycle_length`` sessions until ``total_workouts``
    sessions have been produced.
    """

    program_id: str
    name: str
    days: tuple[ProgramDay, ...]
    exercises: dict[str, ExerciseInfo]
    total_workouts: int
    weight_increments: dict[str, float] = field(default_factory=dict)
    workouts_per_week: int = 3
    description: str = ""
    author: str = ""
    version: int = 1
    category: str = ""
    config_fields: tuple[ConfigField, ...] = ()

    @property
    def cycle_length(self) -> int:
        """Number of day templates in one cycle."""
        return len(self.days)

    def day_for(self, index: int) -> ProgramDay:
        """Day template used by session ``index``."""
        return self.days[index % self.cycle_length]

    def iter_slots(self):
        """Yield every slot occurrence in day order (ids may repeat)."""
        for day in self.days:
            yield from day.slots

    def find_slot(self, slot_id: str) -> ExerciseSlot | None:
        """Return the first slot with ``slot_id``, or None."""
        return next((s for s in self.iter_slots() if s.slot_id == slot_id), None)


# =============================================================================
# REPLAY STATE AND RESULTS
# =============================================================================


@dataclass
class SlotState:
    """Progression state for one slot id during a replay."""

    weight: float
    stage: int = 0
    ever_changed: bool = False  # UI highlight only


@dataclass
class SlotResult:
    """What the lifter recorded for one slot in one session."""

    result: ResultValue | None = None
    amrap_reps: int | None = None
    rpe: float | None = None

    def __post_init__(self) -> None:
        if self.result is not None and self.result not in RESULT_VALUES:
            raise ValueError(f"Invalid result: {self.result!r}. Must be one of {RESULT_VALUES}")
        if self.amrap_reps is not None and self.amrap_reps < 0:
            raise ValueError("amrap_reps must be non-negative")
        if self.rpe is not None and not RPE_MIN <= self.rpe <= RPE_MAX:
            raise ValueError(f"rpe must be within {RPE_MIN}-{RPE_MAX}")

    @property
    def is_empty(self) -> bool:
        return self.result is None and self.amrap_reps is None and self.rpe is None


# Session index (as string) -> slot id -> recorded result
Results = dict[str, dict[str, SlotResult]]
Config = dict[str, float | str]


@dataclass(frozen=True)
class ResolvedPrescription:
    """A percentage rung with its concrete weight."""

    percent: float
    reps: int
    sets: int
    weight: float


@dataclass
class SlotRow:
    """The prescription shown for one slot in one session."""

    slot_id: str
    exercise_id: str
    exercise_name: str
    tier: str
    weight: float
    stage: int
    sets: int
    reps: int
    reps_max: int | None
    is_amrap: bool
    stages_count: int
    result: ResultValue | None
    amrap_reps: int | None
    rpe: float | None
    is_changed: bool
    is_deload: bool
    role: Role | None
    notes: str | None = None
    prescriptions: list[ResolvedPrescription] | None = None
    is_gpp: bool | None = None
    complex_reps: str | None = None
    propagates_to: str | None = None
    is_test_slot: bool = False


@dataclass
class WorkoutRow:
    """Every slot prescription for one session of the program."""

    index: int
    day_name: str
    slots: list[SlotRow]
    is_changed: bool


# =============================================================================
# STATISTICS
# =============================================================================


@dataclass(frozen=True)
class ChartDataPoint:
    """One point of an exercise's weight series (1-based workout and stage)."""

    workout: int
    weight: float
    stage: int
    result: ResultValue | None


@dataclass(frozen=True)
class ExerciseStats:
    """Summary of the marked sessions of one exercise."""

    total: int
    successes: int
    fails: int
    rate: int  # Success percentage, rounded
    current_weight: float
    start_weight: float
    gained: float
    current_stage: int
