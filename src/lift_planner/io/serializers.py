"""
JSON serialization for results, configuration and replay output.

Handles conversion between dataclasses and JSON-compatible dicts.
"""

import json
import math
from typing import Any

from ..core.config import RESULT_VALUES, RPE_MAX, RPE_MIN
from ..core.models import (
    ChartDataPoint,
    Config,
    ExerciseStats,
    ResolvedPrescription,
    Results,
    ResultValue,
    SlotResult,
    SlotRow,
    WorkoutRow,
)


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


def validate_result(value: str) -> ResultValue:
    """
    Validate a recorded outcome.

    Args:
        value: "success" or "fail"

    Returns:
        Validated result value

    Raises:
        ValidationError: If the value is not a known outcome
    """
    if value not in RESULT_VALUES:
        raise ValidationError(f"Invalid result: {value!r}. Must be one of {RESULT_VALUES}")
    return value  # type: ignore


def validate_non_negative(value: int | float, name: str) -> int | float:
    """
    Validate that a value is non-negative.

    Args:
        value: Value to validate
        name: Name for error message

    Returns:
        The value if valid

    Raises:
        ValidationError: If value is negative
    """
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")
    return value


def validate_rpe(value: float) -> float:
    """Validate a perceived-exertion value (1-10)."""
    if not RPE_MIN <= value <= RPE_MAX:
        raise ValidationError(f"rpe must be within {RPE_MIN:g}-{RPE_MAX:g}, got {value}")
    return value


def validate_session_index(key: str | int) -> str:
    """
    Validate a session index key and normalize it to the string form.

    Raises:
        ValidationError: If the key is not a non-negative integer
    """
    try:
        index = int(key)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid session index: {key!r}") from e
    if index < 0 or str(index) != str(key).strip():
        raise ValidationError(f"Invalid session index: {key!r}")
    return str(index)


def parse_config_value(raw: str | int | float, name: str) -> float:
    """
    Parse a user-entered config value (start weight, training max, step).

    Raises:
        ValidationError: If the value is not a finite, non-negative number
    """
    if isinstance(raw, bool):
        raise ValidationError(f"{name} must be a number, got {raw!r}")
    try:
        value = float(raw)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{name} must be a number, got {raw!r}") from e
    if not math.isfinite(value):
        raise ValidationError(f"{name} must be finite, got {raw!r}")
    validate_non_negative(value, name)
    return value


def parse_assignment(text: str) -> tuple[str, float]:
    """
    Parse ``KEY=VALUE`` as used by ``init --set``.

    Raises:
        ValidationError: If the text is not a KEY=number pair
    """
    key, sep, raw = text.partition("=")
    key = key.strip()
    if not sep or not key:
        raise ValidationError(f"Expected KEY=VALUE, got {text!r}")
    return key, parse_config_value(raw.strip(), key)


def slot_result_to_dict(result: SlotResult) -> dict[str, Any]:
    """Compact dict: only the fields that were recorded."""
    d: dict[str, Any] = {}
    if result.result is not None:
        d["result"] = result.result
    if result.amrap_reps is not None:
        d["amrap_reps"] = result.amrap_reps
    if result.rpe is not None:
        d["rpe"] = result.rpe
    return d


def dict_to_slot_result(data: dict[str, Any]) -> SlotResult:
    """
    Convert dict to SlotResult.

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError(f"Slot result must be an object, got {data!r}")

    result = data.get("result")
    if result is not None:
        validate_result(result)

    amrap_reps = data.get("amrap_reps")
    if amrap_reps is not None:
        validate_non_negative(amrap_reps, "amrap_reps")

    rpe = data.get("rpe")
    if rpe is not None:
        validate_rpe(float(rpe))

    return SlotResult(
        result=result,
        amrap_reps=int(amrap_reps) if amrap_reps is not None else None,
        rpe=float(rpe) if rpe is not None else None,
    )


def results_to_dict(results: Results) -> dict[str, dict[str, dict[str, Any]]]:
    """
    Convert a result history to JSON-compatible dict.

    Empty slot results and empty sessions are dropped; sessions are ordered
    numerically.
    """
    out: dict[str, dict[str, dict[str, Any]]] = {}
    for index in sorted(results, key=int):
        slots = {
            slot_id: slot_result_to_dict(r)
            for slot_id, r in results[index].items()
            if not r.is_empty
        }
        if slots:
            out[index] = slots
    return out


def dict_to_results(data: dict[str, Any]) -> Results:
    """
    Convert dict to a result history.

    Raises:
        ValidationError: If any index or entry is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError("results must be an object keyed by session index")
    results: Results = {}
    for key, slots in data.items():
        index = validate_session_index(key)
        if not isinstance(slots, dict):
            raise ValidationError(f"results[{key!r}] must be an object keyed by slot id")
        results[index] = {str(slot_id): dict_to_slot_result(r) for slot_id, r in slots.items()}
    return results


def config_to_dict(config: Config) -> dict[str, float | str]:
    """Config values sorted by key."""
    return {k: config[k] for k in sorted(config)}


def _prescription_to_dict(p: ResolvedPrescription) -> dict[str, Any]:
    return {"percent": p.percent, "reps": p.reps, "sets": p.sets, "weight": p.weight}


def slot_row_to_dict(row: SlotRow) -> dict[str, Any]:
    """
    Convert SlotRow to JSON-compatible dict.

    Optional metadata (notes, percentage table, GPP, test-slot fields) is
    only included when present.
    """
    d: dict[str, Any] = {
        "slot_id": row.slot_id,
        "exercise_id": row.exercise_id,
        "exercise_name": row.exercise_name,
        "tier": row.tier,
        "role": row.role,
        "weight": row.weight,
        "stage": row.stage,
        "stages_count": row.stages_count,
        "sets": row.sets,
        "reps": row.reps,
        "reps_max": row.reps_max,
        "is_amrap": row.is_amrap,
        "is_deload": row.is_deload,
        "is_changed": row.is_changed,
        "result": row.result,
        "amrap_reps": row.amrap_reps,
        "rpe": row.rpe,
    }
    if row.notes is not None:
        d["notes"] = row.notes
    if row.prescriptions is not None:
        d["prescriptions"] = [_prescription_to_dict(p) for p in row.prescriptions]
    if row.is_gpp:
        d["is_gpp"] = True
    if row.complex_reps is not None:
        d["complex_reps"] = row.complex_reps
    if row.propagates_to is not None:
        d["propagates_to"] = row.propagates_to
    if row.is_test_slot:
        d["is_test_slot"] = True
    return d


def workout_row_to_dict(row: WorkoutRow) -> dict[str, Any]:
    """Convert WorkoutRow to JSON-compatible dict."""
    return {
        "index": row.index,
        "day_name": row.day_name,
        "is_changed": row.is_changed,
        "slots": [slot_row_to_dict(s) for s in row.slots],
    }


def workout_rows_to_json(rows: list[WorkoutRow]) -> str:
    """Serialize replay output as an indented JSON array."""
    return json.dumps([workout_row_to_dict(r) for r in rows], indent=2)


def chart_point_to_dict(point: ChartDataPoint) -> dict[str, Any]:
    """Convert ChartDataPoint to JSON-compatible dict."""
    return {
        "workout": point.workout,
        "weight": point.weight,
        "stage": point.stage,
        "result": point.result,
    }


def exercise_stats_to_dict(stats: ExerciseStats) -> dict[str, Any]:
    """Convert ExerciseStats to JSON-compatible dict."""
    return {
        "total": stats.total,
        "successes": stats.successes,
        "fails": stats.fails,
        "rate": stats.rate,
        "current_weight": stats.current_weight,
        "start_weight": stats.start_weight,
        "gained": stats.gained,
        "current_stage": stats.current_stage,
    }
