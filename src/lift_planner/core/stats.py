"""
Per-exercise chart series and summary statistics.

Series are grouped by exercise id, not slot id, so an exercise that appears
through several slots (block variants, Pull A / Pull B) yields one
continuous series.
"""

import math

from .models import ChartDataPoint, ExerciseStats, ProgramDefinition, WorkoutRow


def extract_chart_data(
    definition: ProgramDefinition,
    rows: list[WorkoutRow],
) -> dict[str, list[ChartDataPoint]]:
    """
    Build one weight series per exercise from replayed rows.

    Args:
        definition: Program the rows were computed from
        rows: Output of compute_program

    Returns:
        Dict of exercise_id -> points in session order (1-based workout and
        stage numbers); exercises that never appear get an empty list
    """
    data: dict[str, list[ChartDataPoint]] = {ex_id: [] for ex_id in definition.exercises}

    for row in rows:
        for slot in row.slots:
            series = data.get(slot.exercise_id)
            if series is None:
                continue
            series.append(
                ChartDataPoint(
                    workout=row.index + 1,
                    weight=slot.weight,
                    stage=slot.stage + 1,
                    result=slot.result,
                )
            )

    return data


def calculate_stats(points: list[ChartDataPoint]) -> ExerciseStats:
    """
    Summarise an exercise series.

    Only marked points (with a result) count towards totals; the current
    weight and stage come from the last marked point, not from the projected
    future.
    """
    marked = [p for p in points if p.result is not None]
    successes = sum(1 for p in marked if p.result == "success")
    fails = sum(1 for p in marked if p.result == "fail")
    first = points[0] if points else None
    last_marked = marked[-1] if marked else None

    if last_marked is not None:
        current_weight = last_marked.weight
    elif first is not None:
        current_weight = first.weight
    else:
        current_weight = 0.0

    return ExerciseStats(
        total=len(marked),
        successes=successes,
        fails=fails,
        rate=math.floor(successes / len(marked) * 100 + 0.5) if marked else 0,
        current_weight=current_weight,
        start_weight=first.weight if first else 0.0,
        gained=round(last_marked.weight - first.weight, 1) if last_marked and first else 0.0,
        current_stage=last_marked.stage if last_marked else 1,
    )
