"""Percentage-table prescriptions (Sheiko-style %1RM slots)."""

from .config import DEFAULT_ROUNDING_STEP, ROUNDING_CONFIG_KEY
from .models import Config, PercentRung, ResolvedPrescription
from .rounding import round_to_nearest
from .training_max import config_to_num


def rounding_step(config: Config) -> float:
    """Plate step from config; DEFAULT_ROUNDING_STEP when unset or zero."""
    return config_to_num(config, ROUNDING_CONFIG_KEY) or DEFAULT_ROUNDING_STEP


def resolve_prescriptions(
    rungs: tuple[PercentRung, ...] | list[PercentRung],
    base: float,
    step: float,
) -> list[ResolvedPrescription]:
    """
    Compute the weight of every rung of a percentage table.

    Args:
        rungs: Percentage ladder, lowest to highest
        base: The max the percentages refer to
        step: Rounding step

    Returns:
        One ResolvedPrescription per rung, in the same order
    """
    return [
        ResolvedPrescription(
            percent=rung.percent,
            reps=rung.reps,
            sets=rung.sets,
            weight=round_to_nearest(base * rung.percent / 100, step),
        )
        for rung in rungs
    ]


def working_set(resolved: list[ResolvedPrescription]) -> ResolvedPrescription:
    """The rung shown as the session's prescription: the last (heaviest) one."""
    return resolved[-1]
