"""
Training-max registry.

Training maxes are keyed by a config label (e.g. ``"squat_tm"``) rather than
by slot, because several slots on unrelated days read the same max.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from .rounding import round_to_nearest_half

if TYPE_CHECKING:
    from .models import Config, ProgramDefinition, UpdateTm


def config_to_num(config: Config, key: str) -> float:
    """
    Read a numeric config value.

    Numeric strings are parsed; missing, empty or non-numeric values read as 0.
    """
    value = config.get(key)
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return 0.0
        return parsed if math.isfinite(parsed) else 0.0
    return 0.0


class TrainingMaxRegistry:
    """Flat ``key -> weight`` store, owned by a single replay."""

    def __init__(self, values: dict[str, float] | None = None):
        self._values: dict[str, float] = dict(values or {})

    @classmethod
    def seed(cls, definition: ProgramDefinition, config: Config) -> TrainingMaxRegistry:
        """Create a registry with one entry per training-max key used in ``definition``."""
        values: dict[str, float] = {}
        for slot in definition.iter_slots():
            key = slot.training_max_key
            if key is not None and key not in values:
                values[key] = config_to_num(config, key)
        return cls(values)

    def __contains__(self, key: str) -> bool:
        return key in self._values

    def get(self, key: str) -> float:
        """Current value of ``key`` (0.0 if never seeded)."""
        return self._values.get(key, 0.0)

    def weight_at(self, key: str, percent: float) -> float:
        """Working weight at ``percent`` (a fraction, e.g. 0.85) of the max."""
        return round_to_nearest_half(self.get(key) * percent)

    def apply_update(self, rule: UpdateTm, key: str, amrap_reps: int | None) -> bool:
        """
        Raise ``key`` by ``rule.amount`` if the AMRAP met the threshold.

        Returns:
            True if the training max changed
        """
        if amrap_reps is None or amrap_reps < rule.min_amrap_reps:
            return False
        self._values[key] = round_to_nearest_half(self.get(key) + rule.amount)
        return True

    def snapshot(self) -> dict[str, float]:
        """Copy of the current values."""
        return dict(self._values)
