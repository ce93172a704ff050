"""
JSON-based storage for an active program.

Handles reading, writing, and managing the program file: which preset is
being run, its configuration (start weights, training maxes, rounding
step) and the recorded results.  Engine state is never stored; it is
recomputed from these inputs on every read.
"""

import json
from pathlib import Path
from typing import Any

from ..core.config import (
    DATA_DIR_NAME,
    STORE_FILE_NAME,
    TEST_WEIGHT_MAX,
    TEST_WEIGHT_MIN,
    UNDO_DEPTH,
)
from ..core.models import Config, ExerciseSlot, Results, SlotResult
from .serializers import (
    ValidationError,
    dict_to_results,
    dict_to_slot_result,
    parse_config_value,
    slot_result_to_dict,
    validate_result,
    validate_rpe,
    validate_session_index,
)

_UNSET = object()


class ProgramStore:
    """
    Manages one program run stored as a single JSON document.

    The file holds:
    - ``program_id``: preset being run
    - ``config``: flat key -> number map
    - ``results``: session index -> slot id -> recorded result
    - ``undo``: stack of previous slot results for ``undo()``
    """

    def __init__(self, store_path: str | Path):
        """
        Initialize the store.

        Args:
            store_path: Path to the JSON program file
        """
        self.store_path = Path(store_path)

    def exists(self) -> bool:
        """Check if the program file exists."""
        return self.store_path.exists()

    def init(self, program_id: str, config: Config | None = None) -> None:
        """
        Create (or overwrite) the program file with empty results.

        Creates parent directories if needed.
        """
        self.store_path.parent.mkdir(parents=True, exist_ok=True)
        self._write(
            {
                "program_id": program_id,
                "config": dict(config or {}),
                "results": {},
                "undo": [],
            }
        )

    def _read(self) -> dict[str, Any]:
        if not self.store_path.exists():
            raise FileNotFoundError(
                f"Program file not found: {self.store_path}. Run 'init' first."
            )
        try:
            with open(self.store_path, "r") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Error parsing {self.store_path}: {e}") from e
        if not isinstance(data, dict) or "program_id" not in data:
            raise ValidationError(f"Invalid program file: {self.store_path}")
        return data

    def _write(self, data: dict[str, Any]) -> None:
        with open(self.store_path, "w") as f:
            json.dump(data, f, indent=2)

    def load_program_id(self) -> str:
        """Return the id of the program being run."""
        return str(self._read()["program_id"])

    def load_config(self) -> Config:
        """
        Load the program configuration.

        Raises:
            FileNotFoundError: If the program file doesn't exist
            ValidationError: If a value is not numeric
        """
        raw = self._read().get("config", {})
        if not isinstance(raw, dict):
            raise ValidationError("config must be an object")
        config: Config = {}
        for key, value in raw.items():
            if isinstance(value, str):
                # Numeric strings are kept as typed; the engine parses them
                config[str(key)] = value
            else:
                config[str(key)] = parse_config_value(value, str(key))
        return config

    def update_config(self, key: str, value: float) -> None:
        """
        Set one configuration value.

        Args:
            key: Config key (e.g. "squat_tm", "rounding")
            value: New non-negative value
        """
        value = parse_config_value(value, key)
        data = self._read()
        data.setdefault("config", {})[key] = value
        self._write(data)

    def load_results(self) -> Results:
        """
        Load all recorded results.

        Raises:
            FileNotFoundError: If the program file doesn't exist
            ValidationError: If data is invalid
        """
        return dict_to_results(self._read().get("results", {}))

    def record_result(
        self,
        index: int | str,
        slot_id: str,
        result: str | None | object = _UNSET,
        amrap_reps: int | None | object = _UNSET,
        rpe: float | None | object = _UNSET,
    ) -> SlotResult:
        """
        Record (or amend) the outcome of one slot in one session.

        Fields that are not passed keep their previously recorded value;
        passing None clears a field.

        Args:
            index: Session index
            slot_id: Slot id within that session's day
            result: "success", "fail" or None
            amrap_reps: Reps achieved on the AMRAP set
            rpe: Perceived exertion (1-10)

        Returns:
            The stored SlotResult
        """
        key = validate_session_index(index)
        if result is not _UNSET and result is not None:
            validate_result(result)  # type: ignore[arg-type]
        if amrap_reps is not _UNSET and amrap_reps is not None:
            if int(amrap_reps) < 0:  # type: ignore[call-overload]
                raise ValidationError(f"amrap_reps must be non-negative, got {amrap_reps}")
        if rpe is not _UNSET and rpe is not None:
            validate_rpe(float(rpe))  # type: ignore[arg-type]

        data = self._read()
        results = data.setdefault("results", {})
        session = results.setdefault(key, {})
        previous = session.get(slot_id)

        merged = dict(previous or {})
        for name, value in (("result", result), ("amrap_reps", amrap_reps), ("rpe", rpe)):
            if value is _UNSET:
                continue
            if value is None:
                merged.pop(name, None)
            else:
                merged[name] = value

        stored = slot_result_to_dict(dict_to_slot_result(merged))
        if stored:
            session[slot_id] = stored
        else:
            session.pop(slot_id, None)
        if not session:
            results.pop(key, None)

        self._push_undo(data, key, slot_id, previous)
        self._write(data)
        return dict_to_slot_result(stored)

    def clear_result(self, index: int | str, slot_id: str) -> bool:
        """
        Remove whatever was recorded for one slot in one session.

        Returns:
            True if something was removed
        """
        key = validate_session_index(index)
        data = self._read()
        results = data.setdefault("results", {})
        session = results.get(key, {})
        previous = session.pop(slot_id, None)
        if previous is None:
            return False
        if not session:
            results.pop(key, None)
        self._push_undo(data, key, slot_id, previous)
        self._write(data)
        return True

    def _push_undo(
        self,
        data: dict[str, Any],
        key: str,
        slot_id: str,
        previous: dict[str, Any] | None,
    ) -> None:
        stack = data.setdefault("undo", [])
        stack.append({"index": key, "slot_id": slot_id, "previous": previous})
        del stack[:-UNDO_DEPTH]

    def undo(self) -> tuple[str, str] | None:
        """
        Revert the most recent record/clear.

        Returns:
            (session index, slot id) that was restored, or None if there is
            nothing to undo
        """
        data = self._read()
        stack = data.get("undo", [])
        if not stack:
            return None
        entry = stack.pop()
        key, slot_id, previous = entry["index"], entry["slot_id"], entry["previous"]
        results = data.setdefault("results", {})
        session = results.setdefault(key, {})
        if previous:
            session[slot_id] = previous
        else:
            session.pop(slot_id, None)
        if not session:
            results.pop(key, None)
        self._write(data)
        return key, slot_id

    def undo_depth(self) -> int:
        """Number of edits that can be undone."""
        return len(self._read().get("undo", []))

    def apply_test_weight(self, slot: ExerciseSlot, weight: float) -> str:
        """
        Store a tested max as the next block's training max.

        Args:
            slot: A test slot with a ``propagates_to`` target
            weight: Tested max in kg

        Returns:
            The config key that was updated

        Raises:
            ValidationError: If the slot has no propagation target or the
                weight is out of range
        """
        if not slot.is_test_slot or slot.propagates_to is None:
            raise ValidationError(f"Slot '{slot.slot_id}' does not feed a later block")
        weight = parse_config_value(weight, "weight")
        if not TEST_WEIGHT_MIN <= weight <= TEST_WEIGHT_MAX:
            raise ValidationError(
                f"Tested weight must be within {TEST_WEIGHT_MIN:g}-{TEST_WEIGHT_MAX:g} kg"
            )
        self.update_config(slot.propagates_to, weight)
        return slot.propagates_to


def get_default_store_path() -> Path:
    """
    Get the default program file path.

    Returns:
        ``~/.lift-planner/program.json``
    """
    return Path.home() / DATA_DIR_NAME / STORE_FILE_NAME
