"""
YAML -> ProgramDefinition loader.

Loads program definitions from individual YAML files in the bundled
``src/lift_planner/programs/`` directory.  Each file (e.g. gzclp.yaml)
contains one program matching the ProgramDefinition schema.

User overrides: place matching files in ``~/.lift-planner/programs/``.
A user file is deep-merged over the bundled definition, so only changed
keys need to be listed.  A user file whose stem does not match any bundled
file is treated as a new program and added to the registry.

Usage (internal, called by registry.py):
    from .loader import load_programs_from_yaml
    programs = load_programs_from_yaml()   # dict or None on failure
"""

from __future__ import annotations

import os
import warnings
from pathlib import Path

import yaml

from ..config import DATA_DIR_NAME
from ..models import (
    RULE_TYPES,
    ConfigField,
    ExerciseInfo,
    ExerciseSlot,
    PercentRung,
    ProgramDay,
    ProgramDefinition,
    ProgressionRule,
    Stage,
)

_REQUIRED_PROGRAM_FIELDS: frozenset[str] = frozenset(
    {"program_id", "name", "days", "exercises", "total_workouts"}
)

_REQUIRED_SLOT_FIELDS: frozenset[str] = frozenset(
    {
        "id",
        "exercise_id",
        "tier",
        "on_success",
        "on_mid_stage_fail",
        "on_final_stage_fail",
        "start_weight_key",
    }
)


def rule_from_dict(d: dict) -> ProgressionRule:
    """Convert ``{"type": ..., **params}`` to a progression rule.

    Raises ValueError on an unknown type or missing parameter.
    """
    if not isinstance(d, dict) or "type" not in d:
        raise ValueError(f"Progression rule must be a mapping with a 'type': {d!r}")
    rule_type = d["type"]
    cls = RULE_TYPES.get(rule_type)
    if cls is None:
        raise ValueError(f"Unknown progression rule type: {rule_type!r}")
    try:
        if rule_type == "deload_percent":
            return cls(percent=float(d["percent"]))
        if rule_type == "add_weight_reset_stage":
            return cls(amount=float(d["amount"]))
        if rule_type == "update_tm":
            return cls(amount=float(d["amount"]), min_amrap_reps=int(d["min_amrap_reps"]))
    except KeyError as exc:
        raise ValueError(f"{rule_type} rule missing parameter {exc}") from exc
    return cls()


def rule_to_dict(rule: ProgressionRule) -> dict:
    """Inverse of :func:`rule_from_dict`."""
    d: dict = {"type": rule.type}
    for name in ("percent", "amount", "min_amrap_reps"):
        if hasattr(rule, name):
            d[name] = getattr(rule, name)
    return d


def _stage_from_dict(d: dict) -> Stage:
    return Stage(
        sets=int(d["sets"]),
        reps=int(d["reps"]),
        reps_max=int(d["reps_max"]) if d.get("reps_max") is not None else None,
        amrap=bool(d.get("amrap", False)),
    )


def _optional_float(d: dict, key: str) -> float | None:
    return float(d[key]) if d.get(key) is not None else None


def slot_from_dict(d: dict) -> ExerciseSlot:
    """Convert a raw slot mapping to an ExerciseSlot.

    Raises ValueError if any required field is absent.
    """
    missing = _REQUIRED_SLOT_FIELDS - set(d)
    if missing:
        raise ValueError(f"Slot {d.get('id', '?')!r} missing fields: {sorted(missing)}")

    prescriptions_raw = d.get("prescriptions")
    prescriptions = (
        tuple(
            PercentRung(percent=float(p["percent"]), reps=int(p["reps"]), sets=int(p["sets"]))
            for p in prescriptions_raw
        )
        if prescriptions_raw is not None
        else None
    )

    return ExerciseSlot(
        slot_id=str(d["id"]),
        exercise_id=str(d["exercise_id"]),
        tier=str(d["tier"]),
        stages=tuple(_stage_from_dict(s) for s in d.get("stages") or []),
        on_success=rule_from_dict(d["on_success"]),
        on_mid_stage_fail=rule_from_dict(d["on_mid_stage_fail"]),
        on_final_stage_fail=rule_from_dict(d["on_final_stage_fail"]),
        on_final_stage_success=(
            rule_from_dict(d["on_final_stage_success"])
            if d.get("on_final_stage_success") is not None
            else None
        ),
        on_undefined=(
            rule_from_dict(d["on_undefined"]) if d.get("on_undefined") is not None else None
        ),
        start_weight_key=str(d["start_weight_key"]),
        role=d.get("role"),
        start_weight_multiplier=_optional_float(d, "start_weight_multiplier"),
        start_weight_offset=_optional_float(d, "start_weight_offset"),
        training_max_key=d.get("training_max_key"),
        tm_percent=_optional_float(d, "tm_percent"),
        prescriptions=prescriptions,
        percent_of=d.get("percent_of"),
        is_gpp=bool(d.get("is_gpp", False)),
        complex_reps=d.get("complex_reps"),
        propagates_to=d.get("propagates_to"),
        is_test_slot=bool(d.get("is_test_slot", False)),
        notes=d.get("notes"),
    )


def program_from_dict(d: dict) -> ProgramDefinition:
    """Convert a raw dict (from YAML) to a ProgramDefinition.

    Raises ValueError if any required field is absent or malformed.
    """
    d = dict(d)
    missing = _REQUIRED_PROGRAM_FIELDS - set(d)
    if missing:
        raise ValueError(f"ProgramDefinition missing fields: {sorted(missing)}")

    try:
        days = tuple(
            ProgramDay(
                name=str(day["name"]),
                slots=tuple(slot_from_dict(s) for s in day.get("slots") or []),
            )
            for day in d["days"]
        )
        exercises = {
            str(k): ExerciseInfo(name=str(v["name"] if isinstance(v, dict) else v))
            for k, v in d["exercises"].items()
        }
        config_fields = tuple(
            ConfigField(
                key=str(f["key"]),
                label=str(f.get("label", f["key"])),
                type=str(f.get("type", "weight")),
                min=float(f.get("min", 0.0)),
                step=float(f.get("step", 2.5)),
                group=f.get("group"),
            )
            for f in d.get("config_fields") or []
        )
    except (KeyError, TypeError) as exc:
        raise ValueError(f"malformed program definition: {exc!r}") from exc

    return ProgramDefinition(
        program_id=str(d["program_id"]),
        name=str(d["name"]),
        days=days,
        exercises=exercises,
        total_workouts=int(d["total_workouts"]),
        weight_increments={
            str(k): float(v) for k, v in (d.get("weight_increments") or {}).items()
        },
        workouts_per_week=int(d.get("workouts_per_week", 3)),
        description=str(d.get("description", "")).strip(),
        author=str(d.get("author", "")),
        version=int(d.get("version", 1)),
        category=str(d.get("category", "")),
        config_fields=config_fields,
    )


def _load_yaml_file(path: Path) -> dict:
    """Load a YAML file; return {} if it is unreadable or not a mapping."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        warnings.warn(f"lift-planner: cannot read {path} ({exc})", stacklevel=2)
        return {}
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _get_bundled_programs_dir() -> Path | None:
    """Return path to the bundled programs/ data directory, or None if not found."""
    # loader.py lives at src/lift_planner/core/programs/loader.py
    # three levels up -> src/lift_planner/
    candidate = Path(__file__).parent.parent.parent / "programs"
    return candidate if candidate.is_dir() else None


def _get_user_programs_dir() -> Path | None:
    """Return ~/.lift-planner/programs/ if it exists, else None."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    p = home / DATA_DIR_NAME / "programs"
    return p if p.is_dir() else None


def load_programs_from_yaml() -> dict[str, ProgramDefinition] | None:
    """Return {program_id: ProgramDefinition} loaded from per-program YAML files.

    Loads each ``<program_id>.yaml`` from the bundled programs/ directory.
    If a matching file exists in ``~/.lift-planner/programs/`` it is
    deep-merged over the bundled definition.  User-only files are loaded as
    new programs.  Invalid files are skipped with a warning.

    Returns None when nothing could be loaded.
    """
    bundled_dir = _get_bundled_programs_dir()
    user_dir = _get_user_programs_dir()

    if bundled_dir is None and user_dir is None:
        return None

    stems: dict[str, Path] = {}
    if bundled_dir is not None:
        for p in sorted(bundled_dir.glob("*.yaml")):
            stems[p.stem] = p

    user_only: list[Path] = []
    if user_dir is not None:
        for p in sorted(user_dir.glob("*.yaml")):
            if p.stem not in stems:
                user_only.append(p)

    raw_programs: list[tuple[str, dict]] = []
    for stem, bundled_path in stems.items():
        raw = _load_yaml_file(bundled_path)
        if not raw:
            continue
        if user_dir is not None:
            user_path = user_dir / f"{stem}.yaml"
            if user_path.exists():
                user_raw = _load_yaml_file(user_path)
                if user_raw:
                    raw = _deep_merge(raw, user_raw)
        raw_programs.append((stem, raw))

    for p in user_only:
        raw = _load_yaml_file(p)
        if raw:
            raw_programs.append((p.stem, raw))

    result: dict[str, ProgramDefinition] = {}
    for stem, raw in raw_programs:
        try:
            program = program_from_dict(raw)
        except ValueError as exc:
            warnings.warn(f"lift-planner: skipping program '{stem}': {exc}", stacklevel=2)
            continue
        result[program.program_id] = program

    return result if result else None
