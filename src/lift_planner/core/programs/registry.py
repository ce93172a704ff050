"""
Program registry.

All preset programs are registered here.  Use get_program() to look up a
ProgramDefinition by its program_id string.

Programs are loaded from per-program YAML files in the bundled
``src/lift_planner/programs/`` directory at import time.  If no program
can be loaded a RuntimeError is raised: the application cannot start
without a catalog.

User overrides: place matching files in ``~/.lift-planner/programs/``.
"""

from ..models import ProgramDefinition


def _build_registry() -> dict[str, ProgramDefinition]:
    from .loader import load_programs_from_yaml

    loaded = load_programs_from_yaml()
    if not loaded:
        raise RuntimeError(
            "lift-planner: no program definitions could be loaded from YAML. "
            "Check that src/lift_planner/programs/*.yaml files are present and valid."
        )
    return loaded


PROGRAM_REGISTRY: dict[str, ProgramDefinition] = _build_registry()


def get_program(program_id: str) -> ProgramDefinition:
    """
    Return the ProgramDefinition for the given program_id.

    Args:
        program_id: e.g. "gzclp", "ppl531" (or any program in the registry)

    Returns:
        ProgramDefinition for the requested program

    Raises:
        ValueError: If program_id is not in the registry
    """
    if program_id not in PROGRAM_REGISTRY:
        valid = ", ".join(PROGRAM_REGISTRY)
        raise ValueError(f"Unknown program '{program_id}'. Valid IDs: {valid}")
    return PROGRAM_REGISTRY[program_id]


def all_programs() -> list[ProgramDefinition]:
    """Every registered program, in id order."""
    return [PROGRAM_REGISTRY[k] for k in sorted(PROGRAM_REGISTRY)]
