"""
Program catalog for lift-planner.

Each preset program is described by a ProgramDefinition loaded from a
bundled YAML file and interpreted by the shared program engine.
"""

from .loader import program_from_dict, rule_from_dict, rule_to_dict
from .registry import PROGRAM_REGISTRY, all_programs, get_program

__all__ = [
    "PROGRAM_REGISTRY",
    "all_programs",
    "get_program",
    "program_from_dict",
    "rule_from_dict",
    "rule_to_dict",
]
