"""
Configuration constants for the program engine.

All adjustable parameters are centralized here for easy tuning.
"""

from typing import Final

# =============================================================================
# ROUNDING
# =============================================================================

HALF_STEP: Final[float] = 0.5  # Default weight granularity (kg)
DEFAULT_ROUNDING_STEP: Final[float] = 2.5  # Plate step for percentage tables
ROUNDING_CONFIG_KEY: Final[str] = "rounding"  # Config key overriding the step
FLOAT_PRECISION: Final[int] = 1000  # Re-round to 3 decimals after snapping

# =============================================================================
# RESULTS
# =============================================================================

RESULT_SUCCESS: Final[str] = "success"
RESULT_FAIL: Final[str] = "fail"
RESULT_VALUES: Final[tuple[str, ...]] = (RESULT_SUCCESS, RESULT_FAIL)

RPE_MIN: Final[float] = 1.0
RPE_MAX: Final[float] = 10.0

# =============================================================================
# SLOT ROLES
# =============================================================================

ROLES: Final[tuple[str, ...]] = ("primary", "secondary", "accessory")

# Legacy tiered programs (GZCLP, Nivel 7) declare a tier but no role.
TIER_ROLE_MAP: Final[dict[str, str]] = {
    "t1": "primary",
    "t2": "secondary",
    "t3": "primary",
}

# =============================================================================
# TEST SLOTS
# =============================================================================

TEST_WEIGHT_MIN: Final[float] = 20.0  # Accepted range for a recorded 1RM test
TEST_WEIGHT_MAX: Final[float] = 500.0

# =============================================================================
# STORAGE
# =============================================================================

DATA_DIR_NAME: Final[str] = ".lift-planner"
STORE_FILE_NAME: Final[str] = "program.json"
UNDO_DEPTH: Final[int] = 50  # Maximum remembered result edits
