"""Error kind constants for provguard.

These constants prevent stringly-typed error kinds in run results,
exceptions and CLI output.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Error kinds reported by exceptions and failed runs."""

    # Configuration (fatal to the whole run)
    MISSING_CONFIG = "MISSING_CONFIG"
    PLACEHOLDER = "PLACEHOLDER"
    INVALID_CONFIG = "INVALID_CONFIG"

    # Per-item (fatal to one batch item only)
    STEP_ERROR = "STEP_ERROR"
    MISSING_OUTPUT = "MISSING_OUTPUT"
    WRITE_ERROR = "WRITE_ERROR"

    # Caller mistakes
    LAYOUT_ERROR = "LAYOUT_ERROR"
    INVALID_PARAMETER = "INVALID_PARAMETER"
