"""Centralized JSON serialization.

``canonical_dumps`` gives byte-stable output for hashing and machine reports;
``sidecar_dumps`` gives the human-readable form written beside outputs.
"""

import json
from typing import Any


def canonical_dumps(obj: Any) -> str:
    """
    Canonical JSON serialization for byte-stable evidence.

    Rules:
    - UTF-8 encoding
    - Sorted keys
    - Stable separators (",", ":")
    - No trailing whitespace

    Args:
        obj: Python object to serialize

    Returns:
        Canonical JSON string
    """
    return json.dumps(
        obj,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False
    )


def sidecar_dumps(obj: Any) -> str:
    """Indented JSON with field order preserved, newline-terminated."""
    return json.dumps(obj, indent=2, ensure_ascii=False) + "\n"
