"""Parameter normalization rules for provenance records.

Key rules:
- Object keys must be strings
- Arrays preserve order; sets become sorted arrays
- Floats allowed only when finite (NaN/Inf have no JSON form)
- Paths become POSIX strings
- Strings normalized to NFC
- Any other type is rejected
"""

import json
import math
import unicodedata
from collections.abc import Mapping
from pathlib import PurePath
from typing import Any

from provguard.errors import ParameterError


SHA256_PREFIX = "sha256:"


def _normalize_string(s: str) -> str:
    """Normalize string to NFC."""
    return unicodedata.normalize("NFC", s)


def _sort_key(obj: Any) -> str:
    return json.dumps(obj, sort_keys=True, ensure_ascii=False)


def normalize_value(obj: Any, path: str = "") -> Any:
    """Convert a parameter value into plain JSON types.

    Args:
        obj: Value to normalize
        path: Dotted key path used in error messages

    Returns:
        Equivalent value built only from None, bool, int, float, str, dict and list

    Raises:
        ParameterError: If the value (or anything nested in it) has no JSON form
    """
    where = path or "<root>"
    if obj is None or isinstance(obj, bool):
        return obj
    if isinstance(obj, int):
        return obj
    if isinstance(obj, float):
        if math.isnan(obj) or math.isinf(obj):
            raise ParameterError(
                f"Invalid number at {where}: NaN or Inf cannot be recorded",
                "store the value as a string or drop it from the parameters",
            )
        return obj
    if isinstance(obj, str):
        return _normalize_string(obj)
    if isinstance(obj, PurePath):
        return obj.as_posix()
    if isinstance(obj, Mapping):
        result = {}
        for key, value in obj.items():
            if not isinstance(key, str):
                raise ParameterError(
                    f"Parameter keys must be strings at {where}, got {type(key).__name__}",
                    "convert the key to a string",
                )
            child = f"{path}.{key}" if path else key
            result[_normalize_string(key)] = normalize_value(value, child)
        return result
    if isinstance(obj, (list, tuple)):
        return [normalize_value(item, f"{path}[{i}]") for i, item in enumerate(obj)]
    if isinstance(obj, (set, frozenset)):
        items = [normalize_value(item, f"{path}[]") for item in obj]
        return sorted(items, key=_sort_key)
    raise ParameterError(
        f"Non-JSON parameter at {where}: {type(obj).__name__}",
        "pass only None, bool, int, float, str, paths, mappings and sequences",
    )

