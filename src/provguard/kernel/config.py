"""Pydantic model for project configuration with placeholder detection."""

import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, ValidationError, ValidationInfo, field_validator

from provguard.errors import ConfigValidationError


PLACEHOLDER_PATTERN = re.compile(r"^<[^<>]*>$")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

PATH_KEYS = ("data_path", "env_path", "processed_path", "reports_path")


class Configuration(BaseModel):
    """Validated, immutable project configuration.

    Recognized options are typed fields; any other key declared by the
    template is kept as-is and reachable through ``get``.
    """
    data_path: Path  # project data root: raw/, processed/, reports/
    env_path: Optional[Path] = None
    log_level: str = "INFO"
    random_seed: Optional[int] = None
    processed_path: Optional[Path] = None  # overrides data_path/processed
    reports_path: Optional[Path] = None  # overrides data_path/reports

    model_config = ConfigDict(extra="allow", frozen=True)

    @field_validator(*PATH_KEYS, mode="before")
    @classmethod
    def resolve_path_value(cls, v: Any, info: ValidationInfo) -> Any:
        """Expand ``~`` and anchor relative paths at the config file's directory."""
        if v is None:
            return v
        if not isinstance(v, (str, Path)):
            raise ValueError(f"must be a path string, got {type(v).__name__}")
        try:
            path = Path(v).expanduser()
        except RuntimeError as e:
            raise ValueError(f"cannot expand {v!r}: {e}") from e
        base_dir = (info.context or {}).get("base_dir")
        if base_dir is not None and not path.is_absolute():
            path = Path(base_dir) / path
        return path

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: Any) -> str:
        if not isinstance(v, str) or v.upper() not in LOG_LEVELS:
            raise ValueError(f"must be one of {', '.join(LOG_LEVELS)}, got {v!r}")
        return v.upper()

    @field_validator("random_seed", mode="before")
    @classmethod
    def validate_random_seed(cls, v: Any) -> Any:
        if isinstance(v, bool) or (v is not None and not isinstance(v, int)):
            raise ValueError(f"must be an integer, got {v!r}")
        return v

    def get(self, key: str, default: Any = None) -> Any:
        """Value of ``key`` (recognized or extra), or ``default`` when absent/None."""
        if key in type(self).model_fields:
            value = getattr(self, key)
        else:
            value = (self.model_extra or {}).get(key)
        return default if value is None else value

    def __contains__(self, key: object) -> bool:
        return key in self.keys()

    def keys(self) -> List[str]:
        """All option names, recognized first, then extras in file order."""
        return list(type(self).model_fields) + list(self.model_extra or {})

    def as_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


def find_placeholders(obj: Any, path: str = "") -> List[str]:
    """
    Find every value that still matches the placeholder pattern.

    Walks nested mappings and lists. Key paths use ``a.b`` for nested
    mappings and ``a[0]`` for list items.

    Args:
        obj: Parsed configuration document
        path: Key path prefix (used in recursion)

    Returns:
        Key paths of placeholder values, in document order
    """
    found: List[str] = []
    if isinstance(obj, str):
        if PLACEHOLDER_PATTERN.match(obj.strip()):
            found.append(path or "<root>")
    elif isinstance(obj, dict):
        for key, value in obj.items():
            found.extend(find_placeholders(value, f"{path}.{key}" if path else str(key)))
    elif isinstance(obj, list):
        for i, item in enumerate(obj):
            found.extend(find_placeholders(item, f"{path}[{i}]"))
    return found


def diff_declared_keys(data: Dict[str, Any], declared: Iterable[str]) -> Tuple[List[str], List[str]]:
    """
    Compare top-level keys of a configuration against the template's keys.

    Returns:
        (missing, unknown): declared keys absent from ``data`` and keys of
        ``data`` the template does not declare, both in stable order
    """
    declared = list(declared)
    missing = [key for key in declared if key not in data]
    unknown = [key for key in data if key not in declared]
    return missing, unknown


def build_configuration(data: Dict[str, Any], base_dir: Optional[Path], source: str) -> Configuration:
    """
    Validate a placeholder-free document into a Configuration.

    Args:
        data: Parsed configuration mapping
        base_dir: Directory that relative paths are anchored to
        source: Name of the configuration file (for messages)

    Raises:
        ConfigValidationError: If a recognized option is missing or invalid
    """
    try:
        return Configuration.model_validate(data, context={"base_dir": base_dir})
    except ValidationError as e:
        problems = []
        for err in e.errors():
            key = ".".join(str(part) for part in err["loc"]) or "<root>"
            problems.append(f"{key}: {err['msg']}")
        raise ConfigValidationError(
            f"Invalid configuration {source}: " + "; ".join(problems),
            f"correct the listed keys in {source}",
        ) from e


def resolve_path(config: Configuration, key: str, default: Any) -> Any:
    """Configured value of ``key`` as a Path if set, else ``default``. Never raises.

    Accepts a Configuration or any plain mapping.
    """
    getter = getattr(config, "get", None)
    if not callable(getter):
        return default
    try:
        value = getter(key)
    except Exception:
        return default
    if value is None:
        return default
    if isinstance(value, Path):
        return value
    if isinstance(value, str):
        try:
            return Path(value).expanduser()
        except RuntimeError:
            # ~user with no such user
            return default
    return default
