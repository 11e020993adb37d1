"""Reading configuration documents from disk (JSON or YAML)."""

import json
import shutil
from pathlib import Path
from typing import Any, Dict

import yaml

from provguard.errors import ConfigValidationError, MissingConfigError


JSON_SUFFIXES = (".json",)
YAML_SUFFIXES = (".yaml", ".yml")


def read_document(path: Path) -> Dict[str, Any]:
    """
    Parse a configuration document into a mapping.

    Args:
        path: Path to a .json, .yaml or .yml file

    Returns:
        Top-level mapping (an empty file gives an empty mapping)

    Raises:
        ConfigValidationError: If the file cannot be read as UTF-8 text,
            the format is unsupported, the file cannot be parsed, or the top level
            is not a mapping
    """
    suffix = path.suffix.lower()
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigValidationError(
            f"Could not read {path}: {e}",
            f"make sure {path} is a readable UTF-8 text file",
        ) from e
    try:
        if suffix in JSON_SUFFIXES:
            data = json.loads(text) if text.strip() else {}
        elif suffix in YAML_SUFFIXES:
            data = yaml.safe_load(text)
        else:
            raise ConfigValidationError(
                f"Unsupported configuration format {suffix or '(none)'}: {path}",
                "use a .json, .yaml or .yml file",
            )
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigValidationError(
            f"Could not parse {path}: {e}",
            f"fix the syntax of {path}",
        ) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigValidationError(
            f"Configuration {path} must contain a key-value mapping, got {type(data).__name__}",
            "write one 'key: value' entry per option",
        )
    return data


def copy_template(template_path: Path, config_path: Path) -> bool:
    """
    Copy a template to a new configuration file.

    Returns:
        True if copied, False if ``config_path`` already exists (never overwritten)

    Raises:
        MissingConfigError: If the template does not exist
    """
    if not template_path.exists():
        raise MissingConfigError(template_path, is_template=True)
    if config_path.exists():
        return False
    config_path.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(template_path, config_path)
    return True
