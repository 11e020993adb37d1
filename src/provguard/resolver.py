"""Configuration loading: template check, placeholder check, path resolution."""

from pathlib import Path
from typing import Optional, Union

from provguard.errors import ConfigValidationError, MissingConfigError, PlaceholderError
from provguard.kernel.config import (
    Configuration,
    build_configuration,
    diff_declared_keys,
    find_placeholders,
    resolve_path,
)
from provguard._internal.config_io import copy_template, read_document
from provguard._internal.logging_config import get_logger


logger = get_logger(__name__)

PathLike = Union[str, Path]


def load(template_path: Optional[PathLike], actual_path: PathLike) -> Configuration:
    """
    Load and validate a configuration against its template.

    Order of checks (the first failure wins, nothing partial is returned):
    1. the configuration file exists
    2. the template exists (when given)
    3. no value still holds a ``<...>`` placeholder
    4. every key declared by the template is present
    5. recognized options have valid values

    Args:
        template_path: Template listing the declared keys, or None to skip
            the declared-key check
        actual_path: The user's configuration file

    Returns:
        Immutable Configuration with paths resolved against the file's directory

    Raises:
        MissingConfigError: The configuration (or template) file is absent
        PlaceholderError: At least one value is still a placeholder
        ConfigValidationError: Declared keys missing or values invalid
    """
    actual_path = Path(actual_path)
    template = Path(template_path) if template_path is not None else None

    if not actual_path.exists():
        raise MissingConfigError(actual_path, template_path=template)
    if template is not None and not template.exists():
        raise MissingConfigError(template, is_template=True)

    data = read_document(actual_path)

    placeholders = find_placeholders(data)
    if placeholders:
        raise PlaceholderError(actual_path, placeholders)

    if template is not None:
        declared = read_document(template)
        missing, unknown = diff_declared_keys(data, declared.keys())
        if missing:
            raise ConfigValidationError(
                f"Configuration {actual_path} is missing keys declared in {template}: "
                f"{', '.join(missing)}",
                f"copy the missing keys from {template} into {actual_path} and set their values",
            )
        for key in unknown:
            logger.warning(
                f"Configuration key {key!r} in {actual_path} is not declared in {template} (typo?)"
            )

    config = build_configuration(data, actual_path.parent, str(actual_path))
    logger.info(f"Configuration loaded from {actual_path}")
    return config


def init_config(template_path: PathLike, actual_path: PathLike) -> bool:
    """
    Create the configuration file from its template.

    Returns:
        True if the template was copied, False if the file already existed
    """
    copied = copy_template(Path(template_path), Path(actual_path))
    if copied:
        logger.info(f"Copied {template_path} to {actual_path}; replace every <...> value before running")
    else:
        logger.warning(f"{actual_path} already exists; leaving it untouched")
    return copied


class ConfigResolver:
    """
    Loads one project configuration once per process.

    The first ``load()`` validates and caches; later calls return the same
    immutable object.
    """

    def __init__(self, template_path: Optional[PathLike], actual_path: PathLike):
        self.template_path = Path(template_path) if template_path is not None else None
        self.actual_path = Path(actual_path)
        self._config: Optional[Configuration] = None

    def load(self) -> Configuration:
        if self._config is None:
            self._config = load(self.template_path, self.actual_path)
        return self._config

    def resolve_path(self, key: str, default=None):
        return resolve_path(self.load(), key, default)


__all__ = ["ConfigResolver", "load", "init_config", "resolve_path"]
