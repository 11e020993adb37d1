"""Directory layout rules for analysis projects (pure path logic).

Immutable source data lives under ``raw/``; every derived output goes to
``processed/{script_name}/...``; reports and run logs go to ``reports/``.
Nothing is ever written outside ``processed`` or ``reports``.
"""

from datetime import datetime
from pathlib import Path, PurePath, PurePosixPath
from typing import Union

from provguard.errors import LayoutError
from provguard.kernel.config import Configuration, resolve_path


RAW_DIR = "raw"
PROCESSED_DIR = "processed"
REPORTS_DIR = "reports"
LOGS_DIR = "logs"

SIDECAR_SUFFIX = ".provenance.json"
STAGING_PREFIX = ".staging-"


def raw_root(config: Configuration) -> Path:
    return config.data_path / RAW_DIR


def processed_root(config: Configuration) -> Path:
    return resolve_path(config, "processed_path", config.data_path / PROCESSED_DIR)


def reports_root(config: Configuration) -> Path:
    return resolve_path(config, "reports_path", config.data_path / REPORTS_DIR)


def logs_dir(config: Configuration) -> Path:
    return reports_root(config) / LOGS_DIR


def check_script_name(script_name: str) -> str:
    """Script names become one directory level under processed/."""
    if (
        not script_name
        or script_name in (".", "..")
        or "/" in script_name
        or "\\" in script_name
        or script_name.startswith(STAGING_PREFIX)
    ):
        raise LayoutError(
            f"Invalid script name {script_name!r}",
            "use a single directory name such as 'preprocess' or '01_clean'",
        )
    return script_name


def script_output_dir(config: Configuration, script_name: str) -> Path:
    """``processed/{script_name}`` for this configuration."""
    return processed_root(config) / check_script_name(script_name)


def normalize_output_name(name: Union[str, PurePath]) -> PurePosixPath:
    """
    Validate a declared output name relative to the script output directory.

    Raises:
        LayoutError: If the name is empty, absolute, or escapes the directory
    """
    raw = PurePath(name).as_posix() if isinstance(name, PurePath) else str(name).replace("\\", "/")
    candidate = PurePosixPath(raw)
    if not raw or str(candidate) == "." or candidate.is_absolute():
        raise LayoutError(
            f"Output {name!r} must be a relative path under processed/<script_name>/",
            "declare outputs like 'sub-01/sub-01_desc-clean_bold.nii.gz'",
        )
    if any(part == ".." for part in candidate.parts):
        raise LayoutError(
            f"Output {name!r} escapes the script output directory",
            "remove '..' segments from the output name",
        )
    if candidate.name.startswith(STAGING_PREFIX) or candidate.parts[0].startswith(STAGING_PREFIX):
        raise LayoutError(
            f"Output {name!r} uses the reserved prefix {STAGING_PREFIX!r}",
            "rename the output",
        )
    return candidate


def sidecar_name(output_name: Union[str, PurePath]) -> str:
    """File name of the provenance sidecar for an output file name."""
    return PurePosixPath(str(output_name)).name + SIDECAR_SUFFIX


def run_log_name(script_name: str, started: datetime) -> str:
    return f"{check_script_name(script_name)}_{started.strftime('%Y%m%dT%H%M%SZ')}.log"


