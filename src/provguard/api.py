"""Public API for provguard.

High-level functions for task runners. Classes with more control
(``ConfigResolver``, ``ProvenanceRecorder``, ``RunGuard``) live in their own
modules and are re-exported from the package root.
"""

import os
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Union

from provguard.batch import BatchItem, run_batch
from provguard.contracts import RunResult, SidecarCheck
from provguard.guard import OutputName, RunGuard, Step
from provguard.kernel.config import Configuration, resolve_path
from provguard.kernel.layout import logs_dir, run_log_name
from provguard.kernel.provenance import ProvenanceRecord
from provguard.recorder import ProvenanceRecorder
from provguard.resolver import init_config, load
from provguard._internal.files import utc_now
from provguard._internal.logging_config import setup_logging
from provguard._internal.verify import verify_sidecar as _verify_sidecar


def _normalize_path(path: Union[str, os.PathLike, Path]) -> Path:
    """Normalize path input to Path object."""
    return Path(path) if not isinstance(path, Path) else path


def load_config(
    template_path: Optional[Union[str, os.PathLike]],
    config_path: Union[str, os.PathLike],
) -> Configuration:
    """
    Load and validate the project configuration.

    Raises:
        MissingConfigError, PlaceholderError, ConfigValidationError
    """
    template = _normalize_path(template_path) if template_path is not None else None
    return load(template, _normalize_path(config_path))


def capture(
    script_name: str,
    parameters: Optional[Mapping[str, Any]] = None,
    software: Optional[Iterable[str]] = None,
    description: str = "",
    repo_dir: Optional[Union[str, os.PathLike]] = None,
) -> ProvenanceRecord:
    """Capture a provenance record for ``script_name`` with ``parameters``."""
    recorder = ProvenanceRecorder(
        software=software,
        description=description,
        repo_dir=_normalize_path(repo_dir) if repo_dir is not None else None,
    )
    return recorder.capture(script_name, parameters)


def write_sidecar(
    record: ProvenanceRecord,
    output_dir: Union[str, os.PathLike],
    output_name: Optional[str] = None,
) -> Path:
    """Write ``record`` as a sidecar in ``output_dir``.

    Raises:
        WriteError: If ``output_dir`` is not writable or the target is not ours
    """
    return ProvenanceRecorder().write(record, _normalize_path(output_dir), output_name)


def verify_sidecar(path: Union[str, os.PathLike]) -> SidecarCheck:
    """Check a sidecar and the outputs it records."""
    return _verify_sidecar(_normalize_path(path))


def guarded_run(
    config: Configuration,
    script_name: str,
    step: Step,
    outputs: Iterable[OutputName],
    parameters: Optional[Mapping[str, Any]] = None,
    force: bool = False,
    recorder: Optional[ProvenanceRecorder] = None,
) -> RunResult:
    """Run a single step through a fresh RunGuard."""
    guard = RunGuard(config, script_name, recorder=recorder)
    return guard.run(step, outputs, parameters=parameters, force=force)


def configure_run_logging(config: Configuration, script_name: str) -> Path:
    """
    Send summary logs to the console and full detail to a per-run log file.

    The log file is ``reports/logs/{script_name}_{UTC timestamp}.log``; the
    console level comes from ``config.log_level``.

    Returns:
        Path of the per-run log file
    """
    log_file = logs_dir(config) / run_log_name(script_name, utc_now())
    setup_logging(level=config.log_level, log_file=log_file)
    return log_file


__all__ = [
    "BatchItem",
    "configure_run_logging",
    "capture",
    "guarded_run",
    "init_config",
    "load_config",
    "resolve_path",
    "run_batch",
    "verify_sidecar",
    "write_sidecar",
]
