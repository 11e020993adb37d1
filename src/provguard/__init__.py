"""provguard: configuration checks and provenance sidecars for analysis steps."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("provguard")
except PackageNotFoundError:
    __version__ = "dev"

# Public API exports
from provguard.api import (
    capture,
    configure_run_logging,
    guarded_run,
    init_config,
    load_config,
    resolve_path,
    verify_sidecar,
    write_sidecar,
)
from provguard.batch import BatchItem, run_batch
from provguard.codes import ErrorKind
from provguard.contracts import BatchSummary, Failed, RunResult, SidecarCheck, Skipped, Succeeded
from provguard.errors import (
    ConfigValidationError,
    LayoutError,
    MissingConfigError,
    ParameterError,
    PlaceholderError,
    ProvguardError,
    StepError,
    WriteError,
)
from provguard.guard import RunGuard, StepContext
from provguard.kernel.config import Configuration
from provguard.kernel.provenance import ProvenanceRecord
from provguard.recorder import ProvenanceRecorder
from provguard.resolver import ConfigResolver

__all__ = [
    "__version__",
    # functions
    "capture",
    "configure_run_logging",
    "guarded_run",
    "init_config",
    "load_config",
    "resolve_path",
    "run_batch",
    "verify_sidecar",
    "write_sidecar",
    # components
    "ConfigResolver",
    "ProvenanceRecorder",
    "RunGuard",
    "StepContext",
    "BatchItem",
    # models
    "Configuration",
    "ProvenanceRecord",
    "RunResult",
    "Succeeded",
    "Skipped",
    "Failed",
    "BatchSummary",
    "SidecarCheck",
    "ErrorKind",
    # errors
    "ProvguardError",
    "MissingConfigError",
    "PlaceholderError",
    "ConfigValidationError",
    "WriteError",
    "StepError",
    "LayoutError",
    "ParameterError",
]
