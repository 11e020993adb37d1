"""Exception taxonomy for provguard.

Every error pairs what is wrong (the message) with how to fix it (the hint).
``str(error)`` renders both so CLI and log output never lose the hint.
"""

from typing import List, Optional, Sequence

from provguard.codes import ErrorKind


class ProvguardError(Exception):
    """Base class for all provguard errors."""

    kind: ErrorKind = ErrorKind.STEP_ERROR

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.hint = hint

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message}\n  Fix: {self.hint}"
        return self.message


class MissingConfigError(ProvguardError):
    """Raised when the configuration file (or its template) does not exist."""

    kind = ErrorKind.MISSING_CONFIG

    def __init__(self, config_path, template_path=None, is_template: bool = False):
        self.config_path = config_path
        self.template_path = template_path
        if is_template:
            message = f"Configuration template not found: {config_path}"
            hint = "restore the template from version control or pass the correct template path"
        elif template_path is not None:
            message = f"Configuration file not found: {config_path}"
            hint = (
                f"copy the template and fill in every <...> value: "
                f"cp {template_path} {config_path}"
            )
        else:
            message = f"Configuration file not found: {config_path}"
            hint = f"create {config_path} before running"
        super().__init__(message, hint)


class PlaceholderError(ProvguardError):
    """Raised when a configuration still contains unresolved placeholder values."""

    kind = ErrorKind.PLACEHOLDER

    def __init__(self, config_path, keys: Sequence[str]):
        self.config_path = config_path
        self.keys: List[str] = list(keys)
        super().__init__(
            f"Configuration {config_path} still contains placeholder values for: "
            f"{', '.join(self.keys)}",
            f"edit {config_path} and replace the <...> value of each listed key",
        )


class ConfigValidationError(ProvguardError):
    """Raised when a configuration is structurally invalid."""

    kind = ErrorKind.INVALID_CONFIG


class WriteError(ProvguardError):
    """Raised when an output or sidecar cannot be written."""

    kind = ErrorKind.WRITE_ERROR


class StepError(ProvguardError):
    """Raised (on request) for a wrapped step that failed."""

    kind = ErrorKind.STEP_ERROR

    def __init__(self, message: str, script_name: str, item_id: Optional[str] = None,
                 error_type: Optional[str] = None, kind: Optional[ErrorKind] = None):
        self.script_name = script_name
        self.item_id = item_id
        self.error_type = error_type
        if kind is not None:
            self.kind = kind
        where = script_name if item_id is None else f"{script_name} [{item_id}]"
        super().__init__(
            f"Step {where} failed: {message}",
            "see the per-run log file for the full traceback, fix the cause, "
            "then rerun (completed items are skipped)",
        )


class LayoutError(ProvguardError, ValueError):
    """Raised for an invalid script name or output declaration."""

    kind = ErrorKind.LAYOUT_ERROR


class ParameterError(ProvguardError, ValueError):
    """Raised when step parameters cannot be recorded as JSON."""

    kind = ErrorKind.INVALID_PARAMETER
