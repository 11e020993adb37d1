"""RunGuard: validate, skip-if-exists, execute, record provenance.

Each invocation walks the state machine in ``provguard.kernel.states`` and
emits exactly one log line per transition. Outputs are produced in a hidden
staging directory and moved into place only after the step succeeded and its
sidecars were written, so an interrupted step leaves nothing at the final
paths.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path, PurePath, PurePosixPath
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from provguard.codes import ErrorKind
from provguard.contracts import Failed, RunResult, Skipped, Succeeded
from provguard.errors import LayoutError, WriteError
from provguard.kernel.config import Configuration
from provguard.kernel.hash_utils import normalize_value
from provguard.kernel.layout import (
    check_script_name,
    normalize_output_name,
    script_output_dir,
    sidecar_name,
)
from provguard.kernel.states import RunState, StateMachine, transition_level
from provguard.recorder import ProvenanceRecorder, check_sidecar_target, has_own_sidecar
from provguard._internal.files import ensure_writable_dir, make_staging_dir, promote, remove_tree
from provguard._internal.logging_config import get_logger


logger = get_logger(__name__)

OutputName = Union[str, PurePath]


@dataclass
class StepContext:
    """What a wrapped step receives when it runs."""

    script_name: str
    item_id: Optional[str]
    config: Configuration
    parameters: Mapping[str, Any]
    random_seed: Optional[int]
    output_dir: Path
    """Final directory of this script's outputs (``processed/{script_name}``)."""

    staging_dir: Path
    """Temporary directory the step writes into."""

    outputs: Tuple[PurePosixPath, ...] = field(default_factory=tuple)
    logger: logging.Logger = field(default_factory=lambda: get_logger("provguard.step"))

    def output_path(self, name: OutputName) -> Path:
        """
        Path the step must write a declared output to.

        Parent directories are created. The file is moved to its final
        location only after the step returns successfully.

        Raises:
            LayoutError: If ``name`` was not declared for this run
        """
        rel = normalize_output_name(name)
        if rel not in self.outputs:
            raise LayoutError(
                f"Output {str(rel)!r} was not declared for {self.script_name}",
                "add it to the outputs passed to RunGuard.run",
            )
        path = self.staging_dir.joinpath(*rel.parts)
        path.parent.mkdir(parents=True, exist_ok=True)
        return path

    def final_path(self, name: OutputName) -> Path:
        """Where a declared output will live after promotion."""
        return self.output_dir.joinpath(*normalize_output_name(name).parts)


Step = Callable[[StepContext], Any]


class RunGuard:
    """
    Wraps analysis steps for one script.

    Args:
        config: Validated project configuration
        script_name: Step identity; outputs go to ``processed/{script_name}/``
        recorder: Provenance recorder (default: records python/provguard only)
        parameters: Parameters shared by every invocation
        description: Text stored in every provenance record
    """

    def __init__(
        self,
        config: Configuration,
        script_name: str,
        recorder: Optional[ProvenanceRecorder] = None,
        parameters: Optional[Mapping[str, Any]] = None,
        description: str = "",
    ):
        self.config = config
        self.script_name = check_script_name(script_name)
        self.recorder = recorder if recorder is not None else ProvenanceRecorder(description=description)
        self.parameters: Dict[str, Any] = dict(parameters or {})
        self.description = description

    @property
    def output_dir(self) -> Path:
        return script_output_dir(self.config, self.script_name)

    def declare(self, outputs: Iterable[OutputName]) -> Tuple[PurePosixPath, ...]:
        """
        Validate declared outputs.

        Raises:
            LayoutError: If no outputs are given, one is duplicated, or one
                escapes ``processed/{script_name}``
        """
        names = tuple(normalize_output_name(o) for o in outputs)
        if not names:
            raise LayoutError(
                f"No outputs declared for {self.script_name}",
                "pass at least one output name to RunGuard.run",
            )
        seen = set()
        duplicates = set()
        for name in names:
            if name in seen:
                duplicates.add(str(name))
            seen.add(name)
        if duplicates:
            raise LayoutError(
                f"Duplicate outputs declared for {self.script_name}: {sorted(duplicates)}",
                "declare each output once",
            )
        return names

    def merged_parameters(self, parameters: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """Guard parameters updated by per-invocation parameters.

        Raises:
            ParameterError: If the result cannot be recorded as JSON
        """
        merged = {**self.parameters, **dict(parameters or {})}
        normalize_value(merged)
        return merged

    def _enter(self, machine: StateMachine, target: RunState, item_id: Optional[str], detail: str = "") -> None:
        previous = machine.advance(target)
        message = (
            f"script={self.script_name} item={item_id or '-'} "
            f"transition={previous.value}->{target.value}"
        )
        if detail:
            message = f"{message} {detail}"
        logger.log(transition_level(target), message)

    def _fail(
        self,
        machine: StateMachine,
        item_id: Optional[str],
        kind: ErrorKind,
        message: str,
        error_type: Optional[str] = None,
        exc: Optional[BaseException] = None,
    ) -> Failed:
        self._enter(machine, RunState.FAILED, item_id, f'error_kind={kind.value} error="{message}"')
        if exc is not None:
            logger.debug(f"Traceback for {self.script_name} [{item_id or '-'}]", exc_info=exc)
        return Failed(
            script_name=self.script_name,
            item_id=item_id,
            transitions=machine.path(),
            error_kind=kind,
            message=message,
            error_type=error_type,
        )

    def run(
        self,
        step: Step,
        outputs: Iterable[OutputName],
        item_id: Optional[str] = None,
        parameters: Optional[Mapping[str, Any]] = None,
        force: bool = False,
    ) -> RunResult:
        """
        Run ``step`` unless its outputs and their sidecars already exist.

        Args:
            step: Callable taking a StepContext; writes each declared output to
                ``ctx.output_path(name)``
            outputs: Output names relative to ``processed/{script_name}/``
            item_id: Batch item identity (e.g. ``"sub-01"``) for logs and results
            parameters: Per-invocation parameters, merged over the guard's
            force: Recompute even if every output and sidecar exists

        Returns:
            Succeeded, Skipped or Failed. Step errors never propagate.

        Raises:
            LayoutError: Invalid output declaration (before any state change)
            ParameterError: Parameters cannot be recorded (before any state change)
        """
        names = self.declare(outputs)
        merged = self.merged_parameters(parameters)
        output_dir = self.output_dir
        finals = [output_dir.joinpath(*name.parts) for name in names]

        machine = StateMachine()
        self._enter(machine, RunState.CHECKING, item_id, f"outputs={len(names)} force={force}")

        # an output without its sidecar was interrupted mid-promotion and counts as missing
        existing = [path for path in finals if has_own_sidecar(path)]
        if len(existing) == len(finals) and not force:
            reason = f"all {len(finals)} declared output(s) and their sidecars already exist in {output_dir}"
            self._enter(machine, RunState.SKIPPED, item_id, f'reason="{reason}"')
            return Skipped(
                script_name=self.script_name,
                item_id=item_id,
                transitions=machine.path(),
                reason=reason,
            )

        if existing:
            detail = f"recomputing ({len(existing)} of {len(finals)} output(s) complete, force={force})"
        else:
            detail = "computing"
        self._enter(machine, RunState.RUNNING, item_id, detail)

        staging: Optional[Path] = None
        try:
            ensure_writable_dir(output_dir, create=True)
            staging = make_staging_dir(output_dir)
            ctx = StepContext(
                script_name=self.script_name,
                item_id=item_id,
                config=self.config,
                parameters=MappingProxyType(dict(merged)),
                random_seed=self.config.random_seed,
                output_dir=output_dir,
                staging_dir=staging,
                outputs=names,
            )

            try:
                step(ctx)
            except (Exception, SystemExit) as e:
                # a step script calling sys.exit() fails its item only
                return self._fail(
                    machine, item_id, ErrorKind.STEP_ERROR,
                    f"{type(e).__name__}: {e}", type(e).__name__, exc=e,
                )

            staged = {name: staging.joinpath(*name.parts) for name in names}
            missing = [str(name) for name, path in staged.items() if not path.is_file()]
            if missing:
                return self._fail(
                    machine, item_id, ErrorKind.MISSING_OUTPUT,
                    f"step did not produce declared output(s): {', '.join(missing)}",
                )

            record = self.recorder.capture(
                self.script_name,
                merged,
                outputs={str(name): path for name, path in staged.items()},
                random_seed=self.config.random_seed,
                description=self.description or None,
            )

            staged_sidecars = {}
            final_sidecars = {}
            for name, path in staged.items():
                staged_sidecars[name] = self.recorder.write(record, path.parent, name.name)
                final_sidecars[name] = output_dir.joinpath(*name.parent.parts, sidecar_name(name))
            for target in final_sidecars.values():
                check_sidecar_target(target)

            # outputs first, sidecars second: a sidecar is never older than its output
            for name in names:
                promote(staged[name], output_dir.joinpath(*name.parts))
            for name in names:
                promote(staged_sidecars[name], final_sidecars[name])
        except (WriteError, OSError) as e:
            message = e.message if isinstance(e, WriteError) else f"{type(e).__name__}: {e}"
            return self._fail(
                machine, item_id, ErrorKind.WRITE_ERROR, message, type(e).__name__, exc=e,
            )
        finally:
            if staging is not None:
                remove_tree(staging)

        sidecar_paths: List[Path] = [final_sidecars[name] for name in names]
        self._enter(
            machine, RunState.SUCCEEDED, item_id,
            f"outputs={len(finals)} git_commit={record.git_commit}",
        )
        return Succeeded(
            script_name=self.script_name,
            item_id=item_id,
            transitions=machine.path(),
            output_paths=finals,
            sidecar_paths=sidecar_paths,
        )
