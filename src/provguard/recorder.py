"""Provenance capture and metadata sidecar writing."""

import json
import sys
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from provguard.errors import WriteError
from provguard.kernel.layout import SIDECAR_SUFFIX, check_script_name, sidecar_name
from provguard.kernel.provenance import ProvenanceRecord, build_record, is_own_sidecar
from provguard._internal.canonical_json import sidecar_dumps
from provguard._internal.files import atomic_write_text, ensure_writable_dir, iso_timestamp, sha256_file
from provguard._internal.logging_config import get_logger
from provguard._internal.software import SoftwareSpec, collect_versions
from provguard._internal.vcs import read_git_commit


logger = get_logger(__name__)


def _default_script_path() -> str:
    if sys.argv and sys.argv[0]:
        return Path(sys.argv[0]).resolve().as_posix()
    return "<interactive>"


def _read_json(path: Path):
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return None


def has_own_sidecar(output: Path) -> bool:
    """True if ``output`` exists and a provguard sidecar sits beside it."""
    sidecar = output.with_name(sidecar_name(output.name))
    return output.is_file() and sidecar.is_file() and is_own_sidecar(_read_json(sidecar))


def check_sidecar_target(path: Path) -> None:
    """
    Refuse to replace a file at ``path`` that provguard did not create.

    Raises:
        WriteError: If ``path`` exists and is not a provguard sidecar
    """
    if not path.exists():
        return
    if not is_own_sidecar(_read_json(path)):
        raise WriteError(
            f"Refusing to overwrite {path}: it was not written by provguard",
            "move or rename the existing file, or give the output a different name",
        )


class ProvenanceRecorder:
    """
    Captures provenance for guarded runs and writes sidecars.

    Args:
        software: Distribution names whose installed versions are recorded,
            or an explicit ``name -> version`` mapping
        description: Free text stored in every record
        repo_dir: Directory inside the git repository to read the revision from
            (default: current working directory)
        script_path: Path recorded as ``generated_by.path`` (default: sys.argv[0])
    """

    def __init__(
        self,
        software: Optional[SoftwareSpec] = None,
        description: str = "",
        repo_dir: Optional[Path] = None,
        script_path: Optional[Union[str, Path]] = None,
    ):
        self.software = software
        self.description = description
        self.repo_dir = Path(repo_dir) if repo_dir is not None else None
        self.script_path = script_path

    def capture(
        self,
        script_name: str,
        parameters: Optional[Mapping[str, Any]] = None,
        outputs: Optional[Mapping[str, Path]] = None,
        random_seed: Optional[int] = None,
        description: Optional[str] = None,
    ) -> ProvenanceRecord:
        """
        Snapshot the facts needed to reproduce a run.

        Args:
            script_name: Identity of the step
            parameters: Parameters the step ran with (recorded verbatim)
            outputs: Output name -> file path; each file is hashed into the record
            random_seed: Seed handed to the step, if any
            description: Overrides the recorder's description for this record

        Raises:
            ParameterError: If a parameter has no JSON form
        """
        script_path = self.script_path if self.script_path is not None else _default_script_path()
        digests: Dict[str, str] = {}
        for name, path in (outputs or {}).items():
            digests[str(name)] = sha256_file(Path(path))

        record = build_record(
            script_name=script_name,
            script_path=Path(script_path).as_posix() if isinstance(script_path, Path) else str(script_path),
            parameters=parameters,
            git_commit=read_git_commit(self.repo_dir),
            date=iso_timestamp(),
            software=collect_versions(self.software),
            description=self.description if description is None else description,
            random_seed=random_seed,
            outputs=digests,
        )
        logger.debug(
            f"Captured provenance for {script_name}: commit={record.git_commit} "
            f"outputs={len(record.outputs)}"
        )
        return record

    def write(
        self,
        record: ProvenanceRecord,
        output_dir: Union[str, Path],
        output_name: Optional[str] = None,
    ) -> Path:
        """
        Write ``record`` as a sidecar in ``output_dir``.

        The sidecar is named ``<output_name>.provenance.json`` (or
        ``<script_name>.provenance.json`` without an output name). An existing
        sidecar written by provguard is replaced; any other file is left alone.

        Raises:
            WriteError: If the directory is not writable, the target belongs to
                someone else, or the write fails
        """
        output_dir = ensure_writable_dir(Path(output_dir))
        if output_name is not None:
            target = output_dir / sidecar_name(output_name)
        else:
            target = output_dir / (check_script_name(record.script_name) + SIDECAR_SUFFIX)
        check_sidecar_target(target)
        atomic_write_text(target, sidecar_dumps(record.model_dump(mode="json")))
        logger.debug(f"Wrote provenance sidecar {target}")
        return target


def capture(script_name: str, parameters: Optional[Mapping[str, Any]] = None, **kwargs) -> ProvenanceRecord:
    """Capture with a default recorder; ``kwargs`` go to ``ProvenanceRecorder``."""
    return ProvenanceRecorder(**kwargs).capture(script_name, parameters)


def write_sidecar(record: ProvenanceRecord, output_dir: Union[str, Path], output_name: Optional[str] = None) -> Path:
    """Write a sidecar with a default recorder."""
    return ProvenanceRecorder().write(record, output_dir, output_name)
