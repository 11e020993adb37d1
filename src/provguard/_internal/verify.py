"""Sidecar verification.

Checks that a sidecar parses, was written by provguard, and that every output
it records still exists with the recorded sha256. Returns partial truth, does
not crash.
"""

import json
from pathlib import Path, PurePosixPath
from typing import List, Union

from pydantic import ValidationError

from provguard.contracts import SidecarCheck
from provguard.kernel.layout import SIDECAR_SUFFIX
from provguard.kernel.provenance import ProvenanceRecord, is_own_sidecar
from provguard._internal.files import sha256_file


def _output_root(sidecar: Path, record: ProvenanceRecord) -> Path:
    """Directory the record's output names are relative to.

    A sidecar sits beside its own output; walking up that output's relative
    parent gives the script output directory.
    """
    for name in record.outputs:
        rel = PurePosixPath(name)
        if rel.name + SIDECAR_SUFFIX == sidecar.name:
            root = sidecar.parent
            for _ in rel.parent.parts:
                root = root.parent
            return root
    return sidecar.parent


def verify_sidecar(path: Union[str, Path]) -> SidecarCheck:
    """
    Verify one provenance sidecar.

    Args:
        path: Path to a ``*.provenance.json`` file

    Returns:
        SidecarCheck with ``ok`` False and sorted ``errors`` on any problem
    """
    sidecar = Path(path)
    errors: List[str] = []

    if not sidecar.exists():
        return SidecarCheck(path=str(sidecar), ok=False, errors=["sidecar not found"])

    try:
        data = json.loads(sidecar.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        return SidecarCheck(path=str(sidecar), ok=False, errors=[f"unreadable sidecar: {e}"])

    if not is_own_sidecar(data):
        return SidecarCheck(
            path=str(sidecar), ok=False,
            errors=["not a provguard sidecar (missing or different 'format' field)"],
        )

    try:
        record = ProvenanceRecord.model_validate(data)
    except ValidationError as e:
        problems = sorted(
            f"invalid field {'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        )
        return SidecarCheck(path=str(sidecar), ok=False, errors=problems)

    root = _output_root(sidecar, record)
    for name, digest in record.outputs.items():
        output = root.joinpath(*PurePosixPath(name).parts)
        if not output.is_file():
            errors.append(f"{name}: output missing at {output}")
        elif sha256_file(output) != digest:
            errors.append(f"{name}: sha256 mismatch (file changed since it was recorded)")

    return SidecarCheck(
        path=str(sidecar),
        ok=not errors,
        git_commit=record.git_commit,
        outputs_checked=len(record.outputs),
        errors=sorted(errors),
    )
