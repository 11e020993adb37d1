"""Provenance record models for metadata sidecars."""

from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from provguard.kernel.hash_utils import normalize_value


SIDECAR_FORMAT = "provguard.provenance"
SIDECAR_VERSION = "0.1"


class GeneratedBy(BaseModel):
    """Identity of the script that produced an output."""
    name: str
    path: str

    model_config = ConfigDict(extra="forbid", frozen=True)


class ProvenanceRecord(BaseModel):
    """Deterministic record of one guarded run, written beside each output."""
    format: str = SIDECAR_FORMAT
    version: str = SIDECAR_VERSION
    description: str = ""
    generated_by: GeneratedBy
    git_commit: str  # "unknown" when no revision could be read
    date: str  # ISO 8601, UTC
    parameters: Dict[str, Any] = Field(default_factory=dict)
    software: Dict[str, str] = Field(default_factory=dict)  # distribution -> version
    random_seed: Optional[int] = None
    outputs: Dict[str, str] = Field(default_factory=dict)  # output name -> sha256

    model_config = ConfigDict(extra="forbid", frozen=True)

    @property
    def script_name(self) -> str:
        return self.generated_by.name


def build_record(
    script_name: str,
    script_path: str,
    parameters: Optional[Mapping[str, Any]],
    git_commit: str,
    date: str,
    software: Mapping[str, str],
    description: str = "",
    random_seed: Optional[int] = None,
    outputs: Optional[Mapping[str, str]] = None,
) -> ProvenanceRecord:
    """
    Assemble a ProvenanceRecord from already-collected facts.

    Parameters are normalized to plain JSON types first so the record
    serializes exactly as captured.

    Raises:
        ParameterError: If a parameter value has no JSON form
    """
    normalized = normalize_value(dict(parameters or {}))
    return ProvenanceRecord(
        description=description,
        generated_by=GeneratedBy(name=script_name, path=script_path),
        git_commit=git_commit,
        date=date,
        parameters=normalized,
        software=dict(sorted(software.items())),
        random_seed=random_seed,
        outputs=dict(sorted((outputs or {}).items())),
    )


def is_own_sidecar(data: Any) -> bool:
    """True if a parsed JSON document is a sidecar written by provguard."""
    return isinstance(data, dict) and data.get("format") == SIDECAR_FORMAT
