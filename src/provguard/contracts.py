"""Public result models for guarded runs, batches and sidecar checks."""

from pathlib import Path
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field

from provguard.codes import ErrorKind
from provguard.errors import StepError


class _RunOutcome(BaseModel):
    script_name: str
    item_id: Optional[str] = None
    transitions: List[str]  # states visited, e.g. ["Pending", "Checking", "Skipped"]

    model_config = ConfigDict(frozen=True)


class Succeeded(_RunOutcome):
    """The step ran and every declared output now has a sidecar."""
    status: Literal["succeeded"] = "succeeded"
    output_paths: List[Path]
    sidecar_paths: List[Path]

    @property
    def ok(self) -> bool:
        return True


class Skipped(_RunOutcome):
    """All declared outputs and their sidecars already existed and ``force`` was not set."""
    status: Literal["skipped"] = "skipped"
    reason: str

    @property
    def ok(self) -> bool:
        return True


class Failed(_RunOutcome):
    """The step (or writing its results) failed; the item is incomplete and reruns next time."""
    status: Literal["failed"] = "failed"
    error_kind: ErrorKind
    message: str
    error_type: Optional[str] = None  # exception class name raised by the step

    @property
    def ok(self) -> bool:
        return False

    def raise_error(self) -> None:
        """Re-raise this failure as a StepError."""
        raise StepError(
            self.message,
            script_name=self.script_name,
            item_id=self.item_id,
            error_type=self.error_type,
            kind=self.error_kind,
        )


RunResult = Annotated[Union[Succeeded, Skipped, Failed], Field(discriminator="status")]


class BatchSummary(BaseModel):
    """Per-item outcomes of a batch, in input order."""
    script_name: str
    results: List[RunResult]

    model_config = ConfigDict(frozen=True)

    @computed_field
    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if isinstance(r, Succeeded))

    @computed_field
    @property
    def skipped(self) -> int:
        return sum(1 for r in self.results if isinstance(r, Skipped))

    @computed_field
    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if isinstance(r, Failed))

    @computed_field
    @property
    def failures(self) -> Dict[str, str]:
        """item id -> failure message."""
        return {
            (r.item_id or r.script_name): r.message
            for r in self.results
            if isinstance(r, Failed)
        }

    @property
    def ok(self) -> bool:
        return self.failed == 0

    def result_for(self, item_id: str) -> Optional[Union[Succeeded, Skipped, Failed]]:
        for result in self.results:
            if result.item_id == item_id:
                return result
        return None


class SidecarCheck(BaseModel):
    """Verification result for one provenance sidecar."""
    path: str
    ok: bool
    git_commit: Optional[str] = None
    outputs_checked: int = 0
    errors: List[str] = Field(default_factory=list)  # sorted
