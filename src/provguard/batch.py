"""Batch execution of one guarded step over many items (subjects, sessions).

Items are independent: a failing item is recorded in the summary and never
stops its siblings. Output paths must be disjoint across items; this is
checked before anything runs.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Sequence

from provguard.contracts import BatchSummary
from provguard.guard import OutputName, RunGuard, Step
from provguard._internal.logging_config import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class BatchItem:
    """One unit of work, e.g. one subject/session."""

    item_id: str
    outputs: Sequence[OutputName]
    parameters: Mapping[str, Any] = field(default_factory=dict)


def check_items(guard: RunGuard, items: Sequence[BatchItem]) -> None:
    """
    Validate a batch before any item starts.

    Raises:
        ValueError: Duplicate item ids or an output path claimed by two items
        LayoutError: An invalid output declaration
        ParameterError: Parameters that cannot be recorded
    """
    seen_ids = set()
    owners = {}
    for item in items:
        if item.item_id in seen_ids:
            raise ValueError(f"Duplicate batch item id: {item.item_id!r}")
        seen_ids.add(item.item_id)
        for name in guard.declare(item.outputs):
            if name in owners:
                raise ValueError(
                    f"Output {str(name)!r} is declared by both {owners[name]!r} and {item.item_id!r}; "
                    f"concurrent writers must target disjoint paths"
                )
            owners[name] = item.item_id
        guard.merged_parameters(item.parameters)


def run_batch(
    guard: RunGuard,
    step: Step,
    items: Iterable[BatchItem],
    force: bool = False,
    max_workers: int = 1,
) -> BatchSummary:
    """
    Run ``step`` once per item through ``guard``.

    Args:
        guard: Guard for the script being run
        step: The wrapped step (receives a StepContext with ``item_id`` set)
        items: Batch items, each with its own outputs and parameters
        force: Recompute items whose outputs already exist
        max_workers: Items run on a thread pool when greater than 1

    Returns:
        BatchSummary with results in input order
    """
    items = list(items)
    check_items(guard, items)

    logger.info(f"Starting batch for {guard.script_name}: {len(items)} item(s), max_workers={max_workers}")

    def _run(item: BatchItem):
        return guard.run(step, item.outputs, item_id=item.item_id, parameters=item.parameters, force=force)

    if max_workers <= 1 or len(items) <= 1:
        results: List = [_run(item) for item in items]
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            results = list(pool.map(_run, items))

    summary = BatchSummary(script_name=guard.script_name, results=results)
    message = (
        f"Batch {guard.script_name} finished: {summary.succeeded} succeeded, "
        f"{summary.skipped} skipped, {summary.failed} failed"
    )
    if summary.failed:
        logger.warning(f"{message} (failed: {', '.join(summary.failures)})")
    else:
        logger.info(message)
    return summary
