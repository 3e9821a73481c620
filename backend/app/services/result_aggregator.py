"""
Service for merging per-document outcomes into a batch summary.
"""

import logging
from typing import List, Sequence
from backend.app.models.document_models import (
    BatchOutcome,
    DocumentOutcome,
    ResourceSnapshot,
)
from backend.app.monitoring import ResourceTracker
from backend.app.services.pipeline import DocumentPipeline, ExecutionMode

logger = logging.getLogger(__name__)


def aggregate(
    outcomes: List[DocumentOutcome],
    elapsed: float,
    resources: ResourceSnapshot,
    parallel: bool = False,
) -> BatchOutcome:
    """
    Count successes and failures. elapsed is the wall clock of the whole batch,
    not the sum of per-document times.
    """
    successful = sum(1 for outcome in outcomes if outcome.success)
    return BatchOutcome(
        outcomes=outcomes,
        total=len(outcomes),
        successful=successful,
        failed=len(outcomes) - successful,
        elapsed=elapsed,
        parallel=parallel,
        resources=resources,
    )


def run_batch(
    pipeline: DocumentPipeline,
    file_paths: Sequence[str],
    mode: ExecutionMode = ExecutionMode.SEQUENTIAL,
) -> BatchOutcome:
    """
    Run a batch under a fresh ResourceTracker and aggregate the results.
    The resource snapshot is taken only after every document has finished.
    """
    tracker = ResourceTracker.start(pipeline.worker_count)
    outcomes = pipeline.process_many(file_paths, mode)
    elapsed = tracker.elapsed()
    resources = tracker.snapshot()

    batch = aggregate(outcomes, elapsed, resources, parallel=mode == ExecutionMode.PARALLEL)
    logger.info(
        f"Batch complete: {batch.successful}/{batch.total} successful in {elapsed * 1000.0:.2f}ms"
    )
    logger.info(f"Memory used: {resources.memory_used_mb:.2f} MB")
    logger.info(f"CPUs: {resources.cpu_count} (worker threads: {resources.worker_count})")
    return batch
