"""
Document pipeline: extraction followed by chunking, for one document or a batch.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Protocol, Sequence, TypeVar
from backend.app.models.chunk_models import ChunkingConfig
from backend.app.models.document_models import (
    DocumentOutcome,
    ExtractionResult,
    PipelineBenchmarks,
    PipelineResult,
)
from backend.app.monitoring import default_worker_count
from backend.app.services.chunking_service import ChunkingService
from backend.app.services.document_processor import DocumentExtractor
from backend.app.services.errors import ConfigError, EmptyBatchError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Extractor(Protocol):
    def extract(self, file_path: str) -> ExtractionResult: ...


class ExecutionMode(str, Enum):
    SEQUENTIAL = "sequential"
    PARALLEL = "parallel"

    @classmethod
    def from_flag(cls, parallel: bool) -> "ExecutionMode":
        return cls.PARALLEL if parallel else cls.SEQUENTIAL


class WorkerPool:
    """
    Fixed-size thread pool for parallel batches.
    Created once by the application and passed to every pipeline that needs it.
    """

    def __init__(self, max_workers: Optional[int] = None):
        self.max_workers = max_workers or default_worker_count()
        self._executor = ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="pipeline-worker"
        )
        logger.info(f"Worker pool configured with {self.max_workers} threads")

    def map_ordered(self, func: Callable[[str], T], items: Sequence[str]) -> List[T]:
        """
        Run func over items on the pool and return results in input order.
        Blocks until every item has finished.
        """
        futures = [self._executor.submit(func, item) for item in items]
        return [future.result() for future in futures]

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "WorkerPool":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()


def resolve_filename(file_path: str) -> str:
    return Path(file_path).name or file_path


class DocumentPipeline:
    def __init__(
        self,
        config: Optional[ChunkingConfig] = None,
        extractor: Optional[Extractor] = None,
        pool: Optional[WorkerPool] = None,
    ):
        """
        DocumentPipeline runs extraction then chunking for each document.
        Holds only read-only collaborators, so one instance can serve concurrent batches.
        """
        self.config = config or ChunkingConfig()
        self.chunker = ChunkingService(self.config)
        self.extractor = extractor or DocumentExtractor()
        self.pool = pool

    @property
    def worker_count(self) -> int:
        """Threads a parallel batch runs on: the injected pool's size, else the default sizing."""
        return self.pool.max_workers if self.pool is not None else default_worker_count()

    def process_one(self, file_path: str) -> DocumentOutcome:
        """
        Process a single document. Failures are returned as outcomes, never raised.
        """
        total_start = time.perf_counter()
        filename = resolve_filename(file_path)

        # Parse stage
        parse_start = time.perf_counter()
        try:
            extraction = self.extractor.extract(file_path)
        except Exception as e:
            logger.error(f"Extraction failed for {filename}: {e}")
            return DocumentOutcome.failed(filename, f"extraction failed: {e}")
        parse_duration = time.perf_counter() - parse_start

        # Chunking stage
        chunk_start = time.perf_counter()
        try:
            chunks = self.chunker.chunk(extraction.text)
        except ConfigError as e:
            logger.error(f"Chunking failed for {filename}: {e}")
            return DocumentOutcome.failed(filename, f"chunking failed: {e}")
        chunk_duration = time.perf_counter() - chunk_start

        result = PipelineResult(
            filename=filename,
            chunks=chunks,
            metadata=extraction.metadata,
            benchmarks=PipelineBenchmarks(
                parse_duration=parse_duration,
                chunk_duration=chunk_duration,
                total_duration=time.perf_counter() - total_start,
            ),
        )
        logger.info(
            f"{filename}: {len(chunks)} chunks ({result.benchmarks.parse_ms:.3f}ms parse, "
            f"{result.benchmarks.chunk_ms:.3f}ms chunk)"
        )
        return DocumentOutcome.ok(result)

    def process_many(
        self,
        file_paths: Sequence[str],
        mode: ExecutionMode = ExecutionMode.SEQUENTIAL,
    ) -> List[DocumentOutcome]:
        """
        Process every path and return one outcome per path, in input order.
        A failed document never stops the others.
        """
        if not file_paths:
            raise EmptyBatchError()

        logger.info(f"Processing {len(file_paths)} documents in {mode.value} mode")
        if mode == ExecutionMode.SEQUENTIAL:
            return [self.process_one(path) for path in file_paths]

        if self.pool is not None:
            return self.pool.map_ordered(self.process_one, file_paths)
        with WorkerPool() as pool:
            return pool.map_ordered(self.process_one, file_paths)
