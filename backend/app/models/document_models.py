"""
Pydantic models for extraction output, pipeline results, batch summaries, and API payloads.
"""

from pydantic import BaseModel, Field
from typing import Optional, Dict, List


class ExtractionResult(BaseModel):
    text: str
    metadata: Dict[str, List[str]] = Field(default_factory=dict)


class PipelineBenchmarks(BaseModel):
    parse_duration: float = Field(..., description="Extraction time in seconds")
    chunk_duration: float = Field(..., description="Chunking time in seconds")
    total_duration: float = Field(..., description="End-to-end time in seconds")

    @property
    def parse_ms(self) -> float:
        return self.parse_duration * 1000.0

    @property
    def chunk_ms(self) -> float:
        return self.chunk_duration * 1000.0

    @property
    def total_ms(self) -> float:
        return self.total_duration * 1000.0


class PipelineResult(BaseModel):
    filename: str
    chunks: List[str]
    metadata: Dict[str, List[str]] = Field(default_factory=dict)
    benchmarks: PipelineBenchmarks


class DocumentOutcome(BaseModel):
    """
    Result of processing one document: either a PipelineResult or an error message.
    """

    filename: str = "unknown"
    result: Optional[PipelineResult] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.result is not None

    @classmethod
    def ok(cls, result: PipelineResult) -> "DocumentOutcome":
        return cls(filename=result.filename, result=result)

    @classmethod
    def failed(cls, filename: Optional[str], error: str) -> "DocumentOutcome":
        return cls(filename=filename or "unknown", error=error)


class ResourceSnapshot(BaseModel):
    used_memory: int = Field(..., description="System memory in use at sample time (bytes)")
    total_memory: int = Field(..., description="Total system memory (bytes)")
    memory_used: int = Field(
        0, ge=0, description="Growth in used memory since the tracker started (bytes)"
    )
    cpu_count: int
    worker_count: int = Field(..., description="Threads of the pool that ran the batch")

    @property
    def memory_used_mb(self) -> float:
        return self.memory_used / 1024 / 1024

    @property
    def total_memory_gb(self) -> float:
        return self.total_memory / 1024 / 1024 / 1024


class BatchOutcome(BaseModel):
    outcomes: List[DocumentOutcome]
    total: int
    successful: int
    failed: int
    elapsed: float = Field(..., description="Wall clock of the whole batch in seconds")
    parallel: bool = False
    resources: ResourceSnapshot

    @property
    def memory_used(self) -> int:
        return self.resources.memory_used

    @property
    def cpu_count(self) -> int:
        return self.resources.cpu_count

    @property
    def worker_count(self) -> int:
        return self.resources.worker_count


class BatchRequest(BaseModel):
    file_paths: List[str]
    parallel: bool = False


class DocumentResult(BaseModel):
    filename: str
    success: bool
    size: Optional[int] = None
    chunks_count: Optional[int] = None
    error: Optional[str] = None
    upload_ms: Optional[str] = None
    parse_ms: Optional[str] = None
    chunk_ms: Optional[str] = None
    total_ms: Optional[str] = None


class BatchSummary(BaseModel):
    total_documents: int
    successful: int
    failed: int
    total_ms: str
    parallel: bool
    memory_used_mb: str
    total_memory_gb: str
    cpu_count: int
    worker_count: int = Field(..., description="Threads of the pool that ran the batch")


class BatchResponse(BaseModel):
    success: bool = True
    results: List[DocumentResult]
    summary: BatchSummary


class ResourceMetrics(BaseModel):
    memory_used_mb: str
    total_memory_gb: str
    cpu_count: int
    worker_count: int = Field(..., description="Threads of the pool that ran the batch")


class UploadSummary(BaseModel):
    total_files: int
    successful: int
    failed: int
    total_ms: str
    upload_ms: str


class UploadResponse(BaseModel):
    success: bool = True
    results: List[DocumentResult]
    summary: UploadSummary
    resources: ResourceMetrics
