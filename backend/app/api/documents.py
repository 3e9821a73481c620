"""
API router for document processing endpoints.
"""

import time
from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from typing import List, Optional
from backend.app.config import Settings, get_settings
from backend.app.models.document_models import (
    BatchOutcome,
    BatchRequest,
    BatchResponse,
    BatchSummary,
    DocumentOutcome,
    DocumentResult,
    ResourceMetrics,
    UploadResponse,
    UploadSummary,
)
from backend.app.monitoring import ResourceTracker, monitor
from backend.app.services.document_processor import DocumentExtractor
from backend.app.services.errors import EmptyBatchError
from backend.app.services.pipeline import DocumentPipeline, ExecutionMode, logger
from backend.app.services.result_aggregator import aggregate, run_batch
from backend.app.services.upload_service import StoredUpload, UploadService

router = APIRouter(prefix="/documents", tags=["documents"])


def format_ms(seconds: float) -> str:
    return f"{seconds * 1000.0:.3f}"


def get_pipeline(request: Request, settings: Settings = Depends(get_settings)) -> DocumentPipeline:
    """Build a pipeline for this request around the application's shared worker pool."""
    return DocumentPipeline(
        config=settings.chunking_config,
        extractor=DocumentExtractor(max_length=settings.max_extract_length),
        pool=getattr(request.app.state, "worker_pool", None),
    )


def get_upload_service(settings: Settings = Depends(get_settings)) -> UploadService:
    return UploadService(settings.upload_dir, settings.max_file_size)


def to_document_result(
    outcome: DocumentOutcome,
    upload: Optional[StoredUpload] = None,
    upload_ms: Optional[str] = None,
) -> DocumentResult:
    if outcome.result is None:
        return DocumentResult(
            filename=outcome.filename,
            success=False,
            size=upload.size if upload else None,
            error=outcome.error,
            upload_ms=upload_ms,
        )
    benchmarks = outcome.result.benchmarks
    return DocumentResult(
        filename=outcome.result.filename,
        success=True,
        size=upload.size if upload else None,
        chunks_count=len(outcome.result.chunks),
        upload_ms=upload_ms,
        parse_ms=format_ms(benchmarks.parse_duration),
        chunk_ms=format_ms(benchmarks.chunk_duration),
        total_ms=format_ms(benchmarks.total_duration),
    )


def to_batch_response(batch: BatchOutcome) -> BatchResponse:
    return BatchResponse(
        success=True,
        results=[to_document_result(outcome) for outcome in batch.outcomes],
        summary=BatchSummary(
            total_documents=batch.total,
            successful=batch.successful,
            failed=batch.failed,
            total_ms=format_ms(batch.elapsed),
            parallel=batch.parallel,
            memory_used_mb=f"{batch.resources.memory_used_mb:.2f}",
            total_memory_gb=f"{batch.resources.total_memory_gb:.2f}",
            cpu_count=batch.cpu_count,
            worker_count=batch.worker_count,
        ),
    )


@router.post("/upload", response_model=UploadResponse, summary="Upload and process documents")
@monitor.memory_check
async def upload_documents(
    request: Request,
    files: List[UploadFile] = File(...),
    pipeline: DocumentPipeline = Depends(get_pipeline),
    uploads: UploadService = Depends(get_upload_service),
):
    tracker = ResourceTracker.start(pipeline.worker_count)
    user_ip = request.client.host if request.client else "unknown"

    # Upload stage
    upload_start = time.perf_counter()
    stored = await uploads.save_uploads(files)
    upload_duration = time.perf_counter() - upload_start
    logger.info(f"AUDIT: User IP {user_ip} uploaded {len(stored)} files in {format_ms(upload_duration)}ms")

    file_paths = [upload.file_path for upload in stored]
    if len(file_paths) > 1:
        outcomes = await run_in_threadpool(
            pipeline.process_many, file_paths, ExecutionMode.PARALLEL
        )
    else:
        outcomes = [await run_in_threadpool(pipeline.process_one, file_paths[0])]

    upload_ms_per_file = format_ms(upload_duration / len(stored))
    results = [
        to_document_result(outcome, upload, upload_ms_per_file)
        for outcome, upload in zip(outcomes, stored)
    ]

    resources = tracker.log_summary("Total")
    batch = aggregate(outcomes, tracker.elapsed(), resources, parallel=len(file_paths) > 1)
    monitor.log_run("upload_complete", resources)

    return UploadResponse(
        success=True,
        results=results,
        summary=UploadSummary(
            total_files=len(stored),
            successful=batch.successful,
            failed=batch.failed,
            total_ms=format_ms(batch.elapsed),
            upload_ms=format_ms(upload_duration),
        ),
        resources=ResourceMetrics(
            memory_used_mb=f"{resources.memory_used_mb:.2f}",
            total_memory_gb=f"{resources.total_memory_gb:.2f}",
            cpu_count=resources.cpu_count,
            worker_count=resources.worker_count,
        ),
    )


@router.post("/batch", response_model=BatchResponse, summary="Process stored documents")
def batch_documents(
    payload: BatchRequest,
    pipeline: DocumentPipeline = Depends(get_pipeline),
):
    mode = ExecutionMode.from_flag(payload.parallel)
    try:
        batch = run_batch(pipeline, payload.file_paths, mode)
    except EmptyBatchError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return to_batch_response(batch)
