import os
import psutil
import logging
import time
from functools import lru_cache, wraps
from typing import Optional
from backend.app.models.document_models import ResourceSnapshot

logger = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def default_worker_count() -> int:
    """Worker threads for parallel batches: one less than the available CPUs, at least one."""
    return max((os.cpu_count() or 1) - 1, 1)


class ResourceTracker:
    """
    Measures wall clock time and system memory growth across one run.
    The baseline is captured once in start(); every snapshot() compares against it.
    """

    def __init__(self, worker_count: Optional[int] = None):
        self.start_time = time.perf_counter()
        self.initial_memory = psutil.virtual_memory().used
        self.cpu_count = psutil.cpu_count() or os.cpu_count() or 1
        self.worker_count = worker_count or default_worker_count()

    @classmethod
    def start(cls, worker_count: Optional[int] = None) -> "ResourceTracker":
        """worker_count is the size of the pool running this batch, when one is known."""
        return cls(worker_count)

    def elapsed(self) -> float:
        """Seconds since start, from a monotonic clock."""
        return time.perf_counter() - self.start_time

    def elapsed_ms(self) -> str:
        return f"{self.elapsed() * 1000.0:.3f}"

    def snapshot(self) -> ResourceSnapshot:
        memory = psutil.virtual_memory()
        # Other processes may free memory between samples
        memory_used = max(memory.used - self.initial_memory, 0)
        return ResourceSnapshot(
            used_memory=memory.used,
            total_memory=memory.total,
            memory_used=memory_used,
            cpu_count=self.cpu_count,
            worker_count=self.worker_count,
        )

    def log_summary(self, label: str) -> ResourceSnapshot:
        resources = self.snapshot()
        logger.info(f"{label}: {self.elapsed_ms()}ms")
        logger.info(f"Memory used: {resources.memory_used_mb:.2f} MB")
        logger.info(
            f"CPUs available: {resources.cpu_count} (worker threads: {resources.worker_count})"
        )
        return resources


class RequestMonitor:
    """
    Logs process memory for request handlers and finished pipeline runs.
    System-wide figures come from the run's ResourceSnapshot.
    """

    def __init__(self, growth_threshold_mb: float = 50.0, high_memory_mb: float = 1000.0):
        self.process = psutil.Process()
        self.growth_threshold_mb = growth_threshold_mb
        self.high_memory_mb = high_memory_mb

    def process_memory_mb(self) -> float:
        return self.process.memory_info().rss / 1024 / 1024

    def log_run(self, context: str, resources: ResourceSnapshot) -> float:
        """Log process RSS next to the run's system memory growth. Returns the RSS in MB."""
        rss_mb = self.process_memory_mb()
        logger.info(
            f"MONITOR {context}: process={rss_mb:.1f}MB, system growth={resources.memory_used_mb:.2f}MB "
            f"of {resources.total_memory_gb:.2f}GB, workers={resources.worker_count}"
        )
        if rss_mb > self.high_memory_mb:
            logger.warning(f"High memory usage detected: {rss_mb:.1f}MB")
        return rss_mb

    def memory_check(self, func):
        """Decorator reporting how much an async route grew the process and the system."""
        @wraps(func)
        async def wrapper(*args, **kwargs):
            tracker = ResourceTracker.start()
            rss_before = self.process_memory_mb()
            try:
                return await func(*args, **kwargs)
            finally:
                growth = self.process_memory_mb() - rss_before
                if growth > self.growth_threshold_mb:
                    resources = tracker.snapshot()
                    logger.info(
                        f"MEMORY: {func.__name__} grew process by {growth:.1f}MB "
                        f"(system +{resources.memory_used_mb:.2f}MB) in {tracker.elapsed_ms()}ms"
                    )

        return wrapper


monitor = RequestMonitor()
