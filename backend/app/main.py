"""
Main FastAPI application entry point.
Includes API routers, CORS, and the shared worker pool for parallel batches.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from backend.app.api import documents
from backend.app.config import get_settings
from backend.app.services.pipeline import WorkerPool

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
    app.state.worker_pool = WorkerPool(settings.worker_count)
    yield
    app.state.worker_pool.shutdown()


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(title="Document Processing API", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(documents.router)

    @app.get("/health")
    def health_check():
        return {"status": "healthy", "message": "API is running"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logger.info("Server running on http://0.0.0.0:3001")
    uvicorn.run(app, host="0.0.0.0", port=3001)
