"""
Application settings loaded from environment variables (and a .env file when present).
"""

import os
from functools import lru_cache
from typing import List, Optional
from dotenv import load_dotenv
from pydantic import BaseModel, Field
from backend.app.models.chunk_models import ChunkingConfig


class Settings(BaseModel):
    chunk_size: int = 1024
    chunk_overlap: int = 128
    upload_dir: str = "./uploads"
    max_file_size: int = 50 * 1024 * 1024  # 50MB
    max_extract_length: int = 100000
    worker_count: Optional[int] = Field(
        None, description="Parallel worker threads; defaults to CPUs - 1"
    )
    allowed_origins: List[str] = Field(default_factory=lambda: ["http://localhost:3000"])
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        env = os.environ
        values = {
            "chunk_size": env.get("CHUNK_SIZE"),
            "chunk_overlap": env.get("CHUNK_OVERLAP"),
            "upload_dir": env.get("UPLOAD_DIR"),
            "max_file_size": env.get("MAX_FILE_SIZE"),
            "max_extract_length": env.get("MAX_EXTRACT_LENGTH"),
            "worker_count": env.get("WORKER_COUNT"),
            "log_level": env.get("LOG_LEVEL"),
        }
        if env.get("ALLOWED_ORIGINS"):
            values["allowed_origins"] = env["ALLOWED_ORIGINS"].split(",")
        return cls(**{k: v for k, v in values.items() if v not in (None, "")})

    @property
    def chunking_config(self) -> ChunkingConfig:
        return ChunkingConfig(chunk_size=self.chunk_size, overlap=self.chunk_overlap)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
