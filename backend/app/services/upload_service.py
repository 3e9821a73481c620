"""
Service for upload handling: filename sanitization, size validation, and storage.
"""

import os
import shutil
import uuid
import logging
from pathlib import Path
from typing import List, NamedTuple, Tuple
import aiofiles
from fastapi import HTTPException, UploadFile

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 50 * 1024 * 1024  # 50MB

DANGEROUS_CHARS = ["/", "\\", ":", "*", "?", '"', "<", ">", "|"]


class StoredUpload(NamedTuple):
    file_name: str
    file_path: str
    size: int


def sanitize_filename(filename: str) -> str:
    """
    Sanitize filename to prevent path traversal and other security issues.
    """
    # Keep only the final component, accepting either separator
    sanitized = filename.replace("\\", "/").rsplit("/", 1)[-1] or filename
    for char in DANGEROUS_CHARS:
        sanitized = sanitized.replace(char, "_")
    if len(sanitized) > 255:
        name, ext = os.path.splitext(sanitized)
        sanitized = name[: 255 - len(ext)] + ext
    return sanitized


class UploadService:
    def __init__(self, upload_dir: str = "./uploads", max_file_size: int = MAX_FILE_SIZE):
        self.upload_dir = Path(upload_dir)
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        self.max_file_size = max_file_size

    async def _read_uploads(self, files: List[UploadFile]) -> List[Tuple[str, bytes]]:
        """
        Read and validate every named part. Nothing is written until all parts pass.
        """
        accepted = []
        for file in files:
            if not file.filename:
                continue
            file_name = sanitize_filename(file.filename)
            if not file_name:
                continue

            content = await file.read()
            if len(content) > self.max_file_size:
                raise HTTPException(
                    status_code=413,
                    detail=f"File too large. Maximum size is {self.max_file_size // (1024 * 1024)}MB",
                )
            accepted.append((file_name, content))

        if not accepted:
            raise HTTPException(status_code=400, detail="No file provided")
        return accepted

    async def save_uploads(self, files: List[UploadFile]) -> List[StoredUpload]:
        """
        Save every named upload into a fresh directory for this request.
        Each file gets its own numbered subdirectory so equal names never collide
        and the stored basename stays the display name.
        Parts without a filename are skipped.
        """
        accepted = await self._read_uploads(files)
        request_dir = self.upload_dir / str(uuid.uuid4())
        stored = []
        try:
            for index, (file_name, content) in enumerate(accepted):
                file_dir = request_dir / str(index)
                file_dir.mkdir(parents=True, exist_ok=True)
                file_path = file_dir / file_name
                async with aiofiles.open(file_path, "wb") as f:
                    await f.write(content)
                logger.info(f"Uploaded file: {file_name} ({len(content)} bytes)")
                stored.append(StoredUpload(file_name, str(file_path), len(content)))
        except OSError as e:
            logger.error(f"Error writing uploads to {request_dir}: {e}")
            self.discard(request_dir)
            raise HTTPException(status_code=500, detail="Failed to save file")
        return stored

    def discard(self, request_dir: Path) -> None:
        """Remove a request directory and everything saved in it."""
        shutil.rmtree(request_dir, ignore_errors=True)
