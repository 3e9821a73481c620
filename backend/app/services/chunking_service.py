"""
Service for splitting extracted text into overlapping fixed-size chunks.
"""

from typing import List, Optional
from backend.app.models.chunk_models import ChunkingConfig
from backend.app.services.errors import ConfigError


def chunk_text(text: str, chunk_size: int, overlap: int) -> List[str]:
    """
    Split text with a sliding window of chunk_size characters advancing by
    chunk_size - overlap. The last window is truncated at the end of the text.
    Empty text yields no chunks.
    """
    if chunk_size <= 0:
        raise ConfigError(chunk_size, overlap, "chunk_size must be positive")
    if overlap < 0:
        raise ConfigError(chunk_size, overlap, "overlap must not be negative")
    if overlap >= chunk_size:
        raise ConfigError(chunk_size, overlap, "overlap must be smaller than chunk_size")

    stride = chunk_size - overlap
    chunks = []
    cursor = 0
    while cursor < len(text):
        chunks.append(text[cursor : cursor + chunk_size])
        cursor += stride
    return chunks


class ChunkingService:
    """
    ChunkingService applies a fixed ChunkingConfig to document text.
    - Stateless apart from the immutable config, so one instance can be shared across threads
    """

    def __init__(self, config: Optional[ChunkingConfig] = None):
        self.config = config or ChunkingConfig()

    @property
    def stride(self) -> int:
        return self.config.stride

    def chunk(self, text: str) -> List[str]:
        """
        Chunk text using the configured chunk_size and overlap.
        Raises ConfigError if the config cannot make progress.
        """
        return chunk_text(text, self.config.chunk_size, self.config.overlap)
