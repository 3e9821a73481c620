from pydantic import BaseModel, ConfigDict


class ChunkingConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    chunk_size: int = 1024  # characters per chunk
    overlap: int = 128  # characters shared by adjacent chunks

    @property
    def stride(self) -> int:
        return self.chunk_size - self.overlap
