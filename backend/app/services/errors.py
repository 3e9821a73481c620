"""
Error types raised by the document processing pipeline.
"""


class ConfigError(Exception):
    """
    Raised when a chunking configuration cannot produce chunks
    (chunk_size of zero, negative overlap, or overlap >= chunk_size).
    """

    def __init__(self, chunk_size: int, overlap: int, reason: str):
        self.chunk_size = chunk_size
        self.overlap = overlap
        super().__init__(
            f"invalid chunking config (chunk_size={chunk_size}, overlap={overlap}): {reason}"
        )


class ExtractionError(Exception):
    """
    Raised when text cannot be extracted from a document.

    Attributes:
        file_path: Path of the document that failed
    """

    def __init__(self, file_path: str, message: str):
        self.file_path = file_path
        super().__init__(message)


class EmptyBatchError(Exception):
    """Raised when a batch is submitted without any file paths."""

    def __init__(self):
        super().__init__("No file paths provided")
