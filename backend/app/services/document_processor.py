"""
Service for text extraction: format detection, routing, and metadata collection.
"""

import os
import mimetypes
import logging
from pathlib import Path
from typing import Dict, List
import docx
from pypdf import PdfReader
from backend.app.models.document_models import ExtractionResult
from backend.app.services.errors import ExtractionError

logger = logging.getLogger(__name__)

# Extracted text is capped at this many characters
DEFAULT_MAX_LENGTH = 100000

PDF_TYPE = "application/pdf"
DOCX_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TEXT_TYPE = "text/plain"
MARKDOWN_TYPE = "text/markdown"

# File extensions mapping
EXTENSION_MAPPING = {
    ".pdf": PDF_TYPE,
    ".docx": DOCX_TYPE,
    ".txt": TEXT_TYPE,
    ".md": MARKDOWN_TYPE,
}

DOCX_PROPERTIES = (
    "author",
    "title",
    "subject",
    "keywords",
    "category",
    "comments",
    "last_modified_by",
    "created",
    "modified",
)


def detect_file_type(file_path: str) -> str:
    """
    Return the MIME type for a file path based on its extension.
    Falls back to the mimetypes registry for extensions outside EXTENSION_MAPPING.
    """
    file_ext = Path(file_path).suffix.lower()
    if file_ext in EXTENSION_MAPPING:
        return EXTENSION_MAPPING[file_ext]
    guessed, _ = mimetypes.guess_type(file_path)
    return guessed or "application/octet-stream"


class DocumentExtractor:
    """
    DocumentExtractor turns a file path into text plus multi-valued metadata.
    Supports PDF, DOCX, TXT and Markdown. Extend _extract_text to support more types.
    """

    def __init__(self, max_length: int = DEFAULT_MAX_LENGTH):
        self.max_length = max_length

    def extract(self, file_path: str) -> ExtractionResult:
        """
        Extract text and metadata from a file.
        Raises ExtractionError if the file is missing, unsupported, or unreadable.
        """
        if not os.path.isfile(file_path):
            raise ExtractionError(file_path, f"File not found: {file_path}")

        filetype = detect_file_type(file_path)
        metadata: Dict[str, List[str]] = {
            "Content-Type": [filetype],
            "resourceName": [os.path.basename(file_path)],
        }
        try:
            text = self._extract_text(file_path, filetype, metadata)
        except ExtractionError:
            raise
        except Exception as e:
            logger.error(f"Extraction failed for {file_path}: {e}")
            raise ExtractionError(file_path, f"{type(e).__name__}: {e}") from e

        if len(text) > self.max_length:
            logger.warning(
                f"Extracted text from {file_path} truncated from {len(text)} to {self.max_length} characters"
            )
            text = text[: self.max_length]
        return ExtractionResult(text=text, metadata=metadata)

    def _extract_text(
        self, file_path: str, filetype: str, metadata: Dict[str, List[str]]
    ) -> str:
        if filetype == PDF_TYPE:
            return self._extract_pdf(file_path, metadata)
        elif filetype == DOCX_TYPE:
            return self._extract_docx(file_path, metadata)
        elif filetype in (TEXT_TYPE, MARKDOWN_TYPE):
            with open(file_path, "r", encoding="utf-8") as f:
                return f.read()
        else:
            logger.warning(f"Unsupported file type for extraction: {filetype}")
            raise ExtractionError(file_path, f"Unsupported file type: {filetype}")

    def _extract_pdf(self, file_path: str, metadata: Dict[str, List[str]]) -> str:
        """
        Join the text of every page. Annotation text is not included.
        """
        reader = PdfReader(file_path)
        metadata["xmpTPg:NPages"] = [str(len(reader.pages))]
        info = reader.metadata or {}
        for key, value in info.items():
            if value is None:
                continue
            metadata.setdefault(key.lstrip("/").lower(), []).append(str(value))
        return "\n".join([page.extract_text() or "" for page in reader.pages])

    def _extract_docx(self, file_path: str, metadata: Dict[str, List[str]]) -> str:
        doc = docx.Document(file_path)
        props = doc.core_properties
        for name in DOCX_PROPERTIES:
            value = getattr(props, name, None)
            if value:
                metadata[name] = [value.isoformat() if hasattr(value, "isoformat") else str(value)]
        return "\n".join([para.text for para in doc.paragraphs])
