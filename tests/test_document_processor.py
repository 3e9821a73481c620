from unittest.mock import MagicMock, patch
import docx
import pytest
from backend.app.services.document_processor import (
    DOCX_TYPE,
    PDF_TYPE,
    TEXT_TYPE,
    DocumentExtractor,
    detect_file_type,
)
from backend.app.services.errors import ExtractionError


@pytest.fixture
def extractor():
    return DocumentExtractor()


def test_detect_file_type():
    assert detect_file_type("report.PDF") == PDF_TYPE
    assert detect_file_type("notes.docx") == DOCX_TYPE
    assert detect_file_type("/tmp/a/readme.txt") == TEXT_TYPE
    assert detect_file_type("archive.unknownext") == "application/octet-stream"


def test_extract_txt(tmp_path, extractor):
    txt_file = tmp_path / "test.txt"
    txt_file.write_text("Hello world!\nThis is a test.\nAnother line.", encoding="utf-8")
    result = extractor.extract(str(txt_file))
    assert result.text == "Hello world!\nThis is a test.\nAnother line."
    assert result.metadata["Content-Type"] == [TEXT_TYPE]
    assert result.metadata["resourceName"] == ["test.txt"]


def test_extract_markdown(tmp_path, extractor):
    md_file = tmp_path / "README.md"
    md_file.write_text("# Title\n\nBody", encoding="utf-8")
    assert extractor.extract(str(md_file)).text == "# Title\n\nBody"


def test_extract_docx(tmp_path, extractor):
    doc = docx.Document()
    doc.add_paragraph("Paragraph 1")
    doc.add_paragraph("Paragraph 2")
    doc.core_properties.author = "Jane Doe"
    doc.core_properties.title = "Quarterly Report"
    path = tmp_path / "report.docx"
    doc.save(str(path))

    result = extractor.extract(str(path))
    assert "Paragraph 1\nParagraph 2" in result.text
    assert result.metadata["author"] == ["Jane Doe"]
    assert result.metadata["title"] == ["Quarterly Report"]
    assert result.metadata["Content-Type"] == [DOCX_TYPE]


@patch("backend.app.services.document_processor.PdfReader")
def test_extract_pdf(mock_pdfreader, tmp_path, extractor):
    pdf_file = tmp_path / "paper.pdf"
    pdf_file.write_bytes(b"%PDF-1.4 placeholder")
    mock_page = MagicMock()
    mock_page.extract_text.side_effect = ["PDF page one", None]
    mock_pdfreader.return_value.pages = [mock_page, mock_page]
    mock_pdfreader.return_value.metadata = {"/Author": "A. Writer", "/Title": None}

    result = extractor.extract(str(pdf_file))
    assert result.text == "PDF page one\n"
    assert result.metadata["xmpTPg:NPages"] == ["2"]
    assert result.metadata["author"] == ["A. Writer"]
    assert "title" not in result.metadata
    mock_pdfreader.assert_called_once_with(str(pdf_file))


def test_corrupt_pdf_raises_extraction_error(tmp_path, extractor):
    pdf_file = tmp_path / "broken.pdf"
    pdf_file.write_bytes(b"this is not a pdf")
    with pytest.raises(ExtractionError) as exc_info:
        extractor.extract(str(pdf_file))
    assert exc_info.value.file_path == str(pdf_file)


def test_missing_file_raises_extraction_error(tmp_path, extractor):
    with pytest.raises(ExtractionError, match="File not found"):
        extractor.extract(str(tmp_path / "nope.txt"))


def test_unsupported_type_raises_extraction_error(tmp_path, extractor):
    path = tmp_path / "image.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\n")
    with pytest.raises(ExtractionError, match="Unsupported file type: image/png"):
        extractor.extract(str(path))


def test_invalid_utf8_text_raises_extraction_error(tmp_path, extractor):
    path = tmp_path / "latin1.txt"
    path.write_bytes(b"caf\xe9")
    with pytest.raises(ExtractionError, match="UnicodeDecodeError"):
        extractor.extract(str(path))


def test_text_is_truncated_to_max_length(tmp_path):
    path = tmp_path / "long.txt"
    path.write_text("x" * 50, encoding="utf-8")
    result = DocumentExtractor(max_length=20).extract(str(path))
    assert result.text == "x" * 20


@pytest.mark.parametrize("name", ["notes.txt", "README.md", "report.docx"])
def test_metadata_always_names_type_and_resource(tmp_path, extractor, name):
    path = tmp_path / name
    if name.endswith(".docx"):
        doc = docx.Document()
        doc.add_paragraph("body")
        doc.save(str(path))
    else:
        path.write_text("body", encoding="utf-8")

    metadata = extractor.extract(str(path)).metadata
    assert metadata["Content-Type"] == [detect_file_type(name)]
    assert metadata["resourceName"] == [name]
    assert "content_type" not in metadata
    assert "filename" not in metadata
