import string
import pytest
from pydantic import ValidationError
from backend.app.models.chunk_models import ChunkingConfig
from backend.app.services.chunking_service import ChunkingService, chunk_text
from backend.app.services.errors import ConfigError

SAMPLE_TEXTS = [
    "a",
    "abcdefghij",
    string.ascii_letters * 7,
    "Section 1: Introduction. This is the first paragraph.\n\nSection 2: Methods.",
    "naïve café ünïcödé " * 11,
]

CONFIGS = [(1, 0), (4, 2), (5, 0), (7, 3), (64, 63), (1024, 128)]


def reassemble(chunks, overlap):
    if not chunks:
        return ""
    return chunks[0] + "".join(chunk[overlap:] for chunk in chunks[1:])


def test_exact_windowing_and_tail():
    assert chunk_text("abcdefghij", 4, 2) == ["abcd", "cdef", "efgh", "ghij", "ij"]


def test_empty_text_yields_no_chunks():
    assert chunk_text("", 1024, 128) == []


def test_text_shorter_than_chunk_size():
    assert chunk_text("short", 1024, 128) == ["short"]


def test_zero_overlap_partitions_text():
    assert chunk_text("abcdefg", 3, 0) == ["abc", "def", "g"]


@pytest.mark.parametrize("chunk_size,overlap", [(0, 0), (100, 100), (10, 11), (10, -1)])
def test_invalid_config_raises(chunk_size, overlap):
    with pytest.raises(ConfigError) as exc_info:
        chunk_text("some text", chunk_size, overlap)
    assert exc_info.value.chunk_size == chunk_size
    assert exc_info.value.overlap == overlap


def test_invalid_config_raises_even_for_empty_text():
    with pytest.raises(ConfigError):
        chunk_text("", 0, 0)


@pytest.mark.parametrize("text", SAMPLE_TEXTS)
@pytest.mark.parametrize("chunk_size,overlap", CONFIGS)
def test_chunks_reassemble_to_source(text, chunk_size, overlap):
    chunks = chunk_text(text, chunk_size, overlap)
    assert reassemble(chunks, overlap) == text


@pytest.mark.parametrize("chunk_size,overlap", CONFIGS)
def test_each_chunk_starts_one_stride_after_previous(chunk_size, overlap):
    text = string.ascii_letters * 20
    stride = chunk_size - overlap
    chunks = chunk_text(text, chunk_size, overlap)
    for i, chunk in enumerate(chunks):
        assert chunk == text[i * stride : i * stride + chunk_size]
    for previous, current in zip(chunks, chunks[1:]):
        if len(current) == chunk_size:
            assert previous[stride:] == current[:overlap]


def test_only_the_last_chunk_may_be_short():
    chunks = chunk_text("x" * 1000, 96, 16)
    assert all(len(c) == 96 for c in chunks[:-1])
    assert 0 < len(chunks[-1]) <= 96


def test_chunking_is_deterministic():
    text = string.printable * 13
    assert chunk_text(text, 50, 10) == chunk_text(text, 50, 10)


def test_service_uses_config():
    service = ChunkingService(ChunkingConfig(chunk_size=4, overlap=2))
    assert service.stride == 2
    assert service.chunk("abcdefghij") == ["abcd", "cdef", "efgh", "ghij", "ij"]


def test_service_default_config():
    service = ChunkingService()
    assert service.config.chunk_size == 1024
    assert service.config.overlap == 128
    assert service.stride == 896


def test_service_with_invalid_config_raises_on_chunk():
    service = ChunkingService(ChunkingConfig(chunk_size=100, overlap=100))
    with pytest.raises(ConfigError):
        service.chunk("text")


def test_config_is_immutable():
    config = ChunkingConfig(chunk_size=512, overlap=64)
    with pytest.raises(ValidationError):
        config.chunk_size = 10
