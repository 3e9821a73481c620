import pytest
from tests.fakes import FakeExtractor


@pytest.fixture
def sample_texts():
    return {
        "/data/first.txt": "The quick brown fox jumps over the lazy dog. " * 5,
        "/data/second.pdf": "Lorem ipsum dolor sit amet, consectetur adipiscing elit. " * 3,
        "/data/third.docx": "abcdefghij",
    }


@pytest.fixture
def fake_extractor(sample_texts):
    return FakeExtractor(sample_texts)
