# =============================================================================
# tests/test_file_upload.py - Upload validation and text extraction
# =============================================================================

import pytest

from studentpath.utils.file_upload import (
    extract_text, extract_text_or_empty, get_file_extension, is_text_usable,
)


class TestExtension:

    @pytest.mark.parametrize("name, expected", [
        ("Resume.PDF", ".pdf"),
        ("cv.final.docx", ".docx"),
        ("noext", ""),
    ])
    def test_lowercase_extension(self, name, expected):
        assert get_file_extension(name) == expected


class TestExtractText:

    def test_plain_text(self):
        assert extract_text(b"Python developer", ".txt") == "Python developer"

    def test_extension_without_dot(self):
        assert extract_text(b"hello", "txt") == "hello"

    def test_latin1_fallback(self):
        assert extract_text("café".encode("latin-1"), ".txt") == "café"

    def test_unsupported_type(self):
        with pytest.raises(ValueError):
            extract_text(b"x", ".rtf")

    def test_corrupt_docx(self):
        with pytest.raises(ValueError):
            extract_text(b"definitely not a zip", ".docx")

    def test_or_empty_swallows_failure(self):
        assert extract_text_or_empty(b"not a pdf", ".pdf") == ""


class TestUsableText:

    def test_short_text_rejected(self):
        assert is_text_usable("too short") is False
        assert is_text_usable(None) is False

    def test_normal_resume_text(self):
        assert is_text_usable("Experienced Python developer. " * 10) is True

    def test_binary_garbage_rejected(self):
        assert is_text_usable("\x00\x01\x02\x03" * 50) is False
