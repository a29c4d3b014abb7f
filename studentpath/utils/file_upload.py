"""
File Upload Utility - validate uploads and extract text from documents.

Supported document formats:
- PDF (.pdf) using PyPDF2
- Word (.docx) using python-docx
- Plain Text (.txt)

Images (avatars, logos) are validated by content type only.
"""

import io
import logging
import zipfile
from typing import Iterable, Optional, Tuple

from docx import Document
from docx.opc.exceptions import PackageNotFoundError
from fastapi import HTTPException, UploadFile
from PyPDF2 import PdfReader
from PyPDF2.errors import PdfReadError

logger = logging.getLogger(__name__)

MB = 1024 * 1024

RESUME_MAX_BYTES = 5 * MB
IMAGE_MAX_BYTES = 2 * MB

RESUME_EXTENSIONS = {".pdf", ".docx"}
PLACEMENT_SHEET_EXTENSIONS = {".xlsx", ".xls", ".csv"}

AVATAR_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"}
LOGO_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/svg+xml", "image/webp"}

# Below this a PDF is almost certainly scanned images
MIN_PDF_TEXT_LENGTH = 20

MIN_USABLE_TEXT_LENGTH = 100
MAX_NON_PRINTABLE_RATIO = 0.3


def get_file_extension(filename: str) -> str:
    """Get lowercase file extension."""
    if '.' not in filename:
        return ''
    return '.' + filename.rsplit('.', 1)[1].lower()


async def read_upload(
    file: Optional[UploadFile],
    max_bytes: int,
    allowed_extensions: Iterable[str] = None,
    allowed_content_types: Iterable[str] = None,
    type_error: str = "Invalid file type",
) -> Tuple[bytes, str]:
    """
    Validate an upload and read it fully.

    Returns:
        Tuple of (content, extension)

    Raises:
        HTTPException 400 on a missing, mistyped or oversized file
    """
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")

    ext = get_file_extension(file.filename)
    if allowed_extensions is not None and ext not in allowed_extensions:
        raise HTTPException(status_code=400, detail=type_error)
    if allowed_content_types is not None and file.content_type not in allowed_content_types:
        raise HTTPException(status_code=400, detail=type_error)

    content = await file.read()

    if len(content) > max_bytes:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Maximum size is {max_bytes // MB}MB"
        )

    return content, ext


# ============================================================
# TEXT EXTRACTION
# ============================================================

def extract_from_pdf(content: bytes) -> str:
    """Extract text from PDF bytes."""
    try:
        reader = PdfReader(io.BytesIO(content))
        text_parts = []
        for page in reader.pages:
            page_text = page.extract_text()
            if page_text:
                text_parts.append(page_text)
    except (PdfReadError, ValueError, KeyError) as e:
        raise ValueError(f"Failed to parse PDF: {e}")

    text = '\n'.join(text_parts).strip()
    if len(text) < MIN_PDF_TEXT_LENGTH:
        raise ValueError("Could not extract sufficient text. The PDF may be image-based or scanned.")
    return text


def extract_from_docx(content: bytes) -> str:
    """Extract text from DOCX bytes (paragraphs, then table rows)."""
    try:
        doc = Document(io.BytesIO(content))
    except (PackageNotFoundError, zipfile.BadZipFile, KeyError) as e:
        raise ValueError(f"Failed to parse DOCX file. The file may be corrupted. ({e})")

    text_parts = []

    for para in doc.paragraphs:
        if para.text.strip():
            text_parts.append(para.text)

    for table in doc.tables:
        for row in table.rows:
            row_text = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if row_text:
                text_parts.append(' | '.join(row_text))

    return '\n'.join(text_parts).strip()


def extract_from_txt(content: bytes) -> str:
    """Extract text from TXT bytes."""
    for encoding in ['utf-8', 'latin-1', 'cp1252']:
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            continue
    raise ValueError("Could not decode text file")


def extract_text(content: bytes, ext: str) -> str:
    """
    Extract text by extension (".pdf", ".docx", ".txt"; a bare "pdf" works too).

    Raises:
        ValueError: unsupported type or unreadable document
    """
    ext = ext if ext.startswith('.') else f".{ext}"
    if ext == '.pdf':
        return extract_from_pdf(content)
    if ext == '.docx':
        return extract_from_docx(content)
    if ext == '.txt':
        return extract_from_txt(content)
    raise ValueError(f"Unsupported file type: {ext}")


def extract_text_or_empty(content: bytes, ext: str) -> str:
    """extract_text, but a failure yields "" so the upload itself still succeeds."""
    try:
        return extract_text(content, ext)
    except ValueError as e:
        logger.warning(f"Text extraction failed: {e}")
        return ""


def is_text_usable(text: Optional[str]) -> bool:
    """
    True when stored text looks like real resume content.
    Rejects short text and text that is mostly binary garbage.
    """
    if not text:
        return False
    stripped = text.strip()
    if len(stripped) < MIN_USABLE_TEXT_LENGTH:
        return False

    non_printable = sum(1 for ch in text if not (' ' <= ch <= '~' or ch in '\n\r\t'))
    return non_printable / len(text) <= MAX_NON_PRINTABLE_RATIO
