"""
Document Upload Utility - extract text from a raw request body.

The resume endpoint receives the document itself as the request body and
is gated on Content-Type:
- application/pdf  (PyPDF2)
- application/vnd.openxmlformats-officedocument.wordprocessingml.document  (python-docx)
- text/plain
"""

import io
from typing import Optional

from docx import Document
from PyPDF2 import PdfReader
from PyPDF2.errors import PdfReadError

from careerflow.core.exceptions import PayloadTooLarge, ValidationFailed
from careerflow.core.logging_config import get_logger

logger = get_logger(__name__)

PDF_TYPE = "application/pdf"
DOCX_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TEXT_TYPE = "text/plain"

ALLOWED_CONTENT_TYPES = {PDF_TYPE, DOCX_TYPE, TEXT_TYPE}


def base_content_type(header: str) -> str:
    """'application/pdf; charset=binary' -> 'application/pdf'"""
    return (header or "").split(";")[0].strip().lower()


def max_upload_bytes(max_size_mb: int) -> int:
    return max_size_mb * 1024 * 1024


def check_declared_size(content_length: Optional[str], max_size_mb: int) -> None:
    """Reject on the Content-Length header before any of the body is read."""
    if not content_length:
        return
    try:
        declared = int(content_length)
    except ValueError:
        raise ValidationFailed("Invalid Content-Length header")
    if declared > max_upload_bytes(max_size_mb):
        raise PayloadTooLarge(f"File too large. Maximum size: {max_size_mb}MB")


def extract_text_from_body(content: bytes, content_type: str, max_size_mb: int) -> str:
    """
    Extract text from an uploaded document body.

    Raises:
        ValidationFailed on wrong type, empty body or unreadable document
        PayloadTooLarge when the body exceeds max_size_mb
    """
    ctype = base_content_type(content_type)
    if ctype not in ALLOWED_CONTENT_TYPES:
        raise ValidationFailed("Please upload a PDF file.")

    if not content:
        raise ValidationFailed("Please upload a PDF file.")

    if len(content) > max_upload_bytes(max_size_mb):
        raise PayloadTooLarge(f"File too large. Maximum size: {max_size_mb}MB")

    if ctype == PDF_TYPE:
        text = extract_from_pdf(content)
    elif ctype == DOCX_TYPE:
        text = extract_from_docx(content)
    else:
        text = extract_from_txt(content)

    if not text.strip():
        raise ValidationFailed("Could not extract text from file. File may be empty or corrupted.")

    return text


def extract_from_pdf(content: bytes) -> str:
    """Extract text from PDF bytes."""
    try:
        reader = PdfReader(io.BytesIO(content))
        text_parts = []
        for page in reader.pages:
            page_text = page.extract_text()
            if page_text:
                text_parts.append(page_text)
        return '\n'.join(text_parts)
    except (PdfReadError, ValueError, KeyError) as e:
        logger.info("Unreadable PDF upload: %s", e)
        raise ValidationFailed("Error reading PDF. The file may be corrupted.")


def extract_from_docx(content: bytes) -> str:
    """Extract text from DOCX bytes."""
    try:
        doc = Document(io.BytesIO(content))
    except Exception as e:
        # python-docx surfaces zip/xml errors of several types
        logger.info("Unreadable DOCX upload: %s", e)
        raise ValidationFailed("Error reading DOCX. The file may be corrupted.")

    text_parts = [para.text for para in doc.paragraphs if para.text.strip()]

    # Extract tables
    for table in doc.tables:
        for row in table.rows:
            row_text = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if row_text:
                text_parts.append(' | '.join(row_text))

    return '\n'.join(text_parts)


def extract_from_txt(content: bytes) -> str:
    """Extract text from TXT bytes."""
    for encoding in ['utf-8', 'cp1252']:
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            continue
    # latin-1 maps every byte
    return content.decode('latin-1')
