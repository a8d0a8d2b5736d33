"""
PDF text extraction for uploaded summonses.

Decodes a base64 PDF and reads its text layer with pypdf. Scanned
(image-only) PDFs have no text layer and are rejected.
"""

import base64
import binascii
import io
import logging

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from errors import invalid_input

logger = logging.getLogger(__name__)


def decode_base64_pdf(pdf_base64: str) -> bytes:
    """
    Decode a base64 PDF, tolerating a data-URL prefix.

    Raises:
        ServiceError: INVALID_INPUT if the payload is not valid base64.
    """
    pure_base64 = pdf_base64.split(",")[-1].strip()
    try:
        return base64.b64decode(pure_base64, validate=True)
    except (binascii.Error, ValueError) as e:
        raise invalid_input("pdfBase64 is not valid base64") from e


def extract_pdf_text(pdf_bytes: bytes) -> str:
    """
    Extract the text of every page, joined with newlines.

    Raises:
        ServiceError: INVALID_INPUT if the PDF is unreadable or has no text.
    """
    try:
        reader = PdfReader(io.BytesIO(pdf_bytes))
        pages = [page.extract_text() or "" for page in reader.pages]
    except PdfReadError as e:
        logger.error(f"Failed to read PDF (invalid or corrupted): {e}")
        raise invalid_input("Failed to read PDF (invalid or corrupted)") from e

    text = "\n".join(pages).strip()
    if not text:
        raise invalid_input(
            "PDF has no text layer; scanned documents are not supported"
        )

    logger.info(f"Extracted {len(text)} characters from {len(pages)} PDF pages")
    return text


def pdf_base64_to_text(pdf_base64: str) -> str:
    return extract_pdf_text(decode_base64_pdf(pdf_base64))
