"""
File-to-text extraction for knowledge uploads.

PDFs are read page by page with pypdf and joined with page markers; every
other type is decoded as UTF-8. Failures return None so a batch upload can
skip the file and carry on.
"""

import io
import logging
from typing import Optional

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"


def extract_pdf_text(data: bytes) -> str:
    from pypdf import PdfReader

    reader = PdfReader(io.BytesIO(data))
    text = ""
    for number, page in enumerate(reader.pages, start=1):
        page_text = page.extract_text() or ""
        text += f"--- Page {number} ---\n{page_text}\n\n"
    return text


def extract_text(name: str, data: bytes, mime_type: str) -> Optional[str]:
    """
    Extract plain text from an uploaded file.

    Args:
        name: File name (used to detect PDFs without a MIME type)
        data: Raw file bytes
        mime_type: MIME type reported by the upload

    Returns:
        Extracted text, or None if extraction failed
    """
    is_pdf = mime_type == PDF_MIME_TYPE or name.lower().endswith(".pdf")

    if is_pdf:
        try:
            return extract_pdf_text(data)
        except Exception as e:
            logger.warning(f"PDF extraction failed for {name}: {e}")
            return None

    try:
        return data.decode("utf-8", errors="replace")
    except Exception as e:
        logger.warning(f"Text decoding failed for {name}: {e}")
        return None
